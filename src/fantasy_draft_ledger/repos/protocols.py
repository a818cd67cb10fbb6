from typing import Protocol, runtime_checkable

from fantasy_draft_ledger.domain.draft_state import DraftBoardEntry, DraftState
from fantasy_draft_ledger.domain.league import League, Membership
from fantasy_draft_ledger.domain.player import CatalogPlayer


@runtime_checkable
class LeagueRepo(Protocol):
    def insert(self, league: League) -> int: ...

    def update_settings(self, league: League) -> None: ...

    def get_by_id(self, league_id: int) -> League | None: ...

    def get_by_code(self, code: str) -> League | None: ...

    def code_exists(self, code: str) -> bool: ...

    def list_for_user(self, user_id: int) -> list[League]: ...

    def delete(self, league_id: int) -> None: ...


@runtime_checkable
class MembershipRepo(Protocol):
    def insert(self, membership: Membership) -> int: ...

    def get(self, league_id: int, user_id: int) -> Membership | None: ...

    def list_by_league(self, league_id: int) -> list[Membership]: ...

    def count(self, league_id: int) -> int: ...

    def delete(self, league_id: int, user_id: int) -> None: ...


@runtime_checkable
class CatalogRepo(Protocol):
    def upsert(self, player: CatalogPlayer) -> tuple[int, bool]: ...

    def get_by_id(self, player_id: int) -> CatalogPlayer | None: ...

    def get_by_ids(self, player_ids: list[int]) -> list[CatalogPlayer]: ...

    def link_to_league(self, league_id: int, player_id: int) -> None: ...

    def in_league(self, league_id: int, player_id: int) -> bool: ...


@runtime_checkable
class DraftStateRepo(Protocol):
    def get(self, member_id: int, league_id: int, player_id: int) -> DraftState | None: ...

    def get_or_default(self, member_id: int, league_id: int, player_id: int) -> DraftState: ...

    def save(self, state: DraftState, *, expected_version: int | None = None) -> DraftState: ...

    def list_owned(self, member_id: int, league_id: int) -> list[tuple[DraftState, CatalogPlayer]]: ...

    def spent(self, member_id: int, league_id: int) -> float: ...

    def board(self, member_id: int, league_id: int, search_text: str | None = None) -> list[DraftBoardEntry]: ...
