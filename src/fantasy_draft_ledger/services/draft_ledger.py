import logging
import sqlite3
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import UTC, datetime

from fantasy_draft_ledger.db.transaction import atomic
from fantasy_draft_ledger.domain.budget import BudgetSummary
from fantasy_draft_ledger.domain.draft_state import (
    DraftBoardEntry,
    DraftState,
    DraftStatus,
    TransitionRequest,
    apply_transition,
    reset_state,
)
from fantasy_draft_ledger.domain.league import League
from fantasy_draft_ledger.domain.player import CatalogPlayer
from fantasy_draft_ledger.domain.roles import known_roles, parse_roles, role_order, vocabulary
from fantasy_draft_ledger.domain.tier import Tier
from fantasy_draft_ledger.exceptions import NotFoundError, ValidationError
from fantasy_draft_ledger.repos.protocols import CatalogRepo, DraftStateRepo
from fantasy_draft_ledger.services.budget_ledger import BudgetLedger
from fantasy_draft_ledger.services.league_guard import LeagueGuard

logger = logging.getLogger(__name__)

type Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class DraftFilters:
    status: DraftStatus | None = None
    role: str | None = None
    search_text: str | None = None
    include_removed: bool = False


class DraftLedger:
    """Member-initiated transitions of draft state rows.

    Every mutation runs inside one ``atomic`` block: the membership check,
    the read of the current row, the budget/roster validation and the write
    all see the same snapshot, and the row is written whole.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        guard: LeagueGuard,
        catalog_repo: CatalogRepo,
        draft_repo: DraftStateRepo,
        budget: BudgetLedger,
        clock: Clock = utc_now,
    ) -> None:
        self._conn = conn
        self._guard = guard
        self._catalog_repo = catalog_repo
        self._draft_repo = draft_repo
        self._budget = budget
        self._clock = clock

    def list_draft_states(
        self, user_id: int, league_id: int, filters: DraftFilters | None = None
    ) -> list[DraftBoardEntry]:
        filters = filters or DraftFilters()
        league, _ = self._guard.require_member(user_id, league_id)
        role_filter = None
        if filters.role:
            try:
                role_filter = parse_roles(filters.role, league.game_mode)[0]
            except ValueError as e:
                raise ValidationError(str(e)) from e

        show_removed = filters.include_removed or filters.status is DraftStatus.REMOVED
        entries: list[DraftBoardEntry] = []
        for entry in self._draft_repo.board(user_id, league_id, filters.search_text):
            status = entry.state.status
            if filters.status is not None and status is not filters.status:
                continue
            if status is DraftStatus.REMOVED and not show_removed:
                continue
            roles = known_roles(entry.player.roles, league.game_mode)
            if role_filter is not None and role_filter not in roles:
                continue
            entries.append(replace(entry, roles=roles))

        no_role = len(vocabulary(league.game_mode))
        entries.sort(
            key=lambda e: (
                role_order(e.roles[0]) if e.roles else no_role,
                e.player.name.lower(),
                e.player.team.lower(),
            )
        )
        return entries

    def get_draft_state(self, user_id: int, league_id: int, player_id: int) -> DraftState:
        league, _ = self._guard.require_member(user_id, league_id)
        self._league_player(league, player_id)
        return self._draft_repo.get_or_default(user_id, league_id, player_id)

    def transition_status(
        self,
        user_id: int,
        league_id: int,
        player_id: int,
        new_status: DraftStatus,
        *,
        cost: float | None = None,
        buyer: str | None = None,
        buyer_cost: float | None = None,
        expected_price: float | None = None,
        note: str | None = None,
        expected_version: int | None = None,
    ) -> DraftState:
        request = TransitionRequest(
            status=new_status,
            cost=cost,
            buyer=buyer,
            buyer_cost=buyer_cost,
            expected_price=expected_price,
            note=note,
        )
        with atomic(self._conn):
            league, _ = self._guard.require_member(user_id, league_id)
            player = self._league_player(league, player_id)
            current = self._draft_repo.get_or_default(user_id, league_id, player_id)
            updated = apply_transition(current, request, self._now())
            if updated.is_owned and updated.cost is not None:
                self._budget.check_purchase(league, user_id, player, updated.cost)
            saved = self._draft_repo.save(updated, expected_version=expected_version)
        logger.debug(
            "User %d league %d player %d: %s -> %s", user_id, league_id, player_id, current.status, saved.status
        )
        return saved

    def set_tier(self, user_id: int, league_id: int, player_id: int, tier: Tier | None) -> DraftState:
        with atomic(self._conn):
            league, _ = self._guard.require_member(user_id, league_id)
            self._league_player(league, player_id)
            current = self._draft_repo.get_or_default(user_id, league_id, player_id)
            saved = self._draft_repo.save(replace(current, tier=tier, customized=True))
        return saved

    def reset_to_default(self, user_id: int, league_id: int, player_id: int) -> DraftState:
        with atomic(self._conn):
            league, _ = self._guard.require_member(user_id, league_id)
            self._league_player(league, player_id)
            current = self._draft_repo.get_or_default(user_id, league_id, player_id)
            saved = self._draft_repo.save(reset_state(current))
        return saved

    def get_budget_summary(self, user_id: int, league_id: int) -> BudgetSummary:
        league, _ = self._guard.require_member(user_id, league_id)
        return self._budget.summary(league, user_id)

    def _league_player(self, league: League, player_id: int) -> CatalogPlayer:
        assert league.id is not None
        player = self._catalog_repo.get_by_id(player_id)
        if player is None or not self._catalog_repo.in_league(league.id, player_id):
            raise NotFoundError("player", player_id)
        return player

    def _now(self) -> str:
        return self._clock().isoformat()
