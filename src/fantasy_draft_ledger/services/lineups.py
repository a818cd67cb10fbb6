"""Formation assignment: placing owned players on a schema's positions and bench.

The module-level functions are pure and operate on ``Lineup`` values;
``LineupService`` loads the member's owned players and stored lineups, applies
them and persists the result.
"""

import logging
import sqlite3
from collections.abc import Mapping, Sequence
from dataclasses import replace

from fantasy_draft_ledger.db.transaction import atomic
from fantasy_draft_ledger.domain.formation import FORMATIONS, STARTER_COUNT, FormationSchema, Lineup
from fantasy_draft_ledger.domain.league import GameMode, League
from fantasy_draft_ledger.domain.roles import Role, known_roles, roles_compatible
from fantasy_draft_ledger.exceptions import AssignmentError, NotFoundError, RosterLimitExceededError, ValidationError
from fantasy_draft_ledger.repos.lineup_repo import SqliteLineupRepo
from fantasy_draft_ledger.repos.protocols import DraftStateRepo
from fantasy_draft_ledger.services.league_guard import LeagueGuard

logger = logging.getLogger(__name__)


def get_schema(schema_id: str) -> FormationSchema:
    schema = FORMATIONS.get(schema_id)
    if schema is None:
        raise NotFoundError("formation", schema_id)
    return schema


def bench_limit(max_players_per_team: int) -> int:
    return max(max_players_per_team - STARTER_COUNT, 0)


def _without(lineup: Lineup, player_id: int) -> Lineup:
    return replace(
        lineup,
        starters={pos: pid for pos, pid in lineup.starters.items() if pid != player_id},
        bench=tuple(pid for pid in lineup.bench if pid != player_id),
    )


def assign_starter(
    lineup: Lineup,
    schema: FormationSchema,
    position_id: str,
    player_id: int,
    player_roles: tuple[Role, ...],
    game_mode: GameMode,
) -> Lineup:
    """Place a player on a position.

    The player leaves any slot or bench spot they held. A previous occupant of
    the position becomes unassigned, not benched.
    """
    position = schema.position(position_id)
    if position is None:
        raise NotFoundError("position", f"{schema.id}/{position_id}")
    if not roles_compatible(player_roles, position.allowed_roles, game_mode):
        allowed = "/".join(sorted(position.allowed_roles))
        raise AssignmentError(f"player {player_id} cannot play {position.name} (allowed roles: {allowed})")
    updated = _without(lineup, player_id)
    return replace(updated, starters={**updated.starters, position_id: player_id})


def move_to_bench(lineup: Lineup, player_id: int, limit: int) -> Lineup:
    if player_id in lineup.bench:
        return lineup
    updated = _without(lineup, player_id)
    if len(updated.bench) + 1 > limit:
        raise RosterLimitExceededError(limit, "bench")
    return replace(updated, bench=(*updated.bench, player_id))


def unassign(lineup: Lineup, player_id: int) -> Lineup:
    return _without(lineup, player_id)


def _owned_only(lineup: Lineup, owned: Mapping[int, tuple[Role, ...]]) -> Lineup:
    # Players sold or released since the lineup was saved drop out of it.
    for player_id in lineup.player_ids - set(owned):
        lineup = unassign(lineup, player_id)
    return lineup


def build_lineup(
    lineup: Lineup,
    schema: FormationSchema,
    starters: Mapping[str, int],
    bench: Sequence[int],
    owned_roles: Mapping[int, tuple[Role, ...]],
    game_mode: GameMode,
    limit: int,
) -> Lineup:
    """Replace the contents of ``lineup`` with a complete starters/bench layout."""
    placed = [*starters.values(), *bench]
    if len(placed) != len(set(placed)):
        raise ValidationError("a player can hold only one spot in a lineup")
    for player_id in placed:
        if player_id not in owned_roles:
            raise AssignmentError(f"player {player_id} is not owned")

    result = replace(lineup, schema=schema.id, starters={}, bench=())
    for position_id, player_id in starters.items():
        result = assign_starter(result, schema, position_id, player_id, owned_roles[player_id], game_mode)
    for player_id in bench:
        result = move_to_bench(result, player_id, limit)
    return result


class LineupService:
    def __init__(
        self,
        conn: sqlite3.Connection,
        guard: LeagueGuard,
        draft_repo: DraftStateRepo,
        lineup_repo: SqliteLineupRepo,
    ) -> None:
        self._conn = conn
        self._guard = guard
        self._draft_repo = draft_repo
        self._lineup_repo = lineup_repo

    def list_formations(self) -> list[FormationSchema]:
        return list(FORMATIONS.values())

    def get_lineup(self, user_id: int, league_id: int, schema_id: str) -> Lineup:
        league, _ = self._guard.require_member(user_id, league_id)
        get_schema(schema_id)
        lineup = self._lineup_repo.get(user_id, league_id, schema_id)
        if lineup is None:
            raise NotFoundError("lineup", schema_id)
        return _owned_only(lineup, self._owned_roles(league, user_id))

    def list_lineups(self, user_id: int, league_id: int) -> list[Lineup]:
        league, _ = self._guard.require_member(user_id, league_id)
        owned = self._owned_roles(league, user_id)
        return [_owned_only(lineup, owned) for lineup in self._lineup_repo.list_for_member(user_id, league_id)]

    def assign_starter(self, user_id: int, league_id: int, schema_id: str, position_id: str, player_id: int) -> Lineup:
        schema = get_schema(schema_id)
        with atomic(self._conn):
            league, _ = self._guard.require_member(user_id, league_id)
            owned = self._owned_roles(league, user_id)
            if player_id not in owned:
                raise AssignmentError(f"player {player_id} is not owned")
            lineup = self._load(league, user_id, schema_id, owned)
            updated = assign_starter(lineup, schema, position_id, player_id, owned[player_id], league.game_mode)
            return self._store(updated)

    def move_to_bench(self, user_id: int, league_id: int, schema_id: str, player_id: int) -> Lineup:
        get_schema(schema_id)
        with atomic(self._conn):
            league, _ = self._guard.require_member(user_id, league_id)
            owned = self._owned_roles(league, user_id)
            if player_id not in owned:
                raise AssignmentError(f"player {player_id} is not owned")
            lineup = self._load(league, user_id, schema_id, owned)
            updated = move_to_bench(lineup, player_id, bench_limit(league.max_players_per_team))
            return self._store(updated)

    def unassign_from_lineup(self, user_id: int, league_id: int, schema_id: str, player_id: int) -> Lineup:
        get_schema(schema_id)
        with atomic(self._conn):
            league, _ = self._guard.require_member(user_id, league_id)
            owned = self._owned_roles(league, user_id)
            lineup = self._load(league, user_id, schema_id, owned)
            return self._store(unassign(lineup, player_id))

    def save_lineup(
        self,
        user_id: int,
        league_id: int,
        schema_id: str,
        starters: Mapping[str, int],
        bench: Sequence[int],
        activate: bool = False,
    ) -> Lineup:
        schema = get_schema(schema_id)
        with atomic(self._conn):
            league, _ = self._guard.require_member(user_id, league_id)
            assert league.id is not None
            owned = self._owned_roles(league, user_id)
            existing = self._lineup_repo.get(user_id, league.id, schema_id)
            base = existing or Lineup(member_id=user_id, league_id=league.id, schema=schema_id)
            updated = build_lineup(
                base,
                schema,
                starters,
                bench,
                owned,
                league.game_mode,
                bench_limit(league.max_players_per_team),
            )
            if activate:
                updated = replace(updated, is_active=True)
            if existing is not None and self._same_layout(existing, updated):
                return existing
            if activate:
                self._lineup_repo.deactivate_all(user_id, league.id)
            saved = self._store(updated)
        logger.debug("User %d saved lineup %s in league %d", user_id, schema_id, league_id)
        return saved

    def activate_lineup(self, user_id: int, league_id: int, schema_id: str) -> Lineup:
        with atomic(self._conn):
            lineup = self.get_lineup(user_id, league_id, schema_id)
            if lineup.is_active:
                return lineup
            self._lineup_repo.deactivate_all(user_id, league_id)
            return self._store(replace(lineup, is_active=True))

    def delete_lineup(self, user_id: int, league_id: int, schema_id: str) -> None:
        with atomic(self._conn):
            self._guard.require_member(user_id, league_id)
            if not self._lineup_repo.delete(user_id, league_id, schema_id):
                raise NotFoundError("lineup", schema_id)

    def _owned_roles(self, league: League, member_id: int) -> dict[int, tuple[Role, ...]]:
        assert league.id is not None
        return {
            player.id: known_roles(player.roles, league.game_mode)
            for _, player in self._draft_repo.list_owned(member_id, league.id)
            if player.id is not None
        }

    def _load(self, league: League, member_id: int, schema_id: str, owned: Mapping[int, tuple[Role, ...]]) -> Lineup:
        assert league.id is not None
        lineup = self._lineup_repo.get(member_id, league.id, schema_id)
        if lineup is None:
            return Lineup(member_id=member_id, league_id=league.id, schema=schema_id)
        return _owned_only(lineup, owned)

    def _store(self, lineup: Lineup) -> Lineup:
        lineup_id = self._lineup_repo.upsert(lineup)
        stored = self._lineup_repo.get(lineup.member_id, lineup.league_id, lineup.schema)
        assert stored is not None and stored.id == lineup_id
        return stored

    @staticmethod
    def _same_layout(a: Lineup, b: Lineup) -> bool:
        return a.starters == b.starters and a.bench == b.bench and a.is_active == b.is_active
