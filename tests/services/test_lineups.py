import sqlite3

import pytest

from fantasy_draft_ledger.domain.draft_state import DraftStatus
from fantasy_draft_ledger.domain.formation import Lineup
from fantasy_draft_ledger.domain.league import GameMode
from fantasy_draft_ledger.domain.roles import ClassicRole, MantraRole
from fantasy_draft_ledger.exceptions import (
    AssignmentError,
    NotAMemberError,
    NotFoundError,
    RosterLimitExceededError,
    ValidationError,
)
from fantasy_draft_ledger.services.container import LedgerContainer
from fantasy_draft_ledger.services.lineups import (
    assign_starter,
    bench_limit,
    build_lineup,
    get_schema,
    move_to_bench,
    unassign,
)
from tests.helpers import seed_league, seed_player

_EMPTY = Lineup(member_id=1, league_id=1, schema="4-3-3")


class TestPureFunctions:
    def test_bench_limit(self) -> None:
        assert bench_limit(25) == 14
        assert bench_limit(11) == 0

    def test_unknown_schema(self) -> None:
        with pytest.raises(NotFoundError):
            get_schema("5-5-0")

    def test_assign_compatible(self) -> None:
        lineup = assign_starter(_EMPTY, get_schema("4-3-3"), "gk", 1, (MantraRole.POR,), GameMode.MANTRA)
        assert lineup.starters == {"gk": 1}

    def test_assign_incompatible_leaves_lineup(self) -> None:
        with pytest.raises(AssignmentError):
            assign_starter(_EMPTY, get_schema("4-3-3"), "gk", 1, (MantraRole.A, MantraRole.PC), GameMode.MANTRA)

    def test_unknown_position(self) -> None:
        with pytest.raises(NotFoundError):
            assign_starter(_EMPTY, get_schema("4-3-3"), "zz", 1, (MantraRole.POR,), GameMode.MANTRA)

    def test_classic_uses_buckets(self) -> None:
        schema = get_schema("4-3-3")
        lineup = assign_starter(_EMPTY, schema, "dc1", 1, (ClassicRole.D,), GameMode.CLASSIC)
        assert lineup.starters == {"dc1": 1}
        with pytest.raises(AssignmentError):
            assign_starter(_EMPTY, schema, "dc1", 2, (ClassicRole.C,), GameMode.CLASSIC)

    def test_moving_player_vacates_old_slot(self) -> None:
        schema = get_schema("4-3-3")
        lineup = assign_starter(_EMPTY, schema, "dc1", 1, (MantraRole.DC,), GameMode.MANTRA)
        lineup = assign_starter(lineup, schema, "dc2", 1, (MantraRole.DC,), GameMode.MANTRA)
        assert lineup.starters == {"dc2": 1}

    def test_displaced_occupant_is_unassigned(self) -> None:
        schema = get_schema("4-3-3")
        lineup = assign_starter(_EMPTY, schema, "gk", 1, (MantraRole.POR,), GameMode.MANTRA)
        lineup = assign_starter(lineup, schema, "gk", 2, (MantraRole.POR,), GameMode.MANTRA)
        assert lineup.starters == {"gk": 2}
        assert 1 not in lineup.player_ids

    def test_bench_from_starters(self) -> None:
        lineup = assign_starter(_EMPTY, get_schema("4-3-3"), "gk", 1, (MantraRole.POR,), GameMode.MANTRA)
        lineup = move_to_bench(lineup, 1, limit=3)
        assert lineup.starters == {}
        assert lineup.bench == (1,)
        assert move_to_bench(lineup, 1, limit=1) == lineup

    def test_bench_limit_enforced(self) -> None:
        lineup = move_to_bench(_EMPTY, 1, limit=1)
        with pytest.raises(RosterLimitExceededError):
            move_to_bench(lineup, 2, limit=1)

    def test_unassign(self) -> None:
        lineup = move_to_bench(_EMPTY, 1, limit=2)
        assert unassign(lineup, 1).bench == ()

    def test_build_rejects_duplicates(self) -> None:
        with pytest.raises(ValidationError):
            build_lineup(
                _EMPTY, get_schema("4-3-3"), {"gk": 1}, [1], {1: (MantraRole.POR,)}, GameMode.MANTRA, limit=14
            )

    def test_build_rejects_unowned(self) -> None:
        with pytest.raises(AssignmentError):
            build_lineup(_EMPTY, get_schema("4-3-3"), {"gk": 1}, [], {}, GameMode.MANTRA, limit=14)


def _own(container: LedgerContainer, league_id: int, player_id: int, cost: float = 1) -> None:
    container.draft.transition_status(1, league_id, player_id, DraftStatus.OWNED, cost=cost)


class TestLineupService:
    def test_incompatible_starter_leaves_slot_empty(
        self, conn: sqlite3.Connection, container: LedgerContainer
    ) -> None:
        league_id = seed_league(conn, game_mode=GameMode.MANTRA)
        striker = seed_player(conn, league_id, name="Lautaro", roles="A;Pc")
        keeper = seed_player(conn, league_id, name="Sommer", roles="Por")
        _own(container, league_id, striker)
        _own(container, league_id, keeper)
        container.lineups.assign_starter(1, league_id, "4-3-3", "a1", striker)

        with pytest.raises(AssignmentError):
            container.lineups.assign_starter(1, league_id, "4-3-3", "gk", striker)

        lineup = container.lineups.get_lineup(1, league_id, "4-3-3")
        assert "gk" not in lineup.starters
        assert lineup.starters == {"a1": striker}

    def test_unowned_player_rejected(self, conn: sqlite3.Connection, container: LedgerContainer) -> None:
        league_id = seed_league(conn, game_mode=GameMode.MANTRA)
        keeper = seed_player(conn, league_id, name="Sommer", roles="Por")
        with pytest.raises(AssignmentError):
            container.lineups.assign_starter(1, league_id, "4-3-3", "gk", keeper)

    def test_sold_player_drops_out(self, conn: sqlite3.Connection, container: LedgerContainer) -> None:
        league_id = seed_league(conn, game_mode=GameMode.MANTRA)
        keeper = seed_player(conn, league_id, name="Sommer", roles="Por")
        striker = seed_player(conn, league_id, name="Lautaro", roles="Pc")
        _own(container, league_id, keeper)
        _own(container, league_id, striker)
        container.lineups.assign_starter(1, league_id, "4-3-3", "gk", keeper)
        container.draft.transition_status(1, league_id, keeper, DraftStatus.AVAILABLE)

        lineup = container.lineups.move_to_bench(1, league_id, "4-3-3", striker)

        assert lineup.starters == {}
        assert lineup.bench == (striker,)

    def test_reads_skip_sold_players(self, conn: sqlite3.Connection, container: LedgerContainer) -> None:
        league_id = seed_league(conn, game_mode=GameMode.MANTRA)
        keeper = seed_player(conn, league_id, name="Sommer", roles="Por")
        striker = seed_player(conn, league_id, name="Lautaro", roles="Pc")
        _own(container, league_id, keeper)
        _own(container, league_id, striker)
        container.lineups.save_lineup(1, league_id, "4-3-3", {"gk": keeper, "a1": striker}, [])
        container.draft.transition_status(1, league_id, keeper, DraftStatus.AVAILABLE)

        (listed,) = container.lineups.list_lineups(1, league_id)
        fetched = container.lineups.get_lineup(1, league_id, "4-3-3")

        assert listed.starters == {"a1": striker}
        assert fetched.starters == {"a1": striker}
        assert keeper not in listed.player_ids | fetched.player_ids

    def test_bench_limit_from_league(self, conn: sqlite3.Connection, container: LedgerContainer) -> None:
        league_id = seed_league(conn, max_players_per_team=12)
        a = seed_player(conn, league_id, name="Alpha")
        b = seed_player(conn, league_id, name="Beta")
        _own(container, league_id, a)
        _own(container, league_id, b)
        container.lineups.move_to_bench(1, league_id, "4-4-2", a)
        with pytest.raises(RosterLimitExceededError):
            container.lineups.move_to_bench(1, league_id, "4-4-2", b)

    def test_unassign_from_lineup(self, conn: sqlite3.Connection, container: LedgerContainer) -> None:
        league_id = seed_league(conn)
        a = seed_player(conn, league_id, name="Alpha")
        _own(container, league_id, a)
        container.lineups.move_to_bench(1, league_id, "4-4-2", a)
        lineup = container.lineups.unassign_from_lineup(1, league_id, "4-4-2", a)
        assert lineup.player_ids == set()

    def test_save_is_idempotent(self, conn: sqlite3.Connection, container: LedgerContainer) -> None:
        league_id = seed_league(conn, game_mode=GameMode.MANTRA)
        keeper = seed_player(conn, league_id, name="Sommer", roles="Por")
        striker = seed_player(conn, league_id, name="Lautaro", roles="Pc")
        _own(container, league_id, keeper)
        _own(container, league_id, striker)

        first = container.lineups.save_lineup(1, league_id, "4-3-3", {"gk": keeper}, [striker])
        second = container.lineups.save_lineup(1, league_id, "4-3-3", {"gk": keeper}, [striker])

        assert second == first
        assert len(container.lineups.list_lineups(1, league_id)) == 1

    def test_save_replaces_layout(self, conn: sqlite3.Connection, container: LedgerContainer) -> None:
        league_id = seed_league(conn, game_mode=GameMode.MANTRA)
        keeper = seed_player(conn, league_id, name="Sommer", roles="Por")
        striker = seed_player(conn, league_id, name="Lautaro", roles="Pc")
        _own(container, league_id, keeper)
        _own(container, league_id, striker)
        container.lineups.save_lineup(1, league_id, "4-3-3", {"gk": keeper}, [striker])

        lineup = container.lineups.save_lineup(1, league_id, "4-3-3", {"a1": striker}, [])

        assert lineup.starters == {"a1": striker}
        assert lineup.bench == ()

    def test_single_active_lineup(self, conn: sqlite3.Connection, container: LedgerContainer) -> None:
        league_id = seed_league(conn)
        container.lineups.save_lineup(1, league_id, "4-3-3", {}, [], activate=True)
        container.lineups.save_lineup(1, league_id, "3-5-2", {}, [], activate=True)

        active = [x.schema for x in container.lineups.list_lineups(1, league_id) if x.is_active]
        assert active == ["3-5-2"]

        container.lineups.activate_lineup(1, league_id, "4-3-3")
        active = [x.schema for x in container.lineups.list_lineups(1, league_id) if x.is_active]
        assert active == ["4-3-3"]

    def test_delete_lineup(self, conn: sqlite3.Connection, container: LedgerContainer) -> None:
        league_id = seed_league(conn)
        container.lineups.save_lineup(1, league_id, "4-3-3", {}, [])
        container.lineups.delete_lineup(1, league_id, "4-3-3")
        with pytest.raises(NotFoundError):
            container.lineups.get_lineup(1, league_id, "4-3-3")
        with pytest.raises(NotFoundError):
            container.lineups.delete_lineup(1, league_id, "4-3-3")

    def test_unknown_schema(self, conn: sqlite3.Connection, container: LedgerContainer) -> None:
        league_id = seed_league(conn)
        with pytest.raises(NotFoundError):
            container.lineups.save_lineup(1, league_id, "9-0-1", {}, [])

    def test_non_member(self, conn: sqlite3.Connection, container: LedgerContainer) -> None:
        league_id = seed_league(conn)
        with pytest.raises(NotAMemberError):
            container.lineups.list_lineups(4, league_id)

    def test_list_formations(self, container: LedgerContainer) -> None:
        assert len(container.lineups.list_formations()) == 11
