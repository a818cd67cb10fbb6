import sqlite3
from dataclasses import replace

import pytest

from fantasy_draft_ledger.domain.league import GameMode, League, LeagueStatus, MemberRole, Membership
from fantasy_draft_ledger.repos.errors import DuplicateKeyError
from fantasy_draft_ledger.repos.league_repo import SqliteLeagueRepo, SqliteMembershipRepo


def _make_league(**overrides: object) -> League:
    defaults: dict[str, object] = {
        "name": "Lega Amici",
        "code": "AMICI1",
        "owner_id": 1,
        "game_mode": GameMode.MANTRA,
        "total_budget": 500,
        "max_players_per_team": 25,
        "max_members": 10,
    }
    defaults.update(overrides)
    return League(**defaults)  # type: ignore[arg-type]


class TestLeagueRepo:
    def test_insert_and_get(self, conn: sqlite3.Connection) -> None:
        repo = SqliteLeagueRepo(conn)
        league_id = repo.insert(_make_league(role_caps={"P": 3}, description="friends"))
        conn.commit()

        result = repo.get_by_id(league_id)
        assert result is not None
        assert result.id == league_id
        assert result.game_mode is GameMode.MANTRA
        assert result.status is LeagueStatus.ACTIVE
        assert result.role_caps == {"P": 3}
        assert result.description == "friends"
        assert not result.allow_negative_budget

    def test_get_missing(self, conn: sqlite3.Connection) -> None:
        assert SqliteLeagueRepo(conn).get_by_id(99) is None

    def test_get_by_code(self, conn: sqlite3.Connection) -> None:
        repo = SqliteLeagueRepo(conn)
        repo.insert(_make_league())
        result = repo.get_by_code("AMICI1")
        assert result is not None
        assert result.name == "Lega Amici"
        assert repo.code_exists("AMICI1")
        assert not repo.code_exists("ZZZZZZ")

    def test_duplicate_code(self, conn: sqlite3.Connection) -> None:
        repo = SqliteLeagueRepo(conn)
        repo.insert(_make_league())
        with pytest.raises(DuplicateKeyError, match="league code"):
            repo.insert(_make_league(name="Other"))

    def test_duplicate_name_for_owner(self, conn: sqlite3.Connection) -> None:
        repo = SqliteLeagueRepo(conn)
        repo.insert(_make_league())
        with pytest.raises(DuplicateKeyError):
            repo.insert(_make_league(code="OTHER1"))

    def test_same_name_different_owner(self, conn: sqlite3.Connection) -> None:
        repo = SqliteLeagueRepo(conn)
        repo.insert(_make_league())
        repo.insert(_make_league(code="OTHER1", owner_id=2))

    def test_update_settings_keeps_code(self, conn: sqlite3.Connection) -> None:
        repo = SqliteLeagueRepo(conn)
        league_id = repo.insert(_make_league())
        league = repo.get_by_id(league_id)
        assert league is not None
        repo.update_settings(
            replace(league, name="Renamed", code="NEWCOD", total_budget=800, status=LeagueStatus.CLOSED)
        )
        result = repo.get_by_id(league_id)
        assert result is not None
        assert result.name == "Renamed"
        assert result.code == "AMICI1"
        assert result.total_budget == 800
        assert result.status is LeagueStatus.CLOSED

    def test_list_for_user(self, conn: sqlite3.Connection) -> None:
        leagues = SqliteLeagueRepo(conn)
        members = SqliteMembershipRepo(conn)
        a = leagues.insert(_make_league(name="B league", code="BBBBBB"))
        b = leagues.insert(_make_league(name="A league", code="AAAAAA"))
        leagues.insert(_make_league(name="C league", code="CCCCCC"))
        members.insert(Membership(league_id=a, user_id=7, role=MemberRole.MEMBER))
        members.insert(Membership(league_id=b, user_id=7, role=MemberRole.MEMBER))
        assert [lg.name for lg in leagues.list_for_user(7)] == ["A league", "B league"]

    def test_delete_cascades_memberships(self, conn: sqlite3.Connection) -> None:
        leagues = SqliteLeagueRepo(conn)
        members = SqliteMembershipRepo(conn)
        league_id = leagues.insert(_make_league())
        members.insert(Membership(league_id=league_id, user_id=1, role=MemberRole.MASTER))
        leagues.delete(league_id)
        assert leagues.get_by_id(league_id) is None
        assert members.count(league_id) == 0


class TestMembershipRepo:
    def test_insert_and_get(self, conn: sqlite3.Connection) -> None:
        league_id = SqliteLeagueRepo(conn).insert(_make_league())
        repo = SqliteMembershipRepo(conn)
        repo.insert(Membership(league_id=league_id, user_id=1, role=MemberRole.MASTER, team_name="FC Uno"))
        result = repo.get(league_id, 1)
        assert result is not None
        assert result.is_master
        assert result.team_name == "FC Uno"

    def test_duplicate_membership(self, conn: sqlite3.Connection) -> None:
        league_id = SqliteLeagueRepo(conn).insert(_make_league())
        repo = SqliteMembershipRepo(conn)
        repo.insert(Membership(league_id=league_id, user_id=2, role=MemberRole.MEMBER))
        with pytest.raises(DuplicateKeyError):
            repo.insert(Membership(league_id=league_id, user_id=2, role=MemberRole.MEMBER))

    def test_one_master_per_league(self, conn: sqlite3.Connection) -> None:
        league_id = SqliteLeagueRepo(conn).insert(_make_league())
        repo = SqliteMembershipRepo(conn)
        repo.insert(Membership(league_id=league_id, user_id=1, role=MemberRole.MASTER))
        with pytest.raises(DuplicateKeyError):
            repo.insert(Membership(league_id=league_id, user_id=2, role=MemberRole.MASTER))

    def test_list_master_first_and_count(self, conn: sqlite3.Connection) -> None:
        league_id = SqliteLeagueRepo(conn).insert(_make_league())
        repo = SqliteMembershipRepo(conn)
        repo.insert(Membership(league_id=league_id, user_id=5, role=MemberRole.MEMBER))
        repo.insert(Membership(league_id=league_id, user_id=1, role=MemberRole.MASTER))
        assert [m.user_id for m in repo.list_by_league(league_id)] == [1, 5]
        assert repo.count(league_id) == 2

    def test_delete(self, conn: sqlite3.Connection) -> None:
        league_id = SqliteLeagueRepo(conn).insert(_make_league())
        repo = SqliteMembershipRepo(conn)
        repo.insert(Membership(league_id=league_id, user_id=5, role=MemberRole.MEMBER))
        repo.delete(league_id, 5)
        assert repo.get(league_id, 5) is None
