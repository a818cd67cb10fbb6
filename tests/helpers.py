import sqlite3
from datetime import UTC, datetime, timedelta
from pathlib import Path

from fantasy_draft_ledger.config import LedgerSettings
from fantasy_draft_ledger.domain.league import GameMode, League, MemberRole, Membership
from fantasy_draft_ledger.domain.player import CatalogPlayer
from fantasy_draft_ledger.domain.tier import ImportMode
from fantasy_draft_ledger.repos.catalog_repo import SqliteCatalogRepo
from fantasy_draft_ledger.repos.league_repo import SqliteLeagueRepo, SqliteMembershipRepo

SEASON = "2025-26"


class FixedClock:
    """Deterministic clock; each call advances one second."""

    def __init__(self, start: datetime | None = None) -> None:
        self._now = start or datetime(2025, 8, 20, 20, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        current = self._now
        self._now += timedelta(seconds=1)
        return current


def make_settings(**overrides: object) -> LedgerSettings:
    values: dict[str, object] = {
        "db_path": Path(":memory:"),
        "pool_size": 2,
        "season": SEASON,
        "chunk_size": 200,
        "import_mode": ImportMode.AUTO,
        "total_budget": 500,
        "max_players_per_team": 25,
        "max_members": 10,
        "allow_negative_budget": False,
        "role_caps": {},
    }
    values.update(overrides)
    return LedgerSettings(**values)  # type: ignore[arg-type]


def seed_league(
    conn: sqlite3.Connection,
    *,
    owner_id: int = 1,
    name: str = "Lega Test",
    code: str = "ABC123",
    game_mode: GameMode = GameMode.CLASSIC,
    total_budget: int = 500,
    max_players_per_team: int = 25,
    max_members: int = 10,
    allow_negative_budget: bool = False,
    role_caps: dict[str, int] | None = None,
) -> int:
    """Seed a league with its owner as master. Returns the league id."""
    league_id = SqliteLeagueRepo(conn).insert(
        League(
            name=name,
            code=code,
            owner_id=owner_id,
            game_mode=game_mode,
            total_budget=total_budget,
            max_players_per_team=max_players_per_team,
            max_members=max_members,
            allow_negative_budget=allow_negative_budget,
            role_caps=role_caps or {},
        )
    )
    seed_member(conn, league_id, owner_id, role=MemberRole.MASTER)
    return league_id


def seed_member(
    conn: sqlite3.Connection,
    league_id: int,
    user_id: int,
    *,
    role: MemberRole = MemberRole.MEMBER,
    team_name: str = "My Team",
) -> int:
    membership_id = SqliteMembershipRepo(conn).insert(
        Membership(league_id=league_id, user_id=user_id, role=role, team_name=team_name)
    )
    conn.commit()
    return membership_id


def seed_player(
    conn: sqlite3.Connection,
    league_id: int | None = None,
    *,
    name: str = "Test Player",
    team: str = "Inter",
    roles: str = "A",
    price: float = 10.0,
    value: float = 10.0,
    season: str = SEASON,
) -> int:
    """Seed a catalog player, linked to ``league_id`` when given."""
    repo = SqliteCatalogRepo(conn)
    player_id, _ = repo.upsert(
        CatalogPlayer(name=name, team=team, roles=roles, season=season, price=price, value=value)
    )
    if league_id is not None:
        repo.link_to_league(league_id, player_id)
    conn.commit()
    return player_id


def catalog_count(conn: sqlite3.Connection) -> int:
    return conn.execute("SELECT COUNT(*) FROM catalog_player").fetchone()[0]


def league_player_names(conn: sqlite3.Connection, league_id: int) -> list[str]:
    rows = conn.execute(
        "SELECT p.name FROM catalog_player p JOIN league_player lp ON lp.catalog_player_id = p.id"
        " WHERE lp.league_id = ? ORDER BY p.name",
        (league_id,),
    ).fetchall()
    return [row[0] for row in rows]
