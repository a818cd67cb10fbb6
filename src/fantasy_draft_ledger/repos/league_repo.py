import json
import sqlite3

from fantasy_draft_ledger.domain.league import GameMode, League, LeagueStatus, MemberRole, Membership
from fantasy_draft_ledger.repos.errors import DuplicateKeyError


class SqliteLeagueRepo:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def insert(self, league: League) -> int:
        try:
            cursor = self._conn.execute(
                """INSERT INTO league (name, code, owner_id, game_mode, total_budget,
                                       max_players_per_team, max_members, status,
                                       allow_negative_budget, role_caps_json, description)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    league.name,
                    league.code,
                    league.owner_id,
                    league.game_mode.value,
                    league.total_budget,
                    league.max_players_per_team,
                    league.max_members,
                    league.status.value,
                    int(league.allow_negative_budget),
                    json.dumps(league.role_caps),
                    league.description,
                ),
            )
        except sqlite3.IntegrityError as e:
            if "league.code" in str(e):
                raise DuplicateKeyError("league code", league.code) from e
            raise DuplicateKeyError("league", league.name) from e
        return cursor.lastrowid  # type: ignore[return-value]

    def update_settings(self, league: League) -> None:
        """Persist every mutable setting. The join code is never rewritten."""
        try:
            self._conn.execute(
                """UPDATE league SET
                       name=?, total_budget=?, max_players_per_team=?, max_members=?,
                       status=?, allow_negative_budget=?, role_caps_json=?, description=?
                   WHERE id=?""",
                (
                    league.name,
                    league.total_budget,
                    league.max_players_per_team,
                    league.max_members,
                    league.status.value,
                    int(league.allow_negative_budget),
                    json.dumps(league.role_caps),
                    league.description,
                    league.id,
                ),
            )
        except sqlite3.IntegrityError as e:
            raise DuplicateKeyError("league", league.name) from e

    def get_by_id(self, league_id: int) -> League | None:
        row = self._conn.execute("SELECT * FROM league WHERE id = ?", (league_id,)).fetchone()
        return self._row_to_league(row) if row else None

    def get_by_code(self, code: str) -> League | None:
        row = self._conn.execute("SELECT * FROM league WHERE code = ?", (code,)).fetchone()
        return self._row_to_league(row) if row else None

    def code_exists(self, code: str) -> bool:
        return self._conn.execute("SELECT 1 FROM league WHERE code = ?", (code,)).fetchone() is not None

    def list_for_user(self, user_id: int) -> list[League]:
        rows = self._conn.execute(
            """SELECT l.* FROM league l
               JOIN membership m ON m.league_id = l.id
               WHERE m.user_id = ?
               ORDER BY l.name""",
            (user_id,),
        ).fetchall()
        return [self._row_to_league(row) for row in rows]

    def delete(self, league_id: int) -> None:
        self._conn.execute("DELETE FROM league WHERE id = ?", (league_id,))

    @staticmethod
    def _row_to_league(row: sqlite3.Row) -> League:
        return League(
            id=row["id"],
            name=row["name"],
            code=row["code"],
            owner_id=row["owner_id"],
            game_mode=GameMode(row["game_mode"]),
            total_budget=row["total_budget"],
            max_players_per_team=row["max_players_per_team"],
            max_members=row["max_members"],
            status=LeagueStatus(row["status"]),
            allow_negative_budget=bool(row["allow_negative_budget"]),
            role_caps=json.loads(row["role_caps_json"]),
            description=row["description"],
            created_at=row["created_at"],
        )


class SqliteMembershipRepo:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def insert(self, membership: Membership) -> int:
        try:
            cursor = self._conn.execute(
                "INSERT INTO membership (league_id, user_id, role, team_name) VALUES (?, ?, ?, ?)",
                (membership.league_id, membership.user_id, membership.role.value, membership.team_name),
            )
        except sqlite3.IntegrityError as e:
            raise DuplicateKeyError("membership", f"league={membership.league_id} user={membership.user_id}") from e
        return cursor.lastrowid  # type: ignore[return-value]

    def get(self, league_id: int, user_id: int) -> Membership | None:
        row = self._conn.execute(
            "SELECT * FROM membership WHERE league_id = ? AND user_id = ?",
            (league_id, user_id),
        ).fetchone()
        return self._row_to_membership(row) if row else None

    def list_by_league(self, league_id: int) -> list[Membership]:
        rows = self._conn.execute(
            "SELECT * FROM membership WHERE league_id = ? ORDER BY role = 'member', joined_at, id",
            (league_id,),
        ).fetchall()
        return [self._row_to_membership(row) for row in rows]

    def count(self, league_id: int) -> int:
        row = self._conn.execute("SELECT COUNT(*) FROM membership WHERE league_id = ?", (league_id,)).fetchone()
        return row[0]

    def delete(self, league_id: int, user_id: int) -> None:
        self._conn.execute("DELETE FROM membership WHERE league_id = ? AND user_id = ?", (league_id, user_id))

    @staticmethod
    def _row_to_membership(row: sqlite3.Row) -> Membership:
        return Membership(
            id=row["id"],
            league_id=row["league_id"],
            user_id=row["user_id"],
            role=MemberRole(row["role"]),
            team_name=row["team_name"],
            joined_at=row["joined_at"],
        )
