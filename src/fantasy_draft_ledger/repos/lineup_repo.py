import json
import sqlite3

from fantasy_draft_ledger.domain.formation import Lineup


class SqliteLineupRepo:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def upsert(self, lineup: Lineup) -> int:
        self._conn.execute(
            """INSERT INTO lineup (member_id, league_id, schema, starters_json, bench_json, is_active)
               VALUES (?, ?, ?, ?, ?, ?)
               ON CONFLICT(member_id, league_id, schema) DO UPDATE SET
                   starters_json=excluded.starters_json,
                   bench_json=excluded.bench_json,
                   is_active=excluded.is_active,
                   updated_at=datetime('now')""",
            (
                lineup.member_id,
                lineup.league_id,
                lineup.schema,
                json.dumps(lineup.starters, sort_keys=True),
                json.dumps(list(lineup.bench)),
                int(lineup.is_active),
            ),
        )
        row = self._conn.execute(
            "SELECT id FROM lineup WHERE member_id = ? AND league_id = ? AND schema = ?",
            (lineup.member_id, lineup.league_id, lineup.schema),
        ).fetchone()
        return row["id"]

    def get(self, member_id: int, league_id: int, schema: str) -> Lineup | None:
        row = self._conn.execute(
            "SELECT * FROM lineup WHERE member_id = ? AND league_id = ? AND schema = ?",
            (member_id, league_id, schema),
        ).fetchone()
        return self._row_to_lineup(row) if row else None

    def list_for_member(self, member_id: int, league_id: int) -> list[Lineup]:
        rows = self._conn.execute(
            "SELECT * FROM lineup WHERE member_id = ? AND league_id = ? ORDER BY is_active DESC, schema",
            (member_id, league_id),
        ).fetchall()
        return [self._row_to_lineup(row) for row in rows]

    def deactivate_all(self, member_id: int, league_id: int) -> None:
        self._conn.execute(
            "UPDATE lineup SET is_active = 0 WHERE member_id = ? AND league_id = ? AND is_active = 1",
            (member_id, league_id),
        )

    def delete(self, member_id: int, league_id: int, schema: str) -> bool:
        cursor = self._conn.execute(
            "DELETE FROM lineup WHERE member_id = ? AND league_id = ? AND schema = ?",
            (member_id, league_id, schema),
        )
        return cursor.rowcount > 0

    def delete_scope(self, league_id: int, member_id: int | None = None) -> int:
        if member_id is None:
            cursor = self._conn.execute("DELETE FROM lineup WHERE league_id = ?", (league_id,))
        else:
            cursor = self._conn.execute(
                "DELETE FROM lineup WHERE league_id = ? AND member_id = ?",
                (league_id, member_id),
            )
        return cursor.rowcount

    @staticmethod
    def _row_to_lineup(row: sqlite3.Row) -> Lineup:
        return Lineup(
            id=row["id"],
            member_id=row["member_id"],
            league_id=row["league_id"],
            schema=row["schema"],
            starters={pos: int(pid) for pos, pid in json.loads(row["starters_json"]).items()},
            bench=tuple(int(pid) for pid in json.loads(row["bench_json"])),
            is_active=bool(row["is_active"]),
            updated_at=row["updated_at"],
        )
