import sqlite3

from fantasy_draft_ledger.domain.player import CatalogPlayer


class SqliteCatalogRepo:
    """League-agnostic player registry keyed by (name, team, season)."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def upsert(self, player: CatalogPlayer) -> tuple[int, bool]:
        """Insert or update by natural key. Returns ``(id, created)``."""
        existing = self.get_by_key(player.name, player.team, player.season)
        self._conn.execute(
            """INSERT INTO catalog_player (name, team, roles, price, value, season)
               VALUES (?, ?, ?, ?, ?, ?)
               ON CONFLICT(name, team, season) DO UPDATE SET
                   roles=excluded.roles, price=excluded.price, value=excluded.value,
                   updated_at=datetime('now')""",
            (player.name, player.team, player.roles, player.price, player.value, player.season),
        )
        if existing is not None:
            assert existing.id is not None
            return existing.id, False
        created = self.get_by_key(player.name, player.team, player.season)
        assert created is not None and created.id is not None
        return created.id, True

    def get_by_id(self, player_id: int) -> CatalogPlayer | None:
        row = self._conn.execute("SELECT * FROM catalog_player WHERE id = ?", (player_id,)).fetchone()
        return self._row_to_player(row) if row else None

    def get_by_ids(self, player_ids: list[int]) -> list[CatalogPlayer]:
        if not player_ids:
            return []
        placeholders = ",".join("?" * len(player_ids))
        rows = self._conn.execute(
            f"SELECT * FROM catalog_player WHERE id IN ({placeholders})",
            player_ids,
        ).fetchall()
        return [self._row_to_player(row) for row in rows]

    def get_by_key(self, name: str, team: str, season: str) -> CatalogPlayer | None:
        row = self._conn.execute(
            "SELECT * FROM catalog_player WHERE name = ? AND team = ? AND season = ?",
            (name, team, season),
        ).fetchone()
        return self._row_to_player(row) if row else None

    def link_to_league(self, league_id: int, player_id: int) -> None:
        self._conn.execute(
            "INSERT OR IGNORE INTO league_player (league_id, catalog_player_id) VALUES (?, ?)",
            (league_id, player_id),
        )

    def in_league(self, league_id: int, player_id: int) -> bool:
        row = self._conn.execute(
            "SELECT 1 FROM league_player WHERE league_id = ? AND catalog_player_id = ?",
            (league_id, player_id),
        ).fetchone()
        return row is not None

    def unlink_league(self, league_id: int) -> int:
        cursor = self._conn.execute("DELETE FROM league_player WHERE league_id = ?", (league_id,))
        return cursor.rowcount

    def delete_orphans(self) -> int:
        """Delete catalog players no league links to. Returns the number removed."""
        cursor = self._conn.execute(
            """DELETE FROM catalog_player
               WHERE NOT EXISTS (
                   SELECT 1 FROM league_player lp WHERE lp.catalog_player_id = catalog_player.id
               )"""
        )
        return cursor.rowcount

    @staticmethod
    def _row_to_player(row: sqlite3.Row) -> CatalogPlayer:
        return CatalogPlayer(
            id=row["id"],
            name=row["name"],
            team=row["team"],
            roles=row["roles"],
            price=row["price"],
            value=row["value"],
            season=row["season"],
            updated_at=row["updated_at"],
        )
