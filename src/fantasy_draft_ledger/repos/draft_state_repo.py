import sqlite3

from fantasy_draft_ledger.domain.draft_state import DraftBoardEntry, DraftState, DraftStatus
from fantasy_draft_ledger.domain.player import CatalogPlayer
from fantasy_draft_ledger.domain.tier import Tier
from fantasy_draft_ledger.repos.errors import StaleWriteError

_STATE_COLUMNS = (
    "status, expected_price, cost, buyer, buyer_cost, note, tier, acquired_at, removed_at, customized"
)


class SqliteDraftStateRepo:
    """Per (member, league, player) status rows.

    Writes are keyed by the row's unique triple; callers hold an ``atomic``
    block around read-modify-write sequences.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def get(self, member_id: int, league_id: int, player_id: int) -> DraftState | None:
        row = self._conn.execute(
            "SELECT * FROM draft_state WHERE member_id = ? AND league_id = ? AND catalog_player_id = ?",
            (member_id, league_id, player_id),
        ).fetchone()
        return self._row_to_state(row) if row else None

    def get_or_default(self, member_id: int, league_id: int, player_id: int) -> DraftState:
        state = self.get(member_id, league_id, player_id)
        if state is None:
            return DraftState(member_id=member_id, league_id=league_id, catalog_player_id=player_id)
        return state

    def save(self, state: DraftState, *, expected_version: int | None = None) -> DraftState:
        """Write the whole row in one statement, creating it on first edit."""
        if expected_version is not None:
            row = self._conn.execute(
                "SELECT version FROM draft_state WHERE member_id = ? AND league_id = ? AND catalog_player_id = ?",
                (state.member_id, state.league_id, state.catalog_player_id),
            ).fetchone()
            actual = row["version"] if row else 0
            if actual != expected_version:
                raise StaleWriteError(expected_version, actual)
        self._conn.execute(
            f"""INSERT INTO draft_state (member_id, league_id, catalog_player_id, {_STATE_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(member_id, league_id, catalog_player_id) DO UPDATE SET
                    status=excluded.status,
                    expected_price=excluded.expected_price,
                    cost=excluded.cost,
                    buyer=excluded.buyer,
                    buyer_cost=excluded.buyer_cost,
                    note=excluded.note,
                    tier=excluded.tier,
                    acquired_at=excluded.acquired_at,
                    removed_at=excluded.removed_at,
                    customized=excluded.customized,
                    version=draft_state.version + 1,
                    updated_at=datetime('now')""",
            (
                state.member_id,
                state.league_id,
                state.catalog_player_id,
                state.status.value,
                state.expected_price,
                state.cost,
                state.buyer,
                state.buyer_cost,
                state.note,
                state.tier.value if state.tier is not None else None,
                state.acquired_at,
                state.removed_at,
                int(state.customized),
            ),
        )
        saved = self.get(state.member_id, state.league_id, state.catalog_player_id)
        assert saved is not None
        return saved

    def list_owned(self, member_id: int, league_id: int) -> list[tuple[DraftState, CatalogPlayer]]:
        rows = self._conn.execute(
            """SELECT ds.*, cp.name AS cp_name, cp.team AS cp_team, cp.roles AS cp_roles,
                      cp.price AS cp_price, cp.value AS cp_value, cp.season AS cp_season,
                      cp.updated_at AS cp_updated_at
               FROM draft_state ds
               JOIN catalog_player cp ON cp.id = ds.catalog_player_id
               WHERE ds.member_id = ? AND ds.league_id = ? AND ds.status = 'owned'
               ORDER BY ds.acquired_at, cp.name""",
            (member_id, league_id),
        ).fetchall()
        return [(self._row_to_state(row), self._row_to_player(row)) for row in rows]

    def spent(self, member_id: int, league_id: int) -> float:
        row = self._conn.execute(
            "SELECT COALESCE(SUM(cost), 0) FROM draft_state WHERE member_id = ? AND league_id = ? AND status = 'owned'",
            (member_id, league_id),
        ).fetchone()
        return row[0]

    def board(self, member_id: int, league_id: int, search_text: str | None = None) -> list[DraftBoardEntry]:
        """Every catalog player linked to the league, with this member's state (default when absent)."""
        sql = """SELECT cp.id AS cp_id, cp.name AS cp_name, cp.team AS cp_team, cp.roles AS cp_roles,
                        cp.price AS cp_price, cp.value AS cp_value, cp.season AS cp_season,
                        cp.updated_at AS cp_updated_at,
                        ds.*, p.name AS participant_name, pa.cost AS participant_cost
                 FROM league_player lp
                 JOIN catalog_player cp ON cp.id = lp.catalog_player_id
                 LEFT JOIN draft_state ds
                        ON ds.catalog_player_id = cp.id AND ds.member_id = ? AND ds.league_id = lp.league_id
                 LEFT JOIN participant_assignment pa
                        ON pa.catalog_player_id = cp.id AND pa.member_id = ? AND pa.league_id = lp.league_id
                 LEFT JOIN participant p ON p.id = pa.participant_id
                 WHERE lp.league_id = ?"""
        params: list[object] = [member_id, member_id, league_id]
        if search_text:
            sql += " AND (LOWER(cp.name) LIKE ? OR LOWER(cp.team) LIKE ?)"
            pattern = f"%{search_text.lower()}%"
            params.extend([pattern, pattern])
        rows = self._conn.execute(sql, params).fetchall()
        entries: list[DraftBoardEntry] = []
        for row in rows:
            player = self._row_to_player(row, id_column="cp_id")
            if row["status"] is None:
                state = DraftState(member_id=member_id, league_id=league_id, catalog_player_id=row["cp_id"])
            else:
                state = self._row_to_state(row)
            entries.append(
                DraftBoardEntry(
                    player=player,
                    state=state,
                    participant_name=row["participant_name"],
                    participant_cost=row["participant_cost"],
                )
            )
        return entries

    def delete_scope(self, league_id: int, member_id: int | None = None) -> int:
        if member_id is None:
            cursor = self._conn.execute("DELETE FROM draft_state WHERE league_id = ?", (league_id,))
        else:
            cursor = self._conn.execute(
                "DELETE FROM draft_state WHERE league_id = ? AND member_id = ?",
                (league_id, member_id),
            )
        return cursor.rowcount

    @staticmethod
    def _row_to_state(row: sqlite3.Row) -> DraftState:
        return DraftState(
            id=row["id"],
            member_id=row["member_id"],
            league_id=row["league_id"],
            catalog_player_id=row["catalog_player_id"],
            status=DraftStatus(row["status"]),
            expected_price=row["expected_price"],
            cost=row["cost"],
            buyer=row["buyer"],
            buyer_cost=row["buyer_cost"],
            note=row["note"],
            tier=Tier(row["tier"]) if row["tier"] is not None else None,
            acquired_at=row["acquired_at"],
            removed_at=row["removed_at"],
            customized=bool(row["customized"]),
            version=row["version"],
            updated_at=row["updated_at"],
        )

    @staticmethod
    def _row_to_player(row: sqlite3.Row, id_column: str = "catalog_player_id") -> CatalogPlayer:
        return CatalogPlayer(
            id=row[id_column],
            name=row["cp_name"],
            team=row["cp_team"],
            roles=row["cp_roles"],
            price=row["cp_price"],
            value=row["cp_value"],
            season=row["cp_season"],
            updated_at=row["cp_updated_at"],
        )
