import sqlite3

from fantasy_draft_ledger.domain.budget import ParticipantSummary
from fantasy_draft_ledger.domain.participant import Participant, ParticipantAssignment
from fantasy_draft_ledger.repos.errors import DuplicateKeyError


class SqliteParticipantRepo:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def insert(self, participant: Participant) -> int:
        try:
            cursor = self._conn.execute(
                "INSERT INTO participant (member_id, league_id, name, budget) VALUES (?, ?, ?, ?)",
                (participant.member_id, participant.league_id, participant.name, participant.budget),
            )
        except sqlite3.IntegrityError as e:
            raise DuplicateKeyError("participant", participant.name) from e
        return cursor.lastrowid  # type: ignore[return-value]

    def rename(self, participant_id: int, name: str) -> None:
        try:
            self._conn.execute("UPDATE participant SET name = ? WHERE id = ?", (name, participant_id))
        except sqlite3.IntegrityError as e:
            raise DuplicateKeyError("participant", name) from e

    def get(self, member_id: int, league_id: int, participant_id: int) -> Participant | None:
        row = self._conn.execute(
            "SELECT * FROM participant WHERE id = ? AND member_id = ? AND league_id = ?",
            (participant_id, member_id, league_id),
        ).fetchone()
        return self._row_to_participant(row) if row else None

    def list_for_member(self, member_id: int, league_id: int) -> list[Participant]:
        rows = self._conn.execute(
            "SELECT * FROM participant WHERE member_id = ? AND league_id = ? ORDER BY name",
            (member_id, league_id),
        ).fetchall()
        return [self._row_to_participant(row) for row in rows]

    def summaries(self, member_id: int, league_id: int) -> list[ParticipantSummary]:
        """Spent and player counts derived from assignment rows at read time."""
        rows = self._conn.execute(
            """SELECT p.id, p.name, p.budget,
                      COALESCE(SUM(pa.cost), 0) AS spent,
                      COUNT(pa.id) AS players_count
               FROM participant p
               LEFT JOIN participant_assignment pa ON pa.participant_id = p.id
               WHERE p.member_id = ? AND p.league_id = ?
               GROUP BY p.id
               ORDER BY p.name""",
            (member_id, league_id),
        ).fetchall()
        return [
            ParticipantSummary(
                participant_id=row["id"],
                name=row["name"],
                budget=row["budget"],
                spent=row["spent"],
                players_count=row["players_count"],
            )
            for row in rows
        ]

    def delete(self, participant_id: int) -> None:
        self._conn.execute("DELETE FROM participant WHERE id = ?", (participant_id,))

    def delete_scope(self, league_id: int, member_id: int | None = None) -> int:
        if member_id is None:
            cursor = self._conn.execute("DELETE FROM participant WHERE league_id = ?", (league_id,))
        else:
            cursor = self._conn.execute(
                "DELETE FROM participant WHERE league_id = ? AND member_id = ?",
                (league_id, member_id),
            )
        return cursor.rowcount

    @staticmethod
    def _row_to_participant(row: sqlite3.Row) -> Participant:
        return Participant(
            id=row["id"],
            member_id=row["member_id"],
            league_id=row["league_id"],
            name=row["name"],
            budget=row["budget"],
            created_at=row["created_at"],
        )


class SqliteAssignmentRepo:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def insert(self, assignment: ParticipantAssignment) -> int:
        try:
            cursor = self._conn.execute(
                """INSERT INTO participant_assignment
                       (member_id, league_id, participant_id, catalog_player_id, cost)
                   VALUES (?, ?, ?, ?, ?)""",
                (
                    assignment.member_id,
                    assignment.league_id,
                    assignment.participant_id,
                    assignment.catalog_player_id,
                    assignment.cost,
                ),
            )
        except sqlite3.IntegrityError as e:
            raise DuplicateKeyError("assignment", f"player {assignment.catalog_player_id}") from e
        return cursor.lastrowid  # type: ignore[return-value]

    def get_for_player(self, member_id: int, league_id: int, player_id: int) -> ParticipantAssignment | None:
        row = self._conn.execute(
            """SELECT * FROM participant_assignment
               WHERE member_id = ? AND league_id = ? AND catalog_player_id = ?""",
            (member_id, league_id, player_id),
        ).fetchone()
        return self._row_to_assignment(row) if row else None

    def list_for_participant(self, participant_id: int) -> list[ParticipantAssignment]:
        rows = self._conn.execute(
            "SELECT * FROM participant_assignment WHERE participant_id = ? ORDER BY assigned_at, id",
            (participant_id,),
        ).fetchall()
        return [self._row_to_assignment(row) for row in rows]

    def totals(self, participant_id: int) -> tuple[float, int]:
        row = self._conn.execute(
            "SELECT COALESCE(SUM(cost), 0), COUNT(*) FROM participant_assignment WHERE participant_id = ?",
            (participant_id,),
        ).fetchone()
        return row[0], row[1]

    def delete(self, participant_id: int, player_id: int) -> bool:
        cursor = self._conn.execute(
            "DELETE FROM participant_assignment WHERE participant_id = ? AND catalog_player_id = ?",
            (participant_id, player_id),
        )
        return cursor.rowcount > 0

    def delete_scope(self, league_id: int, member_id: int | None = None) -> int:
        if member_id is None:
            cursor = self._conn.execute("DELETE FROM participant_assignment WHERE league_id = ?", (league_id,))
        else:
            cursor = self._conn.execute(
                "DELETE FROM participant_assignment WHERE league_id = ? AND member_id = ?",
                (league_id, member_id),
            )
        return cursor.rowcount

    @staticmethod
    def _row_to_assignment(row: sqlite3.Row) -> ParticipantAssignment:
        return ParticipantAssignment(
            id=row["id"],
            member_id=row["member_id"],
            league_id=row["league_id"],
            participant_id=row["participant_id"],
            catalog_player_id=row["catalog_player_id"],
            cost=row["cost"],
            assigned_at=row["assigned_at"],
        )
