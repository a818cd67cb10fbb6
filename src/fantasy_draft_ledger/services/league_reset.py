import logging
import sqlite3
from dataclasses import dataclass

from fantasy_draft_ledger.db.transaction import atomic
from fantasy_draft_ledger.repos.catalog_repo import SqliteCatalogRepo
from fantasy_draft_ledger.repos.draft_state_repo import SqliteDraftStateRepo
from fantasy_draft_ledger.repos.lineup_repo import SqliteLineupRepo
from fantasy_draft_ledger.repos.participant_repo import SqliteAssignmentRepo, SqliteParticipantRepo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResetCounts:
    assignments: int
    draft_states: int
    participants: int
    lineups: int
    catalog_links: int
    orphans: int


class LeagueReset:
    """Deletes private draft data in dependency order inside one transaction.

    Order: participant assignments, draft states, participants, lineups, then
    (for a whole-league purge) the league's catalog links, then catalog
    players no league links to any more.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        catalog_repo: SqliteCatalogRepo,
        draft_repo: SqliteDraftStateRepo,
        participant_repo: SqliteParticipantRepo,
        assignment_repo: SqliteAssignmentRepo,
        lineup_repo: SqliteLineupRepo,
    ) -> None:
        self._conn = conn
        self._catalog_repo = catalog_repo
        self._draft_repo = draft_repo
        self._participant_repo = participant_repo
        self._assignment_repo = assignment_repo
        self._lineup_repo = lineup_repo

    def purge(self, league_id: int, member_id: int | None = None) -> ResetCounts:
        """Purge one member's data, or every member's when ``member_id`` is None."""
        with atomic(self._conn):
            assignments = self._assignment_repo.delete_scope(league_id, member_id)
            draft_states = self._draft_repo.delete_scope(league_id, member_id)
            participants = self._participant_repo.delete_scope(league_id, member_id)
            lineups = self._lineup_repo.delete_scope(league_id, member_id)
            catalog_links = 0
            if member_id is None:
                catalog_links = self._catalog_repo.unlink_league(league_id)
            orphans = self._catalog_repo.delete_orphans()
        counts = ResetCounts(
            assignments=assignments,
            draft_states=draft_states,
            participants=participants,
            lineups=lineups,
            catalog_links=catalog_links,
            orphans=orphans,
        )
        scope = "all members" if member_id is None else f"member {member_id}"
        logger.info("Purged league %d for %s: %s", league_id, scope, counts)
        return counts
