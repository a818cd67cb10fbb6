import logging
import sqlite3
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from typing import Any

from fantasy_draft_ledger.db.transaction import atomic
from fantasy_draft_ledger.domain.draft_state import DraftState, DraftStatus
from fantasy_draft_ledger.domain.errors import Err, Ok, RowError
from fantasy_draft_ledger.domain.league import League
from fantasy_draft_ledger.domain.player import CatalogPlayer, CatalogRow
from fantasy_draft_ledger.domain.tier import ImportMode, Tier, TierAssignment
from fantasy_draft_ledger.exceptions import LedgerException, ValidationError
from fantasy_draft_ledger.ingest.catalog_rows import row_to_catalog_row
from fantasy_draft_ledger.repos.protocols import CatalogRepo, DraftStateRepo
from fantasy_draft_ledger.services.draft_ledger import Clock, utc_now
from fantasy_draft_ledger.services.league_guard import LeagueGuard
from fantasy_draft_ledger.services.tiering import classify_batch

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 200


@dataclass(frozen=True)
class RowClassification:
    row_index: int
    player_name: str
    tier: Tier | None
    removed: bool


@dataclass
class ImportReport:
    created: int = 0
    updated: int = 0
    skipped: int = 0
    preserved: int = 0
    chunks_committed: int = 0
    classifications: list[RowClassification] = field(default_factory=list)
    errors: list[RowError] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return self.created + self.updated


class CatalogImporter:
    """Bulk import: row mapping, tiering, catalog upsert and initial draft states.

    Rows are committed in chunks, one write transaction per chunk and one
    savepoint per row, so a bad row is reported and skipped without undoing
    the rest of its chunk, and a failure in a later chunk leaves earlier
    chunks committed.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        guard: LeagueGuard,
        catalog_repo: CatalogRepo,
        draft_repo: DraftStateRepo,
        *,
        season: str,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        clock: Clock = utc_now,
    ) -> None:
        if chunk_size < 1:
            raise ValidationError("chunk size must be at least 1")
        self._conn = conn
        self._guard = guard
        self._catalog_repo = catalog_repo
        self._draft_repo = draft_repo
        self._season = season
        self._chunk_size = chunk_size
        self._clock = clock

    def import_catalog_batch(
        self,
        user_id: int,
        league_id: int,
        rows: Sequence[dict[str, Any]],
        mode: ImportMode,
    ) -> ImportReport:
        league, _ = self._guard.require_member(user_id, league_id)
        report = ImportReport()

        valid: list[tuple[int, CatalogRow]] = []
        for index, raw in enumerate(rows):
            match row_to_catalog_row(raw, index, league.game_mode):
                case Ok(row):
                    valid.append((index, row))
                case Err(error):
                    report.errors.append(error)
                    report.skipped += 1

        assignments = classify_batch([row for _, row in valid], mode, league.game_mode)
        logger.info(
            "Importing %d rows (%d invalid) into league %d for user %d, mode %s",
            len(valid),
            report.skipped,
            league_id,
            user_id,
            mode,
        )

        work = list(zip(valid, assignments, strict=True))
        for start in range(0, len(work), self._chunk_size):
            chunk = work[start : start + self._chunk_size]
            with atomic(self._conn):
                for (index, row), assignment in chunk:
                    self._import_row(league, user_id, index, row, assignment, report)
            report.chunks_committed += 1

        logger.info(
            "Import into league %d done: %d created, %d updated, %d preserved, %d skipped",
            league_id,
            report.created,
            report.updated,
            report.preserved,
            report.skipped,
        )
        return report

    def _import_row(
        self,
        league: League,
        member_id: int,
        index: int,
        row: CatalogRow,
        assignment: TierAssignment,
        report: ImportReport,
    ) -> None:
        assert league.id is not None
        try:
            with atomic(self._conn):
                player_id, created = self._catalog_repo.upsert(
                    CatalogPlayer(
                        name=row.name,
                        team=row.team,
                        roles=row.roles,
                        season=self._season,
                        price=row.price,
                        value=row.value,
                    )
                )
                self._catalog_repo.link_to_league(league.id, player_id)
                current = self._draft_repo.get(member_id, league.id, player_id)
                if current is not None and current.customized:
                    report.preserved += 1
                else:
                    self._draft_repo.save(self._initial_state(league, member_id, player_id, row, assignment, current))
        except (LedgerException, sqlite3.IntegrityError) as e:
            logger.debug("Row %d (%s) failed: %s", index, row.name, e)
            report.errors.append(RowError(message=str(e), row_index=index, player_name=row.name))
            report.skipped += 1
            return

        if created:
            report.created += 1
        else:
            report.updated += 1
        report.classifications.append(
            RowClassification(row_index=index, player_name=row.name, tier=assignment.tier, removed=assignment.removed)
        )

    def _initial_state(
        self,
        league: League,
        member_id: int,
        player_id: int,
        row: CatalogRow,
        assignment: TierAssignment,
        current: DraftState | None,
    ) -> DraftState:
        assert league.id is not None
        base = current or DraftState(member_id=member_id, league_id=league.id, catalog_player_id=player_id)
        if assignment.removed:
            return replace(
                base,
                status=DraftStatus.REMOVED,
                expected_price=row.price,
                cost=None,
                buyer=None,
                buyer_cost=None,
                tier=None,
                acquired_at=None,
                removed_at=self._clock().isoformat(),
                customized=False,
            )
        return replace(
            base,
            status=DraftStatus.AVAILABLE,
            expected_price=row.price,
            cost=None,
            buyer=None,
            buyer_cost=None,
            tier=assignment.tier,
            acquired_at=None,
            removed_at=None,
            customized=False,
        )
