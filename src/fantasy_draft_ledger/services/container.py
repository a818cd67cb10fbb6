"""Wires repositories and services onto one SQLite connection."""

import functools
import sqlite3

from fantasy_draft_ledger.config import LedgerSettings
from fantasy_draft_ledger.repos.catalog_repo import SqliteCatalogRepo
from fantasy_draft_ledger.repos.draft_state_repo import SqliteDraftStateRepo
from fantasy_draft_ledger.repos.league_repo import SqliteLeagueRepo, SqliteMembershipRepo
from fantasy_draft_ledger.repos.lineup_repo import SqliteLineupRepo
from fantasy_draft_ledger.repos.participant_repo import SqliteAssignmentRepo, SqliteParticipantRepo
from fantasy_draft_ledger.services.budget_ledger import BudgetLedger
from fantasy_draft_ledger.services.catalog_import import CatalogImporter
from fantasy_draft_ledger.services.draft_ledger import Clock, DraftLedger, utc_now
from fantasy_draft_ledger.services.league_guard import LeagueGuard
from fantasy_draft_ledger.services.league_reset import LeagueReset
from fantasy_draft_ledger.services.league_service import LeagueService
from fantasy_draft_ledger.services.lineups import LineupService
from fantasy_draft_ledger.services.participants import ParticipantService


class LedgerContainer:
    """Lazily-built services sharing one connection.

    A container must stay on the thread that owns its connection; worker
    threads each build their own from a pooled connection.
    """

    def __init__(self, conn: sqlite3.Connection, settings: LedgerSettings, *, clock: Clock = utc_now) -> None:
        self._conn = conn
        self._settings = settings
        self._clock = clock

    @property
    def conn(self) -> sqlite3.Connection:
        return self._conn

    @property
    def settings(self) -> LedgerSettings:
        return self._settings

    @functools.cached_property
    def league_repo(self) -> SqliteLeagueRepo:
        return SqliteLeagueRepo(self._conn)

    @functools.cached_property
    def membership_repo(self) -> SqliteMembershipRepo:
        return SqliteMembershipRepo(self._conn)

    @functools.cached_property
    def catalog_repo(self) -> SqliteCatalogRepo:
        return SqliteCatalogRepo(self._conn)

    @functools.cached_property
    def draft_repo(self) -> SqliteDraftStateRepo:
        return SqliteDraftStateRepo(self._conn)

    @functools.cached_property
    def participant_repo(self) -> SqliteParticipantRepo:
        return SqliteParticipantRepo(self._conn)

    @functools.cached_property
    def assignment_repo(self) -> SqliteAssignmentRepo:
        return SqliteAssignmentRepo(self._conn)

    @functools.cached_property
    def lineup_repo(self) -> SqliteLineupRepo:
        return SqliteLineupRepo(self._conn)

    @functools.cached_property
    def guard(self) -> LeagueGuard:
        return LeagueGuard(self.league_repo, self.membership_repo)

    @functools.cached_property
    def budget(self) -> BudgetLedger:
        return BudgetLedger(self.draft_repo)

    @functools.cached_property
    def reset(self) -> LeagueReset:
        return LeagueReset(
            self._conn,
            self.catalog_repo,
            self.draft_repo,
            self.participant_repo,
            self.assignment_repo,
            self.lineup_repo,
        )

    @functools.cached_property
    def leagues(self) -> LeagueService:
        return LeagueService(
            self._conn, self.guard, self.league_repo, self.membership_repo, self.reset, self.budget
        )

    @functools.cached_property
    def draft(self) -> DraftLedger:
        return DraftLedger(self._conn, self.guard, self.catalog_repo, self.draft_repo, self.budget, clock=self._clock)

    @functools.cached_property
    def importer(self) -> CatalogImporter:
        return CatalogImporter(
            self._conn,
            self.guard,
            self.catalog_repo,
            self.draft_repo,
            season=self._settings.season,
            chunk_size=self._settings.chunk_size,
            clock=self._clock,
        )

    @functools.cached_property
    def participants(self) -> ParticipantService:
        return ParticipantService(
            self._conn, self.guard, self.catalog_repo, self.participant_repo, self.assignment_repo
        )

    @functools.cached_property
    def lineups(self) -> LineupService:
        return LineupService(self._conn, self.guard, self.draft_repo, self.lineup_repo)
