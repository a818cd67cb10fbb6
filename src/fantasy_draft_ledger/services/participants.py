import logging
import sqlite3

from fantasy_draft_ledger.db.transaction import atomic
from fantasy_draft_ledger.domain.budget import ParticipantSummary
from fantasy_draft_ledger.domain.league import League
from fantasy_draft_ledger.domain.participant import Participant, ParticipantAssignment
from fantasy_draft_ledger.domain.player import CatalogPlayer
from fantasy_draft_ledger.exceptions import (
    BudgetExceededError,
    ConflictError,
    NotFoundError,
    RosterLimitExceededError,
    ValidationError,
)
from fantasy_draft_ledger.repos.participant_repo import SqliteAssignmentRepo, SqliteParticipantRepo
from fantasy_draft_ledger.repos.protocols import CatalogRepo
from fantasy_draft_ledger.services.league_guard import LeagueGuard

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 100


def _clean_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise ValidationError("participant name must not be empty")
    if len(cleaned) > MAX_NAME_LENGTH:
        raise ValidationError(f"participant name longer than {MAX_NAME_LENGTH} characters")
    return cleaned


class ParticipantService:
    """A member's private bookkeeping of rival drafters and what they bought."""

    def __init__(
        self,
        conn: sqlite3.Connection,
        guard: LeagueGuard,
        catalog_repo: CatalogRepo,
        participant_repo: SqliteParticipantRepo,
        assignment_repo: SqliteAssignmentRepo,
    ) -> None:
        self._conn = conn
        self._guard = guard
        self._catalog_repo = catalog_repo
        self._participant_repo = participant_repo
        self._assignment_repo = assignment_repo

    def create_participant(self, user_id: int, league_id: int, name: str, budget: int | None = None) -> Participant:
        with atomic(self._conn):
            league, _ = self._guard.require_member(user_id, league_id)
            if budget is None:
                budget = league.total_budget
            if budget < 0:
                raise ValidationError("participant budget must not be negative")
            participant = Participant(member_id=user_id, league_id=league_id, name=_clean_name(name), budget=budget)
            participant_id = self._participant_repo.insert(participant)
        logger.debug("User %d added participant %r in league %d", user_id, participant.name, league_id)
        return self._require_participant(user_id, league_id, participant_id)

    def rename_participant(self, user_id: int, league_id: int, participant_id: int, name: str) -> Participant:
        with atomic(self._conn):
            self._guard.require_member(user_id, league_id)
            self._require_participant(user_id, league_id, participant_id)
            self._participant_repo.rename(participant_id, _clean_name(name))
        return self._require_participant(user_id, league_id, participant_id)

    def delete_participant(self, user_id: int, league_id: int, participant_id: int) -> None:
        with atomic(self._conn):
            self._guard.require_member(user_id, league_id)
            self._require_participant(user_id, league_id, participant_id)
            self._participant_repo.delete(participant_id)

    def list_participants(self, user_id: int, league_id: int) -> list[ParticipantSummary]:
        self._guard.require_member(user_id, league_id)
        return self._participant_repo.summaries(user_id, league_id)

    def list_participant_players(
        self, user_id: int, league_id: int, participant_id: int
    ) -> list[tuple[ParticipantAssignment, CatalogPlayer]]:
        self._guard.require_member(user_id, league_id)
        self._require_participant(user_id, league_id, participant_id)
        assignments = self._assignment_repo.list_for_participant(participant_id)
        players = {p.id: p for p in self._catalog_repo.get_by_ids([a.catalog_player_id for a in assignments])}
        return [(a, players[a.catalog_player_id]) for a in assignments if a.catalog_player_id in players]

    def assign_player(
        self, user_id: int, league_id: int, participant_id: int, player_id: int, cost: float = 0.0
    ) -> ParticipantAssignment:
        if cost < 0:
            raise ValidationError("assignment cost must not be negative")
        with atomic(self._conn):
            league, _ = self._guard.require_member(user_id, league_id)
            participant = self._require_participant(user_id, league_id, participant_id)
            self._require_league_player(league, player_id)

            existing = self._assignment_repo.get_for_player(user_id, league_id, player_id)
            if existing is not None:
                raise ConflictError(f"player {player_id} is already assigned to a participant")

            spent, count = self._assignment_repo.totals(participant_id)
            if count + 1 > league.max_players_per_team:
                raise RosterLimitExceededError(league.max_players_per_team)
            if not league.allow_negative_budget and spent + cost > participant.budget:
                raise BudgetExceededError(participant.budget, spent, cost)

            assignment = ParticipantAssignment(
                member_id=user_id,
                league_id=league_id,
                participant_id=participant_id,
                catalog_player_id=player_id,
                cost=cost,
            )
            assignment_id = self._assignment_repo.insert(assignment)
        logger.debug("User %d assigned player %d to participant %d for %g", user_id, player_id, participant_id, cost)
        return ParticipantAssignment(
            id=assignment_id,
            member_id=user_id,
            league_id=league_id,
            participant_id=participant_id,
            catalog_player_id=player_id,
            cost=cost,
        )

    def unassign_player(self, user_id: int, league_id: int, participant_id: int, player_id: int) -> None:
        with atomic(self._conn):
            self._guard.require_member(user_id, league_id)
            self._require_participant(user_id, league_id, participant_id)
            if not self._assignment_repo.delete(participant_id, player_id):
                raise NotFoundError("assignment", f"player {player_id}")

    def _require_participant(self, user_id: int, league_id: int, participant_id: int) -> Participant:
        participant = self._participant_repo.get(user_id, league_id, participant_id)
        if participant is None:
            raise NotFoundError("participant", participant_id)
        return participant

    def _require_league_player(self, league: League, player_id: int) -> None:
        assert league.id is not None
        if not self._catalog_repo.in_league(league.id, player_id):
            raise NotFoundError("player", player_id)
