import logging
import secrets
import sqlite3
import string
from dataclasses import replace

from fantasy_draft_ledger.db.transaction import atomic
from fantasy_draft_ledger.domain.league import GameMode, League, LeagueStatus, MemberRole, Membership
from fantasy_draft_ledger.exceptions import ConflictError, NotFoundError, ValidationError
from fantasy_draft_ledger.repos.protocols import LeagueRepo, MembershipRepo
from fantasy_draft_ledger.services.budget_ledger import BudgetLedger, validate_role_caps
from fantasy_draft_ledger.services.league_guard import LeagueGuard
from fantasy_draft_ledger.services.league_reset import LeagueReset, ResetCounts

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 6
_CODE_ATTEMPTS = 20

BUDGET_RANGE = (100, 2000)
MAX_PLAYERS_RANGE = (11, 50)
MAX_MEMBERS_RANGE = (2, 50)
MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500


def generate_code() -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


def _check_range(label: str, value: int, bounds: tuple[int, int]) -> None:
    low, high = bounds
    if not low <= value <= high:
        raise ValidationError(f"{label} must be between {low} and {high}, got {value}")


def validate_league(league: League) -> None:
    """Range checks shared by create and update."""
    if not league.name.strip():
        raise ValidationError("league name must not be empty")
    if len(league.name) > MAX_NAME_LENGTH:
        raise ValidationError(f"league name longer than {MAX_NAME_LENGTH} characters")
    if league.description is not None and len(league.description) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(f"description longer than {MAX_DESCRIPTION_LENGTH} characters")
    _check_range("total budget", league.total_budget, BUDGET_RANGE)
    _check_range("max players per team", league.max_players_per_team, MAX_PLAYERS_RANGE)
    _check_range("max members", league.max_members, MAX_MEMBERS_RANGE)
    validate_role_caps(league.role_caps, league.max_players_per_team, league.game_mode)


class LeagueService:
    """League lifecycle: creation, membership and master-only administration."""

    def __init__(
        self,
        conn: sqlite3.Connection,
        guard: LeagueGuard,
        league_repo: LeagueRepo,
        membership_repo: MembershipRepo,
        reset: LeagueReset,
        budget: BudgetLedger,
    ) -> None:
        self._conn = conn
        self._guard = guard
        self._league_repo = league_repo
        self._membership_repo = membership_repo
        self._reset = reset
        self._budget = budget

    def create_league(
        self,
        owner_id: int,
        name: str,
        game_mode: GameMode,
        total_budget: int,
        max_players_per_team: int,
        max_members: int,
        *,
        allow_negative_budget: bool = False,
        role_caps: dict[str, int] | None = None,
        description: str | None = None,
        team_name: str = "My Team",
    ) -> League:
        league = League(
            name=name.strip(),
            code="",
            owner_id=owner_id,
            game_mode=game_mode,
            total_budget=total_budget,
            max_players_per_team=max_players_per_team,
            max_members=max_members,
            allow_negative_budget=allow_negative_budget,
            role_caps=dict(role_caps or {}),
            description=description,
        )
        validate_league(league)
        with atomic(self._conn):
            league = replace(league, code=self._unique_code())
            league_id = self._league_repo.insert(league)
            self._membership_repo.insert(
                Membership(league_id=league_id, user_id=owner_id, role=MemberRole.MASTER, team_name=team_name)
            )
        logger.info("User %d created league %d (%s, %s)", owner_id, league_id, league.name, game_mode)
        return self._guard.league(league_id)

    def join_league(self, user_id: int, code: str, team_name: str | None = None) -> Membership:
        with atomic(self._conn):
            league = self._league_repo.get_by_code(code.strip().upper())
            if league is None or league.status is not LeagueStatus.ACTIVE:
                raise NotFoundError("league code", code)
            assert league.id is not None
            if self._membership_repo.get(league.id, user_id) is not None:
                raise ConflictError(f"user {user_id} is already a member of league {league.id}")
            if self._membership_repo.count(league.id) >= league.max_members:
                raise ConflictError(f"league {league.id} is full ({league.max_members} members)")
            self._membership_repo.insert(
                Membership(
                    league_id=league.id,
                    user_id=user_id,
                    role=MemberRole.MEMBER,
                    team_name=team_name or "My Team",
                )
            )
            membership = self._membership_repo.get(league.id, user_id)
        assert membership is not None
        logger.info("User %d joined league %d", user_id, league.id)
        return membership

    def leave_league(self, user_id: int, league_id: int) -> ResetCounts:
        with atomic(self._conn):
            _, membership = self._guard.require_member(user_id, league_id)
            if membership.is_master:
                raise ConflictError("the league owner cannot leave the league")
            counts = self._reset.purge(league_id, user_id)
            self._membership_repo.delete(league_id, user_id)
        logger.info("User %d left league %d", user_id, league_id)
        return counts

    def update_league_settings(
        self,
        user_id: int,
        league_id: int,
        *,
        name: str | None = None,
        total_budget: int | None = None,
        max_players_per_team: int | None = None,
        max_members: int | None = None,
        allow_negative_budget: bool | None = None,
        role_caps: dict[str, int] | None = None,
        description: str | None = None,
        status: LeagueStatus | None = None,
    ) -> League:
        with atomic(self._conn):
            league, _ = self._guard.require_master(user_id, league_id)
            updated = replace(
                league,
                name=name.strip() if name is not None else league.name,
                total_budget=total_budget if total_budget is not None else league.total_budget,
                max_players_per_team=(
                    max_players_per_team if max_players_per_team is not None else league.max_players_per_team
                ),
                max_members=max_members if max_members is not None else league.max_members,
                allow_negative_budget=(
                    allow_negative_budget if allow_negative_budget is not None else league.allow_negative_budget
                ),
                role_caps=dict(role_caps) if role_caps is not None else league.role_caps,
                description=description if description is not None else league.description,
                status=status if status is not None else league.status,
            )
            validate_league(updated)
            if updated.max_members < self._membership_repo.count(league_id):
                raise ValidationError("max members is below the current member count")
            # Limits may not drop below what any member already owns or spent.
            for membership in self._membership_repo.list_by_league(league_id):
                self._budget.check_limits(updated, membership.user_id)
            self._league_repo.update_settings(updated)
        logger.info("User %d updated settings of league %d", user_id, league_id)
        return self._guard.league(league_id)

    def close_league(self, user_id: int, league_id: int) -> League:
        return self.update_league_settings(user_id, league_id, status=LeagueStatus.CLOSED)

    def remove_member(self, user_id: int, league_id: int, member_user_id: int) -> ResetCounts:
        with atomic(self._conn):
            self._guard.require_master(user_id, league_id)
            if member_user_id == user_id:
                raise ConflictError("the master cannot remove themselves")
            if self._membership_repo.get(league_id, member_user_id) is None:
                raise NotFoundError("member", member_user_id)
            counts = self._reset.purge(league_id, member_user_id)
            self._membership_repo.delete(league_id, member_user_id)
        logger.info("User %d removed user %d from league %d", user_id, member_user_id, league_id)
        return counts

    def reset_member(self, user_id: int, league_id: int) -> ResetCounts:
        """Wipe the caller's own draft data in the league; membership stays."""
        with atomic(self._conn):
            self._guard.require_member(user_id, league_id)
            return self._reset.purge(league_id, user_id)

    def delete_league(self, user_id: int, league_id: int) -> ResetCounts:
        with atomic(self._conn):
            self._guard.require_master(user_id, league_id)
            counts = self._reset.purge(league_id)
            self._league_repo.delete(league_id)
        logger.info("User %d deleted league %d", user_id, league_id)
        return counts

    def get_league(self, user_id: int, league_id: int) -> League:
        league, _ = self._guard.require_member(user_id, league_id)
        return league

    def list_leagues(self, user_id: int) -> list[League]:
        return self._league_repo.list_for_user(user_id)

    def list_members(self, user_id: int, league_id: int) -> list[Membership]:
        self._guard.require_member(user_id, league_id)
        return self._membership_repo.list_by_league(league_id)

    def _unique_code(self) -> str:
        for _ in range(_CODE_ATTEMPTS):
            code = generate_code()
            if not self._league_repo.code_exists(code):
                return code
        raise ConflictError("could not generate a unique league code")
