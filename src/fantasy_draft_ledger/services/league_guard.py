import logging

from fantasy_draft_ledger.domain.league import League, Membership
from fantasy_draft_ledger.exceptions import NotAMemberError, NotFoundError, NotMasterError
from fantasy_draft_ledger.repos.protocols import LeagueRepo, MembershipRepo

logger = logging.getLogger(__name__)


class LeagueGuard:
    """Resolves the caller's membership before any league-scoped operation.

    Holds no state of its own; every check reads the membership rows.
    """

    def __init__(self, league_repo: LeagueRepo, membership_repo: MembershipRepo) -> None:
        self._league_repo = league_repo
        self._membership_repo = membership_repo

    def league(self, league_id: int) -> League:
        league = self._league_repo.get_by_id(league_id)
        if league is None:
            raise NotFoundError("league", league_id)
        return league

    def require_member(self, user_id: int, league_id: int) -> tuple[League, Membership]:
        league = self.league(league_id)
        membership = self._membership_repo.get(league_id, user_id)
        if membership is None:
            logger.debug("Rejected user %d: not a member of league %d", user_id, league_id)
            raise NotAMemberError(user_id, league_id)
        return league, membership

    def require_master(self, user_id: int, league_id: int) -> tuple[League, Membership]:
        league, membership = self.require_member(user_id, league_id)
        if not membership.is_master:
            logger.debug("Rejected user %d: not master of league %d", user_id, league_id)
            raise NotMasterError(user_id, league_id)
        return league, membership
