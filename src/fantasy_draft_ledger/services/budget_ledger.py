import logging

from fantasy_draft_ledger.domain.budget import BudgetSummary
from fantasy_draft_ledger.domain.draft_state import DraftState
from fantasy_draft_ledger.domain.league import GameMode, League
from fantasy_draft_ledger.domain.player import CatalogPlayer
from fantasy_draft_ledger.domain.roles import known_roles, role_buckets, vocabulary
from fantasy_draft_ledger.exceptions import BudgetExceededError, RosterLimitExceededError, ValidationError
from fantasy_draft_ledger.repos.protocols import DraftStateRepo

logger = logging.getLogger(__name__)


def player_buckets(player: CatalogPlayer, game_mode: GameMode) -> tuple[str, ...]:
    roles = known_roles(player.roles, game_mode)
    if not roles:
        return ()
    return role_buckets(roles, game_mode)


def role_distribution(players: list[CatalogPlayer], game_mode: GameMode) -> dict[str, int]:
    distribution = {str(role): 0 for role in vocabulary(game_mode)}
    for player in players:
        for bucket in player_buckets(player, game_mode):
            distribution[bucket] += 1
    return distribution


def validate_role_caps(role_caps: dict[str, int], max_players: int, game_mode: GameMode) -> None:
    """Configuration-time check: caps name real Classic roles and fit the roster."""
    if not role_caps:
        return
    if game_mode is not GameMode.CLASSIC:
        raise ValidationError("role caps apply to Classic leagues only")
    known = {str(role) for role in vocabulary(GameMode.CLASSIC)}
    unknown = set(role_caps) - known
    if unknown:
        raise ValidationError(f"unknown roles in caps: {', '.join(sorted(unknown))}")
    if any(cap < 0 for cap in role_caps.values()):
        raise ValidationError("role caps must not be negative")
    total = sum(role_caps.values())
    if total > max_players:
        raise ValidationError(f"role caps add up to {total}, more than max players per team ({max_players})")


class BudgetLedger:
    """Budget and roster figures derived from owned draft states at read time."""

    def __init__(self, draft_repo: DraftStateRepo) -> None:
        self._draft_repo = draft_repo

    def summary(self, league: League, member_id: int) -> BudgetSummary:
        assert league.id is not None
        owned = self._draft_repo.list_owned(member_id, league.id)
        spent = self._draft_repo.spent(member_id, league.id)
        return BudgetSummary(
            total=league.total_budget,
            spent=spent,
            remaining=league.total_budget - spent,
            owned_count=len(owned),
            max_players=league.max_players_per_team,
            role_distribution=role_distribution([player for _, player in owned], league.game_mode),
            role_caps=dict(league.role_caps),
        )

    def check_purchase(self, league: League, member_id: int, player: CatalogPlayer, cost: float) -> None:
        """Raise if owning ``player`` at ``cost`` would break a roster or budget rule.

        A player already owned is replaced in the totals, so editing the cost of
        an owned player is checked against the other owned players only.
        """
        assert league.id is not None
        others: list[tuple[DraftState, CatalogPlayer]] = [
            (state, owned)
            for state, owned in self._draft_repo.list_owned(member_id, league.id)
            if owned.id != player.id
        ]
        if len(others) + 1 > league.max_players_per_team:
            raise RosterLimitExceededError(league.max_players_per_team)

        if league.game_mode is GameMode.CLASSIC and league.role_caps:
            for bucket in player_buckets(player, league.game_mode):
                cap = league.role_caps.get(bucket)
                if cap is None:
                    continue
                count = sum(1 for _, owned in others if bucket in player_buckets(owned, league.game_mode))
                if count + 1 > cap:
                    raise RosterLimitExceededError(cap, bucket)

        spent = sum(state.cost or 0.0 for state, _ in others)
        if not league.allow_negative_budget and spent + cost > league.total_budget:
            logger.debug(
                "Purchase of player %s at %g rejected: %g of %d spent", player.id, cost, spent, league.total_budget
            )
            raise BudgetExceededError(league.total_budget, spent, cost)

    def check_limits(self, league: League, member_id: int) -> None:
        """Raise if ``member_id``'s current roster does not fit ``league``'s settings.

        Used before league settings change, so limits are never lowered below
        what a member already owns or has spent.
        """
        summary = self.summary(league, member_id)
        if summary.owned_count > league.max_players_per_team:
            raise ValidationError(
                f"user {member_id} owns {summary.owned_count} players, "
                f"more than max players per team ({league.max_players_per_team})"
            )
        if league.game_mode is GameMode.CLASSIC:
            for bucket, cap in league.role_caps.items():
                count = summary.role_distribution.get(bucket, 0)
                if count > cap:
                    raise ValidationError(f"user {member_id} owns {count} players with role {bucket}, cap is {cap}")
        if not league.allow_negative_budget and summary.spent > league.total_budget:
            raise ValidationError(
                f"user {member_id} has spent {summary.spent:g}, more than the total budget ({league.total_budget})"
            )
