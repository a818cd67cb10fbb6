from dataclasses import dataclass, replace
from enum import StrEnum

from fantasy_draft_ledger.domain.player import CatalogPlayer
from fantasy_draft_ledger.domain.roles import Role
from fantasy_draft_ledger.domain.tier import Tier
from fantasy_draft_ledger.exceptions import InvalidTransitionError, ValidationError

MAX_NOTE_LENGTH = 500


class DraftStatus(StrEnum):
    AVAILABLE = "available"
    INTERESTING = "interesting"
    OWNED = "owned"
    REMOVED = "removed"
    TAKEN_BY_OTHER = "taken_by_other"


_ACQUIRED_STATUSES = frozenset({DraftStatus.OWNED, DraftStatus.TAKEN_BY_OTHER})


@dataclass(frozen=True)
class DraftState:
    """A member's view of one catalog player within one league.

    Field combinations are checked on construction, so a state such as
    ``removed`` with a cost attached cannot exist.
    """

    member_id: int
    league_id: int
    catalog_player_id: int
    status: DraftStatus = DraftStatus.AVAILABLE
    expected_price: float | None = None
    cost: float | None = None
    buyer: str | None = None
    buyer_cost: float | None = None
    note: str | None = None
    tier: Tier | None = None
    acquired_at: str | None = None
    removed_at: str | None = None
    customized: bool = False
    version: int = 0
    id: int | None = None
    updated_at: str | None = None

    def __post_init__(self) -> None:
        owned = self.status is DraftStatus.OWNED
        taken = self.status is DraftStatus.TAKEN_BY_OTHER
        if owned != (self.cost is not None):
            raise ValueError(f"cost must be set exactly when owned (status={self.status})")
        if owned and self.cost is not None and self.cost <= 0:
            raise ValueError("owned cost must be positive")
        if taken != (self.buyer is not None):
            raise ValueError(f"buyer must be set exactly when taken_by_other (status={self.status})")
        if self.buyer_cost is not None and not taken:
            raise ValueError("buyer cost is only kept for taken_by_other")
        if (self.status in _ACQUIRED_STATUSES) != (self.acquired_at is not None):
            raise ValueError(f"acquired_at inconsistent with status {self.status}")
        if (self.status is DraftStatus.REMOVED) != (self.removed_at is not None):
            raise ValueError(f"removed_at inconsistent with status {self.status}")

    @property
    def is_owned(self) -> bool:
        return self.status is DraftStatus.OWNED

    @property
    def interesting(self) -> bool:
        return self.status is DraftStatus.INTERESTING


@dataclass(frozen=True)
class TransitionRequest:
    status: DraftStatus
    cost: float | None = None
    buyer: str | None = None
    buyer_cost: float | None = None
    expected_price: float | None = None
    note: str | None = None


def _validate_fields(request: TransitionRequest) -> None:
    if request.expected_price is not None and request.expected_price < 0:
        raise ValidationError("expected price must not be negative")
    if request.buyer_cost is not None and request.buyer_cost < 0:
        raise ValidationError("buyer cost must not be negative")
    if request.note is not None and len(request.note) > MAX_NOTE_LENGTH:
        raise ValidationError(f"note longer than {MAX_NOTE_LENGTH} characters")


def apply_transition(state: DraftState, request: TransitionRequest, now: str) -> DraftState:
    """Return the state produced by ``request``; budget and roster checks live in the ledger."""
    _validate_fields(request)
    expected_price = request.expected_price if request.expected_price is not None else state.expected_price
    note = request.note if request.note is not None else state.note
    base = replace(
        state,
        expected_price=expected_price,
        note=note,
        customized=True,
    )

    match request.status:
        case DraftStatus.OWNED:
            if request.cost is None or request.cost <= 0:
                raise InvalidTransitionError("owned requires a positive cost")
            acquired_at = state.acquired_at if state.is_owned and state.acquired_at else now
            return replace(
                base,
                status=DraftStatus.OWNED,
                cost=request.cost,
                buyer=None,
                buyer_cost=None,
                acquired_at=acquired_at,
                removed_at=None,
            )
        case DraftStatus.TAKEN_BY_OTHER:
            buyer = (request.buyer or "").strip()
            if not buyer:
                raise InvalidTransitionError("taken_by_other requires a buyer name")
            return replace(
                base,
                status=DraftStatus.TAKEN_BY_OTHER,
                cost=None,
                buyer=buyer,
                buyer_cost=request.buyer_cost,
                acquired_at=now,
                removed_at=None,
            )
        case DraftStatus.REMOVED:
            return replace(
                base,
                status=DraftStatus.REMOVED,
                cost=None,
                buyer=None,
                buyer_cost=None,
                acquired_at=None,
                removed_at=now,
            )
        case DraftStatus.AVAILABLE | DraftStatus.INTERESTING:
            return replace(
                base,
                status=request.status,
                cost=None,
                buyer=None,
                buyer_cost=None,
                acquired_at=None,
                removed_at=None,
            )


def reset_state(state: DraftState) -> DraftState:
    """Back to ``available`` with price and note cleared. The tier is kept."""
    return replace(
        state,
        status=DraftStatus.AVAILABLE,
        expected_price=None,
        cost=None,
        buyer=None,
        buyer_cost=None,
        note=None,
        acquired_at=None,
        removed_at=None,
        customized=False,
    )


@dataclass(frozen=True)
class DraftBoardEntry:
    """A catalog player joined with one member's state and rival bookkeeping."""

    player: CatalogPlayer
    state: DraftState
    participant_name: str | None = None
    participant_cost: float | None = None
    roles: tuple[Role, ...] = ()
