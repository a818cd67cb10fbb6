class LedgerException(Exception):
    """Base class for every recoverable engine error."""

    kind: str = "LedgerError"


class NotAMemberError(LedgerException):
    kind = "NotAMember"

    def __init__(self, user_id: int, league_id: int) -> None:
        self.user_id = user_id
        self.league_id = league_id
        super().__init__(f"User {user_id} is not a member of league {league_id}")


class NotMasterError(LedgerException):
    kind = "NotMaster"

    def __init__(self, user_id: int, league_id: int) -> None:
        self.user_id = user_id
        self.league_id = league_id
        super().__init__(f"User {user_id} is not the master of league {league_id}")


class NotFoundError(LedgerException):
    kind = "NotFound"

    def __init__(self, entity: str, key: object) -> None:
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} not found: {key}")


class ConflictError(LedgerException):
    kind = "Conflict"


class BudgetExceededError(LedgerException):
    kind = "BudgetExceeded"

    def __init__(self, total: int, spent: float, requested: float) -> None:
        self.total = total
        self.spent = spent
        self.requested = requested
        super().__init__(
            f"Budget exceeded: spending {requested:g} with {spent:g} of {total} already spent "
            f"leaves {total - spent - requested:g}"
        )


class RosterLimitExceededError(LedgerException):
    kind = "RosterLimitExceeded"

    def __init__(self, limit: int, role: str | None = None) -> None:
        self.limit = limit
        self.role = role
        if role is None:
            super().__init__(f"Roster limit exceeded: at most {limit} players")
        else:
            super().__init__(f"Roster limit exceeded: at most {limit} players with role {role}")


class InvalidTransitionError(LedgerException):
    kind = "InvalidTransition"


class AssignmentError(InvalidTransitionError):
    """A lineup placement that violates role compatibility or ownership."""


class ValidationError(LedgerException):
    kind = "ValidationError"
