from dataclasses import dataclass


@dataclass(frozen=True)
class LedgerError:
    message: str


@dataclass(frozen=True)
class RowError(LedgerError):
    """An import row that was skipped. ``row_index`` is zero-based."""

    row_index: int
    player_name: str = ""


@dataclass(frozen=True, slots=True)
class Ok[T]:
    value: T


@dataclass(frozen=True, slots=True)
class Err[E]:
    error: E


type Result[T, E] = Ok[T] | Err[E]
type RowResult[T] = Result[T, RowError]
