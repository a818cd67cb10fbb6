import math
from typing import Any

from fantasy_draft_ledger.domain.errors import Err, Ok, RowError, RowResult
from fantasy_draft_ledger.domain.league import GameMode
from fantasy_draft_ledger.domain.player import CatalogRow
from fantasy_draft_ledger.domain.roles import parse_roles, split_tags

# Column aliases, matched case-insensitively. Spreadsheet exports carry the
# Classic role in "R" and the Mantra role in "RM".
NAME_COLUMNS = ("name", "nome")
TEAM_COLUMNS = ("team", "squadra")
PRICE_COLUMNS = ("price", "prezzo")
VALUE_COLUMNS = ("value", "fvm")
_ROLE_COLUMNS: dict[GameMode, tuple[str, ...]] = {
    GameMode.MANTRA: ("roles", "ruolo", "rm", "r"),
    GameMode.CLASSIC: ("roles", "ruolo", "r", "rm"),
}

MAX_NAME_LENGTH = 100


def _lookup(row: dict[str, Any], columns: tuple[str, ...]) -> Any:
    for column in columns:
        value = row.get(column)
        if value is None:
            continue
        if isinstance(value, float) and math.isnan(value):
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def _to_number(value: Any, label: str) -> float:
    if value is None:
        return 0.0
    if isinstance(value, str):
        value = value.strip().replace(",", ".")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{label} is not a number: {value!r}") from None
    if math.isnan(number) or number < 0:
        raise ValueError(f"{label} must be a non-negative number")
    return number


def row_to_catalog_row(raw: dict[str, Any], row_index: int, game_mode: GameMode) -> RowResult[CatalogRow]:
    """Map one raw import row onto a ``CatalogRow``.

    Missing price or value count as 0. Role tags must all belong to the
    league's vocabulary and are stored as given, so the shared catalog keeps
    Mantra detail even when a Classic league imports it.
    """
    row = {str(k).strip().lower(): v for k, v in raw.items() if k is not None}
    name = str(_lookup(row, NAME_COLUMNS) or "").strip()
    if not name:
        return Err(RowError(message="missing player name", row_index=row_index))
    if len(name) > MAX_NAME_LENGTH:
        return Err(RowError(message="player name too long", row_index=row_index, player_name=name[:MAX_NAME_LENGTH]))

    team = str(_lookup(row, TEAM_COLUMNS) or "").strip()
    raw_roles = str(_lookup(row, _ROLE_COLUMNS[game_mode]) or "")
    try:
        parse_roles(raw_roles, game_mode)
        price = _to_number(_lookup(row, PRICE_COLUMNS), "price")
        value = _to_number(_lookup(row, VALUE_COLUMNS), "value")
    except ValueError as e:
        return Err(RowError(message=str(e), row_index=row_index, player_name=name))

    return Ok(
        CatalogRow(
            name=name,
            team=team,
            roles=";".join(split_tags(raw_roles)),
            price=price,
            value=value,
        )
    )
