from dataclasses import dataclass


@dataclass(frozen=True)
class CatalogRow:
    """One validated row of an import batch, before it reaches the catalog."""

    name: str
    team: str
    roles: str  # raw semicolon-delimited tags
    price: float
    value: float


@dataclass(frozen=True)
class CatalogPlayer:
    name: str
    team: str
    roles: str
    season: str
    price: float = 0.0
    value: float = 0.0
    id: int | None = None
    updated_at: str | None = None
