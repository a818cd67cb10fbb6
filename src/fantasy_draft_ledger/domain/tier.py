from dataclasses import dataclass
from enum import StrEnum


class Tier(StrEnum):
    TOP = "Top"
    TITOLARI = "Titolari"
    LOW_COST = "Low cost"
    JOLLY = "Jolly"
    RISERVE = "Riserve"
    NON_INSERITI = "Non inseriti"


class ImportMode(StrEnum):
    AUTO = "auto"
    AUTO_PRUNE = "auto+prune"
    FLAT = "flat"
    FLAT_PRUNE = "flat+prune"

    @property
    def uses_percentiles(self) -> bool:
        return self in (ImportMode.AUTO, ImportMode.AUTO_PRUNE)

    @property
    def prunes(self) -> bool:
        return self in (ImportMode.AUTO_PRUNE, ImportMode.FLAT_PRUNE)

    @classmethod
    def parse(cls, raw: str) -> "ImportMode":
        """Accept the mode name or its legacy numeric code (1-4)."""
        legacy = {"1": cls.AUTO, "2": cls.AUTO_PRUNE, "3": cls.FLAT, "4": cls.FLAT_PRUNE}
        if raw in legacy:
            return legacy[raw]
        return cls(raw)


@dataclass(frozen=True)
class RoleCutPoints:
    p20: float
    p40: float
    p70: float
    p90: float


@dataclass(frozen=True)
class TierAssignment:
    row_index: int
    tier: Tier | None
    removed: bool = False
