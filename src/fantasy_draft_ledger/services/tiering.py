"""Role-relative tiering of an import batch.

Each role's values (above the pruning value of 1) form a sample. Cut points
at the 20th/40th/70th/90th percentiles split the role into five tiers. A
role with fewer than ``MIN_SAMPLES`` values has no meaningful percentiles and
every player in it lands in ``Jolly``.
"""

from collections import defaultdict
from collections.abc import Mapping, Sequence

import numpy as np

from fantasy_draft_ledger.domain.league import GameMode
from fantasy_draft_ledger.domain.player import CatalogRow
from fantasy_draft_ledger.domain.roles import parse_roles
from fantasy_draft_ledger.domain.tier import ImportMode, RoleCutPoints, Tier, TierAssignment

MIN_SAMPLES = 5
PERCENTILES = (20, 40, 70, 90)
PRUNE_VALUE = 1.0


def primary_bucket(row: CatalogRow, game_mode: GameMode) -> str:
    return str(parse_roles(row.roles, game_mode)[0])


def build_role_distribution(rows: Sequence[CatalogRow], game_mode: GameMode) -> dict[str, list[float]]:
    samples: dict[str, list[float]] = defaultdict(list)
    for row in rows:
        if row.value > PRUNE_VALUE:
            samples[primary_bucket(row, game_mode)].append(row.value)
    return {role: sorted(values) for role, values in samples.items()}


def compute_cut_points(samples: Sequence[float]) -> RoleCutPoints | None:
    if len(samples) < MIN_SAMPLES:
        return None
    p20, p40, p70, p90 = (float(v) for v in np.percentile(np.asarray(samples, dtype=float), PERCENTILES))
    return RoleCutPoints(p20=p20, p40=p40, p70=p70, p90=p90)


def tier_for_value(value: float, cuts: RoleCutPoints | None) -> Tier:
    if cuts is None:
        return Tier.JOLLY
    if value < cuts.p20:
        return Tier.RISERVE
    if value < cuts.p40:
        return Tier.JOLLY
    if value < cuts.p70:
        return Tier.LOW_COST
    if value < cuts.p90:
        return Tier.TITOLARI
    return Tier.TOP


def classify_batch(
    rows: Sequence[CatalogRow],
    mode: ImportMode,
    game_mode: GameMode,
    distribution: Mapping[str, Sequence[float]] | None = None,
) -> list[TierAssignment]:
    """Assign a tier (or removal) to every row, in input order.

    Args:
        rows: Validated import rows. Not modified.
        mode: Which of the four import modes to apply.
        game_mode: League vocabulary used to pick each row's role bucket.
        distribution: Role -> value samples. Built from ``rows`` when omitted.

    Returns:
        One ``TierAssignment`` per row, ``row_index`` matching the input position.
    """
    cuts: dict[str, RoleCutPoints | None] = {}
    if mode.uses_percentiles:
        if distribution is None:
            distribution = build_role_distribution(rows, game_mode)
        cuts = {role: compute_cut_points(sorted(values)) for role, values in distribution.items()}

    assignments: list[TierAssignment] = []
    for index, row in enumerate(rows):
        if mode.prunes and row.value == PRUNE_VALUE:
            assignments.append(TierAssignment(row_index=index, tier=None, removed=True))
        elif not mode.uses_percentiles:
            assignments.append(TierAssignment(row_index=index, tier=Tier.NON_INSERITI))
        else:
            tier = tier_for_value(row.value, cuts.get(primary_bucket(row, game_mode)))
            assignments.append(TierAssignment(row_index=index, tier=tier))
    return assignments
