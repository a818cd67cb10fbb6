from dataclasses import dataclass, field


@dataclass(frozen=True)
class BudgetSummary:
    total: int
    spent: float
    remaining: float
    owned_count: int
    max_players: int
    role_distribution: dict[str, int] = field(default_factory=dict)
    role_caps: dict[str, int] = field(default_factory=dict)

    @property
    def slots_remaining(self) -> int:
        return self.max_players - self.owned_count


@dataclass(frozen=True)
class ParticipantSummary:
    participant_id: int
    name: str
    budget: int
    spent: float
    players_count: int

    @property
    def remaining(self) -> float:
        return self.budget - self.spent
