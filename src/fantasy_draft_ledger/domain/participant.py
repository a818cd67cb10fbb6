from dataclasses import dataclass


@dataclass(frozen=True)
class Participant:
    """A rival drafter tracked privately by one member; not a real membership."""

    member_id: int
    league_id: int
    name: str
    budget: int
    id: int | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class ParticipantAssignment:
    member_id: int
    league_id: int
    participant_id: int
    catalog_player_id: int
    cost: float = 0.0
    id: int | None = None
    assigned_at: str | None = None
