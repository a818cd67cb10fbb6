from dataclasses import dataclass, field
from enum import StrEnum


class GameMode(StrEnum):
    CLASSIC = "Classic"
    MANTRA = "Mantra"


class LeagueStatus(StrEnum):
    ACTIVE = "active"
    CLOSED = "closed"


class MemberRole(StrEnum):
    MASTER = "master"
    MEMBER = "member"


@dataclass(frozen=True)
class League:
    name: str
    code: str
    owner_id: int
    game_mode: GameMode
    total_budget: int
    max_players_per_team: int
    max_members: int
    status: LeagueStatus = LeagueStatus.ACTIVE
    allow_negative_budget: bool = False
    role_caps: dict[str, int] = field(default_factory=dict)
    description: str | None = None
    id: int | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class Membership:
    league_id: int
    user_id: int
    role: MemberRole
    team_name: str = "My Team"
    id: int | None = None
    joined_at: str | None = None

    @property
    def is_master(self) -> bool:
        return self.role is MemberRole.MASTER
