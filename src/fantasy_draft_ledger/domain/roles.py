"""Role vocabularies for the two game modes.

Mantra uses twelve fine-grained roles, Classic four coarse ones. Raw catalog
rows carry semicolon-delimited role tags; everything that needs a role for a
given league goes through :func:`parse_roles` and :func:`to_classic` rather
than comparing strings.
"""

from enum import StrEnum

from fantasy_draft_ledger.domain.league import GameMode


class MantraRole(StrEnum):
    POR = "Por"
    DS = "Ds"
    DD = "Dd"
    DC = "Dc"
    B = "B"
    E = "E"
    M = "M"
    C = "C"
    W = "W"
    T = "T"
    A = "A"
    PC = "Pc"


class ClassicRole(StrEnum):
    P = "P"
    D = "D"
    C = "C"
    A = "A"


type Role = MantraRole | ClassicRole

_MANTRA_TO_CLASSIC: dict[MantraRole, ClassicRole] = {
    MantraRole.POR: ClassicRole.P,
    MantraRole.DS: ClassicRole.D,
    MantraRole.DD: ClassicRole.D,
    MantraRole.DC: ClassicRole.D,
    MantraRole.B: ClassicRole.D,
    MantraRole.E: ClassicRole.C,
    MantraRole.M: ClassicRole.C,
    MantraRole.C: ClassicRole.C,
    MantraRole.W: ClassicRole.C,
    MantraRole.T: ClassicRole.C,
    MantraRole.A: ClassicRole.A,
    MantraRole.PC: ClassicRole.A,
}

MANTRA_ORDER: tuple[MantraRole, ...] = tuple(MantraRole)
CLASSIC_ORDER: tuple[ClassicRole, ...] = tuple(ClassicRole)

DEFAULT_CLASSIC_CAPS: dict[str, int] = {"P": 3, "D": 8, "C": 8, "A": 6}


def to_classic(role: Role) -> ClassicRole:
    """Map any role to its Classic bucket. Total over both vocabularies."""
    if isinstance(role, ClassicRole):
        return role
    return _MANTRA_TO_CLASSIC[role]


def split_tags(raw: str) -> list[str]:
    return [tag.strip() for tag in raw.split(";") if tag.strip()]


def _parse_tag(tag: str, game_mode: GameMode) -> Role:
    if game_mode is GameMode.MANTRA:
        return MantraRole(tag)
    # Classic accepts its own letters and maps Mantra tags down.
    try:
        return ClassicRole(tag)
    except ValueError:
        return to_classic(MantraRole(tag))


def parse_roles(raw: str, game_mode: GameMode) -> tuple[Role, ...]:
    """Parse a raw tag string into the league's vocabulary.

    Mantra keeps every tag. Classic keeps exactly one role: the bucket of the
    first tag. Raises ``ValueError`` on unknown or missing tags.
    """
    tags = split_tags(raw)
    if not tags:
        raise ValueError("no role tags")
    roles: list[Role] = []
    for tag in tags:
        try:
            role = _parse_tag(tag, game_mode)
        except ValueError:
            raise ValueError(f"unknown role {tag!r} for {game_mode} mode") from None
        if role not in roles:
            roles.append(role)
    if game_mode is GameMode.CLASSIC:
        return (roles[0],)
    return tuple(roles)


def role_order(role: Role) -> int:
    if isinstance(role, ClassicRole):
        return CLASSIC_ORDER.index(role)
    return MANTRA_ORDER.index(role)


def roles_compatible(player_roles: tuple[Role, ...], allowed: frozenset[MantraRole], game_mode: GameMode) -> bool:
    """True when the player can fill a slot accepting ``allowed`` roles."""
    if game_mode is GameMode.MANTRA:
        return any(role in allowed for role in player_roles)
    allowed_classic = {to_classic(r) for r in allowed}
    return any(to_classic(role) in allowed_classic for role in player_roles)


def role_buckets(player_roles: tuple[Role, ...], game_mode: GameMode) -> tuple[str, ...]:
    """Buckets a player counts toward: every tag in Mantra, one in Classic."""
    if game_mode is GameMode.CLASSIC:
        return (str(to_classic(player_roles[0])),)
    return tuple(str(r) for r in player_roles)


def vocabulary(game_mode: GameMode) -> tuple[Role, ...]:
    return CLASSIC_ORDER if game_mode is GameMode.CLASSIC else MANTRA_ORDER


def known_roles(raw: str, game_mode: GameMode) -> tuple[Role, ...]:
    """Lenient :func:`parse_roles` for stored catalog rows.

    The catalog is shared between leagues of both modes, so a stored tag may
    not exist in this league's vocabulary; such tags are dropped.
    """
    roles: list[Role] = []
    for tag in split_tags(raw):
        try:
            role = _parse_tag(tag, game_mode)
        except ValueError:
            continue
        if role not in roles:
            roles.append(role)
    if game_mode is GameMode.CLASSIC:
        return tuple(roles[:1])
    return tuple(roles)
