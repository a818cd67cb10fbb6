from dataclasses import dataclass, field

from fantasy_draft_ledger.domain.roles import MantraRole

STARTER_COUNT = 11


@dataclass(frozen=True)
class Position:
    id: str
    name: str
    allowed_roles: frozenset[MantraRole]
    x: int  # percent from the left edge of the board
    y: int  # percent from the top edge of the board


@dataclass(frozen=True)
class FormationSchema:
    id: str
    positions: tuple[Position, ...]

    def position(self, position_id: str) -> Position | None:
        return next((p for p in self.positions if p.id == position_id), None)


@dataclass(frozen=True)
class Lineup:
    member_id: int
    league_id: int
    schema: str
    starters: dict[str, int] = field(default_factory=dict)  # position id -> catalog player id
    bench: tuple[int, ...] = ()
    is_active: bool = False
    id: int | None = None
    updated_at: str | None = None

    @property
    def player_ids(self) -> set[int]:
        return set(self.starters.values()) | set(self.bench)


def _pos(position_id: str, name: str, roles: str, x: int, y: int) -> Position:
    return Position(
        id=position_id,
        name=name,
        allowed_roles=frozenset(MantraRole(r) for r in roles.split("/")),
        x=x,
        y=y,
    )


_GK = _pos("gk", "Por", "Por", 50, 90)
_BACK_FOUR = (
    _pos("dd1", "Dd", "Dd", 20, 75),
    _pos("dc1", "Dc", "Dc", 40, 75),
    _pos("dc2", "Dc", "Dc", 60, 75),
    _pos("ds1", "Ds", "Ds", 80, 75),
)
_BACK_THREE = (
    _pos("dc1", "Dc", "Dc", 25, 75),
    _pos("dc2", "Dc", "Dc", 50, 75),
    _pos("dc3", "Dc/B", "Dc/B", 75, 75),
)


def _schema(schema_id: str, *positions: Position) -> FormationSchema:
    return FormationSchema(id=schema_id, positions=(_GK, *positions))


FORMATIONS: dict[str, FormationSchema] = {
    s.id: s
    for s in (
        _schema(
            "3-4-3",
            *_BACK_THREE,
            _pos("e1", "E", "E", 20, 55),
            _pos("m1", "M/C", "M/C", 35, 55),
            _pos("c1", "C", "C", 65, 55),
            _pos("e2", "E", "E", 80, 55),
            _pos("w1", "W/A", "W/A", 25, 25),
            _pos("a1", "A/Pc", "A/Pc", 50, 20),
            _pos("w2", "W/A", "W/A", 75, 25),
        ),
        _schema(
            "3-4-1-2",
            *_BACK_THREE,
            _pos("e1", "E", "E", 20, 55),
            _pos("m1", "M/C", "M/C", 35, 55),
            _pos("c1", "C", "C", 65, 55),
            _pos("e2", "E", "E", 80, 55),
            _pos("t1", "T", "T", 50, 35),
            _pos("a1", "A/Pc", "A/Pc", 40, 20),
            _pos("a2", "A/Pc", "A/Pc", 60, 20),
        ),
        _schema(
            "3-4-2-1",
            *_BACK_THREE,
            _pos("m1", "M", "M", 25, 55),
            _pos("m2", "M/C", "M/C", 50, 55),
            _pos("e1", "E", "E", 75, 55),
            _pos("ew1", "E/W", "E/W", 25, 35),
            _pos("t1", "T", "T", 50, 30),
            _pos("ta1", "T/A", "T/A", 75, 35),
            _pos("a1", "A/Pc", "A/Pc", 50, 15),
        ),
        _schema(
            "3-5-2",
            _pos("dc1", "Dc", "Dc", 25, 75),
            _pos("dc2", "Dc", "Dc", 50, 75),
            _pos("dc3", "Dc", "Dc", 75, 75),
            _pos("e1", "E", "E", 15, 55),
            _pos("m1", "M/C", "M/C", 35, 50),
            _pos("c1", "C", "C", 50, 45),
            _pos("m2", "M/C", "M/C", 65, 50),
            _pos("e2", "E", "E", 85, 55),
            _pos("a1", "A/Pc", "A/Pc", 40, 20),
            _pos("a2", "A/Pc", "A/Pc", 60, 20),
        ),
        _schema(
            "3-5-1-1",
            _pos("dc1", "Dc", "Dc", 25, 75),
            _pos("dc2", "Dc", "Dc", 50, 75),
            _pos("dc3", "Dc", "Dc", 75, 75),
            _pos("e1", "E", "E", 15, 55),
            _pos("m1", "M", "M", 35, 50),
            _pos("m2", "M", "M", 50, 45),
            _pos("m3", "M", "M", 65, 50),
            _pos("e2", "E", "E", 85, 55),
            _pos("t1", "T/A", "T/A", 50, 30),
            _pos("a1", "A/Pc", "A/Pc", 50, 15),
        ),
        _schema(
            "4-3-3",
            *_BACK_FOUR,
            _pos("m1", "M/C", "M/C", 35, 50),
            _pos("m2", "M", "M", 50, 45),
            _pos("m3", "M/C", "M/C", 65, 50),
            _pos("w1", "W/A", "W/A", 25, 20),
            _pos("a1", "A/Pc", "A/Pc", 50, 15),
            _pos("w2", "W/A", "W/A", 75, 20),
        ),
        _schema(
            "4-3-1-2",
            *_BACK_FOUR,
            _pos("m1", "M/C", "M/C", 35, 50),
            _pos("m2", "M", "M", 50, 45),
            _pos("m3", "M/C", "M/C", 65, 50),
            _pos("t1", "T", "T", 50, 30),
            _pos("a1", "T/A/Pc", "T/A/Pc", 40, 15),
            _pos("a2", "A/Pc", "A/Pc", 60, 15),
        ),
        _schema(
            "4-4-2",
            *_BACK_FOUR,
            _pos("m1", "M/C", "M/C", 25, 50),
            _pos("e1", "E", "E", 42, 45),
            _pos("e2", "E", "E", 58, 45),
            _pos("m2", "M/C", "M/C", 75, 50),
            _pos("a1", "A/Pc", "A/Pc", 40, 20),
            _pos("a2", "A/Pc", "A/Pc", 60, 20),
        ),
        _schema(
            "4-1-4-1",
            *_BACK_FOUR,
            _pos("m1", "M", "M", 50, 60),
            _pos("c1", "C/T", "C/T", 20, 40),
            _pos("e1", "E", "E", 42, 45),
            _pos("e2", "E", "E", 58, 45),
            _pos("c2", "C/T", "C/T", 80, 40),
            _pos("a1", "A/Pc", "A/Pc", 50, 15),
        ),
        _schema(
            "4-4-1-1",
            *_BACK_FOUR,
            _pos("e1", "E/M", "E/M", 25, 55),
            _pos("m1", "M", "M", 42, 50),
            _pos("m2", "M", "M", 58, 50),
            _pos("e2", "E/M", "E/M", 75, 55),
            _pos("t1", "T/A", "T/A", 50, 30),
            _pos("a1", "A/Pc", "A/Pc", 50, 15),
        ),
        _schema(
            "4-2-3-1",
            *_BACK_FOUR,
            _pos("m1", "M", "M", 40, 60),
            _pos("m2", "M/C", "M/C", 60, 60),
            _pos("w1", "W/T", "W/T", 25, 35),
            _pos("t1", "T", "T", 50, 30),
            _pos("w2", "W/A", "W/A", 75, 35),
            _pos("a1", "A/Pc", "A/Pc", 50, 15),
        ),
    )
}
