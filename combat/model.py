from dataclasses import dataclass, field
from enum import Enum
from functools import total_ordering
from typing import Dict, List, Tuple

class Tile(Enum):
    """Terrain of a single grid cell. Units are never stored as tiles."""
    EMPTY = "."
    WALL = "#"

class Faction(Enum):
    """One of the two opposing sides."""
    GOBLIN = "G"
    ELF = "E"

    @property
    def enemy(self) -> "Faction":
        return Faction.ELF if self is Faction.GOBLIN else Faction.GOBLIN

    @classmethod
    def from_marker(cls, ch: str) -> "Faction":
        return cls(ch)

    @classmethod
    def markers(cls) -> str:
        return "".join(f.value for f in cls)

class Direction(Enum):
    """Orthogonal step. Declaration order is the canonical tie-break order."""
    UP = (0, -1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)
    DOWN = (0, 1)

@total_ordering
@dataclass(frozen=True)
class Point:
    """Integer grid coordinate; y grows downward."""
    x: int
    y: int

    @property
    def reading_key(self) -> Tuple[int, int]:
        """Reading order: top-to-bottom, then left-to-right."""
        return (self.y, self.x)

    def __lt__(self, other: "Point") -> bool:
        if not isinstance(other, Point):
            return NotImplemented
        return self.reading_key < other.reading_key

    def __add__(self, direction: Direction) -> "Point":
        dx, dy = direction.value
        return Point(self.x + dx, self.y + dy)

    def manhattan(self, other: "Point") -> int:
        return abs(self.x - other.x) + abs(self.y - other.y)

@dataclass
class Unit:
    id: str
    faction: Faction
    pos: Point
    hp: int
    attack_power: int

    @property
    def alive(self) -> bool:
        return self.hp > 0

def target_priority(unit: Unit) -> Tuple[int, int, int]:
    """Attack selection key: fewest hit points first, then reading order."""
    return (unit.hp, unit.pos.y, unit.pos.x)

@dataclass
class Event:
    kind: str
    round: int
    data: Dict

@dataclass
class State:
    rounds: int
    units: List[Unit] = field(default_factory=list)
    battle_id: str = "local"
    finished: bool = False
