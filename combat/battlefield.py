import logging
from pathlib import Path
from typing import Dict, Iterable, List, Union

import numpy as np

from .errors import MapParseError
from .model import Direction, Faction, Point, Tile, Unit

logger = logging.getLogger(__name__)

class Battlefield:
    """Immutable cave terrain.

    Walls are kept in a boolean mask indexed ``[y, x]``. Unit markers found
    while loading are held aside until ``take_markers`` hands them to the
    roster; the terrain under them is open floor.
    """

    def __init__(self, walls: np.ndarray, markers: Dict[Point, Faction] | None = None):
        self._walls = walls
        self._walls.setflags(write=False)
        self._markers: Dict[Point, Faction] = dict(markers or {})

    @classmethod
    def load(cls, text: str) -> "Battlefield":
        """Parse a rectangular map of ``.``, ``#``, ``G`` and ``E``."""
        rows = [line.rstrip("\r") for line in text.split("\n")]
        while rows and not rows[-1]:
            rows.pop()
        if not rows:
            raise MapParseError("map is empty")

        width = len(rows[0])
        if width == 0:
            raise MapParseError("map row is empty", line=1)
        walls = np.zeros((len(rows), width), dtype=bool)
        markers: Dict[Point, Faction] = {}
        for y, row in enumerate(rows):
            if len(row) != width:
                raise MapParseError(f"row has width {len(row)}, expected {width}", line=y + 1)
            for x, ch in enumerate(row):
                if ch == Tile.WALL.value:
                    walls[y, x] = True
                elif ch == Tile.EMPTY.value:
                    continue
                elif ch in Faction.markers():
                    markers[Point(x, y)] = Faction.from_marker(ch)
                else:
                    raise MapParseError(f"unrecognized tile {ch!r}", line=y + 1, column=x + 1)

        logger.debug("Loaded %dx%d map with %d units", width, len(rows), len(markers))
        return cls(walls, markers)

    @classmethod
    def load_path(cls, path: Union[str, Path]) -> "Battlefield":
        return cls.load(Path(path).read_text(encoding="utf-8"))

    @property
    def width(self) -> int:
        return self._walls.shape[1]

    @property
    def height(self) -> int:
        return self._walls.shape[0]

    def in_bounds(self, point: Point) -> bool:
        return 0 <= point.x < self.width and 0 <= point.y < self.height

    def tile_at(self, point: Point) -> Tile:
        if not self.in_bounds(point):
            raise IndexError(f"{point} is outside the {self.width}x{self.height} map")
        return Tile.WALL if self._walls[point.y, point.x] else Tile.EMPTY

    def is_open(self, point: Point) -> bool:
        return self.in_bounds(point) and not self._walls[point.y, point.x]

    def orthogonal_neighbors(self, point: Point) -> List[Point]:
        """In-bounds neighbors in Up, Left, Right, Down order."""
        return [n for n in (point + d for d in Direction) if self.in_bounds(n)]

    def take_markers(self) -> Dict[Point, Faction]:
        """Hand the unit markers to the caller, leaving terrain only."""
        markers, self._markers = self._markers, {}
        return markers

    @property
    def has_markers(self) -> bool:
        return bool(self._markers)

    def render(self, units: Iterable[Unit] = ()) -> str:
        """Draw terrain with live units on top, hit points listed per row."""
        grid = [[Tile.WALL.value if wall else Tile.EMPTY.value for wall in row] for row in self._walls]
        by_row: Dict[int, List[Unit]] = {}
        for u in sorted((u for u in units if u.alive), key=lambda u: u.pos):
            grid[u.pos.y][u.pos.x] = u.faction.value
            by_row.setdefault(u.pos.y, []).append(u)
        lines = []
        for y, row in enumerate(grid):
            line = "".join(row)
            if y in by_row:
                line += "   " + ", ".join(f"{u.faction.value}({u.hp})" for u in by_row[y])
            lines.append(line)
        return "\n".join(lines)
