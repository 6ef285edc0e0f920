from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .battlefield import Battlefield
from .model import Direction, Point, Unit, target_priority
from .pathing import distances_from

# Live spatial index for a round: position -> index into the roster's unit list.
Positions = Dict[Point, int]

class TurnState(Enum):
    COMBAT_ENDED = "combat_ended"
    ATTACKING = "attacking"
    # Moved one step; attack_target is None when no enemy is adjacent afterwards.
    MOVING_THEN_ATTACKING = "moving_then_attacking"
    IDLE = "idle"

@dataclass(frozen=True)
class TurnOutcome:
    state: TurnState
    move_to: Optional[Point] = None
    attack_target: Optional[Point] = None

    @property
    def combat_ended(self) -> bool:
        return self.state is TurnState.COMBAT_ENDED

class TurnEngine:
    """Decides one unit's turn without mutating anything.

    1. No enemies left: combat ends.
    2. An enemy is orthogonally adjacent: skip movement.
    3. Otherwise step toward the nearest reachable open square adjacent to an
       enemy. Ties on distance go to the square first in reading order; the
       step is the first of Up, Left, Right, Down that stays on a shortest path.
    4. Attack the adjacent enemy with the fewest hit points, ties by reading order.

    The caller applies the returned move and attack to the roster.
    """

    def __init__(self, battlefield: Battlefield):
        self.battlefield = battlefield

    def take_turn(self, unit: Unit, units: List[Unit], positions: Positions) -> TurnOutcome:
        assert positions.get(unit.pos) is not None and units[positions[unit.pos]] is unit, \
            f"{unit.id} is missing from the position map"

        enemies = self.enemy_positions(unit, units, positions)
        if not enemies:
            return TurnOutcome(TurnState.COMBAT_ENDED)

        move_to = None
        adjacent = self.adjacent_enemies(unit, unit.pos, units, positions)
        if not adjacent:
            move_to = self.compute_move(unit, enemies, positions)
            if move_to is not None:
                adjacent = self.adjacent_enemies(unit, move_to, units, positions)

        attack = self.choose_target(adjacent, units, positions)
        if move_to is not None:
            return TurnOutcome(TurnState.MOVING_THEN_ATTACKING, move_to, attack)
        if attack is not None:
            return TurnOutcome(TurnState.ATTACKING, None, attack)
        return TurnOutcome(TurnState.IDLE)

    def enemy_positions(self, unit: Unit, units: List[Unit], positions: Positions) -> List[Point]:
        return sorted(p for p, i in positions.items() if units[i].faction is not unit.faction)

    def adjacent_enemies(self, unit: Unit, at: Point, units: List[Unit], positions: Positions) -> List[Point]:
        return [
            n for n in self.battlefield.orthogonal_neighbors(at)
            if n in positions and units[positions[n]].faction is not unit.faction
        ]

    def in_range_squares(self, enemies: List[Point], positions: Positions) -> List[Point]:
        """Open, unoccupied squares orthogonally adjacent to any enemy."""
        squares = {
            n for e in enemies for n in self.battlefield.orthogonal_neighbors(e)
            if self.battlefield.is_open(n) and n not in positions
        }
        return sorted(squares)

    def choose_destination(self, origin: Point, squares: List[Point], positions: Positions) -> Optional[Tuple[Point, int]]:
        """Nearest reachable square as ``(square, distance)``, ties by reading order."""
        dist = distances_from(self.battlefield, origin, positions)
        reachable = [(dist[s], s.reading_key, s) for s in squares if s in dist]
        if not reachable:
            return None
        d, _, square = min(reachable)
        return square, d

    def first_step(self, origin: Point, destination: Point, distance: int, positions: Positions) -> Point:
        # Distances measured back from the destination equal those toward it.
        back = distances_from(self.battlefield, destination, positions)
        for d in Direction:
            step = origin + d
            if not self.battlefield.is_open(step) or step in positions:
                continue
            if back.get(step) == distance - 1:
                return step
        raise RuntimeError(f"no first step from {origin} toward {destination}")

    def compute_move(self, unit: Unit, enemies: List[Point], positions: Positions) -> Optional[Point]:
        squares = self.in_range_squares(enemies, positions)
        if not squares:
            return None
        chosen = self.choose_destination(unit.pos, squares, positions)
        if chosen is None:
            return None
        destination, distance = chosen
        return self.first_step(unit.pos, destination, distance, positions)

    def choose_target(self, candidates: List[Point], units: List[Unit], positions: Positions) -> Optional[Point]:
        if not candidates:
            return None
        return min(candidates, key=lambda p: target_priority(units[positions[p]]))
