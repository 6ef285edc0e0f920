import copy
import logging
from typing import Dict, List, Optional

from .battlefield import Battlefield
from .config import DEFAULT_CONFIG, CombatConfig
from .model import Event, Faction, Unit
from .turn import Positions, TurnEngine

logger = logging.getLogger(__name__)

class Units:
    """The live roster: units addressed by list index, plus the terrain they fight on.

    The list is the only owner of unit state. Each round builds a
    position -> index map from it and patches that map as units move and die;
    the list itself is compacted only once the round is over.
    """

    def __init__(self, battlefield: Battlefield, units: List[Unit]):
        assert not battlefield.has_markers, "battlefield must hold terrain only"
        self.battlefield = battlefield
        self.units = sorted(units, key=lambda u: u.pos)
        self._turns = TurnEngine(battlefield)

    @classmethod
    def extract_from(cls, battlefield: Battlefield, config: CombatConfig = DEFAULT_CONFIG) -> "Units":
        """Lift the unit markers out of a freshly loaded battlefield."""
        counters: Dict[Faction, int] = {f: 0 for f in Faction}
        units: List[Unit] = []
        for pos, faction in sorted(battlefield.take_markers().items()):
            counters[faction] += 1
            units.append(Unit(
                id=f"{faction.value}{counters[faction]}",
                faction=faction,
                pos=pos,
                hp=config.hit_points,
                attack_power=config.attack_power,
            ))
        return cls(battlefield, units)

    def clone(self) -> "Units":
        # The battlefield is immutable and shared between clones.
        return Units(self.battlefield, copy.deepcopy(self.units))

    def set_attack_power(self, faction: Faction, value: int) -> None:
        if value <= 0:
            raise ValueError(f"attack power must be positive, got {value}")
        for u in self.units:
            if u.faction is faction:
                u.attack_power = value

    def positions(self) -> Positions:
        return {u.pos: i for i, u in enumerate(self.units) if u.alive}

    def round(self, sink: Optional[List[Event]] = None, round_no: int = 0) -> bool:
        """Run one round; True when some unit found no enemies left."""
        positions = self.positions()
        order = sorted(positions.values(), key=lambda i: self.units[i].pos)
        combat_ended = False

        for idx in order:
            unit = self.units[idx]
            if not unit.alive:
                continue

            outcome = self._turns.take_turn(unit, self.units, positions)
            if outcome.combat_ended:
                combat_ended = True
                if sink is not None:
                    sink.append(Event("CombatEnded", round_no, {"unit_id": unit.id}))
                break

            if outcome.move_to is not None:
                assert unit.pos.manhattan(outcome.move_to) == 1, "units move one step at a time"
                old = unit.pos
                del positions[old]
                unit.pos = outcome.move_to
                positions[unit.pos] = idx
                if sink is not None:
                    sink.append(Event("UnitMoved", round_no, {
                        "unit_id": unit.id, "from": [old.x, old.y], "to": [unit.pos.x, unit.pos.y]}))

            if outcome.attack_target is not None:
                target = self.units[positions[outcome.attack_target]]
                target.hp -= unit.attack_power
                if sink is not None:
                    sink.append(Event("Attack", round_no, {
                        "attacker": unit.id, "target": target.id, "dmg": unit.attack_power, "hp": target.hp}))
                if not target.alive:
                    # Dead units leave the live map at once; the list keeps them until the round ends.
                    del positions[target.pos]
                    logger.debug("%s killed %s at %s", unit.id, target.id, target.pos)
                    if sink is not None:
                        sink.append(Event("UnitKilled", round_no, {"unit_id": target.id, "killer": unit.id}))

        self.units = sorted((u for u in self.units if u.alive), key=lambda u: u.pos)
        return combat_ended

    def count(self, faction: Faction) -> int:
        return sum(1 for u in self.units if u.faction is faction and u.alive)

    @property
    def survivors(self) -> List[Unit]:
        return [u for u in self.units if u.alive]

    @property
    def winner(self) -> Optional[Faction]:
        factions = {u.faction for u in self.survivors}
        return factions.pop() if len(factions) == 1 else None

    def hit_points(self) -> int:
        return sum(u.hp for u in self.survivors)

    def outcome(self, completed_rounds: int) -> int:
        """Completed full rounds times the hit points left among survivors."""
        if self.winner is None:
            raise RuntimeError("outcome is only defined once one faction is annihilated")
        assert all(u.alive for u in self.units), "dead units must not outlive their round"
        return completed_rounds * self.hit_points()

    def render(self) -> str:
        return self.battlefield.render(self.units)

    def __len__(self) -> int:
        return len(self.units)
