import copy
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional, Union

from .battlefield import Battlefield
from .config import DEFAULT_CONFIG, CombatConfig
from .errors import NoSolutionError, StalemateError
from .model import Event, Faction, State, Unit
from .roster import Units

logger = logging.getLogger(__name__)

@dataclass
class CombatResult:
    rounds: int
    hit_points: int
    outcome: int
    winner: Faction
    survivors: List[Unit] = field(default_factory=list)

@dataclass
class BoostResult:
    attack_power: int
    result: CombatResult

class Combat:
    """Deterministic round-by-round driver over a unit roster."""

    def __init__(self, units: Units, config: CombatConfig = DEFAULT_CONFIG, battle_id: str = "local"):
        self.units = units
        self.config = config
        self.battle_id = battle_id
        self.rounds = 0
        self.finished = False

    @classmethod
    def from_text(cls, text: str, config: CombatConfig = DEFAULT_CONFIG,
                  attack_power: Optional[Mapping[Faction, int]] = None) -> "Combat":
        units = Units.extract_from(Battlefield.load(text), config)
        for faction, value in (attack_power or {}).items():
            units.set_attack_power(faction, value)
        return cls(units, config)

    def step(self) -> List[Event]:
        """Run one round and return its events. The terminal round is not counted."""
        if self.finished:
            return []
        evts: List[Event] = []
        ended = self.units.round(evts, self.rounds + 1)
        if ended:
            self.finished = True
            logger.info("Combat ended after %d full rounds, %s win", self.rounds, self.units.winner.name)
        else:
            self.rounds += 1
            logger.debug("Round %d complete, %d units left", self.rounds, len(self.units))
            if self.rounds >= self.config.max_rounds:
                raise StalemateError(self.config.max_rounds)
        return evts

    def run(self) -> CombatResult:
        while not self.finished:
            self.step()
        return self.result()

    def result(self) -> CombatResult:
        if not self.finished:
            raise RuntimeError("combat is still in progress")
        return CombatResult(
            rounds=self.rounds,
            hit_points=self.units.hit_points(),
            outcome=self.units.outcome(self.rounds),
            winner=self.units.winner,
            survivors=copy.deepcopy(self.units.survivors),
        )

    @property
    def outcome(self) -> Optional[int]:
        return self.units.outcome(self.rounds) if self.finished else None

    def snapshot(self) -> State:
        """Return current state."""
        return State(rounds=self.rounds, units=copy.deepcopy(self.units.units),
                     battle_id=self.battle_id, finished=self.finished)

def _run_without_elf_losses(combat: Combat) -> Optional[CombatResult]:
    elves = combat.units.count(Faction.ELF)
    while not combat.finished:
        combat.step()
        if combat.units.count(Faction.ELF) < elves:
            return None
    result = combat.result()
    return result if result.winner is Faction.ELF else None

def find_minimal_boost(text: str, config: CombatConfig = DEFAULT_CONFIG) -> BoostResult:
    """Smallest elf attack power with which every elf survives to win."""
    units = Units.extract_from(Battlefield.load(text), config)
    for power in range(config.boost_start, config.boost_ceiling + 1):
        attempt = units.clone()
        attempt.set_attack_power(Faction.ELF, power)
        result = _run_without_elf_losses(Combat(attempt, config))
        if result is not None:
            logger.info("Elves win without losses at attack power %d", power)
            return BoostResult(attack_power=power, result=result)
        logger.debug("Attack power %d loses an elf", power)
    raise NoSolutionError(config.boost_ceiling)

# Operation surface for drivers that work with the pieces directly.

def load_battlefield(path: Union[str, Path]) -> Battlefield:
    return Battlefield.load_path(path)

def extract_roster(battlefield: Battlefield, config: CombatConfig = DEFAULT_CONFIG) -> Units:
    return Units.extract_from(battlefield, config)

def run_round(units: Units) -> bool:
    return units.round()

def compute_outcome(units: Units, completed_rounds: int) -> int:
    return units.outcome(completed_rounds)

def set_faction_attack_power(units: Units, faction: Faction, value: int) -> None:
    units.set_attack_power(faction, value)
