from dataclasses import dataclass

@dataclass(frozen=True)
class CombatConfig:
    """Simulation constants. Attack power can be overridden per faction."""
    hit_points: int = 200
    attack_power: int = 3
    # Boost search bounds for elf attack power; 3 is the unboosted default.
    # At the ceiling any elf kills a full-health goblin in one hit.
    boost_start: int = 4
    boost_ceiling: int = 200
    max_rounds: int = 100_000

DEFAULT_CONFIG = CombatConfig()
