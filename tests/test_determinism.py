"""Test that the engine produces deterministic results."""
import dataclasses
import pytest
from combat.config import DEFAULT_CONFIG
from combat.engine import Combat
from combat.errors import StalemateError
from combat.model import Faction


MAP = "#######\n#G..#E#\n#E#E.E#\n#G.##.#\n#...#E#\n#...E.#\n#######\n"


def run_events(text: str, **kwargs):
    combat = Combat.from_text(text, **kwargs)
    events = []
    while not combat.finished:
        events.extend(combat.step())
    return combat, events


def test_engine_determinism():
    """Same map should produce identical events and end state."""
    c1, events1 = run_events(MAP)
    c2, events2 = run_events(MAP)

    assert len(events1) == len(events2)
    for e1, e2 in zip(events1, events2):
        assert e1.kind == e2.kind
        assert e1.round == e2.round
        assert e1.data == e2.data
    assert c1.snapshot() == c2.snapshot()


def test_attack_power_changes_outcome():
    """A stronger elf side should change how the fight plays out."""
    c1, _ = run_events(MAP)
    c2, _ = run_events(MAP, attack_power={Faction.ELF: 20})
    assert c1.result().outcome != c2.result().outcome
    assert c2.result().winner is Faction.ELF


def test_events_cover_every_round():
    combat, events = run_events(MAP)
    assert events[-1].kind == "CombatEnded"
    assert events[-1].round == combat.rounds + 1
    kills = [e for e in events if e.kind == "UnitKilled"]
    assert len(kills) == len(Combat.from_text(MAP).units) - len(combat.units)


def test_step_after_end_is_noop():
    combat, _ = run_events(MAP)
    rounds = combat.rounds
    assert combat.step() == []
    assert combat.rounds == rounds


def test_result_before_end_raises():
    combat = Combat.from_text(MAP)
    assert combat.outcome is None
    with pytest.raises(RuntimeError):
        combat.result()


def test_separated_factions_hit_round_limit():
    config = dataclasses.replace(DEFAULT_CONFIG, max_rounds=5)
    combat = Combat.from_text("#E#G#", config)
    with pytest.raises(StalemateError):
        combat.run()
    assert combat.rounds == 5
