import asyncio
import logging
from typing import List
from combat.engine import Combat
from combat.errors import CombatError
from combat.model import Event, State
from .eventlog import EventLog

logger = logging.getLogger(__name__)

class RoundRunner:
    """Async driver that plays a combat one round per tick until it ends."""

    def __init__(self, combat: Combat, round_ms: int = 500, time_compression: float = 30.0):
        self.combat = combat
        self.round_ms = round_ms
        self.time_compression = time_compression
        self.sleep_s = (round_ms / 1000.0) / max(1.0, time_compression)
        self.events = EventLog()
        self.error: CombatError | None = None
        self._task: asyncio.Task | None = None
        self._lock = asyncio.Lock()

    async def start(self):
        """Start the round loop."""
        if self._task:
            return
        logger.info("Starting battle %s with %d units", self.combat.battle_id, len(self.combat.units))
        self._task = asyncio.create_task(self._loop())

    async def stop(self):
        """Stop the round loop gracefully."""
        if not self._task:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    @property
    def done(self) -> bool:
        return self.combat.finished or self.error is not None

    async def _loop(self):
        """Step the combat, log its events, sleep; stop once it is decided."""
        while not self.done:
            async with self._lock:
                try:
                    evts: List[Event] = self.combat.step()
                except CombatError as e:
                    logger.error("Battle %s aborted: %s", self.combat.battle_id, e)
                    self.error = e
                    evts = []
            self.events.append_many(evts)
            await asyncio.sleep(self.sleep_s)
        logger.info("Battle %s over after %d rounds", self.combat.battle_id, self.combat.rounds)

    async def snapshot(self) -> State:
        """Get current state (safe against a concurrent round)."""
        async with self._lock:
            return self.combat.snapshot()

    def set_time_compression(self, time_compression: float):
        """Update time compression factor (1.0 = real-time, higher = faster)."""
        self.time_compression = max(0.1, min(1000.0, time_compression))
        self.sleep_s = (self.round_ms / 1000.0) / max(1.0, self.time_compression)
        logger.info("Time compression set to %sx (sleep: %.4fs)", self.time_compression, self.sleep_s)
