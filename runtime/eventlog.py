from typing import List, Optional, Tuple
from combat.model import Event

class EventLog:
    """Append-only record of combat events, read back by offset."""

    def __init__(self):
        self._log: List[Event] = []

    def append_many(self, evts: List[Event]) -> Tuple[int, int]:
        """Append a round's events and return (start_offset, end_offset)."""
        start = len(self._log)
        self._log.extend(evts)
        return start, len(self._log) - 1

    def since(self, offset: int, limit: int = 1000, kind: Optional[str] = None) -> Tuple[List[Event], int]:
        """Return up to ``limit`` events from ``offset`` on, and the offset to resume from.

        With ``kind`` set, other events are skipped but still advance the offset.
        """
        offset = max(0, offset)
        chunk = self._log[offset: offset + limit]
        next_offset = offset + len(chunk)
        if kind is not None:
            chunk = [e for e in chunk if e.kind == kind]
        return chunk, next_offset

    def rounds(self) -> int:
        """Highest round number seen so far."""
        return self._log[-1].round if self._log else 0

    def __len__(self) -> int:
        return len(self._log)
