import threading
from collections import deque
from typing import Deque, List

from .entities import ChangeEvent
from .signals import Direction

MAX_HISTORY_SIZE = 1000


class EventHistory:
    """
    Bounded, append-only log of change events, oldest evicted first.

    Appends are serialized under a lock and the eviction of the oldest entry
    happens inside the same append. Readers get a copied list, so they never
    observe a half-applied append.
    """

    def __init__(self, capacity: int = MAX_HISTORY_SIZE):
        if capacity <= 0:
            raise ValueError("History capacity must be positive")
        self.capacity = capacity
        self._events: Deque[ChangeEvent] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def append(self, event: ChangeEvent):
        with self._lock:
            self._events.append(event)

    def all(self) -> List[ChangeEvent]:
        with self._lock:
            return list(self._events)

    def for_direction(self, direction: Direction) -> List[ChangeEvent]:
        return [e for e in self.all() if e.direction is direction]

    def recent(self, count: int) -> List[ChangeEvent]:
        if count <= 0:
            return []
        return self.all()[-count:]

    def clear(self):
        with self._lock:
            self._events.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
