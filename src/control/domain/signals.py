"""
Directions, indications and the per-direction signal cell.
"""
import threading
import time
from datetime import datetime, timezone
from enum import Enum
from typing import FrozenSet, Optional


class Direction(Enum):
    """
    Compass approach to an intersection.
    Two directions conflict when they can never show GREEN together.
    """
    NORTH = "NORTH"
    SOUTH = "SOUTH"
    EAST = "EAST"
    WEST = "WEST"

    @property
    def conflicting_directions(self) -> FrozenSet["Direction"]:
        return _CONFLICTS[self]

    @property
    def opposite(self) -> "Direction":
        return _OPPOSITES[self]

    def conflicts_with(self, other: "Direction") -> bool:
        return other in _CONFLICTS[self]

    def is_parallel_to(self, other: "Direction") -> bool:
        return other is not self and not self.conflicts_with(other)


_CONFLICTS = {
    Direction.NORTH: frozenset({Direction.EAST, Direction.WEST}),
    Direction.SOUTH: frozenset({Direction.EAST, Direction.WEST}),
    Direction.EAST: frozenset({Direction.NORTH, Direction.SOUTH}),
    Direction.WEST: frozenset({Direction.NORTH, Direction.SOUTH}),
}

_OPPOSITES = {
    Direction.NORTH: Direction.SOUTH,
    Direction.SOUTH: Direction.NORTH,
    Direction.EAST: Direction.WEST,
    Direction.WEST: Direction.EAST,
}


class Indication(Enum):
    RED = "RED"
    YELLOW = "YELLOW"
    GREEN = "GREEN"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @property
    def next(self) -> "Indication":
        """GREEN -> YELLOW -> RED -> GREEN"""
        return _SUCCESSORS[self]


_DESCRIPTIONS = {
    Indication.RED: "Stop - Do not proceed",
    Indication.YELLOW: "Caution - Prepare to stop",
    Indication.GREEN: "Go - Proceed with caution",
}

_SUCCESSORS = {
    Indication.GREEN: Indication.YELLOW,
    Indication.YELLOW: Indication.RED,
    Indication.RED: Indication.GREEN,
}


class Signal:
    """
    One directional traffic light.

    Each signal guards its own cell with a narrow lock so changes on
    different directions never serialize against each other. A change to
    the indication already displayed is a no-op.
    """

    def __init__(self, direction: Direction, initial: Indication = Indication.RED):
        self._direction = direction
        self._current = initial
        self._previous: Optional[Indication] = None
        self._last_change_time = datetime.now(timezone.utc)
        self._last_change_monotonic = time.monotonic()
        self._lock = threading.Lock()

    @property
    def direction(self) -> Direction:
        return self._direction

    @property
    def current(self) -> Indication:
        return self._current

    @property
    def previous(self) -> Optional[Indication]:
        return self._previous

    @property
    def last_change_time(self) -> datetime:
        return self._last_change_time

    def _compare_and_set(self, expected: Indication, new: Indication) -> bool:
        with self._lock:
            if self._current is not expected:
                return False
            self._current = new
            self._previous = expected
            self._last_change_time = datetime.now(timezone.utc)
            self._last_change_monotonic = time.monotonic()
            return True

    def change(self, new: Indication) -> Indication:
        """
        Swaps the displayed indication and returns the prior one.
        """
        while True:
            old = self._current
            if old is new:
                return old
            if self._compare_and_set(old, new):
                return old

    def advance(self) -> Indication:
        return self.change(self._current.next)

    def duration_in_current_state_ms(self) -> int:
        elapsed = time.monotonic() - self._last_change_monotonic
        return max(0, int(elapsed * 1000))

    def is_green(self) -> bool:
        return self._current is Indication.GREEN

    def is_yellow(self) -> bool:
        return self._current is Indication.YELLOW

    def is_red(self) -> bool:
        return self._current is Indication.RED

    def __repr__(self):
        return f"Signal(direction={self._direction.name}, current={self._current.name})"
