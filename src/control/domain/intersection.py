"""
Intersection aggregate: four signals, an operation mode, timing and history.
"""
import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional

from ...common.exceptions import SignalConflictError
from .entities import ChangeEvent, OperationMode, TimingConfig
from .history import EventHistory, MAX_HISTORY_SIZE
from .signals import Direction, Indication, Signal


class Intersection:
    """
    A road intersection with one signal per direction.

    `change_signal` is the only path that mutates a signal. Transitions to
    GREEN are validated against the other directions under a dedicated lock,
    so two conflicting GREEN requests can never both pass the check.
    Transitions to YELLOW or RED never take that lock.

    `phase_lock` serializes multi-signal sequences: a scheduler phase
    application and an emergency stop never interleave.
    """

    def __init__(
        self,
        intersection_id: str,
        name: str,
        timing: Optional[TimingConfig] = None,
        history_capacity: int = MAX_HISTORY_SIZE
    ):
        if not intersection_id:
            raise ValueError("Intersection ID cannot be empty")
        if name is None:
            raise ValueError("Intersection name cannot be None")
        self._id = intersection_id
        self._name = name
        self._signals: Dict[Direction, Signal] = {d: Signal(d) for d in Direction}
        self._mode = OperationMode.PAUSED
        self._timing = timing or TimingConfig()
        self._history = EventHistory(history_capacity)
        self._green_lock = threading.Lock()
        self._phase_lock = threading.Lock()
        self._created_at = datetime.now(timezone.utc)
        self._last_modified_at = self._created_at

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def mode(self) -> OperationMode:
        return self._mode

    @property
    def timing(self) -> TimingConfig:
        return self._timing

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def last_modified_at(self) -> datetime:
        return self._last_modified_at

    @property
    def phase_lock(self) -> threading.Lock:
        return self._phase_lock

    @property
    def signals(self) -> Dict[Direction, Signal]:
        return dict(self._signals)

    def signal(self, direction: Direction) -> Signal:
        return self._signals[direction]

    def is_running(self) -> bool:
        return self._mode is OperationMode.RUNNING

    def is_paused(self) -> bool:
        return self._mode is OperationMode.PAUSED

    def set_mode(self, mode: OperationMode):
        if not isinstance(mode, OperationMode):
            raise ValueError(f"Invalid operation mode: {mode!r}")
        self._mode = mode
        self._touch()

    def set_timing(self, timing: TimingConfig):
        # TimingConfig validates on construction, so a bad value never gets here
        self._timing = timing
        self._touch()

    def validate_no_conflict(self, direction: Direction):
        for other, signal in self._signals.items():
            if direction.conflicts_with(other) and signal.is_green():
                raise SignalConflictError(direction, other)

    def has_conflict(self) -> bool:
        greens = [d for d, s in self._signals.items() if s.is_green()]
        return any(
            a.conflicts_with(b)
            for i, a in enumerate(greens)
            for b in greens[i + 1:]
        )

    def change_signal(self, direction: Direction, new_state: Indication, triggered_by: str) -> ChangeEvent:
        """
        Changes one signal and records the transition.

        Raises SignalConflictError, leaving signals and history untouched,
        when a GREEN transition would conflict.
        """
        if new_state is Indication.GREEN:
            with self._green_lock:
                self.validate_no_conflict(direction)
                return self._apply(direction, new_state, triggered_by)
        return self._apply(direction, new_state, triggered_by)

    def _apply(self, direction: Direction, new_state: Indication, triggered_by: str) -> ChangeEvent:
        signal = self._signals[direction]
        previous = signal.current
        duration = signal.duration_in_current_state_ms()
        signal.change(new_state)
        event = ChangeEvent(
            intersection_id=self._id,
            direction=direction,
            previous_state=previous,
            new_state=new_state,
            duration_in_previous_state_ms=duration,
            triggered_by=triggered_by
        )
        self._history.append(event)
        self._touch()
        return event

    def emergency_stop(self, triggered_by: str):
        """
        Forces every non-RED signal to RED and enters EMERGENCY mode.

        Waits for any phase application in progress to finish first.
        """
        with self._phase_lock:
            for direction in Direction:
                if not self._signals[direction].is_red():
                    self.change_signal(direction, Indication.RED, f"{triggered_by} (EMERGENCY)")
            self.set_mode(OperationMode.EMERGENCY)

    def snapshot(self) -> Dict[Direction, Indication]:
        return {d: s.current for d, s in self._signals.items()}

    # History

    def history(self) -> List[ChangeEvent]:
        return self._history.all()

    def history_for_direction(self, direction: Direction) -> List[ChangeEvent]:
        return self._history.for_direction(direction)

    def recent_history(self, count: int) -> List[ChangeEvent]:
        return self._history.recent(count)

    def clear_history(self):
        self._history.clear()

    def _touch(self):
        self._last_modified_at = datetime.now(timezone.utc)

    def __eq__(self, other):
        return isinstance(other, Intersection) and other._id == self._id

    def __hash__(self):
        return hash(self._id)

    def __repr__(self):
        return f"Intersection(id={self._id!r}, name={self._name!r}, mode={self._mode.name})"
