"""
Automatic phase cycling for running intersections.

The scheduler keeps its own side table of (phase, phase start) per
intersection id. That table is auxiliary: it can be reset at any time without
touching the intersection itself.
"""
import threading
import time
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from ...common.exceptions import IntersectionNotFoundError
from ...common.logging import setup_logger, log_execution_time
from ...common.metrics import MetricsCollector
from ..domain import Direction, Indication, Intersection, IntersectionRegistry

logger = setup_logger(__name__)

NOT_RUNNING = "NOT_RUNNING"


class TrafficPhase(Enum):
    NS_GREEN = "NS_GREEN"
    NS_YELLOW = "NS_YELLOW"
    EW_GREEN = "EW_GREEN"
    EW_YELLOW = "EW_YELLOW"

    @property
    def next(self) -> "TrafficPhase":
        return _NEXT_PHASE[self]

    def dwell_ms(self, intersection: Intersection) -> int:
        if self in (TrafficPhase.NS_GREEN, TrafficPhase.EW_GREEN):
            return intersection.timing.green_duration_ms
        return intersection.timing.yellow_duration_ms


_NEXT_PHASE = {
    TrafficPhase.NS_GREEN: TrafficPhase.NS_YELLOW,
    TrafficPhase.NS_YELLOW: TrafficPhase.EW_GREEN,
    TrafficPhase.EW_GREEN: TrafficPhase.EW_YELLOW,
    TrafficPhase.EW_YELLOW: TrafficPhase.NS_GREEN,
}

# Cross-axis RED assignments come first so the GREEN check never sees the
# previous phase's greens.
PHASE_ASSIGNMENTS: Dict[TrafficPhase, List[Tuple[Direction, Indication]]] = {
    TrafficPhase.NS_GREEN: [
        (Direction.EAST, Indication.RED),
        (Direction.WEST, Indication.RED),
        (Direction.NORTH, Indication.GREEN),
        (Direction.SOUTH, Indication.GREEN),
    ],
    TrafficPhase.NS_YELLOW: [
        (Direction.NORTH, Indication.YELLOW),
        (Direction.SOUTH, Indication.YELLOW),
    ],
    TrafficPhase.EW_GREEN: [
        (Direction.NORTH, Indication.RED),
        (Direction.SOUTH, Indication.RED),
        (Direction.EAST, Indication.GREEN),
        (Direction.WEST, Indication.GREEN),
    ],
    TrafficPhase.EW_YELLOW: [
        (Direction.EAST, Indication.YELLOW),
        (Direction.WEST, Indication.YELLOW),
    ],
}


class PhaseScheduler:
    """
    Advances the phase of every RUNNING intersection once its dwell elapses.

    Intersections in any other mode are skipped and keep their tracked phase,
    so pause/resume continues mid-phase. A failure on one intersection is
    logged and never stops the rest of the tick.
    """

    def __init__(
        self,
        registry: IntersectionRegistry,
        clock: Callable[[], float] = time.monotonic,
        metrics_collector: Optional[MetricsCollector] = None
    ):
        self.registry = registry
        self.clock = clock
        self.metrics_collector = metrics_collector
        self._phases: Dict[str, Tuple[TrafficPhase, float]] = {}
        self._lock = threading.Lock()

    @log_execution_time(logger)
    def tick(self):
        start = self.clock()
        intersections = self.registry.list()
        self._drop_stale({i.id for i in intersections})
        for intersection in intersections:
            if not intersection.is_running():
                continue
            try:
                self._process(intersection)
            except Exception as e:
                logger.error(f"Error processing intersection {intersection.id}: {e}")
                if self.metrics_collector:
                    self.metrics_collector.record_error()
        if self.metrics_collector:
            self.metrics_collector.record_tick((self.clock() - start) * 1000)

    def _drop_stale(self, live_ids):
        with self._lock:
            for stale in [i for i in self._phases if i not in live_ids]:
                del self._phases[stale]
                logger.debug(f"Dropped phase tracking for removed intersection {stale}")

    def _process(self, intersection: Intersection):
        # Held across tracking and assignment so an emergency stop never interleaves
        with intersection.phase_lock:
            if not intersection.is_running():
                logger.debug(f"Intersection {intersection.id} left RUNNING mid-tick, skipping")
                return
            now = self.clock()
            with self._lock:
                phase, started = self._phases.setdefault(intersection.id, (TrafficPhase.NS_GREEN, now))
            elapsed_ms = (now - started) * 1000
            if elapsed_ms < phase.dwell_ms(intersection):
                return

            next_phase = phase.next
            logger.debug(f"Intersection {intersection.id}: advancing from {phase.name} to {next_phase.name}")
            # Tracking only moves once the assignment succeeded; a failure retries next tick
            self.apply_phase(intersection, next_phase)
            with self._lock:
                self._phases[intersection.id] = (next_phase, now)
        if self.metrics_collector:
            self.metrics_collector.record_transition()

    @staticmethod
    def apply_phase(intersection: Intersection, phase: TrafficPhase):
        triggered_by = f"SCHEDULER_{phase.name}"
        for direction, indication in PHASE_ASSIGNMENTS[phase]:
            intersection.change_signal(direction, indication, triggered_by)

    def reset_phase(self, intersection_id: str):
        with self._lock:
            self._phases.pop(intersection_id, None)

    def current_phase(self, intersection_id: str) -> Optional[TrafficPhase]:
        tracked = self._phases.get(intersection_id)
        return tracked[0] if tracked else None

    def time_remaining_ms(self, intersection_id: str) -> int:
        tracked = self._phases.get(intersection_id)
        if tracked is None:
            return 0
        try:
            intersection = self.registry.get(intersection_id)
        except IntersectionNotFoundError:
            return 0
        phase, started = tracked
        elapsed_ms = (self.clock() - started) * 1000
        return max(0, int(phase.dwell_ms(intersection) - elapsed_ms))

    def tracked_ids(self) -> List[str]:
        with self._lock:
            return list(self._phases)


class SchedulerRunner:
    """
    Runs `scheduler.tick()` on a fixed interval in a daemon thread.
    """

    def __init__(self, scheduler: PhaseScheduler, interval_ms: int = 500):
        if interval_ms <= 0:
            raise ValueError("Tick interval must be positive")
        self.scheduler = scheduler
        self.interval = interval_ms / 1000.0
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        if self.is_running:
            logger.warning("Scheduler already running")
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run_loop,
            name="PhaseSchedulerThread",
            daemon=True
        )
        self._thread.start()
        logger.info(f"Phase scheduler started (interval={self.interval * 1000:.0f}ms)")

    def _run_loop(self):
        next_tick = time.monotonic()
        while not self._stop_event.is_set():
            try:
                self.scheduler.tick()
            except Exception as e:
                logger.error(f"Scheduler tick failed: {e}", exc_info=True)
            next_tick += self.interval
            # Fixed rate; if a tick overran, start the next one right away
            delay = max(0.0, next_tick - time.monotonic())
            if delay == 0.0:
                next_tick = time.monotonic()
            self._stop_event.wait(delay)

    def stop(self, timeout: float = 2.0):
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("Phase scheduler stopped")
