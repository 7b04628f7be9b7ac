from dataclasses import dataclass
from typing import Dict, List
import threading
import time

@dataclass
class SchedulerMetrics:
    """Phase scheduler metrics"""
    uptime_seconds: float
    ticks: int
    phase_transitions: int
    intersection_errors: int
    avg_tick_time_ms: float

    def to_dict(self) -> Dict:
        return {
            'uptime_seconds': self.uptime_seconds,
            'ticks': self.ticks,
            'phase_transitions': self.phase_transitions,
            'intersection_errors': self.intersection_errors,
            'avg_tick_time_ms': self.avg_tick_time_ms
        }


class MetricsCollector:
    """Collects and aggregates scheduler metrics"""

    def __init__(self):
        self.tick_times: List[float] = []
        self.ticks = 0
        self.phase_transitions = 0
        self.intersection_errors = 0
        self.start_time = time.monotonic()
        self._lock = threading.Lock()

    def record_tick(self, duration_ms: float):
        with self._lock:
            self.ticks += 1
            self.tick_times.append(duration_ms)
            # Keep buffer size manageable
            if len(self.tick_times) > 1000:
                self.tick_times.pop(0)

    def record_transition(self):
        with self._lock:
            self.phase_transitions += 1

    def record_error(self):
        with self._lock:
            self.intersection_errors += 1

    def get_metrics(self) -> SchedulerMetrics:
        with self._lock:
            avg_tick = sum(self.tick_times) / len(self.tick_times) if self.tick_times else 0.0
            return SchedulerMetrics(
                uptime_seconds=time.monotonic() - self.start_time,
                ticks=self.ticks,
                phase_transitions=self.phase_transitions,
                intersection_errors=self.intersection_errors,
                avg_tick_time_ms=avg_tick
            )
