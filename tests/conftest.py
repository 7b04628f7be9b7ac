import pytest
from src.control.domain import Intersection, TimingConfig
from src.control.infrastructure import InMemoryIntersectionRegistry
from src.control.application.scheduler import PhaseScheduler
from src.control.application.services.intersection_service import IntersectionService
from src.common.metrics import MetricsCollector

class FakeClock:
    """Monotonic clock that only moves when told to."""
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: int):
        self.now += ms / 1000.0

@pytest.fixture
def clock():
    return FakeClock()

@pytest.fixture
def timing():
    return TimingConfig(green_duration_ms=30000, yellow_duration_ms=5000, red_duration_ms=35000)

@pytest.fixture
def intersection(timing):
    return Intersection("INT-001", "Av. Larco y Av. Benavides", timing)

@pytest.fixture
def registry():
    return InMemoryIntersectionRegistry()

@pytest.fixture
def metrics_collector():
    return MetricsCollector()

@pytest.fixture
def scheduler(registry, clock, metrics_collector):
    return PhaseScheduler(registry, clock=clock, metrics_collector=metrics_collector)

@pytest.fixture
def service(registry, scheduler):
    return IntersectionService(registry, scheduler)
