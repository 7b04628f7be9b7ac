from omegaconf import DictConfig
from typing import Callable, Dict, Optional
import time

from ...common.logging import setup_logger
from ...common.metrics import MetricsCollector
from ..domain import IntersectionRegistry, TimingConfig
from ..infrastructure import InMemoryIntersectionRegistry
from .scheduler import PhaseScheduler, SchedulerRunner
from .services.intersection_service import IntersectionService

logger = setup_logger(__name__)

class ControlApplicationBuilder:
    """
    Builder pattern for constructing the Control application.
    Centralizes component instantiation and wiring.
    """

    def __init__(self, config: DictConfig, clock: Callable[[], float] = time.monotonic):
        self.config = config
        self.clock = clock
        self.metrics_collector = MetricsCollector()

        # Components
        self.registry: Optional[IntersectionRegistry] = None
        self.scheduler: Optional[PhaseScheduler] = None
        self.service: Optional[IntersectionService] = None
        self.runner: Optional[SchedulerRunner] = None

    def build_registry(self) -> 'ControlApplicationBuilder':
        self.registry = InMemoryIntersectionRegistry()
        return self

    def build_scheduler(self) -> 'ControlApplicationBuilder':
        if not self.registry:
            self.build_registry()
        self.scheduler = PhaseScheduler(
            self.registry,
            clock=self.clock,
            metrics_collector=self.metrics_collector
        )
        return self

    def build_service(self) -> 'ControlApplicationBuilder':
        if not self.scheduler:
            self.build_scheduler()
        self.service = IntersectionService(
            self.registry,
            self.scheduler,
            default_timing=timing_from_config(self.config.timing)
        )
        return self

    def seed_intersections(self) -> 'ControlApplicationBuilder':
        """Registers the intersections listed in config, starting those marked autostart."""
        if not self.service:
            self.build_service()
        for seed in self.config.get('intersections', []) or []:
            timing = timing_from_config(seed.timing) if seed.get('timing') else None
            self.service.create_intersection(seed.id, seed.name, timing)
            if seed.get('autostart', False):
                self.service.start(seed.id)
        logger.info(f"Seeded {len(self.registry.list())} intersection(s) from config")
        return self

    def build_runner(self) -> SchedulerRunner:
        if not self.scheduler:
            self.build_scheduler()
        self.runner = SchedulerRunner(self.scheduler, self.config.scheduler.tick_interval_ms)
        return self.runner

    def get_components(self) -> Dict:
        return {
            'registry': self.registry,
            'scheduler': self.scheduler,
            'service': self.service,
            'runner': self.runner,
            'metrics_collector': self.metrics_collector
        }

def timing_from_config(cfg: DictConfig) -> TimingConfig:
    return TimingConfig(
        green_duration_ms=int(cfg.green_duration_ms),
        yellow_duration_ms=int(cfg.yellow_duration_ms),
        red_duration_ms=int(cfg.red_duration_ms)
    )
