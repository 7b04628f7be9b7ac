"""
Service layer for intersections.
Holds the business rules the domain leaves to its callers: mode transition
preconditions, safe start-up state and scheduler phase cleanup.
"""
from typing import List, Optional, Tuple

from ....common.exceptions import InvalidOperationError, SignalConflictError
from ....common.logging import setup_logger
from ...domain import (
    ChangeEvent, Direction, Indication, Intersection, IntersectionRegistry,
    OperationMode, Signal, TimingConfig
)
from ..scheduler import NOT_RUNNING, PhaseScheduler

logger = setup_logger(__name__)

API_REQUEST = "API_REQUEST"
INITIALIZATION = "INITIALIZATION"
EMERGENCY_API_CALL = "EMERGENCY_API_CALL"


class IntersectionService:
    """
    Manages intersections through an injected registry and scheduler.
    """

    def __init__(
        self,
        registry: IntersectionRegistry,
        scheduler: PhaseScheduler,
        default_timing: Optional[TimingConfig] = None
    ):
        self.registry = registry
        self.scheduler = scheduler
        self.default_timing = default_timing or TimingConfig()

    def create_intersection(
        self,
        intersection_id: str,
        name: str,
        timing: Optional[TimingConfig] = None
    ) -> Intersection:
        logger.info(f"Creating intersection with ID: {intersection_id}")
        intersection = Intersection(intersection_id, name, timing or self.default_timing)
        self.registry.add(intersection)
        logger.info(f"Intersection created successfully: {intersection_id}")
        return intersection

    def get_intersection(self, intersection_id: str) -> Intersection:
        return self.registry.get(intersection_id)

    def list_intersections(self) -> List[Intersection]:
        return self.registry.list()

    def delete_intersection(self, intersection_id: str):
        logger.info(f"Deleting intersection: {intersection_id}")
        intersection = self.registry.get(intersection_id)
        if intersection.is_running():
            intersection.set_mode(OperationMode.PAUSED)
        self.registry.remove(intersection_id)
        self.scheduler.reset_phase(intersection_id)
        logger.info(f"Intersection deleted: {intersection_id}")

    def change_signal(
        self,
        intersection_id: str,
        direction: Direction,
        new_state: Indication,
        triggered_by: str = API_REQUEST
    ) -> Intersection:
        logger.info(f"Changing signal at intersection {intersection_id}: {direction.name} -> {new_state.name}")
        intersection = self.registry.get(intersection_id)
        try:
            intersection.change_signal(direction, new_state, triggered_by)
        except SignalConflictError as e:
            logger.warning(f"Signal change rejected at {intersection_id}: {e}")
            raise
        return intersection

    def get_signal(self, intersection_id: str, direction: Direction) -> Signal:
        return self.registry.get(intersection_id).signal(direction)

    def start(self, intersection_id: str) -> Intersection:
        logger.info(f"Starting intersection: {intersection_id}")
        intersection = self.registry.get(intersection_id)
        if intersection.is_running():
            raise InvalidOperationError("Intersection is already running")

        self._initialize_safe_state(intersection)
        self.scheduler.reset_phase(intersection_id)
        intersection.set_mode(OperationMode.RUNNING)
        logger.info(f"Intersection started: {intersection_id}")
        return intersection

    def pause(self, intersection_id: str) -> Intersection:
        logger.info(f"Pausing intersection: {intersection_id}")
        intersection = self.registry.get(intersection_id)
        if not intersection.is_running():
            raise InvalidOperationError("Intersection is not running")
        intersection.set_mode(OperationMode.PAUSED)
        return intersection

    def resume(self, intersection_id: str) -> Intersection:
        logger.info(f"Resuming intersection: {intersection_id}")
        intersection = self.registry.get(intersection_id)
        if not intersection.is_paused():
            raise InvalidOperationError("Intersection is not paused")
        intersection.set_mode(OperationMode.RUNNING)
        return intersection

    def set_mode(self, intersection_id: str, mode: OperationMode) -> Intersection:
        intersection = self.registry.get(intersection_id)
        intersection.set_mode(mode)
        logger.info(f"Intersection {intersection_id} set to {mode.name}")
        return intersection

    def emergency_stop(self, intersection_id: str, triggered_by: str = EMERGENCY_API_CALL) -> Intersection:
        intersection = self.registry.get(intersection_id)
        intersection.emergency_stop(triggered_by)
        self.scheduler.reset_phase(intersection_id)
        logger.warning(f"Emergency stop executed at intersection: {intersection_id}")
        return intersection

    def update_timing(self, intersection_id: str, timing: TimingConfig) -> Intersection:
        logger.info(f"Updating timing config for intersection: {intersection_id}")
        intersection = self.registry.get(intersection_id)
        intersection.set_timing(timing)
        return intersection

    def history(self, intersection_id: str) -> List[ChangeEvent]:
        return self.registry.get(intersection_id).history()

    def history_for_direction(self, intersection_id: str, direction: Direction) -> List[ChangeEvent]:
        return self.registry.get(intersection_id).history_for_direction(direction)

    def recent_history(self, intersection_id: str, count: int) -> List[ChangeEvent]:
        return self.registry.get(intersection_id).recent_history(count)

    def clear_history(self, intersection_id: str):
        logger.info(f"Clearing history for intersection: {intersection_id}")
        self.registry.get(intersection_id).clear_history()

    def phase_info(self, intersection_id: str) -> Tuple[str, int]:
        self.registry.get(intersection_id)
        phase = self.scheduler.current_phase(intersection_id)
        return (
            phase.name if phase else NOT_RUNNING,
            self.scheduler.time_remaining_ms(intersection_id)
        )

    @staticmethod
    def _initialize_safe_state(intersection: Intersection):
        # All RED first, then the N/S axis (which never conflicts with itself)
        for direction in Direction:
            intersection.change_signal(direction, Indication.RED, INITIALIZATION)
        intersection.change_signal(Direction.NORTH, Indication.GREEN, INITIALIZATION)
        intersection.change_signal(Direction.SOUTH, Indication.GREEN, INITIALIZATION)
