"""
Domain entities for the Control module.
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from ...common.exceptions import InvalidConfigurationError
from .signals import Direction, Indication


class OperationMode(Enum):
    RUNNING = "RUNNING"
    PAUSED = "PAUSED"
    EMERGENCY = "EMERGENCY"
    MAINTENANCE = "MAINTENANCE"

    @property
    def description(self) -> str:
        return _MODE_DESCRIPTIONS[self]


_MODE_DESCRIPTIONS = {
    OperationMode.RUNNING: "Intersection is operating normally",
    OperationMode.PAUSED: "Intersection operation is paused",
    OperationMode.EMERGENCY: "Emergency mode - all lights flashing",
    OperationMode.MAINTENANCE: "Under maintenance - manual control only",
}


@dataclass(frozen=True)
class TimingConfig:
    """
    Dwell times in milliseconds.
    Red duration is informational: the scheduler never dwells on it.
    """
    green_duration_ms: int = 30000
    yellow_duration_ms: int = 5000
    red_duration_ms: int = 35000

    def __post_init__(self):
        for name in ("green_duration_ms", "yellow_duration_ms", "red_duration_ms"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise InvalidConfigurationError(f"{name} must be a positive integer, got {value!r}")


@dataclass(frozen=True)
class ChangeEvent:
    """
    Immutable record of one signal transition.
    """
    intersection_id: str
    direction: Direction
    previous_state: Optional[Indication]
    new_state: Indication
    duration_in_previous_state_ms: int
    triggered_by: str
    event_id: uuid.UUID = field(default_factory=uuid.uuid4)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
