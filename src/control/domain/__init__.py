from .signals import Direction, Indication, Signal
from .entities import OperationMode, TimingConfig, ChangeEvent
from .history import EventHistory, MAX_HISTORY_SIZE
from .intersection import Intersection
from .repositories import IntersectionRegistry

__all__ = [
    "Direction",
    "Indication",
    "Signal",
    "OperationMode",
    "TimingConfig",
    "ChangeEvent",
    "EventHistory",
    "MAX_HISTORY_SIZE",
    "Intersection",
    "IntersectionRegistry",
]
