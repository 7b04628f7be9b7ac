from .intersection import (
    TimingConfigSchema,
    CreateIntersectionRequest,
    ChangeSignalRequest,
    SignalStateSchema,
    IntersectionSchema,
    ChangeEventSchema,
    PhaseInfoSchema,
    ApiResponse,
)

__all__ = [
    "TimingConfigSchema",
    "CreateIntersectionRequest",
    "ChangeSignalRequest",
    "SignalStateSchema",
    "IntersectionSchema",
    "ChangeEventSchema",
    "PhaseInfoSchema",
    "ApiResponse",
]
