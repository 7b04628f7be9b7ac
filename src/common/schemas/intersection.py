from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import UUID
from pydantic import BaseModel, Field, field_validator

from ...control.domain import (
    ChangeEvent, Direction, Indication, Intersection, OperationMode, Signal, TimingConfig
)

class TimingConfigSchema(BaseModel):
    """
    Dwell times of an intersection, in milliseconds.
    """
    green_duration_ms: int = Field(30000, ge=1000, description="Green dwell time in ms")
    yellow_duration_ms: int = Field(5000, ge=1000, description="Yellow dwell time in ms")
    red_duration_ms: int = Field(35000, ge=1000, description="Red duration in ms (informational)")

    def to_domain(self) -> TimingConfig:
        return TimingConfig(
            green_duration_ms=self.green_duration_ms,
            yellow_duration_ms=self.yellow_duration_ms,
            red_duration_ms=self.red_duration_ms
        )

    @classmethod
    def from_domain(cls, timing: TimingConfig) -> "TimingConfigSchema":
        return cls(
            green_duration_ms=timing.green_duration_ms,
            yellow_duration_ms=timing.yellow_duration_ms,
            red_duration_ms=timing.red_duration_ms
        )

class CreateIntersectionRequest(BaseModel):
    id: str = Field(..., min_length=1, max_length=50, description="Unique identifier of the intersection")
    name: str = Field(..., min_length=1, max_length=100, description="Human readable name")
    timing_config: Optional[TimingConfigSchema] = Field(None, description="Timing; defaults apply when omitted")

    @field_validator("id", "name")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

class ChangeSignalRequest(BaseModel):
    direction: Direction = Field(..., description="Direction of the signal to change")
    new_state: Indication = Field(..., description="Indication to display")

class SignalStateSchema(BaseModel):
    direction: Direction
    current_state: Indication
    state_description: str
    previous_state: Optional[Indication] = None
    last_state_change_time: datetime
    duration_in_current_state_ms: int = Field(..., ge=0)

    @classmethod
    def from_domain(cls, signal: Signal) -> "SignalStateSchema":
        return cls(
            direction=signal.direction,
            current_state=signal.current,
            state_description=signal.current.description,
            previous_state=signal.previous,
            last_state_change_time=signal.last_change_time,
            duration_in_current_state_ms=signal.duration_in_current_state_ms()
        )

class IntersectionSchema(BaseModel):
    """
    Full state of an intersection as exposed over the API.
    """
    id: str
    name: str
    operation_status: OperationMode
    operation_status_description: str
    traffic_lights: Dict[Direction, SignalStateSchema]
    has_conflict: bool
    timing_config: TimingConfigSchema
    created_at: datetime
    last_modified_at: datetime

    @classmethod
    def from_domain(cls, intersection: Intersection) -> "IntersectionSchema":
        return cls(
            id=intersection.id,
            name=intersection.name,
            operation_status=intersection.mode,
            operation_status_description=intersection.mode.description,
            traffic_lights={
                d: SignalStateSchema.from_domain(s) for d, s in intersection.signals.items()
            },
            has_conflict=intersection.has_conflict(),
            timing_config=TimingConfigSchema.from_domain(intersection.timing),
            created_at=intersection.created_at,
            last_modified_at=intersection.last_modified_at
        )

class ChangeEventSchema(BaseModel):
    event_id: UUID
    intersection_id: str
    direction: Direction
    previous_state: Optional[Indication] = None
    new_state: Indication
    timestamp: datetime
    duration_in_previous_state_ms: int = Field(..., ge=0)
    triggered_by: str

    @classmethod
    def from_domain(cls, event: ChangeEvent) -> "ChangeEventSchema":
        return cls(
            event_id=event.event_id,
            intersection_id=event.intersection_id,
            direction=event.direction,
            previous_state=event.previous_state,
            new_state=event.new_state,
            timestamp=event.timestamp,
            duration_in_previous_state_ms=event.duration_in_previous_state_ms,
            triggered_by=event.triggered_by
        )

class PhaseInfoSchema(BaseModel):
    current_phase: str = Field(..., description="Scheduler phase name or NOT_RUNNING")
    time_remaining_ms: int = Field(..., ge=0)

class ApiResponse(BaseModel):
    """
    Envelope wrapping every API response.
    """
    success: bool
    message: str
    data: Optional[Any] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def ok(cls, data: Any = None, message: str = "Operation successful") -> "ApiResponse":
        return cls(success=True, message=message, data=data)

    @classmethod
    def error(cls, message: str, data: Any = None) -> "ApiResponse":
        return cls(success=False, message=message, data=data)
