"""
API for managing intersections and their signals.
"""
from fastapi import FastAPI, HTTPException
from typing import Optional

from .....common.logging import setup_logger
from .....common.schemas import (
    ApiResponse, ChangeEventSchema, ChangeSignalRequest, CreateIntersectionRequest,
    IntersectionSchema, PhaseInfoSchema, SignalStateSchema, TimingConfigSchema
)
from ....application.services.intersection_service import IntersectionService
from ....domain import Direction

logger = setup_logger(__name__)

app = FastAPI()

PREFIX = "/api/v1/intersections"

# Singleton
_service: Optional[IntersectionService] = None

def init_service(service: IntersectionService):
    global _service
    _service = service

def get_service() -> IntersectionService:
    if _service is None:
        raise HTTPException(500, "Intersection service not initialized")
    return _service

# CRUD

@app.post(PREFIX, status_code=201)
def create_intersection(request: CreateIntersectionRequest):
    """Creates a new intersection; all lights start RED and the mode PAUSED."""
    logger.info(f"REST: Creating intersection with ID: {request.id}")
    timing = request.timing_config.to_domain() if request.timing_config else None
    intersection = get_service().create_intersection(request.id, request.name, timing)
    return ApiResponse.ok(IntersectionSchema.from_domain(intersection), "Intersection created successfully")

@app.get(PREFIX)
def list_intersections():
    intersections = get_service().list_intersections()
    return ApiResponse.ok([IntersectionSchema.from_domain(i) for i in intersections])

@app.get(PREFIX + "/{intersection_id}")
def get_intersection(intersection_id: str):
    intersection = get_service().get_intersection(intersection_id)
    return ApiResponse.ok(IntersectionSchema.from_domain(intersection))

@app.delete(PREFIX + "/{intersection_id}")
def delete_intersection(intersection_id: str):
    logger.info(f"REST: Deleting intersection: {intersection_id}")
    get_service().delete_intersection(intersection_id)
    return ApiResponse.ok(None, "Intersection deleted successfully")

# Signals

@app.put(PREFIX + "/{intersection_id}/lights")
def change_signal(intersection_id: str, request: ChangeSignalRequest):
    intersection = get_service().change_signal(intersection_id, request.direction, request.new_state)
    return ApiResponse.ok(IntersectionSchema.from_domain(intersection), "Traffic light state changed")

@app.get(PREFIX + "/{intersection_id}/lights/{direction}")
def get_signal(intersection_id: str, direction: Direction):
    signal = get_service().get_signal(intersection_id, direction)
    return ApiResponse.ok(SignalStateSchema.from_domain(signal))

# Operation control

@app.post(PREFIX + "/{intersection_id}/start")
def start_intersection(intersection_id: str):
    """Starts automatic cycling from N/S green."""
    intersection = get_service().start(intersection_id)
    return ApiResponse.ok(IntersectionSchema.from_domain(intersection), "Intersection started")

@app.post(PREFIX + "/{intersection_id}/pause")
def pause_intersection(intersection_id: str):
    intersection = get_service().pause(intersection_id)
    return ApiResponse.ok(IntersectionSchema.from_domain(intersection), "Intersection paused")

@app.post(PREFIX + "/{intersection_id}/resume")
def resume_intersection(intersection_id: str):
    intersection = get_service().resume(intersection_id)
    return ApiResponse.ok(IntersectionSchema.from_domain(intersection), "Intersection resumed")

@app.post(PREFIX + "/{intersection_id}/emergency-stop")
def emergency_stop(intersection_id: str):
    logger.warning(f"REST: Emergency stop at intersection: {intersection_id}")
    intersection = get_service().emergency_stop(intersection_id)
    return ApiResponse.ok(
        IntersectionSchema.from_domain(intersection), "Emergency stop executed - all lights RED"
    )

@app.put(PREFIX + "/{intersection_id}/timing")
def update_timing(intersection_id: str, timing: TimingConfigSchema):
    intersection = get_service().update_timing(intersection_id, timing.to_domain())
    return ApiResponse.ok(IntersectionSchema.from_domain(intersection), "Timing configuration updated")

# History

@app.get(PREFIX + "/{intersection_id}/history")
def get_history(intersection_id: str):
    events = get_service().history(intersection_id)
    return ApiResponse.ok([ChangeEventSchema.from_domain(e) for e in events])

@app.get(PREFIX + "/{intersection_id}/history/direction/{direction}")
def get_history_for_direction(intersection_id: str, direction: Direction):
    events = get_service().history_for_direction(intersection_id, direction)
    return ApiResponse.ok([ChangeEventSchema.from_domain(e) for e in events])

@app.get(PREFIX + "/{intersection_id}/history/recent")
def get_recent_history(intersection_id: str, count: int = 10):
    events = get_service().recent_history(intersection_id, count)
    return ApiResponse.ok([ChangeEventSchema.from_domain(e) for e in events])

@app.delete(PREFIX + "/{intersection_id}/history")
def clear_history(intersection_id: str):
    get_service().clear_history(intersection_id)
    return ApiResponse.ok(None, "History cleared")

# Scheduler

@app.get(PREFIX + "/{intersection_id}/phase")
def get_phase(intersection_id: str):
    phase, remaining = get_service().phase_info(intersection_id)
    return ApiResponse.ok(PhaseInfoSchema(current_phase=phase, time_remaining_ms=remaining))
