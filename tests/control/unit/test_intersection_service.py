import threading
import pytest
from unittest.mock import patch
from src.common.exceptions import (
    DuplicateIntersectionError, IntersectionNotFoundError, InvalidConfigurationError,
    InvalidOperationError, SignalConflictError
)
from src.control.domain import Direction, Indication, OperationMode, TimingConfig
from src.control.application.scheduler import NOT_RUNNING, TrafficPhase
from src.control.application.services.intersection_service import (
    API_REQUEST, EMERGENCY_API_CALL, INITIALIZATION, IntersectionService
)

@pytest.fixture
def created(service):
    return service.create_intersection("INT-001", "Av. Larco y Av. Benavides")

def test_create_uses_default_timing(service, created):
    assert created.timing == TimingConfig()
    assert created.mode is OperationMode.PAUSED
    assert service.get_intersection("INT-001") is created

def test_create_with_service_default_timing(registry, scheduler):
    service = IntersectionService(registry, scheduler, default_timing=TimingConfig(10000, 2000, 12000))
    intersection = service.create_intersection("INT-009", "Corta")
    assert intersection.timing.green_duration_ms == 10000

def test_create_with_explicit_timing(service):
    timing = TimingConfig(20000, 4000, 24000)
    intersection = service.create_intersection("INT-002", "Pardo", timing)
    assert intersection.timing is timing

def test_create_duplicate(service, created):
    with pytest.raises(DuplicateIntersectionError):
        service.create_intersection("INT-001", "Otra")

def test_list(service, created):
    service.create_intersection("INT-002", "Pardo")
    assert {i.id for i in service.list_intersections()} == {"INT-001", "INT-002"}

@pytest.mark.parametrize("operation", [
    lambda s: s.get_intersection("NOPE"),
    lambda s: s.delete_intersection("NOPE"),
    lambda s: s.start("NOPE"),
    lambda s: s.pause("NOPE"),
    lambda s: s.resume("NOPE"),
    lambda s: s.emergency_stop("NOPE"),
    lambda s: s.change_signal("NOPE", Direction.NORTH, Indication.GREEN),
    lambda s: s.history("NOPE"),
    lambda s: s.phase_info("NOPE"),
])
def test_unknown_id_raises_not_found(service, operation):
    with pytest.raises(IntersectionNotFoundError):
        operation(service)

def test_start_sets_safe_state(service, created):
    service.start("INT-001")

    assert created.mode is OperationMode.RUNNING
    snap = created.snapshot()
    assert snap[Direction.NORTH] is Indication.GREEN
    assert snap[Direction.SOUTH] is Indication.GREEN
    assert snap[Direction.EAST] is Indication.RED
    assert snap[Direction.WEST] is Indication.RED
    assert all(e.triggered_by == INITIALIZATION for e in created.history())

def test_start_from_conflicting_manual_state(service, created):
    service.change_signal("INT-001", Direction.EAST, Indication.GREEN)
    service.start("INT-001")
    assert not created.has_conflict()
    assert created.signal(Direction.NORTH).is_green()

def test_start_twice_rejected(service, created):
    service.start("INT-001")
    with pytest.raises(InvalidOperationError, match="already running"):
        service.start("INT-001")

def test_start_from_emergency(service, created):
    service.emergency_stop("INT-001")
    service.start("INT-001")
    assert created.is_running()

def test_pause_requires_running(service, created):
    with pytest.raises(InvalidOperationError, match="not running"):
        service.pause("INT-001")
    service.start("INT-001")
    service.pause("INT-001")
    assert created.is_paused()

def test_resume_requires_paused(service, created):
    service.start("INT-001")
    with pytest.raises(InvalidOperationError, match="not paused"):
        service.resume("INT-001")
    service.pause("INT-001")
    service.resume("INT-001")
    assert created.is_running()

def test_resume_from_emergency_rejected(service, created):
    service.emergency_stop("INT-001")
    with pytest.raises(InvalidOperationError):
        service.resume("INT-001")

def test_set_mode(service, created):
    service.set_mode("INT-001", OperationMode.MAINTENANCE)
    assert created.mode is OperationMode.MAINTENANCE

def test_change_signal_attribution(service, created):
    service.change_signal("INT-001", Direction.WEST, Indication.GREEN)
    assert created.history()[-1].triggered_by == API_REQUEST

def test_change_signal_conflict_propagates(service, created):
    service.change_signal("INT-001", Direction.NORTH, Indication.GREEN)
    with pytest.raises(SignalConflictError):
        service.change_signal("INT-001", Direction.WEST, Indication.GREEN)
    assert created.signal(Direction.WEST).is_red()

def test_get_signal(service, created):
    assert service.get_signal("INT-001", Direction.SOUTH).direction is Direction.SOUTH

def test_start_resets_scheduler_phase(service, scheduler, clock, created):
    service.start("INT-001")
    scheduler.tick()
    clock.advance_ms(30000)
    scheduler.tick()
    assert scheduler.current_phase("INT-001") is TrafficPhase.NS_YELLOW

    service.pause("INT-001")
    service.set_mode("INT-001", OperationMode.MAINTENANCE)
    service.start("INT-001")
    assert scheduler.current_phase("INT-001") is None
    scheduler.tick()
    assert scheduler.current_phase("INT-001") is TrafficPhase.NS_GREEN

def test_emergency_stop(service, scheduler, created):
    service.start("INT-001")
    scheduler.tick()

    service.emergency_stop("INT-001")

    assert created.mode is OperationMode.EMERGENCY
    assert all(s is Indication.RED for s in created.snapshot().values())
    assert scheduler.current_phase("INT-001") is None
    assert created.history()[-1].triggered_by == f"{EMERGENCY_API_CALL} (EMERGENCY)"

def advance_to_ns_yellow(service, scheduler, clock):
    service.start("INT-001")
    scheduler.tick()
    clock.advance_ms(30000)
    scheduler.tick()
    assert scheduler.current_phase("INT-001") is TrafficPhase.NS_YELLOW

def test_emergency_stop_during_phase_application(service, scheduler, clock, created):
    advance_to_ns_yellow(service, scheduler, clock)
    clock.advance_ms(5000)

    original_change = created.change_signal
    stoppers = []

    def change_then_stop(direction, new_state, triggered_by):
        event = original_change(direction, new_state, triggered_by)
        if triggered_by == "SCHEDULER_EW_GREEN" and direction is Direction.SOUTH and not stoppers:
            stopper = threading.Thread(target=service.emergency_stop, args=("INT-001",))
            stoppers.append(stopper)
            stopper.start()
        return event

    with patch.object(created, "change_signal", side_effect=change_then_stop):
        scheduler.tick()
        stoppers[0].join(timeout=5)

    assert not stoppers[0].is_alive()
    assert created.mode is OperationMode.EMERGENCY
    assert all(s is Indication.RED for s in created.snapshot().values())
    assert scheduler.current_phase("INT-001") is None

def test_tick_after_emergency_stop_leaves_no_tracking(service, scheduler, clock, created):
    advance_to_ns_yellow(service, scheduler, clock)
    service.emergency_stop("INT-001")

    clock.advance_ms(60000)
    scheduler.tick()

    assert scheduler.current_phase("INT-001") is None
    assert service.phase_info("INT-001") == (NOT_RUNNING, 0)
    assert all(s is Indication.RED for s in created.snapshot().values())

def test_emergency_stop_landing_before_locked_processing(service, scheduler, created):
    service.start("INT-001")
    # Mode flips after the tick listed the intersection as running
    with patch.object(created, "is_running", side_effect=[True, False]):
        created.emergency_stop("test")
        scheduler.tick()

    assert scheduler.current_phase("INT-001") is None
    assert all(s is Indication.RED for s in created.snapshot().values())

def test_delete_drops_scheduler_phase(service, scheduler, created):
    service.start("INT-001")
    scheduler.tick()
    service.delete_intersection("INT-001")

    assert created.is_paused()
    assert scheduler.current_phase("INT-001") is None
    with pytest.raises(IntersectionNotFoundError):
        service.get_intersection("INT-001")

def test_update_timing(service, created):
    service.update_timing("INT-001", TimingConfig(15000, 3000, 18000))
    assert created.timing.yellow_duration_ms == 3000

def test_update_timing_invalid_leaves_config(service, created):
    original = created.timing
    with pytest.raises(InvalidConfigurationError):
        service.update_timing("INT-001", TimingConfig(green_duration_ms=-1))
    assert created.timing == original

def test_history_operations(service, created):
    for _ in range(3):
        service.change_signal("INT-001", Direction.NORTH, Indication.GREEN)
        service.change_signal("INT-001", Direction.NORTH, Indication.RED)
    service.change_signal("INT-001", Direction.EAST, Indication.YELLOW)

    assert len(service.history("INT-001")) == 7
    assert len(service.history_for_direction("INT-001", Direction.NORTH)) == 6
    assert service.recent_history("INT-001", 1)[0].direction is Direction.EAST

    service.clear_history("INT-001")
    assert service.history("INT-001") == []

def test_phase_info(service, scheduler, clock, created):
    assert service.phase_info("INT-001") == (NOT_RUNNING, 0)

    service.start("INT-001")
    scheduler.tick()
    clock.advance_ms(12000)
    assert service.phase_info("INT-001") == ("NS_GREEN", 18000)
