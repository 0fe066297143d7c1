import pytest

from dudeworld.sim.behaviors import _ACTIVITY_HANDLERS, AnimationAction, execute_activity
from dudeworld.sim.core import MAX_EVENT_TRACE, Simulation
from dudeworld.sim.entities import (
    ACTIVE_KINDS,
    EntityKind,
    create_dude_not_full,
    create_fairy,
    create_house,
    create_obstacle,
    create_stump,
)
from dudeworld.sim.point import Point
from dudeworld.sim.world import WorldModel


def _build_sim(seed: int = 8) -> Simulation:
    return Simulation(WorldModel(num_rows=4, num_cols=4), seed=seed)


def test_spawn_rejects_occupied_cell() -> None:
    sim = _build_sim()
    sim.spawn(create_house("house", Point(1, 1), ()))

    with pytest.raises(ValueError, match="occupied"):
        sim.spawn(create_stump("stump", Point(1, 1), ()))

    assert sim.find_entity("stump") is None
    assert len(sim.scheduler) == 0


def test_time_cannot_move_backwards() -> None:
    sim = _build_sim()
    sim.advance_time(2.0)

    with pytest.raises(ValueError, match="backwards"):
        sim.update_on_time(1.0)
    with pytest.raises(ValueError):
        sim.advance_time(-0.5)
    assert sim.time == 2.0


def test_run_until_lands_on_requested_time() -> None:
    sim = _build_sim()
    fairy = sim.spawn(create_fairy("fairy", Point(0, 0), 1.0, 100.0, ()))

    fired = sim.run_until(2.5, step=1.0)

    assert sim.time == 2.5
    assert fired == 2
    assert sim.pending_events(fairy)[0].time == 3.0
    with pytest.raises(ValueError, match="step"):
        sim.run_until(3.0, step=0)


def test_removed_entity_never_fires_again() -> None:
    sim = _build_sim()
    fairy = sim.spawn(create_fairy("fairy", Point(0, 0), 1.0, 0.5, ()))

    sim.advance_time(1.0)
    sim.remove(fairy)
    sim.advance_time(5.0)

    assert fairy not in sim.world
    assert not sim.scheduler.has_pending_events(fairy)
    assert all(entry["time"] <= 1.0 for entry in sim.get_event_trace())


def test_static_and_animated_only_kinds_schedule_accordingly() -> None:
    sim = _build_sim()
    house = sim.spawn(create_house("house", Point(0, 0), ()))
    stump = sim.spawn(create_stump("stump", Point(1, 0), ()))
    rock = sim.spawn(create_obstacle("rock", Point(2, 0), 0.5, ()))

    assert sim.pending_events(house) == []
    assert sim.pending_events(stump) == []
    assert [event.action_name for event in sim.pending_events(rock)] == ["animation"]

    sim.advance_time(1.0)

    assert rock.image_index == 2


def test_animation_repeat_count_limits_frames() -> None:
    sim = _build_sim()
    rock = sim.spawn(create_obstacle("rock", Point(0, 0), 1.0, ()))
    sim.scheduler.unschedule_all_events(rock)
    sim.scheduler.schedule_event(rock, AnimationAction(rock, sim.scheduler, repeat_count=2), 1.0)

    sim.advance_time(10.0)

    assert rock.image_index == 2
    assert sim.pending_events(rock) == []


def test_every_active_kind_has_an_activity() -> None:
    sim = _build_sim()
    house = create_house("house", Point(3, 3), ())

    with pytest.raises(ValueError, match="activity not supported for house"):
        execute_activity(house, sim.context)
    assert set(_ACTIVITY_HANDLERS) == set(ACTIVE_KINDS)


def test_event_trace_is_bounded_and_detached() -> None:
    sim = _build_sim()
    sim.spawn(create_obstacle("rock", Point(0, 0), 0.01, ()))

    sim.advance_time(5.0)

    trace = sim.get_event_trace()
    assert len(trace) == MAX_EVENT_TRACE
    trace.clear()
    assert len(sim.get_event_trace()) == MAX_EVENT_TRACE


def test_find_entity_filters_by_kind() -> None:
    sim = _build_sim()
    dude = sim.spawn(create_dude_not_full("same", Point(0, 0), 1.0, 1.0, 1, ()))

    assert sim.find_entity("same") is dude
    assert sim.find_entity("same", EntityKind.DUDE_NOT_FULL) is dude
    assert sim.find_entity("same", EntityKind.DUDE_FULL) is None


def test_spawn_rejects_out_of_bounds_entity() -> None:
    sim = Simulation(WorldModel(num_rows=3, num_cols=3), seed=1)
    ghost = create_fairy("ghost", Point(3, 1), 1.0, 0.5, ())

    with pytest.raises(ValueError, match="outside 3x3 world"):
        sim.spawn(ghost)

    assert ghost not in sim.world
    assert sim.pending_events(ghost) == []
    assert len(sim.scheduler) == 0
    sim.advance_time(2.0)
    sim.world.check_consistency()
