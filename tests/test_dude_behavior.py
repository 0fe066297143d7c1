from dudeworld.sim.core import Simulation
from dudeworld.sim.entities import (
    EntityKind,
    create_dude_full,
    create_dude_not_full,
    create_house,
    create_obstacle,
    create_sapling,
    create_stump,
    create_tree,
)
from dudeworld.sim.point import Point
from dudeworld.sim.world import WorldModel

SLOW = 100.0


def _build_sim(num_rows: int, num_cols: int) -> Simulation:
    return Simulation(WorldModel(num_rows=num_rows, num_cols=num_cols), seed=3)


def test_adjacent_dude_gathers_one_resource_per_tick() -> None:
    sim = _build_sim(3, 3)
    dude = sim.spawn(create_dude_not_full("dude", Point(0, 0), 1.0, SLOW, 3, ()))
    tree = sim.spawn(create_tree("tree", Point(1, 1), SLOW, SLOW, 5, ()))

    sim.advance_time(1.0)
    assert dude.resource_count == 1
    assert tree.health == 4

    sim.advance_time(1.0)
    assert dude.resource_count == 2
    assert tree.health == 3
    assert dude.position == Point(0, 0)


def test_dude_gathers_from_saplings() -> None:
    sim = _build_sim(1, 2)
    dude = sim.spawn(create_dude_not_full("dude", Point(0, 0), 1.0, SLOW, 3, ()))
    sapling = sim.spawn(create_sapling("sapling", Point(1, 0), ()))
    sim.scheduler.unschedule_all_events(sapling)

    sim.advance_time(1.0)

    assert dude.resource_count == 1
    assert sapling.health == -1


def test_full_dude_transforms_on_following_tick() -> None:
    sim = _build_sim(1, 2)
    dude = sim.spawn(create_dude_not_full("dude", Point(0, 0), 1.0, SLOW, 2, ()))
    sim.spawn(create_tree("tree", Point(1, 0), SLOW, SLOW, 5, ()))

    sim.advance_time(2.0)
    assert dude.kind == EntityKind.DUDE_NOT_FULL
    assert dude.resource_count == 2

    sim.advance_time(1.0)
    full = sim.entity_at(Point(0, 0))
    assert full.kind == EntityKind.DUDE_FULL
    assert full.id == "dude"
    assert full.resource_count == 2
    assert full.resource_limit == 2
    assert dude not in sim.world
    assert sim.pending_events(dude) == []
    assert sorted(event.action_name for event in sim.pending_events(full)) == ["activity", "animation"]
    assert sim.find_entity("tree").health == 3


def test_full_dude_walks_home_and_unloads() -> None:
    sim = _build_sim(1, 4)
    dude = sim.spawn(create_dude_full("dude", Point(0, 0), 1.0, SLOW, 2, (), resource_count=2))
    sim.spawn(create_house("house", Point(3, 0), ()))

    sim.advance_time(1.0)
    assert dude.position == Point(1, 0)

    sim.advance_time(1.0)
    assert dude.position == Point(2, 0)
    assert dude.kind == EntityKind.DUDE_FULL

    sim.advance_time(1.0)
    seeker = sim.entity_at(Point(2, 0))
    assert seeker.kind == EntityKind.DUDE_NOT_FULL
    assert seeker.resource_count == 0
    assert seeker.resource_limit == 2
    assert seeker.action_period == 1.0
    assert sim.pending_events(dude) == []
    sim.world.check_consistency()


def test_full_dude_without_house_waits() -> None:
    sim = _build_sim(2, 2)
    dude = sim.spawn(create_dude_full("dude", Point(0, 0), 1.0, SLOW, 1, (), resource_count=1))

    sim.advance_time(3.0)

    assert sim.entity_at(Point(0, 0)) is dude
    assert sim.pending_events(dude)[0].time == 4.0


def test_dude_without_targets_waits() -> None:
    sim = _build_sim(2, 2)
    dude = sim.spawn(create_dude_not_full("dude", Point(1, 1), 1.0, SLOW, 2, ()))

    sim.advance_time(2.0)

    assert dude.position == Point(1, 1)
    assert dude.resource_count == 0
    assert sim.pending_events(dude)[0].time == 3.0


def test_dude_walks_over_stump_toward_tree() -> None:
    sim = _build_sim(1, 3)
    dude = sim.spawn(create_dude_not_full("dude", Point(0, 0), 1.0, SLOW, 5, ()))
    stump = sim.spawn(create_stump("stump", Point(1, 0), ()))
    tree = sim.spawn(create_tree("tree", Point(2, 0), SLOW, SLOW, 4, ()))

    sim.advance_time(1.0)

    assert dude.position == Point(1, 0)
    assert stump not in sim.world
    assert dude.resource_count == 0

    sim.advance_time(1.0)

    assert dude.resource_count == 1
    assert tree.health == 3
    sim.world.check_consistency()


def test_dude_goes_around_obstacles() -> None:
    sim = _build_sim(2, 4)
    dude = sim.spawn(create_dude_not_full("dude", Point(0, 0), 1.0, SLOW, 5, ()))
    sim.spawn(create_obstacle("rock", Point(1, 0), SLOW, ()))
    sim.spawn(create_tree("tree", Point(3, 1), SLOW, SLOW, 4, ()))

    sim.advance_time(1.0)
    assert dude.position == Point(0, 1)

    sim.advance_time(1.0)
    assert dude.position == Point(1, 1)
