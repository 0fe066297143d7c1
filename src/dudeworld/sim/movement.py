from __future__ import annotations

from collections.abc import Callable

from dudeworld.sim.entities import Entity, EntityKind
from dudeworld.sim.point import Point
from dudeworld.sim.world import WorldModel

BlockingRule = Callable[[Entity], bool]


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def blocks_fairy(occupant: Entity) -> bool:
    return True


def blocks_dude(occupant: Entity) -> bool:
    # Dudes walk onto stumps; everything else is in the way.
    return occupant.kind != EntityKind.STUMP


def next_position(world: WorldModel, current: Point, destination: Point, is_blocking: BlockingRule) -> Point:
    """Greedy single step: horizontal first, then vertical, else stay put."""

    def _blocked(pos: Point) -> bool:
        occupant = world.get_occupant(pos)
        return occupant is not None and is_blocking(occupant)

    horiz = _sign(destination.x - current.x)
    candidate = Point(current.x + horiz, current.y)
    if horiz != 0 and not _blocked(candidate):
        return candidate

    vert = _sign(destination.y - current.y)
    candidate = Point(current.x, current.y + vert)
    if vert != 0 and not _blocked(candidate):
        return candidate
    return current


def next_position_fairy(world: WorldModel, current: Point, destination: Point) -> Point:
    return next_position(world, current, destination, blocks_fairy)


def next_position_dude(world: WorldModel, current: Point, destination: Point) -> Point:
    return next_position(world, current, destination, blocks_dude)
