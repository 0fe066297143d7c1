from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from dudeworld.sim.point import Point

SAPLING_KEY = "sapling"
TREE_KEY = "tree"
STUMP_KEY = "stump"
FAIRY_KEY = "fairy"
HOUSE_KEY = "house"
OBSTACLE_KEY = "obstacle"
DUDE_KEY = "dude"
DUDE_FULL_KEY = "dude_full"

SAPLING_ACTION_ANIMATION_PERIOD = 1.0
SAPLING_HEALTH_LIMIT = 5

TREE_ACTION_MIN = 1.0
TREE_ACTION_MAX = 1.4
TREE_ANIMATION_MIN = 0.05
TREE_ANIMATION_MAX = 0.6
TREE_HEALTH_MIN = 1
TREE_HEALTH_MAX = 3

REMOVED_POSITION = Point(-1, -1)


class EntityKind(Enum):
    DUDE_NOT_FULL = "dude_not_full"
    DUDE_FULL = "dude_full"
    FAIRY = "fairy"
    SAPLING = "sapling"
    TREE = "tree"
    STUMP = "stump"
    HOUSE = "house"
    OBSTACLE = "obstacle"


ANIMATED_KINDS = frozenset(
    {
        EntityKind.DUDE_FULL,
        EntityKind.DUDE_NOT_FULL,
        EntityKind.OBSTACLE,
        EntityKind.FAIRY,
        EntityKind.SAPLING,
        EntityKind.TREE,
    }
)
ACTIVE_KINDS = frozenset(
    {
        EntityKind.DUDE_FULL,
        EntityKind.DUDE_NOT_FULL,
        EntityKind.FAIRY,
        EntityKind.SAPLING,
        EntityKind.TREE,
    }
)


@dataclass(eq=False)
class Entity:
    """One actor in the world.

    Entities compare and hash by identity: a transformed entity is a new
    object even when it keeps the old id and position.
    """

    kind: EntityKind
    id: str
    position: Point
    images: Sequence[Any] = field(default_factory=tuple)
    resource_limit: int = 0
    resource_count: int = 0
    action_period: float = 0.0
    animation_period: float = 0.0
    health: int = 0
    health_limit: int = 0
    image_index: int = 0

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "kind" and "kind" in self.__dict__:
            raise AttributeError("entity kind cannot change; create a new entity instead")
        super().__setattr__(name, value)

    def next_image(self) -> None:
        self.image_index += 1

    def current_image(self) -> Any | None:
        if not self.images:
            return None
        return self.images[self.image_index % len(self.images)]

    def log_line(self) -> str | None:
        if not self.id:
            return None
        return f"{self.id} {self.position.x} {self.position.y} {self.image_index}"


def animation_period_of(entity: Entity) -> float:
    if entity.kind not in ANIMATED_KINDS:
        raise ValueError(f"animation_period not supported for {entity.kind.value}")
    return entity.animation_period


def action_period_of(entity: Entity) -> float:
    if entity.kind not in ACTIVE_KINDS:
        raise ValueError(f"action_period not supported for {entity.kind.value}")
    return entity.action_period


def create_house(entity_id: str, position: Point, images: Sequence[Any]) -> Entity:
    return Entity(EntityKind.HOUSE, entity_id, position, images)


def create_obstacle(entity_id: str, position: Point, animation_period: float, images: Sequence[Any]) -> Entity:
    return Entity(EntityKind.OBSTACLE, entity_id, position, images, animation_period=animation_period)


def create_tree(
    entity_id: str,
    position: Point,
    action_period: float,
    animation_period: float,
    health: int,
    images: Sequence[Any],
) -> Entity:
    return Entity(
        EntityKind.TREE,
        entity_id,
        position,
        images,
        action_period=action_period,
        animation_period=animation_period,
        health=health,
    )


def create_stump(entity_id: str, position: Point, images: Sequence[Any]) -> Entity:
    return Entity(EntityKind.STUMP, entity_id, position, images)


def create_sapling(
    entity_id: str,
    position: Point,
    images: Sequence[Any],
    health_limit: int = SAPLING_HEALTH_LIMIT,
) -> Entity:
    # Saplings always start at zero health and grow toward health_limit.
    return Entity(
        EntityKind.SAPLING,
        entity_id,
        position,
        images,
        action_period=SAPLING_ACTION_ANIMATION_PERIOD,
        animation_period=SAPLING_ACTION_ANIMATION_PERIOD,
        health=0,
        health_limit=health_limit,
    )


def create_fairy(
    entity_id: str,
    position: Point,
    action_period: float,
    animation_period: float,
    images: Sequence[Any],
) -> Entity:
    return Entity(
        EntityKind.FAIRY,
        entity_id,
        position,
        images,
        action_period=action_period,
        animation_period=animation_period,
    )


def create_dude_not_full(
    entity_id: str,
    position: Point,
    action_period: float,
    animation_period: float,
    resource_limit: int,
    images: Sequence[Any],
) -> Entity:
    return Entity(
        EntityKind.DUDE_NOT_FULL,
        entity_id,
        position,
        images,
        resource_limit=resource_limit,
        action_period=action_period,
        animation_period=animation_period,
    )


def create_dude_full(
    entity_id: str,
    position: Point,
    action_period: float,
    animation_period: float,
    resource_limit: int,
    images: Sequence[Any],
    resource_count: int = 0,
) -> Entity:
    return Entity(
        EntityKind.DUDE_FULL,
        entity_id,
        position,
        images,
        resource_limit=resource_limit,
        resource_count=resource_count,
        action_period=action_period,
        animation_period=animation_period,
    )
