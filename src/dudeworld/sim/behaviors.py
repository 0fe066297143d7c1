from __future__ import annotations

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import ClassVar

from dudeworld.content.images import ImageStore
from dudeworld.sim.entities import (
    ACTIVE_KINDS,
    ANIMATED_KINDS,
    DUDE_FULL_KEY,
    DUDE_KEY,
    SAPLING_HEALTH_LIMIT,
    SAPLING_KEY,
    STUMP_KEY,
    TREE_ACTION_MAX,
    TREE_ACTION_MIN,
    TREE_ANIMATION_MAX,
    TREE_ANIMATION_MIN,
    TREE_HEALTH_MAX,
    TREE_HEALTH_MIN,
    TREE_KEY,
    Entity,
    EntityKind,
    action_period_of,
    animation_period_of,
    create_dude_full,
    create_dude_not_full,
    create_sapling,
    create_stump,
    create_tree,
)
from dudeworld.sim.movement import BlockingRule, blocks_dude, blocks_fairy, next_position
from dudeworld.sim.rng import int_from_range, number_from_range
from dudeworld.sim.scheduler import EventScheduler
from dudeworld.sim.world import WorldModel

logger = logging.getLogger(__name__)

FAIRY_TARGET_KINDS = (EntityKind.STUMP,)
DUDE_NOT_FULL_TARGET_KINDS = (EntityKind.TREE, EntityKind.SAPLING)
DUDE_FULL_TARGET_KINDS = (EntityKind.HOUSE,)


@dataclass
class BehaviorContext:
    """Everything an activity may read or mutate while it runs."""

    world: WorldModel
    scheduler: EventScheduler
    image_store: ImageStore = field(default_factory=ImageStore)
    rng: random.Random = field(default_factory=random.Random)
    sapling_health_limit: int = SAPLING_HEALTH_LIMIT


@dataclass
class ActivityAction:
    name: ClassVar[str] = "activity"

    entity: Entity
    context: BehaviorContext

    def __call__(self) -> None:
        execute_activity(self.entity, self.context)


@dataclass
class AnimationAction:
    """Advance the entity's frame; ``repeat_count`` 0 repeats forever."""

    name: ClassVar[str] = "animation"

    entity: Entity
    scheduler: EventScheduler
    repeat_count: int = 0

    def __call__(self) -> None:
        self.entity.next_image()
        if self.repeat_count != 1:
            self.scheduler.schedule_event(
                self.entity,
                AnimationAction(self.entity, self.scheduler, max(self.repeat_count - 1, 0)),
                animation_period_of(self.entity),
            )


def schedule_actions(entity: Entity, context: BehaviorContext) -> None:
    """Enqueue an entity's first activity and animation events."""
    if entity.kind in ACTIVE_KINDS:
        context.scheduler.schedule_event(entity, ActivityAction(entity, context), action_period_of(entity))
    if entity.kind in ANIMATED_KINDS:
        context.scheduler.schedule_event(
            entity,
            AnimationAction(entity, context.scheduler),
            animation_period_of(entity),
        )


def execute_activity(entity: Entity, context: BehaviorContext) -> None:
    handler = _ACTIVITY_HANDLERS.get(entity.kind)
    if handler is None:
        raise ValueError(f"activity not supported for {entity.kind.value}")
    handler(entity, context)


def _reschedule_activity(entity: Entity, context: BehaviorContext) -> None:
    context.scheduler.schedule_event(entity, ActivityAction(entity, context), action_period_of(entity))


def replace_entity(old: Entity, new: Entity, context: BehaviorContext) -> None:
    """Swap ``old`` for ``new`` in place: cancel, remove, add, then schedule."""
    context.world.remove_entity(context.scheduler, old)
    context.world.add_entity(new)
    schedule_actions(new, context)
    logger.debug(
        "%s %r -> %s %r at (%d, %d)",
        old.kind.value,
        old.id,
        new.kind.value,
        new.id,
        new.position.x,
        new.position.y,
    )


def _execute_sapling_activity(entity: Entity, context: BehaviorContext) -> None:
    entity.health += 1
    if not transform_plant(entity, context):
        _reschedule_activity(entity, context)


def _execute_tree_activity(entity: Entity, context: BehaviorContext) -> None:
    if not transform_plant(entity, context):
        _reschedule_activity(entity, context)


def _execute_fairy_activity(entity: Entity, context: BehaviorContext) -> None:
    target = context.world.find_nearest(entity.position, FAIRY_TARGET_KINDS)
    if target is not None:
        target_pos = target.position
        if _move_to(entity, target, context, blocks_fairy):
            context.world.remove_entity(context.scheduler, target)
            sapling = create_sapling(
                f"{SAPLING_KEY}_{target.id}",
                target_pos,
                context.image_store.get_image_list(SAPLING_KEY),
                health_limit=context.sapling_health_limit,
            )
            context.world.add_entity(sapling)
            schedule_actions(sapling, context)
            logger.debug("fairy %r planted %r at (%d, %d)", entity.id, sapling.id, target_pos.x, target_pos.y)
    _reschedule_activity(entity, context)


def _execute_dude_not_full_activity(entity: Entity, context: BehaviorContext) -> None:
    if entity.resource_count >= entity.resource_limit:
        _transform_not_full(entity, context)
        return
    target = context.world.find_nearest(entity.position, DUDE_NOT_FULL_TARGET_KINDS)
    if target is not None and _move_to(entity, target, context, blocks_dude):
        entity.resource_count += 1
        target.health -= 1
    _reschedule_activity(entity, context)


def _execute_dude_full_activity(entity: Entity, context: BehaviorContext) -> None:
    target = context.world.find_nearest(entity.position, DUDE_FULL_TARGET_KINDS)
    if target is not None and _move_to(entity, target, context, blocks_dude):
        _transform_full(entity, context)
    else:
        _reschedule_activity(entity, context)


_ACTIVITY_HANDLERS: dict[EntityKind, Callable[[Entity, BehaviorContext], None]] = {
    EntityKind.SAPLING: _execute_sapling_activity,
    EntityKind.TREE: _execute_tree_activity,
    EntityKind.FAIRY: _execute_fairy_activity,
    EntityKind.DUDE_NOT_FULL: _execute_dude_not_full_activity,
    EntityKind.DUDE_FULL: _execute_dude_full_activity,
}


def _move_to(entity: Entity, target: Entity, context: BehaviorContext, is_blocking: BlockingRule) -> bool:
    """Step toward ``target``; True once the entity is adjacent to it."""
    if entity.position.adjacent(target.position):
        return True
    step = next_position(context.world, entity.position, target.position, is_blocking)
    if step != entity.position:
        context.world.move_entity(context.scheduler, entity, step)
    return False


def transform_plant(entity: Entity, context: BehaviorContext) -> bool:
    if entity.kind == EntityKind.TREE:
        return _transform_tree(entity, context)
    if entity.kind == EntityKind.SAPLING:
        return _transform_sapling(entity, context)
    raise ValueError(f"transform_plant not supported for {entity.kind.value}")


def _transform_tree(entity: Entity, context: BehaviorContext) -> bool:
    if entity.health <= 0:
        _become_stump(entity, context)
        return True
    return False


def _transform_sapling(entity: Entity, context: BehaviorContext) -> bool:
    if entity.health <= 0:
        _become_stump(entity, context)
        return True
    if entity.health >= entity.health_limit:
        tree = create_tree(
            f"{TREE_KEY}_{entity.id}",
            entity.position,
            number_from_range(context.rng, TREE_ACTION_MIN, TREE_ACTION_MAX),
            number_from_range(context.rng, TREE_ANIMATION_MIN, TREE_ANIMATION_MAX),
            int_from_range(context.rng, TREE_HEALTH_MIN, TREE_HEALTH_MAX),
            context.image_store.get_image_list(TREE_KEY),
        )
        replace_entity(entity, tree, context)
        return True
    return False


def _become_stump(entity: Entity, context: BehaviorContext) -> None:
    stump = create_stump(
        f"{STUMP_KEY}_{entity.id}",
        entity.position,
        context.image_store.get_image_list(STUMP_KEY),
    )
    replace_entity(entity, stump, context)


def _transform_not_full(entity: Entity, context: BehaviorContext) -> None:
    dude = create_dude_full(
        entity.id,
        entity.position,
        entity.action_period,
        entity.animation_period,
        entity.resource_limit,
        context.image_store.get_image_list(DUDE_FULL_KEY),
        resource_count=entity.resource_count,
    )
    replace_entity(entity, dude, context)


def _transform_full(entity: Entity, context: BehaviorContext) -> None:
    dude = create_dude_not_full(
        entity.id,
        entity.position,
        entity.action_period,
        entity.animation_period,
        entity.resource_limit,
        context.image_store.get_image_list(DUDE_KEY),
    )
    replace_entity(entity, dude, context)
