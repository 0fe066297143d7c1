from __future__ import annotations

import copy
import logging
import random
from typing import Any

from dudeworld.content.images import ImageStore
from dudeworld.sim.behaviors import BehaviorContext, schedule_actions
from dudeworld.sim.entities import SAPLING_HEALTH_LIMIT, Entity, EntityKind
from dudeworld.sim.point import Point
from dudeworld.sim.rng import derive_stream_seed
from dudeworld.sim.scheduler import EventScheduler, ScheduledEvent
from dudeworld.sim.world import WorldModel

logger = logging.getLogger(__name__)

RNG_SIM_STREAM_NAME = "rng_sim"
MAX_EVENT_TRACE = 256


class Simulation:
    """Drives a world forward in simulated time by firing due scheduler events."""

    def __init__(
        self,
        world: WorldModel,
        seed: int,
        image_store: ImageStore | None = None,
        *,
        start_time: float = 0.0,
        sapling_health_limit: int = SAPLING_HEALTH_LIMIT,
    ) -> None:
        self.world = world
        self.master_seed = seed
        self.scheduler = EventScheduler(current_time=start_time)
        self.image_store = image_store or ImageStore()
        self.rng_sim = random.Random(derive_stream_seed(master_seed=self.master_seed, stream_name=RNG_SIM_STREAM_NAME))
        self._rng_streams: dict[str, random.Random] = {RNG_SIM_STREAM_NAME: self.rng_sim}
        self.context = BehaviorContext(
            world=self.world,
            scheduler=self.scheduler,
            image_store=self.image_store,
            rng=self.rng_sim,
            sapling_health_limit=sapling_health_limit,
        )
        self._event_trace: list[dict[str, Any]] = []

    @property
    def time(self) -> float:
        return self.scheduler.current_time

    def rng_stream(self, name: str) -> random.Random:
        if name not in self._rng_streams:
            self._rng_streams[name] = random.Random(
                derive_stream_seed(master_seed=self.master_seed, stream_name=name)
            )
        return self._rng_streams[name]

    def spawn(self, entity: Entity) -> Entity:
        if not self.world.within_bounds(entity.position):
            raise ValueError(
                f"cannot spawn {entity.id!r} at ({entity.position.x}, {entity.position.y}); "
                f"outside {self.world.num_cols}x{self.world.num_rows} world"
            )
        self.world.try_add_entity(entity)
        schedule_actions(entity, self.context)
        logger.debug("spawned %s %r at (%d, %d)", entity.kind.value, entity.id, entity.position.x, entity.position.y)
        return entity

    def remove(self, entity: Entity) -> None:
        self.world.remove_entity(self.scheduler, entity)
        logger.debug("removed %s %r", entity.kind.value, entity.id)

    def schedule_all_actions(self) -> None:
        for entity in self.world.entities:
            schedule_actions(entity, self.context)

    def entity_at(self, pos: Point) -> Entity | None:
        return self.world.get_occupant(pos)

    def find_entity(self, entity_id: str, kind: EntityKind | None = None) -> Entity | None:
        for entity in self.world.entities:
            if entity.id == entity_id and (kind is None or entity.kind == kind):
                return entity
        return None

    def pending_events(self, entity: Entity | None = None) -> list[ScheduledEvent]:
        return self.scheduler.pending_events(entity)

    def advance_time(self, seconds: float) -> int:
        if seconds < 0:
            raise ValueError("seconds must be >= 0")
        return self.update_on_time(self.time + seconds)

    def update_on_time(self, time: float) -> int:
        if time < self.time:
            raise ValueError(f"simulated time cannot move backwards ({time} < {self.time})")
        fired = self.scheduler.update_on_time(time)
        for event in fired:
            self._append_event_trace_entry(event)
        return len(fired)

    def run_until(self, time: float, step: float) -> int:
        """Advance in ``step`` increments until ``time``, firing events as they come due."""
        if step <= 0:
            raise ValueError("step must be > 0")
        logger.info("running simulation from %.3f to %.3f (step %.3f)", self.time, time, step)
        fired = 0
        while self.time < time:
            fired += self.update_on_time(min(time, self.time + step))
        return fired

    def get_event_trace(self) -> list[dict[str, Any]]:
        return copy.deepcopy(self._event_trace)

    def _append_event_trace_entry(self, event: ScheduledEvent) -> None:
        self._event_trace.append(
            {
                "time": event.time,
                "event_id": event.event_id,
                "entity_id": event.owner_id,
                "action": event.action_name,
            }
        )
        if len(self._event_trace) > MAX_EVENT_TRACE:
            overflow = len(self._event_trace) - MAX_EVENT_TRACE
            del self._event_trace[:overflow]
