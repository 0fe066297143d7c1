from __future__ import annotations

import heapq
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dudeworld.sim.entities import Entity

MAX_EVENTS_PER_UPDATE = 10_000

Action = Callable[[], None]


@dataclass
class ScheduledEvent:
    time: float
    sequence: int
    event_id: str
    action: Action
    owner: Entity | None = None

    @property
    def action_name(self) -> str:
        return str(getattr(self.action, "name", type(self.action).__name__))

    @property
    def owner_id(self) -> str | None:
        return None if self.owner is None else self.owner.id


class EventScheduler:
    """Time-ordered queue of deferred actions, each optionally owned by an entity.

    Events due at the same time fire in the order they were scheduled. Every
    event is indexed by its owner so ``unschedule_all_events`` only touches the
    owner's own events; cancelled heap entries are dropped lazily when they
    reach the head of the queue.
    """

    def __init__(self, current_time: float = 0.0) -> None:
        if current_time < 0:
            raise ValueError("current_time must be >= 0")
        self.current_time = float(current_time)
        self._queue: list[tuple[float, int, str]] = []
        self._events_by_id: dict[str, ScheduledEvent] = {}
        self._event_ids_by_owner: dict[Entity, set[str]] = {}
        self._next_sequence = 1

    def __len__(self) -> int:
        return len(self._events_by_id)

    def schedule_event(self, entity: Entity | None, action: Action, after_period: float) -> str:
        if after_period < 0:
            raise ValueError(f"after_period must be >= 0; got {after_period}")
        sequence = self._next_sequence
        self._next_sequence += 1
        event = ScheduledEvent(
            time=self.current_time + float(after_period),
            sequence=sequence,
            event_id=f"evt-{sequence:08d}",
            action=action,
            owner=entity,
        )
        heapq.heappush(self._queue, (event.time, event.sequence, event.event_id))
        self._events_by_id[event.event_id] = event
        if entity is not None:
            self._event_ids_by_owner.setdefault(entity, set()).add(event.event_id)
        return event.event_id

    def unschedule_all_events(self, entity: Entity) -> int:
        event_ids = self._event_ids_by_owner.pop(entity, set())
        for event_id in event_ids:
            del self._events_by_id[event_id]
        self._compact_if_sparse()
        return len(event_ids)

    def cancel_event(self, event_id: str) -> bool:
        event = self._events_by_id.pop(event_id, None)
        if event is None:
            return False
        self._forget_owner(event)
        self._compact_if_sparse()
        return True

    def pending_events(self, entity: Entity | None = None) -> list[ScheduledEvent]:
        if entity is None:
            events = list(self._events_by_id.values())
        else:
            events = [self._events_by_id[event_id] for event_id in self._event_ids_by_owner.get(entity, ())]
        return sorted(events, key=lambda event: (event.time, event.sequence))

    def has_pending_events(self, entity: Entity) -> bool:
        return bool(self._event_ids_by_owner.get(entity))

    def next_event_time(self) -> float | None:
        self._drop_cancelled_head()
        if not self._queue:
            return None
        return self._queue[0][0]

    def pop_due_event(self, time: float) -> ScheduledEvent | None:
        self._drop_cancelled_head()
        if not self._queue or self._queue[0][0] > time:
            return None
        _, _, event_id = heapq.heappop(self._queue)
        event = self._events_by_id.pop(event_id)
        self._forget_owner(event)
        return event

    def update_on_time(self, time: float) -> list[ScheduledEvent]:
        """Fire every event due at or before ``time`` and return them in firing order.

        While an action runs the clock reads that event's fire time, so
        follow-up events are scheduled relative to when their parent was due.
        """
        fired: list[ScheduledEvent] = []
        while True:
            event = self.pop_due_event(time)
            if event is None:
                break
            if len(fired) >= MAX_EVENTS_PER_UPDATE:
                raise RuntimeError(
                    f"event execution guard tripped at time {time}; "
                    f"exceeded MAX_EVENTS_PER_UPDATE={MAX_EVENTS_PER_UPDATE}"
                )
            self.current_time = max(self.current_time, event.time)
            event.action()
            fired.append(event)
        self.current_time = max(self.current_time, float(time))
        return fired

    def _forget_owner(self, event: ScheduledEvent) -> None:
        if event.owner is None:
            return
        owned = self._event_ids_by_owner.get(event.owner)
        if owned is None:
            return
        owned.discard(event.event_id)
        if not owned:
            del self._event_ids_by_owner[event.owner]

    def _drop_cancelled_head(self) -> None:
        while self._queue and self._queue[0][2] not in self._events_by_id:
            heapq.heappop(self._queue)

    def _compact_if_sparse(self) -> None:
        if len(self._queue) > 2 * len(self._events_by_id) + 16:
            self._queue = [entry for entry in self._queue if entry[2] in self._events_by_id]
            heapq.heapify(self._queue)
