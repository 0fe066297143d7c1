from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from dudeworld.sim.entities import REMOVED_POSITION, Entity, EntityKind
from dudeworld.sim.point import Point

if TYPE_CHECKING:
    from dudeworld.sim.scheduler import EventScheduler

DEFAULT_BACKGROUND_ID = "grass"


@dataclass
class Background:
    id: str
    images: Sequence[Any] = field(default_factory=tuple)
    image_index: int = 0

    def current_image(self) -> Any | None:
        if not self.images:
            return None
        return self.images[self.image_index % len(self.images)]


class WorldModel:
    """Fixed-size grid of background tiles plus the occupancy of live entities.

    The occupancy grid and the live entity set always agree: an entity sits in
    the cell at its ``position`` iff it is live, and a cell holds at most one
    entity. All membership and position changes go through this class.
    """

    def __init__(self, num_rows: int, num_cols: int, default_background: Background | None = None) -> None:
        if num_rows <= 0 or num_cols <= 0:
            raise ValueError("num_rows and num_cols must be > 0")
        self.num_rows = num_rows
        self.num_cols = num_cols
        fill = default_background or Background(DEFAULT_BACKGROUND_ID)
        self.background: list[list[Background]] = [
            [Background(fill.id, fill.images) for _ in range(num_cols)] for _ in range(num_rows)
        ]
        self.occupancy: list[list[Entity | None]] = [[None] * num_cols for _ in range(num_rows)]
        # dict keeps insertion order for deterministic nearest-entity tie breaks.
        self._entities: dict[Entity, None] = {}

    @property
    def entities(self) -> tuple[Entity, ...]:
        return tuple(self._entities)

    def __contains__(self, entity: object) -> bool:
        return entity in self._entities

    def within_bounds(self, pos: Point) -> bool:
        return 0 <= pos.y < self.num_rows and 0 <= pos.x < self.num_cols

    def is_occupied(self, pos: Point) -> bool:
        return self.within_bounds(pos) and self.get_occupancy_cell(pos) is not None

    def try_add_entity(self, entity: Entity) -> None:
        if self.is_occupied(entity.position):
            occupant = self.get_occupancy_cell(entity.position)
            raise ValueError(
                f"position occupied: ({entity.position.x}, {entity.position.y}) holds {occupant.id!r}"
            )
        self.add_entity(entity)

    def add_entity(self, entity: Entity) -> None:
        """Place ``entity`` at its position; out-of-bounds entities are ignored.

        The destination cell is assumed free.
        """
        if self.within_bounds(entity.position):
            self.set_occupancy_cell(entity.position, entity)
            self._entities[entity] = None

    def find_nearest(self, pos: Point, kinds: Iterable[EntityKind]) -> Entity | None:
        candidates: list[Entity] = []
        for kind in kinds:
            candidates.extend(entity for entity in self._entities if entity.kind == kind)
        return nearest_entity(candidates, pos)

    def move_entity(self, scheduler: EventScheduler, entity: Entity, pos: Point) -> None:
        old_pos = entity.position
        if not self.within_bounds(pos) or pos == old_pos:
            return
        self.set_occupancy_cell(old_pos, None)
        occupant = self.get_occupant(pos)
        if occupant is not None and occupant is not entity:
            self.remove_entity(scheduler, occupant)
        self.set_occupancy_cell(pos, entity)
        entity.position = pos

    def remove_entity(self, scheduler: EventScheduler, entity: Entity) -> None:
        scheduler.unschedule_all_events(entity)
        if entity not in self._entities:
            return
        if self.within_bounds(entity.position) and self.get_occupancy_cell(entity.position) is entity:
            self.set_occupancy_cell(entity.position, None)
        del self._entities[entity]
        entity.position = REMOVED_POSITION

    def remove_entity_at(self, pos: Point) -> Entity | None:
        occupant = self.get_occupant(pos)
        if occupant is None:
            return None
        self.set_occupancy_cell(pos, None)
        self._entities.pop(occupant, None)
        occupant.position = REMOVED_POSITION
        return occupant

    def get_occupant(self, pos: Point) -> Entity | None:
        if not self.is_occupied(pos):
            return None
        return self.get_occupancy_cell(pos)

    def get_occupancy_cell(self, pos: Point) -> Entity | None:
        self._check_bounds(pos)
        return self.occupancy[pos.y][pos.x]

    def set_occupancy_cell(self, pos: Point, entity: Entity | None) -> None:
        self._check_bounds(pos)
        self.occupancy[pos.y][pos.x] = entity

    def get_background_cell(self, pos: Point) -> Background:
        self._check_bounds(pos)
        return self.background[pos.y][pos.x]

    def set_background_cell(self, pos: Point, background: Background) -> None:
        self._check_bounds(pos)
        self.background[pos.y][pos.x] = background

    def get_background_image(self, pos: Point) -> Any | None:
        if not self.within_bounds(pos):
            return None
        return self.get_background_cell(pos).current_image()

    def log(self) -> list[str]:
        lines: list[str] = []
        for entity in self._entities:
            line = entity.log_line()
            if line is not None:
                lines.append(line)
        return lines

    def check_consistency(self) -> None:
        placed: set[Entity] = set()
        for y, row in enumerate(self.occupancy):
            for x, occupant in enumerate(row):
                if occupant is None:
                    continue
                if occupant in placed:
                    raise RuntimeError(f"entity {occupant.id!r} occupies more than one cell")
                if occupant.position != Point(x, y):
                    raise RuntimeError(
                        f"entity {occupant.id!r} recorded at ({x}, {y}) but positioned at "
                        f"({occupant.position.x}, {occupant.position.y})"
                    )
                if occupant not in self._entities:
                    raise RuntimeError(f"entity {occupant.id!r} is in the grid but not live")
                placed.add(occupant)
        missing = [entity.id for entity in self._entities if entity not in placed]
        if missing:
            raise RuntimeError(f"live entities missing from the grid: {missing}")

    def _check_bounds(self, pos: Point) -> None:
        if not self.within_bounds(pos):
            raise IndexError(f"position ({pos.x}, {pos.y}) outside {self.num_cols}x{self.num_rows} world")


def nearest_entity(entities: Sequence[Entity], pos: Point) -> Entity | None:
    if not entities:
        return None
    nearest = entities[0]
    nearest_distance = pos.distance_squared(nearest.position)
    for other in entities[1:]:
        distance = pos.distance_squared(other.position)
        if distance < nearest_distance:
            nearest = other
            nearest_distance = distance
    return nearest
