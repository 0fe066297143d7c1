from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from dudeworld.content.images import ImageStore
from dudeworld.content.schema import validate_world_payload
from dudeworld.sim.core import Simulation
from dudeworld.sim.entities import (
    DUDE_KEY,
    FAIRY_KEY,
    HOUSE_KEY,
    OBSTACLE_KEY,
    SAPLING_HEALTH_LIMIT,
    SAPLING_KEY,
    STUMP_KEY,
    TREE_KEY,
    Entity,
    create_dude_not_full,
    create_fairy,
    create_house,
    create_obstacle,
    create_sapling,
    create_stump,
    create_tree,
)
from dudeworld.sim.point import Point
from dudeworld.sim.world import Background, WorldModel

DEFAULT_WORLD_PATH = "content/examples/basic_world.json"


def entity_from_dict(data: dict[str, Any], image_store: ImageStore) -> Entity:
    kind = data["kind"]
    entity_id = str(data["id"])
    position = Point(int(data["x"]), int(data["y"]))
    if kind == "house":
        return create_house(entity_id, position, image_store.get_image_list(HOUSE_KEY))
    if kind == "stump":
        return create_stump(entity_id, position, image_store.get_image_list(STUMP_KEY))
    if kind == "obstacle":
        return create_obstacle(
            entity_id,
            position,
            float(data["animation_period"]),
            image_store.get_image_list(OBSTACLE_KEY),
        )
    if kind == "tree":
        return create_tree(
            entity_id,
            position,
            float(data["action_period"]),
            float(data["animation_period"]),
            int(data["health"]),
            image_store.get_image_list(TREE_KEY),
        )
    if kind == "sapling":
        return create_sapling(
            entity_id,
            position,
            image_store.get_image_list(SAPLING_KEY),
            health_limit=int(data.get("health_limit", SAPLING_HEALTH_LIMIT)),
        )
    if kind == "fairy":
        return create_fairy(
            entity_id,
            position,
            float(data["action_period"]),
            float(data["animation_period"]),
            image_store.get_image_list(FAIRY_KEY),
        )
    if kind == "dude":
        return create_dude_not_full(
            entity_id,
            position,
            float(data["action_period"]),
            float(data["animation_period"]),
            int(data["resource_limit"]),
            image_store.get_image_list(DUDE_KEY),
        )
    raise ValueError(f"unsupported entity kind in world file: {kind!r}")


def world_from_dict(payload: dict[str, Any], image_store: ImageStore | None = None) -> WorldModel:
    validate_world_payload(payload)
    store = image_store or ImageStore()
    background = payload["background"]
    default_id = background["default"]
    world = WorldModel(
        num_rows=payload["num_rows"],
        num_cols=payload["num_cols"],
        default_background=Background(default_id, store.get_image_list(default_id)),
    )
    for cell in background.get("cells", []):
        world.set_background_cell(
            Point(cell["x"], cell["y"]),
            Background(cell["id"], store.get_image_list(cell["id"])),
        )
    for data in payload.get("entities", []):
        world.try_add_entity(entity_from_dict(data, store))
    return world


def load_world_json(path: str | Path, image_store: ImageStore | None = None) -> WorldModel:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    return world_from_dict(payload, image_store)


def load_simulation_json(path: str | Path, seed: int, image_store: ImageStore | None = None) -> Simulation:
    store = image_store or ImageStore()
    simulation = Simulation(load_world_json(path, store), seed=seed, image_store=store)
    simulation.schedule_all_actions()
    return simulation
