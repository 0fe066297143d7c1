from __future__ import annotations

import json
from pathlib import Path

import pytest

from dudeworld.content.images import ImageStore
from dudeworld.content.io import DEFAULT_WORLD_PATH, load_simulation_json, load_world_json, world_from_dict
from dudeworld.sim.entities import SAPLING_HEALTH_LIMIT, EntityKind
from dudeworld.sim.point import Point


def _payload(**overrides) -> dict:
    payload = {
        "schema_version": 1,
        "num_rows": 2,
        "num_cols": 3,
        "background": {"default": "grass", "cells": [{"x": 2, "y": 1, "id": "water"}]},
        "entities": [
            {"kind": "house", "id": "home", "x": 0, "y": 0},
            {"kind": "dude", "id": "dude", "x": 1, "y": 0, "action_period": 1, "animation_period": 0.5, "resource_limit": 2},
        ],
    }
    payload.update(overrides)
    return payload


def test_load_default_world() -> None:
    world = load_world_json(DEFAULT_WORLD_PATH)

    assert (world.num_rows, world.num_cols) == (8, 12)
    assert world.get_occupant(Point(11, 7)).kind == EntityKind.HOUSE
    assert world.get_background_cell(Point(5, 0)).id == "water"
    assert world.get_background_cell(Point(0, 0)).id == "grass"
    dudes = [entity for entity in world.entities if entity.kind == EntityKind.DUDE_NOT_FULL]
    assert sorted(dude.id for dude in dudes) == ["dude_1", "dude_2"]
    world.check_consistency()


def test_default_world_runs_and_stays_consistent() -> None:
    sim = load_simulation_json(DEFAULT_WORLD_PATH, seed=7)

    sim.run_until(30.0, step=0.25)

    assert sim.time == 30.0
    sim.world.check_consistency()
    assert sim.find_entity("house") is not None


def test_world_from_dict_builds_entities_with_store_images() -> None:
    store = ImageStore()
    world = world_from_dict(_payload(), store)

    dude = world.get_occupant(Point(1, 0))
    assert dude.kind == EntityKind.DUDE_NOT_FULL
    assert dude.resource_limit == 2
    assert dude.action_period == 1.0
    assert dude.images == store.get_image_list("dude")
    assert world.get_background_image(Point(2, 1)) == store.get_image_list("water")[0]


def test_sapling_health_limit_is_optional() -> None:
    entities = [
        {"kind": "sapling", "id": "a", "x": 0, "y": 0},
        {"kind": "sapling", "id": "b", "x": 1, "y": 0, "health_limit": 2},
    ]
    world = world_from_dict(_payload(entities=entities))

    assert world.get_occupant(Point(0, 0)).health_limit == SAPLING_HEALTH_LIMIT
    assert world.get_occupant(Point(1, 0)).health_limit == 2


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        ({"schema_version": 2}, "schema_version"),
        ({"num_rows": 0}, "world.num_rows"),
        ({"background": {"cells": []}}, "background.default"),
        ({"entities": [{"kind": "wizard", "id": "w", "x": 0, "y": 0}]}, "kind must be one of"),
        ({"entities": [{"kind": "house", "id": "h", "x": 3, "y": 0}]}, "lies outside"),
        ({"entities": [{"kind": "tree", "id": "t", "x": 0, "y": 0, "health": 1}]}, "missing fields for tree"),
        (
            {"entities": [{"kind": "obstacle", "id": "o", "x": 0, "y": 0, "animation_period": -1}]},
            "animation_period must be > 0",
        ),
        (
            {"entities": [{"kind": "obstacle", "id": "o", "x": 0, "y": 0, "animation_period": 0}]},
            r"entities\[0\]\.animation_period must be > 0",
        ),
        (
            {
                "entities": [
                    {"kind": "fairy", "id": "f", "x": 0, "y": 0, "action_period": 0.0, "animation_period": 1}
                ]
            },
            r"entities\[0\]\.action_period must be > 0",
        ),
    ],
)
def test_world_payload_validation_errors(overrides: dict, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        world_from_dict(_payload(**overrides))


def test_world_file_rejects_stacked_entities(tmp_path: Path) -> None:
    path = tmp_path / "world.json"
    entities = [
        {"kind": "house", "id": "a", "x": 1, "y": 1},
        {"kind": "stump", "id": "b", "x": 1, "y": 1},
    ]
    path.write_text(json.dumps(_payload(entities=entities)), encoding="utf-8")

    with pytest.raises(ValueError, match="occupied"):
        load_world_json(path)


def test_load_simulation_schedules_loaded_entities(tmp_path: Path) -> None:
    path = tmp_path / "world.json"
    path.write_text(json.dumps(_payload()), encoding="utf-8")

    sim = load_simulation_json(path, seed=1)

    dude = sim.find_entity("dude")
    assert [event.action_name for event in sim.pending_events(dude)] == ["animation", "activity"]
    assert sim.pending_events(sim.find_entity("home")) == []
