from __future__ import annotations

from typing import Any

SUPPORTED_SCHEMA_VERSIONS = {1}
ENTITY_REQUIRED_FIELDS: dict[str, set[str]] = {
    "house": set(),
    "stump": set(),
    "obstacle": {"animation_period"},
    "tree": {"action_period", "animation_period", "health"},
    "sapling": set(),
    "fairy": {"action_period", "animation_period"},
    "dude": {"action_period", "animation_period", "resource_limit"},
}
PERIOD_FIELDS = {"action_period", "animation_period"}
INT_FIELDS = {"health", "health_limit", "resource_limit"}


def _require_int(value: Any, *, field_name: str, minimum: int | None = None) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{field_name} must be an integer")
    if minimum is not None and value < minimum:
        raise ValueError(f"{field_name} must be >= {minimum}")
    return value


def _require_period(value: Any, *, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{field_name} must be numeric")
    if value <= 0:
        raise ValueError(f"{field_name} must be > 0")
    return float(value)


def _validate_background(background: Any, *, num_rows: int, num_cols: int) -> None:
    if not isinstance(background, dict):
        raise ValueError("world.background must be an object")
    default = background.get("default")
    if not isinstance(default, str) or not default:
        raise ValueError("world.background.default must be a non-empty string")
    cells = background.get("cells", [])
    if not isinstance(cells, list):
        raise ValueError("world.background.cells must be a list when present")
    for index, cell in enumerate(cells):
        field_name = f"world.background.cells[{index}]"
        if not isinstance(cell, dict):
            raise ValueError(f"{field_name} must be an object")
        if not isinstance(cell.get("id"), str) or not cell["id"]:
            raise ValueError(f"{field_name}.id must be a non-empty string")
        x = _require_int(cell.get("x"), field_name=f"{field_name}.x", minimum=0)
        y = _require_int(cell.get("y"), field_name=f"{field_name}.y", minimum=0)
        if x >= num_cols or y >= num_rows:
            raise ValueError(f"{field_name} lies outside the {num_cols}x{num_rows} world")


def _validate_entity(entity: Any, *, field_name: str, num_rows: int, num_cols: int) -> None:
    if not isinstance(entity, dict):
        raise ValueError(f"{field_name} must be an object")
    kind = entity.get("kind")
    if kind not in ENTITY_REQUIRED_FIELDS:
        raise ValueError(f"{field_name}.kind must be one of {sorted(ENTITY_REQUIRED_FIELDS)}; got {kind!r}")
    if not isinstance(entity.get("id"), str) or not entity["id"]:
        raise ValueError(f"{field_name}.id must be a non-empty string")
    x = _require_int(entity.get("x"), field_name=f"{field_name}.x", minimum=0)
    y = _require_int(entity.get("y"), field_name=f"{field_name}.y", minimum=0)
    if x >= num_cols or y >= num_rows:
        raise ValueError(f"{field_name} lies outside the {num_cols}x{num_rows} world")

    missing = ENTITY_REQUIRED_FIELDS[kind] - set(entity)
    if missing:
        raise ValueError(f"{field_name} missing fields for {kind}: {sorted(missing)}")
    for key in PERIOD_FIELDS & set(entity):
        _require_period(entity[key], field_name=f"{field_name}.{key}")
    for key in INT_FIELDS & set(entity):
        _require_int(entity[key], field_name=f"{field_name}.{key}", minimum=0)


def validate_world_payload(payload: Any) -> None:
    if not isinstance(payload, dict):
        raise ValueError("world payload must be an object")
    schema_version = payload.get("schema_version")
    if schema_version not in SUPPORTED_SCHEMA_VERSIONS:
        raise ValueError(f"unsupported world schema_version: {schema_version}")
    num_rows = _require_int(payload.get("num_rows"), field_name="world.num_rows", minimum=1)
    num_cols = _require_int(payload.get("num_cols"), field_name="world.num_cols", minimum=1)
    _validate_background(payload.get("background"), num_rows=num_rows, num_cols=num_cols)

    entities = payload.get("entities", [])
    if not isinstance(entities, list):
        raise ValueError("world.entities must be a list when present")
    for index, entity in enumerate(entities):
        _validate_entity(entity, field_name=f"world.entities[{index}]", num_rows=num_rows, num_cols=num_cols)
