from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, NamedTuple

PLACEHOLDER_KEY = "placeholder"


class Frame(NamedTuple):
    """One visual frame: a terminal glyph and an RGB color for pixel viewers."""

    glyph: str
    color: tuple[int, int, int]


DEFAULT_FRAMES: dict[str, tuple[Frame, ...]] = {
    "dude": (Frame("d", (214, 160, 90)), Frame("d", (196, 142, 74))),
    "dude_full": (Frame("D", (170, 110, 50)), Frame("D", (152, 96, 40))),
    "fairy": (Frame("f", (240, 150, 230)), Frame("f", (255, 200, 250))),
    "sapling": (Frame("s", (120, 200, 90)),),
    "tree": (Frame("T", (40, 130, 60)), Frame("T", (52, 146, 70))),
    "stump": (Frame("u", (120, 86, 50)),),
    "house": (Frame("H", (180, 60, 60)),),
    "obstacle": (Frame("#", (90, 90, 100)), Frame("#", (104, 104, 116))),
    "grass": (Frame(".", (96, 160, 80)),),
    "dirt": (Frame(",", (150, 120, 80)),),
    "flowers": (Frame("*", (130, 170, 100)),),
    "water": (Frame("~", (60, 110, 200)),),
    PLACEHOLDER_KEY: (Frame("?", (255, 0, 255)),),
}


class ImageStore:
    """Maps content keys to ordered frame sequences."""

    def __init__(self, frames: Mapping[str, Sequence[Frame]] | None = None) -> None:
        self._frames: dict[str, tuple[Frame, ...]] = dict(DEFAULT_FRAMES)
        for key, key_frames in (frames or {}).items():
            self.set_image_list(key, key_frames)

    def keys(self) -> list[str]:
        return sorted(self._frames)

    def get_image_list(self, key: str) -> tuple[Frame, ...]:
        return self._frames.get(key, self._frames[PLACEHOLDER_KEY])

    def set_image_list(self, key: str, frames: Sequence[Frame]) -> None:
        if not isinstance(key, str) or not key:
            raise ValueError("image key must be a non-empty string")
        if not frames:
            raise ValueError(f"image list for {key!r} must contain at least one frame")
        self._frames[key] = tuple(frames)


def _parse_frame(value: Any, *, field_name: str) -> Frame:
    if not isinstance(value, dict):
        raise ValueError(f"{field_name} must be an object")
    glyph = value.get("glyph")
    if not isinstance(glyph, str) or len(glyph) != 1:
        raise ValueError(f"{field_name}.glyph must be a single character")
    color = value.get("color")
    if (
        not isinstance(color, list)
        or len(color) != 3
        or any(isinstance(channel, bool) or not isinstance(channel, int) or not 0 <= channel <= 255 for channel in color)
    ):
        raise ValueError(f"{field_name}.color must be three integers in 0..255")
    return Frame(glyph, (color[0], color[1], color[2]))


def load_image_store_json(path: str | Path) -> ImageStore:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(payload, dict) or not isinstance(payload.get("frames"), dict):
        raise ValueError("image file must be an object with a 'frames' object")
    frames: dict[str, list[Frame]] = {}
    for key, raw_frames in payload["frames"].items():
        if not isinstance(raw_frames, list):
            raise ValueError(f"frames[{key}] must be a list")
        frames[key] = [
            _parse_frame(raw, field_name=f"frames[{key}][{index}]") for index, raw in enumerate(raw_frames)
        ]
    return ImageStore(frames)
