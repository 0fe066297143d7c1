from __future__ import annotations

import argparse
import importlib.metadata
import os
import platform
import sys
from typing import Any

from dudeworld.content.images import Frame, ImageStore, load_image_store_json
from dudeworld.content.io import DEFAULT_WORLD_PATH, load_simulation_json
from dudeworld.sim.core import Simulation
from dudeworld.sim.point import Point

CELL_SIZE = 32
HUD_HEIGHT = 28
TARGET_FPS = 30
DEFAULT_TIME_SCALE = 1.0
MIN_TIME_SCALE = 0.25
MAX_TIME_SCALE = 8.0
BACKGROUND_COLOR = (17, 18, 25)
HUD_TEXT_COLOR = (230, 230, 235)

pygame: Any | None = None


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="dudeworld pygame viewer")
    parser.add_argument("--world", default=DEFAULT_WORLD_PATH, help="World JSON to load.")
    parser.add_argument("--images", default=None, help="Optional image-frame JSON overriding built-in frames.")
    parser.add_argument("--seed", type=int, default=7, help="Seed for the simulation RNG streams.")
    parser.add_argument("--headless", action="store_true", help="Use the dummy SDL driver and exit after one frame.")
    return parser


def _env_flag_enabled(var_name: str) -> bool:
    return os.environ.get(var_name, "").strip().lower() in {"1", "true", "yes", "on"}


def _print_startup_banner() -> None:
    try:
        pygame_version = importlib.metadata.version("pygame")
    except importlib.metadata.PackageNotFoundError:
        pygame_version = "not-installed"
    print(
        "[dudeworld.viewer] startup "
        f"python={platform.python_version()} "
        f"pygame={pygame_version} "
        f"platform={platform.platform()}"
    )


def _ensure_pygame_imported() -> Any:
    global pygame
    if pygame is None:
        import pygame as pygame_module

        pygame = pygame_module
    return pygame


def _window_size(sim: Simulation) -> tuple[int, int]:
    return (sim.world.num_cols * CELL_SIZE, sim.world.num_rows * CELL_SIZE + HUD_HEIGHT)


def _clamp_time_scale(value: float) -> float:
    return max(MIN_TIME_SCALE, min(MAX_TIME_SCALE, value))


def _draw_frame(screen: Any, frame: Frame | None, pos: Point, font: Any, *, inset: int) -> None:
    if frame is None:
        return
    rect = pygame.Rect(
        pos.x * CELL_SIZE + inset,
        HUD_HEIGHT + pos.y * CELL_SIZE + inset,
        CELL_SIZE - inset * 2,
        CELL_SIZE - inset * 2,
    )
    pygame.draw.rect(screen, frame.color, rect)
    if inset:
        glyph = font.render(frame.glyph, True, (10, 10, 10))
        screen.blit(glyph, glyph.get_rect(center=rect.center))


def _draw_world(screen: Any, sim: Simulation, font: Any) -> None:
    world = sim.world
    for y in range(world.num_rows):
        for x in range(world.num_cols):
            _draw_frame(screen, world.get_background_image(Point(x, y)), Point(x, y), font, inset=0)
    for entity in world.entities:
        _draw_frame(screen, entity.current_image(), entity.position, font, inset=3)


def _draw_hud(screen: Any, sim: Simulation, font: Any, time_scale: float, paused: bool) -> None:
    status = "paused" if paused else f"x{time_scale:g}"
    text = f"t={sim.time:7.2f}  entities={len(sim.world.entities)}  events={len(sim.scheduler)}  {status}"
    screen.blit(font.render(text, True, HUD_TEXT_COLOR), (6, 6))


def run_pygame_viewer(
    world_path: str = DEFAULT_WORLD_PATH,
    *,
    seed: int = 7,
    image_path: str | None = None,
    headless: bool = False,
) -> int:
    if headless:
        os.environ["SDL_VIDEODRIVER"] = "dummy"
        print("[dudeworld.viewer] warning: headless mode active; no window will open.")

    _print_startup_banner()
    pygame_module = _ensure_pygame_imported()

    try:
        pygame_module.init()
    except Exception as exc:
        print(
            "[dudeworld.viewer] failed during pygame.init(): "
            f"{exc}. Hint: verify a working SDL video driver (set SDL_VIDEODRIVER=dummy for headless mode).",
            file=sys.stderr,
        )
        return 1

    try:
        image_store = load_image_store_json(image_path) if image_path else ImageStore()
        sim = load_simulation_json(world_path, seed=seed, image_store=image_store)
    except (OSError, ValueError) as exc:
        print(f"[dudeworld.viewer] failed to initialize simulation: {exc}", file=sys.stderr)
        pygame_module.quit()
        return 1

    try:
        pygame_module.display.set_caption("dudeworld")
        screen = pygame_module.display.set_mode(_window_size(sim))
    except Exception as exc:
        print(
            "[dudeworld.viewer] failed during pygame.display.set_mode(...): "
            f"{exc}. Hint: use --headless or DUDEWORLD_HEADLESS=1 without a display.",
            file=sys.stderr,
        )
        pygame_module.quit()
        return 1

    font = pygame_module.font.SysFont(None, 20)
    clock = pygame_module.time.Clock()
    time_scale = DEFAULT_TIME_SCALE
    paused = False

    if headless:
        sim.advance_time(1.0 / TARGET_FPS)
        _draw_world(screen, sim, font)
        pygame_module.quit()
        return 0

    running = True
    while running:
        elapsed_seconds = clock.tick(TARGET_FPS) / 1000.0
        for event in pygame_module.event.get():
            if event.type == pygame_module.QUIT:
                running = False
            elif event.type == pygame_module.KEYDOWN:
                if event.key == pygame_module.K_ESCAPE:
                    running = False
                elif event.key == pygame_module.K_SPACE:
                    paused = not paused
                elif event.key in (pygame_module.K_PLUS, pygame_module.K_EQUALS):
                    time_scale = _clamp_time_scale(time_scale * 2)
                elif event.key == pygame_module.K_MINUS:
                    time_scale = _clamp_time_scale(time_scale / 2)

        if not paused:
            sim.advance_time(elapsed_seconds * time_scale)

        screen.fill(BACKGROUND_COLOR)
        _draw_world(screen, sim, font)
        _draw_hud(screen, sim, font, time_scale, paused)
        pygame_module.display.flip()

    pygame_module.quit()
    return 0


def main(argv: list[str] | None = None) -> None:
    args = _build_parser().parse_args(argv)
    headless = args.headless or _env_flag_enabled("DUDEWORLD_HEADLESS")
    raise SystemExit(
        run_pygame_viewer(
            args.world,
            seed=args.seed,
            image_path=args.images,
            headless=headless,
        )
    )


if __name__ == "__main__":
    main()
