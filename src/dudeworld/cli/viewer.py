from __future__ import annotations

from dudeworld.content.io import DEFAULT_WORLD_PATH, load_simulation_json
from dudeworld.sim.core import Simulation
from dudeworld.sim.point import Point

EMPTY_GLYPH = " "


class AsciiViewer:
    """Read-only projection of simulation state for terminal display."""

    def render(self, sim: Simulation) -> str:
        world = sim.world
        lines = [f"time={sim.time:.2f} entities={len(world.entities)} pending={len(sim.scheduler)}"]
        for y in range(world.num_rows):
            row: list[str] = []
            for x in range(world.num_cols):
                pos = Point(x, y)
                occupant = world.get_occupant(pos)
                frame = occupant.current_image() if occupant is not None else world.get_background_image(pos)
                row.append(frame.glyph if frame is not None else EMPTY_GLYPH)
            lines.append("".join(row))
        return "\n".join(lines)

    def render_entities(self, sim: Simulation) -> str:
        lines = []
        for entity in sorted(sim.world.entities, key=lambda e: (e.position.y, e.position.x)):
            lines.append(
                f"{entity.kind.value}[{entity.id}] pos=({entity.position.x},{entity.position.y}) "
                f"health={entity.health} resources={entity.resource_count}/{entity.resource_limit}"
            )
        return "\n".join(lines)


class SimulationController:
    """Small time-stepping adapter; advances the sim but does not own state."""

    def __init__(self, sim: Simulation, tick_seconds: float = 0.25) -> None:
        if tick_seconds <= 0:
            raise ValueError("tick_seconds must be > 0")
        self.sim = sim
        self.tick_seconds = tick_seconds

    def advance_ticks(self, ticks: int) -> int:
        if ticks < 0:
            raise ValueError("ticks must be >= 0")
        fired = 0
        for _ in range(ticks):
            fired += self.sim.advance_time(self.tick_seconds)
        return fired

    def advance_seconds(self, seconds: float) -> int:
        return self.sim.advance_time(seconds)


def run_demo(world_path: str = DEFAULT_WORLD_PATH, seed: int = 7, tick_seconds: float = 0.25) -> None:
    sim = load_simulation_json(world_path, seed=seed)
    view = AsciiViewer()
    controller = SimulationController(sim, tick_seconds=tick_seconds)

    print("dudeworld demo. Commands: show | list | tick <n> | time <seconds> | quit")
    print(view.render(sim))

    while True:
        raw = input("> ").strip()
        if raw in {"quit", "exit"}:
            break
        if raw == "show":
            print(view.render(sim))
            continue
        if raw == "list":
            print(view.render_entities(sim))
            continue

        parts = raw.split()
        if len(parts) == 2 and parts[0] == "tick":
            controller.advance_ticks(int(parts[1]))
            print(view.render(sim))
            continue
        if len(parts) == 2 and parts[0] == "time":
            controller.advance_seconds(float(parts[1]))
            print(view.render(sim))
            continue

        print("unknown command")


if __name__ == "__main__":
    run_demo()
