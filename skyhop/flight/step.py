"""Per-tick orchestration: integrate, collide, capture, publish."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
import threading

import numpy as np

from controls.inputs import Control, ControlSnapshot, InputState
from .body import FlightBody, advance, sanitize_dt
from .collision import GROUND, check, land
from .config import FlightConfig
from .targets import Score, Target, TargetSpawner
from .world import ObstacleSet

CRASH = "crash"
LANDED = "landed"
RESET = "reset"
CAPTURE = "capture"


@dataclass(frozen=True)
class Telemetry:
    """HUD strings for one frame."""

    altitude: str
    speed: str
    score: str | None = None


@dataclass(frozen=True)
class FrameSnapshot:
    """Read-only copy of everything a renderer or HUD may show."""

    tick: int
    time: float
    position: tuple[float, float, float]
    velocity: tuple[float, float, float]
    orientation: tuple[float, float, float]  # pitch, yaw, roll
    throttle: float
    score: int
    target: Target | None
    events: tuple[str, ...]
    telemetry: Telemetry

    @property
    def altitude(self) -> float:
        return self.position[1]

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.velocity))


def _to_fixed(value: float, places: int) -> str:
    """Fixed-point text with ties rounded away from zero, as browser HUDs print it."""
    quantum = Decimal(1).scaleb(-places)
    return str(Decimal(float(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def format_telemetry(body: FlightBody, score: int | None, hud_units: bool) -> Telemetry:
    """Altitude with one decimal, speed in km/h with none."""
    altitude = _to_fixed(body.position[1], 1)
    speed = _to_fixed(body.speed * 3.6, 0)
    if hud_units:
        altitude += " m"
        speed += " km/h"
    score_text = f"SCORE: {score}" if score is not None else None
    return Telemetry(altitude=altitude, speed=speed, score=score_text)


def _as_tuple(vec: np.ndarray) -> tuple[float, float, float]:
    return tuple(float(v) for v in vec)


class Simulation:
    """
    Owns the flight body, score and live target for one session.

    tick(dt) is the only entry point that mutates state. It is not
    re-entrant: a second call while one is running raises RuntimeError.
    """

    def __init__(
        self,
        config: FlightConfig,
        obstacles: ObstacleSet | None = None,
        rng: np.random.Generator | None = None,
        inputs: InputState | None = None,
    ):
        self.config = config
        self.obstacles = obstacles if obstacles is not None else ObstacleSet()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.inputs = inputs if inputs is not None else InputState()

        self.body = FlightBody.spawn(config)
        self.score = Score()
        self.spawner = TargetSpawner(config, self.rng) if config.goal else None
        self.target = self.spawner.spawn(self.obstacles) if self.spawner else None

        self.tick_count = 0
        self.time = 0.0
        self._busy = threading.Lock()

    def reset(self) -> None:
        """Put the body back on its spawn pose."""
        self.body.reset(self.config)

    def tick(self, dt: float, controls: ControlSnapshot | None = None) -> FrameSnapshot:
        """Advance one frame and return what should be rendered."""
        if not self._busy.acquire(blocking=False):
            raise RuntimeError("Simulation.tick re-entered before the previous tick finished")
        try:
            return self._tick(dt, controls)
        finally:
            self._busy.release()

    def _tick(self, dt: float, controls: ControlSnapshot | None) -> FrameSnapshot:
        cfg = self.config
        events: list[str] = []

        # Read input once; later key events wait for the next tick
        if controls is None:
            controls = self.inputs.snapshot()

        self.body = advance(self.body, controls, cfg, dt)

        collision = check(self.body, self.obstacles, cfg)
        if collision:
            if collision.cause == GROUND and cfg.ground_contact == "land":
                land(self.body, cfg)
                events.append(LANDED)
            else:
                self.reset()
                events.append(CRASH)

        if controls.is_held(Control.RESET):
            self.reset()
            events.append(RESET)

        if self.spawner is not None and self.spawner.check_capture(self.body, self.target):
            self.score.increment()
            self.target = self.spawner.spawn(self.obstacles)
            events.append(CAPTURE)

        self.tick_count += 1
        self.time += sanitize_dt(dt, cfg)
        return self.snapshot(tuple(events))

    def snapshot(self, events: tuple[str, ...] = ()) -> FrameSnapshot:
        """Build the published frame from current state."""
        score = self.score.value if self.spawner is not None else None
        return FrameSnapshot(
            tick=self.tick_count,
            time=self.time,
            position=_as_tuple(self.body.position),
            velocity=_as_tuple(self.body.velocity),
            orientation=_as_tuple(self.body.orientation),
            throttle=self.body.throttle,
            score=self.score.value,
            target=self.target,
            events=events,
            telemetry=format_telemetry(self.body, score, self.config.hud_units),
        )
