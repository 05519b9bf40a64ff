"""Fixed timestep session loop with logging."""

from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Callable, Any
import json
import logging
import time

from controls.inputs import ControlSnapshot
from .config import FlightConfig, SessionConfig
from .step import CAPTURE, CRASH, LANDED, RESET, FrameSnapshot, Simulation

log = logging.getLogger(__name__)

Pilot = Callable[[FrameSnapshot], tuple[str, ControlSnapshot | None]]


@dataclass
class SessionResult:
    """Final tally after a session completes."""

    time_elapsed: float = 0.0
    ticks: int = 0
    captures: int = 0
    crashes: int = 0
    resets: int = 0
    touchdowns: int = 0
    termination_reason: str = ""


class TickLogger:
    """Logs each tick for replay and debugging."""

    def __init__(self, log_dir: Path | None = None):
        self.log_dir = log_dir
        self.entries: list[dict[str, Any]] = []
        self.config_snapshot: dict[str, Any] | None = None

    def set_config(self, config: FlightConfig, session: SessionConfig | None = None) -> None:
        """Store config snapshot for the log."""
        self.config_snapshot = {"flight": asdict(config)}
        if session is not None:
            self.config_snapshot["session"] = asdict(session)

    def log_tick(
        self,
        frame: FrameSnapshot,
        pilot_mode: str,
        controls: ControlSnapshot | None,
    ) -> None:
        """Log a single tick."""
        target = frame.target
        self.entries.append(
            {
                "tick": frame.tick,
                "t": round(frame.time, 4),
                "state": {
                    "x": round(frame.position[0], 3),
                    "y": round(frame.position[1], 3),
                    "z": round(frame.position[2], 3),
                    "pitch": round(frame.orientation[0], 3),
                    "yaw": round(frame.orientation[1], 3),
                    "roll": round(frame.orientation[2], 3),
                    "vx": round(frame.velocity[0], 3),
                    "vy": round(frame.velocity[1], 3),
                    "vz": round(frame.velocity[2], 3),
                    "throttle": round(frame.throttle, 3),
                },
                "target": None if target is None else {
                    "x": round(target.x, 3),
                    "y": round(target.y, 3),
                    "z": round(target.z, 3),
                    "kind": target.kind,
                },
                "score": frame.score,
                "events": list(frame.events),
                "pilot": pilot_mode,
                "controls": controls.names() if controls is not None else None,
            }
        )

    def save(self, filename: str) -> Path | None:
        """Save log to JSON file."""
        if self.log_dir is None:
            return None

        self.log_dir.mkdir(parents=True, exist_ok=True)
        filepath = self.log_dir / filename

        log_data = {
            "config": self.config_snapshot,
            "tick_count": len(self.entries),
            "ticks": self.entries,
        }

        with open(filepath, "w") as f:
            json.dump(log_data, f, indent=2)

        return filepath


def run_session(
    simulation: Simulation,
    session: SessionConfig,
    pilot: Pilot | None = None,
    logger: TickLogger | None = None,
    visualizer: Any = None,
    realtime: bool = False,
) -> tuple[SessionResult, FrameSnapshot]:
    """
    Drive simulation.tick at a fixed rate until a stop condition.

    Args:
        simulation: The simulation to drive
        session: Tick rate and stop conditions
        pilot: Function that takes the last frame and returns (mode, controls).
            Returning None for controls reads the simulation's InputState
            instead (manual flight). Without a pilot, InputState is always used.
        logger: Optional tick logger
        visualizer: Optional object with update(frame) and is_open()
        realtime: If True, sleep to maintain real-time speed

    Returns:
        Tuple of (SessionResult, last FrameSnapshot)
    """
    dt = session.dt
    result = SessionResult()
    frame = simulation.snapshot()

    if logger:
        logger.set_config(simulation.config, session)

    log.info("session start: hz=%d max_time=%.1fs obstacles=%d", session.hz, session.max_time, len(simulation.obstacles))
    wall_start = time.perf_counter()
    sim_time = 0.0

    while True:
        # Check termination conditions
        if session.max_captures is not None and frame.score >= session.max_captures:
            result.termination_reason = "captures_reached"
            break

        if sim_time >= session.max_time:
            result.termination_reason = "timeout"
            break

        if visualizer and hasattr(visualizer, "is_open") and not visualizer.is_open():
            result.termination_reason = "viz_closed"
            break

        if pilot:
            mode, controls = pilot(frame)
        else:
            mode, controls = "MANUAL", None

        was_grounded = LANDED in frame.events
        frame = simulation.tick(dt, controls)

        # Tally events
        if CAPTURE in frame.events:
            result.captures += 1
        if CRASH in frame.events:
            result.crashes += 1
        if RESET in frame.events:
            result.resets += 1
        if LANDED in frame.events and not was_grounded:
            result.touchdowns += 1

        if logger:
            logger.log_tick(frame, mode, controls)

        if visualizer:
            visualizer.update(frame)

        sim_time += dt

        # Real-time pacing
        if realtime:
            target_wall = wall_start + sim_time
            now = time.perf_counter()
            if now < target_wall:
                time.sleep(target_wall - now)

    result.time_elapsed = sim_time
    result.ticks = frame.tick
    log.info("session end: %s after %.1fs, score %d", result.termination_reason, sim_time, frame.score)

    return result, frame
