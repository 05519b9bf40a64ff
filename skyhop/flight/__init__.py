"""Core flight module: dynamics, collision, goals and the tick loop."""

from .config import FlightConfig, SessionConfig, VARIANTS
from .body import FlightBody, advance, rotation_matrix
from .world import Box, ObstacleSet, generate_city
from .collision import CollisionResult, check
from .targets import Score, Target, TargetSpawner
from .step import FrameSnapshot, Simulation, Telemetry
from .loop import SessionResult, TickLogger, run_session

__all__ = [
    "FlightConfig",
    "SessionConfig",
    "VARIANTS",
    "FlightBody",
    "advance",
    "rotation_matrix",
    "Box",
    "ObstacleSet",
    "generate_city",
    "CollisionResult",
    "check",
    "Score",
    "Target",
    "TargetSpawner",
    "FrameSnapshot",
    "Simulation",
    "Telemetry",
    "SessionResult",
    "TickLogger",
    "run_session",
]
