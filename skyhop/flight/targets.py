"""Capture targets, gates and their placement policy."""

from dataclasses import dataclass
import logging
import math

import numpy as np

from .body import FlightBody
from .config import FlightConfig
from .world import Box, ObstacleSet

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Target:
    """A point goal the drone must fly through."""

    x: float
    y: float
    z: float
    half_extent: float = 1.0  # Bounding half-extent for placement checks
    yaw: float = 0.0  # Facing for gates; unused by point targets
    kind: str = "target"

    @property
    def position(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z])

    def bounding_box(self) -> Box:
        return Box.around((self.x, self.y, self.z), self.half_extent)

    def distance_to(self, body: FlightBody) -> float:
        """Calculate distance from body to target center."""
        dx = self.x - body.position[0]
        dy = self.y - body.position[1]
        dz = self.z - body.position[2]
        return math.sqrt(dx * dx + dy * dy + dz * dz)


def facing_yaw(x: float, z: float, reference) -> float:
    """Yaw that turns a gate at (x, z) to face the reference point."""
    return math.atan2(reference[0] - x, reference[2] - z)


class Score:
    """Capture counter; only ever goes up."""

    def __init__(self):
        self._value = 0

    @property
    def value(self) -> int:
        return self._value

    def increment(self) -> int:
        self._value += 1
        return self._value

    def __int__(self) -> int:
        return self._value


class TargetSpawner:
    """
    Places the single live goal and tests for capture.

    Candidates are drawn uniformly from the configured region and rejected
    while they overlap an obstacle. After spawn_attempts rejections the last
    candidate is kept anyway so a tick can never stall on placement.
    """

    def __init__(self, config: FlightConfig, rng: np.random.Generator):
        self.config = config
        self.rng = rng
        self.fallbacks = 0  # Placements that gave up and accepted overlap

    def _candidate(self) -> Target:
        cfg = self.config
        min_x, max_x, min_z, max_z = cfg.target_region
        x = float(self.rng.uniform(min_x, max_x))
        z = float(self.rng.uniform(min_z, max_z))
        y = float(self.rng.uniform(*cfg.target_altitude))
        if cfg.goal == "gate":
            yaw = facing_yaw(x, z, cfg.spawn_position)
            return Target(x, y, z, half_extent=cfg.target_half_extent, yaw=yaw, kind="gate")
        return Target(x, y, z, half_extent=cfg.target_half_extent)

    def spawn(self, obstacles: ObstacleSet) -> Target:
        """Return a new goal that does not overlap any obstacle, if one can be found."""
        attempts = max(1, self.config.spawn_attempts)
        candidate = None
        for _ in range(attempts):
            candidate = self._candidate()
            if not obstacles.intersects(candidate.bounding_box()):
                return candidate

        self.fallbacks += 1
        log.warning(
            "no free %s position after %d attempts, accepting overlap at (%.1f, %.1f, %.1f)",
            candidate.kind, attempts, candidate.x, candidate.y, candidate.z,
        )
        return candidate

    def check_capture(self, body: FlightBody, target: Target | None) -> bool:
        """Sphere test against the capture radius, for targets and gates alike."""
        if target is None:
            return False
        return target.distance_to(body) < self.config.capture_radius
