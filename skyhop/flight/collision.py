"""Collision tests between the flight body, the ground and obstacles."""

from dataclasses import dataclass

from .body import FlightBody
from .config import FlightConfig
from .world import Box, ObstacleSet

GROUND = "ground"
OBSTACLE = "obstacle"


@dataclass(frozen=True)
class CollisionResult:
    """Outcome of one collision check."""

    collided: bool = False
    cause: str | None = None  # GROUND, OBSTACLE or None
    obstacle: Box | None = None

    def __bool__(self) -> bool:
        return self.collided


def body_box(body: FlightBody) -> Box:
    """Axis-aligned bounding box of the body."""
    return Box.around(body.position, body.body_radius)


def check(body: FlightBody, obstacles: ObstacleSet, config: FlightConfig) -> CollisionResult:
    """
    Test the body against the ground plane and every obstacle.

    Pure: neither the body nor the obstacles are modified. An obstacle hit
    wins over ground contact, so a body buried in a building near the
    ground is never treated as landed.
    """
    hit = obstacles.first_hit(body_box(body))
    if hit is not None:
        return CollisionResult(collided=True, cause=OBSTACLE, obstacle=hit)

    if body.position[1] < config.ground_clearance:
        return CollisionResult(collided=True, cause=GROUND)

    return CollisionResult()


def land(body: FlightBody, config: FlightConfig) -> None:
    """Rest the body on the ground clearance with no velocity."""
    body.position[1] = config.ground_clearance
    body.velocity[:] = 0.0
