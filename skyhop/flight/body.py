"""Flight body state and acro-mode dynamics."""

from dataclasses import dataclass, field
import math

import numpy as np

from controls.inputs import Control, ControlSnapshot
from .config import FlightConfig

UP = np.array([0.0, 1.0, 0.0])


def _vec3(values=(0.0, 0.0, 0.0)) -> np.ndarray:
    return np.array(values, dtype=float)


@dataclass
class FlightBody:
    """Rigid body state; world is y-up, angles in radians."""

    position: np.ndarray = field(default_factory=_vec3)
    velocity: np.ndarray = field(default_factory=_vec3)
    orientation: np.ndarray = field(default_factory=_vec3)  # pitch, yaw, roll
    throttle: float = 0.0
    body_radius: float = 0.3

    @classmethod
    def spawn(cls, config: FlightConfig) -> "FlightBody":
        """Create a body at the configured spawn pose."""
        return cls(
            position=_vec3(config.spawn_position),
            throttle=config.spawn_throttle,
            body_radius=config.body_radius,
        )

    def reset(self, config: FlightConfig) -> None:
        """Overwrite every field with the spawn pose, in place."""
        self.position[:] = config.spawn_position
        self.velocity[:] = 0.0
        self.orientation[:] = 0.0
        self.throttle = config.spawn_throttle
        self.body_radius = config.body_radius

    def copy(self) -> "FlightBody":
        """Return a copy of this state."""
        return FlightBody(
            position=self.position.copy(),
            velocity=self.velocity.copy(),
            orientation=self.orientation.copy(),
            throttle=self.throttle,
            body_radius=self.body_radius,
        )

    @property
    def yaw(self) -> float:
        return float(self.orientation[1])

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.velocity))


def _clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp value between min and max."""
    return max(min_val, min(max_val, value))


def rotation_matrix(pitch: float, yaw: float, roll: float) -> np.ndarray:
    """
    Rotation for Euler angles composed yaw -> pitch -> roll.

    R = Ry(yaw) @ Rx(pitch) @ Rz(roll), i.e. the 'YXZ' intrinsic order.
    Changing the order changes how the craft handles.
    """
    cp, sp = math.cos(pitch), math.sin(pitch)
    cy, sy = math.cos(yaw), math.sin(yaw)
    cr, sr = math.cos(roll), math.sin(roll)

    rx = np.array([[1.0, 0.0, 0.0], [0.0, cp, -sp], [0.0, sp, cp]])
    ry = np.array([[cy, 0.0, sy], [0.0, 1.0, 0.0], [-sy, 0.0, cy]])
    rz = np.array([[cr, -sr, 0.0], [sr, cr, 0.0], [0.0, 0.0, 1.0]])
    return ry @ rx @ rz


def thrust_direction(orientation: np.ndarray) -> np.ndarray:
    """World-space direction of the body's local up axis."""
    pitch, yaw, roll = orientation
    return rotation_matrix(pitch, yaw, roll) @ UP


def sanitize_dt(dt: float, config: FlightConfig) -> float:
    """Map a raw frame delta to a usable step; 0.0 means skip the tick."""
    if not math.isfinite(dt) or dt <= 0.0:
        return 0.0
    if config.max_dt is not None and dt > config.max_dt:
        return config.max_dt
    return dt


def hover_assist_active(throttle: float, vertical_speed: float, config: FlightConfig) -> bool:
    """Assist engages only near hover throttle AND while descending."""
    if not config.hover_assist:
        return False
    near_hover = abs(throttle - config.hover_throttle) <= config.hover_band
    return near_hover and vertical_speed < 0.0


def advance(
    body: FlightBody,
    controls: ControlSnapshot,
    config: FlightConfig,
    dt: float,
) -> FlightBody:
    """
    Advance the body one step using forward Euler integration.

    Rotation inputs are rates (acro mode, no self-leveling). Throttle is
    sticky. Drag is applied once per call, so it depends on frame rate.
    """
    dt = sanitize_dt(dt, config)
    new_body = body.copy()
    if dt == 0.0:
        return new_body

    # Upstream values may be garbage; normalize before integrating
    orientation = np.where(np.isfinite(new_body.orientation), new_body.orientation, 0.0)
    throttle = _clamp(new_body.throttle, 0.0, 1.0) if math.isfinite(new_body.throttle) else 0.0

    # 1. Angular rates
    step = config.angular_rate * dt
    orientation[0] += step * controls.axis(Control.PITCH_FORWARD, Control.PITCH_BACK)
    orientation[1] += step * controls.axis(Control.YAW_RIGHT, Control.YAW_LEFT)
    orientation[2] += step * controls.axis(Control.ROLL_RIGHT, Control.ROLL_LEFT)

    # 2. Throttle
    if controls.is_held(Control.THROTTLE_UP):
        throttle = min(throttle + config.throttle_rate * dt, 1.0)
    elif controls.is_held(Control.THROTTLE_DOWN):
        throttle = max(throttle - config.throttle_rate * dt, 0.0)

    # 3. Forces
    acceleration = thrust_direction(orientation) * (throttle * config.thrust_max)
    acceleration[1] -= config.gravity
    if hover_assist_active(throttle, new_body.velocity[1], config):
        acceleration[1] += config.hover_assist_gain * -new_body.velocity[1]

    # 4. Velocity, then per-tick drag
    velocity = (new_body.velocity + acceleration * dt) * (1.0 - config.drag)

    # 5. Position from post-drag velocity
    new_body.position = new_body.position + velocity * dt
    new_body.velocity = velocity
    new_body.orientation = orientation
    new_body.throttle = throttle

    return new_body
