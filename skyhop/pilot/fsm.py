"""Finite State Machine autopilot that flies by holding keys."""

from enum import Enum, auto
from dataclasses import dataclass
import math

from controls.inputs import Control, ControlSnapshot
from flight.step import CRASH, RESET, FrameSnapshot


class PilotMode(Enum):
    """Modes for the autopilot FSM."""

    CLIMB = auto()  # Too low, level out and gain altitude
    TURN = auto()  # Goal off the nose, yaw toward it while holding altitude
    CRUISE = auto()  # Goal ahead, pitch forward and fly at it
    RECOVER = auto()  # Just respawned or badly tilted, level out first


@dataclass
class PilotConfig:
    """
    Tunable parameters for key-holding flight.

    Every output is a held key, so each loop is bang-bang with a deadband
    a little wider than one tick's worth of rotation.
    """

    # Airframe knowledge
    hover_throttle: float = 0.3924  # gravity / thrust_max for the default airframe

    # Altitude hold
    cruise_altitude: float = 10.0  # Used when there is no goal
    climb_margin: float = 3.0  # Below goal altitude by this much -> CLIMB
    min_safe_altitude: float = 2.0
    altitude_gain: float = 0.6  # Desired climb rate per meter of error (1/s)
    max_climb_rate: float = 3.0  # m/s
    climb_rate_gain: float = 0.08  # Throttle per m/s of climb-rate error
    throttle_deadband: float = 0.02

    # Attitude
    cruise_pitch: float = -0.5  # rad, nose down to move forward
    approach_pitch: float = -0.2  # rad, gentler near the goal
    approach_distance: float = 15.0
    attitude_deadband: float = 0.06  # rad
    level_tolerance: float = 0.12  # rad, RECOVER exits below this
    max_tilt: float = 1.2  # rad, RECOVER entered above this

    # Heading
    turn_threshold: float = 0.35  # rad of heading error that forces TURN
    yaw_deadband: float = 0.05


def _normalize_angle(angle: float) -> float:
    """Normalize angle to [-π, π]."""
    while angle > math.pi:
        angle -= 2 * math.pi
    while angle < -math.pi:
        angle += 2 * math.pi
    return angle


def heading_to(frame: FrameSnapshot) -> float | None:
    """Yaw that points the nose (-Z) at the goal, or None without a goal."""
    if frame.target is None:
        return None
    dx = frame.target.x - frame.position[0]
    dz = frame.target.z - frame.position[2]
    if math.hypot(dx, dz) < 1e-6:
        return None
    return math.atan2(-dx, -dz)


def _hold_toward(error: float, deadband: float, increase: Control, decrease: Control) -> set[Control]:
    if error > deadband:
        return {increase}
    if error < -deadband:
        return {decrease}
    return set()


class Autopilot:
    """
    Key-holding FSM pilot: RECOVER → CLIMB → TURN → CRUISE

    Reads only the published frame, like a human watching the screen,
    and answers with the set of keys to hold for the next tick.
    """

    def __init__(self, config: PilotConfig | None = None):
        self.config = config or PilotConfig()
        self.mode = PilotMode.RECOVER

    def reset(self) -> None:
        """Reset pilot state."""
        self.mode = PilotMode.RECOVER

    def step(self, frame: FrameSnapshot) -> tuple[str, ControlSnapshot]:
        """Process a frame and return (mode_name, held controls)."""
        self._update_mode(frame)
        controls = self._generate_controls(frame)
        return self.mode.name, ControlSnapshot(frozenset(controls))

    __call__ = step

    def _goal_altitude(self, frame: FrameSnapshot) -> float:
        cfg = self.config
        if frame.target is None:
            return cfg.cruise_altitude
        return max(frame.target.y, cfg.min_safe_altitude)

    def _update_mode(self, frame: FrameSnapshot) -> None:
        """Pick the mode for this tick, RECOVER taking priority."""
        cfg = self.config
        pitch, _, roll = frame.orientation

        if CRASH in frame.events or RESET in frame.events:
            self.mode = PilotMode.RECOVER
            return
        if abs(pitch) > cfg.max_tilt or abs(roll) > cfg.max_tilt:
            self.mode = PilotMode.RECOVER
            return

        if self.mode == PilotMode.RECOVER:
            level = abs(roll) < cfg.level_tolerance and abs(pitch) < cfg.level_tolerance
            if not level:
                return

        if frame.altitude < self._goal_altitude(frame) - cfg.climb_margin or frame.altitude < cfg.min_safe_altitude:
            self.mode = PilotMode.CLIMB
            return

        heading = heading_to(frame)
        if heading is not None and abs(_normalize_angle(heading - frame.orientation[1])) > cfg.turn_threshold:
            self.mode = PilotMode.TURN
            return

        self.mode = PilotMode.CRUISE

    def _generate_controls(self, frame: FrameSnapshot) -> set[Control]:
        """Generate held keys for the current mode."""
        cfg = self.config
        pitch, yaw, roll = frame.orientation

        desired_pitch = 0.0
        if self.mode == PilotMode.CRUISE:
            near = frame.target is not None and self._distance(frame) < cfg.approach_distance
            desired_pitch = cfg.approach_pitch if near else cfg.cruise_pitch

        held = set()
        held |= _hold_toward(desired_pitch - pitch, cfg.attitude_deadband, Control.PITCH_BACK, Control.PITCH_FORWARD)
        held |= _hold_toward(-roll, cfg.attitude_deadband, Control.ROLL_LEFT, Control.ROLL_RIGHT)

        heading = heading_to(frame)
        if heading is not None and self.mode in (PilotMode.TURN, PilotMode.CRUISE):
            yaw_error = _normalize_angle(heading - yaw)
            held |= _hold_toward(yaw_error, cfg.yaw_deadband, Control.YAW_LEFT, Control.YAW_RIGHT)

        held |= self._throttle_keys(frame)
        return held

    def _throttle_keys(self, frame: FrameSnapshot) -> set[Control]:
        """Altitude hold: pick a throttle that gives the wanted climb rate."""
        cfg = self.config
        pitch, _, roll = frame.orientation

        altitude_error = self._goal_altitude(frame) - frame.altitude
        wanted_climb = max(-cfg.max_climb_rate, min(cfg.max_climb_rate, cfg.altitude_gain * altitude_error))
        if self.mode == PilotMode.CLIMB:
            wanted_climb = cfg.max_climb_rate

        # Tilting spends thrust sideways; compensate so vertical thrust holds
        tilt = max(0.2, math.cos(pitch) * math.cos(roll))
        wanted_throttle = cfg.hover_throttle / tilt + cfg.climb_rate_gain * (wanted_climb - frame.velocity[1])
        wanted_throttle = max(0.0, min(1.0, wanted_throttle))

        return _hold_toward(wanted_throttle - frame.throttle, cfg.throttle_deadband, Control.THROTTLE_UP, Control.THROTTLE_DOWN)

    @staticmethod
    def _distance(frame: FrameSnapshot) -> float:
        dx = frame.target.x - frame.position[0]
        dy = frame.target.y - frame.position[1]
        dz = frame.target.z - frame.position[2]
        return math.sqrt(dx * dx + dy * dy + dz * dz)
