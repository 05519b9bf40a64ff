"""Autopilot mode selection and held keys."""

import math

import numpy as np

from controls import Control
from flight.config import FlightConfig, SessionConfig
from flight.loop import run_session
from flight.step import CRASH, FrameSnapshot, Simulation, Telemetry
from flight.targets import Target
from pilot import Autopilot, PilotConfig, PilotMode


def make_frame(
    position=(0.0, 10.0, 0.0),
    orientation=(0.0, 0.0, 0.0),
    velocity=(0.0, 0.0, 0.0),
    throttle=0.39,
    target=Target(0.0, 10.0, -50.0),
    events=(),
) -> FrameSnapshot:
    return FrameSnapshot(
        tick=1,
        time=0.0,
        position=position,
        velocity=velocity,
        orientation=orientation,
        throttle=throttle,
        score=0,
        target=target,
        events=events,
        telemetry=Telemetry(altitude="", speed=""),
    )


def test_crash_event_forces_recover_and_levels_out():
    pilot = Autopilot()
    mode, controls = pilot.step(make_frame(orientation=(0.5, 0.0, -0.4), events=(CRASH,)))

    assert mode == "RECOVER"
    assert controls.is_held(Control.PITCH_FORWARD)
    assert controls.is_held(Control.ROLL_LEFT)
    assert not controls.is_held(Control.YAW_LEFT) and not controls.is_held(Control.YAW_RIGHT)


def test_recover_holds_until_level():
    pilot = Autopilot()
    pilot.step(make_frame(orientation=(0.5, 0.0, 0.0), events=(CRASH,)))
    mode, _ = pilot.step(make_frame(orientation=(0.3, 0.0, 0.0)))
    assert mode == "RECOVER"
    mode, _ = pilot.step(make_frame(orientation=(0.05, 0.0, 0.0)))
    assert mode != "RECOVER"


def test_low_altitude_climbs_with_throttle():
    pilot = Autopilot()
    mode, controls = pilot.step(make_frame(position=(0.0, 1.0, 0.0), throttle=0.0))
    assert mode == "CLIMB"
    assert controls.is_held(Control.THROTTLE_UP)


def test_goal_behind_turns_toward_it():
    pilot = Autopilot()
    # Nose points at -Z; goal sits off to +X
    mode, controls = pilot.step(make_frame(target=Target(50.0, 10.0, 0.0)))
    assert mode == "TURN"
    # Heading to +X is -pi/2, so yaw must decrease
    assert controls.is_held(Control.YAW_RIGHT)
    assert not controls.is_held(Control.PITCH_FORWARD)


def test_goal_ahead_cruises_nose_down():
    pilot = Autopilot()
    mode, controls = pilot.step(make_frame())
    assert mode == "CRUISE"
    assert controls.is_held(Control.PITCH_FORWARD)


def test_near_goal_uses_gentler_pitch():
    config = PilotConfig(cruise_pitch=-0.5, approach_pitch=-0.2, approach_distance=15.0)
    pilot = Autopilot(config)
    goal = Target(0.0, 10.0, -10.0)
    pilot.step(make_frame(target=goal))
    mode, controls = pilot.step(make_frame(orientation=(-0.3, 0.0, 0.0), target=goal))
    assert mode == "CRUISE"
    assert controls.is_held(Control.PITCH_BACK)


def test_throttle_tracks_hover_when_holding_altitude():
    pilot = Autopilot(PilotConfig(hover_throttle=0.4))
    _, low = pilot.step(make_frame(throttle=0.1))
    _, high = pilot.step(make_frame(throttle=0.9))
    assert low.is_held(Control.THROTTLE_UP)
    assert high.is_held(Control.THROTTLE_DOWN)


def test_reset_returns_to_recover():
    pilot = Autopilot()
    pilot.step(make_frame())
    assert pilot.mode == PilotMode.CRUISE
    pilot.reset()
    assert pilot.mode == PilotMode.RECOVER


def test_autopilot_session_stays_finite_and_airborne():
    config = FlightConfig.for_variant("hover")
    sim = Simulation(config, rng=np.random.default_rng(4))
    pilot = Autopilot(PilotConfig(hover_throttle=config.gravity / config.thrust_max))

    frames = []

    class Recorder:
        def update(self, frame):
            frames.append(frame)

        def is_open(self):
            return True

    result, last = run_session(sim, SessionConfig(hz=60, max_time=20.0), pilot=pilot, visualizer=Recorder())

    assert result.termination_reason == "timeout"
    assert len(frames) == result.ticks
    for frame in frames:
        assert all(math.isfinite(v) for v in frame.position + frame.velocity + frame.orientation)
        assert 0.0 <= frame.throttle <= 1.0
        assert frame.altitude >= config.ground_clearance
