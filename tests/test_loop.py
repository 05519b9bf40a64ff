"""Session loop termination, tallies and the JSON tick log."""

import json

import numpy as np

from controls import Control, ControlSnapshot
from flight.config import FlightConfig, SessionConfig
from flight.loop import SessionResult, TickLogger, run_session
from flight.step import Simulation


def _idle_pilot(frame):
    return "IDLE", ControlSnapshot()


def test_runs_until_timeout_at_fixed_rate():
    sim = Simulation(FlightConfig.for_variant("acro"))
    result, frame = run_session(sim, SessionConfig(hz=4, max_time=1.0), pilot=_idle_pilot)

    assert isinstance(result, SessionResult)
    assert result.termination_reason == "timeout"
    assert result.ticks == 4
    assert frame.tick == 4
    assert result.time_elapsed == 1.0


def test_stops_when_capture_goal_reached():
    config = FlightConfig.for_variant("hover", capture_radius=1e6)
    sim = Simulation(config, rng=np.random.default_rng(0))
    result, frame = run_session(sim, SessionConfig(hz=30, max_time=10.0, max_captures=3), pilot=_idle_pilot)

    assert result.termination_reason == "captures_reached"
    assert result.captures == 3
    assert frame.score == 3


def test_counts_crashes_in_crash_variants():
    sim = Simulation(FlightConfig.for_variant("city"), rng=np.random.default_rng(0))
    result, _ = run_session(sim, SessionConfig(hz=4, max_time=5.0), pilot=_idle_pilot)
    assert result.crashes >= 1
    assert result.touchdowns == 0


def test_counts_one_touchdown_while_resting():
    sim = Simulation(FlightConfig.for_variant("acro"))
    result, frame = run_session(sim, SessionConfig(hz=20, max_time=5.0), pilot=_idle_pilot)
    assert result.touchdowns == 1
    assert result.crashes == 0
    assert frame.altitude == 0.5


def test_counts_reset_commands():
    def resetting_pilot(frame):
        return "RESET", ControlSnapshot.of(Control.RESET)

    sim = Simulation(FlightConfig.for_variant("acro"))
    result, _ = run_session(sim, SessionConfig(hz=4, max_time=1.0), pilot=resetting_pilot)
    assert result.resets == 4


def test_without_pilot_reads_input_state():
    sim = Simulation(FlightConfig.for_variant("acro"))
    sim.inputs.key_down("ArrowUp")
    _, frame = run_session(sim, SessionConfig(hz=4, max_time=0.5))
    assert frame.throttle == 0.75


def test_stops_when_visualizer_closes():
    class ClosingViz:
        def __init__(self):
            self.updates = 0

        def update(self, frame):
            self.updates += 1

        def is_open(self):
            return self.updates < 2

    viz = ClosingViz()
    sim = Simulation(FlightConfig.for_variant("acro"))
    result, _ = run_session(sim, SessionConfig(hz=60, max_time=10.0), pilot=_idle_pilot, visualizer=viz)
    assert result.termination_reason == "viz_closed"
    assert viz.updates == 2


def test_logger_writes_replayable_json(tmp_path):
    logger = TickLogger(tmp_path / "logs")
    sim = Simulation(FlightConfig.for_variant("hover"), rng=np.random.default_rng(0))
    run_session(sim, SessionConfig(hz=4, max_time=1.0), pilot=_idle_pilot, logger=logger)

    path = logger.save("run.json")
    data = json.loads(path.read_text())

    assert data["tick_count"] == 4
    assert data["config"]["flight"]["goal"] == "target"
    assert data["config"]["session"]["hz"] == 4
    first = data["ticks"][0]
    assert first["tick"] == 1
    assert first["pilot"] == "IDLE"
    assert first["controls"] == []
    assert set(first["state"]) >= {"x", "y", "z", "pitch", "yaw", "roll", "throttle"}
    assert first["target"]["kind"] == "target"


def test_logger_without_directory_does_not_write():
    logger = TickLogger()
    assert logger.save("run.json") is None
