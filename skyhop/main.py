"""
SkyHop - FPV Drone Flight Simulator

Acro-mode flight over an open field or through a procedurally placed city,
chasing targets or gates. Flown by the autopilot or, with --manual and
--viz, from the keyboard (W/S pitch, A/D roll, arrows yaw and throttle,
R reset).
"""

from pathlib import Path
from datetime import datetime
import argparse
import logging

import numpy as np

from controls import MPL_KEYMAP, InputState
from flight import VARIANTS, FlightConfig, SessionConfig, Simulation, TickLogger, generate_city, run_session
from pilot import Autopilot, PilotConfig


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="SkyHop FPV flight simulator")
    parser.add_argument("--variant", choices=sorted(VARIANTS), default="targets")
    parser.add_argument("--seed", type=int, default=None, help="World and target seed")
    parser.add_argument("--hz", type=int, default=60)
    parser.add_argument("--max-time", type=float, default=60.0)
    parser.add_argument("--max-captures", type=int, default=None)
    parser.add_argument("--viz", action="store_true", help="Open the 3D matplotlib view")
    parser.add_argument("--manual", action="store_true", help="Fly from the keyboard (needs --viz)")
    parser.add_argument("--realtime", action="store_true", help="Pace ticks to wall clock")
    parser.add_argument("--log-dir", type=Path, default=None, help="Write a JSON tick log here")
    parser.add_argument("--verbose", "-v", action="store_true")
    args = parser.parse_args(argv)
    if args.manual and not args.viz:
        parser.error("--manual needs --viz, the keyboard is read from the 3D view")
    return args


def main(argv=None) -> bool:
    """Run one session and print the results."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("=" * 50)
    print(f"SKYHOP - {args.variant.upper()}")
    print("=" * 50)

    config = FlightConfig.for_variant(args.variant)
    session = SessionConfig(hz=args.hz, max_time=args.max_time, max_captures=args.max_captures)

    rng = np.random.default_rng(args.seed)
    obstacles = generate_city(rng, config)

    inputs = InputState(MPL_KEYMAP)
    simulation = Simulation(config, obstacles, rng=rng, inputs=inputs)

    pilot = None
    if not args.manual:
        pilot = Autopilot(PilotConfig(hover_throttle=config.gravity / config.thrust_max))

    viz = None
    if args.viz:
        from flight.viz import FlightVisualizer

        viz = FlightVisualizer(obstacles, inputs=inputs if args.manual else None, title=f"SkyHop - {args.variant}")

    logger = TickLogger(args.log_dir) if args.log_dir else None

    print(f"\nConfig:")
    print(f"  Hz: {session.hz}")
    print(f"  Max time: {session.max_time}s")
    print(f"  Obstacles: {len(obstacles)}")
    print(f"  Goal: {config.goal or 'none'}")
    print(f"  Pilot: {'keyboard' if args.manual else 'autopilot'}")

    print("\nRunning simulation...")
    print("-" * 50)

    result, frame = run_session(
        simulation,
        session,
        pilot=pilot,
        logger=logger,
        visualizer=viz,
        realtime=args.realtime or args.manual,
    )

    # Print results
    print("\n" + "=" * 50)
    print("RESULTS")
    print("=" * 50)
    print(f"  Time: {result.time_elapsed:.2f}s")
    print(f"  Captures: {result.captures}")
    print(f"  Crashes: {result.crashes}")
    print(f"  Resets: {result.resets}")
    print(f"  Touchdowns: {result.touchdowns}")
    print(f"  Termination: {result.termination_reason}")
    x, y, z = frame.position
    print(f"\nFinal position: ({x:.1f}, {z:.1f}, alt={y:.1f})")

    # Save log
    if logger:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_path = logger.save(f"run_{args.variant}_{timestamp}.json")
        if log_path:
            print(f"\nLog saved: {log_path}")

    if viz:
        viz.close()

    return result.crashes == 0


def cli(argv=None) -> int:
    """Console entry point: exit status 0 when the session ended without crashes."""
    return 0 if main(argv) else 1


if __name__ == "__main__":
    exit(cli())
