#!/usr/bin/env python3
"""
Lidar/radar tracking with an Unscented Kalman Filter.

Runs the filter over a recorded measurement file, or over a simulated
interleaved lidar/radar scenario when no file is given, and reports RMSE
and NIS consistency.

Run with: ukf-tracking [--input data.txt] [--plot run.png]
"""

import argparse
import logging
import sys

import numpy as np

from .config import UKFConfig
from .errors import UKFError
from .evaluation import nis_bound, nis_consistency, run_filter
from .fusion.ukf import UnscentedKalmanFilter
from .sensors.measurement import SensorType
from .sensors.reader import read_measurements, write_measurements
from .simulation.scenario import generate_scenario
from .simulation.trajectory import TrajectoryParameters

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='CTRV Unscented Kalman Filter with lidar/radar fusion')
    parser.add_argument('--input', '-i', help='Measurement file (simulates a scenario if omitted)')
    parser.add_argument('--no-lidar', action='store_true', help='Skip lidar updates')
    parser.add_argument('--no-radar', action='store_true', help='Skip radar updates')
    parser.add_argument('--std-a', type=float, default=3.0,
                        help='Longitudinal acceleration noise std [m/s^2]')
    parser.add_argument('--std-yawdd', type=float, default=1.0,
                        help='Yaw acceleration noise std [rad/s^2]')
    parser.add_argument('--seed', type=int, default=None, help='Random seed for simulation')
    parser.add_argument('--duration', type=float, default=25.0, help='Simulated duration [s]')
    parser.add_argument('--plot', help='Save a plot of the run to this file')
    parser.add_argument('--dump', help='Write the processed measurements to this file')
    parser.add_argument('--log-level', default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'], help='Logging verbosity')
    return parser


def print_report(result) -> None:
    """Print RMSE and NIS consistency of a run."""
    print("=== UKF tracking results ===")
    print(f"Measurements processed: {len(result.timestamps)}")
    if result.rmse is not None:
        px, py, vx, vy = result.rmse
        print(f"RMSE  px={px:.4f}  py={py:.4f}  vx={vx:.4f}  vy={vy:.4f}")
    else:
        print("RMSE  n/a (no ground truth)")

    for sensor in SensorType:
        values = result.nis.get(sensor, np.array([]))
        if len(values) == 0:
            continue
        bound = nis_bound(sensor.measurement_size)
        fraction = nis_consistency(values, sensor.measurement_size)
        print(f"{sensor.name:5s} NIS: {len(values)} updates, {fraction:.1%} below {bound:.3f}")


def main(argv=None) -> int:
    """Command-line entry point; returns the process exit code."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format='%(asctime)s %(name)s %(levelname)s: %(message)s')

    try:
        config = UKFConfig(std_a=args.std_a, std_yawdd=args.std_yawdd,
                           use_lidar=not args.no_lidar, use_radar=not args.no_radar)
        if args.input:
            records = read_measurements(args.input)
        else:
            records = generate_scenario(TrajectoryParameters(duration=args.duration), seed=args.seed)
    except (OSError, ValueError) as exc:
        logger.error(f"Cannot prepare run: {exc}")
        return 2

    if args.dump:
        try:
            write_measurements(records, args.dump)
        except OSError as exc:
            logger.error(f"Cannot write measurements: {exc}")
            return 2

    try:
        result = run_filter(records, UnscentedKalmanFilter(config))
    except UKFError as exc:
        logger.error(f"Filter stopped: {exc}")
        return 1
    except ValueError as exc:
        logger.error(f"Cannot run filter: {exc}")
        return 2

    print_report(result)

    if args.plot:
        try:
            from .visualization.plotter import plot_run
            plot_run(result, args.plot)
        except ImportError as exc:
            logger.error(f"Plotting requires matplotlib: {exc}")
            return 2
        except OSError as exc:
            logger.error(f"Cannot save plot: {exc}")
            return 2

    return 0


if __name__ == '__main__':
    sys.exit(main())
