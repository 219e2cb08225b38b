"""
Ground-truth trajectory generation for CTRV tracking scenarios.

The object moves at constant speed while its yaw rate follows

    ψ̇(t) = ψ̇₀ + A · sin(2π t / T)

which produces curves, straight segments and turn reversals in one run
while staying close to the CTRV assumption between measurements. The
state is integrated exactly per step with the CTRV equations.

Author: Scientific Computing Team
License: MIT
"""

import numpy as np
from typing import Optional, List
from dataclasses import dataclass

from ..fusion.motion import YAW_RATE_THRESHOLD

MICROSECONDS_PER_SECOND = 1_000_000


@dataclass
class TrajectoryParameters:
    """Physical parameters for trajectory generation with validation."""

    initial_position: tuple = (0.6, 0.6)   # Start position [m]
    speed: float = 5.0                     # Constant speed [m/s]
    initial_heading: float = 0.0           # Heading at t=0 [rad]
    yaw_rate: float = 0.0                  # Mean yaw rate [rad/s]
    yaw_rate_amplitude: float = 0.55       # Sinusoidal yaw-rate amplitude [rad/s]
    yaw_rate_period: float = 20.0          # Yaw-rate oscillation period [s]
    duration: float = 25.0                 # Trajectory length [s]
    step_us: int = 50_000                  # Time between samples [µs]

    def __post_init__(self):
        """Validate trajectory parameters against physical constraints."""
        if len(self.initial_position) != 2:
            raise ValueError("Initial position must have 2 elements (px, py)")
        if self.speed < 0:
            raise ValueError(f"Speed must be non-negative, got {self.speed}")
        if self.yaw_rate_period <= 0:
            raise ValueError(f"Yaw-rate period must be positive, got {self.yaw_rate_period}")
        if self.duration <= 0:
            raise ValueError(f"Duration must be positive, got {self.duration}")
        if self.step_us <= 0:
            raise ValueError(f"Step must be positive, got {self.step_us}")


class TrajectoryGenerator:
    """
    Generates true CTRV states [px, py, v, ψ, ψ̇] at fixed time steps.

    Attributes:
        params (TrajectoryParameters): Trajectory parameters
    """

    def __init__(self, params: Optional[TrajectoryParameters] = None):
        self.params = params if params is not None else TrajectoryParameters()

    def yaw_rate_at(self, t: float) -> float:
        """Yaw rate ψ̇(t) in rad/s at time t seconds."""
        p = self.params
        return p.yaw_rate + p.yaw_rate_amplitude * np.sin(2 * np.pi * t / p.yaw_rate_period)

    def timestamps(self, start_us: int = 0) -> np.ndarray:
        """Sample timestamps in microseconds, from start_us over the duration."""
        duration_us = int(round(self.params.duration * MICROSECONDS_PER_SECOND))
        return np.arange(start_us, start_us + duration_us + 1, self.params.step_us, dtype=np.int64)

    @staticmethod
    def step(state: np.ndarray, dt: float) -> np.ndarray:
        """
        Advance a true state by dt seconds with the noise-free CTRV equations.

        Args:
            state: [px, py, v, yaw, yawd]
            dt: Time step in seconds

        Returns:
            New state array
        """
        px, py, v, yaw, yawd = state
        if abs(yawd) > YAW_RATE_THRESHOLD:
            px += v / yawd * (np.sin(yaw + yawd * dt) - np.sin(yaw))
            py += v / yawd * (np.cos(yaw) - np.cos(yaw + yawd * dt))
        else:
            px += v * dt * np.cos(yaw)
            py += v * dt * np.sin(yaw)
        return np.array([px, py, v, yaw + yawd * dt, yawd])

    def generate(self, start_us: int = 0) -> List[tuple]:
        """
        Generate the full trajectory.

        Returns:
            List of (timestamp_us, state) tuples, one per step
        """
        p = self.params
        times = self.timestamps(start_us)
        state = np.array([p.initial_position[0], p.initial_position[1],
                          p.speed, p.initial_heading, self.yaw_rate_at(0.0)])

        trajectory = [(int(times[0]), state.copy())]
        for previous, current in zip(times[:-1], times[1:]):
            dt = (current - previous) / MICROSECONDS_PER_SECOND
            state = self.step(state, dt)
            # Turn rate is piecewise constant, re-sampled at the end of each step
            state[4] = self.yaw_rate_at((current - start_us) / MICROSECONDS_PER_SECOND)
            trajectory.append((int(current), state.copy()))
        return trajectory


def ground_truth_vector(state: np.ndarray) -> np.ndarray:
    """
    Map a CTRV state to the recorded ground-truth layout.

    Returns:
        [px, py, vx, vy]
    """
    px, py, v, yaw = state[:4]
    return np.array([px, py, v * np.cos(yaw), v * np.sin(yaw)])
