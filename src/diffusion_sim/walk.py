"""
Random-walk stepper.

Each active particle jumps with probability ``Γ·sub_dt`` per sub-step
(Bernoulli approximation of a Poisson jump process). A jump has fixed length
``λ`` and a direction drawn uniformly on the unit sphere by Archimedes'
method (``cosθ`` uniform on ``[-1, 1]``, ``φ`` uniform on ``[0, 2π)``), which
gives isotropic 3D diffusion with ``D = Γλ²/6``.

Sub-stepping keeps ``Γ·sub_dt ≤ 1`` for the interval handed to ``advance``,
so a long frame does not silently drop jumps.
"""

from __future__ import annotations

import math

import numpy as np
from numba import njit

from .boundary import BoundaryPolicy, apply_boundary
from .cases import DomainBounds
from .particles import ParticleSet
from .rng import RandomSource

TWO_PI = 2.0 * math.pi


def substep_count(jump_frequency: float, dt: float) -> int:
    """``max(1, ceil(Γ·dt))``."""
    return max(1, int(math.ceil(jump_frequency * dt)))


@njit(cache=True)
def _apply_jumps(
    positions: np.ndarray,
    jumpers: np.ndarray,
    cos_theta: np.ndarray,
    phi: np.ndarray,
    jump_length: float,
    policy_code: int,
    x_min: float,
    x_max: float,
    width: float,
) -> None:
    """Displace the selected slots in place and enforce the boundaries."""
    for k in range(jumpers.shape[0]):
        i = jumpers[k]
        ct = cos_theta[k]
        st = math.sqrt(max(0.0, 1.0 - ct * ct))
        x = positions[0, i] + jump_length * st * math.cos(phi[k])
        y = positions[1, i] + jump_length * st * math.sin(phi[k])
        z = positions[2, i] + jump_length * ct
        x, y, z = apply_boundary(policy_code, x, y, z, x_min, x_max, width)
        positions[0, i] = x
        positions[1, i] = y
        positions[2, i] = z


class RandomWalkStepper:
    """
    Advances a :class:`ParticleSet` over a time interval.

    The stepper never owns the clock; the caller adds ``dt`` to its elapsed
    time after ``advance`` returns. All random numbers of a sub-step are drawn
    before any particle moves.
    """

    def __init__(self, random_source: RandomSource) -> None:
        self.random_source = random_source

    def advance(
        self,
        particles: ParticleSet,
        dt: float,
        jump_frequency: float,
        jump_length: float,
        policy: BoundaryPolicy,
        bounds: DomainBounds,
    ) -> int:
        """
        Move every active particle through ``dt`` seconds of walk.

        Returns:
            Number of sub-steps taken (0 when ``dt <= 0``).
        """
        if dt <= 0.0:
            return 0
        n = particles.active_count()
        sub_steps = substep_count(jump_frequency, dt)
        if n == 0 or jump_frequency <= 0.0:
            return sub_steps

        p_jump = jump_frequency * (dt / sub_steps)
        rs = self.random_source
        for _ in range(sub_steps):
            u = rs.uniform(0.0, 1.0, n)
            jumpers = np.flatnonzero(u < p_jump)
            if jumpers.size == 0:
                continue
            cos_theta = rs.uniform(-1.0, 1.0, jumpers.size)
            phi = rs.uniform(0.0, TWO_PI, jumpers.size)
            _apply_jumps(
                particles.positions,
                jumpers,
                cos_theta,
                phi,
                float(jump_length),
                policy.code,
                float(bounds.x_min),
                float(bounds.x_max),
                float(bounds.width),
            )
        return sub_steps


__all__ = ["RandomWalkStepper", "substep_count"]
