"""
Boundary handling after a random-walk jump.

x follows a case-specific rule (clamp or reflecting wall); y and z wrap
periodically over the transverse width ``W`` so a finite particle count
stands in for an unbounded lateral medium.

The scalar rules are compiled with numba so the stepping kernel in
:mod:`diffusion_sim.walk` can call them per particle; the policy classes
wrap the same kernels behind a uniform ``apply(position, bounds)`` interface.
"""

from __future__ import annotations

import math
from typing import Dict, Tuple

from numba import njit

from .cases import CaseConfig, DomainBounds

###############################################################################
# Policy codes (dispatched inside compiled kernels)
###############################################################################

SOURCE_CLAMP = 0
FAR_FIELD_CLAMP = 1
REFLECTING_WALL = 2


@njit(cache=True)
def clamp_x(x: float, x_min: float, x_max: float) -> float:
    if x < x_min:
        x = x_min
    if x > x_max:
        x = x_max
    return x


@njit(cache=True)
def reflect_x(x: float, x_min: float, x_max: float) -> float:
    """Mirror across the wall at ``x_min``, then clamp the far end."""
    if x < x_min:
        x = 2.0 * x_min - x
    if x > x_max:
        x = x_max
    return x


@njit(cache=True)
def wrap_periodic(v: float, width: float) -> float:
    """
    Fold ``v`` into ``[-width/2, width/2]`` by whole multiples of ``width``.

    Values already inside (both ends included) are returned unchanged, and
    non-finite values are passed through rather than folded.
    """
    half = 0.5 * width
    if not math.isfinite(v) or (v >= -half and v <= half):
        return v
    return ((v + half) % width) - half


@njit(cache=True)
def apply_boundary(
    policy_code: int,
    x: float,
    y: float,
    z: float,
    x_min: float,
    x_max: float,
    width: float,
) -> Tuple[float, float, float]:
    if policy_code == REFLECTING_WALL:
        x = reflect_x(x, x_min, x_max)
    else:
        x = clamp_x(x, x_min, x_max)
    return x, wrap_periodic(y, width), wrap_periodic(z, width)


###############################################################################
# Policy classes
###############################################################################


class BoundaryPolicy:
    """Uniform interface over the compiled boundary kernels."""

    code: int = -1
    description: str = ""

    def apply(
        self, position: Tuple[float, float, float], bounds: DomainBounds
    ) -> Tuple[float, float, float]:
        x, y, z = position
        return apply_boundary(
            self.code,
            float(x),
            float(y),
            float(z),
            float(bounds.x_min),
            float(bounds.x_max),
            float(bounds.width),
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.description!r})"


class SourceClampPolicy(BoundaryPolicy):
    """Constant-concentration reservoir at x = 0: walkers never leave it."""

    code = SOURCE_CLAMP
    description = "clamp at the source plane and the far domain edge"


class FarFieldClampPolicy(BoundaryPolicy):
    """Hard clamp at both domain edges, far outside the visible window."""

    code = FAR_FIELD_CLAMP
    description = "clamp at both far domain edges"


class ReflectingWallPolicy(BoundaryPolicy):
    """No-flux wall at x = 0; all mass stays on the positive side."""

    code = REFLECTING_WALL
    description = "reflect at the wall, clamp at the far domain edge"


_POLICIES: Dict[CaseConfig, BoundaryPolicy] = {
    CaseConfig.SEMI_INFINITE_SOURCE: SourceClampPolicy(),
    CaseConfig.PLANAR_SOURCE_INFINITE: FarFieldClampPolicy(),
    CaseConfig.THIN_FILM_SEMI_INFINITE: ReflectingWallPolicy(),
}


def policy_for_case(case) -> BoundaryPolicy:
    return _POLICIES[CaseConfig.from_value(case)]


__all__ = [
    "SOURCE_CLAMP",
    "FAR_FIELD_CLAMP",
    "REFLECTING_WALL",
    "clamp_x",
    "reflect_x",
    "wrap_periodic",
    "apply_boundary",
    "BoundaryPolicy",
    "SourceClampPolicy",
    "FarFieldClampPolicy",
    "ReflectingWallPolicy",
    "policy_for_case",
]
