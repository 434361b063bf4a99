"""
Closed-form solutions of the 1D diffusion equation for the three cases.

- Case 1 (constant surface source, semi-infinite body):
  ``C/C0 = erfc(x / (2 sqrt(Dt)))``
- Case 2 (planar source, infinite medium):
  ``p(x) = exp(-x^2 / 4Dt) / (2 sqrt(pi Dt))``
- Case 3 (thin film on a semi-infinite body, reflecting wall):
  ``p(x) = exp(-x^2 / 4Dt) / sqrt(pi Dt)``

Cases 2 and 3 are probability densities so they compare directly with a
histogram normalised by ``N * bin_width``.
"""

from __future__ import annotations

import math

import numpy as np

from .cases import CaseConfig

# Abramowitz & Stegun 7.1.26, |error| <= 1.5e-7
ERFC_P = 0.3275911
ERFC_A1 = 0.254829592
ERFC_A2 = -0.284496736
ERFC_A3 = 1.421413741
ERFC_A4 = -1.453152027
ERFC_A5 = 1.061405429

DT_EPSILON = 1e-9
SOURCE_DELTA_HALF_WIDTH = 0.01
DEFAULT_CURVE_POINTS = 201


def _scalar_or_array(values: np.ndarray, like):
    if np.ndim(like) == 0:
        return float(values)
    return values


def erfc(x):
    """
    Complementary error function via Abramowitz & Stegun 7.1.26.

    Accepts scalars or arrays. Negative arguments use ``erfc(-x) = 2 - erfc(x)``.
    """
    xa = np.asarray(x, dtype=np.float64)
    ax = np.abs(xa)
    t = 1.0 / (1.0 + ERFC_P * ax)
    poly = t * (ERFC_A1 + t * (ERFC_A2 + t * (ERFC_A3 + t * (ERFC_A4 + t * ERFC_A5))))
    r = poly * np.exp(-ax * ax)
    out = np.where(xa >= 0.0, r, 2.0 - r)
    return _scalar_or_array(out, x)


def diffusion_coefficient(jump_frequency: float, jump_length: float) -> float:
    """Einstein relation for a 3D isotropic walk: ``D = Γλ²/6``."""
    return jump_frequency * jump_length * jump_length / 6.0


def diffusion_length(D: float, elapsed: float) -> float:
    """Characteristic 1D spread ``sqrt(2Dt)``; zero before the walk starts."""
    if elapsed <= 0.0 or D <= 0.0:
        return 0.0
    return math.sqrt(2.0 * D * elapsed)


def analytical_at(x, elapsed: float, case, D: float):
    """
    Evaluate the exact profile of ``case`` at position(s) ``x`` and time ``elapsed``.

    While ``D·t`` is below :data:`DT_EPSILON` the spread is undefined and the
    profile is approximated as a delta: case 1 is 1 within
    :data:`SOURCE_DELTA_HALF_WIDTH` of the source and 0 elsewhere; cases 2
    and 3 are 0.
    """
    case = CaseConfig.from_value(case)
    xa = np.asarray(x, dtype=np.float64)
    Dt = D * elapsed

    if Dt < DT_EPSILON:
        if case is CaseConfig.SEMI_INFINITE_SOURCE:
            out = np.where(np.abs(xa) < SOURCE_DELTA_HALF_WIDTH, 1.0, 0.0)
        else:
            out = np.zeros_like(xa)
        return _scalar_or_array(out, x)

    if case is CaseConfig.SEMI_INFINITE_SOURCE:
        return _scalar_or_array(erfc(xa / (2.0 * math.sqrt(Dt))), x)

    gauss = np.exp(-(xa * xa) / (4.0 * Dt))
    if case is CaseConfig.PLANAR_SOURCE_INFINITE:
        prefactor = 1.0 / (2.0 * math.sqrt(math.pi * Dt))
    else:
        prefactor = 1.0 / math.sqrt(math.pi * Dt)
    return _scalar_or_array(prefactor * gauss, x)


def analytical_curve(
    case,
    elapsed: float,
    D: float,
    x_lo: float,
    x_hi: float,
    num_points: int = DEFAULT_CURVE_POINTS,
):
    """Sample the analytical profile on ``num_points`` evenly spaced x values."""
    xs = np.linspace(x_lo, x_hi, num_points)
    return xs, analytical_at(xs, elapsed, case, D)


__all__ = [
    "DT_EPSILON",
    "erfc",
    "diffusion_coefficient",
    "diffusion_length",
    "analytical_at",
    "analytical_curve",
]
