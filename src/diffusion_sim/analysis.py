"""
Post-run analysis of diffusion profiles.

The 1D projection of an isotropic 3D walk spreads as ``<x^2> = 2 D t``, so a
straight-line fit of the mean squared displacement against time recovers
``D`` and can be checked against the Einstein relation ``Γλ²/6``.
"""
from __future__ import annotations

from typing import Tuple

import numpy as np
from scipy.stats import linregress


def mean_squared_displacement(x_coords: np.ndarray, source_plane: float = 0.0) -> float:
    """Mean of ``(x - source_plane)^2`` over the given coordinates."""
    dx = np.asarray(x_coords, dtype=np.float64) - source_plane
    if dx.size == 0:
        return 0.0
    return float(np.mean(dx * dx))


def estimate_diffusion_coefficient(
    times: np.ndarray, msd: np.ndarray
) -> Tuple[float, float, float]:
    """
    Fit ``msd = 2 D t + c`` by linear regression.

    Args:
        times: Sample times (s)
        msd: Mean squared x-displacement at those times (µm²)

    Returns:
        Tuple of (D_estimate, r_squared, intercept)

    Raises:
        ValueError: If fewer than three samples are available
    """
    t = np.asarray(times, dtype=np.float64)
    m = np.asarray(msd, dtype=np.float64)
    if t.shape != m.shape:
        raise ValueError(f"times and msd shapes differ: {t.shape} vs {m.shape}")
    mask = np.isfinite(t) & np.isfinite(m)
    t = t[mask]
    m = m[mask]
    if t.size < 3:
        raise ValueError("Too few samples for a diffusion-coefficient fit (need at least 3).")

    slope, intercept, r_value, p_value, std_err = linregress(t, m)
    return slope / 2.0, r_value**2, intercept


def profile_deviation(normalized: np.ndarray, analytical: np.ndarray) -> float:
    """Mean absolute deviation between an empirical and an analytical profile."""
    a = np.asarray(normalized, dtype=np.float64)
    b = np.asarray(analytical, dtype=np.float64)
    if a.shape != b.shape:
        raise ValueError(f"profile shapes differ: {a.shape} vs {b.shape}")
    if a.size == 0:
        return 0.0
    return float(np.mean(np.abs(a - b)))
