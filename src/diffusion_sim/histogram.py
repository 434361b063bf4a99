from __future__ import annotations

import math

import numpy as np
from numba import njit

from .cases import NUM_BINS, CaseConfig
from .particles import ParticleSet


@njit(cache=True)
def _bin_counts(xs: np.ndarray, lo: float, hi: float, counts: np.ndarray) -> None:
    """
    Increment ``counts`` for every x in ``[lo, hi)``.

    Values outside the window are skipped, never clipped into the edge bins.
    """
    num_bins = counts.shape[0]
    bin_width = (hi - lo) / num_bins
    for i in range(xs.shape[0]):
        x = xs[i]
        if x < lo or x >= hi:
            continue
        b = int(math.floor((x - lo) / bin_width))
        if b > num_bins - 1:
            b = num_bins - 1
        counts[b] += 1


def bin_positions(xs: np.ndarray, lo: float, hi: float, num_bins: int = NUM_BINS) -> np.ndarray:
    counts = np.zeros(num_bins, dtype=np.int64)
    _bin_counts(np.ascontiguousarray(xs, dtype=np.float64), float(lo), float(hi), counts)
    return counts


def bin_centers(lo: float, hi: float, num_bins: int = NUM_BINS) -> np.ndarray:
    edges = np.linspace(lo, hi, num_bins + 1)
    return 0.5 * (edges[:-1] + edges[1:])


def count_within(xs: np.ndarray, lo: float, hi: float) -> int:
    """Closed-interval count ``lo <= x <= hi``."""
    return int(np.count_nonzero((xs >= lo) & (xs <= hi)))


def normalize_counts(
    counts: np.ndarray, case, active_count: int, bin_width: float
) -> np.ndarray:
    """
    Turn raw bin counts into the curve plotted against the analytical solution.

    Case 1 is relative to the source bin (C/C0, an empty source bin counts as
    1). Cases 2 and 3 become a probability density ``counts / (N * bin_width)``;
    with no particles the density is all zeros.
    """
    case = CaseConfig.from_value(case)
    counts = np.asarray(counts, dtype=np.float64)
    if case is CaseConfig.SEMI_INFINITE_SOURCE:
        reference = counts[0] if counts.size and counts[0] > 0 else 1.0
        return counts / reference
    denom = active_count * bin_width
    if denom <= 0.0:
        return np.zeros_like(counts)
    return counts / denom


class HistogramAggregator:
    """Bins the active x coordinates of a :class:`ParticleSet` over the visible window."""

    def __init__(self, num_bins: int = NUM_BINS) -> None:
        self.num_bins = int(num_bins)

    def bin_width(self, case) -> float:
        case = CaseConfig.from_value(case)
        return (case.visible_max - case.visible_min) / self.num_bins

    def centers(self, case) -> np.ndarray:
        case = CaseConfig.from_value(case)
        return bin_centers(case.visible_min, case.visible_max, self.num_bins)

    def counts(self, particles: ParticleSet, case) -> np.ndarray:
        case = CaseConfig.from_value(case)
        return bin_positions(
            particles.x_coords(), case.visible_min, case.visible_max, self.num_bins
        )

    def normalized(self, particles: ParticleSet, case) -> np.ndarray:
        return normalize_counts(
            self.counts(particles, case),
            case,
            particles.active_count(),
            self.bin_width(case),
        )

    def count_in_view(self, particles: ParticleSet, case) -> int:
        case = CaseConfig.from_value(case)
        return count_within(particles.x_coords(), case.visible_min, case.visible_max)


__all__ = [
    "HistogramAggregator",
    "bin_positions",
    "bin_centers",
    "count_within",
    "normalize_counts",
]
