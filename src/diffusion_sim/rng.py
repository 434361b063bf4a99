from __future__ import annotations

from typing import Optional, Protocol

import numpy as np


class RandomSource(Protocol):
    """Anything that hands out uniform samples on ``[low, high)``."""

    def uniform(self, low: float, high: float, size: int) -> np.ndarray:
        ...


class NumpyRandomSource:
    """
    RandomSource backed by a :class:`numpy.random.Generator`.

    A fixed ``seed`` replays the same sequence; ``None`` draws fresh entropy
    from the OS.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def uniform(self, low: float, high: float, size: int) -> np.ndarray:
        return self._rng.uniform(low, high, size)


def make_random_source(seed: Optional[int] = None) -> NumpyRandomSource:
    return NumpyRandomSource(seed)


__all__ = ["RandomSource", "NumpyRandomSource", "make_random_source"]
