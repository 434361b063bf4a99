from __future__ import annotations

from typing import Tuple

import numpy as np

from .cases import MAX_ATOMS
from .errors import CapacityExceeded, InvalidParameter, ParticleIndexError
from .rng import RandomSource


class ParticleSet:
    """
    Fixed-capacity particle buffer.

    Positions live in one structure-of-arrays block of shape ``(3, capacity)``
    (rows x, y, z) that is allocated once and reused across resets. Only the
    first ``active_count()`` slots are live; the rest are inert and ignored
    by every query.
    """

    def __init__(self, capacity: int = MAX_ATOMS) -> None:
        if capacity <= 0:
            raise InvalidParameter(f"capacity must be positive, got {capacity}")
        self.capacity = int(capacity)
        self.positions = np.zeros((3, self.capacity), dtype=np.float64)
        self._active = 0

    def __len__(self) -> int:
        return self._active

    def active_count(self) -> int:
        return self._active

    def activate(self, count: int) -> Tuple[int, int]:
        """Make ``count`` more slots live and return their ``(start, stop)`` range."""
        if count < 0:
            raise InvalidParameter(f"cannot activate a negative count ({count})")
        if self._active + count > self.capacity:
            raise CapacityExceeded(
                f"activating {count} particles would exceed capacity "
                f"({self._active} + {count} > {self.capacity})"
            )
        start = self._active
        self._active += count
        return start, self._active

    def deactivate(self, count: int) -> None:
        if count < 0 or count > self._active:
            raise InvalidParameter(
                f"cannot deactivate {count} of {self._active} active particles"
            )
        self._active -= count

    def _check_index(self, i: int) -> None:
        if not 0 <= i < self._active:
            raise ParticleIndexError(
                f"particle index {i} outside active range [0, {self._active})"
            )

    def position_at(self, i: int) -> Tuple[float, float, float]:
        self._check_index(i)
        x, y, z = self.positions[:, i]
        return float(x), float(y), float(z)

    def set_position_at(self, i: int, x: float, y: float, z: float) -> None:
        self._check_index(i)
        self.positions[0, i] = x
        self.positions[1, i] = y
        self.positions[2, i] = z

    def place_at_source(
        self,
        start: int,
        stop: int,
        x0: float,
        width: float,
        random_source: RandomSource,
    ) -> None:
        """Put slots ``[start, stop)`` on the plane ``x = x0`` with uniform y/z spread."""
        if not 0 <= start <= stop <= self._active:
            raise ParticleIndexError(
                f"slot range [{start}, {stop}) outside active range [0, {self._active})"
            )
        n = stop - start
        half = 0.5 * width
        self.positions[0, start:stop] = x0
        self.positions[1, start:stop] = random_source.uniform(-half, half, n)
        self.positions[2, start:stop] = random_source.uniform(-half, half, n)

    def x_coords(self) -> np.ndarray:
        """View of the active x coordinates."""
        return self.positions[0, : self._active]

    def active_positions(self) -> np.ndarray:
        """Copy of active positions as an ``(n, 3)`` array."""
        return self.positions[:, : self._active].T.copy()


__all__ = ["ParticleSet"]
