from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from .errors import InvalidCase

###############################################################################
# Constants
###############################################################################

VISIBLE_LENGTH = 10.0  # µm, shown in viewport & plot
DOMAIN_LENGTH = 10.0 * VISIBLE_LENGTH  # µm, full simulation domain
DOMAIN_WIDTH = 4.0  # µm, periodic extent in y and z
NUM_BINS = 40
MAX_ATOMS = 5000
SOURCE_PLANE = 0.0


@dataclass(frozen=True)
class DomainBounds:
    """x-extent of the domain and the periodic width in y/z."""

    x_min: float
    x_max: float
    width: float = DOMAIN_WIDTH


class CaseConfig(IntEnum):
    """Boundary-condition regime. Every bound is derived from the case."""

    SEMI_INFINITE_SOURCE = 1
    PLANAR_SOURCE_INFINITE = 2
    THIN_FILM_SEMI_INFINITE = 3

    @classmethod
    def from_value(cls, value) -> "CaseConfig":
        if isinstance(value, cls):
            return value
        try:
            number = int(value)
            if not isinstance(value, str) and number != value:
                raise ValueError(value)
            return cls(number)
        except (TypeError, ValueError, OverflowError):
            raise InvalidCase(f"Unknown case {value!r}; expected 1, 2 or 3") from None

    @property
    def centered(self) -> bool:
        return self is CaseConfig.PLANAR_SOURCE_INFINITE

    @property
    def domain_min(self) -> float:
        return -DOMAIN_LENGTH / 2 if self.centered else 0.0

    @property
    def domain_max(self) -> float:
        return DOMAIN_LENGTH / 2 if self.centered else DOMAIN_LENGTH

    @property
    def visible_min(self) -> float:
        return -VISIBLE_LENGTH / 2 if self.centered else 0.0

    @property
    def visible_max(self) -> float:
        return VISIBLE_LENGTH / 2 if self.centered else VISIBLE_LENGTH

    @property
    def source_plane(self) -> float:
        return SOURCE_PLANE

    @property
    def title(self) -> str:
        return _CASE_TITLES[self]

    @property
    def analytical_label(self) -> str:
        return "Analytical erfc" if self is CaseConfig.SEMI_INFINITE_SOURCE else "Analytical Gaussian"

    def bounds(self, width: float = DOMAIN_WIDTH) -> DomainBounds:
        return DomainBounds(self.domain_min, self.domain_max, width)


_CASE_TITLES = {
    CaseConfig.SEMI_INFINITE_SOURCE: "Semi-Infinite Diffusion",
    CaseConfig.PLANAR_SOURCE_INFINITE: "Planar Source - Infinite Medium",
    CaseConfig.THIN_FILM_SEMI_INFINITE: "Thin Film - Semi-Infinite Body",
}


__all__ = [
    "VISIBLE_LENGTH",
    "DOMAIN_LENGTH",
    "DOMAIN_WIDTH",
    "NUM_BINS",
    "MAX_ATOMS",
    "SOURCE_PLANE",
    "DomainBounds",
    "CaseConfig",
]
