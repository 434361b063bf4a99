"""Custom exceptions for the :mod:`diffusion_sim` package."""
from __future__ import annotations


class DiffusionSimError(Exception):
    """Base exception for diffusion simulation errors."""


class InvalidCase(DiffusionSimError, ValueError):
    """Requested boundary-condition case is not one of 1, 2 or 3."""


class CapacityExceeded(DiffusionSimError, ValueError):
    """More particles requested than the pre-allocated buffer holds."""


class InvalidParameter(DiffusionSimError, ValueError):
    """Walk parameter, speed or count outside its admissible range."""


class ParticleIndexError(DiffusionSimError, IndexError):
    """Slot index outside the active particle range."""


__all__ = [
    "DiffusionSimError",
    "InvalidCase",
    "CapacityExceeded",
    "InvalidParameter",
    "ParticleIndexError",
]
