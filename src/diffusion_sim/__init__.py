"""
Diffusion Simulation Library - Random-Walk Core

This package simulates 1D diffusion with many independent particles doing a
discrete-time 3D random walk and compares the particle histogram with the
closed-form solutions for three boundary-condition cases:
- SEMI_INFINITE_SOURCE: constant surface concentration (erfc profile)
- PLANAR_SOURCE_INFINITE: planar source in an infinite medium (Gaussian)
- THIN_FILM_SEMI_INFINITE: thin film on a reflecting wall (half Gaussian)
"""

from .cases import (
    DOMAIN_LENGTH,
    DOMAIN_WIDTH,
    MAX_ATOMS,
    NUM_BINS,
    VISIBLE_LENGTH,
    CaseConfig,
    DomainBounds,
)
from .errors import (
    CapacityExceeded,
    DiffusionSimError,
    InvalidCase,
    InvalidParameter,
    ParticleIndexError,
)
from .rng import NumpyRandomSource, RandomSource
from .particles import ParticleSet
from .boundary import (
    BoundaryPolicy,
    FarFieldClampPolicy,
    ReflectingWallPolicy,
    SourceClampPolicy,
    policy_for_case,
)
from .walk import RandomWalkStepper
from .histogram import HistogramAggregator
from .engine import (
    MAX_FRAME_DT,
    EngineConfig,
    RunParams,
    SimulationClock,
    SimulationEngine,
    WalkParameters,
    run_model,
)
from . import analytical, analysis, utils

__all__ = [
    # Engine
    "SimulationEngine",
    "run_model",
    # Configuration classes
    "EngineConfig",
    "RunParams",
    "WalkParameters",
    "SimulationClock",
    "CaseConfig",
    "DomainBounds",
    # Components
    "ParticleSet",
    "RandomWalkStepper",
    "HistogramAggregator",
    "BoundaryPolicy",
    "SourceClampPolicy",
    "FarFieldClampPolicy",
    "ReflectingWallPolicy",
    "policy_for_case",
    "RandomSource",
    "NumpyRandomSource",
    # Errors
    "DiffusionSimError",
    "InvalidCase",
    "CapacityExceeded",
    "InvalidParameter",
    "ParticleIndexError",
    # Constants
    "VISIBLE_LENGTH",
    "DOMAIN_LENGTH",
    "DOMAIN_WIDTH",
    "NUM_BINS",
    "MAX_ATOMS",
    "MAX_FRAME_DT",
    # Utilities
    "analytical",
    "analysis",
    "utils",
]
