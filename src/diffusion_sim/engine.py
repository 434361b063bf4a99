"""
Simulation engine: the single object that external collaborators drive.

It owns the particle buffer, the clock, the case selection and the walk
parameters, and composes the stepper, boundary policies, histogram and
analytical solutions. Every derived quantity (D, bounds) is computed on
access from the current state.

Typical use from an animation loop::

    engine = SimulationEngine.from_config({"case": 2, "num_atoms": 3000})
    engine.running = True
    while ...:
        engine.step(min(frame_dt, MAX_FRAME_DT))
        counts = engine.get_histogram()
"""

from __future__ import annotations

import math
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional

import numpy as np

from . import utils
from .analysis import mean_squared_displacement
from .analytical import analytical_at, analytical_curve, diffusion_coefficient, diffusion_length
from .boundary import BoundaryPolicy, policy_for_case
from .cases import DOMAIN_WIDTH, MAX_ATOMS, NUM_BINS, CaseConfig, DomainBounds
from .errors import CapacityExceeded, InvalidParameter
from .histogram import HistogramAggregator
from .particles import ParticleSet
from .rng import RandomSource, make_random_source
from .walk import RandomWalkStepper

###############################################################################
# Constants
###############################################################################

DEFAULT_JUMP_FREQUENCY = 20.0  # Hz
DEFAULT_JUMP_LENGTH = 0.5  # µm
DEFAULT_NUM_ATOMS = 2000
DEFAULT_SPEED = 1.0
MAX_FRAME_DT = 0.05  # s, frame clamp applied by interactive callers


def _require_positive(name: str, value: float) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidParameter(f"{name} must be a number, got {value!r}") from None
    if not math.isfinite(value) or value <= 0.0:
        raise InvalidParameter(f"{name} must be a finite positive number, got {value}")
    return value


def _require_count(name: str, value) -> int:
    try:
        count = int(value)
        if count != value:
            raise ValueError(value)
    except (TypeError, ValueError, OverflowError):
        raise InvalidParameter(f"{name} must be a whole number, got {value!r}") from None
    if count < 0:
        raise InvalidParameter(f"{name} must be non-negative, got {count}")
    return count


@dataclass(frozen=True)
class WalkParameters:
    """Jump frequency Γ (Hz) and jump length λ (µm); both strictly positive."""

    jump_frequency: float = DEFAULT_JUMP_FREQUENCY
    jump_length: float = DEFAULT_JUMP_LENGTH

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "jump_frequency", _require_positive("jump_frequency", self.jump_frequency)
        )
        object.__setattr__(
            self, "jump_length", _require_positive("jump_length", self.jump_length)
        )

    @property
    def diffusion_coefficient(self) -> float:
        return diffusion_coefficient(self.jump_frequency, self.jump_length)


@dataclass
class SimulationClock:
    time: float = 0.0  # s
    running: bool = False
    speed: float = DEFAULT_SPEED

    def advance(self, dt: float) -> None:
        if dt > 0.0:
            self.time += dt

    def reset(self) -> None:
        self.time = 0.0


@dataclass
class EngineConfig:
    case: int = 1
    jump_frequency: float = DEFAULT_JUMP_FREQUENCY
    jump_length: float = DEFAULT_JUMP_LENGTH
    num_atoms: int = DEFAULT_NUM_ATOMS
    speed: float = DEFAULT_SPEED
    capacity: int = MAX_ATOMS
    num_bins: int = NUM_BINS
    seed: Optional[int] = None


class SimulationEngine:
    """
    Random-walk diffusion engine for the three boundary-condition cases.

    ``step`` is synchronous and all-or-nothing; queries (`get_histogram`,
    `analytical_at`, `count_in_view`) never mutate state and are meant to run
    between steps.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        random_source: Optional[RandomSource] = None,
    ) -> None:
        config = config or EngineConfig()
        self.config = config
        self.random_source = random_source or make_random_source(config.seed)

        case = CaseConfig.from_value(config.case)
        params = WalkParameters(config.jump_frequency, config.jump_length)
        speed = _require_positive("speed", config.speed)
        num_atoms = _require_count("num_atoms", config.num_atoms)
        if num_atoms > config.capacity:
            raise CapacityExceeded(f"num_atoms={num_atoms} exceeds capacity {config.capacity}")

        self._case = case
        self.params = params
        self.clock = SimulationClock(speed=speed)
        self.particles = ParticleSet(config.capacity)
        self.stepper = RandomWalkStepper(self.random_source)
        self.histogram = HistogramAggregator(config.num_bins)
        self.width = DOMAIN_WIDTH

        self.particles.activate(num_atoms)
        self.reset()

    @classmethod
    def from_config(
        cls,
        config: EngineConfig | Dict[str, Any] | None = None,
        random_source: Optional[RandomSource] = None,
    ) -> "SimulationEngine":
        if isinstance(config, dict):
            config = EngineConfig(**config)
        return cls(config, random_source)

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def case(self) -> CaseConfig:
        return self._case

    @property
    def case_num(self) -> int:
        return int(self._case)

    @property
    def policy(self) -> BoundaryPolicy:
        return policy_for_case(self._case)

    @property
    def bounds(self) -> DomainBounds:
        return self._case.bounds(self.width)

    @property
    def domain_min(self) -> float:
        return self._case.domain_min

    @property
    def domain_max(self) -> float:
        return self._case.domain_max

    @property
    def visible_min(self) -> float:
        return self._case.visible_min

    @property
    def visible_max(self) -> float:
        return self._case.visible_max

    @property
    def D(self) -> float:
        return self.params.diffusion_coefficient

    @property
    def jump_frequency(self) -> float:
        return self.params.jump_frequency

    @property
    def jump_length(self) -> float:
        return self.params.jump_length

    @property
    def num_atoms(self) -> int:
        return self.particles.active_count()

    @property
    def time(self) -> float:
        return self.clock.time

    @property
    def speed(self) -> float:
        return self.clock.speed

    @property
    def running(self) -> bool:
        return self.clock.running

    @running.setter
    def running(self, value: bool) -> None:
        self.clock.running = bool(value)

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Put every active particle back on the source plane and zero the clock."""
        self.clock.reset()
        self.particles.place_at_source(
            0,
            self.particles.active_count(),
            self._case.source_plane,
            self.width,
            self.random_source,
        )

    def set_case(self, n) -> None:
        """Switch geometry, pause, and reset. Raises InvalidCase with state untouched."""
        case = CaseConfig.from_value(n)
        self._case = case
        self.clock.running = False
        self.reset()

    def set_parameters(
        self,
        jump_frequency: float,
        jump_length: float,
        speed: Optional[float] = None,
    ) -> None:
        params = WalkParameters(jump_frequency, jump_length)
        new_speed = self.clock.speed if speed is None else _require_positive("speed", speed)
        self.params = params
        self.clock.speed = new_speed

    def set_particle_count(self, n: int) -> None:
        """
        Grow or shrink the active population.

        New slots start on the source plane; removed slots are simply
        deactivated.
        """
        n = _require_count("particle count", n)
        if n > self.particles.capacity:
            raise CapacityExceeded(
                f"particle count {n} exceeds capacity {self.particles.capacity}"
            )
        old = self.particles.active_count()
        if n > old:
            start, stop = self.particles.activate(n - old)
            self.particles.place_at_source(
                start, stop, self._case.source_plane, self.width, self.random_source
            )
        elif n < old:
            self.particles.deactivate(old - n)

    def toggle_running(self) -> bool:
        self.clock.running = not self.clock.running
        return self.clock.running

    def step(self, dt: float) -> int:
        """
        Advance the walk by ``dt * speed`` seconds of simulated time.

        No-op while paused or for ``dt <= 0``. ``dt`` is expected to be
        clamped by the caller (see :data:`MAX_FRAME_DT`).

        Returns:
            Number of sub-steps taken.
        """
        if not math.isfinite(dt):
            raise InvalidParameter(f"dt must be finite, got {dt}")
        if not self.clock.running or dt <= 0.0:
            return 0
        sim_dt = dt * self.clock.speed
        sub_steps = self.stepper.advance(
            self.particles,
            sim_dt,
            self.params.jump_frequency,
            self.params.jump_length,
            self.policy,
            self.bounds,
        )
        self.clock.advance(sim_dt)
        return sub_steps

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def position_at(self, i: int):
        return self.particles.position_at(i)

    def get_histogram(self) -> np.ndarray:
        """Raw counts of active particles in ``[visible_min, visible_max)``."""
        return self.histogram.counts(self.particles, self._case)

    def normalized_histogram(self) -> np.ndarray:
        return self.histogram.normalized(self.particles, self._case)

    def bin_centers(self) -> np.ndarray:
        return self.histogram.centers(self._case)

    def count_in_view(self) -> int:
        """Active particles with ``visible_min <= x <= visible_max``."""
        return self.histogram.count_in_view(self.particles, self._case)

    def analytical_at(self, x):
        return analytical_at(x, self.clock.time, self._case, self.D)

    def analytical_curve(self, num_points: int = 201):
        return analytical_curve(
            self._case, self.clock.time, self.D, self.visible_min, self.visible_max, num_points
        )

    def diffusion_length(self) -> float:
        return diffusion_length(self.D, self.clock.time)

    def snapshot(self) -> Dict[str, Any]:
        return {
            "case": self.case_num,
            "boundary": self.policy.description,
            "time": self.clock.time,
            "running": self.clock.running,
            "speed": self.clock.speed,
            "jump_frequency": self.params.jump_frequency,
            "jump_length": self.params.jump_length,
            "D": self.D,
            "num_atoms": self.num_atoms,
            "in_view": self.count_in_view(),
            "diffusion_length": self.diffusion_length(),
        }


###############################################################################
# Headless runs
###############################################################################


@dataclass
class RunParams:
    engine: EngineConfig = field(default_factory=EngineConfig)
    duration: float = 5.0  # simulated seconds
    frame_dt: float = MAX_FRAME_DT
    record_every: int = 1  # frames between MSD samples
    verbose: bool = True


def run_model(
    params: RunParams | Dict[str, Any] | None = None,
    random_source: Optional[RandomSource] = None,
) -> utils.ProfileResult:
    """
    Run one case to ``duration`` seconds of simulated time and return a ProfileResult.
    """
    if params is None:
        params = RunParams()
    elif isinstance(params, dict):
        params = dict(params)
        engine_cfg = params.pop("engine", None) or {}
        if isinstance(engine_cfg, dict):
            engine_cfg = EngineConfig(**engine_cfg)
        params = RunParams(engine=engine_cfg, **params)

    duration = float(params.duration)
    if not math.isfinite(duration) or duration < 0.0:
        raise InvalidParameter(f"duration must be finite and non-negative, got {duration}")
    frame_dt = _require_positive("frame_dt", params.frame_dt)

    engine = SimulationEngine(params.engine, random_source)
    engine.running = True
    source = engine.case.source_plane

    times = [0.0]
    msd = [0.0]
    frames = 0
    next_report = 0.1 * duration
    t_start = time.perf_counter()

    while duration - engine.time > 1e-12:
        remaining = (duration - engine.time) / engine.speed
        engine.step(min(frame_dt, remaining))
        frames += 1

        if frames % max(1, params.record_every) == 0:
            times.append(engine.time)
            msd.append(mean_squared_displacement(engine.particles.x_coords(), source))

        if params.verbose and engine.time >= next_report:
            elapsed = time.perf_counter() - t_start
            print(
                f"[diffusion] case {engine.case_num}: t={engine.time:.2f}/{duration:.2f} s, "
                f"in view={engine.count_in_view()}/{engine.num_atoms}, elapsed={elapsed:.1f}s"
            )
            next_report += 0.1 * duration

    engine.running = False
    elapsed = time.perf_counter() - t_start
    if params.verbose:
        print(
            f"Simulation completed: case {engine.case_num}, {engine.num_atoms} particles, "
            f"t={engine.time:.2f} s in {elapsed:.2f}s ({frames} frames)"
        )

    centers = engine.bin_centers()
    meta = {
        "model": "random_walk",
        "case": engine.case_num,
        "num": int(engine.num_atoms),
        "jump_frequency": float(engine.jump_frequency),
        "jump_length": float(engine.jump_length),
        "D": float(engine.D),
        "duration": float(engine.time),
        "speed": float(engine.speed),
        "frame_dt": frame_dt,
        "seed": params.engine.seed,
        "visible_min": float(engine.visible_min),
        "visible_max": float(engine.visible_max),
        "config": asdict(params.engine),
        "time_elapsed": elapsed,
        "times": np.asarray(times, dtype=np.float64),
        "msd": np.asarray(msd, dtype=np.float64),
    }

    return utils.ProfileResult(
        bin_centers=centers,
        counts=engine.get_histogram(),
        normalized=engine.normalized_histogram(),
        analytical=np.asarray(engine.analytical_at(centers), dtype=np.float64),
        positions=engine.particles.active_positions(),
        meta=meta,
    )


__all__ = [
    "MAX_FRAME_DT",
    "WalkParameters",
    "SimulationClock",
    "EngineConfig",
    "SimulationEngine",
    "RunParams",
    "run_model",
]
