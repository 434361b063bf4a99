#!/usr/bin/env python3
"""
Single Diffusion Simulation Runner

Runs one boundary-condition case headlessly to a fixed simulated time and
saves the histogram, analytical curve and final positions to .npz.
"""

import argparse
import sys
import time
from pathlib import Path

# Add package source to path
SRC = Path(__file__).resolve().parents[1]
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from diffusion_sim import EngineConfig, RunParams, run_model, utils
from diffusion_sim.analysis import profile_deviation


def build_params(args: argparse.Namespace) -> RunParams:
    """Merge an optional parameter file with command-line overrides."""
    file_params = utils.load_params(args.config) if args.config else {}
    engine_cfg = dict(file_params.get("engine", {}))
    overrides = {
        "case": args.case,
        "num_atoms": args.N,
        "jump_frequency": args.gamma,
        "jump_length": args.lam,
        "speed": args.speed,
        "seed": args.seed,
    }
    engine_cfg.update({k: v for k, v in overrides.items() if v is not None})
    run_cfg = {k: v for k, v in file_params.items() if k not in ("engine", "verbose")}
    if args.time is not None:
        run_cfg["duration"] = args.time
    return RunParams(engine=EngineConfig(**engine_cfg), verbose=not args.quiet, **run_cfg)


def main():
    parser = argparse.ArgumentParser(
        description="Run a single random-walk diffusion simulation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--case", type=int, choices=[1, 2, 3], default=None,
                        help="Boundary-condition case (1: erfc source, 2: planar source, 3: thin film)")
    parser.add_argument("--N", type=int, default=None, help="Number of particles")
    parser.add_argument("--time", type=float, default=None, help="Simulated duration in seconds")
    parser.add_argument("--gamma", type=float, default=None, help="Jump frequency (Hz)")
    parser.add_argument("--lam", type=float, default=None, help="Jump length (µm)")
    parser.add_argument("--speed", type=float, default=None, help="Simulation speed multiplier")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument("--config", type=str, default=None, help="JSON or TOML parameter file")
    parser.add_argument("--out", type=str, default=None,
                        help="Output .npz file path (auto-generated if not provided)")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")

    args = parser.parse_args()
    params = build_params(args)
    cfg = params.engine

    print(f"Running case {cfg.case}: N={cfg.num_atoms}, t={params.duration} s, seed={cfg.seed}")
    start_time = time.time()
    result = run_model(params)
    elapsed_time = time.time() - start_time

    if args.out is None:
        timestamp = utils.now_str()
        output_dir = Path("results")
        output_dir.mkdir(exist_ok=True)
        args.out = str(
            output_dir / f"case{cfg.case}_N{cfg.num_atoms}_S{cfg.seed}_{timestamp}.npz"
        )

    utils.save_profile_result(args.out, result)

    deviation = profile_deviation(result.normalized, result.analytical)
    print(f"\nSimulation completed successfully!")
    print(f"   Time elapsed: {elapsed_time:.2f} seconds")
    print(f"   D = {result.meta['D']:.4f} µm²/s")
    print(f"   Mean |histogram - analytical|: {deviation:.4f}")
    print(f"   Output saved to: {args.out}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
