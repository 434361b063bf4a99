#!/usr/bin/env python3
"""
Batch Diffusion Simulation Runner

Runs an ensemble of independently seeded simulations of one case in
parallel and writes one .npz per seed plus a manifest.
"""

import argparse
import json
import sys
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from pathlib import Path
from typing import Any, Dict

# Add package source to path
SRC = Path(__file__).resolve().parents[1]
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from diffusion_sim import EngineConfig, RunParams, run_model, utils
from diffusion_sim.analysis import estimate_diffusion_coefficient, profile_deviation
from diffusion_sim.analytical import diffusion_coefficient


def run_single_simulation(
    case: int, N: int, duration: float, gamma: float, lam: float, seed: int, output_path: str
) -> Dict[str, Any]:
    """
    Run a single simulation and save it.

    Called in worker processes by ProcessPoolExecutor, so it lives at module
    level for pickling.
    """
    params = RunParams(
        engine=EngineConfig(
            case=case, num_atoms=N, jump_frequency=gamma, jump_length=lam, seed=seed
        ),
        duration=duration,
        verbose=False,
    )
    result = run_model(params)
    utils.save_profile_result(output_path, result)

    D_fit, r_squared, _ = estimate_diffusion_coefficient(
        result.meta["times"], result.meta["msd"]
    )
    return {
        "output_path": output_path,
        "seed": seed,
        "deviation": profile_deviation(result.normalized, result.analytical),
        "D_fit": D_fit,
        "r_squared": r_squared,
        "success": True,
    }


def main():
    parser = argparse.ArgumentParser(
        description="Generate a batch of diffusion simulations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--case", type=int, choices=[1, 2, 3], required=True,
                        help="Boundary-condition case")
    parser.add_argument("--N", type=int, required=True, help="Number of particles per simulation")
    parser.add_argument("--count", type=int, required=True, help="Number of simulations to generate")
    parser.add_argument("--time", type=float, default=5.0, help="Simulated duration in seconds (default: 5)")
    parser.add_argument("--gamma", type=float, default=20.0, help="Jump frequency in Hz (default: 20)")
    parser.add_argument("--lam", type=float, default=0.5, help="Jump length in µm (default: 0.5)")
    parser.add_argument("--jobs", type=int, default=1, help="Number of parallel processes (default: 1)")
    parser.add_argument("--name", type=str, default="batch", help="Batch name (default: 'batch')")
    parser.add_argument("--base-seed", type=int, default=42,
                        help="Base seed (each simulation gets base_seed + index) (default: 42)")

    args = parser.parse_args()

    first_seed = args.base_seed
    last_seed = args.base_seed + args.count - 1

    timestamp = utils.now_str()
    batch_dir = Path("results") / "batches" / f"case{args.case}_N{args.N}_S{first_seed}-{last_seed}_{timestamp}"
    batch_dir.mkdir(parents=True, exist_ok=True)

    manifest = {
        "case": args.case,
        "num_particles": args.N,
        "duration": args.time,
        "jump_frequency": args.gamma,
        "jump_length": args.lam,
        "count": args.count,
        "base_seed": args.base_seed,
        "jobs": args.jobs,
        "timestamp": timestamp,
        "batch_name": args.name,
    }

    manifest_path = batch_dir / "manifest.json"
    with open(manifest_path, "w") as f:
        json.dump(manifest, f, indent=2)

    print(f"Case {args.case}: {args.count} runs of N={args.N} on {args.jobs} job(s) -> {batch_dir}")

    tasks = []
    for i in range(args.count):
        seed = args.base_seed + i
        output_path = str(batch_dir / f"{seed}.npz")
        tasks.append((args.case, args.N, args.time, args.gamma, args.lam, seed, output_path))

    start_time = time.time()
    results = []
    failed = []

    with ProcessPoolExecutor(max_workers=args.jobs) as executor:
        future_to_task = {
            executor.submit(run_single_simulation, *task): task
            for task in tasks
        }

        completed = 0
        for future in as_completed(future_to_task):
            completed += 1
            task = future_to_task[future]
            try:
                result = future.result()
                results.append(result)
                print(
                    f"  [{completed}/{args.count}] Completed: seed={result['seed']}, "
                    f"deviation={result['deviation']:.4f}, D_fit={result['D_fit']:.4f}"
                )
            except Exception as e:
                failed.append({"task": list(task), "error": str(e)})
                print(f"  [{completed}/{args.count}] FAILED: seed={task[5]} - {e}")

    elapsed_time = time.time() - start_time

    manifest["results"] = {
        "total": args.count,
        "successful": len(results),
        "failed": len(failed),
        "elapsed_seconds": elapsed_time,
        "D_expected": diffusion_coefficient(args.gamma, args.lam),
    }
    if results:
        manifest["results"]["D_fit_mean"] = sum(r["D_fit"] for r in results) / len(results)
        manifest["results"]["deviation_mean"] = sum(r["deviation"] for r in results) / len(results)
    manifest["simulations"] = results
    if failed:
        manifest["failures"] = failed

    with open(manifest_path, "w") as f:
        json.dump(manifest, f, indent=2)

    summary = manifest["results"]
    print(f"\nDone: {len(results)}/{args.count} succeeded in {elapsed_time:.2f} s")
    if results:
        print(f"D expected {summary['D_expected']:.4f}, fitted mean {summary['D_fit_mean']:.4f} µm²/s")
    print(f"Manifest: {manifest_path}")

    return 0 if len(failed) == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
