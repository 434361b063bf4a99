"""
Diffusion Coefficient Analysis for Saved Runs.

Fits the recorded mean squared x-displacement against time
(``<x^2> = 2 D t``) and compares the fitted D with the Einstein relation
``Γλ²/6``. Also reports how far the final histogram sits from the
analytical profile.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

import numpy as np
from matplotlib import pyplot as plt

SRC = Path(__file__).resolve().parents[1]
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from diffusion_sim import utils  # type: ignore[import]
from diffusion_sim.analysis import estimate_diffusion_coefficient, profile_deviation


def analyze_profile(
    npz_path: str | Path,
    output_path: str | Path | None = None,
    show_plot: bool = False,
) -> None:
    """
    Fit D from the MSD history of a saved run and plot the fit.

    Args:
        npz_path: Path to input .npz file
        output_path: Optional path to save output image
        show_plot: Whether to display plot interactively
    """
    npz_path = Path(npz_path)
    print(f"Loading {npz_path}...")

    result = utils.load_profile_result(npz_path)
    meta = result.meta or {}
    if "times" not in meta or "msd" not in meta:
        raise ValueError("Result has no MSD history (times/msd). Re-run with run_single.py.")

    times = np.asarray(meta["times"], dtype=np.float64)
    msd = np.asarray(meta["msd"], dtype=np.float64)
    D_expected = float(meta.get("D", float("nan")))

    D_fit, r_squared, intercept = estimate_diffusion_coefficient(times, msd)
    deviation = profile_deviation(result.normalized, result.analytical)

    print("\n" + "=" * 60)
    print(f"Case {meta.get('case', '?')}: N = {meta.get('num', '?')}, t = {meta.get('duration', 0.0):.2f} s")
    print("=" * 60)
    print(f"D (Γλ²/6):        {D_expected:.5f} µm²/s")
    print(f"D (MSD fit):      {D_fit:.5f} µm²/s")
    print(f"R² (Linearity):   {r_squared:.6f}")
    if D_expected > 0:
        print(f"Relative error:   {abs(D_fit - D_expected) / D_expected:.3%}")
    print(f"Profile deviation (mean abs): {deviation:.5f}")
    print("=" * 60)

    fig, ax = plt.subplots(figsize=(8, 5))
    ax.scatter(times, msd, color="black", alpha=0.4, s=4, label="Simulation")
    ax.plot(times, 2.0 * D_fit * times + intercept, color="red", linestyle="--", linewidth=2,
            label=f"Fit: D = {D_fit:.4f}")
    if D_expected > 0:
        ax.plot(times, 2.0 * D_expected * times, color="tab:blue", linewidth=1.5,
                label=f"2Dt, D = Γλ²/6 = {D_expected:.4f}")
    ax.set_xlabel("t (s)")
    ax.set_ylabel(r"$\langle x^2 \rangle$ (µm²)")
    ax.set_title(f"Mean squared displacement (R² = {r_squared:.4f})")
    ax.legend()
    ax.grid(True, linestyle="--", alpha=0.4)
    plt.tight_layout()

    if output_path is None:
        output_path = npz_path.with_name(npz_path.stem + "_msd.png")
    else:
        output_path = Path(output_path)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(output_path, dpi=150, bbox_inches="tight")
    print(f"\nFigure saved to: {output_path}")

    if show_plot:
        plt.show()
    else:
        plt.close()


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Fit the diffusion coefficient of a saved random-walk run."
    )
    parser.add_argument("file", help="Path to the .npz file")
    parser.add_argument(
        "--out",
        type=str,
        help="Output path for the figure (default: <input>_msd.png)",
    )
    parser.add_argument(
        "--show",
        action="store_true",
        help="Display plot interactively",
    )
    args = parser.parse_args()

    analyze_profile(args.file, output_path=args.out, show_plot=args.show)


if __name__ == "__main__":
    main()
