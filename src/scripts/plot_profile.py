"""
Profile Plotter for Diffusion Runs.

Draws the normalised particle histogram as bars with the analytical solution
overlaid, in the same units the interactive plot uses: C/C0 for case 1 and
probability density (µm⁻¹) for cases 2 and 3.
"""
import argparse
import sys
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np

SRC = Path(__file__).resolve().parents[1]
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from diffusion_sim import CaseConfig, utils
from diffusion_sim.analytical import analytical_curve


def render_profile(result, output_path, num_points=201, show=False):
    meta = result.meta or {}
    case = CaseConfig.from_value(meta.get("case", 1))
    lo = float(meta.get("visible_min", case.visible_min))
    hi = float(meta.get("visible_max", case.visible_max))
    t = float(meta.get("duration", 0.0))
    D = float(meta.get("D", 0.0))

    centers = np.asarray(result.bin_centers)
    normalized = np.asarray(result.normalized)
    bin_w = (hi - lo) / len(centers)

    xs, curve = analytical_curve(case, t, D, lo, hi, num_points)

    fig, ax = plt.subplots(figsize=(9, 5))
    ax.bar(centers, normalized, width=bin_w * 0.95, color="tab:orange", alpha=0.5,
           edgecolor="tab:orange", label="Random walk")
    ax.plot(xs, curve, color="tab:cyan", linewidth=2.5, label=case.analytical_label)

    if case is CaseConfig.SEMI_INFINITE_SOURCE:
        ax.set_ylim(0.0, 1.2)
        ax.set_ylabel("C(x,t) / C$_0$")
    else:
        y_max = max(float(np.max(normalized, initial=0.0)), float(np.max(curve, initial=0.0))) * 1.15
        ax.set_ylim(0.0, y_max if y_max > 1e-6 else 1.0)
        ax.set_ylabel("Density (µm$^{-1}$)")

    ax.set_xlim(lo, hi)
    ax.set_xlabel("Position x (µm)")
    ax.set_title(
        f"{case.title}\nN = {meta.get('num', '?')}, t = {t:.2f} s, D = {D:.4f} µm²/s"
    )
    ax.grid(True, linestyle="--", alpha=0.4)
    ax.legend()
    plt.tight_layout()

    if output_path:
        plt.savefig(output_path, dpi=150, bbox_inches="tight")
        print(f"Saved to {output_path}")

    if show:
        plt.show()
    else:
        plt.close()


def main():
    parser = argparse.ArgumentParser(description="Histogram vs analytical profile plotter")
    parser.add_argument("file", help="Input .npz file")
    parser.add_argument("--points", type=int, default=201, help="Samples on the analytical curve (default 201)")
    parser.add_argument("--out", default=None, help="Output filename")
    parser.add_argument("--show", action="store_true", help="Display plot interactively")

    args = parser.parse_args()

    result = utils.load_profile_result(args.file)

    if args.out is None:
        input_path = Path(args.file)
        out_path = input_path.parent / (input_path.stem + "_profile.png")
    else:
        out_path = args.out

    render_profile(result, out_path, args.points, args.show)


if __name__ == "__main__":
    main()
