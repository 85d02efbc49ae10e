#!/usr/bin/env python3
from __future__ import annotations

import argparse
from typing import List, Optional

import numpy as np

from elpmoon import config
from elpmoon.core.time import TimeContext
from elpmoon.data.models import load_model
from elpmoon.series.truncation import make_mean_truncation_nums, make_truncation_nums, sample_times


def _need_matplotlib():
    try:
        import matplotlib.pyplot as plt  # noqa: F401
        return plt
    except ImportError as e:
        raise RuntimeError('This script needs matplotlib. Install: pip install "elpmoon[diagnostics]"') from e


def plan_matrix(item: str, max_error: float, samples: int = config.MEAN_SAMPLES):
    """(jd[samples], counts[samples, blocks]) of instantaneous plans over the averaging span."""
    model = load_model(item)
    jds = sample_times(samples)
    counts = np.array(
        [make_truncation_nums(model, max_error, TimeContext(float(jd))) for jd in jds],
        dtype=np.int64,
    )
    return jds, counts


def jd_to_year(jd: np.ndarray) -> np.ndarray:
    """Approximate astronomical year from JD (365.25-day years from J2000)."""
    return 2000.0 + (jd - 2451545.0) / 365.25


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(
        description="Show how the instantaneous truncation plan drifts over -4000..6000."
    )
    p.add_argument("--item", choices=["l", "b", "r"], default="l")
    p.add_argument("--max-error", type=float, default=30.0, help="arcsec for l/b, km for r (default 30)")
    p.add_argument("--samples", type=int, default=config.MEAN_SAMPLES)
    p.add_argument("--plot", action="store_true", help="plot per-block counts (needs matplotlib)")
    p.add_argument("--out", type=str, default="", help="save the plot to this file instead of showing it")
    args = p.parse_args(argv)

    if args.samples <= 0:
        raise SystemExit("--samples must be positive")

    jds, counts = plan_matrix(args.item, args.max_error, args.samples)
    years = jd_to_year(jds)
    mean_plan = make_mean_truncation_nums(load_model(args.item), args.max_error, samples=args.samples)

    header = "Year".rjust(8) + "".join(f"  blk{i}".rjust(7) for i in range(counts.shape[1])) + "   total"
    print(header)
    print("-" * len(header))
    step = max(1, len(jds) // 20)
    for k in range(0, len(jds), step):
        row = f"{years[k]:8.0f}" + "".join(f"{c:7d}" for c in counts[k]) + f"{counts[k].sum():8d}"
        print(row)

    print()
    print(f"min per block   = {counts.min(axis=0).tolist()}")
    print(f"max per block   = {counts.max(axis=0).tolist()}")
    print(f"ceil(mean) plan = {mean_plan}")

    if args.plot:
        plt = _need_matplotlib()
        fig, ax = plt.subplots(figsize=(9, 4.5))
        for i in range(counts.shape[1]):
            ax.step(years, counts[:, i], where="post", label=f"block {i} (T^{i})")
        ax.set_xlabel("Year")
        ax.set_ylabel("Retained terms")
        ax.set_title(f"Instantaneous plans for '{args.item}', budget {args.max_error:g}")
        ax.grid(True, alpha=0.3)
        ax.legend()
        fig.tight_layout()
        if args.out:
            fig.savefig(args.out, dpi=150)
            print(f"saved {args.out}")
        else:
            plt.show()

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
