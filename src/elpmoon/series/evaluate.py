"""
elpmoon.series.evaluate
-----------------------
Series evaluation and the Bretagnon-Francou truncation error bound.

A model is a tuple of blocks; block i is weighted by t**i:

    x(t) = Σ_i t**i * Σ_{j<n_i} A_ij * cos(φ0 + φ1 t + φ2 t²/1e4 + φ3 t³/1e8 + φ4 t⁴/1e8)

n_i comes from the truncation plan (None -> whole block, 0 -> nothing).
"""

from __future__ import annotations

import math
from typing import Any, Optional, Sequence

from ..core.time import TimeLike, as_time_context
from ..core.types import as_model, as_plan, effective_count

PlanLike = Optional[Sequence[Optional[int]]]


def evaluate(model: Any, t: TimeLike, plan: PlanLike = None) -> float:
    """Value of the truncated series at time t (TimeContext or Julian centuries)."""
    m = as_model(model)
    p = as_plan(plan)
    ctx = as_time_context(t)

    t1 = ctx.power(1)
    t2 = ctx.power(2) / 1e4
    t3 = ctx.power(3) / 1e8
    t4 = ctx.power(4) / 1e8

    res = 0.0
    for i, block in enumerate(m.blocks):
        n = effective_count(block, p, i)
        s = 0.0
        for amp, p0, p1, p2, p3, p4 in block[:n]:
            s += amp * math.cos(p0 + p1 * t1 + p2 * t2 + p3 * t3 + p4 * t4)
        res += s * ctx.power(i)
    return res


def estimate_max_error(model: Any, plan: PlanLike = None, t: TimeLike = 0.0) -> float:
    """
    2 * Σ_i sqrt(n_i) * A_i * t**i, A_i the amplitude of the last retained term of block i.

    Only one term per block is inspected; blocks truncated to zero terms are skipped.
    """
    m = as_model(model)
    p = as_plan(plan)
    ctx = as_time_context(t)

    acc = 0.0
    for i, block in enumerate(m.blocks):
        n = effective_count(block, p, i)
        if not n:
            continue
        acc += math.sqrt(n) * block[n - 1][0] * ctx.power(i)
    return 2.0 * acc
