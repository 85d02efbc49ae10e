"""
elpmoon.series.truncation
-------------------------
Truncation plans under an error budget.

Three flavours, each built on the previous one:

  make_truncation_nums       greedy plan at one instant
  make_mean_truncation_nums  ceil-of-mean of instantaneous plans over a long span
  make_safe_truncation_nums  mean plan, budget halved until its estimate fits

The per-block error model is the Bretagnon-Francou formula η * sqrt(n) * A * t**i
(η = 2 in estimate_max_error).
"""

from __future__ import annotations

import logging
import math
from typing import Any, List, Optional

import numpy as np

from .. import config
from ..core.time import TimeContext, TimeLike, as_time_context
from ..core.errors import SeriesInputError
from ..core.types import SeriesModel, as_model, check_budget
from .evaluate import estimate_max_error

logger = logging.getLogger(__name__)


# ============================================================
# Instantaneous plan
# ============================================================

def make_truncation_nums(model: Any, max_error: float, t: TimeLike = 0.0) -> List[int]:
    """
    Greedy plan whose estimated error at time t is within max_error.

    Seeds every block with its leading term, then repeatedly extends the block whose
    last extension removed the most error. Stops when the running estimate fits the
    budget, or (forced exit) when the last block is used up or nothing can reduce
    the error any further.
    """
    m = as_model(model)
    budget = check_budget(max_error)
    ctx = as_time_context(t)

    T = len(m.blocks)
    plan = [0] * T
    if T == 0:
        return plan

    weights = [ctx.power(i) for i in range(T)]
    reductions = [0.0] * T
    errors = [0.0] * T
    total = 0.0

    def extend(i: int) -> bool:
        nonlocal total
        block = m.blocks[i]
        n = plan[i] + 1
        if n > len(block):
            reductions[i] = 0.0
            return False
        err = math.sqrt(n) * block[n - 1][0] * weights[i]
        reductions[i] = abs(errors[i] - err)
        total += err - errors[i]
        errors[i] = err
        plan[i] = n
        return True

    # seeding pass, round robin
    for i in range(T):
        extend(i)

    forced = False
    last = m.blocks[T - 1]
    while 2.0 * abs(total) > budget:
        if plan[T - 1] == len(last):
            forced = True
            break
        # first maximum wins: max() keeps the earliest of equal keys
        item = max(range(T), key=reductions.__getitem__)
        if not extend(item) and not any(reductions):
            forced = True
            break

    true_error = estimate_max_error(m, plan, ctx)
    if forced:
        logger.debug(
            "forced exit at T=%.4f: plan=%s estimate=%.6g budget=%.6g",
            ctx.T, plan, true_error, budget,
        )
    elif true_error > budget:
        # The tightened budget is reported, not applied.
        tightened = budget - (true_error - budget) * config.OVERSHOOT_TIGHTEN_FACTOR
        logger.debug(
            "estimate %.6g exceeds budget %.6g at T=%.4f; tightened budget would be %.6g",
            true_error, budget, ctx.T, tightened,
        )
    return plan


# ============================================================
# Time-averaged plan
# ============================================================

def sample_times(
    n: int = config.MEAN_SAMPLES,
    start: float = config.MEAN_SPAN_JD_START,
    end: float = config.MEAN_SPAN_JD_END,
) -> np.ndarray:
    """n equally spaced Julian ephemeris dates: start, start + step, ..., end - step."""
    if n <= 0:
        raise SeriesInputError(f"n must be positive, got {n}")
    step = (end - start) / n
    return start + step * np.arange(n)


def make_mean_truncation_nums(
    model: Any,
    max_error: float,
    *,
    samples: int = config.MEAN_SAMPLES,
) -> List[int]:
    """Per block, ceil(mean) of the instantaneous plans over the averaging span."""
    m = as_model(model)
    budget = check_budget(max_error)

    sums = np.zeros(len(m.blocks), dtype=np.int64)
    for jd in sample_times(samples):
        sums += np.asarray(make_truncation_nums(m, budget, TimeContext(float(jd))), dtype=np.int64)

    mean = np.ceil(sums / samples).astype(np.int64)
    logger.debug("mean plan over %d samples (budget %.6g): %s", samples, budget, mean.tolist())
    return [int(x) for x in mean]


# ============================================================
# Safe plan
# ============================================================

def span_max_error(model: SeriesModel, plan: List[int], samples: int = config.MEAN_SAMPLES) -> float:
    """Largest |estimate_max_error| of a plan over the averaging span."""
    return max(abs(estimate_max_error(model, plan, TimeContext(float(jd)))) for jd in sample_times(samples))


def make_safe_truncation_nums(
    model: Any,
    max_error: float,
    *,
    t: Optional[TimeLike] = None,
    attempts: int = config.SAFE_MAX_ATTEMPTS,
    samples: int = config.MEAN_SAMPLES,
) -> List[int]:
    """
    Mean plan whose estimated error fits the (progressively halved) budget.

    The estimate is taken at t, or as the worst case over the averaging span when t
    is None. After `attempts` misses the last plan is returned as is.
    """
    m = as_model(model)
    budget = check_budget(max_error)
    ctx = None if t is None else as_time_context(t)

    if attempts <= 0:
        raise SeriesInputError(f"attempts must be positive, got {attempts}")

    plan: List[int] = []
    for k in range(attempts):
        plan = make_mean_truncation_nums(m, budget, samples=samples)
        if ctx is None:
            err = span_max_error(m, plan, samples)
        else:
            err = estimate_max_error(m, plan, ctx)
        if err <= budget:
            return plan
        logger.info("attempt %d: estimate %.6g > budget %.6g, halving", k + 1, err, budget)
        budget /= config.SAFE_BUDGET_DIVISOR

    logger.warning(
        "safe plan for %s not reached within %d attempts (last budget %.6g); returning %s",
        m.name or "model", attempts, budget * config.SAFE_BUDGET_DIVISOR, plan,
    )
    return plan
