from __future__ import annotations

from typing import Any, List

from ..core.errors import SeriesInputError
from ..core.time import TimeContext
from .evaluate import PlanLike, estimate_max_error, evaluate
from .truncation import make_truncation_nums


class SeriesCalculator:
    """Series operations bound to one observation time."""

    def __init__(self, time: TimeContext):
        self.time = time

    @property
    def time(self) -> TimeContext:
        return self._time

    @time.setter
    def time(self, ctx: TimeContext) -> None:
        if not isinstance(ctx, TimeContext):
            raise SeriesInputError(f"time must be a TimeContext, got {type(ctx).__name__}")
        self._time = ctx

    def calc(self, model: Any, plan: PlanLike = None) -> float:
        return evaluate(model, self._time, plan)

    def estimate_max_error(self, model: Any, plan: PlanLike = None) -> float:
        return estimate_max_error(model, plan, self._time)

    def make_truncation_nums(self, model: Any, max_error: float) -> List[int]:
        return make_truncation_nums(model, max_error, self._time)
