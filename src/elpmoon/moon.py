"""
elpmoon.moon
------------
Geocentric ecliptic position of the Moon (mean equinox of date) from the three
bundled series:

    l = mean longitude (J2000 ecliptic) + precession in longitude + Σl
    b = Σb
    r = Σr

Each quantity has its own truncation plan, set directly, derived from an error
budget, or taken from an accuracy preset.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

from . import config
from .core.angles import arcsec_to_rad, wrap_rad
from .core.errors import SeriesInputError
from .core.time import TimeContext
from .core.types import SeriesModel, as_plan, check_budget
from .data.models import load_model
from .series.calculator import SeriesCalculator
from .series.truncation import make_mean_truncation_nums, make_safe_truncation_nums

# Mean longitude referred to the J2000 ecliptic, radians: c0 + c1*T + ... + c4*T^4
MEAN_LONGITUDE_RAD = (
    3.81034392032,
    8.39968473021e3,
    -3.31919929753e-5,
    3.20170955005e-8,
    -1.53637455544e-10,
)

# General precession in longitude, arcseconds: Σ c_k * T^(k+1)
PRECESSION_ARCSEC = (5028.792262, 1.1124406, 0.00007699, 0.000023479, 0.0000000178)

# Beyond T = 10 (about 3000 CE) a quadratic fit against the full theory, arcseconds.
# Fitted over 3000-5000 CE; residual under 10".
LATE_FIT_T = 10.0
LATE_FIT_ARCSEC = (-0.866, 1.43, 0.054)

MODES = ("true", "mean", "safe")


@dataclass(frozen=True)
class SphericalCoordinates:
    """r in au; theta = colatitude, phi = longitude (radians)."""
    r: float
    theta: float
    phi: float


def _check_item(item: Any) -> str:
    if item not in config.ITEMS:
        raise SeriesInputError(f"item should be 'l', 'b' or 'r', got {item!r}")
    return item


def preset_plan(item: str, level: str) -> Tuple[int, ...]:
    """Fixed plan of an accuracy level, clamped to the model's blocks."""
    plan = config.ACCURACY_LEVELS[level][_check_item(item)]
    counts = load_model(item).term_counts
    return tuple(min(n, c) for n, c in zip(plan, counts))


class MoonPosition:
    """Lunar position at one observation time, with per-time value cache."""

    def __init__(self, time: TimeContext, *, accuracy: str = config.COMPLETE):
        self._calc = SeriesCalculator(time)
        self._models: Dict[str, SeriesModel] = {item: load_model(item) for item in config.ITEMS}
        self._plans: Dict[str, Optional[Tuple[int, ...]]] = {item: None for item in config.ITEMS}
        self._cache: Dict[str, float] = {}
        self._accuracy = config.COMPLETE
        self.accuracy = accuracy

    # ---------------------------------------------------------
    # Observation time
    # ---------------------------------------------------------
    @property
    def time(self) -> TimeContext:
        return self._calc.time

    @time.setter
    def time(self, ctx: TimeContext) -> None:
        self._calc.time = ctx
        self._cache.clear()

    def _cached(self, key: str, fn: Callable[[], float]) -> float:
        if key not in self._cache:
            self._cache[key] = fn()
        return self._cache[key]

    # ---------------------------------------------------------
    # Components
    # ---------------------------------------------------------
    @property
    def mean_longitude(self) -> float:
        """Mean longitude, radians (unwrapped)."""
        def f() -> float:
            ctx = self.time
            return sum(c * ctx.power(k) for k, c in enumerate(MEAN_LONGITUDE_RAD))
        return self._cached("mean_longitude", f)

    @property
    def longitude_precession_correction(self) -> float:
        def f() -> float:
            ctx = self.time
            return arcsec_to_rad(sum(c * ctx.power(k + 1) for k, c in enumerate(PRECESSION_ARCSEC)))
        return self._cached("precession", f)

    @property
    def longitude_perturbation_correction(self) -> float:
        return self._cached(
            "perturbation",
            lambda: arcsec_to_rad(self._calc.calc(self._models["l"], self._plans["l"])),
        )

    # ---------------------------------------------------------
    # Position
    # ---------------------------------------------------------
    @property
    def l(self) -> float:
        """Ecliptic longitude of date, radians in [0, 2pi)."""
        def f() -> float:
            lon = self.mean_longitude + self.longitude_precession_correction + self.longitude_perturbation_correction
            T = self.time.T
            if T > LATE_FIT_T:
                a, b, c = LATE_FIT_ARCSEC
                lon += arcsec_to_rad(a + b * T + c * T * T)
            return wrap_rad(lon)
        return self._cached("l", f)

    @property
    def b(self) -> float:
        """Ecliptic latitude, radians."""
        return self._cached("b", lambda: arcsec_to_rad(self._calc.calc(self._models["b"], self._plans["b"])))

    @property
    def r(self) -> float:
        """Geocentric distance, km."""
        return self._cached("r", lambda: self._calc.calc(self._models["r"], self._plans["r"]))

    @property
    def spherical(self) -> SphericalCoordinates:
        return SphericalCoordinates(r=self.r / config.AU_KM, theta=math.pi / 2 - self.b, phi=self.l)

    # ---------------------------------------------------------
    # Truncation control
    # ---------------------------------------------------------
    def _invalidate(self, item: str) -> None:
        self._cache.pop(item, None)
        if item == "l":
            self._cache.pop("perturbation", None)

    def set_truncation(self, item: str, plan: Sequence[Optional[int]]) -> "MoonPosition":
        _check_item(item)
        p = as_plan(plan)
        if p is None:
            raise SeriesInputError("plan should be a sequence of term counts")
        self._plans[item] = p
        self._invalidate(item)
        self._accuracy = config.CUSTOM
        return self

    def get_truncation(self, item: str) -> Optional[Tuple[Optional[int], ...]]:
        """Current plan of an item; None means all terms."""
        return self._plans[_check_item(item)]

    def set_max_error(self, item: str, value: float, mode: str = "true") -> "MoonPosition":
        """
        Derive the item's plan from an error budget (arcsec for l/b, km for r).

        mode: 'true' (at the current time), 'mean' (averaged over -4000..6000),
        'safe' (averaged, budget tightened until the estimate fits).
        Noticeably slower than set_truncation for 'mean' and 'safe'.
        """
        _check_item(item)
        budget = check_budget(value)
        if not isinstance(mode, str) or mode.lower() not in MODES:
            raise SeriesInputError(f"mode should be 'true', 'mean' or 'safe', got {mode!r}")

        model = self._models[item]
        mode = mode.lower()
        if mode == "true":
            plan = self._calc.make_truncation_nums(model, budget)
        elif mode == "mean":
            plan = make_mean_truncation_nums(model, budget)
        else:
            plan = make_safe_truncation_nums(model, budget)

        self._plans[item] = tuple(plan)
        self._invalidate(item)
        self._accuracy = config.CUSTOM
        return self

    def get_max_error(self, item: str) -> float:
        """Estimated truncation error of the item's plan at the current time."""
        _check_item(item)
        return self._calc.estimate_max_error(self._models[item], self._plans[item])

    @property
    def accuracy(self) -> str:
        return self._accuracy

    @accuracy.setter
    def accuracy(self, level: str) -> None:
        if level == config.COMPLETE:
            plans = {item: None for item in config.ITEMS}
        elif isinstance(level, str) and level in config.ACCURACY_LEVELS:
            plans = {item: preset_plan(item, level) for item in config.ITEMS}
        else:
            raise SeriesInputError(
                f"accuracy should be one of {sorted(config.ACCURACY_LEVELS) + [config.COMPLETE]}, got {level!r}"
            )

        if level != self._accuracy or plans != self._plans:
            self._plans = plans
            self._cache.clear()
            self._accuracy = level
