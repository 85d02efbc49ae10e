"""elpmoon public API.

Keep this surface small: users should mostly interact with functions re-exported here.
"""

from .core.errors import ElpError, SeriesInputError
from .core.time import TimeContext
from .core.types import SeriesModel, Term
from .data.models import load_model
from .moon import MoonPosition, SphericalCoordinates
from .series.calculator import SeriesCalculator
from .series.evaluate import evaluate, estimate_max_error
from .series.truncation import (
    make_truncation_nums,
    make_mean_truncation_nums,
    make_safe_truncation_nums,
)

__all__ = [
    "evaluate",
    "estimate_max_error",
    "make_truncation_nums",
    "make_mean_truncation_nums",
    "make_safe_truncation_nums",
    "load_model",
    "MoonPosition",
    "SphericalCoordinates",
    "SeriesCalculator",
    "SeriesModel",
    "Term",
    "TimeContext",
    "ElpError",
    "SeriesInputError",
]
