from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime, timezone
from numbers import Real
from typing import Any, Union

from .errors import SeriesInputError

JD_J2000 = 2451545.0  # J2000.0 in TT
DAYS_PER_CENTURY = 36525.0
_JD_UNIX_EPOCH = 2440587.5  # JD at 1970-01-01 00:00:00


def to_jdn(d: date) -> int:
    """Convert Gregorian date to Julian Day Number (JDN)."""
    y, m, day = d.year, d.month, d.day
    a = (14 - m) // 12
    y2 = y + 4800 - a
    m2 = m + 12 * a - 3
    jdn = day + (153 * m2 + 2) // 5 + 365 * y2 + y2 // 4 - y2 // 100 + y2 // 400 - 32045
    return jdn

def date_to_jd(d: date) -> float:
    """JD at 0h of a Gregorian civil date."""
    return float(to_jdn(d)) - 0.5


@dataclass(frozen=True)
class TimeContext:
    """
    Julian ephemeris date (TT) and the time powers the series need.

    T = (JDE - 2451545.0) / 36525, Julian centuries from J2000.0.
    """
    jd: float

    def __post_init__(self) -> None:
        if isinstance(self.jd, bool) or not isinstance(self.jd, Real):
            raise SeriesInputError(f"jd must be a number, got {self.jd!r}")
        object.__setattr__(self, "jd", float(self.jd))

    @classmethod
    def from_centuries(cls, T: float) -> "TimeContext":
        return cls(JD_J2000 + DAYS_PER_CENTURY * T)

    @classmethod
    def from_datetime(cls, dt: datetime) -> "TimeContext":
        """Timezone-aware datetime read as TT; no ΔT is applied."""
        if dt.tzinfo is None:
            raise SeriesInputError("datetime must be timezone-aware")
        t = dt.astimezone(timezone.utc).timestamp()
        return cls(_JD_UNIX_EPOCH + t / 86400.0)

    @classmethod
    def from_date(cls, d: date) -> "TimeContext":
        return cls(date_to_jd(d))

    @property
    def T(self) -> float:
        return (self.jd - JD_J2000) / DAYS_PER_CENTURY

    def power(self, k: int) -> float:
        """T**k; power(0) == 1 even at J2000.0."""
        if k == 0:
            return 1.0
        return self.T ** k


TimeLike = Union[TimeContext, float]


def as_time_context(t: Any) -> TimeContext:
    """TimeContext passes through; a bare number is read as Julian centuries."""
    if isinstance(t, TimeContext):
        return t
    if isinstance(t, bool) or not isinstance(t, Real):
        raise SeriesInputError(f"time must be a TimeContext or centuries from J2000.0, got {t!r}")
    return TimeContext.from_centuries(float(t))
