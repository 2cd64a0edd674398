"""
Fundamental astronomical arguments for harmonic tide prediction.

The mean longitudes of the moon (s), sun (h), lunar perigee (p) and the
lunar ascending node (N) are evaluated at 0:00 UTC from the calendar year
and day of year, then advanced linearly through the day.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Union

from .errors import InvalidArgument

Instant = Union[datetime, float, int]

# Daily rates (deg/day)
S_PER_DAY: float = 13.176396
H_PER_DAY: float = 0.985647
P_PER_DAY: float = 0.111404
N_PER_DAY: float = -0.052954

# Intraday rates (deg/hour)
T_PER_HOUR: float = 15.0
S_PER_HOUR: float = 0.54901652
H_PER_HOUR: float = 0.04106864
P_PER_HOUR: float = 0.00464181


def mod360(deg: float) -> float:
    """Reduce an angle in degrees to [0, 360)."""
    x = math.fmod(deg, 360.0)
    if x < 0.0:
        x += 360.0
    # -1e-17 + 360.0 rounds up to 360.0
    if x >= 360.0:
        x = 0.0
    return x


@dataclass(frozen=True)
class BaseAngles:
    s: float
    h: float
    p: float
    N: float


@dataclass(frozen=True)
class AstronomicalArguments:
    """Angles (degrees) at a given instant of the day."""

    T: float
    tau: float
    s: float
    h: float
    p: float
    N: float


def to_utc(instant: Instant) -> datetime:
    """
    Normalise an instant to an aware UTC datetime.
    Arguments:
    instant -- a datetime (naive values are read as UTC) or finite POSIX seconds
    """
    if isinstance(instant, datetime):
        if instant.tzinfo is None or instant.utcoffset() is None:
            return instant.replace(tzinfo=timezone.utc)
        try:
            return instant.astimezone(timezone.utc)
        except OverflowError as exc:
            raise InvalidArgument(f"instant {instant!r} is out of range") from exc
    if isinstance(instant, bool) or not isinstance(instant, (int, float)):
        raise InvalidArgument(
            f"instant must be a datetime or POSIX seconds, got {type(instant).__name__}"
        )
    if not math.isfinite(instant):
        raise InvalidArgument(f"instant must be finite, got {instant!r}")
    try:
        return datetime.fromtimestamp(instant, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as exc:
        raise InvalidArgument(f"instant {instant!r} is out of range") from exc


def utc_midnight(instant: datetime) -> datetime:
    return instant.replace(hour=0, minute=0, second=0, microsecond=0)


def hours_since(t0: datetime, t: datetime) -> float:
    return (t - t0) / timedelta(hours=1)


def astro_at_midnight(day: date) -> BaseAngles:
    """
    Return s, h, p and N at 0:00 UTC on the given calendar day.
    Arguments:
    day -- a date, or a datetime whose UTC calendar day is used
    """
    if isinstance(day, datetime):
        day = to_utc(day).date()
    y = day.year - 2000
    # Leap days between 2000-01-01 and January 1st of the year
    L = (day.year + 3) // 4 - 500
    d = day.timetuple().tm_yday - 1 + L
    return BaseAngles(
        s=mod360(211.728 + 129.38471 * y + S_PER_DAY * d),
        h=mod360(279.974 - 0.23871 * y + H_PER_DAY * d),
        p=mod360(83.298 + 40.66229 * y + P_PER_DAY * d),
        N=mod360(125.071 - 19.32812 * y + N_PER_DAY * d),
    )


def advance(base: BaseAngles, hours: float) -> AstronomicalArguments:
    """
    Advance midnight angles by a number of hours.

    T is 180 degrees at 0:00 UTC and 0 at noon. N is held at its midnight
    value, ignoring its drift within the day.
    """
    s = mod360(base.s + S_PER_HOUR * hours)
    h = mod360(base.h + H_PER_HOUR * hours)
    p = mod360(base.p + P_PER_HOUR * hours)
    T = mod360(180.0 + T_PER_HOUR * hours)
    return AstronomicalArguments(T=T, tau=mod360(T + h - s), s=s, h=h, p=p, N=base.N)
