import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Generator, Iterable, List, Optional, Tuple, Union

import numpy as np
from scipy.optimize import brentq

from .astro import (
    H_PER_HOUR,
    P_PER_HOUR,
    S_PER_HOUR,
    T_PER_HOUR,
    BaseAngles,
    Instant,
    advance,
    astro_at_midnight,
    hours_since,
    mod360,
    to_utc,
    utc_midnight,
)
from .constituent import (
    ITSUKUSHIMA,
    PhaseConvention,
    SeasonalMeanModel,
    TideParameterProfile,
    TimeArgument,
)
from .errors import ConfigurationError, InvalidArgument
from .nodal_corrections import nodal_factor

logger = logging.getLogger(__name__)

d2r: float = np.pi / 180.0

# Mean tropical year, for the seasonal mean-level terms (deg/day)
SEASONAL_SPEED: float = 360.0 / 365.2422

Extremum = Tuple[datetime, float, str]


@dataclass(frozen=True)
class Sample:
    instant: datetime
    height_cm: float


@dataclass(frozen=True, eq=False)
class DayContext:
    """
    Everything about a profile that stays fixed over one UTC day: the
    midnight angles, the nodal factors and the constituent constants laid
    out as arrays.
    """

    midnight: datetime
    base: BaseAngles
    f: np.ndarray
    u: np.ndarray
    amplitude: np.ndarray
    phase_lag: np.ndarray
    equilibrium: np.ndarray
    doodson: np.ndarray

    @classmethod
    def build(cls, midnight: datetime, profile: TideParameterProfile) -> "DayContext":
        base = astro_at_midnight(midnight)
        constituents = profile.constituents
        fu = [nodal_factor(c.id, base.N) for c in constituents]
        logger.debug(
            "Day context for %s at %s (N=%.3f)", profile.name, midnight.date(), base.N
        )
        return cls(
            midnight=midnight,
            base=base,
            f=np.array([f for f, _ in fu], dtype=float),
            u=np.array([u for _, u in fu], dtype=float),
            amplitude=np.array([c.amplitude_cm for c in constituents], dtype=float),
            phase_lag=np.array([c.phase_lag_deg for c in constituents], dtype=float),
            equilibrium=np.array(
                [c.equilibrium_offset_deg for c in constituents], dtype=float
            ),
            doodson=np.array([c.doodson for c in constituents], dtype=float).reshape(
                len(constituents), 5
            ),
        )

    def covers(self, instant: datetime) -> bool:
        return utc_midnight(instant) == self.midnight


def _trig(profile: TideParameterProfile) -> Callable[[np.ndarray], np.ndarray]:
    if profile.phase_convention is PhaseConvention.COSINE:
        return np.cos
    elif profile.phase_convention is PhaseConvention.SINE:
        return np.sin
    raise ConfigurationError(
        f"Invalid phaseConvention: {profile.phase_convention!r}. "
        "Must be 'sin' or 'cos'."
    )


def _base_rate(profile: TideParameterProfile) -> float:
    """Hourly speed of the base angle."""
    if profile.time_argument is TimeArgument.LUNAR:
        return T_PER_HOUR + H_PER_HOUR - S_PER_HOUR
    return T_PER_HOUR


def _day_of_year(instant: datetime, offset_minutes: float = 0.0) -> float:
    """
    Fractional day of year (0 on January 1st) at offset_minutes from UTC,
    counted on proleptic ordinals so it holds at the ends of the datetime range.
    """
    days = (
        instant.toordinal()
        + (instant - utc_midnight(instant)) / timedelta(days=1)
        + offset_minutes / 1440.0
    )
    day = math.floor(days)
    if day < 1:
        # year 0 is a leap year starting on ordinal -365
        return days + 365.0
    if day > date.max.toordinal():
        return days - (date.max.toordinal() + 1)
    return days - date(date.fromordinal(day).year, 1, 1).toordinal()


def _seasonal_phases(
    instant: datetime, model: SeasonalMeanModel
) -> Tuple[float, float]:
    wd = SEASONAL_SPEED * _day_of_year(instant, model.local_offset_minutes)
    return (
        d2r * (wd - model.annual.phase_deg),
        d2r * (2.0 * wd - model.semiannual.phase_deg),
    )


def seasonal_anomaly(instant: datetime, model: Optional[SeasonalMeanModel]) -> float:
    """Seasonal mean-level anomaly (cm) at a UTC instant; 0 without a model."""
    if model is None:
        return 0.0
    annual, semiannual = _seasonal_phases(instant, model)
    return model.annual.amplitude_cm * math.cos(
        annual
    ) + model.semiannual.amplitude_cm * math.cos(semiannual)


def _phases(
    instant: datetime, profile: TideParameterProfile, ctx: DayContext
) -> np.ndarray:
    """Constituent phases (deg, in [0, 360)) at an instant of the context's day."""
    args = advance(ctx.base, hours_since(ctx.midnight, instant))
    base = args.tau if profile.time_argument is TimeArgument.LUNAR else args.T
    base = mod360(base + profile.base_angle_shift_deg)
    V = ctx.doodson @ np.array([base, args.s, args.h, args.p, args.N])
    phase = np.mod(V + ctx.equilibrium + ctx.u - ctx.phase_lag, 360.0)
    # np.mod can round tiny negative values up to 360
    return np.where(phase >= 360.0, 0.0, phase)


def _height(instant: datetime, profile: TideParameterProfile, ctx: DayContext) -> float:
    trig = _trig(profile)
    eta = profile.z0_cm + seasonal_anomaly(instant, profile.seasonal_mean)
    phase = _phases(instant, profile, ctx)
    return eta + float(np.sum(ctx.f * ctx.amplitude * trig(d2r * phase)))


def _rate(instant: datetime, profile: TideParameterProfile, ctx: DayContext) -> float:
    """Time derivative of the height (cm/hour), with f, u and N fixed for the day."""
    speed = ctx.doodson @ np.array(
        [_base_rate(profile), S_PER_HOUR, H_PER_HOUR, P_PER_HOUR, 0.0]
    )
    phase = d2r * _phases(instant, profile, ctx)
    if profile.phase_convention is PhaseConvention.SINE:
        terms = np.cos(phase)
    else:
        terms = -np.sin(phase)
    rate = float(np.sum(ctx.f * ctx.amplitude * d2r * speed * terms))
    model = profile.seasonal_mean
    if model is not None:
        annual, semiannual = _seasonal_phases(instant, model)
        w = d2r * SEASONAL_SPEED / 24.0
        rate -= model.annual.amplitude_cm * w * math.sin(annual)
        rate -= model.semiannual.amplitude_cm * 2.0 * w * math.sin(semiannual)
    return rate


def height_at_instant(
    instant: Instant, profile: TideParameterProfile = ITSUKUSHIMA
) -> float:
    """
    Predicted height (cm above datum, possibly negative) at a UTC instant.
    Arguments:
    instant -- datetime (naive values are UTC) or POSIX seconds
    profile -- station parameter profile (default: ITSUKUSHIMA)
    """
    t = to_utc(instant)
    return _height(t, profile, DayContext.build(utc_midnight(t), profile))


def _finite_number(value, what: str) -> float:
    if (
        isinstance(value, bool)
        or not isinstance(value, (int, float))
        or not math.isfinite(value)
    ):
        raise InvalidArgument(f"{what} must be a finite number, got {value!r}")
    return float(value)


def series(
    start: Instant,
    duration_minutes: float,
    step_minutes: float = 10,
    profile: TideParameterProfile = ITSUKUSHIMA,
) -> List[Sample]:
    """
    Heights at start + i * step_minutes for i = 0 .. floor(duration / step).
    Arguments:
    start -- first instant, datetime (naive values are UTC) or POSIX seconds
    duration_minutes -- length of the series, >= 0
    step_minutes -- spacing between samples, > 0 (default: 10)
    profile -- station parameter profile (default: ITSUKUSHIMA)
    """
    t0 = to_utc(start)
    duration = _finite_number(duration_minutes, "duration_minutes")
    step = _finite_number(step_minutes, "step_minutes")
    if duration < 0:
        raise InvalidArgument(
            f"duration_minutes must be >= 0, got {duration_minutes!r}"
        )
    if step <= 0:
        raise InvalidArgument(f"step_minutes must be > 0, got {step_minutes!r}")

    n = math.floor(duration / step)
    logger.debug("Series of %d samples from %s every %s min", n + 1, t0, step)
    samples: List[Sample] = []
    ctx: Optional[DayContext] = None
    for i in range(n + 1):
        try:
            t = t0 + timedelta(minutes=i * step)
        except OverflowError as exc:
            raise InvalidArgument(
                f"sample {i} falls outside the supported date range"
            ) from exc
        if ctx is None or not ctx.covers(t):
            ctx = DayContext.build(utc_midnight(t), profile)
        samples.append(Sample(instant=t, height_cm=_height(t, profile, ctx)))
    return samples


class Tide(object):
    """A station profile bundled with the prediction operations."""

    def __init__(self, profile: TideParameterProfile = ITSUKUSHIMA) -> None:
        if not isinstance(profile, TideParameterProfile):
            raise ConfigurationError("Tide needs a TideParameterProfile")
        self.profile = profile

    def __repr__(self) -> str:
        return f"Tide({self.profile.name!r})"

    def at(self, t: Union[Instant, Iterable[Instant]]) -> Union[float, np.ndarray]:
        """Height at an instant, or an array of heights for a list of instants."""
        if isinstance(t, (datetime, int, float)):
            return height_at_instant(t, self.profile)
        heights = []
        ctx: Optional[DayContext] = None
        for ti in map(to_utc, t):
            if ctx is None or not ctx.covers(ti):
                ctx = DayContext.build(utc_midnight(ti), self.profile)
            heights.append(_height(ti, self.profile, ctx))
        return np.array(heights, dtype=float)

    def series(
        self, start: Instant, duration_minutes: float, step_minutes: float = 10
    ) -> List[Sample]:
        return series(start, duration_minutes, step_minutes, self.profile)

    def extrema(self, t0: Instant, t1: Instant) -> Generator[Extremum, None, None]:
        """
        A generator for high and low tides in [t0, t1).
        Yields (instant, height_cm, "H" or "L") in chronological order.
        """
        start, end = to_utc(t0), to_utc(t1)
        if end <= start:
            raise InvalidArgument("t1 must be later than t0")
        profile = self.profile
        base_rate = _base_rate(profile)
        speeds = [
            abs(
                base_rate * c.doodson[0]
                + S_PER_HOUR * c.doodson[1]
                + H_PER_HOUR * c.doodson[2]
            )
            for c in profile.constituents
        ]
        # Extrema are assumed to be at least delta hours apart
        delta = min([1.0] + [90.0 / s for s in speeds if s > 0])
        logger.debug("Scanning %s for extrema from %s to %s", profile.name, start, end)

        current = start
        while current < end:
            midnight = utc_midnight(current)
            ctx = DayContext.build(midnight, profile)
            if end - midnight <= timedelta(days=1):
                segment_end = end
            else:
                segment_end = midnight + timedelta(days=1)
            a0 = hours_since(midnight, current)
            b0 = hours_since(midnight, segment_end)

            def d(hours: float) -> float:
                return _rate(midnight + timedelta(hours=hours), profile, ctx)

            grid = np.linspace(a0, b0, max(2, int(np.ceil((b0 - a0) / delta)) + 1))
            rates = [d(x) for x in grid]
            # a turning point exactly on t0 leaves no bracket
            if current == start and rates[0] == 0.0 and rates[1] != 0.0:
                hilo = "H" if rates[1] < 0 else "L"
                yield (start, _height(start, profile, ctx), hilo)
            for a, b, da, db in zip(grid[:-1], grid[1:], rates[:-1], rates[1:]):
                if da > 0 >= db or da < 0 <= db:
                    root = brentq(d, a, b, xtol=1e-6)
                    time = midnight + timedelta(hours=root)
                    if start <= time < end:
                        hilo = "H" if da > 0 else "L"
                        yield (time, _height(time, profile, ctx), hilo)
            current = segment_end

    def highs(self, t0: Instant, t1: Instant) -> Generator[Extremum, None, None]:
        for e in self.extrema(t0, t1):
            if e[2] == "H":
                yield e

    def lows(self, t0: Instant, t1: Instant) -> Generator[Extremum, None, None]:
        for e in self.extrema(t0, t1):
            if e[2] == "L":
                yield e

    def form_number(self) -> float:
        """
        Returns the profile's form number (K1 + O1) / (M2 + S2), a helpful
        heuristic for classifying tides.
        """
        k1, o1, m2, s2 = (self.profile.amplitude(c) for c in ("K1", "O1", "M2", "S2"))
        if m2 + s2 == 0:
            raise ConfigurationError("form number needs an M2 or S2 amplitude")
        return (k1 + o1) / (m2 + s2)

    @property
    def classify(self) -> str:
        """
        Classify the tide according to its form number
        """
        form = self.form_number()
        if 0 <= form <= 0.25:
            return "semidiurnal"
        elif 0.25 < form <= 1.5:
            return "mixed (semidiurnal)"
        elif 1.5 < form <= 3.0:
            return "mixed (diurnal)"
        else:
            return "diurnal"
