"""
Station parameter profiles: mean level, phase convention and the harmonic
constituents (amplitude, phase lag and Doodson coefficients) for one station.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from .errors import ConfigurationError


class PhaseConvention(str, Enum):
    """Trigonometric function applied to each constituent phase."""

    COSINE = "cos"
    SINE = "sin"


class TimeArgument(str, Enum):
    """
    Base angle multiplied by the first Doodson coefficient.

    - SOLAR: T, the Greenwich mean solar angle (180 degrees at 0:00 UTC).
    - LUNAR: tau = T + h - s, mean lunar time (M2 = 2 tau).
    """

    SOLAR = "solar"
    LUNAR = "lunar"


def _finite(value: Any, what: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{what} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise ConfigurationError(f"{what} must be finite, got {value!r}")
    return float(value)


def _enum(kind, value: Any, what: str):
    try:
        return kind(value)
    except (TypeError, ValueError):
        allowed = ", ".join(repr(k.value) for k in kind)
        raise ConfigurationError(
            f"Invalid {what}: {value!r}. Must be one of {allowed}."
        ) from None


@dataclass(frozen=True)
class Constituent:
    id: str
    amplitude_cm: float
    phase_lag_deg: float
    doodson: Tuple[int, int, int, int, int]
    equilibrium_offset_deg: float = 0.0

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id:
            raise ConfigurationError(
                f"Constituent id must be a non-empty string, got {self.id!r}"
            )
        amplitude = _finite(self.amplitude_cm, f"{self.id} amplitude")
        if amplitude < 0:
            raise ConfigurationError(
                f"{self.id} amplitude must be >= 0, got {amplitude}"
            )
        doodson = self.doodson
        if isinstance(doodson, (str, bytes)) or not isinstance(doodson, Sequence):
            raise ConfigurationError(
                f"{self.id} Doodson coefficients must be a sequence"
            )
        if len(self.doodson) != 5:
            raise ConfigurationError(
                f"{self.id} needs 5 Doodson coefficients, got {len(self.doodson)}"
            )
        for a in self.doodson:
            if isinstance(a, bool) or not isinstance(a, int):
                raise ConfigurationError(
                    f"{self.id} Doodson coefficients must be integers, got {a!r}"
                )
        object.__setattr__(self, "amplitude_cm", amplitude)
        object.__setattr__(
            self, "phase_lag_deg", _finite(self.phase_lag_deg, f"{self.id} phase lag")
        )
        object.__setattr__(
            self,
            "equilibrium_offset_deg",
            _finite(self.equilibrium_offset_deg, f"{self.id} equilibrium offset"),
        )
        object.__setattr__(self, "doodson", tuple(int(a) for a in self.doodson))


@dataclass(frozen=True)
class HarmonicTerm:
    amplitude_cm: float = 0.0
    phase_deg: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "amplitude_cm", _finite(self.amplitude_cm, "seasonal amplitude")
        )
        object.__setattr__(
            self, "phase_deg", _finite(self.phase_deg, "seasonal phase")
        )


@dataclass(frozen=True)
class SeasonalMeanModel:
    """
    Annual and semiannual anomaly of the mean level.

    anomaly = Aa cos(w d - pa) + Asa cos(2 w d - psa), where d is the
    fractional day of year (0 on January 1st) at local_offset_minutes from UTC
    and w = 360 / 365.2422 degrees per day.
    """

    annual: HarmonicTerm = field(default_factory=HarmonicTerm)
    semiannual: HarmonicTerm = field(default_factory=HarmonicTerm)
    local_offset_minutes: float = 0.0

    def __post_init__(self) -> None:
        for name in ("annual", "semiannual"):
            if not isinstance(getattr(self, name), HarmonicTerm):
                raise ConfigurationError(f"seasonal {name} term must be a HarmonicTerm")
        object.__setattr__(
            self,
            "local_offset_minutes",
            _finite(self.local_offset_minutes, "seasonal local offset"),
        )


@dataclass(frozen=True)
class TideParameterProfile:
    """
    Immutable configuration for one station.
    Arguments:
    name -- label
    z0_cm -- mean level above datum
    constituents -- harmonic constituents, in summation order
    phase_convention -- cosine or sine series (default: cosine)
    time_argument -- base angle for the first Doodson coefficient (default: solar)
    reference_longitude_deg -- added to the base angle (default: 0)
    phase_origin_offset_deg -- added to the base angle (default: 0)
    seasonal_mean -- optional seasonal mean-level anomaly
    """

    name: str
    z0_cm: float
    constituents: Tuple[Constituent, ...]
    phase_convention: PhaseConvention = PhaseConvention.COSINE
    time_argument: TimeArgument = TimeArgument.SOLAR
    reference_longitude_deg: float = 0.0
    phase_origin_offset_deg: float = 0.0
    seasonal_mean: Optional[SeasonalMeanModel] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "z0_cm", _finite(self.z0_cm, "z0"))
        object.__setattr__(
            self,
            "phase_convention",
            _enum(PhaseConvention, self.phase_convention, "phaseConvention"),
        )
        object.__setattr__(
            self,
            "time_argument",
            _enum(TimeArgument, self.time_argument, "timeArgument"),
        )
        for name in ("reference_longitude_deg", "phase_origin_offset_deg"):
            object.__setattr__(self, name, _finite(getattr(self, name), name))
        constituents = tuple(self.constituents)
        for c in constituents:
            if not isinstance(c, Constituent):
                raise ConfigurationError(f"Expected a Constituent, got {c!r}")
        object.__setattr__(self, "constituents", constituents)
        seasonal = self.seasonal_mean
        if seasonal is not None and not isinstance(seasonal, SeasonalMeanModel):
            raise ConfigurationError("seasonal_mean must be a SeasonalMeanModel")

    @property
    def base_angle_shift_deg(self) -> float:
        return self.reference_longitude_deg + self.phase_origin_offset_deg

    def amplitude(self, constituent_id: str) -> float:
        """Amplitude of a constituent (0 if the profile doesn't carry it)."""
        key = constituent_id.upper()
        return sum(c.amplitude_cm for c in self.constituents if c.id.upper() == key)

    @classmethod
    def from_dict(cls, config: Mapping[str, Any]) -> "TideParameterProfile":
        """
        Build a profile from a configuration object such as

            {"name": "...", "z0Cm": 200.0, "phaseConvention": "cos",
             "timeArgument": "lunar", "referenceLongitudeDeg": 0.0,
             "phaseOriginOffsetDeg": 0.0,
             "seasonalMeanModel": {"annual": {"ampCm": 10, "phaseDeg": 200},
                                   "semiannual": {"ampCm": 2, "phaseDeg": 90},
                                   "localOffsetMinutes": 540},
             "constituents": [{"id": "M2", "amplitudeCm": 103.0,
                               "phaseLagDeg": 11.4, "equilibriumOffsetDeg": 0,
                               "doodsonCoefficients": [2, 0, 0, 0, 0]}]}

        Only z0Cm and constituents are required.
        """
        if not isinstance(config, Mapping):
            raise ConfigurationError("Profile configuration must be a mapping")
        _check_keys(config, _PROFILE_KEYS, "profile")
        for key in ("z0Cm", "constituents"):
            if key not in config:
                raise ConfigurationError(f"Profile configuration is missing {key!r}")
        raw = config["constituents"]
        if isinstance(raw, (str, bytes, Mapping)) or not isinstance(raw, Sequence):
            raise ConfigurationError("constituents must be a list")
        seasonal = config.get("seasonalMeanModel")
        return cls(
            name=str(config.get("name", "")),
            z0_cm=config["z0Cm"],
            constituents=tuple(_constituent_from_dict(c) for c in raw),
            phase_convention=config.get("phaseConvention", PhaseConvention.COSINE),
            time_argument=config.get("timeArgument", TimeArgument.SOLAR),
            reference_longitude_deg=config.get("referenceLongitudeDeg", 0.0),
            phase_origin_offset_deg=config.get("phaseOriginOffsetDeg", 0.0),
            seasonal_mean=None if seasonal is None else _seasonal_from_dict(seasonal),
        )

    def to_dict(self) -> Dict[str, Any]:
        config: Dict[str, Any] = {
            "name": self.name,
            "z0Cm": self.z0_cm,
            "phaseConvention": self.phase_convention.value,
            "timeArgument": self.time_argument.value,
            "referenceLongitudeDeg": self.reference_longitude_deg,
            "phaseOriginOffsetDeg": self.phase_origin_offset_deg,
            "constituents": [
                {
                    "id": c.id,
                    "amplitudeCm": c.amplitude_cm,
                    "phaseLagDeg": c.phase_lag_deg,
                    "equilibriumOffsetDeg": c.equilibrium_offset_deg,
                    "doodsonCoefficients": list(c.doodson),
                }
                for c in self.constituents
            ],
        }
        if self.seasonal_mean is not None:
            sm = self.seasonal_mean
            config["seasonalMeanModel"] = {
                "annual": {
                    "ampCm": sm.annual.amplitude_cm,
                    "phaseDeg": sm.annual.phase_deg,
                },
                "semiannual": {
                    "ampCm": sm.semiannual.amplitude_cm,
                    "phaseDeg": sm.semiannual.phase_deg,
                },
                "localOffsetMinutes": sm.local_offset_minutes,
            }
        return config


_PROFILE_KEYS = frozenset(
    [
        "name",
        "z0Cm",
        "phaseConvention",
        "timeArgument",
        "referenceLongitudeDeg",
        "phaseOriginOffsetDeg",
        "seasonalMeanModel",
        "constituents",
    ]
)
_CONSTITUENT_KEYS = frozenset(
    ["id", "amplitudeCm", "phaseLagDeg", "equilibriumOffsetDeg", "doodsonCoefficients"]
)
_SEASONAL_KEYS = frozenset(["annual", "semiannual", "localOffsetMinutes"])
_TERM_KEYS = frozenset(["ampCm", "phaseDeg"])


def _check_keys(config: Mapping[str, Any], allowed: frozenset, what: str) -> None:
    unknown = set(config) - allowed
    if unknown:
        names = ", ".join(sorted(map(str, unknown)))
        raise ConfigurationError(f"Unknown {what} option(s): {names}")


def _constituent_from_dict(config: Any) -> Constituent:
    if not isinstance(config, Mapping):
        raise ConfigurationError(
            f"Constituent entry must be a mapping, got {config!r}"
        )
    _check_keys(config, _CONSTITUENT_KEYS, "constituent")
    for key in ("id", "amplitudeCm", "phaseLagDeg", "doodsonCoefficients"):
        if key not in config:
            cid = config.get("id", "?")
            raise ConfigurationError(f"Constituent {cid!r} is missing {key!r}")
    return Constituent(
        id=config["id"],
        amplitude_cm=config["amplitudeCm"],
        phase_lag_deg=config["phaseLagDeg"],
        doodson=config["doodsonCoefficients"],
        equilibrium_offset_deg=config.get("equilibriumOffsetDeg", 0.0),
    )


def _term_from_dict(config: Any, what: str) -> HarmonicTerm:
    if config is None:
        return HarmonicTerm()
    if not isinstance(config, Mapping):
        raise ConfigurationError(f"seasonal {what} term must be a mapping")
    _check_keys(config, _TERM_KEYS, f"seasonal {what}")
    return HarmonicTerm(
        amplitude_cm=config.get("ampCm", 0.0), phase_deg=config.get("phaseDeg", 0.0)
    )


def _seasonal_from_dict(config: Any) -> SeasonalMeanModel:
    if not isinstance(config, Mapping):
        raise ConfigurationError("seasonalMeanModel must be a mapping")
    _check_keys(config, _SEASONAL_KEYS, "seasonal")
    return SeasonalMeanModel(
        annual=_term_from_dict(config.get("annual"), "annual"),
        semiannual=_term_from_dict(config.get("semiannual"), "semiannual"),
        local_offset_minutes=config.get("localOffsetMinutes", 0.0),
    )


# Itsukushima (Miyajima), harmonic constants from the Japan Coast Guard
# hydrographic sheet: H [cm], kappa [deg], Z0 [cm]. Doodson coefficients on
# mean lunar time.
_DIURNAL_SEMIDIURNAL = (
    ("O1", 24.0, (1, -1, 0, 0, 0)),
    ("P1", 10.3, (1, 1, -2, 0, 0)),
    ("K1", 31.0, (1, 1, 0, 0, 0)),
    ("M2", 103.0, (2, 0, 0, 0, 0)),
    ("S2", 40.0, (2, 2, -2, 0, 0)),
    ("K2", 10.9, (2, 2, 0, 0, 0)),
)


def _itsukushima(
    name: str, convention: PhaseConvention, kappas: Sequence[float]
) -> TideParameterProfile:
    return TideParameterProfile(
        name=name,
        z0_cm=200.0,
        phase_convention=convention,
        time_argument=TimeArgument.LUNAR,
        constituents=tuple(
            Constituent(id=cid, amplitude_cm=H, phase_lag_deg=kappa, doodson=a)
            for (cid, H, a), kappa in zip(_DIURNAL_SEMIDIURNAL, kappas)
        ),
    )


# Cosine-series phase lags; agree closely with the published daily tables.
ITSUKUSHIMA = _itsukushima(
    "Itsukushima (Miyajima)",
    PhaseConvention.COSINE,
    (160.3, 177.3, 354.0, 11.4, 45.3, 39.2),
)

# Phase lags as transcribed. The sheet does not state its phase convention or
# reference meridian.
ITSUKUSHIMA_JCG_RAW = _itsukushima(
    "Itsukushima (Miyajima) - JCG harmonic constants (as-is)",
    PhaseConvention.SINE,
    (201.0, 219.0, 219.0, 277.0, 310.0, 310.0),
)
