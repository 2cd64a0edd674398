"""
tidepredict is a small Python package for harmonic tide prediction at a single station.
Given a UTC instant and a station parameter profile (mean level, phase convention and
a set of harmonic constituents), it sums the astronomically modulated cosine (or sine)
terms of each constituent to predict the sea-surface height.
Astronomical arguments are evaluated at 0:00 UTC of each day and advanced through the
day; nodal factors follow the series given by P. Schureman in Special Publication 98.
Time series reuse the per-day astronomy across samples, and high and low tides are
located with Scipy's brentq.
"""

from . import astro, constituent, errors, nodal_corrections, tide
from .constituent import (
    ITSUKUSHIMA,
    ITSUKUSHIMA_JCG_RAW,
    Constituent,
    HarmonicTerm,
    PhaseConvention,
    SeasonalMeanModel,
    TideParameterProfile,
    TimeArgument,
)
from .errors import ConfigurationError, InvalidArgument, TideError
from .tide import Sample, Tide, height_at_instant, series

__all__ = [
    "astro",
    "constituent",
    "errors",
    "nodal_corrections",
    "tide",
    "ITSUKUSHIMA",
    "ITSUKUSHIMA_JCG_RAW",
    "Constituent",
    "HarmonicTerm",
    "PhaseConvention",
    "SeasonalMeanModel",
    "TideParameterProfile",
    "TimeArgument",
    "ConfigurationError",
    "InvalidArgument",
    "TideError",
    "Sample",
    "Tide",
    "height_at_instant",
    "series",
]
