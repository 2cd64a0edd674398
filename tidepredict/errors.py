"""Exceptions raised by tidepredict."""


class TideError(ValueError):
    """Base class for every error raised by the prediction engine."""


class InvalidArgument(TideError):
    """An instant, duration or step passed by the caller cannot be used."""


class ConfigurationError(TideError):
    """A parameter profile is malformed or names an unknown convention."""
