"""Exceptions raised by the sky map engine."""


class SkyMapError(Exception):
    """Base class for all sky map errors."""


class InvalidObserverParams(SkyMapError, ValueError):
    """Latitude, longitude, fov or date outside the accepted range.

    Raised before any state is touched, so the caller can retry with
    corrected values.
    """


class MissingDataError(SkyMapError, LookupError):
    """A catalog or label needed for drawing is not loaded."""
