"""
Exception types raised by the SVG to GeoJSON conversion pipeline.

Every failure the pipeline can surface derives from ConversionError so
callers can catch the whole family in one place.  Zero-length curves,
absent attributes and non-drawable element kinds are not errors; they are
skipped silently (logged at DEBUG).
"""


class ConversionError(Exception):
    """Base class for all conversion failures."""


class InvalidArgumentError(ConversionError, ValueError):
    """Raised for a bad caller-supplied argument (complexity, path data, bounds)."""


class PathStateError(ConversionError, RuntimeError):
    """Raised when a curve segment has no current point to start from."""


class MissingDimensionsError(ConversionError, ValueError):
    """Raised when neither width/height nor viewBox give a usable drawing size."""
