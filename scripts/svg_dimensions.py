"""
Drawing size resolution.

The projection needs the drawing's width and height in user units.  They
come from the root element's width/height attributes when those are plain
numbers, otherwise from the last two numbers of its viewBox.
"""

import logging
import math
import re
from typing import Optional, Union

from conversion_errors import MissingDimensionsError
from coordinate_projector import Dimensions

logger = logging.getLogger(__name__)

AttributeValue = Union[str, float, int, None]

# "100", "100.5", "1e3", optionally followed by "px" (user units)
_LENGTH_PATTERN = re.compile(
    r'^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)\s*(?:px)?\s*$'
)
# viewBox numbers are separated by whitespace and/or a comma
_VIEWBOX_SEPARATOR = re.compile(r'\s*,\s*|\s+')


def _positive_finite(value: float) -> bool:
    return math.isfinite(value) and value > 0


def parse_length(value: AttributeValue) -> Optional[float]:
    """Parse a width/height attribute into a positive finite float.

    Accepts numbers and numeric strings with an optional ``px`` suffix.
    Returns None for anything else (absent, "auto", "100%", "10mm", "0", ...).
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _LENGTH_PATTERN.match(str(value))
        if not match:
            return None
        number = float(match.group(1))
    return number if _positive_finite(number) else None


def parse_view_box(view_box: AttributeValue) -> Optional[Dimensions]:
    """Return the width/height part of a viewBox, or None if it is unusable."""
    if not view_box or not isinstance(view_box, str):
        return None
    parts = [p for p in _VIEWBOX_SEPARATOR.split(view_box.strip()) if p]
    if len(parts) != 4:
        return None
    try:
        _min_x, _min_y, width, height = (float(p) for p in parts)
    except ValueError:
        return None
    if not (_positive_finite(width) and _positive_finite(height)):
        return None
    return Dimensions(width, height)


def resolve_dimensions(declared_width: AttributeValue = None,
                       declared_height: AttributeValue = None,
                       view_box: AttributeValue = None) -> Dimensions:
    """Work out the drawing's intrinsic size.

    Explicit width/height win when both are usable; the viewBox is only
    consulted otherwise.  Raises MissingDimensionsError when neither source
    gives two positive finite numbers.
    """
    width = parse_length(declared_width)
    height = parse_length(declared_height)
    if width is not None and height is not None:
        logger.debug("Using declared drawing size %gx%g", width, height)
        return Dimensions(width, height)

    dims = parse_view_box(view_box)
    if dims is not None:
        logger.debug("Width/height unusable (%r, %r); using viewBox size %gx%g",
                     declared_width, declared_height, dims.width, dims.height)
        return dims

    raise MissingDimensionsError(
        f"Cannot determine drawing size: width={declared_width!r}, "
        f"height={declared_height!r}, viewBox={view_box!r}"
    )
