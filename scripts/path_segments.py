"""
Normalized path segment types.

A drawing element's path arrives here already normalized: absolute
coordinates, and only the four commands M, L, C and Z.  Relative commands,
shorthand curves, quadratics and arcs are the normalizer's problem.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Tuple, Union

from conversion_errors import InvalidArgumentError

Point = Tuple[float, float]


@dataclass(frozen=True)
class MoveTo:
    """Start a new subpath at *point* without drawing."""
    point: Point


@dataclass(frozen=True)
class LineTo:
    """Straight segment from the current point to *point*."""
    point: Point


@dataclass(frozen=True)
class CurveTo:
    """Cubic Bezier from the current point to *end*."""
    control1: Point
    control2: Point
    end: Point


@dataclass(frozen=True)
class ClosePath:
    """Close the current subpath."""


PathSegment = Union[MoveTo, LineTo, CurveTo, ClosePath]

# Number of values each normalized command carries
PATH_DATA_ARITY: Dict[str, int] = {"M": 2, "L": 2, "C": 6, "Z": 0}


def _pairs(values: Sequence[float]) -> List[Point]:
    return [(values[i], values[i + 1]) for i in range(0, len(values), 2)]


def segments_from_path_data(path_data: Iterable[Dict]) -> List[PathSegment]:
    """Convert getPathData({normalize: true}) style records into PathSegments.

    Each record is a mapping ``{"type": "M" | "L" | "C" | "Z", "values": [...]}``
    with absolute coordinates.  Values are coerced with float() so numeric
    strings are accepted.

    Raises InvalidArgumentError for unknown command types, the wrong number
    of values, or values that are not numbers.
    """
    segments: List[PathSegment] = []
    for index, record in enumerate(path_data):
        try:
            seg_type = record["type"]
            raw_values = record.get("values", [])
        except (KeyError, TypeError, AttributeError):
            raise InvalidArgumentError(
                f"Path data record {index} is not a {{type, values}} mapping: {record!r}"
            )

        arity = PATH_DATA_ARITY.get(seg_type)
        if arity is None:
            raise InvalidArgumentError(
                f"Path data record {index}: unsupported command {seg_type!r} "
                f"(normalized paths only contain {', '.join(PATH_DATA_ARITY)})"
            )
        if len(raw_values) != arity:
            raise InvalidArgumentError(
                f"Path data record {index}: {seg_type} takes {arity} values, "
                f"got {len(raw_values)}"
            )
        try:
            values = [float(v) for v in raw_values]
        except (TypeError, ValueError):
            raise InvalidArgumentError(
                f"Path data record {index}: non-numeric values {raw_values!r}"
            )

        if seg_type == "M":
            segments.append(MoveTo(_pairs(values)[0]))
        elif seg_type == "L":
            segments.append(LineTo(_pairs(values)[0]))
        elif seg_type == "C":
            c1, c2, end = _pairs(values)
            segments.append(CurveTo(c1, c2, end))
        else:
            segments.append(ClosePath())

    return segments

