"""
Cubic curve flattening.

Replaces every cubic Bezier (C) segment in a normalized path with a run of
straight L segments, so the path can be written out as GeoJSON, which has
no notion of curves.  Each curve becomes exactly *complexity* lines whose
vertices are spaced at equal distances along the curve, with the final
vertex placed exactly on the curve's declared end point.

Arc length is integrated numerically from the curve's speed |B'(t)|:

    L(t) = integral_0^t |B'(u)| du

L(t) is tabulated once per curve over a grid of equal parameter cells, and
each sample parameter is found by inverting L(t) with a bracketing root
finder inside the one cell that holds it.
"""

import logging
import math
import numbers
from typing import List, NamedTuple, Optional, Sequence, Tuple

import numpy as np
from scipy.integrate import quad
from scipy.optimize import brentq

from conversion_errors import InvalidArgumentError, PathStateError
from path_segments import ClosePath, CurveTo, LineTo, MoveTo, PathSegment, Point

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Sampling configuration
# ---------------------------------------------------------------------------

DEFAULT_COMPLEXITY = 5          # lines per curve when the caller does not say
ARC_LENGTH_TOLERANCE = 1e-9     # absolute error allowed in a curve's length
ZERO_LENGTH_EPSILON = 1e-9      # curves shorter than this are dropped
QUAD_SUBINTERVALS = 100         # scipy.integrate.quad subdivision limit
ROOT_XTOL = 1e-12               # parameter tolerance when inverting L(t)
LENGTH_TABLE_MIN_CELLS = 16     # parameter cells in the L(t) table; more for large complexity


class PenState(NamedTuple):
    """Pen position carried from one segment to the next while flattening."""
    current_point: Optional[Point] = None
    subpath_start: Optional[Point] = None


class LengthTable(NamedTuple):
    """L(t) tabulated at equally spaced parameters."""
    knots: np.ndarray        # parameter at each cell boundary, 0 .. 1
    pieces: List[float]      # length of each cell
    cumulative: np.ndarray   # length from t=0 to each knot
    tolerance: float         # absolute error allowed per cell

    @property
    def total(self) -> float:
        return float(self.cumulative[-1])


# ---------------------------------------------------------------------------
# Bezier helpers
# ---------------------------------------------------------------------------

def _check_finite(*points: Point) -> None:
    for point in points:
        if not all(math.isfinite(v) for v in point):
            raise InvalidArgumentError(
                f"Curve has a non-finite coordinate {tuple(point)!r}"
            )


def _control_polygon(anchor: Point, control1: Point, control2: Point, end: Point) -> np.ndarray:
    return np.array([anchor, control1, control2, end], dtype=float)


def _bezier_point(ctrl: np.ndarray, t: float) -> np.ndarray:
    mt = 1.0 - t
    return (mt**3 * ctrl[0] + 3 * mt**2 * t * ctrl[1]
            + 3 * mt * t**2 * ctrl[2] + t**3 * ctrl[3])


def _derivative_coefficients(ctrl: np.ndarray) -> Tuple[float, ...]:
    """(ax, bx, cx, ay, by, cy) with B'(t) = a t^2 + b t + c on each axis."""
    d0, d1, d2 = 3.0 * np.diff(ctrl, axis=0)
    a = d0 - 2.0 * d1 + d2
    b = 2.0 * (d1 - d0)
    c = d0
    return (float(a[0]), float(b[0]), float(c[0]),
            float(a[1]), float(b[1]), float(c[1]))


def _bezier_speed(t: float, ax: float, bx: float, cx: float,
                  ay: float, by: float, cy: float) -> float:
    """|B'(t)| from the derivative coefficients."""
    # Plain floats: quad calls this hundreds of times per integral
    return math.hypot((ax * t + bx) * t + cx, (ay * t + by) * t + cy)


def _arc_length(coeffs: Tuple[float, ...], t0: float, t1: float, tolerance: float) -> float:
    """Length of the curve between parameters t0 and t1."""
    if t1 <= t0:
        return 0.0
    length, _ = quad(_bezier_speed, t0, t1, args=coeffs,
                     epsabs=tolerance, limit=QUAD_SUBINTERVALS)
    return length


def _length_table(coeffs: Tuple[float, ...], cells: int, tolerance: float) -> LengthTable:
    cell_tolerance = tolerance / cells
    knots = np.linspace(0.0, 1.0, cells + 1)
    pieces = [_arc_length(coeffs, float(t0), float(t1), cell_tolerance)
              for t0, t1 in zip(knots[:-1], knots[1:])]
    cumulative = np.concatenate(([0.0], np.cumsum(pieces)))
    return LengthTable(knots, pieces, cumulative, cell_tolerance)


def _parameters_at_lengths(
    coeffs: Tuple[float, ...], table: LengthTable, distances: Sequence[float],
) -> List[float]:
    """Invert L(t) for each distance in *distances*.

    The table picks the cell holding each distance, so every root search
    only integrates within that one cell.
    """
    last_cell = len(table.pieces) - 1
    params = []
    for s in distances:
        cell = int(np.searchsorted(table.cumulative, s, side="right")) - 1
        cell = min(max(cell, 0), last_cell)
        t0, t1 = float(table.knots[cell]), float(table.knots[cell + 1])
        remaining = s - float(table.cumulative[cell])
        if remaining <= 0:
            params.append(t0)
            continue
        if remaining >= table.pieces[cell]:
            params.append(t1)
            continue
        params.append(brentq(
            lambda u: _arc_length(coeffs, t0, u, table.tolerance) - remaining,
            t0, t1, xtol=ROOT_XTOL,
        ))
    return params
# ---------------------------------------------------------------------------
# Public curve helpers
# ---------------------------------------------------------------------------

def validate_complexity(complexity) -> int:
    """Return *complexity* if it is an integer >= 1, else raise InvalidArgumentError."""
    if isinstance(complexity, bool) or not isinstance(complexity, numbers.Integral):
        raise InvalidArgumentError(
            f"complexity must be an integer >= 1, got {complexity!r}"
        )
    if complexity < 1:
        raise InvalidArgumentError(f"complexity must be >= 1, got {complexity}")
    return int(complexity)


def curve_length(anchor: Point, control1: Point, control2: Point, end: Point,
                 tolerance: float = ARC_LENGTH_TOLERANCE) -> float:
    """Total arc length of a cubic Bezier."""
    _check_finite(anchor, control1, control2, end)
    coeffs = _derivative_coefficients(_control_polygon(anchor, control1, control2, end))
    return _arc_length(coeffs, 0.0, 1.0, tolerance)


def point_at_length(anchor: Point, control1: Point, control2: Point, end: Point,
                    distance: float, tolerance: float = ARC_LENGTH_TOLERANCE) -> Point:
    """Point *distance* units along a cubic Bezier, measured from *anchor*.

    Distances outside [0, length] are clamped to the curve's ends.
    """
    _check_finite(anchor, control1, control2, end)
    ctrl = _control_polygon(anchor, control1, control2, end)
    coeffs = _derivative_coefficients(ctrl)
    table = _length_table(coeffs, LENGTH_TABLE_MIN_CELLS, tolerance)
    if distance <= 0 or table.total < ZERO_LENGTH_EPSILON:
        return anchor
    if distance >= table.total:
        return end
    (t,) = _parameters_at_lengths(coeffs, table, [distance])
    x, y = _bezier_point(ctrl, t)
    return (float(x), float(y))


def flatten_curve(anchor: Point, control1: Point, control2: Point, end: Point,
                  complexity: int = DEFAULT_COMPLEXITY,
                  tolerance: float = ARC_LENGTH_TOLERANCE) -> List[Point]:
    """Sample a cubic Bezier at *complexity* equal arc-length steps.

    Returns the *complexity* new vertices, excluding *anchor*.  The last
    vertex is *end* itself, never a resampled approximation of it.  A curve
    that starts where it ends, or has no measurable length, yields [].
    A non-finite coordinate raises InvalidArgumentError.
    """
    complexity = validate_complexity(complexity)
    _check_finite(anchor, control1, control2, end)
    if tuple(anchor) == tuple(end):
        return []

    ctrl = _control_polygon(anchor, control1, control2, end)
    coeffs = _derivative_coefficients(ctrl)
    table = _length_table(coeffs, max(LENGTH_TABLE_MIN_CELLS, complexity), tolerance)
    total = table.total
    if total < ZERO_LENGTH_EPSILON:
        return []

    targets = [total * k / complexity for k in range(1, complexity)]
    vertices: List[Point] = []
    for t in _parameters_at_lengths(coeffs, table, targets):
        x, y = _bezier_point(ctrl, t)
        vertices.append((float(x), float(y)))
    vertices.append(end)
    return vertices


# ---------------------------------------------------------------------------
# Path flattening
# ---------------------------------------------------------------------------

def _flatten_step(
    pen: PenState, seg: PathSegment, index: int, complexity: int, tolerance: float,
) -> Tuple[List[PathSegment], PenState]:
    """Flatten one segment; return the segments to emit and the new pen state."""
    if isinstance(seg, MoveTo):
        return [seg], PenState(seg.point, seg.point)

    if isinstance(seg, LineTo):
        start = pen.subpath_start if pen.subpath_start is not None else seg.point
        return [seg], PenState(seg.point, start)

    if isinstance(seg, ClosePath):
        # Closing returns the pen to the start of the subpath
        return [seg], PenState(pen.subpath_start, pen.subpath_start)

    if isinstance(seg, CurveTo):
        if pen.current_point is None:
            raise PathStateError(
                f"Curve segment {index} has no current point to start from "
                f"(path must begin with a move)"
            )
        try:
            vertices = flatten_curve(pen.current_point, seg.control1, seg.control2,
                                     seg.end, complexity, tolerance)
        except InvalidArgumentError as exc:
            raise InvalidArgumentError(f"Curve segment {index}: {exc}") from exc
        if not vertices:
            logger.debug("Dropping zero-length curve at segment %d", index)
        start = pen.subpath_start if pen.subpath_start is not None else pen.current_point
        return [LineTo(v) for v in vertices], PenState(seg.end, start)

    raise InvalidArgumentError(
        f"Segment {index} is not a path segment: {type(seg).__name__}"
    )


def flatten(segments: Sequence[PathSegment], complexity: int = DEFAULT_COMPLEXITY,
            tolerance: float = ARC_LENGTH_TOLERANCE) -> List[PathSegment]:
    """Replace every CurveTo in *segments* with *complexity* LineTo segments.

    MoveTo, LineTo and ClosePath pass through unchanged.  Raises
    InvalidArgumentError for a complexity below 1 or a curve with a
    non-finite coordinate, and PathStateError for a curve that appears
    before any point has been set.
    """
    complexity = validate_complexity(complexity)

    flattened: List[PathSegment] = []
    pen = PenState()
    for index, seg in enumerate(segments):
        emitted, pen = _flatten_step(pen, seg, index, complexity, tolerance)
        flattened.extend(emitted)
    return flattened
