"""
Linear projection from drawing space onto geographic coordinates.

Drawing space has its origin at the top-left and y growing downward;
latitude grows upward.  The projection therefore maps

    x in [0, width]   ->  longitude in [west, east]
    y in [0, height]  ->  latitude  in [north, south]   (range inverted)

Each axis is an independent, unclamped linear scale: points drawn outside
the canvas extrapolate past the bounds rather than being pinned to them.
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from conversion_errors import InvalidArgumentError
from path_segments import Point


@dataclass(frozen=True)
class Dimensions:
    """Drawing-space extent in user units."""
    width: float
    height: float


@dataclass(frozen=True)
class Bounds:
    """Geographic placement rectangle (degrees).

    No ordering is enforced: south > north or west > east simply mirrors
    the drawing on that axis.
    """
    north: float
    east: float
    south: float
    west: float

    @classmethod
    def from_corners(cls, north_east: Sequence, south_west: Sequence) -> "Bounds":
        """Build from ``[north, east]`` and ``[south, west]`` lat/lon pairs."""
        try:
            north, east = (float(v) for v in north_east)
            south, west = (float(v) for v in south_west)
        except (TypeError, ValueError):
            raise InvalidArgumentError(
                f"Bounds corners must be [lat, lon] pairs, got {north_east!r} and {south_west!r}"
            )
        return cls(north=north, east=east, south=south, west=west)

    @classmethod
    def coerce(cls, bounds) -> "Bounds":
        """Accept a Bounds or the ``[[north, east], [south, west]]`` pair form."""
        if isinstance(bounds, cls):
            return bounds
        try:
            north_east, south_west = bounds
        except (TypeError, ValueError):
            raise InvalidArgumentError(
                f"Bounds must be a Bounds or [[north, east], [south, west]], got {bounds!r}"
            )
        return cls.from_corners(north_east, south_west)


class LinearScale:
    """Affine map from a numeric domain onto a numeric range.

    Interpolates as ``r0 * (1 - t) + r1 * t`` so both ends of the domain
    land exactly on the ends of the range.
    """

    def __init__(self, domain: Tuple[float, float], range_: Tuple[float, float]):
        self.domain = (float(domain[0]), float(domain[1]))
        self.range = (float(range_[0]), float(range_[1]))

    def __call__(self, value: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        span = d1 - d0
        if span == 0:
            # Degenerate domain: every input sits at the middle of the range
            return r0 * 0.5 + r1 * 0.5
        t = (value - d0) / span
        return r0 * (1 - t) + r1 * t

    def __repr__(self) -> str:
        return f"LinearScale(domain={self.domain}, range={self.range})"


@dataclass(frozen=True)
class Projection:
    """Pair of per-axis scales shared by every element of one conversion."""
    map_x: LinearScale
    map_y: LinearScale

    def project(self, point: Point) -> List[float]:
        return project(point, self)


def build_projection(bounds: Bounds, dims: Dimensions) -> Projection:
    """Map the drawing's [0, width] x [0, height] box onto *bounds*."""
    map_x = LinearScale((0.0, dims.width), (bounds.west, bounds.east))
    # Inverted: y = 0 is the top of the drawing, i.e. the northern edge
    map_y = LinearScale((0.0, dims.height), (bounds.north, bounds.south))
    return Projection(map_x=map_x, map_y=map_y)


def project(point: Point, projection: Projection) -> List[float]:
    """Project a drawing-space (x, y) into a GeoJSON ``[lon, lat]`` pair."""
    return [projection.map_x(point[0]), projection.map_y(point[1])]
