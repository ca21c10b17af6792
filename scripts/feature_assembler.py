"""
GeoJSON feature assembly.

Turns one element's flattened path into a single GeoJSON Feature: a
LineString for open polylines, otherwise a single-ring Polygon.
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from coordinate_projector import Projection, project
from path_segments import ClosePath, LineTo, MoveTo, PathSegment, Point

logger = logging.getLogger(__name__)

# Element kinds drawn as open lines; everything else is a closed shape
OPEN_POLYLINE_KINDS = frozenset({"polyline"})

AttributeLookup = Callable[[str], Optional[str]]


@dataclass
class Feature:
    """One GeoJSON feature."""
    geometry_kind: str
    coordinates: list
    properties: Dict[str, str] = field(default_factory=dict)

    def to_geojson(self) -> Dict:
        return {
            "type": "Feature",
            "properties": dict(self.properties),
            "geometry": {
                "type": self.geometry_kind,
                "coordinates": copy.deepcopy(self.coordinates),
            },
        }


def normalize_kind(kind: str) -> str:
    """Lower-case element kind with any ``{namespace}`` prefix removed."""
    kind = str(kind)
    if "}" in kind:
        kind = kind.split("}", 1)[1]
    return kind.lower()


def extract_coordinates(flattened_path: Sequence[PathSegment]) -> List[Point]:
    """One drawing-space coordinate per segment.

    A ClosePath repeats the path's first coordinate so the ring closes,
    as GeoJSON requires.
    """
    coords: List[Point] = []
    first: Optional[Point] = None
    for seg in flattened_path:
        if isinstance(seg, (MoveTo, LineTo)):
            if first is None:
                first = seg.point
            coords.append(seg.point)
        elif isinstance(seg, ClosePath):
            if first is None:
                logger.debug("Ignoring close before any point was drawn")
                continue
            coords.append(first)
    return coords


def collect_properties(requested_attrs: Iterable[str],
                       attr_lookup: AttributeLookup) -> Dict[str, str]:
    """Look up each requested attribute, keeping only non-empty values.

    Values come back as strings, as SVG attributes are; a numeric 0 is
    kept as "0".
    """
    properties = {}
    for name in requested_attrs:
        value = attr_lookup(name)
        if value is None or value == "":
            continue
        properties[name] = str(value)
    return properties


def assemble_feature(element_kind: str,
                     flattened_path: Sequence[PathSegment],
                     projection: Projection,
                     requested_attrs: Iterable[str],
                     attr_lookup: AttributeLookup) -> Feature:
    """Build the Feature for one flattened element.

    An empty path still yields a feature (with empty coordinates); deciding
    whether to keep it is up to the caller.
    """
    mapped = [project(point, projection) for point in extract_coordinates(flattened_path)]
    properties = collect_properties(requested_attrs, attr_lookup)

    if normalize_kind(element_kind) in OPEN_POLYLINE_KINDS:
        return Feature("LineString", mapped, properties)
    return Feature("Polygon", [mapped], properties)
