"""
Convert normalized SVG drawing elements into a GeoJSON FeatureCollection.

The drawing is stretched over a geographic bounding box: its top-left
corner lands on (west, north) and its bottom-right corner on (east, south).
Curves are flattened into straight lines first, since GeoJSON geometries
are made of straight segments only.

Finding the elements in an SVG document and normalizing their path data
(absolute M/L/C/Z commands) happens upstream; this module takes those
elements as input:

    from svg_to_geojson import DrawingElement, convert

    collection = convert(
        [[10, 10], [0, 0]],                     # [[north, east], [south, west]]
        [DrawingElement("rect", segments, {"id": "plot-7"})],
        complexity=5,
        requested_attrs=["id"],
        width="100", height="100",
    )
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from conversion_errors import InvalidArgumentError, PathStateError
from coordinate_projector import Bounds, Dimensions, build_projection
from curve_flattener import (
    ARC_LENGTH_TOLERANCE,
    DEFAULT_COMPLEXITY,
    flatten,
    validate_complexity,
)
from feature_assembler import assemble_feature, normalize_kind
from path_segments import PathSegment, segments_from_path_data
from svg_dimensions import resolve_dimensions

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

# Drawable element kinds; containers and non-shapes (g, defs, text) are skipped
SUPPORTED_ELEMENT_KINDS = frozenset({
    "path",
    "rect",
    "polygon",
    "circle",
    "ellipse",
    "polyline",
})


@dataclass
class DrawingElement:
    """One drawable element handed over by the path normalizer."""
    kind: str
    path: List[PathSegment]
    attributes: Dict[str, str] = field(default_factory=dict)

    def get_attribute(self, name: str) -> Optional[str]:
        return self.attributes.get(name)

    @classmethod
    def coerce(cls, element) -> "DrawingElement":
        """Accept a DrawingElement or a ``{kind, path, attributes}`` mapping.

        The path may hold PathSegments or normalized path-data records
        (``{"type": "C", "values": [...]}``).
        """
        if isinstance(element, cls):
            return element
        if not isinstance(element, Mapping) or "kind" not in element:
            raise InvalidArgumentError(
                f"Element must be a DrawingElement or a mapping with 'kind', got {element!r}"
            )
        path = list(element.get("path") or [])
        if any(isinstance(seg, Mapping) for seg in path):
            path = segments_from_path_data(path)
        return cls(
            kind=element["kind"],
            path=path,
            attributes=dict(element.get("attributes") or {}),
        )


def is_supported_kind(kind: str) -> bool:
    return normalize_kind(kind) in SUPPORTED_ELEMENT_KINDS


def convert(bounds,
            elements: Iterable,
            complexity: int = DEFAULT_COMPLEXITY,
            requested_attrs: Sequence[str] = (),
            *,
            width=None,
            height=None,
            view_box=None,
            dimensions: Optional[Dimensions] = None,
            tolerance: float = ARC_LENGTH_TOLERANCE) -> Dict:
    """Convert drawing elements into a GeoJSON FeatureCollection dict.

    Args:
        bounds: a Bounds, or ``[[north, east], [south, west]]``.
        elements: DrawingElements (or equivalent mappings) in document order.
        complexity: number of straight lines each curve becomes (>= 1).
        requested_attrs: attribute names copied into each feature's
            properties when present and non-empty.
        width, height, view_box: the drawing's root attributes, used to
            work out its size unless *dimensions* is given.
        dimensions: an already resolved drawing size.
        tolerance: absolute error allowed when measuring curve lengths.

    Raises:
        InvalidArgumentError: bad complexity, bounds or element data,
            including a curve with a non-finite coordinate.
        MissingDimensionsError: no usable drawing size.
        PathStateError: an element has a curve with no start point.
    """
    complexity = validate_complexity(complexity)
    bounds = Bounds.coerce(bounds)
    if dimensions is None:
        dimensions = resolve_dimensions(width, height, view_box)
    projection = build_projection(bounds, dimensions)
    requested_attrs = list(requested_attrs)

    features = []
    skipped = 0
    for index, raw in enumerate(elements):
        element = DrawingElement.coerce(raw)
        if not is_supported_kind(element.kind):
            logger.debug("Skipping element %d: unsupported kind %r", index, element.kind)
            skipped += 1
            continue

        try:
            flattened = flatten(element.path, complexity, tolerance)
        except PathStateError as exc:
            raise PathStateError(f"Element {index} ({element.kind}): {exc}") from exc
        except InvalidArgumentError as exc:
            raise InvalidArgumentError(f"Element {index} ({element.kind}): {exc}") from exc

        feature = assemble_feature(element.kind, flattened, projection,
                                   requested_attrs, element.get_attribute)
        features.append(feature.to_geojson())

    logger.info(
        "Converted %d element(s) into %d feature(s) (%d skipped) over %gx%g drawing",
        len(features) + skipped, len(features), skipped,
        dimensions.width, dimensions.height,
    )
    return {"type": "FeatureCollection", "features": features}


def format_geojson(collection: Dict) -> str:
    """Render a FeatureCollection as JSON text, one line per coordinate array."""
    lines = ['{', '  "type": "FeatureCollection",', '  "features": [']
    features = collection.get("features", [])
    for i, feature in enumerate(features):
        geometry = feature["geometry"]
        lines.append('    {')
        lines.append('      "type": "Feature",')
        lines.append(f'      "properties": {json.dumps(feature.get("properties", {}))},')
        lines.append('      "geometry": {')
        lines.append(f'        "type": {json.dumps(geometry["type"])},')
        lines.append(f'        "coordinates": {json.dumps(geometry["coordinates"])}')
        lines.append('      }')
        lines.append('    },' if i < len(features) - 1 else '    }')
    lines.append('  ]')
    lines.append('}')
    return "\n".join(lines) + "\n"
