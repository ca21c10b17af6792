"""
Test suite for svg_to_geojson.py
End-to-end conversions plus the normalized path-data adapter.
"""

import json
import sys
import unittest

from conversion_errors import (
    ConversionError,
    InvalidArgumentError,
    MissingDimensionsError,
    PathStateError,
)
from coordinate_projector import Bounds, Dimensions
from path_segments import ClosePath, CurveTo, LineTo, MoveTo, segments_from_path_data
from svg_to_geojson import DrawingElement, convert, format_geojson


RECT_PATH = [
    MoveTo((0.0, 0.0)),
    LineTo((100.0, 0.0)),
    LineTo((100.0, 100.0)),
    LineTo((0.0, 100.0)),
    ClosePath(),
]

TEN_DEGREE_BOUNDS = Bounds(north=10.0, east=10.0, south=0.0, west=0.0)


class TestSegmentsFromPathData(unittest.TestCase):
    """Test the getPathData-style record adapter."""

    def test_converts_normalized_records(self):
        records = [
            {"type": "M", "values": [0, 0]},
            {"type": "C", "values": [1, 2, 3, 4, 5, 6]},
            {"type": "L", "values": ["7.5", "8"]},
            {"type": "Z", "values": []},
        ]
        self.assertEqual(segments_from_path_data(records), [
            MoveTo((0.0, 0.0)),
            CurveTo((1.0, 2.0), (3.0, 4.0), (5.0, 6.0)),
            LineTo((7.5, 8.0)),
            ClosePath(),
        ])

    def test_close_without_values_key(self):
        self.assertEqual(segments_from_path_data([{"type": "Z"}]), [ClosePath()])

    def test_rejects_unnormalized_commands(self):
        for seg_type in ("m", "Q", "A", "H"):
            with self.assertRaises(InvalidArgumentError):
                segments_from_path_data([{"type": seg_type, "values": [1, 2]}])

    def test_rejects_wrong_value_count(self):
        with self.assertRaises(InvalidArgumentError):
            segments_from_path_data([{"type": "C", "values": [1, 2, 3, 4]}])

    def test_rejects_non_numeric_values(self):
        with self.assertRaises(InvalidArgumentError):
            segments_from_path_data([{"type": "L", "values": ["a", "b"]}])

    def test_rejects_non_mapping_records(self):
        with self.assertRaises(InvalidArgumentError):
            segments_from_path_data([["M", 0, 0]])


class TestConvert(unittest.TestCase):
    """Test the top-level conversion."""

    def test_rectangle_end_to_end(self):
        collection = convert(
            TEN_DEGREE_BOUNDS,
            [DrawingElement("rect", RECT_PATH)],
            complexity=5,
            width="100", height="100",
        )
        self.assertEqual(collection["type"], "FeatureCollection")
        self.assertEqual(len(collection["features"]), 1)

        feature = collection["features"][0]
        self.assertEqual(feature["type"], "Feature")
        self.assertEqual(feature["geometry"]["type"], "Polygon")
        ring = feature["geometry"]["coordinates"][0]
        self.assertEqual(ring, [[0.0, 10.0], [10.0, 10.0], [10.0, 0.0], [0.0, 0.0], [0.0, 10.0]])

    def test_horizontal_curve_end_to_end(self):
        path = [MoveTo((0.0, 0.0)), CurveTo((33.0, 0.0), (66.0, 0.0), (100.0, 0.0))]
        collection = convert(
            [[1, 1], [0, 0]],
            [DrawingElement("polyline", path)],
            complexity=3,
            width=100, height=100,
        )
        coords = collection["features"][0]["geometry"]["coordinates"]
        self.assertEqual(len(coords), 1 + 3)
        self.assertEqual(coords[0], [0.0, 1.0])
        self.assertEqual(coords[-1], [1.0, 1.0])
        for lon, lat in coords:
            self.assertEqual(lat, 1.0)
        self.assertAlmostEqual(coords[1][0], 1 / 3, places=6)
        self.assertAlmostEqual(coords[2][0], 2 / 3, places=6)

    def test_features_follow_input_order(self):
        elements = [
            DrawingElement("rect", RECT_PATH, {"id": "first"}),
            DrawingElement("polyline", RECT_PATH[:3], {"id": "second"}),
            DrawingElement("path", RECT_PATH, {"id": "third"}),
        ]
        collection = convert(TEN_DEGREE_BOUNDS, elements, requested_attrs=["id"],
                             dimensions=Dimensions(100.0, 100.0))
        ids = [f["properties"]["id"] for f in collection["features"]]
        self.assertEqual(ids, ["first", "second", "third"])

    def test_missing_attribute_is_omitted(self):
        elements = [DrawingElement("rect", RECT_PATH, {"id": "plot", "title": ""})]
        collection = convert(TEN_DEGREE_BOUNDS, elements, requested_attrs=["id", "title", "name"],
                             width=100, height=100)
        self.assertEqual(collection["features"][0]["properties"], {"id": "plot"})

    def test_unsupported_kinds_are_skipped(self):
        elements = [
            DrawingElement("g", []),
            DrawingElement("text", [MoveTo((1.0, 1.0))]),
            DrawingElement("circle", RECT_PATH),
        ]
        collection = convert(TEN_DEGREE_BOUNDS, elements, width=100, height=100)
        self.assertEqual(len(collection["features"]), 1)

    def test_accepts_mappings_with_path_data_records(self):
        element = {
            "kind": "polygon",
            "path": [
                {"type": "M", "values": [0, 0]},
                {"type": "L", "values": [100, 0]},
                {"type": "L", "values": [100, 100]},
                {"type": "Z", "values": []},
            ],
            "attributes": {"class": "lake"},
        }
        collection = convert(TEN_DEGREE_BOUNDS, [element], requested_attrs=["class"],
                             view_box="0 0 100 100")
        feature = collection["features"][0]
        self.assertEqual(feature["properties"], {"class": "lake"})
        ring = feature["geometry"]["coordinates"][0]
        self.assertEqual(ring[0], ring[-1])
        self.assertEqual(ring[2], [10.0, 0.0])

    def test_view_box_used_when_size_unusable(self):
        collection = convert(TEN_DEGREE_BOUNDS, [DrawingElement("rect", RECT_PATH)],
                             width="100%", height="100%", view_box="0 0 200 200")
        ring = collection["features"][0]["geometry"]["coordinates"][0]
        self.assertEqual(ring[2], [5.0, 5.0])

    def test_zero_complexity_fails_even_without_elements(self):
        with self.assertRaises(InvalidArgumentError):
            convert(TEN_DEGREE_BOUNDS, [], complexity=0, width=100, height=100)

    def test_missing_dimensions_fails(self):
        with self.assertRaises(MissingDimensionsError):
            convert(TEN_DEGREE_BOUNDS, [DrawingElement("rect", RECT_PATH)])

    def test_curve_without_start_names_the_element(self):
        elements = [
            DrawingElement("rect", RECT_PATH),
            DrawingElement("path", [CurveTo((1.0, 1.0), (2.0, 2.0), (3.0, 3.0))]),
        ]
        with self.assertRaises(PathStateError) as ctx:
            convert(TEN_DEGREE_BOUNDS, elements, width=100, height=100)
        self.assertIn("Element 1 (path)", str(ctx.exception))

    def test_non_finite_curve_names_the_element(self):
        elements = [
            DrawingElement("rect", RECT_PATH),
            DrawingElement("path", [MoveTo((0.0, 0.0)),
                                    CurveTo((1.0, 1.0), (2.0, 2.0), (float("inf"), 0.0))]),
        ]
        with self.assertRaises(InvalidArgumentError) as ctx:
            convert(TEN_DEGREE_BOUNDS, elements, width=100, height=100)
        self.assertIn("Element 1 (path)", str(ctx.exception))
        self.assertIn("segment 1", str(ctx.exception))

    def test_numeric_zero_attribute_is_kept(self):
        element = {"kind": "rect", "path": RECT_PATH, "attributes": {"data-floor": 0, "id": ""}}
        collection = convert(TEN_DEGREE_BOUNDS, [element], requested_attrs=["data-floor", "id"],
                             width=100, height=100)
        self.assertEqual(collection["features"][0]["properties"], {"data-floor": "0"})

    def test_errors_share_a_base_class(self):
        with self.assertRaises(ConversionError):
            convert(TEN_DEGREE_BOUNDS, [{"no_kind": True}], width=100, height=100)

    def test_logs_summary(self):
        with self.assertLogs("svg_to_geojson", level="INFO") as logs:
            convert(TEN_DEGREE_BOUNDS, [DrawingElement("rect", RECT_PATH)], width=100, height=100)
        self.assertTrue(any("1 feature(s)" in line for line in logs.output))


class TestFormatGeoJSON(unittest.TestCase):
    """Test JSON text output."""

    def setUp(self):
        elements = [
            DrawingElement("rect", RECT_PATH, {"id": "a"}),
            DrawingElement("polyline", RECT_PATH[:3]),
        ]
        self.collection = convert(TEN_DEGREE_BOUNDS, elements, requested_attrs=["id"],
                                  width=100, height=100)

    def test_output_parses_back_to_same_collection(self):
        self.assertEqual(json.loads(format_geojson(self.collection)), self.collection)

    def test_coordinates_kept_on_one_line(self):
        lines = format_geojson(self.collection).splitlines()
        coord_lines = [line for line in lines if '"coordinates"' in line]
        self.assertEqual(len(coord_lines), 2)
        self.assertIn("[[[0.0, 10.0]", coord_lines[0])

    def test_empty_collection(self):
        empty = {"type": "FeatureCollection", "features": []}
        self.assertEqual(json.loads(format_geojson(empty)), empty)


def run_tests():
    """Run all tests."""
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    suite.addTests(loader.loadTestsFromTestCase(TestSegmentsFromPathData))
    suite.addTests(loader.loadTestsFromTestCase(TestConvert))
    suite.addTests(loader.loadTestsFromTestCase(TestFormatGeoJSON))

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    return result.wasSuccessful()


if __name__ == "__main__":
    success = run_tests()
    sys.exit(0 if success else 1)
