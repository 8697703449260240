"""
Tests for marker decoding from rectified bit grids.
"""

import os
import sys
import unittest

import numpy as np

# Add src and tests directories to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))
sys.path.insert(0, os.path.dirname(__file__))

from quadtag.candidates import Candidate, Point  # type: ignore
from quadtag.decoder import Marker, MarkerDecoder, marker_id, rotate_bits, rotate_corners  # type: ignore
from quadtag.dictionary import PatternDictionary  # type: ignore
from synthetic import (  # type: ignore
    MARKER_108,
    MARKER_108_ID,
    MARKER_457,
    MARKER_457_ID,
    bits_from_rows,
    render_rectified,
)


class TestBitHelpers(unittest.TestCase):
    """Rotation, id packing and corner shifting."""

    def test_rotate_bits_clockwise(self):
        bits = np.array([[1, 2], [3, 4]])
        np.testing.assert_array_equal(rotate_bits(bits), [[3, 1], [4, 2]])

    def test_four_rotations_are_identity(self):
        bits = bits_from_rows(MARKER_108)
        rotated = bits
        for _ in range(4):
            rotated = rotate_bits(rotated)
        np.testing.assert_array_equal(rotated, bits)

    def test_marker_id_packs_columns(self):
        self.assertEqual(marker_id(bits_from_rows(MARKER_108)), MARKER_108_ID)
        self.assertEqual(marker_id(bits_from_rows(MARKER_457)), MARKER_457_ID)

    def test_marker_id_three_bit_grid(self):
        # Columns 1 and N-2 coincide for N=3: each row contributes its middle bit twice
        bits = np.array([[1, 0, 1], [0, 1, 0], [1, 1, 1]], dtype=np.uint8)
        self.assertEqual(marker_id(bits), 0b001111)

    def test_rotate_corners(self):
        corners = ("a", "b", "c", "d")
        self.assertEqual(rotate_corners(corners, 0), ("a", "b", "c", "d"))
        self.assertEqual(rotate_corners(corners, 1), ("b", "c", "d", "a"))
        self.assertEqual(rotate_corners(corners, 3), ("d", "a", "b", "c"))


class TestMarkerDecoder(unittest.TestCase):
    """Decoding synthetic rectified candidates."""

    def setUp(self):
        self.dictionary = PatternDictionary.aruco_original()
        self.decoder = MarkerDecoder(self.dictionary)
        self.candidate = Candidate(
            corners=(Point(10, 10), Point(110, 12), Point(108, 111), Point(9, 109)),
            perimeter=400.0,
        )

    def test_exact_match_decodes(self):
        image = render_rectified(bits_from_rows(MARKER_108))
        marker = self.decoder.decode(image, self.candidate)

        self.assertIsInstance(marker, Marker)
        self.assertEqual(marker.id, MARKER_108_ID)
        self.assertEqual(marker.corners, self.candidate.corners)

    def test_sample_bits(self):
        bits = bits_from_rows(MARKER_457)
        image = render_rectified(bits)
        self.assertTrue(self.decoder.has_black_border(image))
        np.testing.assert_array_equal(self.decoder.sample_bits(image), bits)

    def test_rotation_invariance(self):
        """Rotated grids decode to the same id with cyclically shifted corners."""
        image = render_rectified(bits_from_rows(MARKER_108))
        corners = self.candidate.corners

        for k in range(4):
            # np.rot90 turns the canvas counter-clockwise k times
            rotated = np.ascontiguousarray(np.rot90(image, k))
            marker = self.decoder.decode(rotated, self.candidate)

            self.assertIsNotNone(marker, f"rotation {k}")
            self.assertEqual(marker.id, MARKER_108_ID)
            expected = tuple(corners[(4 - k + i) % 4] for i in range(4))
            self.assertEqual(marker.corners, expected)

    def test_best_rotation_prefers_lowest_index(self):
        bits = bits_from_rows(MARKER_457)
        index, distance, oriented = self.decoder.best_rotation(bits)
        self.assertEqual((index, distance), (0, 0))
        np.testing.assert_array_equal(oriented, bits)

    def test_row_mismatch_rejected_in_every_rotation(self):
        bits = bits_from_rows(MARKER_108)
        bits[2, 0] = 1  # 11001 is at least one bit from every codeword
        image = render_rectified(bits)

        rotated_bits = bits
        for k in range(4):
            self.assertGreater(self.dictionary.matrix_distance(rotated_bits), 0)
            rotated_bits = rotate_bits(rotated_bits)

            rotated = np.ascontiguousarray(np.rot90(image, k))
            self.assertIsNone(self.decoder.decode(rotated, self.candidate))

    def test_white_border_cell_rejected(self):
        image = render_rectified(bits_from_rows(MARKER_108))
        image[0:14, 42:56] = 255  # top border, column 3

        self.assertFalse(self.decoder.has_black_border(image))
        self.assertIsNone(self.decoder.decode(image, self.candidate))

    def test_white_side_border_rejected(self):
        image = render_rectified(bits_from_rows(MARKER_108))
        image[56:70, 84:98] = 255  # right border, row 4
        self.assertIsNone(self.decoder.decode(image, self.candidate))

    def test_partially_white_border_cell_tolerated(self):
        """A border cell is white only when more than half its pixels are."""
        image = render_rectified(bits_from_rows(MARKER_108))
        image[0:6, 42:56] = 255  # 84 of 196 pixels

        marker = self.decoder.decode(image, self.candidate)
        self.assertIsNotNone(marker)
        self.assertEqual(marker.id, MARKER_108_ID)

    def test_all_white_canvas_rejected(self):
        image = np.full((98, 98), 255, dtype=np.uint8)
        self.assertIsNone(self.decoder.decode(image, self.candidate))

    def test_tiny_canvas_rejected(self):
        image = np.zeros((4, 4), dtype=np.uint8)
        self.assertIsNone(self.decoder.decode(image, self.candidate))

    def test_small_dictionary(self):
        dictionary = PatternDictionary(["101", "010"])
        decoder = MarkerDecoder(dictionary)
        # Symmetric grid: every rotation matches, rotation 0 wins the tie
        bits = np.array([[1, 0, 1], [0, 1, 0], [1, 0, 1]], dtype=np.uint8)
        marker = decoder.decode(render_rectified(bits, cell=10), self.candidate)

        self.assertIsNotNone(marker)
        self.assertEqual(marker.id, marker_id(bits))


class TestMarker(unittest.TestCase):
    """Marker value object helpers."""

    def setUp(self):
        self.marker = Marker(
            id=7,
            corners=(Point(0, 0), Point(10, 0), Point(10, 10), Point(0, 10)),
        )

    def test_center(self):
        self.assertEqual(self.marker.center, Point(5.0, 5.0))

    def test_as_array(self):
        array = self.marker.as_array()
        self.assertEqual(array.shape, (4, 2))
        self.assertEqual(array.dtype, np.float32)

    def test_to_dict(self):
        self.assertEqual(
            self.marker.to_dict(),
            {"id": 7, "corners": [[0, 0], [10, 0], [10, 10], [0, 10]]},
        )

    def test_immutable(self):
        with self.assertRaises(AttributeError):
            self.marker.id = 3


if __name__ == "__main__":
    unittest.main()
