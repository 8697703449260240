"""
Tests for the OpenCV-backed vision primitives.
"""

import os
import sys
import unittest

import numpy as np

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from quadtag import vision  # type: ignore


class TestVisionPrimitives(unittest.TestCase):
    """Image transforms return new buffers with the expected content."""

    def setUp(self):
        # Black square on white background
        self.gray = np.full((120, 120), 255, dtype=np.uint8)
        self.gray[30:90, 30:90] = 0

    def test_grayscale_from_bgr(self):
        bgr = np.dstack([self.gray] * 3)
        gray = vision.grayscale(bgr)
        self.assertEqual(gray.shape, (120, 120))
        np.testing.assert_array_equal(gray, self.gray)

    def test_grayscale_copies_single_channel(self):
        gray = vision.grayscale(self.gray)
        self.assertIsNot(gray, self.gray)
        gray[0, 0] = 7
        self.assertEqual(self.gray[0, 0], 255)

    def test_grayscale_from_bgra(self):
        bgra = np.dstack([self.gray] * 3 + [np.full_like(self.gray, 255)])
        self.assertEqual(vision.grayscale(bgra).shape, (120, 120))

    def test_adaptive_threshold_marks_dark_edges(self):
        binary = vision.adaptive_threshold(self.gray, 2, 7)
        self.assertEqual(binary[30, 60], 255)  # dark pixel on the edge
        self.assertEqual(binary[60, 60], 0)  # uniform dark interior
        self.assertEqual(binary[5, 5], 0)  # uniform background
        self.assertEqual(binary[29, 60], 0)  # bright side of the edge

    def test_find_contours(self):
        binary = vision.adaptive_threshold(self.gray, 2, 7)
        contours = vision.find_contours(binary)
        self.assertGreaterEqual(len(contours), 2)  # outer and inner boundary of the ring
        for contour in contours:
            self.assertEqual(contour.ndim, 2)
            self.assertEqual(contour.shape[1], 2)
        self.assertEqual(max(len(c) for c in contours), 4 * 59)

    def test_find_contours_empty(self):
        self.assertEqual(vision.find_contours(np.zeros((50, 50), dtype=np.uint8)), [])

    def test_polygon_measurements(self):
        rect = np.array([[0, 0], [40, 0], [40, 10], [0, 10]])
        self.assertAlmostEqual(vision.perimeter(rect), 100.0)
        self.assertAlmostEqual(vision.min_edge_length(rect), 10.0)
        self.assertTrue(vision.is_contour_convex(rect))
        self.assertFalse(vision.is_contour_convex(np.array([[0, 0], [40, 20], [0, 40], [20, 20]])))

    def test_warp_corner_order(self):
        """Corner 0 maps to the top-left of the canvas."""
        image = np.zeros((100, 100), dtype=np.uint8)
        image[0:50, 50:100] = 255  # top-right quadrant
        polygon = np.array([[99, 0], [99, 99], [0, 99], [0, 0]], dtype=np.float32)

        warped = vision.warp(image, polygon, 50)

        self.assertEqual(warped.shape, (50, 50))
        self.assertEqual(warped[5, 5], 255)
        self.assertEqual(warped[45, 45], 0)

    def test_otsu_between_modes(self):
        value = vision.otsu(self.gray)
        self.assertGreaterEqual(value, 0)
        self.assertLess(value, 255)

    def test_threshold_does_not_mutate(self):
        patch = np.array([[10, 200], [90, 160]], dtype=np.uint8)
        original = patch.copy()
        binary = vision.threshold(patch, 100)

        np.testing.assert_array_equal(binary, [[0, 255], [0, 255]])
        np.testing.assert_array_equal(patch, original)

    def test_count_non_zero(self):
        image = np.zeros((20, 20), dtype=np.uint8)
        image[0:10, 0:10] = 255
        self.assertEqual(vision.count_non_zero(image, vision.Rect(0, 0, 10, 10)), 100)
        self.assertEqual(vision.count_non_zero(image, vision.Rect(5, 5, 10, 10)), 25)

    def test_count_non_zero_clips(self):
        image = np.full((10, 10), 255, dtype=np.uint8)
        self.assertEqual(vision.count_non_zero(image, vision.Rect(5, 5, 10, 10)), 25)
        self.assertEqual(vision.count_non_zero(image, vision.Rect(20, 20, 5, 5)), 0)


if __name__ == "__main__":
    unittest.main()
