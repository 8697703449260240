"""
Vision toolkit primitives.

Thin wrappers around OpenCV used by the marker pipeline: grayscale conversion,
adaptive thresholding, contour tracing, polygon simplification and measurement,
perspective rectification, Otsu thresholding and region pixel counting.

Every function returns a new array; inputs are never written to.
"""

from __future__ import annotations

from typing import List, NamedTuple

import cv2
import numpy as np


class Rect(NamedTuple):
    """Axis-aligned pixel region."""

    x: int
    y: int
    width: int
    height: int


def grayscale(image: np.ndarray) -> np.ndarray:
    """Convert a BGR/BGRA frame to a single-channel uint8 image."""
    if image.ndim == 2:
        gray = image.copy()
    elif image.shape[2] == 4:
        gray = cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    elif image.shape[2] == 1:
        gray = image[:, :, 0].copy()
    else:
        gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)

    if gray.dtype != np.uint8:
        gray = np.clip(gray, 0, 255).astype(np.uint8)
    return gray


def adaptive_threshold(gray: np.ndarray, kernel_size: int = 2, threshold: int = 7) -> np.ndarray:
    """Binarize with a local mean threshold.

    Pixels darker than the mean of their ``(2 * kernel_size + 1)`` neighbourhood
    by more than ``threshold`` become 255, everything else 0, so dark ink ends
    up as the non-zero foreground.

    Args:
        gray: Single-channel uint8 image
        kernel_size: Half-width of the averaging window
        threshold: Offset subtracted from the local mean

    Returns:
        Binary uint8 image
    """
    block_size = 2 * kernel_size + 1
    return cv2.adaptiveThreshold(
        gray,
        255,
        cv2.ADAPTIVE_THRESH_MEAN_C,
        cv2.THRESH_BINARY_INV,
        block_size,
        threshold,
    )


def find_contours(binary: np.ndarray) -> List[np.ndarray]:
    """Trace every contour of a binary image.

    Returns:
        List of ``(K, 2)`` int32 arrays, one point per traced boundary pixel
    """
    contours, _ = cv2.findContours(binary.copy(), cv2.RETR_LIST, cv2.CHAIN_APPROX_NONE)
    return [contour.reshape(-1, 2) for contour in contours]


def approx_poly_dp(contour: np.ndarray, epsilon: float) -> np.ndarray:
    """Simplify a closed contour with Douglas-Peucker."""
    points = np.asarray(contour, dtype=np.int32).reshape(-1, 1, 2)
    return cv2.approxPolyDP(points, epsilon, True).reshape(-1, 2)


def is_contour_convex(polygon: np.ndarray) -> bool:
    points = np.asarray(polygon, dtype=np.int32).reshape(-1, 1, 2)
    return bool(cv2.isContourConvex(points))


def min_edge_length(polygon: np.ndarray) -> float:
    """Length of the shortest edge of a closed polygon."""
    points = np.asarray(polygon, dtype=np.float64).reshape(-1, 2)
    edges = np.roll(points, -1, axis=0) - points
    return float(np.sqrt((edges ** 2).sum(axis=1)).min())


def perimeter(polygon: np.ndarray) -> float:
    points = np.asarray(polygon, dtype=np.float32).reshape(-1, 1, 2)
    return float(cv2.arcLength(points, True))


def warp(image: np.ndarray, polygon: np.ndarray, size: int) -> np.ndarray:
    """Perspective-rectify a quadrilateral onto a ``size`` x ``size`` canvas.

    Corner 0 lands top-left, then top-right, bottom-right and bottom-left.
    """
    src = np.asarray(polygon, dtype=np.float32).reshape(4, 2)
    dst = np.array(
        [[0, 0], [size - 1, 0], [size - 1, size - 1], [0, size - 1]],
        dtype=np.float32,
    )
    transform = cv2.getPerspectiveTransform(src, dst)
    return cv2.warpPerspective(image, transform, (size, size), flags=cv2.INTER_LINEAR)


def otsu(image: np.ndarray) -> float:
    """Compute the Otsu threshold of a grayscale image."""
    value, _ = cv2.threshold(image, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
    return float(value)


def threshold(image: np.ndarray, value: float) -> np.ndarray:
    """Return a new binary image: 255 above ``value``, 0 otherwise."""
    _, binary = cv2.threshold(image, value, 255, cv2.THRESH_BINARY)
    return binary


def count_non_zero(image: np.ndarray, rect: Rect) -> int:
    """Count non-zero pixels inside ``rect``, clipped to the image bounds."""
    x0 = max(int(rect.x), 0)
    y0 = max(int(rect.y), 0)
    x1 = min(int(rect.x + rect.width), image.shape[1])
    y1 = min(int(rect.y + rect.height), image.shape[0])
    if x1 <= x0 or y1 <= y0:
        return 0
    return int(cv2.countNonZero(image[y0:y1, x0:x1]))
