"""
Marker decoding.

Samples a rectified, binarized candidate into a bit grid, checks the black
border, searches the four orientations against the pattern dictionary and
builds a ``Marker`` when one orientation matches exactly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

import numpy as np

from . import vision
from .candidates import Candidate, Point
from .dictionary import PatternDictionary

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Marker:
    """A decoded marker: numeric id and its corners in marker orientation."""

    id: int
    corners: Tuple[Point, Point, Point, Point]

    @property
    def center(self) -> Point:
        xs = [corner.x for corner in self.corners]
        ys = [corner.y for corner in self.corners]
        return Point(sum(xs) / 4.0, sum(ys) / 4.0)

    def as_array(self) -> np.ndarray:
        """Corners as a ``(4, 2)`` float32 array."""
        return np.array(self.corners, dtype=np.float32)

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "corners": [[corner.x, corner.y] for corner in self.corners],
        }


def rotate_bits(bits: np.ndarray) -> np.ndarray:
    """Rotate a bit matrix 90 degrees clockwise (reverse rows, then transpose)."""
    return np.ascontiguousarray(np.asarray(bits)[::-1].T)


def marker_id(bits: np.ndarray) -> int:
    """Pack columns 1 and N-2 of every row into an integer, first row most significant."""
    matrix = np.asarray(bits)
    size = matrix.shape[0]
    value = 0
    for row in matrix:
        value = (value << 1) | int(row[1])
        value = (value << 1) | int(row[size - 2])
    return value


def rotate_corners(corners: Sequence[Point], shift: int) -> Tuple[Point, ...]:
    """Cyclically shift corners so that ``result[i] == corners[(shift + i) % 4]``."""
    count = len(corners)
    return tuple(corners[(shift + i) % count] for i in range(count))


class MarkerDecoder:
    """Decodes rectified candidate images against a pattern dictionary."""

    def __init__(self, dictionary: PatternDictionary):
        self.dictionary = dictionary
        self.inner_size = dictionary.inner_size
        self.grid_size = dictionary.grid_size

    # ------------------------------------------------------------------ #
    # Sampling
    # ------------------------------------------------------------------ #
    def _cell_is_white(self, image: np.ndarray, row: int, col: int, cell: int) -> bool:
        region = vision.Rect(x=col * cell, y=row * cell, width=cell, height=cell)
        return vision.count_non_zero(image, region) > (cell * cell) >> 1

    def has_black_border(self, image: np.ndarray) -> bool:
        """True when every cell of the outer ring is mostly black."""
        cell = image.shape[1] // self.grid_size
        last = self.grid_size - 1

        for row in range(self.grid_size):
            # Full first and last rows, only the edge cells of the others
            step = 1 if row in (0, last) else last
            for col in range(0, self.grid_size, step):
                if self._cell_is_white(image, row, col, cell):
                    return False
        return True

    def sample_bits(self, image: np.ndarray) -> np.ndarray:
        """Majority-vote each inner cell: 1 for white, 0 for black."""
        cell = image.shape[1] // self.grid_size
        bits = np.zeros((self.inner_size, self.inner_size), dtype=np.uint8)

        for row in range(self.inner_size):
            for col in range(self.inner_size):
                bits[row, col] = 1 if self._cell_is_white(image, row + 1, col + 1, cell) else 0
        return bits

    # ------------------------------------------------------------------ #
    # Matching
    # ------------------------------------------------------------------ #
    def best_rotation(self, bits: np.ndarray) -> Tuple[int, int, np.ndarray]:
        """Find the clockwise rotation of ``bits`` closest to the dictionary.

        Returns:
            (rotation index, distance, rotated bits); ties keep the lowest index
        """
        best_index = 0
        best_bits = np.asarray(bits)
        best_distance = self.dictionary.matrix_distance(best_bits)

        rotated = best_bits
        for index in range(1, 4):
            rotated = rotate_bits(rotated)
            distance = self.dictionary.matrix_distance(rotated)
            if distance < best_distance:
                best_index, best_distance, best_bits = index, distance, rotated

        return best_index, best_distance, best_bits

    def decode(self, image: np.ndarray, candidate: Candidate) -> Optional[Marker]:
        """Decode a rectified, thresholded candidate image.

        Args:
            image: Square binary image of the rectified candidate
            candidate: Candidate the image was rectified from

        Returns:
            The marker, or None if the border is not black or no orientation
            matches the dictionary exactly
        """
        if image.shape[1] < self.grid_size:
            LOGGER.debug("Candidate rejected: %dpx canvas is too small to sample", image.shape[1])
            return None

        if not self.has_black_border(image):
            LOGGER.debug("Candidate rejected: border is not black")
            return None

        bits = self.sample_bits(image)
        rotation, distance, oriented = self.best_rotation(bits)

        if distance != 0:
            LOGGER.debug("Candidate rejected: pattern distance %d", distance)
            return None

        return Marker(
            id=marker_id(oriented),
            corners=rotate_corners(candidate.corners, (4 - rotation) % 4),
        )
