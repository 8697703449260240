"""
Marker candidate extraction.

Turns raw contours into convex, consistently wound quadrilaterals and removes
near-duplicates (the inner and outer boundary of the same black border usually
both survive simplification).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, NamedTuple, Sequence, Set, Tuple

import numpy as np

from . import vision

LOGGER = logging.getLogger(__name__)


class Point(NamedTuple):
    """2-D image coordinate."""

    x: float
    y: float


@dataclass(frozen=True)
class Candidate:
    """Convex quadrilateral that may contain a marker.

    Corners are stored in canonical winding order (positive cross product of
    edge 0->1 and edge 0->2 in image coordinates, i.e. clockwise on screen).
    """

    corners: Tuple[Point, Point, Point, Point]
    perimeter: float

    def __post_init__(self):
        if len(self.corners) != 4:
            raise ValueError(f"Candidate needs 4 corners, got {len(self.corners)}.")

    @classmethod
    def from_polygon(cls, polygon: np.ndarray) -> Candidate:
        """Build a canonically wound candidate from a 4-vertex polygon."""
        ordered = canonical_winding(polygon)
        corners = tuple(Point(float(x), float(y)) for x, y in ordered)
        return cls(corners=corners, perimeter=vision.perimeter(ordered))

    def as_array(self) -> np.ndarray:
        """Corners as a ``(4, 2)`` float32 array."""
        return np.array(self.corners, dtype=np.float32)


def canonical_winding(polygon: np.ndarray) -> np.ndarray:
    """Return a copy of a quadrilateral with corners 1 and 3 swapped if needed.

    A negative cross product of edge(v0->v1) and edge(v0->v2) means the
    vertices run the other way round; swapping 1 and 3 reverses the order
    while keeping corner 0 in place.
    """
    points = np.array(polygon, dtype=np.float64).reshape(4, 2)
    dx1, dy1 = points[1] - points[0]
    dx2, dy2 = points[2] - points[0]

    if dx1 * dy2 - dy1 * dx2 < 0:
        points[[1, 3]] = points[[3, 1]]
    return points


def corner_distance(first: Candidate, second: Candidate) -> float:
    """Mean squared distance between corresponding corners."""
    delta = first.as_array().astype(np.float64) - second.as_array().astype(np.float64)
    return float((delta ** 2).sum() / 4.0)


def deduplicate(candidates: Sequence[Candidate], min_distance: float) -> List[Candidate]:
    """Drop the smaller of every pair of candidates closer than ``min_distance``.

    Corners are compared index by index, which relies on every candidate
    sharing the canonical winding. On equal perimeters the later candidate is
    dropped. Survivors keep their original order.
    """
    excluded: Set[int] = set()
    limit = min_distance * min_distance

    for i in range(len(candidates)):
        for j in range(i + 1, len(candidates)):
            if corner_distance(candidates[i], candidates[j]) >= limit:
                continue
            if candidates[i].perimeter < candidates[j].perimeter:
                excluded.add(i)
            else:
                excluded.add(j)

    if excluded:
        LOGGER.debug("Dropped %d near-duplicate candidates", len(excluded))
    return [candidate for k, candidate in enumerate(candidates) if k not in excluded]


def extract_candidates(
    contours: Iterable[np.ndarray],
    min_contour_length: float,
    epsilon_ratio: float,
    min_edge_length: float,
    min_dedup_distance: float,
) -> List[Candidate]:
    """Find marker-like quadrilaterals among the contours.

    Args:
        contours: Traced contours, each an ``(K, 2)`` array of points
        min_contour_length: Contours with fewer points are skipped
        epsilon_ratio: Simplification tolerance as a fraction of contour length
        min_edge_length: Minimum edge length of an accepted quadrilateral
        min_dedup_distance: Corner distance below which candidates are duplicates

    Returns:
        Deduplicated candidates in discovery order
    """
    found: List[Candidate] = []

    for contour in contours:
        length = len(contour)
        if length < min_contour_length:
            continue

        polygon = vision.approx_poly_dp(contour, length * epsilon_ratio)

        if (
            len(polygon) == 4
            and vision.is_contour_convex(polygon)
            and vision.min_edge_length(polygon) >= min_edge_length
        ):
            found.append(Candidate.from_polygon(polygon))

    return deduplicate(found, min_dedup_distance)
