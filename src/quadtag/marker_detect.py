"""
Marker detection module.

Finds square binary markers in a still image: the frame is thresholded and
traced, marker-like quadrilaterals are extracted, and each one is rectified
and decoded against a pattern dictionary.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Union

import cv2
import numpy as np

from . import vision
from .candidates import Candidate, extract_candidates
from .decoder import Marker, MarkerDecoder
from .dictionary import Codeword, PatternDictionary

LOGGER = logging.getLogger(__name__)


class InvalidImage(ValueError):
    """Raised when ``detect`` is given a missing or empty image."""


@dataclass
class DetectorConfig:
    """Configuration for the marker detector."""

    epsilon: float = 0.05  # Polygon simplification, fraction of contour length
    min_length: float = 10.0  # Shortest accepted candidate edge (px)
    min_contour_ratio: float = 0.2  # Shortest contour, fraction of image width
    min_dedup_distance: float = 10.0  # Candidates closer than this are merged (px)

    # Adaptive threshold
    adaptive_kernel_size: int = 2
    adaptive_threshold: int = 7

    # Rectified canvas side is warp_scale * (N + 2) ** 2 pixels
    warp_scale: int = 2

    def __post_init__(self):
        for name in ('epsilon', 'min_length', 'min_contour_ratio', 'min_dedup_distance'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{name} must be a number, got {value!r}")
        for name in ('adaptive_kernel_size', 'adaptive_threshold', 'warp_scale'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")

        if self.epsilon <= 0:
            raise ValueError(f"epsilon must be positive, got {self.epsilon}")
        if self.min_length < 0:
            raise ValueError(f"min_length cannot be negative, got {self.min_length}")
        if self.min_contour_ratio < 0:
            raise ValueError(f"min_contour_ratio cannot be negative, got {self.min_contour_ratio}")
        if self.min_dedup_distance < 0:
            raise ValueError(f"min_dedup_distance cannot be negative, got {self.min_dedup_distance}")
        if self.adaptive_kernel_size < 1:
            raise ValueError(f"adaptive_kernel_size must be at least 1, got {self.adaptive_kernel_size}")
        if self.warp_scale < 1:
            raise ValueError(f"warp_scale must be at least 1, got {self.warp_scale}")

    @classmethod
    def from_dict(cls, config: Optional[Dict]) -> DetectorConfig:
        """Build a config from a dictionary, ignoring unknown keys."""
        cfg_dict = dict(config or {})
        return cls(**{
            k: v for k, v in cfg_dict.items()
            if k in cls.__dataclass_fields__
        })


class MarkerDetector:
    """
    Detects square fiducial markers in still images.

    Usage:
        detector = MarkerDetector(PatternDictionary.aruco_original())
        for marker in detector.detect(frame):
            print(marker.id, marker.corners)
    """

    def __init__(
        self,
        dictionary: Union[PatternDictionary, Sequence[Codeword], None] = None,
        config: Union[DetectorConfig, Dict, None] = None,
    ):
        """Initialize marker detector.

        Args:
            dictionary: Pattern dictionary or a list of codewords; defaults to
                the original ArUco codewords
            config: DetectorConfig or a configuration dictionary

        Raises:
            InvalidDictionary: If the codewords do not form a valid dictionary
        """
        if dictionary is None:
            dictionary = PatternDictionary.aruco_original()
        elif not isinstance(dictionary, PatternDictionary):
            dictionary = PatternDictionary(dictionary)

        if isinstance(config, DetectorConfig):
            self.config = config
        else:
            self.config = DetectorConfig.from_dict(config)

        self.dictionary = dictionary
        self.decoder = MarkerDecoder(dictionary)
        self.warp_size = self.config.warp_scale * dictionary.grid_size ** 2

        LOGGER.info(
            "MarkerDetector initialized: %d codewords, %dx%d inner grid, %dpx canvas",
            len(dictionary),
            dictionary.inner_size,
            dictionary.inner_size,
            self.warp_size,
        )

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #
    def detect(self, image: np.ndarray) -> List[Marker]:
        """Find markers in the given image.

        Args:
            image: BGR, BGRA or grayscale image

        Returns:
            Decoded markers in candidate order
        """
        gray = self._prepare(image)
        candidates = self._find_candidates(gray)

        markers: List[Marker] = []
        for candidate in candidates:
            marker = self.decode_candidate(gray, candidate)
            if marker is not None:
                markers.append(marker)

        LOGGER.debug("Detected %d markers from %d candidates", len(markers), len(candidates))
        return markers

    def find_candidates(self, image: np.ndarray) -> List[Candidate]:
        """Return the deduplicated marker-like quadrilaterals of an image."""
        return self._find_candidates(self._prepare(image))

    def decode_candidate(self, gray: np.ndarray, candidate: Candidate) -> Optional[Marker]:
        """Rectify one candidate from a grayscale image and decode it."""
        try:
            patch = vision.warp(gray, candidate.as_array(), self.warp_size)
        except cv2.error as e:
            LOGGER.debug("Candidate rectification failed: %s", e)
            return None

        binary = vision.threshold(patch, vision.otsu(patch))
        return self.decoder.decode(binary, candidate)

    # ------------------------------------------------------------------ #
    # Pipeline steps
    # ------------------------------------------------------------------ #
    @staticmethod
    def _prepare(image: np.ndarray) -> np.ndarray:
        if image is None or not isinstance(image, np.ndarray) or image.size == 0:
            raise InvalidImage("Image cannot be empty.")
        return vision.grayscale(image)

    def _find_candidates(self, gray: np.ndarray) -> List[Candidate]:
        binary = vision.adaptive_threshold(
            gray,
            self.config.adaptive_kernel_size,
            self.config.adaptive_threshold,
        )
        contours = vision.find_contours(binary)

        candidates = extract_candidates(
            contours,
            min_contour_length=gray.shape[1] * self.config.min_contour_ratio,
            epsilon_ratio=self.config.epsilon,
            min_edge_length=self.config.min_length,
            min_dedup_distance=self.config.min_dedup_distance,
        )
        LOGGER.debug("%d contours, %d candidates", len(contours), len(candidates))
        return candidates
