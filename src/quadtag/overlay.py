"""
Detection overlay rendering module.

Draws decoded markers (outline, first corner, id label) and, for debugging,
raw candidates onto copies of camera frames using OpenCV.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

import cv2
import numpy as np

from .candidates import Candidate
from .decoder import Marker

LOGGER = logging.getLogger(__name__)


@dataclass
class OverlayConfiguration:
    """Configuration for the marker overlay renderer."""

    outline_color: Tuple[int, int, int] = (0, 0, 255)  # Red
    corner_color: Tuple[int, int, int] = (0, 255, 0)  # Green, marks corner 0
    candidate_color: Tuple[int, int, int] = (255, 255, 0)
    text_color: Tuple[int, int, int] = (0, 0, 255)
    thickness: int = 2
    corner_radius: int = 4
    font_scale: float = 0.6
    antialiasing: bool = True


class MarkerOverlayRenderer:
    """Renders detection results on camera frames."""

    def __init__(self, config: Optional[Dict] = None):
        """Initialize overlay renderer.

        Args:
            config: Configuration dictionary with overlay settings
        """
        cfg = config or {}
        defaults = OverlayConfiguration()
        self.config = OverlayConfiguration(
            outline_color=tuple(cfg.get("outline_color", defaults.outline_color)),
            corner_color=tuple(cfg.get("corner_color", defaults.corner_color)),
            candidate_color=tuple(cfg.get("candidate_color", defaults.candidate_color)),
            text_color=tuple(cfg.get("text_color", defaults.text_color)),
            thickness=cfg.get("thickness", defaults.thickness),
            corner_radius=cfg.get("corner_radius", defaults.corner_radius),
            font_scale=cfg.get("font_scale", defaults.font_scale),
            antialiasing=cfg.get("antialiasing", defaults.antialiasing),
        )

    @property
    def _line_type(self) -> int:
        return cv2.LINE_AA if self.config.antialiasing else cv2.LINE_8

    @staticmethod
    def _as_bgr(frame: np.ndarray) -> np.ndarray:
        if frame.ndim == 2:
            return cv2.cvtColor(frame, cv2.COLOR_GRAY2BGR)
        return frame.copy()

    def render(self, frame: np.ndarray, markers: Sequence[Marker]) -> np.ndarray:
        """Draw markers on a copy of the frame.

        Args:
            frame: Input BGR or grayscale frame
            markers: Markers returned by the detector

        Returns:
            BGR frame with overlays rendered
        """
        if frame is None:
            return frame

        canvas = self._as_bgr(frame)
        for marker in markers:
            self._draw_marker(canvas, marker)
        LOGGER.debug("Rendered %d markers", len(markers))
        return canvas

    def render_candidates(self, frame: np.ndarray, candidates: Sequence[Candidate]) -> np.ndarray:
        """Draw candidate outlines on a copy of the frame."""
        if frame is None:
            return frame

        canvas = self._as_bgr(frame)
        for candidate in candidates:
            pts = candidate.as_array().reshape((-1, 1, 2)).astype(np.int32)
            cv2.polylines(
                canvas,
                [pts],
                isClosed=True,
                color=self.config.candidate_color,
                thickness=1,
                lineType=self._line_type,
            )
        return canvas

    def _draw_marker(self, canvas: np.ndarray, marker: Marker):
        pts = marker.as_array().reshape((-1, 1, 2)).astype(np.int32)
        cv2.polylines(
            canvas,
            [pts],
            isClosed=True,
            color=self.config.outline_color,
            thickness=self.config.thickness,
            lineType=self._line_type,
        )

        first = tuple(int(round(v)) for v in marker.corners[0])
        cv2.circle(
            canvas,
            first,
            self.config.corner_radius,
            self.config.corner_color,
            -1,
            self._line_type,
        )

        center = marker.center
        cv2.putText(
            canvas,
            str(marker.id),
            (int(center.x), int(center.y)),
            cv2.FONT_HERSHEY_SIMPLEX,
            self.config.font_scale,
            self.config.text_color,
            self.config.thickness,
            self._line_type,
        )
