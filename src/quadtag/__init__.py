"""
QUADTAG - Square fiducial marker detection.

This package provides functionality for:
- Extracting marker-like quadrilaterals from binary contours
- Decoding rectified markers against a row codeword dictionary
- Detecting markers and their oriented corners in still images
- Rendering detections onto frames
"""

from .candidates import Candidate, Point, deduplicate, extract_candidates
from .decoder import Marker, MarkerDecoder
from .dictionary import ARUCO_ORIGINAL, InvalidDictionary, PatternDictionary
from .marker_detect import DetectorConfig, InvalidImage, MarkerDetector
from .overlay import MarkerOverlayRenderer, OverlayConfiguration

__version__ = "0.1.0"

__all__ = [
    # Dictionary
    "ARUCO_ORIGINAL",
    "InvalidDictionary",
    "PatternDictionary",
    # Candidates
    "Candidate",
    "Point",
    "deduplicate",
    "extract_candidates",
    # Decoding & detection
    "DetectorConfig",
    "InvalidImage",
    "Marker",
    "MarkerDecoder",
    "MarkerDetector",
    # Overlay
    "MarkerOverlayRenderer",
    "OverlayConfiguration",
]
