"""
Demo script for running QUADTAG on a still image.

Detects markers in the given image, prints them, and shows the frame with the
raw candidates and the decoded markers drawn on top. Without an argument a
synthetic frame with one marker is generated.

Usage:
    python examples/run_demo.py [image]
"""

import logging
import os
import sys

import cv2
import numpy as np

# Add src directory to path for imports
sys.path.append(os.path.join(os.path.dirname(__file__), "..", "src"))

from quadtag import MarkerDetector, MarkerOverlayRenderer  # type: ignore
from quadtag.utils import get_config, setup_logging  # type: ignore


LOGGER = logging.getLogger(__name__)

# Rows of a valid marker for the default dictionary (id 108)
DEMO_ROWS = ("10000", "10111", "01001", "01110", "10000")


def _demo_frame(cell: int = 24) -> np.ndarray:
    """White frame with one black-bordered marker, slightly rotated."""
    size = len(DEMO_ROWS) + 2
    marker = np.zeros((size * cell, size * cell), dtype=np.uint8)
    for row, word in enumerate(DEMO_ROWS):
        for col, bit in enumerate(word):
            if bit == "1":
                y, x = (row + 1) * cell, (col + 1) * cell
                marker[y:y + cell, x:x + cell] = 255

    frame = np.full((480, 640), 255, dtype=np.uint8)
    top, left = (480 - marker.shape[0]) // 2, (640 - marker.shape[1]) // 2
    frame[top:top + marker.shape[0], left:left + marker.shape[1]] = marker

    rotation = cv2.getRotationMatrix2D((320, 240), 20, 1.0)
    frame = cv2.warpAffine(frame, rotation, (640, 480), borderValue=255)
    return cv2.cvtColor(frame, cv2.COLOR_GRAY2BGR)


def run_basic_demo(image_path=None):
    """Run detection on one image and display the result."""
    print("QUADTAG - Basic Demo")
    print("=" * 40)
    print("Press any key in the window to quit")
    print("=" * 40)

    # Set up logging
    setup_logging()

    # Load configuration
    config = get_config()
    detector = MarkerDetector(config["dictionary"], config["detector"])
    renderer = MarkerOverlayRenderer(config.get("overlay", {}))

    if image_path:
        frame = cv2.imread(image_path, cv2.IMREAD_COLOR)
        if frame is None:
            LOGGER.error("Failed to read image: %s", image_path)
            return False
    else:
        LOGGER.info("No image given, using a synthetic frame")
        frame = _demo_frame()

    candidates = detector.find_candidates(frame)
    markers = detector.detect(frame)

    print(f"\n{len(candidates)} candidates, {len(markers)} markers\n")
    for marker in markers:
        corners = ", ".join(f"({c.x:.0f}, {c.y:.0f})" for c in marker.corners)
        print(f"  id={marker.id:<6} corners: {corners}")

    annotated = renderer.render(renderer.render_candidates(frame, candidates), markers)

    try:
        cv2.imshow("QUADTAG", annotated)
        cv2.waitKey(0)
        cv2.destroyAllWindows()
    except cv2.error as e:
        LOGGER.warning("Display unavailable: %s", e)

    print("Demo complete!")
    return True


def main():
    """Main entry point for demo."""
    image_path = sys.argv[1] if len(sys.argv) > 1 else None
    if not run_basic_demo(image_path):
        sys.exit(1)


if __name__ == "__main__":
    main()
