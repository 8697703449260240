"""
Command line entry point for QUADTAG.

Detects markers in one or more image files and prints the results.

Usage:
    quadtag image.png                       # One line per marker
    quadtag *.jpg --json                    # JSON document per image
    quadtag image.png --output annotated/   # Also write annotated images
    quadtag image.png --verbose             # Enable debug logging
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

import cv2

from .dictionary import InvalidDictionary
from .marker_detect import MarkerDetector
from .overlay import MarkerOverlayRenderer
from .utils import create_directory, get_config, setup_logging, validate_config

LOGGER = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="quadtag",
        description="QUADTAG - Square fiducial marker detection in still images",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  quadtag photo.png                 # Print "<file>: id=<id> corners=..." lines
  quadtag photo.png --json          # Print detections as JSON
  quadtag photo.png -o out/         # Write out/photo_markers.png
  quadtag photo.png -c config.json  # Use custom dictionary/detector settings
        """,
    )

    parser.add_argument(
        "images",
        nargs="+",
        help="Image files to scan for markers",
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help="JSON configuration file",
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Directory for annotated images",
    )
    parser.add_argument(
        "--json", "-j",
        action="store_true",
        help="Print detections as JSON",
    )
    parser.add_argument(
        "--verbose", "-V",
        action="store_true",
        help="Enable verbose/debug logging",
    )

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point. Returns the process exit status."""
    args = parse_args(argv)

    # Set up logging
    log_level = logging.DEBUG if args.verbose else logging.INFO
    setup_logging(level=log_level)

    config = get_config(args.config)
    if not validate_config(config):
        return 2

    try:
        detector = MarkerDetector(config["dictionary"], config["detector"])
    except InvalidDictionary as e:
        LOGGER.error("Invalid dictionary: %s", e)
        return 2
    except ValueError as e:
        LOGGER.error("Invalid detector configuration: %s", e)
        return 2

    renderer = MarkerOverlayRenderer(config.get("overlay", {}))
    if args.output and not create_directory(args.output):
        return 1

    status = 0
    for path in args.images:
        image = cv2.imread(path, cv2.IMREAD_COLOR)
        if image is None:
            LOGGER.error("Failed to read image: %s", path)
            status = 1
            continue

        markers = detector.detect(image)
        LOGGER.info("%s: %d markers", path, len(markers))

        if args.json:
            print(json.dumps({"image": path, "markers": [m.to_dict() for m in markers]}))
        else:
            for marker in markers:
                corners = " ".join(f"({c.x:.0f},{c.y:.0f})" for c in marker.corners)
                print(f"{path}: id={marker.id} corners={corners}")

        if args.output:
            stem = os.path.splitext(os.path.basename(path))[0]
            out_path = os.path.join(args.output, f"{stem}_markers.png")
            if not cv2.imwrite(out_path, renderer.render(image, markers)):
                LOGGER.error("Failed to write annotated image: %s", out_path)
                status = 1

    return status


if __name__ == "__main__":
    sys.exit(main())
