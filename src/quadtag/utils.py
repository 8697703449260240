"""
Shared helper functions and utilities.

This module contains logging setup and configuration loading/saving used by
the command line tool and examples.
"""

import copy
import json
import logging
import os
from pathlib import Path

from .dictionary import ARUCO_ORIGINAL

DEFAULT_CONFIG = {
    # Row codewords, as bit strings
    'dictionary': list(ARUCO_ORIGINAL),

    # Detection
    'detector': {
        'epsilon': 0.05,
        'min_length': 10.0,
        'min_contour_ratio': 0.2,
        'min_dedup_distance': 10.0,
        'adaptive_kernel_size': 2,
        'adaptive_threshold': 7,
        'warp_scale': 2,
    },

    # Overlay rendering
    'overlay': {
        'outline_color': [0, 0, 255],
        'corner_color': [0, 255, 0],
        'text_color': [0, 0, 255],
        'thickness': 2,
        'font_scale': 0.6,
        'antialiasing': True,
    },
}


def setup_logging(level=logging.INFO):
    """Set up logging configuration.

    Args:
        level: Logging level (default: INFO)
    """
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    logger = logging.getLogger(__name__)
    logger.debug("Logging initialized")


def get_config(config_path=None):
    """Load configuration from file or return defaults.

    Sections present in the file are merged into the default sections, so a
    file may override a single detector option.

    Args:
        config_path: Path to JSON configuration file (optional)

    Returns:
        dict: Configuration dictionary
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path and os.path.exists(config_path):
        try:
            with open(config_path, 'r') as f:
                loaded_config = json.load(f)
        except (OSError, ValueError) as e:
            logging.warning(f"Failed to load config from {config_path}: {e}")
            return config

        if not isinstance(loaded_config, dict):
            logging.warning(f"Failed to load config from {config_path}: top level must be an object")
            return config

        for key, value in loaded_config.items():
            if isinstance(value, dict) and isinstance(config.get(key), dict):
                config[key].update(value)
            else:
                config[key] = value
        logging.info(f"Configuration loaded from {config_path}")
    elif config_path:
        logging.warning(f"Config file not found: {config_path}")

    return config


def save_config(config, config_path):
    """Save configuration to file.

    Args:
        config: Configuration dictionary
        config_path: Path to save configuration file

    Returns:
        bool: True if save successful, False otherwise
    """
    try:
        with open(config_path, 'w') as f:
            json.dump(config, f, indent=4)
        logging.info(f"Configuration saved to {config_path}")
        return True
    except (OSError, TypeError) as e:
        logging.error(f"Failed to save config to {config_path}: {e}")
        return False


def validate_config(config):
    """Validate configuration parameters.

    Args:
        config: Configuration dictionary

    Returns:
        bool: True if valid, False otherwise
    """
    required_keys = ['dictionary', 'detector']

    for key in required_keys:
        if key not in config:
            logging.error(f"Missing required config key: {key}")
            return False

    if not isinstance(config['dictionary'], list) or not config['dictionary']:
        logging.error("Dictionary must be a non-empty list of codewords")
        return False

    detector = config['detector']
    if not isinstance(detector, dict):
        logging.error("Detector section must be a mapping")
        return False

    # Validate numeric values
    epsilon = detector.get('epsilon', DEFAULT_CONFIG['detector']['epsilon'])
    if not (isinstance(epsilon, (int, float)) and epsilon > 0):
        logging.error("Detector option epsilon must be a positive number")
        return False

    for key in ('min_length', 'min_contour_ratio', 'min_dedup_distance'):
        if key in detector and not (isinstance(detector[key], (int, float)) and detector[key] >= 0):
            logging.error(f"Detector option {key} cannot be negative")
            return False

    for key in ('adaptive_kernel_size', 'adaptive_threshold', 'warp_scale'):
        value = detector.get(key, DEFAULT_CONFIG['detector'][key])
        if isinstance(value, bool) or not isinstance(value, int):
            logging.error(f"Detector option {key} must be an integer")
            return False

    logging.info("Configuration validated successfully")
    return True


def create_directory(path):
    """Create directory if it doesn't exist.

    Args:
        path: Directory path to create

    Returns:
        bool: True if created or exists, False on error
    """
    try:
        Path(path).mkdir(parents=True, exist_ok=True)
        return True
    except OSError as e:
        logging.error(f"Failed to create directory {path}: {e}")
        return False
