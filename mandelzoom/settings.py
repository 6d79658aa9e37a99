"""
Application settings.

Defaults live in DEFAULTS. An optional settings.json (next to the
package, or at an explicit path) overrides any of them, and the command
line can override them again. A missing or unreadable file falls back to
the defaults with a warning.
"""

import json
import logging
import os

from .log import verbosity_list
from .numeric import list_backend_names
from .renderer import PARTITIONS


logger = logging.getLogger(__name__)


SETTINGS_FILENAME = "settings.json"

DEFAULTS = {
    "width": 1200,
    "height": 900,
    "centre": [-0.5, 0.0],
    "zoom": 1.0,
    "backend": "native",
    "precision": 64,
    "workers": os.cpu_count() or 1,
    "partition": "rows",
    "pan_step": 0.25,
    "wheel_zoom_step": -1.0,
    "fps": 60,
    "verbosity": "warn + info @ console",
}


def default_settings_path():
    return os.path.join(os.path.dirname(__file__), SETTINGS_FILENAME)


def load_settings(path=None):
    """
    Load settings, starting from the defaults.

    Args:
        path: settings.json to read (default: the one next to the package,
            which may be absent)

    Returns:
        dict with every key of DEFAULTS
    """
    settings = dict(DEFAULTS)
    explicit = path is not None
    path = path or default_settings_path()

    try:
        with open(path, 'r', encoding='utf-8') as f:
            overrides = json.load(f)
    except FileNotFoundError:
        if explicit:
            logger.warning(f"Settings file {path} not found, using defaults")
        return settings
    except (OSError, ValueError) as e:
        # Unreadable file, bad encoding or invalid JSON
        logger.warning(f"Could not load {path}: {e}")
        return settings

    if not isinstance(overrides, dict):
        logger.warning(f"Ignoring {path}: expected a JSON object")
        return settings

    return update_settings(settings, overrides)


def update_settings(settings, overrides):
    """
    Apply overrides to a settings dict, skipping unknown keys and None values.

    Returns:
        The updated settings dict
    """
    for key, value in overrides.items():
        if key not in DEFAULTS:
            logger.warning(f"Ignoring unknown setting {key!r}")
            continue
        if value is not None:
            settings[key] = value
    return settings


def validate_settings(settings):
    """
    Check settings values.

    Raises:
        ValueError naming the first bad setting
    """
    for key in ("width", "height", "workers", "fps", "precision"):
        if int(settings[key]) <= 0:
            raise ValueError(f"Setting {key!r} must be positive, got {settings[key]!r}")

    centre = settings["centre"]
    if len(centre) != 2:
        raise ValueError(f"Setting 'centre' must be [x, y], got {centre!r}")

    if settings["backend"] not in list_backend_names():
        raise ValueError(
            f"Unknown backend {settings['backend']!r}, "
            f"expected one of {list_backend_names()}"
        )
    if settings["partition"] not in PARTITIONS:
        raise ValueError(
            f"Unknown partition {settings['partition']!r}, expected one of {PARTITIONS}"
        )
    if settings["verbosity"] not in verbosity_list:
        raise ValueError(
            f"Unknown verbosity {settings['verbosity']!r}, expected one of {verbosity_list}"
        )
    return settings
