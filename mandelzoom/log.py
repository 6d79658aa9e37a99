"""
Console logging for the mandelzoom package.

Every module logs through a child of the "mandelzoom" logger; the
application calls set_log_handlers() once at startup to choose how much
of it reaches the console.
"""

import enum
import logging
import sys


verbosity_list = (
    "warn @ console",
    "warn + info @ console",
    "debug @ console",
)

verbosity_enum = enum.Enum(
    "verbosity_enum",
    verbosity_list,
    module=__name__
)


def set_log_handlers(verbosity="warn + info @ console"):
    """
    Sets the verbosity level of the console logs.

    Args:
        verbosity: One of
            - "warn @ console": only warnings, printed to stderr
            - "warn + info @ console": also the view line of each restart
            - "debug @ console": also precision changes and buffer
              reallocations

    Returns:
        The package logger
    """
    try:
        _verbosity = verbosity_enum[verbosity].value
    except (KeyError, TypeError):
        raise ValueError(
            f"Unknown verbosity {verbosity!r}, expected one of {verbosity_list}"
        ) from None

    logger = logging.getLogger("mandelzoom")

    # Remove previous handlers
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    # Verbosity level mapping for console handler
    verbosity_mapping = {
        1: logging.WARNING,
        2: logging.INFO,
        3: logging.DEBUG,
    }
    level = verbosity_mapping[_verbosity]

    logger.setLevel(level)
    if level >= logging.WARNING:
        ch = logging.StreamHandler(sys.stderr)
    else:
        ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(level)
    ch.setFormatter(logging.Formatter(
        '%(asctime)s - %(levelname)s\n  %(message)s'
    ))
    logger.addHandler(ch)

    logger.debug(f"Logger verbosity: {verbosity}")
    return logger
