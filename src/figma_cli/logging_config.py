"""Logging configuration for the Figma CLI."""

import sys

from loguru import logger

_PLAIN_FORMAT = "{level.icon} {message}"
_DEBUG_FORMAT = "{level.icon} <dim>{name}:{function}</dim> {message}"


def configure_logging(*, verbose: bool = False, quiet: bool = False) -> None:
    """Configure loguru on stderr.

    Args:
        verbose: Log debug messages, including every API request.
        quiet: Only log warnings and errors. Used for machine-readable output,
            where progress lines would only be noise.
    """
    logger.remove()
    if verbose:
        logger.add(sys.stderr, level="DEBUG", format=_DEBUG_FORMAT)
    else:
        level = "WARNING" if quiet else "INFO"
        logger.add(sys.stderr, level=level, format=_PLAIN_FORMAT, colorize=False)
