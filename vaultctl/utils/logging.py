"""
Logging configuration utilities.

This module provides functions for setting up and configuring logging.
"""
import logging


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """
    Configure logging for the application.

    Only warnings and errors are shown by default; verbose mode adds the
    progress of each step and debug mode the commands being run.

    Args:
        verbose: Whether to enable informational logging
        debug: Whether to enable debug logging
    """
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logger = logging.getLogger('vaultctl')
    logger.setLevel(level)
    logger.info(f"Logging at level {logging.getLevelName(level)}")
