"""Shared Rich console and logging setup for StoryMagic.

All modules should import console from here instead of creating their own
Console() instances, ensuring consistent output behavior.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

console = Console()


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Route the ``storymagic`` loggers through the shared console."""
    level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING

    logger = logging.getLogger("storymagic")
    logger.setLevel(level)
    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        logger.addHandler(RichHandler(console=console, show_path=debug, markup=False))
