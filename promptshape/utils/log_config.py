"""
Logging configuration for command-line use.

Library modules only create loggers (`logging.getLogger(__name__)`); handlers
are installed by the application, here the CLI.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(
    level: Union[int, str] = "WARNING",
    log_file: Optional[Path] = None,
    console: Optional[Console] = None,
) -> None:
    """
    Configure the "promptshape" logger.

    Args:
        level: Log level name or number
        log_file: Also write plain-text records to this file
        console: Rich console to log to (default: stderr)
    """
    logger = logging.getLogger("promptshape")
    logger.setLevel(level)
    logger.handlers.clear()

    handler = RichHandler(console=console or Console(stderr=True), show_path=False, rich_tracebacks=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(file_handler)

    logger.propagate = False
