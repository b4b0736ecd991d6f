"""Logging setup for SQLGauge.

plain stdlib logging routed through rich so it matches the cli output.
everything goes to stderr - stdout is reserved for status lines and previews.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(name)s: %(message)s"


def configure_logging(verbose: bool = False) -> None:
    """Attach a rich handler to the sqlgauge logger tree.

    safe to call more than once - the handler is only added the first time.
    """
    logger = logging.getLogger("sqlgauge")
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False
