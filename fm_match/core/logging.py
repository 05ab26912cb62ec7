"""Logging setup for FM Match."""

import logging

from rich.console import Console
from rich.logging import RichHandler

from fm_match.core.config import Settings, get_settings


def configure_logging(
    settings: Settings | None = None,
    console: Console | None = None,
) -> logging.Logger:
    """Install a rich handler on the ``fm_match`` logger.

    Safe to call more than once; an existing rich handler is replaced.
    """
    settings = settings or get_settings()
    root = logging.getLogger("fm_match")
    root.setLevel(settings.effective_log_level)

    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)

    handler = RichHandler(
        console=console,
        show_path=settings.debug,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root.addHandler(handler)
    root.propagate = False
    return root
