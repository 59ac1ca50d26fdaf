from __future__ import annotations

import logging

from rich.logging import RichHandler

from .console import stderr

CLIENT_LOGGER = "mailwire_client"


def setup_logging(verbose: bool) -> None:
    """Route log records to stderr through rich.

    Verbose mode shows the request log of ``mailwire_client`` and the
    transport chatter of httpx/httpcore; otherwise only warnings surface.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=stderr, show_path=False, rich_tracebacks=verbose)],
        force=True,
    )
    logging.getLogger(CLIENT_LOGGER).setLevel(level)
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(level)
