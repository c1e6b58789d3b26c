"""Console-driven shutdown trigger."""

import sys
import threading
from typing import Optional, TextIO

from rawhttp.domain.connection_id import get_logger
from rawhttp.lifecycle.state import ServerLifecycle

CONSOLE_LOGGER = get_logger("lifecycle.console")


def _read_until_shutdown(lifecycle: ServerLifecycle, stream: TextIO) -> None:
    try:
        line = stream.readline()
    except (OSError, ValueError) as error:
        CONSOLE_LOGGER.warning(
            "Console unavailable, shutdown only via signals",
            extra={"event": "console_unavailable", "error_type": type(error).__name__},
        )
        return
    if not line:
        CONSOLE_LOGGER.info(
            "Console closed, shutdown only via signals",
            extra={"event": "console_closed"},
        )
        return
    lifecycle.request_shutdown("console")


def watch_console(
    lifecycle: ServerLifecycle, stream: Optional[TextIO] = None
) -> threading.Thread:
    """Start a daemon thread that requests shutdown on the first console line."""
    watcher = threading.Thread(
        target=_read_until_shutdown,
        args=(lifecycle, stream if stream is not None else sys.stdin),
        name="console-watcher",
        daemon=True,
    )
    watcher.start()
    return watcher
