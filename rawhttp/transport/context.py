"""Context object shared across worker threads."""

from dataclasses import dataclass

from rawhttp.bootstrap.config import ServerConfig
from rawhttp.lifecycle.state import ServerLifecycle


@dataclass(frozen=True)
class WorkerContext:
    """Read-only dependencies handed to every connection worker."""

    config: ServerConfig
    lifecycle: ServerLifecycle
