"""Listening socket creation."""

import socket

from rawhttp.bootstrap.config import ServerConfig
from rawhttp.domain.connection_id import get_logger

SOCKET_LOGGER = get_logger("socket")


def create_server_socket(config: ServerConfig) -> socket.socket:
    """Bind the listening socket; bind failures propagate to the caller."""
    try:
        server_socket = socket.create_server((config.host, config.port))
    except OSError as error:
        SOCKET_LOGGER.critical(
            "Failed to bind listening socket",
            extra={
                "event": "bind_failed",
                "host": config.host,
                "port": config.port,
                "error_type": type(error).__name__,
                "error": str(error),
            },
        )
        raise
    server_socket.settimeout(config.poll_interval)
    return server_socket
