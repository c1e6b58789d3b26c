"""Main connection acceptance loop."""

import logging
import socket
import threading
from typing import Optional

from rawhttp.bootstrap.config import ServerConfig
from rawhttp.bootstrap.socket_factory import create_server_socket
from rawhttp.domain.connection_id import get_logger
from rawhttp.lifecycle.state import ServerLifecycle
from rawhttp.transport.context import WorkerContext
from rawhttp.transport.worker import handle_client

ACCEPT_LOGGER = get_logger("transport.accept")


def spawn_worker(
    client_socket: socket.socket,
    client_address: tuple[str, int],
    context: WorkerContext,
) -> threading.Thread:
    """Start a worker thread for the connection and record its handle."""
    thread = threading.Thread(
        target=handle_client,
        args=(client_socket, client_address, context),
        name=f"worker-{client_address[0]}:{client_address[1]}",
        daemon=False,
    )
    context.lifecycle.register_worker(thread)
    thread.start()
    return thread


def accept_connections(
    server_socket: socket.socket, context: WorkerContext
) -> None:
    """Accept until the lifecycle token is cancelled.

    The listening socket carries a timeout so the loop re-checks the
    token at least once per poll interval.
    """
    lifecycle = context.lifecycle
    while not lifecycle.should_stop():
        try:
            client_socket, client_address = server_socket.accept()
        except socket.timeout:
            continue
        except OSError as error:
            if lifecycle.should_stop():
                break
            ACCEPT_LOGGER.error(
                "Socket accept failed",
                extra={"event": "accept_error", "error_type": type(error).__name__},
            )
            continue

        if lifecycle.should_stop():
            client_socket.close()
            break

        if ACCEPT_LOGGER.logger.isEnabledFor(logging.DEBUG):
            ACCEPT_LOGGER.debug(
                "Client connection accepted",
                extra={
                    "event": "client_accepted",
                    "client": f"{client_address[0]}:{client_address[1]}",
                },
            )
        spawn_worker(client_socket, client_address, context)


def run_server(
    config: ServerConfig,
    lifecycle: ServerLifecycle,
    server_socket: Optional[socket.socket] = None,
) -> bool:
    """Serve until shutdown; return True when every worker finished in time."""
    if server_socket is None:
        server_socket = create_server_socket(config)

    ACCEPT_LOGGER.info(
        "Server listening for connections",
        extra={
            "event": "server_listening",
            "host": config.host,
            "port": server_socket.getsockname()[1],
            "directory": config.directory,
        },
    )

    context = WorkerContext(config=config, lifecycle=lifecycle)
    drained = False
    try:
        accept_connections(server_socket, context)
    finally:
        lifecycle.request_shutdown("accept loop exited")
        server_socket.close()
        ACCEPT_LOGGER.info(
            "Waiting for active connections to complete",
            extra={
                "event": "shutdown_waiting",
                "grace_seconds": config.shutdown_grace_seconds,
                "remaining_workers": lifecycle.active_worker_count(),
            },
        )
        drained = lifecycle.wait_for_workers(config.shutdown_grace_seconds)
        ACCEPT_LOGGER.info("Server shutdown complete", extra={"event": "server_stopped"})
    return drained
