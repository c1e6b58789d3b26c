"""Entry point for the raw-socket HTTP server."""

import signal
import sys
import threading

from rawhttp.bootstrap.config import (
    ConfigurationError,
    build_server_config,
    parse_cli_args,
)
from rawhttp.bootstrap.logging_setup import configure_logging
from rawhttp.bootstrap.socket_factory import create_server_socket
from rawhttp.domain.connection_id import get_logger
from rawhttp.lifecycle.console import watch_console
from rawhttp.lifecycle.state import ServerLifecycle
from rawhttp.transport.accept_loop import run_server

SERVER_LOGGER = get_logger("server")


def main(argv=None) -> int:
    """Start the server and block until shutdown has completed."""
    args = parse_cli_args(sys.argv[1:] if argv is None else argv)
    configure_logging(args.log_level, args.log_destination)

    try:
        config = build_server_config(args)
        server_socket = create_server_socket(config)
    except ConfigurationError as error:
        SERVER_LOGGER.critical(
            "Invalid startup configuration",
            extra={"event": "startup_failed", "error": str(error)},
        )
        return 1
    except OSError as error:
        SERVER_LOGGER.critical(
            "Unable to start listening",
            extra={"event": "startup_failed", "error": str(error)},
        )
        return 1

    lifecycle = ServerLifecycle()

    def shutdown_handler(signum: int, _frame) -> None:
        SERVER_LOGGER.info(
            "Received shutdown signal",
            extra={"event": "signal_received", "signal": signum},
        )
        lifecycle.request_shutdown(signal.Signals(signum).name)

    signal.signal(signal.SIGTERM, shutdown_handler)
    signal.signal(signal.SIGINT, shutdown_handler)
    if config.console_shutdown:
        watch_console(lifecycle)

    SERVER_LOGGER.info(
        "Starting HTTP server",
        extra={
            "host": config.host,
            "port": config.port,
            "directory": config.directory,
            "log_destination": args.log_destination,
            "log_level": args.log_level,
            "read_buffer_size": config.read_buffer_size,
            "confine_paths": config.confine_paths,
            "honor_content_length": config.honor_content_length,
        },
    )

    outcome = []

    def run_acceptor() -> None:
        try:
            outcome.append(run_server(config, lifecycle, server_socket))
        except Exception as error:  # pylint: disable=broad-except
            SERVER_LOGGER.critical(
                "Acceptor stopped unexpectedly",
                extra={
                    "event": "acceptor_failed",
                    "error_type": type(error).__name__,
                    "error": str(error),
                },
                exc_info=True,
            )

    acceptor = threading.Thread(target=run_acceptor, name="acceptor")
    acceptor.start()
    while not lifecycle.token.wait(config.poll_interval):
        if not acceptor.is_alive():
            break
    acceptor.join()
    SERVER_LOGGER.info("Good bye", extra={"event": "process_exit"})
    return 0 if outcome else 1


if __name__ == "__main__":
    sys.exit(main())
