"""Server configuration and CLI argument parsing."""

import argparse
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value is not None else default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    return float(value) if value is not None else default


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on"}


DEFAULT_HOST = os.getenv("RAWHTTP_HOST", "0.0.0.0")
DEFAULT_PORT = _env_int("RAWHTTP_PORT", 4221)
DEFAULT_READ_BUFFER_SIZE = _env_int("RAWHTTP_READ_BUFFER_SIZE", 1024)
DEFAULT_POLL_INTERVAL = _env_float("RAWHTTP_POLL_INTERVAL", 0.5)
DEFAULT_SHUTDOWN_GRACE_SECONDS = _env_float("RAWHTTP_SHUTDOWN_GRACE_SECONDS", 30)
DEFAULT_CONFINE_PATHS = _env_bool("RAWHTTP_CONFINE_PATHS", False)
DEFAULT_HONOR_CONTENT_LENGTH = _env_bool("RAWHTTP_HONOR_CONTENT_LENGTH", False)
DEFAULT_MAX_BODY_BYTES = _env_int("RAWHTTP_MAX_BODY_BYTES", 5 * 1024 * 1024)
DEFAULT_CONSOLE_SHUTDOWN = _env_bool("RAWHTTP_CONSOLE_SHUTDOWN", True)


class ConfigurationError(Exception):
    """Raised when startup configuration is invalid."""


@dataclass(frozen=True)
class ServerConfig:
    """Immutable settings built once at startup and passed to every component."""

    directory: Path
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    read_buffer_size: int = DEFAULT_READ_BUFFER_SIZE
    poll_interval: float = DEFAULT_POLL_INTERVAL
    shutdown_grace_seconds: float = DEFAULT_SHUTDOWN_GRACE_SECONDS
    confine_paths: bool = DEFAULT_CONFINE_PATHS
    honor_content_length: bool = DEFAULT_HONOR_CONTENT_LENGTH
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES
    console_shutdown: bool = DEFAULT_CONSOLE_SHUTDOWN


def resolve_directory(raw_directory: Optional[str]) -> Path:
    """Return the served directory, defaulting to the current one."""
    if raw_directory is None or not raw_directory.strip():
        return Path.cwd()
    directory = Path(raw_directory)
    if not directory.is_dir():
        raise ConfigurationError(f"Directory '{raw_directory}' not found")
    return directory


def build_server_config(args: argparse.Namespace) -> ServerConfig:
    """Validate parsed CLI arguments and freeze them into a ServerConfig."""
    if args.read_buffer_size <= 0:
        raise ConfigurationError("Read buffer size must be positive")
    if args.poll_interval <= 0:
        raise ConfigurationError("Poll interval must be positive")
    return ServerConfig(
        directory=resolve_directory(args.directory),
        host=args.host,
        port=args.port,
        read_buffer_size=args.read_buffer_size,
        poll_interval=args.poll_interval,
        shutdown_grace_seconds=args.shutdown_grace_seconds,
        confine_paths=args.confine_paths,
        honor_content_length=args.honor_content_length,
        max_body_bytes=args.max_body_bytes,
        console_shutdown=args.console_shutdown,
    )


def parse_cli_args(argv: list[str]) -> argparse.Namespace:
    """Return parsed CLI arguments for server configuration."""
    parser = argparse.ArgumentParser(description="Minimal raw-socket HTTP/1.1 server")
    parser.add_argument(
        "--directory",
        default=os.getenv("RAWHTTP_DIRECTORY"),
        help="Directory served by the /files routes (default: current directory)",
    )
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument(
        "--read-buffer-size",
        type=int,
        default=DEFAULT_READ_BUFFER_SIZE,
        help="Bytes read from each connection in its single receive",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=DEFAULT_POLL_INTERVAL,
        help="Seconds between cancellation checks while blocked on a socket",
    )
    parser.add_argument(
        "--shutdown-grace-seconds",
        type=float,
        default=DEFAULT_SHUTDOWN_GRACE_SECONDS,
        help="Upper bound on waiting for in-flight connections at shutdown",
    )
    parser.add_argument(
        "--confine-paths",
        action=argparse.BooleanOptionalAction,
        default=DEFAULT_CONFINE_PATHS,
        help="Reject file names resolving outside the served directory",
    )
    parser.add_argument(
        "--honor-content-length",
        action=argparse.BooleanOptionalAction,
        default=DEFAULT_HONOR_CONTENT_LENGTH,
        help="Keep reading until the declared Content-Length has arrived",
    )
    parser.add_argument(
        "--max-body-bytes",
        type=int,
        default=DEFAULT_MAX_BODY_BYTES,
        help="Largest Content-Length accepted with --honor-content-length",
    )
    parser.add_argument(
        "--console-shutdown",
        action=argparse.BooleanOptionalAction,
        default=DEFAULT_CONSOLE_SHUTDOWN,
        help="Shut down when a line is read from standard input",
    )
    default_log_level = os.getenv("RAWHTTP_LOG_LEVEL", "INFO").upper()
    default_destination = os.getenv("RAWHTTP_LOG_DESTINATION", "stdout")
    parser.add_argument(
        "--log-level",
        default=default_log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
    )
    parser.add_argument(
        "--log-destination",
        default=default_destination,
        help="stdout or a file path",
    )
    return parser.parse_args(argv)
