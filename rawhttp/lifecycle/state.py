"""Server lifecycle state: cancellation and worker tracking."""

import threading
import time
from typing import Optional

from rawhttp.domain.connection_id import get_logger

LIFECYCLE_LOGGER = get_logger("lifecycle")


class OperationCancelled(Exception):
    """Raised from a blocking operation once shutdown has been requested."""


class CancellationToken:
    """Process-wide shutdown signal observed by every blocking operation."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """Raise OperationCancelled when the token has been cancelled."""
        if self._event.is_set():
            raise OperationCancelled

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until cancelled or timeout elapses; return the cancelled state."""
        return self._event.wait(timeout)


class ServerLifecycle:
    """Owns the cancellation token and the set of in-flight worker threads."""

    def __init__(self, token: Optional[CancellationToken] = None) -> None:
        self._lock = threading.Lock()
        self._workers: set[threading.Thread] = set()
        self.token = token if token is not None else CancellationToken()

    def should_stop(self) -> bool:
        """Check if the server should stop accepting new connections."""
        return self.token.is_cancelled()

    def register_worker(self, thread: threading.Thread) -> None:
        """Record a worker handle so shutdown can wait for it."""
        with self._lock:
            self._workers.add(thread)

    def cleanup_worker(self, thread: threading.Thread) -> None:
        """Forget a worker that has finished."""
        with self._lock:
            self._workers.discard(thread)

    def has_worker(self, thread: threading.Thread) -> bool:
        with self._lock:
            return thread in self._workers

    def active_worker_count(self) -> int:
        """Return the number of currently tracked worker threads."""
        with self._lock:
            return len(self._workers)

    def request_shutdown(self, reason: str = "unspecified") -> None:
        """Cancel the token so the acceptor and all workers unwind."""
        if self.token.is_cancelled():
            return
        self.token.cancel()
        LIFECYCLE_LOGGER.info(
            "Shutdown requested",
            extra={"event": "shutdown_requested", "reason": reason},
        )

    def wait_for_workers(self, timeout: float) -> bool:
        """Join every tracked worker, giving up once the timeout elapses."""
        deadline = time.monotonic() + timeout
        while True:
            with self._lock:
                self._workers = {w for w in self._workers if w.is_alive()}
                active_workers = list(self._workers)
            if not active_workers:
                return True
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                LIFECYCLE_LOGGER.warning(
                    "Shutdown timeout exceeded",
                    extra={
                        "event": "shutdown_timeout",
                        "remaining_workers": len(active_workers),
                    },
                )
                return False
            for worker in active_workers:
                worker.join(timeout=min(0.1, remaining))
                if time.monotonic() >= deadline:
                    break
