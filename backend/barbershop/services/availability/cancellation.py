# backend/barbershop/services/availability/cancellation.py
"""
Cooperative cancellation for availability requests.

A token is threaded through resolve → index → compute. Each stage calls
`raise_if_cancelled()` at its boundaries; the month loop also checks it
between days.
"""

import logging
import threading

from .errors import ComputationCancelled

logger = logging.getLogger(__name__)


class CancellationToken:
    """Thread-safe one-way cancellation flag."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise ComputationCancelled("Request was superseded")


def check_token(token: CancellationToken | None) -> None:
    """Raise ComputationCancelled if `token` is set. None means "never cancelled"."""
    if token is not None:
        token.raise_if_cancelled()


class SupersedeRegistry:
    """
    Tracks the latest request per client.

    Starting a request for a client cancels that client's previous
    in-flight request (e.g. the user switched barber before the
    previous month loaded).
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._tokens: dict[str, CancellationToken] = {}

    def begin(self, client_id: str | None) -> CancellationToken:
        token = CancellationToken()
        if not client_id:
            return token
        with self._lock:
            previous = self._tokens.get(client_id)
            self._tokens[client_id] = token
        if previous is not None and not previous.cancelled:
            previous.cancel()
            logger.info(f"Superseded previous availability request for client={client_id}")
        return token

    def finish(self, client_id: str | None, token: CancellationToken) -> None:
        if not client_id:
            return
        with self._lock:
            if self._tokens.get(client_id) is token:
                del self._tokens[client_id]

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)
