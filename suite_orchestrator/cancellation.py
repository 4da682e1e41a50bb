"""Cooperative cancellation passed into every lifecycle action."""

import threading
from dataclasses import dataclass, field
from typing import Literal


class AttemptCancelledError(Exception):
    """Raised by an action that noticed its attempt was abandoned."""


class CancellationToken:
    """Flag set once an attempt has been abandoned.

    Backed by a ``threading.Event`` so that actions running in worker threads
    can observe it as well as coroutines on the event loop.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise AttemptCancelledError("Attempt was cancelled")

    def wait(self, timeout: float | None = None) -> bool:
        """Block the calling thread until cancelled or ``timeout`` elapses."""
        return self._event.wait(timeout)


@dataclass(frozen=True, kw_only=True)
class AttemptContext:
    """What an action knows about the attempt it runs in."""

    test_id: str
    attempt: int
    timeout: float
    phase: Literal["setup", "body", "teardown"] = "body"
    token: CancellationToken = field(default_factory=CancellationToken, repr=False)

    @property
    def cancelled(self) -> bool:
        return self.token.cancelled
