"""Cancellation signal passed to request executions.

A CancelToken is the caller's way to abort a request that is waiting on
the rate limiter or is in flight. It can be cancelled explicitly from any
thread, and it can carry a deadline.

Usage:
    token = CancelToken(timeout=5.0)
    client.new_request().get("https://example.com", ctx=token)

    # from another thread
    token.cancel()
"""

from __future__ import annotations

import threading
import time

from vantuz.exceptions import CancelledError


class CancelToken:
    """Thread-safe cancellation flag with an optional deadline."""

    def __init__(self, timeout: float | None = None) -> None:
        """Create a token.

        Args:
            timeout: Seconds from now after which the token counts as
                     cancelled. None means no deadline.
        """
        self._event = threading.Event()
        self._deadline: float | None = None
        if timeout is not None:
            self._deadline = time.monotonic() + timeout

    @property
    def deadline(self) -> float | None:
        """Deadline on the time.monotonic() clock, or None."""
        return self._deadline

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        """True once cancel() was called or the deadline has passed."""
        if self._event.is_set():
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self) -> float | None:
        """Seconds left until the deadline (never negative), or None."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def wait(self, seconds: float) -> bool:
        """Block for up to `seconds`, waking early on cancellation.

        Returns:
            True if the token was cancelled (or the deadline passed) before
            the full delay elapsed, False otherwise.
        """
        remaining = self.remaining()
        if remaining is not None and remaining < seconds:
            # Deadline comes first: sleep until it, then report cancelled.
            self._event.wait(remaining)
            return True
        return self._event.wait(seconds)

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CancelledError("operation cancelled")
        if self.cancelled:
            raise CancelledError("deadline exceeded")

    def __repr__(self) -> str:
        return f"CancelToken(cancelled={self.cancelled}, remaining={self.remaining()})"
