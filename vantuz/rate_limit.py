"""Rate limiter gating the start of outbound requests.

Requests are spaced evenly: a limiter built for N requests per interval
lets one request start every interval / N seconds. Slots are reserved
under a lock and the caller sleeps outside it, so concurrent callers queue
up behind each other without holding the lock while they wait.
"""

from __future__ import annotations

import time
from datetime import timedelta
from threading import Lock

from vantuz.cancellation import CancelToken
from vantuz.exceptions import CancelledError


def to_seconds(per: float | timedelta) -> float:
    """Normalize an interval given as seconds or timedelta."""
    if isinstance(per, timedelta):
        return per.total_seconds()
    return float(per)


class RateLimiter:
    """Allows `requests` request starts evenly spaced over `per` seconds."""

    def __init__(self, requests: int, per: float | timedelta) -> None:
        """Initialize the limiter.

        Args:
            requests: Maximum requests per interval. Must be positive.
            per: Interval length in seconds (or a timedelta). Must be positive.

        Raises:
            ValueError: If requests or per is not positive.
        """
        per_seconds = to_seconds(per)
        if requests <= 0:
            raise ValueError(f"requests must be positive, got {requests}")
        if per_seconds <= 0:
            raise ValueError(f"per must be positive, got {per_seconds}")

        self._requests = requests
        self._per = per_seconds
        self._min_interval = per_seconds / requests
        self._next_slot: float = 0.0
        self._lock = Lock()

    @property
    def requests(self) -> int:
        return self._requests

    @property
    def per(self) -> float:
        return self._per

    @property
    def min_interval(self) -> float:
        """Seconds between two consecutive request starts."""
        return self._min_interval

    def wait(self, ctx: CancelToken | None = None) -> None:
        """Block until the next request may start.

        Args:
            ctx: Optional cancellation token. If it fires during the wait,
                 the reserved slot is released when possible.

        Raises:
            CancelledError: If ctx is cancelled before or during the wait,
                or if its deadline falls before the reserved slot.
        """
        if ctx is not None:
            ctx.raise_if_cancelled()

        with self._lock:
            now = time.monotonic()
            slot = max(now, self._next_slot)
            self._next_slot = slot + self._min_interval

        if ctx is not None and ctx.deadline is not None and slot > ctx.deadline:
            self._release(slot)
            raise CancelledError("rate limiter wait would exceed deadline")

        delay = slot - now
        if delay <= 0:
            return

        if ctx is None:
            time.sleep(delay)
            return

        if ctx.wait(delay):
            self._release(slot)
            raise CancelledError("cancelled while waiting for rate limiter")

    def _release(self, slot: float) -> None:
        """Give a cancelled slot back if nobody reserved after it."""
        with self._lock:
            if self._next_slot == slot + self._min_interval:
                self._next_slot = slot

    def __repr__(self) -> str:
        return f"RateLimiter(requests={self._requests}, per={self._per})"
