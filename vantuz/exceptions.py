"""Exceptions raised by vantuz.

Every failure of a request execution is one of the classes below. Catch
VantuzError to handle all of them at once.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vantuz.response import Response


class VantuzError(Exception):
    """Base class for vantuz errors."""


class URLParseError(VantuzError):
    """Raised when the target URL cannot be parsed. Nothing is sent."""


class CancelledError(VantuzError):
    """Raised when the caller's CancelToken fires or its deadline passes.

    Can happen during the rate limiter wait (nothing is sent) or while the
    exchange is in flight (the response, if any, is discarded).
    """


class TransportError(VantuzError):
    """Raised when the transport fails (connection, DNS, TLS, timeout, protocol)."""


class DecodeError(VantuzError):
    """Raised when a response body does not decode into the configured target.

    The exchange itself succeeded, so the wrapped Response is still
    available for inspection.

    Attributes:
        body: Raw response body text.
        response: The Response built from the exchange.
    """

    def __init__(
        self,
        message: str,
        body: str = "",
        response: Response | None = None,
    ) -> None:
        super().__init__(message)
        self.body = body
        self.response = response


class ConfigError(VantuzError):
    """Raised when configuration loading fails."""
