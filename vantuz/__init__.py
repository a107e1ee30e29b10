"""vantuz - HTTP client with per-client defaults, rate limiting and JSON targets.

Quick start:
    >>> from vantuz import JsonTarget, new_client
    >>> client = new_client().set_rate_limit(5, 1.0)
    >>> err = JsonTarget()
    >>> resp = client.new_request().set_error(err).get("https://api.example.com/items")
    >>> if resp.is_error():
    ...     print(err.value)
"""

__version__ = "0.1.0"

from vantuz.cancellation import CancelToken
from vantuz.client import Client, new_client
from vantuz.exceptions import (
    CancelledError,
    ConfigError,
    DecodeError,
    TransportError,
    URLParseError,
    VantuzError,
)
from vantuz.log import Logger, NoopLogger, StdLogger
from vantuz.models import ClientConfig, RateLimitConfig
from vantuz.rate_limit import RateLimiter
from vantuz.request import Request
from vantuz.response import Response, is_http_error, is_http_success
from vantuz.targets import DictTarget, JsonTarget, Unmarshaler

__all__ = [
    "CancelToken",
    "CancelledError",
    "Client",
    "ClientConfig",
    "ConfigError",
    "DecodeError",
    "DictTarget",
    "JsonTarget",
    "Logger",
    "NoopLogger",
    "RateLimitConfig",
    "RateLimiter",
    "Request",
    "Response",
    "StdLogger",
    "TransportError",
    "URLParseError",
    "Unmarshaler",
    "VantuzError",
    "is_http_error",
    "is_http_success",
    "new_client",
]
