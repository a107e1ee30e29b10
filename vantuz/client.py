"""Client holding defaults shared by every request it creates.

Configure the client once, then create requests from it. Setters are not
thread-safe; finish configuration before using the client from several
threads. Requests copy the client's headers and query parameters when they
are created, so later client changes only affect later requests.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import timedelta
from typing import Any

import httpx

from vantuz.log import Logger, NoopLogger
from vantuz.models import ClientConfig
from vantuz.rate_limit import RateLimiter, to_seconds
from vantuz.request import QueryValues, Request, copy_values


class Client:
    """HTTP client with default headers, query parameters and rate limit.

    Usage:
        client = new_client().set_authorization("Bearer ...")
        resp = client.new_request().get("https://api.example.com/items")

    Or with context manager:
        with new_client() as client:
            client.new_request().post(url)
    """

    def __init__(
        self,
        transport: httpx.Client | None = None,
        logger: Logger | None = None,
        timeout: float | None = None,
    ) -> None:
        """Create a bare client.

        Prefer new_client(), which installs the standard defaults.

        Args:
            transport: httpx client used to send requests.
            logger: Sink for debug and error events. Defaults to NoopLogger.
            timeout: Overall limit in seconds for one exchange, from sending
                     the request to reading the last body byte. None means
                     only the transport's per-phase timeouts apply.
        """
        self._transport = transport or httpx.Client()
        self._logger: Logger = logger or NoopLogger()
        self._timeout = timeout
        self._rate_limiter: RateLimiter | None = None
        self._headers: dict[str, str] = {}
        self._query_params: dict[str, list[str]] = {}

    def __enter__(self) -> Client:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Close the transport and its connection pool."""
        self._transport.close()

    @property
    def transport(self) -> httpx.Client:
        return self._transport

    @property
    def timeout(self) -> float | None:
        """Overall exchange timeout in seconds, or None."""
        return self._timeout

    @property
    def logger(self) -> Logger:
        return self._logger

    @property
    def rate_limiter(self) -> RateLimiter | None:
        return self._rate_limiter

    @property
    def headers(self) -> dict[str, str]:
        """Copy of the default headers."""
        return dict(self._headers)

    @property
    def query_params(self) -> dict[str, list[str]]:
        """Copy of the default query parameters."""
        return copy_values(self._query_params)

    def new_request(self) -> Request:
        """Create a request seeded with this client's defaults."""
        return Request(self)

    def set_global_header(self, name: str, value: str) -> Client:
        """Set a header sent by every request created afterwards."""
        self._headers[name] = value
        return self

    def set_global_headers(self, headers: Mapping[str, str]) -> Client:
        self._headers.update(headers)
        return self

    def set_user_agent(self, value: str) -> Client:
        return self.set_global_header("User-Agent", value)

    def set_authorization(self, value: str) -> Client:
        return self.set_global_header("Authorization", value)

    def set_global_query_params(self, params: QueryValues) -> Client:
        """Replace the default query parameters."""
        self._query_params = copy_values(params)
        return self

    def set_rate_limit(self, requests: int, per: float | timedelta) -> Client:
        """Allow at most `requests` requests per `per` seconds, evenly spaced.

        requests <= 0 or per <= 0 disables limiting.
        """
        if requests <= 0 or to_seconds(per) <= 0:
            self._rate_limiter = None
            return self
        self._rate_limiter = RateLimiter(requests, per)
        return self

    def set_logger(self, logger: Logger) -> None:
        self._logger = logger

    def set_transport(self, transport: httpx.Client | None) -> None:
        """Replace the transport and close the previous one. None is ignored."""
        if transport is None or transport is self._transport:
            return
        previous = self._transport
        self._transport = transport
        previous.close()


def new_client(config: ClientConfig | None = None) -> Client:
    """Create a client with the standard defaults.

    Defaults: 20 second overall timeout per exchange, redirects followed,
    NoopLogger, Content-Type: application/json, User-Agent: vantuz, no rate
    limit.
    A config, when given, is applied on top of these defaults.
    """
    config = config or ClientConfig()

    client = Client(
        transport=httpx.Client(timeout=config.timeout, follow_redirects=True),
        timeout=config.timeout,
    )
    client.set_logger(NoopLogger())
    client.set_global_header("Content-Type", "application/json")
    client.set_user_agent(config.user_agent)

    if config.authorization is not None:
        client.set_authorization(config.authorization)
    if config.headers:
        client.set_global_headers(config.headers)
    if config.query:
        client.set_global_query_params(config.query)
    if config.rate_limit is not None:
        client.set_rate_limit(config.rate_limit.requests, config.rate_limit.per)

    return client
