"""Request builder and the execution pipeline.

A Request is created by Client.new_request() with copies of the client's
default headers and query parameters. It is configured through fluent
setters and executed by one of get/post/put/patch/delete.

Execution order:
    1. parse the URL (fails before any I/O)
    2. replace the URL query with the encoded query parameters
    3. build the outbound request with body and headers
    4. wait for the rate limiter, then check the CancelToken
    5. send through the transport
    6. read the whole body and close the response
    7. wrap everything into a Response
    8. decode the body into the result or error target

Executing does not change the request, so one configured request can be
sent several times.
"""

from __future__ import annotations

import time
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

import httpx

from vantuz.cancellation import CancelToken
from vantuz.exceptions import (
    CancelledError,
    DecodeError,
    TransportError,
    URLParseError,
    VantuzError,
)
from vantuz.response import Response
from vantuz.targets import Unmarshaler, as_unmarshaler, unmarshal_body

if TYPE_CHECKING:
    from vantuz.client import Client


FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
JSON_CONTENT_TYPE = "application/json"

QueryValues = Mapping[str, Sequence[str] | str]


def copy_values(values: QueryValues) -> dict[str, list[str]]:
    """Copy a multi-value mapping so no value list is shared with the source."""
    return {key: _as_list(vals) for key, vals in values.items()}


def encode_values(values: QueryValues) -> str:
    """Encode a multi-value mapping as application/x-www-form-urlencoded.

    Keys are sorted; a key with several values is repeated (a=1&a=2).
    """
    pairs = [(key, value) for key in sorted(values) for value in _as_list(values[key])]
    return urlencode(pairs)


def _as_list(vals: Sequence[str] | str) -> list[str]:
    # A bare string is one value, not a sequence of characters.
    if isinstance(vals, str):
        return [vals]
    return list(vals)


class Request:
    """Per-call request builder.

    Usage:
        resp = (
            client.new_request()
            .set_result(JsonTarget(User))
            .set_error(JsonTarget(ApiError))
            .get("https://api.example.com/users/1")
        )
    """

    def __init__(self, client: Client) -> None:
        self._client = client
        self._headers: dict[str, str] = dict(client.headers)

        # Absent unless the client has defaults or set_query_params is called.
        self._params: dict[str, list[str]] | None = None
        client_params = client.query_params
        if client_params:
            self._params = copy_values(client_params)

        self._body = ""

        self._error: Any = None
        self._error_unmarshaler: Unmarshaler | None = None
        self._result: Any = None
        self._result_unmarshaler: Unmarshaler | None = None

    @property
    def client(self) -> Client:
        return self._client

    @property
    def headers(self) -> dict[str, str]:
        """Copy of the headers that will be sent."""
        return dict(self._headers)

    @property
    def body(self) -> str:
        return self._body

    @property
    def error_target(self) -> Any:
        """Object passed to set_error(), or None."""
        return self._error

    @property
    def result_target(self) -> Any:
        """Object passed to set_result(), or None."""
        return self._result

    # -------------------------------------------------------------------------
    # HTTP methods
    # -------------------------------------------------------------------------

    def get(self, url: str, ctx: CancelToken | None = None) -> Response:
        return self._send("GET", url, ctx)

    def post(self, url: str, ctx: CancelToken | None = None) -> Response:
        return self._send("POST", url, ctx)

    def put(self, url: str, ctx: CancelToken | None = None) -> Response:
        return self._send("PUT", url, ctx)

    def patch(self, url: str, ctx: CancelToken | None = None) -> Response:
        return self._send("PATCH", url, ctx)

    def delete(self, url: str, ctx: CancelToken | None = None) -> Response:
        return self._send("DELETE", url, ctx)

    # -------------------------------------------------------------------------
    # Setters
    # -------------------------------------------------------------------------

    def set_error(self, target: Any) -> Request:
        """Decode the body into `target` when the status code is 4xx/5xx.

        `target` is an Unmarshaler (e.g. JsonTarget) or a dict updated in
        place. None is ignored and keeps the previous target.
        """
        if target is None:
            return self
        self._error_unmarshaler = as_unmarshaler(target)
        self._error = target
        return self

    def set_result(self, target: Any) -> Request:
        """Decode the body into `target` when the status code is 2xx.

        None is ignored and keeps the previous target.
        """
        if target is None:
            return self
        self._result_unmarshaler = as_unmarshaler(target)
        self._result = target
        return self

    def set_header(self, name: str, value: str) -> Request:
        self._headers[name] = value
        return self

    def set_headers(self, headers: Mapping[str, str]) -> Request:
        self._headers.update(headers)
        return self

    def set_form_url_values(self, data: QueryValues) -> Request:
        """Set an application/x-www-form-urlencoded body from multi-value data.

        Empty data leaves the current body untouched.
        """
        if not data:
            return self
        self._set_string_body(encode_values(data), FORM_CONTENT_TYPE)
        return self

    def set_form_url_map(self, data: Mapping[str, str]) -> Request:
        """Set an application/x-www-form-urlencoded body from single values.

        Empty data leaves the current body untouched.
        """
        if not data:
            return self
        self._set_string_body(
            encode_values({key: [value] for key, value in data.items()}),
            FORM_CONTENT_TYPE,
        )
        return self

    def set_json_string(self, data: str) -> Request:
        """Set a raw JSON body. An empty string is applied too."""
        self._set_string_body(data, JSON_CONTENT_TYPE)
        return self

    def query_params(self) -> dict[str, list[str]] | None:
        """The request's own query map (not a copy), or None if unset."""
        return self._params

    def set_query_params(self, params: dict[str, list[str]] | None) -> Request:
        """Replace the request's query map."""
        self._params = params
        return self

    def _set_string_body(self, value: str, content_type: str) -> None:
        self._body = value
        self._headers["Content-Type"] = content_type
        self._headers["Content-Length"] = str(len(value.encode("utf-8")))

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    def _send(self, method: str, url: str, ctx: CancelToken | None) -> Response:
        """Run the pipeline, logging any failure before it propagates."""
        try:
            return self._execute(method, url, ctx)
        except Exception as e:
            self._client.logger.error("", e)
            raise

    def _execute(self, method: str, url: str, ctx: CancelToken | None) -> Response:
        log = self._client.logger
        transport = self._client.transport
        log.debug("%s: %s", method, url)

        try:
            target = httpx.URL(url)
        except httpx.InvalidURL as e:
            raise URLParseError(f"invalid URL {url!r}: {e}") from e

        for name, value in self._headers.items():
            log.debug('set header: "%s": "%s"', name, value)

        if self._params:
            query = encode_values(self._params)
            target = target.copy_with(query=query.encode("ascii"))
            log.debug("query: %s", query)

        try:
            outbound = transport.build_request(
                method,
                target,
                headers=self._headers,
                content=self._body.encode("utf-8") if self._body else None,
            )
        except UnicodeEncodeError as e:
            # httpx requires ASCII header names and values.
            raise TransportError(
                f"{method} {url} encoding error: non-ASCII character "
                f"{e.object[e.start:e.end]!r} in request headers"
            ) from e

        limiter = self._client.rate_limiter
        if limiter is not None:
            log.debug("limiter wait...")
            limiter.wait(ctx)

        if ctx is not None:
            ctx.raise_if_cancelled()

        # The client's overall timeout and the token's deadline both cap
        # each phase of the transport timeout for this call.
        timeouts = outbound.extensions.get("timeout", {})
        total = self._client.timeout
        exchange_deadline: float | None = None
        if total is not None:
            exchange_deadline = time.monotonic() + total
            timeouts, _ = _cap_timeouts(timeouts, total)
        deadline_bound = False
        if ctx is not None:
            remaining = ctx.remaining()
            if remaining is not None:
                timeouts, deadline_bound = _cap_timeouts(timeouts, remaining)
        outbound.extensions["timeout"] = timeouts

        try:
            raw = transport.send(outbound, stream=True)
        except httpx.RequestError as e:
            raise _map_transport_error(e, method, url, ctx, deadline_bound) from e

        chunks: list[bytes] = []
        try:
            for chunk in raw.iter_bytes():
                chunks.append(chunk)
                if ctx is not None and ctx.cancelled:
                    break
                if exchange_deadline is not None and time.monotonic() >= exchange_deadline:
                    raise TransportError(
                        f"{method} {url} request timeout: response not complete "
                        f"within {total}s"
                    )
        except httpx.RequestError as e:
            raise _map_transport_error(e, method, url, ctx, deadline_bound) from e
        finally:
            raw.close()
        body = b"".join(chunks)

        if ctx is not None and ctx.cancelled:
            raise CancelledError(f"{method} {url} cancelled while in flight")

        response = Response(self, raw, body)
        try:
            unmarshal_body(
                body,
                raw.status_code,
                result=self._result_unmarshaler,
                error=self._error_unmarshaler,
            )
        except DecodeError as e:
            e.response = response
            raise

        return response


def _map_transport_error(
    e: httpx.RequestError,
    method: str,
    url: str,
    ctx: CancelToken | None,
    deadline_bound: bool = False,
) -> VantuzError:
    """Translate an httpx failure into CancelledError or TransportError.

    A timeout counts as cancellation when the token's deadline was what
    limited the transport timeout.
    """
    if ctx is not None and ctx.cancelled:
        return CancelledError(f"{method} {url} cancelled: {e}")
    if deadline_bound and isinstance(e, httpx.TimeoutException):
        return CancelledError(f"{method} {url} deadline exceeded: {e}")
    if isinstance(e, httpx.TimeoutException):
        return TransportError(f"{method} {url} request timeout: {e}")
    if isinstance(e, httpx.ConnectError):
        return TransportError(f"{method} {url} connection error: {e}")
    return TransportError(f"{method} {url} request error: {e}")


def _cap_timeouts(
    timeouts: Mapping[str, float | None],
    limit: float,
) -> tuple[dict[str, float | None], bool]:
    """Cap every httpx timeout phase at `limit` seconds.

    Returns the capped phases and whether any phase was lowered.
    """
    capped: dict[str, float | None] = {}
    lowered = False
    for phase in ("connect", "read", "write", "pool"):
        value = timeouts.get(phase)
        if value is None or limit < value:
            capped[phase] = limit
            lowered = True
        else:
            capped[phase] = value
    return capped, lowered
