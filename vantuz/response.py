"""Response returned by request executions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx

if TYPE_CHECKING:
    from vantuz.request import Request


def is_http_error(status_code: int) -> bool:
    """Status code in the error band [400, 599]."""
    return 400 <= status_code <= 599


def is_http_success(status_code: int) -> bool:
    """Status code in the success band [200, 299]."""
    return 200 <= status_code <= 299


class Response:
    """An HTTP response whose body has already been read and closed.

    Wraps the raw httpx.Response and the body bytes read from it, and keeps
    a reference to the Request that produced it, so error() can hand back
    the request's error target.
    """

    __slots__ = ("_content", "_raw", "_request")

    def __init__(
        self,
        request: Request,
        raw: httpx.Response,
        content: bytes | None = None,
    ) -> None:
        self._request = request
        self._raw = raw
        self._content = raw.content if content is None else content

    @property
    def raw(self) -> httpx.Response:
        return self._raw

    @property
    def request(self) -> Request:
        return self._request

    @property
    def status_code(self) -> int:
        return self._raw.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self._raw.headers

    @property
    def content(self) -> bytes:
        return self._content

    @property
    def text(self) -> str:
        return self._content.decode(self._raw.encoding or "utf-8", errors="replace")

    @property
    def url(self) -> httpx.URL:
        return self._raw.url

    def is_error(self) -> bool:
        return is_http_error(self.status_code)

    def is_success(self) -> bool:
        return is_http_success(self.status_code)

    def error(self) -> Any:
        """The target passed to Request.set_error().

        Only populated when is_error() is true; check that first.
        """
        return self._request.error_target

    def __repr__(self) -> str:
        return f"<Response [{self.status_code}]>"
