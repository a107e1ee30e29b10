"""Tests for status-code bands and the Response wrapper."""

import httpx
import pytest

from tests.conftest import make_client
from vantuz.response import Response, is_http_error, is_http_success


class TestStatusBands:
    @pytest.mark.parametrize("code", [200, 201, 204, 250, 299])
    def test_success_band(self, code: int) -> None:
        assert is_http_success(code)
        assert not is_http_error(code)

    @pytest.mark.parametrize("code", [400, 404, 418, 500, 503, 599])
    def test_error_band(self, code: int) -> None:
        assert is_http_error(code)
        assert not is_http_success(code)

    @pytest.mark.parametrize("code", [100, 101, 199, 300, 301, 304, 399])
    def test_informational_and_redirect_match_neither(self, code: int) -> None:
        assert not is_http_success(code)
        assert not is_http_error(code)

    @pytest.mark.parametrize("code", [0, 199, 600, 999])
    def test_band_edges(self, code: int) -> None:
        assert is_http_success(code) == (200 <= code <= 299)
        assert is_http_error(code) == (400 <= code <= 599)


class TestResponse:
    def _response(self, status_code: int, error_target: object = None) -> Response:
        client = make_client(lambda request: httpx.Response(status_code))
        request = client.new_request()
        if error_target is not None:
            request.set_error(error_target)
        raw = httpx.Response(status_code, text="body", headers={"X-Id": "1"})
        return Response(request, raw)

    def test_classification(self) -> None:
        assert self._response(200).is_success()
        assert not self._response(200).is_error()
        assert self._response(404).is_error()
        assert not self._response(302).is_success()
        assert not self._response(302).is_error()

    def test_error_returns_request_target_even_if_unpopulated(self) -> None:
        target: dict = {}
        response = self._response(200, error_target=target)
        assert response.error() is target
        assert target == {}

    def test_error_none_without_target(self) -> None:
        assert self._response(500).error() is None

    def test_passthrough_properties(self) -> None:
        response = self._response(201)
        assert response.status_code == 201
        assert response.text == "body"
        assert response.content == b"body"
        assert response.headers["x-id"] == "1"
        assert repr(response) == "<Response [201]>"

    def test_content_read_separately_from_raw(self) -> None:
        client = make_client(lambda request: httpx.Response(200))
        raw = httpx.Response(
            200, headers={"Content-Type": "text/plain; charset=latin-1"}, content=b""
        )
        response = Response(client.new_request(), raw, "café".encode("latin-1"))
        assert response.content == b"caf\xe9"
        assert response.text == "café"
