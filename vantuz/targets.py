"""Unmarshal targets for response bodies.

A target is anything with a populate_json(data) method. Requests hold one
target for success responses and one for error responses; the body is
decoded into at most one of them, depending on the status code.

Usage:
    class ApiError(BaseModel):
        message: str

    err = JsonTarget(ApiError)
    resp = client.new_request().set_error(err).get(url)
    if resp.is_error():
        print(err.value.message)
"""

from __future__ import annotations

import json
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

from pydantic import TypeAdapter

from vantuz.exceptions import DecodeError
from vantuz.response import is_http_error, is_http_success

T = TypeVar("T")


@runtime_checkable
class Unmarshaler(Protocol):
    """Value that can be populated from JSON bytes."""

    def populate_json(self, data: bytes) -> None:
        """Decode `data` into this value. Raises on malformed or mismatched JSON."""
        ...


class JsonTarget(Generic[T]):
    """Holds a value decoded from JSON and validated as type T.

    T may be a pydantic model, a dataclass, a TypedDict, or any type
    pydantic can validate. Without a type, the raw JSON value is kept.
    """

    def __init__(self, type_: Any = Any) -> None:
        self._type = type_
        self._adapter: TypeAdapter[T] = TypeAdapter(type_)
        self.value: T | None = None
        self._populated = False

    @property
    def populated(self) -> bool:
        """True once a body decoded into this target, even a JSON null."""
        return self._populated

    def populate_json(self, data: bytes) -> None:
        self.value = self._adapter.validate_json(data)
        self._populated = True

    def __repr__(self) -> str:
        name = getattr(self._type, "__name__", repr(self._type))
        return f"JsonTarget[{name}](value={self.value!r})"


class DictTarget:
    """Adapts a caller-owned dict: a JSON object body is merged into it."""

    def __init__(self, target: dict[str, Any]) -> None:
        self.target = target

    def populate_json(self, data: bytes) -> None:
        decoded = json.loads(data)
        if not isinstance(decoded, dict):
            raise ValueError(f"expected a JSON object, got {type(decoded).__name__}")
        self.target.update(decoded)


def as_unmarshaler(target: Any) -> Unmarshaler:
    """Return `target` as an Unmarshaler, wrapping plain dicts.

    Raises:
        TypeError: If target is neither an Unmarshaler nor a dict.
    """
    if isinstance(target, Unmarshaler):
        return target
    if isinstance(target, dict):
        return DictTarget(target)
    raise TypeError(
        f"Unsupported unmarshal target {type(target).__name__}: "
        "expected an object with populate_json() or a dict"
    )


def unmarshal_body(
    body: bytes,
    status_code: int,
    result: Unmarshaler | None,
    error: Unmarshaler | None,
) -> None:
    """Decode body into the error or result target, chosen by status code.

    The error target wins for 4xx/5xx, the result target for 2xx. Any other
    status, a missing target, or an empty body means nothing is decoded.

    Raises:
        DecodeError: If the body does not decode into the chosen target.
    """
    if not body:
        return

    if error is not None and is_http_error(status_code):
        _populate(error, body, "unmarshal response error")
        return

    if result is not None and is_http_success(status_code):
        _populate(result, body, "unmarshal response")


def _populate(target: Unmarshaler, body: bytes, prefix: str) -> None:
    try:
        target.populate_json(body)
    except Exception as e:
        text = body.decode("utf-8", errors="replace")
        raise DecodeError(f"{prefix}: {e}. body: {text}", body=text) from e
