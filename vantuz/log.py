"""Logging sinks used by the client.

The client never logs through the logging module directly. It talks to a
Logger, so callers decide where (and whether) events go. NoopLogger is
installed by default; StdLogger forwards to the standard logging module.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Logger(Protocol):
    """Sink for client events.

    Example:
        >>> class PrintLogger:
        ...     def debug(self, msg, *args): print(msg % args)
        ...     def error(self, context, err): print(context, err)
        >>>
        >>> isinstance(PrintLogger(), Logger)
        True
    """

    def debug(self, msg: str, *args: Any) -> None:
        """Record a debug event. `msg` is a %-style format string."""
        ...

    def error(self, context: str, err: BaseException) -> None:
        """Record an error with a context label (may be empty)."""
        ...


class NoopLogger:
    """Discards every event."""

    def debug(self, msg: str, *args: Any) -> None:
        pass

    def error(self, context: str, err: BaseException) -> None:
        pass


class StdLogger:
    """Forwards events to a standard library logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("vantuz")

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def debug(self, msg: str, *args: Any) -> None:
        self._logger.debug(msg, *args)

    def error(self, context: str, err: BaseException) -> None:
        if context:
            self._logger.error("%s: %s", context, err)
        else:
            self._logger.error("%s", err)
