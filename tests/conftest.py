"""Pytest configuration and fixtures for vantuz tests.

This file provides:
- PortReservation: Race-free port allocation for test servers
- MockServer: Subprocess management for the mock API server
- make_client: Client wired to an in-process httpx.MockTransport
- RecordingLogger: Logger that keeps every event for assertions
"""

from __future__ import annotations

import socket
import subprocess
import sys
import time
from pathlib import Path
from typing import Any, Callable, Generator

import httpx
import pytest

from vantuz.client import Client, new_client

# Project root for fixture paths
PROJECT_ROOT = Path(__file__).parent.parent
MOCK_SERVER_MODULE = "tests.integration.mock_server"


def make_client(
    handler: Callable[[httpx.Request], httpx.Response],
    logger: Any = None,
) -> Client:
    """Create a client with standard defaults whose transport calls `handler`.

    Prefer this over building httpx clients by hand - it keeps the defaults
    installed by new_client() and only swaps the network out. The transport
    new_client() built is closed by set_transport().
    """
    client = new_client()
    client.set_transport(
        httpx.Client(
            transport=httpx.MockTransport(handler),
            timeout=client.transport.timeout,
            follow_redirects=client.transport.follow_redirects,
        )
    )
    if logger is not None:
        client.set_logger(logger)
    return client


class RecordingLogger:
    """Logger that records debug and error events."""

    def __init__(self) -> None:
        self.debug_events: list[str] = []
        self.error_events: list[tuple[str, BaseException]] = []

    def debug(self, msg: str, *args: Any) -> None:
        self.debug_events.append(msg % args if args else msg)

    def error(self, context: str, err: BaseException) -> None:
        self.error_events.append((context, err))


class PortReservation:
    """Holds a reserved port with socket kept open to prevent races.

    The socket stays bound until release() is called right before the server
    starts, so no other process can take the port in between.
    """

    def __init__(self) -> None:
        self._socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._socket.bind(("127.0.0.1", 0))  # Port 0 = OS assigns ephemeral port
        self._port = self._socket.getsockname()[1]
        self._released = False

    @property
    def port(self) -> int:
        return self._port

    def release(self) -> int:
        """Release the socket and return the port for server use.

        Safe to call multiple times - subsequent calls are no-ops.
        """
        if not self._released:
            self._socket.close()
            self._released = True
        return self._port

    def __enter__(self) -> PortReservation:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.release()


def wait_for_server_ready(host: str, port: int, timeout: float = 10.0) -> bool:
    """Block until server accepts TCP connections, or timeout expires."""
    start = time.time()
    while time.time() - start < timeout:
        try:
            with socket.create_connection((host, port), timeout=1.0):
                return True
        except (ConnectionRefusedError, socket.timeout, OSError):
            time.sleep(0.1)
    return False


class MockServer:
    """Manages the mock server subprocess for integration tests.

    Runs tests/integration/mock_server.py as a subprocess. The server counts
    hits, echoes form fields, and returns canned JSON and plain-text bodies.
    """

    def __init__(self, reservation: PortReservation) -> None:
        self._reservation = reservation
        self.port = reservation.port
        self.host = "127.0.0.1"
        self.base_url = f"http://{self.host}:{self.port}"
        self._process: subprocess.Popen | None = None

    def start(self) -> None:
        """Start the mock server subprocess.

        Raises:
            RuntimeError: If server fails to start within 10 seconds.
        """
        self._reservation.release()

        self._process = subprocess.Popen(
            [
                sys.executable, "-m", MOCK_SERVER_MODULE,
                "--host", self.host,
                "--port", str(self.port),
            ],
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            cwd=PROJECT_ROOT,
        )

        if not wait_for_server_ready(self.host, self.port):
            stderr = ""
            if self._process and self._process.stderr:
                stderr = self._process.stderr.read().decode(errors="replace")
            self.stop()
            raise RuntimeError(
                f"MockServer failed to start on port {self.port}. "
                f"stderr: {stderr or '(empty)'}"
            )

    def stop(self) -> None:
        """Stop the mock server subprocess with graceful shutdown.

        Uses SIGTERM first, then SIGKILL after 5s if process doesn't exit.
        Safe to call multiple times or if server was never started.
        """
        if self._process:
            self._process.terminate()
            try:
                self._process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                # Process ignored SIGTERM, escalate to SIGKILL
                self._process.kill()
                try:
                    self._process.wait(timeout=5)
                except subprocess.TimeoutExpired:
                    pass  # Process is unkillable (zombie?), nothing more we can do
            self._process = None

    def url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def __enter__(self) -> MockServer:
        self.start()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.stop()


# =============================================================================
# Pytest Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def mock_server() -> Generator[MockServer, None, None]:
    """Start the mock server once per test session."""
    with MockServer(PortReservation()) as server:
        yield server


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


# =============================================================================
# Pytest Hooks
# =============================================================================


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Automatically apply markers based on test location.

    Enables running subsets via:
        pytest -m integration  # only integration tests
        pytest -m unit         # only unit tests
    """
    for item in items:
        test_path = Path(item.fspath)
        if "integration" in test_path.parts:
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)
