"""Shared test fixtures for codebottle.

Provides an in-memory fake of the CodeBottle API served through
:class:`httpx.MockTransport`, a client wired to it, isolated config
environments and output state management. These fixtures are discovered by
pytest and available to all test modules without explicit imports.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Callable, Union

import httpx
import pytest

from codebottle.client import CodeBottle
from codebottle.models import ClientConfig
from codebottle.output import OutputFormat, OutputManager, reset_output, set_output

Payload = Union[Any, Callable[[httpx.Request], Any]]


def _raw_path(request: httpx.Request) -> str:
    return request.url.raw_path.decode("ascii").split("?", 1)[0].lstrip("/")


# ---------------------------------------------------------------------------
# Fake API
# ---------------------------------------------------------------------------


class FakeAPI:
    """Route table answering requests the way the CodeBottle API does.

    Routes are keyed by ``(method, path)`` where *path* has no leading
    slash, e.g. ``("GET", "snippets/abc123")``. Paths are matched as sent, with
    percent-escapes intact. A route's payload may be a
    callable taking the :class:`httpx.Request`, for responses that change
    between calls. Unknown routes answer ``404 {"error": "Not found"}``.
    """

    def __init__(self) -> None:
        self._routes: dict[tuple[str, str], tuple[int, Payload]] = {}
        self._lock = threading.Lock()
        self.requests: list[httpx.Request] = []

    def add(self, path: str, payload: Payload = None, status: int = 200, method: str = "GET") -> None:
        self._routes[(method, path)] = (status, payload)

    def calls(self, path: str, method: str = "GET") -> int:
        with self._lock:
            return sum(
                1 for r in self.requests
                if r.method == method and _raw_path(r) == path
            )

    def handler(self, request: httpx.Request) -> httpx.Response:
        with self._lock:
            self.requests.append(request)
        path = _raw_path(request)
        route = self._routes.get((request.method, path))
        if route is None:
            return httpx.Response(404, json={"error": "Not found"})
        status, payload = route
        if callable(payload):
            payload = payload(request)
        if status == 204:
            return httpx.Response(204)
        if isinstance(payload, (str, bytes)):
            return httpx.Response(status, content=payload)
        return httpx.Response(status, json=payload)

    def http_client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fake_api() -> FakeAPI:
    """An empty fake API; tests add the routes they need."""
    return FakeAPI()


@pytest.fixture
def make_client(fake_api: FakeAPI):
    """Factory for clients talking to :func:`fake_api`, closed after the test."""
    created: list[CodeBottle] = []

    def _make(lazy_loading: bool = False, token: str | None = None, **config: Any) -> CodeBottle:
        config.setdefault("max_workers", 4)
        client = CodeBottle(
            ClientConfig(**config),
            token=token,
            http_client=fake_api.http_client(),
            lazy_loading=lazy_loading,
        )
        created.append(client)
        return client

    yield _make
    for client in created:
        client.close()


@pytest.fixture
def client(make_client) -> CodeBottle:
    """A client without lazy loading, bound to :func:`fake_api`."""
    return make_client()


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale.
    Resetting forces a fresh manager to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_CONFIG_HOME at ``tmp_path/config``, forces the XDG layout
    and clears all CODEBOTTLE_* environment variables.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("codebottle.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    for var in ["CODEBOTTLE_BASE_URL", "CODEBOTTLE_TOKEN"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
