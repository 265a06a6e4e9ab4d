"""Unit tests for the FINRA MCP server wiring.

Tests cover:
- Lazy creation and reuse of the shared Finra instance
- Signal handling and the console entry point
"""

# pyright: reportPrivateUsage=false

import signal
from collections.abc import Iterator
from unittest.mock import MagicMock, patch

import pytest

from finra_client import server
from finra_client.client.finra import MOCK_SHORT_INTEREST_ENDPOINT, Finra


@pytest.fixture
def reset_finra() -> Iterator[None]:
    """Forget the process-wide Finra instance around each test."""
    server._finra = None
    yield
    server._finra = None


@pytest.fixture
def mock_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set up environment variables for testing."""
    monkeypatch.setenv("FINRA_CLIENT_ID", "id")
    monkeypatch.setenv("FINRA_CLIENT_SECRET", "secret")
    monkeypatch.setenv("FINRA_USE_MOCK_DATASETS", "true")


@pytest.mark.usefixtures("reset_finra", "mock_env")
def test_get_finra_is_created_once() -> None:
    """get_finra should build one instance from the environment and reuse it."""
    first = server.get_finra()
    second = server.get_finra()

    assert isinstance(first, Finra)
    assert first is second
    assert first.short_interest_endpoint == MOCK_SHORT_INTEREST_ENDPOINT


@pytest.mark.usefixtures("reset_finra")
def test_get_finra_requires_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    """Missing credentials should surface as a configuration error."""
    monkeypatch.delenv("FINRA_CLIENT_ID", raising=False)
    monkeypatch.delenv("FINRA_CLIENT_SECRET", raising=False)

    with pytest.raises(RuntimeError, match="Invalid FINRA configuration"):
        server.get_finra()

    assert server._finra is None


def test_handle_interrupt_exits() -> None:
    """The signal handler should exit the process cleanly."""
    with pytest.raises(SystemExit) as exc_info:
        server.handle_interrupt(signal.SIGINT, None)

    assert exc_info.value.code == 0


def test_main_installs_handlers_and_runs_app() -> None:
    """main should register SIGINT/SIGTERM handlers and start the app."""
    with (
        patch("finra_client.server.signal.signal") as mock_signal,
        patch.object(server, "app", MagicMock()) as mock_app,
    ):
        server.main()

    registered = {call.args[0] for call in mock_signal.call_args_list}
    assert registered == {signal.SIGINT, signal.SIGTERM}
    mock_app.run.assert_called_once_with()
