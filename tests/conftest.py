"""Shared test fixtures for Wilson tests."""

from collections.abc import Iterator
from pathlib import Path

import pytest

from tests.fakes import make_descriptor
from wilson.cli import CLIContext
from wilson.services import ServiceRegistry


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def registry(tmp_path: Path) -> ServiceRegistry:
    """Four services a, b, c, d; d is the supervisor's own unit."""
    return ServiceRegistry(
        [
            make_descriptor(tmp_path, "a", port=9001),
            make_descriptor(tmp_path, "b", port=9002),
            make_descriptor(tmp_path, "c", port=9003),
            make_descriptor(tmp_path, "d", port=9004, is_supervisor=True),
        ]
    )


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ("WILSON_DEBUG", "WILSON_LOG_LEVEL", "WILSON_STRICT_CONFIG"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture(autouse=True)
def _reset_cli_context() -> Iterator[None]:
    yield
    CLIContext.reset()
