"""
Pytest configuration: default runs most tests; use --run-slow to include slow tests.
"""

from collections.abc import Iterator

import pytest

from genmedia.core import config as config_mod
from genmedia.core.config import Config
from genmedia.core.providers import reset_registry


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="Run slow tests (live Replicate, fal.ai, Google calls). Default: skip them.",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("--run-slow", False):
        return
    skip_slow = pytest.mark.skip(reason="Slow test; run with --run-slow to include")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


@pytest.fixture(autouse=True)
def isolated_state() -> Iterator[None]:
    """Fresh registry and shared config per test, independent of the caller's environment."""
    orig = config_mod._global_config
    config_mod._global_config = Config()
    reset_registry()
    yield
    reset_registry()
    config_mod._global_config = orig


@pytest.fixture
def no_sleep(monkeypatch: pytest.MonkeyPatch) -> None:
    """Make vendor polling instant."""
    monkeypatch.setattr("genmedia.core.polling.time.sleep", lambda _seconds: None)
