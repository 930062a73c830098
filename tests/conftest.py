"""Pytest configuration and fixtures for comment_translate tests."""

import sys
from collections.abc import Generator
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent))
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from test_helpers import FakeBackend, FakeLocator, RecordingSink


@pytest.fixture(autouse=True)
def isolate_config(monkeypatch, tmp_path) -> Generator[None]:
    """Point the config file at a temp location and forget any loaded config."""
    import comment_translate.config as config

    config_dir = tmp_path / "config"
    monkeypatch.setattr(config, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config, "CONFIG_PATH", config_dir / "config.toml")
    for var in (
        "COMMENT_TRANSLATE_SERVICE",
        "COMMENT_TRANSLATE_TARGET",
        "COMMENT_TRANSLATE_SOURCE",
    ):
        monkeypatch.delenv(var, raising=False)
    config.reset_config()

    yield

    config.reset_config()


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def locator() -> FakeLocator:
    return FakeLocator()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()
