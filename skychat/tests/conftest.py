"""Shared test fixtures."""

from pathlib import Path

import pytest
import yaml

from skychat.config.schema import AppConfig
from skychat.tests.helpers import FakeClock


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig()


@pytest.fixture
def config_yaml_path(tmp_path: Path) -> Path:
    """Write a minimal valid config YAML and return its path."""
    data = {
        "cache": {"ttl_seconds": 120},
        "forecast": {"default_language": "ja"},
    }
    path = tmp_path / "test_config.yaml"
    with open(path, "w") as f:
        yaml.dump(data, f)
    return path
