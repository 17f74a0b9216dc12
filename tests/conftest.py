"""Pytest fixtures for jsonconfig tests."""

import json

import pytest

from jsonconfig import ConfigStore, read_config

SAMPLE_CONFIG = {
    "server": {"port": 8080, "debug": True, "name": "api"},
    "db": {
        "dsn": "postgres://localhost/app",
        "pool": 4,
        "timeout": "2.5",
        "retries": "3",
        "ratio": 0.75,
        "replica": None,
        "hosts": ["a", "b"],
    },
}


@pytest.fixture
def config_file(tmp_path):
    """Write the sample configuration to a temporary JSON file."""
    path = tmp_path / "config.json"
    path.write_text(json.dumps(SAMPLE_CONFIG), encoding="utf-8")
    return path


@pytest.fixture
def store(config_file):
    """Provide a store loaded from the sample file."""
    return read_config(config_file)


@pytest.fixture
def empty_store():
    """Provide a store with no sections."""
    return ConfigStore()
