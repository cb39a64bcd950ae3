"""Tests for environment-driven server configuration."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from fileserver.config import ServerConfig, load_server_config

ENV_VARS = (
    "P2P_SERVER_HOST",
    "P2P_SERVER_PORT",
    "P2P_SERVER_FILES_DIR",
    "P2P_WORKER_COUNT",
    "P2P_BUFFER_SIZE",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    config = load_server_config()

    assert config.host == "0.0.0.0"
    assert config.port == 8000
    assert config.files_dir == Path("server_files")
    assert config.worker_count == 8
    assert config.buffer_size == 1024


def test_environment_overrides(clean_env):
    clean_env.setenv("P2P_SERVER_HOST", "127.0.0.1")
    clean_env.setenv("P2P_SERVER_PORT", "9001")
    clean_env.setenv("P2P_SERVER_FILES_DIR", "/srv/shared")
    clean_env.setenv("P2P_WORKER_COUNT", "2")
    clean_env.setenv("P2P_BUFFER_SIZE", "4096")

    config = load_server_config()

    assert config.host == "127.0.0.1"
    assert config.port == 9001
    assert config.files_dir == Path("/srv/shared")
    assert config.worker_count == 2
    assert config.buffer_size == 4096


@pytest.mark.parametrize("name, value", [
    ("P2P_SERVER_PORT", "70000"),
    ("P2P_SERVER_PORT", "eighty"),
    ("P2P_WORKER_COUNT", "0"),
    ("P2P_BUFFER_SIZE", "4"),
])
def test_invalid_values_rejected(clean_env, name, value):
    clean_env.setenv(name, value)

    with pytest.raises(ValidationError):
        load_server_config()


def test_buffer_must_hold_a_uint():
    assert ServerConfig(buffer_size=8).buffer_size == 8
    with pytest.raises(ValidationError):
        ServerConfig(buffer_size=7)
