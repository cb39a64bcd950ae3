"""Configuration settings for the file server."""

import os
from pathlib import Path

from pydantic import BaseModel, Field

from common.constants import (
    DEFAULT_BUFFER_SIZE,
    DEFAULT_SERVER_FILES_DIR,
    DEFAULT_SERVER_HOST,
    DEFAULT_SERVER_PORT,
    DEFAULT_WORKER_COUNT,
    UINT_SIZE,
)


class ServerConfig(BaseModel):
    """Validated server settings."""
    host: str = DEFAULT_SERVER_HOST
    port: int = Field(DEFAULT_SERVER_PORT, ge=0, le=65535)
    files_dir: Path = Path(DEFAULT_SERVER_FILES_DIR)
    worker_count: int = Field(DEFAULT_WORKER_COUNT, ge=1)
    buffer_size: int = Field(DEFAULT_BUFFER_SIZE, ge=UINT_SIZE)


def load_server_config() -> ServerConfig:
    """
    Build the server configuration from environment variables.

    Raises:
        pydantic.ValidationError: If a value is malformed or out of range
    """
    return ServerConfig(
        host=os.environ.get("P2P_SERVER_HOST", DEFAULT_SERVER_HOST),
        port=os.environ.get("P2P_SERVER_PORT", str(DEFAULT_SERVER_PORT)),
        files_dir=os.environ.get("P2P_SERVER_FILES_DIR", DEFAULT_SERVER_FILES_DIR),
        worker_count=os.environ.get("P2P_WORKER_COUNT", str(DEFAULT_WORKER_COUNT)),
        buffer_size=os.environ.get("P2P_BUFFER_SIZE", str(DEFAULT_BUFFER_SIZE)),
    )
