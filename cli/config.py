"""Configuration management for the p2pshare client."""

import json
import os
import shutil
import tempfile
from pathlib import Path
from typing import Tuple

from common.constants import (
    DEFAULT_CLIENT_HOST,
    DEFAULT_CONNECT_TIMEOUT_SECONDS,
    DEFAULT_KEEP_ALIVE_INTERVAL_SECONDS,
    DEFAULT_SERVER_PORT,
)
from common.logging_config import get_logger

logger = get_logger(__name__)


class Config:
    """Manages client configuration stored in JSON file."""

    DEFAULT_CONFIG = {
        "server_host": os.environ.get("P2P_SERVER_HOST", DEFAULT_CLIENT_HOST),
        "server_port": int(os.environ.get("P2P_SERVER_PORT", str(DEFAULT_SERVER_PORT))),
        "timeout": DEFAULT_CONNECT_TIMEOUT_SECONDS,
        "keep_alive_interval": DEFAULT_KEEP_ALIVE_INTERVAL_SECONDS,
        "download_dir": ".",
    }

    def __init__(self, config_path: Path):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.p2pshare/config.json)
        """
        self.config_path = config_path
        self.data = self._load()

    def _load(self) -> dict:
        """
        Load configuration from file, creating defaults if necessary.

        Returns:
            Configuration dictionary
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            self.config_path = Path(tempfile.gettempdir()) / '.p2pshare' / 'config.json'
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    data = json.load(f)
                config = self.DEFAULT_CONFIG.copy()
                config.update(data)
                return config
            except (json.JSONDecodeError, IOError) as e:
                logger.warning(f"Unreadable config {self.config_path}: {e}, using defaults")
                backup_path = self.config_path.with_suffix('.json.bak')
                try:
                    shutil.copy(self.config_path, backup_path)
                except OSError as copy_error:
                    logger.warning(f"Could not back up config: {copy_error}")
                return self.DEFAULT_CONFIG.copy()
        else:
            config = self.DEFAULT_CONFIG.copy()
            try:
                with open(self.config_path, 'w') as f:
                    json.dump(config, f, indent=2)
            except IOError as e:
                logger.warning(f"Could not write default config: {e}")
            return config

    def save(self) -> None:
        """Save current configuration to file."""
        try:
            with open(self.config_path, 'w') as f:
                json.dump(self.data, f, indent=2)
        except IOError as e:
            logger.warning(f"Could not save config: {e}")

    def get_server_address(self) -> Tuple[str, int]:
        """
        Get file server address.

        Returns:
            (host, port) tuple
        """
        host = self.data.get('server_host', DEFAULT_CLIENT_HOST)
        port = int(self.data.get('server_port', DEFAULT_SERVER_PORT))
        return host, port

    def set_server_address(self, host: str, port: int) -> None:
        """Set file server address and save to file."""
        self.data['server_host'] = host
        self.data['server_port'] = port
        self.save()

    def get_timeout(self) -> float:
        """
        Get connect timeout in seconds.

        Returns:
            Timeout value in seconds
        """
        return float(self.data.get('timeout', DEFAULT_CONNECT_TIMEOUT_SECONDS))

    def get_keep_alive_interval(self) -> float:
        """
        Get idle time after which a keep-alive is sent.

        Returns:
            Interval in seconds
        """
        return float(self.data.get('keep_alive_interval', DEFAULT_KEEP_ALIVE_INTERVAL_SECONDS))

    def get_download_dir(self) -> Path:
        """
        Get directory downloads are written to.

        Returns:
            Download directory path
        """
        return Path(self.data.get('download_dir', '.'))
