"""Configuration management for the Blossom CLI."""

import json
import os
import shutil
from pathlib import Path
from typing import List, Optional

from common.constants import DEFAULT_PROGRESS_INTERVAL_SECONDS, DEFAULT_TIMEOUT_SECONDS
from common.logging_config import get_logger
from common.types import ServerConfig

logger = get_logger(__name__)


class Config:
    """Manages CLI configuration stored in JSON file."""

    DEFAULT_CONFIG = {
        "servers": [],
        "timeout": DEFAULT_TIMEOUT_SECONDS,
        "progress_interval": DEFAULT_PROGRESS_INTERVAL_SECONDS,
        "download_dir": "downloads",
        "unique_tokens": False,
    }

    def __init__(self, config_path: Path):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.blossom/config.json)
        """
        self.config_path = config_path
        self.data = self._load()

    def _load(self) -> dict:
        """
        Load configuration from file, creating defaults if necessary.

        Returns:
            Configuration dictionary
        """
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    data = json.load(f)
                config = json.loads(json.dumps(self.DEFAULT_CONFIG))
                config.update(data)
                return config
            except (json.JSONDecodeError, IOError) as e:
                backup_path = self.config_path.with_suffix('.json.bak')
                logger.warning(f"Config file {self.config_path} unreadable ({e}); backing up to {backup_path}")
                try:
                    shutil.copy(self.config_path, backup_path)
                except IOError as copy_error:
                    logger.error(f"Could not back up config file: {copy_error}")
                return json.loads(json.dumps(self.DEFAULT_CONFIG))
        else:
            config = json.loads(json.dumps(self.DEFAULT_CONFIG))
            self.data = config
            self.save()
            return config

    def save(self) -> None:
        """Save current configuration to file."""
        try:
            with open(self.config_path, 'w') as f:
                json.dump(self.data, f, indent=2)
        except IOError as e:
            logger.error(f"Could not save config to {self.config_path}: {e}")

    def get_secret_key(self) -> Optional[str]:
        """
        Get the signing secret key.

        Returns:
            Hex secret key from BLOSSOM_SECRET_KEY or the config file, or None
        """
        return os.environ.get('BLOSSOM_SECRET_KEY') or self.data.get('secret_key')

    def get_servers(self) -> List[ServerConfig]:
        """
        Get configured servers in priority order.

        Returns:
            List of ServerConfig built from {url, max_upload_size_mb} entries
        """
        return [
            ServerConfig.from_megabytes(entry['url'], entry.get('max_upload_size_mb', 100))
            for entry in self.data.get('servers', [])
        ]

    def add_server(self, url: str, max_upload_size_mb: float) -> None:
        servers = [s for s in self.data.get('servers', []) if s['url'] != url.rstrip('/')]
        servers.append({'url': url.rstrip('/'), 'max_upload_size_mb': max_upload_size_mb})
        self.data['servers'] = servers
        self.save()

    def get_timeout(self) -> float:
        return self.data.get('timeout', DEFAULT_TIMEOUT_SECONDS)

    def get_progress_interval(self) -> float:
        return self.data.get('progress_interval', DEFAULT_PROGRESS_INTERVAL_SECONDS)

    def get_download_dir(self) -> Path:
        return Path(self.data.get('download_dir', 'downloads'))

    def get_unique_tokens(self) -> bool:
        return bool(self.data.get('unique_tokens', False))
