# KeepTrack — configuration
# Defaults, overridden by keeptrack.yaml, overridden by environment variables.

import logging
import os
import yaml
from pathlib import Path
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

CONFIG_PATH = Path.home() / ".config" / "keeptrack" / "keeptrack.yaml"


@dataclass
class Config:
    """Runtime configuration for the board client."""

    # REST API
    api_base_url: str = "http://localhost:4000"
    request_timeout: float = 10.0   # seconds, passed to requests

    # Local cache (SQLite key/value file)
    cache_path: str = "~/.local/share/keeptrack/cache.db"

    def resolve_paths(self):
        """Expand ~ in file paths."""
        self.cache_path = str(Path(self.cache_path).expanduser())

    def apply_env(self):
        """Environment variables win over the file."""
        base_url = os.environ.get("KEEPTRACK_API_BASE_URL")
        if base_url:
            self.api_base_url = base_url
        cache_path = os.environ.get("KEEPTRACK_CACHE_PATH")
        if cache_path:
            self.cache_path = cache_path

    @classmethod
    def load(cls, path: Optional[str] = None) -> "Config":
        """Load config from YAML file, falling back to defaults."""
        path = path or os.environ.get("KEEPTRACK_CONFIG")
        cfg_path = Path(path) if path else CONFIG_PATH
        if cfg_path.exists():
            try:
                with open(cfg_path, "r") as f:
                    data = yaml.safe_load(f) or {}
                cfg = cls(**{k: v for k, v in data.items() if hasattr(cls, k)})
            except (OSError, yaml.YAMLError, AttributeError, TypeError) as e:
                logger.warning(f"Could not read config {cfg_path}: {e}; using defaults")
                cfg = cls()
        else:
            cfg = cls()
        cfg.apply_env()
        cfg.resolve_paths()
        return cfg
