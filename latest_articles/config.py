"""
Configuration management for the latest articles block.

Values come from three layers, later ones winning: ``DEFAULT_CONFIG``, an
optional YAML or JSON file, and ``LATEST_ARTICLES_`` environment variables.
Only the file layer is ever written back.
"""
import os
import copy
import json
import logging
import yaml
from pathlib import Path
from typing import Any, Dict, Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

ENV_PREFIX = 'LATEST_ARTICLES_'
CONFIG_PATH_VAR = f'{ENV_PREFIX}CONFIG_PATH'
DEFAULT_CONFIG_FILE = 'latest_articles.yaml'

# Default configuration
DEFAULT_CONFIG = {
    "block": {
        "num_articles": 5,
        "cache_lifetime": 3600
    },
    "store": {
        "path": "content.db"
    },
    "cache": {
        "path": "render_cache.db"
    }
}

def resolve_config_path(path: Optional[str] = None) -> str:
    """
    Pick the configuration file: explicit path, then LATEST_ARTICLES_CONFIG_PATH,
    then latest_articles.yaml in the working directory.
    """
    return path or os.getenv(CONFIG_PATH_VAR) or DEFAULT_CONFIG_FILE

def merge(target: Dict, source: Dict) -> Dict:
    """Merge source into target in place, descending into nested dicts."""
    for key, value in source.items():
        if isinstance(target.get(key), dict) and isinstance(value, dict):
            merge(target[key], value)
        else:
            target[key] = copy.deepcopy(value)
    return target

def _env_overrides(prefix: str = ENV_PREFIX) -> Dict:
    """
    Collect configuration overrides from environment variables.

    Nested keys are separated by a double underscore, so
    ``LATEST_ARTICLES_BLOCK__NUM_ARTICLES=10`` sets ``block.num_articles``.
    Values are parsed as JSON when possible.
    """
    overrides: Dict[str, Any] = {}
    for key, value in os.environ.items():
        if not key.startswith(prefix) or key == CONFIG_PATH_VAR:
            continue

        *parents, leaf = key[len(prefix):].lower().split('__')
        current = overrides
        for part in parents:
            current = current.setdefault(part, {})

        try:
            current[leaf] = json.loads(value)
        except json.JSONDecodeError:
            current[leaf] = value
    return overrides

class Config:
    """
    Configuration manager for the latest articles block.
    """
    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the Config.

        Args:
            config_path: Path to the configuration file
        """
        self.config_path = config_path
        self.file_config = self._load_file()
        self.config = merge(merge(copy.deepcopy(DEFAULT_CONFIG), self.file_config), _env_overrides())

    def _load_file(self) -> Dict:
        """
        Read the configuration file, if there is one.

        Returns:
            The values set by the file, empty when missing or unreadable
        """
        if not self.config_path:
            return {}

        path = Path(self.config_path)
        if not path.exists():
            return {}

        try:
            if path.suffix.lower() in ['.yaml', '.yml']:
                with open(path, 'r') as f:
                    data = yaml.safe_load(f)
            elif path.suffix.lower() == '.json':
                with open(path, 'r') as f:
                    data = json.load(f)
            else:
                raise ValueError(f"Unsupported config file format: {path.suffix}")
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.error(f"Error loading config from {self.config_path}: {e}")
            logger.warning("Using default configuration")
            return {}

        if data is not None and not isinstance(data, dict):
            logger.error(f"Ignoring {self.config_path}: expected a mapping at the top level")
            return {}
        return data or {}

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            key: Dot-separated key path (e.g., 'block.num_articles')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        current = self.config

        for part in key.split('.'):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]

        return current

    def set(self, key: str, value: Any) -> None:
        """
        Set a value in both the effective configuration and the file layer.

        Args:
            key: Dot-separated key path
            value: New value
        """
        *parents, leaf = key.split('.')
        for layer in (self.config, self.file_config):
            current = layer
            for part in parents:
                current = current.setdefault(part, {})
            if isinstance(current.get(leaf), dict) and isinstance(value, dict):
                merge(current[leaf], value)
            else:
                current[leaf] = copy.deepcopy(value)

    def save(self, path: Optional[str] = None) -> bool:
        """
        Write the file layer back to disk.

        Defaults and environment overrides are not persisted.

        Args:
            path: Path to save the configuration to, defaults to config_path

        Returns:
            True if successful, False otherwise
        """
        save_path = path or self.config_path
        if not save_path:
            logger.error("No path specified for saving configuration")
            return False

        suffix = Path(save_path).suffix.lower()
        try:
            if suffix in ['.yaml', '.yml']:
                with open(save_path, 'w') as f:
                    yaml.safe_dump(self.file_config, f, default_flow_style=False)
            elif suffix == '.json':
                with open(save_path, 'w') as f:
                    json.dump(self.file_config, f, indent=2)
            else:
                logger.error(f"Unsupported config file format: {suffix}")
                return False
        except OSError as e:
            logger.error(f"Error saving config to {save_path}: {e}")
            return False

        return True
