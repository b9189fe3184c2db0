"""
Configuration manager for the poe.watch cache.

Handles loading and managing application configuration from YAML files.
"""

import copy
import logging
import os
from pathlib import Path
from typing import Dict, Any, List, Optional, Tuple

import yaml
from utils.constants import API_BASE, DEFAULT_EXPIRY, DEFAULT_TIMEOUT, KEY_PREFIX
from utils.paths import CONFIG_PATH

CACHE_BACKENDS = ("memory", "redis")


class ConfigError(Exception):
    """Raised when the configuration file cannot be read or parsed."""


class ConfigManager:
    """Manages application configuration."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration manager."""
        self.logger = logging.getLogger(__name__)

        if config_path:
            self.config_path = Path(config_path)
        else:
            self.config_path = CONFIG_PATH

        self._config = None

    def load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            self.logger.warning(f"Config file not found at {self.config_path}, using defaults")
            self._config = self.get_default_config()
            return self._config

        try:
            with self.config_path.open('r', encoding='utf-8') as f:
                config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            self.logger.error(f"Failed to parse configuration: {e}")
            raise ConfigError(f"Invalid YAML in {self.config_path}: {e}") from e
        except OSError as e:
            self.logger.error(f"Failed to read configuration: {e}")
            raise ConfigError(f"Cannot read {self.config_path}: {e}") from e

        if not isinstance(config, dict):
            raise ConfigError(f"Top level of {self.config_path} must be a mapping")

        # Merge with defaults to ensure all required keys exist
        merged_config = self._merge_configs(self.get_default_config(), config)
        self._config = merged_config
        self.logger.info(f"Configuration loaded from {self.config_path}")

        return self._config

    def get_config(self) -> Dict[str, Any]:
        """Get current configuration, loading if necessary."""
        if self._config is None:
            return self.load_config()
        return self._config

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key (supports dot notation)."""
        config = self.get_config()

        keys = key.split('.')
        value = config

        try:
            for k in keys:
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any):
        """Set configuration value by key (supports dot notation)."""
        config = self.get_config()

        keys = key.split('.')
        current = config

        for k in keys[:-1]:
            if k not in current:
                current[k] = {}
            current = current[k]

        current[keys[-1]] = value

    def save_config(self, config: Optional[Dict[str, Any]] = None, config_path: Optional[str] = None):
        """Save configuration to YAML file."""
        if config is not None:
            self._config = config

        if not self._config:
            self.logger.warning("No configuration to save")
            return

        save_path = Path(config_path) if config_path else self.config_path
        save_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            tmp_path = save_path.with_suffix(save_path.suffix + ".tmp")
            with open(tmp_path, 'w', encoding='utf-8') as f:
                yaml.safe_dump(self._config, f, default_flow_style=False, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, save_path)

            self.logger.info(f"Configuration saved to {save_path}")

        except OSError as e:
            self.logger.error(f"Failed to save configuration: {e}")
            raise

    def get_default_config(self) -> Dict[str, Any]:
        """Return default configuration values."""
        return copy.deepcopy(_DEFAULT_CONFIG)

    def _merge_configs(self, default: Dict[str, Any], user: Dict[str, Any]) -> Dict[str, Any]:
        """Merge user configuration with defaults."""
        result = default.copy()

        for key, value in user.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result

    def get_timeout(self) -> Tuple[float, float]:
        """Return the ``(connect, read)`` HTTP timeout."""
        timeout = self.get('api.timeout_seconds', list(DEFAULT_TIMEOUT))
        if isinstance(timeout, (int, float)):
            return (float(timeout), float(timeout))
        connect, read = timeout
        return (float(connect), float(read))

    def get_ttl(self) -> int:
        """Get cache time to live in seconds."""
        return int(self.get('cache.ttl_seconds', DEFAULT_EXPIRY))

    def validate_config(self) -> List[str]:
        """Validate configuration and return list of errors."""
        errors = []
        config = self.get_config()

        for section in ('api', 'cache'):
            if section not in config:
                errors.append(f"Missing required section: {section}")

        if not self.get('api.base_url'):
            errors.append("API base_url not configured")

        backend = self.get('cache.backend')
        if backend not in CACHE_BACKENDS:
            errors.append(f"Unknown cache backend: {backend!r}")
        if backend == 'redis' and not self.get('cache.redis_url'):
            errors.append("cache.redis_url is required for the redis backend")

        try:
            if self.get_ttl() <= 0:
                errors.append("cache.ttl_seconds must be positive")
        except (TypeError, ValueError):
            errors.append("cache.ttl_seconds must be an integer")

        try:
            connect, read = self.get_timeout()
            if connect <= 0 or read <= 0:
                errors.append("api.timeout_seconds must be positive")
        except (TypeError, ValueError):
            errors.append("api.timeout_seconds must be a number or a [connect, read] pair")

        return errors


_DEFAULT_CONFIG: Dict[str, Any] = {
    'api': {
        'base_url': API_BASE,
        'timeout_seconds': list(DEFAULT_TIMEOUT),
        'retries': 0,
        'user_agent': "PoeWatchCache/1.0",
    },
    'cache': {
        'backend': "memory",
        'redis_url': "redis://localhost:6379/0",
        'key_prefix': KEY_PREFIX,
        'ttl_seconds': DEFAULT_EXPIRY,
        'distributed_lock': False,
        'lock_ttl_seconds': 120,
    },
    'logging': {
        'level': "INFO",
    },
}
