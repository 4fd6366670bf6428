"""
Configuration management for the Neighborhood Nature service.

Hierarchical configuration loading:
1. Defaults (``NatureConfig.DEFAULTS``)
2. JSON config file (``NATURE_CONFIG_FILE`` or ``nature_config.json`` next to the package)
3. Environment variables ``NATURE_<KEY>`` (highest priority)

Usage:
    from neighborhood_nature.config import get_config

    config = get_config()
    config.route_result_limit
"""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class NatureConfig:
    """Service configuration with JSON and environment overrides."""

    ENV_PREFIX = 'NATURE_'
    DEFAULT_CONFIG_FILE = 'nature_config.json'

    DEFAULTS: Dict[str, Any] = {
        # Server configuration
        'server_port': 8080,
        'server_host': 'localhost',
        'server_ready_timeout': 5.0,

        # General settings
        'debug_mode': False,
        'verbose_logging': False,
        'json_logging': False,

        # Database
        'database_path': None,             # None = data/nature.db inside the package

        # Observation API
        'observation_api_url': 'https://www.inaturalist.org/observations.json',
        'observation_timeout': 30.0,
        'observation_per_page': 200,
        'user_agent': 'neighborhood-nature/0.1',

        # Search area used when the session has no start/end (min_x, min_y, max_x, max_y)
        'default_bounding_box': [-87.7, 41.8, -87.55, 41.95],
        'loop_padding_miles': 0.5,

        # Route discovery
        'route_result_limit': 10,
        'route_search_radius_miles': 15.0,

        # Query parsing
        'autocorrect_enabled': True,
        'autocorrect_cutoff': 0.8,

        # Geocoding
        'geocoder_user_agent': 'neighborhood-nature',
        'geocoder_timeout': 10.0,
    }

    def __init__(self, config_file: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None):
        self._config: Dict[str, Any] = {}
        self._config_file = config_file or os.getenv(f'{self.ENV_PREFIX}CONFIG_FILE')
        self._load_configuration()
        if overrides:
            self._config.update(overrides)
            self._validate_config()

    def _load_configuration(self) -> None:
        """Load configuration from all sources in priority order."""
        self._config = dict(self.DEFAULTS)
        self._load_from_json_config()
        self._load_from_environment()
        self._validate_config()

        if self.debug_mode:
            logger.info("nature configuration loaded successfully")

    def _resolve_config_path(self) -> Optional[Path]:
        if self._config_file:
            return Path(self._config_file)
        candidate = Path(__file__).resolve().parent / self.DEFAULT_CONFIG_FILE
        return candidate if candidate.exists() else None

    def _load_from_json_config(self) -> None:
        """Load configuration from JSON config file."""
        config_path = self._resolve_config_path()
        if config_path is None:
            logger.debug("No config file found, using defaults")
            return

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                json_config = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Failed to load JSON config from {config_path}: {e}")
            return

        # Filter out comment keys (starting with _)
        filtered_config = {k: v for k, v in json_config.items() if not k.startswith('_')}
        self._config.update(filtered_config)
        logger.debug(f"Loaded JSON config from {config_path}")

    def _load_from_environment(self) -> None:
        """Load configuration from environment variables."""
        for key in list(self._config.keys()):
            env_key = f"{self.ENV_PREFIX}{key.upper()}"
            env_value = os.getenv(env_key)

            if env_value is not None:
                converted_value = self._convert_env_value(env_value, self._config[key])
                self._config[key] = converted_value
                logger.debug(f"Loaded environment variable: {env_key} = {converted_value}")

    def _convert_env_value(self, env_value: str, default_value: Any) -> Any:
        """Convert environment variable string to appropriate type."""
        if isinstance(default_value, bool):
            return env_value.lower() in ('true', '1', 'yes', 'on')
        elif isinstance(default_value, int):
            try:
                return int(env_value)
            except ValueError:
                logger.warning(f"Invalid integer value in environment: {env_value}")
                return default_value
        elif isinstance(default_value, float):
            try:
                return float(env_value)
            except ValueError:
                logger.warning(f"Invalid float value in environment: {env_value}")
                return default_value
        elif isinstance(default_value, list):
            items = [item.strip() for item in env_value.split(',')]
            if default_value and all(isinstance(item, (int, float)) for item in default_value):
                try:
                    return [float(item) for item in items]
                except ValueError:
                    logger.warning(f"Invalid numeric list in environment: {env_value}")
                    return default_value
            return items
        else:
            return env_value

    def _validate_config(self) -> None:
        """Validate configuration values, falling back to defaults."""
        port = self._config.get('server_port')
        if not isinstance(port, int) or port < 0 or port > 65535:
            logger.warning(f"Invalid port {port}, using {self.DEFAULTS['server_port']}")
            self._config['server_port'] = self.DEFAULTS['server_port']

        bbox = self._config.get('default_bounding_box')
        if not isinstance(bbox, (list, tuple)) or len(bbox) != 4:
            logger.warning(f"Invalid default_bounding_box {bbox}, using default")
            self._config['default_bounding_box'] = list(self.DEFAULTS['default_bounding_box'])

        limit = self._config.get('route_result_limit')
        if not isinstance(limit, int) or limit < 1:
            logger.warning(f"Invalid route_result_limit {limit}, using default")
            self._config['route_result_limit'] = self.DEFAULTS['route_result_limit']

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set configuration value (runtime only)."""
        self._config[key] = value

    # Property access for common settings
    @property
    def server_port(self) -> int:
        return int(self._config.get('server_port', 8080))

    @property
    def server_host(self) -> str:
        return self._config.get('server_host', 'localhost')

    @property
    def debug_mode(self) -> bool:
        return bool(self._config.get('debug_mode', False))

    @property
    def verbose_logging(self) -> bool:
        return bool(self._config.get('verbose_logging', False))

    @property
    def database_path(self) -> Optional[str]:
        return self._config.get('database_path')

    @property
    def observation_api_url(self) -> str:
        return self._config.get('observation_api_url')

    @property
    def observation_timeout(self) -> float:
        return float(self._config.get('observation_timeout', 30.0))

    @property
    def default_bounding_box(self) -> List[float]:
        return [float(v) for v in self._config.get('default_bounding_box')]

    @property
    def route_result_limit(self) -> int:
        return int(self._config.get('route_result_limit', 10))

    @property
    def route_search_radius_miles(self) -> float:
        return float(self._config.get('route_search_radius_miles', 15.0))

    @property
    def autocorrect_enabled(self) -> bool:
        return bool(self._config.get('autocorrect_enabled', True))

    def get_server_url(self, port: Optional[int] = None) -> str:
        port = port or self.server_port
        return f"http://{self.server_host}:{port}"

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}: {len(self._config)} settings>"


_config_instance: Optional[NatureConfig] = None
_config_lock = threading.Lock()


def get_config() -> NatureConfig:
    """Return the process-wide configuration instance."""
    global _config_instance
    with _config_lock:
        if _config_instance is None:
            _config_instance = NatureConfig()
        return _config_instance


def reset_config() -> None:
    """Drop the cached configuration so the next ``get_config`` reloads it."""
    global _config_instance
    with _config_lock:
        _config_instance = None


__all__ = ['NatureConfig', 'get_config', 'reset_config']
