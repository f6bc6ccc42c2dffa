"""
Configuration management for the route planning engine.

Hierarchical configuration loading:
1. Defaults (class-level DEFAULTS)
2. JSON config file (keys starting with '_' are treated as comments)
3. Environment variables (highest priority), ROUTEPLANNER_<KEY>

Usage:
    from routeplanner.config import PlannerConfig

    config = PlannerConfig()
    config.recalculate_debounce_ms   # 300 unless overridden
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)


DEFAULT_CONFIG_FILE = 'routeplanner_config.json'


class PlannerConfig:
    """Configuration for one planner instance."""

    DEFAULTS: Dict[str, Any] = {
        # Routing collaborator
        'routing_base_url': 'https://graphhopper.com/api/1',
        'routing_api_key': '',
        'routing_vehicle': 'hike',
        'routing_timeout': 10.0,

        # Point editing
        'recalculate_debounce_ms': 300,
        'max_waypoints': 28,
        'connector_threshold_m': 5.0,

        # Viewport
        'viewport_width': 500,
        'viewport_height': 500,
        'min_zoom': 0.0,
        'max_zoom': 18.0,
        'segment_max_zoom': 19.0,
        'segment_padding_px': 20,
        'default_zoom': 15.0,
        'zoom_snap': 0.0,

        # Camera animation
        'animation_base_duration_ms': 800,
        'animation_min_duration_ms': 600,
        'animation_max_duration_ms': 1500,
        'animation_ms_per_zoom_level': 200,
        'rotation_reset_duration_ms': 400,
        'rotation_enabled': True,
        'frame_rate': 60,

        # General
        'debug_mode': False,
    }

    def __init__(self, config_file: Optional[Union[str, Path]] = None, **overrides: Any):
        """
        Initialize configuration.

        Args:
            config_file: Optional path to a JSON config file. Falls back to
                ROUTEPLANNER_CONFIG_FILE, then ./routeplanner_config.json.
            **overrides: Runtime values applied after every other source.
        """
        self._config: Dict[str, Any] = {}
        self._config_file = config_file
        self._overrides = overrides
        self._load_configuration()

    def _load_configuration(self):
        """Load configuration from all sources in priority order."""
        self._config = self.DEFAULTS.copy()
        self._load_from_json_config()
        self._load_from_environment()
        self._config.update(self._overrides)
        self._validate_config()

        if self.debug_mode:
            logger.info(f"Configuration loaded: {len(self._config)} settings")

    def _resolve_config_path(self) -> Optional[Path]:
        candidate = self._config_file or os.getenv('ROUTEPLANNER_CONFIG_FILE')
        if candidate:
            return Path(candidate)
        default_path = Path.cwd() / DEFAULT_CONFIG_FILE
        return default_path if default_path.exists() else None

    def _load_from_json_config(self):
        """Load configuration from JSON config file."""
        config_path = self._resolve_config_path()
        if config_path is None:
            logger.debug("No config file found, using defaults")
            return

        try:
            with open(config_path, 'r') as f:
                json_config = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Failed to load JSON config from {config_path}: {e}")
            return

        if not isinstance(json_config, dict):
            logger.warning(f"Ignoring config file {config_path}: top level must be an object")
            return

        # Filter out comment keys (starting with _)
        filtered_config = {
            k: v for k, v in json_config.items()
            if not k.startswith('_')
        }
        self._config.update(filtered_config)
        logger.debug(f"Loaded JSON config from {config_path}")

    def _load_from_environment(self):
        """Load configuration from environment variables."""
        for key in self._config.keys():
            env_key = f"ROUTEPLANNER_{key.upper()}"
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
        else:
            return env_value

    def _validate_config(self):
        """Repair out-of-range values, falling back to defaults."""
        for key in ('viewport_width', 'viewport_height', 'frame_rate', 'max_waypoints'):
            value = self._config.get(key)
            if not isinstance(value, (int, float)) or value <= 0:
                logger.warning(f"Invalid {key} {value!r}, using {self.DEFAULTS[key]}")
                self._config[key] = self.DEFAULTS[key]

        if self._config['recalculate_debounce_ms'] < 0:
            logger.warning("Negative debounce, using 0")
            self._config['recalculate_debounce_ms'] = 0

        low = self._config['animation_min_duration_ms']
        high = self._config['animation_max_duration_ms']
        if low > high:
            logger.warning(f"Animation duration bounds inverted ({low} > {high}), using defaults")
            self._config['animation_min_duration_ms'] = self.DEFAULTS['animation_min_duration_ms']
            self._config['animation_max_duration_ms'] = self.DEFAULTS['animation_max_duration_ms']

        if self._config['min_zoom'] > self._config['max_zoom']:
            logger.warning("min_zoom above max_zoom, using defaults")
            self._config['min_zoom'] = self.DEFAULTS['min_zoom']
            self._config['max_zoom'] = self.DEFAULTS['max_zoom']

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        return self._config.get(key, default)

    def set(self, key: str, value: Any):
        """Set configuration value (runtime only)."""
        self._config[key] = value

    def get_all(self) -> Dict[str, Any]:
        """Get all configuration values."""
        return self._config.copy()

    def reload(self):
        """Reload configuration from all sources."""
        self._load_configuration()

    @property
    def debug_mode(self) -> bool:
        return self._config.get('debug_mode', False)

    @property
    def routing_base_url(self) -> str:
        return str(self._config['routing_base_url']).rstrip('/')

    @property
    def routing_api_key(self) -> str:
        return self._config['routing_api_key']

    @property
    def routing_vehicle(self) -> str:
        return self._config['routing_vehicle']

    @property
    def routing_timeout(self) -> float:
        return float(self._config['routing_timeout'])

    @property
    def recalculate_debounce_ms(self) -> float:
        return float(self._config['recalculate_debounce_ms'])

    @property
    def max_waypoints(self) -> int:
        return int(self._config['max_waypoints'])

    @property
    def connector_threshold_m(self) -> float:
        return float(self._config['connector_threshold_m'])

    @property
    def viewport_size(self) -> tuple:
        return (float(self._config['viewport_width']), float(self._config['viewport_height']))

    @property
    def rotation_enabled(self) -> bool:
        return bool(self._config['rotation_enabled'])

    @property
    def frame_rate(self) -> float:
        return float(self._config['frame_rate'])

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}: {len(self._config)} settings>"
