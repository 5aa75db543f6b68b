"""Configuration management for the AutoNavigator core.

Settings live in a single dataclass with validated defaults. They can be
loaded from a YAML file (``navigator:`` section); the file path defaults to
the ``AUTO_NAV_CONFIG_PATH`` environment variable.
"""

import logging
import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

import yaml

from auto_navigator.errors import ConfigurationError


logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = 'AUTO_NAV_CONFIG_PATH'

FRONTIER_STRATEGIES = ('radial', 'grid', 'directional')


@dataclass
class NavigatorConfig:
    """Tunable parameters for planning, exploration and stuck detection.

    Distances are in world/grid units, delays in milliseconds and
    durations in seconds.
    """

    # Movement
    waypoint_tolerance: float = 15.0
    click_delay: int = 100
    movement_delay: int = 200
    action_randomization: int = 150

    # Pathfinding
    adaptive_step: bool = True
    fixed_step_size: float = 5.0
    min_step_size: float = 5.0
    max_step_size: float = 15.0
    end_epsilon: float = 5.0
    path_crop_radius: float = 40.0
    extra_points_count: int = 6
    path_cache_size: int = 128
    optimize_with_tsp: bool = True
    two_opt_passes: int = 1

    # Exploration
    discovery_percent: float = 0.93
    exploration_radius: float = 80.0
    tsp_point_count: int = 20
    frontier_strategy: str = 'radial'
    frontier_seed_category: str = ''
    frontier_min_distance: float = 30.0
    frontier_distance_step: float = 20.0
    coverage_radius: float = 25.0
    record_distance: float = 15.0
    max_explored_areas: int = 200
    explored_trim_batch: int = 50

    # Obstacle handling
    auto_open_doors: bool = True
    auto_use_transitions: bool = False
    door_detection_radius: float = 20.0
    transition_detection_radius: float = 25.0

    # Stuck detection
    enable_stuck_detection: bool = True
    stuck_detection_threshold: int = 8
    stuck_recovery_distance: float = 20.0
    stationary_time: float = 3.0
    movement_threshold: float = 1.0
    progress_epsilon: float = 0.5
    oscillation_radius: float = 2.0
    history_size: int = 10

    # Session
    max_run_time: float = 600.0
    random_seed: Optional[int] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        self.validate()

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            ConfigurationError: if any value is out of range
        """
        positive = (
            'waypoint_tolerance', 'fixed_step_size', 'min_step_size', 'max_step_size',
            'path_crop_radius', 'exploration_radius', 'frontier_min_distance',
            'frontier_distance_step', 'coverage_radius', 'door_detection_radius',
            'transition_detection_radius', 'stuck_recovery_distance', 'stationary_time',
            'movement_threshold', 'progress_epsilon', 'oscillation_radius', 'max_run_time',
        )
        for name in positive:
            value = getattr(self, name)
            if value <= 0:
                raise ConfigurationError(f"{name} must be positive: {value}", name, value)

        non_negative = ('click_delay', 'movement_delay', 'action_randomization', 'end_epsilon', 'record_distance')
        for name in non_negative:
            value = getattr(self, name)
            if value < 0:
                raise ConfigurationError(f"{name} must be non-negative: {value}", name, value)

        at_least_one = (
            'extra_points_count', 'path_cache_size', 'two_opt_passes', 'tsp_point_count',
            'max_explored_areas', 'explored_trim_batch', 'stuck_detection_threshold',
        )
        for name in at_least_one:
            value = getattr(self, name)
            if value < 1:
                raise ConfigurationError(f"{name} must be at least 1: {value}", name, value)

        if self.min_step_size > self.max_step_size:
            raise ConfigurationError(
                f"min_step_size ({self.min_step_size}) exceeds max_step_size ({self.max_step_size})",
                'min_step_size', self.min_step_size,
            )

        if not (0.0 < self.discovery_percent <= 1.0):
            raise ConfigurationError(
                f"discovery_percent must be in (0, 1]: {self.discovery_percent}",
                'discovery_percent', self.discovery_percent,
            )

        if self.frontier_strategy not in FRONTIER_STRATEGIES:
            raise ConfigurationError(
                f"Invalid frontier_strategy: {self.frontier_strategy}. Must be one of {FRONTIER_STRATEGIES}",
                'frontier_strategy', self.frontier_strategy,
            )

        # Oscillation needs two half-windows of three samples
        if self.history_size < 6:
            raise ConfigurationError(
                f"history_size must be at least 6: {self.history_size}",
                'history_size', self.history_size,
            )

        if self.explored_trim_batch > self.max_explored_areas:
            raise ConfigurationError(
                f"explored_trim_batch ({self.explored_trim_batch}) exceeds "
                f"max_explored_areas ({self.max_explored_areas})",
                'explored_trim_batch', self.explored_trim_batch,
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'NavigatorConfig':
        """Create configuration from a dictionary, ignoring unknown keys.

        Raises:
            ConfigurationError: if a value has the wrong type or range
        """
        data = data or {}
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown configuration keys: {unknown}")
        try:
            return cls(**{k: v for k, v in data.items() if k in known})
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    def replace(self, **changes: Any) -> 'NavigatorConfig':
        """Return a validated copy with some fields changed."""
        values = self.to_dict()
        values.update(changes)
        return NavigatorConfig.from_dict(values)


def load_config(config_path: Optional[str] = None) -> NavigatorConfig:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to a YAML file with a ``navigator`` section. Falls
            back to the AUTO_NAV_CONFIG_PATH environment variable; when
            neither is set the defaults are returned.

    Returns:
        Validated NavigatorConfig

    Raises:
        ConfigurationError: if the file is missing, unreadable or invalid
    """
    config_path = config_path or os.getenv(CONFIG_PATH_ENV)
    if not config_path:
        logger.info("No configuration file given, using defaults")
        return NavigatorConfig()

    if not os.path.exists(config_path):
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, 'r') as f:
            data = yaml.safe_load(f)
    except (yaml.YAMLError, IOError) as e:
        raise ConfigurationError(f"Failed to read configuration file {config_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file {config_path} must contain a mapping")

    section = data.get('navigator', data)
    if not isinstance(section, dict):
        raise ConfigurationError(f"'navigator' section in {config_path} must be a mapping")

    config = NavigatorConfig.from_dict(section)
    logger.info(f"Loaded configuration from {config_path}")
    return config
