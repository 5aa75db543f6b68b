"""Tests for NavigatorConfig validation and YAML loading."""

import sys
import os

# Add the package to path for testing
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import pytest
import yaml

from auto_navigator.config import CONFIG_PATH_ENV, NavigatorConfig, load_config
from auto_navigator.errors import ConfigurationError, NavigatorError


PACKAGE_CONFIG = os.path.join(os.path.dirname(__file__), '..', 'config', 'navigator.yaml')


def test_defaults_are_valid():
    config = NavigatorConfig()
    assert config.discovery_percent == 0.93
    assert config.exploration_radius == 80.0
    assert config.tsp_point_count == 20
    assert config.extra_points_count == 6
    assert config.max_run_time == 600.0


@pytest.mark.parametrize('field,value', [
    ('waypoint_tolerance', 0.0),
    ('click_delay', -1),
    ('extra_points_count', 0),
    ('discovery_percent', 0.0),
    ('discovery_percent', 1.5),
    ('frontier_strategy', 'spiral'),
    ('history_size', 5),
    ('explored_trim_batch', 500),
])
def test_invalid_values_are_rejected(field, value):
    with pytest.raises(ConfigurationError) as exc_info:
        NavigatorConfig(**{field: value})
    assert exc_info.value.error_code == 'CONFIGURATION_ERROR'
    assert exc_info.value.details['field'] == field


def test_step_bounds_must_be_ordered():
    with pytest.raises(ConfigurationError):
        NavigatorConfig(min_step_size=20.0, max_step_size=10.0)


def test_configuration_error_is_navigator_error():
    assert issubclass(ConfigurationError, NavigatorError)


def test_from_dict_ignores_unknown_keys():
    config = NavigatorConfig.from_dict({'exploration_radius': 120.0, 'legacy_flag': True})
    assert config.exploration_radius == 120.0


def test_replace_validates():
    config = NavigatorConfig().replace(frontier_strategy='grid')
    assert config.frontier_strategy == 'grid'
    with pytest.raises(ConfigurationError):
        config.replace(tsp_point_count=0)


def test_to_dict_round_trips_through_from_dict():
    config = NavigatorConfig(random_seed=4, auto_use_transitions=True)
    assert NavigatorConfig.from_dict(config.to_dict()) == config


def test_load_without_path_returns_defaults(monkeypatch):
    monkeypatch.delenv(CONFIG_PATH_ENV, raising=False)
    assert load_config() == NavigatorConfig()


def test_load_navigator_section(tmp_path):
    path = tmp_path / 'nav.yaml'
    path.write_text(yaml.safe_dump({'navigator': {'waypoint_tolerance': 10.0, 'frontier_strategy': 'directional'}}))

    config = load_config(str(path))
    assert config.waypoint_tolerance == 10.0
    assert config.frontier_strategy == 'directional'


def test_load_from_environment_variable(tmp_path, monkeypatch):
    path = tmp_path / 'flat.yaml'
    path.write_text('max_run_time: 30.0\n')
    monkeypatch.setenv(CONFIG_PATH_ENV, str(path))
    assert load_config().max_run_time == 30.0


def test_load_missing_file_raises(tmp_path):
    with pytest.raises(ConfigurationError):
        load_config(str(tmp_path / 'absent.yaml'))


def test_load_invalid_yaml_raises(tmp_path):
    path = tmp_path / 'broken.yaml'
    path.write_text('navigator: [unclosed\n')
    with pytest.raises(ConfigurationError):
        load_config(str(path))


def test_load_non_mapping_raises(tmp_path):
    path = tmp_path / 'list.yaml'
    path.write_text('- 1\n- 2\n')
    with pytest.raises(ConfigurationError):
        load_config(str(path))


def test_shipped_config_matches_defaults():
    assert load_config(PACKAGE_CONFIG) == NavigatorConfig()
