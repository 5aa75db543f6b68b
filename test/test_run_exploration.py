"""Tests for the run_exploration CLI and the simulated environment."""

import sys
import os

# Add the package to path for testing
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from auto_navigator.models import EntityCategory
from auto_navigator.scripts.run_exploration import DEMO_ENTITIES, main
from auto_navigator.simulation import SimulatedEnvironment


def test_cli_prints_summary(capsys):
    assert main(['--ticks', '400', '--seed', '3']) == 0
    output = capsys.readouterr().out
    assert 'Exploration Summary' in output
    assert 'Coverage:' in output


def test_cli_accepts_strategy_and_walls(capsys):
    assert main(['--ticks', '200', '--seed', '1', '--strategy', 'grid', '--walls']) == 0
    assert 'grid' in capsys.readouterr().out


def test_cli_rejects_missing_config(capsys, tmp_path):
    assert main(['--config', str(tmp_path / 'absent.yaml')]) == 1
    assert 'not found' in capsys.readouterr().out


def test_simulated_agent_walks_toward_click():
    environment = SimulatedEnvironment(speed=5.0)
    screen = environment.screen_projection((12.0, 0.0))
    environment.request_move(screen)
    environment.request_click(screen)

    assert environment.step() == (5.0, 0.0)
    environment.step()
    assert environment.step() == (12.0, 0.0)
    assert environment.destination is None


def test_simulated_walls_block_movement():
    environment = SimulatedEnvironment(speed=5.0, walls=[(3.0, -1.0, 6.0, 1.0)])
    environment.destination = (20.0, 0.0)
    assert environment.step() == (0.0, 0.0)
    assert environment.blocked_steps == 1


def test_off_screen_positions_have_no_projection():
    environment = SimulatedEnvironment(view_size=(100, 100))
    assert environment.screen_projection((49.0, 0.0)) is not None
    assert environment.screen_projection((51.0, 0.0)) is None


def test_entity_scan_by_radius():
    environment = SimulatedEnvironment(entities=DEMO_ENTITIES)
    near = environment.nearby_entities(40.0, EntityCategory.DOOR)
    assert [e.entity_id for e in near] == ['door_1']
