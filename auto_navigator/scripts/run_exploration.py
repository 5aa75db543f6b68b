#!/usr/bin/env python3
"""CLI script to run an exploration session against the simulated environment.

Drives AutoNavigator tick by tick with a manual clock and prints a coverage
summary, which is useful for tuning the exploration parameters.

Usage:
    run_exploration
    run_exploration --ticks 2000 --strategy grid --seed 7
    run_exploration --config config/navigator.yaml

Examples:
    run_exploration --strategy directional --walls
    AUTO_NAV_CONFIG_PATH=config/navigator.yaml run_exploration
"""

import argparse
import logging
import sys
from collections import Counter

from auto_navigator.config import FRONTIER_STRATEGIES, load_config
from auto_navigator.errors import ConfigurationError
from auto_navigator.models import Entity, OperationStatus, TickAction
from auto_navigator.navigator import AutoNavigator
from auto_navigator.simulation import ManualClock, SimulatedEnvironment, SynchronousScheduler


# Seconds of simulated time per tick
TICK_SECONDS = 0.25

DEMO_ENTITIES = [
    Entity('door_1', (35.0, 10.0), 'Objects/Door/Wooden'),
    Entity('gate_1', (-40.0, -20.0), 'Objects/Gate'),
    Entity('transition_1', (60.0, 45.0), 'Areas/Transition/Cave'),
]

DEMO_WALLS = [
    (20.0, -60.0, 25.0, -5.0),
    (-30.0, 30.0, 30.0, 35.0),
]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Run an AutoNavigator exploration session in simulation',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        '--ticks', '-t',
        type=int,
        default=3000,
        help='Maximum number of ticks to run (default: 3000)'
    )
    parser.add_argument(
        '--config', '-c',
        default=None,
        help='Navigator YAML config (default: $AUTO_NAV_CONFIG_PATH or built-in defaults)'
    )
    parser.add_argument(
        '--seed', '-s',
        type=int,
        default=None,
        help='Random seed for frontier sampling and timing jitter'
    )
    parser.add_argument(
        '--strategy',
        choices=FRONTIER_STRATEGIES,
        default=None,
        help='Frontier generation strategy'
    )
    parser.add_argument(
        '--walls',
        action='store_true',
        help='Add wall segments the agent can get stuck on'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable debug logging'
    )
    return parser


def main(args=None):
    """Main entry point for the CLI script."""
    parsed_args = build_parser().parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if parsed_args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    try:
        config = load_config(parsed_args.config)
        changes = {}
        if parsed_args.seed is not None:
            changes['random_seed'] = parsed_args.seed
        if parsed_args.strategy is not None:
            changes['frontier_strategy'] = parsed_args.strategy
        if changes:
            config = config.replace(**changes)
    except ConfigurationError as e:
        print(f"\nError: {e.message}\n")
        return 1

    clock = ManualClock()
    environment = SimulatedEnvironment(
        entities=DEMO_ENTITIES,
        walls=DEMO_WALLS if parsed_args.walls else None,
    )
    navigator = AutoNavigator(
        environment,
        config=config,
        clock=clock,
        scheduler=SynchronousScheduler(),
    )

    actions = Counter()
    navigator.start()
    try:
        for _ in range(parsed_args.ticks):
            environment.step()
            clock.advance(TICK_SECONDS)
            result = navigator.tick()
            if result.status != OperationStatus.OK:
                actions[result.status.value] += 1
                continue
            actions[result.value.value] += 1
            if result.value in (TickAction.COMPLETED, TickAction.TIMED_OUT):
                break
    finally:
        navigator.shutdown()

    status = navigator.status()
    print("\n" + "=" * 60)
    print("Exploration Summary")
    print("=" * 60)
    print(f"  Strategy:        {config.frontier_strategy}")
    print(f"  Simulated time:  {clock.now:.1f} s")
    print(f"  Final position:  ({environment.position[0]:.1f}, {environment.position[1]:.1f})")
    print(f"  Explored areas:  {status.explored_count}")
    print(f"  Coverage:        {status.coverage:.1%}")
    print(f"  Obstacles used:  {len(navigator.obstacles.handled_ids)}")
    print(f"  Blocked steps:   {environment.blocked_steps}")
    print("-" * 40)
    for action, count in sorted(actions.items()):
        print(f"  {action:<18} {count}")
    print("=" * 60 + "\n")

    return 0


if __name__ == '__main__':
    sys.exit(main())
