"""
Cardsmith CLI - Command-line interface for the engine.

Usage:
    cardsmith validate <project.json>             Validate a project and its rules
    cardsmith simulate <project.json> [--seed N]  Load, deal and summarise a game
    cardsmith rules <project.json>                List the compiled rule listeners
"""

import argparse
import random
import sys

from pydantic import ValidationError


def main(argv=None):
    """Main CLI entry point. Returns the process exit code."""
    parser = argparse.ArgumentParser(
        description="Cardsmith - Card Game State Engine",
        prog="cardsmith",
    )
    parser.add_argument("--log-level", help="Override CARDSMITH_LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    validate_parser = subparsers.add_parser("validate", help="Validate a project file")
    validate_parser.add_argument("project_file", help="Path to project JSON")

    simulate_parser = subparsers.add_parser("simulate", help="Load a project and deal a game")
    simulate_parser.add_argument("project_file", help="Path to project JSON")
    simulate_parser.add_argument("--seed", type=int, help="Seed for deck shuffles")
    simulate_parser.add_argument("--turns", type=int, default=0, help="Turns to advance after dealing")

    rules_parser = subparsers.add_parser("rules", help="List compiled rules")
    rules_parser.add_argument("project_file", help="Path to project JSON")

    args = parser.parse_args(argv)
    _setup_logging(args.log_level)

    if args.command == "validate":
        return cmd_validate(args)
    elif args.command == "simulate":
        return cmd_simulate(args)
    elif args.command == "rules":
        return cmd_rules(args)

    parser.print_help()
    return 1


def _setup_logging(level):
    from .config import configure_logging, load_config

    config = load_config()
    if level:
        config = config.model_copy(update={"log_level": level.upper()})
    configure_logging(config)


def _load_project(path):
    """Read and schema-check a project file; None (after reporting) on failure."""
    from .project import ProjectRecord

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = f.read()
    except FileNotFoundError:
        print(f"Error: File not found: {path}")
        return None

    try:
        return ProjectRecord.model_validate_json(raw)
    except ValidationError as e:
        print(f"Error: {path} is not a valid project")
        for error in e.errors():
            location = ".".join(str(part) for part in error["loc"])
            print(f"  - {location}: {error['msg']}")
        return None


def cmd_validate(args):
    """Validate a project's schema, rules, and that it loads into a game."""
    from .errors import CardsmithError
    from .project import build_game, project_rules
    from .rules import validate_rules

    project = _load_project(args.project_file)
    if project is None:
        return 1

    result = validate_rules(project_rules(project))
    errors = list(result.errors)
    try:
        build_game(project, rng=random.Random(0))
    except CardsmithError as e:
        errors.append(f"Cannot build game: {e}")

    print(f"Project: {project.name}")
    print(f"Cards: {len(project.cards)}")
    print(f"Zones: {len(project.zones)}")
    print(f"Rules: {len(project.rules)}")

    if result.warnings:
        print("\nWarnings:")
        for w in result.warnings:
            print(f"  - {w}")

    if errors:
        print("\nErrors:")
        for e in errors:
            print(f"  - {e}")
        return 1

    print("\nProject is valid")
    return 0


def cmd_simulate(args):
    """Load a project, deal opening hands and print the table."""
    from .config import load_config
    from .errors import CardsmithError
    from .primitives.game import game_summary
    from .project import build_game
    from .session import GameLoop

    project = _load_project(args.project_file)
    if project is None:
        return 1

    rng = random.Random(args.seed) if args.seed is not None else None
    try:
        loaded = build_game(project, rng=rng)
    except CardsmithError as e:
        print(f"Error: {e}")
        return 1

    loop = GameLoop(loaded.game, config=load_config(), rng=rng)
    for _ in range(max(args.turns, 0)):
        turn = loop.next_turn()
        for error in turn.errors:
            print(f"  ! {error}")

    game = loop.game
    summary = game_summary(game)
    print(f"Game: {project.name}")
    print(f"Turn {summary['turn_number']}, phase {summary['current_phase']}, current player {game.current_player}")

    for line in loaded.log:
        print(f"  - {line}")
    for warning in loaded.warnings:
        print(f"  ! {warning}")

    print("\nZones:")
    for zone in game.zones:
        owner = zone.owner if zone.owner is not None else "shared"
        print(f"  {zone.name} [{owner}]: {zone.count} card(s)")

    print("\nPlayers:")
    for player in game.players:
        resources = ", ".join(f"{k}={v}" for k, v in sorted(player.resources.items())) or "none"
        print(f"  {player.name} ({player.id}): {resources}")
    return 0


def cmd_rules(args):
    """List the listeners a project's rules compile to."""
    from .errors import CardsmithError
    from .project import project_rules
    from .rules import RuleCompiler

    project = _load_project(args.project_file)
    if project is None:
        return 1

    try:
        compiled = RuleCompiler().compile_rules(project_rules(project))
    except CardsmithError as e:
        print(f"Error: {e}")
        return 1

    if not compiled:
        print("No rules defined")
        return 0

    for rule in compiled:
        listener = rule.listener
        condition = f" when {rule.rule.condition}" if rule.rule.condition else ""
        print(f"{rule.id}: on {listener.event_type}{condition} (priority {listener.priority})")
        for step in rule.rule.actions:
            print(f"  -> {step.action_type} {step.parameters}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
