#!/usr/bin/env python3
"""
Winfit CLI - Constraint-directed window layout.

Usage:
    winfit solve APP... [--context=<text>] [--focus=<app>] [--screen=WxH]
                        [--mode=<m>] [--visibility=<f>] [--coverage=<f>] [--json]
    winfit classify APP... [--json]
    winfit context TEXT --apps APP... [--focus=<app>] [--json]
    winfit config [show|init|path|set]
    winfit --version
    winfit --help
"""

import argparse
import json
import sys

from winfit import (
    ArchetypeClassifier,
    Constraints,
    ContextResolver,
    Screen,
    WinfitConfig,
    WinfitError,
    __version__,
    build_solver,
    get_config_path,
    load_config,
    save_config,
)
from winfit.logging_config import setup_logging


def parse_screen(value: str) -> tuple[float, float]:
    """Parse a WIDTHxHEIGHT screen size."""
    try:
        width, height = value.lower().split("x")
        return float(width), float(height)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected WIDTHxHEIGHT, got {value!r}") from None


def print_error(args, message: str) -> int:
    if getattr(args, "json", False):
        print(json.dumps({"status": "error", "message": message}))
    else:
        print(f"Error: {message}", file=sys.stderr)
    return 1


def cmd_solve(args, config: WinfitConfig):
    """Solve a layout and print placements."""
    try:
        solver = build_solver(config)
        constraints = config.constraints()
        if args.visibility is not None:
            constraints.min_visible_fraction = args.visibility
        if args.coverage is not None:
            constraints.min_coverage = args.coverage

        width, height = args.screen
        result = solver.solve(
            args.apps,
            screen_width=width,
            screen_height=height,
            context=args.context,
            focus=args.focus,
            mode=args.mode or config.solver.mode,
            constraints=constraints,
        )
    except (WinfitError, ValueError) as e:
        return print_error(args, str(e))

    output = result.to_dict()
    if args.json:
        output["screen"] = {"width": width, "height": height}
        print(json.dumps(output, indent=2))
        return 0

    screen = Screen(width, height)
    print(f"Status: {output['status']} (mode: {output['mode']}, strategy: {output['strategy']})")
    print(f"Context: {result.context}, focus: {result.focused_app}")
    print(f"Coverage: {result.validation.coverage:.1%}")
    for window in sorted(result.windows, key=lambda w: w.layer):
        x, y, w, h = window.to_pixels(screen)
        print(f"  [{window.layer}] {window.app_id} ({window.archetype.value}, {window.role.value}): "
              f"{w}x{h} at ({x}, {y})")
    for violation in result.validation.violations:
        print(f"  ! {violation}")
    for diagnostic in result.diagnostics:
        target = f" {diagnostic.app_id}" if diagnostic.app_id else ""
        print(f"  * {diagnostic.kind.value}{target}: {diagnostic.message}")

    return 0


def cmd_classify(args, config: WinfitConfig):
    """Classify app names into archetypes."""
    try:
        classifier = ArchetypeClassifier(extra_apps=config.classifier.extra_apps)
    except ValueError as e:
        return print_error(args, str(e))

    output = {"apps": []}
    for name in args.apps:
        archetype, match = classifier.classify_detailed(name)
        output["apps"].append({"app": name, "archetype": archetype.value, "match": match})

    if args.json:
        print(json.dumps(output, indent=2))
    else:
        for app in output["apps"]:
            print(f"{app['app']}: {app['archetype']} ({app['match']})")

    return 0


def cmd_context(args, config: WinfitConfig):
    """Resolve context tag and focus for a set of apps."""
    try:
        classifier = ArchetypeClassifier(extra_apps=config.classifier.extra_apps)
        resolver = ContextResolver()
        windows = [(name, classifier.classify(name)) for name in args.apps]
        resolution = resolver.resolve(args.text, windows, args.focus)
    except (WinfitError, ValueError) as e:
        return print_error(args, str(e))

    output = {
        "context": resolution.context,
        "focused_app": resolution.focused_app,
        "source": resolution.source,
        "ranking": resolver.rank(windows, resolution.context),
    }

    if args.json:
        print(json.dumps(output, indent=2))
    else:
        print(f"Context: {output['context']}")
        print(f"Focus: {output['focused_app']} ({output['source']})")
        print(f"Ranking: {', '.join(output['ranking'])}")

    return 0


def parse_value(value: str):
    """Parse a config value from the command line."""
    if value.lower() == "true":
        return True
    if value.lower() == "false":
        return False
    if value.isdigit():
        return int(value)
    if value[:1] in ("[", "{"):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value
    try:
        return float(value)
    except ValueError:
        return value  # Keep as string


def cmd_config(args, config: WinfitConfig):
    """Configuration management."""
    config_path = get_config_path()

    if args.config_action == "path":
        print(config_path)

    elif args.config_action == "show":
        print(json.dumps(config.to_dict(), indent=2))

    elif args.config_action == "init":
        if config_path.exists() and not args.force:
            print(f"Config already exists: {config_path}")
            print("Use --force to overwrite")
        else:
            save_config(WinfitConfig(), config_path)
            print(f"Created: {config_path}")

    elif args.config_action == "set":
        if not args.key or args.value is None:
            print("Usage: winfit config set --key <key> --value <value>")
            print("Examples:")
            print("  winfit config set --key solver.mode --value cascade")
            print("  winfit config set --key solver.visibility_threshold --value 0.2")
            return 1

        # Parse key path (e.g., "solver.mode")
        parts = args.key.split(".")
        if len(parts) != 2:
            print("Key must be in format: section.field (e.g., solver.mode)")
            return 1

        section, field = parts
        data = config.to_dict()

        if section not in data:
            print(f"Unknown section: {section}")
            return 1
        if field not in data[section]:
            print(f"Unknown field: {field} in section {section}")
            return 1

        value = parse_value(args.value)
        data[section][field] = value
        new_config = WinfitConfig.from_dict(data)
        if not save_config(new_config, config_path):
            print(f"Could not write {config_path}", file=sys.stderr)
            return 1
        print(f"Set {args.key} = {value}")

    else:
        print("Usage: winfit config [show|init|path|set]")

    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="winfit",
        description="Constraint-directed window layout"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="More logging (-v info, -vv debug)")
    parser.add_argument("--log-file", help="Also write logs to this file")

    subparsers = parser.add_subparsers(dest="command")

    # solve
    p_solve = subparsers.add_parser("solve", help="Compute a layout for a set of apps")
    p_solve.add_argument("apps", nargs="+", help="App names in input order")
    p_solve.add_argument("-c", "--context", default="", help="Free-text intent")
    p_solve.add_argument("-f", "--focus", help="App to focus (overrides context)")
    p_solve.add_argument("-s", "--screen", type=parse_screen, default=(1440.0, 900.0),
                         help="Screen size as WIDTHxHEIGHT (default 1440x900)")
    p_solve.add_argument("-m", "--mode", choices=["auto", "tile", "cascade"],
                         help="Layout mode (overrides config)")
    p_solve.add_argument("--visibility", type=float, help="Minimum visible fraction")
    p_solve.add_argument("--coverage", type=float, help="Minimum screen coverage")
    p_solve.add_argument("-j", "--json", action="store_true", help="JSON output")

    # classify
    p_classify = subparsers.add_parser("classify", help="Classify app names")
    p_classify.add_argument("apps", nargs="+", help="App names")
    p_classify.add_argument("-j", "--json", action="store_true", help="JSON output")

    # context
    p_context = subparsers.add_parser("context", help="Resolve context and focus")
    p_context.add_argument("text", help="Free-text intent")
    p_context.add_argument("--apps", nargs="+", required=True, help="App names")
    p_context.add_argument("-f", "--focus", help="Explicit focus app")
    p_context.add_argument("-j", "--json", action="store_true", help="JSON output")

    # config
    p_config = subparsers.add_parser("config", help="Configuration management")
    p_config.add_argument("config_action", nargs="?", default="show",
                          choices=["show", "init", "path", "set"])
    p_config.add_argument("--key", help="Config key (e.g., solver.mode)")
    p_config.add_argument("--value", help="Config value")
    p_config.add_argument("--force", action="store_true", help="Force overwrite")

    return parser


def main(argv=None):
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose, args.log_file)
    config = load_config()

    if args.command == "solve":
        return cmd_solve(args, config)
    elif args.command == "classify":
        return cmd_classify(args, config)
    elif args.command == "context":
        return cmd_context(args, config)
    elif args.command == "config":
        return cmd_config(args, config)
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
