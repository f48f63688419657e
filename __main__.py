"""CLI entry point for formrender.

This module acts as the central entry point for the project's CLI tools.
It delegates commands to the appropriate submodules or runs specific tasks.
"""

import argparse
import asyncio
import json
import subprocess
import sys
from pathlib import Path

from dotenv import load_dotenv

from formrender.config import (
    EnvVar,
    get_environment,
    get_environment_info,
    list_environment_variables,
)
from formrender.core import get_logger, setup_logging

# Load environment variables from .env file
load_dotenv()

logger = get_logger("cli")


def _read_definition(path: Path):
    """Read and decode a definition file (None when malformed)."""
    from formrender.source import decode

    return decode(path.read_text(encoding="utf-8"))


def _write_result(text: str, output: Path | None) -> None:
    if output:
        output.write_text(text, encoding="utf-8")
        logger.info(f"Saved to {output}")
    else:
        print(text)


# =============================================================================
# Normalize Command
# =============================================================================


def cmd_normalize(args: argparse.Namespace) -> int:
    """Handle the normalize command."""
    from formrender.normalizer import NormalizationError, normalize

    if not args.file.exists():
        logger.error(f"File not found: {args.file}")
        return 1

    definition = _read_definition(args.file)
    if not isinstance(definition, dict):
        logger.error(f"Malformed form definition: {args.file}")
        return 1

    try:
        result = normalize(definition)
    except NormalizationError as e:
        logger.error(f"Malformed form definition: {args.file}: {e}")
        return 1
    _write_result(json.dumps(result, indent=2, ensure_ascii=False), args.output)
    return 0


# =============================================================================
# Validate Command
# =============================================================================


def cmd_validate(args: argparse.Namespace) -> int:
    """Handle the validate command."""
    from formrender.normalizer import NormalizationError, is_alternate_shape, normalize
    from formrender.validation import validate_definition

    if not args.file.exists():
        logger.error(f"File not found: {args.file}")
        return 1

    definition = _read_definition(args.file)
    if not isinstance(definition, dict):
        logger.error(f"Malformed form definition: {args.file}")
        return 1
    if is_alternate_shape(definition):
        try:
            definition = normalize(definition)
        except NormalizationError as e:
            logger.error(f"Malformed form definition: {args.file}: {e}")
            return 1

    errors = validate_definition(definition)
    for error in errors:
        print(f"[{error.error_type}] {error.node_id}: {error.message}")
    if errors:
        logger.error(f"{len(errors)} validation error(s)")
        return 1
    logger.info("Definition is valid")
    return 0


# =============================================================================
# Render Command
# =============================================================================


def cmd_render(args: argparse.Namespace) -> int:
    """Handle the render command."""
    import httpx

    from formrender.render import FormRenderError, RenderOptions, render_form

    source: str = args.source
    if not source.startswith(("http://", "https://")):
        path = Path(source)
        if not path.exists():
            logger.error(f"File not found: {path}")
            return 1
        source = path.read_text(encoding="utf-8")

    options = RenderOptions(authoring=True if args.authoring else None)

    try:
        form = asyncio.run(render_form(source, options))
    except httpx.HTTPError as e:
        logger.error(f"Failed to fetch form definition: {e}")
        return 1
    except FormRenderError as e:
        logger.error(f"Render failed: {e}")
        return 1

    if form is None:
        logger.error("No form rendered: definition is missing or malformed")
        return 1

    _write_result(form.to_html(), args.output)
    return 0


# =============================================================================
# Env Command
# =============================================================================


def cmd_env(args: argparse.Namespace) -> int:
    """Show configuration variables and their resolved values."""
    for env_var in list_environment_variables(args.category):
        info = get_environment_info(env_var)
        value = get_environment(env_var)
        print(f"{info.name:<36} {value!r:<40} {info.description}")
    return 0


# =============================================================================
# Test Command
# =============================================================================


def cmd_test(extra_args: list[str]) -> int:
    """Run pytest with provided arguments and test tier options.

    Usage:
        python . test                # Run all tests
        python . test --unit         # Run only unit tests
        python . test --integration  # Run integration tests
        python . test -v             # Run with verbose output
        python . test -k "render"    # Run tests matching pattern
    """
    tier_markers = {
        "--unit": ["-m", "unit"],
        "--integration": ["-m", "integration"],
        "--all": [],
    }

    pytest_args: list[str] = []
    remaining_args: list[str] = []

    for arg in extra_args:
        if arg in tier_markers:
            pytest_args.extend(tier_markers[arg])
        else:
            remaining_args.append(arg)

    cmd = [sys.executable, "-m", "pytest", *pytest_args, *remaining_args]
    logger.info(f"Running: {' '.join(cmd)}")

    try:
        return subprocess.call(cmd)
    except KeyboardInterrupt:
        return 130


# =============================================================================
# Argument Parsing
# =============================================================================


COMMANDS = ("normalize", "validate", "render", "env")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python .",
        description="Form definition processing and rendering",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    normalize_parser = subparsers.add_parser(
        "normalize", help="Print the canonical shape of a definition"
    )
    normalize_parser.add_argument("file", type=Path, help="Definition JSON file")
    normalize_parser.add_argument(
        "--output", "-o", type=Path, default=None, help="Write result to file"
    )
    normalize_parser.set_defaults(func=cmd_normalize)

    validate_parser = subparsers.add_parser(
        "validate", help="Check the structure of a definition"
    )
    validate_parser.add_argument("file", type=Path, help="Definition JSON file")
    validate_parser.set_defaults(func=cmd_validate)

    render_parser = subparsers.add_parser("render", help="Render a definition to HTML")
    render_parser.add_argument("source", help="Definition JSON file or http(s) URL")
    render_parser.add_argument(
        "--authoring",
        action="store_true",
        help="Render in authoring mode (no CAPTCHA, validation or rule engine)",
    )
    render_parser.add_argument(
        "--output", "-o", type=Path, default=None, help="Write HTML to file"
    )
    render_parser.set_defaults(func=cmd_render)

    env_parser = subparsers.add_parser("env", help="Show configuration variables")
    env_parser.add_argument(
        "--category", default=None, help="Filter by category (logging, render, source)"
    )
    env_parser.set_defaults(func=cmd_env)

    return parser


def show_help() -> None:
    """Display CLI help message."""
    print("Usage: python . {command} [args]")
    print("\nCommands:")
    print("  normalize  Print the canonical shape of a definition")
    print("  validate   Check the structure of a definition")
    print("  render     Render a definition to HTML")
    print("  env        Show configuration variables")
    print("  test       Run the test suite")
    print("\nExamples:")
    print("  python . normalize form.json")
    print("  python . render form.json --output form.html")
    print("  python . render https://example.com/forms/contact.json --authoring")
    print("  python . test --unit")


def main() -> int:
    """Main entry point for the CLI."""
    if len(sys.argv) < 2:
        show_help()
        return 1

    command = sys.argv[1]
    rest_args = sys.argv[2:]

    if command in ("-h", "--help"):
        show_help()
        return 0

    if command == "test":
        return cmd_test(rest_args)

    if command not in COMMANDS:
        logger.error(f"Unknown command: {command}")
        show_help()
        return 1

    setup_logging(get_environment(EnvVar.FORMRENDER_LOG_LEVEL))
    args = build_parser().parse_args(sys.argv[1:])
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
