"""CLI entrypoint for Stencil."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from stencil import __version__
from stencil.cli.handlers import handle_cache, handle_new
from stencil.constants.branding import CLI_DESCRIPTION
from stencil.constants.ide import IDE_PRESETS
from stencil.exceptions import (
    AggregateValidationError,
    CacheLockTimeout,
    ConfigError,
    FetchError,
    ManifestError,
    PreviewUnavailable,
    SandboxViolation,
    SetupFailure,
    StencilError,
)

EXIT_OK = 0
EXIT_SETUP_FAILED = 1
EXIT_INVALID = 2
EXIT_PREVIEW_UNAVAILABLE = 3
EXIT_FETCH_FAILED = 4


def build_parser() -> argparse.ArgumentParser:
    """Build top-level CLI parser."""
    parser = argparse.ArgumentParser(
        prog="stencil",
        description=CLI_DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-c", "--config", type=Path, help="Explicit config file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug diagnostics")
    subparsers = parser.add_subparsers(dest="command", required=True)

    new = subparsers.add_parser("new", help="Create a project from a template")
    new.add_argument("target", type=Path, help="Directory to create")
    new.add_argument("-t", "--template", help="Template name inside the repository")
    new.add_argument("-r", "--repo", help="Template repository (owner/name, URL, or local path)")
    new.add_argument("-b", "--branch", help="Repository branch")
    new.add_argument(
        "-o",
        "--options",
        action="append",
        default=[],
        help="Option tokens such as database=postgres or features=auth+docs (repeat or comma-separate)",
    )
    new.add_argument(
        "-p",
        "--placeholder",
        action="append",
        default=[],
        help="Placeholder value as TOKEN=VALUE (repeat flag for multiple values)",
    )
    new.add_argument("--ide", choices=sorted(IDE_PRESETS), default=None, help="IDE preset exposed to the setup script")
    new.add_argument("--dry-run", action="store_true", help="Print the plan without writing files")
    new.add_argument("-n", "--no-cache", action="store_true", help="Fetch the repository even if it is cached")
    new.add_argument("--cache-ttl", type=float, default=None, help="Override the cache TTL in hours")
    new.add_argument("--no-input", action="store_true", help="Never prompt for missing placeholders")
    new.add_argument("--no-color", action="store_true", help="Disable colored output")

    cache = subparsers.add_parser("cache", help="Inspect or prune the template cache")
    cache_commands = cache.add_subparsers(dest="cache_command", required=True)
    gc = cache_commands.add_parser("gc", help="Remove expired and corrupted entries")
    gc.add_argument("--ttl", type=float, default=None, help="Treat entries older than this many hours as expired")
    cache_commands.add_parser("list", help="List cached repositories")
    cache_commands.add_parser("clear", help="Remove every cached repository")

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    handlers = {"new": handle_new, "cache": handle_cache}
    handler = handlers.get(args.command)
    if handler is None:
        parser.error(f"Unsupported command: {args.command}")

    try:
        return handler(args)
    except (ConfigError, ManifestError, AggregateValidationError) as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_INVALID
    except PreviewUnavailable as exc:
        print(f"Preview unavailable: {exc}", file=sys.stderr)
        return EXIT_PREVIEW_UNAVAILABLE
    except (FetchError, CacheLockTimeout) as exc:
        print(f"Fetch error: {exc}", file=sys.stderr)
        return EXIT_FETCH_FAILED
    except (SetupFailure, SandboxViolation) as exc:
        print(f"Setup failed: {exc}", file=sys.stderr)
        return EXIT_SETUP_FAILED
    except StencilError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_SETUP_FAILED


if __name__ == "__main__":
    raise SystemExit(main())
