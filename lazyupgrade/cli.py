"""Command-line front door for lazyupgrade.

Parses CLI options, merges them over the persisted config, configures
logging, and dispatches into the interactive upgrade flow.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from .app import UpgradeOptions, run_upgrade
from .config import load_upgrade_config, save_theme
from .errors import LazyUpgradeError
from .ui_theme import available_theme_names, resolve_theme

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"
INTERRUPT_EXIT_STATUS = 130


def configure_logging(verbose: bool) -> None:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger("lazyupgrade")
    root.handlers[:] = [handler]
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    root.propagate = False


def _split_patterns(value: str | None) -> tuple[str, ...]:
    if not value:
        return ()
    return tuple(part.strip() for part in value.split(",") if part.strip())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lazyupgrade",
        description="Interactively upgrade dependencies across a pnpm workspace.",
    )
    parser.add_argument("--dir", default=None, help="Project root to scan. Defaults to current directory.")
    parser.add_argument(
        "-e",
        "--exclude",
        default=None,
        help="Comma-separated regexes; matching package.json paths are skipped.",
    )
    parser.add_argument("--include-peer-deps", action="store_true", help="Also offer peerDependencies.")
    parser.add_argument("--include-optional-deps", action="store_true", help="Also offer optionalDependencies.")
    parser.add_argument(
        "--theme",
        default=None,
        help=f"UI theme name ({', '.join(available_theme_names())}); remembered for later runs.",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable color output.")
    parser.add_argument("--no-install", action="store_true", help="Rewrite manifests without running pnpm install.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug details to stderr.")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse arguments and run the upgrade flow.

    Library errors become a one-line ``SystemExit`` message; Ctrl-C exits
    with status 130 once the terminal has been restored.
    """
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    root = Path(args.dir) if args.dir else Path.cwd()
    if not root.is_dir():
        raise SystemExit(f"Path not found: {root}")

    config = load_upgrade_config()
    if args.theme is not None:
        save_theme(args.theme)
    no_color = args.no_color or bool(os.environ.get("NO_COLOR"))
    options = UpgradeOptions(
        root=root,
        exclude=config.exclude + _split_patterns(args.exclude),
        include_peer_deps=args.include_peer_deps or config.include_peer_deps,
        include_optional_deps=args.include_optional_deps or config.include_optional_deps,
        theme=resolve_theme(args.theme or config.theme, no_color=no_color),
        chrome_lines=config.chrome_lines,
        install=not args.no_install,
    )

    try:
        run_upgrade(options)
    except LazyUpgradeError as exc:
        raise SystemExit(f"Error: {exc}") from exc
    except KeyboardInterrupt:
        raise SystemExit(INTERRUPT_EXIT_STATUS) from None


if __name__ == "__main__":
    main()
