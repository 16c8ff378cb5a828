# markrec/cli.py
# Defines the command-line interface using argparse.

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import IO, Sequence

from markrec import __version__
from markrec.api import recommend
from markrec.config import ConfigError, load_config, load_settings
from markrec.extract import PageFormatError
from markrec.fetcher import FetchError
from markrec.ui import render_result

log = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            "Recommend books or movies based on the recommendations of "
            "everything you have already marked."
        ),
        prog="markrec",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging output to stderr.",
    )
    parser.add_argument(
        "--config",
        metavar="FILEPATH",
        default=None,
        help="TOML config file (default: ./markrec.toml, then [tool.markrec] in ./pyproject.toml).",
    )
    parser.add_argument("--id", dest="user_id", default="", help="Overrides user.id.")
    parser.add_argument("--cookie", default="", help="Overrides user.cookie.")
    return parser


async def async_main(
    argv: Sequence[str] | None = None, stdout: IO[str] | None = None
) -> int:
    """Async entry point for the command-line interface."""
    stdout = stdout or sys.stdout

    args = _build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    try:
        config = load_config(Path(args.config) if args.config else None)
        settings = load_settings(config, user_id=args.user_id, cookie=args.cookie)
    except ConfigError as e:
        log.error("%s", e)
        return 2

    try:
        result = await recommend(settings)
    except (FetchError, PageFormatError) as e:
        log.error("%s", e)
        return 1

    render_result(result, file=stdout)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Synchronous wrapper for the CLI entry point."""
    return asyncio.run(async_main(argv))


if __name__ == "__main__":
    sys.exit(main())
