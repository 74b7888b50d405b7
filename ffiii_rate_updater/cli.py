"""Command line entry point: fetch exchange rates and update them in Firefly III.

Examples::

    ffiii-rate-updater update
    ffiii-rate-updater update --currencies USD,EUR,GBP --date 2025-01-01
    ffiii-rate-updater init-config -k <token> -u https://firefly.example.com/api/v1
"""

from __future__ import annotations

import argparse
from typing import Any, Sequence

from ffiii_rate_updater.config import SubmissionMode, load_config, write_default_config
from ffiii_rate_updater.exceptions import RateUpdaterError
from ffiii_rate_updater.pipeline import RateUpdatePipeline
from ffiii_rate_updater.utils.logger import get_logger, set_verbose

LOGGER = get_logger(__name__)

__all__ = ["build_parser", "parse_args", "main"]


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        dest="config",
        help="Config file (default: ./config.yaml, then ~/.config/ffiii-rate-updater/config.yaml)",
    )
    parser.add_argument("-k", "--firefly.api_key", dest="api_key", help="Firefly III API key")
    parser.add_argument("-u", "--firefly.api_url", dest="api_url", help="Firefly III API URL")
    parser.add_argument(
        "-c",
        "--currencies",
        dest="currencies",
        help="Comma separated currencies to fetch exchange rates for (e.g. USD,EUR,GBP)",
    )
    parser.add_argument(
        "-d",
        "--date",
        dest="date",
        help="Date for which to fetch exchange rates (YYYY-MM-DD or 'latest')",
    )
    parser.add_argument("--timeout", dest="timeout", type=float, help="HTTP timeout in seconds")
    parser.add_argument(
        "--mode",
        dest="mode",
        choices=[mode.value for mode in SubmissionMode],
        help="Send one batch per base currency (default) or every pair separately",
    )
    parser.add_argument(
        "--feed-url",
        dest="feed_urls",
        action="append",
        help="Rate feed URL template; repeat to add fallbacks tried in order",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ffiii-rate-updater",
        description=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    commands = parser.add_subparsers(dest="command", required=True)

    update = commands.add_parser("update", help="Fetch and update exchange rates in Firefly III")
    _add_common_arguments(update)

    init_config = commands.add_parser("init-config", help="Generate a default configuration file")
    _add_common_arguments(init_config)
    init_config.add_argument(
        "-o", "--output", dest="output", default="config.yaml", help="Where to write the file"
    )
    init_config.add_argument(
        "--force", action="store_true", help="Overwrite an existing configuration file"
    )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def _overrides(args: argparse.Namespace) -> dict[str, Any]:
    keys = ("api_key", "api_url", "currencies", "date", "timeout", "mode", "feed_urls")
    return {key: getattr(args, key) for key in keys if getattr(args, key) is not None}


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    set_verbose(args.verbose)
    try:
        config = load_config(config_path=args.config, overrides=_overrides(args))
        if args.command == "init-config":
            write_default_config(config, args.output, force=args.force)
            return 0
        RateUpdatePipeline(config).run()
    except RateUpdaterError as exc:
        LOGGER.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
