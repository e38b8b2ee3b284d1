"""CLI entrypoint for the dashboard API client."""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from dashboard_api.client import DashboardClient
from dashboard_api.config.loader import load_config
from dashboard_api.errors import ErrorKind, classify_error
from dashboard_api.query import ComparisonMode, Period, Query
from dashboard_api.utils.logging import configure_logging, get_logger
from dashboard_api.utils.time import parse_date_like

logger = get_logger(__name__)

EXIT_CODES = {
    ErrorKind.APPLICATION: 1,
    ErrorKind.TRANSPORT: 2,
    ErrorKind.MALFORMED_RESPONSE: 3,
}


def _parse_pairs(pairs: Optional[List[str]], option: str) -> Dict[str, str]:
    """Parse repeated KEY=VALUE options into a dict."""
    parsed: Dict[str, str] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Invalid {option} value (expected KEY=VALUE): {pair}")
        parsed[key] = value
    return parsed


def _optional_date(value: Optional[str]):
    return parse_date_like(value) if value else None


def build_query(args: argparse.Namespace) -> Query:
    """Build a Query from parsed command-line options."""
    return Query(
        period=args.period,
        date=_optional_date(args.date),
        from_date=_optional_date(args.from_date),
        to_date=_optional_date(args.to_date),
        filters=_parse_pairs(args.filter, "--filter") or None,
        experimental_session_count=args.experimental_session_count or None,
        with_imported=args.with_imported or None,
        comparison=args.comparison,
        compare_from=_optional_date(args.compare_from),
        compare_to=_optional_date(args.compare_to),
        match_day_of_week=args.match_day_of_week,
    )


def _build_client(args: argparse.Namespace) -> DashboardClient:
    config = load_config(Path(args.config) if args.config else None)
    client = DashboardClient.from_config(config)
    if args.auth:
        client.set_shared_link_auth(args.auth)
    return client


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def cmd_get(args: argparse.Namespace) -> None:
    """Run a stats query and print the JSON result."""
    client = _build_client(args)
    extra = _parse_pairs(args.extra, "--extra")
    extra_query = [extra] if extra else []
    _print_json(client.get(args.url, build_query(args), *extra_query))


def cmd_put(args: argparse.Namespace) -> None:
    """Send a JSON body and print the raw response."""
    client = _build_client(args)
    body = json.loads(args.body)
    response = client.put(args.url, body)
    print(response.status_code)
    if response.text:
        print(response.text)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("url", help="Request path (joined with base_url) or absolute URL")
    parser.add_argument("--config", type=str, help="Path to client config YAML")
    parser.add_argument("--auth", type=str, help="Shared-link auth token")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dashboard-api",
        description="Query the analytics dashboard API",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        help="Logging level (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # get command
    get_parser = subparsers.add_parser("get", help="Run a stats query")
    _add_common_arguments(get_parser)
    get_parser.add_argument(
        "--period",
        type=str,
        choices=[p.value for p in Period],
        help="Time period",
    )
    get_parser.add_argument("--date", type=str, help="Reference date (YYYY-MM-DD)")
    get_parser.add_argument("--from", dest="from_date", type=str, help="Range start (custom period)")
    get_parser.add_argument("--to", dest="to_date", type=str, help="Range end (custom period)")
    get_parser.add_argument(
        "--filter",
        action="append",
        metavar="KEY=VALUE",
        help="Filter (repeatable)",
    )
    get_parser.add_argument(
        "--comparison",
        type=str,
        choices=[c.value for c in ComparisonMode],
        help="Comparison mode",
    )
    get_parser.add_argument("--compare-from", type=str, help="Comparison range start")
    get_parser.add_argument("--compare-to", type=str, help="Comparison range end")
    get_parser.add_argument(
        "--match-day-of-week",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Align comparison by day of week",
    )
    get_parser.add_argument("--with-imported", action="store_true", help="Include imported data")
    get_parser.add_argument(
        "--experimental-session-count",
        action="store_true",
        help="Use experimental session counting",
    )
    get_parser.add_argument(
        "--extra",
        action="append",
        metavar="KEY=VALUE",
        help="Extra query parameter, overriding built ones (repeatable)",
    )
    get_parser.set_defaults(func=cmd_get)

    # put command
    put_parser = subparsers.add_parser("put", help="Send a JSON body with PUT")
    _add_common_arguments(put_parser)
    put_parser.add_argument("--body", type=str, required=True, help="JSON request body")
    put_parser.set_defaults(func=cmd_put)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    configure_logging(args.log_level)

    try:
        args.func(args)
    except Exception as e:
        kind = classify_error(e)
        if kind is None:
            logger.error(f"Error running command '{args.command}': {e}", exc_info=True)
            raise
        logger.error(f"{kind.value} error running command '{args.command}': {e}")
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CODES[kind]
    return 0


if __name__ == "__main__":
    sys.exit(main())
