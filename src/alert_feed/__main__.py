# ABOUTME: CLI entry point for the alert-feed client.
# ABOUTME: Fetches the NWS Atom alert feed and prints its XML serialization to stdout.

import argparse
import logging
import sys

import structlog

from alert_feed.config import get_settings
from alert_feed.exceptions import FeedError
from alert_feed.feeds import FeedFetcher, render_feed


def configure_logging() -> None:
    """Configure structlog for console or JSON output on stderr."""
    settings = get_settings()

    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    # stdout carries the feed, so logs always go to stderr
    logger_factory = structlog.PrintLoggerFactory(file=sys.stderr)

    if settings.log_format == "json":
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.add_log_level,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(log_level),
            logger_factory=logger_factory,
        )
    else:
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
                structlog.processors.add_log_level,
                structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(log_level),
            logger_factory=logger_factory,
        )


def cmd_fetch(args: argparse.Namespace) -> int:
    """Fetch the feed and print it.

    Nothing reaches stdout unless the feed was fetched and decoded.
    """
    log = structlog.get_logger()

    settings = get_settings()
    if args.timeout is not None:
        settings = settings.model_copy(update={"feed_timeout": args.timeout})

    try:
        with FeedFetcher(settings) as fetcher:
            feed = fetcher.fetch_feed(args.url)
    except FeedError as e:
        log.error("cmd_fetch_failed", error=str(e), error_type=type(e).__name__)
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(render_feed(feed))
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="alert-feed",
        description="Fetch the NWS active alerts Atom feed and print it",
    )
    parser.add_argument(
        "--url",
        default=None,
        help="Feed URL (default: FEED_URL setting, the NWS national feed)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Request timeout in seconds (default: FEED_TIMEOUT setting)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    configure_logging()

    parser = create_parser()
    args = parser.parse_args(argv)

    return cmd_fetch(args)


if __name__ == "__main__":
    sys.exit(main())
