"""
Coupon Scraper - command line interface.

    coupon-scraper serve [--host HOST] [--port PORT] [--log-level LEVEL]
    coupon-scraper scrape <source>|all [--config PATH] [--indent N]
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import List, Optional

from .app_factory import configure_logging, create_app
from .config import ConfigError, Settings
from .scrapers import SCRAPERS, get_scraper, scrape_all_sources


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    settings = Settings.from_env()

    p = argparse.ArgumentParser(
        prog="coupon-scraper",
        description="Redemption code scraper and HTTP API",
    )
    p.add_argument(
        "--log-level",
        default=settings.log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: COUPON_SCRAPER_LOG_LEVEL or INFO).",
    )
    sub = p.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API.")
    serve.add_argument("--host", default=settings.host)
    serve.add_argument("--port", type=int, default=settings.port)

    scrape = sub.add_parser("scrape", help="Scrape one source (or all) and print JSON.")
    scrape.add_argument(
        "source",
        help=f"Source name or 'all'. Known sources: {', '.join(sorted(SCRAPERS))}",
    )
    scrape.add_argument(
        "--config",
        default=None,
        help="scraper_config.yaml used with 'all' (default: packaged config).",
    )
    scrape.add_argument("--indent", type=int, default=2)

    return p.parse_args(argv)


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    settings = Settings(host=args.host, port=args.port, log_level=args.log_level)
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0


def _scrape(args: argparse.Namespace) -> int:
    configure_logging(args.log_level)

    if args.source.lower() == "all":
        result = scrape_all_sources(args.config)
    else:
        try:
            scraper = get_scraper(args.source)
        except ValueError as e:
            print(str(e), file=sys.stderr)
            return 1
        with scraper:
            result = [c.model_dump() for c in scraper.scrape_active_coupons()]

    print(json.dumps(result, indent=args.indent, ensure_ascii=False))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    try:
        args = parse_args(argv)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    if args.command == "serve":
        return _serve(args)
    return _scrape(args)


if __name__ == "__main__":
    sys.exit(main())
