"""
Crawl from a seed URL and report visited pages and found images.

Any number of processes may run this against the same Redis and key prefix;
they cooperate on one crawl.

Usage:
    python -m imgcrawler --url https://example.com/ [--redis-url redis://localhost:6379/0] [--workers 5]
"""

import argparse
import asyncio
import logging
import sys

from imgcrawler.core.config import settings
from imgcrawler.db.store import StoreError
from imgcrawler.workers.orchestrator import run_crawl

logger = logging.getLogger("imgcrawler")


def _positive_int(value: str) -> int:
    n = int(value)
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {n}")
    return n


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="imgcrawler", description="Distributed same-domain image crawler"
    )
    parser.add_argument("--url", required=True, help="The seed URL to crawl from")
    parser.add_argument(
        "--redis-url", default=settings.REDIS_URL, help="Shared Redis store URL"
    )
    parser.add_argument(
        "--workers",
        type=_positive_int,
        default=settings.CRAWL_WORKERS,
        help="Number of concurrent workers in this process",
    )
    parser.add_argument(
        "--key-prefix",
        default=settings.CRAWL_KEY_PREFIX,
        help="Namespace for the crawl keys in Redis",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=settings.CRAWL_POLL_INTERVAL_SEC,
        help="Seconds between quiescence checks",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Clear crawl state left by a previous run before seeding",
    )
    parser.add_argument("--log-level", default=settings.LOG_LEVEL)
    return parser


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("aiohttp").setLevel(logging.WARNING)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        report = asyncio.run(
            run_crawl(
                args.url,
                workers=args.workers,
                redis_url=args.redis_url,
                key_prefix=args.key_prefix,
                poll_interval=args.poll_interval,
                reset=args.reset,
            )
        )
    except StoreError as e:
        logger.error(f"Shared store unavailable: {e}")
        return 1
    except ValueError as e:
        print(f"imgcrawler: error: {e}", file=sys.stderr)
        return 2

    print("Crawling Complete")
    print(f"Visited HREFs ({len(report.visited_urls)}):")
    for url in report.visited_urls:
        print(f"  {url}")
    print(f"Found Images ({len(report.image_urls)}):")
    for url in report.image_urls:
        print(f"  {url}")

    if report.failed_workers:
        print(f"Workers failed: {len(report.failed_workers)}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
