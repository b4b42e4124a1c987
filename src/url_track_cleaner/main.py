"""Command line entry point: clean URLs given as arguments or on stdin."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from url_track_cleaner.config import settings
from url_track_cleaner.errors import CleanError
from url_track_cleaner.models import load_cleaner_config
from url_track_cleaner.policy import RedirectPolicy

logger = logging.getLogger(__name__)


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def _parse_policy(value: str) -> RedirectPolicy:
    if value in ("none", "*"):
        return RedirectPolicy.parse(value)
    return RedirectPolicy.allowed_domains(d.strip() for d in value.split(",") if d.strip())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="url-track-cleaner",
        description="Strip tracking parameters from URLs, optionally resolving short links first.",
    )
    parser.add_argument("urls", nargs="*", help="URLs to clean (read from stdin when omitted)")
    parser.add_argument("-c", "--config", default=settings.config_path, help="YAML/JSON rule file")
    parser.add_argument(
        "--policy",
        type=_parse_policy,
        help="redirect policy: 'none', '*' or comma separated domain suffixes (overrides config)",
    )
    parser.add_argument("--user-agent", default=settings.user_agent)
    parser.add_argument("--timeout", type=float, default=settings.timeout, help="probe timeout in seconds")
    parser.add_argument(
        "--passthrough",
        action="store_true",
        help="print the original URL when cleaning fails instead of exiting non-zero",
    )
    parser.add_argument("--log-level", default=settings.log_level)
    return parser


async def _run(args: argparse.Namespace, urls: list[str]) -> int:
    config = load_cleaner_config(args.config)
    if args.policy is not None:
        config = config.model_copy(update={"redirect_policy": args.policy.dump()})
    if args.user_agent:
        config = config.model_copy(update={"user_agent": args.user_agent})

    failed = 0
    async with config.build(timeout=args.timeout) as cleaner:
        results = await cleaner.clean_many(urls)

    for url, result in zip(urls, results):
        if isinstance(result, CleanError):
            if args.passthrough:
                logger.warning("Could not clean %s: %s", url, result)
                print(url)
            else:
                logger.error("Could not clean %s: %s", url, result)
                failed += 1
            continue
        print(result)
    return 1 if failed else 0


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    _setup_logging(args.log_level)

    urls = args.urls or [line.strip() for line in sys.stdin if line.strip()]
    if not urls:
        logger.info("No URLs given")
        sys.exit(0)

    try:
        code = asyncio.run(_run(args, urls))
    except KeyboardInterrupt:
        code = 130
    sys.exit(code)


if __name__ == "__main__":
    main()
