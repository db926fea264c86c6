"""
Command line entry point: generate all configured feeds.
"""

import argparse
import sys
from typing import Optional

import yaml
from pydantic import ValidationError

from page2atom import __version__
from page2atom.config import reload_config
from page2atom.core.fetcher import PageFetcher
from page2atom.core.pipeline import FeedPipeline, RunMode
from page2atom.exceptions import ConfigurationError
from page2atom.feeds import load_feed_specs
from page2atom.logger import get_logger, setup_logger

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FEED_FAILED = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="page2atom",
        description="Turn web pages into Atom feeds using regular expressions",
    )
    parser.add_argument("--config", help="Application config YAML (default: config/config.yaml)")
    parser.add_argument("--feeds", help="Feed definitions YAML (overrides feeds_file)")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="Print feeds to stdout instead of writing them",
    )
    parser.add_argument("--fail-fast", action="store_true", default=None, help="Stop at the first failing feed")
    parser.add_argument("--log-level", help="Log level (DEBUG, INFO, WARNING...)")
    parser.add_argument("--version", action="version", version=f"page2atom {__version__}")
    return parser


def main(argv: Optional[list[str]] = None, pipeline: Optional[FeedPipeline] = None) -> int:
    """Generate all of the feeds.

    Args:
        argv: Command line arguments, defaults to sys.argv
        pipeline: Pipeline to run, built from the configuration if omitted

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)

    try:
        config = reload_config(args.config)
    except (FileNotFoundError, ValidationError, yaml.YAMLError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    setup_logger(level=args.log_level, log_config=config.logging)

    dry_run = config.dry_run if args.dry_run is None else args.dry_run
    fail_fast = config.fail_fast if args.fail_fast is None else args.fail_fast
    mode = RunMode.PREVIEW if dry_run else RunMode.EXECUTE

    try:
        specs = load_feed_specs(args.feeds or config.get_feeds_path())
    except ConfigurationError as e:
        logger.error(str(e))
        return EXIT_CONFIG_ERROR

    pipeline = pipeline or FeedPipeline(fetcher=PageFetcher(config=config.fetcher))
    report = pipeline.run(specs, mode=mode, fail_fast=fail_fast)

    if not report.success:
        failed = ", ".join(result.title for result in report.failed)
        logger.error(f"{len(report.failed)} of {len(specs)} feeds failed: {failed}")

    return EXIT_OK if report.success else EXIT_FEED_FAILED


if __name__ == "__main__":
    sys.exit(main())
