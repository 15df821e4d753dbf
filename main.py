#!/usr/bin/env python3
"""
niftyscan - daily stock screening report
Service launcher script
"""

import argparse
import asyncio

from loguru import logger

from niftyscan.core.config import ConfigManager, validate_config
from niftyscan.core.exceptions import ConfigurationError, NiftyScanError
from niftyscan.core.logging import configure_logging


def run_web_service() -> None:
    """Run the HTTP service."""
    from niftyscan.web.main import serve

    serve()


def run_once() -> int:
    """Run a single report, as a system cron job would."""
    from niftyscan.core.services import build_service

    config = ConfigManager().get_config()
    try:
        validate_config(config)
        report = asyncio.run(build_service(config).run())
    except NiftyScanError as e:
        logger.error(f"Daily task failed: {e.message}")
        return 1

    logger.success(
        f"Daily task completed: {report.candidates_included}/{report.candidates_scraped} stocks included"
    )
    return 0


def main() -> int:
    """Main entry point."""
    configure_logging(level="INFO", format="console")

    parser = argparse.ArgumentParser(description="niftyscan - daily stock screening report")
    parser.add_argument(
        "mode",
        choices=["web", "once"],
        help="Run mode: web (HTTP service) or once (single report run)",
    )
    args = parser.parse_args()

    logger.info(f"Starting niftyscan - mode: {args.mode}")

    if args.mode == "web":
        try:
            run_web_service()
        except ConfigurationError as e:
            logger.error(f"Service not started: {e.message}")
            return 2
        return 0
    return run_once()


if __name__ == "__main__":
    raise SystemExit(main())
