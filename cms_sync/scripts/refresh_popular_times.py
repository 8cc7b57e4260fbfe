"""
Background job to refresh stale popular times

This script should be run periodically (e.g., via cron or Cloud Scheduler)
so locations whose popular times are older than the staleness threshold get
recomputed.

    python -m cms_sync.scripts.refresh_popular_times [--force]
"""

import argparse
import asyncio
import sys

import structlog

from cms_sync.core.config import get_settings
from cms_sync.core.dependencies import SyncServices, build_services
from cms_sync.core.logging_config import configure_logging

logger = structlog.get_logger(__name__)


async def refresh_popular_times(services: SyncServices, force: bool = False) -> dict:
    """Refresh stale locations and summarize the run"""
    result = await services.scheduler.refresh_stale(force_all=force)
    return {
        "dispatched": result.updated_count,
        "failed": [outcome.key for outcome in result.report.failed],
    }


async def run(force: bool) -> int:
    settings = get_settings()
    services = build_services(settings)
    try:
        results = await refresh_popular_times(services, force=force)
    finally:
        await services.aclose()

    logger.info("Popular times refresh complete", **results)
    return 1 if results["failed"] else 0


def main():
    """Main entry point for the refresh job"""
    parser = argparse.ArgumentParser(description="Refresh stale popular times")
    parser.add_argument("--force", action="store_true", help="refresh every location")
    args = parser.parse_args()

    configure_logging(get_settings().LOG_LEVEL)
    logger.info("Starting popular times refresh job", force=args.force)

    try:
        exit_code = asyncio.run(run(args.force))
    except Exception as e:
        logger.error(f"Fatal error in popular times refresh job: {e}", exc_info=True)
        sys.exit(1)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
