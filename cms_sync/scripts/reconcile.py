"""
Background job to reconcile the store with the CMS

Re-synchronizes every location, tenant and translation. Run it after
outages of the webhook endpoint or on a nightly schedule.

    python -m cms_sync.scripts.reconcile
"""

import asyncio
import sys

import structlog

from cms_sync.core.config import get_settings
from cms_sync.core.dependencies import SyncServices, build_services
from cms_sync.core.logging_config import configure_logging

logger = structlog.get_logger(__name__)


async def reconcile(services: SyncServices) -> dict:
    """Run a full reconciliation and summarize the run"""
    report = await services.reconciler.reconcile_all()
    return {
        "processed": report.total,
        "succeeded": len(report.succeeded),
        "failures": [outcome.to_dict() for outcome in report.failed],
    }


async def run() -> int:
    services = build_services(get_settings())
    try:
        results = await reconcile(services)
    finally:
        await services.aclose()

    logger.info("Reconciliation complete", **results)
    return 1 if results["failures"] else 0


def main():
    """Main entry point for the reconciliation job"""
    configure_logging(get_settings().LOG_LEVEL)
    logger.info("Starting reconciliation job")

    try:
        exit_code = asyncio.run(run())
    except Exception as e:
        logger.error(f"Fatal error in reconciliation job: {e}", exc_info=True)
        sys.exit(1)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
