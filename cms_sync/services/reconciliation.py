"""
Reconciliation scanner

Re-synchronizes every document of every kind from the CMS to repair drift.
Kinds run concurrently with each other and records of one kind fan out
through a bounded pool. A failing record is reported, never fatal to the
rest of the batch.
"""

import asyncio

import structlog

from cms_sync.core.concurrency import BatchReport, ItemOutcome, run_bounded
from cms_sync.core.content import SanityContentClient
from cms_sync.core.errors import ContentSourceError
from cms_sync.models import EntityKind
from cms_sync.services.engine import SyncEngine

logger = structlog.get_logger(__name__)


class ReconciliationScanner:
    """Pulls the full CMS dataset and re-syncs it"""

    def __init__(
        self,
        content: SanityContentClient,
        engine: SyncEngine,
        max_concurrency: int = 10,
    ):
        self.content = content
        self.engine = engine
        self.max_concurrency = max_concurrency

    async def reconcile_all(self) -> BatchReport:
        reports = await asyncio.gather(
            *(self.reconcile_kind(kind) for kind in EntityKind)
        )

        report = BatchReport()
        for kind_report in reports:
            report.extend(kind_report)

        logger.info(
            "Reconciliation finished",
            total=report.total,
            succeeded=len(report.succeeded),
            failed=len(report.failed),
        )
        return report

    async def reconcile_kind(self, kind: EntityKind) -> BatchReport:
        try:
            records = await self.content.fetch_all(kind)
        except ContentSourceError as e:
            logger.error(f"Could not fetch {kind.value} documents: {e}")
            return BatchReport(outcomes=[
                ItemOutcome(key="*", ok=False, error=str(e), kind=kind.value)
            ])

        return await run_bounded(
            records,
            lambda raw: self.engine.sync_record(kind, raw),
            key=lambda raw: raw.get("_id") or "?",
            limit=self.max_concurrency,
            kind=kind.value,
        )
