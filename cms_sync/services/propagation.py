"""
Relation propagator: tenant ownership pushed onto locations
"""

from typing import Iterable

import structlog

from cms_sync.core.concurrency import BatchReport, run_bounded
from cms_sync.core.errors import StoreError
from cms_sync.core.store import DocumentStore
from cms_sync.models import EntityKind

logger = structlog.get_logger(__name__)


class RelationPropagator:
    """Sets `tenantId` on the locations a tenant references"""

    def __init__(self, store: DocumentStore, max_concurrency: int = 10):
        self.store = store
        self.max_concurrency = max_concurrency

    async def propagate(self, tenant_id: str, location_id: str) -> bool:
        """
        Merge the tenant id onto one location

        Returns False without writing when the location does not exist yet;
        tenants and locations may arrive in either order.
        """
        collection = EntityKind.LOCATION.collection
        existing = await self.store.get(collection, location_id)
        if existing is None:
            logger.info(f"Location {location_id} not found, skipping tenant {tenant_id}")
            return False

        await self.store.set(collection, location_id, {"tenantId": tenant_id}, merge=True)
        logger.debug(f"Location {location_id} assigned to tenant {tenant_id}")
        return True

    async def propagate_all(self, tenant_id: str, location_ids: Iterable[str]) -> BatchReport:
        """Propagate to every referenced location; raises if any write failed"""
        report = await run_bounded(
            location_ids,
            lambda location_id: self.propagate(tenant_id, location_id),
            key=lambda location_id: location_id,
            limit=self.max_concurrency,
            kind=EntityKind.LOCATION.value,
        )
        if not report.ok:
            failed = ", ".join(f"{o.key} ({o.error})" for o in report.failed)
            raise StoreError(
                f"Failed to assign tenant {tenant_id} to locations: {failed}",
                {"tenant_id": tenant_id, "failures": [o.to_dict() for o in report.failed]}
            )
        return report
