"""
Ingestion: routes CMS notifications to the mapper, synchronizer and cascade
"""

from typing import Any, Dict, Optional, assert_never

import structlog

from cms_sync.core.errors import SyncError, UnsupportedKindError
from cms_sync.core.store import DocumentStore
from cms_sync.models import EntityKind
from cms_sync.services.mapper import EntityMapper
from cms_sync.services.propagation import RelationPropagator
from cms_sync.services.synchronizer import EntitySynchronizer, SyncDecision

logger = structlog.get_logger(__name__)


class SyncEngine:
    """Entry point for create/update and delete notifications"""

    def __init__(
        self,
        store: DocumentStore,
        mapper: EntityMapper,
        synchronizer: EntitySynchronizer,
        propagator: RelationPropagator,
    ):
        self.store = store
        self.mapper = mapper
        self.synchronizer = synchronizer
        self.propagator = propagator

    async def ingest(self, payload: Dict[str, Any]) -> Optional[SyncDecision]:
        """
        Handle a create/update notification

        Notifications for document types we do not mirror are ignored and
        still count as handled.
        """
        kind = EntityKind.parse(payload.get("_type"))
        if kind is None:
            logger.info(f"Ignoring update for unmirrored type {payload.get('_type')!r}")
            return None
        return await self.sync_record(kind, payload)

    async def sync_record(self, kind: EntityKind, raw: Dict[str, Any]) -> SyncDecision:
        """Map and persist one CMS document, then run its relation cascade"""
        if not raw.get("_id"):
            raise SyncError("missing document id", {"kind": kind.value})

        record = self.mapper.map(kind, raw)
        decision = await self.synchronizer.synchronize(kind, record)

        match kind:
            case EntityKind.TENANT:
                # Tenant write is confirmed before any location is touched
                if record.locations:
                    await self.propagator.propagate_all(record.id, record.locations)
            case EntityKind.LOCATION | EntityKind.TRANSLATION:
                pass
            case _:
                assert_never(kind)

        return decision

    async def delete(self, payload: Dict[str, Any]) -> None:
        """Remove the document named by a delete notification; relations are left alone"""
        kind = EntityKind.parse(payload.get("_type"))
        if kind is None:
            raise UnsupportedKindError(payload.get("_type"))

        doc_id = payload.get("_id")
        if not doc_id:
            raise SyncError("missing document id", {"kind": kind.value})

        await self.store.delete(kind.collection, doc_id)
        logger.info(f"Deleted {kind.value} {doc_id}", kind=kind.value, doc_id=doc_id)
