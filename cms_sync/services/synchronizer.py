"""
Entity synchronizer

Each document id moves through a two-state lifecycle in the store:
ABSENT -> PRESENT. The state read right before the write decides whether the
call is a creation (full write including creation-only fields) or an update
(merge of the mapped fields over the existing document).
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional

import structlog

from cms_sync.core.aggregation import AggregationEngine
from cms_sync.core.concurrency import best_effort
from cms_sync.core.store import DocumentStore
from cms_sync.models import EntityKind
from cms_sync.services.mapper import MappedRecord

logger = structlog.get_logger(__name__)

# Written on creation only, never by a later sync
CREATION_ONLY_FIELDS = (
    "createdAt",
    "absoluteOccupancy",
    "relativeOccupancy",
    "popularTimes",
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DocumentState(str, Enum):
    """Lifecycle state of a document id in the store"""
    ABSENT = "absent"
    PRESENT = "present"

    @classmethod
    def of(cls, document: Optional[Dict[str, Any]]) -> "DocumentState":
        return cls.ABSENT if document is None else cls.PRESENT


class SyncDecision(str, Enum):
    """What a synchronization call does with the mapped record"""
    CREATE = "create"
    UPDATE = "update"

    @classmethod
    def for_state(cls, state: DocumentState) -> "SyncDecision":
        match state:
            case DocumentState.ABSENT:
                return cls.CREATE
            case DocumentState.PRESENT:
                return cls.UPDATE


class EntitySynchronizer:
    """Writes mapped records into the store with create-vs-update semantics"""

    def __init__(
        self,
        store: DocumentStore,
        aggregation: AggregationEngine,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.aggregation = aggregation
        self.clock = clock

    async def decide(self, kind: EntityKind, doc_id: str) -> SyncDecision:
        """Read the current state of the id and name the resulting decision"""
        existing = await self.store.get(kind.collection, doc_id)
        return SyncDecision.for_state(DocumentState.of(existing))

    async def synchronize(self, kind: EntityKind, record: MappedRecord) -> SyncDecision:
        """Persist one mapped record; exactly one document write"""
        decision = await self.decide(kind, record.id)

        now = self.clock()
        document = record.to_document()
        document["updatedAt"] = now

        match decision:
            case SyncDecision.CREATE:
                document = await self._prepare_creation(kind, document, now)
                await self.store.set(kind.collection, record.id, document)
            case SyncDecision.UPDATE:
                for field_name in CREATION_ONLY_FIELDS:
                    document.pop(field_name, None)
                await self.store.set(kind.collection, record.id, document, merge=True)

        logger.info(
            f"Synchronized {kind.value} {record.id}",
            kind=kind.value,
            doc_id=record.id,
            decision=decision.value,
        )
        return decision

    async def _prepare_creation(
        self,
        kind: EntityKind,
        document: Dict[str, Any],
        now: datetime
    ) -> Dict[str, Any]:
        """Attach the fields a document only receives when it is first written"""
        # Tenants and translations carry the CMS creation time
        document.setdefault("createdAt", now)

        if kind is EntityKind.LOCATION:
            document["absoluteOccupancy"] = 0
            document["relativeOccupancy"] = 0
            document["popularTimes"] = await best_effort(
                lambda: self.aggregation.compute(document, force=True),
                fallback=[],
                description="popular times computation",
                location_id=document.get("id"),
            )

        return document
