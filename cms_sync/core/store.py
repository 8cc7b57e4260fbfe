"""
Document store access

The engine only needs four operations per collection: get by id, set
(replace or merge), delete by id and a full scan. Firestore is the production
backend; the in-memory backend mirrors Firestore's merge semantics and is used
for local development and tests.
"""

import asyncio
import copy
from typing import Any, Dict, List, Optional, Protocol

import structlog
from google.api_core.exceptions import GoogleAPIError
from google.cloud import firestore

from cms_sync.core.errors import StoreError

logger = structlog.get_logger(__name__)


class DocumentStore(Protocol):
    """Key-value document store namespaced by collection"""

    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        ...

    async def set(
        self,
        collection: str,
        doc_id: str,
        data: Dict[str, Any],
        merge: bool = False
    ) -> None:
        ...

    async def delete(self, collection: str, doc_id: str) -> None:
        ...

    async def list_all(self, collection: str) -> List[Dict[str, Any]]:
        ...


def deep_merge(target: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge nested maps key by key, as Firestore `set(merge=True)` does

    Non-map values and empty maps replace the stored value.
    """
    for key, value in updates.items():
        current = target.get(key)
        if isinstance(value, dict) and value and isinstance(current, dict):
            deep_merge(current, value)
        else:
            target[key] = copy.deepcopy(value)
    return target


class InMemoryDocumentStore:
    """Process-local document store"""

    def __init__(self):
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}

    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        await asyncio.sleep(0)
        document = self._collections.get(collection, {}).get(doc_id)
        return copy.deepcopy(document) if document is not None else None

    async def set(
        self,
        collection: str,
        doc_id: str,
        data: Dict[str, Any],
        merge: bool = False
    ) -> None:
        await asyncio.sleep(0)
        documents = self._collections.setdefault(collection, {})
        if merge and doc_id in documents:
            deep_merge(documents[doc_id], data)
        else:
            documents[doc_id] = copy.deepcopy(data)

    async def delete(self, collection: str, doc_id: str) -> None:
        await asyncio.sleep(0)
        self._collections.get(collection, {}).pop(doc_id, None)

    async def list_all(self, collection: str) -> List[Dict[str, Any]]:
        await asyncio.sleep(0)
        return [copy.deepcopy(doc) for doc in self._collections.get(collection, {}).values()]

    def clear(self):
        """Drop every collection (useful for testing)"""
        self._collections.clear()


class FirestoreDocumentStore:
    """Document store backed by the Firestore async client"""

    def __init__(self, client):
        self.client = client

    @classmethod
    def from_settings(cls, project_id: Optional[str] = None, database: Optional[str] = None):
        """Create a store with application default credentials"""
        kwargs: Dict[str, Any] = {}
        if project_id:
            kwargs["project"] = project_id
        if database:
            kwargs["database"] = database
        return cls(firestore.AsyncClient(**kwargs))

    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        try:
            snapshot = await self.client.collection(collection).document(doc_id).get()
        except GoogleAPIError as e:
            raise StoreError(f"Failed to read {collection}/{doc_id}: {e}") from e
        if not snapshot.exists:
            return None
        return snapshot.to_dict()

    async def set(
        self,
        collection: str,
        doc_id: str,
        data: Dict[str, Any],
        merge: bool = False
    ) -> None:
        try:
            await self.client.collection(collection).document(doc_id).set(data, merge=merge)
        except GoogleAPIError as e:
            raise StoreError(f"Failed to write {collection}/{doc_id}: {e}") from e

    async def delete(self, collection: str, doc_id: str) -> None:
        try:
            await self.client.collection(collection).document(doc_id).delete()
        except GoogleAPIError as e:
            raise StoreError(f"Failed to delete {collection}/{doc_id}: {e}") from e

    async def list_all(self, collection: str) -> List[Dict[str, Any]]:
        try:
            return [
                snapshot.to_dict()
                async for snapshot in self.client.collection(collection).stream()
            ]
        except GoogleAPIError as e:
            raise StoreError(f"Failed to scan {collection}: {e}") from e


def create_document_store(backend: str, project_id: Optional[str] = None, database: Optional[str] = None):
    """Build the configured store backend"""
    if backend == "memory":
        logger.warning("Using in-memory document store, data is not persisted")
        return InMemoryDocumentStore()
    if backend == "firestore":
        return FirestoreDocumentStore.from_settings(project_id=project_id, database=database)
    raise ValueError(f"Unknown STORE_BACKEND: {backend}")
