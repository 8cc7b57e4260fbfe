"""
Service wiring and FastAPI dependencies

Collaborators are built once per process from settings and handed to the
engine components; routes receive them through `get_services`, which tests
override with in-memory doubles.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, List

from fastapi import Request
import structlog

from cms_sync.core.aggregation import HttpAggregationEngine
from cms_sync.core.config import Settings
from cms_sync.core.content import SanityContentClient
from cms_sync.core.images import ImageUrlResolver
from cms_sync.core.store import DocumentStore, create_document_store
from cms_sync.services.engine import SyncEngine
from cms_sync.services.mapper import EntityMapper
from cms_sync.services.propagation import RelationPropagator
from cms_sync.services.reconciliation import ReconciliationScanner
from cms_sync.services.staleness import StalenessScheduler
from cms_sync.services.synchronizer import EntitySynchronizer, utcnow

logger = structlog.get_logger(__name__)


@dataclass
class SyncServices:
    """Engine components sharing one set of collaborators"""
    engine: SyncEngine
    reconciler: ReconciliationScanner
    scheduler: StalenessScheduler
    closeables: List[Any] = field(default_factory=list)

    async def aclose(self):
        for client in self.closeables:
            await client.aclose()


def assemble_services(
    settings: Settings,
    store: DocumentStore,
    content,
    images: ImageUrlResolver,
    aggregation,
    clock: Callable[[], datetime] = utcnow,
) -> SyncServices:
    """Connect the engine components to the given collaborators"""
    synchronizer = EntitySynchronizer(store, aggregation, clock=clock)
    engine = SyncEngine(
        store=store,
        mapper=EntityMapper(images),
        synchronizer=synchronizer,
        propagator=RelationPropagator(store, max_concurrency=settings.SYNC_MAX_CONCURRENCY),
    )
    return SyncServices(
        engine=engine,
        reconciler=ReconciliationScanner(
            content,
            engine,
            max_concurrency=settings.SYNC_MAX_CONCURRENCY,
        ),
        scheduler=StalenessScheduler(
            store,
            aggregation,
            threshold_days=settings.STALENESS_THRESHOLD_DAYS,
            max_concurrency=settings.SYNC_MAX_CONCURRENCY,
            clock=clock,
        ),
    )


def build_services(settings: Settings) -> SyncServices:
    """Create production collaborators from settings"""
    store = create_document_store(
        settings.STORE_BACKEND,
        project_id=settings.FIRESTORE_PROJECT_ID,
        database=settings.FIRESTORE_DATABASE,
    )
    content = SanityContentClient(
        project_id=settings.SANITY_PROJECT_ID,
        dataset=settings.SANITY_DATASET,
        api_version=settings.SANITY_API_VERSION,
        token=settings.SANITY_TOKEN,
        use_cdn=settings.SANITY_USE_CDN,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )
    images = ImageUrlResolver(
        project_id=settings.SANITY_PROJECT_ID,
        dataset=settings.SANITY_DATASET,
        base_url=settings.SANITY_IMAGE_BASE_URL,
    )
    aggregation = HttpAggregationEngine(
        settings.POPULAR_TIMES_URL,
        timeout=settings.POPULAR_TIMES_TIMEOUT_SECONDS,
    )
    if not settings.POPULAR_TIMES_URL:
        logger.warning("POPULAR_TIMES_URL not set, popular times will stay empty")

    services = assemble_services(settings, store, content, images, aggregation)
    services.closeables.extend([content, aggregation])
    return services


async def get_services(request: Request) -> SyncServices:
    """Dependency to get the engine components of this process"""
    return request.app.state.services
