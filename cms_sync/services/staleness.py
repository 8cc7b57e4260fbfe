"""
Staleness scheduler for popular times

Popular times are recomputed for every location whose last update is older
than the threshold, or for all locations on a forced run.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

import structlog

from cms_sync.core.aggregation import AggregationEngine
from cms_sync.core.concurrency import BatchReport, run_bounded
from cms_sync.core.store import DocumentStore
from cms_sync.models import EntityKind
from cms_sync.services.synchronizer import utcnow

logger = structlog.get_logger(__name__)


@dataclass
class RefreshResult:
    """Outcome of a refresh run; `updated_count` counts dispatched locations"""
    updated_count: int
    report: BatchReport

    @property
    def message(self) -> str:
        return f"updated popular times for {self.updated_count} locations"


def _as_datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value:
        try:
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


class StalenessScheduler:
    """Selects stale locations and refreshes their popular times"""

    def __init__(
        self,
        store: DocumentStore,
        aggregation: AggregationEngine,
        threshold_days: int = 6,
        max_concurrency: int = 10,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.aggregation = aggregation
        self.threshold_days = threshold_days
        self.max_concurrency = max_concurrency
        self.clock = clock

    def is_stale(self, location: Dict[str, Any], now: datetime) -> bool:
        """Whole days since the last update exceed the threshold; no usable timestamp is never stale"""
        updated_at = _as_datetime(location.get("updatedAt"))
        if updated_at is None:
            return False
        return (now - updated_at).days > self.threshold_days

    def select(self, locations: List[Dict[str, Any]], force_all: bool, now: datetime) -> List[Dict[str, Any]]:
        if force_all:
            return list(locations)
        return [location for location in locations if self.is_stale(location, now)]

    async def refresh_stale(self, force_all: bool = False) -> RefreshResult:
        now = self.clock()
        locations = await self.store.list_all(EntityKind.LOCATION.collection)
        selected = [
            location for location in self.select(locations, force_all, now)
            if location.get("id")
        ]

        logger.info(
            f"Refreshing popular times for {len(selected)} of {len(locations)} locations",
            force=force_all,
        )

        report = await run_bounded(
            selected,
            self.refresh_location,
            key=lambda location: location["id"],
            limit=self.max_concurrency,
            kind=EntityKind.LOCATION.value,
        )
        if not report.ok:
            logger.warning(f"Popular times refresh failed for {len(report.failed)} locations")

        return RefreshResult(updated_count=len(selected), report=report)

    async def refresh_location(self, location: Dict[str, Any]) -> None:
        popular_times = await self.aggregation.compute(location, force=False)
        await self.store.set(
            EntityKind.LOCATION.collection,
            location["id"],
            {"popularTimes": popular_times, "updatedAt": self.clock()},
            merge=True,
        )
