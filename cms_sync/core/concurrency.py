"""
Bounded fan-out and best-effort helpers for the sync engine
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, List, Optional, TypeVar

import structlog

logger = structlog.get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class ItemOutcome:
    """Result of one item of a batch"""
    key: str
    ok: bool
    error: Optional[str] = None
    kind: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"id": self.key, "error": self.error}
        if self.kind:
            data["kind"] = self.kind
        return data


@dataclass
class BatchReport:
    """Per-item outcomes of a fan-out"""
    outcomes: List[ItemOutcome] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> List[ItemOutcome]:
        return [outcome for outcome in self.outcomes if outcome.ok]

    @property
    def failed(self) -> List[ItemOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]

    @property
    def ok(self) -> bool:
        return not self.failed

    def extend(self, other: "BatchReport") -> "BatchReport":
        self.outcomes.extend(other.outcomes)
        return self


async def run_bounded(
    items: Iterable[T],
    worker: Callable[[T], Awaitable[Any]],
    key: Callable[[T], str],
    limit: int,
    kind: Optional[str] = None,
) -> BatchReport:
    """
    Run `worker` over every item with at most `limit` calls in flight

    A failing item never cancels the others; its exception is captured in
    the returned report.
    """
    semaphore = asyncio.Semaphore(max(1, limit))

    async def run_one(item: T) -> ItemOutcome:
        item_key = str(key(item))
        async with semaphore:
            try:
                await worker(item)
            except Exception as e:
                logger.error(f"Batch item {item_key} failed: {e}", kind=kind, exc_info=True)
                return ItemOutcome(key=item_key, ok=False, error=str(e), kind=kind)
        return ItemOutcome(key=item_key, ok=True, kind=kind)

    outcomes = await asyncio.gather(*(run_one(item) for item in items))
    return BatchReport(outcomes=list(outcomes))


async def best_effort(
    computation: Callable[[], Awaitable[R]],
    fallback: R,
    description: str,
    **log_context: Any,
) -> R:
    """
    Best-effort side computation

    Runs a derived-data computation that must never block the primary write:
    on failure the error is logged and `fallback` is returned.
    """
    try:
        return await computation()
    except Exception as e:
        logger.warning(f"Best-effort {description} failed: {e}", **log_context)
        return fallback
