"""
Popular times refresh endpoint, triggered by the scheduler
"""

from fastapi import APIRouter, Depends, Query
from typing import Optional
import structlog

from cms_sync.schemas import RefreshResponse
from cms_sync.core.dependencies import SyncServices, get_services
from cms_sync.core.errors import ErrorCode

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.api_route("/aggregate", methods=["GET", "POST"], response_model=RefreshResponse)
async def aggregate_popular_times(
    force: Optional[str] = Query(default=None, description="'true' refreshes every location"),
    services: SyncServices = Depends(get_services)
):
    """Recompute popular times for stale locations"""
    result = await services.scheduler.refresh_stale(force_all=force == "true")

    failed = [outcome.key for outcome in result.report.failed]
    if failed:
        logger.warning(
            f"Popular times not refreshed for {len(failed)} locations",
            error_code=ErrorCode.POPULAR_TIMES_FAILED,
            location_ids=failed,
        )

    return RefreshResponse(message=result.message, failed=failed)
