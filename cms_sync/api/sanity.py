"""
Sanity webhook endpoints

Sanity posts the full document on create/update and `_type`/`_id` on delete.
Every request ends with exactly one response: 204 on success or a 500 with a
fixed error code.
"""

from fastapi import APIRouter, Body, Depends, Response, status
from typing import Any
import structlog

from cms_sync.schemas import (
    ErrorResponse, ReconciliationErrorResponse, error_response
)
from cms_sync.core.dependencies import SyncServices, get_services
from cms_sync.core.errors import ErrorCode, UnsupportedKindError

logger = structlog.get_logger(__name__)
router = APIRouter()

NOT_AN_OBJECT = "request body must be a JSON object"


@router.post(
    "/create-update",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={500: {"model": ErrorResponse}},
)
async def on_create_update(
    payload: Any = Body(default={}),
    services: SyncServices = Depends(get_services)
):
    """Create or update the mirrored document for a CMS change"""
    if not isinstance(payload, dict):
        logger.warning("Rejected non-object create/update body", error_code=ErrorCode.CREATE_UPDATE_FAILED)
        return error_response(ErrorCode.CREATE_UPDATE_FAILED, NOT_AN_OBJECT)

    try:
        await services.engine.ingest(payload)
    except Exception as e:
        logger.error(
            f"Failed to synchronize {payload.get('_type')} {payload.get('_id')}: {e}",
            error_code=ErrorCode.CREATE_UPDATE_FAILED,
            exc_info=True,
        )
        return error_response(ErrorCode.CREATE_UPDATE_FAILED, str(e))

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/delete",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={500: {"model": ErrorResponse}},
)
async def on_delete(
    payload: Any = Body(default={}),
    services: SyncServices = Depends(get_services)
):
    """Delete the mirrored document for a CMS deletion"""
    if not isinstance(payload, dict):
        logger.warning("Rejected non-object delete body", error_code=ErrorCode.DELETE_FAILED)
        return error_response(ErrorCode.DELETE_FAILED, NOT_AN_OBJECT)

    try:
        await services.engine.delete(payload)
    except UnsupportedKindError as e:
        logger.warning(
            f"Delete for unsupported type {e.kind!r}",
            error_code=ErrorCode.DELETE_UNSUPPORTED_KIND,
        )
        return error_response(ErrorCode.DELETE_UNSUPPORTED_KIND, str(e))
    except Exception as e:
        logger.error(
            f"Failed to delete {payload.get('_type')} {payload.get('_id')}: {e}",
            error_code=ErrorCode.DELETE_FAILED,
            exc_info=True,
        )
        return error_response(ErrorCode.DELETE_FAILED, str(e))

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.api_route(
    "/reconcile",
    methods=["GET", "POST"],
    status_code=status.HTTP_204_NO_CONTENT,
    responses={500: {"model": ReconciliationErrorResponse}},
)
async def on_reconcile(services: SyncServices = Depends(get_services)):
    """Re-synchronize every location, tenant and translation from the CMS"""
    report = await services.reconciler.reconcile_all()

    if not report.ok:
        failed = report.failed
        logger.error(
            f"Reconciliation failed for {len(failed)} of {report.total} documents",
            error_code=ErrorCode.RECONCILIATION_FAILED,
        )
        return error_response(
            ErrorCode.RECONCILIATION_FAILED,
            f"{len(failed)} of {report.total} documents failed to synchronize",
            failures=[outcome.to_dict() for outcome in failed],
        )

    return Response(status_code=status.HTTP_204_NO_CONTENT)
