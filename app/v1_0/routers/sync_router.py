from fastapi import APIRouter, HTTPException, Depends
from dependency_injector.wiring import inject, Provide

from app.app_containers import ApplicationContainer
from app.core.errors import SyncError
from app.core.http_errors import to_http_exception
from app.core.logger import logger

from app.v1_0.entities import SyncStatusDTO
from app.v1_0.services import StallService

router = APIRouter(prefix="/sync", tags=["Sync"])

@router.get(
    "/status",
    response_model=SyncStatusDTO,
    summary="Remote synchronization status",
)
@inject
async def sync_status(
    service: StallService = Depends(Provide[ApplicationContainer.api_container.stall_service]),
):
    return service.sync_status()

@router.post(
    "/refresh",
    response_model=SyncStatusDTO,
    summary="Re-read the remote store and replace local state",
)
@inject
async def refresh(
    service: StallService = Depends(Provide[ApplicationContainer.api_container.stall_service]),
):
    logger.info("[SyncRouter] refresh requested")
    try:
        await service.resync()
    except SyncError as e:
        logger.error("[SyncRouter] refresh failed: %s", e, exc_info=True)
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[SyncRouter] refresh error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to refresh from remote store")
    return service.sync_status()
