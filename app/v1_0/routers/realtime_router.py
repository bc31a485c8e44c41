from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from dependency_injector.wiring import inject, Provide

from app.app_containers import ApplicationContainer
from app.core.realtime import ConnectionManager
from app.core.settings import settings
from app.core.logger import logger

router = APIRouter(prefix="/v1/ws", tags=["Realtime"])

@router.websocket("/realtime")
@inject
async def websocket_realtime(
    websocket: WebSocket,
    manager: ConnectionManager = Depends(Provide[ApplicationContainer.api_container.realtime_manager]),
):
    channel_id = settings.REALTIME_CHANNEL

    await manager.connect(channel_id, websocket)

    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        manager.disconnect(channel_id, websocket)
    except Exception as e:
        logger.warning("[RT] websocket error channel=%s: %s", channel_id, e)
        manager.disconnect(channel_id, websocket)
        await websocket.close()
