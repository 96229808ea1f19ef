import asyncio
import json
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from booth.api.dependencies import get_app_settings, get_capture_session, get_websocket_manager
from booth.config import Settings
from booth.errors import CaptureFailure
from booth.services.camera import encode_preview
from booth.services.session import CaptureSession
from booth.services.websocket import WebSocketManager

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    session: CaptureSession = Depends(get_capture_session),
    websocket_manager: WebSocketManager = Depends(get_websocket_manager),
    settings: Settings = Depends(get_app_settings),
):
    await websocket_manager.connect(websocket)
    try:
        await websocket.send_text(json.dumps({
            "type": "state",
            "session": session.snapshot().model_dump(mode="json"),
        }))
        while True:
            pixels = await session.preview_pixels()
            if pixels is not None:
                try:
                    frame = encode_preview(pixels, settings.preview_width, settings.preview_quality)
                except CaptureFailure:
                    frame = None
                if frame:
                    await websocket.send_text(json.dumps({
                        "type": "preview",
                        "data": frame
                    }))
            await asyncio.sleep(1 / settings.preview_fps)
    except WebSocketDisconnect:
        websocket_manager.disconnect(websocket)
    except Exception as e:
        logger.warning("WebSocket error: %s", e)
        websocket_manager.disconnect(websocket)
