import base64
import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from booth.api.dependencies import get_app_settings, get_capture_session
from booth.config import Settings
from booth.errors import DeviceUnavailable, InvalidTransition, SessionBusy
from booth.models.photo import LocalArtifact, RemoteArtifact
from booth.models.session import (
    ArtifactResponse,
    SessionSnapshot,
    SessionStartRequest,
    ShotOptionsResponse,
)
from booth.services.session import CaptureSession

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/session", tags=["session"])


@router.get("/options", response_model=ShotOptionsResponse)
async def get_options(settings: Settings = Depends(get_app_settings)):
    return ShotOptionsResponse(
        options=settings.shot_options,
        default=settings.default_shot_count,
        countdown_first=settings.countdown_first,
        countdown_subsequent=settings.countdown_subsequent,
        flash_seconds=settings.flash_seconds,
    )


@router.post("/start", response_model=SessionSnapshot)
async def start_session(
        request: SessionStartRequest,
        session: CaptureSession = Depends(get_capture_session)
):
    try:
        return await session.start(request.shot_count)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except SessionBusy as e:
        raise HTTPException(status_code=409, detail=str(e))
    except DeviceUnavailable as e:
        logger.warning("Cannot start session: %s", e)
        raise HTTPException(status_code=503, detail="Camera not available. Check the camera and try again.")


@router.post("/cancel", response_model=SessionSnapshot)
async def cancel_session(session: CaptureSession = Depends(get_capture_session)):
    try:
        return session.cancel()
    except InvalidTransition as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/reset", response_model=SessionSnapshot)
async def reset_session(session: CaptureSession = Depends(get_capture_session)):
    try:
        return session.reset()
    except InvalidTransition as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/status", response_model=SessionSnapshot)
async def get_session_status(session: CaptureSession = Depends(get_capture_session)):
    return session.snapshot()


@router.get("/artifact", response_model=ArtifactResponse)
async def get_artifact(session: CaptureSession = Depends(get_capture_session)):
    artifact = session.artifact
    if artifact is None:
        raise HTTPException(status_code=404, detail="Session is not complete")

    if isinstance(artifact, RemoteArtifact):
        return ArtifactResponse(
            kind=artifact.kind,
            url=artifact.url,
            retrieval_code=base64.b64encode(artifact.retrieval_code_image).decode("utf-8"),
        )

    filename = session.saved_filename
    return ArtifactResponse(
        kind=artifact.kind,
        filename=filename or artifact.suggested_filename,
        download_url=f"/api/photos/{filename}" if filename else "/api/session/artifact/download",
    )


@router.get("/artifact/download")
async def download_artifact(session: CaptureSession = Depends(get_capture_session)):
    artifact = session.artifact
    if not isinstance(artifact, LocalArtifact):
        raise HTTPException(status_code=404, detail="No local strip for this session")
    return Response(
        content=artifact.encoded_bytes,
        media_type="image/jpeg",
        headers={"Content-Disposition": f'attachment; filename="{artifact.suggested_filename}"'},
    )


@router.get("/shots/{index}")
async def get_shot(index: int, session: CaptureSession = Depends(get_capture_session)):
    shots = session.shots
    if index < 0 or index >= len(shots):
        raise HTTPException(status_code=404, detail="Invalid shot index")
    return Response(content=session.compositor.encode_preview(shots[index]), media_type="image/jpeg")
