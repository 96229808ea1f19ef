from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse

from booth.api.routes import layout, photos, session, websocket
from booth.config import LayoutConstants, Settings, get_settings
from booth.services.camera import CameraDevice, OpenCVCameraDevice
from booth.services.compositor import Compositor
from booth.services.delivery import DeliveryPipeline, HttpUploadTransport, QRCodeGenerator, UploadTransport
from booth.services.frame_capture import FrameCapture
from booth.services.session import CaptureSession
from booth.services.storage import LocalPhotoStore
from booth.services.websocket import WebSocketManager
from booth.templates.index import get_html_template


def create_app(
    settings: Optional[Settings] = None,
    device_factory: Optional[Callable[[Settings], CameraDevice]] = None,
    transport_factory: Optional[Callable[[Settings], UploadTransport]] = None,
) -> FastAPI:
    settings = settings or get_settings()
    layout_constants = LayoutConstants.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        device = (device_factory or OpenCVCameraDevice)(settings)
        if isinstance(device, OpenCVCameraDevice):
            device.initialize()
        transport = (
            transport_factory(settings)
            if transport_factory
            else HttpUploadTransport.create(settings.upload_url, settings.upload_timeout)
        )
        photo_store = LocalPhotoStore(settings.photos_dir)
        websocket_manager = WebSocketManager()
        capture_session = CaptureSession(
            device=device,
            frame_capture=FrameCapture(layout_constants.target_ratio),
            compositor=Compositor(layout_constants),
            delivery=DeliveryPipeline(
                transport,
                QRCodeGenerator(),
                filename_prefix=settings.filename_prefix,
                error_correction=settings.qr_error_correction,
            ),
            layout=layout_constants,
            shot_options=settings.shot_options,
            photo_store=photo_store,
        )
        capture_session.subscribe(websocket_manager.publish_state)

        app.state.device = device
        app.state.photo_store = photo_store
        app.state.websocket_manager = websocket_manager
        app.state.capture_session = capture_session
        try:
            yield
        finally:
            await capture_session.close()
            if isinstance(transport, HttpUploadTransport):
                await transport.close()
            if isinstance(device, OpenCVCameraDevice):
                device.cleanup()

    app = FastAPI(
        title=settings.app_name,
        description=settings.app_description,
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(session.router, prefix="/api")
    app.include_router(photos.router, prefix="/api")
    app.include_router(layout.router, prefix="/api")
    app.include_router(websocket.router)

    @app.get("/")
    async def get_index():
        return HTMLResponse(get_html_template())

    @app.get("/health")
    async def health_check():
        device = getattr(app.state, "device", None)
        capture_session = getattr(app.state, "capture_session", None)
        return {
            "status": "healthy",
            "camera_active": bool(getattr(device, "is_active", device is not None)),
            "phase": capture_session.state.phase.value if capture_session else None,
        }

    return app
