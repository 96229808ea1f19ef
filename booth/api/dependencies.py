from fastapi.requests import HTTPConnection

from booth.config import Settings
from booth.services.session import CaptureSession
from booth.services.storage import LocalPhotoStore
from booth.services.websocket import WebSocketManager


def get_capture_session(connection: HTTPConnection) -> CaptureSession:
    return connection.app.state.capture_session


def get_photo_store(connection: HTTPConnection) -> LocalPhotoStore:
    return connection.app.state.photo_store


def get_websocket_manager(connection: HTTPConnection) -> WebSocketManager:
    return connection.app.state.websocket_manager


def get_app_settings(connection: HTTPConnection) -> Settings:
    return connection.app.state.settings
