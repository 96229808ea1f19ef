import base64
import logging
import threading
import uuid
from dataclasses import dataclass, field
from typing import Optional, Protocol

import cv2
import numpy as np

from booth.config import Settings
from booth.errors import CaptureFailure, DeviceUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CameraStream:
    """Handle for an exclusive claim on the camera."""

    stream_id: str = field(default_factory=lambda: uuid.uuid4().hex)


class CameraDevice(Protocol):
    def open(self) -> CameraStream:
        """Claim the camera. Raises DeviceUnavailable."""

    def read_frame(self, stream: CameraStream) -> np.ndarray:
        """Return the current RGB frame as an (H, W, 3) array.

        Raises CaptureFailure for a bad read, DeviceUnavailable once the
        camera has gone away.
        """

    def close(self, stream: CameraStream) -> None:
        """Release a claim obtained from open()."""


class OpenCVCameraDevice:
    def __init__(self, settings: Settings):
        self.settings = settings
        self.camera = None
        self.is_active = False
        self._claim: Optional[CameraStream] = None
        self._lock = threading.Lock()

    def initialize(self) -> bool:
        camera = cv2.VideoCapture(self.settings.camera_index)
        if not camera.isOpened():
            camera.release()
            logger.warning("Could not open camera %s", self.settings.camera_index)
            return False

        camera.set(cv2.CAP_PROP_FRAME_WIDTH, self.settings.camera_width)
        camera.set(cv2.CAP_PROP_FRAME_HEIGHT, self.settings.camera_height)
        camera.set(cv2.CAP_PROP_FPS, self.settings.camera_fps)

        self.camera = camera
        self.is_active = True
        logger.info(
            "Camera %s opened at %sx%s",
            self.settings.camera_index,
            int(camera.get(cv2.CAP_PROP_FRAME_WIDTH)),
            int(camera.get(cv2.CAP_PROP_FRAME_HEIGHT)),
        )
        return True

    def open(self) -> CameraStream:
        with self._lock:
            if self._claim is not None:
                raise DeviceUnavailable("Camera is already claimed")
            if not self.is_active and not self.initialize():
                raise DeviceUnavailable("Camera not available")
            self._claim = CameraStream()
            return self._claim

    def read_frame(self, stream: CameraStream) -> np.ndarray:
        with self._lock:
            if stream != self._claim or self.camera is None:
                raise CaptureFailure("Camera stream is not claimed")
            if not self.camera.isOpened():
                self.camera.release()
                self.camera = None
                self.is_active = False
                raise DeviceUnavailable("Camera disconnected")
            ret, frame = self.camera.read()
        if not ret or frame is None:
            raise CaptureFailure("Failed to read frame")

        if self.settings.mirror_frames:
            frame = cv2.flip(frame, 1)
        return cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)

    def close(self, stream: CameraStream) -> None:
        with self._lock:
            if stream == self._claim:
                self._claim = None

    def cleanup(self):
        with self._lock:
            self._claim = None
            if self.camera:
                self.camera.release()
                self.camera = None
            self.is_active = False


def encode_preview(pixels: np.ndarray, preview_width: int, quality: int) -> str:
    height, width = pixels.shape[:2]
    preview_height = int(height * preview_width / width)
    frame = cv2.resize(pixels, (preview_width, preview_height))
    frame = cv2.cvtColor(frame, cv2.COLOR_RGB2BGR)

    ok, buffer = cv2.imencode(".jpg", frame, [cv2.IMWRITE_JPEG_QUALITY, quality])
    if not ok:
        raise CaptureFailure("Failed to encode preview frame")
    return base64.b64encode(buffer).decode("utf-8")
