"""Shared fakes and fixtures."""

import asyncio
import threading
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np
import pytest

from booth.config import LayoutConstants
from booth.errors import CaptureFailure, CompositionFailure, DeliveryFailure, DeviceUnavailable
from booth.services.camera import CameraStream
from booth.services.compositor import Compositor
from booth.services.delivery import DeliveryPipeline, QRCodeGenerator, UploadRequest, UploadResult
from booth.services.frame_capture import FrameCapture
from booth.services.session import CaptureSession


def solid_frame(width: int, height: int, color=(200, 30, 30)) -> np.ndarray:
    pixels = np.zeros((height, width, 3), dtype=np.uint8)
    pixels[:, :] = color
    return pixels


@dataclass
class FakeCameraDevice:
    """Camera stand-in that counts claims and can fail selected reads."""

    width: int = 64
    height: int = 48
    available: bool = True
    failing_reads: set = field(default_factory=set)
    lost_reads: set = field(default_factory=set)
    open_count: int = 0
    close_count: int = 0
    read_count: int = 0
    claim: Optional[CameraStream] = None

    def open(self) -> CameraStream:
        if not self.available or self.claim is not None:
            raise DeviceUnavailable("fake camera unavailable")
        self.open_count += 1
        self.claim = CameraStream()
        return self.claim

    def read_frame(self, stream: CameraStream) -> np.ndarray:
        if stream != self.claim:
            raise CaptureFailure("stream not claimed")
        index = self.read_count
        self.read_count += 1
        if index in self.lost_reads:
            raise DeviceUnavailable("fake camera unplugged")
        if index in self.failing_reads:
            raise CaptureFailure(f"read {index} failed")
        return solid_frame(self.width, self.height, color=(40 * (index + 1) % 256, 80, 120))

    def close(self, stream: CameraStream) -> None:
        self.close_count += 1
        if stream == self.claim:
            self.claim = None


@dataclass
class GatedCameraDevice(FakeCameraDevice):
    """Blocks inside read_frame until ``gate`` is set."""

    entered: threading.Event = field(default_factory=threading.Event)
    gate: threading.Event = field(default_factory=threading.Event)

    def read_frame(self, stream: CameraStream) -> np.ndarray:
        self.entered.set()
        self.gate.wait(5)
        return super().read_frame(stream)


@dataclass
class FakeTransport:
    result: Optional[UploadResult] = None
    error: Optional[Exception] = None
    requests: List[UploadRequest] = field(default_factory=list)

    async def upload(self, request: UploadRequest) -> UploadResult:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.result


class BrokenCompositor(Compositor):
    def compose(self, frames):
        raise CompositionFailure("broken")


class GatedCompositor(Compositor):
    def __init__(self, layout):
        super().__init__(layout)
        self.entered = threading.Event()
        self.gate = threading.Event()

    def compose(self, frames):
        self.entered.set()
        self.gate.wait(5)
        return super().compose(frames)


@dataclass
class RecordingSleep:
    calls: List[float] = field(default_factory=list)

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        await asyncio.sleep(0)


def make_layout(**overrides) -> LayoutConstants:
    values = dict(
        target_ratio=4 / 3,
        border_size=10,
        preview_border_size=2,
        footer_height=120,
        countdown_first=5,
        countdown_subsequent=3,
        flash_seconds=0.05,
        post_capture_seconds=0.5,
        caption_lines=("Booth Test", "06.06.2026"),
        caption_font_sizes=(40, 30),
        font_paths=(),
        quality=90,
    )
    values.update(overrides)
    return LayoutConstants(**values)


async def run_until(predicate, limit: int = 100000):
    for _ in range(limit):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition never reached")


@pytest.fixture
def layout() -> LayoutConstants:
    return make_layout()


@pytest.fixture
def camera() -> FakeCameraDevice:
    return FakeCameraDevice()


@pytest.fixture
def failing_transport() -> FakeTransport:
    return FakeTransport(error=DeliveryFailure("network down"))


@pytest.fixture
def succeeding_transport() -> FakeTransport:
    return FakeTransport(result=UploadResult(status="success", url="https://example/x.jpg"))


@pytest.fixture
def make_session(layout, camera):
    def factory(transport, compositor=None, photo_store=None, device=None, sleep=None):
        sleep = sleep or RecordingSleep()
        session = CaptureSession(
            device=device or camera,
            frame_capture=FrameCapture(layout.target_ratio),
            compositor=compositor or Compositor(layout),
            delivery=DeliveryPipeline(transport, QRCodeGenerator()),
            layout=layout,
            photo_store=photo_store,
            sleep=sleep,
        )
        session.recorded_sleep = sleep
        return session

    return factory
