"""Capture session orchestration.

The session owns the camera claim from ``start`` until the last shot has been
taken, or until it is cancelled or fails. Every wait (countdown ticks, the
flash, the pause after a shot) is an ``await`` so ``cancel`` can interrupt
the flow at any of them.
"""

import asyncio
import logging
import time
import uuid
from typing import Awaitable, Callable, List, Optional, Sequence

import numpy as np

from booth.config import LayoutConstants
from booth.errors import (
    CaptureFailure,
    CompositionFailure,
    DeviceUnavailable,
    SessionBusy,
)
from booth.models.photo import DeliveryArtifact, Frame, LocalArtifact
from booth.models.session import SessionSnapshot
from booth.models.state import (
    ACTIVE_PHASES,
    IDLE,
    Cancel,
    Composed,
    Delivered,
    Event,
    Fail,
    FailureReason,
    Phase,
    Reset,
    SessionState,
    ShotTaken,
    Start,
    Tick,
    transition,
)
from booth.services.camera import CameraDevice, CameraStream
from booth.services.compositor import Compositor
from booth.services.delivery import DeliveryPipeline
from booth.services.frame_capture import FrameCapture
from booth.services.storage import LocalPhotoStore

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]
Listener = Callable[[SessionSnapshot], None]


class CaptureSession:
    def __init__(
        self,
        device: CameraDevice,
        frame_capture: FrameCapture,
        compositor: Compositor,
        delivery: DeliveryPipeline,
        layout: LayoutConstants,
        shot_options: Sequence[int] = (1, 2, 3, 4),
        photo_store: Optional[LocalPhotoStore] = None,
        sleep: Sleep = asyncio.sleep,
        clock: Callable[[], float] = time.time,
    ):
        self.device = device
        self.frame_capture = frame_capture
        self.compositor = compositor
        self.delivery = delivery
        self.layout = layout
        self.shot_options = tuple(shot_options)
        self.photo_store = photo_store
        self._sleep = sleep
        self._clock = clock

        self._state: SessionState = IDLE
        self._session_id: Optional[str] = None
        self._shots: List[Frame] = []
        self._artifact: Optional[DeliveryArtifact] = None
        self._saved_filename: Optional[str] = None
        self._stream: Optional[CameraStream] = None
        self._task: Optional[asyncio.Task] = None
        self._camera_lock = asyncio.Lock()
        self._listeners: List[Listener] = []

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def session_id(self) -> Optional[str]:
        return self._session_id

    @property
    def shots(self) -> Sequence[Frame]:
        return tuple(self._shots)

    @property
    def artifact(self) -> Optional[DeliveryArtifact]:
        return self._artifact

    @property
    def saved_filename(self) -> Optional[str]:
        return self._saved_filename

    @property
    def holds_camera(self) -> bool:
        return self._stream is not None

    def snapshot(self) -> SessionSnapshot:
        state = self._state
        return SessionSnapshot(
            session_id=self._session_id,
            phase=state.phase,
            target_shot_count=state.target_shot_count,
            shot_index=state.shot_index,
            seconds_remaining=state.seconds_remaining,
            shot_count=len(self._shots),
            flashed_at=state.flashed_at,
            failure_reason=state.reason,
            artifact_kind=self._artifact.kind if self._artifact else None,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    async def start(self, target_shot_count: int) -> SessionSnapshot:
        """Claim the camera and begin the countdown for the first shot.

        Must be awaited on the loop that will drive the session.
        """
        if target_shot_count not in self.shot_options:
            raise ValueError(f"Shot count must be one of {list(self.shot_options)}, got {target_shot_count}")
        if self._state.phase is not Phase.idle:
            raise SessionBusy(f"A session is already {self._state.phase.value}")

        async with self._camera_lock:
            if self._state.phase is not Phase.idle:
                raise SessionBusy(f"A session is already {self._state.phase.value}")
            self._stream = self.device.open()

        self._session_id = uuid.uuid4().hex
        self._shots = []
        self._artifact = None
        self._saved_filename = None
        self._apply(Start(target_shot_count, self.layout.countdown_first))
        logger.info("Session %s started for %s shots", self._session_id, target_shot_count)

        self._task = asyncio.get_running_loop().create_task(self._run())
        return self.snapshot()

    def cancel(self) -> SessionSnapshot:
        new_state = transition(self._state, Cancel())
        if self._state.phase is Phase.idle:
            return self.snapshot()
        session_id = self._session_id
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self._release_camera()
        self._shots = []
        self._artifact = None
        self._session_id = None
        self._set_state(new_state)
        logger.info("Session %s cancelled", session_id)
        return self.snapshot()

    def reset(self) -> SessionSnapshot:
        new_state = transition(self._state, Reset())
        self._shots = []
        self._artifact = None
        self._saved_filename = None
        self._session_id = None
        self._task = None
        self._set_state(new_state)
        return self.snapshot()

    async def wait(self):
        """Wait for the running session, if any, to stop."""
        task = self._task
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                if not task.cancelled():
                    raise

    async def close(self):
        """Stop any running session and drop back to idle."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
            await self.wait()
        self._task = None
        self._release_camera()
        self._shots = []
        self._artifact = None
        self._saved_filename = None
        self._session_id = None
        self._state = IDLE

    async def preview_pixels(self) -> Optional[np.ndarray]:
        """Current camera image for the live view, or None if unavailable.

        Reads through the session's claim while a session holds the camera,
        otherwise takes a short claim of its own.
        """
        if self._stream is not None:
            stream = self._stream
            try:
                return await asyncio.to_thread(self.device.read_frame, stream)
            except (CaptureFailure, DeviceUnavailable):
                return None

        async with self._camera_lock:
            try:
                stream = self.device.open()
            except DeviceUnavailable:
                return None
            try:
                return await asyncio.to_thread(self.device.read_frame, stream)
            except (CaptureFailure, DeviceUnavailable):
                return None
            finally:
                self.device.close(stream)

    async def _run(self):
        try:
            await self._capture_shots()
            if self._state.phase is Phase.composing:
                await self._compose_and_deliver()
        except asyncio.CancelledError:
            logger.debug("Session %s run loop cancelled", self._session_id)
            raise
        except DeviceUnavailable as e:
            logger.error("Camera lost during session %s: %s", self._session_id, e)
            self._fail(FailureReason.device_lost)
        except Exception:
            logger.exception("Session %s crashed", self._session_id)
            self._fail(FailureReason.internal_error)

    async def _capture_shots(self):
        after_shot = False
        while self._state.phase is Phase.countdown:
            if after_shot:
                # pause after a shot belongs to the next countdown
                after_shot = False
                await self._sleep(self.layout.post_capture_seconds)
                if self._state.phase is not Phase.countdown:
                    break
            await self._sleep(1)
            self._apply(Tick(at=self._clock()))
            if self._state.phase is not Phase.flash:
                continue

            await self._sleep(self.layout.flash_seconds)
            index = self._state.shot_index
            captured = await self._take_shot(index)
            self._apply(ShotTaken(captured=captured, next_duration=self.layout.countdown_subsequent))
            after_shot = True

        if self._state.phase is not Phase.countdown:
            self._release_camera()
        if self._state.phase is Phase.failed:
            logger.warning("Session %s ended without any shots", self._session_id)

    async def _take_shot(self, index: int) -> bool:
        try:
            frame = await asyncio.to_thread(self.frame_capture.capture, self.device, self._stream, index)
        except CaptureFailure as e:
            logger.warning("Shot %s of session %s skipped: %s", index, self._session_id, e)
            return False
        self._shots.append(frame)
        return True

    async def _compose_and_deliver(self):
        try:
            composite = await asyncio.to_thread(self.compositor.compose, list(self._shots))
        except CompositionFailure as e:
            logger.error("Composition failed for session %s: %s", self._session_id, e)
            self._fail(FailureReason.composition_failure)
            return

        self._apply(Composed())
        artifact = await self.delivery.deliver(composite)
        self._artifact = artifact
        if isinstance(artifact, LocalArtifact) and self.photo_store is not None:
            await self._keep_locally(artifact)
        self._apply(Delivered())
        logger.info("Session %s complete (%s delivery)", self._session_id, artifact.kind)

    async def _keep_locally(self, artifact: LocalArtifact):
        try:
            self._saved_filename = await asyncio.to_thread(self.photo_store.save, artifact)
        except OSError as e:
            # the bytes stay available on the artifact itself
            logger.error("Could not save %s locally: %s", artifact.suggested_filename, e)

    def _fail(self, reason: FailureReason):
        self._release_camera()
        self._shots = []
        if self._state.phase in ACTIVE_PHASES:
            self._apply(Fail(reason))

    def _release_camera(self):
        stream, self._stream = self._stream, None
        if stream is not None:
            self.device.close(stream)

    def _apply(self, event: Event):
        self._set_state(transition(self._state, event))

    def _set_state(self, state: SessionState):
        self._state = state
        self._notify()

    def _notify(self):
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Session listener failed")
