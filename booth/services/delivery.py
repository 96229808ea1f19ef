"""Upload of finished strips with a local fallback.

``DeliveryPipeline.deliver`` always returns an artifact. A failed upload is an
ordinary outcome: the strip bytes come back as a ``LocalArtifact`` for the
kiosk to keep.
"""

import base64
import io
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Protocol

import httpx
import qrcode
from qrcode.constants import ERROR_CORRECT_H, ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q

from booth.errors import DeliveryFailure
from booth.models.photo import CompositeImage, DeliveryArtifact, LocalArtifact, RemoteArtifact

logger = logging.getLogger(__name__)

ERROR_CORRECTION_LEVELS = {
    "L": ERROR_CORRECT_L,
    "M": ERROR_CORRECT_M,
    "Q": ERROR_CORRECT_Q,
    "H": ERROR_CORRECT_H,
}


@dataclass(frozen=True)
class UploadRequest:
    filename: str
    mime_type: str
    payload: bytes


@dataclass(frozen=True)
class UploadResult:
    status: str
    url: Optional[str] = None
    message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == "success" and bool(self.url)


class UploadTransport(Protocol):
    async def upload(self, request: UploadRequest) -> UploadResult:
        """Send the strip once and report where it landed."""


class RetrievalCodeGenerator(Protocol):
    def encode(self, url: str, error_correction: str) -> bytes:
        """Render ``url`` as a scannable PNG."""


@dataclass
class HttpUploadTransport:
    """Posts the strip as base64 JSON to a drive-style upload endpoint."""

    url: str
    http_client: httpx.AsyncClient
    timeout: float = 30.0

    @classmethod
    def create(cls, url: str, timeout: float = 30.0) -> "HttpUploadTransport":
        # Apps Script web apps answer with a redirect to the actual result.
        return cls(url=url, http_client=httpx.AsyncClient(follow_redirects=True), timeout=timeout)

    async def upload(self, request: UploadRequest) -> UploadResult:
        if not self.url:
            return UploadResult(status="failure", message="No upload URL configured")

        body = {
            "filename": request.filename,
            "mimeType": request.mime_type,
            "base64": base64.b64encode(request.payload).decode("ascii"),
        }
        try:
            response = await self.http_client.post(self.url, json=body, timeout=self.timeout)
            response.raise_for_status()
            reply = response.json()
        except httpx.HTTPError as e:
            raise DeliveryFailure(f"Upload request failed: {e}") from e
        except ValueError as e:
            raise DeliveryFailure(f"Upload reply is not JSON: {e}") from e

        if not isinstance(reply, dict):
            raise DeliveryFailure("Upload reply is not a JSON object")
        return UploadResult(
            status=str(reply.get("status", "failure")),
            url=reply.get("fileUrl") or reply.get("url"),
            message=reply.get("message"),
        )

    async def close(self) -> None:
        await self.http_client.aclose()


class QRCodeGenerator:
    def __init__(self, box_size: int = 10, border: int = 4):
        self.box_size = box_size
        self.border = border

    def encode(self, url: str, error_correction: str = "H") -> bytes:
        qr = qrcode.QRCode(
            version=None,
            error_correction=ERROR_CORRECTION_LEVELS[error_correction.upper()],
            box_size=self.box_size,
            border=self.border,
        )
        qr.add_data(url)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white").convert("RGB")
        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
        return buffer.getvalue()


class DeliveryPipeline:
    def __init__(
        self,
        transport: UploadTransport,
        code_generator: RetrievalCodeGenerator,
        filename_prefix: str = "strip-booth",
        error_correction: str = "H",
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.transport = transport
        self.code_generator = code_generator
        self.filename_prefix = filename_prefix
        self.error_correction = error_correction
        self.clock = clock

    def make_filename(self) -> str:
        return f"{self.filename_prefix}_{self.clock().strftime('%Y%m%d_%H%M%S')}_{uuid.uuid4().hex[:8]}.jpg"

    async def deliver(self, composite: CompositeImage) -> DeliveryArtifact:
        filename = self.make_filename()
        try:
            url = await self._upload(composite, filename)
            code = self.code_generator.encode(url, self.error_correction)
        except Exception as e:
            logger.warning("Delivery of %s failed, keeping it locally: %s", filename, e)
            return LocalArtifact(encoded_bytes=composite.data, suggested_filename=filename)

        logger.info("Delivered %s to %s", filename, url)
        return RemoteArtifact(url=url, retrieval_code_image=code)

    async def _upload(self, composite: CompositeImage, filename: str) -> str:
        result = await self.transport.upload(
            UploadRequest(filename=filename, mime_type=composite.mime_type, payload=composite.data)
        )
        if not result.succeeded:
            raise DeliveryFailure(result.message or f"Upload reported status {result.status!r}")
        return result.url
