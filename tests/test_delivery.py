import asyncio
import base64
import json
from datetime import datetime

import cv2
import httpx
import numpy as np
import pytest

from booth.errors import DeliveryFailure
from booth.models.photo import CompositeImage, LocalArtifact, RemoteArtifact
from booth.services.delivery import (
    DeliveryPipeline,
    HttpUploadTransport,
    QRCodeGenerator,
    UploadRequest,
    UploadResult,
)
from conftest import FakeTransport

COMPOSITE = CompositeImage(data=b"\xff\xd8strip-bytes\xff\xd9", width=660, height=1590, quality=90)


def decode_qr(png: bytes) -> str:
    img = cv2.imdecode(np.frombuffer(png, dtype=np.uint8), cv2.IMREAD_COLOR)
    data, _, _ = cv2.QRCodeDetector().detectAndDecode(img)
    return data


def test_failed_upload_falls_back_to_local(failing_transport):
    pipeline = DeliveryPipeline(failing_transport, QRCodeGenerator())
    artifact = asyncio.run(pipeline.deliver(COMPOSITE))

    assert isinstance(artifact, LocalArtifact)
    assert artifact.encoded_bytes == COMPOSITE.data
    assert artifact.suggested_filename.endswith(".jpg")
    assert len(failing_transport.requests) == 1


@pytest.mark.parametrize(
    "transport",
    [
        FakeTransport(result=UploadResult(status="failure", message="quota exceeded")),
        FakeTransport(result=UploadResult(status="success", url=None)),
        FakeTransport(error=httpx.ConnectError("no route to host")),
        FakeTransport(error=RuntimeError("unexpected")),
    ],
)
def test_every_upload_problem_yields_local_artifact(transport):
    artifact = asyncio.run(DeliveryPipeline(transport, QRCodeGenerator()).deliver(COMPOSITE))
    assert isinstance(artifact, LocalArtifact)
    assert artifact.encoded_bytes == COMPOSITE.data
    assert len(transport.requests) == 1


def test_successful_upload_returns_scannable_code(succeeding_transport):
    pipeline = DeliveryPipeline(succeeding_transport, QRCodeGenerator())
    artifact = asyncio.run(pipeline.deliver(COMPOSITE))

    assert isinstance(artifact, RemoteArtifact)
    assert artifact.url == "https://example/x.jpg"
    assert decode_qr(artifact.retrieval_code_image) == "https://example/x.jpg"


def test_upload_request_carries_strip_and_timestamped_name(succeeding_transport):
    pipeline = DeliveryPipeline(
        succeeding_transport,
        QRCodeGenerator(),
        filename_prefix="party",
        clock=lambda: datetime(2026, 6, 6, 18, 30, 5),
    )
    asyncio.run(pipeline.deliver(COMPOSITE))

    request = succeeding_transport.requests[0]
    assert request.filename.startswith("party_20260606_183005_")
    assert request.mime_type == "image/jpeg"
    assert request.payload == COMPOSITE.data


def test_qr_code_generation_failure_falls_back(succeeding_transport):
    class BrokenGenerator:
        def encode(self, url, error_correction):
            raise ValueError("bad data")

    artifact = asyncio.run(DeliveryPipeline(succeeding_transport, BrokenGenerator()).deliver(COMPOSITE))
    assert isinstance(artifact, LocalArtifact)


def test_http_transport_posts_base64_json():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["payload"] = json.loads(request.content.decode())
        return httpx.Response(200, json={"status": "success", "fileUrl": "https://drive.example/f/1"})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    transport = HttpUploadTransport(url="https://upload.example/exec", http_client=client)

    result = asyncio.run(transport.upload(UploadRequest("a.jpg", "image/jpeg", b"jpeg")))

    assert result.succeeded
    assert result.url == "https://drive.example/f/1"
    assert seen["payload"] == {
        "filename": "a.jpg",
        "mimeType": "image/jpeg",
        "base64": base64.b64encode(b"jpeg").decode(),
    }


def test_http_transport_reports_failure_status():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"status": "error", "message": "Drive is full"})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    transport = HttpUploadTransport(url="https://upload.example/exec", http_client=client)

    result = asyncio.run(transport.upload(UploadRequest("a.jpg", "image/jpeg", b"jpeg")))
    assert not result.succeeded
    assert result.message == "Drive is full"


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="boom"),
        httpx.Response(200, text="<html>not json</html>"),
        httpx.Response(200, json=["not", "an", "object"]),
    ],
)
def test_http_transport_raises_delivery_failure(response):
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: response))
    transport = HttpUploadTransport(url="https://upload.example/exec", http_client=client)

    with pytest.raises(DeliveryFailure):
        asyncio.run(transport.upload(UploadRequest("a.jpg", "image/jpeg", b"jpeg")))


def test_http_transport_without_url_fails_softly():
    transport = HttpUploadTransport(url="", http_client=httpx.AsyncClient())
    result = asyncio.run(transport.upload(UploadRequest("a.jpg", "image/jpeg", b"jpeg")))
    assert result.status == "failure"


def test_pipeline_over_failing_http_endpoint_keeps_strip_locally():
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(503)))
    transport = HttpUploadTransport(url="https://upload.example/exec", http_client=client)

    artifact = asyncio.run(DeliveryPipeline(transport, QRCodeGenerator()).deliver(COMPOSITE))
    assert isinstance(artifact, LocalArtifact)
    assert artifact.encoded_bytes == COMPOSITE.data
