"""Pytest configuration and shared fixtures."""

import base64
import struct
import zlib
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from photo_pro.core.encoder import encode_bytes
from photo_pro.providers import GeminiClient


def make_png(width: int = 10, height: int = 10) -> bytes:
    """Build a small solid-colour PNG."""
    def chunk(tag: bytes, data: bytes) -> bytes:
        body = tag + data
        return struct.pack(">I", len(data)) + body + struct.pack(">I", zlib.crc32(body) & 0xFFFFFFFF)

    row = b"\x00" + b"\xc0\x80\x40" * width
    header = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return (
        b"\x89PNG\r\n\x1a\n"
        + chunk(b"IHDR", header)
        + chunk(b"IDAT", zlib.compress(row * height))
        + chunk(b"IEND", b"")
    )


def image_part(data: bytes, mime_type: str = "image/png") -> Dict[str, Any]:
    return {"inlineData": {"mimeType": mime_type, "data": base64.b64encode(data).decode()}}


def text_part(text: str) -> Dict[str, Any]:
    return {"text": text}


def gemini_response(*parts: Dict[str, Any], finish_reason: str = "STOP") -> Dict[str, Any]:
    """Body of a successful generateContent call."""
    return {
        "candidates": [
            {
                "content": {"role": "model", "parts": list(parts)},
                "finishReason": finish_reason,
            }
        ],
        "modelVersion": "gemini-2.5-flash-image-preview",
    }


def gemini_error(code: int, status: str, message: str, reason: Optional[str] = None) -> Dict[str, Any]:
    error: Dict[str, Any] = {"code": code, "status": status, "message": message}
    if reason:
        error["details"] = [
            {"@type": "type.googleapis.com/google.rpc.ErrorInfo", "reason": reason}
        ]
    return {"error": error}


@pytest.fixture
def png_bytes() -> bytes:
    """10x10 PNG image."""
    return make_png()


@pytest.fixture
def encoded_png(png_bytes):
    return encode_bytes(png_bytes, "image/png")


@pytest.fixture
def sample_prompt():
    """Sample edit prompt for testing."""
    return (
        "Give this photo a vintage film look. Add grain, slightly fade the colors, "
        "and apply a color cast reminiscent of old film stock."
    )


@pytest.fixture
def sent_requests() -> List[httpx.Request]:
    """Requests seen by the mock transport."""
    return []


@pytest.fixture
async def make_gemini(sent_requests):
    """
    Factory for initialized Gemini clients backed by a mock transport.

    ``handler`` receives the ``httpx.Request`` and returns an
    ``httpx.Response`` or raises an ``httpx`` exception.
    """
    clients: List[GeminiClient] = []

    async def _make(handler: Callable[[httpx.Request], httpx.Response]) -> GeminiClient:
        def _record(request: httpx.Request) -> httpx.Response:
            sent_requests.append(request)
            return handler(request)

        client = GeminiClient(api_key="test-key", transport=httpx.MockTransport(_record))
        await client.initialize()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        await client.close()


@pytest.fixture
def respond_with():
    """Handler factory returning a fixed JSON body."""
    def _respond(body: Any, status_code: int = 200, headers: Optional[Dict[str, str]] = None):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status_code, json=body, headers=headers)
        return handler
    return _respond
