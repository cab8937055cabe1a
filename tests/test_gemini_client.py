"""Tests for the Gemini REST client."""

import json

import httpx
import pytest

from conftest import gemini_error, gemini_response, image_part, text_part
from photo_pro.models.enums import Modality
from photo_pro.models.schemas import InlineDataPart, TextPart
from photo_pro.providers import GeminiClient
from photo_pro.providers.gemini import parse_generation_result, serialize_part
from photo_pro.utils.errors import (
    AuthenticationError,
    MalformedResponseError,
    ProviderError,
    RateLimitError,
)


@pytest.fixture
def request_parts(encoded_png):
    return [
        InlineDataPart(mime_type=encoded_png.mime_type, data=encoded_png.data),
        TextPart(text="Vintage Film"),
    ]


class TestRequest:

    async def test_request_shape(self, make_gemini, respond_with, sent_requests, request_parts, encoded_png):
        client = await make_gemini(respond_with(gemini_response(text_part("ok"))))

        await client.generate_content(request_parts)

        assert len(sent_requests) == 1
        request = sent_requests[0]
        assert request.method == "POST"
        assert request.url.path.endswith("/models/gemini-2.5-flash-image-preview:generateContent")
        assert request.headers["x-goog-api-key"] == "test-key"

        body = json.loads(request.content)
        parts = body["contents"][0]["parts"]
        assert parts == [
            {"inlineData": {"mimeType": "image/png", "data": encoded_png.data}},
            {"text": "Vintage Film"},
        ]
        assert body["generationConfig"]["responseModalities"] == ["IMAGE", "TEXT"]

    async def test_custom_model_in_endpoint(self, sent_requests, respond_with, request_parts):
        handler = respond_with(gemini_response(text_part("ok")))
        transport = httpx.MockTransport(lambda r: sent_requests.append(r) or handler(r))

        async with GeminiClient(api_key="k", model="other-model", transport=transport) as client:
            await client.generate_content(request_parts, [Modality.TEXT])

        assert sent_requests[0].url.path.endswith("/models/other-model:generateContent")
        assert json.loads(sent_requests[0].content)["generationConfig"]["responseModalities"] == ["TEXT"]

    async def test_requires_initialization(self, request_parts):
        client = GeminiClient(api_key="k")

        with pytest.raises(RuntimeError):
            await client.generate_content(request_parts)

    def test_serialize_part(self):
        assert serialize_part(TextPart(text="hi")) == {"text": "hi"}
        assert serialize_part(InlineDataPart(mime_type="image/jpeg", data="AAEC")) == {
            "inlineData": {"mimeType": "image/jpeg", "data": "AAEC"}
        }


class TestResponseParsing:

    async def test_parts_kept_in_order(self, make_gemini, respond_with, request_parts):
        body = gemini_response(text_part("first"), image_part(b"X"), text_part("second"))
        client = await make_gemini(respond_with(body))

        result = await client.generate_content(request_parts)

        assert [p.kind for p in result.parts] == ["text", "inline_data", "text"]
        assert result.parts[1].data == "WA=="
        assert result.finish_reason == "STOP"

    def test_no_candidates_is_empty(self):
        result = parse_generation_result({"promptFeedback": {"blockReason": "SAFETY"}})

        assert result.parts == []
        assert result.block_reason == "SAFETY"

    def test_unknown_and_thought_parts_are_skipped(self):
        body = gemini_response(
            {"functionCall": {"name": "noop"}},
            {"text": "thinking...", "thought": True},
            text_part("visible"),
        )

        result = parse_generation_result(body)

        assert result.parts == [TextPart(text="visible")]

    def test_snake_case_inline_data_accepted(self):
        body = gemini_response({"inline_data": {"mime_type": "image/jpeg", "data": "AAEC"}})

        result = parse_generation_result(body)

        assert result.parts == [InlineDataPart(mime_type="image/jpeg", data="AAEC")]

    @pytest.mark.parametrize("body", [
        [],
        "text",
        {"candidates": {"not": "a list"}},
        {"candidates": ["nope"]},
        {"candidates": [{"content": {"parts": "nope"}}]},
        {"candidates": [{"content": {"parts": [{"inlineData": {"mimeType": "image/png"}}]}}]},
    ])
    def test_malformed_bodies(self, body):
        with pytest.raises(MalformedResponseError):
            parse_generation_result(body)

    async def test_non_json_body(self, make_gemini, request_parts):
        client = await make_gemini(lambda r: httpx.Response(200, text="<html>oops</html>"))

        with pytest.raises(MalformedResponseError):
            await client.generate_content(request_parts)


class TestErrorHandling:

    @pytest.mark.parametrize("status_code,status", [(401, "UNAUTHENTICATED"), (403, "PERMISSION_DENIED")])
    async def test_auth_statuses(self, make_gemini, respond_with, request_parts, status_code, status):
        body = gemini_error(status_code, status, "The caller does not have permission")
        client = await make_gemini(respond_with(body, status_code))

        with pytest.raises(AuthenticationError) as exc_info:
            await client.generate_content(request_parts)

        assert exc_info.value.status_code == status_code

    async def test_invalid_api_key_on_400(self, make_gemini, respond_with, request_parts):
        body = gemini_error(
            400, "INVALID_ARGUMENT", "API key not valid. Please pass a valid API key.", "API_KEY_INVALID"
        )
        client = await make_gemini(respond_with(body, 400))

        with pytest.raises(AuthenticationError):
            await client.generate_content(request_parts)

    async def test_rate_limit(self, make_gemini, respond_with, request_parts):
        body = gemini_error(429, "RESOURCE_EXHAUSTED", "Quota exceeded")
        client = await make_gemini(respond_with(body, 429, headers={"Retry-After": "30"}))

        with pytest.raises(RateLimitError) as exc_info:
            await client.generate_content(request_parts)

        assert exc_info.value.retry_after == 30

    async def test_server_error(self, make_gemini, respond_with, request_parts):
        body = gemini_error(500, "INTERNAL", "An internal error has occurred")
        client = await make_gemini(respond_with(body, 500))

        with pytest.raises(ProviderError) as exc_info:
            await client.generate_content(request_parts)

        assert exc_info.value.status_code == 500
        assert not isinstance(exc_info.value, AuthenticationError)

    async def test_error_without_json_body(self, make_gemini, request_parts):
        client = await make_gemini(lambda r: httpx.Response(502, text="Bad Gateway"))

        with pytest.raises(ProviderError) as exc_info:
            await client.generate_content(request_parts)

        assert "Bad Gateway" in str(exc_info.value)

    async def test_transport_errors_propagate(self, make_gemini, request_parts):
        def handler(request):
            raise httpx.ConnectError("connection reset", request=request)

        client = await make_gemini(handler)

        with pytest.raises(httpx.ConnectError):
            await client.generate_content(request_parts)


class TestLifecycle:

    async def test_initialize_is_idempotent(self):
        client = GeminiClient(api_key="k")

        await client.initialize()
        pooled = client.client
        await client.initialize()

        assert client.client is pooled
        assert pooled.headers["x-goog-api-key"] == "k"
        assert pooled.timeout.read == 120.0
        await client.close()

    async def test_close_releases_pool(self):
        client = GeminiClient(api_key="k", timeout=5.0)

        async with client:
            assert client.client is not None

        assert client.client is None
        await client.close()

    async def test_closed_client_refuses_calls(self, request_parts):
        async with GeminiClient(api_key="k") as client:
            pass

        with pytest.raises(RuntimeError):
            await client.generate_content(request_parts)

    def test_base_url_trailing_slash(self):
        client = GeminiClient(api_key="k", model="m", base_url="https://example.test/v1beta/")

        assert client.endpoint == "https://example.test/v1beta/models/m:generateContent"
