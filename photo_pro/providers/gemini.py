"""Gemini API client for multimodal image editing."""

from typing import Any, Dict, List, Optional, Sequence, Union
import httpx

from ..models.enums import Modality
from ..models.schemas import GenerationResult, InlineDataPart, TextPart
from ..utils.config import DEFAULT_BASE_URL, DEFAULT_MODEL
from ..utils.errors import (
    AuthenticationError,
    MalformedResponseError,
    ProviderError,
    RateLimitError,
)
from ..utils.logger import get_logger

logger = get_logger(__name__)

PROVIDER = "gemini"

# Upstream error reasons that mean the credential itself is bad,
# even when the status code is a plain 400.
_AUTH_ERROR_REASONS = {"API_KEY_INVALID", "API_KEY_SERVICE_BLOCKED", "PERMISSION_DENIED"}


class GeminiClient:
    """
    Client for the Gemini ``generateContent`` REST endpoint.

    One pooled ``httpx.AsyncClient`` is shared by every call, so a single
    instance can serve concurrent edits. Open it with ``initialize()`` or
    ``async with`` before calling ``generate_content``.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize Gemini client.

        Args:
            api_key: Gemini API key, sent as ``x-goog-api-key``
            model: Image-capable model identifier
            base_url: API root, without the ``/models`` suffix
            timeout: Request timeout in seconds, the only timeout on an edit
            transport: Custom httpx transport
        """
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport
        self.client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def initialize(self):
        """Open the pooled HTTP client; a no-op when already open."""
        if self.client is not None:
            return
        self.client = httpx.AsyncClient(
            timeout=self.timeout,
            headers={
                "x-goog-api-key": self.api_key,
                "Content-Type": "application/json",
            },
            transport=self.transport,
        )
        logger.info(
            "Gemini client opened",
            extra={"model": self.model, "timeout_seconds": self.timeout}
        )

    async def close(self):
        """Close the pooled HTTP client."""
        if self.client is None:
            return
        await self.client.aclose()
        self.client = None
        logger.info("Gemini client closed", extra={"model": self.model})

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    async def generate_content(
        self,
        parts: Sequence[Union[InlineDataPart, TextPart]],
        response_modalities: Sequence[Modality] = (Modality.IMAGE, Modality.TEXT),
    ) -> GenerationResult:
        """
        Send one ``generateContent`` request.

        Args:
            parts: Request content parts, in order
            response_modalities: Content types the model may answer with

        Returns:
            GenerationResult with the parts of the first candidate

        Raises:
            AuthenticationError: Credential rejected
            RateLimitError: Quota exhausted
            ProviderError: Any other non-2xx status
            MalformedResponseError: Body is not a valid response
            httpx.HTTPError: Transport failure or timeout
        """
        if self.client is None:
            raise RuntimeError("GeminiClient not initialized. Call initialize() or use as async context manager.")

        payload = {
            "contents": [
                {
                    "role": "user",
                    "parts": [serialize_part(part) for part in parts],
                }
            ],
            "generationConfig": {
                "responseModalities": [Modality(m).value for m in response_modalities],
            },
        }

        logger.info(
            f"Calling {self.model}",
            extra={
                "model": self.model,
                "part_kinds": [part.kind for part in parts],
                "response_modalities": payload["generationConfig"]["responseModalities"],
            }
        )

        response = await self.client.post(self.endpoint, json=payload)

        self._handle_response_errors(response)

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Response is not JSON: {e}") from e

        result = parse_generation_result(data)

        logger.info(
            "Generation complete",
            extra={
                "model": self.model,
                "model_version": result.model_version,
                "part_kinds": [part.kind for part in result.parts],
                "finish_reason": result.finish_reason,
                "block_reason": result.block_reason,
            }
        )

        return result

    def _handle_response_errors(self, response: httpx.Response):
        """Handle HTTP response errors."""
        if response.status_code < 400:
            return

        error = _extract_error(response)
        message = error.get("message") or response.text or f"HTTP {response.status_code}"
        reasons = {error.get("status")} | _detail_reasons(error)

        logger.error(
            f"Gemini request failed with status {response.status_code}",
            extra={
                "status_code": response.status_code,
                "error_status": error.get("status"),
                "error_message": message,
            }
        )

        if response.status_code in (401, 403) or reasons & _AUTH_ERROR_REASONS:
            raise AuthenticationError(PROVIDER, message, response.status_code)
        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(
                PROVIDER,
                int(retry_after) if retry_after and retry_after.isdigit() else None
            )
        raise ProviderError(PROVIDER, message, response.status_code)


def serialize_part(part: Union[InlineDataPart, TextPart]) -> Dict[str, Any]:
    """Convert a content part to the REST wire shape."""
    if isinstance(part, InlineDataPart):
        return {"inlineData": {"mimeType": part.mime_type, "data": part.data}}
    if isinstance(part, TextPart):
        return {"text": part.text}
    raise TypeError(f"Unsupported part type: {type(part).__name__}")


def parse_generation_result(data: Any) -> GenerationResult:
    """
    Parse a ``generateContent`` response body.

    Only the first candidate is read. Parts that are neither inline data nor
    text (function calls, thoughts) are skipped. A response without candidates
    is not malformed: it parses to an empty part list.

    Raises:
        MalformedResponseError: If the body does not have the expected shape
    """
    if not isinstance(data, dict):
        raise MalformedResponseError(f"Expected a JSON object, got {type(data).__name__}")

    feedback = data.get("promptFeedback") or {}
    block_reason = feedback.get("blockReason") if isinstance(feedback, dict) else None
    model_version = data.get("modelVersion")

    candidates = data.get("candidates") or []
    if not isinstance(candidates, list):
        raise MalformedResponseError("'candidates' is not a list")

    if not candidates:
        return GenerationResult(block_reason=block_reason, model_version=model_version)

    candidate = candidates[0]
    if not isinstance(candidate, dict):
        raise MalformedResponseError("Candidate is not an object")

    content = candidate.get("content") or {}
    if not isinstance(content, dict):
        raise MalformedResponseError("Candidate content is not an object")

    raw_parts = content.get("parts") or []
    if not isinstance(raw_parts, list):
        raise MalformedResponseError("'content.parts' is not a list")

    return GenerationResult(
        parts=_parse_parts(raw_parts),
        finish_reason=candidate.get("finishReason"),
        block_reason=block_reason,
        model_version=model_version,
    )


def _parse_parts(raw_parts: List[Any]) -> List[Union[InlineDataPart, TextPart]]:
    parts: List[Union[InlineDataPart, TextPart]] = []
    for raw in raw_parts:
        if not isinstance(raw, dict):
            raise MalformedResponseError("Part is not an object")

        inline = raw.get("inlineData") or raw.get("inline_data")
        if inline is not None:
            if not isinstance(inline, dict) or not isinstance(inline.get("data"), str):
                raise MalformedResponseError("Inline data part has no payload")
            mime_type = inline.get("mimeType") or inline.get("mime_type") or "image/png"
            parts.append(InlineDataPart(mime_type=mime_type, data=inline["data"]))
        elif isinstance(raw.get("text"), str) and not raw.get("thought"):
            parts.append(TextPart(text=raw["text"]))

    return parts


def _extract_error(response: httpx.Response) -> Dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    if isinstance(body, list) and body:
        body = body[0]
    error = body.get("error") if isinstance(body, dict) else None
    return error if isinstance(error, dict) else {}


def _detail_reasons(error: Dict[str, Any]) -> set:
    details = error.get("details")
    if not isinstance(details, list):
        return set()
    return {d.get("reason") for d in details if isinstance(d, dict) and d.get("reason")}
