"""Photo editing adapter around the remote multimodal model."""

from typing import Dict, Optional, Sequence, Tuple, Union

import httpx
from pydantic import ValidationError

from ..models.enums import FailureReason, Modality
from ..models.schemas import EditRequest, EditResult, EncodedImage, InlineDataPart, TextPart
from ..providers.gemini import GeminiClient
from ..utils.errors import (
    AuthenticationError,
    AuthorizationError,
    EditValidationError,
    MalformedResponseError,
    ProtocolError,
    TransportError,
)
from ..utils.images import build_data_url
from ..utils.logger import get_logger

logger = get_logger(__name__)

GENERIC_FAILURE_MESSAGE = "Failed to process image with the AI model. Please try again later."

# Stable user-facing text per failure reason. Upstream error text never
# reaches the caller.
FAILURE_MESSAGES: Dict[FailureReason, str] = {
    FailureReason.VALIDATION: "Please select an image and enter a prompt.",
    FailureReason.AUTHORIZATION: "API key is invalid or missing required permissions.",
    FailureReason.PROTOCOL: GENERIC_FAILURE_MESSAGE,
    FailureReason.TRANSPORT: GENERIC_FAILURE_MESSAGE,
}

_ERROR_TYPES = {
    FailureReason.AUTHORIZATION: AuthorizationError,
    FailureReason.PROTOCOL: ProtocolError,
    FailureReason.TRANSPORT: TransportError,
}

# Both modalities must be requested together; asking for one is rejected
# or silently drops content.
RESPONSE_MODALITIES: Tuple[Modality, ...] = (Modality.IMAGE, Modality.TEXT)


def classify_failure(error: BaseException) -> FailureReason:
    """Map a low-level exception raised by the remote call to a failure reason."""
    if isinstance(error, AuthenticationError):
        return FailureReason.AUTHORIZATION
    if "permission" in str(error).lower():
        return FailureReason.AUTHORIZATION
    if isinstance(error, (MalformedResponseError, ValidationError)):
        return FailureReason.PROTOCOL
    return FailureReason.TRANSPORT


def collect_parts(
    parts: Sequence[Union[InlineDataPart, TextPart]],
) -> Tuple[Optional[InlineDataPart], Optional[str]]:
    """
    Fold the response parts, keeping the last image and the last text.

    Every part is visited. A later part of the same kind replaces an earlier
    one; nothing is merged or concatenated. Empty text parts are ignored.
    """
    image: Optional[InlineDataPart] = None
    text: Optional[str] = None

    for part in parts:
        if isinstance(part, InlineDataPart):
            image = part
        elif isinstance(part, TextPart):
            if part.text:
                text = part.text
        else:
            raise TypeError(f"Unexpected part type: {type(part).__name__}")

    return image, text


class PhotoEditor:
    """Edits photos by delegating to a hosted image model, one call per edit."""

    def __init__(self, client: GeminiClient):
        """
        Initialize photo editor.

        Args:
            client: Initialized Gemini client (shared, concurrency-safe)
        """
        self.client = client

    def build_request(self, image: EncodedImage, instruction: str) -> EditRequest:
        """
        Validate the inputs and build a fresh request.

        Raises:
            EditValidationError: If the instruction is empty
        """
        if not instruction or not instruction.strip():
            raise EditValidationError(FAILURE_MESSAGES[FailureReason.VALIDATION])
        return EditRequest(image=image, instruction=instruction)

    async def edit(self, image: EncodedImage, instruction: str) -> EditResult:
        """
        Apply a natural-language edit to an image.

        Args:
            image: Encoded source image
            instruction: What to change

        Returns:
            EditResult with a data URL image and/or descriptive text

        Raises:
            EditValidationError: Empty instruction, nothing was sent
            AuthorizationError: Credential rejected
            ProtocolError: No usable image or text in the response
            TransportError: Any other failure of the remote call
        """
        request = self.build_request(image, instruction)

        logger.info(
            "Edit requested",
            extra={
                "mime_type": image.mime_type,
                "payload_chars": len(image.data),
                "instruction_chars": len(instruction),
            }
        )

        try:
            result = await self.client.generate_content(
                request.to_parts(),
                response_modalities=RESPONSE_MODALITIES,
            )
        except Exception as e:
            reason = classify_failure(e)
            logger.error(
                f"Error calling Gemini API: {e}",
                extra={
                    "reason": reason.value,
                    "error_type": type(e).__name__,
                    "status_code": getattr(e, "status_code", None),
                    "timeout": isinstance(e, httpx.TimeoutException),
                },
                exc_info=True,
            )
            raise _ERROR_TYPES[reason](FAILURE_MESSAGES[reason]) from e

        image_part, text = collect_parts(result.parts)

        if image_part is None and text is None:
            logger.error(
                "Invalid response from the API. No image or text was returned.",
                extra={
                    "reason": FailureReason.PROTOCOL.value,
                    "finish_reason": result.finish_reason,
                    "block_reason": result.block_reason,
                }
            )
            raise ProtocolError(FAILURE_MESSAGES[FailureReason.PROTOCOL])

        edited = EditResult(
            image=build_data_url(image_part.mime_type, image_part.data) if image_part else None,
            text=text,
        )

        logger.info(
            "Edit complete",
            extra={
                "has_image": edited.image is not None,
                "has_text": edited.text is not None,
                "result_mime_type": image_part.mime_type if image_part else None,
            }
        )

        return edited
