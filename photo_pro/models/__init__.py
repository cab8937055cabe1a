"""Data models and schemas for the photo editing service."""

from .schemas import (
    EncodedImage,
    InlineDataPart,
    TextPart,
    ContentPart,
    EditRequest,
    GenerationResult,
    EditResult,
    EditResponse,
)
from .enums import (
    Modality,
    FailureReason,
)

__all__ = [
    "EncodedImage",
    "InlineDataPart",
    "TextPart",
    "ContentPart",
    "EditRequest",
    "GenerationResult",
    "EditResult",
    "EditResponse",
    "Modality",
    "FailureReason",
]
