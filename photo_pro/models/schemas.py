"""Pydantic schemas for data validation."""

import base64
from typing import Annotated, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field

from .enums import FailureReason


class EncodedImage(BaseModel):
    """Image ready for transport: bare base64 payload plus media type."""
    model_config = ConfigDict(frozen=True)

    data: str
    mime_type: str

    def to_bytes(self) -> bytes:
        """Decode the payload back to the original bytes."""
        return base64.b64decode(self.data)


class InlineDataPart(BaseModel):
    """Binary content carried inline as base64."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["inline_data"] = "inline_data"
    mime_type: str
    data: str


class TextPart(BaseModel):
    """Plain text content."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str


ContentPart = Annotated[Union[InlineDataPart, TextPart], Field(discriminator="kind")]


class EditRequest(BaseModel):
    """One image plus one instruction, built right before each call."""
    model_config = ConfigDict(frozen=True)

    image: EncodedImage
    instruction: str = Field(min_length=1)

    def to_parts(self) -> List[Union[InlineDataPart, TextPart]]:
        """Content parts in the order the model expects: image, then text."""
        return [
            InlineDataPart(mime_type=self.image.mime_type, data=self.image.data),
            TextPart(text=self.instruction),
        ]


class GenerationResult(BaseModel):
    """Parsed ``generateContent`` response."""
    parts: List[ContentPart] = Field(default_factory=list)
    finish_reason: Optional[str] = None
    block_reason: Optional[str] = None
    model_version: Optional[str] = None


class EditResult(BaseModel):
    """Outcome of a successful edit: a data URL image, descriptive text, or both."""
    image: Optional[str] = None
    text: Optional[str] = None


class EditResponse(BaseModel):
    """HTTP response body for an edit request."""
    success: bool
    image: Optional[str] = None
    text: Optional[str] = None
    error: Optional[str] = None
    reason: Optional[FailureReason] = None
