"""Enumerations for the photo editing service."""

from enum import Enum


class Modality(str, Enum):
    """Response content type requested from the model."""
    IMAGE = "IMAGE"
    TEXT = "TEXT"


class FailureReason(str, Enum):
    """Why an edit did not produce a usable result."""
    CONFIGURATION = "configuration"
    IO = "io"
    VALIDATION = "validation"
    AUTHORIZATION = "authorization"
    PROTOCOL = "protocol"
    TRANSPORT = "transport"
