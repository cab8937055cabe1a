"""Core business logic components."""

from .encoder import (
    encode_bytes,
    encode_data_url,
    encode_file,
    encode_path,
    encode_upload,
)
from .editor import PhotoEditor, collect_parts, classify_failure, FAILURE_MESSAGES

__all__ = [
    "encode_bytes",
    "encode_data_url",
    "encode_file",
    "encode_path",
    "encode_upload",
    "PhotoEditor",
    "collect_parts",
    "classify_failure",
    "FAILURE_MESSAGES",
]
