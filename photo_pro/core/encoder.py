"""Turn user-supplied files into transport-ready encoded images."""

import mimetypes
from pathlib import Path
from typing import BinaryIO, Optional, Union

from fastapi import UploadFile

from ..models.schemas import EncodedImage
from ..utils.errors import ImageReadError
from ..utils.images import bytes_to_base64, normalize_base64, split_data_url
from ..utils.logger import get_logger

logger = get_logger(__name__)

FALLBACK_MIME_TYPE = "application/octet-stream"


def encode_bytes(data: bytes, mime_type: str) -> EncodedImage:
    """
    Encode raw bytes as base64.

    No size or type validation happens here; callers filter what they accept.
    """
    return EncodedImage(data=bytes_to_base64(data), mime_type=mime_type)


def encode_data_url(value: str, mime_type: Optional[str] = None) -> EncodedImage:
    """
    Encode the result of a "read as data URL" primitive.

    The ``data:<type>;base64,`` prefix is stripped so the payload holds only
    the encoded bytes. An explicitly declared media type wins over the one
    found in the prefix.

    Raises:
        ImageReadError: If the data URL is not base64 encoded
    """
    prefix_type, payload = split_data_url(value)
    declared = mime_type or prefix_type or FALLBACK_MIME_TYPE
    return EncodedImage(data=normalize_base64(payload), mime_type=declared)


def encode_file(file: BinaryIO, mime_type: str) -> EncodedImage:
    """
    Read a binary file object to the end and encode it.

    Raises:
        ImageReadError: If the file cannot be read
    """
    try:
        data = file.read()
    except (OSError, ValueError) as e:
        # ValueError: read on a closed file
        logger.error(
            f"Failed to read image file: {e}",
            extra={"mime_type": mime_type, "error": str(e)},
            exc_info=True,
        )
        raise ImageReadError(f"Could not read image file: {e}") from e

    if not isinstance(data, bytes):
        raise ImageReadError("Image file must be opened in binary mode")

    return encode_bytes(data, mime_type)


def encode_path(path: Union[str, Path], mime_type: Optional[str] = None) -> EncodedImage:
    """
    Read an image from disk and encode it.

    When no media type is declared it is guessed from the file name.

    Raises:
        ImageReadError: If the file cannot be opened or read
    """
    path = Path(path)
    declared = mime_type or mimetypes.guess_type(path.name)[0] or FALLBACK_MIME_TYPE

    try:
        with open(path, "rb") as f:
            return encode_file(f, declared)
    except ImageReadError:
        raise
    except OSError as e:
        logger.error(
            f"Failed to open image file: {e}",
            extra={"path": str(path), "error": str(e)},
        )
        raise ImageReadError(f"Could not open image file {path.name}: {e}") from e


async def encode_upload(upload: UploadFile) -> EncodedImage:
    """
    Read an uploaded file and encode it with its declared content type.

    Raises:
        ImageReadError: If the upload cannot be read
    """
    mime_type = upload.content_type or FALLBACK_MIME_TYPE

    try:
        data = await upload.read()
    except (OSError, ValueError) as e:
        logger.error(
            f"Failed to read upload: {e}",
            extra={"upload_name": upload.filename, "mime_type": mime_type, "error": str(e)},
            exc_info=True,
        )
        raise ImageReadError(f"Could not read uploaded file: {e}") from e

    logger.debug(
        "Upload encoded",
        extra={"upload_name": upload.filename, "mime_type": mime_type, "size_bytes": len(data)},
    )

    return encode_bytes(data, mime_type)
