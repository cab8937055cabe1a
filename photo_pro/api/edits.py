"""Photo edit endpoint."""

from typing import Dict
from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse

from ..core.editor import PhotoEditor
from ..core.encoder import encode_upload
from ..models.enums import FailureReason
from ..models.schemas import EditResponse
from ..utils.errors import EditError, ImageReadError
from ..utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()

INVALID_FILE_MESSAGE = "Please select a valid image file."
UNREADABLE_FILE_MESSAGE = "Could not read the uploaded image."
NO_IMAGE_MESSAGE = "The AI did not return an image. Please try a different prompt."

STATUS_CODES: Dict[FailureReason, int] = {
    FailureReason.VALIDATION: 400,
    FailureReason.IO: 400,
    FailureReason.AUTHORIZATION: 502,
    FailureReason.PROTOCOL: 502,
    FailureReason.TRANSPORT: 502,
}


def get_editor(request: Request) -> PhotoEditor:
    """Dependency to get the photo editor from app state."""
    editor = getattr(request.app.state, "editor", None)
    if editor is None:
        raise HTTPException(status_code=503, detail="Editor not initialized")
    return editor


def _failure(reason: FailureReason, message: str) -> JSONResponse:
    body = EditResponse(success=False, error=message, reason=reason)
    return JSONResponse(status_code=STATUS_CODES[reason], content=body.model_dump(mode="json"))


@router.post("", response_model=EditResponse)
async def edit_photo(
    file: UploadFile = File(...),
    prompt: str = Form(""),
    editor: PhotoEditor = Depends(get_editor),
):
    """
    Edit an uploaded photo according to a text prompt.

    Returns either the edited image as a data URL or an error message,
    never both.
    """
    if not (file.content_type or "").startswith("image/"):
        return _failure(FailureReason.VALIDATION, INVALID_FILE_MESSAGE)

    try:
        image = await encode_upload(file)
    except ImageReadError:
        return _failure(FailureReason.IO, UNREADABLE_FILE_MESSAGE)
    finally:
        await file.close()

    try:
        result = await editor.edit(image, prompt)
    except EditError as e:
        logger.warning(
            "Edit failed",
            extra={"reason": e.reason.value, "upload_name": file.filename}
        )
        return _failure(e.reason, e.message)

    if not result.image:
        # The model answered with text only, usually an explanation or refusal
        return JSONResponse(
            status_code=422,
            content=EditResponse(
                success=False,
                text=result.text,
                error=result.text or NO_IMAGE_MESSAGE,
            ).model_dump(mode="json"),
        )

    return EditResponse(success=True, image=result.image, text=result.text)
