"""Upload API endpoints for audio files and cover images."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import FileResponse

from audiobook.api.dependencies import get_admin_user
from audiobook.exceptions import ValidationError
from audiobook.models.enums import UploadKind
from audiobook.models.user import User
from audiobook.schemas.upload import UploadedFile, UploadResponse
from audiobook.services.uploads import UploadService, get_upload_service

router = APIRouter(prefix="/auth", tags=["uploads"])


async def _store(
    kind: UploadKind, candidates: list[UploadFile | None], uploads: UploadService
) -> UploadedFile:
    file = next((candidate for candidate in candidates if candidate is not None), None)
    if file is None:
        raise ValidationError("No file uploaded")

    original_name = file.filename or "upload"
    # Type and declared size are checked before the body is read
    uploads.check_upload(kind, original_name, file.content_type, file.size)
    data = await file.read()
    reference = uploads.store_upload(kind, data, original_name, file.content_type)
    return UploadedFile(
        filename=reference,
        original_name=original_name,
        mimetype=file.content_type or "application/octet-stream",
        size=len(data),
    )


@router.post("/upload/audio", response_model=UploadResponse)
async def upload_audio(
    admin: Annotated[User, Depends(get_admin_user)],
    uploads: Annotated[UploadService, Depends(get_upload_service)],
    file: Annotated[
        UploadFile | None, File(description="Audio file (MP3, M4A, WAV, AAC, OGG, FLAC, ...)")
    ] = None,
    audio_file: Annotated[
        UploadFile | None, File(alias="audioFile", description="Same as `file`")
    ] = None,
):
    """Upload an audio file for a book or chapter.

    Note: This endpoint must remain async because UploadFile.read() is async.
    """
    stored = await _store(UploadKind.AUDIO, [file, audio_file], uploads)
    return UploadResponse(message="Audio uploaded successfully", file=stored)


@router.post("/upload/cover", response_model=UploadResponse)
async def upload_cover(
    admin: Annotated[User, Depends(get_admin_user)],
    uploads: Annotated[UploadService, Depends(get_upload_service)],
    file: Annotated[
        UploadFile | None, File(description="Cover image (JPEG, PNG, GIF, WebP, ...)")
    ] = None,
    cover_image: Annotated[
        UploadFile | None, File(alias="coverImage", description="Same as `file`")
    ] = None,
):
    """Upload a cover image."""
    stored = await _store(UploadKind.COVER, [file, cover_image], uploads)
    return UploadResponse(message="Cover uploaded successfully", file=stored)


@router.get("/files/{reference:path}")
def get_file(
    reference: str,
    uploads: Annotated[UploadService, Depends(get_upload_service)],
):
    """Serve a stored upload by its reference (e.g. ``audio/<name>``)."""
    return FileResponse(uploads.resolve_file(reference))
