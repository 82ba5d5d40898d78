"""Upload schemas."""

from pydantic import BaseModel


class UploadedFile(BaseModel):
    filename: str  # relative reference, e.g. audio/1700000000000-1a2b3c4d-intro.mp3
    original_name: str
    mimetype: str
    size: int


class UploadResponse(BaseModel):
    message: str
    file: UploadedFile
