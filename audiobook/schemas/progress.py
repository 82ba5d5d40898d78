"""Progress, bookmark and library schemas."""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from audiobook.schemas.book import BookSummary


class ProgressUpdate(BaseModel):
    """Playback report. Each field left unset means no change.

    Player clients send the short names (``position``, ``chapter``,
    ``totalPlayed``, ``speed``); the field names are accepted too.
    """

    model_config = ConfigDict(extra="forbid")

    current_position: float | None = Field(
        None,
        ge=0,
        allow_inf_nan=False,
        validation_alias=AliasChoices("current_position", "position", "currentPosition"),
    )  # seconds into the chapter
    current_chapter: int | None = Field(
        None,
        ge=0,
        validation_alias=AliasChoices("current_chapter", "chapter", "currentChapter"),
    )
    total_played: float | None = Field(
        None,
        ge=0,
        allow_inf_nan=False,
        validation_alias=AliasChoices("total_played", "totalPlayed"),
    )  # seconds
    playback_speed: float | None = Field(
        None,
        ge=0.5,
        le=3.0,
        validation_alias=AliasChoices("playback_speed", "speed", "playbackSpeed"),
    )


class BookmarkCreate(BaseModel):
    position: float = Field(..., ge=0, allow_inf_nan=False)
    note: str | None = Field(None, max_length=1000)


class BookmarkResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    position: float
    note: str | None
    created_at: datetime


class ProgressResponse(BaseModel):
    """Progress record with a summary of its book."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    book_id: int
    current_chapter: int
    current_position: float
    total_played: float
    playback_speed: float
    is_completed: bool
    completion_date: datetime | None
    last_played_at: datetime | None
    bookmarks: list[BookmarkResponse]
    book: BookSummary


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class LibraryResponse(BaseModel):
    books: list[ProgressResponse]
    pagination: Pagination
