"""Book, chapter and taxonomy schemas."""

from datetime import date, datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class AuthorSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class AuthorDetail(AuthorSummary):
    bio: str | None = None
    photo: str | None = None


class GenreSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    color: str | None = None


class ChapterIn(BaseModel):
    """Chapter as supplied on book create/update."""

    title: str = Field(..., min_length=1, max_length=500)
    audio_file: str = Field(
        ..., min_length=1, max_length=500, validation_alias=AliasChoices("audio_file", "audioFile")
    )
    duration: float = Field(0, ge=0, allow_inf_nan=False)  # minutes


class ChapterResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    audio_file: str
    duration: float


class _BookFields(BaseModel):
    """Writable book fields. Admin clients may send the camelCase names."""

    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(None, max_length=500)
    description: str | None = None
    authors: list[str] | str | None = None
    genres: list[str] | str | None = None
    narrator: str | None = Field(None, max_length=255)
    duration: int | float | str | None = None  # minutes
    cover_image: str | None = Field(
        None, max_length=500, validation_alias=AliasChoices("cover_image", "coverImage")
    )
    audio_file: str | None = Field(
        None, max_length=500, validation_alias=AliasChoices("audio_file", "audioFile")
    )
    chapters: list[ChapterIn] | None = None
    release_date: date | None = Field(
        None, validation_alias=AliasChoices("release_date", "releaseDate")
    )
    language: str | None = Field(None, max_length=20)


class BookCreate(_BookFields):
    """Create a new book.

    ``authors`` and ``genres`` take a list of names or a comma-separated
    string. ``title`` is checked by the catalog service so a missing title is
    reported as a 400 like other catalog validation errors.
    """


class BookUpdate(_BookFields):
    """Update a book. Fields left unset are not changed."""

    is_active: bool | None = Field(None, validation_alias=AliasChoices("is_active", "isActive"))


class BookSummary(BaseModel):
    """Compact book view embedded in progress and playlist responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    duration: int
    cover_image: str | None
    narrator: str | None
    rating: float
    authors: list[AuthorSummary]


class BookResponse(BaseModel):
    """Book response with denormalized authors and genres."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str | None
    authors: list[AuthorSummary]
    genres: list[GenreSummary]
    narrator: str | None
    duration: int
    cover_image: str | None
    audio_file: str | None
    chapters: list[ChapterResponse]
    rating: float
    total_plays: int
    is_active: bool
    release_date: date | None
    language: str
    created_at: datetime
    updated_at: datetime


class BookDetailResponse(BookResponse):
    authors: list[AuthorDetail]
