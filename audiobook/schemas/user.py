"""User preference, stats, review and playlist schemas."""

from datetime import datetime
from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from audiobook.schemas.book import BookSummary, GenreSummary


class PreferencesResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    preferred_genres: list[GenreSummary]
    playback_speed: float
    auto_play_next: bool
    dark_mode: bool
    font_size: str
    high_contrast: bool


class PreferencesUpdate(BaseModel):
    """Update preferences. Fields left unset are not changed."""

    model_config = ConfigDict(extra="forbid")

    preferred_genre_ids: list[int] | None = Field(
        None, validation_alias=AliasChoices("preferred_genre_ids", "preferredGenres")
    )
    playback_speed: float | None = Field(
        None, ge=0.5, le=3.0, validation_alias=AliasChoices("playback_speed", "playbackSpeed")
    )
    auto_play_next: bool | None = Field(
        None, validation_alias=AliasChoices("auto_play_next", "autoPlayNext")
    )
    dark_mode: bool | None = Field(None, validation_alias=AliasChoices("dark_mode", "darkMode"))
    font_size: Literal["small", "medium", "large"] | None = Field(
        None, validation_alias=AliasChoices("font_size", "fontSize")
    )
    high_contrast: bool | None = Field(
        None, validation_alias=AliasChoices("high_contrast", "highContrast")
    )


class SubscriptionResponse(BaseModel):
    tier: str
    start_date: datetime | None
    end_date: datetime | None
    auto_renew: bool


class UserStatsSummary(BaseModel):
    books_completed: int
    total_listening_time: int  # minutes


class StatsResponse(BaseModel):
    total_books: int
    completed_books: int
    in_progress_books: int
    total_listening_time: int  # minutes
    user_stats: UserStatsSummary
    preferences: PreferencesResponse
    subscription: SubscriptionResponse


class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: str | None = Field(None, max_length=5000)


class ReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    book_id: int
    rating: int
    comment: str | None
    created_at: datetime
    updated_at: datetime


class PlaylistCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=2000)
    book_ids: list[int] = Field(default_factory=list)


class PlaylistResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None
    books: list[BookSummary]
    created_at: datetime
