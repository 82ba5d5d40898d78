"""User API endpoints: progress, library, stats, recommendations and preferences."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from audiobook.api.dependencies import (
    get_current_user,
    get_progress_service,
    get_recommendation_service,
)
from audiobook.models.enums import LibraryStatus
from audiobook.models.user import User
from audiobook.schemas.book import BookResponse
from audiobook.schemas.progress import (
    BookmarkCreate,
    BookmarkResponse,
    LibraryResponse,
    ProgressResponse,
    ProgressUpdate,
)
from audiobook.schemas.user import (
    PlaylistCreate,
    PlaylistResponse,
    PreferencesResponse,
    PreferencesUpdate,
    StatsResponse,
)
from audiobook.services.progress import ProgressService
from audiobook.services.recommendations import RecommendationService

router = APIRouter(prefix="/users", tags=["users"])


# --- Progress ---


@router.get("/progress/{book_id}", response_model=ProgressResponse)
def get_progress(
    book_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    progress_service: Annotated[ProgressService, Depends(get_progress_service)],
):
    """Get playback progress for a book, starting it on first access."""
    return progress_service.get_or_create_progress(current_user.id, book_id)


@router.put("/progress/{book_id}", response_model=ProgressResponse)
def update_progress(
    book_id: int,
    progress_data: ProgressUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    progress_service: Annotated[ProgressService, Depends(get_progress_service)],
):
    """Report playback position. Marks the book completed near the end."""
    return progress_service.update_progress(current_user.id, book_id, progress_data)


@router.post(
    "/progress/{book_id}/bookmarks",
    response_model=BookmarkResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_bookmark(
    book_id: int,
    bookmark_data: BookmarkCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    progress_service: Annotated[ProgressService, Depends(get_progress_service)],
):
    """Bookmark a position in a book."""
    return progress_service.add_bookmark(current_user.id, book_id, bookmark_data)


@router.delete(
    "/progress/{book_id}/bookmarks/{bookmark_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_bookmark(
    book_id: int,
    bookmark_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    progress_service: Annotated[ProgressService, Depends(get_progress_service)],
):
    """Remove a bookmark."""
    progress_service.delete_bookmark(current_user.id, book_id, bookmark_id)


# --- Library, stats and recommendations ---


@router.get("/library", response_model=LibraryResponse)
def get_library(
    current_user: Annotated[User, Depends(get_current_user)],
    progress_service: Annotated[ProgressService, Depends(get_progress_service)],
    status_filter: Annotated[LibraryStatus | None, Query(alias="status")] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
):
    """Get the user's started books, most recently played first."""
    return progress_service.get_library(current_user.id, page=page, limit=limit, status=status_filter)


@router.get("/stats", response_model=StatsResponse)
def get_stats(
    current_user: Annotated[User, Depends(get_current_user)],
    progress_service: Annotated[ProgressService, Depends(get_progress_service)],
):
    """Get listening statistics."""
    return progress_service.get_stats(current_user)


@router.get("/recommendations", response_model=list[BookResponse])
def get_recommendations(
    current_user: Annotated[User, Depends(get_current_user)],
    recommendation_service: Annotated[
        RecommendationService, Depends(get_recommendation_service)
    ],
    limit: int = Query(10, ge=1, le=50),
):
    """Recommend books the user has not started yet."""
    return recommendation_service.get_recommendations(current_user.id, limit)


# --- Preferences ---


@router.get("/preferences", response_model=PreferencesResponse)
def get_preferences(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Get playback and display preferences."""
    return current_user


@router.put("/preferences", response_model=PreferencesResponse)
def update_preferences(
    preferences: PreferencesUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    progress_service: Annotated[ProgressService, Depends(get_progress_service)],
):
    """Update preferences, including the genres used for recommendations."""
    return progress_service.update_preferences(current_user, preferences)


# --- Playlists ---


@router.get("/playlists", response_model=list[PlaylistResponse])
def list_playlists(
    current_user: Annotated[User, Depends(get_current_user)],
    progress_service: Annotated[ProgressService, Depends(get_progress_service)],
):
    """List the user's playlists."""
    return progress_service.list_playlists(current_user.id)


@router.post("/playlists", response_model=PlaylistResponse, status_code=status.HTTP_201_CREATED)
def create_playlist(
    playlist_data: PlaylistCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    progress_service: Annotated[ProgressService, Depends(get_progress_service)],
):
    """Create a playlist."""
    return progress_service.create_playlist(current_user.id, playlist_data)


@router.delete("/playlists/{playlist_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_playlist(
    playlist_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    progress_service: Annotated[ProgressService, Depends(get_progress_service)],
):
    """Delete a playlist."""
    progress_service.delete_playlist(current_user.id, playlist_id)
