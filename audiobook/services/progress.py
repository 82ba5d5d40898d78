"""Progress tracking: playback state, completion detection and library views."""

import logging
import math
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from audiobook.database import insert_if_absent
from audiobook.exceptions import NotFoundError, ValidationError
from audiobook.models.book import Book
from audiobook.models.enums import LibraryStatus
from audiobook.models.playlist import Playlist
from audiobook.models.progress import Bookmark, UserProgress
from audiobook.models.taxonomy import Genre
from audiobook.models.user import User
from audiobook.schemas.progress import BookmarkCreate, ProgressUpdate
from audiobook.schemas.user import PlaylistCreate, PreferencesUpdate

logger = logging.getLogger(__name__)

# Fraction of the last chapter (or of the whole book) after which it counts as finished
COMPLETION_THRESHOLD = 0.9


def completion_target_seconds(book: Book, chapter_index: int) -> float:
    """Duration in seconds that the completion threshold applies to.

    The indexed chapter's duration when the book has that chapter, otherwise
    the book's flat duration.
    """
    if book.chapters and 0 <= chapter_index < len(book.chapters):
        return book.chapters[chapter_index].duration * 60
    return (book.duration or 0) * 60


def is_last_chapter(book: Book, chapter_index: int) -> bool:
    """Chapter-less books only have chapter 0."""
    last_index = len(book.chapters) - 1 if book.chapters else 0
    return chapter_index == last_index


def reaches_completion(book: Book, chapter_index: int, position: float) -> bool:
    """Whether a position on the given chapter counts as finishing the book."""
    if not is_last_chapter(book, chapter_index):
        return False
    return position >= completion_target_seconds(book, chapter_index) * COMPLETION_THRESHOLD


class ProgressService:
    """Service for per-user playback progress and derived views."""

    def __init__(self, db: Session):
        self.db = db

    def _find(self, user_id: int, book_id: int) -> UserProgress | None:
        return (
            self.db.query(UserProgress)
            .filter(UserProgress.user_id == user_id, UserProgress.book_id == book_id)
            .first()
        )

    def get_or_create_progress(self, user_id: int, book_id: int) -> UserProgress:
        """Return the user's progress for a book, creating it on first access.

        Creation is a single conflict-ignoring insert on (user, book), so
        concurrent first requests end up sharing one record. Only the request
        whose insert lands counts as a new play of the book.
        """
        progress = self._find(user_id, book_id)
        if progress:
            return progress

        if not self.db.query(Book.id).filter(Book.id == book_id).first():
            raise NotFoundError("Book not found")

        inserted = insert_if_absent(
            self.db,
            UserProgress,
            {
                "user_id": user_id,
                "book_id": book_id,
                "current_chapter": 0,
                "current_position": 0,
                "total_played": 0,
                "is_completed": False,
                "last_played_at": datetime.now(UTC),
            },
            ["user_id", "book_id"],
        )
        if inserted:
            self.db.query(Book).filter(Book.id == book_id).update(
                {Book.total_plays: Book.total_plays + 1}, synchronize_session=False
            )
            logger.info(f"Started progress for user {user_id} on book {book_id}")
        self.db.commit()

        return self._find(user_id, book_id)

    def update_progress(self, user_id: int, book_id: int, data: ProgressUpdate) -> UserProgress:
        """Apply a playback report and derive completion.

        The not-completed -> completed transition is a conditional UPDATE on
        ``is_completed = false``; the user's ``books_completed`` counter is
        only incremented when that UPDATE matched a row.
        """
        progress = self._find(user_id, book_id)
        if not progress:
            raise NotFoundError("Progress not found")

        if data.current_position is not None:
            progress.current_position = data.current_position
        if data.current_chapter is not None:
            progress.current_chapter = data.current_chapter
        if data.total_played is not None:
            progress.total_played = data.total_played
        if data.playback_speed is not None:
            progress.playback_speed = data.playback_speed
        now = datetime.now(UTC)
        progress.last_played_at = now
        self.db.flush()

        book = progress.book
        if not progress.is_completed and reaches_completion(
            book, progress.current_chapter, progress.current_position
        ):
            self._mark_completed(progress, user_id, now)

        if data.total_played is not None:
            self._refresh_listening_time(user_id)

        self.db.commit()
        self.db.refresh(progress)
        return progress

    def _mark_completed(self, progress: UserProgress, user_id: int, now: datetime) -> None:
        transitioned = (
            self.db.query(UserProgress)
            .filter(UserProgress.id == progress.id, UserProgress.is_completed.is_(False))
            .update(
                {UserProgress.is_completed: True, UserProgress.completion_date: now},
                synchronize_session=False,
            )
        )
        if transitioned:
            self.db.query(User).filter(User.id == user_id).update(
                {User.books_completed: User.books_completed + 1}, synchronize_session=False
            )
            logger.info(f"User {user_id} completed book {progress.book_id}")

    def _refresh_listening_time(self, user_id: int) -> None:
        total_seconds = (
            self.db.query(func.coalesce(func.sum(UserProgress.total_played), 0))
            .filter(UserProgress.user_id == user_id)
            .scalar()
        )
        self.db.query(User).filter(User.id == user_id).update(
            {User.total_listening_time: round(total_seconds / 60)}, synchronize_session=False
        )

    # --- Bookmarks ---

    def add_bookmark(self, user_id: int, book_id: int, data: BookmarkCreate) -> Bookmark:
        progress = self._find(user_id, book_id)
        if not progress:
            raise NotFoundError("Progress not found")

        bookmark = Bookmark(progress_id=progress.id, position=data.position, note=data.note)
        self.db.add(bookmark)
        self.db.commit()
        self.db.refresh(bookmark)
        return bookmark

    def delete_bookmark(self, user_id: int, book_id: int, bookmark_id: int) -> None:
        bookmark = (
            self.db.query(Bookmark)
            .join(UserProgress, Bookmark.progress_id == UserProgress.id)
            .filter(
                Bookmark.id == bookmark_id,
                UserProgress.user_id == user_id,
                UserProgress.book_id == book_id,
            )
            .first()
        )
        if not bookmark:
            raise NotFoundError("Bookmark not found")
        self.db.delete(bookmark)
        self.db.commit()

    # --- Library and stats ---

    def get_library(
        self,
        user_id: int,
        page: int = 1,
        limit: int = 20,
        status: LibraryStatus | None = None,
    ) -> dict[str, Any]:
        """Page through the user's progress records, most recently played first."""
        query = self.db.query(UserProgress).filter(UserProgress.user_id == user_id)
        if status == LibraryStatus.COMPLETED:
            query = query.filter(UserProgress.is_completed.is_(True))
        elif status == LibraryStatus.IN_PROGRESS:
            query = query.filter(
                UserProgress.is_completed.is_(False), UserProgress.current_position > 0
            )

        total = query.count()
        records = (
            query.order_by(UserProgress.last_played_at.desc(), UserProgress.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return {
            "books": records,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": math.ceil(total / limit),
            },
        }

    def get_stats(self, user: User) -> dict[str, Any]:
        """Counts and listening time over the user's progress records."""
        base = self.db.query(UserProgress).filter(UserProgress.user_id == user.id)
        total_books = base.count()
        completed_books = base.filter(UserProgress.is_completed.is_(True)).count()
        in_progress_books = base.filter(
            UserProgress.is_completed.is_(False), UserProgress.current_position > 0
        ).count()
        total_seconds = (
            self.db.query(func.coalesce(func.sum(UserProgress.total_played), 0))
            .filter(UserProgress.user_id == user.id)
            .scalar()
        )

        return {
            "total_books": total_books,
            "completed_books": completed_books,
            "in_progress_books": in_progress_books,
            "total_listening_time": round(total_seconds / 60),
            "user_stats": {
                "books_completed": user.books_completed,
                "total_listening_time": user.total_listening_time,
            },
            "preferences": user,
            "subscription": {
                "tier": user.subscription_tier,
                "start_date": user.subscription_start,
                "end_date": user.subscription_end,
                "auto_renew": user.subscription_auto_renew,
            },
        }

    # --- Preferences and playlists ---

    def _load_books(self, book_ids: list[int]) -> list[Book]:
        unique_ids = list(dict.fromkeys(book_ids))
        books = self.db.query(Book).filter(Book.id.in_(unique_ids)).all() if unique_ids else []
        if len(books) != len(unique_ids):
            raise ValidationError("One or more books do not exist")
        return books

    def update_preferences(self, user: User, data: PreferencesUpdate) -> User:
        if data.preferred_genre_ids is not None:
            unique_ids = list(dict.fromkeys(data.preferred_genre_ids))
            genres = self.db.query(Genre).filter(Genre.id.in_(unique_ids)).all() if unique_ids else []
            if len(genres) != len(unique_ids):
                raise ValidationError("One or more genres do not exist")
            user.preferred_genres = genres
        if data.playback_speed is not None:
            user.playback_speed = data.playback_speed
        if data.auto_play_next is not None:
            user.auto_play_next = data.auto_play_next
        if data.dark_mode is not None:
            user.dark_mode = data.dark_mode
        if data.font_size is not None:
            user.font_size = data.font_size
        if data.high_contrast is not None:
            user.high_contrast = data.high_contrast

        self.db.commit()
        self.db.refresh(user)
        return user

    def list_playlists(self, user_id: int) -> list[Playlist]:
        return (
            self.db.query(Playlist)
            .filter(Playlist.user_id == user_id)
            .order_by(Playlist.created_at.desc(), Playlist.id.desc())
            .all()
        )

    def create_playlist(self, user_id: int, data: PlaylistCreate) -> Playlist:
        playlist = Playlist(
            user_id=user_id,
            name=data.name,
            description=data.description,
            books=self._load_books(data.book_ids),
        )
        self.db.add(playlist)
        self.db.commit()
        self.db.refresh(playlist)
        return playlist

    def delete_playlist(self, user_id: int, playlist_id: int) -> None:
        playlist = (
            self.db.query(Playlist)
            .filter(Playlist.id == playlist_id, Playlist.user_id == user_id)
            .first()
        )
        if not playlist:
            raise NotFoundError("Playlist not found")
        self.db.delete(playlist)
        self.db.commit()
