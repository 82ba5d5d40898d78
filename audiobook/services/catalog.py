"""Catalog service: books, taxonomy upserts and reviews."""

import logging
import math

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from audiobook.database import insert_if_absent
from audiobook.exceptions import NotFoundError, ValidationError
from audiobook.models.book import Book, BookAuthor, BookGenre, Chapter
from audiobook.models.review import Review
from audiobook.models.taxonomy import Author, Genre
from audiobook.schemas.book import BookCreate, BookUpdate, ChapterIn
from audiobook.schemas.user import ReviewCreate

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "ml"
LEGACY_CHAPTER_TITLE = "Chapter 1"
# Largest value the books.duration INTEGER column holds
MAX_DURATION_MINUTES = 2**31 - 1


def parse_names(names: list[str] | str | None) -> list[str]:
    """Split a name list or comma-separated string into trimmed, non-empty names."""
    if names is None:
        return []
    items = names.split(",") if isinstance(names, str) else names
    return [item.strip() for item in items if item and item.strip()]


def normalize_duration(value: int | float | str | None) -> int | None:
    """Coerce a duration in minutes to an integer, truncating fractions.

    Returns None when no duration was supplied.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        minutes = float(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"Invalid duration: {value!r}") from None
    if not math.isfinite(minutes):
        raise ValidationError(f"Invalid duration: {value!r}")
    if minutes < 0:
        raise ValidationError("Duration cannot be negative")
    if minutes > MAX_DURATION_MINUTES:
        raise ValidationError(f"Duration cannot exceed {MAX_DURATION_MINUTES} minutes")
    return int(minutes)


def _build_chapters(chapters: list[ChapterIn]) -> list[Chapter]:
    return [
        Chapter(title=chapter.title, audio_file=chapter.audio_file, duration=chapter.duration)
        for chapter in chapters
    ]


class CatalogService:
    """Service for catalog reads and admin writes."""

    def __init__(self, db: Session):
        self.db = db

    # --- Taxonomy ---

    def resolve_names(self, names: list[str] | str | None, model: type[Author] | type[Genre]) -> list[int]:
        """Find or create an Author/Genre per name and return their ids.

        Names match exactly after trimming. Ids keep first-occurrence order;
        a name given twice maps to the same id and appears once.
        """
        ids: list[int] = []
        for name in parse_names(names):
            if insert_if_absent(self.db, model, {"name": name}, ["name"]):
                logger.info(f"Created {model.__name__} '{name}'")
            entity_id = self.db.query(model.id).filter(model.name == name).scalar()
            if entity_id not in ids:
                ids.append(entity_id)
        return ids

    def _replace_authors(self, book: Book, names: list[str] | str) -> None:
        author_ids = self.resolve_names(names, Author)
        if book.author_links:
            book.author_links.clear()
            self.db.flush()
        book.set_authors(author_ids)

    def _replace_genres(self, book: Book, names: list[str] | str) -> None:
        genre_ids = self.resolve_names(names, Genre)
        if book.genre_links:
            book.genre_links.clear()
            self.db.flush()
        book.set_genres(genre_ids)

    # --- Reads ---

    def get_book(self, book_id: int, include_inactive: bool = False) -> Book:
        """Get a book, raising NotFoundError for unknown or deactivated books."""
        query = self.db.query(Book).filter(Book.id == book_id)
        if not include_inactive:
            query = query.filter(Book.is_active.is_(True))
        book = query.first()
        if not book:
            raise NotFoundError("Book not found")
        return book

    def list_books(
        self,
        genre_id: int | None = None,
        author_id: int | None = None,
        search: str | None = None,
        language: str | None = None,
    ) -> list[Book]:
        """List active books, newest first."""
        query = self.db.query(Book).filter(Book.is_active.is_(True))
        if genre_id is not None:
            query = query.filter(Book.genre_links.any(BookGenre.genre_id == genre_id))
        if author_id is not None:
            query = query.filter(Book.author_links.any(BookAuthor.author_id == author_id))
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(Book.title.ilike(pattern), Book.narrator.ilike(pattern)))
        if language:
            query = query.filter(Book.language == language)
        return query.order_by(Book.created_at.desc(), Book.id.desc()).all()

    def featured_books(self, limit: int = 10) -> list[Book]:
        """Top-rated active books, most played first on equal rating."""
        return (
            self.db.query(Book)
            .filter(Book.is_active.is_(True))
            .order_by(Book.rating.desc(), Book.total_plays.desc(), Book.id)
            .limit(limit)
            .all()
        )

    def new_releases(self, limit: int = 10) -> list[Book]:
        """Most recently released active books."""
        return (
            self.db.query(Book)
            .filter(Book.is_active.is_(True))
            .order_by(Book.release_date.desc().nulls_last(), Book.created_at.desc(), Book.id.desc())
            .limit(limit)
            .all()
        )

    # --- Writes ---

    def create_book(self, data: BookCreate) -> Book:
        """Create a book, resolving author/genre names to taxonomy entries."""
        if not data.title or not data.title.strip():
            raise ValidationError("Title is required")

        duration = normalize_duration(data.duration)
        chapters = _build_chapters(data.chapters or [])
        if chapters and duration is None:
            duration = normalize_duration(round(sum(chapter.duration for chapter in chapters)))
        if not chapters and data.audio_file:
            # Single-file books get one chapter wrapping the file
            chapters.append(
                Chapter(
                    title=LEGACY_CHAPTER_TITLE,
                    audio_file=data.audio_file,
                    duration=duration or 0,
                )
            )

        book = Book(
            title=data.title.strip(),
            description=data.description,
            narrator=data.narrator,
            duration=duration or 0,
            cover_image=data.cover_image,
            audio_file=data.audio_file,
            release_date=data.release_date,
            language=data.language or DEFAULT_LANGUAGE,
            is_active=True,
            chapters=chapters,
        )
        book.set_authors(self.resolve_names(data.authors, Author))
        book.set_genres(self.resolve_names(data.genres, Genre))

        self.db.add(book)
        self.db.commit()
        self.db.refresh(book)
        logger.info(f"Created book {book.id} '{book.title}' with {len(book.chapters)} chapters")
        return book

    def update_book(self, book_id: int, data: BookUpdate) -> Book:
        """Apply the fields present in ``data`` to a book."""
        book = self.get_book(book_id, include_inactive=True)

        if data.title is not None:
            if not data.title.strip():
                raise ValidationError("Title is required")
            book.title = data.title.strip()
        if data.description is not None:
            book.description = data.description
        if data.narrator is not None:
            book.narrator = data.narrator
        if data.duration is not None:
            book.duration = normalize_duration(data.duration) or 0
        if data.cover_image is not None:
            book.cover_image = data.cover_image
        if data.audio_file is not None:
            book.audio_file = data.audio_file
        if data.release_date is not None:
            book.release_date = data.release_date
        if data.language is not None:
            book.language = data.language
        if data.is_active is not None:
            book.is_active = data.is_active
        if data.chapters is not None:
            book.chapters = _build_chapters(data.chapters)
        if data.authors is not None:
            self._replace_authors(book, data.authors)
        if data.genres is not None:
            self._replace_genres(book, data.genres)

        self.db.commit()
        self.db.refresh(book)
        return book

    def delete_book(self, book_id: int) -> None:
        """Soft delete a book; progress and reviews keep referencing it."""
        book = self.get_book(book_id, include_inactive=True)
        book.is_active = False
        self.db.commit()
        logger.info(f"Deactivated book {book_id}")

    # --- Reviews ---

    def list_reviews(self, book_id: int) -> list[Review]:
        self.get_book(book_id)
        return (
            self.db.query(Review)
            .filter(Review.book_id == book_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
            .all()
        )

    def add_review(self, user_id: int, book_id: int, data: ReviewCreate) -> Review:
        """Create or replace the user's review and refresh the book rating."""
        book = self.get_book(book_id)

        insert_if_absent(
            self.db,
            Review,
            {"user_id": user_id, "book_id": book_id, "rating": data.rating},
            ["user_id", "book_id"],
        )
        review = (
            self.db.query(Review)
            .filter(Review.user_id == user_id, Review.book_id == book_id)
            .one()
        )
        review.rating = data.rating
        review.comment = data.comment
        self.db.flush()

        average = self.db.query(func.avg(Review.rating)).filter(Review.book_id == book_id).scalar()
        book.rating = round(float(average or 0), 2)

        self.db.commit()
        self.db.refresh(review)
        return review
