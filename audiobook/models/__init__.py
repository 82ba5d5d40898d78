"""SQLAlchemy models."""

from audiobook.models.book import Book, BookAuthor, BookGenre, Chapter
from audiobook.models.playlist import Playlist
from audiobook.models.progress import Bookmark, UserProgress
from audiobook.models.review import Review
from audiobook.models.taxonomy import Author, Genre
from audiobook.models.user import User

__all__ = [
    "User",
    "Author",
    "Genre",
    "Book",
    "BookAuthor",
    "BookGenre",
    "Chapter",
    "UserProgress",
    "Bookmark",
    "Review",
    "Playlist",
]
