"""Book model with its ordered authors, genres and chapters."""

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import relationship

from audiobook.database import Base
from audiobook.models.mixins import TimestampMixin


class Book(Base, TimestampMixin):
    """Audiobook catalog entry."""

    __tablename__ = "books"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    narrator = Column(String(255), nullable=True)
    duration = Column(Integer, nullable=False, default=0)  # minutes
    cover_image = Column(String(500), nullable=True)  # covers/<file>
    audio_file = Column(String(500), nullable=True)  # legacy single-file books: audio/<file>
    rating = Column(Float, nullable=False, default=0)
    total_plays = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    release_date = Column(Date, nullable=True)
    language = Column(String(20), nullable=False, default="ml")

    # Relationships
    author_links = relationship(
        "BookAuthor",
        order_by="BookAuthor.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    genre_links = relationship(
        "BookGenre",
        order_by="BookGenre.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    chapters = relationship(
        "Chapter",
        back_populates="book",
        order_by="Chapter.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def authors(self) -> list:
        return [link.author for link in self.author_links]

    @property
    def genres(self) -> list:
        return [link.genre for link in self.genre_links]

    def set_authors(self, author_ids: list[int]) -> None:
        """Replace the ordered author list."""
        self.author_links = [BookAuthor(author_id=author_id) for author_id in author_ids]

    def set_genres(self, genre_ids: list[int]) -> None:
        """Replace the ordered genre list."""
        self.genre_links = [BookGenre(genre_id=genre_id) for genre_id in genre_ids]


class BookAuthor(Base):
    """Ordered association between a book and an author."""

    __tablename__ = "book_authors"

    book_id = Column(Integer, ForeignKey("books.id", ondelete="CASCADE"), primary_key=True)
    author_id = Column(Integer, ForeignKey("authors.id"), primary_key=True, index=True)
    position = Column(Integer, nullable=False, default=0)

    author = relationship("Author", lazy="joined")


class BookGenre(Base):
    """Ordered association between a book and a genre."""

    __tablename__ = "book_genres"

    book_id = Column(Integer, ForeignKey("books.id", ondelete="CASCADE"), primary_key=True)
    genre_id = Column(Integer, ForeignKey("genres.id"), primary_key=True, index=True)
    position = Column(Integer, nullable=False, default=0)

    genre = relationship("Genre", lazy="joined")


class Chapter(Base):
    """A titled segment of a book with its own audio file."""

    __tablename__ = "chapters"

    id = Column(Integer, primary_key=True, index=True)
    book_id = Column(Integer, ForeignKey("books.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    title = Column(String(500), nullable=False)
    audio_file = Column(String(500), nullable=False)
    duration = Column(Float, nullable=False, default=0)  # minutes

    book = relationship("Book", back_populates="chapters")
