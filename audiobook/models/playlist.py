"""Playlist model."""

from sqlalchemy import Column, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import relationship

from audiobook.database import Base
from audiobook.models.mixins import TimestampMixin

playlist_books = Table(
    "playlist_books",
    Base.metadata,
    Column("playlist_id", Integer, ForeignKey("playlists.id", ondelete="CASCADE"), primary_key=True),
    Column("book_id", Integer, ForeignKey("books.id"), primary_key=True),
)


class Playlist(Base, TimestampMixin):
    """Named collection of books owned by a user."""

    __tablename__ = "playlists"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    # Relationships
    user = relationship("User", backref="playlists")
    books = relationship("Book", secondary=playlist_books, order_by="Book.id")
