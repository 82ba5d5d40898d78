"""UserProgress and Bookmark models."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from audiobook.database import Base
from audiobook.models.mixins import CreatedAtMixin, TimestampMixin


class UserProgress(Base, TimestampMixin):
    """Playback state for one (user, book) pair."""

    __tablename__ = "user_progress"
    __table_args__ = (UniqueConstraint("user_id", "book_id", name="uq_progress_user_book"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    book_id = Column(Integer, ForeignKey("books.id"), nullable=False, index=True)
    current_chapter = Column(Integer, nullable=False, default=0)
    current_position = Column(Float, nullable=False, default=0)  # seconds into the chapter
    total_played = Column(Float, nullable=False, default=0)  # seconds
    playback_speed = Column(Float, nullable=False, default=1.0)
    is_completed = Column(Boolean, nullable=False, default=False, index=True)
    completion_date = Column(DateTime(timezone=True), nullable=True)
    last_played_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    user = relationship("User", backref="progress_records")
    book = relationship("Book", lazy="joined")
    bookmarks = relationship(
        "Bookmark",
        back_populates="progress",
        order_by="Bookmark.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class Bookmark(Base, CreatedAtMixin):
    """A saved position inside a progress record."""

    __tablename__ = "bookmarks"

    id = Column(Integer, primary_key=True, index=True)
    progress_id = Column(
        Integer, ForeignKey("user_progress.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position = Column(Float, nullable=False)  # seconds
    note = Column(String(1000), nullable=True)

    progress = relationship("UserProgress", back_populates="bookmarks")
