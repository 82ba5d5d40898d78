"""Author and Genre models, keyed by unique name."""

from sqlalchemy import Boolean, Column, Integer, String, Text

from audiobook.database import Base
from audiobook.models.mixins import TimestampMixin


class Author(Base, TimestampMixin):
    """Book author. Created lazily from the names given on a book."""

    __tablename__ = "authors"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)
    bio = Column(Text, nullable=True)
    photo = Column(String(500), nullable=True)  # upload reference, e.g. covers/...


class Genre(Base, TimestampMixin):
    """Book genre. Created lazily from the names given on a book."""

    __tablename__ = "genres"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    color = Column(String(20), nullable=True)  # Hex color like "#e94560"
    is_active = Column(Boolean, default=True, nullable=False)
