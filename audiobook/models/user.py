"""User model."""

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Table
from sqlalchemy.orm import relationship

from audiobook.database import Base
from audiobook.models.enums import FontSize, SubscriptionTier, UserRole
from audiobook.models.mixins import TimestampMixin

user_preferred_genres = Table(
    "user_preferred_genres",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("genre_id", Integer, ForeignKey("genres.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base, TimestampMixin):
    """User model for authentication, preferences and listening stats."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=True)  # NULL for Google-created accounts
    role = Column(String(20), nullable=False, default=UserRole.USER.value)
    profile_picture = Column(String(500), nullable=True)
    last_login = Column(DateTime(timezone=True), nullable=True)

    # Session state: one active refresh token, one pending reset token (sha256 hex)
    refresh_token = Column(String(1024), nullable=True, index=True)
    reset_password_token = Column(String(64), nullable=True, index=True)
    reset_password_expires = Column(DateTime(timezone=True), nullable=True)

    # Preferences
    playback_speed = Column(Float, nullable=False, default=1.0)
    auto_play_next = Column(Boolean, nullable=False, default=True)
    dark_mode = Column(Boolean, nullable=False, default=False)
    font_size = Column(String(10), nullable=False, default=FontSize.MEDIUM.value)
    high_contrast = Column(Boolean, nullable=False, default=False)

    # Subscription
    subscription_tier = Column(String(20), nullable=False, default=SubscriptionTier.FREE.value)
    subscription_start = Column(DateTime(timezone=True), nullable=True)
    subscription_end = Column(DateTime(timezone=True), nullable=True)
    subscription_auto_renew = Column(Boolean, nullable=False, default=False)

    # Aggregate stats
    books_completed = Column(Integer, nullable=False, default=0)
    total_listening_time = Column(Integer, nullable=False, default=0)  # minutes

    # Relationships
    preferred_genres = relationship("Genre", secondary=user_preferred_genres, order_by="Genre.id")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value
