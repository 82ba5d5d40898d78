"""Enums for model fields."""

from enum import Enum


class UserRole(str, Enum):
    """Account roles."""

    USER = "user"
    ADMIN = "admin"


class SubscriptionTier(str, Enum):
    FREE = "free"
    PREMIUM = "premium"
    LIFETIME = "lifetime"


class FontSize(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class UploadKind(str, Enum):
    """Kinds of uploaded binaries and the directory each is stored under."""

    AUDIO = "audio"
    COVER = "cover"

    @property
    def directory(self) -> str:
        return "audio" if self == UploadKind.AUDIO else "covers"


class LibraryStatus(str, Enum):
    """Filters for the user's library listing."""

    COMPLETED = "completed"
    IN_PROGRESS = "in-progress"
