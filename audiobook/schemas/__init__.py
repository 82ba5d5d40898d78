"""Pydantic schemas for API requests and responses."""

from audiobook.schemas.auth import AuthResponse, TokenPair, UserLogin, UserResponse, UserSignup
from audiobook.schemas.book import BookCreate, BookResponse, BookSummary, BookUpdate
from audiobook.schemas.progress import LibraryResponse, ProgressResponse, ProgressUpdate
from audiobook.schemas.upload import UploadResponse
from audiobook.schemas.user import PreferencesUpdate, StatsResponse

__all__ = [
    "UserSignup",
    "UserLogin",
    "TokenPair",
    "AuthResponse",
    "UserResponse",
    "BookCreate",
    "BookUpdate",
    "BookResponse",
    "BookSummary",
    "ProgressUpdate",
    "ProgressResponse",
    "LibraryResponse",
    "PreferencesUpdate",
    "StatsResponse",
    "UploadResponse",
]
