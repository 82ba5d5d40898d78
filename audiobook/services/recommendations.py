"""Recommendation service: genre matches first, then popular books."""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from audiobook.exceptions import NotFoundError
from audiobook.models.book import Book, BookGenre
from audiobook.models.progress import UserProgress
from audiobook.models.user import User

logger = logging.getLogger(__name__)


class RecommendationService:
    """Suggests active books the user has not started."""

    def __init__(self, db: Session):
        self.db = db

    def get_recommendations(self, user_id: int, limit: int = 10) -> list[Book]:
        """Rank unseen books for a user.

        1. Books sharing a preferred genre, by rating then total plays.
        2. If that yields fewer than ``limit``, the rest is filled with the
           most played remaining books (then by rating).

        Books with any progress record for the user are always excluded.
        """
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User not found")
        if limit <= 0:
            return []

        preferred_genre_ids = [genre.id for genre in user.preferred_genres]
        listened_book_ids = select(UserProgress.book_id).where(UserProgress.user_id == user_id)

        recommended: list[Book] = []
        if preferred_genre_ids:
            recommended = (
                self.db.query(Book)
                .filter(
                    Book.is_active.is_(True),
                    Book.id.not_in(listened_book_ids),
                    Book.genre_links.any(BookGenre.genre_id.in_(preferred_genre_ids)),
                )
                .order_by(Book.rating.desc(), Book.total_plays.desc(), Book.id)
                .limit(limit)
                .all()
            )

        if len(recommended) < limit:
            query = self.db.query(Book).filter(
                Book.is_active.is_(True),
                Book.id.not_in(listened_book_ids),
            )
            selected_ids = [book.id for book in recommended]
            if selected_ids:
                query = query.filter(Book.id.not_in(selected_ids))
            popular = (
                query.order_by(Book.total_plays.desc(), Book.rating.desc(), Book.id)
                .limit(limit - len(recommended))
                .all()
            )
            recommended.extend(popular)

        logger.debug(f"Recommended {len(recommended)} books for user {user_id}")
        return recommended
