"""Recommendation engine tests."""

import pytest

from audiobook.exceptions import NotFoundError
from audiobook.models.book import Book
from audiobook.services.recommendations import RecommendationService


def _set_popularity(db, book_id: int, rating: float, total_plays: int) -> None:
    db.query(Book).filter(Book.id == book_id).update(
        {Book.rating: rating, Book.total_plays: total_plays}
    )
    db.commit()


def _prefer(client, headers, genre_ids):
    response = client.put(
        "/users/preferences", headers=headers, json={"preferred_genre_ids": genre_ids}
    )
    assert response.status_code == 200


def test_genre_matches_first_then_popular(client, auth_headers, create_book, db):
    mystery_low = create_book(title="Mystery Low", genres="Mystery")
    mystery_high = create_book(title="Mystery High", genres="Mystery")
    popular = create_book(title="Popular Poetry", genres="Poetry")
    quiet = create_book(title="Quiet Poetry", genres="Poetry")

    _set_popularity(db, mystery_low["id"], rating=3.0, total_plays=50)
    _set_popularity(db, mystery_high["id"], rating=4.5, total_plays=1)
    _set_popularity(db, popular["id"], rating=1.0, total_plays=100)
    _set_popularity(db, quiet["id"], rating=5.0, total_plays=2)
    _prefer(client, auth_headers, [mystery_low["genres"][0]["id"]])

    response = client.get("/users/recommendations?limit=3", headers=auth_headers)
    assert response.status_code == 200
    assert [book["title"] for book in response.json()] == [
        "Mystery High",
        "Mystery Low",
        "Popular Poetry",
    ]


def test_excludes_books_with_progress(client, auth_headers, create_book):
    started = create_book(title="Started", genres="Mystery")
    create_book(title="Unseen", genres="Mystery")
    _prefer(client, auth_headers, [started["genres"][0]["id"]])
    client.get(f"/users/progress/{started['id']}", headers=auth_headers)

    titles = [book["title"] for book in client.get("/users/recommendations", headers=auth_headers).json()]
    assert titles == ["Unseen"]


def test_backfill_without_preferences(client, auth_headers, create_book, db):
    """Users without preferred genres get the most played books."""
    books = [create_book(title=f"Book {index}") for index in range(5)]
    for plays, book in enumerate(books):
        _set_popularity(db, book["id"], rating=0, total_plays=plays)

    response = client.get("/users/recommendations?limit=2", headers=auth_headers)
    assert [book["title"] for book in response.json()] == ["Book 4", "Book 3"]


def test_no_duplicates_and_limit(client, auth_headers, create_book):
    first = create_book(title="Both", genres="Mystery, Drama")
    create_book(title="Other")
    _prefer(client, auth_headers, [genre["id"] for genre in first["genres"]])

    titles = [book["title"] for book in client.get("/users/recommendations", headers=auth_headers).json()]
    assert sorted(titles) == ["Both", "Other"]


def test_inactive_books_not_recommended(client, auth_headers, admin_headers, create_book):
    book = create_book(title="Retired")
    client.delete(f"/books/{book['id']}", headers=admin_headers)

    assert client.get("/users/recommendations", headers=auth_headers).json() == []


def test_unknown_user(db):
    with pytest.raises(NotFoundError):
        RecommendationService(db).get_recommendations(9999)
