"""Book catalog API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from audiobook.api.dependencies import get_admin_user, get_catalog_service, get_current_user
from audiobook.models.user import User
from audiobook.schemas.book import BookCreate, BookDetailResponse, BookResponse, BookUpdate
from audiobook.schemas.user import ReviewCreate, ReviewResponse
from audiobook.services.catalog import CatalogService

router = APIRouter(prefix="/books", tags=["books"])


@router.get("", response_model=list[BookResponse])
def list_books(
    catalog: Annotated[CatalogService, Depends(get_catalog_service)],
    genre_id: int | None = None,
    author_id: int | None = None,
    search: str | None = Query(None, max_length=200),
    language: str | None = None,
):
    """List active books, newest first."""
    return catalog.list_books(
        genre_id=genre_id, author_id=author_id, search=search, language=language
    )


@router.get("/featured", response_model=list[BookResponse])
def get_featured_books(
    catalog: Annotated[CatalogService, Depends(get_catalog_service)],
    limit: int = Query(10, ge=1, le=100),
):
    """Get top-rated books."""
    return catalog.featured_books(limit)


@router.get("/new-releases", response_model=list[BookResponse])
def get_new_releases(
    catalog: Annotated[CatalogService, Depends(get_catalog_service)],
    limit: int = Query(10, ge=1, le=100),
):
    """Get the most recently released books."""
    return catalog.new_releases(limit)


@router.get("/{book_id}", response_model=BookDetailResponse)
def get_book(
    book_id: int,
    catalog: Annotated[CatalogService, Depends(get_catalog_service)],
):
    """Get a book with its authors, genres and chapters."""
    return catalog.get_book(book_id)


@router.post("", response_model=BookResponse, status_code=status.HTTP_201_CREATED)
def create_book(
    book_data: BookCreate,
    admin: Annotated[User, Depends(get_admin_user)],
    catalog: Annotated[CatalogService, Depends(get_catalog_service)],
):
    """Create a book (admin only)."""
    return catalog.create_book(book_data)


@router.put("/{book_id}", response_model=BookResponse)
def update_book(
    book_id: int,
    book_data: BookUpdate,
    admin: Annotated[User, Depends(get_admin_user)],
    catalog: Annotated[CatalogService, Depends(get_catalog_service)],
):
    """Update a book (admin only)."""
    return catalog.update_book(book_id, book_data)


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_book(
    book_id: int,
    admin: Annotated[User, Depends(get_admin_user)],
    catalog: Annotated[CatalogService, Depends(get_catalog_service)],
):
    """Deactivate a book (admin only)."""
    catalog.delete_book(book_id)


@router.get("/{book_id}/reviews", response_model=list[ReviewResponse])
def list_reviews(
    book_id: int,
    catalog: Annotated[CatalogService, Depends(get_catalog_service)],
):
    """List reviews for a book."""
    return catalog.list_reviews(book_id)


@router.post("/{book_id}/reviews", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
def add_review(
    book_id: int,
    review_data: ReviewCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    catalog: Annotated[CatalogService, Depends(get_catalog_service)],
):
    """Rate a book. Posting again replaces the caller's earlier review."""
    return catalog.add_review(current_user.id, book_id, review_data)
