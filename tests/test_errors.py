"""Error handler tests."""

import logging
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from audiobook.database import get_db
from audiobook.main import app


@pytest.fixture
def error_client(db):
    """Test client that returns 500 responses instead of raising."""

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def test_unhandled_error_returns_500(error_client):
    with patch(
        "audiobook.services.catalog.CatalogService.featured_books",
        side_effect=RuntimeError("boom"),
    ):
        response = error_client.get("/books/featured")
    assert response.status_code == 500
    data = response.json()
    assert data["detail"] == "Internal server error"
    # Stack traces are only returned outside production
    assert "RuntimeError: boom" in data["stack"]


def test_unhandled_error_hides_stack_in_production(error_client):
    with patch(
        "audiobook.services.catalog.CatalogService.featured_books",
        side_effect=RuntimeError("boom"),
    ), patch("audiobook.main.settings.environment", "production"):
        response = error_client.get("/books/featured")
    assert response.status_code == 500
    assert "stack" not in response.json()


def test_unhandled_error_logs_request(error_client, caplog):
    with patch(
        "audiobook.services.catalog.CatalogService.list_reviews",
        side_effect=RuntimeError("boom"),
    ), caplog.at_level(logging.ERROR, logger="audiobook.main"):
        error_client.get("/books/1/reviews")

    record = next(record for record in caplog.records if record.name == "audiobook.main")
    assert "GET /books/1/reviews" in record.getMessage()
    assert record.exc_info is not None


def test_unhandled_error_logs_json_body(error_client, admin_headers, caplog):
    with patch(
        "audiobook.services.catalog.CatalogService.create_book",
        side_effect=RuntimeError("boom"),
    ), caplog.at_level(logging.ERROR, logger="audiobook.main"):
        response = error_client.post("/books", headers=admin_headers, json={"title": "Logged"})
    assert response.status_code == 500

    record = next(record for record in caplog.records if record.name == "audiobook.main")
    assert "POST /books" in record.getMessage()
    assert "'title': 'Logged'" in record.getMessage()


def test_request_validation_keeps_422(client, auth_headers):
    response = client.put(
        "/users/preferences", headers=auth_headers, json={"font_size": "huge"}
    )
    assert response.status_code == 422


def test_unhandled_error_skips_multipart_body(error_client, admin_headers, caplog):
    """Upload bodies are not buffered for error reports."""
    with patch(
        "audiobook.services.uploads.UploadService.store_upload",
        side_effect=RuntimeError("disk full"),
    ), caplog.at_level(logging.ERROR, logger="audiobook.main"):
        response = error_client.post(
            "/auth/upload/audio",
            headers=admin_headers,
            files={"file": ("a.mp3", b"ID3" * 100, "audio/mpeg")},
        )

    assert response.status_code == 500
    record = next(record for record in caplog.records if record.name == "audiobook.main")
    message = record.getMessage()
    assert "POST /auth/upload/audio" in message
    assert "body=None" in message
