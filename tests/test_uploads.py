"""Upload gateway tests."""

import re
from unittest.mock import patch

import pytest

from audiobook.exceptions import NotFoundError, ValidationError
from audiobook.models.enums import UploadKind
from audiobook.services.uploads import UploadService, generate_filename, is_allowed


def test_upload_audio(client, admin_headers, upload_dir):
    response = client.post(
        "/auth/upload/audio",
        headers=admin_headers,
        files={"file": ("My Chapter 1.mp3", b"ID3fakeaudio", "audio/mpeg")},
    )
    assert response.status_code == 200
    stored = response.json()["file"]
    assert stored["filename"].startswith("audio/")
    assert stored["original_name"] == "My Chapter 1.mp3"
    assert stored["mimetype"] == "audio/mpeg"
    assert stored["size"] == len(b"ID3fakeaudio")
    assert (upload_dir / stored["filename"]).read_bytes() == b"ID3fakeaudio"

    # Stored files are served back by reference
    response = client.get(f"/auth/files/{stored['filename']}")
    assert response.status_code == 200
    assert response.content == b"ID3fakeaudio"


def test_upload_audio_by_extension(client, admin_headers):
    """Audio with a generic MIME type is accepted on its extension."""
    response = client.post(
        "/auth/upload/audio",
        headers=admin_headers,
        files={"file": ("chapter.m4a", b"data", "application/x-unknown")},
    )
    assert response.status_code == 200


def test_upload_audio_rejects_wrong_type(client, admin_headers, upload_dir):
    response = client.post(
        "/auth/upload/audio",
        headers=admin_headers,
        files={"file": ("notes.txt", b"hello", "text/plain")},
    )
    assert response.status_code == 400
    assert "Allowed types" in response.json()["detail"]
    assert not (upload_dir / "audio").exists()


def test_upload_cover(client, admin_headers):
    response = client.post(
        "/auth/upload/cover",
        headers=admin_headers,
        files={"file": ("cover.png", b"\x89PNG", "image/png")},
    )
    assert response.status_code == 200
    assert response.json()["file"]["filename"].startswith("covers/")


def test_upload_cover_rejects_audio(client, admin_headers):
    response = client.post(
        "/auth/upload/cover",
        headers=admin_headers,
        files={"file": ("cover.mp3", b"ID3", "audio/mpeg")},
    )
    assert response.status_code == 400


def test_upload_requires_admin(client, auth_headers):
    response = client.post(
        "/auth/upload/audio",
        headers=auth_headers,
        files={"file": ("a.mp3", b"ID3", "audio/mpeg")},
    )
    assert response.status_code == 403


def test_missing_file_not_found(client):
    assert client.get("/auth/files/audio/missing.mp3").status_code == 404


@pytest.mark.parametrize(
    "kind,content_type,filename,expected",
    [
        (UploadKind.AUDIO, "audio/mpeg", "a.bin", True),
        (UploadKind.AUDIO, "application/octet-stream", "a.bin", True),
        (UploadKind.AUDIO, None, "a.flac", True),
        (UploadKind.AUDIO, "image/png", "a.png", False),
        (UploadKind.COVER, "image/jpeg", "c.jpg", True),
        (UploadKind.COVER, "audio/mpeg", "c.jpg", False),
        (UploadKind.COVER, None, "c.jpg", False),
    ],
)
def test_is_allowed(kind, content_type, filename, expected):
    assert is_allowed(kind, content_type, filename) is expected


def test_generate_filename():
    name = generate_filename("My Great  Book (final).MP3")
    assert re.fullmatch(r"\d{13}-[0-9a-f]{8}-My-Great-Book-final\.mp3", name)
    assert generate_filename("a.mp3") != generate_filename("a.mp3")


def test_store_upload_limits(tmp_path):
    service = UploadService(tmp_path)

    with pytest.raises(ValidationError):
        service.store_upload(UploadKind.AUDIO, b"", "empty.mp3", "audio/mpeg")

    too_big = b"x" * (service.max_size(UploadKind.COVER) + 1)
    with pytest.raises(ValidationError, match="File too large"):
        service.store_upload(UploadKind.COVER, too_big, "big.png", "image/png")


def test_resolve_file_blocks_traversal(tmp_path):
    (tmp_path / "secret.txt").write_text("secret")
    service = UploadService(tmp_path / "uploads")

    with pytest.raises(NotFoundError):
        service.resolve_file("../secret.txt")


def test_upload_audio_accepts_audio_file_field(client, admin_headers):
    response = client.post(
        "/auth/upload/audio",
        headers=admin_headers,
        files={"audioFile": ("chapter.mp3", b"ID3", "audio/mpeg")},
    )
    assert response.status_code == 200
    assert response.json()["file"]["original_name"] == "chapter.mp3"


def test_upload_cover_accepts_cover_image_field(client, admin_headers):
    response = client.post(
        "/auth/upload/cover",
        headers=admin_headers,
        files={"coverImage": ("cover.jpg", b"\xff\xd8", "image/jpeg")},
    )
    assert response.status_code == 200
    assert response.json()["file"]["filename"].startswith("covers/")


def test_upload_without_file(client, admin_headers):
    response = client.post(
        "/auth/upload/cover",
        headers=admin_headers,
        files={"document": ("cover.jpg", b"\xff\xd8", "image/jpeg")},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "No file uploaded"


def test_oversized_upload_rejected_before_read(client, admin_headers):
    """The declared size is checked before the body reaches the store."""
    with patch.object(UploadService, "max_size", return_value=10), patch.object(
        UploadService, "store_upload"
    ) as store_upload:
        response = client.post(
            "/auth/upload/cover",
            headers=admin_headers,
            files={"file": ("big.png", b"x" * 20, "image/png")},
        )
    assert response.status_code == 400
    assert "File too large" in response.json()["detail"]
    store_upload.assert_not_called()


def test_check_upload(tmp_path):
    service = UploadService(tmp_path)

    # Unknown size only checks the type
    service.check_upload(UploadKind.COVER, "c.png", "image/png", None)
    with pytest.raises(ValidationError, match="File type not allowed"):
        service.check_upload(UploadKind.COVER, "c.png", "text/plain", None)
    with pytest.raises(ValidationError, match="empty"):
        service.check_upload(UploadKind.AUDIO, "a.mp3", "audio/mpeg", 0)
    with pytest.raises(ValidationError, match="File too large"):
        service.check_upload(
            UploadKind.AUDIO, "a.mp3", "audio/mpeg", service.max_size(UploadKind.AUDIO) + 1
        )
