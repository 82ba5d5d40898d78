"""initial audiobook schema

Revision ID: 5c2e8f41a9b7
Revises:
Create Date: 2026-10-19

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "5c2e8f41a9b7"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
            onupdate=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    # Taxonomy
    op.create_table(
        "authors",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("photo", sa.String(500), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "genres",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("color", sa.String(20), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True, index=True),
        sa.Column("password_hash", sa.String(255), nullable=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="user"),
        sa.Column("profile_picture", sa.String(500), nullable=True),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.Column("refresh_token", sa.String(1024), nullable=True, index=True),
        sa.Column("reset_password_token", sa.String(64), nullable=True, index=True),
        sa.Column("reset_password_expires", sa.DateTime(timezone=True), nullable=True),
        sa.Column("playback_speed", sa.Float(), nullable=False, server_default="1.0"),
        sa.Column("auto_play_next", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("dark_mode", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("font_size", sa.String(10), nullable=False, server_default="medium"),
        sa.Column("high_contrast", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("subscription_tier", sa.String(20), nullable=False, server_default="free"),
        sa.Column("subscription_start", sa.DateTime(timezone=True), nullable=True),
        sa.Column("subscription_end", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "subscription_auto_renew", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("books_completed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_listening_time", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_table(
        "user_preferred_genres",
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "genre_id",
            sa.Integer(),
            sa.ForeignKey("genres.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )

    # Catalog
    op.create_table(
        "books",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("narrator", sa.String(255), nullable=True),
        sa.Column("duration", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("cover_image", sa.String(500), nullable=True),
        sa.Column("audio_file", sa.String(500), nullable=True),
        sa.Column("rating", sa.Float(), nullable=False, server_default="0"),
        sa.Column("total_plays", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true(), index=True),
        sa.Column("release_date", sa.Date(), nullable=True),
        sa.Column("language", sa.String(20), nullable=False, server_default="ml"),
        *_timestamps(),
    )
    op.create_table(
        "book_authors",
        sa.Column(
            "book_id",
            sa.Integer(),
            sa.ForeignKey("books.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "author_id", sa.Integer(), sa.ForeignKey("authors.id"), primary_key=True, index=True
        ),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_table(
        "book_genres",
        sa.Column(
            "book_id",
            sa.Integer(),
            sa.ForeignKey("books.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "genre_id", sa.Integer(), sa.ForeignKey("genres.id"), primary_key=True, index=True
        ),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_table(
        "chapters",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column(
            "book_id",
            sa.Integer(),
            sa.ForeignKey("books.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("audio_file", sa.String(500), nullable=False),
        sa.Column("duration", sa.Float(), nullable=False, server_default="0"),
    )

    # Listening state
    op.create_table(
        "user_progress",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False, index=True),
        sa.Column("book_id", sa.Integer(), sa.ForeignKey("books.id"), nullable=False, index=True),
        sa.Column("current_chapter", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("current_position", sa.Float(), nullable=False, server_default="0"),
        sa.Column("total_played", sa.Float(), nullable=False, server_default="0"),
        sa.Column("playback_speed", sa.Float(), nullable=False, server_default="1.0"),
        sa.Column(
            "is_completed", sa.Boolean(), nullable=False, server_default=sa.false(), index=True
        ),
        sa.Column("completion_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_played_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "book_id", name="uq_progress_user_book"),
    )
    op.create_table(
        "bookmarks",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column(
            "progress_id",
            sa.Integer(),
            sa.ForeignKey("user_progress.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("position", sa.Float(), nullable=False),
        sa.Column("note", sa.String(1000), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_table(
        "reviews",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False, index=True),
        sa.Column("book_id", sa.Integer(), sa.ForeignKey("books.id"), nullable=False, index=True),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "book_id", name="uq_review_user_book"),
    )
    op.create_table(
        "playlists",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False, index=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "playlist_books",
        sa.Column(
            "playlist_id",
            sa.Integer(),
            sa.ForeignKey("playlists.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("book_id", sa.Integer(), sa.ForeignKey("books.id"), primary_key=True),
    )


def downgrade() -> None:
    op.drop_table("playlist_books")
    op.drop_table("playlists")
    op.drop_table("reviews")
    op.drop_table("bookmarks")
    op.drop_table("user_progress")
    op.drop_table("chapters")
    op.drop_table("book_genres")
    op.drop_table("book_authors")
    op.drop_table("books")
    op.drop_table("user_preferred_genres")
    op.drop_table("users")
    op.drop_table("genres")
    op.drop_table("authors")
