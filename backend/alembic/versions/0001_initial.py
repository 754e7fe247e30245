"""initial catalog schema

Revision ID: 0001_initial
Revises: 
Create Date: 2024-07-01
"""

from alembic import op
import sqlalchemy as sa

revision = "0001_initial"

down_revision = None

branch_labels = None

depends_on = None


def upgrade() -> None:
    op.create_table(
        "books",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(length=512), nullable=False),
        sa.Column("author", sa.String(length=255), nullable=True),
        sa.Column("bookNumber", sa.String(length=255), nullable=True),
        sa.Column("pdfUrl", sa.Text(), nullable=True),
        sa.Column("publicId", sa.String(length=512), nullable=True),
    )
    op.create_index("ix_books_bookNumber", "books", ["bookNumber"])

    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
    )
    op.create_index("ix_categories_name", "categories", ["name"])

    op.create_table(
        "book_categories",
        sa.Column("book_id", sa.Integer(), sa.ForeignKey("books.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
    )
    op.create_index("ix_book_categories_category_id", "book_categories", ["category_id"])

    op.create_table(
        "videos",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(length=512), nullable=False),
        sa.Column("youtube_url", sa.Text(), nullable=False),
        sa.Column("academic_year", sa.String(length=32), nullable=False),
    )
    op.create_index("ix_videos_id", "videos", ["id"])
    op.create_index("ix_videos_academic_year", "videos", ["academic_year"])


def downgrade() -> None:
    op.drop_table("videos")
    op.drop_table("book_categories")
    op.drop_table("categories")
    op.drop_table("books")
