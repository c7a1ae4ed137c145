"""Create books table with soft-delete column and lookup indexes.

Revision ID: 001_create_books
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_create_books"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "books",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("author", sa.String(255), nullable=False),
        sa.Column("isbn", sa.String(20), nullable=True, unique=True),
        sa.Column("published_date", sa.Date, nullable=True),
        sa.Column("genre", sa.String(100), nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_books_title_author", "books", ["title", "author"])
    op.create_index("ix_books_genre", "books", ["genre"])
    op.create_index("ix_books_deleted_at", "books", ["deleted_at"])


def downgrade() -> None:
    op.drop_index("ix_books_deleted_at", table_name="books")
    op.drop_index("ix_books_genre", table_name="books")
    op.drop_index("ix_books_title_author", table_name="books")
    op.drop_table("books")
