"""Create the per-user document store.

Revision ID: 20261017_0001
Revises:
Create Date: 2026-10-17
"""

from __future__ import annotations

from typing import Sequence

import sqlalchemy as sa
from alembic import op

from app.db_types import JSONDocument

revision = "20261017_0001"
down_revision = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "documents",
        sa.Column("document_id", sa.String(length=32), primary_key=True),
        sa.Column("collection", sa.String(length=64), nullable=False),
        sa.Column("owner_id", sa.String(length=128), nullable=False),
        sa.Column("data", JSONDocument(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_documents_collection_owner",
        "documents",
        ["collection", "owner_id"],
    )


def downgrade() -> None:
    op.drop_index("ix_documents_collection_owner", table_name="documents")
    op.drop_table("documents")
