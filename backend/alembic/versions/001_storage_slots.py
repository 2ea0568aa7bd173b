"""Initial schema — storage_slots key-value table.

Revision ID: 001_storage_slots
Revises: None
Create Date: 2026-10-18

One row per durable slot (edu_students, edu_logs, edu_reviews, edu_archives,
edu_admin_passcode); value holds the whole serialized collection.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_storage_slots"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "storage_slots",
        sa.Column("key", sa.String(64), nullable=False),
        sa.Column("value", sa.Text, nullable=False),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), nullable=False,
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("key", name="pk_storage_slots"),
    )


def downgrade() -> None:
    op.drop_table("storage_slots")
