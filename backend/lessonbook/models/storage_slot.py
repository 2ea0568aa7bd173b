"""StorageSlot ORM — one durable key holding one serialized collection.

Invariants:
    - key is the primary key (edu_students, edu_logs, edu_reviews, edu_archives,
      edu_admin_passcode)
    - value is the full JSON text of the collection (full-replace on write)
    - updated_at moves on every write

Design Decisions:
    - Key-value table over one table per entity: keeps the store contract of four
      independent slots, and rows written by older installs load unchanged
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from lessonbook.db.base import Base


class StorageSlotRecord(Base):
    """A named durable slot."""
    __tablename__ = "storage_slots"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
        onupdate=lambda: datetime.now(timezone.utc),
    )
