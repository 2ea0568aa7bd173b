"""ORM Models — SQLAlchemy declarative models for durable storage.

Invariants:
    - All models inherit from Base (db/base.py)
    - Ledger collections live in storage_slots as whole JSON documents, not row tables

Design Decisions:
    - All models imported here so Base.metadata is complete before create_all/autogenerate
"""

from lessonbook.models.storage_slot import StorageSlotRecord  # noqa: F401
