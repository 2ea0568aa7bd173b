"""SQL Ledger Store — LedgerStore protocol over the storage_slots table.

Invariants:
    - read_slot returns None for a key that was never written
    - write_slots replaces every given slot in ONE transaction: either all land or none
    - Values are stored verbatim; parsing belongs to core/ledger_codec.py

Design Decisions:
    - session.get + assign over dialect-specific upsert: works the same on SQLite and PostgreSQL
    - Errors surface as StorageError via DatabaseSessionManager.session()
"""

import logging
from typing import Mapping

from sqlalchemy import select

from lessonbook.infrastructure.database import DatabaseSessionManager
from lessonbook.models.storage_slot import StorageSlotRecord

logger = logging.getLogger(__name__)


class SqlLedgerStore:
    """Durable slots backed by SQLAlchemy."""

    def __init__(self, db_manager: DatabaseSessionManager):
        self._db = db_manager

    async def read_slot(self, key: str) -> str | None:
        async with self._db.session() as db:
            result = await db.execute(
                select(StorageSlotRecord.value).where(StorageSlotRecord.key == key),
            )
            return result.scalar_one_or_none()

    async def write_slots(self, values: Mapping[str, str]) -> None:
        if not values:
            return
        async with self._db.session() as db:
            for key, value in values.items():
                record = await db.get(StorageSlotRecord, key)
                if record is None:
                    db.add(StorageSlotRecord(key=key, value=value))
                else:
                    record.value = value
            await db.commit()
        logger.debug(
            f"Wrote {len(values)} slot(s)", extra={"slot": ",".join(values)},
        )
