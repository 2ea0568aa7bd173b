"""Ledger Controller — single owner of the in-memory LedgerState and its durable slots.

Invariants:
    - All mutations go through this class; routes never build LedgerState themselves
    - Every mutation persists the changed slots BEFORE the new state becomes visible:
      a failed write leaves the in-memory state exactly as durable as before
    - Mutations are serialized by one asyncio.Lock (read-modify-write never interleaves)
    - Slots that fail to parse on load come up empty and are logged, never fatal

Design Decisions:
    - Explicit object on app.state over a module-level dict: tests build their own
      controller around an in-memory store
    - Uploads persist one image per completed encoding: order is completion order
"""

import asyncio
import logging
import time
from typing import Callable, Iterable

from lessonbook.core import enforce_ledger
from lessonbook.core.domain_types import COLLECTION_SLOTS, LessonChangeType
from lessonbook.core.errors import InsufficientBalanceError, ResourceNotFoundError
from lessonbook.core.ledger_codec import changed_slots, decode_state, encode_slots
from lessonbook.core.ledger_state import (
    ArchiveImage, LedgerState, LessonLog, Review, Student,
)
from lessonbook.core.repository_protocols import LedgerStore
from lessonbook.infrastructure.image_encoding import PendingUpload, encode_uploads

logger = logging.getLogger(__name__)


def now_millis() -> int:
    return int(time.time() * 1000)


class LedgerController:
    """Owns LedgerState; applies core operations and persists the result."""

    def __init__(
        self, store: LedgerStore, clock: Callable[[], int] = now_millis,
    ):
        self._store = store
        self._clock = clock
        self._state = LedgerState()
        self._lock = asyncio.Lock()
        self.load_problems: list[str] = []

    @property
    def state(self) -> LedgerState:
        return self._state

    async def load(self) -> list[str]:
        """Read all four slots; unreadable slots start empty. Returns the problems found."""
        raw = {}
        for slot in COLLECTION_SLOTS:
            raw[slot] = await self._store.read_slot(slot.value)
        state, problems = decode_state(raw.get)
        for problem in problems:
            logger.warning(f"Recovered from bad stored data: {problem}")
        async with self._lock:
            self._state = state
            self.load_problems = problems
        logger.info(
            f"Ledger loaded: {len(state.students)} students, {len(state.logs)} logs, "
            f"{len(state.reviews)} reviews, {len(state.archives)} images",
        )
        return problems

    async def _commit(self, new_state: LedgerState) -> None:
        """Persist changed slots, then publish. Caller holds the lock."""
        slots = changed_slots(self._state, new_state)
        if slots:
            await self._store.write_slots(encode_slots(new_state, slots))
        self._state = new_state

    # ─── Students ────────────────────────────────────────────────

    async def add_student(
        self, name: str, phone: str, initial_lessons: int,
    ) -> Student:
        async with self._lock:
            new_state, student = enforce_ledger.add_student(
                self._state, name, phone, initial_lessons, self._clock(),
            )
            await self._commit(new_state)
        logger.info("Student added", extra={"student_id": student.id})
        return student

    async def delete_student(self, student_id: str) -> bool:
        """Cascade-delete a student. False when the id was unknown (no-op)."""
        async with self._lock:
            new_state = enforce_ledger.delete_student(self._state, student_id)
            if new_state is self._state:
                return False
            await self._commit(new_state)
        logger.info("Student deleted with cascade", extra={"student_id": student_id})
        return True

    # ─── Lesson balance ──────────────────────────────────────────

    async def change_lesson_balance(
        self,
        student_id: str,
        amount: int,
        change_type: LessonChangeType,
        note: str | None = None,
    ) -> tuple[Student | None, LessonLog | None]:
        """Apply a consume/refill. (None, None) when the student is unknown."""
        async with self._lock:
            try:
                new_state, log = enforce_ledger.change_lesson_balance(
                    self._state, student_id, amount, change_type, note, self._clock(),
                )
            except InsufficientBalanceError as e:
                logger.warning(
                    e.message,
                    extra={"student_id": student_id, "error_code": e.code},
                )
                raise
            if log is None:
                return None, None
            await self._commit(new_state)
        logger.info(
            f"Lessons {change_type.value}: {log.amount}",
            extra={"student_id": student_id},
        )
        return new_state.find_student(student_id), log

    # ─── Reviews ─────────────────────────────────────────────────

    async def add_review(
        self,
        student_id: str,
        content: str,
        rating: int,
        student_name: str | None = None,
    ) -> Review:
        async with self._lock:
            new_state, review = enforce_ledger.add_review(
                self._state, student_id, student_name, content, rating, self._clock(),
            )
            await self._commit(new_state)
        logger.info("Review added", extra={"student_id": student_id})
        return review

    # ─── Archive ─────────────────────────────────────────────────

    async def add_archive_images(
        self, student_id: str, uploads: list[PendingUpload],
    ) -> list[ArchiveImage]:
        """Encode each upload independently and store it as soon as it finishes."""
        if self._state.find_student(student_id) is None:
            raise ResourceNotFoundError("Student", student_id)

        stored: list[ArchiveImage] = []
        async for encoded in encode_uploads(uploads):
            async with self._lock:
                if self._state.find_student(student_id) is None:
                    logger.warning(
                        "Student deleted during upload; dropping remaining images",
                        extra={"student_id": student_id},
                    )
                    break
                new_state, image = enforce_ledger.add_archive_image(
                    self._state, student_id, encoded.data_url,
                    encoded.filename, self._clock(),
                )
                await self._commit(new_state)
            stored.append(image)
        logger.info(
            "Archive images stored",
            extra={"student_id": student_id, "image_count": len(stored)},
        )
        return stored

    async def delete_archive_images(self, image_ids: Iterable[str]) -> int:
        """Remove the given images; returns how many actually existed."""
        ids = set(image_ids)
        async with self._lock:
            before = len(self._state.archives)
            new_state = enforce_ledger.delete_archive_images(self._state, ids)
            await self._commit(new_state)
            removed = before - len(new_state.archives)
        if removed:
            logger.info("Archive images deleted", extra={"image_count": removed})
        return removed
