"""Ledger State — entity shapes and the aggregate that owns the four collections.

Invariants:
    - Entities are frozen: a LessonLog or Review is never mutated after creation
    - LedgerState holds tuples, so every operation yields a new state
    - students keeps append order; logs, reviews, archives keep newest-first order
    - Ids are unique within their collection (new_id retries on collision)

Design Decisions:
    - Frozen dataclasses over dicts: a rejected operation cannot leave a half-updated
      student behind, the old state is still the one the controller holds
    - Base-36, 9-char ids: same shape as rows already sitting in existing stores
"""

import secrets
from dataclasses import dataclass, field

from lessonbook.core.domain_types import (
    StudentId, LogId, ReviewId, ImageId, EpochMillis, LessonChangeType,
)

ID_LENGTH: int = 9
_ID_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


@dataclass(frozen=True)
class Student:
    """Root entity — every other record references a student by id."""
    id: StudentId
    name: str
    phone: str
    remaining_lessons: int
    total_lessons: int
    join_date: EpochMillis


@dataclass(frozen=True)
class LessonLog:
    """Append-only audit row of one balance change."""
    id: LogId
    student_id: StudentId
    student_name: str
    amount: int
    type: LessonChangeType
    date: EpochMillis
    note: str


@dataclass(frozen=True)
class Review:
    """Teacher's qualitative note on a student."""
    id: ReviewId
    student_id: StudentId
    student_name: str
    content: str
    rating: int
    date: EpochMillis


@dataclass(frozen=True)
class ArchiveImage:
    """One uploaded image, stored as a data URL."""
    id: ImageId
    student_id: StudentId
    url: str
    name: str
    date: EpochMillis


@dataclass(frozen=True)
class LedgerState:
    """The four collections — pure value, no IO."""

    students: tuple[Student, ...] = field(default_factory=tuple)
    logs: tuple[LessonLog, ...] = field(default_factory=tuple)
    reviews: tuple[Review, ...] = field(default_factory=tuple)
    archives: tuple[ArchiveImage, ...] = field(default_factory=tuple)

    def find_student(self, student_id: str) -> Student | None:
        return next((s for s in self.students if s.id == student_id), None)

    def find_image(self, image_id: str) -> ArchiveImage | None:
        return next((a for a in self.archives if a.id == image_id), None)


def new_id(taken: set[str] | frozenset[str] = frozenset()) -> str:
    """Random base-36 id not present in `taken`."""
    while True:
        candidate = "".join(
            secrets.choice(_ID_ALPHABET) for _ in range(ID_LENGTH)
        )
        if candidate not in taken:
            return candidate
