"""Ledger Enforcement — invariant-preserving mutations over LedgerState.

Invariants:
    - Every function is PURE: takes a LedgerState, returns a new one, never mutates
    - A rejected operation raises before any new state is built (no partial writes)
    - change_lesson_balance is the only path that touches remaining/total lessons
    - remaining_lessons never goes below zero through a consume
    - total_lessons grows only on refill, by exactly the refilled amount
    - Deleting a student drops its logs, reviews and archive images in the same state
    - Unknown ids on delete/change are silent no-ops (state returned unchanged)

Design Decisions:
    - Time passed in as now_ms: deterministic tests, shell owns the clock
    - Unchanged collections keep their tuple identity so the shell can tell which
      slots need rewriting (see ledger_codec.changed_slots)
"""

from dataclasses import replace
from typing import Iterable

from lessonbook.core.domain_types import (
    StudentId, LogId, ReviewId, ImageId, EpochMillis, LessonChangeType,
)
from lessonbook.core.errors import (
    ErrorContext, InsufficientBalanceError, InvalidInputError,
    ResourceNotFoundError,
)
from lessonbook.core.ledger_state import (
    ArchiveImage, LedgerState, LessonLog, Review, Student, new_id,
)

MIN_RATING: int = 1
MAX_RATING: int = 5

DEFAULT_NOTES: dict[LessonChangeType, str] = {
    LessonChangeType.CONSUME: "lesson consumed",
    LessonChangeType.REFILL: "lesson refilled",
}


# ─── Students ────────────────────────────────────────────────────

def add_student(
    state: LedgerState,
    name: str,
    phone: str,
    initial_lessons: int,
    now_ms: int,
) -> tuple[LedgerState, Student]:
    """Append a student whose remaining and total lessons both start at initial_lessons."""
    name, phone = name.strip(), phone.strip()
    if not name:
        raise InvalidInputError("Student name cannot be empty", "name")
    if not phone:
        raise InvalidInputError("Student phone cannot be empty", "phone")
    if initial_lessons < 0:
        raise InvalidInputError(
            f"Initial lessons must be >= 0, got {initial_lessons}",
            "initial_lessons",
        )

    student = Student(
        id=StudentId(new_id({s.id for s in state.students})),
        name=name,
        phone=phone,
        remaining_lessons=initial_lessons,
        total_lessons=initial_lessons,
        join_date=EpochMillis(now_ms),
    )
    return replace(state, students=state.students + (student,)), student


def delete_student(state: LedgerState, student_id: str) -> LedgerState:
    """Remove a student and cascade to every row that references it."""
    if state.find_student(student_id) is None:
        return state
    return LedgerState(
        students=tuple(s for s in state.students if s.id != student_id),
        logs=tuple(g for g in state.logs if g.student_id != student_id),
        reviews=tuple(r for r in state.reviews if r.student_id != student_id),
        archives=tuple(a for a in state.archives if a.student_id != student_id),
    )


# ─── Lesson balance ──────────────────────────────────────────────

def signed_amount(amount: int, change_type: LessonChangeType) -> int:
    """Normalize to negative for consume, positive for refill."""
    magnitude = abs(amount)
    return -magnitude if change_type == LessonChangeType.CONSUME else magnitude


def change_lesson_balance(
    state: LedgerState,
    student_id: str,
    amount: int,
    change_type: LessonChangeType,
    note: str | None,
    now_ms: int,
) -> tuple[LedgerState, LessonLog | None]:
    """Consume or refill lessons and prepend the matching log.

    Returns (state, None) unchanged when the student does not exist.
    Raises InsufficientBalanceError when a consume exceeds the balance.
    """
    student = state.find_student(student_id)
    if student is None:
        return state, None

    delta = signed_amount(amount, change_type)
    if delta == 0:
        raise InvalidInputError(
            "Lesson change amount cannot be zero", "amount",
            ErrorContext(student_id=student_id),
        )
    if change_type == LessonChangeType.CONSUME and -delta > student.remaining_lessons:
        raise InsufficientBalanceError(
            requested=-delta,
            available=student.remaining_lessons,
            context=ErrorContext(student_id=student_id),
        )

    updated = replace(
        student,
        remaining_lessons=student.remaining_lessons + delta,
        total_lessons=(
            student.total_lessons + delta
            if change_type == LessonChangeType.REFILL
            else student.total_lessons
        ),
    )
    log = LessonLog(
        id=LogId(new_id({g.id for g in state.logs})),
        student_id=student.id,
        student_name=student.name,
        amount=abs(delta),
        type=change_type,
        date=EpochMillis(now_ms),
        note=(note or "").strip() or DEFAULT_NOTES[change_type],
    )
    students = tuple(updated if s.id == student.id else s for s in state.students)
    return replace(state, students=students, logs=(log,) + state.logs), log


# ─── Reviews ─────────────────────────────────────────────────────

def add_review(
    state: LedgerState,
    student_id: str,
    student_name: str | None,
    content: str,
    rating: int,
    now_ms: int,
) -> tuple[LedgerState, Review]:
    """Prepend a review; content must be non-empty and rating within 1–5."""
    student = state.find_student(student_id)
    if student is None:
        raise ResourceNotFoundError("Student", student_id)
    content = content.strip()
    if not content:
        raise InvalidInputError(
            "Review content cannot be empty", "content",
            ErrorContext(student_id=student_id),
        )
    if not MIN_RATING <= rating <= MAX_RATING:
        raise InvalidInputError(
            f"Rating must be between {MIN_RATING} and {MAX_RATING}, got {rating}",
            "rating", ErrorContext(student_id=student_id),
        )

    review = Review(
        id=ReviewId(new_id({r.id for r in state.reviews})),
        student_id=student.id,
        student_name=(student_name or "").strip() or student.name,
        content=content,
        rating=rating,
        date=EpochMillis(now_ms),
    )
    return replace(state, reviews=(review,) + state.reviews), review


# ─── Archive images ──────────────────────────────────────────────

def add_archive_image(
    state: LedgerState,
    student_id: str,
    data_url: str,
    name: str,
    now_ms: int,
) -> tuple[LedgerState, ArchiveImage]:
    """Prepend one encoded image. Called once per finished upload."""
    if state.find_student(student_id) is None:
        raise ResourceNotFoundError("Student", student_id)

    image = ArchiveImage(
        id=ImageId(new_id({a.id for a in state.archives})),
        student_id=StudentId(student_id),
        url=data_url,
        name=name,
        date=EpochMillis(now_ms),
    )
    return replace(state, archives=(image,) + state.archives), image


def delete_archive_images(
    state: LedgerState, image_ids: Iterable[str],
) -> LedgerState:
    """Drop every image whose id is in image_ids; unknown ids are ignored."""
    doomed = set(image_ids)
    if not any(a.id in doomed for a in state.archives):
        return state
    return replace(
        state, archives=tuple(a for a in state.archives if a.id not in doomed),
    )
