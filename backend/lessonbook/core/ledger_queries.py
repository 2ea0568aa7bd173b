"""Ledger Queries — read-only views the dashboard and student screens render.

Invariants:
    - All inputs come from LedgerState (no IO, no DB)
    - Never mutate state; returned tuples keep the collection's own ordering
    - A student is low-balance iff remaining_lessons < LOW_BALANCE_THRESHOLD

Design Decisions:
    - Pure functions, not methods on LedgerState: state is enforcement, these are presentation
    - `today` passed in: the calendar day is the caller's decision, tests stay deterministic
"""

from collections import Counter
from datetime import date, datetime, tzinfo

from lessonbook.core.domain_types import LessonChangeType
from lessonbook.core.ledger_state import (
    ArchiveImage, LedgerState, LessonLog, Review, Student,
)

LOW_BALANCE_THRESHOLD: int = 5
RECENT_LIMIT: int = 5


def filter_students(state: LedgerState, term: str = "") -> tuple[Student, ...]:
    """Students whose name or phone contains term (case-sensitive substring)."""
    if not term:
        return state.students
    return tuple(s for s in state.students if term in s.name or term in s.phone)


def is_low_balance(student: Student) -> bool:
    return student.remaining_lessons < LOW_BALANCE_THRESHOLD


def low_balance_students(state: LedgerState) -> tuple[Student, ...]:
    return tuple(s for s in state.students if is_low_balance(s))


def _log_day(log: LessonLog, tz: tzinfo | None) -> date:
    return datetime.fromtimestamp(log.date / 1000, tz).date()


def compute_dashboard_stats(
    state: LedgerState, today: date, tz: tzinfo | None = None,
) -> dict:
    """Headline counters. tz=None reads log dates in the host's local time."""
    return {
        "total_students": len(state.students),
        "total_remaining": sum(s.remaining_lessons for s in state.students),
        "today_consumptions": sum(
            1 for log in state.logs
            if log.type == LessonChangeType.CONSUME and _log_day(log, tz) == today
        ),
        "low_balance_count": len(low_balance_students(state)),
    }


def recent_logs(state: LedgerState, limit: int = RECENT_LIMIT) -> tuple[LessonLog, ...]:
    return state.logs[:limit]


def recent_reviews(state: LedgerState, limit: int = RECENT_LIMIT) -> tuple[Review, ...]:
    return state.reviews[:limit]


def student_logs(state: LedgerState, student_id: str) -> tuple[LessonLog, ...]:
    return tuple(log for log in state.logs if log.student_id == student_id)


def student_reviews(state: LedgerState, student_id: str) -> tuple[Review, ...]:
    return tuple(r for r in state.reviews if r.student_id == student_id)


def student_archive(state: LedgerState, student_id: str) -> tuple[ArchiveImage, ...]:
    return tuple(a for a in state.archives if a.student_id == student_id)


def archive_counts(state: LedgerState) -> dict[str, int]:
    """Image count per student id; students without images are absent."""
    return dict(Counter(a.student_id for a in state.archives))


def balance_ratio(student: Student) -> float:
    """Remaining / total, clamped to [0, 1]; 0 when nothing was ever bought."""
    if student.total_lessons <= 0:
        return 0.0
    return max(0.0, min(1.0, student.remaining_lessons / student.total_lessons))


def archive_download_name(image: ArchiveImage) -> str:
    return image.name or f"student-archive-{image.id}.png"
