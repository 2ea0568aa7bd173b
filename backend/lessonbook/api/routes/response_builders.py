"""Response Builders — core dataclasses to API response models.

Invariants:
    - Pure: read LedgerState, never mutate it
    - Derived fields (low balance, ratio, archive count) computed by core/ledger_queries
"""

from lessonbook.core.ledger_queries import (
    archive_counts, archive_download_name, balance_ratio, is_low_balance,
)
from lessonbook.core.ledger_state import ArchiveImage, LedgerState, Student
from lessonbook.schemas.ledger import ArchiveImageResponse, StudentResponse


def build_students(
    state: LedgerState, students: tuple[Student, ...],
) -> list[StudentResponse]:
    counts = archive_counts(state)
    return [
        StudentResponse.model_validate(s).model_copy(update={
            "is_low_balance": is_low_balance(s),
            "balance_ratio": balance_ratio(s),
            "archive_count": counts.get(s.id, 0),
        })
        for s in students
    ]


def build_student(state: LedgerState, student: Student) -> StudentResponse:
    return build_students(state, (student,))[0]


def build_images(images: tuple[ArchiveImage, ...] | list[ArchiveImage]) -> list[ArchiveImageResponse]:
    return [
        ArchiveImageResponse.model_validate(a).model_copy(
            update={"download_name": archive_download_name(a)},
        )
        for a in images
    ]
