"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - StudentId, LogId, ReviewId, ImageId wrap str — never mix ids across collections
    - Timestamps are integer epoch milliseconds (EpochMillis)
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders (durable slots are JSON text)
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

StudentId = NewType("StudentId", str)
LogId = NewType("LogId", str)
ReviewId = NewType("ReviewId", str)
ImageId = NewType("ImageId", str)


# ─── Value Types ─────────────────────────────────────────────────

EpochMillis = NewType("EpochMillis", int)


# ─── Enums ───────────────────────────────────────────────────────

class LessonChangeType(str, Enum):
    """Direction of a balance change — maps to LessonLog `type`."""
    CONSUME = "consume"
    REFILL = "refill"


class StorageSlot(str, Enum):
    """Fixed durable slot names, one per collection plus the passcode."""
    STUDENTS = "edu_students"
    LOGS = "edu_logs"
    REVIEWS = "edu_reviews"
    ARCHIVES = "edu_archives"
    ADMIN_PASSCODE = "edu_admin_passcode"


COLLECTION_SLOTS: tuple[StorageSlot, ...] = (
    StorageSlot.STUDENTS,
    StorageSlot.LOGS,
    StorageSlot.REVIEWS,
    StorageSlot.ARCHIVES,
)


class LoginOutcome(str, Enum):
    """Result of evaluating a submitted passcode against the stored one."""
    PASSCODE_SET = "passcode_set"
    GRANTED = "granted"
    REJECTED = "rejected"
    TOO_SHORT = "too_short"
