"""Ledger Schemas — Pydantic models with field-level validation for API boundaries.

Invariants:
    - StudentCreate: name/phone stripped and non-empty, initial_lessons >= 0
    - LessonChange.amount is a positive magnitude; the sign comes from `type`
    - ReviewCreate.rating bounded 1–5 (core re-checks)
    - Response models read core dataclasses via from_attributes

Design Decisions:
    - Literal-like str Enum (LessonChangeType) reused from core: one source of truth
    - field_validator for side-effect-free transforms (strip) — keeps models pure
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from lessonbook.core.domain_types import LessonChangeType


def _strip_required(v: str, name: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError(f"{name} cannot be empty or whitespace")
    return v


# --- Requests ----------------------------------------------------------------

class StudentCreate(BaseModel):
    """Add-student form; a new student starts with 20 lessons unless told otherwise."""
    name: str = Field(min_length=1, max_length=100)
    phone: str = Field(min_length=1, max_length=40)
    initial_lessons: int = Field(20, ge=0, le=10_000)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return _strip_required(v, "name")

    @field_validator("phone")
    @classmethod
    def strip_phone(cls, v: str) -> str:
        return _strip_required(v, "phone")


class LessonChange(BaseModel):
    """Consume or refill request."""
    amount: int = Field(1, ge=1, le=10_000)
    type: LessonChangeType
    note: str | None = Field(None, max_length=500)


class ReviewCreate(BaseModel):
    content: str = Field(min_length=1, max_length=5000)
    rating: int = Field(5, ge=1, le=5)
    student_name: str | None = Field(None, max_length=100)

    @field_validator("content")
    @classmethod
    def strip_content(cls, v: str) -> str:
        return _strip_required(v, "content")


class ImageDeleteRequest(BaseModel):
    ids: list[str] = Field(min_length=1, max_length=1000)
    confirm: bool = False


class LoginRequest(BaseModel):
    passcode: str = Field(min_length=1, max_length=200)


# --- Responses ---------------------------------------------------------------

class StudentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    phone: str
    remaining_lessons: int
    total_lessons: int
    join_date: int
    is_low_balance: bool = False
    balance_ratio: float = 0.0
    archive_count: int = 0


class LessonLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    student_name: str
    amount: int
    type: LessonChangeType
    date: int
    note: str


class ReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    student_name: str
    content: str
    rating: int
    date: int


class ArchiveImageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    url: str
    name: str
    date: int
    download_name: str = ""


class LessonChangeResponse(BaseModel):
    """applied=False means the student did not exist (silent no-op)."""
    applied: bool
    student: StudentResponse | None = None
    log: LessonLogResponse | None = None


class StudentDetailResponse(BaseModel):
    student: StudentResponse
    logs: list[LessonLogResponse]
    reviews: list[ReviewResponse]


class DashboardStats(BaseModel):
    total_students: int
    total_remaining: int
    today_consumptions: int
    low_balance_count: int


class DashboardResponse(BaseModel):
    stats: DashboardStats
    recent_logs: list[LessonLogResponse]
    recent_reviews: list[ReviewResponse]
    low_balance_students: list[StudentResponse]


class DeleteResponse(BaseModel):
    deleted: int


class LoginResponse(BaseModel):
    token: str
    first_run: bool


class GateStatusResponse(BaseModel):
    passcode_set: bool
    authenticated: bool
