"""Students — roster CRUD, lesson balance changes and reviews.

Invariants:
    - All routes require a live session token
    - DELETE needs confirm=true; without it nothing is touched (409)
    - Unknown student on delete/lesson change is a silent no-op (200, nothing applied)
    - Consume beyond the balance is rejected with INSUFFICIENT_BALANCE (400)

Design Decisions:
    - Search is a query parameter on the list route, matching the single search box
    - low-balance declared before /{student_id} so the literal path wins
"""

from fastapi import APIRouter, Depends, Query, status

from lessonbook.api.dependencies import get_controller, require_session
from lessonbook.api.routes.response_builders import build_student, build_students
from lessonbook.core.errors import ConfirmationRequiredError, ResourceNotFoundError
from lessonbook.core.ledger_queries import (
    filter_students, low_balance_students, student_logs, student_reviews,
)
from lessonbook.schemas.ledger import (
    DeleteResponse, LessonChange, LessonChangeResponse, LessonLogResponse,
    ReviewCreate, ReviewResponse, StudentCreate, StudentDetailResponse,
    StudentResponse,
)
from lessonbook.services.ledger_controller import LedgerController

router = APIRouter(
    prefix="/api/v1/students", tags=["students"],
    dependencies=[Depends(require_session)],
)


@router.get("", response_model=list[StudentResponse])
async def list_students(
    q: str = Query("", max_length=100),
    ledger: LedgerController = Depends(get_controller),
):
    """Roster in join order, optionally filtered by name/phone substring."""
    state = ledger.state
    return build_students(state, filter_students(state, q.strip()))


@router.get("/low-balance", response_model=list[StudentResponse])
async def list_low_balance(ledger: LedgerController = Depends(get_controller)):
    state = ledger.state
    return build_students(state, low_balance_students(state))


@router.post(
    "", response_model=StudentResponse, status_code=status.HTTP_201_CREATED,
)
async def create_student(
    body: StudentCreate, ledger: LedgerController = Depends(get_controller),
):
    student = await ledger.add_student(body.name, body.phone, body.initial_lessons)
    return build_student(ledger.state, student)


@router.get("/{student_id}", response_model=StudentDetailResponse)
async def get_student(
    student_id: str, ledger: LedgerController = Depends(get_controller),
):
    """Student card plus its own log and review history (newest first)."""
    state = ledger.state
    student = state.find_student(student_id)
    if student is None:
        raise ResourceNotFoundError("Student", student_id)
    return StudentDetailResponse(
        student=build_student(state, student),
        logs=[LessonLogResponse.model_validate(g) for g in student_logs(state, student_id)],
        reviews=[
            ReviewResponse.model_validate(r) for r in student_reviews(state, student_id)
        ],
    )


@router.delete("/{student_id}", response_model=DeleteResponse)
async def delete_student(
    student_id: str,
    confirm: bool = Query(False),
    ledger: LedgerController = Depends(get_controller),
):
    """Delete a student with all its logs, reviews and images."""
    if not confirm:
        raise ConfirmationRequiredError("Deleting a student")
    deleted = await ledger.delete_student(student_id)
    return DeleteResponse(deleted=1 if deleted else 0)


@router.post("/{student_id}/lessons", response_model=LessonChangeResponse)
async def change_lessons(
    student_id: str,
    body: LessonChange,
    ledger: LedgerController = Depends(get_controller),
):
    student, log = await ledger.change_lesson_balance(
        student_id, body.amount, body.type, body.note,
    )
    if student is None:
        return LessonChangeResponse(applied=False)
    return LessonChangeResponse(
        applied=True,
        student=build_student(ledger.state, student),
        log=LessonLogResponse.model_validate(log),
    )


@router.get("/{student_id}/logs", response_model=list[LessonLogResponse])
async def list_student_logs(
    student_id: str, ledger: LedgerController = Depends(get_controller),
):
    return [
        LessonLogResponse.model_validate(g)
        for g in student_logs(ledger.state, student_id)
    ]


@router.post(
    "/{student_id}/reviews", response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_review(
    student_id: str,
    body: ReviewCreate,
    ledger: LedgerController = Depends(get_controller),
):
    review = await ledger.add_review(
        student_id, body.content, body.rating, student_name=body.student_name,
    )
    return ReviewResponse.model_validate(review)


@router.get("/{student_id}/reviews", response_model=list[ReviewResponse])
async def list_student_reviews(
    student_id: str, ledger: LedgerController = Depends(get_controller),
):
    return [
        ReviewResponse.model_validate(r)
        for r in student_reviews(ledger.state, student_id)
    ]
