"""Ledger Views — transaction history and the dashboard.

Invariants:
    - Read-only: no route here mutates the ledger
    - History is newest-first, exactly the stored log order
    - "Today" is the server's local calendar day
"""

from datetime import date

from fastapi import APIRouter, Depends, Query

from lessonbook.api.dependencies import get_controller, require_session
from lessonbook.api.routes.response_builders import build_students
from lessonbook.core.ledger_queries import (
    compute_dashboard_stats, low_balance_students, recent_logs, recent_reviews,
)
from lessonbook.schemas.ledger import (
    DashboardResponse, DashboardStats, LessonLogResponse, ReviewResponse,
)
from lessonbook.services.ledger_controller import LedgerController

router = APIRouter(
    prefix="/api/v1", tags=["ledger"], dependencies=[Depends(require_session)],
)


@router.get("/logs", response_model=list[LessonLogResponse])
async def list_logs(
    limit: int | None = Query(None, ge=1, le=10_000),
    ledger: LedgerController = Depends(get_controller),
):
    logs = ledger.state.logs
    if limit is not None:
        logs = logs[:limit]
    return [LessonLogResponse.model_validate(g) for g in logs]


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(ledger: LedgerController = Depends(get_controller)):
    state = ledger.state
    return DashboardResponse(
        stats=DashboardStats(**compute_dashboard_stats(state, date.today())),
        recent_logs=[LessonLogResponse.model_validate(g) for g in recent_logs(state)],
        recent_reviews=[
            ReviewResponse.model_validate(r) for r in recent_reviews(state)
        ],
        low_balance_students=build_students(state, low_balance_students(state)),
    )
