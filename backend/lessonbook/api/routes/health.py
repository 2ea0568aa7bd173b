"""Health Probes — liveness, and readiness of the database and the loaded ledger.

Invariants:
    - GET /health/ answers 200 whenever the process is up
    - GET /health/ready answers 503 when the database cannot be reached
    - Slots that loaded empty because of bad data are reported, not treated as down
"""

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/")
async def liveness():
    return {"status": "healthy", "service": "lessonbook-api"}


@router.get("/ready")
async def readiness(request: Request):
    db_manager = getattr(request.app.state, "db_manager", None)
    ledger = getattr(request.app.state, "ledger", None)
    if db_manager is None or not await db_manager.health_check():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "database_unavailable"},
        )
    checks = {"database": "healthy"}
    if ledger is not None:
        checks["ledger"] = {
            "students": len(ledger.state.students),
            "recovered_slots": len(ledger.load_problems),
        }
    return {"status": "ready", "checks": checks}
