# esreport/logging/router.py
"""API router for browsing the request log."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from esreport.core.dependencies import SessionDep
from esreport.logging.dao import LogDAO
from esreport.logging.schemas import LogRead
from esreport.logging.service import LogService

router = APIRouter(
    prefix="/logs",
    tags=["logs"],
)


# ===== DEPENDENCY INJECTION =====


def get_log_dao(session: SessionDep) -> LogDAO:
    return LogDAO(session)


def get_log_service(log_dao: LogDAO = Depends(get_log_dao)) -> LogService:
    return LogService(log_dao)


# ===== LOG RETRIEVAL ENDPOINTS =====


@router.get("/", response_model=List[LogRead])
def get_logs(
    response: Response,
    limit: int = Query(50, ge=1, le=1000, description="Maximum number of logs to return"),
    offset: int = Query(0, ge=0, description="Number of logs to skip"),
    hours: int = Query(24, ge=1, le=168, description="Time window in hours"),
    status_min: Optional[int] = Query(None, ge=100, le=599, description="Minimum status code"),
    status_max: Optional[int] = Query(None, ge=100, le=599, description="Maximum status code"),
    search: Optional[str] = Query(None, description="Search term for filtering logs"),
    log_service: LogService = Depends(get_log_service),
) -> List[LogRead]:
    """Get logs with pagination and filtering."""
    if status_min is not None and status_max is not None and status_min > status_max:
        raise HTTPException(status_code=400, detail="status_min cannot be greater than status_max")

    logs = log_service.get_logs_with_filters(
        limit=limit,
        offset=offset,
        hours=hours,
        status_min=status_min,
        status_max=status_max,
        search=search,
    )
    total_count = log_service.get_logs_count_with_filters(
        hours=hours, status_min=status_min, status_max=status_max, search=search
    )

    # Pagination headers
    response.headers["X-Total-Count"] = str(total_count)
    response.headers["X-Page-Size"] = str(limit)
    response.headers["X-Page-Offset"] = str(offset)

    return logs


@router.get("/errors", response_model=List[LogRead])
def get_error_logs(
    hours: int = Query(24, ge=1, le=168),
    limit: int = Query(100, ge=1, le=1000),
    log_service: LogService = Depends(get_log_service),
) -> List[LogRead]:
    return log_service.get_error_logs(hours=hours, limit=limit)
