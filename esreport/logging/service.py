# esreport/logging/service.py
"""Service layer for the request log."""

from typing import List, Optional

from esreport.logging.dao import LogDAO
from esreport.logging.schemas import LogRead


class LogService:
    """Read access to persisted request logs."""

    def __init__(self, log_dao: LogDAO):
        self.dao = log_dao

    def get_logs_with_filters(
        self,
        limit: int = 50,
        offset: int = 0,
        hours: int = 24,
        status_min: Optional[int] = None,
        status_max: Optional[int] = None,
        search: Optional[str] = None,
    ) -> List[LogRead]:
        logs = self.dao.get_logs_with_filters(
            limit=limit,
            offset=offset,
            hours=hours,
            status_min=status_min,
            status_max=status_max,
            search=search,
        )
        return [LogRead.model_validate(log) for log in logs]

    def get_logs_count_with_filters(
        self,
        hours: int = 24,
        status_min: Optional[int] = None,
        status_max: Optional[int] = None,
        search: Optional[str] = None,
    ) -> int:
        return self.dao.count_logs_with_filters(
            hours=hours, status_min=status_min, status_max=status_max, search=search
        )

    def get_error_logs(self, hours: int = 24, limit: int = 100) -> List[LogRead]:
        return [LogRead.model_validate(log) for log in self.dao.get_error_logs(hours=hours, limit=limit)]
