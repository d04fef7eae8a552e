# esreport/logging/dao.py
"""Data access for the request log table."""

from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import String, cast, desc, func, or_, select
from sqlalchemy.orm import Session

from esreport.logging.models import Log


class LogDAO:
    """Queries over persisted request logs."""

    def __init__(self, db_session: Session):
        self.db = db_session

    def get_by_id(self, log_id: int) -> Optional[Log]:
        return self.db.get(Log, log_id)

    def create(self, **data) -> Log:
        log = Log(**data)
        self.db.add(log)
        self.db.commit()
        self.db.refresh(log)
        return log

    def _filtered(self, query, hours: int, status_min: Optional[int], status_max: Optional[int], search: Optional[str]):
        time_threshold = datetime.now() - timedelta(hours=hours)
        query = query.where(Log.timestamp >= time_threshold)

        if status_min is not None:
            query = query.where(Log.status_code >= status_min)
        if status_max is not None:
            query = query.where(Log.status_code <= status_max)

        if search:
            search_term = f"%{search}%"
            query = query.where(
                or_(
                    Log.path.ilike(search_term),
                    Log.method.ilike(search_term),
                    Log.client_ip.ilike(search_term),
                    Log.username.ilike(search_term),
                    Log.hostname.ilike(search_term),
                    cast(Log.status_code, String).ilike(search_term),
                )
            )
        return query

    def get_logs_with_filters(
        self,
        limit: int = 50,
        offset: int = 0,
        hours: int = 24,
        status_min: Optional[int] = None,
        status_max: Optional[int] = None,
        search: Optional[str] = None,
    ) -> List[Log]:
        """Most recent logs first, filtered by time window, status range and search term."""
        query = self._filtered(select(Log), hours, status_min, status_max, search)
        query = query.order_by(desc(Log.timestamp)).offset(offset).limit(limit)
        return list(self.db.execute(query).scalars().all())

    def count_logs_with_filters(
        self,
        hours: int = 24,
        status_min: Optional[int] = None,
        status_max: Optional[int] = None,
        search: Optional[str] = None,
    ) -> int:
        query = self._filtered(select(func.count()).select_from(Log), hours, status_min, status_max, search)
        return self.db.execute(query).scalar_one()

    def get_error_logs(self, hours: int = 24, limit: int = 100) -> List[Log]:
        """Responses with a status of 400 or above."""
        query = self._filtered(select(Log), hours, 400, None, None)
        query = query.order_by(desc(Log.timestamp)).limit(limit)
        return list(self.db.execute(query).scalars().all())
