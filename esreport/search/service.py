# esreport/search/service.py
"""Orchestration of one log report: query resolution, pagination, rules, rendering."""

import logging
import time
from typing import Optional

from esreport.core.config import SearchSettings
from esreport.core.exceptions import InvalidSpecError
from esreport.search.client import ElasticsearchClient
from esreport.search.paginator import Paginator
from esreport.search.renderer import render_result, visible_table
from esreport.search.rules import RuleEngine
from esreport.search.schemas import LogProcessResult, LogQueryRequest, SavedQuery
from esreport.search.table import Table

logger = logging.getLogger(__name__)


class LogReportService:
    """Runs log queries against the search backend and shapes them into tables."""

    def __init__(self, client: ElasticsearchClient, settings: SearchSettings):
        self.client = client
        self.settings = settings

    async def get_saved_query(self, query_id: str) -> Optional[SavedQuery]:
        return await self.client.get_saved_query(query_id)

    async def resolve_query(self, request: LogQueryRequest) -> str:
        """A saved query id takes precedence over a literal query."""
        query: Optional[str] = None
        if request.saved_query_id and request.saved_query_id.strip():
            saved = await self.client.get_saved_query(request.saved_query_id)
            query = saved.query if saved else None
        else:
            query = request.lucene_query

        if not query or not query.strip():
            raise InvalidSpecError("Either saved_query_id or lucene_query must be provided")
        return query

    async def build_table(self, request: LogQueryRequest) -> Table:
        """Collect every hit, apply the rules and drop hidden columns."""
        query = await self.resolve_query(request)
        start_time = time.time()

        paginator = Paginator(
            self.client, max_pages=self.settings.max_pages, max_rows=self.settings.max_rows
        )
        collected = await paginator.collect(query, request)
        processed = RuleEngine(request).apply(collected)

        logger.info(
            f"Log report on {request.index_tag}: {len(collected)} rows collected, "
            f"{len(processed)} after rules in {(time.time() - start_time) * 1000:.0f} ms"
        )
        return visible_table(processed, request.hidden_columns)

    async def process_logs(self, request: LogQueryRequest) -> LogProcessResult:
        table = await self.build_table(request)
        return render_result(table, request)
