# esreport/search/paginator.py
"""Exhaustive ``search_after`` pagination feeding the row expander."""

import logging
from typing import Any, List, Optional, Protocol

from esreport.core.exceptions import PaginationLimitError
from esreport.search.row_expander import expand_all
from esreport.search.schemas import LogQueryRequest, SearchPage
from esreport.search.table import Row, Table

logger = logging.getLogger(__name__)


class PageFetcher(Protocol):
    async def fetch_page(
        self, query: str, request: LogQueryRequest, cursor: Optional[List[Any]] = None
    ) -> SearchPage: ...


class Paginator:
    """Fetch every page of a query and accumulate its rows.

    Each request continues from the sort values of the previous page's last
    hit. Pagination stops on an empty page, on a hit without sort values, or
    when the cursor stops advancing; a page repeating the previous cursor is
    not added. ``max_pages`` bounds the pages that carry hits, so the empty
    page ending a result never trips it. Any fetch error propagates and the
    rows gathered so far are dropped with it.
    """

    def __init__(self, fetcher: PageFetcher, max_pages: int = 1000, max_rows: int = 1_000_000):
        self.fetcher = fetcher
        self.max_pages = max_pages
        self.max_rows = max_rows

    async def collect(self, query: str, request: LogQueryRequest) -> Table:
        columns = request.column_labels
        paths = request.table_values

        rows: List[Row] = []
        cursor: Optional[List[Any]] = None
        pages = 0

        while True:
            page = await self.fetcher.fetch_page(query, request, cursor)
            logger.debug(f"Page {pages + 1} of {request.index_tag}: {len(page.documents)} hits")

            if page.is_empty:
                break
            # A backend ignoring search_after serves the previous page again
            if cursor is not None and page.cursor == cursor:
                logger.warning(f"Cursor {cursor} did not advance on {request.index_tag}; stopping")
                break

            # Only pages carrying hits count against the guard
            pages += 1
            if pages > self.max_pages:
                raise PaginationLimitError(
                    f"Stopped after {self.max_pages} pages without reaching the end of the results",
                    details={"max_pages": self.max_pages, "rows": len(rows)},
                )

            rows.extend(expand_all(page.documents, columns, paths))
            if len(rows) > self.max_rows:
                raise PaginationLimitError(
                    f"Result exceeds {self.max_rows} rows",
                    details={"max_rows": self.max_rows, "pages": pages},
                )

            if not page.has_more:
                break
            cursor = page.cursor

        logger.info(f"Collected {len(rows)} rows from {pages} pages of {request.index_tag}")
        return Table.build(columns, rows)
