# esreport/search/client.py
"""HTTP access to the Elasticsearch search API and the Kibana saved-objects API."""

import json
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from esreport.core.config import SearchSettings
from esreport.core.exceptions import BackendError, BackendUnavailableError, MalformedResponseError
from esreport.search.schemas import (
    LogQueryRequest,
    SavedObjectResponse,
    SavedQuery,
    SearchPage,
    SearchResponse,
    SearchSource,
)

logger = logging.getLogger(__name__)


class ElasticsearchClient:
    """Thin async client over one shared connection pool.

    A single instance is created per application and shared by concurrent
    requests; it keeps no per-request state.
    """

    def __init__(
        self,
        settings: SearchSettings,
        http_client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            auth=(settings.username, settings.password) if settings.username else None,
            verify=settings.verify_ssl,
            timeout=settings.timeout_seconds,
            transport=transport,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    # ===== SEARCH =====

    def search_url(self, index_tag: str) -> str:
        """Search endpoint over every index of the tag (``<tag>-*``)."""
        return f"{self.settings.url}/{index_tag}-*/_search"

    async def fetch_page(
        self, query: str, request: LogQueryRequest, cursor: Optional[List[Any]] = None
    ) -> SearchPage:
        """Fetch one page of hits; with a cursor, continue after it via ``search_after``."""
        params: Dict[str, Any] = {"size": request.query_size, "q": query}
        if request.sort_field:
            params["sort"] = request.sort_field

        url = self.search_url(request.index_tag)
        if cursor:
            response = await self._send("POST", url, params=params, json={"search_after": list(cursor)})
        else:
            response = await self._send("GET", url, params=params)

        try:
            payload = SearchResponse.model_validate_json(response.content)
        except ValidationError as e:
            logger.error(f"Unexpected search response from {url}: {e}")
            raise MalformedResponseError(
                "Failed to parse search response", details={"url": url, "errors": e.error_count()}
            ) from e

        return SearchPage.from_response(payload)

    # ===== SAVED QUERIES =====

    async def get_saved_query(self, query_id: str) -> Optional[SavedQuery]:
        """
        Look up a saved search and return its query text.

        The saved object carries the search definition as a JSON string inside
        its JSON body, so it is decoded twice. Anything unusable along the way
        means there is no query to run and yields ``None``.
        """
        url = f"{self.settings.ui_endpoint}/saved_objects/search/{quote(query_id, safe='')}"
        try:
            response = await self._send("GET", url)
        except BackendError as e:
            if e.status == 404:
                logger.info(f"Saved query {query_id} not found")
                return None
            raise

        try:
            saved_object = SavedObjectResponse.model_validate_json(response.content)
        except ValidationError:
            logger.warning(f"Saved object {query_id} is not a valid saved search")
            return None

        meta = saved_object.attributes.kibana_saved_object_meta if saved_object.attributes else None
        if meta is None or not meta.search_source_json:
            return None

        try:
            source = SearchSource.model_validate(json.loads(meta.search_source_json))
        except (ValueError, ValidationError):
            logger.warning(f"Saved object {query_id} has an unreadable searchSourceJSON")
            return None

        if source.query is None or not isinstance(source.query.query, str):
            return None
        return SavedQuery(query=source.query.query, language=source.query.language)

    # ===== TRANSPORT =====

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._http.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            logger.error(f"Timed out calling {method} {url}: {e}")
            raise BackendUnavailableError(f"Search backend timed out: {url}") from e
        except httpx.TransportError as e:
            logger.error(f"Could not reach {method} {url}: {e}")
            raise BackendUnavailableError(f"Search backend unreachable: {url}") from e

        if not response.is_success:
            logger.error(f"{method} {url} returned {response.status_code}: {response.text[:500]}")
            raise BackendError(
                f"Search backend returned {response.status_code}",
                status=response.status_code,
                details={"status": response.status_code},
            )
        return response
