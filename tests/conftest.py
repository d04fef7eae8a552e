"""
Test configuration and shared fixtures for the log report test suite.
Provides the request log database, a fake search backend and the API client.
"""

import json
from typing import Any, Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from esreport.app import create_app
from esreport.core.config import SearchSettings
from esreport.core.database import Base, get_db

ES_URL = "http://es.test:9200"
UI_ENDPOINT = "http://kibana.test:5601/api"


# ===== FAKE SEARCH BACKEND =====


def _make_hit(source: Optional[Dict[str, Any]], sort: Optional[List[Any]] = None) -> Dict[str, Any]:
    """A search hit as the backend returns it."""
    hit: Dict[str, Any] = {"_index": "app-2024.01.01", "_id": "x", "_score": None, "_source": source}
    if sort is not None:
        hit["sort"] = sort
    return hit


def _make_saved_search(query: Any, language: str = "lucene") -> Dict[str, Any]:
    """A saved search object; the search source is stored as a JSON string."""
    search_source = {"query": {"query": query, "language": language}, "filter": []}
    return {
        "id": "saved",
        "type": "search",
        "attributes": {
            "title": "Saved",
            "kibanaSavedObjectMeta": {"searchSourceJSON": json.dumps(search_source)},
        },
    }


class FakeSearchBackend:
    """Serves queued search pages and saved objects over httpx.MockTransport."""

    hit = staticmethod(_make_hit)
    saved_search = staticmethod(_make_saved_search)

    def __init__(self):
        self.pages: List[List[Dict[str, Any]]] = []
        self.saved_objects: Dict[str, Dict[str, Any]] = {}
        self.requests: List[httpx.Request] = []
        self.search_status = 200

    @property
    def search_requests(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/_search")]

    def add_page(self, *hits: Dict[str, Any]) -> None:
        self.pages.append(list(hits))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if "/saved_objects/search/" in request.url.path:
            query_id = request.url.path.rsplit("/", 1)[-1]
            if query_id not in self.saved_objects:
                return httpx.Response(404, json={"statusCode": 404, "error": "Not Found"})
            return httpx.Response(200, json=self.saved_objects[query_id])

        if self.search_status != 200:
            return httpx.Response(self.search_status, text="backend failure")

        page_number = len(self.search_requests) - 1
        hits = self.pages[page_number] if page_number < len(self.pages) else []
        return httpx.Response(
            200,
            json={"took": 1, "timed_out": False, "hits": {"total": {"value": len(hits)}, "hits": hits}},
        )


@pytest.fixture
def backend() -> FakeSearchBackend:
    """Fake search backend with no pages queued."""
    return FakeSearchBackend()


@pytest.fixture
def settings() -> SearchSettings:
    """Settings pointing at the fake backend with small pagination guards"""
    return SearchSettings(url=ES_URL, ui_endpoint=UI_ENDPOINT, max_pages=20, max_rows=1000)


# ===== DATABASE SETUP =====


@pytest.fixture
def log_engine():
    """Create in-memory SQLite engine for the request log"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    from esreport.logging.models import Log  # noqa: F401

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(log_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=log_engine)


@pytest.fixture
def db_session(session_factory):
    """Create a database session for the request log"""
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


# ===== API CLIENT =====


@pytest.fixture
def app(settings, session_factory, backend):
    """Application wired to the fake backend and the in-memory log store"""
    return create_app(
        settings=settings,
        session_factory=session_factory,
        transport=httpx.MockTransport(backend.handler),
    )


@pytest.fixture
def client(app, db_session):
    """Create FastAPI test client with database overrides"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
