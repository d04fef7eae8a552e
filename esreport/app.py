"""FastAPI application factory for the log report service."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import sessionmaker

from esreport.core.config import SearchSettings, get_settings
from esreport.core.database import SessionLocal, init_db
from esreport.core.exceptions import LogReportError
from esreport.core.router import register_routes
from esreport.logging.exception_handlers import (
    general_exception_handler,
    http_exception_handler,
    log_report_exception_handler,
    request_validation_exception_handler,
)
from esreport.logging.middleware import LoggingMiddleware
from esreport.search.client import ElasticsearchClient

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[SearchSettings] = None,
    session_factory: sessionmaker = SessionLocal,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Backend settings; read from the environment when omitted.
        session_factory: Session factory for the request log store.
        transport: Optional httpx transport for the search backend.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.search_client = ElasticsearchClient(settings, transport=transport)
        logger.info(f"Search backend: {settings.url}, saved objects: {settings.ui_endpoint}")
        try:
            yield
        finally:
            await app.state.search_client.aclose()

    app = FastAPI(
        title="Elasticsearch Log Report",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.session_factory = session_factory
    init_db(bind=session_factory.kw.get("bind"))

    app.add_middleware(LoggingMiddleware)

    app.add_exception_handler(LogReportError, log_report_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app
