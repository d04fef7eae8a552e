# esreport/core/dependencies.py
"""Shared FastAPI dependencies."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from esreport.core.config import SearchSettings
from esreport.core.database import get_db
from esreport.search.client import ElasticsearchClient

SessionDep = Annotated[Session, Depends(get_db)]


def get_search_settings(request: Request) -> SearchSettings:
    return request.app.state.settings


def get_search_client(request: Request) -> ElasticsearchClient:
    """The application-wide client created in the lifespan handler."""
    return request.app.state.search_client


SettingsDep = Annotated[SearchSettings, Depends(get_search_settings)]
SearchClientDep = Annotated[ElasticsearchClient, Depends(get_search_client)]
