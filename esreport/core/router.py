# esreport/core/router.py
"""Registration of the API routers."""

from fastapi import APIRouter, FastAPI

from esreport.logging.router import router as log_router
from esreport.search.router import router as search_router

health_router = APIRouter(tags=["health"])


@health_router.get("/health")
def health() -> dict:
    return {"status": "ok"}


def register_routes(app: FastAPI) -> None:
    """
    Registers all the routes for the FastAPI application.

    Args:
        app (FastAPI): The FastAPI application instance.
    """
    app.include_router(search_router, prefix="/api")
    app.include_router(log_router, prefix="/api")
    app.include_router(health_router, prefix="/api")
