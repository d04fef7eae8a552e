# esreport/logging/exception_handlers.py
"""Map pipeline errors to HTTP responses.

Handled errors come back as ordinary responses and are recorded by the
logging middleware. Unhandled exceptions never reach the middleware, so the
general handler stores its own log entry.
"""

import json
import logging
import traceback
from datetime import datetime

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from esreport.core.config import APPLICATION_ID
from esreport.core.exceptions import LogReportError
from esreport.logging.middleware import current_hostname, current_username
from esreport.logging.models import Log

logger = logging.getLogger(__name__)


def safe_json_dumps(obj) -> str:
    return json.dumps(obj, indent=2, default=str)


async def log_report_exception_handler(request: Request, exc: LogReportError):
    logger.warning(f"{request.method} {request.url.path} failed: {type(exc).__name__}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_detail()})


async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """Validation errors with every value converted to something JSON can hold."""

    def convert_error(error):
        if isinstance(error, dict):
            return {k: convert_error(v) for k, v in error.items()}
        elif isinstance(error, (list, tuple)):
            return [convert_error(item) for item in error]
        elif error is None or isinstance(error, (str, int, float, bool)):
            return error
        return str(error)

    return JSONResponse(status_code=422, content={"detail": convert_error(exc.errors())})


async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions and log them to the database."""
    error_traceback = traceback.format_exc()
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}")

    try:
        with request.app.state.session_factory() as session:
            session.add(
                Log(
                    timestamp=datetime.now(),
                    method=request.method,
                    path=str(request.url.path),
                    status_code=500,
                    client_ip=request.client.host if request.client else None,
                    request_headers=json.dumps(dict(request.headers)),
                    request_body=None,
                    response_body=safe_json_dumps(
                        {"error": str(exc), "type": type(exc).__name__, "traceback": error_traceback}
                    ),
                    processing_time=None,
                    user_agent=request.headers.get("user-agent"),
                    username=current_username(),
                    hostname=current_hostname(),
                    application_id=APPLICATION_ID,
                )
            )
            session.commit()
    except Exception as log_error:
        logger.error(f"Error logging exception: {log_error}")

    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})
