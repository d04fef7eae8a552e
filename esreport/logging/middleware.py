"""Request logging middleware: every API call is stored in the ``log`` table."""

import getpass
import json
import logging
import os
import platform
import socket
import time
from datetime import datetime
from typing import Callable

from fastapi import Request, Response
from starlette.background import BackgroundTask
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from esreport.core.config import APPLICATION_ID
from esreport.logging.models import Log

logger = logging.getLogger(__name__)

EXCLUDED_PATHS = ("/api/logs", "/api/docs", "/api/openapi.json")


def current_username() -> str:
    try:
        return os.environ.get("USER") or os.environ.get("USERNAME") or getpass.getuser() or "unknown_user"
    except Exception:
        return "unknown_user"


def current_hostname() -> str:
    try:
        return socket.gethostname() or platform.node() or "unknown_host"
    except Exception:
        return "unknown_host"


class LoggingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self.username = current_username()
        self.hostname = current_hostname()
        self.application_id = APPLICATION_ID

        logger.info(
            f"Logging middleware initialized with username: {self.username} "
            f"on host: {self.hostname}, App ID: {self.application_id}"
        )

    async def dispatch(self, request: Request, call_next: Callable):
        if request.url.path.startswith(EXCLUDED_PATHS):
            return await call_next(request)

        start_time = time.time()

        body_bytes = await request.body()
        request_body = body_bytes.decode("utf-8", errors="ignore")

        # Reconstruct stream
        async def receive() -> dict:
            return {"type": "http.request", "body": body_bytes}

        request = Request(request.scope, receive=receive)

        response = await call_next(request)
        duration_ms = (time.time() - start_time) * 1000
        status_code = response.status_code

        response_body = b""
        if isinstance(response, Response) and hasattr(response, "body"):
            response_body = response.body
        elif hasattr(response, "body_iterator"):
            original_iterator = response.body_iterator
            chunks = []

            async def buffer_iterator():
                nonlocal response_body
                async for chunk in original_iterator:
                    chunks.append(chunk)
                    yield chunk
                response_body = b"".join(chunks)

            response.body_iterator = buffer_iterator()

        # Spreadsheet exports are binary
        content_type = response.headers.get("content-type", "")
        is_binary = "spreadsheetml" in content_type
        session_factory = request.app.state.session_factory

        def log_to_db():
            if is_binary:
                body_to_log = f"[Binary content: {len(response_body)} bytes]"
            elif response_body:
                body_to_log = response_body.decode("utf-8", errors="ignore")
            else:
                body_to_log = "[Response body not available]"

            with session_factory() as session:
                session.add(
                    Log(
                        timestamp=datetime.now(),
                        method=request.method,
                        path=str(request.url.path),
                        status_code=status_code,
                        client_ip=request.client.host if request.client else None,
                        request_headers=json.dumps(dict(request.headers)),
                        request_body=request_body,
                        response_body=body_to_log,
                        processing_time=duration_ms,
                        user_agent=request.headers.get("user-agent"),
                        username=self.username,
                        hostname=self.hostname,
                        application_id=self.application_id,
                    )
                )
                session.commit()

        response.background = getattr(response, "background", None) or BackgroundTask(log_to_db)
        return response
