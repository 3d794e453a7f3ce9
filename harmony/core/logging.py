"""
Structured logging for Harmony Backend.

Every event carries the HTTP request id, and once known the acting user and
the workflow request uid, so a request's whole lifecycle can be followed
from ``http.start`` through ``request.resolved`` to ``http.end``.
"""

import logging
import sys
import time
import uuid
from contextvars import ContextVar
from typing import Any, Optional

import structlog
from pythonjsonlogger import jsonlogger

from harmony.core.config import settings

request_id_var: ContextVar[str] = ContextVar("request_id", default="")
actor_id_var: ContextVar[str] = ContextVar("actor_id", default="")
request_uid_var: ContextVar[str] = ContextVar("request_uid", default="")

_CONTEXT_FIELDS = (
    ("request_id", request_id_var),
    ("actor_id", actor_id_var),
    ("request_uid", request_uid_var),
)


def bind_actor(user_id: str) -> None:
    actor_id_var.set(user_id)


def bind_request_uid(uid: str) -> None:
    request_uid_var.set(uid)


def request_context() -> dict:
    """Context fields that are set for the current task"""
    return {name: var.get() for name, var in _CONTEXT_FIELDS if var.get()}


def add_request_context(logger: Any, method_name: str, event_dict: dict) -> dict:
    for name, value in request_context().items():
        event_dict.setdefault(name, value)
    return event_dict


def setup_logging() -> None:
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    if settings.is_production:
        formatter = jsonlogger.JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s %(request_id)s %(actor_id)s"
        )
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.addHandler(handler)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_request_context,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer()
            if settings.is_production
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # SQL echo is controlled by DB_ECHO, not the root level
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


class RequestContextMiddleware:
    """
    Opens a fresh logging context per HTTP request and logs its start and end.

    The request id is echoed back as ``x-request-id``. The actor and request
    uid are filled in by the auth dependency and the workflow engine while the
    request runs and show up on ``http.end``.
    """

    def __init__(self, app):
        self.app = app
        self.logger = get_logger("harmony.http")

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = str(uuid.uuid4())
        request_id_var.set(request_id)
        actor_id_var.set("")
        request_uid_var.set("")

        method = scope.get("method")
        path = scope.get("path")
        start_time = time.time()
        status_code: Optional[int] = None

        self.logger.info("http.start", method=method, path=path)

        async def send_with_context(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status")
                headers = list(message.get("headers", []))
                headers.append((b"x-request-id", request_id.encode()))
                message["headers"] = headers
            await send(message)

        try:
            await self.app(scope, receive, send_with_context)
        except Exception as exc:
            self.logger.exception("http.error", method=method, path=path, error=str(exc))
            raise
        finally:
            self.logger.info(
                "http.end",
                method=method,
                path=path,
                status_code=status_code or 500,
                duration_ms=round((time.time() - start_time) * 1000, 2),
            )


class LatencyLogger:
    """Logs ``<operation>.latency`` with the elapsed time and outcome on exit"""

    def __init__(self, operation: str, logger: structlog.stdlib.BoundLogger):
        self.operation = operation
        self.logger = logger
        self.start_time = None

    def __enter__(self):
        self.start_time = time.time()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.logger.info(
            f"{self.operation}.latency",
            latency_ms=round((time.time() - self.start_time) * 1000, 2),
            outcome="ok" if exc_type is None else getattr(exc_type, "code", exc_type.__name__),
        )
