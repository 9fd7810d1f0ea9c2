"""
Structured logging for the AAD SSO settings service.

JSON lines in production, colored console output in development. Context
(tenant being resolved, request ID) is kept in context variables so that
concurrent resolutions and requests never see each other's values.
"""

import json
import logging
import sys
import traceback
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Optional

from aadsso.core.config import settings

# Attributes every LogRecord carries; anything else was passed through ``extra``.
_RESERVED_RECORD_ATTRS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "message", "taskName",
})

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for log aggregators."""

    def __init__(self, service_name: str = "aadsso"):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
            "environment": settings.ENVIRONMENT,
            "source": f"{record.filename}:{record.lineno} in {record.funcName}",
        }

        request_id = request_id_var.get()
        if request_id:
            log_data["request_id"] = request_id

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, exc_tb = record.exc_info
            log_data["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": traceback.format_exception(exc_type, exc_value, exc_tb),
            }

        extra = {k: v for k, v in record.__dict__.items() if k not in _RESERVED_RECORD_ATTRS}
        if extra:
            log_data["extra"] = extra

        return json.dumps(log_data, default=str)


class ColoredFormatter(logging.Formatter):
    """Console formatter for development."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self):
        super().__init__(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        return f"{color}{super().format(record)}{self.RESET}"


class ContextLogger:
    """
    Logger wrapper that attaches bound context to every record as ``extra``.

    The context is stored per asyncio task / thread, so a value bound while
    resolving one tenant does not leak into another task's log lines.
    """

    def __init__(self, logger: logging.Logger):
        self._logger = logger
        self._context: ContextVar[dict[str, Any]] = ContextVar(
            f"log_context.{logger.name}", default={}
        )

    @property
    def name(self) -> str:
        return self._logger.name

    def set_context(self, **kwargs: Any) -> None:
        self._context.set({**self._context.get(), **kwargs})

    def clear_context(self) -> None:
        self._context.set({})

    def log(self, level: int, msg: str, *args, **kwargs) -> None:
        extra = {**self._context.get(), **kwargs.pop("extra", {})}
        self._logger.log(level, msg, *args, extra=extra, **kwargs)

    def debug(self, msg: str, *args, **kwargs) -> None:
        self.log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs) -> None:
        self.log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs) -> None:
        self.log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs) -> None:
        self.log(logging.ERROR, msg, *args, **kwargs)

    def exception(self, msg: str, *args, **kwargs) -> None:
        kwargs.setdefault("exc_info", True)
        self.log(logging.ERROR, msg, *args, **kwargs)


def setup_logging(
    service_name: str = "aadsso",
    log_level: Optional[str] = None,
    json_logs: Optional[bool] = None,
) -> None:
    """
    Configure the root logger.

    Args:
        service_name: Service name written into JSON records
        log_level: Override LOG_LEVEL (unset: DEBUG when settings.DEBUG, else INFO)
        json_logs: Override JSON_LOGS (unset: JSON in production)
    """
    level = (log_level or settings.LOG_LEVEL or ("DEBUG" if settings.DEBUG else "INFO")).upper()
    if json_logs is None:
        json_logs = settings.is_production if settings.JSON_LOGS is None else settings.JSON_LOGS
    use_json = json_logs

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter(service_name) if use_json else ColoredFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # httpx logs every discovery request at INFO
    for noisy in ("uvicorn.access", "sqlalchemy.engine", "httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.getLogger("aadsso.logging").info(
        f"Logging configured: level={level}, format={'JSON' if use_json else 'colored'}, "
        f"environment={settings.ENVIRONMENT}"
    )


def get_logger(name: str) -> ContextLogger:
    """
    Get a context-aware logger.

    Usage:
        logger = get_logger("aadsso.sso.resolver")
        logger.set_context(tenant_domain="contoso.com")
        logger.info("Resolving settings")  # record carries tenant_domain
    """
    return ContextLogger(logging.getLogger(name))


def generate_request_id() -> str:
    return uuid.uuid4().hex[:8]


class RequestLoggingMiddleware:
    """
    ASGI middleware logging method, path, status and duration of each request.

    The request ID is stored in ``scope["state"]`` and in ``request_id_var``
    so JSON log lines written while handling the request carry it.
    """

    def __init__(self, app, skip_paths: tuple[str, ...] = ("/health",)):
        self.app = app
        self.skip_paths = skip_paths
        self.logger = logging.getLogger("aadsso.http")

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = generate_request_id()
        scope.setdefault("state", {})["request_id"] = request_id
        token = request_id_var.set(request_id)
        started = datetime.now(timezone.utc)
        status_code = 500

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            path = scope.get("path", "/")
            if path not in self.skip_paths:
                method = scope.get("method", "UNKNOWN")
                duration_ms = (datetime.now(timezone.utc) - started).total_seconds() * 1000
                self.logger.log(
                    logging.WARNING if status_code >= 400 else logging.INFO,
                    f"{method} {path} {status_code} {duration_ms:.1f}ms",
                    extra={"method": method, "path": path, "status": status_code, "duration_ms": duration_ms},
                )
            request_id_var.reset(token)
