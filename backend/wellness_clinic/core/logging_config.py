"""
Centralized logging configuration for the wellness clinic backend.

Every record may carry a ``context`` dict via ``extra={"context": {...}}``.
JSONFormatter nests it under "context"; ConsoleFormatter appends it after the
message. setup_logging() also times SQL statements (slow ones are raised to
WARNING) and logs each HTTP request with the caller's role.

Usage:
    setup_logging(app, log_level="INFO")

    logger = logging.getLogger(__name__)
    logger.info("Appointment booked", extra={"context": {"token": token}})
"""

import json
import logging
import logging.handlers
import sys
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

from flask import Flask, g, request
from sqlalchemy import event
from sqlalchemy.engine import Engine

ROLE_HEADER = "X-User-Role"

SLOW_QUERY_MS = 250.0
SLOW_REQUEST_MS = 1000.0

_sql_timing_installed = False


def _level(value: Union[int, str]) -> int:
    if isinstance(value, int):
        return value
    return getattr(logging, str(value).upper(), logging.INFO)


class JSONFormatter(logging.Formatter):
    """One JSON object per line; Decimals and dates in context become strings."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "where": f"{record.module}:{record.funcName}:{record.lineno}",
        }
        context = getattr(record, "context", None)
        if context:
            payload["context"] = context
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class ConsoleFormatter(logging.Formatter):
    """Readable single-line output for development terminals."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_color: bool = True):
        super().__init__(
            "%(asctime)s %(levelname)s %(name)s: %(message)s", datefmt="%H:%M:%S"
        )
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        # copy, so the file handler still sees the plain level name
        record = logging.makeLogRecord(record.__dict__)
        if self.use_color:
            color = self.LEVEL_COLORS.get(record.levelno, "")
            record.levelname = f"{color}{record.levelname:<8}{self.RESET}"
        line = super().format(record)
        context = getattr(record, "context", None)
        if context:
            line = f"{line} {json.dumps(context, default=str, sort_keys=True)}"
        return line


def _install_sql_timing(slow_query_ms: float) -> None:
    """Attach cursor timing to every Engine once per process."""
    global _sql_timing_installed
    if _sql_timing_installed:
        return
    sql_logger = logging.getLogger("wellness_clinic.sql")

    @event.listens_for(Engine, "before_cursor_execute")
    def _start(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault("clinic_query_start", []).append(time.perf_counter())

    @event.listens_for(Engine, "after_cursor_execute")
    def _finish(conn, cursor, statement, parameters, context, executemany):
        elapsed_ms = (time.perf_counter() - conn.info["clinic_query_start"].pop()) * 1000
        level = logging.WARNING if elapsed_ms >= slow_query_ms else logging.DEBUG
        sql_logger.log(
            level,
            "Slow query" if level == logging.WARNING else "Query",
            extra={
                "context": {
                    "statement": " ".join(statement.split())[:300],
                    "duration_ms": round(elapsed_ms, 2),
                }
            },
        )

    _sql_timing_installed = True


def _register_request_logging(app: Flask) -> None:
    http_logger = logging.getLogger("wellness_clinic.http")

    @app.before_request
    def _request_started():
        g.request_id = uuid.uuid4().hex[:12]
        g.request_started = time.perf_counter()

    @app.after_request
    def _request_finished(response):
        started = g.get("request_started")
        if started is None:
            return response
        elapsed_ms = (time.perf_counter() - started) * 1000
        http_logger.log(
            logging.WARNING if elapsed_ms >= SLOW_REQUEST_MS else logging.INFO,
            f"{request.method} {request.path} -> {response.status_code}",
            extra={
                "context": {
                    "request_id": g.get("request_id"),
                    "role": request.headers.get(ROLE_HEADER, "patient"),
                    "route": request.url_rule.rule if request.url_rule else None,
                    "status_code": response.status_code,
                    "duration_ms": round(elapsed_ms, 2),
                }
            },
        )
        return response


def setup_logging(
    app: Optional[Flask] = None,
    log_level: Union[int, str] = "INFO",
    enable_sql_echo: bool = False,
    log_to_file: bool = False,
    use_json_format: bool = False,
    log_dir: Optional[Path] = None,
    slow_query_ms: float = SLOW_QUERY_MS,
) -> None:
    """
    Configure logging for the clinic backend.

    Args:
        app: Flask app to attach request logging to, if any
        log_level: level as an int or a name such as "INFO"
        enable_sql_echo: time every SQL statement at DEBUG
        log_to_file: also write JSON lines to a rotating clinic.log
        use_json_format: JSON instead of console lines on stdout
        log_dir: directory for clinic.log (default: backend/logs)
        slow_query_ms: statements slower than this are logged at WARNING
    """
    level = _level(log_level)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    stdout = logging.StreamHandler(sys.stdout)
    stdout.setFormatter(
        JSONFormatter() if use_json_format else ConsoleFormatter(sys.stdout.isatty())
    )
    root_logger.addHandler(stdout)

    if log_to_file:
        log_dir = log_dir or Path(__file__).resolve().parents[2] / "logs"
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                log_dir / "clinic.log",
                maxBytes=5 * 1024 * 1024,
                backupCount=3,
                encoding="utf-8",
            )
        except OSError as e:
            root_logger.warning(
                "Cannot open clinic.log, logging to stdout only",
                extra={"context": {"log_dir": str(log_dir), "error": str(e)}},
            )
        else:
            file_handler.setFormatter(JSONFormatter())
            root_logger.addHandler(file_handler)

    if enable_sql_echo:
        logging.getLogger("wellness_clinic.sql").setLevel(logging.DEBUG)
    _install_sql_timing(slow_query_ms)

    if app is not None:
        _register_request_logging(app)

    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    logging.getLogger("wellness_clinic").info(
        "Logging configured",
        extra={
            "context": {
                "level": logging.getLevelName(level),
                "json": use_json_format,
                "file": log_to_file,
                "sql_timing": enable_sql_echo,
            }
        },
    )


def log_performance(operation: str, duration_ms: float, **context: Any) -> None:
    """Log how long a named operation took, with any extra context."""
    logging.getLogger("wellness_clinic.performance").info(
        f"{operation} took {duration_ms:.2f}ms",
        extra={
            "context": {
                "operation": operation,
                "duration_ms": round(duration_ms, 2),
                **context,
            }
        },
    )
