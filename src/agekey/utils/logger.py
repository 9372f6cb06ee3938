# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

import logging
import os
import sys
from typing import Any

from loguru import logger
from opentelemetry import trace

__all__ = ["logger", "configure_logging", "HTTP_LOGGERS"]

# Stdlib loggers of the HTTP stack used for the PAR request
HTTP_LOGGERS = ("httpx", "httpcore")


class InterceptHandler(logging.Handler):
    """
    Redirects records from the HTTP client's stdlib loggers to Loguru.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno  # type: ignore[assignment]

        frame = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename in (logging.__file__, __file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def trace_id_injector(record: dict[str, Any]) -> None:
    """
    Loguru patcher adding the current OpenTelemetry trace_id and span_id, when a span is active.
    """
    ctx = trace.get_current_span().get_span_context()
    if ctx.is_valid:
        record["extra"]["trace_id"] = format(ctx.trace_id, "032x")
        record["extra"]["span_id"] = format(ctx.span_id, "016x")


def _resolve_level(name: str) -> str:
    try:
        logger.level(name)
    except ValueError:
        return "INFO"
    return name


def _intercept_http_loggers(level: str) -> None:
    # Only the HTTP client's loggers are captured; the host application's root logger is left alone
    numeric_level = logging.getLevelName(level)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    for name in HTTP_LOGGERS:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.setLevel(numeric_level)
        std_logger.propagate = False


def configure_logging() -> None:
    """
    Configures the agekey logger from environment variables.

    AGEKEY_LOG_LEVEL sets the level (default INFO), AGEKEY_LOG_JSON=true switches
    to serialized output on stdout, and AGEKEY_LOG_FILE adds a rotating JSON file sink.
    Text output carries the trace id of the active span, or "-" outside a span.
    Call this again to reload configuration if env vars change.
    """
    log_level = _resolve_level(os.getenv("AGEKEY_LOG_LEVEL", "INFO").upper())
    log_json = os.getenv("AGEKEY_LOG_JSON", "false").lower() == "true"
    log_file = os.getenv("AGEKEY_LOG_FILE")

    logger.configure(handlers=[], patcher=trace_id_injector, extra={"trace_id": "-"})  # type: ignore[arg-type]

    if log_json:
        logger.add(sys.stdout, level=log_level, serialize=True)
    else:
        format_str = (
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<magenta>trace={extra[trace_id]}</magenta> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        )
        logger.add(sys.stderr, level=log_level, format=format_str)

    if log_file:
        try:
            logger.add(
                log_file,
                rotation="500 MB",
                retention="10 days",
                serialize=True,
                enqueue=True,
                level=log_level,
            )
        except OSError:
            logger.warning(f"Unable to open log file {log_file}; file logging disabled.")

    _intercept_http_loggers(log_level)


configure_logging()
