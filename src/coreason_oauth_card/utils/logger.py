# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_oauth_card

import logging
import os
import sys
from typing import Any

from loguru import logger
from opentelemetry import trace

__all__ = ["logger", "configure_logging"]

TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


class InterceptHandler(logging.Handler):
    """
    Forwards standard logging records (httpx, opentelemetry) to Loguru.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk back past the logging module so Loguru reports the real caller
        frame = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename in (logging.__file__, __file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def trace_id_injector(record: dict[str, Any]) -> None:
    """
    Loguru patcher adding the active OpenTelemetry trace and span ids to `extra`.
    """
    ctx = trace.get_current_span().get_span_context()
    if ctx.is_valid:
        record["extra"]["trace_id"] = format(ctx.trace_id, "032x")
        record["extra"]["span_id"] = format(ctx.span_id, "016x")


def _resolve_level() -> str:
    level = os.getenv("COREASON_LOG_LEVEL", "INFO").upper()
    try:
        logger.level(level)
    except ValueError:
        return "INFO"
    return level


def configure_logging() -> None:
    """
    Configures the logger from environment variables.

    - COREASON_LOG_LEVEL: minimum level (default INFO).
    - COREASON_LOG_JSON: "true" for serialized JSON on stdout, otherwise text on stderr.
    - COREASON_LOG_FILE: optional path of a rotating JSON log file.

    Safe to call repeatedly; existing sinks are replaced.
    """
    log_level = _resolve_level()
    log_json = os.getenv("COREASON_LOG_JSON", "false").lower() == "true"
    log_file = os.getenv("COREASON_LOG_FILE")

    logger.configure(handlers=[], patcher=trace_id_injector)  # type: ignore[arg-type]

    if log_json:
        logger.add(sys.stdout, level=log_level, serialize=True)
    else:
        logger.add(sys.stderr, level=log_level, format=TEXT_FORMAT)

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
        except (PermissionError, OSError) as e:
            # Read-only filesystems: keep console logging only
            logger.warning(f"File logging disabled, cannot write to {log_file}: {e}")

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    logging.getLogger().setLevel(logging.getLevelNamesMapping().get(log_level, logging.INFO))


configure_logging()
