"""Structured logging bootstrap.

Configures the root logger so every ``logging.getLogger(__name__)`` call
(ours and uvicorn's) emits either:

* **JSON lines** (``json_output=True``, default) for log shippers.
* **Human-readable** coloured lines (``json_output=False``) for local
  development.

When OpenTelemetry tracing is active in the host application the current
``trace_id`` and ``span_id`` are attached to every record, so a resolved
client IP can be matched to the request trace that produced it.
"""

from __future__ import annotations

import logging
import sys

from opentelemetry import trace

from real_ip.configs.system import LoggingConfig

_UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

_JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s %(trace_id)s %(span_id)s"
_DEV_FORMAT = "%(levelprefix)s %(asctime)s %(name)s  %(message)s"
_DEV_DATEFMT = "%H:%M:%S"


class _TraceContextFilter(logging.Filter):
    """Adds OTEL trace/span IDs (or empty strings) to each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = trace.get_current_span().get_span_context()
        valid = ctx is not None and ctx.is_valid
        record.trace_id = format(ctx.trace_id, "032x") if valid else ""  # type: ignore[attr-defined]
        record.span_id = format(ctx.span_id, "016x") if valid else ""  # type: ignore[attr-defined]
        return True


def _build_formatter(json_output: bool) -> logging.Formatter:
    if json_output:
        from pythonjsonlogger.json import JsonFormatter

        return JsonFormatter(
            fmt=_JSON_FORMAT,
            rename_fields={
                "asctime": "timestamp",
                "levelname": "level",
                "name": "logger",
            },
            defaults={"trace_id": "", "span_id": ""},
        )

    from uvicorn.logging import DefaultFormatter

    return DefaultFormatter(fmt=_DEV_FORMAT, datefmt=_DEV_DATEFMT, use_colors=True)


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Configure the root logger (call once at startup)."""
    if config is None:
        config = LoggingConfig()

    root = logging.getLogger()
    root.setLevel(config.level.upper())

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(_TraceContextFilter())
    handler.setFormatter(_build_formatter(config.json_output))
    root.handlers = [handler]

    for name in _UVICORN_LOGGERS:
        uvi = logging.getLogger(name)
        uvi.handlers = [handler]
        uvi.propagate = False

    logging.getLogger("opentelemetry").setLevel(logging.WARNING)
