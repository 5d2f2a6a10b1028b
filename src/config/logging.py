"""
Structured logging for What's New Insights.

Every record is a single JSON object carrying the message, a UTC timestamp,
the current request context and any keyword fields passed by the caller.
Helpers cover the events this service cares about: HTTP fetches, rate limiter
waits, extraction results and timed pipeline stages.
"""

import json
import logging
import logging.config
import os
import time
from typing import Dict, Any, Optional, Union
from datetime import datetime, timezone
from contextlib import contextmanager
from dataclasses import dataclass, asdict, field


@dataclass
class LogContext:
    """Context information attached to every record of a logger."""

    request_id: Optional[str] = None
    url: Optional[str] = None
    component: Optional[str] = None
    strategy: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass
class TimingInfo:
    """Wall-clock start plus a monotonic duration for one operation."""

    operation: str
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    _start: float = field(default_factory=time.perf_counter, repr=False)
    duration_ms: Optional[int] = None

    def finish(self) -> int:
        self.duration_ms = int((time.perf_counter() - self._start) * 1000)
        return self.duration_ms

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operation": self.operation,
            "started_at": self.started_at.isoformat(),
            "duration_ms": self.duration_ms
        }


class StructuredLogger:
    """
    JSON logger with a mutable request context.

    Wraps a standard library logger; keyword arguments given to the level
    methods become top-level fields of the emitted JSON object.
    """

    def __init__(self, name: str, context: Optional[LogContext] = None):
        self.logger = logging.getLogger(name)
        self.context = context or LogContext()

    def set_context(self, **kwargs) -> None:
        """Update logging context; unknown keys are ignored."""
        for key, value in kwargs.items():
            if hasattr(self.context, key):
                setattr(self.context, key, value)

    def _emit(self, level: int, message: str, fields: Dict[str, Any]) -> None:
        if not self.logger.isEnabledFor(level):
            return
        record = {
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": logging.getLevelName(level),
            "context": self.context.to_dict()
        }
        record.update(fields)
        self.logger.log(level, json.dumps(record, default=str, ensure_ascii=False))

    def debug(self, message: str, **kwargs) -> None:
        self._emit(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs) -> None:
        self._emit(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self._emit(logging.WARNING, message, kwargs)

    def error(self, message: str, error: Optional[BaseException] = None, **kwargs) -> None:
        """Log an error, expanding an exception into type, message and details."""
        if error is not None:
            kwargs["error"] = {
                "type": type(error).__name__,
                "message": str(error),
                "details": getattr(error, 'details', {})
            }
        self._emit(logging.ERROR, message, kwargs)

    @contextmanager
    def timed_operation(self, operation: str, **kwargs):
        """
        Time the enclosed block and log its outcome.

        Success is logged at info level, failure at warning level with the
        exception message; the exception is re-raised.
        """
        timing = TimingInfo(operation)
        self.debug(f"Started {operation}")

        try:
            yield timing
        except Exception as e:
            timing.finish()
            self.warning(f"Operation {operation} failed", timing=timing.to_dict(),
                         success=False, error=str(e), **kwargs)
            raise

        timing.finish()
        self.info(f"Operation {operation} completed", timing=timing.to_dict(), success=True, **kwargs)

    def log_metrics(self, metrics: Dict[str, Union[int, float, str]], operation: Optional[str] = None) -> None:
        """Log performance and processing metrics."""
        self.info(
            f"Metrics for {operation or 'operation'}",
            metrics=metrics,
            metric_type="performance"
        )

    def log_http_request(
        self,
        method: str,
        url: str,
        status_code: int,
        duration_ms: int,
        success: bool,
        **kwargs
    ) -> None:
        """Log an HTTP request with timing and result information."""
        level = logging.INFO if success else logging.WARNING
        self._emit(level, f"HTTP {method} {url} -> {status_code}", dict(
            http_method=method,
            http_url=url,
            http_status=status_code,
            duration_ms=duration_ms,
            success=success,
            **kwargs
        ))

    def log_extraction(self, strategy: str, items: int, **kwargs) -> None:
        """Log the outcome of a listing extraction strategy."""
        self.info(
            f"{strategy.capitalize()} extraction finished",
            strategy=strategy,
            items=items,
            **kwargs
        )

    def log_rate_limit_wait(self, wait_seconds: float, tokens: int) -> None:
        """Log a rate limiter wait before dispatch."""
        self.debug(
            "Rate limiter waiting",
            wait_seconds=round(wait_seconds, 3),
            tokens=tokens
        )


def configure_logging(log_level: Optional[str] = None, enable_structured: bool = True) -> None:
    """
    Configure application logging.

    Args:
        log_level: Logging level name; defaults to ``LOG_LEVEL`` or INFO
        enable_structured: Emit bare JSON messages instead of prefixed lines
    """
    level = (log_level or os.getenv("LOG_LEVEL") or "INFO").upper()
    if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        level = "INFO"

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {"format": "%(message)s"},
            "simple": {"format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"}
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "structured" if enable_structured else "simple",
                "stream": "ext://sys.stdout"
            }
        },
        "root": {
            "level": level,
            "handlers": ["console"]
        },
        # Third-party chatter stays quiet below our own level
        "loggers": {
            "urllib3": {"level": "WARNING"},
            "requests": {"level": "WARNING"},
            "bs4": {"level": "ERROR"},
            "soupsieve": {"level": "ERROR"}
        }
    })


def get_logger(name: str, context: Optional[LogContext] = None) -> StructuredLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)
        context: Optional context information

    Returns:
        StructuredLogger instance
    """
    return StructuredLogger(name, context)


configure_logging()
