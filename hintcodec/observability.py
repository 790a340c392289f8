"""
hintcodec Observability

Structured logging for the marshalling layer. Each module holds one
``CodecLogger`` tagged with its layer; keyword arguments passed to a log
call become structured context on the emitted event:

    logger.debug("Encoded value", operation="encode", kind="uint256", address="1:0")

    {"timestamp": "...", "level": "debug", "logger": "hintcodec.types.types",
     "message": "Encoded value", "layer": "types", "operation": "encode",
     "context": {"kind": "uint256", "address": "1:0"}}

Events go to stderr as one JSON object per line, or as plain text when
``observability.log_format`` is ``text``. Loggers do not propagate to the
root logger, so host applications see hintcodec output only through these
handlers.

Copyright (c) 2026 Momentum. All rights reserved.
Contact: engineering@momentum.inc
"""

from __future__ import annotations

import json
import logging
import sys
import time
import traceback
from contextlib import contextmanager
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from functools import wraps
from typing import Any, Callable, Dict, Iterator, MutableMapping, Optional, TextIO, Tuple, TypeVar


class CodecLayer(Enum):
    """Subsystem that emitted an event."""
    TEXT = "text"
    MEMORY = "memory"
    TYPES = "types"
    RECORDS = "records"
    INSPECT = "inspect"
    CONFIG = "config"
    CLI = "cli"


# Keyword arguments the logging module itself understands
_LOGGING_KWARGS = frozenset({"exc_info", "stack_info", "stacklevel", "extra"})

# Context keys promoted to top-level event fields
_EVENT_FIELDS = ("operation", "error_code", "duration_ms")


@dataclass
class LogEvent:
    """One emitted log line."""
    timestamp: str
    level: str
    logger: str
    message: str
    layer: str = ""
    operation: str = ""
    duration_ms: Optional[float] = None
    error_code: str = ""
    context: Dict[str, Any] = field(default_factory=dict)
    exception: Optional[str] = None

    @classmethod
    def from_record(cls, record: logging.LogRecord) -> "LogEvent":
        event = cls(
            timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            level=record.levelname.lower(),
            logger=record.name,
            message=record.getMessage(),
            layer=getattr(record, "layer", ""),
            operation=getattr(record, "operation", ""),
            duration_ms=getattr(record, "duration_ms", None),
            error_code=getattr(record, "error_code", ""),
            context=dict(getattr(record, "context", {})),
        )
        if record.exc_info:
            event.exception = "".join(traceback.format_exception(*record.exc_info))
        return event

    def to_dict(self) -> Dict[str, Any]:
        """Event fields, empty ones omitted."""
        return {k: v for k, v in asdict(self).items() if v not in (None, "", {})}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)

    def to_text(self) -> str:
        head = f"{self.timestamp} {self.level.upper():<8} {self.logger}: {self.message}"
        extras = dict(self.context)
        if self.operation:
            extras["operation"] = self.operation
        if self.duration_ms is not None:
            extras["duration_ms"] = f"{self.duration_ms:.3f}"
        if self.error_code:
            extras["error_code"] = self.error_code
        tail = " ".join(f"{k}={v}" for k, v in sorted(extras.items()))
        line = f"{head} {tail}" if tail else head
        return f"{line}\n{self.exception}" if self.exception else line


class StructuredFormatter(logging.Formatter):
    """
    Formats records as ``LogEvent`` JSON or text lines.

    With ``fmt=None`` the format is read from ``observability.log_format``
    for every record.
    """

    def __init__(self, fmt: Optional[str] = None):
        super().__init__()
        self.fmt = fmt

    def format(self, record: logging.LogRecord) -> str:
        event = LogEvent.from_record(record)
        fmt = self.fmt
        if fmt is None:
            from hintcodec.config import get_config
            fmt = get_config().observability.log_format.get()
        return event.to_json() if fmt == "json" else event.to_text()


class StderrHandler(logging.StreamHandler):
    """StreamHandler that writes to whatever ``sys.stderr`` is at emit time."""

    def __init__(self):
        logging.Handler.__init__(self)

    @property
    def stream(self) -> TextIO:  # type: ignore[override]
        return sys.stderr


class CodecLogger(logging.LoggerAdapter):
    """
    Layer-tagged adapter over ``logging.getLogger("hintcodec.<layer>.<name>")``.

    Level and format default to ``observability.*`` in the active
    configuration and follow later changes to it. Pass ``stream`` to
    capture output somewhere other than stderr.
    """

    def __init__(
        self,
        name: str,
        layer: CodecLayer,
        level: Optional[str] = None,
        fmt: Optional[str] = None,
        stream: Optional[TextIO] = None,
    ):
        from hintcodec.config import get_config

        base = logging.getLogger(f"hintcodec.{layer.value}.{name}")
        super().__init__(base, {"layer": layer.value})
        self.layer = layer
        self._level = level

        handler = logging.StreamHandler(stream) if stream is not None else StderrHandler()
        handler.setFormatter(StructuredFormatter(fmt))
        base.handlers = [handler]
        base.propagate = False

        if level is None:
            get_config().observability.log_level.on_change(lambda old, new: self.sync_level())
        self.sync_level()

    def sync_level(self) -> None:
        """Apply the explicit level, or the configured one, to the logger."""
        if self._level is not None:
            self.logger.setLevel(self._level.upper())
            return
        from hintcodec.config import get_config
        level = logging.getLevelName(get_config().observability.log_level.get().upper())
        # An unknown name leaves the current level in place
        if isinstance(level, int) and self.logger.level != level:
            self.logger.setLevel(level)

    def isEnabledFor(self, level: int) -> bool:
        if self._level is None:
            self.sync_level()
        return super().isEnabledFor(level)

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        context = {k: kwargs.pop(k) for k in list(kwargs) if k not in _LOGGING_KWARGS}
        extra = {"layer": self.layer.value, "context": context}
        for key in _EVENT_FIELDS:
            if key in context:
                extra[key] = context.pop(key)
        kwargs["extra"] = extra
        return msg, kwargs

    def operation(
        self,
        name: str,
        duration_ms: float,
        success: bool = True,
        **context: Any,
    ) -> None:
        """Report a finished operation: debug on success, warning on failure."""
        level = logging.DEBUG if success else logging.WARNING
        status = "completed" if success else "failed"
        self.log(level, f"Operation {name} {status}",
                 operation=name, duration_ms=duration_ms, **context)


_loggers: Dict[str, CodecLogger] = {}


def get_logger(name: str, layer: CodecLayer) -> CodecLogger:
    """Module-level logger for a component, created once per process."""
    key = f"{layer.value}.{name}"
    if key not in _loggers:
        _loggers[key] = CodecLogger(name, layer)
    return _loggers[key]


T = TypeVar("T")


@contextmanager
def timed(logger: CodecLogger, operation_name: str, **context: Any) -> Iterator[None]:
    """Time the enclosed block and report it through ``logger.operation``."""
    start = time.perf_counter()
    success = False
    try:
        yield
        success = True
    finally:
        logger.operation(operation_name, (time.perf_counter() - start) * 1000, success, **context)


def timed_operation(
    logger: CodecLogger,
    operation_name: str,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator form of ``timed``."""
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            with timed(logger, operation_name):
                return func(*args, **kwargs)
        return wrapper
    return decorator
