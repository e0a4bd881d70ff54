# Ally Connector - Audit logging (every web service invocation logged)
import json
import logging
import logging.handlers
import queue
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class AuditLogEntry(BaseModel):
    trace_id: str
    user_id: int | None = None
    service: str
    request: dict[str, Any] = Field(default_factory=dict)
    result_count: int = 0
    outcome: str = "ok"  # ok | error
    error: str | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


_audit_log: list[AuditLogEntry] = []
_audit_queue: queue.Queue = queue.Queue(-1)
_audit_logger = logging.getLogger("ally.audit")
_audit_logger.setLevel(logging.INFO)
_audit_logger.propagate = False
_audit_logger.addHandler(logging.handlers.QueueHandler(_audit_queue))
_queue_listener: logging.handlers.QueueListener | None = None


class AuditFileHandler(logging.Handler):
    """Append-only JSONL file of audit entries."""

    def __init__(self, filepath: Path):
        super().__init__()
        self.filepath = Path(filepath)
        self.filepath.parent.mkdir(parents=True, exist_ok=True)

    def emit(self, record):
        entry = getattr(record, "audit_entry", None)
        if entry is None:
            return
        try:
            with open(self.filepath, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry.model_dump(), default=str) + "\n")
        except OSError:
            self.handleError(record)


class AuditMemoryHandler(logging.Handler):
    def emit(self, record):
        entry = getattr(record, "audit_entry", None)
        if entry is not None:
            _audit_log.append(entry)


def start_audit_logger(log_file: Path | None = None) -> None:
    """Start draining the audit queue into memory (and `log_file` when given)."""
    global _queue_listener
    if _queue_listener is not None:
        return
    handlers: list[logging.Handler] = [AuditMemoryHandler()]
    if log_file is not None:
        handlers.append(AuditFileHandler(log_file))
    _queue_listener = logging.handlers.QueueListener(_audit_queue, *handlers, respect_handler_level=True)
    _queue_listener.start()


def shutdown_audit_logger() -> None:
    """Stop the listener; pending entries are flushed first."""
    global _queue_listener
    if _queue_listener is not None:
        _queue_listener.stop()
        _queue_listener = None


def log_audit(entry: AuditLogEntry) -> None:
    _audit_logger.info("%s %s", entry.service, entry.outcome, extra={"audit_entry": entry})


def get_audit_sample(limit: int = 50) -> list[dict]:
    """Most recent audit entries, oldest first."""
    return [e.model_dump() for e in _audit_log[-limit:]]
