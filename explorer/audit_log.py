"""
Audit logging with strict allowlist policy.

CRITICAL: client-supplied paths and filenames are attacker controlled.
We NEVER write them to the audit trail verbatim.

Allowlist (what we log):
- request_id: Unique identifier for request tracing
- timestamp: When the event occurred
- session_id: Anonymized session identifier
- event_type: list / download / upload / rejected
- reason / error_kind: Rejection codes from errors.Reason / ErrorKind
- path_digest: SHA256 of the raw client input (correlates repeated probes)
- entry_count: Entries returned by a listing
- size_bytes: Bytes downloaded or stored
- latency_ms: Handling time

Blocklist (NEVER log):
- raw request paths, form fields or filenames
- file contents

Design decisions:
- Separate audit logger from application logger
- Structured JSON lines for machine parsing
- File rotation to prevent unbounded growth
- Confinement rejections are also raised as WARNING on the application
  logger: they are potential traversal attacks
"""

from __future__ import annotations

import hashlib
import json
import logging
import time
import uuid
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Literal

from .errors import Rejected
from .settings import DATA_DIR

AUDIT_LOG_PATH = DATA_DIR / "audit.jsonl"

logger = logging.getLogger(__name__)

EventType = Literal["list", "download", "upload", "rejected"]
Operation = Literal["list", "download", "upload"]


@dataclass(frozen=True)
class AuditEvent:
    """
    Structured audit event with allowlist-only fields.

    All fields are identifiers, digests, numbers or controlled codes.
    """

    event_type: EventType
    request_id: str
    timestamp: str
    session_id: str = ""
    operation: str = ""
    reason: str = ""
    error_kind: str = ""
    path_digest: str = ""
    entry_count: int = 0
    size_bytes: int = 0
    latency_ms: int = 0

    def to_json(self) -> str:
        """Serialize to JSON line."""
        return json.dumps(asdict(self), ensure_ascii=False)


def _get_audit_logger() -> logging.Logger:
    """Get or create the audit logger with file rotation."""
    audit = logging.getLogger("audit")

    if audit.handlers:
        return audit

    audit.setLevel(logging.INFO)
    audit.propagate = False  # Don't send to root logger

    AUDIT_LOG_PATH.parent.mkdir(parents=True, exist_ok=True)

    # Rotating file handler: 10MB max, keep 5 backups
    handler = RotatingFileHandler(
        AUDIT_LOG_PATH,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    audit.addHandler(handler)

    return audit


def generate_request_id() -> str:
    """Generate a unique request ID for tracing."""
    return uuid.uuid4().hex[:16]


def utcnow_iso() -> str:
    """Get current UTC timestamp in ISO format."""
    return datetime.now(timezone.utc).isoformat()


def digest_input(raw: str | None) -> str:
    """SHA256 of a raw client string, so it can be correlated but not read."""
    return hashlib.sha256((raw or "").encode("utf-8", "surrogatepass")).hexdigest()


def _emit(event: AuditEvent) -> None:
    _get_audit_logger().info(event.to_json())


def log_listing(
    request_id: str,
    session_id: str,
    raw_path: str | None,
    entry_count: int,
    latency_ms: int = 0,
) -> None:
    """Log a successful directory listing."""
    _emit(
        AuditEvent(
            event_type="list",
            request_id=request_id,
            timestamp=utcnow_iso(),
            session_id=session_id,
            operation="list",
            path_digest=digest_input(raw_path),
            entry_count=entry_count,
            latency_ms=latency_ms,
        )
    )


def log_download(
    request_id: str,
    session_id: str,
    raw_path: str | None,
    size_bytes: int,
    latency_ms: int = 0,
) -> None:
    """Log a file handed out for download."""
    _emit(
        AuditEvent(
            event_type="download",
            request_id=request_id,
            timestamp=utcnow_iso(),
            session_id=session_id,
            operation="download",
            path_digest=digest_input(raw_path),
            size_bytes=size_bytes,
            latency_ms=latency_ms,
        )
    )


def log_upload(
    request_id: str,
    session_id: str,
    raw_filename: str | None,
    size_bytes: int,
    latency_ms: int = 0,
) -> None:
    """
    Log a stored upload.

    Note: We log a digest of the client filename, not the name itself.
    """
    _emit(
        AuditEvent(
            event_type="upload",
            request_id=request_id,
            timestamp=utcnow_iso(),
            session_id=session_id,
            operation="upload",
            path_digest=digest_input(raw_filename),
            size_bytes=size_bytes,
            latency_ms=latency_ms,
        )
    )


def log_rejection(
    request_id: str,
    session_id: str,
    operation: Operation,
    raw_input: str | None,
    rejected: Rejected,
) -> None:
    """
    Log a refused request.

    Confinement failures are additionally reported on the application
    logger at WARNING level as a potential traversal attempt.
    """
    event = AuditEvent(
        event_type="rejected",
        request_id=request_id,
        timestamp=utcnow_iso(),
        session_id=session_id,
        operation=operation,
        reason=rejected.reason.value,
        error_kind=rejected.kind.value,
        path_digest=digest_input(raw_input),
    )
    _emit(event)

    if rejected.is_attack_signal:
        logger.warning(
            "Path traversal attempt blocked",
            extra={
                "request_id": request_id,
                "operation": operation,
                "path_digest": event.path_digest,
                "error_code": rejected.reason.value,
            },
        )


class RequestTimer:
    """Context manager for timing requests."""

    def __init__(self):
        self.start_time: float = 0
        self.elapsed_ms: int = 0

    def __enter__(self) -> RequestTimer:
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args) -> None:
        self.elapsed_ms = int((time.perf_counter() - self.start_time) * 1000)
