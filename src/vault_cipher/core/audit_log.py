# Vault Cipher: Audit Logging
# Reference: DESIGN.md, Section: Logging & Audit
#
# Append-only JSON audit trail for file encryption, decryption and sync
# events. Audit entries never contain passwords, keys or file content.

import logging
import os
import socket
import sys
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional
from uuid import uuid4

import structlog


class EventType(str, Enum):
    """Types of vault events that are audited."""
    # Engine
    FILE_ENCRYPTED = "file.encrypted"
    FILE_DECRYPTED = "file.decrypted"
    FILE_ENCRYPT_FAILED = "file.encrypt.failed"
    FILE_DECRYPT_FAILED = "file.decrypt.failed"

    # Sync
    FILE_UPLOADED = "file.uploaded"
    FILE_UPDATED = "file.updated"
    FILE_DELETED = "file.deleted"
    SYNC_ERROR = "sync.error"

    # System
    SYSTEM_START = "system.start"


class EventSeverity(str, Enum):
    """
    Severity levels for audit events.

    - INFO: normal activity
    - ALERT: an operation failed (file not saved / cannot be opened)
    - CRITICAL: possible tampering or data loss
    """
    INFO = "info"
    ALERT = "alert"
    CRITICAL = "critical"


class AuditLogger:
    """
    Append-only audit logger.

    Features:
    - Structured JSON lines via structlog
    - Automatic timestamp and event ID
    - One file per day under log_dir
    """

    def __init__(self, log_dir: Optional[Path] = None):
        """
        Initialize audit logger.

        Args:
            log_dir: Directory for audit logs (default: from settings)
        """
        if log_dir is None:
            from .config import get_settings
            log_dir = get_settings().audit_dir
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self._file_logger = logging.getLogger("vault_cipher.audit")
        self._file_logger.setLevel(logging.INFO)
        self._file_logger.propagate = False
        self._setup_file_handler()

        self.logger = structlog.wrap_logger(
            self._file_logger,
            processors=[
                structlog.stdlib.add_log_level,
                structlog.processors.TimeStamper(fmt="iso", utc=True),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
        )

    def _setup_file_handler(self):
        """Attach a handler writing to today's audit file."""
        today = datetime.now().strftime("%Y-%m-%d")
        self.log_file = self.log_dir / f"audit_{today}.log"

        for handler in list(self._file_logger.handlers):
            self._file_logger.removeHandler(handler)
            handler.close()

        file_handler = logging.FileHandler(self.log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(logging.Formatter("%(message)s"))  # structlog renders
        self._file_logger.addHandler(file_handler)

    def close(self) -> None:
        for handler in list(self._file_logger.handlers):
            self._file_logger.removeHandler(handler)
            handler.close()

    def log_event(
        self,
        event_type: EventType,
        severity: EventSeverity,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        user_context: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Log an audit event (append-only).

        Args:
            event_type: Type of event (from EventType enum)
            severity: Severity level (from EventSeverity enum)
            message: Human-readable event description
            details: Additional event details (never secrets)
            user_context: Caller context; OS user and host by default

        Returns:
            str: Event ID (UUID) for reference
        """
        event_id = str(uuid4())
        event_data = {
            "event_id": event_id,
            "event_type": event_type.value,
            "severity": severity.value,
            "message": message,
            "recorded_at": datetime.now(timezone.utc).isoformat(),
            "details": details or {},
            "user_context": user_context or self._get_default_user_context(),
        }

        if severity == EventSeverity.INFO:
            self.logger.info("vault_event", **event_data)
        else:
            self.logger.warning("vault_event", **event_data)
        return event_id

    def log_crypto_event(
        self,
        event_type: EventType,
        name: str,
        size: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Log an encrypt/decrypt outcome for one file.

        Failures are logged at ALERT: the file was not saved, or cannot
        be opened.
        """
        failed = event_type in (EventType.FILE_ENCRYPT_FAILED, EventType.FILE_DECRYPT_FAILED)
        event_details = dict(details or {})
        event_details["name"] = name
        if size is not None:
            event_details["size"] = size

        return self.log_event(
            event_type=event_type,
            severity=EventSeverity.ALERT if failed else EventSeverity.INFO,
            message=f"{event_type.value}: {name}",
            details=event_details,
        )

    def _get_default_user_context(self) -> Dict[str, Any]:
        return {
            "os_user": os.getenv("USERNAME") or os.getenv("USER"),
            "hostname": socket.gethostname(),
            "platform": sys.platform,
        }


# Global logger instance
_audit_logger: Optional[AuditLogger] = None


def get_audit_logger() -> AuditLogger:
    """Get global audit logger (singleton pattern)."""
    global _audit_logger
    if _audit_logger is None:
        _audit_logger = AuditLogger()
    return _audit_logger


def log_crypto_event(
    event_type: EventType,
    name: str,
    **kwargs
) -> str:
    """
    Convenience function for logging file crypto events.

    Usage:
        log_crypto_event(EventType.FILE_ENCRYPTED, "photo.jpg", size=52341)
    """
    return get_audit_logger().log_crypto_event(event_type, name, **kwargs)
