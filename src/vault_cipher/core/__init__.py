# Vault Cipher: Core Module - Shared Utilities
# Reference: DESIGN.md, Section: Configuration / Logging & Audit
#
# - Runtime configuration (environment + .env)
# - Audit logging

from .audit_log import (
    AuditLogger,
    EventSeverity,
    EventType,
    get_audit_logger,
    log_crypto_event,
)
from .config import Settings, get_settings, reset_settings

__all__ = [
    # Configuration
    "Settings",
    "get_settings",
    "reset_settings",
    # Audit Logging
    "AuditLogger",
    "EventType",
    "EventSeverity",
    "get_audit_logger",
    "log_crypto_event",
]
