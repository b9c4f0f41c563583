"""
Shared pytest fixtures for the Vault Cipher test suite.

Autouse fixtures below isolate tests from the host environment:
  - Settings       -> rebuilt from a clean VAULT_CIPHER_* environment
  - Audit logger   -> temp directory (prevents test events in ./audit_logs)
"""

import os

import pytest


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch):
    """Clear VAULT_CIPHER_* variables and the cached Settings singleton."""
    from vault_cipher.core import config

    for name in list(os.environ):
        if name.startswith("VAULT_CIPHER_"):
            monkeypatch.delenv(name, raising=False)
    config.reset_settings()
    yield
    config.reset_settings()


@pytest.fixture(autouse=True)
def _isolate_audit_logs(tmp_path, monkeypatch):
    """Point the global AuditLogger at a temp directory for every test."""
    import vault_cipher.core.audit_log as audit_mod

    audit_logger = audit_mod.AuditLogger(log_dir=tmp_path / "audit_logs")
    monkeypatch.setattr(audit_mod, "_audit_logger", audit_logger)
    yield audit_logger
    audit_logger.close()


@pytest.fixture
def audit_logger(_isolate_audit_logs):
    return _isolate_audit_logs


@pytest.fixture
def chunk_size():
    from vault_cipher.crypto import FileEncryption
    return FileEncryption.CHUNK_SIZE
