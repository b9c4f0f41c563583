# Tests for configuration and audit logging
# Covers: Settings defaults and env overrides, singleton reset,
#         AuditLogger JSON lines, crypto event severities

import json
from pathlib import Path

from vault_cipher.core import (
    AuditLogger,
    EventSeverity,
    EventType,
    Settings,
    get_settings,
    log_crypto_event,
    reset_settings,
)


class TestSettings:
    def test_defaults(self):
        settings = get_settings()
        assert settings.api_url == "http://127.0.0.1:3000/api"
        assert settings.format_version == 2
        assert settings.audit_dir == Path("./audit_logs")
        assert settings.log_level == "INFO"
        assert settings.request_timeout == 30.0

    def test_env_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("VAULT_CIPHER_API_URL", "https://api.example.test/")
        monkeypatch.setenv("VAULT_CIPHER_FORMAT_VERSION", "1")
        monkeypatch.setenv("VAULT_CIPHER_AUDIT_DIR", str(tmp_path))
        monkeypatch.setenv("VAULT_CIPHER_LOG_LEVEL", "debug")
        monkeypatch.setenv("VAULT_CIPHER_REQUEST_TIMEOUT", "5")
        settings = Settings.from_env()
        assert settings.api_url == "https://api.example.test"
        assert settings.format_version == 1
        assert settings.audit_dir == tmp_path
        assert settings.log_level == "DEBUG"
        assert settings.request_timeout == 5.0

    def test_invalid_values_fall_back(self, monkeypatch):
        monkeypatch.setenv("VAULT_CIPHER_FORMAT_VERSION", "9")
        monkeypatch.setenv("VAULT_CIPHER_REQUEST_TIMEOUT", "soon")
        settings = Settings.from_env()
        assert settings.format_version == 2
        assert settings.request_timeout == 30.0

    def test_dotenv_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("VAULT_CIPHER_API_URL=https://dotenv.example.test/api\n")
        settings = Settings.from_env(str(env_file))
        assert settings.api_url == "https://dotenv.example.test/api"

    def test_singleton_and_reset(self, monkeypatch):
        first = get_settings()
        assert get_settings() is first
        monkeypatch.setenv("VAULT_CIPHER_LOG_LEVEL", "WARNING")
        reset_settings()
        assert get_settings().log_level == "WARNING"


class TestAuditLogger:
    def _events(self, logger):
        return [json.loads(line) for line in
                logger.log_file.read_text(encoding="utf-8").splitlines()]

    def test_log_event_writes_json(self, tmp_path):
        logger = AuditLogger(log_dir=tmp_path / "audit")
        event_id = logger.log_event(
            EventType.SYSTEM_START, EventSeverity.INFO, "starting",
            details={"version": "0.1.0"},
        )
        events = self._events(logger)
        logger.close()
        assert len(events) == 1
        assert events[0]["event_id"] == event_id
        assert events[0]["event_type"] == "system.start"
        assert events[0]["details"] == {"version": "0.1.0"}
        assert "hostname" in events[0]["user_context"]

    def test_crypto_failure_is_alert(self, tmp_path):
        logger = AuditLogger(log_dir=tmp_path / "audit")
        logger.log_crypto_event(EventType.FILE_ENCRYPT_FAILED, "doc.pdf", size=10)
        logger.log_crypto_event(EventType.FILE_DECRYPTED, "doc.pdf", size=10)
        events = self._events(logger)
        logger.close()
        assert events[0]["severity"] == "alert"
        assert events[0]["details"] == {"name": "doc.pdf", "size": 10}
        assert events[1]["severity"] == "info"

    def test_module_helper_uses_global_logger(self, audit_logger):
        log_crypto_event(EventType.FILE_ENCRYPTED, "a.jpg", size=1)
        events = self._events(audit_logger)
        assert events[-1]["details"]["name"] == "a.jpg"

    def test_default_dir_from_settings(self, monkeypatch, tmp_path):
        monkeypatch.setenv("VAULT_CIPHER_AUDIT_DIR", str(tmp_path / "from-env"))
        reset_settings()
        logger = AuditLogger()
        logger.close()
        assert logger.log_dir == tmp_path / "from-env"
        assert logger.log_dir.is_dir()
