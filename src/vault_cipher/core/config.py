# Vault Cipher: Runtime Configuration
# Reference: DESIGN.md, Section: Configuration
#
# Settings come from the environment; a local .env file is loaded first.
# Engine constants (key size, iterations, chunk size) belong to the record
# format and are not configurable here.

import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from ..crypto.record import SUPPORTED_VERSIONS, FORMAT_VERSION

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://127.0.0.1:3000/api"
DEFAULT_AUDIT_DIR = "./audit_logs"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_REQUEST_TIMEOUT_SEC = 30.0


@dataclass
class Settings:
    """Deployment settings for the CLI and the sync client."""
    api_url: str = DEFAULT_API_URL
    format_version: int = FORMAT_VERSION
    audit_dir: Path = Path(DEFAULT_AUDIT_DIR)
    log_level: str = DEFAULT_LOG_LEVEL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT_SEC

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Settings":
        """Build settings from VAULT_CIPHER_* environment variables."""
        load_dotenv(env_file)

        version_raw = os.getenv("VAULT_CIPHER_FORMAT_VERSION", str(FORMAT_VERSION))
        try:
            format_version = int(version_raw)
        except ValueError:
            format_version = -1
        if format_version not in SUPPORTED_VERSIONS:
            logger.warning(
                "Ignoring unsupported VAULT_CIPHER_FORMAT_VERSION=%r, using %d",
                version_raw, FORMAT_VERSION,
            )
            format_version = FORMAT_VERSION

        timeout_raw = os.getenv("VAULT_CIPHER_REQUEST_TIMEOUT", "")
        try:
            request_timeout = float(timeout_raw) if timeout_raw else DEFAULT_REQUEST_TIMEOUT_SEC
        except ValueError:
            logger.warning("Ignoring invalid VAULT_CIPHER_REQUEST_TIMEOUT=%r", timeout_raw)
            request_timeout = DEFAULT_REQUEST_TIMEOUT_SEC

        return cls(
            api_url=os.getenv("VAULT_CIPHER_API_URL", DEFAULT_API_URL).rstrip("/"),
            format_version=format_version,
            audit_dir=Path(os.getenv("VAULT_CIPHER_AUDIT_DIR", DEFAULT_AUDIT_DIR)),
            log_level=os.getenv("VAULT_CIPHER_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
            request_timeout=request_timeout,
        )


_settings: Optional[Settings] = None
_settings_lock = threading.Lock()


def get_settings() -> Settings:
    """Get or create the global Settings singleton."""
    global _settings
    if _settings is None:
        with _settings_lock:
            if _settings is None:
                _settings = Settings.from_env()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    with _settings_lock:
        _settings = None
