# Vault Cipher: Remote File API Client
# Reference: DESIGN.md, Section: Sync Client
#
# Uploads encrypted records plus file metadata to the vault backend and
# manages the remote file list.
#
# Endpoints (JSON, Bearer token):
#   POST   {base}/files            upload {name, type, size, mimeType, encryption}
#   GET    {base}/files            list files (encryption fields stripped)
#   GET    {base}/files/{id}       one file -> {"file": {...}}
#   PUT    {base}/files/{id}       rename / move to album
#   DELETE {base}/files/{id}
#
# Idempotent requests retry with exponential backoff; uploads are sent once.

import logging
import time
from typing import Any, Callable, Dict, List, Optional, Union

import httpx

from ..core.audit_log import EventSeverity, EventType, get_audit_logger
from ..core.config import get_settings
from ..crypto.encryption import FileEncryption, Payload
from ..crypto.errors import EncryptionError, VaultCipherError
from ..crypto.record import EncryptedRecord
from .models import FILE_TYPES, UploadedFile, classify_file_type

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
INITIAL_BACKOFF_SEC = 1.0
BACKOFF_MULTIPLIER = 2.0

_IDEMPOTENT_METHODS = ("GET", "PUT", "DELETE")


class SyncError(VaultCipherError):
    """Raised when the remote file API rejects or fails a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class FileUploadService:
    """Client for the vault file API.

    Usage::

        service = FileUploadService(token="id-token")
        uploaded = service.encrypt_and_upload(data, "photo.jpg", password,
                                              mime_type="image/jpeg")
        files = service.get_files()
    """

    def __init__(
        self,
        token: Union[str, Callable[[], str], None] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        settings = get_settings()
        self._token = token
        self._base_url = (base_url or settings.api_url).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.request_timeout
        self._format_version = settings.format_version

    # ------------------------------------------------------------------
    # File operations
    # ------------------------------------------------------------------

    def upload_file(
        self,
        name: str,
        file_type: str,
        size: int,
        mime_type: Optional[str],
        record: EncryptedRecord,
        album_id: Optional[str] = None,
    ) -> UploadedFile:
        """Upload an encrypted record with its file metadata."""
        if not name:
            raise ValueError("File name is required")
        if file_type not in FILE_TYPES:
            raise ValueError(f"Unknown file type: {file_type!r}")

        encryption = record.to_dict()
        # Older servers read the ciphertext from "encryptedData"
        encryption["encryptedData"] = record.ciphertext

        body = {
            "name": name,
            "type": file_type,
            "size": size,
            "mimeType": mime_type,
            "encrypted": True,
            "albumId": album_id,
            "encryption": encryption,
        }
        resp = self._request("POST", "/files", json=body)
        uploaded = UploadedFile.from_api(resp.json())

        logger.info(
            "File uploaded: %s (%d bytes, %s, %d chunk(s)) -> %s",
            name, size, file_type, record.chunk_count, uploaded.id[:8],
        )
        get_audit_logger().log_event(
            event_type=EventType.FILE_UPLOADED,
            severity=EventSeverity.INFO,
            message=f"Uploaded {name}",
            details={"file_id": uploaded.id, "size": size, "type": file_type},
        )
        return uploaded

    def encrypt_and_upload(
        self,
        data: Payload,
        name: str,
        password: str,
        mime_type: Optional[str] = None,
        album_id: Optional[str] = None,
    ) -> UploadedFile:
        """Encrypt file content and upload it.

        Raises:
            EncryptionError: Encryption failed; nothing was uploaded.
            SyncError: The server rejected the upload.
        """
        size = len(data.encode("utf-8")) if isinstance(data, str) else len(data)
        try:
            record = FileEncryption.encrypt(data, password, version=self._format_version)
        except EncryptionError:
            get_audit_logger().log_crypto_event(
                EventType.FILE_ENCRYPT_FAILED, name, size=size,
            )
            raise

        get_audit_logger().log_crypto_event(
            EventType.FILE_ENCRYPTED, name, size=size,
            details={"mode": record.mode, "version": record.version},
        )
        return self.upload_file(
            name=name,
            file_type=classify_file_type(mime_type),
            size=size,
            mime_type=mime_type,
            record=record,
            album_id=album_id,
        )

    def get_files(self) -> List[UploadedFile]:
        """List the caller's files, newest first (server order)."""
        resp = self._request("GET", "/files")
        return [UploadedFile.from_api(item) for item in resp.json()]

    def get_file(self, file_id: str) -> UploadedFile:
        resp = self._request("GET", f"/files/{file_id}")
        payload = resp.json()
        return UploadedFile.from_api(payload.get("file", payload))

    def update_file(
        self,
        file_id: str,
        name: Optional[str] = None,
        album_id: Optional[str] = None,
    ) -> UploadedFile:
        """Rename a file and/or move it to an album."""
        body: Dict[str, Any] = {}
        if name is not None:
            body["name"] = name
        if album_id is not None:
            body["albumId"] = album_id
        if not body:
            raise ValueError("Nothing to update")

        resp = self._request("PUT", f"/files/{file_id}", json=body)
        payload = resp.json()
        get_audit_logger().log_event(
            event_type=EventType.FILE_UPDATED,
            severity=EventSeverity.INFO,
            message=f"Updated file {file_id}",
            details={"file_id": file_id, "fields": sorted(body)},
        )
        return UploadedFile.from_api(payload.get("file", payload))

    def delete_file(self, file_id: str) -> None:
        self._request("DELETE", f"/files/{file_id}")
        logger.info("File deleted: %s", file_id[:8])
        get_audit_logger().log_event(
            event_type=EventType.FILE_DELETED,
            severity=EventSeverity.INFO,
            message=f"Deleted file {file_id}",
            details={"file_id": file_id},
        )

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------

    def _build_headers(self) -> Dict[str, str]:
        token = self._token() if callable(self._token) else self._token
        if not token:
            raise SyncError("User not authenticated")
        return {
            "Accept": "application/json",
            "Authorization": f"Bearer {token}",
        }

    def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """Send a request; retry idempotent methods with backoff."""
        url = f"{self._base_url}{path}"
        attempts = MAX_RETRIES if method in _IDEMPOTENT_METHODS else 1
        backoff = INITIAL_BACKOFF_SEC
        last_exc: Optional[Exception] = None

        for attempt in range(1, attempts + 1):
            try:
                resp = httpx.request(
                    method,
                    url,
                    headers=self._build_headers(),
                    json=json,
                    timeout=self._timeout,
                )
            except httpx.HTTPError as exc:
                last_exc = exc
                if attempt < attempts:
                    logger.warning(
                        "%s %s failed (%s), retrying in %.1fs (attempt %d/%d)",
                        method, path, exc, backoff, attempt, attempts,
                    )
                    time.sleep(backoff)
                    backoff *= BACKOFF_MULTIPLIER
                continue

            if resp.status_code < 400:
                return resp

            retryable = resp.status_code == 429 or resp.status_code >= 500
            if retryable and attempt < attempts:
                retry_after = resp.headers.get("Retry-After")
                wait = float(retry_after) if retry_after else backoff
                logger.warning(
                    "%s %s returned %d, retrying in %.1fs (attempt %d/%d)",
                    method, path, resp.status_code, wait, attempt, attempts,
                )
                time.sleep(wait)
                backoff *= BACKOFF_MULTIPLIER
                continue

            raise self._error_from_response(method, path, resp)

        self._log_sync_error(method, path, str(last_exc))
        raise SyncError(f"{method} {path} failed after {attempts} attempt(s): {last_exc}")

    def _error_from_response(self, method: str, path: str, resp: httpx.Response) -> SyncError:
        try:
            detail = resp.json().get("error")
        except (ValueError, AttributeError):
            detail = None
        message = detail or f"HTTP {resp.status_code}"
        self._log_sync_error(method, path, message, resp.status_code)
        return SyncError(f"{method} {path} failed: {message}", status_code=resp.status_code)

    def _log_sync_error(self, method: str, path: str, message: str,
                        status_code: Optional[int] = None) -> None:
        logger.error("Sync request %s %s failed: %s", method, path, message)
        get_audit_logger().log_event(
            event_type=EventType.SYNC_ERROR,
            severity=EventSeverity.ALERT,
            message=f"{method} {path} failed",
            details={"error": message, "status_code": status_code},
        )
