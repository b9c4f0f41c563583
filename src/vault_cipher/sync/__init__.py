# Vault Cipher: Sync Module - Remote File API
# Reference: DESIGN.md, Section: Sync Client

from .models import FILE_TYPES, UploadedFile, classify_file_type
from .upload_service import FileUploadService, SyncError

__all__ = [
    "FileUploadService",
    "SyncError",
    "UploadedFile",
    "FILE_TYPES",
    "classify_file_type",
]
