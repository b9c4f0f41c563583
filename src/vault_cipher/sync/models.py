# Vault Cipher: Sync Models
# Reference: DESIGN.md, Section: Sync Client
#
# Vault file metadata as returned by the remote file API, plus the
# MIME -> vault file type mapping used when a file is picked for upload.

from dataclasses import dataclass
from typing import Any, Dict, Optional

FILE_TYPES = ("image", "video", "document", "audio")


def classify_file_type(mime_type: Optional[str]) -> str:
    """Map a MIME type onto one of the vault file types.

    Anything that is not image/video/audio is stored as a document.
    """
    mime = (mime_type or "").strip().lower()
    if mime.startswith("image/"):
        return "image"
    if mime.startswith("video/"):
        return "video"
    if mime.startswith("audio/"):
        return "audio"
    return "document"


@dataclass
class UploadedFile:
    """Server-side metadata for one vault file (encryption fields omitted)."""
    id: str
    name: str
    type: str
    size: int
    encrypted: bool = True
    album_id: Optional[str] = None
    mime_type: Optional[str] = None
    uploaded_at: Optional[str] = None
    last_modified: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "UploadedFile":
        """Build from a file API response body (``_id`` or ``id``)."""
        return cls(
            id=str(data.get("id") or data.get("_id") or ""),
            name=data.get("name", ""),
            type=data.get("type", "document"),
            size=int(data.get("size") or 0),
            encrypted=bool(data.get("encrypted", True)),
            album_id=data.get("albumId"),
            mime_type=data.get("mimeType"),
            uploaded_at=data.get("uploadedAt"),
            last_modified=data.get("lastModified"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "size": self.size,
            "encrypted": self.encrypted,
            "album_id": self.album_id,
            "mime_type": self.mime_type,
            "uploaded_at": self.uploaded_at,
            "last_modified": self.last_modified,
        }
