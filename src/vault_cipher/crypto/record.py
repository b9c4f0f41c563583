# Vault Cipher: Encrypted Record
# Reference: DESIGN.md, Section: Record Format
#
# Wire form of one encrypted file:
#   {"version": 2, "mode": "single" | "chunked",
#    "ciphertext": "<b64>|CHUNK|<b64>...", "iv": "<hex>", "salt": "<hex>"}
#
# Version 1 records predate the version/mode fields and store the ciphertext
# under "encryptedData". They are still readable; their mode is inferred from
# the chunk delimiter.

import json
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Union

from .errors import RecordFormatError
from .hex_codec import decode_fixed_hex

CHUNK_DELIMITER = "|CHUNK|"  # '|' is outside the base64 alphabet

LEGACY_VERSION = 1
FORMAT_VERSION = 2
SUPPORTED_VERSIONS = (LEGACY_VERSION, FORMAT_VERSION)

MODE_SINGLE = "single"
MODE_CHUNKED = "chunked"
MODES = (MODE_SINGLE, MODE_CHUNKED)

IV_LENGTH = 16
SALT_LENGTH = 16


@dataclass(frozen=True)
class EncryptedRecord:
    """One encrypted file: ciphertext plus the parameters to reverse it."""
    ciphertext: str
    iv: str                     # hex, 16 bytes
    salt: str                   # hex, 16 bytes
    mode: str = MODE_SINGLE
    version: int = FORMAT_VERSION

    def __post_init__(self):
        if not isinstance(self.ciphertext, str):
            raise RecordFormatError("Invalid ciphertext: must be text")
        if self.version not in SUPPORTED_VERSIONS:
            raise RecordFormatError(f"Unsupported record version: {self.version!r}")
        if self.mode not in MODES:
            raise RecordFormatError(f"Unknown record mode: {self.mode!r}")
        decode_fixed_hex(self.iv, IV_LENGTH, "iv")
        decode_fixed_hex(self.salt, SALT_LENGTH, "salt")
        has_delimiter = CHUNK_DELIMITER in self.ciphertext
        if self.mode == MODE_SINGLE and has_delimiter:
            raise RecordFormatError("Single-pass record contains chunk delimiter")

    @property
    def is_chunked(self) -> bool:
        return self.mode == MODE_CHUNKED

    @property
    def chunks(self) -> List[str]:
        """Ciphertext pieces in chunk order."""
        if self.is_chunked:
            return self.ciphertext.split(CHUNK_DELIMITER)
        return [self.ciphertext]

    def iter_chunks(self) -> Iterator[str]:
        """Yield ciphertext pieces in order without splitting the whole text."""
        if not self.is_chunked:
            yield self.ciphertext
            return
        text = self.ciphertext
        start = 0
        while True:
            end = text.find(CHUNK_DELIMITER, start)
            if end == -1:
                yield text[start:]
                return
            yield text[start:end]
            start = end + len(CHUNK_DELIMITER)

    @property
    def chunk_count(self) -> int:
        if self.is_chunked:
            return self.ciphertext.count(CHUNK_DELIMITER) + 1
        return 1

    @property
    def iv_bytes(self) -> bytes:
        return decode_fixed_hex(self.iv, IV_LENGTH, "iv")

    @property
    def salt_bytes(self) -> bytes:
        return decode_fixed_hex(self.salt, SALT_LENGTH, "salt")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "mode": self.mode,
            "ciphertext": self.ciphertext,
            "iv": self.iv,
            "salt": self.salt,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EncryptedRecord":
        """Parse a stored record, accepting the legacy field layout.

        Raises:
            RecordFormatError: missing fields or undecodable values.
        """
        if not isinstance(data, dict):
            raise RecordFormatError("Encrypted record must be a mapping")

        ciphertext = data.get("ciphertext", data.get("encryptedData"))
        iv = data.get("iv")
        salt = data.get("salt")
        missing = [
            name for name, value in
            (("ciphertext", ciphertext), ("iv", iv), ("salt", salt))
            if value is None
        ]
        if missing:
            raise RecordFormatError(f"Encrypted record missing: {', '.join(missing)}")
        if not isinstance(ciphertext, str):
            raise RecordFormatError("Invalid ciphertext: must be text")

        version = data.get("version", LEGACY_VERSION)
        mode = data.get("mode")
        if mode is None:
            if version != LEGACY_VERSION:
                raise RecordFormatError("Encrypted record missing: mode")
            mode = MODE_CHUNKED if CHUNK_DELIMITER in ciphertext else MODE_SINGLE

        return cls(ciphertext=ciphertext, iv=iv, salt=salt, mode=mode, version=version)

    @classmethod
    def from_json(cls, text: Union[str, bytes]) -> "EncryptedRecord":
        try:
            data = json.loads(text)
        except (TypeError, ValueError):
            raise RecordFormatError("Encrypted record is not valid JSON") from None
        return cls.from_dict(data)
