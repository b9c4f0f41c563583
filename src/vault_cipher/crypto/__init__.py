# Vault Cipher: Crypto Module - Client-side File Encryption
# Reference: DESIGN.md, Section: Encryption Engine
#
# Password-derived AES-256 encryption of file content, single-pass for
# payloads up to 1 MiB and chunked above that.

from .encryption import FileEncryption, PasswordHash
from .errors import (
    DecryptionError,
    EncryptionError,
    InputError,
    RecordFormatError,
    VaultCipherError,
)
from .hex_codec import bytes_to_hex, hex_to_bytes
from .record import (
    CHUNK_DELIMITER,
    FORMAT_VERSION,
    LEGACY_VERSION,
    MODE_CHUNKED,
    MODE_SINGLE,
    EncryptedRecord,
)

encrypt = FileEncryption.encrypt
decrypt = FileEncryption.decrypt
derive_key = FileEncryption.derive_key
generate_key = FileEncryption.generate_key
hash_password = FileEncryption.hash_password
verify_password = FileEncryption.verify_password

__all__ = [
    "FileEncryption",
    "PasswordHash",
    "EncryptedRecord",
    "CHUNK_DELIMITER",
    "FORMAT_VERSION",
    "LEGACY_VERSION",
    "MODE_CHUNKED",
    "MODE_SINGLE",
    # Operations
    "encrypt",
    "decrypt",
    "derive_key",
    "generate_key",
    "hash_password",
    "verify_password",
    "bytes_to_hex",
    "hex_to_bytes",
    # Errors
    "VaultCipherError",
    "InputError",
    "EncryptionError",
    "DecryptionError",
    "RecordFormatError",
]
