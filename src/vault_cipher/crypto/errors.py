# Vault Cipher: Error Types
# Reference: DESIGN.md, Section: Error Handling
#
# Every failure the engine raises is one of these. Messages are generic;
# cipher library details never reach callers.


class VaultCipherError(Exception):
    """Base class for all vault_cipher errors."""


class InputError(VaultCipherError, ValueError):
    """Missing or malformed caller input (empty password, bad salt, ...)."""


class EncryptionError(VaultCipherError):
    """Raised when a payload could not be encrypted. No record is produced."""

    def __init__(self, message: str = "Failed to encrypt file"):
        super().__init__(message)


class DecryptionError(VaultCipherError):
    """Raised on wrong password, corrupted or tampered data."""

    def __init__(self, message: str = "Failed to decrypt file"):
        super().__init__(message)


class RecordFormatError(DecryptionError):
    """An encrypted record whose fields cannot be parsed."""
