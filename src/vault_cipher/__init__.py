"""
Vault Cipher - client-side file encryption for an encrypted file vault.

Files are encrypted with a password-derived AES-256 key before they leave
the device. Payloads up to 1 MiB are encrypted in one pass, larger ones in
1 MiB chunks so peak memory stays bounded.

Usage:
    from vault_cipher import encrypt, decrypt
    record = encrypt(data, password)
    assert decrypt(record, password) == data
"""

from vault_cipher.crypto import (
    DecryptionError,
    EncryptedRecord,
    EncryptionError,
    FileEncryption,
    InputError,
    PasswordHash,
    RecordFormatError,
    VaultCipherError,
    decrypt,
    encrypt,
    generate_key,
    hash_password,
    verify_password,
)

__version__ = "0.1.0"
__all__ = [
    "FileEncryption",
    "EncryptedRecord",
    "PasswordHash",
    "encrypt",
    "decrypt",
    "generate_key",
    "hash_password",
    "verify_password",
    "VaultCipherError",
    "InputError",
    "EncryptionError",
    "DecryptionError",
    "RecordFormatError",
]
