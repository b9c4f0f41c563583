# Vault Cipher: File Encryption Engine
# Reference: DESIGN.md, Section: Encryption Engine
#
# Password -> key (PBKDF2-HMAC-SHA256, 1000 iterations, 256-bit key)
# Payloads <= 1 MiB are encrypted in one pass, larger payloads in 1 MiB
# chunks joined with the "|CHUNK|" delimiter.
#
# Record versions:
#   v1: AES-256-CBC + PKCS7, one key/IV for every chunk (existing stored files)
#   v2: AES-256-GCM, nonce = iv || chunk index, AAD binds chunk position

import base64
import hmac
import logging
import os
import struct
from typing import List, NamedTuple, Optional, Union

from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .errors import DecryptionError, EncryptionError, InputError, VaultCipherError
from .hex_codec import bytes_to_hex, hex_to_bytes
from .record import (
    CHUNK_DELIMITER,
    FORMAT_VERSION,
    IV_LENGTH,
    LEGACY_VERSION,
    MODE_CHUNKED,
    MODE_SINGLE,
    SALT_LENGTH,
    SUPPORTED_VERSIONS,
    EncryptedRecord,
)

logger = logging.getLogger(__name__)

Payload = Union[bytes, bytearray, memoryview, str]


class PasswordHash(NamedTuple):
    """Hex-encoded PBKDF2 hash and the hex salt it was derived with."""
    hash: str
    salt: str


class FileEncryption:
    """
    Stateless file encryption engine.

    Every operation takes all of its inputs as arguments and returns a fresh
    result, so a single import can be shared across threads.

    Flow:
    1. Caller passes file bytes + password
    2. PBKDF2 derives a 256-bit key from password + random salt
    3. Payload is encrypted in one pass or in 1 MiB chunks
    4. Caller stores the EncryptedRecord; decrypt() reverses it
    """

    KEY_SIZE = 256                  # bits
    KEY_LENGTH = KEY_SIZE // 8      # bytes
    ITERATION_COUNT = 1000
    CHUNK_SIZE = 1024 * 1024        # 1 MiB, also the single-pass threshold
    IV_LENGTH = IV_LENGTH
    SALT_LENGTH = SALT_LENGTH
    RANDOM_KEY_LENGTH = 32
    FORMAT_VERSION = FORMAT_VERSION

    _BLOCK_SIZE = algorithms.AES.block_size  # 128 bits

    # ── Key Derivation ───────────────────────────────────────────────

    @staticmethod
    def derive_key(password: str, salt: str, version: int = FORMAT_VERSION) -> bytes:
        """
        Derive the 256-bit file key from a password and hex salt.

        Version 1 records fed the salt's hex text into PBKDF2, version 2
        feeds the raw salt bytes.

        Returns:
            32-byte key, identical for identical (password, salt, version)
        """
        FileEncryption._check_password(password)
        if version == LEGACY_VERSION:
            salt_input = salt.encode("utf-8")
        else:
            salt_input = FileEncryption._salt_bytes(salt)
        return FileEncryption._pbkdf2(password, salt_input)

    @staticmethod
    def _pbkdf2(password: str, salt: bytes) -> bytes:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=FileEncryption.KEY_LENGTH,
            salt=salt,
            iterations=FileEncryption.ITERATION_COUNT,
            backend=default_backend(),
        )
        return kdf.derive(password.encode("utf-8"))

    # ── Encrypt ──────────────────────────────────────────────────────

    @staticmethod
    def encrypt(
        data: Payload,
        password: str,
        salt: Optional[str] = None,
        version: int = FORMAT_VERSION,
    ) -> EncryptedRecord:
        """
        Encrypt a payload with a password-derived key.

        Args:
            data: File content. Text is encoded as UTF-8.
            password: Non-empty password chosen by the calling layer
            salt: Hex salt (16 bytes) to reuse; a fresh one is generated if None
            version: Record format to write (2 by default, 1 for legacy readers)

        Returns:
            EncryptedRecord with hex iv/salt and base64 ciphertext

        Raises:
            InputError: Empty password, unsupported data type or bad salt
            EncryptionError: The cipher or random source failed
        """
        FileEncryption._check_password(password)
        view = FileEncryption._payload_view(data)
        if salt is not None:
            FileEncryption._salt_bytes(salt)
            salt = salt.lower()
        if version not in SUPPORTED_VERSIONS:
            raise InputError(f"Unsupported record version: {version!r}")

        size = len(view)
        chunked = size > FileEncryption.CHUNK_SIZE
        mode = MODE_CHUNKED if chunked else MODE_SINGLE

        try:
            if salt is None:
                salt = bytes_to_hex(os.urandom(FileEncryption.SALT_LENGTH))
            key = FileEncryption.derive_key(password, salt, version)
            iv = os.urandom(FileEncryption.IV_LENGTH)

            if chunked:
                total = (size + FileEncryption.CHUNK_SIZE - 1) // FileEncryption.CHUNK_SIZE
                logger.debug("Encrypting %d bytes in %d chunks", size, total)
                pieces: List[str] = []
                for index in range(total):
                    start = index * FileEncryption.CHUNK_SIZE
                    chunk = view[start:start + FileEncryption.CHUNK_SIZE]
                    pieces.append(FileEncryption._encrypt_chunk(
                        chunk, key, iv, version, mode, index, total,
                    ))
                    logger.debug("Chunk %d/%d encrypted (%d bytes)",
                                 index + 1, total, len(chunk))
                ciphertext = CHUNK_DELIMITER.join(pieces)
            else:
                ciphertext = FileEncryption._encrypt_chunk(
                    view, key, iv, version, mode, 0, 1,
                )
        except VaultCipherError:
            raise
        except Exception as exc:
            logger.debug("Encryption failed: %s", type(exc).__name__)
            raise EncryptionError() from None

        return EncryptedRecord(
            ciphertext=ciphertext,
            iv=bytes_to_hex(iv),
            salt=salt,
            mode=mode,
            version=version,
        )

    @staticmethod
    def _encrypt_chunk(chunk, key: bytes, iv: bytes, version: int,
                       mode: str, index: int, total: int) -> str:
        if version == LEGACY_VERSION:
            padder = padding.PKCS7(FileEncryption._BLOCK_SIZE).padder()
            padded = padder.update(chunk) + padder.finalize()
            encryptor = Cipher(
                algorithms.AES(key), modes.CBC(iv), backend=default_backend()
            ).encryptor()
            sealed = encryptor.update(padded) + encryptor.finalize()
        else:
            sealed = AESGCM(key).encrypt(
                FileEncryption._chunk_nonce(iv, index),
                bytes(chunk),
                FileEncryption._chunk_aad(version, mode, index, total),
            )
        return base64.b64encode(sealed).decode("ascii")

    # ── Decrypt ──────────────────────────────────────────────────────

    @staticmethod
    def decrypt(record: Union[EncryptedRecord, dict], password: str) -> bytearray:
        """
        Decrypt a record produced by encrypt().

        Chunks are decoded and decrypted strictly in order, one at a time, and
        appended to a single output buffer; nothing is returned unless every
        chunk decrypts.

        Raises:
            InputError: Empty password
            RecordFormatError: Record fields are missing or malformed
            DecryptionError: Wrong password, corrupted or tampered data
        """
        FileEncryption._check_password(password)
        if not isinstance(record, EncryptedRecord):
            record = EncryptedRecord.from_dict(record)

        try:
            key = FileEncryption.derive_key(password, record.salt, record.version)
            iv = record.iv_bytes
            total = record.chunk_count
            if record.is_chunked:
                logger.debug("Decrypting record with %d chunks", total)

            plaintext = bytearray()
            for index, piece in enumerate(record.iter_chunks()):
                plaintext += FileEncryption._decrypt_chunk(
                    piece, key, iv, record.version, record.mode, index, total,
                )
            return plaintext
        except VaultCipherError:
            raise
        except Exception as exc:
            logger.debug("Decryption failed: %s", type(exc).__name__)
            raise DecryptionError() from None

    @staticmethod
    def _decrypt_chunk(piece: str, key: bytes, iv: bytes, version: int,
                       mode: str, index: int, total: int) -> bytes:
        sealed = base64.b64decode(piece.encode("ascii"), validate=True)
        if version == LEGACY_VERSION:
            decryptor = Cipher(
                algorithms.AES(key), modes.CBC(iv), backend=default_backend()
            ).decryptor()
            padded = decryptor.update(sealed) + decryptor.finalize()
            unpadder = padding.PKCS7(FileEncryption._BLOCK_SIZE).unpadder()
            return unpadder.update(padded) + unpadder.finalize()
        return AESGCM(key).decrypt(
            FileEncryption._chunk_nonce(iv, index),
            sealed,
            FileEncryption._chunk_aad(version, mode, index, total),
        )

    @staticmethod
    def _chunk_nonce(iv: bytes, index: int) -> bytes:
        return iv + struct.pack(">I", index)

    @staticmethod
    def _chunk_aad(version: int, mode: str, index: int, total: int) -> bytes:
        return f"vault-cipher/v{version}/{mode}/{index}/{total}".encode("ascii")

    # ── Auxiliary ────────────────────────────────────────────────────

    @staticmethod
    def generate_key() -> str:
        """Generate a random 256-bit secret, hex encoded."""
        return bytes_to_hex(os.urandom(FileEncryption.RANDOM_KEY_LENGTH))

    @staticmethod
    def hash_password(password: str, salt: Optional[str] = None) -> PasswordHash:
        """
        Hash a password for verification (not for file encryption).

        The salt text itself is the PBKDF2 salt, as with version 1 file keys,
        so hashes stored by existing clients keep verifying. A fresh hex salt
        is generated if None.
        """
        FileEncryption._check_password(password)
        if salt is None:
            salt = bytes_to_hex(os.urandom(FileEncryption.SALT_LENGTH))
        if not isinstance(salt, str) or not salt:
            raise InputError("Password salt must be non-empty text")
        digest = FileEncryption._pbkdf2(password, salt.encode("utf-8"))
        return PasswordHash(hash=bytes_to_hex(digest), salt=salt)

    @staticmethod
    def verify_password(password: str, password_hash: str, salt: str) -> bool:
        """Check a password against a stored hex hash (constant-time compare).

        A stored hash that is not hex text never matches.
        """
        try:
            expected = hex_to_bytes(password_hash)
        except ValueError:
            return False
        computed = hex_to_bytes(FileEncryption.hash_password(password, salt).hash)
        return hmac.compare_digest(computed, expected)

    # ── Validation ───────────────────────────────────────────────────

    @staticmethod
    def _check_password(password: str) -> None:
        if not isinstance(password, str) or not password:
            raise InputError("Password is required")

    @staticmethod
    def _payload_view(data: Payload) -> memoryview:
        if isinstance(data, str):
            return memoryview(data.encode("utf-8"))
        if isinstance(data, (bytes, bytearray, memoryview)):
            try:
                return memoryview(data).cast("B")
            except TypeError:
                raise InputError("File data must be a contiguous buffer") from None
        if data is None:
            raise InputError("File data is required")
        raise InputError(f"Unsupported data type: {type(data).__name__}")

    @staticmethod
    def _salt_bytes(salt: str) -> bytes:
        try:
            raw = hex_to_bytes(salt)
        except ValueError:
            raise InputError("Salt must be hex encoded") from None
        if len(raw) != FileEncryption.SALT_LENGTH:
            raise InputError(
                f"Salt must be {FileEncryption.SALT_LENGTH} bytes, got {len(raw)}"
            )
        return raw
