# Vault Cipher: Hex Codec
# Reference: DESIGN.md, Section: Hex Codec
#
# IVs, salts, generated keys and password hashes travel as lowercase hex.

import binascii

from .errors import RecordFormatError


def bytes_to_hex(data) -> str:
    """Encode a bytes-like object as lowercase hex (two chars per byte)."""
    return binascii.hexlify(memoryview(data)).decode("ascii")


def hex_to_bytes(text: str) -> bytes:
    """Decode hex text back to bytes.

    Accepts upper or lower case. Raises ValueError on odd length or
    non-hex characters.
    """
    if not isinstance(text, str):
        raise ValueError("Hex input must be a string")
    if len(text) % 2:
        raise ValueError("Hex input must have an even number of characters")
    try:
        return binascii.unhexlify(text)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"Invalid hex input: {exc}") from None


def decode_fixed_hex(text: str, length: int, field: str) -> bytes:
    """Decode a hex field that must hold exactly ``length`` bytes."""
    try:
        raw = hex_to_bytes(text)
    except ValueError:
        raise RecordFormatError(f"Invalid {field}: not hex encoded") from None
    if len(raw) != length:
        raise RecordFormatError(
            f"Invalid {field}: expected {length} bytes, got {len(raw)}"
        )
    return raw
