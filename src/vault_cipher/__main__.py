# Vault Cipher: Command Line Entry Point
# Reference: DESIGN.md, Section: CLI
#
# Encrypt a file into a JSON record, decrypt a record back into a file,
# hash passwords and generate random keys.

import argparse
import logging
import os
import sys
from pathlib import Path

from . import __version__
from .core import EventType, get_audit_logger, get_settings
from .crypto import (
    LEGACY_VERSION,
    DecryptionError,
    EncryptedRecord,
    EncryptionError,
    FileEncryption,
    InputError,
)

logger = logging.getLogger("vault_cipher")

PASSWORD_ENV = "VAULT_CIPHER_PASSWORD"


def _password(args: argparse.Namespace) -> str:
    password = args.password or os.environ.get(PASSWORD_ENV, "")
    if not password:
        raise InputError(f"Password is required (--password or {PASSWORD_ENV})")
    return password


def cmd_encrypt(args: argparse.Namespace) -> int:
    src = Path(args.src)
    if not src.is_file():
        print(f"[!] Not a file: {src}", file=sys.stderr)
        return 1

    settings = get_settings()
    version = LEGACY_VERSION if args.legacy else settings.format_version
    data = src.read_bytes()
    audit = get_audit_logger()
    try:
        record = FileEncryption.encrypt(data, _password(args), version=version)
    except EncryptionError:
        audit.log_crypto_event(EventType.FILE_ENCRYPT_FAILED, src.name, size=len(data))
        print(f"[!] {src.name} could not be encrypted; the file was not saved.",
              file=sys.stderr)
        return 1

    dest = Path(args.dest)
    dest.parent.mkdir(parents=True, exist_ok=True)
    tmp = dest.with_suffix(dest.suffix + ".tmp")
    tmp.write_text(record.to_json(), encoding="utf-8")
    os.replace(tmp, dest)

    audit.log_crypto_event(
        EventType.FILE_ENCRYPTED, src.name, size=len(data),
        details={"mode": record.mode, "version": record.version},
    )
    print(f"[+] Encrypted {src.name} ({len(data)} bytes, {record.chunk_count} chunk(s)) -> {dest}")
    return 0


def cmd_decrypt(args: argparse.Namespace) -> int:
    src = Path(args.src)
    if not src.is_file():
        print(f"[!] Not a file: {src}", file=sys.stderr)
        return 1

    audit = get_audit_logger()
    try:
        record = EncryptedRecord.from_json(src.read_bytes())
        data = FileEncryption.decrypt(record, _password(args))
    except DecryptionError:
        audit.log_crypto_event(EventType.FILE_DECRYPT_FAILED, src.name)
        print(f"[!] {src.name} cannot be opened (wrong password or corrupted file).",
              file=sys.stderr)
        return 1

    dest = Path(args.dest)
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_bytes(data)
    audit.log_crypto_event(EventType.FILE_DECRYPTED, src.name, size=len(data))
    print(f"[+] Decrypted {src.name} -> {dest}")
    return 0


def cmd_hash_password(args: argparse.Namespace) -> int:
    result = FileEncryption.hash_password(_password(args), args.salt)
    print(f"hash={result.hash}")
    print(f"salt={result.salt}")
    return 0


def cmd_gen_key(args: argparse.Namespace) -> int:
    print(FileEncryption.generate_key())
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="vault-cipher",
        description="Client-side file encryption for the encrypted vault",
    )
    p.add_argument("--version", action="version", version=f"Vault Cipher v{__version__}")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_enc = sub.add_parser("encrypt", help="Encrypt a file into a JSON record")
    p_enc.add_argument("src", help="Plaintext file")
    p_enc.add_argument("dest", help="Output record (.json)")
    p_enc.add_argument("--password", help=f"Password (default: ${PASSWORD_ENV})")
    p_enc.add_argument("--legacy", action="store_true",
                       help="Write a version 1 (AES-CBC) record for older clients")
    p_enc.set_defaults(func=cmd_encrypt)

    p_dec = sub.add_parser("decrypt", help="Decrypt a JSON record into a file")
    p_dec.add_argument("src", help="Encrypted record (.json)")
    p_dec.add_argument("dest", help="Output plaintext file")
    p_dec.add_argument("--password", help=f"Password (default: ${PASSWORD_ENV})")
    p_dec.set_defaults(func=cmd_decrypt)

    p_hash = sub.add_parser("hash-password", help="Hash a password for verification")
    p_hash.add_argument("--password", help=f"Password (default: ${PASSWORD_ENV})")
    p_hash.add_argument("--salt", help="Salt to reuse (default: random hex)")
    p_hash.set_defaults(func=cmd_hash_password)

    p_key = sub.add_parser("gen-key", help="Print a random 256-bit hex key")
    p_key.set_defaults(func=cmd_gen_key)

    return p


def main(argv=None) -> int:
    """Main entry point for the vault-cipher CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, get_settings().log_level, logging.INFO),
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(args)
    except InputError as exc:
        print(f"[!] {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
