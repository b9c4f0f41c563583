# Tests for the vault-cipher command line
# Covers: encrypt/decrypt through files, legacy flag, wrong password exit
#         status, password from environment, hash-password, gen-key

import json
import os

import pytest

from vault_cipher.__main__ import build_parser, main
from vault_cipher.crypto import EncryptedRecord, FileEncryption


@pytest.fixture
def plain_file(tmp_path):
    path = tmp_path / "photo.jpg"
    path.write_bytes(os.urandom(FileEncryption.CHUNK_SIZE + 512))
    return path


class TestEncryptDecrypt:
    def test_round_trip(self, plain_file, tmp_path):
        record_path = tmp_path / "out" / "photo.json"
        restored = tmp_path / "restored.jpg"

        assert main(["encrypt", str(plain_file), str(record_path), "--password", "pw"]) == 0
        record = EncryptedRecord.from_json(record_path.read_text())
        assert record.mode == "chunked"

        assert main(["decrypt", str(record_path), str(restored), "--password", "pw"]) == 0
        assert restored.read_bytes() == plain_file.read_bytes()

    def test_legacy_flag(self, plain_file, tmp_path):
        record_path = tmp_path / "photo.json"
        assert main(["encrypt", str(plain_file), str(record_path),
                     "--password", "pw", "--legacy"]) == 0
        assert json.loads(record_path.read_text())["version"] == 1

    def test_wrong_password(self, plain_file, tmp_path, capsys):
        record_path = tmp_path / "photo.json"
        restored = tmp_path / "restored.jpg"
        main(["encrypt", str(plain_file), str(record_path), "--password", "p1"])

        assert main(["decrypt", str(record_path), str(restored), "--password", "p2"]) == 1
        assert not restored.exists()
        assert "cannot be opened" in capsys.readouterr().err

    def test_corrupt_record_file(self, tmp_path, capsys):
        record_path = tmp_path / "broken.json"
        record_path.write_text("{not json")
        assert main(["decrypt", str(record_path), str(tmp_path / "x"), "--password", "pw"]) == 1
        assert "cannot be opened" in capsys.readouterr().err

    @pytest.mark.parametrize("content", [b"\xff\xfe\x00binary", b"\x89PNG\r\n\x1a\n\x00\xff\xd8"])
    def test_binary_record_file(self, tmp_path, capsys, content):
        record_path = tmp_path / "photo.jpg"
        record_path.write_bytes(content)
        restored = tmp_path / "restored.jpg"
        assert main(["decrypt", str(record_path), str(restored), "--password", "pw"]) == 1
        assert not restored.exists()
        assert "cannot be opened" in capsys.readouterr().err

    def test_password_from_environment(self, plain_file, tmp_path, monkeypatch):
        monkeypatch.setenv("VAULT_CIPHER_PASSWORD", "env-pw")
        record_path = tmp_path / "photo.json"
        assert main(["encrypt", str(plain_file), str(record_path)]) == 0
        record = EncryptedRecord.from_json(record_path.read_text())
        assert FileEncryption.decrypt(record, "env-pw") == plain_file.read_bytes()

    def test_missing_password(self, plain_file, tmp_path, capsys):
        assert main(["encrypt", str(plain_file), str(tmp_path / "x.json")]) == 1
        assert "Password is required" in capsys.readouterr().err

    def test_missing_source(self, tmp_path):
        assert main(["encrypt", str(tmp_path / "nope"), str(tmp_path / "x.json"),
                     "--password", "pw"]) == 1

    def test_audit_events_written(self, plain_file, tmp_path, audit_logger):
        record_path = tmp_path / "photo.json"
        main(["encrypt", str(plain_file), str(record_path), "--password", "pw"])
        main(["decrypt", str(record_path), str(tmp_path / "r"), "--password", "bad"])

        events = [json.loads(line) for line in
                  audit_logger.log_file.read_text(encoding="utf-8").splitlines()]
        types = [e["event_type"] for e in events]
        assert types == ["file.encrypted", "file.decrypt.failed"]
        assert events[1]["severity"] == "alert"
        assert "pw" not in json.dumps(events[0]["details"])


class TestUtilities:
    def test_hash_password(self, capsys):
        assert main(["hash-password", "--password", "hunter2", "--salt", "00" * 16]) == 0
        out = dict(line.split("=", 1) for line in capsys.readouterr().out.split())
        assert FileEncryption.verify_password("hunter2", out["hash"], out["salt"])

    def test_gen_key(self, capsys):
        assert main(["gen-key"]) == 0
        key = capsys.readouterr().out.strip()
        assert len(bytes.fromhex(key)) == 32

    def test_parser_requires_command(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])
