"""已安装台账测试"""

from __future__ import annotations

from pathlib import Path

import pytest

from cygpm.core.ledger import LEDGER_HEADER, InstalledLedger


@pytest.fixture()
def db(tmp_path: Path) -> Path:
    p = tmp_path / "installed.db"
    p.write_text(
        "INSTALLED.DB 2\n"
        "bash bash-5.2.21-1.tar.xz 0\n"
        "zlib zlib-1.3-1.tar.xz 0\n",
        encoding="utf-8",
    )
    return p


class TestLoad:
    def test_entries(self, db: Path) -> None:
        ledger = InstalledLedger(db)
        assert ledger.names() == ["bash", "zlib"]
        assert ledger.get("bash").archive == "bash-5.2.21-1.tar.xz"
        assert "zlib" in ledger and ledger.is_installed("zlib")

    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        ledger = InstalledLedger(tmp_path / "nope.db")
        assert ledger.names() == []
        assert ledger.header == LEDGER_HEADER

    def test_bad_status_treated_as_zero(self, tmp_path: Path) -> None:
        p = tmp_path / "installed.db"
        p.write_text("INSTALLED.DB 2\nfoo foo.tar.xz x\n\n", encoding="utf-8")
        assert InstalledLedger(p).get("foo").status == 0


class TestInsert:
    def test_sorted_insert_preserves_header(self, db: Path) -> None:
        ledger = InstalledLedger(db)
        ledger.insert("coreutils", "coreutils-9.0-1.tar.xz")
        assert db.read_text(encoding="utf-8").splitlines() == [
            "INSTALLED.DB 2",
            "bash bash-5.2.21-1.tar.xz 0",
            "coreutils coreutils-9.0-1.tar.xz 0",
            "zlib zlib-1.3-1.tar.xz 0",
        ]

    def test_backup_written_before_replace(self, db: Path) -> None:
        before = db.read_bytes()
        InstalledLedger(db).insert("aaa", "aaa-1.tar.xz")
        assert (db.parent / "installed.db-save").read_bytes() == before

    def test_insert_replaces_same_name(self, db: Path) -> None:
        ledger = InstalledLedger(db)
        ledger.insert("bash", "bash-5.3-1.tar.xz")
        lines = db.read_text(encoding="utf-8").splitlines()
        assert lines.count("bash bash-5.3-1.tar.xz 0") == 1
        assert len(lines) == 3

    def test_new_ledger_gets_header(self, tmp_path: Path) -> None:
        p = tmp_path / "setup" / "installed.db"
        InstalledLedger(p).insert("foo", "foo.tar")
        assert p.read_text(encoding="utf-8") == f"{LEDGER_HEADER}\nfoo foo.tar 0\n"
        assert not (p.parent / "installed.db-save").exists()


class TestDelete:
    def test_delete_exact_name(self, tmp_path: Path) -> None:
        p = tmp_path / "installed.db"
        p.write_text("INSTALLED.DB 2\nfoo a 0\nfoo-doc b 0\n", encoding="utf-8")
        ledger = InstalledLedger(p)
        assert ledger.delete("foo") is True
        assert p.read_text(encoding="utf-8") == "INSTALLED.DB 2\nfoo-doc b 0\n"

    def test_delete_missing(self, db: Path) -> None:
        before = db.read_bytes()
        assert InstalledLedger(db).delete("nope") is False
        assert db.read_bytes() == before
