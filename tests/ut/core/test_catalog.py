"""包目录解析测试"""

from __future__ import annotations

from pathlib import Path

import pytest

from cygpm.core.catalog import CatalogStore
from cygpm.core.exceptions import CatalogUnavailable, ValidationError

MD5_A = "a" * 32
MD5_B = "b" * 32
SHA512 = "c" * 128

CATALOG = f"""\
release: cygwin
arch: x86_64
setup-timestamp: 1700000000

@ bash
sdesc: "The GNU Bourne Again SHell"
ldesc: "Bash is an sh-compatible shell.
install: this/is/not/a/field 1 {MD5_B}
It is the default shell."
category: Base Shells
requires: cygwin libreadline7
version: 5.2.21-1
install: x86_64/release/bash/bash-5.2.21-1.tar.xz 1234 {SHA512}
[prev]
version: 5.2.15-3
install: x86_64/release/bash/bash-5.2.15-3.tar.xz 1200 {MD5_A}

@ cygwin
sdesc: "The UNIX emulation engine"
category: Base
install: x86_64/release/cygwin/cygwin-3.5.0-1.tar.xz 900 {MD5_A}

@ libreadline7
category: Libs
requires: libncursesw10
install: x86_64/release/readline/libreadline7-8.2-1.tar.xz 100 {MD5_A}

@ cygwin
category: Obsolete
install: x86_64/release/cygwin/cygwin-1.0-1.tar.xz 1 {MD5_B}
"""


@pytest.fixture()
def catalog() -> CatalogStore:
    return CatalogStore.load(CATALOG)


class TestParse:
    def test_fields(self, catalog: CatalogStore) -> None:
        rec = catalog.lookup("bash")
        assert rec is not None
        assert rec.category == ["Base", "Shells"]
        assert rec.requires == ["cygwin", "libreadline7"]
        assert rec.sdesc == "The GNU Bourne Again SHell"
        assert rec.version == "5.2.21-1"

    def test_first_install_line_wins(self, catalog: CatalogStore) -> None:
        """[prev] 段和 ldesc 里的 install 文本都不覆盖第一条 install 行"""
        spec = catalog.lookup("bash").install
        assert spec.path == "x86_64/release/bash/bash-5.2.21-1.tar.xz"
        assert spec.size == 1234
        assert spec.digest == SHA512
        assert spec.archive_name == "bash-5.2.21-1.tar.xz"

    def test_duplicate_records_first_occurrence(self, catalog: CatalogStore) -> None:
        rec = catalog.lookup("cygwin")
        assert rec.install.digest == MD5_A
        assert rec.category == ["Base"]
        # 目录本身不去重
        assert [r.name for r in catalog.records].count("cygwin") == 2
        assert len(catalog) == 3

    def test_header_ignored(self, catalog: CatalogStore) -> None:
        assert catalog.names() == ["bash", "cygwin", "libreadline7"]

    def test_description_is_raw_block(self, catalog: CatalogStore) -> None:
        desc = catalog.lookup("cygwin").description
        assert desc.startswith("@ cygwin\n")
        assert "The UNIX emulation engine" in desc

    def test_lookup_missing(self, catalog: CatalogStore) -> None:
        assert catalog.lookup("nope") is None
        assert "nope" not in catalog

    def test_incomplete_install_line_ignored(self) -> None:
        cat = CatalogStore.load("@ foo\ninstall: x/foo.tar 10\n")
        assert cat.lookup("foo").install is None

    def test_minimal_record(self) -> None:
        cat = CatalogStore.load(f"@ foo\nrequires: bar\ninstall: x/foo.tar 10 {MD5_A}\n")
        rec = cat.lookup("foo")
        assert rec.requires == ["bar"]
        assert rec.install.path == "x/foo.tar"


class TestQueries:
    def test_find_by_category(self, catalog: CatalogStore) -> None:
        assert catalog.find_by_category("Base") == ["bash", "cygwin"]
        assert catalog.find_by_category("^Libs$") == ["libreadline7"]

    def test_category_case_sensitive(self, catalog: CatalogStore) -> None:
        assert catalog.find_by_category("base") == []

    def test_search_names(self, catalog: CatalogStore) -> None:
        assert catalog.search("^lib") == ["libreadline7"]
        assert catalog.search("w") == ["cygwin"]

    def test_invalid_pattern(self, catalog: CatalogStore) -> None:
        with pytest.raises(ValidationError, match="无效的匹配模式"):
            catalog.search("(")


class TestFromFile:
    def test_missing_cache_requires_update(self, tmp_path: Path) -> None:
        with pytest.raises(CatalogUnavailable, match="update"):
            CatalogStore.from_file(tmp_path / "setup.ini")

    def test_load_file(self, tmp_path: Path) -> None:
        f = tmp_path / "setup.ini"
        f.write_text(CATALOG, encoding="utf-8")
        assert "bash" in CatalogStore.from_file(f)
