"""setup.rc 镜像 / 缓存设置测试"""

from __future__ import annotations

from pathlib import Path

import pytest

from cygpm.core.exceptions import ConfigError
from cygpm.core.settings import SetupSettings

SETUP_RC = """\
last-cache
\tC:\\cygwin64\\var\\cache
net-method
\tDirect
last-mirror
\thttp://old.example.org/
"""


@pytest.fixture()
def settings(tmp_path: Path) -> SetupSettings:
    p = tmp_path / "setup.rc"
    p.write_text(SETUP_RC, encoding="utf-8")
    return SetupSettings(p)


class TestSetupSettings:
    def test_get(self, settings: SetupSettings) -> None:
        assert settings.get_mirror() == "http://old.example.org/"
        assert settings.get_cache_dir() == "C:\\cygwin64\\var\\cache"

    def test_mirror_round_trip(self, settings: SetupSettings) -> None:
        settings.set_mirror("https://mirror.example.com/cygwin/")
        assert settings.get_mirror() == "https://mirror.example.com/cygwin/"

    def test_cache_round_trip(self, settings: SetupSettings) -> None:
        settings.set_cache_dir("/var/cache/cygpm")
        assert settings.get_cache_dir() == "/var/cache/cygpm"

    def test_other_keys_untouched(self, settings: SetupSettings) -> None:
        settings.set_cache_dir("/tmp/c")
        text = settings.path.read_text(encoding="utf-8")
        assert "net-method\n\tDirect\n" in text
        assert text.startswith("last-cache\n\t/tmp/c\n")

    def test_missing_marker_is_config_error(self, tmp_path: Path) -> None:
        p = tmp_path / "setup.rc"
        p.write_text("net-method\n\tDirect\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="last-mirror"):
            SetupSettings(p).set_mirror("http://x/")
        assert p.read_text(encoding="utf-8") == "net-method\n\tDirect\n"

    def test_missing_file(self, tmp_path: Path) -> None:
        s = SetupSettings(tmp_path / "setup.rc")
        assert s.get_mirror() == ""
        with pytest.raises(ConfigError):
            s.set_cache_dir("/x")

    def test_marker_without_value(self, tmp_path: Path) -> None:
        p = tmp_path / "setup.rc"
        p.write_text("last-mirror\nlast-cache\n\t/c\n", encoding="utf-8")
        s = SetupSettings(p)
        assert s.get_mirror() == ""
        s.set_mirror("http://m/")
        assert s.get_mirror() == "http://m/"
        assert s.get_cache_dir() == "/c"
