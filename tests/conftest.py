"""共享 fixture — 隔离的安装根目录 + 内存镜像 + mock 脚本执行器

  Sandbox.add_package()   生成真实 tar 归档，发布到 FakeTransport，
                          同时生成对应的目录记录
  Sandbox.write_catalog() 把目录写入缓存位置（相当于已执行 update）
  Sandbox.container       注入 FakeTransport / FakeExecutor 的服务容器

测试不访问网络，也不执行真实脚本。
"""

from __future__ import annotations

import hashlib
import io
import tarfile
from pathlib import Path

import pytest

import cygpm.core.config as cfgmod
from cygpm.core.config import Config
from cygpm.core.exceptions import FetchError
from cygpm.services.container import ServiceContainer, set_container
from cygpm.utils.net import join_url
from cygpm.utils.shell import CommandResult

MIRROR = "http://mirror.example.org/cygwin/"
ARCH = "x86_64"


def build_archive(files: dict[str, bytes], dirs: tuple[str, ...] = ()) -> bytes:
    """在内存中生成 tar.gz 归档"""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tf:
        for d in dirs:
            info = tarfile.TarInfo(d.rstrip("/"))
            info.type = tarfile.DIRTYPE
            info.mode = 0o755
            tf.addfile(info)
        for name, data in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o644
            tf.addfile(info, io.BytesIO(data))
    return buf.getvalue()


class FakeTransport:
    """内存镜像: url → bytes，未发布的 url 抛 FetchError"""

    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}
        self.calls: list[str] = []

    def publish(self, path: str, data: bytes) -> str:
        url = join_url(MIRROR, path)
        self.files[url] = data
        return url

    def download(self, url: str, dest: Path) -> None:
        self.calls.append(url)
        if url not in self.files:
            raise FetchError(f"404: {url}")
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(self.files[url])


class FakeExecutor:
    """记录命令，按 fail_on 中的脚本名返回失败"""

    def __init__(self) -> None:
        self.commands: list[list[str]] = []
        self.fail_on: set[str] = set()

    def execute(
        self,
        cmd: list[str],
        *,
        cwd: str = ".",
        env: dict[str, str] | None = None,
        timeout: int | None = None,
    ) -> CommandResult:
        self.commands.append(cmd)
        if Path(cmd[-1]).name in self.fail_on:
            return CommandResult(returncode=1, stdout="", stderr="boom")
        return CommandResult(returncode=0, stdout="", stderr="")

    @property
    def scripts(self) -> list[str]:
        return [Path(c[-1]).name for c in self.commands]


class Sandbox:
    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "root"
        self.cache = tmp_path / "cache"
        self.setup_dir = self.root / "etc" / "setup"
        self.setup_dir.mkdir(parents=True)
        (self.setup_dir / "setup.rc").write_text(
            f"last-cache\n\t{self.cache}\nlast-mirror\n\t{MIRROR}\n",
            encoding="utf-8",
        )
        self.config = Config(
            root=str(self.root), cache_dir=str(tmp_path / "unused-cache"),
            arch=ARCH, essential_tools=["bash", "tar"],
        )
        self.transport = FakeTransport()
        self.executor = FakeExecutor()
        self.records: list[str] = []
        self.archives: dict[str, bytes] = {}
        self._container: ServiceContainer | None = None

    def add_package(
        self,
        name: str,
        files: dict[str, bytes] | None = None,
        *,
        dirs: tuple[str, ...] = (),
        requires: tuple[str, ...] = (),
        category: str = "Base",
        algorithm: str = "md5",
        publish: bool = True,
        data: bytes | None = None,
    ) -> str:
        """生成归档并追加目录记录，返回 install 路径；data 指定时直接用作归档内容"""
        if data is None:
            data = build_archive(files or {f"usr/share/doc/{name}/README": name.encode()}, dirs)
        path = f"{ARCH}/release/{name}/{name}-1.0-1.tar.gz"
        digest = hashlib.new(algorithm, data).hexdigest()
        if publish:
            self.transport.publish(path, data)
        self.archives[name] = data

        lines = [f"@ {name}", f'sdesc: "The {name} package"', f"category: {category}"]
        if requires:
            lines.append("requires: " + " ".join(requires))
        lines += ["version: 1.0-1", f"install: {path} {len(data)} {digest}"]
        self.records.append("\n".join(lines))
        return path

    def catalog_text(self) -> str:
        header = "release: cygwin\narch: x86_64\nsetup-timestamp: 1700000000\n"
        return header + "\n" + "\n\n".join(self.records) + "\n"

    def write_catalog(self) -> Path:
        path = self.container.fetcher.catalog_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.catalog_text(), encoding="utf-8")
        return path

    @property
    def container(self) -> ServiceContainer:
        if self._container is None:
            self._container = ServiceContainer(
                config=self.config, transport=self.transport, executor=self.executor,
            )
        return self._container

    @property
    def ledger_path(self) -> Path:
        return self.setup_dir / "installed.db"

    def install_state(self, name: str, files: dict[str, bytes], dirs: tuple[str, ...] = ()) -> None:
        """直接构造已安装状态（台账 + 清单 + 磁盘文件），不走安装流程"""
        for d in dirs:
            (self.root / d).mkdir(parents=True, exist_ok=True)
        for rel, data in files.items():
            p = self.root / rel
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_bytes(data)
        self.container.manifests.write(name, list(dirs) + list(files))
        self.container.ledger.insert(name, f"{name}-1.0-1.tar.gz")


@pytest.fixture()
def sandbox(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(cfgmod, "_current", None)
    sb = Sandbox(tmp_path)
    yield sb
    set_container(None)


@pytest.fixture()
def make_archive():
    return build_archive
