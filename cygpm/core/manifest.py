"""包文件清单存储 (<setup_dir>/<name>.lst.gz)

清单在下载时从归档目录表生成一次，gzip 压缩保存，
生命周期与台账条目无关：只下载不安装也会留下清单。
"""

from __future__ import annotations

import gzip
import logging
from pathlib import Path

from cygpm.utils.yaml_io import atomic_write

logger = logging.getLogger(__name__)

MANIFEST_SUFFIX = ".lst.gz"


def normalize_path(path: str) -> str:
    """统一为相对安装根目录的路径形式"""
    path = path.replace("\\", "/")
    while path.startswith("./"):
        path = path[2:]
    return path.lstrip("/")


class ManifestStore:
    """清单存储"""

    def __init__(self, setup_dir: Path) -> None:
        self.setup_dir = setup_dir

    def path(self, name: str) -> Path:
        return self.setup_dir / f"{name}{MANIFEST_SUFFIX}"

    def exists(self, name: str) -> bool:
        return self.path(name).is_file()

    def write(self, name: str, entries: list[str]) -> Path:
        content = "".join(f"{e}\n" for e in entries)
        # mtime=0 保证同一内容生成的压缩文件字节一致
        atomic_write(self.path(name), gzip.compress(content.encode("utf-8"), mtime=0))
        logger.debug("清单已保存: %s (%d 条)", name, len(entries))
        return self.path(name)

    def read(self, name: str) -> list[str]:
        with gzip.open(self.path(name), "rt", encoding="utf-8") as f:
            return [line.rstrip("\n") for line in f if line.strip()]

    def delete(self, name: str) -> bool:
        p = self.path(name)
        if not p.exists():
            return False
        p.unlink()
        return True

    def names(self) -> list[str]:
        if not self.setup_dir.is_dir():
            return []
        return sorted(
            p.name[: -len(MANIFEST_SUFFIX)]
            for p in self.setup_dir.glob(f"*{MANIFEST_SUFFIX}")
        )

    def owner_of(self, path: str, among: list[str] | None = None) -> str | None:
        """查找拥有 path 的包名，没有则返回 None"""
        return self.owners_of([path], among).get(normalize_path(path))

    def owners_of(
        self, paths: list[str], among: list[str] | None = None,
    ) -> dict[str, str]:
        """批量反查，每个清单只读一次；同一路径以先找到的包为准

        among 限定参与查找的包（如只查已安装的包），None 表示全部清单
        """
        targets = {normalize_path(p) for p in paths}
        owners: dict[str, str] = {}
        candidates = self.names() if among is None else sorted(n for n in among if self.exists(n))
        for name in candidates:
            for entry in self.read(name):
                if entry in targets and entry not in owners:
                    owners[entry] = name
        return owners
