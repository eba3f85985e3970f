"""删除引擎

单个目标的状态流转（终态: NotInstalled / Blocked / Removed）:
  1. 不在台账中 → NotInstalled（不算错误）
  2. 清单缺失 → ManifestMissing，终止整次运行
  3. 重新计算基础工具保护集
  4. 清单与保护集有交集 → Blocked，抛 EssentialFileConflict 终止整次运行，
     台账、清单和磁盘文件保持原样
  5. 执行删除前脚本 → 删除清单中的文件 → 删除已变空的目录
     → 删除清单和过期的安装后脚本标记 → 台账删除该条目

两轮删除使用删除前读取的同一份清单快照，清单是 "包拥有哪些文件" 的唯一依据。
非空目录原样保留（共享目录不动）。
解析后落在安装根之外的条目（"..", 指向外部的符号链接目录）一律跳过。
"""

from __future__ import annotations

import logging
from pathlib import Path

from cygpm.core.essential import EssentialGuard
from cygpm.core.exceptions import EssentialFileConflict, ManifestMissing
from cygpm.core.ledger import InstalledLedger
from cygpm.core.manifest import ManifestStore, normalize_path
from cygpm.core.models import RemoveResult, RemoveStatus
from cygpm.core.scripts import ScriptRunner

logger = logging.getLogger(__name__)


class RemoveEngine:
    def __init__(
        self,
        root: Path,
        ledger: InstalledLedger,
        manifests: ManifestStore,
        guard: EssentialGuard,
        scripts: ScriptRunner,
    ) -> None:
        self.root = root
        self.ledger = ledger
        self.manifests = manifests
        self.guard = guard
        self.scripts = scripts

    def remove_all(self, names: list[str]) -> list[RemoveResult]:
        """按顺序删除；ManifestMissing / EssentialFileConflict 直接向上抛出"""
        return [self.remove(name) for name in names]

    def remove(self, name: str) -> RemoveResult:
        if not self.ledger.is_installed(name):
            logger.warning("未安装，跳过: %s", name)
            return RemoveResult(name=name, status=RemoveStatus.NOT_INSTALLED)

        if not self.manifests.exists(name):
            raise ManifestMissing(
                f"包 '{name}' 的清单缺失，无法删除", package=name,
            )

        entries = [normalize_path(e) for e in self.manifests.read(name)]
        conflicts = self.guard.conflicts(entries, self.guard.compute())
        if conflicts:
            logger.error(
                "拒绝删除 %s: 拥有 %d 个基础工具文件 (%s)",
                name, len(conflicts), ", ".join(conflicts[:5]),
            )
            raise EssentialFileConflict(
                f"包 '{name}' 拥有基础工具依赖的文件，拒绝删除",
                package=name, paths=conflicts,
            )

        logger.info("删除: %s", name)
        self.scripts.run_preremove(name)
        removed = self._remove_files(entries)
        kept = self._remove_empty_dirs(entries)

        self.manifests.delete(name)
        self.scripts.done_marker(name).unlink(missing_ok=True)
        self.ledger.delete(name)
        return RemoveResult(
            name=name, status=RemoveStatus.REMOVED,
            removed_files=removed, kept_dirs=kept,
        )

    def _target(self, entry: str) -> Path | None:
        """清单条目对应的磁盘路径，落在安装根之外时返回 None

        条目本身不跟随符号链接解析，只要求其所在目录位于安装根之下。
        """
        rel = entry.rstrip("/")
        if not rel or ".." in rel.split("/"):
            return None
        path = self.root / rel
        if not path.parent.resolve().is_relative_to(self.root.resolve()):
            return None
        return path

    def _remove_files(self, entries: list[str]) -> int:
        count = 0
        for entry in entries:
            if entry.endswith("/"):
                continue
            path = self._target(entry)
            if path is None:
                logger.warning("跳过安装根之外的条目: %s", entry)
                continue
            if path.is_symlink() or path.is_file():
                path.unlink()
                count += 1
        return count

    def _remove_empty_dirs(self, entries: list[str]) -> list[str]:
        """逆序删除目录，子目录先于父目录；非空目录保留并返回"""
        kept: list[str] = []
        for entry in sorted((e for e in entries if e.endswith("/")), reverse=True):
            path = self._target(entry)
            if path is None or not path.is_dir() or path.is_symlink():
                continue
            if any(path.iterdir()):
                kept.append(entry)
                continue
            path.rmdir()
        if kept:
            logger.debug("保留非空目录: %s", ", ".join(kept))
        return kept
