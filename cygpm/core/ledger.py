"""已安装包台账 (installed.db)

文件格式:
  第一行是头部标记（如 "INSTALLED.DB 2"），原样保留
  其余每行 "<name> <archive> <status>"，按包名排序

每次写入都是: 旧台账复制为 installed.db-save → 写临时文件 → 原子替换。
备份只是恢复点，不会自动回滚。
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from cygpm.core.models import LedgerEntry
from cygpm.utils.yaml_io import atomic_write

logger = logging.getLogger(__name__)

LEDGER_HEADER = "INSTALLED.DB 2"
BACKUP_SUFFIX = "-save"


class InstalledLedger:
    """台账存储 — 显式 load / save，写入前先备份"""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.header = LEDGER_HEADER
        self._entries: dict[str, LedgerEntry] = {}
        self.load()

    @property
    def backup_path(self) -> Path:
        return self.path.with_name(self.path.name + BACKUP_SUFFIX)

    def load(self) -> None:
        self._entries = {}
        if not self.path.exists():
            return
        lines = self.path.read_text(encoding="utf-8").splitlines()
        if not lines:
            return
        self.header = lines[0]
        for line in lines[1:]:
            parts = line.split()
            if len(parts) < 2:
                continue
            try:
                status = int(parts[2]) if len(parts) > 2 else 0
            except ValueError:
                logger.warning("台账行状态无效，按 0 处理: %s", line)
                status = 0
            self._entries.setdefault(
                parts[0], LedgerEntry(name=parts[0], archive=parts[1], status=status),
            )

    def save(self) -> None:
        """备份旧台账后原子替换"""
        if self.path.exists():
            shutil.copy2(self.path, self.backup_path)
        lines = [self.header] + [
            self._entries[name].to_line() for name in sorted(self._entries)
        ]
        atomic_write(self.path, "\n".join(lines) + "\n")

    # ------------------------------------------------------------------
    # 查询
    # ------------------------------------------------------------------

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def is_installed(self, name: str) -> bool:
        return name in self._entries

    def get(self, name: str) -> LedgerEntry | None:
        return self._entries.get(name)

    def names(self) -> list[str]:
        return sorted(self._entries)

    def entries(self) -> list[LedgerEntry]:
        return [self._entries[name] for name in sorted(self._entries)]

    # ------------------------------------------------------------------
    # 修改（立即落盘）
    # ------------------------------------------------------------------

    def insert(self, name: str, archive: str, status: int = 0) -> LedgerEntry:
        """插入或替换一条记录，保持按名排序"""
        entry = LedgerEntry(name=name, archive=archive, status=status)
        self._entries[name] = entry
        self.save()
        logger.info("台账已更新: %s (%s)", name, archive)
        return entry

    def delete(self, name: str) -> bool:
        """删除名字完全匹配的记录"""
        if name not in self._entries:
            return False
        del self._entries[name]
        self.save()
        logger.info("台账已删除: %s", name)
        return True
