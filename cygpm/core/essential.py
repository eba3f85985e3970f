"""基础工具文件保护集

删除前重新计算，不跨调用缓存（基础工具本身可能在两次运行之间变化）:
  1. 对每个基础工具，在常见 bin 目录下查找其可执行文件
  2. 通过清单反查拥有该文件的包
  3. 这些包清单里的全部文件（不含目录）组成保护集
"""

from __future__ import annotations

import logging

from cygpm.core.manifest import ManifestStore

logger = logging.getLogger(__name__)

_BIN_DIRS = ("usr/bin", "bin")
_EXE_SUFFIXES = ("", ".exe")


def _candidates(tool: str) -> list[str]:
    return [f"{d}/{tool}{s}" for d in _BIN_DIRS for s in _EXE_SUFFIXES]


class EssentialGuard:
    def __init__(self, manifests: ManifestStore, tools: list[str]) -> None:
        self.manifests = manifests
        self.tools = tools

    def essential_packages(self) -> set[str]:
        found = self.manifests.owners_of(
            [path for tool in self.tools for path in _candidates(tool)],
        )
        owners: set[str] = set()
        for tool in self.tools:
            tool_owners = {found[p] for p in _candidates(tool) if p in found}
            if not tool_owners:
                logger.debug("基础工具没有归属包: %s", tool)
            owners.update(tool_owners)
        return owners

    def compute(self) -> set[str]:
        """计算保护集"""
        essential: set[str] = set()
        for pkg in self.essential_packages():
            essential.update(
                p for p in self.manifests.read(pkg) if not p.endswith("/")
            )
        logger.debug("保护集: %d 个文件", len(essential))
        return essential

    def conflicts(self, entries: list[str], essential: set[str]) -> list[str]:
        """清单中落在保护集里的文件"""
        return sorted(p for p in entries if not p.endswith("/") and p in essential)
