"""包目录解析

setup.ini 文本模型:
  - 第一条 "@ <name>" 之前是目录头（release / arch / setup-timestamp），忽略
  - "@ <name>" 开始一条记录，直到下一个 "@" 行为止
  - 记录内为逐行的 "key: value"；ldesc 等带引号的值可以跨行
  - 记录内可能包含 [prev] / [test] 段，目录按新到旧排列，
    因此每个字段以第一次出现为准

目录本身不去重：同名记录以迭代顺序中的第一条为准。
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from cygpm.core.exceptions import CatalogUnavailable, ValidationError
from cygpm.core.models import InstallSpec, PackageRecord

logger = logging.getLogger(__name__)

RECORD_MARKER = "@ "


def _compile(pattern: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern)
    except re.error as e:
        raise ValidationError(f"无效的匹配模式 {pattern!r}: {e}") from e


def _split_records(text: str) -> list[list[str]]:
    records: list[list[str]] = []
    current: list[str] | None = None
    for line in text.splitlines():
        if line.startswith(RECORD_MARKER):
            current = [line]
            records.append(current)
        elif current is not None:
            current.append(line)
    return records


def _parse_install(name: str, value: str) -> InstallSpec | None:
    tokens = value.split()
    if len(tokens) < 3:
        logger.warning("记录 %s 的 install 行不完整，已忽略: %s", name, value)
        return None
    try:
        size = int(tokens[1])
    except ValueError:
        logger.warning("记录 %s 的归档大小无效: %s", name, tokens[1])
        size = 0
    return InstallSpec(path=tokens[0], size=size, digest=tokens[2])


def parse_record(lines: list[str]) -> PackageRecord:
    """把一条记录的文本行解析为 PackageRecord"""
    name = lines[0][len(RECORD_MARKER):].strip()
    record = PackageRecord(name=name)
    seen: set[str] = set()
    in_quote = False

    for line in lines[1:]:
        if in_quote:
            # 跨行引号值的后续行，奇数个引号表示引号闭合
            if line.count('"') % 2 == 1:
                in_quote = False
            continue
        key, sep, value = line.partition(":")
        if not sep or " " in key:
            continue
        value = value.strip()
        if value.count('"') % 2 == 1:
            in_quote = True
        if key in seen:
            continue

        if key == "requires":
            record.requires = value.split()
        elif key == "category":
            record.category = value.split()
        elif key == "install":
            spec = _parse_install(name, value)
            if spec is None:
                continue
            record.install = spec
        elif key == "sdesc":
            record.sdesc = value.strip('"')
        elif key == "version":
            record.version = value
        else:
            continue
        seen.add(key)

    record.description = "\n".join(lines).rstrip()
    return record


class CatalogStore:
    """包目录 — 一次调用内只读，不做修改"""

    def __init__(self, records: list[PackageRecord]) -> None:
        self.records = records
        self._index: dict[str, PackageRecord] = {}
        for rec in records:
            # 同名记录以第一条为准
            self._index.setdefault(rec.name, rec)

    @classmethod
    def load(cls, text: str) -> CatalogStore:
        """从目录文本解析"""
        records = [parse_record(lines) for lines in _split_records(text)]
        logger.debug("目录已解析: %d 条记录", len(records))
        return cls(records)

    @classmethod
    def from_file(cls, path: Path) -> CatalogStore:
        """从本地目录缓存加载，缓存不存在时要求先执行 update"""
        if not path.is_file():
            raise CatalogUnavailable(
                f"本地没有目录缓存: {path}，请先执行 update",
            )
        return cls.load(path.read_text(encoding="utf-8", errors="replace"))

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __len__(self) -> int:
        return len(self._index)

    def names(self) -> list[str]:
        return list(self._index)

    def lookup(self, name: str) -> PackageRecord | None:
        return self._index.get(name)

    def find_by_category(self, pattern: str) -> list[str]:
        """category 字段匹配 pattern（正则，大小写敏感）的包名"""
        regex = _compile(pattern)
        return [
            rec.name for rec in self._index.values()
            if regex.search(" ".join(rec.category))
        ]

    def search(self, pattern: str) -> list[str]:
        """在整个目录中按包名匹配，与安装状态无关"""
        regex = _compile(pattern)
        return [name for name in self._index if regex.search(name)]
