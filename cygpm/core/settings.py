"""镜像 / 缓存目录设置 (setup.rc)

setup.rc 以 "键标记行 + 下一行缩进的值" 存储:

    last-cache
    	/var/cache/cygpm
    last-mirror
    	http://mirrors.kernel.org/sourceware/cygwin/

写入时只定位已有的键标记并改写其后一行；
标记不存在属于配置错误，这里不负责补建结构。
"""

from __future__ import annotations

import logging
from pathlib import Path

from cygpm.core.exceptions import ConfigError
from cygpm.utils.yaml_io import atomic_write

logger = logging.getLogger(__name__)

MIRROR_KEY = "last-mirror"
CACHE_KEY = "last-cache"


class SetupSettings:
    def __init__(self, path: Path) -> None:
        self.path = path

    def _lines(self) -> list[str]:
        if not self.path.exists():
            return []
        return self.path.read_text(encoding="utf-8").splitlines()

    def get(self, key: str) -> str:
        """读取键值，文件或标记不存在时返回空串"""
        lines = self._lines()
        for i, line in enumerate(lines):
            if line.strip() == key:
                if i + 1 < len(lines) and lines[i + 1][:1] in ("\t", " "):
                    return lines[i + 1].strip()
                return ""
        return ""

    def set(self, key: str, value: str) -> None:
        lines = self._lines()
        for i, line in enumerate(lines):
            if line.strip() == key:
                break
        else:
            raise ConfigError(f"{self.path} 中没有 '{key}' 标记")

        # 值行必须缩进；紧跟的是另一个键标记时插入新值行
        if i + 1 < len(lines) and lines[i + 1][:1] in ("\t", " "):
            lines[i + 1] = f"\t{value}"
        else:
            lines.insert(i + 1, f"\t{value}")
        atomic_write(self.path, "\n".join(lines) + "\n")
        logger.info("设置已更新: %s = %s", key, value)

    def get_mirror(self) -> str:
        return self.get(MIRROR_KEY)

    def set_mirror(self, url: str) -> None:
        self.set(MIRROR_KEY, url)

    def get_cache_dir(self) -> str:
        return self.get(CACHE_KEY)

    def set_cache_dir(self, path: str) -> None:
        self.set(CACHE_KEY, path)
