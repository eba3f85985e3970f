"""归档工具 — tar 条目列举与解包

r:* 模式自动识别 gz / bz2 / xz 压缩。
解包使用标准库的 "tar" 过滤器，绝对路径去掉开头的 '/' 后落在安装根之下，
越界条目直接拒绝。清单中的条目与解包后的实际位置一一对应。
"""

from __future__ import annotations

import logging
import tarfile
from pathlib import Path

from cygpm.core.exceptions import IntegrityFailure
from cygpm.core.manifest import normalize_path

logger = logging.getLogger(__name__)


def list_entries(archive: Path) -> list[str]:
    """列出归档中的全部条目（相对安装根），目录条目保留结尾的 '/'

    Raises:
        IntegrityFailure: 不是有效的 tar 归档，或条目含 '..' 越界
    """
    entries: list[str] = []
    try:
        with tarfile.open(archive, "r:*") as tf:
            members = tf.getmembers()
    except tarfile.TarError as e:
        raise IntegrityFailure(f"无效的归档 {archive.name}: {e}") from e

    for member in members:
        name = normalize_path(member.name)
        if not name or name == ".":
            continue
        if ".." in name.split("/"):
            raise IntegrityFailure(f"归档 {archive.name} 含越界条目: {member.name}")
        if member.isdir() and not name.endswith("/"):
            name += "/"
        entries.append(name)
    return entries


def extract(archive: Path, dest_root: Path) -> None:
    """把归档解包到安装根目录，已存在的文件直接覆盖"""
    dest_root.mkdir(parents=True, exist_ok=True)
    try:
        with tarfile.open(archive, "r:*") as tf:
            tf.extractall(str(dest_root), filter="tar")
    except tarfile.TarError as e:
        raise IntegrityFailure(f"解包失败 {archive.name}: {e}") from e
    logger.debug("已解包: %s -> %s", archive.name, dest_root)
