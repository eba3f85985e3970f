"""校验和工具

目录里的 digest 不标注算法，只能按十六进制长度推断:
  - 32 位  → md5（旧目录）
  - 128 位 → sha512
其他长度直接报错，绝不跳过校验。
"""

from __future__ import annotations

import hashlib
from pathlib import Path

from cygpm.core.exceptions import ConfigError

_ALGORITHMS_BY_LENGTH = {
    32: "md5",
    128: "sha512",
}

_CHUNK_SIZE = 8192


def digest_algorithm(expected: str) -> str:
    """根据声明的 digest 长度选择算法"""
    algorithm = _ALGORITHMS_BY_LENGTH.get(len(expected))
    if algorithm is None:
        raise ConfigError(
            f"无法识别的校验和长度 {len(expected)}: {expected!r}",
        )
    return algorithm


def file_digest(path: Path, algorithm: str) -> str:
    h = hashlib.new(algorithm)
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
            h.update(chunk)
    return h.hexdigest()


def matches(path: Path, expected: str) -> bool:
    """文件内容是否与声明的 digest 一致（大小写不敏感）"""
    algorithm = digest_algorithm(expected)
    return file_digest(path, algorithm) == expected.lower()
