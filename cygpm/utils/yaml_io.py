"""配置文件读取与原子写入

  - load_yaml:    读取 /etc/cygpm.yml，内容异常统一报 ConfigError
  - atomic_write: 台账 / 清单 / setup.rc / 目录缓存共用的落盘方式，
                  同目录临时文件 + os.replace，中途失败不留半截文件
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml

from cygpm.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

# 配置文件不应超过 1MB
MAX_YAML_SIZE = 1024 * 1024


def atomic_write(path: Path, content: str | bytes) -> None:
    """str 按 UTF-8 + LF 写入，bytes 原样写入"""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    mode, kwargs = ("wb", {}) if isinstance(content, bytes) else ("w", {"encoding": "utf-8", "newline": "\n"})
    try:
        with os.fdopen(fd, mode, **kwargs) as f:
            f.write(content)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


def load_yaml(path: str | Path) -> dict[str, Any]:
    """读取 YAML 映射；文件不存在或为空返回 {}"""
    p = Path(path)
    if not p.is_file():
        return {}
    if p.stat().st_size > MAX_YAML_SIZE:
        raise ConfigError(f"配置文件过大: {p}")
    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"配置文件格式错误: {p}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"配置文件顶层必须是映射: {p} (实际为 {type(data).__name__})")
    return data
