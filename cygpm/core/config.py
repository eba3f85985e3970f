"""集中配置管理

替代各模块散落的 DEFAULT_* 常量，提供统一的配置入口。
支持从 YAML 文件加载 + 编程式覆盖。

镜像地址和缓存目录以 setup.rc 中的持久化设置为准，
这里的 mirror / cache_dir 仅在 setup.rc 没有值时作为后备。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from cygpm.core.exceptions import ConfigError
from cygpm.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "/etc/cygpm.yml"

# 删除操作需要保护的基础工具（引擎自身和 shell 依赖它们）
DEFAULT_ESSENTIAL_TOOLS = [
    "awk", "bash", "bunzip2", "grep", "gzip", "mv", "sed", "tar", "xz",
]


@dataclass
class Config:
    """客户端全局配置"""

    # 目录
    root: str = "/"
    cache_dir: str = "/var/cache/cygpm"

    # 镜像
    mirror: str = ""
    arch: str = "x86_64"

    # 删除保护
    essential_tools: list[str] = field(
        default_factory=lambda: list(DEFAULT_ESSENTIAL_TOOLS),
    )

    # 脚本
    script_shell: str = "sh"
    script_timeout: int = 600

    # 自定义扩展 (放不到字段里的配置项)
    extra: dict = field(default_factory=dict)

    def __post_init__(self) -> None:
        if isinstance(self.essential_tools, str):
            self.essential_tools = self.essential_tools.split()
        if not self.arch:
            raise ConfigError("arch 不能为空")
        if not isinstance(self.script_timeout, int) or self.script_timeout <= 0:
            raise ConfigError(f"script_timeout 必须是正整数: {self.script_timeout!r}")

    @classmethod
    def from_file(cls, path: str = DEFAULT_CONFIG_FILE) -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        data = load_yaml(path)
        if not data:
            return cls()
        known = {f.name for f in cls.__dataclass_fields__.values()}
        matched = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}
        cfg = cls(**matched)
        cfg.extra = extra
        return cfg

    @property
    def root_path(self) -> Path:
        return Path(self.root)

    @property
    def setup_dir(self) -> Path:
        """安装台账、清单、setup.rc 所在目录"""
        return self.root_path / "etc" / "setup"

    def to_dict(self) -> dict:
        from dataclasses import asdict
        return asdict(self)


# 全局单例，首次 import 时不加载文件；由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str = DEFAULT_CONFIG_FILE) -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.info("配置已加载: %s", path)
    return _current


def set_config(config: Config) -> None:
    """替换全局配置（命令行覆盖 --root 等参数后调用）"""
    global _current  # noqa: PLW0603
    _current = config
