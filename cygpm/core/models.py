"""核心数据模型

目录记录、台账条目以及安装 / 删除结果集中定义，
引擎和 CLI 统一从此处导入。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

# =========================================================================
# 目录
# =========================================================================


@dataclass(frozen=True)
class InstallSpec:
    """目录中 install: 行描述的归档位置"""

    path: str       # 镜像上的相对路径，如 x86_64/release/foo/foo-1.0.tar.xz
    size: int
    digest: str     # md5 或 sha512 十六进制

    @property
    def archive_name(self) -> str:
        return self.path.rsplit("/", 1)[-1]


@dataclass
class PackageRecord:
    """目录中的一条包记录"""

    name: str
    category: list[str] = field(default_factory=list)
    requires: list[str] = field(default_factory=list)
    install: InstallSpec | None = None
    sdesc: str = ""
    version: str = ""
    description: str = ""   # 原始记录文本，仅用于展示


# =========================================================================
# 台账
# =========================================================================


@dataclass(frozen=True)
class LedgerEntry:
    """installed.db 中的一行"""

    name: str
    archive: str
    status: int = 0

    def to_line(self) -> str:
        return f"{self.name} {self.archive} {self.status}"


# =========================================================================
# 安装 / 删除结果
# =========================================================================


class InstallStatus(str, Enum):
    """单个包的安装终态"""
    SKIPPED = "skipped"
    INSTALLED = "installed"
    FAILED = "failed"


class RemoveStatus(str, Enum):
    """单个包的删除终态"""
    NOT_INSTALLED = "not_installed"
    BLOCKED = "blocked"
    REMOVED = "removed"


@dataclass
class InstallResult:
    """单个目标的安装结果（依赖安装情况一并记录）"""

    name: str
    status: InstallStatus
    archive: str = ""
    message: str = ""
    installed_deps: list[str] = field(default_factory=list)
    failed_deps: list[str] = field(default_factory=list)
    error_code: str = ""
    exit_code: int = 0

    @property
    def success(self) -> bool:
        return self.status != InstallStatus.FAILED


@dataclass
class RemoveResult:
    """单个目标的删除结果"""

    name: str
    status: RemoveStatus
    removed_files: int = 0
    kept_dirs: list[str] = field(default_factory=list)
