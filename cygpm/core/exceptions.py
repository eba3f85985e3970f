"""统一异常体系

所有业务异常继承 CygpmError，替代散落的 ValueError / RuntimeError。
CLI 层据此输出友好提示，并以 exit_code 作为进程退出码。
"""

from __future__ import annotations


class CygpmError(Exception):
    """客户端基础异常"""

    code: str = "UNKNOWN"
    exit_code: int = 1

    def __init__(self, message: str, package: str = "") -> None:
        super().__init__(message)
        self.package = package


class ConfigError(CygpmError):
    """配置缺失或内容无效（含 setup.rc 标记缺失、未知校验和长度）"""

    code = "CONFIG_ERROR"
    exit_code = 2


class ValidationError(CygpmError):
    """输入数据校验失败"""

    code = "VALIDATION_ERROR"
    exit_code = 2

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.details = details or []


class CatalogUnavailable(CygpmError):
    """本地没有目录缓存，需要先执行 update"""

    code = "CATALOG_UNAVAILABLE"
    exit_code = 3


class PackageNotFound(CygpmError):
    """目录中不存在指定的包"""

    code = "PACKAGE_NOT_FOUND"
    exit_code = 4


class FetchError(CygpmError):
    """网络传输失败"""

    code = "FETCH_ERROR"
    exit_code = 5


class IntegrityFailure(CygpmError):
    """下载后的归档与目录声明的校验和不一致"""

    code = "INTEGRITY_FAILURE"
    exit_code = 6


class ManifestMissing(CygpmError):
    """包清单文件缺失，无法确定要删除哪些文件"""

    code = "MANIFEST_MISSING"
    exit_code = 7


class EssentialFileConflict(CygpmError):
    """包拥有基础工具依赖的文件，拒绝删除"""

    code = "ESSENTIAL_FILE_CONFLICT"
    exit_code = 8

    def __init__(self, message: str, package: str = "", paths: list[str] | None = None) -> None:
        super().__init__(message, package=package)
        self.paths = paths or []


class ScriptExecutionError(CygpmError):
    """安装后 / 删除前脚本执行失败"""

    code = "SCRIPT_FAILED"
    exit_code = 9
