"""网络工具 — URL 安全校验 + 下载传输

通过 Transport 协议抽象 "把 URL 拉取到本地路径" 这一能力，
测试时可注入内存实现，无需 patch urllib。
"""

from __future__ import annotations

import logging
import urllib.error
import urllib.request
from pathlib import Path
from typing import Protocol
from urllib.parse import urlparse

from cygpm.core.exceptions import FetchError, ValidationError

logger = logging.getLogger(__name__)

_ALLOWED_SCHEMES = frozenset(("http", "https", "ftp"))


def validate_url_scheme(url: str, *, context: str = "") -> None:
    """校验 URL 仅使用 http/https/ftp，防止 file:// 等非预期协议访问

    Raises:
        ValidationError: URL scheme 不在白名单内
    """
    parsed = urlparse(url)
    if parsed.scheme not in _ALLOWED_SCHEMES:
        label = f" ({context})" if context else ""
        raise ValidationError(
            f"不允许的 URL 协议 '{parsed.scheme}'{label}，"
            f"仅支持 http/https/ftp: {url}"
        )


def join_url(base: str, path: str) -> str:
    """拼接镜像地址与目录中的相对路径"""
    return f"{base.rstrip('/')}/{path.lstrip('/')}"


class Transport(Protocol):
    """下载传输协议"""

    def download(self, url: str, dest: Path) -> None:
        """把 url 的内容保存到 dest，失败抛 FetchError"""
        ...


class UrllibTransport:
    """基于 urllib 的默认传输实现"""

    def download(self, url: str, dest: Path) -> None:
        validate_url_scheme(url, context="download")
        dest.parent.mkdir(parents=True, exist_ok=True)
        logger.debug("下载: %s -> %s", url, dest)
        try:
            urllib.request.urlretrieve(url, str(dest))  # nosec B310
        except (urllib.error.HTTPError, urllib.error.URLError, OSError) as e:
            dest.unlink(missing_ok=True)
            raise FetchError(f"下载失败: {url} - {e}") from e
