"""归档拉取与校验

职责:
- 目录缓存的刷新（update）与加载
- 按包名解析目录记录
- 归档缓存: 缓存命中且校验通过直接返回，否则从镜像下载后校验
- 校验通过后从归档目录表生成包清单（与是否安装无关）

缓存布局:
  <cache_root>/<mirror_id>/<arch>/setup.ini
  <cache_root>/<mirror_id>/<install 路径>

mirror_id 由镜像 URL 百分号编码得到，同一缓存目录可容纳多个镜像而不冲突。
"""

from __future__ import annotations

import bz2
import logging
import lzma
from pathlib import Path
from urllib.parse import quote

from cygpm.core.catalog import CatalogStore
from cygpm.core.exceptions import (
    ConfigError,
    FetchError,
    IntegrityFailure,
    PackageNotFound,
)
from cygpm.core.manifest import ManifestStore
from cygpm.core.models import PackageRecord
from cygpm.utils import archive, checksum
from cygpm.utils.net import Transport, UrllibTransport, join_url
from cygpm.utils.yaml_io import atomic_write

logger = logging.getLogger(__name__)

# 按优先级尝试的目录文件
CATALOG_SOURCES = ("setup.xz", "setup.bz2", "setup.ini")
CATALOG_FILE = "setup.ini"


def mirror_id(mirror: str) -> str:
    """把镜像 URL 编码为缓存子目录名"""
    return quote(mirror, safe="")


def _decompress(source: str, data: bytes) -> bytes:
    if source.endswith(".xz"):
        return lzma.decompress(data)
    if source.endswith(".bz2"):
        return bz2.decompress(data)
    return data


class PackageFetcher:
    """归档拉取器 — 缓存优先 + 镜像下载"""

    def __init__(
        self,
        mirror: str,
        cache_root: Path,
        arch: str,
        manifests: ManifestStore,
        transport: Transport | None = None,
    ) -> None:
        self.mirror = mirror
        self.cache_root = cache_root
        self.arch = arch
        self.manifests = manifests
        self.transport = transport or UrllibTransport()
        self._catalog: CatalogStore | None = None

    @property
    def mirror_dir(self) -> Path:
        if not self.mirror:
            raise ConfigError("未配置镜像地址，请先执行 mirror <url>")
        return self.cache_root / mirror_id(self.mirror)

    @property
    def catalog_path(self) -> Path:
        return self.mirror_dir / self.arch / CATALOG_FILE

    # ------------------------------------------------------------------
    # 目录
    # ------------------------------------------------------------------

    @property
    def catalog(self) -> CatalogStore:
        """本次调用使用的目录（首次访问时从缓存解析）"""
        if self._catalog is None:
            self._catalog = CatalogStore.from_file(self.catalog_path)
            logger.info("已加载目录: %d 个包", len(self._catalog))
        return self._catalog

    def refresh_catalog(self) -> Path:
        """从镜像刷新目录缓存，依次尝试 setup.xz / setup.bz2 / setup.ini"""
        last_error: FetchError | None = None
        for source in CATALOG_SOURCES:
            url = join_url(self.mirror, f"{self.arch}/{source}")
            part = self.catalog_path.with_name(f"{source}.part")
            try:
                self.transport.download(url, part)
                data = _decompress(source, part.read_bytes())
            except FetchError as e:
                logger.debug("目录源不可用: %s (%s)", url, e)
                last_error = e
                continue
            except (lzma.LZMAError, OSError, ValueError) as e:
                logger.warning("目录解压失败: %s (%s)", url, e)
                last_error = FetchError(f"目录解压失败: {url} - {e}")
                continue
            finally:
                part.unlink(missing_ok=True)

            atomic_write(self.catalog_path, data)
            self._catalog = None
            logger.info("目录已更新: %s", url)
            return self.catalog_path

        raise last_error or FetchError(f"无法从镜像获取目录: {self.mirror}")

    def resolve(self, name: str) -> PackageRecord:
        record = self.catalog.lookup(name)
        if record is None:
            raise PackageNotFound(f"目录中找不到包 '{name}'", package=name)
        return record

    # ------------------------------------------------------------------
    # 归档
    # ------------------------------------------------------------------

    def archive_path(self, record: PackageRecord) -> Path:
        if record.install is None:
            raise PackageNotFound(
                f"包 '{record.name}' 没有可安装的归档", package=record.name,
            )
        return self.mirror_dir / record.install.path

    def ensure_cached(self, record: PackageRecord) -> Path:
        """返回已校验的本地归档路径，必要时下载

        缓存中的文件校验不通过会重新下载；下载后仍不一致则抛 IntegrityFailure，
        不做任何降级信任。
        """
        dest = self.archive_path(record)
        assert record.install is not None
        expected = record.install.digest
        # 未知长度的校验和在下载前就报错
        checksum.digest_algorithm(expected)

        if dest.is_file() and checksum.matches(dest, expected):
            logger.info("缓存命中: %s", dest.name)
        else:
            if dest.exists():
                logger.warning("缓存文件校验失败，重新下载: %s", dest.name)
                dest.unlink()
            url = join_url(self.mirror, record.install.path)
            logger.info("下载: %s", url)
            self.transport.download(url, dest)
            if not checksum.matches(dest, expected):
                dest.unlink(missing_ok=True)
                raise IntegrityFailure(
                    f"包 '{record.name}' 校验和不匹配: {url}", package=record.name,
                )
            logger.info("校验和通过: %s", dest.name)

        try:
            entries = archive.list_entries(dest)
        except IntegrityFailure as e:
            # 损坏的归档不留在缓存里
            dest.unlink(missing_ok=True)
            raise IntegrityFailure(str(e), package=record.name) from e
        self.manifests.write(record.name, entries)
        return dest
