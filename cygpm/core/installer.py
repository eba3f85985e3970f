"""安装引擎

单个目标的状态流转（终态: Skipped / Installed / Failed）:
  1. 已在台账中且未要求 upgrade → Skipped
  2. 拉取并校验归档，失败 → Failed，台账不动
  3. 解包到安装根目录（不做冲突检测，直接覆盖）
  4. 台账插入 (name, archive, 0)，备份 + 原子替换
  5. 依赖展开（除非 no_deps）: 重新解析该包自己的记录，
     对每个未安装的依赖递归执行 1-6，依赖的脚本暂不执行；
     依赖失败只记录，不影响本包和兄弟依赖
  6. 执行全部待执行的安装后脚本（除非 no_scripts），失败 → Failed，
     已完成的解包和台账更新不回退

批量安装时各顶层目标相互隔离: 包不存在 / 下载失败 / 脚本失败只影响该目标；
校验和不一致或归档损坏说明镜像内容不可信，终止整次运行。
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

from cygpm.core.exceptions import (
    CygpmError,
    FetchError,
    IntegrityFailure,
    PackageNotFound,
    ScriptExecutionError,
)
from cygpm.core.fetcher import PackageFetcher
from cygpm.core.ledger import InstalledLedger
from cygpm.core.models import InstallResult, InstallStatus
from cygpm.core.scripts import ScriptRunner
from cygpm.utils import archive

logger = logging.getLogger(__name__)


class InstallEngine:
    def __init__(
        self,
        root: Path,
        fetcher: PackageFetcher,
        ledger: InstalledLedger,
        scripts: ScriptRunner,
    ) -> None:
        self.root = root
        self.fetcher = fetcher
        self.ledger = ledger
        self.scripts = scripts

    def install_all(
        self,
        names: list[str],
        *,
        upgrade: bool = False,
        no_deps: bool = False,
        no_scripts: bool = False,
    ) -> list[InstallResult]:
        """按给定顺序依次安装，每个目标的依赖深度优先处理完再处理下一个"""
        return list(self.iter_install(
            names, upgrade=upgrade, no_deps=no_deps, no_scripts=no_scripts,
        ))

    def iter_install(
        self,
        names: list[str],
        *,
        upgrade: bool = False,
        no_deps: bool = False,
        no_scripts: bool = False,
    ) -> Iterator[InstallResult]:
        """逐个目标产出结果，调用方可以在整次运行结束前展示进度"""
        failed: list[str] = []
        for name in names:
            try:
                result = self.install(
                    name, upgrade=upgrade, no_deps=no_deps, no_scripts=no_scripts,
                )
            except (PackageNotFound, FetchError, ScriptExecutionError) as exc:
                logger.error("安装失败: %s - %s", name, exc)
                entry = self.ledger.get(name)
                result = InstallResult(
                    name=name, status=InstallStatus.FAILED, message=str(exc),
                    archive=entry.archive if entry else "",
                    error_code=exc.code, exit_code=exc.exit_code,
                )
                failed.append(name)
            yield result

        if failed:
            logger.warning(
                "安装汇总: %d 成功, %d 失败 (%s)",
                len(names) - len(failed), len(failed), ", ".join(failed),
            )

    def install(
        self,
        name: str,
        *,
        upgrade: bool = False,
        no_deps: bool = False,
        no_scripts: bool = False,
    ) -> InstallResult:
        if self.ledger.is_installed(name) and not upgrade:
            logger.info("已安装，跳过: %s", name)
            return InstallResult(name=name, status=InstallStatus.SKIPPED)

        record = self.fetcher.resolve(name)
        path = self.fetcher.ensure_cached(record)

        logger.info("安装: %s", name)
        try:
            archive.extract(path, self.root)
        except IntegrityFailure as e:
            raise IntegrityFailure(str(e), package=name) from e
        self.ledger.insert(name, path.name, 0)
        result = InstallResult(
            name=name, status=InstallStatus.INSTALLED, archive=path.name,
        )

        if not no_deps:
            self._install_requires(name, result)

        if not no_scripts:
            self.scripts.run_postinstall()
        return result

    def _install_requires(self, name: str, result: InstallResult) -> None:
        """按包自己的记录展开依赖，尽力而为"""
        record = self.fetcher.resolve(name)
        for dep in record.requires:
            if self.ledger.is_installed(dep):
                continue
            logger.info("安装依赖: %s (被 %s 需要)", dep, name)
            try:
                dep_result = self.install(dep, no_scripts=True)
            except CygpmError as exc:
                logger.warning("依赖安装失败，继续: %s - %s", dep, exc)
                result.failed_deps.append(dep)
                continue
            result.installed_deps.append(dep)
            result.installed_deps.extend(dep_result.installed_deps)
            result.failed_deps.extend(dep_result.failed_deps)
