"""服务容器 — 统一依赖注入，消除各命令对存储路径的裸构造

台账、清单、设置、拉取器和两个引擎都通过容器获取，同一容器内共享实例。
CLI 通过 get_container() 获取，测试可直接构造并注入 transport / executor。

依赖关系图（→ 表示依赖）:
  installer → fetcher, ledger, scripts
  remover   → ledger, manifests, guard, scripts
  fetcher   → settings（镜像 / 缓存目录）, manifests
  graph     → fetcher.catalog

用法:
    container = ServiceContainer(config=cfg, transport=fake)
    container.installer.install_all(["foo"], no_scripts=True)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cygpm.core.catalog import CatalogStore
    from cygpm.core.config import Config
    from cygpm.core.essential import EssentialGuard
    from cygpm.core.fetcher import PackageFetcher
    from cygpm.core.graph import DependencyGraph
    from cygpm.core.installer import InstallEngine
    from cygpm.core.ledger import InstalledLedger
    from cygpm.core.manifest import ManifestStore
    from cygpm.core.remover import RemoveEngine
    from cygpm.core.scripts import ScriptRunner
    from cygpm.core.settings import SetupSettings
    from cygpm.utils.net import Transport
    from cygpm.utils.shell import CommandExecutor

logger = logging.getLogger(__name__)


class ServiceContainer:
    """懒加载服务容器"""

    def __init__(
        self,
        config: Config | None = None,
        transport: Transport | None = None,
        executor: CommandExecutor | None = None,
    ) -> None:
        self._instances: dict[str, object] = {}
        if config is None:
            from cygpm.core.config import get_config
            config = get_config()
        self._config = config
        self._transport = transport
        self._executor = executor

    @property
    def config(self) -> Config:
        return self._config

    @property
    def root(self) -> Path:
        return self._config.root_path

    # ---- 持久化存储 ----

    @property
    def settings(self) -> SetupSettings:
        if "settings" not in self._instances:
            from cygpm.core.settings import SetupSettings
            self._instances["settings"] = SetupSettings(
                self._config.setup_dir / "setup.rc",
            )
        return self._instances["settings"]  # type: ignore[return-value]

    @property
    def ledger(self) -> InstalledLedger:
        if "ledger" not in self._instances:
            from cygpm.core.ledger import InstalledLedger
            self._instances["ledger"] = InstalledLedger(
                self._config.setup_dir / "installed.db",
            )
        return self._instances["ledger"]  # type: ignore[return-value]

    @property
    def manifests(self) -> ManifestStore:
        if "manifests" not in self._instances:
            from cygpm.core.manifest import ManifestStore
            self._instances["manifests"] = ManifestStore(self._config.setup_dir)
        return self._instances["manifests"]  # type: ignore[return-value]

    # ---- 镜像与缓存（setup.rc 优先，配置文件兜底） ----

    def mirror(self) -> str:
        return self.settings.get_mirror() or self._config.mirror

    def cache_dir(self) -> Path:
        return Path(self.settings.get_cache_dir() or self._config.cache_dir)

    @property
    def fetcher(self) -> PackageFetcher:
        if "fetcher" not in self._instances:
            from cygpm.core.fetcher import PackageFetcher
            self._instances["fetcher"] = PackageFetcher(
                mirror=self.mirror(),
                cache_root=self.cache_dir(),
                arch=self._config.arch,
                manifests=self.manifests,
                transport=self._transport,
            )
        return self._instances["fetcher"]  # type: ignore[return-value]

    @property
    def catalog(self) -> CatalogStore:
        return self.fetcher.catalog

    @property
    def graph(self) -> DependencyGraph:
        if "graph" not in self._instances:
            from cygpm.core.graph import DependencyGraph
            self._instances["graph"] = DependencyGraph(self.catalog)
        return self._instances["graph"]  # type: ignore[return-value]

    # ---- 引擎 ----

    @property
    def scripts(self) -> ScriptRunner:
        if "scripts" not in self._instances:
            from cygpm.core.scripts import ScriptRunner
            self._instances["scripts"] = ScriptRunner(
                root=self.root,
                shell=self._config.script_shell,
                timeout=self._config.script_timeout,
                executor=self._executor,
            )
        return self._instances["scripts"]  # type: ignore[return-value]

    @property
    def guard(self) -> EssentialGuard:
        if "guard" not in self._instances:
            from cygpm.core.essential import EssentialGuard
            self._instances["guard"] = EssentialGuard(
                self.manifests, self._config.essential_tools,
            )
        return self._instances["guard"]  # type: ignore[return-value]

    @property
    def installer(self) -> InstallEngine:
        if "installer" not in self._instances:
            from cygpm.core.installer import InstallEngine
            self._instances["installer"] = InstallEngine(
                root=self.root,
                fetcher=self.fetcher,
                ledger=self.ledger,
                scripts=self.scripts,
            )
        return self._instances["installer"]  # type: ignore[return-value]

    @property
    def remover(self) -> RemoveEngine:
        if "remover" not in self._instances:
            from cygpm.core.remover import RemoveEngine
            self._instances["remover"] = RemoveEngine(
                root=self.root,
                ledger=self.ledger,
                manifests=self.manifests,
                guard=self.guard,
                scripts=self.scripts,
            )
        return self._instances["remover"]  # type: ignore[return-value]

    def reset(self) -> None:
        """清空已创建的实例（设置变更后重新读取镜像 / 缓存目录）"""
        self._instances.clear()


_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """获取全局服务容器（首次调用时按当前配置创建）"""
    global _container  # noqa: PLW0603
    if _container is None:
        _container = ServiceContainer()
    return _container


def set_container(container: ServiceContainer | None) -> None:
    """替换全局服务容器（CLI 入口和测试使用）"""
    global _container  # noqa: PLW0603
    _container = container
