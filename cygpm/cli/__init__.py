"""cygpm 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
业务异常 (CygpmError) 在 group 层统一转为错误提示 + 对应退出码。
"""

from __future__ import annotations

import click

from cygpm import __version__
from cygpm.core.config import DEFAULT_CONFIG_FILE, Config, set_config
from cygpm.core.exceptions import CygpmError
from cygpm.services.container import ServiceContainer, get_container, set_container
from cygpm.utils.logger import setup_from_env


def _svc() -> ServiceContainer:
    """获取全局服务容器的快捷方式"""
    return get_container()


def _warn(message: str) -> None:
    click.echo(f"警告: {message}", err=True)


class CygpmGroup(click.Group):
    """把 CygpmError 映射为错误输出和非零退出码"""

    def invoke(self, ctx: click.Context) -> object:
        try:
            return super().invoke(ctx)
        except CygpmError as exc:
            click.echo(f"错误 [{exc.code}]: {exc}", err=True)
            ctx.exit(exc.exit_code)


@click.group(cls=CygpmGroup)
@click.version_option(version=__version__)
@click.option(
    "--config", "-c", "config_path", default=DEFAULT_CONFIG_FILE,
    envvar="CYGPM_CONFIG", help="配置文件路径",
)
@click.option("--root", default=None, help="安装根目录（覆盖配置文件）")
@click.pass_context
def main(ctx: click.Context, config_path: str, root: str | None) -> None:
    """cygpm - Cygwin 风格的软件包管理客户端"""
    setup_from_env()
    # 测试可通过 obj 预先注入容器
    if isinstance(ctx.obj, ServiceContainer):
        set_container(ctx.obj)
        return
    cfg = Config.from_file(config_path)
    if root:
        cfg.root = root
    set_config(cfg)
    set_container(ServiceContainer(config=cfg))


# 注册各领域子命令
from cygpm.cli.cmd_pkg import register as _reg_pkg  # noqa: E402
from cygpm.cli.cmd_query import register as _reg_query  # noqa: E402
from cygpm.cli.cmd_setup import register as _reg_setup  # noqa: E402

_reg_pkg(main)
_reg_query(main)
_reg_setup(main)
