"""CLI — 安装 / 删除 / 下载命令"""

from __future__ import annotations

import click

from cygpm.cli import _svc, _warn
from cygpm.core.models import InstallStatus, RemoveStatus


def register(group: click.Group) -> None:
    group.add_command(install)
    group.add_command(remove)
    group.add_command(download)


@click.command()
@click.argument("names", nargs=-1, required=True)
@click.option("--upgrade", "-u", is_flag=True, help="已安装的包也重新安装")
@click.option("--no-deps", is_flag=True, help="不安装依赖")
@click.option("--no-scripts", is_flag=True, help="不执行安装后脚本")
@click.pass_context
def install(
    ctx: click.Context, names: tuple[str, ...],
    upgrade: bool, no_deps: bool, no_scripts: bool,
) -> None:
    """安装软件包（依赖尽力安装）"""
    first_failure = 0
    for r in _svc().installer.iter_install(
        list(names), upgrade=upgrade, no_deps=no_deps, no_scripts=no_scripts,
    ):
        if r.status == InstallStatus.SKIPPED:
            click.echo(f"已安装，跳过: {r.name}")
        elif r.status == InstallStatus.INSTALLED:
            click.echo(f"已安装: {r.name} ({r.archive})")
            for dep in r.installed_deps:
                click.echo(f"  依赖: {dep}")
            for dep in r.failed_deps:
                _warn(f"{r.name} 的依赖 {dep} 安装失败")
        else:
            click.echo(f"错误 [{r.error_code}]: {r.message}", err=True)
            first_failure = first_failure or r.exit_code

    if first_failure:
        ctx.exit(first_failure)


@click.command()
@click.argument("names", nargs=-1, required=True)
def remove(names: tuple[str, ...]) -> None:
    """删除软件包（基础工具文件受保护）"""
    remover = _svc().remover
    for name in names:
        r = remover.remove(name)
        if r.status == RemoveStatus.NOT_INSTALLED:
            _warn(f"{r.name} 未安装，跳过")
        else:
            click.echo(f"已删除: {r.name} ({r.removed_files} 个文件)")


@click.command()
@click.argument("names", nargs=-1, required=True)
def download(names: tuple[str, ...]) -> None:
    """只下载并校验归档（生成清单，不安装）"""
    fetcher = _svc().fetcher
    for name in names:
        path = fetcher.ensure_cached(fetcher.resolve(name))
        click.echo(f"就绪: {name} -> {path}")
