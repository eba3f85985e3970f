"""CLI — 目录刷新与镜像 / 缓存设置"""

from __future__ import annotations

import click

from cygpm.cli import _svc
from cygpm.utils.net import validate_url_scheme


def register(group: click.Group) -> None:
    group.add_command(update)
    group.add_command(mirror)
    group.add_command(cache)


@click.command()
def update() -> None:
    """从镜像刷新本地目录缓存"""
    path = _svc().fetcher.refresh_catalog()
    click.echo(f"目录已更新: {path}")


@click.command()
@click.argument("url", required=False)
def mirror(url: str | None) -> None:
    """查看或设置镜像地址"""
    svc = _svc()
    if url:
        validate_url_scheme(url, context="mirror")
        svc.settings.set_mirror(url)
        svc.reset()
        click.echo(f"镜像已设置: {url}")
        return
    click.echo(svc.settings.get_mirror() or "未设置镜像")


@click.command()
@click.argument("directory", required=False)
def cache(directory: str | None) -> None:
    """查看或设置缓存目录"""
    svc = _svc()
    if directory:
        svc.settings.set_cache_dir(directory)
        svc.reset()
        click.echo(f"缓存目录已设置: {directory}")
        return
    click.echo(svc.settings.get_cache_dir() or "未设置缓存目录")
