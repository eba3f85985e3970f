"""CLI — 查询命令（目录、依赖关系、已安装包、文件归属）"""

from __future__ import annotations

import re

import click

from cygpm.cli import _svc
from cygpm.core.exceptions import ValidationError


def register(group: click.Group) -> None:
    group.add_command(show)
    group.add_command(depends)
    group.add_command(rdepends)
    group.add_command(list_installed)
    group.add_command(search)
    group.add_command(category)
    group.add_command(owner)


@click.command()
@click.argument("names", nargs=-1, required=True)
def show(names: tuple[str, ...]) -> None:
    """显示目录中的包记录"""
    fetcher = _svc().fetcher
    for i, name in enumerate(names):
        if i:
            click.echo("")
        click.echo(fetcher.resolve(name).description)


@click.command()
@click.argument("name")
def depends(name: str) -> None:
    """显示依赖路径（NAME 依赖谁）"""
    for path in _svc().graph.depends(name):
        click.echo(path)


@click.command()
@click.argument("name")
def rdepends(name: str) -> None:
    """显示反向依赖路径（谁依赖 NAME）"""
    for path in _svc().graph.rdepends(name):
        click.echo(path)


@click.command(name="list")
@click.argument("pattern", default="")
def list_installed(pattern: str) -> None:
    """列出已安装的包（可按正则过滤）"""
    try:
        regex = re.compile(pattern)
    except re.error as e:
        raise ValidationError(f"无效的匹配模式 {pattern!r}: {e}") from e
    for entry in _svc().ledger.entries():
        if regex.search(entry.name):
            click.echo(f"{entry.name:30s} {entry.archive}")


@click.command()
@click.argument("pattern")
def search(pattern: str) -> None:
    """在整个目录中按包名搜索"""
    for name in _svc().catalog.search(pattern):
        click.echo(name)


@click.command()
@click.argument("pattern")
def category(pattern: str) -> None:
    """列出分类匹配的包"""
    for name in _svc().catalog.find_by_category(pattern):
        click.echo(name)


@click.command()
@click.argument("path")
@click.pass_context
def owner(ctx: click.Context, path: str) -> None:
    """查找拥有某个文件的已安装包"""
    svc = _svc()
    pkg = svc.manifests.owner_of(path, among=svc.ledger.names())
    if pkg is None:
        click.echo(f"没有包拥有: {path}", err=True)
        ctx.exit(1)
    click.echo(f"{pkg}: {path}")
