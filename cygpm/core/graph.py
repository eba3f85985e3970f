"""依赖关系图

从目录的 requires 字段构建正向 / 反向邻接表，供 depends / rdepends 报告使用。

遍历规则:
  - 深度优先，每访问一个节点输出一次从根到该节点的路径
  - 只防环不去重：当前 DFS 栈里已有的节点不再下探；
    菱形依赖经不同路径到达时会被重复输出
  - 目录中不存在的依赖名视为没有出边的叶子
  - 同名的重复记录: depends 只看第一条，rdepends 汇总每一条记录的 requires
"""

from __future__ import annotations

import logging

from cygpm.core.catalog import CatalogStore

logger = logging.getLogger(__name__)

FORWARD_ARROW = " > "
REVERSE_ARROW = " < "


class DependencyGraph:
    """依赖关系图（懒构建）"""

    def __init__(self, catalog: CatalogStore) -> None:
        self.catalog = catalog
        self._forward: dict[str, list[str]] | None = None
        self._reverse: dict[str, list[str]] | None = None

    def _build(self) -> None:
        forward: dict[str, list[str]] = {}
        reverse: dict[str, list[str]] = {}
        for record in self.catalog.records:
            forward.setdefault(record.name, list(record.requires))
            for dep in record.requires:
                users = reverse.setdefault(dep, [])
                if record.name not in users:
                    users.append(record.name)
        self._forward = forward
        self._reverse = reverse
        logger.debug("依赖图已构建: %d 个节点", len(forward))

    @property
    def forward_edges(self) -> dict[str, list[str]]:
        if self._forward is None:
            self._build()
        assert self._forward is not None
        return self._forward

    @property
    def reverse_edges(self) -> dict[str, list[str]]:
        if self._reverse is None:
            self._build()
        assert self._reverse is not None
        return self._reverse

    def depends(self, root: str) -> list[str]:
        """root 依赖的包，每个访问到的节点一条路径"""
        return _walk(root, self.forward_edges, FORWARD_ARROW)

    def rdepends(self, root: str) -> list[str]:
        """依赖 root 的包，遍历反向边"""
        return _walk(root, self.reverse_edges, REVERSE_ARROW)


def _walk(root: str, edges: dict[str, list[str]], arrow: str) -> list[str]:
    paths: list[str] = []
    stack: list[str] = []

    def visit(node: str) -> None:
        stack.append(node)
        paths.append(arrow.join(stack))
        for nxt in edges.get(node, []):
            if nxt in stack:
                continue
            visit(nxt)
        stack.pop()

    visit(root)
    return paths
