"""安装后 / 删除前脚本

  - etc/postinstall/*.sh   待执行的安装后脚本，按文件名顺序执行，
                           成功后改名为 *.sh.done，之后不再执行
  - etc/preremove/<name>.sh 删除前脚本，执行后删除

脚本失败不捕获，直接向调用方抛 ScriptExecutionError。
失败过的安装后脚本保持待执行状态，但同一进程内不再重试。
"""

from __future__ import annotations

import logging
from pathlib import Path

from cygpm.core.exceptions import ScriptExecutionError
from cygpm.utils.shell import CommandExecutor, get_executor

logger = logging.getLogger(__name__)

DONE_SUFFIX = ".done"


class ScriptRunner:
    def __init__(
        self,
        root: Path,
        shell: str = "sh",
        timeout: int | None = None,
        executor: CommandExecutor | None = None,
    ) -> None:
        self.root = root
        self.shell = shell
        self.timeout = timeout
        self.executor = executor or get_executor()
        self.failed: set[str] = set()

    @property
    def postinstall_dir(self) -> Path:
        return self.root / "etc" / "postinstall"

    @property
    def preremove_dir(self) -> Path:
        return self.root / "etc" / "preremove"

    def pending_postinstall(self) -> list[Path]:
        if not self.postinstall_dir.is_dir():
            return []
        return sorted(self.postinstall_dir.glob("*.sh"))

    def done_marker(self, name: str) -> Path:
        return self.postinstall_dir / f"{name}.sh{DONE_SUFFIX}"

    def run_postinstall(self) -> list[str]:
        """执行全部待执行的安装后脚本，返回已执行的脚本名"""
        executed: list[str] = []
        for script in self.pending_postinstall():
            if script.name in self.failed:
                logger.warning("跳过本次已失败的脚本: %s", script.name)
                continue
            try:
                self._run(script, label="postinstall")
            except ScriptExecutionError:
                self.failed.add(script.name)
                raise
            script.replace(script.with_name(script.name + DONE_SUFFIX))
            executed.append(script.name)
        return executed

    def run_preremove(self, name: str) -> bool:
        """执行并删除包的删除前脚本，没有脚本返回 False"""
        script = self.preremove_dir / f"{name}.sh"
        if not script.is_file():
            return False
        self._run(script, label="preremove")
        script.unlink()
        return True

    def _run(self, script: Path, label: str) -> None:
        logger.info("执行 %s 脚本: %s", label, script.name)
        result = self.executor.execute(
            [self.shell, str(script)], cwd=str(self.root), timeout=self.timeout,
        )
        if not result.success:
            raise ScriptExecutionError(
                f"{label} 脚本失败 {script.name} (rc={result.returncode}): "
                f"{result.stderr[:500]}",
                package=script.name.removesuffix(".sh"),
            )
