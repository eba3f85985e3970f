"""子进程执行 — 安装后 / 删除前脚本的运行入口

ScriptRunner 只依赖 CommandExecutor 协议，测试注入替身即可，不必 patch subprocess。
超时和解释器缺失都折算成非零返回码，由调用方统一按脚本失败处理。
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)

RC_TIMEOUT = 124
RC_NOT_FOUND = 127


@dataclass
class CommandResult:
    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0


class CommandExecutor(Protocol):
    def execute(
        self,
        cmd: list[str],
        *,
        cwd: str = ".",
        env: dict[str, str] | None = None,
        timeout: int | None = None,
    ) -> CommandResult:
        ...


class LocalExecutor:
    """在本机执行命令；env 叠加在当前进程环境之上"""

    def execute(
        self,
        cmd: list[str],
        *,
        cwd: str = ".",
        env: dict[str, str] | None = None,
        timeout: int | None = None,
    ) -> CommandResult:
        logger.debug("执行: %s (cwd=%s)", " ".join(cmd), cwd)
        full_env = {**os.environ, **env} if env else None
        try:
            r = subprocess.run(
                cmd, capture_output=True, text=True,
                cwd=cwd, env=full_env, check=False, timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            return CommandResult(RC_TIMEOUT, "", f"超时 ({timeout}s)")
        except FileNotFoundError as e:
            return CommandResult(RC_NOT_FOUND, "", f"找不到解释器: {e.filename}")
        return CommandResult(r.returncode, r.stdout, r.stderr)


_default_executor: CommandExecutor = LocalExecutor()


def get_executor() -> CommandExecutor:
    return _default_executor


def set_executor(executor: CommandExecutor) -> None:
    global _default_executor  # noqa: PLW0603
    _default_executor = executor
