"""cygpm 日志配置

日志一律写 stderr，stdout 只留给查询命令的结果，方便管道处理。
环境变量:
  CYGPM_LOG_LEVEL  日志级别，默认 WARNING
  CYGPM_LOG_JSON   为 1 时输出单行 JSON
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone

DEFAULT_LEVEL = "WARNING"


class JSONFormatter(logging.Formatter):
    """单行 JSON，字段: timestamp / level / logger / message [/ exception]"""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def setup_logging(level: str = DEFAULT_LEVEL, json_output: bool = False) -> None:
    """配置根日志器（重复调用会先移除旧 handler）"""
    reset_logging()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.WARNING))

    handler = logging.StreamHandler(sys.stderr)
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    root.addHandler(handler)


def setup_from_env() -> None:
    setup_logging(
        level=os.getenv("CYGPM_LOG_LEVEL", DEFAULT_LEVEL),
        json_output=os.getenv("CYGPM_LOG_JSON", "") == "1",
    )


def reset_logging() -> None:
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
