# backend/app/logging_config.py
"""ログ設定。

帳票生成中のログには法人名・マッピングキーなどの付加情報を載せる。
付加情報は contextvars に保持するので、同時に走る複数リクエストの間で混ざらない。
"""
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
import json
import logging
import sys

CONTEXT_FIELDS = ("corporation", "mapping_key", "file_name")

_report_context: ContextVar[dict] = ContextVar("report_context", default={})

_NOISY_LOGGERS = ("uvicorn.access", "httpcore", "httpx", "PIL")


class ReportContextFilter(logging.Filter):
    """現在の帳票コンテキストをレコードの属性に写す。extra= で渡された値が優先。"""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _report_context.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


@contextmanager
def report_context(**fields):
    token = _report_context.set({**_report_context.get(), **fields})
    try:
        yield
    finally:
        _report_context.reset(token)


def _context_of(record: logging.LogRecord) -> dict:
    return {key: getattr(record, key) for key in CONTEXT_FIELDS if hasattr(record, key)}


class JsonLineFormatter(logging.Formatter):
    """1レコード1行の JSON。日本語はエスケープしない。"""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "where": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        entry.update(_context_of(record))
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """開発用。付加情報は末尾に key=value で並べる。"""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)-7s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = _context_of(record)
        if context:
            line += " [" + " ".join(f"{k}={v}" for k, v in context.items()) + "]"
        return line


def build_handler(json_output: bool, stream=None) -> logging.Handler:
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JsonLineFormatter() if json_output else TextFormatter())
    handler.addFilter(ReportContextFilter())
    return handler


def setup_logging(level: str = "INFO", json_output: bool = True) -> logging.Logger:
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers = [build_handler(json_output)]
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return root
