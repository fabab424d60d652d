from __future__ import annotations

import logging
import sys

_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep task_manager logs; let third-party loggers (uvicorn access logs,
    httpx, ...) through only at WARNING and above.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name == "task_manager" or record.name.startswith("task_manager."):
            return True
        return record.levelno >= logging.WARNING


# PUBLIC_INTERFACE
def setup_logging(level: int = logging.INFO) -> None:
    """
    Configure a single stderr handler on the root logger.

    Safe to call more than once: handlers installed by a previous call are
    replaced rather than duplicated.
    """
    root = logging.getLogger()
    root.setLevel(level)

    for h in list(root.handlers):
        if getattr(h, "_task_manager", False):
            root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT))
    handler.addFilter(_ConsoleNoiseFilter())
    handler._task_manager = True  # type: ignore[attr-defined]
    root.addHandler(handler)

    logging.captureWarnings(True)
