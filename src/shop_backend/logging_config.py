from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(levelname)-8s - [%(process)d] %(name)s - %(message)s"


def setup_logging(level: str | int = logging.INFO) -> None:
    """
    Configure root logging for the current process.

    Called once in the supervisor and again in every worker process, since
    spawned workers start with an unconfigured logging module.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr, force=True)
    # uvicorn installs its own handlers unless told otherwise; keep one format.
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True
