"""
Per-worker server startup.

The supervisor binds the listening socket once and hands it to every worker,
so all workers accept connections on the same port. Each worker then builds
its own application (own database pool, own rate limiter) and serves with
uvicorn until it exits.
"""

from __future__ import annotations

import logging
import socket
from typing import Any, Dict, List

import uvicorn
from omegaconf import DictConfig

from .app import create_app
from .configuration import settings_from_container
from .logging_config import setup_logging

logger = logging.getLogger(__name__)


def bind_sockets(settings: DictConfig) -> List[socket.socket]:
    """Bind the shared listening socket in the supervisor process."""
    config = uvicorn.Config("shop_backend.main:app", host=settings.server.host, port=settings.server.port)
    return [config.bind_socket()]


def run_worker(settings_container: Dict[str, Any], sockets: List[socket.socket]) -> None:
    """
    Entry point of a worker process.

    Args:
        settings_container: Plain-dict settings built by the supervisor
        sockets: Listening sockets inherited from the supervisor
    """
    settings = settings_from_container(settings_container)
    setup_logging(settings.logging.level)

    app = create_app(settings)
    config = uvicorn.Config(
        app,
        host=settings.server.host,
        port=settings.server.port,
        log_config=None,
        log_level=str(settings.logging.level).lower(),
    )
    server = uvicorn.Server(config)
    server.run(sockets=sockets)
