"""Command line entry point for the shop API server.

Starts the supervisor, which forks one worker per CPU (or ``--workers``) and
keeps that many workers running until the supervisor is stopped.
"""

from __future__ import annotations

import logging
import signal
import sys
from typing import Any, Dict, Optional

import click

from . import __version__
from .configuration import ConfigurationError, load_settings, settings_to_container
from .logging_config import setup_logging
from .supervisor import Supervisor
from .worker import bind_sockets, run_worker

logger = logging.getLogger(__name__)


def _cli_overrides(
    host: Optional[str], port: Optional[int], workers: Optional[int], log_level: Optional[str]
) -> Dict[str, Any]:
    server: Dict[str, Any] = {}
    if host is not None:
        server["host"] = host
    if port is not None:
        server["port"] = port
    if workers is not None:
        server["workers"] = workers

    overrides: Dict[str, Any] = {}
    if server:
        overrides["server"] = server
    if log_level is not None:
        overrides["logging"] = {"level": log_level.upper()}
    return overrides


def _exit_on_sigterm(signum, frame) -> None:
    sys.exit(0)


@click.command()
@click.version_option(version=__version__)
@click.option("--host", default=None, help="Interface to bind (env: HOST).")
@click.option("--port", type=int, default=None, help="Port to listen on (env: PORT).")
@click.option(
    "--workers",
    type=click.IntRange(min=1),
    default=None,
    help="Number of worker processes (env: WORKERS, default: CPU count).",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Log level (env: LOG_LEVEL).",
)
def main(host: Optional[str], port: Optional[int], workers: Optional[int], log_level: Optional[str]) -> None:
    """Run the shop API server with a self-healing worker pool."""
    try:
        settings = load_settings(_cli_overrides(host, port, workers, log_level))
    except ConfigurationError as exc:
        raise click.ClickException(str(exc)) from exc

    setup_logging(settings.logging.level)

    sockets = bind_sockets(settings)
    supervisor = Supervisor(
        run_worker,
        args=(settings_to_container(settings), sockets),
        worker_count=settings.server.workers,
    )

    signal.signal(signal.SIGTERM, _exit_on_sigterm)
    try:
        supervisor.run_forever()
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping workers")
    finally:
        if supervisor.started:
            supervisor.terminate()
        for sock in sockets:
            sock.close()
