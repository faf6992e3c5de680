"""
Worker process supervision for the shop API server.

The supervisor keeps a fixed-size pool of worker processes alive:
- One worker per logical CPU unless a count is given
- Worker exits are detected through process sentinels
- Every exited worker is replaced immediately, in the same pool slot

There is no backoff and no restart cap. A worker that crashes on startup is
respawned in a tight loop for as long as the supervisor runs.
"""

from __future__ import annotations

import logging
import multiprocessing
import os
from multiprocessing.connection import wait as wait_for_sentinels
from typing import Any, Callable, Iterable, List, Optional, Sequence

logger = logging.getLogger(__name__)


def detect_cpu_count() -> int:
    """Number of logical CPUs on the host, never less than 1."""
    return os.cpu_count() or 1


class Supervisor:
    """
    Owns the worker pool and respawns workers as they exit.

    The pool size is fixed when the supervisor is created. Slots are only
    ever replaced in place; the pool never grows or shrinks.

    Attributes:
        worker_count: Number of workers kept alive
    """

    def __init__(
        self,
        target: Callable[..., Any],
        args: Sequence[Any] = (),
        worker_count: Optional[int] = None,
        context: Any = None,
        wait: Callable[..., List[Any]] = wait_for_sentinels,
    ) -> None:
        """
        Initialize the supervisor.

        Args:
            target: Worker entry point, run in each child process
            args: Positional arguments for ``target`` (must be picklable under spawn)
            worker_count: Pool size (default: number of logical CPUs)
            context: multiprocessing context used to create workers (default: spawn)
            wait: Blocking exit receiver taking ``(sentinels, timeout)`` and
                returning the sentinels that became ready

        Raises:
            ValueError: If ``worker_count`` is less than 1
        """
        if worker_count is None:
            worker_count = detect_cpu_count()
        if worker_count < 1:
            raise ValueError(f"worker_count must be at least 1, got {worker_count}")

        self.worker_count = worker_count
        self._target = target
        self._args = tuple(args)
        self._context = context or multiprocessing.get_context("spawn")
        self._wait = wait
        self._workers: List[Any] = []
        self.respawn_count = 0

    @property
    def started(self) -> bool:
        return bool(self._workers)

    @property
    def workers(self) -> List[Any]:
        """Snapshot of the current worker handles, in slot order."""
        return list(self._workers)

    @property
    def pids(self) -> List[Optional[int]]:
        return [worker.pid for worker in self._workers]

    def live_count(self) -> int:
        return sum(1 for worker in self._workers if worker.is_alive())

    def _spawn(self) -> Any:
        worker = self._context.Process(target=self._target, args=self._args)
        worker.start()
        logger.debug(f"Spawned worker {worker.pid}")
        return worker

    def start(self) -> None:
        """
        Spawn the full pool.

        Raises:
            RuntimeError: If the pool has already been started
        """
        if self.started:
            raise RuntimeError("Supervisor already started; the pool size is fixed.")

        logger.info(f"Starting {self.worker_count} worker(s)")
        for _ in range(self.worker_count):
            self._workers.append(self._spawn())

    def handle_exits(self, timeout: Optional[float] = None) -> int:
        """
        Wait for worker exits and replace every worker that has exited.

        Blocks until at least one worker exits or ``timeout`` elapses. Each
        exited worker is reaped and replaced by exactly one new worker in the
        same slot, whatever its exit code.

        Args:
            timeout: Seconds to wait for an exit (default: wait indefinitely)

        Returns:
            Number of workers respawned during this call

        Raises:
            RuntimeError: If the pool has not been started
        """
        if not self.started:
            raise RuntimeError("Supervisor has not been started.")

        ready = self._wait([worker.sentinel for worker in self._workers], timeout)
        return self._respawn(ready)

    def _respawn(self, ready: Iterable[Any]) -> int:
        ready = list(ready)
        respawned = 0
        for slot, worker in enumerate(self._workers):
            if worker.sentinel not in ready:
                continue
            worker.join()
            logger.warning(f"Worker {worker.pid} died. Restarting...")
            self._workers[slot] = self._spawn()
            respawned += 1

        self.respawn_count += respawned
        return respawned

    def run_forever(self) -> None:
        """Start the pool if needed, then respawn exited workers until killed."""
        if not self.started:
            self.start()
        while True:
            self.handle_exits()

    def terminate(self, timeout: float = 10.0) -> None:
        """
        Stop every worker. Only used when the supervisor process itself is
        being shut down; it is not part of the respawn loop.
        """
        for worker in self._workers:
            if worker.is_alive():
                worker.terminate()
        for worker in self._workers:
            worker.join(timeout)
            if worker.is_alive():
                logger.warning(f"Worker {worker.pid} did not stop in {timeout}s, killing it")
                worker.kill()
                worker.join()
        logger.info("All workers stopped")
