"""Parent-side orchestration of worker launches."""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from fork_booter.configuration.runtime_settings import ForkSettings
from fork_booter.configuration_model import (
    ForkContext,
    ProviderConfiguration,
    StartupConfiguration,
)
from fork_booter.errors import TransportError
from fork_booter.serialization import encode
from fork_booter.transport import BooterFileTransport, HandOffState

from .launch_contracts import ForkResult

logger = logging.getLogger(__name__)

ProcessRunner = Callable[[tuple[str, ...]], int]

WORKER_MODULE = "fork_booter"
WORKER_COMMAND = "worker"


class ForkLaunchError(Exception):
    """Raised when a worker process cannot be started."""


class ForkStarter:
    """Encodes configurations, hands them to worker processes and cleans up afterwards.

    The booter file is removed only after the process runner has returned,
    that is after the worker exit was observed, whether the worker succeeded,
    failed or could not be started.
    """

    def __init__(
        self,
        settings: ForkSettings,
        *,
        transport: BooterFileTransport | None = None,
        run_process: ProcessRunner | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport or BooterFileTransport(settings.temp_directory)
        self._run_process = run_process or _run_worker_process

    @property
    def transport(self) -> BooterFileTransport:
        return self._transport

    def build_command(self, booter_file: Path, plugin_pid: str | None = None) -> tuple[str, ...]:
        command: tuple[str, ...] = (
            self._settings.python_executable,
            "-m",
            WORKER_MODULE,
            WORKER_COMMAND,
            str(booter_file),
        )
        if plugin_pid:
            command += (plugin_pid,)
        return command

    def launch(
        self,
        provider_configuration: ProviderConfiguration,
        startup_configuration: StartupConfiguration,
        *,
        fork_number: int = 1,
    ) -> ForkResult:
        """Run one worker to completion.

        Raises:
          EncodingError: Before anything is written or spawned.
          TransportError: If the booter file cannot be written.
          ForkLaunchError: If the worker process cannot be started.
        """
        plugin_pid = str(os.getpid()) if self._settings.pass_plugin_pid else None
        store = encode(
            provider_configuration,
            startup_configuration,
            ForkContext(fork_number=fork_number, plugin_pid=plugin_pid),
        )
        states = [HandOffState.CREATED]
        booter_file = self._transport.persist(store)
        states.append(HandOffState.PERSISTED)
        try:
            command = self.build_command(booter_file, plugin_pid)
            logger.info("Starting fork %d: %s", fork_number, shlex.join(command))
            states.append(HandOffState.SPAWNED)
            exit_code = self._run_process(command)
        except BaseException:
            self._cleanup_after_failure(booter_file, fork_number)
            raise
        self._transport.cleanup(booter_file)
        states.append(HandOffState.CLEANED)
        logger.info("Fork %d exited with status %d", fork_number, exit_code)
        return ForkResult(
            fork_number=fork_number,
            exit_code=exit_code,
            booter_file=booter_file,
            states=tuple(states),
        )

    def _cleanup_after_failure(self, booter_file: Path, fork_number: int) -> None:
        try:
            self._transport.cleanup(booter_file)
        except TransportError as exc:
            logger.warning("Fork %d left booter file %s behind: %s", fork_number, booter_file, exc)

    def launch_all(
        self,
        provider_configuration: ProviderConfiguration,
        startup_configuration: StartupConfiguration,
        *,
        fork_count: int | None = None,
    ) -> list[ForkResult]:
        """Launch ``fork_count`` workers in parallel and return results by fork number."""
        count = fork_count if fork_count is not None else self._settings.fork_count
        max_workers = max(1, self._settings.parallelism)
        try:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                futures = [
                    executor.submit(
                        self.launch,
                        provider_configuration,
                        startup_configuration,
                        fork_number=fork_number,
                    )
                    for fork_number in range(1, count + 1)
                ]
                results = [future.result() for future in futures]
        finally:
            self._transport.dispose()
        return sorted(results, key=lambda result: result.fork_number)


def _run_worker_process(command: tuple[str, ...]) -> int:
    """Start the worker, wait for it to exit and return its exit status."""
    try:
        completed = subprocess.run(list(command), check=False)
    except FileNotFoundError as exc:
        raise ForkLaunchError(f"Worker command not found: {shlex.join(command)}") from exc
    return completed.returncode
