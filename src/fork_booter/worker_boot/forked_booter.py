"""Worker-side entry: load the booter file, decode it and hand it to the provider engine."""

from __future__ import annotations

import importlib
import logging
import os
import sys
from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Protocol

from fork_booter.configuration_model import (
    ForkContext,
    ProviderConfiguration,
    StartupConfiguration,
)
from fork_booter.errors import ConfigurationCorruptError, FormatError, TransportError
from fork_booter.serialization import decode, decode_fork_context
from fork_booter.transport import HandOffState, load_booter_file

logger = logging.getLogger(__name__)


class WorkerExitCode(IntEnum):
    """Exit statuses a worker reports to the parent."""

    OK = 0
    TESTS_FAILED = 1
    TRANSPORT_FAILURE = 3
    FORMAT_FAILURE = 4
    CONFIGURATION_CORRUPT = 5
    PARENT_GONE = 6
    PROVIDER_FAILURE = 7


class ProviderEngine(Protocol):  # pylint: disable=too-few-public-methods
    """Test execution engine receiving the decoded configurations."""

    def __call__(
        self,
        provider_configuration: ProviderConfiguration,
        startup_configuration: StartupConfiguration,
    ) -> int: ...


@dataclass(frozen=True)
class BooterConfiguration:
    """Decoded content of one booter file."""

    provider_configuration: ProviderConfiguration
    startup_configuration: StartupConfiguration
    fork_context: ForkContext


def read_booter_configuration(booter_file: Path | str) -> BooterConfiguration:
    """Load and decode a booter file.

    Raises:
      TransportError: If the file cannot be read.
      FormatError: If the file is not valid booter text.
      ConfigurationCorruptError: If a required key is missing or malformed.
    """
    store = load_booter_file(booter_file)
    provider_configuration, startup_configuration = decode(store)
    return BooterConfiguration(
        provider_configuration=provider_configuration,
        startup_configuration=startup_configuration,
        fork_context=decode_fork_context(store),
    )


def run_forked_worker(
    booter_file: Path | str,
    plugin_pid: str | None = None,
    *,
    engine: ProviderEngine | None = None,
    is_process_alive: Callable[[str], bool] | None = None,
) -> int:
    """Boot the worker and return its exit status.

    No engine call happens when the booter file cannot be read or decoded. A
    ``plugin_pid`` given on the command line takes precedence over the one
    stored in the file.
    """
    try:
        configuration = read_booter_configuration(booter_file)
    except TransportError as exc:
        logger.error("Cannot read booter file: %s", exc)
        return WorkerExitCode.TRANSPORT_FAILURE
    except FormatError as exc:
        logger.error("Booter file %s is not valid: %s", booter_file, exc)
        return WorkerExitCode.FORMAT_FAILURE
    except ConfigurationCorruptError as exc:
        logger.error("Booter configuration is corrupt at %s: %s", exc.key, exc)
        return WorkerExitCode.CONFIGURATION_CORRUPT
    logger.debug("Booter file %s reached state %s", booter_file, HandOffState.LOADED.value)

    resolved_pid = plugin_pid or configuration.fork_context.plugin_pid
    liveness_check = is_process_alive or process_is_alive
    if resolved_pid and not liveness_check(resolved_pid):
        logger.error("Parent process %s is gone, not starting the provider.", resolved_pid)
        return WorkerExitCode.PARENT_GONE

    resolved_engine = engine or invoke_provider
    logger.info(
        "Fork %d starting provider %s",
        configuration.fork_context.fork_number,
        configuration.startup_configuration.provider_class_name,
    )
    logger.debug("Booter file %s reached state %s", booter_file, HandOffState.CONSUMED.value)
    try:
        return int(
            resolved_engine(
                configuration.provider_configuration, configuration.startup_configuration
            )
        )
    except Exception:  # pylint: disable=broad-exception-caught
        logger.exception(
            "Provider %s failed", configuration.startup_configuration.provider_class_name
        )
        return WorkerExitCode.PROVIDER_FAILURE


def invoke_provider(
    provider_configuration: ProviderConfiguration,
    startup_configuration: StartupConfiguration,
) -> int:
    """Instantiate the named provider class and run its ``invoke`` method.

    The provider is built with the provider configuration and invoked with the
    test set assigned to this fork. ``None`` or ``True`` mean success, ``False``
    failed tests; an integer result is used as the exit status.
    """
    provider_class = load_provider_class(startup_configuration.provider_class_name)
    provider = provider_class(provider_configuration)
    result = provider.invoke(provider_configuration.test_for_fork)
    if result is None or result is True:
        return WorkerExitCode.OK
    if result is False:
        return WorkerExitCode.TESTS_FAILED
    return int(result)


def load_provider_class(provider_class_name: str) -> type:
    """Import ``pkg.module.Class`` or ``pkg.module:Class``."""
    if ":" in provider_class_name:
        module_name, _, attribute = provider_class_name.partition(":")
    else:
        module_name, _, attribute = provider_class_name.rpartition(".")
    if not module_name or not attribute:
        raise ImportError(f"Provider class name is not importable: {provider_class_name}")
    module = importlib.import_module(module_name)
    try:
        provider_class = getattr(module, attribute)
    except AttributeError as exc:
        raise ImportError(f"{module_name} has no provider class {attribute}") from exc
    if not isinstance(provider_class, type):
        raise ImportError(f"{provider_class_name} is not a class")
    return provider_class


def process_is_alive(pid: str) -> bool:
    """Return False only when the process is known to be gone."""
    try:
        numeric_pid = int(pid)
    except ValueError:
        logger.warning("Ignoring non-numeric parent process id %r", pid)
        return True
    if sys.platform.startswith("win"):
        # os.kill terminates processes on Windows.
        return True
    try:
        os.kill(numeric_pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        return True
    return True
