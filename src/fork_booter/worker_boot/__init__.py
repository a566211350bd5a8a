"""Worker boot exports."""

from .forked_booter import (
    BooterConfiguration,
    ProviderEngine,
    WorkerExitCode,
    invoke_provider,
    load_provider_class,
    process_is_alive,
    read_booter_configuration,
    run_forked_worker,
)

__all__ = [
    "BooterConfiguration",
    "ProviderEngine",
    "WorkerExitCode",
    "invoke_provider",
    "load_provider_class",
    "process_is_alive",
    "read_booter_configuration",
    "run_forked_worker",
]
