"""Launch configuration entities."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path

from fork_booter.configuration_model import ProviderConfiguration, StartupConfiguration


@dataclass(frozen=True)
class ForkSettings:
    """How the parent starts worker processes."""

    python_executable: str = field(default_factory=lambda: sys.executable)
    temp_directory: Path | None = None
    parallelism: int = 1
    fork_count: int = 1
    pass_plugin_pid: bool = True


@dataclass(frozen=True)
class LaunchConfiguration:
    """Top-level launch configuration aggregate."""

    path: Path
    fork: ForkSettings
    startup: StartupConfiguration
    provider: ProviderConfiguration
