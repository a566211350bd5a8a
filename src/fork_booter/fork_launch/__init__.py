"""Fork launch exports."""

from .fork_starter import ForkLaunchError, ForkStarter, ProcessRunner
from .launch_contracts import ForkResult

__all__ = ["ForkLaunchError", "ForkResult", "ForkStarter", "ProcessRunner"]
