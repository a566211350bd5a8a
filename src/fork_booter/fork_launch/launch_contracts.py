"""Fork launch entities."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from fork_booter.transport import HandOffState


@dataclass(frozen=True)
class ForkResult:
    """Outcome of one worker launch as observed by the parent."""

    fork_number: int
    exit_code: int
    booter_file: Path
    states: tuple[HandOffState, ...]

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0
