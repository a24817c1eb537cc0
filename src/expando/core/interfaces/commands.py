from __future__ import annotations
from typing import Optional, Protocol, runtime_checkable

from expando.core.models import CommandResult


@runtime_checkable
class CommandRunnerProtocol(Protocol):
    """Spawn a shell command and collect at most `limit` bytes of its stdout.

    Returns None when the command could not be started or did not finish.
    """

    def run(self, command: str, limit: int) -> Optional[CommandResult]:
        ...
