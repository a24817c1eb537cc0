from __future__ import annotations
"""Spawn shell commands for pipe-mode templates and pipe readers.

The runner feeds the child an empty stdin, captures stdout and waits for it
to exit. A timeout bounds the wait; a child that overruns it is killed and
reported as a failure, same as a child that could not be spawned.
"""

import logging
import os
import subprocess
from typing import Optional

from expando.constants import DEFAULT_PIPE_TIMEOUT
from expando.core.models import CommandResult
from expando.logging.helpers import get_logger, trace_io


class SubprocessCommandRunner:
    def __init__(
        self,
        *,
        timeout: Optional[float] = DEFAULT_PIPE_TIMEOUT,
        env: Optional[dict] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._timeout = timeout
        self._env = env
        self._log = logger or get_logger("commands")

    def run(self, command: str, limit: int) -> Optional[CommandResult]:
        """Run *command* through /bin/sh and return at most *limit* bytes of stdout."""
        trace_io(self._log, "spawning command", command=command, limit=limit)
        env = None if self._env is None else {**os.environ, **self._env}
        try:
            proc = subprocess.run(
                command,
                shell=True,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                env=env,
                timeout=self._timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            self._log.warning("⚠  command timed out after %ss: %s", self._timeout, command)
            return None
        except OSError as exc:
            self._log.warning("⚠  cannot run command %r: %s", command, exc)
            return None

        out = proc.stdout or b""
        if limit >= 0:
            out = out[:limit]
        if proc.returncode != 0:
            self._log.debug("command exited with code %d: %s", proc.returncode, command)
        return CommandResult(returncode=proc.returncode, stdout=out)
