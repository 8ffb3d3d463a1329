"""Single-shot execution of the git binary.

Every git interaction in difflens goes through ProcessRunner.run(), which
spawns exactly one process, buffers its output completely and hands back a
CommandResult. A non-zero exit is data, not an exception: callers inspect
``succeeded`` and decide which sentinel to return.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Upper bound on a single git invocation. Diffs of large ranges with a wide
# context can take a few seconds; anything beyond a minute is a hung process.
_DEFAULT_TIMEOUT = 60


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one external process invocation."""

    succeeded: bool
    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0


class ProcessRunner:
    """Runs an executable in a working directory and captures its output."""

    def __init__(self, executable: str = "git", timeout: float = _DEFAULT_TIMEOUT):
        self.executable = executable
        self.timeout = timeout

    def run(self, working_directory: str, args: list[str], stdin_text: str | None = None) -> CommandResult:
        """Run ``<executable> <args...>`` in ``working_directory``.

        Never raises: a missing binary, a bad directory or a timeout all come
        back as a failed CommandResult with exit code -1 and the error text
        in ``stderr``.
        """
        argv = [self.executable, *args]
        try:
            completed = subprocess.run(
                argv,
                cwd=working_directory,
                input=stdin_text,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            logger.warning("%s timed out after %ss", " ".join(argv[:2]), self.timeout)
            return CommandResult(False, stderr=f"Timed out after {self.timeout}s", exit_code=-1)
        except (OSError, ValueError) as e:
            logger.debug("Failed to spawn %s: %s", self.executable, e)
            return CommandResult(False, stderr=str(e), exit_code=-1)

        return CommandResult(
            succeeded=completed.returncode == 0,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
            exit_code=completed.returncode,
        )
