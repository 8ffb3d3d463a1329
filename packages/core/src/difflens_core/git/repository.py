"""Read-only repository facts: is this a repo, where is its root, which branch.

"No repository" is a normal state for the caller to display, so none of these
functions raise. Failures are reported as False / None / "unknown" / [] and
logged at debug level.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime

from difflens_core.git.process import ProcessRunner

logger = logging.getLogger(__name__)

# hash | subject | ISO author date | author name | author email
_LOG_FORMAT = "%H|%s|%ai|%an|%ae"
_LOG_FIELDS = 5
_GIT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S %z"

UNKNOWN_BRANCH = "unknown"


@dataclass(frozen=True)
class Commit:
    hash: str
    subject: str
    authored_at: datetime
    author_name: str
    author_email: str

    @property
    def short_hash(self) -> str:
        return self.hash[:8]

    @property
    def short_message(self) -> str:
        lines = self.subject.splitlines()
        return lines[0] if lines else ""

    def __str__(self) -> str:
        return f"{self.short_hash} - {self.short_message}"


def parse_log_line(line: str) -> Commit | None:
    """Parse one ``hash|subject|date|name|email`` record, or None if malformed.

    Subjects may themselves contain ``|``, so the fixed fields are taken from
    both ends and whatever sits in between is the subject.
    """
    parts = line.split("|")
    if len(parts) < _LOG_FIELDS:
        return None
    commit_hash = parts[0].strip()
    author_name, author_email = parts[-2], parts[-1].strip()
    raw_date = parts[-3].strip()
    subject = "|".join(parts[1:-3])
    try:
        authored_at = datetime.strptime(raw_date, _GIT_DATE_FORMAT)
    except ValueError:
        authored_at = datetime.min
    return Commit(
        hash=commit_hash,
        subject=subject,
        authored_at=authored_at,
        author_name=author_name,
        author_email=author_email,
    )


def parse_log(output: str) -> list[Commit]:
    """Parse ``git log`` output, dropping any record that does not parse."""
    commits = []
    for line in output.splitlines():
        if not line.strip():
            continue
        commit = parse_log_line(line)
        if commit is None:
            logger.debug("Skipping malformed log record: %r", line[:120])
            continue
        commits.append(commit)
    return commits


class RepositoryInspector:
    def __init__(self, runner: ProcessRunner | None = None):
        self.runner = runner or ProcessRunner()

    def is_repository(self, path: str) -> bool:
        if not path or not os.path.isdir(path):
            return False
        return self.runner.run(path, ["rev-parse", "--git-dir"]).succeeded

    def repository_root(self, path: str) -> str | None:
        if not path or not os.path.isdir(path):
            return None
        result = self.runner.run(path, ["rev-parse", "--show-toplevel"])
        if not result.succeeded:
            logger.debug("rev-parse --show-toplevel failed in %s: %s", path, result.stderr.strip())
            return None
        return result.stdout.strip() or None

    def current_branch(self, path: str) -> str:
        result = self.runner.run(path, ["branch", "--show-current"])
        if not result.succeeded:
            return UNKNOWN_BRANCH
        return result.stdout.strip()

    def recent_commits(self, path: str, max_count: int = 20) -> list[Commit]:
        """Return up to ``max_count`` commits, most recent first."""
        result = self.runner.run(path, ["log", f"--pretty=format:{_LOG_FORMAT}", "-n", str(max_count)])
        if not result.succeeded:
            logger.debug("git log failed in %s: %s", path, result.stderr.strip())
            return []
        return parse_log(result.stdout)
