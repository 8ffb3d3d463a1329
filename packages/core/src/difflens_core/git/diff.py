"""Unified diff retrieval between a reference commit and HEAD.

The diff itself is computed by git. This module only decides which range and
pathspecs to ask for, and optionally strips deleted files from the output.
Any git failure yields an empty string: the caller's policy for a failed diff
is "nothing to review", not an error dialog.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator

from difflens_core.git.process import ProcessRunner
from difflens_core.utils.filters import split_path_filters

logger = logging.getLogger(__name__)

FILE_BOUNDARY = "diff --git "
DELETED_FILE_MARKER = "deleted file mode"

# With no explicit reference the review covers the last commit only.
DEFAULT_RANGE = "HEAD~1..HEAD"


def resolve_range(from_ref: str | None) -> str:
    if from_ref:
        return f"{from_ref}..HEAD"
    return DEFAULT_RANGE


def build_diff_args(from_ref: str | None, context_lines: int, path_filters: str = "") -> list[str]:
    """Build the argument vector for ``git diff``.

    Each filter token becomes its own pathspec after ``--``; git includes a
    file when it matches any of them.
    """
    args = ["diff", f"--unified={context_lines}", resolve_range(from_ref)]
    pathspecs = split_path_filters(path_filters)
    if pathspecs:
        args.append("--")
        args.extend(pathspecs)
    return args


def _iter_without_deleted(lines: Iterable[str]) -> Iterator[str]:
    skip = False
    # The boundary line is held back until the next line shows whether the
    # section is a deletion.
    pending_boundary: str | None = None
    for line in lines:
        if line.startswith(FILE_BOUNDARY):
            if pending_boundary is not None:
                yield pending_boundary
            skip = False
            pending_boundary = line
            continue
        if pending_boundary is not None:
            if line.startswith(DELETED_FILE_MARKER):
                skip = True
                pending_boundary = None
                continue
            yield pending_boundary
            pending_boundary = None
        if not skip:
            yield line
    if pending_boundary is not None:
        yield pending_boundary


def filter_deleted_files(diff: str) -> str:
    """Drop every file section whose boundary is followed by a deletion marker."""
    if not diff:
        return diff
    return "\n".join(_iter_without_deleted(diff.split("\n")))


class DiffRetriever:
    def __init__(self, runner: ProcessRunner | None = None):
        self.runner = runner or ProcessRunner()

    def diff(
        self,
        path: str,
        from_ref: str | None = None,
        context_lines: int = 3,
        exclude_deleted: bool = True,
        path_filters: str = "",
    ) -> str:
        """Return the unified diff of ``from_ref..HEAD`` (or the last commit).

        ``context_lines`` is passed through to ``--unified`` unchanged.
        """
        args = build_diff_args(from_ref, context_lines, path_filters)
        try:
            result = self.runner.run(path, args)
        except Exception as e:
            logger.warning("git diff raised in %s: %s", path, e)
            return ""
        if not result.succeeded:
            logger.debug("git %s failed (exit %d): %s", " ".join(args), result.exit_code, result.stderr.strip())
            return ""

        diff = result.stdout
        if exclude_deleted:
            diff = filter_deleted_files(diff)
        return diff
