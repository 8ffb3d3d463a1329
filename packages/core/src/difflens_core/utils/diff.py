"""Pure text transforms over unified diff output.

Nothing here touches git or the network: every function is a deterministic
function of its input text, so the same diff always renders to the same
bytes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from difflens_core.git.diff import FILE_BOUNDARY

NO_CHANGES = "No changes detected."
NO_CHANGES_IN_RANGE = "No changes detected in the specified commit or range."
UNKNOWN_FILE = "Unknown file"

# Per-file header lines that carry no review value once the file name is known.
_METADATA_PREFIXES = ("index ", "--- ", "+++ ")


@dataclass(frozen=True)
class FileSection:
    file_name: str
    body: str


@dataclass(frozen=True)
class FormattedDiff:
    """Per-file sections in boundary order, or the raw text when none were found."""

    sections: tuple[FileSection, ...] = ()
    fallback: str = ""

    @property
    def is_fallback(self) -> bool:
        return not self.sections


@dataclass
class DiffStatistics:
    files_changed: int = 0
    lines_added: int = 0
    lines_removed: int = 0

    @property
    def total_changes(self) -> int:
        return self.lines_added + self.lines_removed

    def __str__(self) -> str:
        return (
            f"{self.files_changed} files changed, "
            f"{self.lines_added} insertions(+), {self.lines_removed} deletions(-)"
        )


def _file_name_from_boundary(line: str) -> str:
    # "diff --git a/path b/path" -> "path"
    parts = line.split(" ")
    if len(parts) >= 4:
        return parts[3][2:]
    return UNKNOWN_FILE


def to_structured_sections(diff: str) -> FormattedDiff:
    """Split a unified diff into per-file sections in a single forward pass.

    Lines before the first boundary are dropped, as are the ``index``/``---``/
    ``+++`` header lines. Everything else, hunk headers and ``+``/``-``/`` ``
    body lines included, is kept verbatim.
    """
    sections: list[FileSection] = []
    current_file = ""
    body: list[str] = []

    for line in diff.split("\n"):
        if line.startswith(FILE_BOUNDARY):
            if current_file and body:
                sections.append(FileSection(current_file, "\n".join(body)))
            body = []
            current_file = _file_name_from_boundary(line)
            continue
        if line.startswith(_METADATA_PREFIXES):
            continue
        if current_file:
            body.append(line)

    if current_file and body:
        sections.append(FileSection(current_file, "\n".join(body)))

    if not sections:
        return FormattedDiff(fallback=diff)
    return FormattedDiff(sections=tuple(sections))


def format_diff_markdown(diff: str) -> str:
    """Render a diff as one ``## <file>`` heading plus fenced block per file."""
    if not diff:
        return NO_CHANGES

    formatted = to_structured_sections(diff)
    if formatted.is_fallback:
        return f"```diff\n{formatted.fallback}\n```"

    blocks = [f"## {section.file_name}\n\n```diff\n{section.body.rstrip()}\n```\n\n" for section in formatted.sections]
    return "".join(blocks)


def diff_statistics(diff: str) -> DiffStatistics:
    """Count files, insertions and deletions by line prefix.

    Boundary lines are files, ``+`` lines (but not ``+++``) are
    insertions and ``-`` lines (but not ``---``) are deletions.
    """
    stats = DiffStatistics()
    if not diff:
        return stats

    for line in diff.split("\n"):
        if line.startswith(FILE_BOUNDARY):
            stats.files_changed += 1
        elif line.startswith("+") and not line.startswith("+++"):
            stats.lines_added += 1
        elif line.startswith("-") and not line.startswith("---"):
            stats.lines_removed += 1
    return stats


def build_diff_preview(
    diff: str,
    from_ref: str | None,
    context_lines: int,
    exclude_deleted: bool,
    path_filters: str = "",
    generated_at: datetime | None = None,
) -> str:
    """Build the markdown preview document shown before a review is run."""
    if not diff:
        return NO_CHANGES_IN_RANGE

    short_ref = from_ref[:8] if from_ref else "HEAD~1"
    options = "Exclude deleted files" if exclude_deleted else "Include all changes"
    filter_info = f"\nFile Extensions Filter: {path_filters}" if path_filters else ""
    timestamp = (generated_at or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")

    return (
        "# Git Diff Preview\n"
        "\n"
        f"**Comparison:** Current HEAD vs Commit {short_ref}  \n"
        f"**Context Lines (git diff -U{context_lines}):** {context_lines}  \n"
        f"**Options:** {options}{filter_info}  \n"
        f"**Generated at:** {timestamp}\n"
        "\n"
        "---\n"
        "\n"
        "```diff\n"
        f"{diff}\n"
        "```"
    )
