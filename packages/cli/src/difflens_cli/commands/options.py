"""Options shared by the commands that produce a diff."""

from __future__ import annotations

import click

from difflens_core.utils.filters import validate_filter_syntax


def _check_filters(ctx, param, value: str | None) -> str | None:
    if value is not None and not validate_filter_syntax(value):
        raise click.BadParameter(f"invalid path filter: {value!r} (use globs like '*.py *.md')")
    return value


def diff_options(func):
    """Attach --path/--from/--context-lines/--deleted/--filter to a command."""
    decorators = [
        click.option(
            "--path",
            default=".",
            show_default=True,
            type=click.Path(file_okay=False),
            help="Directory inside the git repository.",
        ),
        click.option(
            "--from",
            "from_ref",
            default=None,
            help="Commit or ref to compare HEAD against. Defaults to HEAD~1.",
        ),
        click.option(
            "--context-lines",
            "-U",
            type=click.IntRange(0, 100),
            default=None,
            help="Lines of context around each change. Overrides config file.",
        ),
        click.option(
            "--include-deleted/--exclude-deleted",
            "include_deleted",
            default=None,
            help="Whether deleted files appear in the diff. Overrides config file.",
        ),
        click.option(
            "--filter",
            "path_filters",
            default=None,
            callback=_check_filters,
            help="Path globs separated by comma, semicolon or space (e.g. '*.py *.md').",
        ),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


def diff_overrides(context_lines: int | None, include_deleted: bool | None, path_filters: str | None) -> dict:
    return {
        "context_lines": context_lines,
        "exclude_deleted_files": None if include_deleted is None else not include_deleted,
        "path_filters": path_filters,
    }
