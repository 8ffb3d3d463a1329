"""preview command: show the diff a review would send."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console
from rich.markdown import Markdown

from difflens_cli.commands.options import diff_options, diff_overrides
from difflens_cli.settings import load_settings

console = Console()


@click.command("preview")
@diff_options
@click.option(
    "--markdown",
    "as_markdown",
    is_flag=True,
    help="Show the per-file markdown the reviewer receives instead of the raw diff.",
)
@click.option("--output", "-o", default=None, type=click.Path(dir_okay=False), help="Also write the preview to a file.")
@click.pass_context
def preview_cmd(
    ctx,
    path: str,
    from_ref: str | None,
    context_lines: int | None,
    include_deleted: bool | None,
    path_filters: str | None,
    as_markdown: bool,
    output: str | None,
):
    """Preview the git diff between a commit and HEAD.

    Applies the same context width, deleted-file exclusion and path filters
    as `difflens review`, so what you see is what the reviewer gets.
    """
    lens = ctx.obj["lens"]
    config = load_settings(ctx.obj["config_path"], diff_overrides(context_lines, include_deleted, path_filters))

    if not lens.is_repository(path):
        raise click.UsageError("Current directory is not in a Git repository.")

    diff, document = lens.preview(path, config, from_ref)
    if as_markdown and diff:
        document = lens.format_diff_markdown(diff)

    console.print(Markdown(document))
    if diff:
        console.print(f"\n[bold]{lens.diff_statistics(diff)}[/bold]")

    if output:
        Path(output).write_text(document, encoding="utf-8")
        console.print(f"[green]Wrote preview to {output}[/green]")
