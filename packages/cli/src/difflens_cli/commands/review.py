"""review command: run an AI review of the latest changes."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console
from rich.markdown import Markdown

from difflens_cli.commands.options import diff_options, diff_overrides
from difflens_cli.settings import load_settings
from difflens_core.models import WARNING_LABEL
from difflens_core.reviewer import render_review_markdown

console = Console()


@click.command("review")
@diff_options
@click.option(
    "--provider",
    type=click.Choice(["cloud", "bedrock", "assistant", "copilot"]),
    default=None,
    help="Review provider. Overrides config file.",
)
@click.option("--model", default=None, help="Bedrock model id. Overrides config file.")
@click.option(
    "--output",
    "-o",
    default=None,
    type=click.Path(dir_okay=False),
    help="Write the review document (markdown) to this file.",
)
@click.pass_context
def review_cmd(
    ctx,
    path: str,
    from_ref: str | None,
    context_lines: int | None,
    include_deleted: bool | None,
    path_filters: str | None,
    provider: str | None,
    model: str | None,
    output: str | None,
):
    """Review the diff between a commit (default HEAD~1) and HEAD with AI.

    \b
    Credentials for the cloud provider are read from:
      AWS_ACCESS_KEY_ID      or `aws configure get aws_access_key_id`
      AWS_SECRET_ACCESS_KEY  or `aws configure get aws_secret_access_key`
      AWS_REGION             or the region in .difflens.yml
    """
    lens = ctx.obj["lens"]
    overrides = diff_overrides(context_lines, include_deleted, path_filters)
    overrides.update({"provider": provider, "model_id": model})
    config = load_settings(ctx.obj["config_path"], overrides)

    if not lens.is_repository(path):
        raise click.UsageError("Current directory is not in a Git repository.")

    errors = lens.validate_configuration(config)
    if errors:
        raise click.UsageError("Configuration errors:\n  - " + "\n  - ".join(errors))

    with console.status("Code review in progress..."):
        result = lens.review_repository(path, config, from_ref)

    if result is None:
        console.print("[yellow]No changes found to review.[/yellow]")
        return

    document = render_review_markdown(result)
    if result.is_error:
        console.print(f"[red]{result.review_text}[/red]")
    else:
        if result.provider_label == WARNING_LABEL:
            console.print("[yellow]The assistant is unavailable; showing a basic offline analysis.[/yellow]")
        console.print(Markdown(document))

    if output:
        Path(output).write_text(document, encoding="utf-8")
        console.print(f"[green]Wrote review to {output}[/green]")

    if result.is_error:
        ctx.exit(1)
