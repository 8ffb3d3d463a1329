"""init command: interactive setup wizard that writes .difflens.yml.

Credentials are never written to the file; keys come from the environment
or the aws CLI profile.
"""

from __future__ import annotations

from pathlib import Path

import click
import yaml
from rich.console import Console

from difflens_core.config import DEFAULT_MODEL_ID, DEFAULT_REGION
from difflens_core.utils.filters import validate_filter_syntax

console = Console()


def _prompt_filters() -> str:
    while True:
        filters = click.prompt(
            "Path filters (e.g. '*.py *.md', empty for all files)",
            default="",
            show_default=False,
        )
        if validate_filter_syntax(filters):
            return filters
        console.print("[red]Invalid filter syntax. Use globs such as *.py or src/*.[/red]")


@click.command("init")
@click.pass_context
def init_cmd(ctx):
    """Set up difflens for this repository.

    Creates (or updates) the configuration file with the provider, model and
    diff options. Existing keys not asked about are preserved.
    """
    config_path = Path(ctx.obj["config_path"]) if ctx.obj else Path(".difflens.yml")
    console.print("\n[bold cyan]difflens init[/bold cyan] - setup wizard\n")

    # --- Choose provider ---
    console.print("Review provider:")
    console.print("  [bold]cloud[/bold]      - Claude on AWS Bedrock (needs AWS credentials)")
    console.print("  [bold]assistant[/bold]  - an assistant command on your PATH, with offline fallback")
    provider = click.prompt("Provider", type=click.Choice(["cloud", "assistant"]), default="cloud")

    config: dict = {"provider": provider}

    if provider == "cloud":
        config["aws_region"] = click.prompt("AWS region", default=DEFAULT_REGION)
        config["model"] = click.prompt("Bedrock model id", default=DEFAULT_MODEL_ID)
    else:
        config["assistant_command"] = click.prompt("Assistant command", default="copilot")

    # --- Diff options ---
    config["context_lines"] = click.prompt("Context lines", type=click.IntRange(0, 100), default=50)
    config["exclude_deleted_files"] = click.confirm("Exclude deleted files from the diff?", default=True)
    filters = _prompt_filters()
    if filters:
        config["path_filters"] = filters

    _write_config(config_path, config)
    console.print(f"[green]Created {config_path}[/green]")

    if provider == "cloud":
        console.print(
            "\n[yellow]Remember to provide [bold]AWS_ACCESS_KEY_ID[/bold] and "
            "[bold]AWS_SECRET_ACCESS_KEY[/bold] (or configure the aws CLI).[/yellow]"
        )

    console.print("\n[bold green]Setup complete![/bold green]")
    console.print("Check it with: [bold]difflens check[/bold]")


def _write_config(path: Path, config: dict) -> None:
    """Write or update the config file, preserving any existing keys."""
    existing: dict = {}
    if path.exists():
        existing = yaml.safe_load(path.read_text()) or {}
    existing.update(config)
    path.write_text(yaml.dump(existing, default_flow_style=False, sort_keys=False))
