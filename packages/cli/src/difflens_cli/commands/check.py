"""check command: validate the configuration and probe the provider."""

from __future__ import annotations

import click
from rich.console import Console

from difflens_cli.settings import load_settings
from difflens_core.config import ProviderKind

console = Console()

_PROVIDER_NAMES = {
    ProviderKind.CLOUD: "AWS Bedrock",
    ProviderKind.HOST_ASSISTANT: "Host assistant",
}


@click.command("check")
@click.option(
    "--provider",
    type=click.Choice(["cloud", "bedrock", "assistant", "copilot"]),
    default=None,
    help="Provider to check. Overrides config file.",
)
@click.option("--offline", is_flag=True, help="Only validate the configuration; do not contact the provider.")
@click.pass_context
def check_cmd(ctx, provider: str | None, offline: bool):
    """Validate settings and test the connection to the review provider.

    All configuration problems are reported together. The connection test
    sends a tiny request (a few tokens) to the configured provider.
    """
    lens = ctx.obj["lens"]
    config = load_settings(ctx.obj["config_path"], {"provider": provider})

    console.print(f"[bold]Provider:[/bold] {_PROVIDER_NAMES[config.provider]}")
    if config.provider == ProviderKind.CLOUD:
        console.print(f"[bold]Model:[/bold]    {config.model_id} ({config.aws_region})")
    else:
        console.print(f"[bold]Command:[/bold]  {config.assistant_command}")

    available = ", ".join(_PROVIDER_NAMES[p] for p in lens.available_providers(config))
    console.print(f"[dim]Available providers: {available}[/dim]")

    errors = lens.validate_configuration(config)
    if errors:
        console.print("[red]Configuration errors:[/red]")
        for error in errors:
            console.print(f"  - {error}")
        ctx.exit(1)
    console.print("[green]Configuration is valid.[/green]")

    if offline:
        return

    with console.status("Testing connection..."):
        ok = lens.test_connection(config)
    if ok:
        console.print("[green]Connection test succeeded.[/green]")
    else:
        console.print("[red]Connection test failed.[/red] Run with --verbose for details.")
        ctx.exit(1)
