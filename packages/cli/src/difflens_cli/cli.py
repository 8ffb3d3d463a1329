"""CLI entry point for difflens.

Commands:
  status    repository root, current branch and recent commits
  preview   the diff a review would send, with change statistics
  review    run an AI review of the diff and print the result
  check     validate the configuration and probe the provider
  init      interactive setup wizard that writes .difflens.yml
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from difflens_cli.commands.check import check_cmd
from difflens_cli.commands.init import init_cmd
from difflens_cli.commands.preview import preview_cmd
from difflens_cli.commands.review import review_cmd
from difflens_cli.commands.status import status_cmd

console = Console()


def _configure_logging(verbose: bool) -> None:
    """Route library logging through rich when --verbose is given.

    Without --verbose only warnings reach the terminal; the core library
    never configures handlers itself.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=verbose)],
        force=True,
    )


def _build_lens():
    """Compose the core services once per invocation.

    The assistant is looked up as a command on PATH, which is the nearest
    thing a terminal has to an editor-hosted assistant.
    """
    from difflens_core.providers.assistant import CommandLineHost
    from difflens_core.service import DiffLens

    return DiffLens(host=CommandLineHost())


@click.group()
@click.version_option(
    version=importlib.metadata.version("difflens"),
    prog_name="difflens",
)
@click.option(
    "--config",
    "config_path",
    default=".difflens.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="DIFFLENS_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """AI code review of your latest git changes."""
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["lens"] = _build_lens()


main.add_command(status_cmd)
main.add_command(preview_cmd)
main.add_command(review_cmd)
main.add_command(check_cmd)
main.add_command(init_cmd)
