"""status command: repository facts and recent commits."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

console = Console()


@click.command("status")
@click.option(
    "--path",
    default=".",
    show_default=True,
    type=click.Path(file_okay=False),
    help="Directory inside the git repository.",
)
@click.option("--limit", default=20, show_default=True, help="Maximum number of commits to show.")
@click.pass_context
def status_cmd(ctx, path: str, limit: int):
    """Show the repository root, current branch and recent commits.

    Use a commit hash from the table with `difflens preview --from <hash>`
    or `difflens review --from <hash>`.
    """
    lens = ctx.obj["lens"]

    if not lens.is_repository(path):
        console.print("[yellow]Current directory is not in a Git repository.[/yellow]")
        ctx.exit(1)

    root = lens.repository_root(path) or path
    console.print(f"[bold]Repository:[/bold] {root}")
    console.print(f"[bold]Branch:[/bold]     {lens.current_branch(root) or '(detached HEAD)'}")

    commits = lens.recent_commits(root, limit)
    if not commits:
        console.print("[yellow]No commits found.[/yellow]")
        return

    table = Table(title="Recent commits", show_header=True, header_style="bold cyan")
    table.add_column("Hash", style="bold", width=8)
    table.add_column("Message", max_width=60)
    table.add_column("Author", max_width=24)
    table.add_column("Date", width=19)

    for commit in commits:
        table.add_row(
            commit.short_hash,
            commit.short_message,
            commit.author_name,
            commit.authored_at.strftime("%Y-%m-%d %H:%M:%S") if commit.authored_at.year > 1 else "",
        )

    console.print(table)
