#!/usr/bin/env python3
"""
pathkit - file-system utilities

Main entry point for the pathkit CLI.
"""

import click
from rich.console import Console
from rich.table import Table

from pathkit import AuditLogger, DeleteOption, PathPolicy, PathKitError
from pathkit.filters import CaseSensitivity, RegexFileFilter
from pathkit.os_operator import PathOperator


console = Console()


def get_logger() -> AuditLogger:
    """Get the audit logger."""
    return AuditLogger()


def get_policy(config: str, logger: AuditLogger) -> PathPolicy:
    """Get a configured policy instance."""
    return PathPolicy(config_path=config, logger=logger)


def get_operator(ctx: click.Context) -> PathOperator:
    logger = get_logger()
    return PathOperator(get_policy(ctx.obj["config"], logger), logger)


def _counters_table(title: str, counters) -> Table:
    table = Table(title=title)
    table.add_column("Files", justify="right")
    table.add_column("Directories", justify="right")
    table.add_column("Bytes", justify="right")
    table.add_row(str(counters.file_count), str(counters.directory_count), str(counters.byte_count))
    return table


@click.group()
@click.version_option(version="0.1.0", prog_name="pathkit")
@click.option("--config", default="pathkit.yaml", show_default=True, help="Policy configuration file.")
@click.pass_context
def pathkit(ctx, config):
    """
    pathkit - file-system utilities

    Counted deletes with read-only override, read-only toggling,
    counting and regex search.
    """
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@pathkit.command("delete")
@click.argument("path", type=click.Path(exists=False))
@click.option("-r", "--recursive", is_flag=True, help="Delete directories with everything below them.")
@click.option("--override-read-only", is_flag=True, help="Clear read-only attributes before deleting.")
@click.option("--dry-run", is_flag=True, help="Only show what would be deleted.")
@click.option("--yes", is_flag=True, help="Do not ask before deleting a directory tree.")
@click.pass_context
def delete_command(ctx, path, recursive, override_read_only, dry_run, yes):
    """Delete PATH and report what was removed."""
    operator = get_operator(ctx)
    options = [DeleteOption.OVERRIDE_READ_ONLY] if override_read_only else None

    if yes:
        operator.policy.set_approval_callback(lambda desc, preview: True)
    else:
        def confirm(description: str, preview: str) -> bool:
            console.print(f"\n[bold yellow]{preview}[/bold yellow]")
            return click.confirm("Approve this action?", default=False)
        operator.policy.set_approval_callback(confirm)

    try:
        if recursive:
            counters = operator.delete(path, options=options, dry_run=dry_run)
        else:
            counters = operator.delete_file(path, options=options, dry_run=dry_run)
    except (PathKitError, OSError) as e:
        console.print(f"[red]Error:[/red] {e}")
        ctx.exit(1)

    if counters is None:
        console.print(f"[red]Denied:[/red] {path}")
        ctx.exit(2)

    title = "Would delete" if dry_run else "Deleted"
    console.print(_counters_table(f"{title}: {path}", counters))


@pathkit.command("count")
@click.argument("path", type=click.Path(exists=True))
@click.option("--regex", default=None, help="Only count files whose name matches.")
@click.pass_context
def count_command(ctx, path, regex):
    """Count files, directories and bytes below PATH."""
    file_filter = None
    if regex:
        try:
            file_filter = RegexFileFilter(regex)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--regex")

    operator = get_operator(ctx)
    counters = operator.count(path, file_filter=file_filter)
    console.print(_counters_table(f"Contents of {path}", counters))


@pathkit.command("find")
@click.argument("path", type=click.Path(exists=True))
@click.argument("regex")
@click.option("-i", "--ignore-case", is_flag=True, help="Match names case-insensitively.")
@click.pass_context
def find_command(ctx, path, regex, ignore_case):
    """List files below PATH whose name matches REGEX."""
    case = CaseSensitivity.INSENSITIVE if ignore_case else CaseSensitivity.SENSITIVE
    try:
        file_filter = RegexFileFilter(regex, case=case)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="REGEX")

    operator = get_operator(ctx)
    matches = operator.find(path, file_filter=file_filter)
    if not matches:
        console.print("[dim]No matches.[/dim]")
        return
    for match in matches:
        console.print(str(match), highlight=False, soft_wrap=True)


@pathkit.command("readonly")
@click.argument("path", type=click.Path(exists=True))
@click.argument("state", type=click.Choice(["on", "off"]))
@click.pass_context
def readonly_command(ctx, path, state):
    """Turn the read-only attribute of PATH on or off."""
    operator = get_operator(ctx)
    try:
        applied = operator.set_read_only(path, state == "on")
    except (PathKitError, OSError) as e:
        console.print(f"[red]Error:[/red] {e}")
        ctx.exit(1)
    if not applied:
        console.print(f"[red]Denied:[/red] {path}")
        ctx.exit(2)
    console.print(f"[green]{path} is now {'read-only' if state == 'on' else 'writable'}[/green]")


@pathkit.command("protect")
@click.argument("pattern")
@click.pass_context
def protect_command(ctx, pattern):
    """Add PATTERN to the protected paths."""
    logger = get_logger()
    policy = get_policy(ctx.obj["config"], logger)
    policy.add_protected(pattern)
    policy.save_config()
    console.print(f"[green]Protected:[/green] {pattern}")


@pathkit.command("audit")
@click.option("--limit", default=20, show_default=True, help="Number of entries to show.")
def audit_command(limit):
    """View the audit log."""
    entries = get_logger().get_recent(limit=limit)

    if not entries:
        console.print("[dim]No audit entries found.[/dim]")
        return

    table = Table(title="Recent Audit Log")
    table.add_column("Time", style="dim")
    table.add_column("Action")
    table.add_column("Status")

    for entry in entries:
        time_str = entry.timestamp.split("T")[1].split(".")[0] if "T" in entry.timestamp else entry.timestamp

        status_str = entry.status
        if entry.status == "executed":
            status_str = f"[green]{entry.status}[/green]"
        elif entry.status in ("denied", "failed"):
            status_str = f"[red]{entry.status}[/red]"

        description = entry.action_description
        if len(description) > 60:
            description = description[:60] + "..."
        table.add_row(time_str, description, status_str)

    console.print(table)


def main():
    pathkit(obj={})


if __name__ == "__main__":
    main()
