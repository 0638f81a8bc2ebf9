"""
Command-Line Interface

CLI commands for LedgerKG operations.

Commands:
    ledger-kg commit    - Commit a fact file to a workspace
    ledger-kg diff      - Preview the changes a commit would record
    ledger-kg history   - Change history of one entity
    ledger-kg log       - Workspace audit log
    ledger-kg identity  - Print the deterministic identifier for a label

Usage:
    # Commit facts extracted from a document
    ledger-kg commit facts.nt --tenant acme --workspace finance --source-doc urn:doc:42

    # Dry run
    ledger-kg diff facts.nt --tenant acme --workspace finance --source-doc urn:doc:42

    # Recent updates
    ledger-kg log --tenant acme --workspace finance --change-type UPDATE --limit 20
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ledger_kg.errors import LedgerError

__all__ = ["main", "app"]

app = typer.Typer(
    name="ledger-kg",
    help="Audited commits and change history for RDF knowledge graphs",
    no_args_is_help=True,
)
console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@app.callback()
def _main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        help="TOML configuration file",
        exists=True,
        dir_okay=False,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Show debug logging",
    ),
) -> None:
    load_dotenv()
    _configure_logging(verbose)
    ctx.obj = {"config": config}


def _load_config(ctx: typer.Context) -> Any:
    from ledger_kg.config import KGConfig

    path = (ctx.obj or {}).get("config")
    return KGConfig.from_file(path) if path else KGConfig()


def _run(coro: Any) -> Any:
    """Run a coroutine, turning pipeline and input errors into a clean exit."""
    try:
        return asyncio.run(coro)
    except LedgerError as e:
        console.print(f"[red]{type(e).__name__}:[/] {escape(str(e))}")
        raise typer.Exit(code=1)
    except ValueError as e:
        # Bad scope ids and config values (pydantic ValidationError is a ValueError)
        console.print(f"[red]Invalid input:[/] {escape(str(e))}")
        raise typer.Exit(code=1)


def _read_lines(path: Path) -> list[str]:
    return path.read_text(encoding="utf-8").splitlines()


def _changes_table(title: str, rows: list[tuple[str, ...]], columns: list[str]) -> Table:
    table = Table(title=title)
    styles = {"Type": "bold", "Entity": "cyan", "Property": "magenta", "When": "dim"}
    for column in columns:
        table.add_column(column, style=styles.get(column))
    for row in rows:
        table.add_row(*row)
    return table


@app.command()
def commit(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Fact file, one triple per line", exists=True, dir_okay=False),
    tenant: str = typer.Option(..., "--tenant", "-t", help="Tenant id"),
    workspace: str = typer.Option(..., "--workspace", "-w", help="Workspace id"),
    source_doc: Optional[str] = typer.Option(
        None,
        "--source-doc", "-s",
        help="Source document URI (enables audit and stale-data replacement)",
    ),
) -> None:
    """Commit a fact file to a workspace."""

    async def _commit() -> None:
        from ledger_kg.api.knowledge_ledger import KnowledgeLedger

        async with KnowledgeLedger(_load_config(ctx)) as ledger:
            scope = ledger.scope(tenant, workspace)
            result = await ledger.commit(scope, _read_lines(path), source_doc)

        console.print(Panel(
            f"[green]Committed {path.name}[/]\n\n"
            f"  Graph: {result.scope_ref}\n"
            f"  Triples: {result.triple_count}\n"
            f"  Changes recorded: {result.change_count}\n"
            f"  Entities replaced: {result.deleted_entity_count}",
            title="Commit Complete",
        ))

    _run(_commit())


@app.command()
def diff(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Fact file, one triple per line", exists=True, dir_okay=False),
    tenant: str = typer.Option(..., "--tenant", "-t", help="Tenant id"),
    workspace: str = typer.Option(..., "--workspace", "-w", help="Workspace id"),
    source_doc: str = typer.Option(..., "--source-doc", "-s", help="Source document URI"),
) -> None:
    """Preview the changes committing a fact file would record."""

    async def _diff() -> None:
        from ledger_kg.api.knowledge_ledger import KnowledgeLedger

        async with KnowledgeLedger(_load_config(ctx)) as ledger:
            scope = ledger.scope(tenant, workspace)
            result = await ledger.preview_changes(scope, _read_lines(path), source_doc)

        if not result.changes:
            console.print("[green]No changes.[/]")
        else:
            console.print(_changes_table(
                f"Pending changes ({result.change_count})",
                [
                    (c.change_type.value, c.entity_uri, c.property, c.previous_value, c.new_value)
                    for c in result.changes
                ],
                ["Type", "Entity", "Property", "Previous", "New"],
            ))
        if result.entity_uris_to_delete:
            console.print(f"[dim]{len(result.entity_uris_to_delete)} entities would be replaced[/]")

    _run(_diff())


@app.command()
def history(
    ctx: typer.Context,
    entity_uri: str = typer.Argument(..., help="Entity URI"),
    tenant: str = typer.Option(..., "--tenant", "-t", help="Tenant id"),
    workspace: str = typer.Option(..., "--workspace", "-w", help="Workspace id"),
) -> None:
    """Show the change history of one entity."""

    async def _history() -> None:
        from ledger_kg.api.knowledge_ledger import KnowledgeLedger

        async with KnowledgeLedger(_load_config(ctx)) as ledger:
            events = await ledger.entity_history(ledger.scope(tenant, workspace), entity_uri)

        if not events:
            console.print(f"[yellow]No recorded changes for {entity_uri}[/]")
            return
        console.print(_changes_table(
            f"History: {entity_uri}",
            [
                (e.changed_at, e.change_type.value, e.property, e.previous_value, e.new_value, e.source_document)
                for e in events
            ],
            ["When", "Type", "Property", "Previous", "New", "Source"],
        ))

    _run(_history())


@app.command()
def log(
    ctx: typer.Context,
    tenant: str = typer.Option(..., "--tenant", "-t", help="Tenant id"),
    workspace: str = typer.Option(..., "--workspace", "-w", help="Workspace id"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", min=0, help="Page size"),
    offset: int = typer.Option(0, "--offset", min=0, help="Rows to skip"),
    change_type: Optional[str] = typer.Option(
        None,
        "--change-type",
        help="INSERT, UPDATE or DELETE",
    ),
    since: Optional[str] = typer.Option(None, "--since", help="ISO-8601 lower bound"),
    until: Optional[str] = typer.Option(None, "--until", help="ISO-8601 upper bound"),
) -> None:
    """Show the workspace audit log, newest first."""
    if change_type is not None:
        change_type = change_type.upper()
        if change_type not in ("INSERT", "UPDATE", "DELETE"):
            raise typer.BadParameter("must be INSERT, UPDATE or DELETE", param_hint="--change-type")

    async def _log() -> None:
        from ledger_kg.api.knowledge_ledger import KnowledgeLedger

        async with KnowledgeLedger(_load_config(ctx)) as ledger:
            page = await ledger.audit_log(
                ledger.scope(tenant, workspace),
                limit=limit,
                offset=offset,
                change_type=change_type,
                date_from=since,
                date_to=until,
            )

        console.print(_changes_table(
            f"Audit log ({len(page.changes)} of {page.total})",
            [
                (e.changed_at, e.change_type.value, e.entity_uri, e.property, e.previous_value, e.new_value)
                for e in page.changes
            ],
            ["When", "Type", "Entity", "Property", "Previous", "New"],
        ))

    _run(_log())


@app.command()
def identity(
    label: str = typer.Argument(..., help="Entity label"),
    entity_type: str = typer.Option(..., "--type", help="Entity type"),
    workspace: Optional[str] = typer.Option(None, "--workspace", "-w", help="Workspace id"),
    key: Optional[list[str]] = typer.Option(
        None,
        "--key", "-k",
        help="Identity key as name=value (repeatable, order preserved)",
    ),
) -> None:
    """Print the deterministic identifier for a label."""
    from ledger_kg.ingestion.resolution import resolve_identity

    values: dict[str, str] = {}
    for item in key or []:
        name, sep, value = item.partition("=")
        if not sep:
            raise typer.BadParameter(f"expected name=value, got {item!r}", param_hint="--key")
        values[name.strip()] = value

    uri = resolve_identity(label, entity_type, workspace, values or None, list(values) or None)
    console.print(uri, highlight=False, soft_wrap=True)


def main() -> None:
    """Entry point for the CLI."""
    app()
