"""
Event Actions CLI

Command-line interface for event actions administration.

Commands:
- init-db: Create the event actions tables
- register-event / list-events / unregister-event: Manage event names
- create-action / delete-action / show-action / list-actions: Manage actions
- publish: Publish an event to its subscribed actions
- execute: Run a single action with a test payload
- stats: Show usage metrics
"""

import asyncio
import json
from typing import Any, Optional

import httpx
import typer
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from eventactions.contracts.types import ActionState, ActionType
from eventactions.errors import EventActionError

app = typer.Typer(
    name="eventactions",
    help="Event Actions CLI",
)

console = Console()


def get_db():
    """Get database session."""
    from basecore.db import get_db as _get_db
    return next(_get_db())


def get_http_client() -> httpx.AsyncClient | None:
    """Shared HTTP client for outbound calls (None = created from settings)."""
    return None


def get_services(db, usage_stats=None):
    from eventactions.service.bootstrap import provide_services
    return provide_services(db, usage_stats=usage_stats, client=get_http_client())


def parse_payload(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        rprint(f"[red]Invalid JSON payload: {e}[/red]")
        raise typer.Exit(1)


def fail(e: EventActionError) -> None:
    rprint(f"[red]{e.message}[/red]")
    raise typer.Exit(1)


@app.callback()
def main(log_level: Optional[str] = typer.Option(None, help="Log level (defaults to LOG_LEVEL)")):
    from basecore.logging import setup_logging
    setup_logging(log_level)


@app.command()
def init_db():
    """Create the event actions tables."""
    from basecore.db import create_tables
    from eventactions.persistence.models import EventActionsBase

    for table in create_tables(EventActionsBase.metadata):
        rprint(f"[green]Table ready:[/green] {table}")


@app.command()
def register_event(
    name: str = typer.Argument(..., help="Event name"),
    org_id: int = typer.Option(1, help="Organization ID"),
):
    """Register an event name."""
    db = get_db()
    try:
        event = get_services(db).events.register_event(name, org_id)
        rprint(f"[green]Event registered:[/green] {event.name} (id {event.id})")
    except EventActionError as e:
        fail(e)
    finally:
        db.close()


@app.command()
def list_events(org_id: int = typer.Option(1, help="Organization ID")):
    """List registered events."""
    db = get_db()
    try:
        events = get_services(db).events.list_events(org_id)
        if not events:
            rprint("[yellow]No events registered[/yellow]")
            raise typer.Exit(0)

        table = Table(title=f"Events for org {org_id}")
        table.add_column("ID", style="dim")
        table.add_column("Name")
        table.add_column("Created")
        for event in events:
            table.add_row(str(event.id), event.name, event.created_at.isoformat(timespec="seconds"))
        console.print(table)
    finally:
        db.close()


@app.command()
def unregister_event(name: str = typer.Argument(..., help="Event name")):
    """Unregister an event name."""
    db = get_db()
    try:
        get_services(db).events.unregister_event(name)
        rprint(f"[green]Event unregistered:[/green] {name}")
    except EventActionError as e:
        fail(e)
    finally:
        db.close()


@app.command()
def create_action(
    name: str = typer.Argument(..., help="Action name"),
    url: str = typer.Argument(..., help="Webhook URL or runner base URL"),
    action_type: ActionType = typer.Option(ActionType.WEBHOOK, "--type", help="Action type"),
    event: list[str] = typer.Option([], "--event", "-e", help="Event to subscribe to (repeatable)"),
    script_file: Optional[typer.FileText] = typer.Option(None, help="Script source (code actions)"),
    language: Optional[str] = typer.Option(None, help="Script language (code actions)"),
    runner_secret: Optional[str] = typer.Option(None, envvar="EVENTACTIONS_RUNNER_SECRET", help="Runner token (code actions)"),
    entrypoint: str = typer.Option("file1", help="Script file name the runner executes"),
    org_id: int = typer.Option(1, help="Organization ID"),
):
    """Create an event action."""
    db = get_db()
    try:
        action = get_services(db).actions.create_action(
            org_id,
            {
                "name": name,
                "type": action_type,
                "url": url,
                "script": script_file.read() if script_file else None,
                "script_language": language,
                "runner_secret": runner_secret,
                "entrypoint": entrypoint,
                "registered_events": event,
            },
        )
        rprint("[green]Successfully created event action:[/green]")
        rprint(f"  ID: {action.id}")
        rprint(f"  Name: {action.name}")
        rprint(f"  Type: {action.type}")
        rprint(f"  URL: {action.url}")
        rprint(f"  Events: {', '.join(action.registered_events) or '-'}")
    except EventActionError as e:
        fail(e)
    finally:
        db.close()


@app.command()
def delete_action(
    action_id: int = typer.Argument(..., help="Action ID"),
    org_id: int = typer.Option(1, help="Organization ID"),
    force: bool = typer.Option(False, "--force", "-f", help="Do not ask for confirmation"),
):
    """Delete an event action."""
    if not force and not typer.confirm(f"Delete event action {action_id}?"):
        rprint("[yellow]Cancelled[/yellow]")
        raise typer.Exit(0)

    db = get_db()
    try:
        get_services(db).actions.delete_action(org_id, action_id)
        rprint(f"[green]Event action {action_id} deleted[/green]")
    except EventActionError as e:
        fail(e)
    finally:
        db.close()


@app.command()
def show_action(
    name: str = typer.Argument(..., help="Action name"),
    org_id: int = typer.Option(1, help="Organization ID"),
):
    """Show an event action."""
    db = get_db()
    try:
        action = get_services(db).actions.get_action_by_name(org_id, name)
        rprint(f"[cyan]{action.name}[/cyan] (id {action.id})")
        rprint(f"  Type: {action.type}")
        rprint(f"  URL: {action.url}")
        if action.type == ActionType.CODE.value:
            rprint(f"  Language: {action.script_language}")
            rprint(f"  Entrypoint: {action.entrypoint}")
        rprint(f"  Events: {', '.join(action.registered_events) or '-'}")
    except EventActionError as e:
        fail(e)
    finally:
        db.close()


@app.command()
def list_actions(
    event: str = typer.Argument(..., help="Event name"),
    org_id: int = typer.Option(1, help="Organization ID"),
):
    """List actions subscribed to an event."""
    db = get_db()
    try:
        actions = get_services(db).actions.get_actions_by_event(org_id, event)
        if not actions:
            rprint(f"[yellow]No actions subscribed to {event}[/yellow]")
            raise typer.Exit(0)

        table = Table(title=f"Actions subscribed to {event}")
        table.add_column("ID", style="dim")
        table.add_column("Name")
        table.add_column("Type")
        table.add_column("URL")
        for action in actions:
            table.add_row(str(action.id), action.name, action.type, action.url)
        console.print(table)
    finally:
        db.close()


@app.command()
def publish(
    event: str = typer.Argument(..., help="Event name"),
    payload: str = typer.Option("{}", help="Event payload as JSON"),
    org_id: int = typer.Option(1, help="Organization ID"),
):
    """Publish an event to every subscribed action."""
    data = parse_payload(payload)
    db = get_db()
    try:
        services = get_services(db)

        async def run():
            try:
                return await services.dispatcher.publish(org_id, event, data)
            finally:
                await services.aclose()

        summary = asyncio.run(run())

        table = Table(title=f"Published {event} to {summary.actions} action(s)")
        table.add_column("Action")
        table.add_column("State")
        table.add_column("Status")
        table.add_column("Error")
        for outcome in summary.outcomes:
            ok = outcome.state == ActionState.SUCCEEDED
            table.add_row(
                outcome.action_name,
                f"[{'green' if ok else 'red'}]{outcome.state.value}[/]",
                str(outcome.result.status_code) if outcome.result else "-",
                outcome.error.message if outcome.error else "",
            )
        console.print(table)
        rprint(f"  Workers: {summary.workers}  Duration: {summary.duration * 1000:.1f} ms")
    except EventActionError as e:
        fail(e)
    finally:
        db.close()


@app.command()
def execute(
    name: str = typer.Argument(..., help="Action name"),
    event: str = typer.Option("test", help="Event name sent to the action"),
    payload: str = typer.Option("{}", help="Event payload as JSON"),
    org_id: int = typer.Option(1, help="Organization ID"),
):
    """Run a single event action with a test payload."""
    data = parse_payload(payload)
    db = get_db()
    try:
        services = get_services(db)
        action = services.actions.get_action_by_name(org_id, name)

        async def run():
            try:
                return await services.dispatcher.run_event_action(action, event, data)
            finally:
                await services.aclose()

        result = asyncio.run(run())

        color = "green" if result.ok else "yellow"
        rprint(f"[{color}]Status: {result.status_code}[/{color}]")
        if result.body:
            rprint(result.body)
    except EventActionError as e:
        fail(e)
    finally:
        db.close()


@app.command()
def stats():
    """Show usage metrics."""
    from eventactions.metrics import UsageStats

    db = get_db()
    try:
        usage_stats = UsageStats()
        get_services(db, usage_stats=usage_stats)

        table = Table(title="Usage metrics")
        table.add_column("Metric")
        table.add_column("Value", justify="right")
        for key, value in sorted(usage_stats.get_usage_report().items()):
            table.add_row(key, str(value))
        console.print(table)
    finally:
        db.close()


if __name__ == "__main__":
    app()
