"""Command Line Interface for NurseCare.

This module provides a Typer CLI for running the API server, seeding demo
data, inspecting the todo dashboard buckets and dispatching reminders.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from nursecare import __version__
from nursecare.adapters.storage import DuckDBAdapter
from nursecare.domain.models import Patient, Todo
from nursecare.domain.ports import NurseCareError, StoragePort
from nursecare.domain.services import main_diagnosis, parse_timestamp
from nursecare.infrastructure.config_manager import get_database_config
from nursecare.infrastructure.settings import settings
from nursecare.seed import seed_storage
from nursecare.services import NotificationService, PatientService, TodoService

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="nursecare",
    help="NurseCare: patient records, care tasks and reminders",
    add_completion=False
)
console = Console()


class Bucket(str, Enum):
    overdue = "overdue"
    today = "today"
    upcoming = "upcoming"


def create_storage_adapter_cli() -> StoragePort:
    """Create and initialize the configured storage adapter."""
    try:
        storage = DuckDBAdapter(db_config=get_database_config())
    except Exception as e:
        console.print(f"[red]✗[/red] Failed to create storage adapter: {str(e)}")
        raise typer.Exit(code=1)

    result = storage.initialize_schema()
    if result.is_failure():
        console.print(f"[red]✗[/red] Failed to initialize storage: {result.error}")
        raise typer.Exit(code=1)
    return storage


def _parse_now(now: Optional[str]) -> Optional[datetime]:
    try:
        return parse_timestamp(now, field="now")
    except NurseCareError as e:
        console.print(f"[red]✗[/red] {str(e)}")
        raise typer.Exit(code=1)


def _patient_label(patient: Patient) -> str:
    """Patient name with the main diagnosis, as on the dashboard."""
    main = main_diagnosis(patient.diagnoses)
    return f"{patient.full_name} ({main.text})" if main else patient.full_name


def _todo_table(title: str, todos: list[Todo], patient_names: dict[str, str]) -> Table:
    table = Table(title=title)
    table.add_column("Due", style="cyan", no_wrap=True)
    table.add_column("Title")
    table.add_column("Category")
    table.add_column("Priority")
    table.add_column("Patient")
    table.add_column("Assignee", style="dim")

    for todo in todos:
        table.add_row(
            f"{todo.due_date:%Y-%m-%d %H:%M}",
            todo.title,
            todo.category.value,
            todo.priority.value,
            patient_names.get(todo.patient_id, todo.patient_id),
            todo.assigned_to_id or "-",
        )
    return table


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (defaults to NC_API_HOST)"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port (defaults to NC_API_PORT)"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the REST API server."""
    import uvicorn

    uvicorn.run(
        "nursecare.api.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
        log_level=settings.log_level.lower()
    )


@app.command()
def seed(
    patients: int = typer.Option(20, "--patients", "-n", min=0, help="Number of patients"),
    todos: int = typer.Option(50, "--todos", "-t", min=0, help="Number of todos"),
    random_seed: Optional[int] = typer.Option(None, "--seed", "-s", help="Random seed for reproducible data"),
    clear: bool = typer.Option(False, "--clear", help="Delete existing patients and todos first"),
) -> None:
    """Fill the database with German demo patients and care tasks.

    Examples:
        nursecare seed
        nursecare seed --patients 5 --todos 10 --seed 42 --clear
    """
    storage = create_storage_adapter_cli()
    try:
        with console.status("[bold green]Seeding demo data..."):
            created_patients, created_todos = seed_storage(
                storage,
                patient_count=patients,
                todo_count=todos,
                seed=random_seed,
                clear=clear,
            )
    except NurseCareError as e:
        console.print(f"[red]✗[/red] Seeding failed: {str(e)}")
        raise typer.Exit(code=1)
    finally:
        storage.close()

    console.print(f"[green]✓[/green] Created {len(created_patients)} patients")
    console.print(f"[green]✓[/green] Created {len(created_todos)} todos")


@app.command("todos")
def list_todos(
    bucket: Bucket = typer.Argument(Bucket.today, help="Which bucket to show"),
    hours: Optional[float] = typer.Option(None, "--hours", help="Upcoming window in hours (defaults to NC_UPCOMING_HOURS)"),
    now: Optional[str] = typer.Option(None, "--now", help="Evaluate at this ISO timestamp instead of the current time"),
) -> None:
    """Show overdue, due-today or upcoming todos as a table.

    Examples:
        nursecare todos overdue
        nursecare todos upcoming --hours 8
        nursecare todos today --now 2024-03-01T09:00:00
    """
    at = _parse_now(now)
    storage = create_storage_adapter_cli()
    try:
        service = TodoService(storage)
        if bucket == Bucket.overdue:
            todos = service.overdue(now=at)
        elif bucket == Bucket.today:
            todos = service.today(now=at)
        else:
            todos = service.upcoming(hours if hours is not None else settings.upcoming_hours, now=at)
        patient_names = {p.id: _patient_label(p) for p in PatientService(storage).find_all()}
    except NurseCareError as e:
        console.print(f"[red]✗[/red] {str(e)}")
        raise typer.Exit(code=1)
    finally:
        storage.close()

    if not todos:
        console.print(f"[dim]No {bucket.value} todos[/dim]")
        return
    console.print(_todo_table(f"{bucket.value.capitalize()} todos ({len(todos)})", todos, patient_names))


@app.command()
def notify(
    hours: Optional[float] = typer.Option(None, "--hours", help="Upcoming window in hours (defaults to NC_UPCOMING_HOURS)"),
    now: Optional[str] = typer.Option(None, "--now", help="Evaluate at this ISO timestamp instead of the current time"),
) -> None:
    """Create reminder notifications for upcoming todos (one pass).

    Intended to be run periodically by an external scheduler such as cron.
    """
    at = _parse_now(now)
    storage = create_storage_adapter_cli()
    try:
        created = NotificationService(storage).dispatch_reminders(
            hours if hours is not None else settings.upcoming_hours,
            now=at
        )
    except NurseCareError as e:
        console.print(f"[red]✗[/red] Dispatch failed: {str(e)}")
        raise typer.Exit(code=1)
    finally:
        storage.close()

    console.print(f"[green]✓[/green] Dispatched {len(created)} reminder(s)")
    for notification in created:
        console.print(f"  [dim]{notification.user_id}:[/dim] {notification.message}")


@app.command()
def stats() -> None:
    """Show visit counts per patient."""
    storage = create_storage_adapter_cli()
    try:
        statistics = PatientService(storage).statistics()
    except NurseCareError as e:
        console.print(f"[red]✗[/red] {str(e)}")
        raise typer.Exit(code=1)
    finally:
        storage.close()

    table = Table(title="Visit statistics")
    table.add_column("Patient")
    table.add_column("Visits", justify="right", style="cyan")
    table.add_column("Diagnoses", style="dim")
    for stat in statistics:
        table.add_row(stat.name, str(stat.visit_count), ", ".join(stat.diagnoses))
    console.print(table)


@app.command()
def info() -> None:
    """Display configuration."""
    console.print("[bold blue]System Information[/bold blue]\n")

    info_table = Table(show_header=False, box=None, padding=(0, 2))
    info_table.add_row("Application:", settings.app_name)
    info_table.add_row("Database Type:", settings.db_config.db_type)
    info_table.add_row("Database Path:", settings.get_db_path())
    info_table.add_row("Upcoming Window:", f"{settings.upcoming_hours}h")
    info_table.add_row("API:", f"{settings.api_host}:{settings.api_port}")
    info_table.add_row("Log Level:", settings.log_level)

    console.print(info_table)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"NurseCare v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version information"
    )
) -> None:
    """NurseCare: patient records, care tasks and reminders."""


if __name__ == "__main__":
    app()
