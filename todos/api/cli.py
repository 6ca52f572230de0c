from todos.domain.errors import TaskNotFoundError, TaskValidationError, DomainError
from todos.domain.task import Task
from todos.services.task_service import TaskService
from todos.api.routes import build_service
from todos.api.validation import validate_task_id
from todos.api.logs import configure_logging
from todos.api.colors import TaskColor
from todos.config import Settings, build_store
from typer import Argument, BadParameter, Option, Typer
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from typing import Awaitable, Callable, Optional, TypeVar
import asyncio


### COMMENTS
# ==========================================================
# CLI (Typer + Rich): operator interface for the ToDo API.
# ==========================================================
# Role:
# - `serve` runs the HTTP API with uvicorn.
# - The other commands map onto TaskService methods (add/list/show/done/undo/rename/rm)
#   against the configured store, and render tables/panels.
# - Catches DomainError and prints a friendly message.
#
# Rules:
# - Zero business logic, delegate to TaskService.
# - Settings are resolved once in the callback (options > environment > defaults).
# - Every command opens the store, runs one operation and closes it.

T = TypeVar("T")

app = Typer(help="ToDo REST API and operator CLI")
console = Console()

settings: Settings | None = None  # set in the callback


@app.callback()
def main(
    store: Optional[str] = Option(None, "--store", "-s", envvar="TODOS_STORE", help="mongo | sql | memory"),
    mongo_uri: Optional[str] = Option(None, "--mongo-uri", envvar="MONGO_URI"),
    db_name: Optional[str] = Option(None, "--db-name", envvar="DB_NAME"),
    collection_name: Optional[str] = Option(None, "--collection", envvar="COLLECTION_NAME"),
    database_url: Optional[str] = Option(None, "--database-url", envvar="DATABASE_URL", help="SQLAlchemy URL for --store sql"),
    log_level: Optional[str] = Option(None, "--log-level", envvar="LOG_LEVEL"),
) -> None:
    """Resolves settings at CLI start-up."""
    global settings
    try:
        settings = Settings.from_env().with_overrides(
            store=store,
            mongo_uri=mongo_uri,
            db_name=db_name,
            collection_name=collection_name,
            database_url=database_url,
            log_level=log_level,
        )
    except ValueError as e:
        raise BadParameter(str(e))
    configure_logging(settings.log_level)


def run(operation: Callable[[TaskService], Awaitable[T]]) -> T:
    """Opens the configured store, runs one service operation, closes the store."""
    async def _run() -> T:
        store = build_store(settings)
        await store.connect()
        try:
            return await operation(build_service(store))
        finally:
            await store.close()

    return asyncio.run(_run())


def color_status(task: Task) -> str:
    """Returns the completion flag as Rich markup."""
    if task.completed:
        return f"{TaskColor.GREEN}done{TaskColor.RESET}"
    return f"{TaskColor.RED}open{TaskColor.RESET}"


def render_list(items: list[Task]) -> None:
    """Renders a Rich table with columns ID, Title, Status."""

    table = Table(show_lines=True, header_style="bold")
    table.add_column("ID", no_wrap=True, style="cyan", justify="right")
    table.add_column("Title")
    table.add_column("Status", no_wrap=True)

    for t in items:
        table.add_row(str(t.id), t.title, color_status(t))

    console.print(table)
    console.print(f"[dim]Total: {len(items)}[/dim]")


def render_task(task: Task, title: str, border_style: str = "green") -> None:
    console.print(Panel.fit(
        f"[cyan]ID:[/cyan] {task.id}\n"
        f"[dim]Title:[/dim] {task.title}\n"
        f"Status: {color_status(task)}",
        title=title,
        border_style=border_style,
    ))


def render_error(e: DomainError) -> None:
    if isinstance(e, TaskValidationError):
        console.print(Panel.fit(f"❌ {e}", title="Validation error", border_style="red"))
    elif isinstance(e, TaskNotFoundError):
        console.print(Panel.fit(
            f"❌ {e}\n[dim]Use 'todos list' to find a valid ID[/]",
            title="Not found",
            border_style="red",
        ))
    else:
        console.print(Panel.fit(f"❌ {e}", title="Store error", border_style="red"))


@app.command("serve")
def serve(
    host: Optional[str] = Option(None, "--host", envvar="HOST"),
    port: Optional[int] = Option(None, "--port", "-p", envvar="PORT"),
    connection: Optional[str] = Option(None, "--connection", envvar="TODOS_CONNECTION", help="process | request"),
) -> None:
    """Runs the HTTP API."""
    import uvicorn
    from todos.api.app import create_app

    serve_settings = settings.with_overrides(host=host, port=port, connection=connection)
    console.print(f"[cyan]ToDo API[/cyan] on http://{serve_settings.host}:{serve_settings.port}/tasks "
                  f"[dim](store: {serve_settings.store}, connection: {serve_settings.connection})[/dim]")
    uvicorn.run(
        create_app(serve_settings),
        host=serve_settings.host,
        port=serve_settings.port,
        log_level=serve_settings.log_level.lower(),
    )


@app.command("add")
def add(title: str, done: bool = Option(False, "--done", help="Create the task already completed")) -> None:
    """
    Adds a new task.

    Flow:
    - Call: service.create_task(title, completed=done)
    - Success: "✅ Task added" panel with the assigned ID.
    - Failure: DomainError -> red panel.
    """
    try:
        task = run(lambda service: service.create_task(title, completed=done))
        render_task(task, "✅ Task added")
    except DomainError as e:
        render_error(e)


@app.command("list")
def list_cmd() -> None:
    """Lists every task."""
    try:
        render_list(run(lambda service: service.list_tasks()))
    except DomainError as e:
        render_error(e)


@app.command("show")
def show(task_id: str) -> None:
    """Shows a single task."""
    try:
        tid = validate_task_id(task_id)
        render_task(run(lambda service: service.get_task(tid)), "Task details", border_style="cyan")
    except DomainError as e:
        render_error(e)


@app.command("done")
def done(task_id: str) -> None:
    """Marks a task as completed."""
    try:
        tid = validate_task_id(task_id)
        render_task(run(lambda service: service.update_task(tid, {"completed": True})), "✅ Completed")
    except DomainError as e:
        render_error(e)


@app.command("undo")
def undo(task_id: str) -> None:
    """Marks a task as not completed."""
    try:
        tid = validate_task_id(task_id)
        render_task(run(lambda service: service.update_task(tid, {"completed": False})), "Reopened", border_style="yellow")
    except DomainError as e:
        render_error(e)


@app.command("rename")
def rename(task_id: str, title: str = Argument(..., help="New title")) -> None:
    """Changes the title of a task."""
    try:
        tid = validate_task_id(task_id)
        render_task(run(lambda service: service.update_task(tid, {"title": title})), "✏️ Renamed")
    except DomainError as e:
        render_error(e)


@app.command("rm")
def rm(task_id: str) -> None:
    """
    Removes a task.

    Flow:
    - service.remove_task(task_id)
    - Success: "🟡 Removed" panel.
    - Failure: TaskNotFoundError -> red panel with a hint.
    """
    try:
        tid = validate_task_id(task_id)
        run(lambda service: service.remove_task(tid))
        console.print(Panel.fit(
            f"🟡 Task removed\nID: {tid}",
            title="Removed",
            border_style="yellow",
        ))
    except DomainError as e:
        render_error(e)


if __name__ == "__main__":
    app()
