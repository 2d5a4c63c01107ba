"""Typer CLI entrypoint for the funding harvester."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from typing import Any, Optional, Sequence

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from .config import ConfigRepository, ScheduleConfig, ScheduleType, SourceConfig
from .logging_conf import configure_logging
from .models import CanonicalOpportunity
from .orchestrator import Orchestrator
from .scheduler import APSchedulerAdapter
from .store import OpportunityStore, SQLiteOpportunityStore
from .trigger import trigger_all, trigger_source

app = typer.Typer(
    help="Funding opportunity harvester command line tools",
    no_args_is_help=True,
    rich_markup_mode=None,
)
source_app = typer.Typer(
    name="source",
    help="Inspect and run configured sources",
    no_args_is_help=True,
    rich_markup_mode=None,
)
opportunities_app = typer.Typer(
    name="opportunities",
    help="Browse harvested opportunities",
    no_args_is_help=True,
    rich_markup_mode=None,
)

console = Console()


@dataclass
class AppState:
    repository: ConfigRepository
    store: OpportunityStore
    orchestrator: Orchestrator


def build_state(verbose: bool) -> AppState:
    repository = ConfigRepository()
    configure_logging(verbose=verbose, log_dir=repository.locator.logs_dir)
    store = SQLiteOpportunityStore(repository.store_path())
    orchestrator = Orchestrator(config_repository=repository, store=store)
    return AppState(repository=repository, store=store, orchestrator=orchestrator)


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if state is None:
        state = build_state(verbose=False)
        ctx.obj = state
    return state


def _format_schedule(schedule: ScheduleConfig) -> str:
    if schedule.type is ScheduleType.CRON:
        return f"cron ({schedule.value})"
    return f"interval ({schedule.value})"


def _render_sources_table(sources: Sequence[SourceConfig]) -> Table:
    table = Table(title=f"Sources · {len(sources)} configured", box=box.SIMPLE_HEAD)
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Locale", style="magenta")
    table.add_column("Strategies", style="yellow")
    table.add_column("URLs", style="green", overflow="fold")
    for source in sources:
        table.add_row(
            source.name,
            source.locale,
            ", ".join(strategy.value for strategy in source.configured_strategies()),
            "\n".join(source.urls),
        )
    return table


def _render_result_table(body: dict[str, Any]) -> Table:
    table = Table(title=f"{body.get('source', '-')} run result", box=box.SIMPLE_HEAD)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")
    if not body.get("success"):
        table.add_row("error", str(body.get("error", "-")))
    for key in ("total", "new", "updated", "skipped", "errors", "execution_time_ms"):
        if key in body:
            table.add_row(key, str(body[key]))
    return table


def _render_report_table(body: dict[str, Any]) -> Table:
    table = Table(title="Harvest report", box=box.SIMPLE_HEAD)
    table.add_column("Source", style="cyan", no_wrap=True)
    table.add_column("Status")
    for key in ("Total", "New", "Updated", "Skipped", "Errors"):
        table.add_column(key, justify="right")
    table.add_column("Time (ms)", justify="right")
    for entry in body.get("scrapers", []):
        status = "[green]ok[/green]" if entry.get("success") else f"[red]failed[/red] {entry.get('error', '')}"
        table.add_row(
            entry.get("source", "-"),
            status,
            *(str(entry.get(key, "-")) for key in ("total", "new", "updated", "skipped", "errors")),
            str(entry.get("execution_time_ms", "-")),
        )
    totals = body.get("totals", {})
    table.add_section()
    table.add_row(
        "TOTAL",
        "",
        str(totals.get("total", 0)),
        str(totals.get("new", 0)),
        str(totals.get("updated", 0)),
        "",
        "",
        "",
    )
    return table


def _render_opportunities_table(rows: Sequence[CanonicalOpportunity]) -> Table:
    table = Table(title=f"Opportunities · {len(rows)} shown", box=box.SIMPLE_HEAD)
    table.add_column("Site", style="cyan", no_wrap=True)
    table.add_column("Deadline", style="yellow", no_wrap=True)
    table.add_column("Name", overflow="fold")
    table.add_column("URL", style="green", overflow="fold")
    for row in rows:
        table.add_row(row.site, row.deadline or "-", row.name, row.url)
    return table


def _echo_json(payload: dict[str, Any]) -> None:
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))


app.add_typer(source_app, name="source")
app.add_typer(opportunities_app, name="opportunities")


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging", is_flag=True),
) -> None:
    state = build_state(verbose)
    ctx.obj = state
    ctx.call_on_close(state.store.close)


@source_app.command("list", help="Show configured sources.")
def source_list(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    sources = state.repository.list_sources()
    if not sources:
        console.print("No sources configured.", style="yellow")
        raise typer.Exit(code=0)
    console.print(_render_sources_table(sources))


@source_app.command("run", help="Harvest one source now.")
def source_run(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Source name."),
    as_json: bool = typer.Option(False, "--json", help="Print the trigger response body.", is_flag=True),
) -> None:
    state = _get_state(ctx)
    response = trigger_source(state.orchestrator, name)
    if as_json:
        _echo_json(response.body)
    elif response.status_code == 404:
        console.print(response.body["error"], style="red")
    else:
        console.print(_render_result_table(response.body))
    if not response.ok:
        raise typer.Exit(code=1)


@source_app.command("run-all", help="Harvest every enabled source concurrently.")
def source_run_all(
    ctx: typer.Context,
    as_json: bool = typer.Option(False, "--json", help="Print the aggregate report body.", is_flag=True),
) -> None:
    state = _get_state(ctx)
    response = trigger_all(state.orchestrator)
    if as_json:
        _echo_json(response.body)
    elif not response.ok:
        console.print(f"Harvest failed: {response.body.get('error')}", style="red")
    else:
        console.print(_render_report_table(response.body))
    failed = [entry for entry in response.body.get("scrapers", []) if not entry.get("success")]
    if not response.ok or failed:
        raise typer.Exit(code=1)


@opportunities_app.command("list", help="List stored opportunities, soonest deadline first.")
def opportunities_list(
    ctx: typer.Context,
    site: Optional[str] = typer.Option(None, "--site", help="Only this source."),
    query: Optional[str] = typer.Option(None, "--query", help="Match name, description or category."),
    limit: int = typer.Option(50, "--limit", min=1, help="Maximum rows."),
) -> None:
    state = _get_state(ctx)
    rows = state.store.search(site=site, query=query, limit=limit)
    if not rows:
        console.print("No opportunities found.", style="yellow")
        return
    console.print(_render_opportunities_table(rows))


@app.command("schedule", help="Run all sources periodically until interrupted.")
def schedule(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    settings = state.repository.load_global_config().schedule
    adapter = APSchedulerAdapter()
    adapter.schedule_run_all(state.orchestrator.run_all, settings)
    adapter.start()
    console.print(f"Scheduler running: {_format_schedule(settings)}. Press Ctrl+C to stop.")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        console.print("Stopping scheduler.", style="dim")
    finally:
        adapter.shutdown()


def cli() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    cli()
