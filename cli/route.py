"""Route command - execute a render plan through the engine registry"""

import asyncio

import click
from rich.panel import Panel
from rich.table import Table
from rich import box

from creative.config import get_settings
from creative.engines import build_engine_pool
from creative.models.engine import CostTier, EngineLocation
from creative.models.route import RouteConstraints, RouteEvent, RouteEventType
from creative.routing import ExecutionRouter, RegistryError, RouteRequest, load_registry, route_batch
from creative.validation import InputValidationError, parse_render_plan
from .common import console, echo_json, load_json, report_validation_error, write_json


def build_router(mock: bool, registry_path: str = None) -> ExecutionRouter:
    """Router wired from settings; --mock forces mock adapters"""
    settings = get_settings()
    if mock:
        settings = settings.model_copy(update={"engine_mode": "mock", "poll_interval_sec": 0.0})
    try:
        registry = load_registry(registry_path or settings.registry_path)
    except RegistryError as e:
        raise click.ClickException(str(e))
    engines = build_engine_pool(registry, settings)
    return ExecutionRouter.from_settings(registry, engines, settings)


def build_constraints(max_cost, location, exclude, prefer, timeout) -> RouteConstraints:
    return RouteConstraints(
        max_cost_tier=CostTier(max_cost) if max_cost else None,
        location=EngineLocation(location) if location else None,
        excluded_engines=frozenset(exclude),
        preferred_engine_id=prefer,
        timeout_sec=timeout,
    )


def print_event(event: RouteEvent) -> None:
    if event.event_type == RouteEventType.STATE_CHANGE:
        console.print(f"  [dim]{event.data['from_state']} → {event.data['to_state']}[/dim]")
    elif event.event_type == RouteEventType.ENGINE_SELECTED:
        console.print(f"  Engine: [cyan]{event.data['engine_id']}[/cyan] (score {event.data['score']:.3f})")
    elif event.event_type == RouteEventType.EXECUTION_FAILED:
        console.print(f"  [red]✗ {event.data['engine_id']}: {event.data['error']}[/red]")
    elif event.event_type == RouteEventType.DEGRADATION_APPLIED:
        console.print(f"  [yellow]↓ Level {event.data['level']}: {event.data['reason']}[/yellow]")


def print_route_result(result) -> None:
    if result.status == "completed":
        console.print(Panel.fit(
            f"[bold green]✓ Completed[/bold green] on [cyan]{result.engine_id}[/cyan]\n"
            f"Output: {result.output_ref}\n"
            f"Degradation level: {int(result.degradation_level)}\n"
            f"Time: {result.processing_time_ms}ms",
            border_style="green",
        ))
        for warning in result.warnings:
            console.print(f"[yellow]⚠ {warning}[/yellow]")
        return

    console.print(Panel.fit(
        f"[bold yellow]Partial success[/bold yellow]\n{result.human_message}",
        border_style="yellow",
    ))
    if result.ffmpeg_command:
        console.print("\n[bold]Manual command:[/bold]")
        console.print(result.ffmpeg_command, soft_wrap=True, markup=False)

    table = Table(title="Job History", box=box.ROUNDED)
    table.add_column("From")
    table.add_column("To", style="cyan")
    table.add_column("Level", justify="right")
    table.add_column("Engine")
    table.add_column("Error")
    for t in result.job.transitions:
        table.add_row(
            t.from_state.value,
            t.to_state.value,
            str(int(t.degradation_level)),
            t.engine_id or "",
            t.error_code or "",
        )
    console.print(table)


@click.command()
@click.argument("plan_files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--mock", is_flag=True, help="Use mock engines (no ffmpeg or network)")
@click.option("--registry", type=click.Path(exists=True, dir_okay=False), help="Registry JSON document")
@click.option("--max-cost", type=click.Choice(["free", "low", "medium", "high"]), help="Cost ceiling")
@click.option("--location", type=click.Choice(["local", "server", "cloud"]), help="Restrict engine location")
@click.option("--exclude", "-x", multiple=True, help="Engine id to exclude (repeatable)")
@click.option("--prefer", help="Preferred engine id")
@click.option("--timeout", type=float, help="Per-attempt deadline in seconds")
@click.option("--concurrency", "-c", type=click.IntRange(min=1), help="Plans routed at once (default from settings)")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write the result JSON here")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def route_cmd(plan_files, mock, registry, max_cost, location, exclude, prefer, timeout,
              concurrency, output, as_json):
    """
    Route compiled plans to the best engine.

    Always ends in a completed render or a partial-success bundle per plan.
    Several plans are routed as one batch under the concurrency limit.

    Examples:

        creative-scale route plan.json --mock
        creative-scale route plan.json --max-cost low --timeout 120
        creative-scale route plan_a.json plan_b.json --mock -c 2
    """
    plans = []
    for plan_file in plan_files:
        try:
            plans.append(parse_render_plan(load_json(plan_file)))
        except InputValidationError as e:
            console.print(f"[red]{plan_file}[/red]")
            report_validation_error(e)
            raise SystemExit(1)

    router = build_router(mock, registry)
    constraints = build_constraints(max_cost, location, exclude, prefer, timeout)

    if len(plans) > 1:
        route_many(router, plans, constraints, concurrency, output, as_json)
        return

    plan = plans[0]
    on_event = None if as_json else print_event

    result = asyncio.run(router.route(plan, constraints, on_event=on_event))

    if output:
        write_json(output, result.to_dict())
    if as_json:
        echo_json(result.to_dict())
        return
    print_route_result(result)


def route_many(router, plans, constraints, concurrency, output, as_json) -> None:
    limit = concurrency or get_settings().batch_concurrency
    requests = [RouteRequest(plan, constraints) for plan in plans]
    results = asyncio.run(route_batch(router, requests, concurrency=limit))
    data = [r.to_dict() for r in results]

    if output:
        write_json(output, data)
    if as_json:
        echo_json(data)
        return

    table = Table(title=f"Batch ({len(plans)} plans, {limit} at once)", box=box.ROUNDED)
    table.add_column("Plan", style="cyan", no_wrap=True)
    table.add_column("Status", no_wrap=True)
    table.add_column("Engine")
    table.add_column("Detail")
    for plan, result in zip(plans, results):
        if result.status == "completed":
            table.add_row(plan.plan_id, "[green]completed[/green]", result.engine_id, result.output_ref)
        else:
            table.add_row(plan.plan_id, "[yellow]partial_success[/yellow]", "", result.reason)
    console.print(table)
