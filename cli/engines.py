"""Engine registry commands"""

import click
from rich.table import Table
from rich import box

from creative.config import get_settings
from creative.routing import RegistryError, load_registry
from .common import console, echo_json


def _load(path):
    try:
        return load_registry(path or get_settings().registry_path)
    except RegistryError as e:
        raise click.ClickException(str(e))


@click.group()
def engines_cmd():
    """Render engine registry"""
    pass


@engines_cmd.command("list")
@click.option("--registry", type=click.Path(exists=True, dir_okay=False), help="Registry JSON document")
@click.option("--available", "only_available", is_flag=True, help="Only available engines")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_engines(registry, only_available, as_json):
    """List engines with their capabilities"""

    reg = _load(registry)
    engines = reg.available() if only_available else reg.all()

    if as_json:
        echo_json({"version": reg.version, "engines": [e.to_dict() for e in engines]})
        return

    table = Table(title=f"Engines (registry {reg.version})", box=box.ROUNDED)
    table.add_column("Engine", style="cyan")
    table.add_column("Location")
    table.add_column("Max")
    table.add_column("Cost")
    table.add_column("Reliability", justify="right")
    table.add_column("Features")
    table.add_column("Available")

    for e in engines:
        caps = e.capabilities
        features = [
            name for name, flag in (
                ("filters", caps.supports_filters),
                ("audio", caps.supports_audio_tracks),
                ("speed", caps.supports_speed_change),
                ("overlays", caps.supports_overlays),
                ("transitions", caps.supports_transitions),
                ("ai", caps.supports_ai_generation),
            ) if flag
        ]
        table.add_row(
            e.engine_id,
            e.location.value,
            f"{caps.max_resolution.value} / {caps.max_duration_sec}s",
            e.cost_tier.value,
            f"{e.reliability:.2f}",
            ", ".join(features),
            "[green]✓[/green]" if e.available else "[dim]-[/dim]",
        )

    console.print(table)


@engines_cmd.command("check")
@click.argument("engine_id")
@click.option("--registry", type=click.Path(exists=True, dir_okay=False), help="Registry JSON document")
def check_engine(engine_id, registry):
    """Show details of one engine"""

    engine = _load(registry).get(engine_id)
    if engine is None:
        console.print(f"[red]Engine '{engine_id}' not found[/red]")
        raise SystemExit(1)

    caps = engine.capabilities
    console.print(f"\n[bold cyan]{engine.name}[/bold cyan] ({engine.engine_id})")
    console.print(f"Location: {engine.location.value}")
    console.print(f"Adapter: {engine.adapter.value}" + (f" @ {engine.endpoint}" if engine.endpoint else ""))
    console.print(f"Cost tier: {engine.cost_tier.value}")
    console.print(f"Reliability: {engine.reliability:.2f}")
    console.print(f"Cold start: {engine.cold_start_ms}ms")
    console.print(f"Max resolution: {caps.max_resolution.value}")
    console.print(f"Max duration: {caps.max_duration_sec}s")
    if not engine.available:
        console.print("\n[yellow]⚠ This engine is marked unavailable[/yellow]")
