"""Compile command - turn a chosen strategy or blueprint variation into a render plan"""

import click
from rich.table import Table
from rich import box

from creative.compiler import VariationNotFoundError, compile_all, compile_plan, compile_variation
from creative.decision import decide, goal_from_blueprint
from creative.models.strategy import DecisionFailure
from creative.validation import InputValidationError, parse_analyzed_video, parse_blueprint
from .common import console, echo_json, load_json, report_validation_error, write_json
from .decide import build_request


def print_plan(plan) -> None:
    status_style = "green" if plan.is_compilable else "red"
    console.print(
        f"Plan [cyan]{plan.plan_id}[/cyan]: "
        f"[{status_style}]{plan.status.value}[/{status_style}]"
    )
    if plan.variation_id:
        console.print(f"[dim]Variation idea: {plan.variation_id}[/dim]")
    if plan.uncompilable_reason:
        console.print(f"[red]Reason:[/red] {plan.uncompilable_reason}")

    table = Table(title="Timeline", box=box.ROUNDED)
    table.add_column("Segment", style="cyan")
    table.add_column("Source")
    table.add_column("Trim (ms)")
    table.add_column("Speed", justify="right")
    table.add_column("Placed (ms)")
    for s in plan.timeline:
        table.add_row(
            s.segment_id,
            s.source_segment_id,
            f"{s.trim_start_ms}-{s.trim_end_ms}",
            f"{s.speed:g}",
            f"{s.timeline_start_ms}-{s.timeline_end_ms}",
        )
    console.print(table)

    v = plan.validation
    console.print(
        f"Duration: {v.total_duration_ms}ms  Segments: {v.segment_count}  "
        f"Audio tracks: {v.audio_track_count}"
    )
    for warning in v.warnings:
        console.print(f"[yellow]⚠ {warning}[/yellow]")


def emit_plans(plans, output, as_json) -> None:
    data = [p.to_dict() for p in plans]
    if output:
        write_json(output, data)
    if as_json:
        echo_json(data)
        return
    for plan in plans:
        print_plan(plan)
    compilable = sum(1 for p in plans if p.is_compilable)
    console.print(f"{compilable}/{len(plans)} variation plans compilable")
    if output:
        console.print(f"[green]✓[/green] Plans written to {output}")


@click.command()
@click.argument("analysis", type=click.Path(exists=True, dir_okay=False))
@click.option("--blueprint", "-b", type=click.Path(exists=True, dir_okay=False), help="Blueprint JSON")
@click.option("--goal", "-g", type=click.Choice(["retention", "ctr", "conversions"]), help="Optimization goal")
@click.option("--risk", "-r", type=click.Choice(["low", "medium", "high"]), help="Risk tolerance")
@click.option("--strategy-index", "-s", default=0, show_default=True, help="Which selected strategy to compile")
@click.option("--variation", "-V", type=int, help="Compile this blueprint variation idea instead of a strategy")
@click.option("--all-variations", is_flag=True, help="Compile every blueprint variation idea")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write the plan JSON here")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def compile_cmd(analysis, blueprint, goal, risk, strategy_index, variation, all_variations, output, as_json):
    """
    Decide, then compile the chosen strategy into a render plan.

    With --variation or --all-variations the decision step is skipped and
    the blueprint's variation ideas are compiled directly.

    Examples:

        creative-scale compile analysis.json -g ctr -o plan.json
        creative-scale compile analysis.json -b blueprint.json --variation 0
        creative-scale compile analysis.json -b blueprint.json --all-variations --json
    """
    try:
        video = parse_analyzed_video(load_json(analysis))
        bp = parse_blueprint(load_json(blueprint)) if blueprint else None
        request = build_request(goal, risk, (), None, None)
    except InputValidationError as e:
        report_validation_error(e)
        raise SystemExit(1)

    if variation is not None or all_variations:
        if bp is None:
            raise click.BadParameter("compiling variations needs a blueprint", param_hint="--blueprint")
        if all_variations:
            emit_plans(compile_all(video, bp), output, as_json)
            return
        try:
            plan = compile_variation(video, bp, variation)
        except VariationNotFoundError as e:
            raise click.BadParameter(str(e), param_hint="--variation")
    else:
        if not goal and bp is not None:
            request.goal = goal_from_blueprint(bp) or request.goal

        decision = decide(video, request, bp)
        if isinstance(decision, DecisionFailure):
            console.print(f"[yellow]{decision.mode.value}:[/yellow] {decision.reason}")
            console.print(f"[dim]{decision.fallback_suggestion}[/dim]")
            return

        if strategy_index >= len(decision.bundles):
            raise click.BadParameter(
                f"only {len(decision.bundles)} strategies selected", param_hint="--strategy-index"
            )

        plan = compile_plan(video, decision.bundles[strategy_index].strategy.candidate)

    if output:
        write_json(output, plan.to_dict())
    if as_json:
        echo_json(plan.to_dict())
        return
    print_plan(plan)
    if output:
        console.print(f"[green]✓[/green] Plan written to {output}")
