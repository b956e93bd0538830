"""Decide command - pick remediation strategies for an analyzed ad"""

import click
from rich.panel import Panel
from rich.table import Table
from rich import box

from creative.config import get_settings
from creative.decision import decide, goal_from_blueprint
from creative.models.strategy import DecisionFailure
from creative.validation import (
    InputValidationError,
    parse_analyzed_video,
    parse_blueprint,
    parse_decision_request,
)
from .common import console, echo_json, load_json, report_validation_error


def build_request(goal, risk, forbid, history, count):
    """Assemble and validate decision inputs from CLI options"""
    settings = get_settings()
    data = {
        "goal": goal or settings.default_goal,
        "risk_tolerance": risk or settings.default_risk_tolerance,
        "forbidden_actions": list(forbid),
        "max_strategies": count or settings.max_strategies,
    }
    if history:
        data["history"] = load_json(history)
    return parse_decision_request(data)


def print_decision(result) -> None:
    if isinstance(result, DecisionFailure):
        console.print(Panel.fit(
            f"[bold yellow]{result.mode.value}[/bold yellow]\n"
            f"{result.reason}\n\n"
            f"[dim]Suggestion:[/dim] {result.fallback_suggestion}",
            border_style="yellow",
        ))
        return

    problems = Table(title="Detected Problems", box=box.ROUNDED)
    problems.add_column("Problem", style="cyan")
    problems.add_column("Severity", justify="right")
    problems.add_column("Detail")
    for p in result.problems:
        problems.add_row(p.problem_type.value, f"{p.severity:.2f}", p.detail)
    console.print(problems)

    table = Table(title="Strategies", box=box.ROUNDED)
    table.add_column("#", justify="right")
    table.add_column("Framework", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Risk", justify="right")
    table.add_column("Solves")
    table.add_column("Confidence")
    for i, bundle in enumerate(result.bundles):
        s = bundle.strategy
        table.add_row(
            str(i),
            s.framework.value,
            f"{s.final_score:.3f}",
            f"{s.risk:.2f}",
            ", ".join(p.value for p in s.candidate.solves),
            bundle.explanation.confidence.value,
        )
    console.print(table)

    top = result.top.explanation
    console.print(f"\n[bold]Why:[/bold] {top.why_this_strategy}")
    console.print(f"[bold]Expected:[/bold] {top.expected_outcome}")
    for alt in top.why_not_others:
        console.print(f"  [dim]• {alt.framework.value}: {alt.reason}[/dim]")


@click.command()
@click.argument("analysis", type=click.Path(exists=True, dir_okay=False))
@click.option("--blueprint", "-b", type=click.Path(exists=True, dir_okay=False), help="Blueprint JSON")
@click.option("--goal", "-g", type=click.Choice(["retention", "ctr", "conversions"]), help="Optimization goal")
@click.option("--risk", "-r", type=click.Choice(["low", "medium", "high"]), help="Risk tolerance")
@click.option("--forbid", "-f", multiple=True,
              type=click.Choice(["compress", "remove", "reorder", "emphasize", "split", "merge", "replace"]),
              help="Disallow an action kind (repeatable)")
@click.option("--history", type=click.Path(exists=True, dir_okay=False),
              help="JSON list of past outcomes, most recent first")
@click.option("--count", "-n", type=int, help="Maximum strategies to return")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def decide_cmd(analysis, blueprint, goal, risk, forbid, history, count, as_json):
    """
    Decide which strategies to apply to an analyzed ad.

    Examples:

        creative-scale decide analysis.json --goal ctr --risk medium
    """
    try:
        video = parse_analyzed_video(load_json(analysis))
        bp = parse_blueprint(load_json(blueprint)) if blueprint else None
        request = build_request(goal, risk, forbid, history, count)
    except InputValidationError as e:
        report_validation_error(e)
        raise SystemExit(1)

    if not goal and bp is not None:
        request.goal = goal_from_blueprint(bp) or request.goal

    result = decide(video, request, bp)

    if as_json:
        echo_json(result.to_dict())
        return
    print_decision(result)
