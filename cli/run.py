"""Run command - full decide, compile and route pipeline"""

import asyncio

import click

from creative.config import get_settings
from creative.pipeline import run_pipeline
from creative.validation import InputValidationError, parse_analyzed_video, parse_blueprint
from .common import console, echo_json, load_json, report_validation_error, write_json
from .compile import print_plan
from .decide import build_request, print_decision
from .route import build_constraints, build_router, print_event, print_route_result


@click.command()
@click.argument("analysis", type=click.Path(exists=True, dir_okay=False))
@click.option("--blueprint", "-b", type=click.Path(exists=True, dir_okay=False), help="Blueprint JSON")
@click.option("--goal", "-g", type=click.Choice(["retention", "ctr", "conversions"]), help="Optimization goal")
@click.option("--risk", "-r", type=click.Choice(["low", "medium", "high"]), help="Risk tolerance")
@click.option("--mock", is_flag=True, help="Use mock engines (no ffmpeg or network)")
@click.option("--max-cost", type=click.Choice(["free", "low", "medium", "high"]), help="Cost ceiling")
@click.option("--timeout", type=float, help="Per-attempt deadline in seconds")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write the result JSON here")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def run_cmd(analysis, blueprint, goal, risk, mock, max_cost, timeout, output, as_json):
    """
    Decide, compile and route in one go.

    Examples:

        creative-scale run analysis.json --goal ctr --mock
    """
    try:
        video = parse_analyzed_video(load_json(analysis))
        bp = parse_blueprint(load_json(blueprint)) if blueprint else None
        request = build_request(goal, risk, (), None, None)
    except InputValidationError as e:
        report_validation_error(e)
        raise SystemExit(1)

    router = build_router(mock)
    if not as_json:
        router.on_event = print_event
    constraints = build_constraints(max_cost, None, (), None, timeout)

    result = asyncio.run(run_pipeline(video, router, request, bp, constraints))

    if output:
        write_json(output, result.to_dict())
    if as_json:
        echo_json(result.to_dict())
        return

    print_decision(result.decision)
    if result.plan:
        console.print()
        print_plan(result.plan)
    if result.route:
        console.print()
        print_route_result(result.route)
