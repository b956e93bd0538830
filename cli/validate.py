"""Validate command - check upstream documents against the input schemas"""

import click

from creative.validation import InputValidationError, parse_analyzed_video, parse_blueprint
from .common import console, load_json, report_validation_error


@click.command()
@click.argument("analysis", type=click.Path(exists=True, dir_okay=False))
@click.option("--blueprint", "-b", type=click.Path(exists=True, dir_okay=False),
              help="Blueprint JSON to validate as well")
def validate_cmd(analysis: str, blueprint: str):
    """Validate an analysis document (and optionally a blueprint)"""

    try:
        video = parse_analyzed_video(load_json(analysis))
        console.print(
            f"[green]✓[/green] Analysis [cyan]{video.video_id}[/cyan]: "
            f"{len(video.segments)} segments, {video.duration_sec:.1f}s"
        )
        if blueprint:
            bp = parse_blueprint(load_json(blueprint))
            console.print(
                f"[green]✓[/green] Blueprint [cyan]{bp.blueprint_id}[/cyan]: "
                f"{bp.framework.value}, {len(bp.variation_ideas)} variation ideas"
            )
    except InputValidationError as e:
        report_validation_error(e)
        raise SystemExit(1)
