"""
Plan simplification for the degradation ladder

Builds a new, reduced-fidelity RenderPlan. The input plan is left as is so
it can still be returned in a partial-success bundle.
"""

from dataclasses import dataclass, replace
from typing import List

from creative.compiler import validate_timeline
from creative.models.render_plan import OutputFormat, PlanValidation, RenderPlan, TrackKind

MAX_SIMPLIFIED_DIMENSION = 1280
SIMPLIFIED_WARNING = "Plan simplified for compatibility"


@dataclass(frozen=True)
class SimplifiedPlan:
    plan: RenderPlan
    removed_features: tuple


def _even(value: float) -> int:
    # most codecs need even frame dimensions
    return max(2, int(round(value / 2)) * 2)


def _downscale(fmt: OutputFormat) -> OutputFormat:
    if fmt.max_dimension <= MAX_SIMPLIFIED_DIMENSION:
        return fmt
    ratio = fmt.width / fmt.height
    if ratio > 1:
        width, height = MAX_SIMPLIFIED_DIMENSION, _even(MAX_SIMPLIFIED_DIMENSION / ratio)
    else:
        width, height = _even(MAX_SIMPLIFIED_DIMENSION * ratio), MAX_SIMPLIFIED_DIMENSION
    return replace(fmt, width=width, height=height)


def simplify_plan(plan: RenderPlan) -> SimplifiedPlan:
    """
    Reduce a plan to features nearly every engine supports.

    Drops overlays, resets speed to 1.0 (restoring source durations), caps
    the longest side at 1280px keeping aspect, and zeroes audio fades.
    Placement is re-packed so the timeline stays contiguous.
    """
    removed: List[str] = []

    overlays = plan.overlay_segments
    if overlays:
        removed.append(f"Removed {len(overlays)} overlay(s)")

    video = plan.video_segments
    speed_changes = [s for s in video if s.speed != 1.0]
    if speed_changes:
        removed.append(f"Reset {len(speed_changes)} speed change(s)")

    timeline = []
    cursor = 0
    for segment in sorted(video, key=lambda s: s.timeline_start_ms):
        duration = max(0, segment.trim_end_ms - segment.trim_start_ms)
        timeline.append(replace(
            segment,
            speed=1.0,
            timeline_start_ms=cursor,
            output_duration_ms=duration,
        ))
        cursor += duration

    output_format = _downscale(plan.output_format)
    if output_format != plan.output_format:
        removed.append("Reduced resolution to 720p")

    if any(a.fade_in_ms or a.fade_out_ms for a in plan.audio_tracks):
        removed.append("Removed audio fades")
    audio = tuple(
        replace(a, fade_in_ms=0, fade_out_ms=0, end_ms=min(a.end_ms, cursor) if cursor else a.end_ms)
        for a in plan.audio_tracks
    )

    checked = validate_timeline(timeline, audio)
    validation = PlanValidation(
        total_duration_ms=checked.total_duration_ms,
        segment_count=checked.segment_count,
        audio_track_count=checked.audio_track_count,
        has_gaps=checked.has_gaps,
        has_overlaps=checked.has_overlaps,
        warnings=checked.warnings + (SIMPLIFIED_WARNING,),
    )

    simplified = plan.evolve(
        plan_id=f"{plan.plan_id}_simplified",
        timeline=tuple(timeline),
        audio_tracks=audio,
        output_format=output_format,
        validation=validation,
        simplified_from=plan.plan_id,
    )
    return SimplifiedPlan(plan=simplified, removed_features=tuple(removed))
