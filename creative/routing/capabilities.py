"""Derive the capabilities a render plan requires from an engine"""

import math

from creative.models.engine import RequiredCapabilities, Resolution
from creative.models.render_plan import RenderPlan, TrackKind


def extract_required_capabilities(plan: RenderPlan) -> RequiredCapabilities:
    timeline = plan.timeline
    return RequiredCapabilities(
        resolution=Resolution.from_dimension(plan.output_format.max_dimension),
        duration_sec=math.ceil(plan.validation.total_duration_ms / 1000),
        needs_filters=any(s.filters for s in timeline),
        needs_audio_tracks=len(plan.audio_tracks) > 0,
        needs_speed_change=any(s.speed != 1.0 for s in timeline),
        needs_overlays=any(s.track == TrackKind.OVERLAY for s in timeline),
        needs_transitions=any(s.transition_in != "cut" for s in timeline),
        needs_ai_generation=False,
    )
