"""Test data factories for consistent test setup"""

from typing import List, Optional

from creative.models.analysis import (
    AnalysisScores,
    AnalyzedVideo,
    AspectRatio,
    AudioMetadata,
    Segment,
    SegmentType,
)
from creative.models.engine import (
    CostTier,
    EngineCapabilities,
    EngineDescriptor,
    EngineLocation,
    Resolution,
)
from creative.models.render_plan import (
    OutputFormat,
    PlanValidation,
    RenderPlan,
    TimelineSegment,
    TrackKind,
)
from creative.models.strategy import (
    ActionKind,
    Framework,
    ProblemType,
    ScoreBreakdown,
    ScoredStrategy,
    StrategyAction,
    StrategyCandidate,
)


# hook / problem / solution / benefit / filler / cta over 25 seconds
DEFAULT_LAYOUT = [
    ("h1", SegmentType.HOOK, 0, 3000),
    ("p1", SegmentType.PROBLEM, 3000, 8000),
    ("s1", SegmentType.SOLUTION, 8000, 14000),
    ("b1", SegmentType.BENEFIT, 14000, 20000),
    ("f1", SegmentType.FILLER, 20000, 22000),
    ("c1", SegmentType.CTA, 22000, 25000),
]


def make_segment(
    segment_id: str = "h1",
    segment_type: SegmentType = SegmentType.HOOK,
    start_ms: int = 0,
    end_ms: int = 3000,
    **kwargs
) -> Segment:
    """Factory for Segment objects"""
    return Segment(
        segment_id=segment_id,
        segment_type=segment_type,
        start_ms=start_ms,
        end_ms=end_ms,
        **kwargs
    )


def make_segments(layout=None) -> tuple:
    return tuple(make_segment(*entry) for entry in (layout or DEFAULT_LAYOUT))


def make_video(
    video_id: str = "vid_001",
    hook_score: float = 40,
    cta_strength: float = 0.3,
    proof_present: bool = False,
    duration_ms: int = 25000,
    segments: Optional[tuple] = None,
    aspect_ratio: AspectRatio = AspectRatio.VERTICAL,
    has_voiceover: bool = True,
    has_music: bool = True,
    **score_overrides
) -> AnalyzedVideo:
    """
    Factory for AnalyzedVideo objects.

    Defaults describe a weak-hook, weak-CTA ad with no proof segment.
    """
    scores = AnalysisScores(
        hook_score=hook_score,
        cta_strength=cta_strength,
        proof_present=proof_present,
        **score_overrides
    )
    return AnalyzedVideo(
        video_id=video_id,
        source_url=f"https://cdn.example.com/{video_id}.mp4",
        duration_ms=duration_ms,
        segments=segments if segments is not None else make_segments(),
        scores=scores,
        audio=AudioMetadata(has_voiceover=has_voiceover, has_music=has_music),
        aspect_ratio=aspect_ratio,
    )


def make_healthy_video(**kwargs) -> AnalyzedVideo:
    """An ad with no problems worth acting on"""
    defaults = dict(hook_score=90, cta_strength=0.9, proof_present=True)
    defaults.update(kwargs)
    return make_video(**defaults)


def make_video_document(**overrides) -> dict:
    """Analysis JSON as produced upstream"""
    document = make_video().to_dict()
    document.update(overrides)
    return document


def make_blueprint_document(objective: str = "ctr", ideas: Optional[List[tuple]] = None) -> dict:
    """
    Blueprint JSON as produced upstream.

    ideas are (action, target_segment_type) pairs; the default proposes a
    stronger hook, cutting filler and a text overlay on the CTA.
    """
    if ideas is None:
        ideas = [
            ("emphasize_segment", "hook"),
            ("remove_segment", "filler"),
            ("add_text_overlay", "cta"),
        ]
    return {
        "blueprint_id": "bp_001",
        "framework": "PAS",
        "objective": objective,
        "variation_ideas": [
            {"id": f"idea_{i + 1}", "action": action, "target_segment_type": target, "intent": f"test {action}"}
            for i, (action, target) in enumerate(ideas)
        ],
    }


def make_action(
    kind: ActionKind = ActionKind.EMPHASIZE,
    target_segment_id: Optional[str] = "h1",
    **kwargs
) -> StrategyAction:
    defaults = {"intent": f"test {kind.value}"}
    defaults.update(kwargs)
    return StrategyAction(kind=kind, target_segment_id=target_segment_id, **defaults)


def make_candidate(
    actions: Optional[List[StrategyAction]] = None,
    framework: Framework = Framework.HOOK_BENEFIT_CTA,
    candidate_id: str = "cand_test",
    risk: float = 0.2,
    cost: float = 0.2,
    solves: tuple = (ProblemType.HOOK_WEAK,),
) -> StrategyCandidate:
    """Factory for StrategyCandidate objects"""
    return StrategyCandidate(
        candidate_id=candidate_id,
        framework=framework,
        solves=solves,
        risk=risk,
        cost=cost,
        actions=tuple(actions if actions is not None else [make_action()]),
    )


def make_scored(
    framework: Framework,
    final_score: float,
    risk: float = 0.2,
    solves: tuple = (ProblemType.HOOK_WEAK,),
    candidate_id: Optional[str] = None,
) -> ScoredStrategy:
    """ScoredStrategy with a fixed score, for selection tests"""
    candidate = make_candidate(
        framework=framework,
        candidate_id=candidate_id or f"cand_{framework.value.lower()}",
        risk=risk,
        solves=solves,
    )
    return ScoredStrategy(
        candidate=candidate,
        final_score=final_score,
        breakdown=ScoreBreakdown(impact=final_score, risk_penalty=0, cost_penalty=0, trust_bonus=0),
        trust=0.5,
        impact=final_score,
    )


def make_timeline_segment(
    index: int = 0,
    trim_start_ms: int = 0,
    trim_end_ms: int = 5000,
    timeline_start_ms: int = 0,
    speed: float = 1.0,
    **kwargs
) -> TimelineSegment:
    return TimelineSegment(
        segment_id=f"ts_{index}",
        source_segment_id=f"seg_{index}",
        trim_start_ms=trim_start_ms,
        trim_end_ms=trim_end_ms,
        timeline_start_ms=timeline_start_ms,
        output_duration_ms=round((trim_end_ms - trim_start_ms) / speed),
        speed=speed,
        **kwargs
    )


def make_plan(
    plan_id: str = "plan_test",
    timeline: Optional[List[TimelineSegment]] = None,
    width: int = 1080,
    height: int = 1920,
    audio_tracks: tuple = (),
    **kwargs
) -> RenderPlan:
    """
    Factory for RenderPlan objects.

    Default is two contiguous 5s segments at normal speed, 1080x1920, no audio.
    """
    if timeline is None:
        timeline = [
            make_timeline_segment(0, 0, 5000, 0),
            make_timeline_segment(1, 5000, 10000, 5000),
        ]
    video = [s for s in timeline if s.track == TrackKind.VIDEO]
    total = max((s.timeline_end_ms for s in video), default=0)
    return RenderPlan(
        plan_id=plan_id,
        source_video_id="vid_001",
        source_url="https://cdn.example.com/vid_001.mp4",
        timeline=tuple(timeline),
        audio_tracks=tuple(audio_tracks),
        output_format=OutputFormat(width=width, height=height),
        validation=PlanValidation(total_duration_ms=total, segment_count=len(video)),
        **kwargs
    )


def make_4k_overlay_plan() -> RenderPlan:
    """Landscape 4K plan with a text overlay on top of the video track"""
    return make_plan(
        plan_id="plan_4k_overlay",
        width=3840,
        height=2160,
        timeline=[
            make_timeline_segment(0, 0, 5000, 0),
            make_timeline_segment(1, 5000, 10000, 5000),
            make_timeline_segment(2, 0, 2000, 1000, track=TrackKind.OVERLAY),
        ],
    )


def make_descriptor(
    engine_id: str = "engine-a",
    max_resolution: Resolution = Resolution.FULL_HD,
    max_duration_sec: int = 300,
    cost_tier: CostTier = CostTier.FREE,
    reliability: float = 0.9,
    location: EngineLocation = EngineLocation.LOCAL,
    available: bool = True,
    **capability_flags
) -> EngineDescriptor:
    """Factory for EngineDescriptor objects; every feature flag defaults to supported"""
    flags = dict(
        supports_filters=True,
        supports_audio_tracks=True,
        supports_speed_change=True,
        supports_overlays=True,
        supports_transitions=True,
    )
    flags.update(capability_flags)
    return EngineDescriptor(
        engine_id=engine_id,
        name=engine_id.replace("-", " ").title(),
        location=location,
        capabilities=EngineCapabilities(
            max_resolution=max_resolution,
            max_duration_sec=max_duration_sec,
            **flags
        ),
        cost_tier=cost_tier,
        reliability=reliability,
        available=available,
    )
