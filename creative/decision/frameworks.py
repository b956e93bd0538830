"""
Framework table

Static knowledge about each remediation framework: which problems it
addresses, which analysis signals it relies on, what rules it out, and
what it costs. Every lookup is an exhaustive match over Framework so a
new framework cannot be added without handling it here.
"""

from dataclasses import dataclass
from typing import Dict, List, assert_never

from creative.models.analysis import AnalyzedVideo, SegmentType
from creative.models.strategy import (
    ActionKind,
    Framework,
    ProblemType,
    StrategyAction,
)

GENERIC_FALLBACK = Framework.AIDA
MAX_FILLER_REMOVALS = 2


@dataclass(frozen=True)
class FrameworkRule:
    """Routing rule for one framework"""
    framework: Framework
    triggers: frozenset
    required_signals: tuple
    contraindications: frozenset
    priority: int  # 1 = preferred
    cost: float
    risk: float


def framework_rule(framework: Framework) -> FrameworkRule:
    match framework:
        case Framework.PAS:
            return FrameworkRule(
                framework=framework,
                triggers=frozenset({
                    ProblemType.MID_PACING_DROP,
                    ProblemType.CLARITY_LOW,
                    ProblemType.BENEFIT_UNCLEAR,
                }),
                required_signals=("problem_agitation",),
                contraindications=frozenset({ProblemType.DURATION_TOO_SHORT}),
                priority=1,
                cost=0.4,
                risk=0.35,
            )
        case Framework.BAB:
            return FrameworkRule(
                framework=framework,
                triggers=frozenset({
                    ProblemType.PROOF_MISSING,
                    ProblemType.BENEFIT_UNCLEAR,
                    ProblemType.OBJECTION_UNHANDLED,
                }),
                required_signals=("benefit_communication",),
                # reordering needs room
                contraindications=frozenset({ProblemType.DURATION_TOO_SHORT}),
                priority=2,
                cost=0.4,
                risk=0.3,
            )
        case Framework.FOUR_PS:
            return FrameworkRule(
                framework=framework,
                triggers=frozenset({
                    ProblemType.PROOF_MISSING,
                    ProblemType.CTA_WEAK,
                    ProblemType.OBJECTION_UNHANDLED,
                }),
                required_signals=("proof_quality",),
                contraindications=frozenset({ProblemType.DURATION_TOO_LONG}),
                priority=2,
                cost=0.5,
                risk=0.4,
            )
        case Framework.HOOK_BENEFIT_CTA:
            return FrameworkRule(
                framework=framework,
                triggers=frozenset({
                    ProblemType.HOOK_WEAK,
                    ProblemType.CTA_WEAK,
                    ProblemType.PACING_INCONSISTENT,
                }),
                required_signals=("hook_strength", "cta_clarity"),
                contraindications=frozenset({ProblemType.PROOF_MISSING}),
                priority=1,
                cost=0.2,
                risk=0.2,
            )
        case Framework.AIDA:
            return FrameworkRule(
                framework=framework,
                triggers=frozenset({
                    ProblemType.ATTENTION_DROP_EARLY,
                    ProblemType.ATTENTION_DROP_LATE,
                    ProblemType.CTA_WEAK,
                }),
                required_signals=(),
                contraindications=frozenset(),
                priority=5,
                cost=0.4,
                risk=0.25,
            )
        case _:
            assert_never(framework)


def framework_rationale(framework: Framework) -> str:
    """One-sentence description of what the framework does for an ad"""
    match framework:
        case Framework.HOOK_BENEFIT_CTA:
            return "Tightens the hook-to-CTA path for quick, direct conversion"
        case Framework.PAS:
            return "Builds emotional tension around the problem before revealing the solution"
        case Framework.BAB:
            return "Recasts the ad as a clear before/after transformation"
        case Framework.FOUR_PS:
            return "Leads with a promise and backs it with proof before the push"
        case Framework.AIDA:
            return "Walks the viewer through attention, interest, desire and action"
        case _:
            assert_never(framework)


def extract_signals(video: AnalyzedVideo) -> Dict[str, float]:
    """Normalized 0-1 signals that frameworks depend on"""
    scores = video.scores
    if scores.benefit_clarity is not None:
        benefit = scores.benefit_clarity
    else:
        benefit = scores.clarity_score / 100
    return {
        "hook_strength": scores.hook_score / 100,
        "proof_quality": 0.7 if scores.proof_present else 0.2,
        "pacing_score": 0.4 if scores.pacing_drop_mid else 0.8,
        "objection_handling": (
            scores.objection_handling if scores.objection_handling is not None else 0.5
        ),
        "cta_clarity": scores.cta_strength,
        "benefit_communication": benefit,
        "problem_agitation": 0.5,
    }


def _emphasize(video: AnalyzedVideo, segment_type: SegmentType, intent: str) -> List[StrategyAction]:
    segment = video.first_of_type(segment_type)
    if segment is None:
        return []
    return [StrategyAction(
        kind=ActionKind.EMPHASIZE,
        target_segment_id=segment.segment_id,
        target_segment_type=segment_type,
        intent=intent,
    )]


def framework_actions(framework: Framework, video: AnalyzedVideo) -> List[StrategyAction]:
    """
    Build the concrete action list for a framework on this video.

    Actions only reference segments that exist in the video; a framework
    whose anchor segments are absent simply yields fewer actions.
    """
    actions: List[StrategyAction] = []

    match framework:
        case Framework.HOOK_BENEFIT_CTA:
            actions += _emphasize(video, SegmentType.HOOK, "Strengthen the opening hook")
            actions += _emphasize(video, SegmentType.BENEFIT, "Highlight the key benefit")
            actions += _emphasize(video, SegmentType.CTA, "Make the call to action land")
        case Framework.PAS:
            actions += _emphasize(video, SegmentType.PROBLEM, "Agitate the pain point")
            solution = video.first_of_type(SegmentType.SOLUTION)
            if solution is not None:
                actions.append(StrategyAction(
                    kind=ActionKind.COMPRESS,
                    target_segment_id=solution.segment_id,
                    target_segment_type=SegmentType.SOLUTION,
                    factor=1.2,
                    intent="Deliver the solution quickly",
                ))
        case Framework.BAB:
            problem = video.first_of_type(SegmentType.PROBLEM)
            benefit = video.first_of_type(SegmentType.BENEFIT)
            if problem is not None and benefit is not None:
                actions.append(StrategyAction(
                    kind=ActionKind.REORDER,
                    target_segment_id=problem.segment_id,
                    target_segment_type=SegmentType.PROBLEM,
                    intent="Open on the 'before' state",
                ))
        case Framework.FOUR_PS:
            actions += _emphasize(video, SegmentType.HOOK, "State the promise up front")
            actions += _emphasize(video, SegmentType.PROOF, "Let the proof breathe")
            actions += _emphasize(video, SegmentType.CTA, "Push to action")
        case Framework.AIDA:
            actions += _emphasize(video, SegmentType.HOOK, "Grab attention")
            actions += _emphasize(video, SegmentType.BENEFIT, "Build desire")
        case _:
            assert_never(framework)

    for filler in video.segments_of_type(SegmentType.FILLER)[:MAX_FILLER_REMOVALS]:
        actions.append(StrategyAction(
            kind=ActionKind.REMOVE,
            target_segment_id=filler.segment_id,
            target_segment_type=SegmentType.FILLER,
            intent="Cut dead time",
        ))

    return actions
