"""
Strategy decision engine

Runs detect -> generate -> score -> select -> explain and returns either
a ranked StrategyList or a DecisionFailure. Both are ordinary return
values; nothing in this pipeline raises for a valid AnalyzedVideo.
"""

import logging
from typing import Optional

from creative.models.analysis import AnalyzedVideo, CreativeBlueprint
from creative.models.strategy import (
    DecisionFailure,
    DecisionRequest,
    DecisionResult,
    FailureMode,
    OptimizationGoal,
    RiskTolerance,
    StrategyBundle,
    StrategyList,
)
from .candidates import generate_candidates
from .detector import NO_ACTION_THRESHOLD, detect_problems
from .explain import explain
from .scoring import score_candidates
from .selection import select_strategies

logger = logging.getLogger(__name__)

SUGGEST_NO_ACTION = "Consider testing with different audience targeting instead"
SUGGEST_NO_CANDIDATES = "Try increasing risk tolerance or removing action restrictions"


def _risk_suggestion(tolerance: RiskTolerance) -> str:
    if tolerance == RiskTolerance.LOW:
        return 'Consider "medium" risk tolerance for more options'
    if tolerance == RiskTolerance.MEDIUM:
        return 'Consider "high" risk tolerance for more options'
    return "Try removing action restrictions"


def goal_from_blueprint(blueprint: Optional[CreativeBlueprint]) -> Optional[OptimizationGoal]:
    """Map a blueprint objective onto an optimization goal, if it names one"""
    if blueprint is None:
        return None
    try:
        return OptimizationGoal(blueprint.objective.strip().lower())
    except ValueError:
        return None


def decide(
    video: AnalyzedVideo,
    request: Optional[DecisionRequest] = None,
    blueprint: Optional[CreativeBlueprint] = None,
) -> DecisionResult:
    """
    Decide which strategies to apply to a video.

    Args:
        video: Validated analysis of the source ad
        request: Goal, risk tolerance, restrictions and history
        blueprint: Optional upstream blueprint; its objective is used as the
            goal when no request is given

    Returns:
        StrategyList with 1..N bundles, or DecisionFailure
    """
    if request is None:
        request = DecisionRequest(goal=goal_from_blueprint(blueprint) or OptimizationGoal.RETENTION)

    trace = []
    report = detect_problems(video)
    trace.append(
        "Detected: " + (
            ", ".join(f"{p.problem_type.value}={p.severity:.2f}" for p in report.all_problems)
            or "nothing"
        )
    )

    if report.no_action:
        trace.append(f"Max severity {report.max_severity:.2f} below {NO_ACTION_THRESHOLD}, no action")
        logger.info(f"{video.video_id}: no action needed")
        return DecisionFailure(
            mode=FailureMode.NO_ACTION,
            reason=f"No problem reaches severity {NO_ACTION_THRESHOLD}; the ad is performing adequately",
            fallback_suggestion=SUGGEST_NO_ACTION,
            problems=report.all_problems,
            decision_trace=tuple(trace),
        )

    problems = list(report.problems)
    candidates = generate_candidates(video, problems, request.forbidden_actions)
    trace.append(
        "Candidates: " + (", ".join(c.framework.value for c in candidates) or "none")
    )

    if not candidates:
        logger.info(f"{video.video_id}: no applicable framework")
        return DecisionFailure(
            mode=FailureMode.SAFE_OPTIMIZATION_ONLY,
            reason="No framework can address the detected problems under the given restrictions",
            fallback_suggestion=SUGGEST_NO_CANDIDATES,
            problems=report.problems,
            decision_trace=tuple(trace),
        )

    ranked = score_candidates(candidates, problems, request.goal, request.history)
    trace.append(
        "Scores: " + ", ".join(f"{s.framework.value}={s.final_score:.3f}" for s in ranked)
    )

    selection = select_strategies(
        ranked,
        request.risk_tolerance,
        last_framework=request.last_framework,
        count=request.max_strategies,
    )
    trace.extend(selection.trace)

    if not selection.selected:
        logger.info(f"{video.video_id}: every candidate exceeds {request.risk_tolerance.value} risk")
        return DecisionFailure(
            mode=FailureMode.SAFE_OPTIMIZATION_ONLY,
            reason=f"All candidates exceed the {request.risk_tolerance.value} risk tolerance",
            fallback_suggestion=_risk_suggestion(request.risk_tolerance),
            problems=report.problems,
            decision_trace=tuple(trace),
        )

    bundles = tuple(
        StrategyBundle(
            strategy=s,
            explanation=explain(s, ranked, selection, problems, request.goal),
        )
        for s in selection.selected
    )
    trace.append("Selected: " + ", ".join(b.strategy.framework.value for b in bundles))
    logger.info(
        f"{video.video_id}: selected {bundles[0].strategy.framework.value} "
        f"(score {bundles[0].strategy.final_score:.3f})"
    )
    return StrategyList(bundles=bundles, problems=report.problems, decision_trace=tuple(trace))
