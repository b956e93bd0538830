"""Explanation generation for selected strategies"""

from typing import List, assert_never

from creative.models.strategy import (
    Confidence,
    DetectedProblem,
    Explanation,
    OptimizationGoal,
    RejectedAlternative,
    ScoredStrategy,
)
from .frameworks import framework_rationale
from .selection import REASON_LOWER_SCORE, REASON_SELECTED_HIGHER, SelectionResult

LIFT_PER_IMPACT = 25


def confidence_for(score: float) -> Confidence:
    if score > 0.7:
        return Confidence.HIGH
    if score > 0.4:
        return Confidence.MEDIUM
    return Confidence.LOW


def _goal_phrase(goal: OptimizationGoal) -> str:
    match goal:
        case OptimizationGoal.RETENTION:
            return "viewer retention"
        case OptimizationGoal.CTR:
            return "click-through rate"
        case OptimizationGoal.CONVERSIONS:
            return "conversions"
        case _:
            assert_never(goal)


def explain(
    strategy: ScoredStrategy,
    ranked: List[ScoredStrategy],
    selection: SelectionResult,
    problems: List[DetectedProblem],
    goal: OptimizationGoal,
) -> Explanation:
    """
    Justify one selected strategy against every other candidate.

    Alternatives that were themselves selected are not rejections: those that
    outscored this strategy say so, the rest are reported as lower-scored.
    """
    solved = [p for p in problems if p.problem_type in strategy.candidate.solves]
    problem_text = ", ".join(
        f"{p.problem_type.value} ({p.severity:.2f})" for p in solved
    )
    why = (
        f"{strategy.framework.value}: {framework_rationale(strategy.framework)}. "
        f"Addresses {problem_text} with {len(strategy.candidate.actions)} "
        f"segment-level action(s) at risk {strategy.risk:.2f}."
    )

    alternatives = []
    for other in ranked:
        if other is strategy:
            continue
        reason = selection.reason_for(other)
        if reason is None:
            if other.final_score > strategy.final_score:
                reason = REASON_SELECTED_HIGHER
            else:
                reason = REASON_LOWER_SCORE
        alternatives.append(RejectedAlternative(
            framework=other.framework,
            candidate_id=other.candidate.candidate_id,
            reason=reason,
        ))

    lift = round(strategy.impact * LIFT_PER_IMPACT)
    return Explanation(
        why_this_strategy=why,
        why_not_others=tuple(alternatives),
        expected_outcome=f"~{lift}% improvement in {_goal_phrase(goal)}",
        confidence=confidence_for(strategy.final_score),
    )
