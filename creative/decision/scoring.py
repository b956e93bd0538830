"""
Strategy scoring

final_score = impact*w_impact - risk*w_risk - cost*w_cost + trust*w_trust,
with weights chosen by optimization goal. Scores are recomputed on every
call and never cached.
"""

from dataclasses import dataclass
from typing import Iterable, List, assert_never

from creative.models.strategy import (
    DetectedProblem,
    Framework,
    HistoricalOutcome,
    OptimizationGoal,
    ScoreBreakdown,
    ScoredStrategy,
    StrategyCandidate,
)
from .frameworks import GENERIC_FALLBACK

BASE_TRUST = 0.5
TRUST_RANGE = 0.4
GENERIC_FALLBACK_PENALTY = 0.15


@dataclass(frozen=True)
class GoalWeights:
    impact: float
    risk: float
    cost: float
    trust: float


def goal_weights(goal: OptimizationGoal) -> GoalWeights:
    match goal:
        case OptimizationGoal.RETENTION:
            return GoalWeights(impact=1.2, risk=0.8, cost=0.3, trust=0.2)
        case OptimizationGoal.CTR:
            return GoalWeights(impact=1.0, risk=0.6, cost=0.4, trust=0.3)
        case OptimizationGoal.CONVERSIONS:
            return GoalWeights(impact=0.9, risk=0.9, cost=0.5, trust=0.4)
        case _:
            assert_never(goal)


def framework_trust(framework: Framework, history: Iterable[HistoricalOutcome]) -> float:
    """
    Trust earned by a framework from past uses.

    0.5 with no history, otherwise 0.5 + 0.4 * success rate. A use is a
    success only when it was downloaded and not regenerated.
    """
    uses = [h for h in history if h.framework == framework]
    if not uses:
        return BASE_TRUST
    successes = sum(1 for h in uses if h.successful)
    return BASE_TRUST + (successes / len(uses)) * TRUST_RANGE


def candidate_impact(candidate: StrategyCandidate, problems: List[DetectedProblem]) -> float:
    """Share of total detected severity that the candidate addresses"""
    if not problems:
        return 0.0
    solved = set(candidate.solves)
    return sum(p.severity for p in problems if p.problem_type in solved) / len(problems)


def score_candidate(
    candidate: StrategyCandidate,
    problems: List[DetectedProblem],
    goal: OptimizationGoal,
    history: Iterable[HistoricalOutcome] = (),
) -> ScoredStrategy:
    weights = goal_weights(goal)
    impact = candidate_impact(candidate, problems)
    trust = framework_trust(candidate.framework, history)

    risk_penalty = candidate.risk * weights.risk
    if candidate.framework == GENERIC_FALLBACK:
        risk_penalty += GENERIC_FALLBACK_PENALTY

    breakdown = ScoreBreakdown(
        impact=round(impact * weights.impact, 4),
        risk_penalty=round(risk_penalty, 4),
        cost_penalty=round(candidate.cost * weights.cost, 4),
        trust_bonus=round(trust * weights.trust, 4),
    )
    final = (
        breakdown.impact
        - breakdown.risk_penalty
        - breakdown.cost_penalty
        + breakdown.trust_bonus
    )
    return ScoredStrategy(
        candidate=candidate,
        final_score=round(final, 4),
        breakdown=breakdown,
        trust=round(trust, 4),
        impact=round(impact, 4),
    )


def score_candidates(
    candidates: List[StrategyCandidate],
    problems: List[DetectedProblem],
    goal: OptimizationGoal,
    history: Iterable[HistoricalOutcome] = (),
) -> List[ScoredStrategy]:
    """Score every candidate and sort best-first (stable on ties)"""
    history = list(history)
    scored = [score_candidate(c, problems, goal, history) for c in candidates]
    scored.sort(key=lambda s: s.final_score, reverse=True)
    return scored
