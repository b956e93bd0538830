"""
Strategy selection

Walks scored candidates best-first and keeps up to N of them under the
risk ceiling, one per framework, with two soft preferences: the generic
fallback should not lead when a specific framework is close, and the
framework used last session should not repeat without a clear lead.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, assert_never

from creative.models.strategy import Framework, RiskTolerance, ScoredStrategy
from .frameworks import GENERIC_FALLBACK

logger = logging.getLogger(__name__)

FALLBACK_MARGIN = 0.2
REPETITION_MARGIN = 0.15

REASON_RISK = "Risk level exceeds tolerance"
REASON_FALLBACK = "Generic fallback deprioritized"
REASON_REPETITION = "Avoiding repetition of previous strategy"
REASON_DUPLICATE = "Framework already represented"
REASON_FEWER_PROBLEMS = "Addresses fewer problems"
REASON_LOWER_SCORE = "Lower overall score"
REASON_SELECTED_HIGHER = "Higher score, selected separately"


def risk_ceiling(tolerance: RiskTolerance) -> float:
    match tolerance:
        case RiskTolerance.LOW:
            return 0.3
        case RiskTolerance.MEDIUM:
            return 0.5
        case RiskTolerance.HIGH:
            return 0.8
        case _:
            assert_never(tolerance)


@dataclass
class SelectionResult:
    selected: List[ScoredStrategy] = field(default_factory=list)
    rejected: Dict[str, str] = field(default_factory=dict)  # candidate_id -> reason
    eligible_count: int = 0
    trace: List[str] = field(default_factory=list)

    def reason_for(self, strategy: ScoredStrategy) -> Optional[str]:
        return self.rejected.get(strategy.candidate.candidate_id)


def _next_distinct(
    ranked: List[ScoredStrategy], index: int, framework: Framework, ceiling: float
) -> Optional[ScoredStrategy]:
    for other in ranked[index + 1:]:
        if other.framework != framework and other.risk <= ceiling:
            return other
    return None


def _fallback_should_yield(
    strategy: ScoredStrategy, ranked: List[ScoredStrategy], ceiling: float
) -> bool:
    for other in ranked:
        if other is strategy or other.framework == GENERIC_FALLBACK or other.risk > ceiling:
            continue
        if strategy.final_score - other.final_score < FALLBACK_MARGIN:
            return True
    return False


def select_strategies(
    ranked: List[ScoredStrategy],
    risk_tolerance: RiskTolerance,
    last_framework: Optional[Framework] = None,
    count: int = 3,
) -> SelectionResult:
    """
    Pick the top strategies.

    Args:
        ranked: Scored strategies, best first
        risk_tolerance: Caller's risk ceiling
        last_framework: Framework chosen in the immediately preceding session
        count: Maximum number of strategies to return

    Returns:
        SelectionResult with selected strategies and a reason for every rejection
    """
    ceiling = risk_ceiling(risk_tolerance)
    result = SelectionResult()
    result.eligible_count = sum(1 for s in ranked if s.risk <= ceiling)
    frameworks_used = set()

    for index, strategy in enumerate(ranked):
        cid = strategy.candidate.candidate_id

        if strategy.risk > ceiling:
            result.rejected[cid] = REASON_RISK
            continue

        if (
            not result.selected
            and strategy.framework == GENERIC_FALLBACK
            and _fallback_should_yield(strategy, ranked, ceiling)
        ):
            result.rejected[cid] = REASON_FALLBACK
            continue

        if last_framework is not None and strategy.framework == last_framework:
            runner_up = _next_distinct(ranked, index, strategy.framework, ceiling)
            if runner_up is not None and strategy.final_score - runner_up.final_score < REPETITION_MARGIN:
                result.rejected[cid] = REASON_REPETITION
                result.trace.append(
                    f"Skipped {strategy.framework.value}: used last session and leads "
                    f"{runner_up.framework.value} by less than {REPETITION_MARGIN}"
                )
                continue

        if strategy.framework in frameworks_used:
            result.rejected[cid] = REASON_DUPLICATE
            continue

        if len(result.selected) >= count:
            top = result.selected[0]
            if len(strategy.candidate.solves) < len(top.candidate.solves):
                result.rejected[cid] = REASON_FEWER_PROBLEMS
            else:
                result.rejected[cid] = REASON_LOWER_SCORE
            continue

        result.selected.append(strategy)
        frameworks_used.add(strategy.framework)

    if not result.selected and result.eligible_count:
        # soft preferences removed every option, take the best in-tolerance one
        best = next(s for s in ranked if s.risk <= ceiling)
        result.rejected.pop(best.candidate.candidate_id, None)
        result.selected.append(best)
        result.trace.append(
            f"Preferences left no option, falling back to {best.framework.value}"
        )

    logger.debug(
        f"Selected {[s.framework.value for s in result.selected]} "
        f"from {len(ranked)} candidates (ceiling {ceiling})"
    )
    return result
