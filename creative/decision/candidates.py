"""
Strategy candidate generation

For each framework that addresses at least one detected problem and is not
contraindicated, emit a StrategyCandidate with framework-specific actions.
"""

import logging
from typing import Dict, Iterable, List

from creative.models.analysis import AnalyzedVideo
from creative.models.strategy import (
    ActionKind,
    DetectedProblem,
    Framework,
    StrategyCandidate,
)
from .frameworks import (
    FrameworkRule,
    extract_signals,
    framework_actions,
    framework_rule,
)

logger = logging.getLogger(__name__)

WEAK_SIGNAL_THRESHOLD = 0.5


def routing_score(rule: FrameworkRule, problems: List[DetectedProblem], signals: Dict[str, float]) -> float:
    """
    How well a framework fits the detected problems and available signals.

    trigger ratio carries 0.6, signal fit 0.4, and each priority step below
    the top costs 0.1.
    """
    detected = {p.problem_type for p in problems}
    matched = rule.triggers & detected
    trigger_ratio = len(matched) / len(rule.triggers) if rule.triggers else 0.0

    signal_fit = 1.0
    for name in rule.required_signals:
        if signals.get(name, 0.5) < WEAK_SIGNAL_THRESHOLD:
            signal_fit *= 0.5

    return round(trigger_ratio * 0.6 + signal_fit * 0.4 - (rule.priority - 1) * 0.1, 4)


def generate_candidates(
    video: AnalyzedVideo,
    problems: List[DetectedProblem],
    forbidden_actions: Iterable[ActionKind] = (),
) -> List[StrategyCandidate]:
    """
    Generate one candidate per applicable framework.

    Args:
        video: Analyzed source video
        problems: Significant detected problems
        forbidden_actions: Action kinds the caller does not allow

    Returns:
        Candidates ordered by routing score (framework declaration order on ties)
    """
    forbidden = set(forbidden_actions)
    detected = {p.problem_type for p in problems}
    signals = extract_signals(video)
    candidates: List[StrategyCandidate] = []

    for framework in Framework:
        rule = framework_rule(framework)

        solves = tuple(p.problem_type for p in problems if p.problem_type in rule.triggers)
        if not solves:
            continue

        blocked_by = rule.contraindications & detected
        if blocked_by:
            logger.debug(
                f"{framework.value} skipped, contraindicated by "
                f"{', '.join(sorted(p.value for p in blocked_by))}"
            )
            continue

        actions = tuple(
            a for a in framework_actions(framework, video) if a.kind not in forbidden
        )
        if not actions:
            logger.debug(f"{framework.value} dropped, no applicable actions")
            continue

        candidates.append(StrategyCandidate(
            candidate_id=f"cand_{framework.value.lower()}_{video.video_id}",
            framework=framework,
            solves=solves,
            risk=rule.risk,
            cost=rule.cost,
            actions=actions,
            routing_score=routing_score(rule, problems, signals),
        ))

    candidates.sort(key=lambda c: c.routing_score, reverse=True)
    return candidates
