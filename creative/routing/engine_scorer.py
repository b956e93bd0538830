"""
Engine scoring

Filters the registry by constraints and hard capability checks, then ranks
the compatible engines by 0.4*capability_match + 0.4*reliability +
0.2*cost_score. Ties keep registry order.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from creative.models.engine import (
    CostTier,
    EngineDescriptor,
    EngineRejection,
    EngineScore,
    RequiredCapabilities,
)
from creative.models.route import RouteConstraints
from .registry import CapabilityRegistry

logger = logging.getLogger(__name__)

CAPABILITY_WEIGHT = 0.4
RELIABILITY_WEIGHT = 0.4
COST_WEIGHT = 0.2
PREFERRED_BONUS = 0.05


@dataclass
class EngineRanking:
    scores: List[EngineScore] = field(default_factory=list)
    rejections: List[EngineRejection] = field(default_factory=list)

    @property
    def best(self) -> Optional[EngineScore]:
        return self.scores[0] if self.scores else None


def cost_score(tier: CostTier) -> float:
    """1.0 for free down to 0.25 for high"""
    return (len(CostTier) - tier.rank) / len(CostTier)


def capability_gaps(engine: EngineDescriptor, required: RequiredCapabilities) -> List[str]:
    """Hard capability checks an engine fails for this plan"""
    caps = engine.capabilities
    gaps = []
    if required.resolution.rank > caps.max_resolution.rank:
        gaps.append(
            f"resolution {required.resolution.value} exceeds {caps.max_resolution.value}"
        )
    if required.duration_sec > caps.max_duration_sec:
        gaps.append(f"duration {required.duration_sec}s exceeds {caps.max_duration_sec}s")
    if required.needs_filters and not caps.supports_filters:
        gaps.append("filters not supported")
    if required.needs_audio_tracks and not caps.supports_audio_tracks:
        gaps.append("audio tracks not supported")
    if required.needs_speed_change and not caps.supports_speed_change:
        gaps.append("speed change not supported")
    if required.needs_overlays and not caps.supports_overlays:
        gaps.append("overlays not supported")
    if required.needs_transitions and not caps.supports_transitions:
        gaps.append("transitions not supported")
    if required.needs_ai_generation and not caps.supports_ai_generation:
        gaps.append("AI generation not supported")
    return gaps


def _constraint_rejection(
    engine: EngineDescriptor, constraints: RouteConstraints, excluded: frozenset
) -> Optional[str]:
    if not engine.available:
        return "unavailable"
    if engine.engine_id in excluded or engine.engine_id in constraints.excluded_engines:
        return "excluded"
    if constraints.max_cost_tier and engine.cost_tier.rank > constraints.max_cost_tier.rank:
        return f"cost tier {engine.cost_tier.value} above {constraints.max_cost_tier.value}"
    if constraints.location and engine.location != constraints.location:
        return f"location {engine.location.value} not {constraints.location.value}"
    return None


def rank_engines(
    registry: CapabilityRegistry,
    required: RequiredCapabilities,
    constraints: Optional[RouteConstraints] = None,
    exclude: frozenset = frozenset(),
) -> EngineRanking:
    """
    Rank compatible engines for a required capability set.

    Args:
        registry: Engines to consider
        required: Output of extract_required_capabilities
        constraints: Caller limits on cost, location and exclusions
        exclude: Engine ids already attempted by the router

    Returns:
        EngineRanking with compatible engines best-first and a reason for
        every engine left out
    """
    constraints = constraints or RouteConstraints()
    ranking = EngineRanking()

    for engine in registry:
        reason = _constraint_rejection(engine, constraints, exclude)
        if reason is None:
            gaps = capability_gaps(engine, required)
            if gaps:
                reason = "; ".join(gaps)
        if reason is not None:
            ranking.rejections.append(EngineRejection(engine_id=engine.engine_id, reason=reason))
            continue

        capability_match = 1.0
        cost = cost_score(engine.cost_tier)
        score = (
            CAPABILITY_WEIGHT * capability_match
            + RELIABILITY_WEIGHT * engine.reliability
            + COST_WEIGHT * cost
        )
        if constraints.preferred_engine_id == engine.engine_id:
            score = min(1.0, score + PREFERRED_BONUS)
        ranking.scores.append(EngineScore(
            engine=engine,
            score=round(score, 4),
            capability_match=capability_match,
            reliability=engine.reliability,
            cost_score=cost,
        ))

    # stable sort keeps registry order on ties
    ranking.scores.sort(key=lambda s: s.score, reverse=True)
    if constraints.preferred_engine_id:
        ranking.scores.sort(
            key=lambda s: (s.score, s.engine.engine_id == constraints.preferred_engine_id),
            reverse=True,
        )

    logger.debug(
        f"{len(ranking.scores)} compatible engines, {len(ranking.rejections)} rejected"
    )
    return ranking


def select_engine(
    registry: CapabilityRegistry,
    required: RequiredCapabilities,
    constraints: Optional[RouteConstraints] = None,
    exclude: frozenset = frozenset(),
) -> Optional[EngineScore]:
    return rank_engines(registry, required, constraints, exclude).best
