"""
Strategy decision models

Closed enumerations for problems and frameworks, the declarative action
vocabulary, and the result types returned by the decision engine.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union
from enum import Enum

from .analysis import SegmentType


class ProblemType(Enum):
    """Problems the detector can report"""
    HOOK_WEAK = "HOOK_WEAK"
    MID_PACING_DROP = "MID_PACING_DROP"
    CTA_WEAK = "CTA_WEAK"
    PROOF_MISSING = "PROOF_MISSING"
    CLARITY_LOW = "CLARITY_LOW"
    BENEFIT_UNCLEAR = "BENEFIT_UNCLEAR"
    OBJECTION_UNHANDLED = "OBJECTION_UNHANDLED"
    ATTENTION_DROP_EARLY = "ATTENTION_DROP_EARLY"
    ATTENTION_DROP_LATE = "ATTENTION_DROP_LATE"
    PACING_INCONSISTENT = "PACING_INCONSISTENT"
    DURATION_TOO_LONG = "DURATION_TOO_LONG"
    DURATION_TOO_SHORT = "DURATION_TOO_SHORT"


class Framework(Enum):
    """Remediation frameworks. AIDA is the generic fallback."""
    HOOK_BENEFIT_CTA = "HOOK_BENEFIT_CTA"
    PAS = "PAS"
    BAB = "BAB"
    FOUR_PS = "4Ps"
    AIDA = "AIDA"


class ActionKind(Enum):
    """Declarative segment-level actions"""
    COMPRESS = "compress"
    REMOVE = "remove"
    REORDER = "reorder"
    EMPHASIZE = "emphasize"
    SPLIT = "split"
    MERGE = "merge"
    REPLACE = "replace"  # needs an external asset


class OptimizationGoal(Enum):
    RETENTION = "retention"
    CTR = "ctr"
    CONVERSIONS = "conversions"


class RiskTolerance(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class FailureMode(Enum):
    """Valid non-strategy outcomes of a decision call"""
    NO_ACTION = "NO_ACTION"
    SAFE_OPTIMIZATION_ONLY = "SAFE_OPTIMIZATION_ONLY"


class Confidence(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class DetectedProblem:
    """A problem found in the analyzed video"""
    problem_type: ProblemType
    severity: float  # 0-1
    detail: str
    segment_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.problem_type.value,
            "severity": self.severity,
            "segment_id": self.segment_id,
            "detail": self.detail,
        }


@dataclass(frozen=True)
class StrategyAction:
    """
    What to change about a segment, never how to render it.

    Either target_segment_id or target_segment_type identifies the target.
    factor is kind-specific: a speed multiplier for compress, a destination
    index for reorder.
    """
    kind: ActionKind
    intent: str
    target_segment_id: Optional[str] = None
    target_segment_type: Optional[SegmentType] = None
    factor: Optional[float] = None
    asset_url: Optional[str] = None  # replace only

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "intent": self.intent,
            "target_segment_id": self.target_segment_id,
            "target_segment_type": (
                self.target_segment_type.value if self.target_segment_type else None
            ),
            "factor": self.factor,
            "asset_url": self.asset_url,
        }


@dataclass(frozen=True)
class StrategyCandidate:
    """A framework applied to this video as a concrete action list"""
    candidate_id: str
    framework: Framework
    solves: tuple  # ProblemType values this candidate addresses
    risk: float  # 0-1
    cost: float  # 0-1
    actions: tuple  # ordered StrategyAction values
    routing_score: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.candidate_id,
            "framework": self.framework.value,
            "solves": [p.value for p in self.solves],
            "risk": self.risk,
            "cost": self.cost,
            "routing_score": self.routing_score,
            "actions": [a.to_dict() for a in self.actions],
        }


@dataclass(frozen=True)
class ScoreBreakdown:
    """Additive parts of a final score"""
    impact: float
    risk_penalty: float
    cost_penalty: float
    trust_bonus: float


@dataclass(frozen=True)
class ScoredStrategy:
    """A candidate plus its goal-weighted score. Recomputed on every call."""
    candidate: StrategyCandidate
    final_score: float
    breakdown: ScoreBreakdown
    trust: float
    impact: float

    @property
    def framework(self) -> Framework:
        return self.candidate.framework

    @property
    def risk(self) -> float:
        return self.candidate.risk

    def to_dict(self) -> Dict[str, Any]:
        return {
            "candidate": self.candidate.to_dict(),
            "final_score": self.final_score,
            "trust": self.trust,
            "impact": self.impact,
            "breakdown": {
                "impact": self.breakdown.impact,
                "risk_penalty": self.breakdown.risk_penalty,
                "cost_penalty": self.breakdown.cost_penalty,
                "trust_bonus": self.breakdown.trust_bonus,
            },
        }


@dataclass(frozen=True)
class RejectedAlternative:
    framework: Framework
    candidate_id: str
    reason: str


@dataclass(frozen=True)
class Explanation:
    """Human-readable justification for one selected strategy"""
    why_this_strategy: str
    why_not_others: tuple  # RejectedAlternative values
    expected_outcome: str
    confidence: Confidence

    def to_dict(self) -> Dict[str, Any]:
        return {
            "why_this_strategy": self.why_this_strategy,
            "why_not_others": [
                {"framework": r.framework.value, "candidate_id": r.candidate_id, "reason": r.reason}
                for r in self.why_not_others
            ],
            "expected_outcome": self.expected_outcome,
            "confidence": self.confidence.value,
        }


@dataclass(frozen=True)
class StrategyBundle:
    strategy: ScoredStrategy
    explanation: Explanation

    def to_dict(self) -> Dict[str, Any]:
        return {
            "strategy": self.strategy.to_dict(),
            "explanation": self.explanation.to_dict(),
        }


@dataclass(frozen=True)
class HistoricalOutcome:
    """
    One past use of a framework for this account.

    A use counts as successful only if it was downloaded and never
    regenerated; regeneration overrides a download.
    """
    framework: Framework
    was_downloaded: bool = False
    was_regenerated: bool = False

    @property
    def successful(self) -> bool:
        return self.was_downloaded and not self.was_regenerated


@dataclass
class DecisionRequest:
    """Inputs to one decision call"""
    goal: OptimizationGoal = OptimizationGoal.RETENTION
    risk_tolerance: RiskTolerance = RiskTolerance.MEDIUM
    forbidden_actions: List[ActionKind] = field(default_factory=list)
    history: List[HistoricalOutcome] = field(default_factory=list)  # most recent first
    max_strategies: int = 3

    @property
    def last_framework(self) -> Optional[Framework]:
        return self.history[0].framework if self.history else None


@dataclass(frozen=True)
class StrategyList:
    """Successful decision: 1..N ranked strategies with explanations"""
    bundles: tuple
    problems: tuple
    decision_trace: tuple = ()

    @property
    def top(self) -> StrategyBundle:
        return self.bundles[0]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outcome": "strategies",
            "strategies": [b.to_dict() for b in self.bundles],
            "problems": [p.to_dict() for p in self.problems],
            "decision_trace": list(self.decision_trace),
        }


@dataclass(frozen=True)
class DecisionFailure:
    """Valid no-strategy outcome. Always carries a fallback suggestion."""
    mode: FailureMode
    reason: str
    fallback_suggestion: str
    problems: tuple = ()
    decision_trace: tuple = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outcome": self.mode.value,
            "reason": self.reason,
            "fallback_suggestion": self.fallback_suggestion,
            "problems": [p.to_dict() for p in self.problems],
            "decision_trace": list(self.decision_trace),
        }


DecisionResult = Union[StrategyList, DecisionFailure]
