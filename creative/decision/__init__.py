"""Strategy decision engine"""

from .detector import (
    NO_ACTION_THRESHOLD,
    SIGNIFICANCE_THRESHOLD,
    MAX_PROBLEMS,
    DetectionReport,
    detect_problems,
)
from .frameworks import GENERIC_FALLBACK, framework_rule, extract_signals, framework_actions
from .candidates import generate_candidates, routing_score
from .scoring import goal_weights, framework_trust, score_candidate, score_candidates
from .selection import risk_ceiling, select_strategies, SelectionResult
from .explain import explain, confidence_for
from .engine import decide, goal_from_blueprint
