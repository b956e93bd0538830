"""Capability-based execution routing"""

from .registry import (
    DEFAULT_REGISTRY_PATH,
    CapabilityRegistry,
    RegistryDocument,
    RegistryError,
    load_registry,
)
from .capabilities import extract_required_capabilities
from .engine_scorer import (
    EngineRanking,
    capability_gaps,
    cost_score,
    rank_engines,
    select_engine,
)
from .simplifier import SimplifiedPlan, simplify_plan
from .state_machine import (
    ALLOWED_TRANSITIONS,
    InvalidTransitionError,
    can_transition,
    escalate,
    transition,
)
from .router import ExecutionRouter, route_plan
from .batch import RouteRequest, route_batch
