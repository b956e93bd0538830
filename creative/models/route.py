"""
Routing request and result models

RouteResult has exactly two variants. There is no failed outcome: every
internal failure ends in either RouteCompleted or RoutePartialSuccess.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union
from enum import Enum

from .analysis import AnalyzedVideo
from .engine import CostTier, EngineLocation
from .job import DegradationLevel, JobStateContext
from .render_plan import RenderPlan
from .strategy import ScoredStrategy


@dataclass(frozen=True)
class RouteConstraints:
    """Caller-supplied limits on engine choice"""
    max_cost_tier: Optional[CostTier] = None
    excluded_engines: frozenset = frozenset()
    location: Optional[EngineLocation] = None
    preferred_engine_id: Optional[str] = None
    timeout_sec: Optional[float] = None


class RouteEventType(Enum):
    STATE_CHANGE = "state_change"
    ENGINE_SELECTED = "engine_selected"
    EXECUTION_START = "execution_start"
    EXECUTION_COMPLETE = "execution_complete"
    EXECUTION_FAILED = "execution_failed"
    DEGRADATION_APPLIED = "degradation_applied"
    RETRY_TRIGGERED = "retry_triggered"
    PARTIAL_SUCCESS = "partial_success"
    PROGRESS = "progress"


@dataclass(frozen=True)
class RouteEvent:
    event_type: RouteEventType
    job_id: str
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class RouteCompleted:
    """Playable output was produced"""
    output_ref: str
    engine_id: str
    degradation_level: DegradationLevel
    plan: RenderPlan
    job: JobStateContext
    warnings: tuple = ()
    processing_time_ms: int = 0

    status = "completed"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "output_ref": self.output_ref,
            "engine_id": self.engine_id,
            "degradation_level": int(self.degradation_level),
            "warnings": list(self.warnings),
            "processing_time_ms": self.processing_time_ms,
            "plan": self.plan.to_dict(),
            "job": self.job.to_dict(),
        }


@dataclass(frozen=True)
class RoutePartialSuccess:
    """Everything needed to finish the render by hand"""
    reason: str
    human_message: str
    original_plan: RenderPlan
    job: JobStateContext
    ffmpeg_command: Optional[str] = None
    simplified_plan: Optional[RenderPlan] = None
    analysis: Optional[AnalyzedVideo] = None
    strategy: Optional[ScoredStrategy] = None
    attempted_engines: tuple = ()
    warnings: tuple = ()
    processing_time_ms: int = 0

    status = "partial_success"

    @property
    def degradation_level(self) -> DegradationLevel:
        return DegradationLevel.PARTIAL_SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "reason": self.reason,
            "human_message": self.human_message,
            "degradation_level": int(self.degradation_level),
            "attempted_engines": list(self.attempted_engines),
            "warnings": list(self.warnings),
            "processing_time_ms": self.processing_time_ms,
            "artifacts": {
                "analysis": self.analysis.to_dict() if self.analysis else None,
                "strategy": self.strategy.to_dict() if self.strategy else None,
                "render_plan": self.original_plan.to_dict(),
                "simplified_plan": (
                    self.simplified_plan.to_dict() if self.simplified_plan else None
                ),
                "ffmpeg_command": self.ffmpeg_command,
            },
            "job": self.job.to_dict(),
        }


RouteResult = Union[RouteCompleted, RoutePartialSuccess]
