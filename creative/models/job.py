"""
Job state models

A JobStateContext tracks one routing request. Its transition log is
append-only and owned by that job alone.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from enum import Enum, IntEnum
import uuid


class JobState(Enum):
    PENDING = "pending"
    ROUTING = "routing"
    EXECUTING = "executing"
    VALIDATING = "validating"
    DEGRADED = "degraded"
    COMPLETED = "completed"
    PARTIAL_SUCCESS = "partial_success"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.COMPLETED, JobState.PARTIAL_SUCCESS)


class DegradationLevel(IntEnum):
    """Rungs of the fallback ladder"""
    NORMAL = 0
    RETRY_SAME = 1
    SIMPLIFY_PLAN = 2
    SWITCH_ENGINE = 3
    PARTIAL_SUCCESS = 4


@dataclass(frozen=True)
class StateTransition:
    """One entry in the job's audit trail"""
    from_state: JobState
    to_state: JobState
    timestamp: datetime
    degradation_level: DegradationLevel
    engine_id: Optional[str] = None
    error_code: Optional[str] = None
    note: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from": self.from_state.value,
            "to": self.to_state.value,
            "timestamp": self.timestamp.isoformat(),
            "degradation_level": int(self.degradation_level),
            "engine_id": self.engine_id,
            "error_code": self.error_code,
            "note": self.note,
        }


@dataclass
class JobStateContext:
    """
    Per-job execution state.

    Only creative.routing.state_machine.transition() changes state; it
    appends to the log and never rewrites earlier entries.
    """
    job_id: str = field(default_factory=lambda: f"job_{uuid.uuid4().hex[:12]}")
    state: JobState = JobState.PENDING
    degradation_level: DegradationLevel = DegradationLevel.NORMAL
    attempt_count: int = 0
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    _log: List[StateTransition] = field(default_factory=list, repr=False)

    @property
    def transitions(self) -> tuple:
        return tuple(self._log)

    @property
    def states_visited(self) -> List[JobState]:
        return [JobState.PENDING] + [t.to_state for t in self._log]

    def _append(self, entry: StateTransition) -> None:
        self._log.append(entry)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "job_id": self.job_id,
            "state": self.state.value,
            "degradation_level": int(self.degradation_level),
            "attempt_count": self.attempt_count,
            "created_at": self.created_at.isoformat(),
            "transitions": [t.to_dict() for t in self._log],
        }
