"""
Job state machine

The only way to change a JobStateContext. Each call validates the move
against the transition table and appends a timestamped record.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from creative.models.job import DegradationLevel, JobState, JobStateContext, StateTransition

logger = logging.getLogger(__name__)


class InvalidTransitionError(Exception):
    """Raised for a state change the lifecycle does not allow."""
    pass


ALLOWED_TRANSITIONS = {
    JobState.PENDING: {JobState.ROUTING},
    JobState.ROUTING: {JobState.EXECUTING, JobState.DEGRADED, JobState.PARTIAL_SUCCESS},
    JobState.EXECUTING: {JobState.VALIDATING, JobState.DEGRADED},
    JobState.VALIDATING: {JobState.COMPLETED, JobState.DEGRADED},
    JobState.DEGRADED: {JobState.ROUTING, JobState.PARTIAL_SUCCESS},
    JobState.COMPLETED: set(),
    JobState.PARTIAL_SUCCESS: set(),
}


def can_transition(from_state: JobState, to_state: JobState) -> bool:
    return to_state in ALLOWED_TRANSITIONS[from_state]


def transition(
    ctx: JobStateContext,
    to_state: JobState,
    engine_id: Optional[str] = None,
    error_code: Optional[str] = None,
    note: Optional[str] = None,
) -> StateTransition:
    """
    Move a job to a new state and record it.

    Raises:
        InvalidTransitionError: If the move is not in ALLOWED_TRANSITIONS
    """
    if not can_transition(ctx.state, to_state):
        raise InvalidTransitionError(
            f"{ctx.job_id}: cannot go from {ctx.state.value} to {to_state.value}"
        )

    entry = StateTransition(
        from_state=ctx.state,
        to_state=to_state,
        timestamp=datetime.now(timezone.utc),
        degradation_level=ctx.degradation_level,
        engine_id=engine_id,
        error_code=error_code,
        note=note,
    )
    ctx._append(entry)
    ctx.state = to_state
    if to_state == JobState.EXECUTING:
        ctx.attempt_count += 1

    logger.debug(f"{ctx.job_id}: {entry.from_state.value} -> {to_state.value}")
    return entry


def escalate(ctx: JobStateContext, level: DegradationLevel) -> None:
    """Raise the job's degradation level. Levels never go back down."""
    if level < ctx.degradation_level:
        raise InvalidTransitionError(
            f"{ctx.job_id}: degradation cannot drop from {int(ctx.degradation_level)} to {int(level)}"
        )
    ctx.degradation_level = level
