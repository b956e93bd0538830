"""
Capability-based execution router

Routes a RenderPlan to an engine and walks the degradation ladder on
failure:

    L0 normal         execute the plan as compiled on the best engine
    L1 retry_same     transient failure: retry that engine once
    L2 simplify_plan  simplify the plan and re-route without exclusions
    L3 switch_engine  exclude every attempted engine and try the rest
    L4 partial        return every artifact needed to finish by hand

Every loop is bounded, and route() returns RouteCompleted or
RoutePartialSuccess for any input.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from creative.compiler import revalidate
from creative.ffmpeg_command import manual_ffmpeg_command
from creative.engines.base import (
    EngineError,
    EngineErrorCode,
    EngineResult,
    EngineStatus,
    RenderEngine,
)
from creative.models.analysis import AnalyzedVideo
from creative.models.engine import EngineScore
from creative.models.job import DegradationLevel, JobState, JobStateContext
from creative.models.render_plan import RenderPlan
from creative.models.route import (
    RouteCompleted,
    RouteConstraints,
    RouteEvent,
    RouteEventType,
    RoutePartialSuccess,
    RouteResult,
)
from creative.models.strategy import ScoredStrategy
from .capabilities import extract_required_capabilities
from .engine_scorer import rank_engines
from .registry import CapabilityRegistry
from .simplifier import simplify_plan
from .state_machine import escalate, transition

logger = logging.getLogger(__name__)

EventCallback = Callable[[RouteEvent], None]


@dataclass
class _Attempt:
    """Mutable bookkeeping for one route() call"""
    ctx: JobStateContext
    original_plan: RenderPlan
    constraints: RouteConstraints
    source_url: Optional[str]
    on_event: Optional[EventCallback]
    started: float = field(default_factory=time.monotonic)
    attempted: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    simplified_plan: Optional[RenderPlan] = None
    last_error: Optional[str] = None

    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self.started) * 1000)


class ExecutionRouter:
    """
    Routes render plans across a capability registry.

    The registry and engine pool are injected and only read. Each route()
    call owns its own JobStateContext, so one router can serve many jobs
    concurrently.
    """

    def __init__(
        self,
        registry: CapabilityRegistry,
        engines: Dict[str, RenderEngine],
        poll_interval_sec: float = 2.0,
        poll_max_attempts: int = 60,
        max_switch_attempts: int = 3,
        default_timeout_sec: Optional[float] = None,
        on_event: Optional[EventCallback] = None,
    ):
        self.registry = registry
        self.engines = engines
        self.poll_interval_sec = poll_interval_sec
        self.poll_max_attempts = poll_max_attempts
        self.max_switch_attempts = max_switch_attempts
        self.default_timeout_sec = default_timeout_sec
        self.on_event = on_event

    @classmethod
    def from_settings(cls, registry, engines, settings, **kwargs) -> "ExecutionRouter":
        return cls(
            registry,
            engines,
            poll_interval_sec=settings.poll_interval_sec,
            poll_max_attempts=settings.poll_max_attempts,
            max_switch_attempts=settings.max_switch_attempts,
            default_timeout_sec=settings.engine_timeout_sec,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def _emit(self, run: _Attempt, event_type: RouteEventType, **data) -> None:
        callbacks = [cb for cb in (self.on_event, run.on_event) if cb is not None]
        if not callbacks:
            return
        event = RouteEvent(event_type=event_type, job_id=run.ctx.job_id, data=data)
        for callback in callbacks:
            try:
                callback(event)
            except Exception as e:
                logger.warning(f"Route event callback failed: {e}")

    def _move(self, run: _Attempt, to_state: JobState, **kwargs) -> None:
        entry = transition(run.ctx, to_state, **kwargs)
        self._emit(
            run,
            RouteEventType.STATE_CHANGE,
            from_state=entry.from_state.value,
            to_state=to_state.value,
            degradation_level=int(run.ctx.degradation_level),
        )

    def _escalate(self, run: _Attempt, level: DegradationLevel, reason: str) -> None:
        escalate(run.ctx, level)
        logger.info(f"{run.ctx.job_id}: degradation level {int(level)} ({level.name.lower()}): {reason}")
        self._emit(
            run,
            RouteEventType.DEGRADATION_APPLIED,
            level=int(level),
            reason=reason,
        )

    # ------------------------------------------------------------------
    # Engine selection and execution
    # ------------------------------------------------------------------

    def _select(self, run: _Attempt, plan: RenderPlan, exclude: frozenset) -> Optional[EngineScore]:
        required = extract_required_capabilities(plan)
        ranking = rank_engines(self.registry, required, run.constraints, exclude)
        if ranking.best is None:
            details = "; ".join(f"{r.engine_id}: {r.reason}" for r in ranking.rejections)
            run.last_error = f"No compatible engine ({details or 'registry is empty'})"
            return None

        best = ranking.best
        logger.info(f"{run.ctx.job_id}: selected {best.engine.engine_id} (score {best.score:.3f})")
        self._emit(
            run,
            RouteEventType.ENGINE_SELECTED,
            engine_id=best.engine.engine_id,
            score=best.score,
            candidates=len(ranking.scores),
        )
        return best

    async def _run_engine(
        self, engine: RenderEngine, plan: RenderPlan, run: _Attempt
    ) -> EngineResult:
        def progress(percent: float) -> None:
            self._emit(run, RouteEventType.PROGRESS, engine_id=engine.engine_id, percent=percent)

        result = await engine.execute(plan, source_url=run.source_url, progress=progress)
        polls = 0
        while result.status == EngineStatus.QUEUED:
            if polls >= self.poll_max_attempts:
                return EngineResult.failed(
                    EngineErrorCode.POLL_EXHAUSTED,
                    f"{engine.engine_id} still queued after {polls} status checks",
                )
            await asyncio.sleep(self.poll_interval_sec)
            result = await engine.check_status(result.job_ref)
            polls += 1
        return result

    async def _execute(self, run: _Attempt, plan: RenderPlan, engine_id: str) -> EngineResult:
        """One engine attempt. Always leaves the job in COMPLETED or DEGRADED."""
        self._move(run, JobState.EXECUTING, engine_id=engine_id)
        if engine_id not in run.attempted:
            run.attempted.append(engine_id)
        self._emit(run, RouteEventType.EXECUTION_START, engine_id=engine_id, plan_id=plan.plan_id)

        engine = self.engines.get(engine_id)
        timeout = run.constraints.timeout_sec or self.default_timeout_sec
        if engine is None:
            result = EngineResult.failed(
                EngineErrorCode.NO_ADAPTER, f"No adapter configured for {engine_id}"
            )
        else:
            try:
                result = await asyncio.wait_for(self._run_engine(engine, plan, run), timeout)
            except asyncio.TimeoutError:
                result = EngineResult.failed(
                    EngineErrorCode.TIMEOUT, f"{engine_id} exceeded {timeout}s deadline"
                )
            except EngineError as e:
                result = EngineResult.failed(e.code, str(e))
            except Exception as e:
                logger.warning(f"{run.ctx.job_id}: {engine_id} raised {type(e).__name__}: {e}")
                result = EngineResult.failed(
                    EngineErrorCode.ENGINE_ERROR, f"{engine_id} raised {type(e).__name__}: {e}"
                )

        if result.success:
            self._move(run, JobState.VALIDATING, engine_id=engine_id)
            if result.output_ref:
                self._move(run, JobState.COMPLETED, engine_id=engine_id)
                self._emit(
                    run,
                    RouteEventType.EXECUTION_COMPLETE,
                    engine_id=engine_id,
                    output_ref=result.output_ref,
                )
                return result
            result = EngineResult.failed(
                EngineErrorCode.INVALID_OUTPUT, f"{engine_id} reported success without output"
            )

        run.last_error = f"{engine_id}: {result.error_message}"
        logger.warning(f"{run.ctx.job_id}: attempt failed: {run.last_error}")
        self._move(
            run,
            JobState.DEGRADED,
            engine_id=engine_id,
            error_code=result.error_code.value if result.error_code else None,
            note=result.error_message,
        )
        self._emit(
            run,
            RouteEventType.EXECUTION_FAILED,
            engine_id=engine_id,
            error_code=result.error_code.value if result.error_code else None,
            error=result.error_message,
            transient=result.transient,
        )
        return result

    # ------------------------------------------------------------------
    # Terminal results
    # ------------------------------------------------------------------

    def _completed(self, run: _Attempt, plan: RenderPlan, engine_id: str, result: EngineResult) -> RouteCompleted:
        warnings = list(plan.validation.warnings) + run.warnings
        logger.info(
            f"{run.ctx.job_id}: completed on {engine_id} at level {int(run.ctx.degradation_level)}"
        )
        return RouteCompleted(
            output_ref=result.output_ref,
            engine_id=engine_id,
            degradation_level=run.ctx.degradation_level,
            plan=plan,
            job=run.ctx,
            warnings=tuple(warnings),
            processing_time_ms=run.elapsed_ms(),
        )

    def _partial(
        self,
        run: _Attempt,
        reason: str,
        analysis: Optional[AnalyzedVideo],
        strategy: Optional[ScoredStrategy],
    ) -> RoutePartialSuccess:
        self._escalate(run, DegradationLevel.PARTIAL_SUCCESS, reason)
        self._move(run, JobState.PARTIAL_SUCCESS, note=reason)

        plan = run.original_plan
        command = manual_ffmpeg_command(plan, run.source_url) if plan.video_segments else None
        tried = ", ".join(run.attempted) if run.attempted else "none"
        message = (
            f"We couldn't finish this render automatically ({reason}). "
            f"Engines tried: {tried}. The full render plan"
            + (" and an FFmpeg command are" if command else " is")
            + " included so you can finish it yourself."
        )
        self._emit(run, RouteEventType.PARTIAL_SUCCESS, reason=reason, attempted=list(run.attempted))
        logger.info(f"{run.ctx.job_id}: partial success: {reason}")

        return RoutePartialSuccess(
            reason=reason,
            human_message=message,
            original_plan=plan,
            job=run.ctx,
            ffmpeg_command=command,
            simplified_plan=run.simplified_plan,
            analysis=analysis,
            strategy=strategy,
            attempted_engines=tuple(run.attempted),
            warnings=tuple(run.warnings),
            processing_time_ms=run.elapsed_ms(),
        )

    # ------------------------------------------------------------------
    # Ladder
    # ------------------------------------------------------------------

    async def route(
        self,
        plan: RenderPlan,
        constraints: Optional[RouteConstraints] = None,
        analysis: Optional[AnalyzedVideo] = None,
        strategy: Optional[ScoredStrategy] = None,
        source_url: Optional[str] = None,
        on_event: Optional[EventCallback] = None,
    ) -> RouteResult:
        """
        Route a plan to completion or to a partial-success bundle.

        Args:
            plan: Render plan; its timeline is revalidated first, never mutated
            constraints: Cost, location, exclusion and timeout limits
            analysis: Included in a partial-success bundle when given
            strategy: Included in a partial-success bundle when given
            source_url: Source media override
            on_event: Per-call event callback

        Returns:
            RouteCompleted or RoutePartialSuccess
        """
        plan = revalidate(plan)
        run = _Attempt(
            ctx=JobStateContext(),
            original_plan=plan,
            constraints=constraints or RouteConstraints(),
            source_url=source_url,
            on_event=on_event,
        )
        self._move(run, JobState.ROUTING, note="level 0")

        if not plan.is_compilable:
            return self._partial(
                run, f"Plan is uncompilable: {plan.uncompilable_reason}", analysis, strategy
            )

        # L0 normal
        choice = self._select(run, plan, frozenset())
        if choice is None:
            return self._partial(run, run.last_error, analysis, strategy)
        engine_id = choice.engine.engine_id
        result = await self._execute(run, plan, engine_id)
        if result.success:
            return self._completed(run, plan, engine_id, result)

        # L1 retry same engine, transient failures only
        if result.transient:
            self._escalate(run, DegradationLevel.RETRY_SAME, f"transient {result.error_code.value}")
            self._move(run, JobState.ROUTING, engine_id=engine_id, note="level 1")
            self._emit(run, RouteEventType.RETRY_TRIGGERED, engine_id=engine_id)
            result = await self._execute(run, plan, engine_id)
            if result.success:
                return self._completed(run, plan, engine_id, result)

        # L2 simplify and re-route
        simplified = simplify_plan(plan)
        run.simplified_plan = simplified.plan
        run.warnings.extend(simplified.removed_features)
        self._escalate(run, DegradationLevel.SIMPLIFY_PLAN, "simplifying plan")
        self._move(run, JobState.ROUTING, note="level 2")
        current = simplified.plan
        choice = self._select(run, current, frozenset())
        if choice is None:
            return self._partial(run, run.last_error, analysis, strategy)
        engine_id = choice.engine.engine_id
        result = await self._execute(run, current, engine_id)
        if result.success:
            return self._completed(run, current, engine_id, result)

        # L3 switch engine
        self._escalate(run, DegradationLevel.SWITCH_ENGINE, "switching engines")
        for _ in range(self.max_switch_attempts):
            self._move(run, JobState.ROUTING, note="level 3")
            choice = self._select(run, current, frozenset(run.attempted))
            if choice is None:
                return self._partial(run, "All compatible engines have been exhausted", analysis, strategy)
            engine_id = choice.engine.engine_id
            result = await self._execute(run, current, engine_id)
            if result.success:
                return self._completed(run, current, engine_id, result)

        # L4
        return self._partial(
            run, f"Engine attempts exhausted; last error: {run.last_error}", analysis, strategy
        )


async def route_plan(
    plan: RenderPlan,
    registry: CapabilityRegistry,
    engines: Dict[str, RenderEngine],
    constraints: Optional[RouteConstraints] = None,
    **kwargs,
) -> RouteResult:
    """Convenience wrapper for a one-off route with default router settings"""
    router = ExecutionRouter(registry, engines)
    return await router.route(plan, constraints, **kwargs)
