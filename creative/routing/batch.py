"""
Batch routing

Runs independent router calls concurrently under a caller-supplied limit.
Jobs share only the read-only registry and engine pool.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional

from creative.models.analysis import AnalyzedVideo
from creative.models.job import DegradationLevel, JobState, JobStateContext
from creative.models.render_plan import RenderPlan
from creative.models.route import RouteConstraints, RoutePartialSuccess, RouteResult
from creative.models.strategy import ScoredStrategy
from .router import ExecutionRouter
from .state_machine import transition

logger = logging.getLogger(__name__)


@dataclass
class RouteRequest:
    """One job in a batch"""
    plan: RenderPlan
    constraints: Optional[RouteConstraints] = None
    analysis: Optional[AnalyzedVideo] = None
    strategy: Optional[ScoredStrategy] = None
    source_url: Optional[str] = None


def _crashed(request: RouteRequest, error: BaseException) -> RoutePartialSuccess:
    """Partial-success stand-in for a job whose route() call raised"""
    ctx = JobStateContext(degradation_level=DegradationLevel.PARTIAL_SUCCESS)
    transition(ctx, JobState.ROUTING)
    transition(ctx, JobState.PARTIAL_SUCCESS, note=f"{type(error).__name__}: {error}")
    reason = f"Routing aborted: {type(error).__name__}: {error}"
    return RoutePartialSuccess(
        reason=reason,
        human_message=f"{reason}. The render plan is included so you can finish it yourself.",
        original_plan=request.plan,
        job=ctx,
        analysis=request.analysis,
        strategy=request.strategy,
    )


async def route_batch(
    router: ExecutionRouter,
    requests: List[RouteRequest],
    concurrency: int = 4,
) -> List[RouteResult]:
    """
    Route many plans concurrently.

    Args:
        router: Shared router (stateless across jobs)
        requests: Jobs to run
        concurrency: Maximum jobs in flight at once

    Returns:
        One RouteResult per request, in input order
    """
    semaphore = asyncio.Semaphore(max(1, concurrency))

    async def run_with_limit(request: RouteRequest) -> RouteResult:
        async with semaphore:
            return await router.route(
                request.plan,
                request.constraints,
                analysis=request.analysis,
                strategy=request.strategy,
                source_url=request.source_url,
            )

    results = await asyncio.gather(
        *[run_with_limit(r) for r in requests],
        return_exceptions=True
    )

    final: List[RouteResult] = []
    for request, result in zip(requests, results):
        if isinstance(result, Exception):
            logger.error(f"Route for {request.plan.plan_id} raised: {result}")
            final.append(_crashed(request, result))
        else:
            final.append(result)

    completed = sum(1 for r in final if r.status == "completed")
    logger.info(f"Batch finished: {completed}/{len(final)} completed")
    return final
