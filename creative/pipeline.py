"""
End-to-end pipeline: decide -> compile -> route

Glue used by the CLI and HTTP API. A decision failure stops before
compilation and is returned as-is.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from creative.compiler import compile_plan
from creative.decision.engine import decide
from creative.models.analysis import AnalyzedVideo, CreativeBlueprint
from creative.models.render_plan import RenderPlan
from creative.models.route import RouteConstraints, RouteResult
from creative.models.strategy import DecisionRequest, DecisionResult, StrategyList
from creative.routing.router import ExecutionRouter

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    decision: DecisionResult
    plan: Optional[RenderPlan] = None
    route: Optional[RouteResult] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "decision": self.decision.to_dict(),
            "plan": self.plan.to_dict() if self.plan else None,
            "route": self.route.to_dict() if self.route else None,
        }


async def run_pipeline(
    video: AnalyzedVideo,
    router: ExecutionRouter,
    request: Optional[DecisionRequest] = None,
    blueprint: Optional[CreativeBlueprint] = None,
    constraints: Optional[RouteConstraints] = None,
    strategy_index: int = 0,
) -> PipelineResult:
    """
    Run the full pipeline for one analyzed video.

    Args:
        video: Validated analysis
        router: Router with registry and engines injected
        request: Decision inputs
        blueprint: Upstream blueprint, used for the default goal
        constraints: Routing limits
        strategy_index: Which selected strategy to compile (0 = top)
    """
    decision = decide(video, request, blueprint)
    if isinstance(decision, StrategyList):
        index = min(max(strategy_index, 0), len(decision.bundles) - 1)
        scored = decision.bundles[index].strategy
        plan = compile_plan(video, scored.candidate)
        route = await router.route(plan, constraints, analysis=video, strategy=scored)
        return PipelineResult(decision=decision, plan=plan, route=route)

    logger.info(f"{video.video_id}: {decision.mode.value}, nothing to render")
    return PipelineResult(decision=decision)
