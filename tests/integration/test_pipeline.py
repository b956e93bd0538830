"""End-to-end pipeline over the packaged registry with mock engines"""

import pytest

from creative.config import Settings
from creative.engines import build_engine_pool
from creative.models.engine import CostTier
from creative.models.route import RouteConstraints
from creative.models.strategy import (
    DecisionFailure,
    DecisionRequest,
    FailureMode,
    OptimizationGoal,
    StrategyList,
)
from creative.pipeline import run_pipeline
from creative.routing import ExecutionRouter, load_registry
from tests.mocks.fixtures import make_healthy_video, make_video


@pytest.fixture
def router():
    registry = load_registry()
    engines = build_engine_pool(registry, Settings(engine_mode="mock"))
    return ExecutionRouter(registry, engines, poll_interval_sec=0.0)


def all_engine_ids(router):
    return frozenset(d.engine_id for d in router.registry)


@pytest.mark.integration
class TestRunPipeline:
    """Tests for run_pipeline()"""

    @pytest.mark.asyncio
    async def test_decide_compile_route(self, router):
        request = DecisionRequest(goal=OptimizationGoal.CTR)
        result = await run_pipeline(make_video(), router, request)

        assert isinstance(result.decision, StrategyList)
        assert result.plan.plan_id == "plan_cand_4ps_vid_001"
        assert result.plan.is_compilable
        assert result.route.status == "completed"
        assert result.route.engine_id == "ffmpeg-local"
        assert result.route.output_ref == "mock://renders/ffmpeg-local/plan_cand_4ps_vid_001.mp4"

    @pytest.mark.asyncio
    async def test_second_strategy(self, router):
        request = DecisionRequest(goal=OptimizationGoal.CTR)
        result = await run_pipeline(make_video(), router, request, strategy_index=1)
        assert result.plan.plan_id == "plan_cand_bab_vid_001"

    @pytest.mark.asyncio
    async def test_decision_failure_stops_early(self, router):
        result = await run_pipeline(make_healthy_video(), router)

        assert result.plan is None
        assert result.route is None
        assert result.to_dict()["decision"]["outcome"] == "NO_ACTION"

    @pytest.mark.asyncio
    async def test_nothing_eligible_returns_artifacts(self, router):
        constraints = RouteConstraints(excluded_engines=all_engine_ids(router))
        request = DecisionRequest(goal=OptimizationGoal.CTR)
        result = await run_pipeline(make_video(), router, request, constraints=constraints)

        assert result.route.status == "partial_success"
        artifacts = result.to_dict()["route"]["artifacts"]
        assert artifacts["analysis"]["video_id"] == "vid_001"
        assert artifacts["strategy"]["candidate"]["framework"] == "4Ps"
        assert artifacts["render_plan"]["plan_id"] == "plan_cand_4ps_vid_001"
        assert artifacts["ffmpeg_command"].startswith("ffmpeg")

    @pytest.mark.asyncio
    async def test_cost_ceiling(self, router):
        constraints = RouteConstraints(
            max_cost_tier=CostTier.FREE,
            excluded_engines=frozenset({"ffmpeg-local"}),
        )
        result = await run_pipeline(
            make_video(), router, DecisionRequest(goal=OptimizationGoal.CTR), constraints=constraints
        )
        # ffmpeg-local is the only free engine
        assert result.route.status == "partial_success"

    @pytest.mark.asyncio
    async def test_strategy_index_clamped_to_last_bundle(self, router):
        request = DecisionRequest(goal=OptimizationGoal.CTR)
        result = await run_pipeline(make_video(), router, request, strategy_index=99)
        assert result.plan.plan_id == "plan_cand_aida_vid_001"

    @pytest.mark.asyncio
    async def test_failure_skips_compile_and_route(self, router, monkeypatch):
        failure = DecisionFailure(
            mode=FailureMode.SAFE_OPTIMIZATION_ONLY,
            reason="No candidate fits the risk tolerance",
            fallback_suggestion="Trim dead air only",
        )
        monkeypatch.setattr("creative.pipeline.decide", lambda *args: failure)

        async def no_route(*args, **kwargs):
            raise AssertionError("router must not be called")
        monkeypatch.setattr(router, "route", no_route)

        result = await run_pipeline(make_video(), router)
        assert result.decision is failure
        assert result.plan is None
        assert result.route is None
