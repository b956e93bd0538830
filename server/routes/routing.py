"""Routing and engine registry endpoints"""

from fastapi import APIRouter, HTTPException, Request

from creative.models.engine import CostTier, EngineLocation
from creative.models.route import RouteConstraints
from creative.pipeline import run_pipeline
from creative.routing import RouteRequest as RouteJob, route_batch
from creative.validation import parse_analyzed_video, parse_blueprint, parse_render_plan
from server.models.requests import (
    BatchRouteRequest,
    PipelineRequest,
    RouteConstraintsModel,
    RouteRequest,
)
from server.routes.decisions import build_decision_request


router = APIRouter()


def to_constraints(model: RouteConstraintsModel) -> RouteConstraints:
    return RouteConstraints(
        max_cost_tier=CostTier(model.max_cost_tier) if model.max_cost_tier else None,
        location=EngineLocation(model.location) if model.location else None,
        excluded_engines=frozenset(model.excluded_engines),
        preferred_engine_id=model.preferred_engine_id,
        timeout_sec=model.timeout_sec,
    )


@router.post("/route")
async def route_endpoint(body: RouteRequest, request: Request):
    """
    Route a render plan.

    The response status field is always "completed" or "partial_success".
    """
    plan = parse_render_plan(body.plan)
    analysis = parse_analyzed_video(body.analysis) if body.analysis else None
    result = await request.app.state.router.route(
        plan, to_constraints(body.constraints), analysis=analysis
    )
    return result.to_dict()


@router.post("/route/batch")
async def route_batch_endpoint(body: BatchRouteRequest, request: Request):
    """Route several plans concurrently; results keep the order of the jobs"""
    jobs = [
        RouteJob(
            plan=parse_render_plan(job.plan),
            constraints=to_constraints(job.constraints),
            analysis=parse_analyzed_video(job.analysis) if job.analysis else None,
        )
        for job in body.jobs
    ]
    concurrency = body.concurrency or request.app.state.batch_concurrency
    results = await route_batch(request.app.state.router, jobs, concurrency=concurrency)
    return {
        "concurrency": concurrency,
        "completed": sum(1 for r in results if r.status == "completed"),
        "results": [r.to_dict() for r in results],
    }


@router.post("/pipeline")
async def pipeline_endpoint(body: PipelineRequest, request: Request):
    """Decide, compile and route in one call"""
    video = parse_analyzed_video(body.analysis)
    blueprint = parse_blueprint(body.blueprint) if body.blueprint else None
    decision_request = build_decision_request(body, blueprint)
    result = await run_pipeline(
        video,
        request.app.state.router,
        decision_request,
        blueprint,
        to_constraints(body.constraints),
        strategy_index=body.strategy_index,
    )
    return result.to_dict()


@router.get("/engines")
async def list_engines(request: Request):
    """List registry engines"""
    registry = request.app.state.registry
    return {
        "version": registry.version,
        "engines": [e.to_dict() for e in registry],
    }


@router.get("/engines/{engine_id}")
async def get_engine(engine_id: str, request: Request):
    engine = request.app.state.registry.get(engine_id)
    if engine is None:
        raise HTTPException(status_code=404, detail=f"Engine '{engine_id}' not found")
    return engine.to_dict()
