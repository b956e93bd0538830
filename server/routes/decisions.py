"""Decision and compilation endpoints"""

from fastapi import APIRouter, HTTPException

from creative.compiler import VariationNotFoundError, compile_plan, compile_variation
from creative.decision import decide, goal_from_blueprint
from creative.models.strategy import DecisionFailure
from creative.validation import parse_analyzed_video, parse_blueprint, parse_decision_request
from server.models.requests import CompileRequest, DecideRequest


router = APIRouter()


def build_decision_request(body: DecideRequest, blueprint):
    """Decision options from the body; an unset goal follows the blueprint objective"""
    options = body.decision_options()
    if body.goal is None:
        goal = goal_from_blueprint(blueprint)
        if goal is not None:
            options["goal"] = goal.value
    return parse_decision_request(options)


def _decide(body: DecideRequest):
    video = parse_analyzed_video(body.analysis)
    blueprint = parse_blueprint(body.blueprint) if body.blueprint else None
    return video, decide(video, build_decision_request(body, blueprint), blueprint)


def _compile_variation(body: CompileRequest):
    if body.blueprint is None:
        raise HTTPException(status_code=400, detail="variation_index requires a blueprint")
    video = parse_analyzed_video(body.analysis)
    blueprint = parse_blueprint(body.blueprint)
    try:
        plan = compile_variation(video, blueprint, body.variation_index)
    except VariationNotFoundError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"decision": None, "plan": plan.to_dict()}


@router.post("/decide")
async def decide_endpoint(body: DecideRequest):
    """
    Pick remediation strategies for an analyzed ad.

    Returns either a ranked strategy list or a NO_ACTION /
    SAFE_OPTIMIZATION_ONLY outcome; both are 200 responses.
    """
    _, result = _decide(body)
    return result.to_dict()


@router.post("/compile")
async def compile_endpoint(body: CompileRequest):
    """
    Decide, then compile the selected strategy into a render plan.

    With variation_index set, the blueprint variation idea at that index is
    compiled instead and no decision is made.
    """
    if body.variation_index is not None:
        return _compile_variation(body)

    video, result = _decide(body)
    if isinstance(result, DecisionFailure):
        return {"decision": result.to_dict(), "plan": None}

    if body.strategy_index >= len(result.bundles):
        raise HTTPException(
            status_code=400,
            detail=f"strategy_index {body.strategy_index} out of range ({len(result.bundles)} selected)",
        )
    plan = compile_plan(video, result.bundles[body.strategy_index].strategy.candidate)
    return {"decision": result.to_dict(), "plan": plan.to_dict()}
