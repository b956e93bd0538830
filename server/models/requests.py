"""Pydantic models for API requests/responses"""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional


class DecideRequest(BaseModel):
    """Request to run the decision engine"""
    analysis: Dict[str, Any] = Field(..., description="Analyzed video document")
    blueprint: Optional[Dict[str, Any]] = Field(None, description="Creative blueprint document")
    goal: Optional[Literal["retention", "ctr", "conversions"]] = Field(
        None, description="Optimization goal (defaults to the blueprint objective, then retention)"
    )
    risk_tolerance: Literal["low", "medium", "high"] = Field("medium", description="Risk ceiling")
    forbidden_actions: List[str] = Field(default_factory=list, description="Action kinds to exclude")
    history: List[Dict[str, Any]] = Field(
        default_factory=list,
        description="Past framework outcomes, most recent first",
        examples=[[{"framework": "PAS", "was_downloaded": True, "was_regenerated": False}]],
    )
    max_strategies: int = Field(3, ge=1, le=5, description="Maximum strategies to return")

    def decision_options(self) -> Dict[str, Any]:
        return {
            "goal": self.goal or "retention",
            "risk_tolerance": self.risk_tolerance,
            "forbidden_actions": self.forbidden_actions,
            "history": self.history,
            "max_strategies": self.max_strategies,
        }


class CompileRequest(DecideRequest):
    """Request to decide and compile the chosen strategy, or one blueprint variation idea"""
    strategy_index: int = Field(0, ge=0, description="Which selected strategy to compile")
    variation_index: Optional[int] = Field(
        None, ge=0, description="Compile this blueprint variation idea instead of deciding"
    )


class RouteConstraintsModel(BaseModel):
    max_cost_tier: Optional[Literal["free", "low", "medium", "high"]] = None
    location: Optional[Literal["local", "server", "cloud"]] = None
    excluded_engines: List[str] = Field(default_factory=list)
    preferred_engine_id: Optional[str] = None
    timeout_sec: Optional[float] = Field(None, gt=0)


class RouteRequest(BaseModel):
    """Request to route a compiled plan"""
    plan: Dict[str, Any] = Field(..., description="Render plan as returned by /compile")
    constraints: RouteConstraintsModel = Field(default_factory=RouteConstraintsModel)
    analysis: Optional[Dict[str, Any]] = Field(
        None, description="Analysis document, echoed into a partial-success bundle"
    )


class BatchRouteRequest(BaseModel):
    """Request to route several plans concurrently"""
    jobs: List[RouteRequest] = Field(..., min_length=1, description="Independent route requests")
    concurrency: Optional[int] = Field(
        None, ge=1, description="Jobs in flight at once (defaults to the server setting)"
    )


class PipelineRequest(DecideRequest):
    """Request to run decide, compile and route in one call"""
    strategy_index: int = Field(0, ge=0, description="Which selected strategy to compile")
    constraints: RouteConstraintsModel = Field(default_factory=RouteConstraintsModel)


class ErrorResponse(BaseModel):
    """Structured input validation failure"""
    document: str = Field(..., description="Which document failed")
    errors: List[Dict[str, str]] = Field(..., description="One entry per violation")
