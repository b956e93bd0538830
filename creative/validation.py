"""
Boundary validation for upstream documents

Analysis and blueprint JSON is checked against pydantic schemas before it
reaches the decision engine, and render plan JSON before it reaches the
router. Invalid documents raise InputValidationError with every problem
listed; nothing is partially processed.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from creative.models.analysis import (
    AnalysisScores,
    AnalyzedVideo,
    AspectRatio,
    AudioMetadata,
    BlueprintFramework,
    CreativeBlueprint,
    Segment,
    SegmentType,
    VariationAction,
    VariationIdea,
    VisualTag,
)
from creative.models.render_plan import RenderPlan
from creative.models.strategy import (
    ActionKind,
    DecisionRequest,
    Framework,
    HistoricalOutcome,
    OptimizationGoal,
    RiskTolerance,
)


class InputValidationError(Exception):
    """Raised when an upstream document fails schema validation."""

    def __init__(self, document: str, errors: List[Dict[str, str]]):
        self.document = document
        self.errors = errors
        summary = "; ".join(f"{e['path']}: {e['message']}" for e in errors[:5])
        super().__init__(f"Invalid {document} document: {summary}")

    def to_dict(self) -> Dict[str, Any]:
        return {"document": self.document, "errors": self.errors}


def _collect(error: ValidationError) -> List[Dict[str, str]]:
    return [
        {
            "path": ".".join(str(p) for p in e["loc"]) or "<root>",
            "message": e["msg"],
        }
        for e in error.errors()
    ]


# ============================================================
# Analyzed video
# ============================================================

class SegmentDocument(BaseModel):
    id: str = Field(..., min_length=1)
    type: Literal["hook", "problem", "solution", "benefit", "proof", "cta", "filler"]
    start_ms: int = Field(..., ge=0)
    end_ms: int = Field(..., gt=0)
    pacing_score: float = Field(0.5, ge=0, le=1)
    clarity_score: float = Field(0.5, ge=0, le=1)
    attention_score: float = Field(0.5, ge=0, le=1)
    transcript: Optional[str] = None
    visual_tags: List[Literal[
        "face", "product", "text", "action", "before_after",
        "testimonial", "unboxing", "lifestyle", "demo",
    ]] = Field(default_factory=list)

    @model_validator(mode="after")
    def end_after_start(self) -> "SegmentDocument":
        if self.end_ms <= self.start_ms:
            raise ValueError(f"segment '{self.id}' ends at or before its start")
        return self


class ScoresDocument(BaseModel):
    hook_score: float = Field(..., ge=0, le=100)
    cta_strength: float = Field(..., ge=0, le=1)
    pacing_consistency: float = Field(0.5, ge=0, le=1)
    clarity_score: float = Field(70.0, ge=0, le=100)
    proof_present: bool = True
    pacing_drop_mid: bool = False
    benefit_clarity: Optional[float] = Field(None, ge=0, le=1)
    objection_handling: Optional[float] = Field(None, ge=0, le=1)
    attention_curve: List[float] = Field(default_factory=list)

    @model_validator(mode="after")
    def curve_in_range(self) -> "ScoresDocument":
        if any(v < 0 or v > 1 for v in self.attention_curve):
            raise ValueError("attention_curve values must be within 0-1")
        return self


class AudioDocument(BaseModel):
    has_voiceover: bool = False
    has_music: bool = False
    music_energy: float = Field(0.5, ge=0, le=1)
    voice_clarity: float = Field(0.5, ge=0, le=1)


class AnalyzedVideoDocument(BaseModel):
    """Schema for the analysis JSON produced upstream"""
    video_id: str = Field(..., min_length=1)
    source_url: str = Field(..., min_length=1)
    duration_ms: int = Field(..., gt=0)
    aspect_ratio: Literal["9:16", "1:1", "16:9", "4:5"] = "9:16"
    fps: float = Field(30.0, ge=1, le=120)
    language: Optional[str] = None
    segments: List[SegmentDocument] = Field(..., min_length=1)
    scores: ScoresDocument
    audio: AudioDocument = Field(default_factory=AudioDocument)

    @model_validator(mode="after")
    def segments_ordered(self) -> "AnalyzedVideoDocument":
        ids = set()
        prev_end = 0
        for segment in self.segments:
            if segment.id in ids:
                raise ValueError(f"duplicate segment id '{segment.id}'")
            ids.add(segment.id)
            if segment.start_ms < prev_end:
                raise ValueError(
                    f"segment '{segment.id}' starts at {segment.start_ms}ms, "
                    f"before the previous segment ends at {prev_end}ms"
                )
            prev_end = segment.end_ms
        if prev_end > self.duration_ms:
            raise ValueError(f"segments run to {prev_end}ms, past duration {self.duration_ms}ms")
        return self

    def to_domain(self) -> AnalyzedVideo:
        s = self.scores
        return AnalyzedVideo(
            video_id=self.video_id,
            source_url=self.source_url,
            duration_ms=self.duration_ms,
            aspect_ratio=AspectRatio(self.aspect_ratio),
            fps=self.fps,
            language=self.language,
            segments=tuple(
                Segment(
                    segment_id=seg.id,
                    segment_type=SegmentType(seg.type),
                    start_ms=seg.start_ms,
                    end_ms=seg.end_ms,
                    pacing_score=seg.pacing_score,
                    clarity_score=seg.clarity_score,
                    attention_score=seg.attention_score,
                    transcript=seg.transcript,
                    visual_tags=tuple(VisualTag(t) for t in seg.visual_tags),
                )
                for seg in self.segments
            ),
            scores=AnalysisScores(
                hook_score=s.hook_score,
                cta_strength=s.cta_strength,
                pacing_consistency=s.pacing_consistency,
                clarity_score=s.clarity_score,
                proof_present=s.proof_present,
                pacing_drop_mid=s.pacing_drop_mid,
                benefit_clarity=s.benefit_clarity,
                objection_handling=s.objection_handling,
                attention_curve=tuple(s.attention_curve),
            ),
            audio=AudioMetadata(
                has_voiceover=self.audio.has_voiceover,
                has_music=self.audio.has_music,
                music_energy=self.audio.music_energy,
                voice_clarity=self.audio.voice_clarity,
            ),
        )


# ============================================================
# Blueprint
# ============================================================

class VariationIdeaDocument(BaseModel):
    id: str = Field(..., min_length=1)
    action: Literal[tuple(a.value for a in VariationAction)]
    target_segment_type: Literal["hook", "problem", "solution", "benefit", "proof", "cta", "filler"]
    intent: str = Field(..., min_length=1)
    priority: int = Field(5, ge=1, le=10)
    expected_impact: str = ""


class CreativeBlueprintDocument(BaseModel):
    """Schema for the blueprint JSON produced upstream"""
    blueprint_id: str = Field(..., min_length=1)
    framework: Literal[tuple(f.value for f in BlueprintFramework)]
    objective: str = Field(..., min_length=1)
    variation_ideas: List[VariationIdeaDocument] = Field(..., min_length=1, max_length=20)
    target_audience: Optional[str] = None
    notes: str = ""

    def to_domain(self) -> CreativeBlueprint:
        return CreativeBlueprint(
            blueprint_id=self.blueprint_id,
            framework=BlueprintFramework(self.framework),
            objective=self.objective,
            target_audience=self.target_audience,
            notes=self.notes,
            variation_ideas=tuple(
                VariationIdea(
                    idea_id=idea.id,
                    action=VariationAction(idea.action),
                    target_segment_type=SegmentType(idea.target_segment_type),
                    intent=idea.intent,
                    priority=idea.priority,
                    expected_impact=idea.expected_impact,
                )
                for idea in self.variation_ideas
            ),
        )


# ============================================================
# Decision request
# ============================================================

class HistoryDocument(BaseModel):
    framework: Literal[tuple(f.value for f in Framework)]
    was_downloaded: bool = False
    was_regenerated: bool = False


class DecisionRequestDocument(BaseModel):
    goal: Literal["retention", "ctr", "conversions"] = "retention"
    risk_tolerance: Literal["low", "medium", "high"] = "medium"
    forbidden_actions: List[Literal[tuple(a.value for a in ActionKind)]] = Field(default_factory=list)
    history: List[HistoryDocument] = Field(default_factory=list)
    max_strategies: int = Field(3, ge=1, le=5)

    def to_domain(self) -> DecisionRequest:
        return DecisionRequest(
            goal=OptimizationGoal(self.goal),
            risk_tolerance=RiskTolerance(self.risk_tolerance),
            forbidden_actions=[ActionKind(a) for a in self.forbidden_actions],
            history=[
                HistoricalOutcome(
                    framework=Framework(h.framework),
                    was_downloaded=h.was_downloaded,
                    was_regenerated=h.was_regenerated,
                )
                for h in self.history
            ],
            max_strategies=self.max_strategies,
        )


# ============================================================
# Render plan
# ============================================================

class TimelineSegmentDocument(BaseModel):
    id: str = Field(..., min_length=1)
    source_segment_id: str
    trim_start_ms: int = Field(..., ge=0)
    trim_end_ms: int = Field(..., ge=0)
    timeline_start_ms: int = Field(..., ge=0)
    output_duration_ms: int = Field(..., ge=0)
    speed: float = Field(1.0, gt=0)
    track: Literal["video", "overlay"] = "video"
    transition_in: str = "cut"
    filters: List[str] = Field(default_factory=list)
    asset_url: Optional[str] = None


class AudioSegmentDocument(BaseModel):
    id: str = Field(..., min_length=1)
    kind: Literal["voiceover", "music"]
    start_ms: int = Field(..., ge=0)
    end_ms: int = Field(..., ge=0)
    volume: float = Field(1.0, ge=0)
    fade_in_ms: int = Field(0, ge=0)
    fade_out_ms: int = Field(0, ge=0)


class OutputFormatDocument(BaseModel):
    model_config = ConfigDict(extra="forbid")

    width: int = Field(1080, gt=0)
    height: int = Field(1920, gt=0)
    fps: int = Field(30, gt=0)
    container: str = "mp4"
    codec: str = "h264"
    video_bitrate_kbps: int = Field(2500, gt=0)
    audio_bitrate_kbps: int = Field(128, gt=0)


class PlanValidationDocument(BaseModel):
    total_duration_ms: int = Field(0, ge=0)
    segment_count: int = Field(0, ge=0)
    audio_track_count: int = Field(0, ge=0)
    has_gaps: bool = False
    has_overlaps: bool = False
    warnings: List[str] = Field(default_factory=list)


class RenderPlanDocument(BaseModel):
    """
    Schema for a render plan document, as written by compile.

    Only the shape is checked here. Timeline consistency is recomputed by
    the router, so a stored status or validation block is never trusted.
    """
    plan_id: str = Field(..., min_length=1)
    source_video_id: str = Field(..., min_length=1)
    source_url: str = Field(..., min_length=1)
    status: Literal["compilable", "uncompilable"] = "compilable"
    uncompilable_reason: Optional[str] = None
    strategy_id: Optional[str] = None
    simplified_from: Optional[str] = None
    variation_id: Optional[str] = None
    timeline: List[TimelineSegmentDocument]
    audio_tracks: List[AudioSegmentDocument] = Field(default_factory=list)
    output_format: OutputFormatDocument = Field(default_factory=OutputFormatDocument)
    validation: PlanValidationDocument = Field(default_factory=PlanValidationDocument)

    def to_domain(self) -> RenderPlan:
        return RenderPlan.from_dict(self.model_dump())


def _parse(model, document: str, data: Any):
    if not isinstance(data, dict):
        raise InputValidationError(
            document, [{"path": "<root>", "message": "expected a JSON object"}]
        )
    try:
        return model.model_validate(data).to_domain()
    except ValidationError as e:
        raise InputValidationError(document, _collect(e)) from e


def parse_analyzed_video(data: Any) -> AnalyzedVideo:
    """
    Validate an analysis document and convert it to an AnalyzedVideo.

    Raises:
        InputValidationError: With one entry per schema violation
    """
    return _parse(AnalyzedVideoDocument, "analysis", data)


def parse_blueprint(data: Any) -> CreativeBlueprint:
    return _parse(CreativeBlueprintDocument, "blueprint", data)


def parse_decision_request(data: Any) -> DecisionRequest:
    return _parse(DecisionRequestDocument, "decision request", data or {})


def parse_render_plan(data: Any) -> RenderPlan:
    return _parse(RenderPlanDocument, "render plan", data)
