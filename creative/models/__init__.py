"""Data models for Creative Scale"""

from .analysis import (
    SegmentType,
    VisualTag,
    AspectRatio,
    Segment,
    AudioMetadata,
    AnalysisScores,
    AnalyzedVideo,
    BlueprintFramework,
    VariationAction,
    VariationIdea,
    CreativeBlueprint,
)
from .strategy import (
    ProblemType,
    Framework,
    ActionKind,
    OptimizationGoal,
    RiskTolerance,
    FailureMode,
    Confidence,
    DetectedProblem,
    StrategyAction,
    StrategyCandidate,
    ScoreBreakdown,
    ScoredStrategy,
    RejectedAlternative,
    Explanation,
    StrategyBundle,
    HistoricalOutcome,
    DecisionRequest,
    StrategyList,
    DecisionFailure,
    DecisionResult,
)
from .render_plan import (
    PlanStatus,
    TrackKind,
    AudioTrackKind,
    TimelineSegment,
    AudioSegment,
    OutputFormat,
    PlanValidation,
    RenderPlan,
)
from .engine import (
    Resolution,
    CostTier,
    EngineLocation,
    AdapterKind,
    EngineCapabilities,
    EngineDescriptor,
    RequiredCapabilities,
    EngineScore,
    EngineRejection,
)
from .job import (
    JobState,
    DegradationLevel,
    StateTransition,
    JobStateContext,
)
from .route import (
    RouteConstraints,
    RouteEventType,
    RouteEvent,
    RouteCompleted,
    RoutePartialSuccess,
    RouteResult,
)
