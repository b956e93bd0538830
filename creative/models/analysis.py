"""
Analyzed video models

These models describe the output of the upstream video analysis step:
a time-ordered list of typed segments plus aggregate scores and audio
metadata. They are read-only inputs to the decision engine and compiler.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from enum import Enum


class SegmentType(Enum):
    """Narrative role of a segment within the ad"""
    HOOK = "hook"
    PROBLEM = "problem"
    SOLUTION = "solution"
    BENEFIT = "benefit"
    PROOF = "proof"
    CTA = "cta"
    FILLER = "filler"


class VisualTag(Enum):
    """Visual content tags attached by analysis"""
    FACE = "face"
    PRODUCT = "product"
    TEXT = "text"
    ACTION = "action"
    BEFORE_AFTER = "before_after"
    TESTIMONIAL = "testimonial"
    UNBOXING = "unboxing"
    LIFESTYLE = "lifestyle"
    DEMO = "demo"


class AspectRatio(Enum):
    """Supported source aspect ratios"""
    VERTICAL = "9:16"
    SQUARE = "1:1"
    LANDSCAPE = "16:9"
    PORTRAIT = "4:5"


@dataclass(frozen=True)
class Segment:
    """
    A typed, time-bounded slice of the source video.

    Times are milliseconds in source time. Scores are in [0, 1].
    """
    segment_id: str
    segment_type: SegmentType
    start_ms: int
    end_ms: int
    pacing_score: float = 0.5
    clarity_score: float = 0.5
    attention_score: float = 0.5
    transcript: Optional[str] = None
    visual_tags: tuple = ()

    @property
    def duration_ms(self) -> int:
        return self.end_ms - self.start_ms


@dataclass(frozen=True)
class AudioMetadata:
    """Audio characteristics of the source video"""
    has_voiceover: bool = False
    has_music: bool = False
    music_energy: float = 0.5  # 0-1
    voice_clarity: float = 0.5  # 0-1


@dataclass(frozen=True)
class AnalysisScores:
    """
    Aggregate scores produced by analysis.

    hook_score and clarity_score are on a 0-100 scale, the rest are 0-1.
    Optional signals fall back to neutral defaults during detection.
    """
    hook_score: float
    cta_strength: float
    pacing_consistency: float = 0.5
    clarity_score: float = 70.0
    proof_present: bool = True
    pacing_drop_mid: bool = False
    benefit_clarity: Optional[float] = None
    objection_handling: Optional[float] = None
    attention_curve: tuple = ()


@dataclass(frozen=True)
class AnalyzedVideo:
    """
    Complete analysis of one source ad.

    Invariant: segments are time-ordered and non-overlapping in source time.
    """
    video_id: str
    source_url: str
    duration_ms: int
    segments: tuple
    scores: AnalysisScores
    audio: AudioMetadata = field(default_factory=AudioMetadata)
    aspect_ratio: AspectRatio = AspectRatio.VERTICAL
    fps: float = 30.0
    language: Optional[str] = None

    @property
    def duration_sec(self) -> float:
        return self.duration_ms / 1000

    def segments_of_type(self, segment_type: SegmentType) -> List[Segment]:
        """All segments with the given narrative role, in source order"""
        return [s for s in self.segments if s.segment_type == segment_type]

    def first_of_type(self, segment_type: SegmentType) -> Optional[Segment]:
        matches = self.segments_of_type(segment_type)
        return matches[0] if matches else None

    def find_segment(self, segment_id: str) -> Optional[Segment]:
        for segment in self.segments:
            if segment.segment_id == segment_id:
                return segment
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "video_id": self.video_id,
            "source_url": self.source_url,
            "duration_ms": self.duration_ms,
            "aspect_ratio": self.aspect_ratio.value,
            "fps": self.fps,
            "language": self.language,
            "segments": [
                {
                    "id": s.segment_id,
                    "type": s.segment_type.value,
                    "start_ms": s.start_ms,
                    "end_ms": s.end_ms,
                    "pacing_score": s.pacing_score,
                    "clarity_score": s.clarity_score,
                    "attention_score": s.attention_score,
                    "transcript": s.transcript,
                    "visual_tags": [t.value for t in s.visual_tags],
                }
                for s in self.segments
            ],
            "scores": {
                "hook_score": self.scores.hook_score,
                "cta_strength": self.scores.cta_strength,
                "pacing_consistency": self.scores.pacing_consistency,
                "clarity_score": self.scores.clarity_score,
                "proof_present": self.scores.proof_present,
                "pacing_drop_mid": self.scores.pacing_drop_mid,
                "benefit_clarity": self.scores.benefit_clarity,
                "objection_handling": self.scores.objection_handling,
                "attention_curve": list(self.scores.attention_curve),
            },
            "audio": {
                "has_voiceover": self.audio.has_voiceover,
                "has_music": self.audio.has_music,
                "music_energy": self.audio.music_energy,
                "voice_clarity": self.audio.voice_clarity,
            },
        }


class BlueprintFramework(Enum):
    """Marketing framework named by an upstream blueprint"""
    AIDA = "AIDA"
    PAS = "PAS"
    BAB = "BAB"
    FAB = "FAB"
    FOUR_PS = "4Ps"
    HOOK_BENEFIT_CTA = "HOOK_BENEFIT_CTA"


class VariationAction(Enum):
    """Abstract actions a blueprint variation idea may propose"""
    REPLACE_SEGMENT = "replace_segment"
    REMOVE_SEGMENT = "remove_segment"
    COMPRESS_TIMING = "compress_timing"
    REORDER_SEGMENTS = "reorder_segments"
    ADD_TEXT_OVERLAY = "add_text_overlay"
    CHANGE_PACING = "change_pacing"
    EMPHASIZE_SEGMENT = "emphasize_segment"
    SPLIT_SEGMENT = "split_segment"
    MERGE_SEGMENTS = "merge_segments"


@dataclass(frozen=True)
class VariationIdea:
    """One proposed change in a blueprint"""
    idea_id: str
    action: VariationAction
    target_segment_type: SegmentType
    intent: str
    priority: int = 5  # 1 (highest) - 10
    expected_impact: str = ""


@dataclass(frozen=True)
class CreativeBlueprint:
    """
    Marketing strategy document produced upstream alongside the analysis.

    The decision engine uses the objective to default the optimization goal.
    """
    blueprint_id: str
    framework: BlueprintFramework
    objective: str
    variation_ideas: tuple
    target_audience: Optional[str] = None
    notes: str = ""
