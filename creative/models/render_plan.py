"""
Render plan models

A RenderPlan is the compiler's fully numeric, engine-agnostic output and
the only input the router consumes. Plans are frozen: simplification and
revalidation build new plans instead of mutating existing ones.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional
from enum import Enum


class PlanStatus(Enum):
    COMPILABLE = "compilable"
    UNCOMPILABLE = "uncompilable"


class TrackKind(Enum):
    """Timeline track a segment is placed on"""
    VIDEO = "video"
    OVERLAY = "overlay"


class AudioTrackKind(Enum):
    VOICEOVER = "voiceover"
    MUSIC = "music"


@dataclass(frozen=True)
class TimelineSegment:
    """
    One placed segment in the output timeline.

    trim_start_ms/trim_end_ms are source-time in/out points. timeline_start_ms
    and output_duration_ms are output-time placement after speed.
    """
    segment_id: str
    source_segment_id: str
    trim_start_ms: int
    trim_end_ms: int
    timeline_start_ms: int
    output_duration_ms: int
    speed: float = 1.0
    track: TrackKind = TrackKind.VIDEO
    transition_in: str = "cut"
    filters: tuple = ()
    asset_url: Optional[str] = None  # replacement source, if any

    @property
    def timeline_end_ms(self) -> int:
        return self.timeline_start_ms + self.output_duration_ms

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.segment_id,
            "source_segment_id": self.source_segment_id,
            "trim_start_ms": self.trim_start_ms,
            "trim_end_ms": self.trim_end_ms,
            "timeline_start_ms": self.timeline_start_ms,
            "output_duration_ms": self.output_duration_ms,
            "speed": self.speed,
            "track": self.track.value,
            "transition_in": self.transition_in,
            "filters": list(self.filters),
            "asset_url": self.asset_url,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TimelineSegment":
        return cls(
            segment_id=data["id"],
            source_segment_id=data["source_segment_id"],
            trim_start_ms=int(data["trim_start_ms"]),
            trim_end_ms=int(data["trim_end_ms"]),
            timeline_start_ms=int(data["timeline_start_ms"]),
            output_duration_ms=int(data["output_duration_ms"]),
            speed=float(data.get("speed", 1.0)),
            track=TrackKind(data.get("track", "video")),
            transition_in=data.get("transition_in", "cut"),
            filters=tuple(data.get("filters", ())),
            asset_url=data.get("asset_url"),
        )


@dataclass(frozen=True)
class AudioSegment:
    """An audio track laid under the timeline"""
    track_id: str
    kind: AudioTrackKind
    start_ms: int
    end_ms: int
    volume: float = 1.0
    fade_in_ms: int = 0
    fade_out_ms: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.track_id,
            "kind": self.kind.value,
            "start_ms": self.start_ms,
            "end_ms": self.end_ms,
            "volume": self.volume,
            "fade_in_ms": self.fade_in_ms,
            "fade_out_ms": self.fade_out_ms,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AudioSegment":
        return cls(
            track_id=data["id"],
            kind=AudioTrackKind(data["kind"]),
            start_ms=int(data["start_ms"]),
            end_ms=int(data["end_ms"]),
            volume=float(data.get("volume", 1.0)),
            fade_in_ms=int(data.get("fade_in_ms", 0)),
            fade_out_ms=int(data.get("fade_out_ms", 0)),
        )


@dataclass(frozen=True)
class OutputFormat:
    """Target container and encoding"""
    width: int = 1080
    height: int = 1920
    fps: int = 30
    container: str = "mp4"
    codec: str = "h264"
    video_bitrate_kbps: int = 2500
    audio_bitrate_kbps: int = 128

    @property
    def max_dimension(self) -> int:
        return max(self.width, self.height)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "fps": self.fps,
            "container": self.container,
            "codec": self.codec,
            "video_bitrate_kbps": self.video_bitrate_kbps,
            "audio_bitrate_kbps": self.audio_bitrate_kbps,
        }


@dataclass(frozen=True)
class PlanValidation:
    """Numeric checks computed over the timeline"""
    total_duration_ms: int
    segment_count: int
    audio_track_count: int = 0
    has_gaps: bool = False
    has_overlaps: bool = False
    warnings: tuple = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_duration_ms": self.total_duration_ms,
            "segment_count": self.segment_count,
            "audio_track_count": self.audio_track_count,
            "has_gaps": self.has_gaps,
            "has_overlaps": self.has_overlaps,
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class RenderPlan:
    """Compiled, engine-agnostic render instructions"""
    plan_id: str
    source_video_id: str
    source_url: str
    timeline: tuple  # TimelineSegment values, output order
    audio_tracks: tuple  # AudioSegment values
    output_format: OutputFormat
    validation: PlanValidation
    status: PlanStatus = PlanStatus.COMPILABLE
    uncompilable_reason: Optional[str] = None
    strategy_id: Optional[str] = None
    simplified_from: Optional[str] = None  # plan_id of the original, if simplified
    variation_id: Optional[str] = None  # blueprint variation idea, when compiled from one

    @property
    def is_compilable(self) -> bool:
        return self.status == PlanStatus.COMPILABLE

    @property
    def video_segments(self) -> List[TimelineSegment]:
        return [s for s in self.timeline if s.track == TrackKind.VIDEO]

    @property
    def overlay_segments(self) -> List[TimelineSegment]:
        return [s for s in self.timeline if s.track == TrackKind.OVERLAY]

    def evolve(self, **changes) -> "RenderPlan":
        """Return a new plan with the given fields replaced"""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "plan_id": self.plan_id,
            "source_video_id": self.source_video_id,
            "source_url": self.source_url,
            "status": self.status.value,
            "uncompilable_reason": self.uncompilable_reason,
            "strategy_id": self.strategy_id,
            "simplified_from": self.simplified_from,
            "variation_id": self.variation_id,
            "timeline": [s.to_dict() for s in self.timeline],
            "audio_tracks": [a.to_dict() for a in self.audio_tracks],
            "output_format": self.output_format.to_dict(),
            "validation": self.validation.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RenderPlan":
        """Lossless inverse of to_dict"""
        validation = data.get("validation", {})
        return cls(
            plan_id=data["plan_id"],
            source_video_id=data["source_video_id"],
            source_url=data["source_url"],
            timeline=tuple(TimelineSegment.from_dict(s) for s in data["timeline"]),
            audio_tracks=tuple(AudioSegment.from_dict(a) for a in data.get("audio_tracks", [])),
            output_format=OutputFormat(**data.get("output_format", {})),
            validation=PlanValidation(
                total_duration_ms=int(validation.get("total_duration_ms", 0)),
                segment_count=int(validation.get("segment_count", 0)),
                audio_track_count=int(validation.get("audio_track_count", 0)),
                has_gaps=bool(validation.get("has_gaps", False)),
                has_overlaps=bool(validation.get("has_overlaps", False)),
                warnings=tuple(validation.get("warnings", ())),
            ),
            status=PlanStatus(data.get("status", "compilable")),
            uncompilable_reason=data.get("uncompilable_reason"),
            strategy_id=data.get("strategy_id"),
            simplified_from=data.get("simplified_from"),
            variation_id=data.get("variation_id"),
        )
