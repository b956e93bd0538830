"""
Engine descriptor models

Describes what a rendering engine can do, what it costs and how reliable
it is. Descriptors are loaded from the registry document and never
mutated while requests are being served.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional
from enum import Enum


class Resolution(Enum):
    """Resolution buckets, ordered low to high"""
    SD = "480p"
    HD = "720p"
    FULL_HD = "1080p"
    UHD = "4k"

    @property
    def rank(self) -> int:
        return list(Resolution).index(self)

    @classmethod
    def from_dimension(cls, max_dimension: int) -> "Resolution":
        if max_dimension <= 640:
            return cls.SD
        if max_dimension <= 1280:
            return cls.HD
        if max_dimension <= 1920:
            return cls.FULL_HD
        return cls.UHD


class CostTier(Enum):
    """Cost tiers, ordered cheap to expensive"""
    FREE = "free"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return list(CostTier).index(self)


class EngineLocation(Enum):
    LOCAL = "local"
    SERVER = "server"
    CLOUD = "cloud"


class AdapterKind(Enum):
    """Which adapter class executes plans for an engine"""
    MOCK = "mock"
    FFMPEG = "ffmpeg"
    HTTP = "http"


@dataclass(frozen=True)
class EngineCapabilities:
    """Hard limits and feature flags of an engine"""
    max_resolution: Resolution
    max_duration_sec: int
    supports_filters: bool = False
    supports_audio_tracks: bool = False
    supports_speed_change: bool = False
    supports_overlays: bool = False
    supports_transitions: bool = False
    supports_ai_generation: bool = False


@dataclass(frozen=True)
class EngineDescriptor:
    """One registry entry"""
    engine_id: str
    name: str
    location: EngineLocation
    capabilities: EngineCapabilities
    cost_tier: CostTier
    reliability: float  # 0-1
    available: bool = True
    cold_start_ms: int = 0
    adapter: AdapterKind = AdapterKind.MOCK
    endpoint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        caps = self.capabilities
        return {
            "engine_id": self.engine_id,
            "name": self.name,
            "location": self.location.value,
            "capabilities": {
                "max_resolution": caps.max_resolution.value,
                "max_duration_sec": caps.max_duration_sec,
                "supports_filters": caps.supports_filters,
                "supports_audio_tracks": caps.supports_audio_tracks,
                "supports_speed_change": caps.supports_speed_change,
                "supports_overlays": caps.supports_overlays,
                "supports_transitions": caps.supports_transitions,
                "supports_ai_generation": caps.supports_ai_generation,
            },
            "cost_tier": self.cost_tier.value,
            "reliability": self.reliability,
            "available": self.available,
            "cold_start_ms": self.cold_start_ms,
            "adapter": self.adapter.value,
            "endpoint": self.endpoint,
        }


@dataclass(frozen=True)
class RequiredCapabilities:
    """What a render plan needs from an engine"""
    resolution: Resolution
    duration_sec: int
    needs_filters: bool = False
    needs_audio_tracks: bool = False
    needs_speed_change: bool = False
    needs_overlays: bool = False
    needs_transitions: bool = False
    needs_ai_generation: bool = False


@dataclass(frozen=True)
class EngineScore:
    """Ranking of one compatible engine against a plan"""
    engine: EngineDescriptor
    score: float
    capability_match: float
    reliability: float
    cost_score: float


@dataclass(frozen=True)
class EngineRejection:
    """Why an engine was not considered"""
    engine_id: str
    reason: str
