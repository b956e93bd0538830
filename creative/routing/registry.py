"""
Capability registry

Read-only catalog of rendering engines, loaded once per process from a
versioned JSON document and passed explicitly to the router. Request
handling never mutates it.
"""

import json
import logging
from pathlib import Path
from typing import Callable, Iterator, List, Literal, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from creative.models.engine import (
    AdapterKind,
    CostTier,
    EngineCapabilities,
    EngineDescriptor,
    EngineLocation,
    Resolution,
)

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_PATH = Path(__file__).parent / "default_registry.json"


class RegistryError(Exception):
    """Raised when a registry document is missing or malformed."""
    pass


class CapabilitiesDocument(BaseModel):
    max_resolution: Literal["480p", "720p", "1080p", "4k"]
    max_duration_sec: int = Field(..., gt=0)
    supports_filters: bool = False
    supports_audio_tracks: bool = False
    supports_speed_change: bool = False
    supports_overlays: bool = False
    supports_transitions: bool = False
    supports_ai_generation: bool = False


class EngineDocument(BaseModel):
    engine_id: str = Field(..., min_length=1)
    name: str
    location: Literal["local", "server", "cloud"]
    capabilities: CapabilitiesDocument
    cost_tier: Literal["free", "low", "medium", "high"]
    reliability: float = Field(..., ge=0, le=1)
    available: bool = True
    cold_start_ms: int = Field(0, ge=0)
    adapter: Literal["mock", "ffmpeg", "http"] = "mock"
    endpoint: Optional[str] = None

    def to_descriptor(self) -> EngineDescriptor:
        caps = self.capabilities
        return EngineDescriptor(
            engine_id=self.engine_id,
            name=self.name,
            location=EngineLocation(self.location),
            capabilities=EngineCapabilities(
                max_resolution=Resolution(caps.max_resolution),
                max_duration_sec=caps.max_duration_sec,
                supports_filters=caps.supports_filters,
                supports_audio_tracks=caps.supports_audio_tracks,
                supports_speed_change=caps.supports_speed_change,
                supports_overlays=caps.supports_overlays,
                supports_transitions=caps.supports_transitions,
                supports_ai_generation=caps.supports_ai_generation,
            ),
            cost_tier=CostTier(self.cost_tier),
            reliability=self.reliability,
            available=self.available,
            cold_start_ms=self.cold_start_ms,
            adapter=AdapterKind(self.adapter),
            endpoint=self.endpoint,
        )


class RegistryDocument(BaseModel):
    """Versioned registry configuration document"""
    version: str
    engines: List[EngineDocument]

    @field_validator("engines")
    @classmethod
    def unique_ids(cls, engines: List[EngineDocument]) -> List[EngineDocument]:
        seen = set()
        for engine in engines:
            if engine.engine_id in seen:
                raise ValueError(f"duplicate engine_id '{engine.engine_id}'")
            seen.add(engine.engine_id)
        return engines


class CapabilityRegistry:
    """
    Immutable, ordered collection of engine descriptors.

    Order is significant: the engine scorer breaks ties by registry order.
    """

    def __init__(self, engines, version: str = "unversioned"):
        self._engines = tuple(engines)
        self._by_id = {e.engine_id: e for e in self._engines}
        self.version = version

    def __len__(self) -> int:
        return len(self._engines)

    def __iter__(self) -> Iterator[EngineDescriptor]:
        return iter(self._engines)

    def __contains__(self, engine_id: str) -> bool:
        return engine_id in self._by_id

    def get(self, engine_id: str) -> Optional[EngineDescriptor]:
        return self._by_id.get(engine_id)

    def all(self) -> List[EngineDescriptor]:
        return list(self._engines)

    def available(self) -> List[EngineDescriptor]:
        return [e for e in self._engines if e.available]

    def filter(self, predicate: Callable[[EngineDescriptor], bool]) -> List[EngineDescriptor]:
        return [e for e in self._engines if predicate(e)]

    def index_of(self, engine_id: str) -> int:
        for i, engine in enumerate(self._engines):
            if engine.engine_id == engine_id:
                return i
        return len(self._engines)

    def __repr__(self) -> str:
        return f"CapabilityRegistry(version={self.version!r}, engines={len(self._engines)})"

    @classmethod
    def from_document(cls, data: dict) -> "CapabilityRegistry":
        try:
            document = RegistryDocument.model_validate(data)
        except ValidationError as e:
            raise RegistryError(f"Invalid registry document: {e}") from e
        return cls(
            (engine.to_descriptor() for engine in document.engines),
            version=document.version,
        )


def load_registry(path: Optional[Union[str, Path]] = None) -> CapabilityRegistry:
    """
    Load a registry document from disk.

    Args:
        path: JSON document path; the packaged default when omitted

    Raises:
        RegistryError: If the file is missing, not JSON, or fails validation
    """
    path = Path(path) if path else DEFAULT_REGISTRY_PATH
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise RegistryError(f"Registry file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise RegistryError(f"Registry file is not valid JSON: {path}: {e}") from e

    registry = CapabilityRegistry.from_document(data)
    logger.info(f"Loaded registry {registry.version} with {len(registry)} engines from {path}")
    return registry
