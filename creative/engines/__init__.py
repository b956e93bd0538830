"""Render engine adapters"""

import logging
from typing import Dict, Optional

from creative.config import Settings, get_settings
from creative.models.engine import AdapterKind
from .base import (
    EngineError,
    EngineErrorCode,
    EngineResult,
    EngineStatus,
    ProgressCallback,
    RenderEngine,
)
from .mock import MockRenderEngine, mock_descriptor
from .ffmpeg_local import FFmpegLocalEngine, FFmpegNotFoundError, find_ffmpeg
from .http_engine import HttpRenderEngine

logger = logging.getLogger(__name__)


def build_engine_pool(registry, settings: Optional[Settings] = None) -> Dict[str, RenderEngine]:
    """
    Create one adapter per registry entry.

    In mock mode every engine gets a MockRenderEngine with its own
    descriptor, so routing decisions stay realistic without side effects.
    Engines whose adapter cannot be built are left out; the router reports
    them as NO_ADAPTER failures.
    """
    settings = settings or get_settings()
    pool: Dict[str, RenderEngine] = {}

    for descriptor in registry:
        if settings.engine_mode == "mock" or descriptor.adapter == AdapterKind.MOCK:
            pool[descriptor.engine_id] = MockRenderEngine(descriptor)
        elif descriptor.adapter == AdapterKind.FFMPEG:
            pool[descriptor.engine_id] = FFmpegLocalEngine(
                descriptor,
                output_dir=settings.render_output_dir,
                ffmpeg_path=settings.ffmpeg_path,
            )
        elif descriptor.adapter == AdapterKind.HTTP:
            try:
                pool[descriptor.engine_id] = HttpRenderEngine(
                    descriptor,
                    api_key=settings.http_engine_api_key or None,
                    timeout=settings.http_engine_timeout_sec,
                )
            except ValueError as e:
                logger.warning(f"Skipping {descriptor.engine_id}: {e}")

    return pool
