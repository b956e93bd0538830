"""Mock render engine for testing without real backends"""

import asyncio
from typing import Dict, List, Optional, Union

from creative.models.engine import (
    CostTier,
    EngineCapabilities,
    EngineDescriptor,
    EngineLocation,
    Resolution,
)
from creative.models.render_plan import RenderPlan
from .base import EngineErrorCode, EngineResult, EngineStatus, ProgressCallback, RenderEngine

Outcome = Union[EngineResult, Exception]


def mock_descriptor(engine_id: str = "mock-engine", **overrides) -> EngineDescriptor:
    """Descriptor with permissive capabilities, handy for tests and --mock runs"""
    fields = dict(
        engine_id=engine_id,
        name=f"Mock {engine_id}",
        location=EngineLocation.LOCAL,
        capabilities=EngineCapabilities(
            max_resolution=Resolution.UHD,
            max_duration_sec=600,
            supports_filters=True,
            supports_audio_tracks=True,
            supports_speed_change=True,
            supports_overlays=True,
            supports_transitions=True,
        ),
        cost_tier=CostTier.FREE,
        reliability=0.9,
    )
    fields.update(overrides)
    return EngineDescriptor(**fields)


class MockRenderEngine(RenderEngine):
    """
    Mock engine that simulates rendering with a short delay.

    Used for:
    - Scripting failures to drive the degradation ladder in tests
    - Running the CLI and API without ffmpeg or network access

    outcomes is consumed one entry per execute() call; once exhausted every
    call succeeds. An Exception entry is raised from execute().
    """

    def __init__(
        self,
        descriptor: Optional[EngineDescriptor] = None,
        outcomes: Optional[List[Outcome]] = None,
        delay: float = 0.0,
        queued_polls: int = 0,
    ):
        super().__init__(descriptor or mock_descriptor())
        self.outcomes = list(outcomes or [])
        self.delay = delay
        self.queued_polls = queued_polls
        self.calls: List[str] = []
        self.status_checks = 0
        self.jobs: Dict[str, Dict[str, int]] = {}

    async def execute(
        self,
        plan: RenderPlan,
        source_url: Optional[str] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> EngineResult:
        self.calls.append(plan.plan_id)
        if progress:
            progress(0)

        if self.delay:
            await asyncio.sleep(self.delay)

        if self.outcomes:
            outcome = self.outcomes.pop(0)
            if isinstance(outcome, Exception):
                raise outcome
            if outcome.status != EngineStatus.QUEUED:
                return outcome

        output_ref = f"mock://renders/{self.engine_id}/{plan.plan_id}.mp4"
        if self.queued_polls:
            job_ref = f"{self.engine_id}_job_{len(self.calls)}"
            self.jobs[job_ref] = {"remaining": self.queued_polls}
            return EngineResult.queued(job_ref, output_ref=output_ref)

        if progress:
            progress(100)
        return EngineResult.completed(output_ref, engine=self.engine_id)

    async def check_status(self, job_ref: str) -> EngineResult:
        self.status_checks += 1
        job = self.jobs.get(job_ref)
        if job is None:
            return EngineResult.failed(EngineErrorCode.ENGINE_ERROR, f"Unknown job {job_ref}")
        job["remaining"] -= 1
        if job["remaining"] > 0:
            return EngineResult.queued(job_ref)
        return EngineResult.completed(f"mock://renders/{job_ref}.mp4", engine=self.engine_id)
