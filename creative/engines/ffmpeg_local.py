"""
Local FFmpeg render engine

Runs the plan through an ffmpeg subprocess. Completes synchronously from
the router's point of view, so check_status is never needed.
"""

import asyncio
import logging
import shutil
import time
from pathlib import Path
from typing import Optional

from creative.ffmpeg_command import build_ffmpeg_args
from creative.models.engine import EngineDescriptor
from creative.models.render_plan import RenderPlan
from .base import EngineErrorCode, EngineResult, ProgressCallback, RenderEngine

logger = logging.getLogger(__name__)


class FFmpegNotFoundError(Exception):
    """Raised when FFmpeg is not installed or not in PATH."""
    pass


def find_ffmpeg(explicit: Optional[str] = None) -> str:
    """
    Locate the ffmpeg binary.

    Raises:
        FFmpegNotFoundError: If it cannot be found
    """
    if explicit and Path(explicit).exists():
        return explicit
    ffmpeg = shutil.which("ffmpeg")
    if ffmpeg:
        return ffmpeg
    raise FFmpegNotFoundError(
        "FFmpeg not found. Install it (https://ffmpeg.org/download.html) "
        "or set CREATIVE_FFMPEG_PATH."
    )


class FFmpegLocalEngine(RenderEngine):
    """Render plans with a local ffmpeg process"""

    def __init__(
        self,
        descriptor: EngineDescriptor,
        output_dir: str = "artifacts/renders",
        ffmpeg_path: Optional[str] = None,
    ):
        super().__init__(descriptor)
        self.output_dir = Path(output_dir)
        self.ffmpeg_path = ffmpeg_path

    async def execute(
        self,
        plan: RenderPlan,
        source_url: Optional[str] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> EngineResult:
        try:
            ffmpeg = find_ffmpeg(self.ffmpeg_path)
        except FFmpegNotFoundError as e:
            return EngineResult.failed(EngineErrorCode.NOT_INSTALLED, str(e))

        self.output_dir.mkdir(parents=True, exist_ok=True)
        output_path = self.output_dir / f"{plan.plan_id}.{plan.output_format.container}"
        cmd = build_ffmpeg_args(plan, source_url or plan.source_url, str(output_path), ffmpeg)
        logger.debug(f"Running: {' '.join(cmd)}")

        if progress:
            progress(0)
        start = time.time()
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE
        )
        try:
            _, stderr = await process.communicate()
        except asyncio.CancelledError:
            # deadline hit; don't leave ffmpeg running
            process.kill()
            await process.wait()
            raise

        if process.returncode != 0:
            tail = stderr.decode(errors="replace").strip().splitlines()[-5:]
            return EngineResult.failed(
                EngineErrorCode.ENGINE_ERROR,
                f"ffmpeg exited with {process.returncode}: {' | '.join(tail)}",
                command=cmd,
            )

        if not output_path.exists() or output_path.stat().st_size == 0:
            return EngineResult.failed(
                EngineErrorCode.INVALID_OUTPUT, f"ffmpeg produced no output at {output_path}"
            )

        if progress:
            progress(100)
        return EngineResult.completed(
            str(output_path),
            render_time=time.time() - start,
            file_size=output_path.stat().st_size,
        )

    async def check_status(self, job_ref: str) -> EngineResult:
        return EngineResult.failed(
            EngineErrorCode.ENGINE_ERROR, "Local ffmpeg renders are not queued"
        )
