"""
HTTP render engine

Generic adapter for render services that accept a serialized plan and
report status by job id:

    POST {endpoint}/render          -> {"status": "...", "job_id": ..., "output_url": ...}
    GET  {endpoint}/render/{job_id} -> same shape
"""

import logging
from typing import Any, Dict, Optional

import httpx

from creative.models.engine import EngineDescriptor
from creative.models.render_plan import RenderPlan
from .base import EngineErrorCode, EngineResult, ProgressCallback, RenderEngine

logger = logging.getLogger(__name__)


class HttpRenderEngine(RenderEngine):
    """Render plans on a remote service over HTTP"""

    def __init__(
        self,
        descriptor: EngineDescriptor,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(descriptor)
        if not descriptor.endpoint:
            raise ValueError(f"Engine '{descriptor.engine_id}' has no endpoint configured")

        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self.client = client or httpx.AsyncClient(
            base_url=descriptor.endpoint.rstrip("/"),
            headers=headers,
            timeout=timeout,
        )

    def _to_result(self, payload: Dict[str, Any]) -> EngineResult:
        status = payload.get("status", "")
        if status in ("completed", "succeeded", "done"):
            output = payload.get("output_url") or payload.get("output")
            if not output:
                return EngineResult.failed(
                    EngineErrorCode.INVALID_OUTPUT, "Service reported completion without an output URL"
                )
            return EngineResult.completed(output, engine=self.engine_id)
        if status in ("queued", "processing", "running", "pending"):
            job_id = payload.get("job_id")
            if not job_id:
                return EngineResult.failed(
                    EngineErrorCode.ENGINE_ERROR, "Service queued the render without a job id"
                )
            return EngineResult.queued(str(job_id), progress=payload.get("progress"))
        return EngineResult.failed(
            EngineErrorCode.ENGINE_ERROR,
            payload.get("error") or f"Unexpected status '{status}'",
        )

    def _from_http_error(self, error: httpx.HTTPError) -> EngineResult:
        if isinstance(error, httpx.TimeoutException):
            return EngineResult.failed(EngineErrorCode.TIMEOUT, f"{self.engine_id}: {error}")
        if isinstance(error, httpx.TransportError):
            return EngineResult.failed(EngineErrorCode.NETWORK, f"{self.engine_id}: {error}")
        if isinstance(error, httpx.HTTPStatusError):
            code = error.response.status_code
            kind = EngineErrorCode.TRANSIENT if code >= 500 or code == 429 else EngineErrorCode.ENGINE_ERROR
            return EngineResult.failed(kind, f"{self.engine_id}: HTTP {code}")
        return EngineResult.failed(EngineErrorCode.ENGINE_ERROR, f"{self.engine_id}: {error}")

    async def execute(
        self,
        plan: RenderPlan,
        source_url: Optional[str] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> EngineResult:
        body = {"source_url": source_url or plan.source_url, "plan": plan.to_dict()}
        if progress:
            progress(0)
        try:
            response = await self.client.post("/render", json=body)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(f"{self.engine_id} submit failed: {e}")
            return self._from_http_error(e)

        result = self._to_result(response.json())
        if result.success and progress:
            progress(100)
        return result

    async def check_status(self, job_ref: str) -> EngineResult:
        try:
            response = await self.client.get(f"/render/{job_ref}")
            response.raise_for_status()
        except httpx.HTTPError as e:
            return self._from_http_error(e)
        return self._to_result(response.json())

    async def aclose(self) -> None:
        await self.client.aclose()
