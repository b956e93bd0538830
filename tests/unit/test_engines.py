"""Tests for render engine adapters"""

from dataclasses import replace

import httpx
import pytest

from creative.config import Settings
from creative.engines import (
    EngineError,
    EngineErrorCode,
    EngineResult,
    EngineStatus,
    FFmpegLocalEngine,
    FFmpegNotFoundError,
    HttpRenderEngine,
    MockRenderEngine,
    build_engine_pool,
    find_ffmpeg,
)
from creative.routing import load_registry
from tests.mocks.fixtures import make_descriptor


def http_engine(handler, endpoint="https://render.example.com"):
    descriptor = replace(make_descriptor("remote"), endpoint=endpoint)
    client = httpx.AsyncClient(base_url=endpoint, transport=httpx.MockTransport(handler))
    return HttpRenderEngine(descriptor, client=client)


class TestEngineResult:
    """Tests for EngineResult and error codes"""

    def test_transient_codes(self):
        assert EngineErrorCode.TIMEOUT.transient
        assert EngineErrorCode.NETWORK.transient
        assert not EngineErrorCode.ENGINE_ERROR.transient
        assert not EngineErrorCode.NO_ADAPTER.transient

    def test_constructors(self):
        assert EngineResult.completed("out.mp4").success
        assert EngineResult.queued("job_1").status == EngineStatus.QUEUED
        failed = EngineResult.failed(EngineErrorCode.TRANSIENT, "503")
        assert not failed.success
        assert failed.transient

    def test_engine_error_code(self):
        error = EngineError("rate limited", EngineErrorCode.TRANSIENT)
        assert error.transient
        assert str(error) == "rate limited"


class TestMockRenderEngine:
    """Tests for MockRenderEngine"""

    @pytest.mark.asyncio
    async def test_records_calls(self, sample_plan):
        engine = MockRenderEngine()
        result = await engine.execute(sample_plan)

        assert result.success
        assert result.output_ref == "mock://renders/mock-engine/plan_test.mp4"
        assert engine.calls == ["plan_test"]

    @pytest.mark.asyncio
    async def test_scripted_outcomes_then_success(self, sample_plan):
        engine = MockRenderEngine(outcomes=[EngineResult.failed(EngineErrorCode.TRANSIENT, "busy")])
        assert not (await engine.execute(sample_plan)).success
        assert (await engine.execute(sample_plan)).success

    @pytest.mark.asyncio
    async def test_unknown_job(self):
        result = await MockRenderEngine().check_status("nope")
        assert result.error_code == EngineErrorCode.ENGINE_ERROR


class TestHttpRenderEngine:
    """Tests for HttpRenderEngine using httpx.MockTransport"""

    @pytest.mark.asyncio
    async def test_completed_render(self, sample_plan):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["body"] = request.read()
            return httpx.Response(200, json={"status": "completed", "output_url": "https://out/x.mp4"})

        engine = http_engine(handler)
        result = await engine.execute(sample_plan)

        assert result.success
        assert result.output_ref == "https://out/x.mp4"
        assert seen["path"] == "/render"
        assert b"plan_test" in seen["body"]
        await engine.aclose()

    @pytest.mark.asyncio
    async def test_queued_then_polled(self, sample_plan):
        def handler(request):
            if request.method == "POST":
                return httpx.Response(202, json={"status": "queued", "job_id": "j1"})
            assert request.url.path == "/render/j1"
            return httpx.Response(200, json={"status": "done", "output": "https://out/j1.mp4"})

        engine = http_engine(handler)
        queued = await engine.execute(sample_plan)
        assert queued.status == EngineStatus.QUEUED
        assert queued.job_ref == "j1"

        done = await engine.check_status("j1")
        assert done.output_ref == "https://out/j1.mp4"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status,code", [
        (503, EngineErrorCode.TRANSIENT),
        (429, EngineErrorCode.TRANSIENT),
        (400, EngineErrorCode.ENGINE_ERROR),
    ])
    async def test_http_errors_classified(self, sample_plan, status, code):
        engine = http_engine(lambda request: httpx.Response(status, json={}))
        result = await engine.execute(sample_plan)
        assert result.error_code == code

    @pytest.mark.asyncio
    async def test_network_error_is_transient(self, sample_plan):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        result = await http_engine(handler).execute(sample_plan)
        assert result.error_code == EngineErrorCode.NETWORK
        assert result.transient

    @pytest.mark.asyncio
    async def test_completion_without_output(self, sample_plan):
        engine = http_engine(lambda request: httpx.Response(200, json={"status": "completed"}))
        result = await engine.execute(sample_plan)
        assert result.error_code == EngineErrorCode.INVALID_OUTPUT

    def test_requires_endpoint(self):
        with pytest.raises(ValueError, match="no endpoint"):
            HttpRenderEngine(make_descriptor("remote"))


class TestFFmpegLocalEngine:
    """Tests for FFmpegLocalEngine without a real ffmpeg binary"""

    def test_find_ffmpeg_missing(self, monkeypatch):
        monkeypatch.setattr("shutil.which", lambda name: None)
        with pytest.raises(FFmpegNotFoundError):
            find_ffmpeg("/definitely/not/here/ffmpeg")

    @pytest.mark.asyncio
    async def test_not_installed_result(self, sample_plan, monkeypatch, tmp_path):
        monkeypatch.setattr("shutil.which", lambda name: None)
        engine = FFmpegLocalEngine(make_descriptor("ffmpeg-local"), output_dir=str(tmp_path))
        result = await engine.execute(sample_plan)

        assert result.error_code == EngineErrorCode.NOT_INSTALLED
        assert not result.transient


class TestBuildEnginePool:
    """Tests for build_engine_pool()"""

    def test_mock_mode_covers_registry(self):
        registry = load_registry()
        pool = build_engine_pool(registry, Settings(engine_mode="mock"))

        assert set(pool) == {e.engine_id for e in registry}
        assert all(isinstance(e, MockRenderEngine) for e in pool.values())
        assert pool["remotion"].descriptor is registry.get("remotion")

    def test_live_mode_adapters(self):
        registry = load_registry()
        pool = build_engine_pool(registry, Settings(engine_mode="live"))

        assert isinstance(pool["ffmpeg-local"], FFmpegLocalEngine)
        assert isinstance(pool["remotion"], HttpRenderEngine)
