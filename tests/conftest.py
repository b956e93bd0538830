"""Shared pytest fixtures"""

import pytest

from creative.engines import MockRenderEngine
from creative.routing import CapabilityRegistry, ExecutionRouter
from tests.mocks.fixtures import (
    make_descriptor,
    make_healthy_video,
    make_plan,
    make_video,
)


# ============================================================
# Test Data Fixtures
# ============================================================

@pytest.fixture
def sample_video():
    """Weak hook, weak CTA, no proof"""
    return make_video()


@pytest.fixture
def healthy_video():
    """Ad with nothing worth fixing"""
    return make_healthy_video()


@pytest.fixture
def sample_plan():
    """Two-segment 1080p plan"""
    return make_plan()


# ============================================================
# Routing Fixtures
# ============================================================

@pytest.fixture
def two_engine_registry():
    """engine-a is preferred by score, engine-b is the backup"""
    return CapabilityRegistry(
        [
            make_descriptor("engine-a", reliability=0.95),
            make_descriptor("engine-b", reliability=0.80),
        ],
        version="test",
    )


@pytest.fixture
def make_router():
    """Build a router over mock engines with instant polling"""
    def _make(registry, engines, **kwargs):
        kwargs.setdefault("poll_interval_sec", 0.0)
        kwargs.setdefault("poll_max_attempts", 5)
        return ExecutionRouter(registry, engines, **kwargs)
    return _make


@pytest.fixture
def mock_pool():
    """One well-behaved mock engine per registry entry"""
    def _pool(registry):
        return {d.engine_id: MockRenderEngine(d) for d in registry}
    return _pool


# ============================================================
# Markers Configuration
# ============================================================

def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks integration tests"
    )
