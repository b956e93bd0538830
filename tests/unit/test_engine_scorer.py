"""Tests for capability extraction and engine ranking"""

import pytest

from creative.models.engine import CostTier, EngineLocation, Resolution
from creative.models.render_plan import AudioSegment, AudioTrackKind
from creative.models.route import RouteConstraints
from creative.routing.capabilities import extract_required_capabilities
from creative.routing.engine_scorer import capability_gaps, cost_score, rank_engines, select_engine
from creative.routing.registry import CapabilityRegistry
from tests.mocks.fixtures import (
    make_4k_overlay_plan,
    make_descriptor,
    make_plan,
    make_timeline_segment,
)


class TestRequiredCapabilities:
    """Tests for extract_required_capabilities()"""

    def test_basic_plan(self, sample_plan):
        required = extract_required_capabilities(sample_plan)

        assert required.resolution == Resolution.FULL_HD
        assert required.duration_sec == 10
        assert not required.needs_speed_change
        assert not required.needs_overlays
        assert not required.needs_audio_tracks

    def test_4k_overlay(self):
        required = extract_required_capabilities(make_4k_overlay_plan())
        assert required.resolution == Resolution.UHD
        assert required.needs_overlays

    def test_feature_flags(self):
        plan = make_plan(
            timeline=[
                make_timeline_segment(0, 0, 3000, 0, speed=1.5, filters=("eq",)),
                make_timeline_segment(1, 3000, 6000, 2000, transition_in="fade"),
            ],
            audio_tracks=(AudioSegment("vo", AudioTrackKind.VOICEOVER, 0, 5000),),
        )
        required = extract_required_capabilities(plan)

        assert required.needs_speed_change
        assert required.needs_filters
        assert required.needs_transitions
        assert required.needs_audio_tracks

    def test_duration_rounds_up(self):
        plan = make_plan(timeline=[make_timeline_segment(0, 0, 10_001, 0)])
        assert extract_required_capabilities(plan).duration_sec == 11


class TestRankEngines:
    """Tests for rank_engines()"""

    def test_cost_score(self):
        assert cost_score(CostTier.FREE) == 1.0
        assert cost_score(CostTier.HIGH) == 0.25

    def test_weighted_score(self, sample_plan):
        registry = CapabilityRegistry([make_descriptor("a", reliability=0.9)])
        best = select_engine(registry, extract_required_capabilities(sample_plan))
        assert best.score == pytest.approx(0.4 + 0.36 + 0.2)

    def test_resolution_gap(self):
        required = extract_required_capabilities(make_4k_overlay_plan())
        gaps = capability_gaps(make_descriptor(max_resolution=Resolution.FULL_HD), required)
        assert any("resolution 4k" in g for g in gaps)

    def test_incompatible_engines_rejected_with_reason(self):
        registry = CapabilityRegistry([
            make_descriptor("no-4k", max_resolution=Resolution.FULL_HD),
            make_descriptor("no-overlay", max_resolution=Resolution.UHD, supports_overlays=False),
        ])
        ranking = rank_engines(registry, extract_required_capabilities(make_4k_overlay_plan()))

        assert ranking.best is None
        reasons = {r.engine_id: r.reason for r in ranking.rejections}
        assert "resolution" in reasons["no-4k"]
        assert "overlays" in reasons["no-overlay"]

    def test_constraints(self, sample_plan):
        registry = CapabilityRegistry([
            make_descriptor("local-free"),
            make_descriptor("cloud-high", cost_tier=CostTier.HIGH, location=EngineLocation.CLOUD),
            make_descriptor("down", available=False),
        ])
        required = extract_required_capabilities(sample_plan)

        cheap = rank_engines(registry, required, RouteConstraints(max_cost_tier=CostTier.LOW))
        assert [s.engine.engine_id for s in cheap.scores] == ["local-free"]

        cloud = rank_engines(registry, required, RouteConstraints(location=EngineLocation.CLOUD))
        assert [s.engine.engine_id for s in cloud.scores] == ["cloud-high"]

        reasons = {r.engine_id: r.reason for r in cheap.rejections}
        assert reasons["down"] == "unavailable"

    def test_exclusions(self, sample_plan, two_engine_registry):
        required = extract_required_capabilities(sample_plan)
        ranking = rank_engines(
            two_engine_registry, required, RouteConstraints(excluded_engines=frozenset({"engine-a"}))
        )
        assert [s.engine.engine_id for s in ranking.scores] == ["engine-b"]

        ranking = rank_engines(two_engine_registry, required, exclude=frozenset({"engine-b"}))
        assert [s.engine.engine_id for s in ranking.scores] == ["engine-a"]

    def test_ties_keep_registry_order(self, sample_plan):
        registry = CapabilityRegistry([make_descriptor("first"), make_descriptor("second")])
        ranking = rank_engines(registry, extract_required_capabilities(sample_plan))
        assert [s.engine.engine_id for s in ranking.scores] == ["first", "second"]

    def test_preferred_engine_wins_ties(self, sample_plan):
        registry = CapabilityRegistry([make_descriptor("first"), make_descriptor("second")])
        ranking = rank_engines(
            registry,
            extract_required_capabilities(sample_plan),
            RouteConstraints(preferred_engine_id="second"),
        )
        assert ranking.best.engine.engine_id == "second"

    def test_empty_registry(self, sample_plan):
        ranking = rank_engines(CapabilityRegistry([]), extract_required_capabilities(sample_plan))
        assert ranking.best is None
        assert ranking.rejections == []
