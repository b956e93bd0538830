"""Tests for plan simplification"""

from creative.models.render_plan import AudioSegment, AudioTrackKind
from creative.routing.simplifier import SIMPLIFIED_WARNING, simplify_plan
from tests.mocks.fixtures import make_4k_overlay_plan, make_plan, make_timeline_segment


class TestSimplifyPlan:
    """Tests for simplify_plan()"""

    def test_removes_overlays_and_downscales(self):
        original = make_4k_overlay_plan()
        result = simplify_plan(original)
        plan = result.plan

        assert plan.overlay_segments == []
        assert (plan.output_format.width, plan.output_format.height) == (1280, 720)
        assert "Removed 1 overlay(s)" in result.removed_features
        assert "Reduced resolution to 720p" in result.removed_features

    def test_original_untouched(self):
        original = make_4k_overlay_plan()
        before = original.to_dict()
        simplify_plan(original)
        assert original.to_dict() == before

    def test_identity_fields(self, sample_plan):
        plan = simplify_plan(sample_plan).plan

        assert plan.plan_id == "plan_test_simplified"
        assert plan.simplified_from == "plan_test"
        assert plan.source_video_id == sample_plan.source_video_id
        assert SIMPLIFIED_WARNING in plan.validation.warnings

    def test_speed_reset_and_repacked(self):
        original = make_plan(timeline=[
            make_timeline_segment(0, 0, 3000, 0, speed=1.5),
            make_timeline_segment(1, 3000, 6000, 2000, speed=0.75),
        ])
        result = simplify_plan(original)
        timeline = result.plan.timeline

        assert all(s.speed == 1.0 for s in timeline)
        assert [(s.timeline_start_ms, s.output_duration_ms) for s in timeline] == [(0, 3000), (3000, 3000)]
        assert result.plan.validation.total_duration_ms == 6000
        assert not result.plan.validation.has_gaps
        assert "Reset 2 speed change(s)" in result.removed_features

    def test_vertical_downscale_keeps_even_dimensions(self):
        plan = simplify_plan(make_plan(width=1080, height=1920)).plan
        assert plan.output_format.height == 1280
        assert plan.output_format.width == 720

    def test_small_plan_keeps_resolution(self):
        result = simplify_plan(make_plan(width=720, height=1280))
        assert result.plan.output_format.width == 720
        assert "Reduced resolution to 720p" not in result.removed_features

    def test_audio_fades_removed(self):
        audio = (AudioSegment("music", AudioTrackKind.MUSIC, 0, 20000, 0.3, 500, 500),)
        result = simplify_plan(make_plan(audio_tracks=audio))
        track = result.plan.audio_tracks[0]

        assert (track.fade_in_ms, track.fade_out_ms) == (0, 0)
        assert track.end_ms == 10000
        assert "Removed audio fades" in result.removed_features
