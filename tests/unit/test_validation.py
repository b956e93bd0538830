"""Tests for upstream document validation"""

import pytest

from creative.models.analysis import AspectRatio, BlueprintFramework, SegmentType, VariationAction
from creative.models.strategy import ActionKind, Framework, OptimizationGoal, RiskTolerance
from creative.validation import (
    InputValidationError,
    parse_analyzed_video,
    parse_blueprint,
    parse_decision_request,
    parse_render_plan,
)
from tests.mocks.fixtures import make_plan, make_video, make_video_document


def blueprint_document(**overrides):
    document = {
        "blueprint_id": "bp_1",
        "framework": "PAS",
        "objective": "ctr",
        "variation_ideas": [
            {
                "id": "idea_1",
                "action": "compress_timing",
                "target_segment_type": "solution",
                "intent": "Get to the point faster",
                "priority": 2,
            }
        ],
    }
    document.update(overrides)
    return document


def error_paths(excinfo):
    return [e["path"] for e in excinfo.value.errors]


class TestParseAnalyzedVideo:
    """Tests for parse_analyzed_video()"""

    def test_valid_document(self):
        video = parse_analyzed_video(make_video_document())

        assert video == make_video()
        assert video.aspect_ratio == AspectRatio.VERTICAL
        assert video.segments[0].segment_type == SegmentType.HOOK

    def test_not_an_object(self):
        with pytest.raises(InputValidationError) as excinfo:
            parse_analyzed_video(["not", "a", "dict"])
        assert error_paths(excinfo) == ["<root>"]

    def test_all_errors_reported(self):
        document = make_video_document()
        document["scores"]["hook_score"] = 150
        document["scores"]["cta_strength"] = -1
        with pytest.raises(InputValidationError) as excinfo:
            parse_analyzed_video(document)

        paths = error_paths(excinfo)
        assert "scores.hook_score" in paths
        assert "scores.cta_strength" in paths
        assert excinfo.value.document == "analysis"

    def test_overlapping_segments_rejected(self):
        document = make_video_document()
        document["segments"][1]["start_ms"] = 2000
        with pytest.raises(InputValidationError, match="before the previous segment ends"):
            parse_analyzed_video(document)

    def test_duplicate_segment_ids_rejected(self):
        document = make_video_document()
        document["segments"][1]["id"] = "h1"
        with pytest.raises(InputValidationError, match="duplicate segment id"):
            parse_analyzed_video(document)

    def test_segments_past_duration_rejected(self):
        with pytest.raises(InputValidationError, match="past duration"):
            parse_analyzed_video(make_video_document(duration_ms=20000))

    def test_empty_segment_rejected(self):
        document = make_video_document()
        document["segments"][0]["end_ms"] = 0
        with pytest.raises(InputValidationError):
            parse_analyzed_video(document)

    def test_unknown_segment_type(self):
        document = make_video_document()
        document["segments"][0]["type"] = "intro"
        with pytest.raises(InputValidationError) as excinfo:
            parse_analyzed_video(document)
        assert "segments.0.type" in error_paths(excinfo)

    def test_error_serializes(self):
        with pytest.raises(InputValidationError) as excinfo:
            parse_analyzed_video({})
        data = excinfo.value.to_dict()
        assert data["document"] == "analysis"
        assert data["errors"]


class TestParseBlueprint:
    """Tests for parse_blueprint()"""

    def test_valid(self):
        blueprint = parse_blueprint(blueprint_document())

        assert blueprint.framework == BlueprintFramework.PAS
        assert blueprint.variation_ideas[0].action == VariationAction.COMPRESS_TIMING

    def test_four_ps_label(self):
        assert parse_blueprint(blueprint_document(framework="4Ps")).framework == BlueprintFramework.FOUR_PS

    def test_needs_variation_ideas(self):
        with pytest.raises(InputValidationError) as excinfo:
            parse_blueprint(blueprint_document(variation_ideas=[]))
        assert excinfo.value.document == "blueprint"


class TestParseDecisionRequest:
    """Tests for parse_decision_request()"""

    def test_defaults(self):
        request = parse_decision_request(None)
        assert request.goal == OptimizationGoal.RETENTION
        assert request.risk_tolerance == RiskTolerance.MEDIUM
        assert request.max_strategies == 3

    def test_full_request(self):
        request = parse_decision_request({
            "goal": "conversions",
            "risk_tolerance": "high",
            "forbidden_actions": ["reorder"],
            "history": [{"framework": "BAB", "was_downloaded": True}],
        })
        assert request.goal == OptimizationGoal.CONVERSIONS
        assert request.forbidden_actions == [ActionKind.REORDER]
        assert request.last_framework == Framework.BAB

    def test_unknown_action(self):
        with pytest.raises(InputValidationError):
            parse_decision_request({"forbidden_actions": ["explode"]})


class TestParseRenderPlan:
    """Tests for parse_render_plan()"""

    def test_valid_plan(self):
        plan = make_plan()
        assert parse_render_plan(plan.to_dict()) == plan

    def test_null_timeline(self):
        document = make_plan().to_dict()
        document["timeline"] = None
        with pytest.raises(InputValidationError) as excinfo:
            parse_render_plan(document)

        assert excinfo.value.document == "render plan"
        assert error_paths(excinfo) == ["timeline"]

    def test_unknown_output_format_key(self):
        document = make_plan().to_dict()
        document["output_format"]["bitrate"] = "8M"
        with pytest.raises(InputValidationError) as excinfo:
            parse_render_plan(document)
        assert error_paths(excinfo) == ["output_format.bitrate"]

    def test_missing_identity(self):
        with pytest.raises(InputValidationError) as excinfo:
            parse_render_plan({"hello": "world"})
        assert {"plan_id", "source_video_id", "source_url", "timeline"} <= set(error_paths(excinfo))

    def test_bad_segment_values(self):
        document = make_plan().to_dict()
        document["timeline"][1]["speed"] = 0
        document["timeline"][1]["track"] = "subtitles"
        with pytest.raises(InputValidationError) as excinfo:
            parse_render_plan(document)
        assert error_paths(excinfo) == ["timeline.1.speed", "timeline.1.track"]

    def test_inverted_trim_passes_shape_check(self):
        document = make_plan().to_dict()
        document["timeline"][0]["trim_start_ms"] = 7000
        plan = parse_render_plan(document)
        assert plan.timeline[0].trim_start_ms == 7000
