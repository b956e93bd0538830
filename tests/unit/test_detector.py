"""Tests for problem detection"""

import pytest

from creative.decision.detector import (
    MAX_PROBLEMS,
    NO_ACTION_THRESHOLD,
    SIGNIFICANCE_THRESHOLD,
    detect_problems,
)
from creative.models.strategy import ProblemType
from tests.mocks.fixtures import make_healthy_video, make_video


def types(problems):
    return [p.problem_type for p in problems]


class TestDetectProblems:
    """Tests for detect_problems()"""

    def test_weak_hook_cta_and_missing_proof(self, sample_video):
        report = detect_problems(sample_video)

        assert types(report.problems) == [
            ProblemType.CTA_WEAK,
            ProblemType.HOOK_WEAK,
            ProblemType.PROOF_MISSING,
        ]
        assert report.problems[0].severity == pytest.approx(0.7)
        assert report.problems[1].severity == pytest.approx(0.6)
        assert report.max_severity == pytest.approx(0.7)
        assert not report.no_action

    def test_problems_point_at_segments(self, sample_video):
        report = detect_problems(sample_video)
        by_type = {p.problem_type: p for p in report.problems}

        assert by_type[ProblemType.HOOK_WEAK].segment_id == "h1"
        assert by_type[ProblemType.CTA_WEAK].segment_id == "c1"
        assert by_type[ProblemType.PROOF_MISSING].segment_id is None

    def test_healthy_video_needs_no_action(self, healthy_video):
        report = detect_problems(healthy_video)

        assert report.all_problems == ()
        assert report.max_severity == 0.0
        assert report.no_action

    def test_minor_problem_below_no_action_threshold(self):
        # 50s is 5s over the limit: severity 5/30
        video = make_healthy_video(duration_ms=50_000)
        report = detect_problems(video)

        assert types(report.all_problems) == [ProblemType.DURATION_TOO_LONG]
        assert report.max_severity < NO_ACTION_THRESHOLD
        assert report.no_action

    def test_insignificant_problems_filtered(self):
        # hook 65 -> severity 0.35, above no-action but below significance
        video = make_healthy_video(hook_score=65)
        report = detect_problems(video)

        assert types(report.all_problems) == [ProblemType.HOOK_WEAK]
        assert report.all_problems[0].severity < SIGNIFICANCE_THRESHOLD
        assert report.problems == ()
        assert not report.no_action

    def test_capped_at_max_problems(self):
        video = make_video(
            hook_score=10,
            cta_strength=0.1,
            proof_present=False,
            pacing_drop_mid=True,
            clarity_score=20,
            benefit_clarity=0.2,
            objection_handling=0.1,
        )
        report = detect_problems(video)

        assert len(report.all_problems) > MAX_PROBLEMS
        assert len(report.problems) == MAX_PROBLEMS
        severities = [p.severity for p in report.problems]
        assert severities == sorted(severities, reverse=True)

    def test_mid_pacing_drop(self):
        report = detect_problems(make_healthy_video(pacing_drop_mid=True))
        assert types(report.problems) == [ProblemType.MID_PACING_DROP]

    def test_missing_optional_signals_are_neutral(self):
        # benefit_clarity and objection_handling left unset
        report = detect_problems(make_healthy_video())
        assert ProblemType.BENEFIT_UNCLEAR not in types(report.all_problems)
        assert ProblemType.OBJECTION_UNHANDLED not in types(report.all_problems)

    def test_attention_curve_problems(self):
        video = make_healthy_video(attention_curve=(0.3, 0.9, 0.9, 0.9, 0.2))
        found = types(detect_problems(video).all_problems)

        assert ProblemType.ATTENTION_DROP_EARLY in found
        assert ProblemType.ATTENTION_DROP_LATE in found

    def test_short_attention_curve_ignored(self):
        video = make_healthy_video(attention_curve=(0.1, 0.1))
        assert detect_problems(video).all_problems == ()

    def test_too_short(self):
        video = make_healthy_video(duration_ms=4000, segments=())
        report = detect_problems(video)
        assert types(report.all_problems) == [ProblemType.DURATION_TOO_SHORT]
        assert report.all_problems[0].severity == pytest.approx(0.8)

    def test_equal_severity_keeps_detection_order(self):
        # benefit unclear (0.6) and hook 40 (0.6) tie; hook is detected first
        video = make_healthy_video(hook_score=40, benefit_clarity=0.1)
        report = detect_problems(video)
        assert types(report.problems)[:2] == [ProblemType.HOOK_WEAK, ProblemType.BENEFIT_UNCLEAR]

    def test_pure_function(self, sample_video):
        assert detect_problems(sample_video) == detect_problems(sample_video)
