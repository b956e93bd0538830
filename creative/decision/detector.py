"""
Problem detection

Turns aggregate analysis signals into a ranked list of DetectedProblem
values. Detection is a pure function of the AnalyzedVideo.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from creative.models.analysis import AnalyzedVideo, SegmentType
from creative.models.strategy import DetectedProblem, ProblemType

logger = logging.getLogger(__name__)


NO_ACTION_THRESHOLD = 0.3
SIGNIFICANCE_THRESHOLD = 0.4
MAX_PROBLEMS = 4

HOOK_SCORE_THRESHOLD = 70
CTA_STRENGTH_THRESHOLD = 0.5
CLARITY_THRESHOLD = 60
BENEFIT_CLARITY_THRESHOLD = 0.5
OBJECTION_HANDLING_THRESHOLD = 0.4
ATTENTION_EARLY_THRESHOLD = 0.5
ATTENTION_LATE_RATIO = 0.7
ATTENTION_VARIANCE_THRESHOLD = 0.15
MAX_GOOD_DURATION_SEC = 45
MIN_GOOD_DURATION_SEC = 8

PROOF_MISSING_SEVERITY = 0.55
MID_PACING_DROP_SEVERITY = 0.65
BENEFIT_UNCLEAR_SEVERITY = 0.6
OBJECTION_SEVERITY = 0.5
ATTENTION_LATE_SEVERITY = 0.5


@dataclass(frozen=True)
class DetectionReport:
    """
    Result of problem detection.

    all_problems is every detected problem sorted by severity. problems is
    the significant subset passed on to candidate generation.
    """
    all_problems: tuple
    problems: tuple
    max_severity: float

    @property
    def no_action(self) -> bool:
        return self.max_severity < NO_ACTION_THRESHOLD


def _first_segment_id(video: AnalyzedVideo, segment_type: SegmentType) -> Optional[str]:
    segment = video.first_of_type(segment_type)
    return segment.segment_id if segment else None


def _variance(values) -> float:
    mean = sum(values) / len(values)
    return sum((v - mean) ** 2 for v in values) / len(values)


def _check_attention_curve(curve, found: List[DetectedProblem]) -> None:
    if len(curve) < 3:
        return

    first = curve[0]
    mid = curve[len(curve) // 2]
    last = curve[-1]

    if first < ATTENTION_EARLY_THRESHOLD:
        found.append(DetectedProblem(
            problem_type=ProblemType.ATTENTION_DROP_EARLY,
            severity=1 - first,
            detail=f"Attention starts at {first:.2f}, viewers are lost in the opening",
        ))

    if last < mid * ATTENTION_LATE_RATIO:
        found.append(DetectedProblem(
            problem_type=ProblemType.ATTENTION_DROP_LATE,
            severity=ATTENTION_LATE_SEVERITY,
            detail=f"Attention falls from {mid:.2f} to {last:.2f} before the end",
        ))

    variance = _variance(curve)
    if variance > ATTENTION_VARIANCE_THRESHOLD:
        found.append(DetectedProblem(
            problem_type=ProblemType.PACING_INCONSISTENT,
            severity=min(1.0, variance * 2),
            detail=f"Attention curve variance {variance:.2f} indicates uneven pacing",
        ))


def detect_problems(video: AnalyzedVideo) -> DetectionReport:
    """
    Detect problems in an analyzed video.

    Args:
        video: The analysis to inspect

    Returns:
        DetectionReport with problems sorted by descending severity
    """
    scores = video.scores
    found: List[DetectedProblem] = []

    if scores.hook_score < HOOK_SCORE_THRESHOLD:
        found.append(DetectedProblem(
            problem_type=ProblemType.HOOK_WEAK,
            severity=1 - scores.hook_score / 100,
            segment_id=_first_segment_id(video, SegmentType.HOOK),
            detail=f"Hook score {scores.hook_score:.0f}/100 is below {HOOK_SCORE_THRESHOLD}",
        ))

    if scores.pacing_drop_mid:
        found.append(DetectedProblem(
            problem_type=ProblemType.MID_PACING_DROP,
            severity=MID_PACING_DROP_SEVERITY,
            detail="Pacing drops in the middle of the ad",
        ))

    if scores.cta_strength < CTA_STRENGTH_THRESHOLD:
        found.append(DetectedProblem(
            problem_type=ProblemType.CTA_WEAK,
            severity=1 - scores.cta_strength,
            segment_id=_first_segment_id(video, SegmentType.CTA),
            detail=f"CTA strength {scores.cta_strength:.2f} is below {CTA_STRENGTH_THRESHOLD}",
        ))

    if not scores.proof_present:
        found.append(DetectedProblem(
            problem_type=ProblemType.PROOF_MISSING,
            severity=PROOF_MISSING_SEVERITY,
            detail="No social proof or demonstration found",
        ))

    if scores.clarity_score < CLARITY_THRESHOLD:
        found.append(DetectedProblem(
            problem_type=ProblemType.CLARITY_LOW,
            severity=1 - scores.clarity_score / 100,
            detail=f"Message clarity {scores.clarity_score:.0f}/100 is below {CLARITY_THRESHOLD}",
        ))

    benefit_clarity = scores.benefit_clarity if scores.benefit_clarity is not None else 0.5
    if benefit_clarity < BENEFIT_CLARITY_THRESHOLD:
        found.append(DetectedProblem(
            problem_type=ProblemType.BENEFIT_UNCLEAR,
            severity=BENEFIT_UNCLEAR_SEVERITY,
            segment_id=_first_segment_id(video, SegmentType.BENEFIT),
            detail="The core benefit is not communicated clearly",
        ))

    if scores.objection_handling is not None and scores.objection_handling < OBJECTION_HANDLING_THRESHOLD:
        found.append(DetectedProblem(
            problem_type=ProblemType.OBJECTION_UNHANDLED,
            severity=OBJECTION_SEVERITY,
            detail="Likely viewer objections are never addressed",
        ))

    _check_attention_curve(scores.attention_curve, found)

    duration = video.duration_sec
    if duration > MAX_GOOD_DURATION_SEC:
        found.append(DetectedProblem(
            problem_type=ProblemType.DURATION_TOO_LONG,
            severity=min(1.0, (duration - MAX_GOOD_DURATION_SEC) / 30),
            detail=f"{duration:.0f}s is longer than {MAX_GOOD_DURATION_SEC}s",
        ))
    elif duration < MIN_GOOD_DURATION_SEC:
        found.append(DetectedProblem(
            problem_type=ProblemType.DURATION_TOO_SHORT,
            severity=min(1.0, (MIN_GOOD_DURATION_SEC - duration) / 5),
            detail=f"{duration:.1f}s is shorter than {MIN_GOOD_DURATION_SEC}s",
        ))

    # stable sort keeps detection order on equal severity
    ranked = tuple(sorted(found, key=lambda p: p.severity, reverse=True))
    max_severity = ranked[0].severity if ranked else 0.0
    significant = tuple(
        p for p in ranked if p.severity >= SIGNIFICANCE_THRESHOLD
    )[:MAX_PROBLEMS]

    logger.debug(
        f"Detected {len(ranked)} problems ({len(significant)} significant), "
        f"max severity {max_severity:.2f}"
    )
    return DetectionReport(all_problems=ranked, problems=significant, max_severity=max_severity)
