"""
Render plan compiler

Pure translation of a chosen StrategyCandidate, or of one blueprint
variation idea, into a RenderPlan: concrete
millisecond trims, speeds and ordering, plus audio tracks and numeric
validation. An action that cannot be resolved makes the whole plan
uncompilable with a reason; actions are never dropped silently.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Tuple, assert_never

from creative.models.analysis import (
    AnalyzedVideo,
    AspectRatio,
    CreativeBlueprint,
    Segment,
    SegmentType,
    VariationAction,
    VariationIdea,
)
from creative.models.render_plan import (
    AudioSegment,
    AudioTrackKind,
    OutputFormat,
    PlanStatus,
    PlanValidation,
    RenderPlan,
    TimelineSegment,
    TrackKind,
)
from creative.models.strategy import ActionKind, StrategyAction, StrategyCandidate

logger = logging.getLogger(__name__)

COMPRESS_SPEED = 1.25
COMPRESS_TRIM = 0.10  # each side
EMPHASIZE_SPEED = 0.9
MIN_SPEED = 0.1
MAX_SPEED = 10.0

MIN_OUTPUT_MS = 1000
MAX_OUTPUT_MS = 120_000
MAX_AUDIO_FADE_MS = 500
AUDIO_FADE_RATIO = 0.05
MUSIC_VOLUME = 0.3

OVERLAP_REASON = "Timeline has overlapping segments"

# Blueprint variation actions onto compiler actions; None has no segment-level form
VARIATION_ACTIONS: Dict[VariationAction, Optional[ActionKind]] = {
    VariationAction.REPLACE_SEGMENT: ActionKind.REPLACE,
    VariationAction.REMOVE_SEGMENT: ActionKind.REMOVE,
    VariationAction.COMPRESS_TIMING: ActionKind.COMPRESS,
    VariationAction.CHANGE_PACING: ActionKind.COMPRESS,
    VariationAction.REORDER_SEGMENTS: ActionKind.REORDER,
    VariationAction.EMPHASIZE_SEGMENT: ActionKind.EMPHASIZE,
    VariationAction.SPLIT_SEGMENT: ActionKind.SPLIT,
    VariationAction.MERGE_SEGMENTS: ActionKind.MERGE,
    VariationAction.ADD_TEXT_OVERLAY: None,
}


class VariationNotFoundError(LookupError):
    """Raised when a blueprint has no variation idea at the requested index"""
    pass


def output_format_for(aspect_ratio: AspectRatio) -> OutputFormat:
    match aspect_ratio:
        case AspectRatio.VERTICAL:
            return OutputFormat(width=1080, height=1920)
        case AspectRatio.LANDSCAPE:
            return OutputFormat(width=1920, height=1080)
        case AspectRatio.SQUARE:
            return OutputFormat(width=1080, height=1080)
        case AspectRatio.PORTRAIT:
            return OutputFormat(width=1080, height=1350)
        case _:
            assert_never(aspect_ratio)


@dataclass
class _SegmentEdit:
    """Accumulated transforms for one source segment"""
    speed: float = 1.0
    trim_start_ratio: float = 0.0
    trim_end_ratio: float = 0.0
    removed: bool = False
    asset_url: Optional[str] = None


@dataclass
class _Resolution:
    edits: Dict[str, _SegmentEdit] = field(default_factory=dict)
    moves: List[Tuple[str, Optional[int]]] = field(default_factory=list)  # (segment_id, index)
    merges: List[List[str]] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def edit(self, segment_id: str) -> _SegmentEdit:
        return self.edits.setdefault(segment_id, _SegmentEdit())


def clamp_speed(speed: float) -> float:
    return max(MIN_SPEED, min(MAX_SPEED, speed))


def _describe(action: StrategyAction) -> str:
    target = action.target_segment_id or (
        action.target_segment_type.value if action.target_segment_type else "?"
    )
    return f"{action.kind.value} -> {target}"


def resolve_targets(video: AnalyzedVideo, action: StrategyAction) -> List[Segment]:
    """Segments an action applies to: by id when given, else by type"""
    if action.target_segment_id:
        segment = video.find_segment(action.target_segment_id)
        return [segment] if segment else []
    if action.target_segment_type:
        return video.segments_of_type(action.target_segment_type)
    return []


def _apply_action(video: AnalyzedVideo, action: StrategyAction, res: _Resolution) -> None:
    targets = resolve_targets(video, action)
    if not targets:
        res.errors.append(f"No segment matches action '{_describe(action)}'")
        return

    match action.kind:
        case ActionKind.REMOVE:
            for segment in targets:
                res.edit(segment.segment_id).removed = True
        case ActionKind.COMPRESS:
            factor = action.factor if action.factor else COMPRESS_SPEED
            for segment in targets:
                edit = res.edit(segment.segment_id)
                edit.speed = clamp_speed(edit.speed * factor)
                edit.trim_start_ratio = max(edit.trim_start_ratio, COMPRESS_TRIM)
                edit.trim_end_ratio = max(edit.trim_end_ratio, COMPRESS_TRIM)
        case ActionKind.EMPHASIZE:
            for segment in targets:
                edit = res.edit(segment.segment_id)
                edit.speed = clamp_speed(edit.speed * EMPHASIZE_SPEED)
        case ActionKind.SPLIT:
            for segment in targets:
                res.edit(segment.segment_id).trim_end_ratio = 0.5
                res.warnings.append(
                    f"Segment {segment.segment_id} split; only the first half is kept"
                )
        case ActionKind.MERGE:
            segment_type = action.target_segment_type or targets[0].segment_type
            group = video.segments_of_type(segment_type)
            if len(group) < 2:
                res.errors.append(
                    f"Action '{_describe(action)}' needs at least 2 {segment_type.value} segments"
                )
                return
            res.merges.append([s.segment_id for s in group])
        case ActionKind.REPLACE:
            if not action.asset_url:
                res.errors.append(
                    f"Action '{_describe(action)}' requires an external asset that was not supplied"
                )
                return
            for segment in targets:
                res.edit(segment.segment_id).asset_url = action.asset_url
        case ActionKind.REORDER:
            index = int(action.factor) if action.factor is not None else None
            for segment in targets:
                res.moves.append((segment.segment_id, index))
        case _:
            assert_never(action.kind)


def _default_reorder_index(order: List[Segment]) -> int:
    """Directly after the leading hook, or the front when there is none"""
    if order and order[0].segment_type == SegmentType.HOOK:
        return 1
    return 0


def _resequence(order: List[Segment], res: _Resolution) -> List[Segment]:
    """Deferred pass: merges pull groups together, then reorders move segments"""
    for group in res.merges:
        kept = [s for s in order if s.segment_id in group]
        if len(kept) < 2:
            continue
        anchor = order.index(kept[0])
        rest = [s for s in order if s.segment_id not in group]
        order = rest[:anchor] + kept + rest[anchor:]

    for segment_id, index in res.moves:
        current = next(s for s in order if s.segment_id == segment_id)
        order = [s for s in order if s.segment_id != segment_id]
        target = _default_reorder_index(order) if index is None else index
        target = max(0, min(target, len(order)))
        order.insert(target, current)
    return order


def build_timeline(video: AnalyzedVideo, res: _Resolution) -> List[TimelineSegment]:
    ordered = sorted(video.segments, key=lambda s: s.start_ms)
    kept = []
    for segment in ordered:
        if res.edit(segment.segment_id).removed:
            res.warnings.append(
                f"Segment {segment.segment_id} ({segment.segment_type.value}) removed by action"
            )
            continue
        kept.append(segment)

    kept = _resequence(kept, res)

    timeline = []
    cursor = 0
    for i, segment in enumerate(kept):
        edit = res.edit(segment.segment_id)
        duration = segment.duration_ms
        trim_start = segment.start_ms + round(duration * edit.trim_start_ratio)
        trim_end = segment.end_ms - round(duration * edit.trim_end_ratio)
        output = round((trim_end - trim_start) / edit.speed)
        timeline.append(TimelineSegment(
            segment_id=f"ts_{i}",
            source_segment_id=segment.segment_id,
            trim_start_ms=trim_start,
            trim_end_ms=trim_end,
            timeline_start_ms=cursor,
            output_duration_ms=output,
            speed=round(edit.speed, 4),
            asset_url=edit.asset_url,
        ))
        cursor += output
    return timeline


def build_audio_tracks(video: AnalyzedVideo, total_ms: int) -> List[AudioSegment]:
    if total_ms <= 0:
        return []
    fade = min(MAX_AUDIO_FADE_MS, round(total_ms * AUDIO_FADE_RATIO))
    tracks = []
    if video.audio.has_voiceover:
        tracks.append(AudioSegment(
            track_id="audio_vo",
            kind=AudioTrackKind.VOICEOVER,
            start_ms=0,
            end_ms=total_ms,
            fade_out_ms=fade,
        ))
    if video.audio.has_music:
        tracks.append(AudioSegment(
            track_id="audio_music",
            kind=AudioTrackKind.MUSIC,
            start_ms=0,
            end_ms=total_ms,
            volume=MUSIC_VOLUME,
            fade_in_ms=fade,
            fade_out_ms=fade,
        ))
    return tracks


def validate_timeline(timeline, audio_tracks=()) -> PlanValidation:
    """
    Compute duration, gap and overlap checks for a timeline.

    Only the video track is checked for continuity; overlays are layered
    on top of it. A segment whose trim_start_ms is
    after its trim_end_ms counts as an overlap.
    """
    video = sorted(
        (s for s in timeline if s.track == TrackKind.VIDEO),
        key=lambda s: s.timeline_start_ms,
    )
    warnings = []
    has_gaps = False
    has_overlaps = False

    for segment in video:
        if segment.trim_start_ms > segment.trim_end_ms:
            has_overlaps = True
            warnings.append(
                f"Segment {segment.segment_id} trim start {segment.trim_start_ms}ms "
                f"is after trim end {segment.trim_end_ms}ms"
            )

    prev_end = 0
    for i, segment in enumerate(video):
        start = segment.timeline_start_ms
        if start > prev_end:
            has_gaps = True
            warnings.append(f"Gap detected: {prev_end}ms to {start}ms ({start - prev_end}ms)")
        elif start < prev_end:
            has_overlaps = True
            warnings.append(
                f"Overlap detected: segment {i} starts at {start}ms but previous ends at {prev_end}ms"
            )
        prev_end = max(prev_end, segment.timeline_end_ms)

    total = prev_end
    if video and total < MIN_OUTPUT_MS:
        warnings.append(f"Very short output: {total}ms")
    if total > MAX_OUTPUT_MS:
        warnings.append(f"Very long output: {total}ms (>2 minutes)")

    return PlanValidation(
        total_duration_ms=total,
        segment_count=len(video),
        audio_track_count=len(audio_tracks),
        has_gaps=has_gaps,
        has_overlaps=has_overlaps,
        warnings=tuple(warnings),
    )


def revalidate(plan: RenderPlan) -> RenderPlan:
    """
    Recompute validation for a plan and derive its status.

    Used on plans that arrive from outside the compiler; stored status and
    validation are not trusted. Earlier warnings are kept. Returns the same
    plan object when nothing changed.
    """
    checked = validate_timeline(plan.timeline, plan.audio_tracks)
    validation = replace(
        checked,
        warnings=tuple(dict.fromkeys(plan.validation.warnings + checked.warnings)),
    )
    status, reason = PlanStatus.COMPILABLE, None
    if validation.has_overlaps:
        status, reason = PlanStatus.UNCOMPILABLE, OVERLAP_REASON
    elif plan.status == PlanStatus.UNCOMPILABLE and plan.uncompilable_reason != OVERLAP_REASON:
        status, reason = plan.status, plan.uncompilable_reason

    if (validation, status, reason) == (plan.validation, plan.status, plan.uncompilable_reason):
        return plan
    return plan.evolve(validation=validation, status=status, uncompilable_reason=reason)


def _check_moves(res: _Resolution) -> None:
    """A reorder whose segment another action removes cannot be resolved"""
    for segment_id, _ in res.moves:
        edit = res.edits.get(segment_id)
        if edit is not None and edit.removed:
            res.errors.append(
                f"Action 'reorder -> {segment_id}' targets a segment removed by another action"
            )


def _compile_actions(
    video: AnalyzedVideo,
    actions,
    plan_id: str,
    output_format: OutputFormat,
    strategy_id: Optional[str] = None,
    variation_id: Optional[str] = None,
) -> RenderPlan:
    res = _Resolution()
    for action in actions:
        _apply_action(video, action, res)
    _check_moves(res)

    base = dict(
        plan_id=plan_id,
        source_video_id=video.video_id,
        source_url=video.source_url,
        output_format=output_format,
        strategy_id=strategy_id,
        variation_id=variation_id,
    )

    if res.errors:
        reason = "; ".join(res.errors)
        logger.info(f"{plan_id} uncompilable: {reason}")
        return RenderPlan(
            timeline=(),
            audio_tracks=(),
            validation=PlanValidation(
                total_duration_ms=0, segment_count=0, warnings=tuple(res.warnings)
            ),
            status=PlanStatus.UNCOMPILABLE,
            uncompilable_reason=reason,
            **base
        )

    timeline = build_timeline(video, res)
    total = sum(s.output_duration_ms for s in timeline)
    audio = build_audio_tracks(video, total)
    validation = validate_timeline(timeline, audio)
    validation = replace(validation, warnings=tuple(res.warnings) + validation.warnings)

    status = PlanStatus.COMPILABLE
    reason = None
    if validation.has_overlaps:
        status = PlanStatus.UNCOMPILABLE
        reason = OVERLAP_REASON

    plan = RenderPlan(
        timeline=tuple(timeline),
        audio_tracks=tuple(audio),
        validation=validation,
        status=status,
        uncompilable_reason=reason,
        **base
    )
    logger.debug(
        f"Compiled {plan_id}: {validation.segment_count} segments, "
        f"{validation.total_duration_ms}ms, status {status.value}"
    )
    return plan


def compile_plan(
    video: AnalyzedVideo,
    candidate: StrategyCandidate,
    output_format: Optional[OutputFormat] = None,
) -> RenderPlan:
    """
    Compile a strategy candidate into a render plan.

    Args:
        video: The analyzed source video
        candidate: Chosen strategy
        output_format: Override the format derived from the aspect ratio

    Returns:
        RenderPlan, with status UNCOMPILABLE and a reason when any action
        cannot be resolved or the result overlaps
    """
    return _compile_actions(
        video,
        candidate.actions,
        plan_id=f"plan_{candidate.candidate_id}",
        output_format=output_format or output_format_for(video.aspect_ratio),
        strategy_id=candidate.candidate_id,
    )


def variation_action(idea: VariationIdea) -> Optional[StrategyAction]:
    """Compiler action for a blueprint variation idea, targeting every segment of its type"""
    kind = VARIATION_ACTIONS[idea.action]
    if kind is None:
        return None
    return StrategyAction(
        kind=kind,
        intent=idea.intent,
        target_segment_type=idea.target_segment_type,
    )


def compile_variation(
    video: AnalyzedVideo,
    blueprint: CreativeBlueprint,
    index: int,
    output_format: Optional[OutputFormat] = None,
) -> RenderPlan:
    """
    Compile one blueprint variation idea into a render plan.

    Raises:
        VariationNotFoundError: If the blueprint has no idea at index
    """
    if not 0 <= index < len(blueprint.variation_ideas):
        raise VariationNotFoundError(
            f"Variation index {index} not found in blueprint {blueprint.blueprint_id} "
            f"({len(blueprint.variation_ideas)} ideas)"
        )
    idea = blueprint.variation_ideas[index]
    plan_id = f"plan_{blueprint.blueprint_id}_{idea.idea_id}"
    output_format = output_format or output_format_for(video.aspect_ratio)

    action = variation_action(idea)
    if action is None:
        reason = f"Variation action '{idea.action.value}' has no segment-level edit"
        logger.info(f"{plan_id} uncompilable: {reason}")
        return RenderPlan(
            plan_id=plan_id,
            source_video_id=video.video_id,
            source_url=video.source_url,
            timeline=(),
            audio_tracks=(),
            output_format=output_format,
            validation=PlanValidation(total_duration_ms=0, segment_count=0),
            status=PlanStatus.UNCOMPILABLE,
            uncompilable_reason=reason,
            variation_id=idea.idea_id,
        )

    return _compile_actions(
        video, [action], plan_id, output_format, variation_id=idea.idea_id
    )


def compile_all(
    video: AnalyzedVideo,
    blueprint: CreativeBlueprint,
    output_format: Optional[OutputFormat] = None,
) -> List[RenderPlan]:
    """One plan per variation idea, in blueprint order; uncompilable plans included"""
    return [
        compile_variation(video, blueprint, i, output_format)
        for i in range(len(blueprint.variation_ideas))
    ]
