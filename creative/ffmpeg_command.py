"""
FFmpeg command construction for render plans

Used two ways: the local FFmpeg engine runs the argument list, and the
router puts the printable form into partial-success bundles so the render
can be finished by hand.
"""

from typing import List, Optional

from creative.models.render_plan import OutputFormat, RenderPlan

ENCODE_ARGS = ["-c:v", "libx264", "-preset", "fast", "-crf", "23", "-pix_fmt", "yuv420p"]
MIN_ATEMPO = 0.5


def _sec(ms: int) -> str:
    text = f"{ms / 1000:.3f}".rstrip("0").rstrip(".")
    return text or "0"


def _speed(value: float) -> str:
    return f"{value:g}"


def _scale_pad(fmt: OutputFormat) -> str:
    w, h = fmt.width, fmt.height
    return (
        f"scale={w}:{h}:force_original_aspect_ratio=decrease,"
        f"pad={w}:{h}:(ow-iw)/2:(oh-ih)/2"
    )


def _atempo_chain(speed: float) -> str:
    """atempo only accepts 0.5 and up, so slower speeds are chained"""
    parts = []
    remaining = speed
    while remaining < MIN_ATEMPO:
        parts.append(f"atempo={MIN_ATEMPO}")
        remaining /= MIN_ATEMPO
    parts.append(f"atempo={remaining:.4g}")
    return ",".join(parts)


def is_simple_plan(plan: RenderPlan) -> bool:
    """
    True when one -vf chain reproduces the plan: a single segment, or
    uniform speed over source-contiguous segments in source order.
    """
    video = plan.video_segments
    if len(video) <= 1:
        return True
    if len({s.speed for s in video}) != 1:
        return False
    return all(
        prev.trim_end_ms == cur.trim_start_ms for prev, cur in zip(video, video[1:])
    )


def build_filter_complex(plan: RenderPlan) -> str:
    """Per-segment trim/setpts chains joined by concat"""
    video = plan.video_segments
    with_audio = bool(plan.audio_tracks)
    chains = []
    labels = []
    for i, segment in enumerate(video):
        start, end = _sec(segment.trim_start_ms), _sec(segment.trim_end_ms)
        chains.append(
            f"[0:v]trim=start={start}:end={end},"
            f"setpts=(PTS-STARTPTS)/{_speed(segment.speed)},"
            f"{_scale_pad(plan.output_format)}[v{i}]"
        )
        labels.append(f"[v{i}]")
        if with_audio:
            chains.append(
                f"[0:a]atrim=start={start}:end={end},asetpts=PTS-STARTPTS,"
                f"{_atempo_chain(segment.speed)}[a{i}]"
            )
            labels.append(f"[a{i}]")

    audio_flag = 1 if with_audio else 0
    concat = f"{''.join(labels)}concat=n={len(video)}:v=1:a={audio_flag}[outv]"
    if with_audio:
        concat += "[cata]"
        track = plan.audio_tracks[0]
        fades = []
        if track.fade_in_ms:
            fades.append(f"afade=t=in:st=0:d={_sec(track.fade_in_ms)}")
        if track.fade_out_ms:
            fade_start = max(0, plan.validation.total_duration_ms - track.fade_out_ms)
            fades.append(f"afade=t=out:st={_sec(fade_start)}:d={_sec(track.fade_out_ms)}")
        chains.append(concat)
        chains.append(f"[cata]{','.join(fades) or 'anull'}[outa]")
    else:
        chains.append(concat)
    return ";".join(chains)


def build_ffmpeg_args(
    plan: RenderPlan,
    source: str,
    output_path: str,
    ffmpeg_path: str = "ffmpeg",
) -> List[str]:
    """Argument vector for rendering a plan with a local ffmpeg binary"""
    args = [ffmpeg_path, "-y"]
    video = plan.video_segments
    if is_simple_plan(plan) and video:
        first = video[0]
        if first.trim_start_ms:
            args += ["-ss", _sec(first.trim_start_ms)]
        args += [
            "-i", source,
            "-vf", f"setpts=PTS/{_speed(first.speed)},{_scale_pad(plan.output_format)}",
            "-t", _sec(plan.validation.total_duration_ms),
        ]
        if plan.audio_tracks and first.speed != 1.0:
            args += ["-af", _atempo_chain(first.speed)]
        elif not plan.audio_tracks:
            args += ["-an"]
    else:
        args += ["-i", source, "-filter_complex", build_filter_complex(plan), "-map", "[outv]"]
        if plan.audio_tracks:
            args += ["-map", "[outa]"]
    args += ENCODE_ARGS
    args += ["-r", str(plan.output_format.fps), output_path]
    return args


def manual_ffmpeg_command(plan: RenderPlan, source: Optional[str] = None) -> str:
    """
    Printable command for finishing a plan by hand.

    The common single-chain case reads:
    ffmpeg -y -i "<src>" -vf "setpts=PTS/<speed>,scale=...,pad=..." -t <sec> -c:v libx264 ... output.mp4
    """
    source = source or plan.source_url
    video = plan.video_segments
    encode = " ".join(ENCODE_ARGS)

    if is_simple_plan(plan):
        speed = video[0].speed if video else 1.0
        seek = f"-ss {_sec(video[0].trim_start_ms)} " if video and video[0].trim_start_ms else ""
        if not plan.audio_tracks:
            audio = "-an "
        elif speed != 1.0:
            audio = f'-af "{_atempo_chain(speed)}" '
        else:
            audio = ""
        return (
            f'ffmpeg -y {seek}-i "{source}" '
            f'-vf "setpts=PTS/{_speed(speed)},{_scale_pad(plan.output_format)}" '
            f"-t {_sec(plan.validation.total_duration_ms)} {audio}{encode} output.mp4"
        )

    maps = '-map "[outv]"' + (' -map "[outa]"' if plan.audio_tracks else "")
    return (
        f'ffmpeg -y -i "{source}" -filter_complex "{build_filter_complex(plan)}" '
        f"{maps} {encode} output.mp4"
    )
