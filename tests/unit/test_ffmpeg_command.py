"""Tests for FFmpeg command construction"""

from creative.ffmpeg_command import (
    build_ffmpeg_args,
    build_filter_complex,
    is_simple_plan,
    manual_ffmpeg_command,
)
from creative.models.render_plan import AudioSegment, AudioTrackKind
from tests.mocks.fixtures import make_plan, make_timeline_segment


def reordered_plan(**kwargs):
    return make_plan(
        timeline=[
            make_timeline_segment(0, 5000, 8000, 0),
            make_timeline_segment(1, 0, 3000, 3000, speed=1.5),
        ],
        **kwargs
    )


class TestManualCommand:
    """Tests for manual_ffmpeg_command()"""

    def test_simple_plan(self, sample_plan):
        command = manual_ffmpeg_command(sample_plan)

        assert command == (
            'ffmpeg -y -i "https://cdn.example.com/vid_001.mp4" '
            '-vf "setpts=PTS/1,scale=1080:1920:force_original_aspect_ratio=decrease,'
            'pad=1080:1920:(ow-iw)/2:(oh-ih)/2" '
            "-t 10 -an -c:v libx264 -preset fast -crf 23 -pix_fmt yuv420p output.mp4"
        )

    def test_seek_and_speed(self):
        plan = make_plan(timeline=[make_timeline_segment(0, 2500, 7500, 0, speed=1.25)])
        command = manual_ffmpeg_command(plan, "in.mp4")

        assert command.startswith('ffmpeg -y -ss 2.5 -i "in.mp4"')
        assert "setpts=PTS/1.25" in command
        assert "-t 4" in command

    def test_speed_change_keeps_audio_in_sync(self):
        audio = (AudioSegment("vo", AudioTrackKind.VOICEOVER, 0, 4000, 1.0),)
        plan = make_plan(
            timeline=[make_timeline_segment(0, 2500, 7500, 0, speed=1.25)],
            audio_tracks=audio,
        )
        command = manual_ffmpeg_command(plan, "in.mp4")

        assert '-af "atempo=1.25"' in command
        assert "-an" not in command
        args = build_ffmpeg_args(plan, "in.mp4", "out.mp4")
        assert args[args.index("-af") + 1] == "atempo=1.25"

    def test_complex_plan_uses_filter_graph(self):
        command = manual_ffmpeg_command(reordered_plan())
        assert "-filter_complex" in command
        assert "concat=n=2:v=1:a=0[outv]" in command
        assert '-map "[outv]"' in command


class TestFilterComplex:
    """Tests for build_filter_complex() and is_simple_plan()"""

    def test_simple_detection(self, sample_plan):
        assert is_simple_plan(sample_plan)
        assert not is_simple_plan(reordered_plan())

    def test_per_segment_chains(self):
        graph = build_filter_complex(reordered_plan())
        assert "[0:v]trim=start=5:end=8,setpts=(PTS-STARTPTS)/1," in graph
        assert "[0:v]trim=start=0:end=3,setpts=(PTS-STARTPTS)/1.5," in graph

    def test_audio_chains_and_fades(self):
        audio = (AudioSegment("vo", AudioTrackKind.VOICEOVER, 0, 5000, 1.0, 0, 500),)
        graph = build_filter_complex(reordered_plan(audio_tracks=audio))

        assert "[0:a]atrim=start=0:end=3,asetpts=PTS-STARTPTS,atempo=1.5[a1]" in graph
        assert "concat=n=2:v=1:a=1[outv][cata]" in graph
        assert "afade=t=out" in graph


class TestBuildArgs:
    """Tests for build_ffmpeg_args()"""

    def test_simple_without_audio(self, sample_plan):
        args = build_ffmpeg_args(sample_plan, "in.mp4", "out.mp4", "/usr/bin/ffmpeg")

        assert args[0] == "/usr/bin/ffmpeg"
        assert args[-1] == "out.mp4"
        assert "-an" in args
        assert args[args.index("-r") + 1] == "30"

    def test_complex_maps_outputs(self):
        args = build_ffmpeg_args(reordered_plan(), "in.mp4", "out.mp4")
        assert "-filter_complex" in args
        assert args[args.index("-map") + 1] == "[outv]"
