from pathlib import Path

from src.giffy.config import QualityPreset
from src.giffy.transcode import ffmpeg_commands

PRESET = QualityPreset(fps=15, width=480, colors=256)


def test_thumbnail_command_seeks_one_second_and_scales() -> None:
    argv = ffmpeg_commands.thumbnail_command(
        "ffmpeg", Path("/s/in.mp4"), Path("/s/thumb.jpg"), seek="00:00:01", width=320
    )

    assert argv[0] == "ffmpeg"
    assert argv[argv.index("-i") + 1] == "/s/in.mp4"
    assert argv[argv.index("-ss") + 1] == "00:00:01"
    assert argv[argv.index("-frames:v") + 1] == "1"
    assert argv[argv.index("-vf") + 1] == "scale=320:-1"
    assert argv[-1] == "/s/thumb.jpg"


def test_palette_command_limits_colors() -> None:
    argv = ffmpeg_commands.palette_command(
        "ffmpeg", Path("/s/in.mp4"), Path("/s/palette.png"), QualityPreset(fps=10, width=320, colors=128)
    )

    assert argv[argv.index("-vf") + 1] == (
        "fps=10,scale=320:-1:flags=lanczos,palettegen=max_colors=128"
    )
    assert argv[-2:] == ["-y", "/s/palette.png"]


def test_encode_command_maps_through_palette() -> None:
    argv = ffmpeg_commands.encode_command(
        "ffmpeg", Path("/s/in.mp4"), Path("/s/palette.png"), Path("/s/out.gif"), PRESET
    )

    inputs = [argv[i + 1] for i, token in enumerate(argv) if token == "-i"]
    assert inputs == ["/s/in.mp4", "/s/palette.png"]
    assert argv[argv.index("-lavfi") + 1] == (
        "fps=15,scale=480:-1:flags=lanczos[x];[x][1:v]paletteuse"
    )
    assert argv[-1] == "/s/out.gif"


def test_commands_are_deterministic() -> None:
    first = ffmpeg_commands.encode_command("ffmpeg", Path("a"), Path("b"), Path("c"), PRESET)
    second = ffmpeg_commands.encode_command("ffmpeg", Path("a"), Path("b"), Path("c"), PRESET)

    assert first == second


def test_version_command() -> None:
    assert ffmpeg_commands.version_command("/usr/bin/ffmpeg") == ["/usr/bin/ffmpeg", "-version"]
