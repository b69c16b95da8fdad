from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from ltcsync.models import StreamInfo
from ltcsync.padding import (
    PAD_SUFFIX,
    PaddingError,
    build_padding_command,
    generate_padding_files,
    padding_plan,
    suffix_filename,
    write_padding_file,
)
from ltcsync.sessions import EditingSession

CAMERA_STREAMS = [
    StreamInfo(
        index=0,
        codec_type="video",
        codec_name="h264",
        duration_ts=65536,
        width=1920,
        height=1080,
        r_frame_rate="25/1",
    ),
    StreamInfo(index=1, codec_type="audio", codec_name="aac", channels=2, sample_rate=48000),
]
RECORDER_STREAMS = [
    StreamInfo(index=0, codec_type="audio", codec_name="pcm_s24le", channels=1, sample_rate=48000, duration_ts=633664)
]


def _completed(stdout: str = "", stderr: str = "", returncode: int = 0) -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(args=["ffmpeg"], returncode=returncode, stdout=stdout, stderr=stderr)


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("/cards/MVI_8032.MOV", "/cards/MVI_8032-LTCsyncPAD.MOV"),
        ("clip.tar.gz", "clip.tar-LTCsyncPAD.gz"),
        ("README", "README-LTCsyncPAD"),
        ("/media/.hidden", "/media/.hidden-LTCsyncPAD"),
        ("take.", "take-LTCsyncPAD."),
    ],
)
def test_suffix_filename(name: str, expected: str) -> None:
    assert suffix_filename(name, PAD_SUFFIX) == expected


def test_padding_plan_lists_late_starters(make_file) -> None:
    session = EditingSession()
    first = make_file("/cards/a.mov", 10.0, 5.0)
    second = make_file("/cards/b.mov", 12.5, 5.0)
    session.add_file(first)
    session.add_file(second)
    session.add_file(make_file("/cards/solo.mov", 100.0))
    session.add_file(make_file("/cards/phone.mp4", None))

    assert padding_plan(session) == [(second, 2.5)]


def test_video_padding_uses_a_black_frame_source(make_file) -> None:
    camera = make_file("/cards/MVI_8032.MOV", 12.0, streams=CAMERA_STREAMS)

    command = build_padding_command(camera, 2.5)

    assert command[:2] == ["ffmpeg", "-y"]
    assert "color=c=black:s=1920x1080:r=25/1" in command
    assert command[command.index("-c:v") + 1] == "h264"
    assert "-c:a" not in command
    assert command[-3:] == ["-t", "2.500000", "/cards/MVI_8032-LTCsyncPAD.MOV"]


def test_audio_padding_uses_silence(make_file) -> None:
    track = make_file("/zoom/ZOOM0004_Tr1.WAV", 12.0, streams=RECORDER_STREAMS)

    command = build_padding_command(track, 0.04, ffmpeg_binary="/usr/local/bin/ffmpeg")

    assert command[0] == "/usr/local/bin/ffmpeg"
    assert "anullsrc=cl=mono:r=48000" in command
    assert command[command.index("-c:a") + 1] == "pcm_s24le"
    assert command[-1] == "/zoom/ZOOM0004_Tr1-LTCsyncPAD.WAV"


def test_write_padding_file_treats_any_output_as_failure(make_file, monkeypatch) -> None:
    track = make_file("/zoom/ZOOM0004_Tr1.WAV", 12.0, streams=RECORDER_STREAMS)

    monkeypatch.setattr(subprocess, "run", lambda *a, **k: _completed(stderr="Unknown encoder 'pcm_bluray'"))
    with pytest.raises(PaddingError, match="Unknown encoder"):
        write_padding_file(track, 1.0)

    monkeypatch.setattr(subprocess, "run", lambda *a, **k: _completed(returncode=1))
    with pytest.raises(PaddingError, match="exited with code 1"):
        write_padding_file(track, 1.0)

    monkeypatch.setattr(subprocess, "run", lambda *a, **k: _completed())
    assert write_padding_file(track, 1.0) == Path("/zoom/ZOOM0004_Tr1-LTCsyncPAD.WAV")


def test_write_padding_file_reports_missing_ffmpeg(make_file, monkeypatch) -> None:
    track = make_file("/zoom/ZOOM0004_Tr1.WAV", 12.0, streams=RECORDER_STREAMS)

    def _raise_missing(*args: object, **kwargs: object) -> subprocess.CompletedProcess[str]:
        raise FileNotFoundError("ffmpeg")

    monkeypatch.setattr(subprocess, "run", _raise_missing)

    with pytest.raises(PaddingError, match="ffmpeg executable was not found"):
        write_padding_file(track, 1.0)


def test_generate_padding_files_collects_failures(make_file, monkeypatch) -> None:
    session = EditingSession()
    session.add_file(make_file("/cards/a.mov", 10.0, 5.0, streams=CAMERA_STREAMS))
    session.add_file(make_file("/cards/b.mov", 11.0, 5.0, streams=CAMERA_STREAMS))
    session.add_file(make_file("/zoom/Tr1.WAV", 12.0, 5.0, streams=RECORDER_STREAMS))

    def _run(command: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        if command[-1].endswith(".WAV"):
            return _completed(stderr="No space left on device")
        return _completed()

    monkeypatch.setattr(subprocess, "run", _run)

    written, failures = generate_padding_files(session)

    assert written == [Path("/cards/b-LTCsyncPAD.mov")]
    assert failures == [("/zoom/Tr1.WAV", "No space left on device")]
