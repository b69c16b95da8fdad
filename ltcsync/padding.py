"""Padding files: blank media that shifts a file to its place on the group timeline.

Dropping the padding file and then the original back to back onto an NLE track
lines every file of a group up with the group's earliest recording.
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

from ltcsync.media_file import MediaFile
from ltcsync.sessions import EditingSession

logger = logging.getLogger(__name__)

PAD_SUFFIX = "-LTCsyncPAD"


class PaddingError(RuntimeError):
    pass


def suffix_filename(name: str, suffix: str) -> str:
    stem, extension = os.path.splitext(name)
    return stem + suffix + extension


def padding_plan(session: EditingSession) -> list[tuple[MediaFile, float]]:
    """Pair every file that starts after its group's start with the gap before it."""

    plan: list[tuple[MediaFile, float]] = []
    for group in session.sorted_groups():
        group_start = group.bounds().start
        for file in group.sorted_files():
            gap = file.bounds().start - group_start
            if gap > 0:
                plan.append((file, gap))
    return plan


def build_padding_command(prototype: MediaFile, duration: float, ffmpeg_binary: str = "ffmpeg") -> list[str]:
    # Padding files carry either video or audio, never both: some decodable
    # codecs cannot be encoded (pcm_bluray), AAC priming samples blur the
    # duration, and MP4 cannot hold PCM.
    video = next(iter(prototype.probe.video_streams), None)
    audio = next(iter(prototype.probe.audio_streams), None)
    if video is None and audio is None:
        raise PaddingError(f"Cannot pad a file without audio or video: {prototype.filename}")

    command = [ffmpeg_binary, "-y", "-hide_banner", "-loglevel", "error"]
    if video is not None:
        command += [
            "-f",
            "lavfi",
            "-i",
            f"color=c=black:s={video.width}x{video.height}:r={video.r_frame_rate}",
            "-c:v",
            video.codec_name or "libx264",
        ]
    else:
        command += [
            "-f",
            "lavfi",
            "-i",
            f"anullsrc=cl=mono:r={audio.sample_rate}",
            "-c:a",
            audio.codec_name or "pcm_s16le",
        ]

    command += ["-t", f"{duration:.6f}", suffix_filename(prototype.filename, PAD_SUFFIX)]
    return command


def write_padding_file(prototype: MediaFile, duration: float, ffmpeg_binary: str = "ffmpeg") -> Path:
    command = build_padding_command(prototype, duration, ffmpeg_binary)
    output_path = Path(command[-1])

    try:
        completed = subprocess.run(command, capture_output=True, text=True)
    except FileNotFoundError as exc:
        raise PaddingError(f"{ffmpeg_binary} executable was not found on PATH.") from exc

    # ffmpeg runs with -loglevel error, so any output at all means trouble
    message = (completed.stderr or completed.stdout or "").strip()
    if completed.returncode != 0 or message:
        raise PaddingError(message or f"ffmpeg exited with code {completed.returncode} while writing {output_path}")

    logger.info("Wrote %.3fs of padding to %s", duration, output_path)
    return output_path


def generate_padding_files(
    session: EditingSession,
    ffmpeg_binary: str = "ffmpeg",
) -> tuple[list[Path], list[tuple[str, str]]]:
    """Write a padding file for every file in the session's padding plan."""

    written: list[Path] = []
    failures: list[tuple[str, str]] = []
    for file, gap in padding_plan(session):
        try:
            written.append(write_padding_file(file, gap, ffmpeg_binary))
        except PaddingError as exc:
            logger.warning("Padding failed for %s: %s", file.name, exc)
            failures.append((file.filename, str(exc)))
    return written, failures
