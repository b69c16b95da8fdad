from __future__ import annotations

import logging
import subprocess
import tempfile
from pathlib import Path

from ltcsync.models import ProbeResult
from ltcsync.timecode.frames import FrameSet

logger = logging.getLogger(__name__)


class DecodeError(RuntimeError):
    """Audio extraction or LTC decoding failed for one channel."""


def decode_stream_channels(
    probe: ProbeResult,
    *,
    ffmpeg_binary: str = "ffmpeg",
    ltcdump_binary: str = "ltcdump",
    work_dir: str | Path | None = None,
) -> list[FrameSet]:
    """Decode LTC from every channel of every audio stream in a probed file.

    Returns one FrameSet per (stream, channel), tagged with both. Files without
    audio streams yield an empty list.
    """

    audio_streams = probe.audio_streams
    if not audio_streams:
        return []

    source_path = Path(probe.filename)
    frame_sets: list[FrameSet] = []
    with tempfile.TemporaryDirectory(prefix="ltcsync-", dir=work_dir) as scratch:
        for stream in audio_streams:
            for channel in range(stream.channels or 1):
                wav_path = Path(scratch) / f"{source_path.stem}.{stream.index}.{channel}.wav"
                extract_channel(
                    source_path=source_path,
                    stream_index=stream.index,
                    channel=channel,
                    output_path=wav_path,
                    ffmpeg_binary=ffmpeg_binary,
                )
                frame_set = FrameSet.from_text(run_ltcdump(wav_path, ltcdump_binary))
                logger.debug(
                    "%s stream %d channel %d: %d LTC frame(s)",
                    source_path.name,
                    stream.index,
                    channel,
                    len(frame_set),
                )
                frame_sets.append(frame_set.tagged(stream.index, channel))

    return frame_sets


def extract_channel(
    source_path: Path,
    stream_index: int,
    channel: int,
    output_path: Path,
    ffmpeg_binary: str = "ffmpeg",
) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    command = [
        ffmpeg_binary,
        "-hide_banner",
        "-v",
        "error",
        "-y",
        "-i",
        str(source_path),
        "-map",
        f"0:{stream_index}",
        "-vn",
        "-af",
        f"pan=mono|c0=c{channel}",
        "-c:a",
        "pcm_s16le",
        str(output_path),
    ]
    _run(command, f"ffmpeg could not extract stream {stream_index} channel {channel} of {source_path}")


def run_ltcdump(wav_path: Path, ltcdump_binary: str = "ltcdump") -> str:
    """Run ltcdump(1) on a WAV file and return its raw text output."""

    return _run([ltcdump_binary, str(wav_path)], f"ltcdump failed on {wav_path.name}")


def _run(command: list[str], failure_message: str) -> str:
    try:
        completed = subprocess.run(command, check=True, capture_output=True, text=True)
    except FileNotFoundError as exc:
        raise DecodeError(f"{command[0]} executable was not found on PATH.") from exc
    except subprocess.CalledProcessError as exc:
        stderr = (exc.stderr or "").strip()
        details = f": {stderr}" if stderr else ""
        raise DecodeError(f"{failure_message}{details}") from exc
    return completed.stdout
