from __future__ import annotations

import json
import logging
import subprocess
from fractions import Fraction
from pathlib import Path
from typing import Any

from ltcsync.models import ProbeResult, StreamInfo

logger = logging.getLogger(__name__)


class ProbeError(RuntimeError):
    """ffprobe could not read a media file."""


def probe_media(media_path: str | Path, ffprobe_binary: str = "ffprobe") -> ProbeResult:
    """Probe container and stream metadata via ffprobe."""

    source_path = Path(media_path).expanduser().resolve()
    payload = run_ffprobe(source_path, ffprobe_binary)
    result = normalize_probe_payload(payload, fallback_filename=str(source_path))
    logger.debug("Probed %s: %d stream(s)", source_path, len(result.streams))
    return result


def run_ffprobe(media_path: Path, ffprobe_binary: str = "ffprobe") -> dict[str, Any]:
    command = [
        ffprobe_binary,
        "-hide_banner",
        "-loglevel",
        "fatal",
        "-show_error",
        "-show_format",
        "-show_streams",
        "-print_format",
        "json",
        str(media_path),
    ]

    try:
        completed = subprocess.run(
            command,
            check=False,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError as exc:
        raise ProbeError(
            "ffprobe executable was not found. Install FFmpeg so ffprobe is available on PATH."
        ) from exc

    try:
        payload = json.loads(completed.stdout or "{}")
    except json.JSONDecodeError as exc:
        raise ProbeError(f"ffprobe returned invalid JSON output for {media_path}.") from exc

    # with -show_error, ffprobe reports unreadable input inside the JSON payload
    error = payload.get("error")
    if error:
        raise ProbeError(f"{media_path}: {error.get('string', 'unknown ffprobe error')}")
    if completed.returncode != 0:
        stderr = (completed.stderr or "").strip()
        details = f" ffprobe stderr: {stderr}" if stderr else ""
        raise ProbeError(f"ffprobe failed to read media file: {media_path}.{details}")

    return payload


def normalize_probe_payload(payload: dict[str, Any], fallback_filename: str = "") -> ProbeResult:
    format_entry = payload.get("format", {})
    return ProbeResult(
        filename=str(format_entry.get("filename") or fallback_filename),
        duration=parse_number(format_entry.get("duration")),
        start_time=parse_number(format_entry.get("start_time")),
        format_name=format_entry.get("format_name"),
        streams=[_normalize_stream(stream) for stream in payload.get("streams", [])],
    )


def parse_number(raw_value: Any) -> float | None:
    """Parse an ffprobe numeric field ("5.355000", "1/48000", 42) without evaluating it."""

    if raw_value in (None, "N/A", ""):
        return None
    try:
        return float(Fraction(str(raw_value).strip()))
    except (ValueError, ZeroDivisionError):
        return None


def _normalize_stream(stream: dict[str, Any]) -> StreamInfo:
    return StreamInfo(
        index=int(stream.get("index", 0)),
        codec_type=stream.get("codec_type"),
        codec_name=stream.get("codec_name"),
        channels=_to_int(stream.get("channels")),
        sample_rate=_to_int(stream.get("sample_rate")),
        start_time=parse_number(stream.get("start_time")),
        duration=parse_number(stream.get("duration")),
        duration_ts=_to_int(stream.get("duration_ts")),
        nb_frames=_to_int(stream.get("nb_frames")),
        width=_to_int(stream.get("width")),
        height=_to_int(stream.get("height")),
        r_frame_rate=stream.get("r_frame_rate"),
    )


def _to_int(raw_value: Any) -> int | None:
    value = parse_number(raw_value)
    if value is None:
        return None
    return int(value)
