from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ltcsync.timecode.frames import TimecodeFrame

STANDARD_FRAME_RATES: tuple[float, ...] = (24 / 1.001, 24.0, 25.0, 30 / 1.001, 30.0)


def standard_frame_rate(candidate: float) -> float:
    """Snap a measured frame rate to the closest broadcast-standard rate.

    Distance is relative (``|1 - standard / candidate|``); on an exact tie the
    rate listed first in ``STANDARD_FRAME_RATES`` wins.
    """

    if candidate <= 0:
        raise ValueError(f"Frame rate must be positive, got {candidate}")
    return min(STANDARD_FRAME_RATES, key=lambda rate: abs(1 - rate / candidate))


def frame_span(frame: TimecodeFrame) -> int:
    # ltcdump reports inclusive sample numbers
    return frame.last_sample - frame.first_sample + 1


def infer_frame_rate(frames: Sequence[TimecodeFrame], sample_rate: float) -> float:
    """Deduce the LTC frame rate from decoded frame lengths and the audio sample rate."""

    inner = frames[1:-1]
    if not inner:
        raise ValueError(f"At least 3 frames are needed to infer a frame rate, got {len(frames)}")

    average_span = sum(frame_span(frame) for frame in inner) / len(inner)
    return standard_frame_rate(sample_rate / average_span)


def wall_clock_seconds(frame: TimecodeFrame, frame_rate: float) -> float:
    """Seconds since midnight at the beginning of ``frame``.

    The frame rate is implicit in LTC, so it is supplied by the caller. Drop-frame
    timecode skips two frame numbers every minute except every tenth minute.
    """

    whole_seconds = frame.hours * 3600 + frame.minutes * 60 + frame.seconds
    frame_count = whole_seconds * round(frame_rate) + frame.frame_number
    if frame.dropframe:
        whole_minutes = whole_seconds // 60
        whole_ten_minutes = whole_seconds // 600
        frame_count -= 2 * (whole_minutes - whole_ten_minutes)
    return frame_count / frame_rate


def offset_seconds(frame: TimecodeFrame, sample_rate: float) -> float:
    """Seconds from the start of the decoded audio stream to the frame's first sample."""

    return frame.first_sample / sample_rate
