from __future__ import annotations

from collections.abc import Sequence

from ltcsync.timecode.arithmetic import frame_span
from ltcsync.timecode.frames import TimecodeFrame

FORMAT_PENALTY = 0.9
CONSISTENCY_PENALTY = 0.75


def coverage_factor(frames: Sequence[TimecodeFrame], total_samples: float) -> float:
    """Fraction of the stream covered by decoded frames; gaps mean decoder dropouts."""

    if total_samples <= 0:
        return 0.0
    covered = sum(frame_span(frame) for frame in frames)
    return min(1.0, covered / total_samples)


def format_factor(frames: Sequence[TimecodeFrame], penalty: float = FORMAT_PENALTY) -> float:
    factor = 1.0
    for frame in frames:
        if frame.hours > 23:
            factor *= penalty
        if frame.minutes > 59:
            factor *= penalty
        # leap seconds are unlikely in this context
        if frame.seconds > 59:
            factor *= penalty
    return factor


def dropframe_factor(frames: Sequence[TimecodeFrame], penalty: float = CONSISTENCY_PENALTY) -> float:
    if any(frame.dropframe != frames[0].dropframe for frame in frames):
        return penalty
    return 1.0


def direction_factor(frames: Sequence[TimecodeFrame], penalty: float = CONSISTENCY_PENALTY) -> float:
    if any(frame.reverse != frames[0].reverse for frame in frames):
        return penalty
    return 1.0


def quality(
    frames: Sequence[TimecodeFrame],
    duration_seconds: float,
    sample_rate: float,
    *,
    format_penalty: float = FORMAT_PENALTY,
    consistency_penalty: float = CONSISTENCY_PENALTY,
) -> float:
    """Score a decoded channel in [0, 1].

    ltcdump happily reports "timecode" on audio that carries none (music, speech),
    so each sign of noise multiplies the score down.
    """

    if len(frames) < 2:
        return 0.0

    return (
        coverage_factor(frames, duration_seconds * sample_rate)
        * format_factor(frames, format_penalty)
        * dropframe_factor(frames, consistency_penalty)
        * direction_factor(frames, consistency_penalty)
    )
