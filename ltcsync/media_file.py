from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ltcsync.models import Bounds, ProbeResult, StreamInfo
from ltcsync.timecode.frames import FrameSet
from ltcsync.timecode.quality import quality

DEFAULT_QUALITY_THRESHOLD = 0.75
# a decode run needs more frames than this before it is considered at all
MIN_CANDIDATE_FRAMES = 2


@dataclass(frozen=True, slots=True)
class TimecodeCandidate:
    """One decoded audio channel of a file, scored for LTC plausibility."""

    frame_set: FrameSet
    stream: StreamInfo
    quality: float

    @property
    def sample_rate(self) -> int:
        return self.stream.sample_rate or 0

    @property
    def eligible(self) -> bool:
        return len(self.frame_set) > MIN_CANDIDATE_FRAMES and self.sample_rate > 0


class MediaFile:
    """An audio or video file: probe metadata plus any LTC found in its audio.

    Multi-track recorders (e.g. ZOOM) write each track of one take to its own
    file, and usually only one of them carries LTC. Such silent companions point
    ``related_file`` at the sibling that does; it is a plain non-owning reference
    assigned by the editing session.
    """

    def __init__(
        self,
        probe: ProbeResult,
        frame_sets: Iterable[FrameSet] = (),
        *,
        quality_threshold: float = DEFAULT_QUALITY_THRESHOLD,
    ) -> None:
        self.probe = probe
        self.quality_threshold = quality_threshold
        self.related_file: MediaFile | None = None
        self.candidates = _rank_candidates(probe, frame_sets)
        self._own_start = self._compute_own_start()

    def __repr__(self) -> str:
        return f"MediaFile({self.filename!r}, start={self.bounds().start!r}, duration={self.duration!r})"

    @property
    def filename(self) -> str:
        return self.probe.filename

    @property
    def name(self) -> str:
        return Path(self.filename).name

    @property
    def duration(self) -> float:
        if self.probe.duration is not None:
            return self.probe.duration
        stream_durations = [stream.duration for stream in self.probe.streams if stream.duration is not None]
        return max(stream_durations, default=0.0)

    @property
    def selected_candidate(self) -> TimecodeCandidate | None:
        return next((candidate for candidate in self.candidates if candidate.eligible), None)

    @property
    def timecode_quality(self) -> float:
        candidate = self.selected_candidate
        return candidate.quality if candidate else 0.0

    @property
    def frame_rate(self) -> float | None:
        candidate = self.selected_candidate
        if candidate is None:
            return None
        return candidate.frame_set.frame_rate(candidate.sample_rate)

    @property
    def timecode_start(self) -> float | None:
        """Wall-clock start from this file's own LTC, or None if it has no usable LTC."""

        return self._own_start

    @property
    def has_timecode(self) -> bool:
        return self.timecode_start is not None

    def bounds(self) -> Bounds:
        if self.has_timecode:
            return Bounds(self.timecode_start, self.duration)
        if self.related_file is not None:
            return Bounds(self.related_file.bounds().start, self.duration)
        return Bounds(None, self.duration)

    def from_same_recording_session(self, other: MediaFile) -> bool:
        """Heuristic: single-stream audio files with identical sample counts."""

        own_streams = self.probe.streams
        other_streams = other.probe.streams
        if len(own_streams) != 1 or len(other_streams) != 1:
            return False
        own, theirs = own_streams[0], other_streams[0]
        return own.is_audio and theirs.is_audio and bool(own.duration_ts) and own.duration_ts == theirs.duration_ts

    def has_valid_streams(self) -> bool:
        # ffprobe reports still images (and some text files) as one-frame video
        for stream in self.probe.streams:
            if stream.is_audio:
                return True
            if stream.is_video:
                ticks = stream.frame_count
                # Matroska/WebM video has no count; only a known single frame marks a still
                if ticks is None or ticks > 1:
                    return True
        return False

    def sort_key(self) -> tuple[bool, float, str]:
        start = self.bounds().start
        return (start is None, start if start is not None else 0.0, self.filename)

    def compare(self, other: MediaFile) -> int:
        own_key, other_key = self.sort_key(), other.sort_key()
        return (own_key > other_key) - (own_key < other_key)

    def __lt__(self, other: MediaFile) -> bool:
        return self.sort_key() < other.sort_key()

    def to_dict(self) -> dict[str, Any]:
        bounds = self.bounds()
        candidate = self.selected_candidate
        return {
            "filename": self.filename,
            "start_seconds": bounds.start,
            "duration_seconds": bounds.duration,
            "has_timecode": self.has_timecode,
            "timecode_quality": self.timecode_quality,
            "frame_rate": self.frame_rate,
            "timecode_stream": candidate.stream.index if candidate else None,
            "timecode_channel": candidate.frame_set.channel if candidate else None,
            "related_file": self.related_file.filename if self.related_file else None,
            "candidates": [
                {
                    "stream_index": item.stream.index,
                    "channel": item.frame_set.channel,
                    "frame_count": len(item.frame_set),
                    "quality": item.quality,
                }
                for item in self.candidates
            ],
        }

    def _compute_own_start(self) -> float | None:
        candidate = self.selected_candidate
        if candidate is None or candidate.quality <= self.quality_threshold:
            return None

        # .start_time only appears for containers that support arbitrary
        # stream offsets; otherwise it is 0 by definition
        container_offset = candidate.stream.start_time or 0.0
        return candidate.frame_set.wall_clock_start(candidate.sample_rate) - container_offset


def _rank_candidates(probe: ProbeResult, frame_sets: Iterable[FrameSet]) -> list[TimecodeCandidate]:
    candidates: list[TimecodeCandidate] = []
    for frame_set in frame_sets:
        stream = probe.stream(frame_set.stream_index) if frame_set.stream_index is not None else None
        if stream is None or not stream.is_audio:
            continue
        candidates.append(
            TimecodeCandidate(
                frame_set=frame_set,
                stream=stream,
                quality=_score(frame_set, stream, probe),
            )
        )

    candidates.sort(key=lambda item: (item.stream.index, item.frame_set.channel or 0))
    candidates.sort(key=lambda item: item.quality, reverse=True)
    return candidates


def _score(frame_set: FrameSet, stream: StreamInfo, probe: ProbeResult) -> float:
    if not stream.sample_rate:
        return 0.0
    duration = stream.duration if stream.duration is not None else probe.duration
    return quality(frame_set.frames, duration or 0.0, stream.sample_rate)
