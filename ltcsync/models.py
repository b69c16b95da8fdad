from __future__ import annotations

from dataclasses import dataclass, field
from fractions import Fraction


@dataclass(frozen=True, slots=True)
class Bounds:
    """Temporal bounds of a file or group of files, in wall-clock seconds.

    ``start`` is ``None`` when the position on the timeline is unknown.
    """

    start: float | None
    duration: float

    def __post_init__(self) -> None:
        if self.duration < 0:
            raise ValueError(f"Bounds duration must be non-negative, got {self.duration}")

    @property
    def end(self) -> float | None:
        if self.start is None:
            return None
        return self.start + self.duration

    def overlap(self, other: Bounds) -> bool:
        """True if the intervals intersect; touching endpoints count as overlap."""

        if self.start is None or other.start is None:
            return False
        first, second = sorted((self, other), key=lambda bounds: bounds.start)
        return first.start + first.duration >= second.start

    def union(self, other: Bounds) -> Bounds:
        if self.start is None or other.start is None:
            raise ValueError("Cannot take the union of bounds with an unknown start")

        if self.start <= other.start and self.end >= other.end:
            return self
        if other.start <= self.start and other.end >= self.end:
            return other

        start = min(self.start, other.start)
        return Bounds(start, max(self.end, other.end) - start)


@dataclass(frozen=True, slots=True)
class StreamInfo:
    """The subset of an ffprobe stream entry the timing logic relies on."""

    index: int
    codec_type: str | None = None
    codec_name: str | None = None
    channels: int | None = None
    sample_rate: int | None = None
    start_time: float | None = None
    duration: float | None = None
    duration_ts: int | None = None
    nb_frames: int | None = None
    width: int | None = None
    height: int | None = None
    r_frame_rate: str | None = None

    @property
    def is_audio(self) -> bool:
        return self.codec_type == "audio"

    @property
    def is_video(self) -> bool:
        return self.codec_type == "video"

    @property
    def frame_count(self) -> int | None:
        """Ticks of the stream: duration_ts, else nb_frames, else estimated from
        duration and r_frame_rate. None when ffprobe reported none of them."""

        if self.duration_ts is not None:
            return self.duration_ts
        if self.nb_frames is not None:
            return self.nb_frames
        if self.duration is None or not self.r_frame_rate:
            return None
        try:
            rate = Fraction(self.r_frame_rate)
        except (ValueError, ZeroDivisionError):
            return None
        return int(self.duration * rate)


@dataclass(slots=True)
class ProbeResult:
    """Container and stream metadata for one media file."""

    filename: str
    duration: float | None = None
    start_time: float | None = None
    format_name: str | None = None
    streams: list[StreamInfo] = field(default_factory=list)

    @property
    def audio_streams(self) -> list[StreamInfo]:
        return [stream for stream in self.streams if stream.is_audio]

    @property
    def video_streams(self) -> list[StreamInfo]:
        return [stream for stream in self.streams if stream.is_video]

    def stream(self, index: int) -> StreamInfo | None:
        return next((stream for stream in self.streams if stream.index == index), None)
