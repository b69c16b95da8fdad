from __future__ import annotations

import re
from dataclasses import dataclass, replace

from ltcsync.timecode import arithmetic

FIELD_SEPARATOR = re.compile(r"[ \t|]+")
TIMECODE_PATTERN = re.compile(r"^(\d+):(\d+):(\d+)([:;.])(\d+)$")


class TimecodeParseError(ValueError):
    """Raised when a decoder output line violates the ltcdump line format."""


@dataclass(frozen=True, slots=True)
class TimecodeFrame:
    """A single decoded LTC frame, as reported by one line of ltcdump output."""

    hours: int
    minutes: int
    seconds: int
    frame_number: int
    dropframe: bool
    first_sample: int
    last_sample: int
    reverse: bool = False

    def __post_init__(self) -> None:
        if self.last_sample < self.first_sample:
            raise TimecodeParseError(
                f"Frame ends before it starts: samples {self.first_sample}..{self.last_sample}"
            )

    @classmethod
    def from_line(cls, line: str) -> TimecodeFrame:
        # [user_bits, timecode, first_sample, last_sample, direction]
        fields = FIELD_SEPARATOR.split(line)
        if len(fields) != 5:
            raise TimecodeParseError(f"Expected 5 fields in ltcdump line, got {len(fields)}: {line!r}")

        match = TIMECODE_PATTERN.match(fields[1])
        if match is None:
            raise TimecodeParseError(f"Malformed timecode {fields[1]!r} in line: {line!r}")

        try:
            first_sample = int(fields[2])
            last_sample = int(fields[3])
        except ValueError as exc:
            raise TimecodeParseError(f"Malformed sample range in line: {line!r}") from exc

        hours, minutes, seconds, separator, frame_number = match.groups()
        return cls(
            hours=int(hours),
            minutes=int(minutes),
            seconds=int(seconds),
            frame_number=int(frame_number),
            dropframe=separator != ":",
            first_sample=first_sample,
            last_sample=last_sample,
            reverse=fields[4] == "R",
        )

    @property
    def timecode(self) -> str:
        separator = ";" if self.dropframe else ":"
        return f"{self.hours:02d}:{self.minutes:02d}:{self.seconds:02d}{separator}{self.frame_number:02d}"

    @property
    def span(self) -> int:
        return arithmetic.frame_span(self)

    def wall_clock_seconds(self, frame_rate: float) -> float:
        return arithmetic.wall_clock_seconds(self, frame_rate)

    def offset_seconds(self, sample_rate: float) -> float:
        return arithmetic.offset_seconds(self, sample_rate)


@dataclass(frozen=True, slots=True)
class FrameSet:
    """All frames decoded from one audio channel, in decode order.

    ``stream_index`` and ``channel`` are unset for a bare decoder run and get
    filled in via :meth:`tagged` once the run is attributed to a file's stream.
    """

    frames: tuple[TimecodeFrame, ...] = ()
    stream_index: int | None = None
    channel: int | None = None

    @classmethod
    def from_text(cls, text: str) -> FrameSet:
        lines = [line for line in text.split("\n") if line.strip() and not line.startswith("#")]
        return cls(frames=tuple(TimecodeFrame.from_line(line) for line in lines))

    def tagged(self, stream_index: int, channel: int) -> FrameSet:
        return replace(self, stream_index=stream_index, channel=channel)

    def __len__(self) -> int:
        return len(self.frames)

    def __iter__(self):
        return iter(self.frames)

    def __getitem__(self, index: int) -> TimecodeFrame:
        return self.frames[index]

    @property
    def key_frame(self) -> TimecodeFrame:
        # the first decoded frame is often a partial edge case
        return self.frames[1]

    def frame_rate(self, sample_rate: float) -> float:
        return arithmetic.infer_frame_rate(self.frames, sample_rate)

    def wall_clock_start(self, sample_rate: float) -> float:
        """Wall-clock seconds at the first sample of the decoded audio stream."""

        key_frame = self.key_frame
        return key_frame.wall_clock_seconds(self.frame_rate(sample_rate)) - key_frame.offset_seconds(sample_rate)
