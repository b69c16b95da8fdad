"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from ltcsync.media_file import MediaFile
from ltcsync.models import ProbeResult, StreamInfo


class StubMediaFile(MediaFile):
    """A MediaFile whose own LTC start is given instead of decoded."""

    def __init__(self, probe: ProbeResult, start: float | None) -> None:
        super().__init__(probe)
        self._stub_start = start

    @property
    def timecode_start(self) -> float | None:
        return self._stub_start


def make_probe(
    filename: str,
    duration: float,
    *,
    recorder_track: int | None = None,
    streams: list[StreamInfo] | None = None,
) -> ProbeResult:
    """Probe record for a video file, or a single-track recorder WAV when
    ``recorder_track`` (its sample count) is given."""

    if streams is None:
        if recorder_track is not None:
            streams = [
                StreamInfo(
                    index=0,
                    codec_type="audio",
                    channels=1,
                    sample_rate=48000,
                    duration=duration,
                    duration_ts=recorder_track,
                )
            ]
        else:
            streams = [
                StreamInfo(index=0, codec_type="video", duration=duration, duration_ts=int(duration * 12288)),
                StreamInfo(index=1, codec_type="audio", channels=2, sample_rate=48000, duration=duration),
            ]
    return ProbeResult(filename=filename, duration=duration, start_time=0.0, streams=streams)


@pytest.fixture
def make_file() -> Callable[..., MediaFile]:
    def _make(
        filename: str,
        start: float | None,
        duration: float = 1.0,
        *,
        recorder_track: int | None = None,
        streams: list[StreamInfo] | None = None,
    ) -> MediaFile:
        probe = make_probe(filename, duration, recorder_track=recorder_track, streams=streams)
        return StubMediaFile(probe, start)

    return _make
