from __future__ import annotations

import itertools

import pytest

from ltcsync.models import Bounds, ProbeResult, StreamInfo


@pytest.mark.parametrize(
    ("first", "second", "overlaps", "union"),
    [
        # second entirely inside first
        (Bounds(1, 3), Bounds(2, 1), True, Bounds(1, 3)),
        # second starts during first, continues past its end
        (Bounds(1, 3), Bounds(2, 3), True, Bounds(1, 4)),
        # second starts before first, ends inside it
        (Bounds(1, 3), Bounds(0, 2), True, Bounds(0, 4)),
        # second entirely contains first
        (Bounds(1, 3), Bounds(0, 5), True, Bounds(0, 5)),
        # second starts just as first ends
        (Bounds(1, 3), Bounds(4, 1), True, Bounds(1, 4)),
        # first starts just as second ends
        (Bounds(1, 3), Bounds(0, 1), True, Bounds(0, 4)),
        # disjoint, either order
        (Bounds(1, 1), Bounds(3, 1), False, Bounds(1, 3)),
        (Bounds(3, 1), Bounds(1, 1), False, Bounds(1, 3)),
    ],
)
def test_overlap_and_union(first: Bounds, second: Bounds, overlaps: bool, union: Bounds) -> None:
    assert first.overlap(second) is overlaps
    assert first.union(second) == union


def test_overlap_is_symmetric() -> None:
    samples = [Bounds(start, duration) for start in (0, 0.5, 1, 2.5, 4) for duration in (0, 0.5, 1.5, 3)]

    for a, b in itertools.product(samples, repeat=2):
        assert a.overlap(b) == b.overlap(a)


def test_union_is_idempotent() -> None:
    for bounds in (Bounds(0.1, 0.2), Bounds(17373.495791666668, 5.355), Bounds(3, 0)):
        assert bounds.union(bounds) == bounds


def test_recording_past_midnight_does_not_wrap() -> None:
    assert not Bounds(23 * 60 * 60, 2 * 60 * 60).overlap(Bounds(2 * 60 * 60 + 1, 1))


def test_unknown_start() -> None:
    unknown = Bounds(None, 4)

    assert unknown.end is None
    assert not unknown.overlap(Bounds(0, 10))
    with pytest.raises(ValueError, match="unknown start"):
        unknown.union(Bounds(0, 10))


def test_negative_duration_is_rejected() -> None:
    with pytest.raises(ValueError, match="non-negative"):
        Bounds(1, -1)


def test_probe_result_stream_lookup() -> None:
    probe = ProbeResult(
        filename="/media/clip.mov",
        streams=[
            StreamInfo(index=0, codec_type="video"),
            StreamInfo(index=1, codec_type="audio", channels=2, sample_rate=48000),
        ],
    )

    assert [stream.index for stream in probe.audio_streams] == [1]
    assert [stream.index for stream in probe.video_streams] == [0]
    assert probe.stream(1).channels == 2
    assert probe.stream(5) is None
