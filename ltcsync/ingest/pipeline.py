from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from ltcsync.config import Settings
from ltcsync.ingest.ltcdump import DecodeError, decode_stream_channels
from ltcsync.ingest.probe import ProbeError, probe_media
from ltcsync.media_file import MediaFile
from ltcsync.sessions import EditingSession, SessionRejectionError

logger = logging.getLogger(__name__)


def probe_file(media_path: str | Path, settings: Settings | None = None) -> MediaFile:
    """Run the full per-file pipeline: probe, decode every audio channel, rank."""

    settings = settings or Settings()
    probe = probe_media(media_path, ffprobe_binary=settings.tools.ffprobe)
    frame_sets = decode_stream_channels(
        probe,
        ffmpeg_binary=settings.tools.ffmpeg,
        ltcdump_binary=settings.tools.ltcdump,
        work_dir=settings.pipeline.work_dir,
    )
    media_file = MediaFile(probe, frame_sets, quality_threshold=settings.timecode.quality_threshold)
    logger.info(
        "%s: start=%s quality=%.4f",
        media_file.name,
        media_file.timecode_start,
        media_file.timecode_quality,
    )
    return media_file


def probe_files(
    media_paths: Iterable[str | Path],
    settings: Settings | None = None,
) -> Iterator[tuple[str, MediaFile | Exception]]:
    """Probe several files concurrently, yielding results in submission order.

    Probe and decode failures are yielded as that file's result so one broken
    file never stops the batch. Malformed decoder output is not caught.
    """

    settings = settings or Settings()
    paths = [str(path) for path in media_paths]
    with ThreadPoolExecutor(max_workers=max(settings.pipeline.workers, 1)) as executor:
        futures = [executor.submit(probe_file, path, settings) for path in paths]
        for path, future in zip(paths, futures):
            try:
                yield path, future.result()
            except (ProbeError, DecodeError) as exc:
                logger.warning("Could not read %s: %s", path, exc)
                yield path, exc


def build_session(
    media_paths: Iterable[str | Path],
    settings: Settings | None = None,
    session: EditingSession | None = None,
) -> tuple[EditingSession, list[tuple[str, str]]]:
    """Probe files and add them to one editing session, serially.

    Returns the session and ``(path, message)`` for every file that failed or
    was rejected.
    """

    session = session or EditingSession()
    problems: list[tuple[str, str]] = []
    for path, result in probe_files(media_paths, settings):
        if isinstance(result, Exception):
            problems.append((path, str(result)))
            continue
        try:
            session.add_file(result)
        except SessionRejectionError as exc:
            logger.warning("%s", exc)
            problems.append((path, str(exc)))
    return session, problems
