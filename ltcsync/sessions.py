from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterator

from ltcsync.media_file import MediaFile
from ltcsync.models import Bounds

logger = logging.getLogger(__name__)


class SessionRejectionError(ValueError):
    """A file was not added to the editing session; nothing was changed."""


class InvalidStreamsError(SessionRejectionError):
    pass


class DuplicateFileError(SessionRejectionError):
    pass


class FileGroup:
    """Files that overlap temporally and therefore belong on one timeline.

    Files in different groups have no overlap and belong on separate timelines.
    """

    def __init__(self, files: list[MediaFile] | None = None) -> None:
        self.files: list[MediaFile] = list(files or [])

    def __len__(self) -> int:
        return len(self.files)

    def __iter__(self) -> Iterator[MediaFile]:
        return iter(self.files)

    def __contains__(self, file: object) -> bool:
        return any(member is file for member in self.files)

    def add_file(self, file: MediaFile) -> FileGroup:
        self.files.append(file)
        return self

    def remove_file(self, file: MediaFile) -> None:
        self.files = [member for member in self.files if member is not file]

    def bounds(self) -> Bounds | None:
        if not self.files:
            return None

        timed = [bounds for bounds in (file.bounds() for file in self.files) if bounds.start is not None]
        if not timed:
            return Bounds(None, max(file.duration for file in self.files))

        result = timed[0]
        for bounds in timed[1:]:
            result = result.union(bounds)
        return result

    def sorted_files(self) -> list[MediaFile]:
        return sorted(self.files, key=MediaFile.sort_key)


class EditingSession:
    """The state of a user-visible editing environment.

    ``groups`` are pairwise non-overlapping; files whose place on the timeline
    is unknown live in ``non_timecode_files``.
    """

    def __init__(self) -> None:
        self.groups: list[FileGroup] = []
        self.non_timecode_files = FileGroup()

    def all_files(self) -> list[MediaFile]:
        return [file for group in [*self.groups, self.non_timecode_files] for file in group]

    def find_file(self, filename: str) -> MediaFile | None:
        return next((file for file in self.all_files() if file.filename == filename), None)

    def sorted_groups(self) -> list[FileGroup]:
        return sorted(self.groups, key=lambda group: group.bounds().start)

    def add_file(self, file: MediaFile) -> MediaFile:
        """Place ``file`` into the group it overlaps, merging groups it bridges.

        Raises ``InvalidStreamsError`` or ``DuplicateFileError`` without touching
        the session when the file cannot be added.
        """

        if not file.has_valid_streams():
            raise InvalidStreamsError(f"No audio/video streams in {file.filename}")
        if self.find_file(file.filename) is not None:
            raise DuplicateFileError(f"Skipping duplicate file: {file.filename}")

        pending = deque([file])
        while pending:
            current = pending.popleft()
            if current.bounds().start is None:
                anchor = self._find_timecode_sibling(current)
                if anchor is None:
                    logger.debug("No timecode for %s; keeping it aside", current.name)
                    self.non_timecode_files.add_file(current)
                    continue
                logger.debug("%s takes its timing from %s", current.name, anchor.name)
                current.related_file = anchor

            self._place(current)
            if current.has_timecode:
                pending.extend(self._release_companions(current))

        return file

    def _find_timecode_sibling(self, file: MediaFile) -> MediaFile | None:
        return next(
            (
                candidate
                for candidate in self.all_files()
                if candidate.has_timecode and file.from_same_recording_session(candidate)
            ),
            None,
        )

    def _release_companions(self, anchor: MediaFile) -> list[MediaFile]:
        companions = [file for file in self.non_timecode_files if file.from_same_recording_session(anchor)]
        for companion in companions:
            self.non_timecode_files.remove_file(companion)
            companion.related_file = anchor
        return companions

    def _place(self, file: MediaFile) -> None:
        bounds = file.bounds()
        overlapping = [group for group in self.groups if group.bounds().overlap(bounds)]

        if not overlapping:
            self.groups.append(FileGroup([file]))
        elif len(overlapping) == 1:
            overlapping[0].add_file(file)
        else:
            # the file bridges groups that did not overlap before; they
            # become one larger group
            merged = FileGroup([member for group in overlapping for member in group])
            self.groups = [group for group in self.groups if not any(group is match for match in overlapping)]
            self.groups.append(merged.add_file(file))
            logger.info("%s bridges %d groups; merged into one of %d files", file.name, len(overlapping), len(merged))
