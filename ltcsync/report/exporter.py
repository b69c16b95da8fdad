from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any

from ltcsync.sessions import EditingSession, FileGroup

ROW_FIELDS = [
    "group",
    "group_start_seconds",
    "group_duration_seconds",
    "filename",
    "start_seconds",
    "duration_seconds",
    "offset_in_group_seconds",
    "timecode_quality",
    "frame_rate",
    "related_file",
]


def format_clock(seconds: float | None) -> str:
    """Render wall-clock seconds as HH:MM:SS.mmm."""

    if seconds is None:
        return "--:--:--.---"
    total_ms = int(round(seconds * 1000))
    hours, remainder = divmod(total_ms, 3_600_000)
    minutes, remainder = divmod(remainder, 60_000)
    secs, millis = divmod(remainder, 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}.{millis:03d}"


def session_rows(session: EditingSession) -> list[dict[str, Any]]:
    """Flatten a session into one row per file, timed groups first in start order."""

    rows: list[dict[str, Any]] = []
    for index, group in enumerate(session.sorted_groups(), start=1):
        rows.extend(_group_rows(group, index))
    rows.extend(_group_rows(session.non_timecode_files, None))
    return rows


def export_session(session: EditingSession, output_path: str | Path) -> Path:
    """Export the session grouping to JSON (default) or CSV, based on file extension."""

    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    rows = session_rows(session)

    if path.suffix.lower() == ".csv":
        with path.open("w", newline="", encoding="utf-8") as handle:
            writer = csv.DictWriter(handle, fieldnames=ROW_FIELDS)
            writer.writeheader()
            for row in rows:
                writer.writerow({key: "" if value is None else value for key, value in row.items()})
    else:
        path.write_text(json.dumps(rows, indent=2), encoding="utf-8")

    return path


def export_session_outputs(
    session: EditingSession,
    output_dir: str | Path,
    *,
    basename: str = "session",
) -> dict[str, Path]:
    """Write the grouping as both JSON and CSV into ``output_dir``."""

    resolved_output_dir = Path(output_dir)
    resolved_output_dir.mkdir(parents=True, exist_ok=True)

    return {
        "json": export_session(session, resolved_output_dir / f"{basename}.json"),
        "csv": export_session(session, resolved_output_dir / f"{basename}.csv"),
    }


def render_session_table(session: EditingSession) -> str:
    lines = [f"{'Start TC':<14}{'Duration':<14}File"]
    for group in session.sorted_groups():
        bounds = group.bounds()
        if len(group) > 1:
            lines.append(
                f"{format_clock(bounds.start):<14}{format_clock(bounds.duration):<14}"
                f"Group of {len(group)} overlapping files"
            )
        for file in group.sorted_files():
            file_bounds = file.bounds()
            lines.append(f"{format_clock(file_bounds.start):<14}{format_clock(file_bounds.duration):<14}{file.name}")
        lines.append("")

    if len(session.non_timecode_files):
        lines.append(f"Files without embedded timecode: {len(session.non_timecode_files)}")
        for file in session.non_timecode_files:
            lines.append(f"{'':<14}{format_clock(file.duration):<14}{file.name}")

    return "\n".join(lines).rstrip() + "\n"


def _group_rows(group: FileGroup, index: int | None) -> list[dict[str, Any]]:
    group_bounds = group.bounds()
    if group_bounds is None:
        return []

    rows: list[dict[str, Any]] = []
    for file in group.sorted_files():
        bounds = file.bounds()
        offset = None
        if bounds.start is not None and group_bounds.start is not None:
            offset = round(bounds.start - group_bounds.start, 6)
        rows.append(
            {
                "group": index,
                "group_start_seconds": group_bounds.start,
                "group_duration_seconds": group_bounds.duration,
                "filename": file.filename,
                "start_seconds": bounds.start,
                "duration_seconds": bounds.duration,
                "offset_in_group_seconds": offset,
                "timecode_quality": round(file.timecode_quality, 6),
                "frame_rate": file.frame_rate,
                "related_file": file.related_file.filename if file.related_file else None,
            }
        )
    return rows
