"""
Export diarized segments as CSV, Markdown or plain text.

Speaker names: segments carry letters ("A", "B", "Unknown"); a names map
({"A": "Alice"}) overrides the default "Speaker A".
"""
from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Mapping
from datetime import datetime

from voxsplit.diarization.models import Segment

EXPORT_FORMATS = ("csv", "markdown", "text")
DEFAULT_SPEAKER_PREFIX = "Speaker "


def format_time(seconds: float) -> str:
    """MM:SS, or HH:MM:SS from one hour on. Fractions are truncated."""
    total = max(0, int(seconds))
    hrs, rem = divmod(total, 3600)
    mins, secs = divmod(rem, 60)
    if hrs > 0:
        return f"{hrs:02d}:{mins:02d}:{secs:02d}"
    return f"{mins:02d}:{secs:02d}"


def speaker_name(label: str, names: Mapping[str, str] | None = None) -> str:
    if names and names.get(label):
        return names[label]
    return f"{DEFAULT_SPEAKER_PREFIX}{label}"


def export_csv(
    segments: Iterable[Segment],
    include_timestamps: bool = True,
    speaker_names: Mapping[str, str] | None = None,
    delimiter: str = ",",
) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, delimiter=delimiter, lineterminator="\n")
    if include_timestamps:
        writer.writerow(["Speaker", "Start", "End", "Text"])
    else:
        writer.writerow(["Speaker", "Text"])
    for segment in segments:
        name = speaker_name(segment.speaker, speaker_names)
        if include_timestamps:
            writer.writerow([name, format_time(segment.start), format_time(segment.end), segment.text])
        else:
            writer.writerow([name, segment.text])
    return buf.getvalue()


def export_markdown(
    segments: Iterable[Segment],
    include_timestamps: bool = True,
    speaker_names: Mapping[str, str] | None = None,
    include_header: bool = True,
    generated_at: datetime | None = None,
) -> str:
    parts: list[str] = []
    if include_header:
        generated_at = generated_at or datetime.now()
        parts.append("# Transcript\n\n")
        parts.append(f"Generated: {generated_at:%Y-%m-%d %H:%M:%S}\n\n")
    for segment in segments:
        name = speaker_name(segment.speaker, speaker_names)
        if include_timestamps:
            parts.append(f"### {name} ({format_time(segment.start)} - {format_time(segment.end)})\n\n")
        else:
            parts.append(f"### {name}\n\n")
        parts.append(f"{segment.text}\n\n")
    return "".join(parts)


def export_text(
    segments: Iterable[Segment],
    include_timestamps: bool = True,
    speaker_names: Mapping[str, str] | None = None,
) -> str:
    lines: list[str] = []
    for segment in segments:
        name = speaker_name(segment.speaker, speaker_names)
        if include_timestamps:
            prefix = f"[{name} {format_time(segment.start)}-{format_time(segment.end)}]"
        else:
            prefix = f"[{name}]"
        lines.append(f"{prefix} {segment.text}\n")
    return "".join(lines)


def export(
    fmt: str,
    segments: Iterable[Segment],
    include_timestamps: bool = True,
    speaker_names: Mapping[str, str] | None = None,
) -> str:
    """Dispatch on fmt ("csv" | "markdown" | "text"). Raises ValueError otherwise."""
    if fmt == "csv":
        return export_csv(segments, include_timestamps, speaker_names)
    if fmt == "markdown":
        return export_markdown(segments, include_timestamps, speaker_names)
    if fmt == "text":
        return export_text(segments, include_timestamps, speaker_names)
    raise ValueError(f"Unknown export format {fmt!r}; expected one of {', '.join(EXPORT_FORMATS)}")
