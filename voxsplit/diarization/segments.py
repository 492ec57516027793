from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace

from voxsplit.diarization.models import UNKNOWN_SPEAKER, Segment

DEFAULT_MERGE_THRESHOLD = 0.5


def optimize_segments(
    segments: Sequence[Segment],
    merge_threshold: float = DEFAULT_MERGE_THRESHOLD,
) -> list[Segment]:
    """
    Single left-to-right pass merging a segment into the previous kept one when
    the speaker matches and start - previous.end <= merge_threshold. Merging
    extends end and joins text with one space. Resulting duration is not checked.
    Input segments are not mutated.
    """
    result: list[Segment] = []
    for segment in segments:
        if result:
            previous = result[-1]
            if (
                segment.speaker == previous.speaker
                and segment.start - previous.end <= merge_threshold
            ):
                previous.end = segment.end
                previous.text = f"{previous.text} {segment.text}"
                continue
        result.append(replace(segment))
    return result


def unique_speakers(segments: Iterable[Segment]) -> list[str]:
    """Distinct labels other than "Unknown", sorted."""
    return sorted({s.speaker for s in segments if s.speaker != UNKNOWN_SPEAKER})
