"""
Chunk labeling: one speaker per transcript chunk by majority of overlapping frames.

Tie-break rule: cluster ids are scanned in increasing order and a later id only
replaces the current best when its count is strictly higher, so the lowest id
wins an exact tie.
"""
from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from voxsplit.diarization.models import (
    SILENCE_CLUSTER,
    UNKNOWN_SPEAKER,
    LabeledFrame,
    Segment,
    TranscriptChunk,
)


def speaker_label(cluster: int) -> str:
    """Cluster id -> letter (A, B, ...); ids wrap after Z. Negative -> "Unknown"."""
    if cluster < 0:
        return UNKNOWN_SPEAKER
    return chr(ord("A") + cluster % 26)


def dominant_cluster(clusters: Sequence[int] | np.ndarray) -> int:
    """Most frequent non-negative id; lowest id on ties; SILENCE_CLUSTER when none."""
    ids = np.asarray(clusters, dtype=np.int64)
    ids = ids[ids >= 0]
    if ids.size == 0:
        return SILENCE_CLUSTER
    counts = np.bincount(ids)
    best = SILENCE_CLUSTER
    best_count = 0
    for cluster, count in enumerate(counts):
        if count > best_count:
            best, best_count = cluster, int(count)
    return best


def assign_speakers(
    labeled_frames: Sequence[LabeledFrame],
    chunks: Sequence[TranscriptChunk],
) -> list[Segment]:
    """
    One Segment per chunk, same text/start/end. Frames count toward a chunk when
    start <= frame.time <= end (inclusive). Chunks with no active frame in range
    get "Unknown".
    """
    if labeled_frames:
        times = np.fromiter((f.time for f in labeled_frames), dtype=np.float64, count=len(labeled_frames))
        clusters = np.fromiter((f.cluster for f in labeled_frames), dtype=np.int64, count=len(labeled_frames))
    else:
        times = np.empty(0, dtype=np.float64)
        clusters = np.empty(0, dtype=np.int64)

    segments: list[Segment] = []
    for chunk in chunks:
        in_range = (times >= chunk.start) & (times <= chunk.end)
        cluster = dominant_cluster(clusters[in_range])
        segments.append(
            Segment(text=chunk.text, start=chunk.start, end=chunk.end, speaker=speaker_label(cluster))
        )
    return segments
