"""Tests for adjacent same-speaker merging and the speaker roster."""

from __future__ import annotations

import pytest

from voxsplit.diarization.models import Segment
from voxsplit.diarization.segments import optimize_segments, unique_speakers


def _seg(text: str, start: float, end: float, speaker: str) -> Segment:
    return Segment(text=text, start=start, end=end, speaker=speaker)


def test_same_speaker_within_gap_merges():
    segments = [_seg("hello", 0.0, 1.0, "A"), _seg("world", 1.2, 2.0, "A")]
    [merged] = optimize_segments(segments, merge_threshold=0.2)

    assert merged.text == "hello world"
    assert merged.start == 0.0
    assert merged.end == 2.0
    assert merged.speaker == "A"


def test_gap_above_threshold_keeps_segments_apart():
    segments = [_seg("a", 0.0, 1.0, "A"), _seg("b", 1.6, 2.0, "A")]
    assert len(optimize_segments(segments, merge_threshold=0.5)) == 2


def test_speaker_change_starts_new_segment():
    segments = [_seg("a", 0.0, 1.0, "A"), _seg("b", 1.0, 2.0, "B"), _seg("c", 2.0, 3.0, "A")]
    assert [s.speaker for s in optimize_segments(segments)] == ["A", "B", "A"]


def test_unknown_segments_merge_like_any_label():
    segments = [_seg("x", 0.0, 1.0, "Unknown"), _seg("y", 1.1, 2.0, "Unknown")]
    [merged] = optimize_segments(segments)
    assert merged.text == "x y"


def test_chain_merges_into_first_kept_segment():
    segments = [_seg("one", 0.0, 1.0, "A"), _seg("two", 1.3, 2.0, "A"), _seg("three", 2.4, 3.0, "A")]
    [merged] = optimize_segments(segments, merge_threshold=0.5)
    assert merged.text == "one two three"
    assert merged.end == 3.0


def test_merge_is_idempotent():
    segments = [
        _seg("a", 0.0, 1.0, "A"),
        _seg("b", 1.2, 2.0, "A"),
        _seg("c", 2.1, 3.0, "B"),
        _seg("d", 4.0, 5.0, "B"),
        _seg("e", 5.1, 6.0, "Unknown"),
    ]
    once = optimize_segments(segments)
    twice = optimize_segments(once)
    assert twice == once


def test_input_is_not_mutated():
    segments = [_seg("hello", 0.0, 1.0, "A"), _seg("world", 1.2, 2.0, "A")]
    optimize_segments(segments)
    assert segments[0].text == "hello"
    assert segments[0].end == 1.0


def test_degenerate_inputs():
    assert optimize_segments([]) == []
    single = [_seg("only", 0.0, 0.3, "A")]
    assert optimize_segments(single) == single


def test_min_segment_duration_is_not_enforced():
    # Gap-only merging: short results survive even though they are under 1.0s
    segments = [_seg("uh", 0.0, 0.2, "A"), _seg("hm", 0.3, 0.4, "A"), _seg("ok", 5.0, 5.1, "B")]
    result = optimize_segments(segments, merge_threshold=0.5)

    assert [(s.text, s.start, s.end) for s in result] == [("uh hm", 0.0, 0.4), ("ok", 5.0, 5.1)]
    assert all(s.end - s.start < 1.0 for s in result)


def test_unique_speakers_sorted_without_unknown():
    segments = [_seg("", 0, 1, "C"), _seg("", 1, 2, "Unknown"), _seg("", 2, 3, "A"), _seg("", 3, 4, "C")]
    assert unique_speakers(segments) == ["A", "C"]


@pytest.mark.parametrize("threshold,expected", [(0.19, 2), (0.2, 1), (1.0, 1)])
def test_threshold_boundary(threshold, expected):
    segments = [_seg("a", 0.0, 1.0, "A"), _seg("b", 1.2, 2.0, "A")]
    assert len(optimize_segments(segments, merge_threshold=threshold)) == expected
