import numpy as np
import pytest

from TRE.SMM.constants import SYNC_PATTERN
from TRE.SFM.frame_sync import (
    correlate, find_sync_positions, sync_frames, sync_diagnostics, frames_to_stream,
)
from TRE.SDM.self_clock_decoder import DecodeGap
from TRE.SGM.frame_builder import FrameBuilder

SYNC = list(SYNC_PATTERN)
HEAD = SYNC[:24]


def _flip(bits, n):
    return [1 - b if i < n else b for i, b in enumerate(bits)]


def test_single_sync_is_one_frame_covering_stream():
    result = sync_frames(SYNC)
    assert result.frame_count == 1
    frame = result.frames[0]
    assert (frame.bit_offset, frame.bit_length) == (0, 32)
    assert frame.data == bytes.fromhex("1acffc1d")
    assert (result.min_frame_bits, result.max_frame_bits) == (32, 32)


def test_frames_run_to_next_sync_or_end():
    payload_a = [1, 0] * 20
    payload_b = [0, 1, 1] * 5
    bits = [1, 1, 0] + SYNC + payload_a + SYNC + payload_b
    result = sync_frames(bits)
    assert [f.bit_offset for f in result.frames] == [3, 3 + 32 + 40]
    assert [f.bit_length for f in result.frames] == [72, 47]
    assert result.total_bits == 119
    assert result.frames[1].bit_end == len(bits)


def test_frames_do_not_overlap():
    fb = FrameBuilder()
    for word in (0x01, 0xFFFF, 0x0, 0x7FFFFFFF):
        fb.add_word(word, 32)
    result = sync_frames(fb.bits())
    assert result.frame_count == 4
    for a, b in zip(result.frames, result.frames[1:]):
        assert a.bit_end <= b.bit_offset


def test_packed_stream_concatenates_frames():
    fb = FrameBuilder()
    fb.add_word(0xAB, 8)
    fb.add_frame([1, 1, 1])
    result = sync_frames(fb.bits())
    stream = frames_to_stream(result.frames)
    assert stream == bytes.fromhex("1acffc1dab") + bytes.fromhex("1acffc1de0")


def test_bit_errors_prevent_exact_match():
    result = sync_frames(_flip(SYNC, 1))
    assert result.frames == []
    assert not result.locked


def test_partial_threshold_boundary():
    at_20 = sync_frames(_flip(HEAD, 4))
    at_19 = sync_frames(_flip(HEAD, 5))
    assert [(m.position, m.score) for m in at_20.partial_matches] == [(0, 20)]
    assert at_19.partial_matches == []


def test_partial_observed_bits_span_32_when_available():
    bits = _flip(SYNC, 2) + [1] * 8
    result = sync_frames(bits)
    first = result.partial_matches[0]
    assert first.position == 0
    assert first.observed == "".join(map(str, bits[:32]))


def test_partial_matches_computed_even_with_frames():
    result = sync_frames(SYNC + [0] * 10)
    assert result.frame_count == 1
    assert result.partial_matches[0].position == 0
    assert result.partial_matches[0].score == 24


def test_correlate_counts_agreement():
    bits = np.array([1, 0, 1, 1], dtype=np.uint8)
    scores = correlate(bits, np.array([1, 1], dtype=np.uint8))
    assert scores.tolist() == [1, 1, 2]
    assert correlate(bits[:1], np.array([1, 1], dtype=np.uint8)).shape == (0,)


def test_find_sync_positions_reports_every_exact_hit():
    bits = np.array([0] + SYNC + SYNC, dtype=np.uint8)
    pattern = np.array(SYNC, dtype=np.uint8)
    assert find_sync_positions(bits, pattern).tolist() == [1, 33]


def test_gap_count_per_frame():
    bits = SYNC + [0] * 8 + SYNC + [1] * 8
    gaps = [
        DecodeGap(bit_index=10, marker_start=0, marker_end=0, mid_sample=0, mid_state=(0, 0)),
        DecodeGap(bit_index=40, marker_start=0, marker_end=0, mid_sample=0, mid_state=(0, 0)),
        DecodeGap(bit_index=50, marker_start=0, marker_end=0, mid_sample=0, mid_state=(1, 1)),
    ]
    result = sync_frames(bits, gaps=gaps)
    assert [f.gap_count for f in result.frames] == [1, 1]


def test_invalid_pattern_rejected():
    with pytest.raises(ValueError):
        sync_frames(SYNC, sync_pattern=SYNC[:31])
    with pytest.raises(ValueError):
        sync_frames(SYNC, sync_pattern=[2] * 32)


def test_summary_lines():
    assert sync_frames(SYNC + [0] * 4).summary() == "Length: 36-36 bits"
    assert sync_frames(_flip(HEAD, 4)).summary() == "No frames found. 1 partial matches present"
    assert sync_frames([0] * 40).summary() == "No frames found. No partial matches either"


def test_diagnostics_only_when_unlocked_and_non_empty():
    assert sync_diagnostics([], sync_frames([])) is None
    assert sync_diagnostics(SYNC, sync_frames(SYNC)) is None

    bits = [0, 1] * 600 + _flip(HEAD, 3)
    diag = sync_diagnostics(bits, sync_frames(bits))
    assert len(diag.first_bits) == 1000
    assert diag.first_32 == "01" * 16
    assert f"position: 1200, data: {''.join(map(str, _flip(HEAD, 3)))}" in diag.partial_lines


def test_hit_inside_own_sync_does_not_open_a_frame():
    # Period-8 marker: a second exact hit sits 8 bits into the first one.
    periodic = [0, 0, 0, 1, 1, 0, 1, 1] * 4
    bits = periodic + periodic[:8] + [1, 1, 1, 1] + periodic
    pattern = np.array(periodic, dtype=np.uint8)

    assert find_sync_positions(np.array(bits, dtype=np.uint8), pattern).tolist() == [0, 8, 44]

    result = sync_frames(bits, sync_pattern=periodic)
    assert [f.bit_offset for f in result.frames] == [0, 44]
    assert [f.bit_length for f in result.frames] == [44, 32]
