#!/usr/bin/env python3
# =============================================================================
# frame_sync.py - Telemetry Frame Synchroniser
# =============================================================================
#
# Takes the bit stream from SelfClockDecoder and cuts it into telemetry frames.
#
# Frame sync strategy
# -------------------
# Every frame opens with the 32-bit SYNC_PATTERN (SMM/constants.py).  Frames
# have no length field, so a frame simply runs until the next sync marker:
#
#   1. Find every position where the next 32 bits equal the pattern exactly
#      (zero bit errors tolerated).
#   2. The first hit opens frame 0.  It ends at the first hit that starts at
#      least 32 bits later, or at end of stream.
#   3. Scanning resumes at that end, so frames never overlap and a hit inside
#      an already-consumed frame can never open another one.
#
# Partial matches
# ---------------
# A separate full pass scores every 24-bit window against the first 24 bits of
# the pattern.  Windows with >= PARTIAL_THRESHOLD agreeing bits are recorded
# together with the 32 bits observed from that position.  This pass does not
# depend on step 1-3: partial matches may overlap confirmed frames.
#
# Both passes compare in CORRELATION_BLOCK-sized chunks of windows so the
# temporary comparison matrix stays bounded on long captures.
#
# =============================================================================

from __future__ import annotations
from typing import NamedTuple, Sequence

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from TRE.SMM.constants import (
    SYNC_PATTERN, SYNC_BITS,
    PARTIAL_WINDOW, PARTIAL_THRESHOLD,
    CORRELATION_BLOCK,
    DEBUG_BIT_COUNT, DEBUG_HEAD_BITS,
)
from TRE.SDM.self_clock_decoder import DecodeGap
from TRE.SFM.bit_packer import pack_bits, bits_to_string


class Frame(NamedTuple):
    frame_index: int     # sequential frame number
    bit_offset:  int     # index into the decoded bit stream where the frame starts
    bit_length:  int     # frame size in bits, sync marker included
    data:        bytes   # MSB-first packed frame, zero-padded tail
    gap_count:   int     # dropped decode intervals inside the frame

    @property
    def bit_end(self) -> int:
        return self.bit_offset + self.bit_length


class PartialMatch(NamedTuple):
    position: int        # window start in the decoded bit stream
    score:    int        # agreeing bits out of PARTIAL_WINDOW
    observed: str        # up to SYNC_BITS bits from position, '0'/'1'


class SyncResult(NamedTuple):
    frames:          list[Frame]
    partial_matches: list[PartialMatch]
    total_bits:      int   # bits covered by frames
    min_frame_bits:  int   # 0 when no frames
    max_frame_bits:  int   # 0 when no frames

    @property
    def frame_count(self) -> int:
        return len(self.frames)

    @property
    def locked(self) -> bool:
        return bool(self.frames)

    def summary(self) -> str:
        if self.frames:
            return f"Length: {self.min_frame_bits}-{self.max_frame_bits} bits"
        if self.partial_matches:
            tail = f"{len(self.partial_matches)} partial matches present"
        else:
            tail = "No partial matches either"
        return "No frames found. " + tail


class SyncDiagnostics(NamedTuple):
    first_bits:    str         # first DEBUG_BIT_COUNT bits
    first_32:      str         # first DEBUG_HEAD_BITS bits
    partial_lines: list[str]   # "position: P, data: BITS" per partial match


# ---------------------------------------------------------------------------

def _as_pattern(pattern: Sequence[int]) -> np.ndarray:
    pat = np.asarray(pattern, dtype=np.int64)
    if pat.shape != (SYNC_BITS,):
        raise ValueError(f"sync pattern must be {SYNC_BITS} bits, got {pat.size}")
    if not np.isin(pat, (0, 1)).all():
        raise ValueError("sync pattern may only contain 0 and 1")
    return pat.astype(np.uint8)


def correlate(bits: np.ndarray, template: np.ndarray) -> np.ndarray:
    """
    Number of agreeing bits between template and every window of bits.

    Returns an int array of length len(bits) - len(template) + 1 (empty when
    the stream is shorter than the template).
    """
    width = int(template.shape[0])
    n_windows = int(bits.shape[0]) - width + 1
    if n_windows <= 0:
        return np.zeros(0, dtype=np.int64)

    windows = sliding_window_view(bits, width)
    scores  = np.empty(n_windows, dtype=np.int64)
    for lo in range(0, n_windows, CORRELATION_BLOCK):
        hi = min(lo + CORRELATION_BLOCK, n_windows)
        scores[lo:hi] = (windows[lo:hi] == template).sum(axis=1)
    return scores


def find_sync_positions(bits: np.ndarray, pattern: np.ndarray) -> np.ndarray:
    """Every index where the pattern matches exactly (overlaps included)."""
    scores = correlate(bits, pattern)
    return np.flatnonzero(scores == pattern.shape[0])


def find_partial_matches(
    bits: np.ndarray,
    pattern: np.ndarray,
    window: int = PARTIAL_WINDOW,
    threshold: int = PARTIAL_THRESHOLD,
) -> list[PartialMatch]:
    """Score every `window`-bit stretch against the pattern head."""
    scores = correlate(bits, pattern[:window])
    matches = []
    for pos in np.flatnonzero(scores >= threshold).tolist():
        matches.append(PartialMatch(
            position=pos,
            score=int(scores[pos]),
            observed=bits_to_string(bits[pos:pos + pattern.shape[0]]),
        ))
    return matches


def _count_gaps(gap_indices: np.ndarray, start: int, end: int) -> int:
    # A gap at bit_index k sits between bits k-1 and k; only cuts strictly
    # inside the frame count.
    lo = np.searchsorted(gap_indices, start, side="right")
    hi = np.searchsorted(gap_indices, end, side="left")
    return int(max(hi - lo, 0))


def sync_frames(
    bits: Sequence[int] | np.ndarray,
    sync_pattern: Sequence[int] = SYNC_PATTERN,
    gaps: Sequence[DecodeGap] | None = None,
) -> SyncResult:
    """
    Find every telemetry frame in a decoded bit stream.

    Parameters
    ----------
    bits          : flat 0/1 sequence from SelfClockDecoder
    sync_pattern  : 32-bit frame marker, default SYNC_PATTERN
    gaps          : optional DecodeGap list (gap-tracking mode) used to count
                    dropped intervals per frame

    Returns
    -------
    SyncResult
    """
    arr     = np.asarray(bits, dtype=np.uint8)
    pattern = _as_pattern(sync_pattern)
    total   = int(arr.shape[0])
    width   = int(pattern.shape[0])

    gap_indices = np.array(sorted(g.bit_index for g in gaps or ()), dtype=np.int64)

    # --- Pass 1: exact sync, non-overlapping frames ---
    hits   = find_sync_positions(arr, pattern)
    frames: list[Frame] = []

    k = 0
    n_hits = int(hits.shape[0])
    while k < n_hits:
        start = int(hits[k])
        nxt   = int(np.searchsorted(hits, start + width, side="left"))
        end   = int(hits[nxt]) if nxt < n_hits else total

        frames.append(Frame(
            frame_index=len(frames),
            bit_offset=start,
            bit_length=end - start,
            data=pack_bits(arr, start, end - start),
            gap_count=_count_gaps(gap_indices, start, end),
        ))
        k = nxt

    # --- Pass 2: partial correlation, independent of pass 1 ---
    partial = find_partial_matches(arr, pattern)

    lengths = [f.bit_length for f in frames]
    return SyncResult(
        frames=frames,
        partial_matches=partial,
        total_bits=sum(lengths),
        min_frame_bits=min(lengths) if lengths else 0,
        max_frame_bits=max(lengths) if lengths else 0,
    )


def sync_diagnostics(
    bits: Sequence[int] | np.ndarray,
    result: SyncResult,
) -> SyncDiagnostics | None:
    """
    Debug material for a failed lock.

    Only produced when the bit stream is non-empty AND no frame was found;
    returns None otherwise.
    """
    arr = np.asarray(bits, dtype=np.uint8)
    if arr.shape[0] == 0 or result.frames:
        return None

    lines = [
        f"position: {m.position}, data: {m.observed}"
        for m in result.partial_matches
    ]
    return SyncDiagnostics(
        first_bits=bits_to_string(arr[:DEBUG_BIT_COUNT]),
        first_32=bits_to_string(arr[:DEBUG_HEAD_BITS]),
        partial_lines=lines,
    )


def frames_to_stream(frames: Sequence[Frame]) -> bytes:
    """Concatenate packed frames with no delimiter or length prefix."""
    return b"".join(f.data for f in frames)
