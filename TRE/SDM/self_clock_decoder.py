#!/usr/bin/env python3
# =============================================================================
# self_clock_decoder.py - Self-Clocking Two-Channel Demodulator
# =============================================================================
#
# Recovers the telemetry bit stream from a ChannelSamples capture.
#
# Line code model:
#   - A sample with BOTH channels high is a clock marker.
#   - Every pair of consecutive markers bounds one bit interval.
#   - The sample at the integer midpoint of the interval carries the bit:
#       ch0=0, ch1=1  → bit 1
#       ch0=1, ch1=0  → bit 0
#       anything else → ambiguous, interval dropped
#
# Dropped intervals leave NO placeholder in the bit stream, so every bit after
# a drop is shifted one position relative to the capture.  That behaviour is
# kept for out.bin compatibility.  With track_gaps=True each drop is also
# reported as a DecodeGap so later stages can tell where the stream was cut.
#
# =============================================================================

from __future__ import annotations
from typing import NamedTuple

import numpy as np

from TRE.SDM.channel_extractor import ChannelSamples


class DecodeGap(NamedTuple):
    bit_index:    int             # bits emitted before this drop
    marker_start: int             # sample index of the opening marker
    marker_end:   int             # sample index of the closing marker
    mid_sample:   int             # sample index that was inspected
    mid_state:    tuple[int, int] # (ch0, ch1) found there


class DemodResult(NamedTuple):
    bits:         np.ndarray      # uint8, only 0/1
    marker_count: int             # every marker found, including the first
    gaps:         list[DecodeGap] # empty unless gap tracking is on

    @property
    def interval_count(self) -> int:
        return max(self.marker_count - 1, 0)

    @property
    def invalid_count(self) -> int:
        return self.interval_count - int(self.bits.shape[0])


class SelfClockDecoder:
    """
    Stateless marker-interval decoder.

    Parameters
    ----------
    track_gaps : bool
        Report every dropped interval as a DecodeGap.  The emitted bit
        sequence is identical either way.
    """

    def __init__(self, track_gaps: bool = False):
        self.track_gaps = track_gaps

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def decode(self, samples: ChannelSamples) -> DemodResult:
        """
        Decode a full capture.

        Returns
        -------
        DemodResult  (bits, marker_count, gaps)
        """
        markers = self.find_markers(samples)
        n_markers = int(markers.shape[0])

        if n_markers < 2:
            return DemodResult(
                bits=np.zeros(0, dtype=np.uint8),
                marker_count=n_markers,
                gaps=[],
            )

        starts = markers[:-1]
        ends   = markers[1:]
        mids   = (starts + ends) // 2

        mid0 = samples.ch0[mids]
        mid1 = samples.ch1[mids]

        is_one  = (mid1 == 1) & (mid0 == 0)
        is_zero = (mid0 == 1) & (mid1 == 0)
        valid   = is_one | is_zero

        bits = is_one[valid].astype(np.uint8)

        gaps: list[DecodeGap] = []
        if self.track_gaps:
            gaps = self._collect_gaps(valid, starts, ends, mids, mid0, mid1)

        return DemodResult(bits=bits, marker_count=n_markers, gaps=gaps)

    @staticmethod
    def find_markers(samples: ChannelSamples) -> np.ndarray:
        """Sample indices where ch0 and ch1 are both high, in capture order."""
        return np.flatnonzero(samples.marker_plane()).astype(np.int64)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _collect_gaps(
        valid:  np.ndarray,
        starts: np.ndarray,
        ends:   np.ndarray,
        mids:   np.ndarray,
        mid0:   np.ndarray,
        mid1:   np.ndarray,
    ) -> list[DecodeGap]:
        # Bits emitted before interval k = number of valid intervals before k.
        emitted_before = np.cumsum(valid) - valid
        gaps = []
        for k in np.flatnonzero(~valid).tolist():
            gaps.append(DecodeGap(
                bit_index=int(emitted_before[k]),
                marker_start=int(starts[k]),
                marker_end=int(ends[k]),
                mid_sample=int(mids[k]),
                mid_state=(int(mid0[k]), int(mid1[k])),
            ))
        return gaps


def decode_signal(samples: ChannelSamples, track_gaps: bool = False) -> DemodResult:
    """Convenience wrapper: SelfClockDecoder(track_gaps).decode(samples)."""
    return SelfClockDecoder(track_gaps=track_gaps).decode(samples)
