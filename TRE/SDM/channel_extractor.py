#!/usr/bin/env python3
# =============================================================================
# channel_extractor.py - Two-Channel Sample Extractor
# =============================================================================
#
# Splits a raw logic capture into its two single-bit channels.
#
# Capture layout (see SMM/constants.py):
#   byte[i] bit 0 → ch0[i]
#   byte[i] bit 1 → ch1[i]
#   all other bits are ignored
#
# The whole buffer is converted with two vectorised numpy operations.  When a
# progress callback is supplied the buffer is walked in PROGRESS_INTERVAL
# blocks instead, so the caller can redraw a percentage line.
#
# =============================================================================

from __future__ import annotations
from typing import Callable, Iterator, NamedTuple

import numpy as np

from TRE.SMM.constants import CH0_SHIFT, CH1_SHIFT, PROGRESS_INTERVAL

ProgressFn = Callable[[str, int, int], None]


class ChannelSamples(NamedTuple):
    ch0:       np.ndarray   # uint8, 0/1 per sample
    ch1:       np.ndarray   # uint8, 0/1 per sample
    ch0_count: int          # samples with ch0 high
    ch1_count: int          # samples with ch1 high

    @property
    def sample_count(self) -> int:
        return int(self.ch0.shape[0])

    def pairs(self) -> Iterator[tuple[int, int]]:
        """Yield (ch0, ch1) per sample, in capture order."""
        for a, b in zip(self.ch0.tolist(), self.ch1.tolist()):
            yield a, b

    def marker_plane(self) -> np.ndarray:
        """ch0 AND ch1 - 1 wherever a clock marker sits."""
        return self.ch0 & self.ch1


def extract_channels(
    raw: bytes | bytearray | memoryview | np.ndarray,
    on_progress: ProgressFn | None = None,
    interval: int = PROGRESS_INTERVAL,
) -> ChannelSamples:
    """
    Split every capture byte into its (ch0, ch1) bit pair.

    Parameters
    ----------
    raw          : capture bytes (or a uint8 numpy array)
    on_progress  : optional callback(stage, current, total), stage="extract"
    interval     : samples per progress step

    Returns
    -------
    ChannelSamples
    """
    if isinstance(raw, np.ndarray):
        data = raw.astype(np.uint8, copy=False).ravel()
    else:
        data = np.frombuffer(bytes(raw), dtype=np.uint8)

    total = int(data.shape[0])

    if on_progress is None:
        ch0 = (data >> CH0_SHIFT) & 1
        ch1 = (data >> CH1_SHIFT) & 1
    else:
        ch0 = np.empty(total, dtype=np.uint8)
        ch1 = np.empty(total, dtype=np.uint8)
        step = max(1, int(interval))
        for start in range(0, total, step):
            end = min(start + step, total)
            on_progress("extract", start, total)
            block = data[start:end]
            ch0[start:end] = (block >> CH0_SHIFT) & 1
            ch1[start:end] = (block >> CH1_SHIFT) & 1
        on_progress("extract", total, total)

    ch0 = ch0.astype(np.uint8, copy=False)
    ch1 = ch1.astype(np.uint8, copy=False)

    return ChannelSamples(
        ch0=ch0,
        ch1=ch1,
        ch0_count=int(ch0.sum()),
        ch1_count=int(ch1.sum()),
    )
