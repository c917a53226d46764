# =============================================================================
# frame_builder.py - Telemetry Frame Stream Builder
# =============================================================================
#
# Builds telemetry bit streams in the on-air layout:
#
#   [ SYNC_PATTERN (32 bits) | payload ... ] [ SYNC_PATTERN | payload ... ] ...
#
# Payload content is opaque to the recovery pipeline; frames are delimited by
# the next sync marker only.  The builder refuses frames and noise that would
# put a sync pattern anywhere other than a frame head, including across the
# join with bits already in the stream (it would split frames on recovery).

from __future__ import annotations

from TRE.SMM.constants import SYNC_PATTERN, SYNC_BITS


def int_to_bits(value: int, width: int) -> list[int]:
    """MSB-first bit list of `value` in `width` bits."""
    if value < 0 or value >= (1 << width):
        raise ValueError(f"value {value} does not fit in {width} bits")
    return [(value >> i) & 1 for i in range(width - 1, -1, -1)]


class FrameBuilder:
    """
    Accumulates frames and returns the flat bit stream.

    Example:
        fb = FrameBuilder()
        fb.add_frame([1, 0, 1, 1] * 16)
        fb.add_word(0xBEEF, 16)
        bits = fb.bits()
    """

    def __init__(self, sync_pattern=SYNC_PATTERN) -> None:
        if len(sync_pattern) != SYNC_BITS:
            raise ValueError(f"sync pattern must be {SYNC_BITS} bits")
        self.sync_pattern = list(sync_pattern)
        self._stream: list[int] = []
        self._frame_offsets: list[int] = []

    # ── Frame state ──────────────────────────────────────────────────────────

    def add_frame(self, payload: list[int]) -> int:
        """Append sync + payload; returns the frame's bit offset."""
        frame = self.sync_pattern + [1 if b else 0 for b in payload]
        if self._stray_sync(frame, own_sync=True):
            raise ValueError("frame would produce a second sync marker in the stream")
        offset = len(self._stream)
        self._stream.extend(frame)
        self._frame_offsets.append(offset)
        return offset

    def add_word(self, value: int, width: int) -> int:
        """Append a frame whose payload is one MSB-first integer."""
        return self.add_frame(int_to_bits(value, width))

    def add_noise(self, bits: list[int]) -> None:
        """Append raw bits that belong to no frame (lead-in, garbage)."""
        noise = [1 if b else 0 for b in bits]
        if self._stray_sync(noise, own_sync=False):
            raise ValueError("noise would produce a sync marker in the stream")
        self._stream.extend(noise)

    def clear(self) -> None:
        self._stream = []
        self._frame_offsets = []

    # ── Output ───────────────────────────────────────────────────────────────

    def bits(self) -> list[int]:
        """Return a copy of the bit stream built so far."""
        return list(self._stream)

    def frame_offsets(self) -> list[int]:
        return list(self._frame_offsets)

    def _stray_sync(self, appended: list[int], own_sync: bool) -> bool:
        # Scan the join with the stream built so far: a pattern that overlaps
        # itself can form a marker across the boundary.
        n    = len(self.sync_pattern)
        tail = self._stream[-(n - 1):] if n > 1 else []
        bits = tail + appended
        own  = len(tail) if own_sync else -1
        return any(
            bits[i:i + n] == self.sync_pattern
            for i in range(len(bits) - n + 1)
            if i != own
        )
