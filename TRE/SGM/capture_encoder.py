# =============================================================================
# capture_encoder.py - Two-Channel Self-Clocking Capture Encoder
# =============================================================================
#
# Inverse of SelfClockDecoder.  Converts a sequence of bits into raw capture
# bytes in the same layout a logic analyser produces (one byte per sample,
# ch0 = bit 0, ch1 = bit 1).
#
# ENCODING RULES (mirror of the decoder):
#   - Every bit interval is opened by a marker sample (ch0=1, ch1=1).
#   - The remaining samples of the interval hold the data state:
#       bit 1 → ch0=0, ch1=1   (0x02)
#       bit 0 → ch0=1, ch1=0   (0x01)
#   - A closing marker follows the last bit so its interval is bounded.
#
# With samples_per_bit = 4 a '1' looks like:
#     03 02 02 02 | 03 ...
# and the decoder's midpoint (m + 2) lands inside the data run.
#
# encode_gap() emits an interval whose data state is 0x00 so the decoder
# drops it - used to exercise the ambiguous-interval path.

from __future__ import annotations

from TRE.SMM.constants import MARKER_BYTE, ONE_BYTE, ZERO_BYTE, IDLE_BYTE


class CaptureEncoder:
    """
    Stateful capture encoder.  Remembers whether an interval is currently
    open so that consecutive encode_bits() calls share markers and produce
    one continuous capture.

    Usage:
        enc = CaptureEncoder()
        raw = enc.encode_bits([1, 0, 1, 1]) + enc.finish()
    """

    def __init__(self, samples_per_bit: int = 4, idle_lead: int = 0) -> None:
        if samples_per_bit < 2:
            raise ValueError(
                f"samples_per_bit must be >= 2 (marker + data), got {samples_per_bit}"
            )
        self.samples_per_bit = samples_per_bit
        self.idle_lead       = idle_lead
        self._started        = False

    def reset(self) -> None:
        """Forget stream state (use only between independent captures)."""
        self._started = False

    # ── Core encoder ────────────────────────────────────────────────────────

    def _interval(self, data_byte: int) -> bytes:
        lead = b""
        if not self._started:
            lead = bytes([IDLE_BYTE]) * self.idle_lead
            self._started = True
        return lead + bytes([MARKER_BYTE]) + bytes([data_byte]) * (self.samples_per_bit - 1)

    def encode_bit(self, bit: int) -> bytes:
        """Encode one bit interval (opening marker + data samples)."""
        return self._interval(ONE_BYTE if bit else ZERO_BYTE)

    def encode_bits(self, bits) -> bytes:
        """Encode a bit sequence; phase-continuous with previous calls."""
        return b"".join(self.encode_bit(b) for b in bits)

    def encode_gap(self) -> bytes:
        """Encode one interval the decoder must discard."""
        return self._interval(IDLE_BYTE)

    def finish(self) -> bytes:
        """Closing marker for the last open interval."""
        if not self._started:
            return b""
        self._started = False
        return bytes([MARKER_BYTE])

    # ── Convenience ─────────────────────────────────────────────────────────

    def encode_capture(self, bits) -> bytes:
        """One complete, closed capture for `bits`."""
        self.reset()
        return self.encode_bits(bits) + self.finish()
