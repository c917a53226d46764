#!/usr/bin/env python3
# =============================================================================
# validate.py - TRE Self-Validation Suite
# =============================================================================
#
# Run directly:  python -m TRE.SVM.validate
#             or python TRE/SVM/validate.py (from project root)
#
# Tests:
#   1. Constants integrity   - sync pattern exact, thresholds consistent
#   2. Channel extractor     - bit planes for all 256 byte values
#   3. Demodulator           - marker intervals, midpoint rule, gap tracking
#   4. Frame synchroniser    - exact frames, non-overlap, partial threshold
#   5. Bit packer            - MSB-first order, zero-padded tail
#   6. End-to-end            - SGM-generated capture recovered by the pipeline
# =============================================================================

import sys
import os

# Allow running from project root without installing
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

import numpy as np

from TRE.SMM.constants import (
    SYNC_PATTERN, SYNC_BITS, PARTIAL_WINDOW, PARTIAL_THRESHOLD,
    MARKER_BYTE, ONE_BYTE, ZERO_BYTE, IDLE_BYTE,
)
from TRE.SDM.channel_extractor import extract_channels
from TRE.SDM.self_clock_decoder import SelfClockDecoder
from TRE.SFM.frame_sync import sync_frames, sync_diagnostics, frames_to_stream
from TRE.SFM.bit_packer import pack_bits
from TRE.SGM.capture_encoder import CaptureEncoder
from TRE.SGM.frame_builder import FrameBuilder
from TRE.SPM.processor import process_capture

PASS = "[PASS]"
FAIL = "[FAIL]"
INFO = "[INFO]"

failures = 0

def check(label: str, condition: bool, detail: str = "") -> bool:
    global failures
    if condition:
        print(f"  {PASS} {label}")
    else:
        print(f"  {FAIL} {label}{(' -- ' + detail) if detail else ''}")
        failures += 1
    return condition


def banner(title: str) -> None:
    print("\n" + "="*60)
    print(title)
    print("="*60)


# =============================================================================
# TEST 1 - Constants Integrity
# =============================================================================
banner("TEST 1 - Constants Integrity")

EXPECTED_SYNC = "00011010110011111111110000011101"
check("SYNC_PATTERN is 32 bits",          SYNC_BITS == 32, f"got {SYNC_BITS}")
check("SYNC_PATTERN exact value",
      "".join(map(str, SYNC_PATTERN)) == EXPECTED_SYNC,
      f"got {''.join(map(str, SYNC_PATTERN))}")
check("SYNC_PATTERN packs to 1A CF FC 1D",
      pack_bits(SYNC_PATTERN) == bytes.fromhex("1ACFFC1D"))
check("Partial window inside pattern",    PARTIAL_WINDOW <= SYNC_BITS)
check("Partial threshold 20 of 24",       (PARTIAL_THRESHOLD, PARTIAL_WINDOW) == (20, 24))
check("Marker byte has both channel bits", MARKER_BYTE & 0x03 == 0x03)
check("Data bytes never look like markers",
      all(b & 0x03 != 0x03 for b in (ONE_BYTE, ZERO_BYTE, IDLE_BYTE)))


# =============================================================================
# TEST 2 - Channel Extractor
# =============================================================================
banner("TEST 2 - Channel Extractor")

all_bytes = bytes(range(256))
s = extract_channels(all_bytes)
check("One sample per byte",              s.sample_count == 256, f"got {s.sample_count}")
check("ch0 = byte & 1 for all 256 values",
      all(int(s.ch0[b]) == (b & 1) for b in range(256)))
check("ch1 = (byte >> 1) & 1 for all 256 values",
      all(int(s.ch1[b]) == ((b >> 1) & 1) for b in range(256)))
check("Channel counts = 128 / 128",       (s.ch0_count, s.ch1_count) == (128, 128))

ticks = []
extract_channels(bytes(25), on_progress=lambda st, c, t: ticks.append(c), interval=10)
check("Progress reported per interval + completion",
      ticks == [0, 10, 20, 25], f"got {ticks}")

empty = extract_channels(b"")
check("Empty capture → zero samples",     empty.sample_count == 0)


# =============================================================================
# TEST 3 - Demodulator
# =============================================================================
banner("TEST 3 - Demodulator")

dec = SelfClockDecoder()
r = dec.decode(extract_channels(bytes([0x03, 0x01, 0x02, 0x03])))
check("Scenario 03 01 02 03 → bits [0]",  r.bits.tolist() == [0], f"got {r.bits.tolist()}")
check("Scenario 03 01 02 03 → 2 markers", r.marker_count == 2)

r = dec.decode(extract_channels(bytes([0x03, 0x00, 0x02, 0x03, 0x02, 0x03])))
check("Ambiguous interval dropped",       r.bits.tolist() == [1], f"got {r.bits.tolist()}")
check("Marker count includes all",        r.marker_count == 3)
check("Invalid interval counted",         r.invalid_count == 1)
check("Default mode reports no gaps",     r.gaps == [])

g = SelfClockDecoder(track_gaps=True).decode(
    extract_channels(bytes([0x03, 0x00, 0x02, 0x03, 0x02, 0x03]))
)
check("Gap mode: same bits",              g.bits.tolist() == [1])
check("Gap mode: one gap at bit 0",
      len(g.gaps) == 1 and g.gaps[0].bit_index == 0 and g.gaps[0].mid_sample == 1,
      f"got {g.gaps}")

r = dec.decode(extract_channels(bytes([0x01, 0x02, 0x00] * 10)))
check("No markers → no bits",             r.bits.shape[0] == 0 and r.marker_count == 0)

rng = np.random.default_rng(7)
noise = rng.integers(0, 256, 50_000, dtype=np.uint8).tobytes()
a = dec.decode(extract_channels(noise))
b = dec.decode(extract_channels(noise))
check("Deterministic on identical input",
      np.array_equal(a.bits, b.bits) and a.marker_count == b.marker_count)
check("Only 0/1 ever emitted",            set(np.unique(a.bits).tolist()) <= {0, 1})


# =============================================================================
# TEST 4 - Frame Synchroniser
# =============================================================================
banner("TEST 4 - Frame Synchroniser")

res = sync_frames(list(SYNC_PATTERN))
check("Lone sync → one frame",            res.frame_count == 1)
check("Lone sync → frame spans stream",
      res.frames[0].bit_offset == 0 and res.frames[0].bit_length == 32)
check("Lone sync → 4 packed bytes",       len(res.frames[0].data) == 4)

fb = FrameBuilder()
fb.add_noise([1, 0, 1])
fb.add_word(0xA5A5, 16)
fb.add_word(0x0F0F0F, 24)
fb.add_word(0x3C, 8)
res = sync_frames(fb.bits())
check("Three frames found",               res.frame_count == 3, f"got {res.frame_count}")
check("Frame offsets match builder",
      [f.bit_offset for f in res.frames] == fb.frame_offsets(),
      f"{[f.bit_offset for f in res.frames]} vs {fb.frame_offsets()}")
check("Frames never overlap",
      all(x.bit_end <= y.bit_offset for x, y in zip(res.frames, res.frames[1:])))
check("Min / max frame bits",             (res.min_frame_bits, res.max_frame_bits) == (40, 56))
check("Partial scan also sees real syncs", len(res.partial_matches) >= 3)

head = list(SYNC_PATTERN[:PARTIAL_WINDOW])
flip4 = [1 - v if i < 4 else v for i, v in enumerate(head)]
flip5 = [1 - v if i < 5 else v for i, v in enumerate(head)]
r20 = sync_frames(flip4)
r19 = sync_frames(flip5)
check("20/24 agreeing bits → partial match",
      [m.position for m in r20.partial_matches] == [0] and r20.partial_matches[0].score == 20)
check("19/24 agreeing bits → no partial match", r19.partial_matches == [])

d = sync_diagnostics(flip4, r20)
check("Diagnostics on zero-frame stream", d is not None)
check("Diagnostics list the partial match",
      d is not None and d.partial_lines == [f"position: 0, data: {''.join(map(str, flip4))}"])
check("No diagnostics when frames found", sync_diagnostics(fb.bits(), res) is None)


# =============================================================================
# TEST 5 - Bit Packer
# =============================================================================
banner("TEST 5 - Bit Packer")

check("[0,1,1,0,1,0,0,1] → 0x69",         pack_bits([0, 1, 1, 0, 1, 0, 0, 1]) == bytes([0b01101001]))
check("[1,0,1] → 0xA0 (zero pad)",        pack_bits([1, 0, 1]) == bytes([0b10100000]))
check("9 bits → 2 bytes",                 len(pack_bits([1] * 9)) == 2)
check("Region offset honoured",           pack_bits([0, 0, 1, 1], start=2, length=2) == bytes([0b11000000]))
check("Zero length → empty",              pack_bits([1, 1], 1, 0) == b"")


# =============================================================================
# TEST 6 - End-to-end
# =============================================================================
banner("TEST 6 - End-to-end")

fb = FrameBuilder()
payloads = [0x1234, 0xBEEF, 0x00FF, 0x8001]
for p in payloads:
    fb.add_word(p, 16)
enc = CaptureEncoder(samples_per_bit=6, idle_lead=11)
raw = enc.encode_capture(fb.bits())
out = process_capture(raw)
check("Decoded bits match transmitted",   out.demod.bits.tolist() == fb.bits())
check("All frames recovered",             out.sync.frame_count == len(payloads))
check("Frame bytes = sync + payload",
      [f.data for f in out.sync.frames]
      == [bytes.fromhex("1ACFFC1D") + p.to_bytes(2, "big") for p in payloads])
check("out.bin stream length",            len(frames_to_stream(out.sync.frames)) == 6 * len(payloads))

e = process_capture(b"")
check("Empty capture: nothing found, no diagnostics",
      e.samples.sample_count == 0 and e.demod.bits.shape[0] == 0
      and e.sync.frame_count == 0 and e.diagnostics is None)

print(f"\n  {INFO} {out.demod.marker_count:,} markers, {out.sync.summary()}")


# =============================================================================
# Summary
# =============================================================================
print("\n" + "="*60)
if failures == 0:
    print(f"  ALL TESTS PASSED")
else:
    print(f"  {failures} TEST(S) FAILED")
print("="*60 + "\n")
sys.exit(0 if failures == 0 else 1)
