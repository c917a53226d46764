# =============================================================================
# bit_packer.py - MSB-first Bit Packer
# =============================================================================
#
# Packs a region of a 0/1 bit sequence into bytes:
#   region bit i → byte i // 8, bit position 7 - (i % 8)
# The tail of the last byte is zero-padded.  The padding amount is NOT
# recorded anywhere; consumers must already know the frame bit length.

from __future__ import annotations
from typing import Sequence

import numpy as np


def pack_bits(
    bits: Sequence[int] | np.ndarray,
    start: int = 0,
    length: int | None = None,
) -> bytes:
    """
    Pack bits[start:start+length] MSB-first into ceil(length / 8) bytes.

    Args:
        bits:   0/1 values.
        start:  First bit of the region.
        length: Region size in bits; default = everything after start.

    Returns:
        bytes of length ceil(length / 8).
    """
    arr = np.asarray(bits, dtype=np.uint8)
    if length is None:
        length = int(arr.shape[0]) - start
    if start < 0 or length < 0 or start + length > arr.shape[0]:
        raise ValueError(
            f"bit region [{start}, {start + length}) outside 0..{arr.shape[0]}"
        )
    if length == 0:
        return b""
    return np.packbits(arr[start:start + length] & 1).tobytes()


def bits_to_string(bits: Sequence[int] | np.ndarray) -> str:
    """Render bits as a flat '0'/'1' string."""
    arr = np.asarray(bits, dtype=np.uint8)
    return (arr + ord("0")).tobytes().decode("ascii")
