import pytest

from TRE.SFM.bit_packer import pack_bits, bits_to_string


def test_full_byte_msb_first():
    assert pack_bits([0, 1, 1, 0, 1, 0, 0, 1]) == bytes([0b01101001])


def test_partial_byte_zero_padded():
    assert pack_bits([1, 0, 1]) == bytes([0b10100000])


def test_region_start_and_length():
    bits = [1, 1, 1, 0, 0, 0, 0, 0, 0, 0, 1]
    assert pack_bits(bits, start=3, length=8) == bytes([0b00000001])


def test_byte_count_is_ceiling():
    assert len(pack_bits([0] * 17)) == 3


def test_region_out_of_range_rejected():
    with pytest.raises(ValueError):
        pack_bits([1, 0], start=1, length=5)


def test_bits_to_string():
    assert bits_to_string([0, 1, 1, 0]) == "0110"
    assert bits_to_string([]) == ""
