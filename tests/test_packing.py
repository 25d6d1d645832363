"""
Field Packing Tests

Tests for splitting oversized integers into big-endian field limbs.
"""

import unittest

from shield_proofs.codec.packing import (
    declared_packets,
    fields_to_dec,
    hex_to_field_preserve,
    left_pad_bits_n,
    split_and_pad_bits_n,
    split_dec_to_bits_n,
    split_hex_to_bits_n,
)
from shield_proofs.exceptions import PackingOverflowError, ValidationError

MAX_LIMB = str(2 ** 128 - 1)


class TestChunking(unittest.TestCase):
    """Test fixed-width bit chunking."""

    def test_left_pad_bits_n(self):
        self.assertEqual(left_pad_bits_n("101", 8), "00000101")
        with self.assertRaises(ValidationError):
            left_pad_bits_n("101", 2)

    def test_split_and_pad_bits_n(self):
        self.assertEqual(split_and_pad_bits_n("1111100", 4), ["0111", "1100"])
        self.assertEqual(split_and_pad_bits_n("11110000", 4), ["1111", "0000"])
        self.assertEqual(split_and_pad_bits_n("1", 4), ["0001"])

    def test_every_chunk_is_n_bits(self):
        chunks = split_and_pad_bits_n("1" * 300, 128)
        self.assertEqual(len(chunks), 3)
        self.assertTrue(all(len(chunk) == 128 for chunk in chunks))
        self.assertEqual("".join(chunks).lstrip("0"), "1" * 300)

    def test_split_rejects_bad_input(self):
        with self.assertRaises(ValidationError):
            split_and_pad_bits_n("1021", 2)
        with self.assertRaises(ValidationError):
            split_and_pad_bits_n("101", 0)

    def test_split_hex_and_dec(self):
        self.assertEqual(split_hex_to_bits_n("0xf0", 4), ["1111", "0000"])
        self.assertEqual(split_dec_to_bits_n("240", 4), ["1111", "0000"])


class TestHexToFieldPreserve(unittest.TestCase):
    """Test limb packing and packet reconciliation."""

    def test_256_bit_value_gives_two_limbs(self):
        self.assertEqual(hex_to_field_preserve("0x" + "ff" * 32, 128), [MAX_LIMB, MAX_LIMB])

    def test_declared_width_keeps_leading_zero_limb(self):
        value = "0x" + "00" * 16 + "ff" * 16
        self.assertEqual(declared_packets(value, 128), 2)
        self.assertEqual(hex_to_field_preserve(value, 128), ["0", MAX_LIMB])

    def test_small_value(self):
        self.assertEqual(hex_to_field_preserve("0x0f", 128), ["15"])

    def test_padding_to_requested_packets(self):
        self.assertEqual(hex_to_field_preserve("0x" + "ff" * 32, 128, packets=3), ["0", MAX_LIMB, MAX_LIMB])

    def test_overflow_raises(self):
        with self.assertRaises(PackingOverflowError) as cm:
            hex_to_field_preserve("0x" + "ff" * 32, 128, packets=1)
        self.assertIsInstance(cm.exception, OverflowError)

    def test_explicit_truncation_keeps_least_significant(self):
        high, low = "01" * 16, "02" * 16
        with self.assertLogs("shield_proofs.codec.packing", level="WARNING"):
            limbs = hex_to_field_preserve("0x" + high + low, 128, packets=1, allow_truncation=True)
        self.assertEqual(limbs, [str(int(low, 16))])

    def test_invalid_parameters(self):
        with self.assertRaises(ValidationError):
            hex_to_field_preserve("0xff", 0)
        with self.assertRaises(ValidationError):
            hex_to_field_preserve("0xff", 128, packets=0)
        with self.assertRaises(ValidationError):
            hex_to_field_preserve("0xfg", 128)

    def test_limbs_reassemble_to_the_value(self):
        for value in ["0x01", "0x" + "ab" * 27, "0x" + "12" * 32, "0x" + "ff" * 40]:
            with self.subTest(value=value):
                limbs = hex_to_field_preserve(value, 128)
                self.assertTrue(all(int(limb) < 2 ** 128 for limb in limbs))
                self.assertEqual(fields_to_dec(limbs, 128), str(int(value, 16)))

    def test_other_packing_sizes(self):
        limbs = hex_to_field_preserve("0x" + "ff" * 32, 64)
        self.assertEqual(limbs, [str(2 ** 64 - 1)] * 4)


class TestFieldsToDec(unittest.TestCase):
    """Test limb reassembly."""

    def test_reassemble(self):
        self.assertEqual(fields_to_dec(["1", "0"], 128), str(2 ** 128))

    def test_limb_out_of_range(self):
        with self.assertRaises(ValidationError):
            fields_to_dec([str(2 ** 128)], 128)
        with self.assertRaises(ValidationError):
            fields_to_dec(["abc"], 128)
        with self.assertRaises(ValidationError):
            fields_to_dec([], 128)


if __name__ == "__main__":
    unittest.main()
