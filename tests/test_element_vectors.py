"""
Witness Vector Tests

Tests for Element validation and witness vector encoding.
"""

import dataclasses
import json
import os
import tempfile
import unittest

from shield_proofs.element import Element
from shield_proofs.exceptions import PackingOverflowError, ValidationError
from shield_proofs.main import element_from_dict, generate_vectors_from_file, load_elements
from shield_proofs.vectors import compute_vectors, encode_element


class TestElement(unittest.TestCase):
    """Test Element construction and validation."""

    def test_value_is_prefixed_and_lowercased(self):
        self.assertEqual(Element("ABCD", "bytes").value, "0xabcd")
        self.assertEqual(Element("0x0f", "bits").hex, "0x0f")
        self.assertEqual(Element("0XFF", "bytes").value, "0xff")

    def test_integer_values_are_converted(self):
        self.assertEqual(Element(255, "scalar").value, "0xff")
        with self.assertRaises(ValidationError):
            Element(-1, "scalar")
        with self.assertRaises(ValidationError):
            Element(True, "scalar")

    def test_empty_input(self):
        for value in ["", "0x"]:
            with self.subTest(value=value):
                with self.assertRaises(ValidationError) as cm:
                    Element(value, "bits")
                self.assertIn("input was empty", str(cm.exception))

    def test_invalid_hex(self):
        with self.assertRaises(ValidationError):
            Element("0xzz", "bits")

    def test_invalid_encoding(self):
        with self.assertRaises(ValidationError):
            Element("0x01", "base64")
        with self.assertRaises(ValidationError):
            Element("0x01", None)

    def test_invalid_packing(self):
        with self.assertRaises(ValidationError):
            Element("0x01", "field", packing_size=0)
        with self.assertRaises(ValidationError):
            Element("0x01", "field", packets=0)

    def test_non_integer_packing(self):
        for kwargs in ({"packets": "2"}, {"packets": True}, {"packing_size": "128"}, {"packing_size": 1.5}):
            with self.subTest(kwargs=kwargs):
                with self.assertRaises(ValidationError):
                    Element("0x01", "field", **kwargs)

    def test_frozen(self):
        element = Element("0x01", "scalar")
        with self.assertRaises(dataclasses.FrozenInstanceError):
            element.value = "0x02"


class TestComputeVectors(unittest.TestCase):
    """Test encoding of elements into witness vectors."""

    def test_bytes(self):
        self.assertEqual(compute_vectors([Element("0xff00", "bytes")]), ["255", "0"])

    def test_bits(self):
        self.assertEqual(
            compute_vectors([Element("0x0f", "bits")]),
            ["0", "0", "0", "0", "1", "1", "1", "1"],
        )

    def test_scalar(self):
        self.assertEqual(encode_element(Element("0x" + "ff" * 32, "scalar")), [str(2 ** 256 - 1)])

    def test_field(self):
        limb = str(2 ** 128 - 1)
        self.assertEqual(encode_element(Element("0x" + "ff" * 32, "field")), [limb, limb])
        self.assertEqual(encode_element(Element("0x0f", "field", packets=2)), ["0", "15"])

    def test_field_overflow(self):
        with self.assertRaises(PackingOverflowError):
            encode_element(Element("0x" + "ff" * 32, "field", packets=1))

    def test_order_is_preserved(self):
        elements = [
            Element("0x02", "scalar"),
            Element("0x0102", "bytes"),
            Element("0x01", "scalar"),
            Element("0x0102", "bytes"),
        ]
        self.assertEqual(compute_vectors(elements), ["2", "1", "2", "1", "1", "2"])

    def test_empty_sequence(self):
        self.assertEqual(compute_vectors([]), [])

    def test_rejects_non_elements(self):
        with self.assertRaises(ValidationError):
            compute_vectors([{"value": "0x01", "encoding": "scalar"}])


class TestElementFiles(unittest.TestCase):
    """Test loading element definitions from JSON."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.temp_dir.cleanup()

    def _write(self, data) -> str:
        path = os.path.join(self.temp_dir.name, "elements.json")
        with open(path, "w") as f:
            json.dump(data, f)
        return path

    def test_element_from_dict(self):
        element = element_from_dict({"hex": "0x01", "encoding": "field", "packets": 2})
        self.assertEqual(element, Element("0x01", "field", packets=2))
        with self.assertRaises(ValidationError):
            element_from_dict(["0x01", "field"])

    def test_load_list(self):
        path = self._write([{"value": "0xff00", "encoding": "bytes"}, {"value": "0x05", "encoding": "scalar"}])
        self.assertEqual(len(load_elements(path)), 2)
        self.assertEqual(generate_vectors_from_file(path), ["255", "0", "5"])

    def test_load_object(self):
        path = self._write({"elements": [{"value": "0x01", "encoding": "bits"}]})
        self.assertEqual(generate_vectors_from_file(path), ["0", "0", "0", "0", "0", "0", "0", "1"])

    def test_load_invalid(self):
        path = self._write("0x01")
        with self.assertRaises(ValidationError):
            load_elements(path)

    def test_load_non_integer_packets(self):
        path = self._write([{"value": "0x01", "encoding": "field", "packets": "2"}])
        with self.assertRaises(ValidationError):
            generate_vectors_from_file(path)


if __name__ == "__main__":
    unittest.main()
