"""
Tests for the Borsh primitives.
"""
import struct

import pytest

from nearapi_sdk.borsh import BorshError, BorshReader, BorshWriter


class TestBorshWriter:
    """Encoding of primitives."""

    def test_integers_are_little_endian(self):
        writer = BorshWriter()
        writer.u8(7)
        writer.u32(0x01020304)
        writer.u64(2 ** 40 + 5)
        writer.u128(2 ** 100 + 3)

        expected = (
            b"\x07"
            + struct.pack("<I", 0x01020304)
            + struct.pack("<Q", 2 ** 40 + 5)
            + (2 ** 100 + 3).to_bytes(16, "little")
        )
        assert writer.output() == expected

    def test_string_is_length_prefixed_utf8(self):
        writer = BorshWriter()
        writer.string("héllo")
        encoded = "héllo".encode("utf-8")
        assert writer.output() == struct.pack("<I", len(encoded)) + encoded

    def test_option_and_vec(self):
        writer = BorshWriter()
        writer.option(None, writer.u8)
        writer.option(5, writer.u8)
        writer.vec(["a", "bc"], writer.string)

        assert writer.output() == (
            b"\x00" + b"\x01\x05"
            + struct.pack("<I", 2)
            + struct.pack("<I", 1) + b"a"
            + struct.pack("<I", 2) + b"bc"
        )

    @pytest.mark.parametrize("method,value", [
        ("u8", 256),
        ("u32", -1),
        ("u64", 2 ** 64),
        ("u128", 2 ** 128),
    ])
    def test_out_of_range_integers_rejected(self, method, value):
        with pytest.raises(BorshError):
            getattr(BorshWriter(), method)(value)

    def test_bool_and_float_rejected(self):
        with pytest.raises(BorshError):
            BorshWriter().u64(True)
        with pytest.raises(BorshError):
            BorshWriter().u64(1.0)

    def test_fixed_bytes_length_checked(self):
        with pytest.raises(BorshError):
            BorshWriter().fixed_bytes(b"\x00" * 31, 32)


class TestBorshReader:
    """Decoding of primitives."""

    def test_reads_back_written_values(self):
        writer = BorshWriter()
        writer.u64(123456789)
        writer.u128(2 ** 127)
        writer.u8_vec(b"\x01\x02")
        writer.option("x", writer.string)

        reader = BorshReader(writer.output())
        assert reader.u64() == 123456789
        assert reader.u128() == 2 ** 127
        assert reader.u8_vec() == b"\x01\x02"
        assert reader.option(reader.string) == "x"
        reader.finish()

    def test_truncated_buffer(self):
        reader = BorshReader(b"\x01\x02")
        with pytest.raises(BorshError, match="Unexpected end of buffer"):
            reader.u32()

    def test_trailing_bytes_detected(self):
        reader = BorshReader(b"\x01\x02")
        reader.u8()
        with pytest.raises(BorshError, match="trailing"):
            reader.finish()

    def test_invalid_option_flag(self):
        with pytest.raises(BorshError, match="option flag"):
            BorshReader(b"\x02").option(lambda: None)

    def test_invalid_utf8(self):
        with pytest.raises(BorshError, match="UTF-8"):
            BorshReader(struct.pack("<I", 1) + b"\xff").string()
