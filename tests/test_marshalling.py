"""
Tests for the canonical byte layout.
"""
import pytest
from hypothesis import given, strategies as st

from ledger_sdk.exceptions import DecodeError
from ledger_sdk.marshalling import MarshallingContext, UnmarshallingContext


def _big_integer_bytes(v: int) -> bytes:
    context = MarshallingContext()
    context.write_big_integer(v)
    return context.to_bytes()


@pytest.mark.parametrize("number,encoded", [
    (0, "0000000100"),
    (1, "0000000101"),
    (127, "000000017f"),
    (128, "000000020080"),
    (255, "0000000200ff"),
    (-1, "00000001ff"),
    (-128, "0000000180"),
    (-129, "00000002ff7f"),
    (2 ** 64, "00000009010000000000000000"),
])
def test_big_integer_layout(number, encoded):
    """Big integers are a u32 length and minimal two's complement bytes"""
    assert _big_integer_bytes(number).hex() == encoded


@given(st.integers())
def test_big_integer_round_trip(number):
    assert UnmarshallingContext(_big_integer_bytes(number)).read_big_integer() == number


def test_fixed_width_layout():
    context = MarshallingContext()
    context.write_u8(3)
    context.write_u32(258)
    context.write_int32(-2)
    context.write_bool(True)
    assert context.to_bytes().hex() == "03" "00000102" "fffffffe" "01"


def test_string_layout():
    context = MarshallingContext()
    context.write_string("hé")
    assert context.to_bytes() == b"\x00\x00\x00\x03h\xc3\xa9"


def test_write_u32_range():
    with pytest.raises(ValueError):
        MarshallingContext().write_u32(-1)
    with pytest.raises(ValueError):
        MarshallingContext().write_u32(2 ** 32)


def test_reader_sequence():
    context = MarshallingContext()
    context.write_u8(7)
    context.write_string("abc")
    context.write_int32(-5)
    context.write_bool(False)
    context.write_sized_bytes(b"\x01\x02")

    reader = UnmarshallingContext(context.to_bytes())
    assert reader.read_u8() == 7
    assert reader.read_string() == "abc"
    assert reader.read_int32() == -5
    assert reader.read_bool() is False
    assert not reader.exhausted
    assert reader.read_sized_bytes() == b"\x01\x02"
    assert reader.exhausted
    reader.expect_end()


def test_reader_errors():
    with pytest.raises(DecodeError, match="Unexpected end"):
        UnmarshallingContext(b"\x00\x00").read_u32()
    with pytest.raises(DecodeError, match="Invalid boolean"):
        UnmarshallingContext(b"\x02").read_bool()
    with pytest.raises(DecodeError, match="empty"):
        UnmarshallingContext(b"\x00\x00\x00\x00").read_big_integer()
    with pytest.raises(DecodeError, match="UTF-8"):
        UnmarshallingContext(b"\x00\x00\x00\x01\xff").read_string()
    with pytest.raises(DecodeError, match="trailing"):
        UnmarshallingContext(b"\x00").expect_end()
