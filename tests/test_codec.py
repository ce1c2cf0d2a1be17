"""
Tests for the value codec, in both its JSON wire form and its binary form.
"""
import pytest
from hypothesis import given, settings, strategies as st

from ledger_sdk.codec import (
    decode_optional_value, decode_value, encode_value, marshal_value,
    unmarshal_value
)
from ledger_sdk.exceptions import DecodeError, DecodeMismatch
from ledger_sdk.models import StorageValueModel
from ledger_sdk.types import BasicType, ClassType
from ledger_sdk.values import (
    BigIntegerValue, BooleanValue, IntValue, StorageReference, StringValue,
    ValueKind, kind_for_type, matches_type
)

values = st.one_of(
    st.booleans().map(BooleanValue),
    st.integers(min_value=-(2 ** 31), max_value=2 ** 31 - 1).map(IntValue),
    st.integers().map(BigIntegerValue),
    st.integers(min_value=-(2 ** 512), max_value=2 ** 512).map(BigIntegerValue),
    st.text().map(StringValue),
    st.text(min_size=1).map(StorageReference),
)


@settings(max_examples=200)
@given(value=values)
def test_wire_round_trip(value):
    assert decode_value(encode_value(value), value.KIND) == value


@settings(max_examples=200)
@given(value=values)
def test_binary_round_trip(value):
    assert unmarshal_value(marshal_value(value), value.KIND) == value
    assert unmarshal_value(marshal_value(value)) == value


@pytest.mark.parametrize("number", [2 ** 64, -(2 ** 64) - 1, 10 ** 60, -(10 ** 60)])
def test_big_integers_keep_full_precision(number):
    wire = encode_value(BigIntegerValue(number))
    assert wire.value == str(number)
    assert decode_value(wire, ValueKind.BIG_INTEGER).value == number
    assert unmarshal_value(marshal_value(BigIntegerValue(number))).value == number


@pytest.mark.parametrize("number", [10 ** 5000, -(10 ** 5000) + 7], ids=["positive", "negative"])
def test_big_integers_beyond_the_int_string_limit(number):
    """Values longer than the interpreter's int/str digit limit still travel whole"""
    value = BigIntegerValue(number)
    wire = encode_value(value)
    assert len(wire.value.lstrip("-")) > 4300
    assert decode_value(wire, ValueKind.BIG_INTEGER) == value
    assert str(value) == wire.value


def test_oversized_int_is_a_decode_error():
    with pytest.raises(DecodeError):
        decode_value({"kind": "int", "value": "9" * 5000}, ValueKind.INT)


def test_encode_wire_form():
    assert encode_value(BooleanValue(True)).model_dump() == {"kind": "boolean", "value": "true"}
    assert encode_value(IntValue(-7)).model_dump() == {"kind": "int", "value": "-7"}
    assert encode_value(StringValue("héllo")).model_dump() == {"kind": "string", "value": "héllo"}
    assert encode_value(StorageReference("abc#1")).model_dump() == {"kind": "reference", "value": "abc#1"}


def test_encode_rejects_non_values():
    with pytest.raises(TypeError):
        encode_value(42)


def test_decode_mismatch():
    """A wire tag different from the expected variant is a mismatch"""
    wire = encode_value(StringValue("10"))
    with pytest.raises(DecodeMismatch) as exc_info:
        decode_value(wire, ValueKind.BIG_INTEGER)
    assert exc_info.value.expected == "biginteger"
    assert exc_info.value.actual == "string"
    assert isinstance(exc_info.value, DecodeError)


def test_binary_decode_mismatch():
    with pytest.raises(DecodeMismatch):
        unmarshal_value(marshal_value(IntValue(1)), ValueKind.BIG_INTEGER)


@pytest.mark.parametrize("kind,text", [
    ("int", "2147483648"),
    ("int", "-2147483649"),
    ("int", "12a"),
    ("int", " 1"),
    ("biginteger", "1_000"),
    ("biginteger", ""),
    ("biginteger", "-"),
    ("boolean", "True"),
    ("boolean", "1"),
    ("reference", ""),
])
def test_decode_malformed_payload(kind, text):
    with pytest.raises(DecodeError):
        decode_value(StorageValueModel(kind=kind, value=text), ValueKind(kind))


def test_decode_from_dict():
    assert decode_value({"kind": "int", "value": "5"}, ValueKind.INT) == IntValue(5)
    with pytest.raises(DecodeError):
        decode_value({"kind": "int"}, ValueKind.INT)


def test_decode_optional_value():
    assert decode_optional_value(None, ValueKind.REFERENCE) is None
    wire = encode_value(StorageReference("abc#1"))
    assert decode_optional_value(wire, ValueKind.REFERENCE) == StorageReference("abc#1")


def test_references_are_opaque():
    """Any token survives unchanged; nothing is parsed out of it"""
    token = "not/a:structured#reference with spaces"
    reference = StorageReference(token)
    assert decode_value(encode_value(reference), ValueKind.REFERENCE).token == token
    assert unmarshal_value(marshal_value(reference)).token == token


def test_unmarshal_rejects_trailing_bytes():
    with pytest.raises(DecodeError, match="trailing"):
        unmarshal_value(marshal_value(IntValue(1)) + b"\x00")


def test_unmarshal_rejects_unknown_tag():
    with pytest.raises(DecodeError, match="Unknown value tag"):
        unmarshal_value(b"\x09")


def test_unmarshal_rejects_truncated_data():
    with pytest.raises(DecodeError):
        unmarshal_value(marshal_value(StringValue("truncated"))[:-2])


class TestTypes:
    """Tests for the mapping between declared types and value variants."""

    def test_kind_for_type(self):
        assert kind_for_type(BasicType.BOOLEAN) is ValueKind.BOOLEAN
        assert kind_for_type(BasicType.INT) is ValueKind.INT
        assert kind_for_type(ClassType.STRING) is ValueKind.STRING
        assert kind_for_type(ClassType.BIG_INTEGER) is ValueKind.BIG_INTEGER
        assert kind_for_type(ClassType.ERC20) is ValueKind.REFERENCE
        assert kind_for_type(ClassType("com.example.Anything")) is ValueKind.REFERENCE

    def test_matches_type(self):
        assert matches_type(IntValue(1), BasicType.INT)
        assert not matches_type(BigIntegerValue(1), BasicType.INT)
        assert not matches_type(IntValue(1), ClassType.BIG_INTEGER)
        assert matches_type(StorageReference("x"), ClassType.CONTRACT)
        assert not matches_type(StringValue("x"), ClassType.CONTRACT)
        assert not matches_type("x", ClassType.STRING)

    def test_value_construction_checks(self):
        with pytest.raises(ValueError):
            IntValue(2 ** 31)
        with pytest.raises(TypeError):
            IntValue(True)
        with pytest.raises(TypeError):
            BooleanValue(1)
        with pytest.raises(TypeError):
            BigIntegerValue(1.5)
        with pytest.raises(ValueError):
            StorageReference("")
