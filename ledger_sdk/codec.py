"""
Value codec: maps typed values to and from their JSON wire form and their
tagged binary form.
"""
from decimal import Decimal
from typing import Optional

from .exceptions import DecodeError, DecodeMismatch
from .marshalling import MarshallingContext, UnmarshallingContext
from .models import StorageValueModel
from .values import (
    BigIntegerValue, BooleanValue, IntValue, StorageReference, StorageValue,
    StringValue, ValueKind, VALUE_CLASSES, kind_for_type  # noqa: F401
)

# Binary tags, in the order of ValueKind
VALUE_TAGS = {
    ValueKind.BOOLEAN: 0,
    ValueKind.INT: 1,
    ValueKind.BIG_INTEGER: 2,
    ValueKind.STRING: 3,
    ValueKind.REFERENCE: 4,
}
_KINDS_BY_TAG = {tag: kind for kind, tag in VALUE_TAGS.items()}


def _kind_of(value: StorageValue) -> ValueKind:
    kind = getattr(value, "KIND", None)
    if kind not in VALUE_CLASSES or not isinstance(value, VALUE_CLASSES[kind]):
        raise TypeError(f"Not a storage value: {value!r}")
    return kind


def encode_value(value: StorageValue) -> StorageValueModel:
    """
    Encode a typed value into its wire model.

    Args:
        value: Value to encode

    Returns:
        Tagged wire model
    """
    kind = _kind_of(value)
    if kind is ValueKind.BOOLEAN:
        text = "true" if value.value else "false"
    elif kind is ValueKind.REFERENCE:
        text = value.token
    else:
        text = _format_int(value.value)
    return StorageValueModel(kind=kind.value, value=text)


def decode_value(wire: StorageValueModel, expected: ValueKind) -> StorageValue:
    """
    Decode a wire model into a typed value of the expected variant.

    Args:
        wire: Tagged wire model (or its dict form)
        expected: Variant the caller expects

    Returns:
        The decoded value

    Raises:
        DecodeMismatch: If the wire tag is not the expected one
        DecodeError: If the payload is malformed
    """
    if isinstance(wire, dict):
        try:
            wire = StorageValueModel.model_validate(wire)
        except ValueError as e:
            raise DecodeError(f"Malformed value: {e}") from e

    expected = ValueKind(expected)
    if wire.kind != expected.value:
        raise DecodeMismatch(expected.value, wire.kind)

    text = wire.value
    try:
        if expected is ValueKind.BOOLEAN:
            if text not in ("true", "false"):
                raise ValueError(f"invalid boolean literal {text!r}")
            return BooleanValue(text == "true")
        if expected is ValueKind.INT:
            return IntValue(_parse_int(text))
        if expected is ValueKind.BIG_INTEGER:
            return BigIntegerValue(_parse_int(text))
        if expected is ValueKind.STRING:
            return StringValue(text)
        return StorageReference(text)
    except (TypeError, ValueError) as e:
        raise DecodeError(f"Malformed {expected.value} value: {e}") from e


def decode_optional_value(wire: Optional[StorageValueModel], expected: ValueKind) -> Optional[StorageValue]:
    """Like ``decode_value`` but maps a null wire value to None."""
    if wire is None:
        return None
    return decode_value(wire, expected)


# int <-> str conversions are capped at sys.get_int_max_str_digits();
# Decimal converts exactly at any size.

def _format_int(value: int) -> str:
    return str(Decimal(value))


def _parse_int(text: str) -> int:
    # int() would also accept "1_000" and surrounding whitespace
    body = text[1:] if text[:1] == "-" else text
    if not body.isascii() or not body.isdigit():
        raise ValueError(f"invalid integer literal {text[:32]!r}")
    return int(Decimal(text))


def write_value(context: MarshallingContext, value: StorageValue) -> None:
    """Append the tagged binary form of ``value`` to ``context``."""
    kind = _kind_of(value)
    context.write_u8(VALUE_TAGS[kind])
    if kind is ValueKind.BOOLEAN:
        context.write_bool(value.value)
    elif kind is ValueKind.INT:
        context.write_int32(value.value)
    elif kind is ValueKind.BIG_INTEGER:
        context.write_big_integer(value.value)
    elif kind is ValueKind.STRING:
        context.write_string(value.value)
    else:
        context.write_string(value.token)


def read_value(context: UnmarshallingContext, expected: Optional[ValueKind] = None) -> StorageValue:
    """
    Read a tagged binary value from ``context``.

    Args:
        context: Reader positioned at the value's tag
        expected: Variant the caller expects, or None to accept any

    Raises:
        DecodeMismatch: If the tag is not the expected variant
        DecodeError: If the bytes are malformed
    """
    tag = context.read_u8()
    kind = _KINDS_BY_TAG.get(tag)
    if kind is None:
        raise DecodeError(f"Unknown value tag: {tag}")
    if expected is not None and kind is not ValueKind(expected):
        raise DecodeMismatch(ValueKind(expected).value, kind.value)

    try:
        if kind is ValueKind.BOOLEAN:
            return BooleanValue(context.read_bool())
        if kind is ValueKind.INT:
            return IntValue(context.read_int32())
        if kind is ValueKind.BIG_INTEGER:
            return BigIntegerValue(context.read_big_integer())
        if kind is ValueKind.STRING:
            return StringValue(context.read_string())
        return StorageReference(context.read_string())
    except ValueError as e:
        raise DecodeError(f"Malformed {kind.value} value: {e}") from e


def marshal_value(value: StorageValue) -> bytes:
    """Tagged binary form of a single value."""
    context = MarshallingContext()
    write_value(context, value)
    return context.to_bytes()


def unmarshal_value(data: bytes, expected: Optional[ValueKind] = None) -> StorageValue:
    """Decode a single tagged binary value, rejecting trailing bytes."""
    context = UnmarshallingContext(data)
    value = read_value(context, expected)
    context.expect_end()
    return value
