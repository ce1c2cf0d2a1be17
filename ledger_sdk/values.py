"""
Typed values exchanged with the remote node.

A value is one of ``BooleanValue``, ``IntValue``, ``BigIntegerValue``,
``StringValue`` or ``StorageReference``. References are opaque tokens handed
out by the node; the client never looks inside them.
"""
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Union

from .types import BasicType, ClassType, StorageType

INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1


class ValueKind(str, Enum):
    """Tag of a typed value, as it appears on the wire."""
    BOOLEAN = "boolean"
    INT = "int"
    BIG_INTEGER = "biginteger"
    STRING = "string"
    REFERENCE = "reference"


@dataclass(frozen=True)
class BooleanValue:
    value: bool
    KIND: ClassVar[ValueKind] = ValueKind.BOOLEAN

    def __post_init__(self):
        if not isinstance(self.value, bool):
            raise TypeError(f"BooleanValue requires a bool, got {type(self.value).__name__}")

    def __str__(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class IntValue:
    """Signed 32-bit integer."""
    value: int
    KIND: ClassVar[ValueKind] = ValueKind.INT

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"IntValue requires an int, got {type(self.value).__name__}")
        if not INT32_MIN <= self.value <= INT32_MAX:
            raise ValueError(f"IntValue out of 32-bit range: {self.value}")

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class BigIntegerValue:
    """Arbitrary precision integer."""
    value: int
    KIND: ClassVar[ValueKind] = ValueKind.BIG_INTEGER

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"BigIntegerValue requires an int, got {type(self.value).__name__}")

    def __str__(self) -> str:
        return str(Decimal(self.value))


@dataclass(frozen=True)
class StringValue:
    value: str
    KIND: ClassVar[ValueKind] = ValueKind.STRING

    def __post_init__(self):
        if not isinstance(self.value, str):
            raise TypeError(f"StringValue requires a str, got {type(self.value).__name__}")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class StorageReference:
    """Opaque locator of an object in the node's store."""
    token: str
    KIND: ClassVar[ValueKind] = ValueKind.REFERENCE

    def __post_init__(self):
        if not isinstance(self.token, str) or not self.token:
            raise ValueError("StorageReference requires a non-empty token")

    def __str__(self) -> str:
        return self.token


@dataclass(frozen=True)
class TransactionReference:
    """Opaque reference to a transaction, such as the one installing the code base."""
    token: str

    def __post_init__(self):
        if not isinstance(self.token, str) or not self.token:
            raise ValueError("TransactionReference requires a non-empty token")

    def __str__(self) -> str:
        return self.token


StorageValue = Union[BooleanValue, IntValue, BigIntegerValue, StringValue, StorageReference]

VALUE_CLASSES = {
    cls.KIND: cls
    for cls in (BooleanValue, IntValue, BigIntegerValue, StringValue, StorageReference)
}


def kind_for_type(storage_type: StorageType) -> ValueKind:
    """
    Value variant carried by a declared storage type.

    Args:
        storage_type: A parameter or return type

    Returns:
        The matching value kind; every class type other than String and
        BigInteger is carried as a reference
    """
    if storage_type is BasicType.BOOLEAN:
        return ValueKind.BOOLEAN
    if storage_type is BasicType.INT:
        return ValueKind.INT
    if storage_type == ClassType.STRING:
        return ValueKind.STRING
    if storage_type == ClassType.BIG_INTEGER:
        return ValueKind.BIG_INTEGER
    if isinstance(storage_type, ClassType):
        return ValueKind.REFERENCE
    raise ValueError(f"Unsupported storage type: {storage_type!r}")


def matches_type(value: StorageValue, storage_type: StorageType) -> bool:
    """Check that ``value`` can be passed for a parameter of ``storage_type``."""
    cls = VALUE_CLASSES.get(getattr(value, "KIND", None))
    return cls is not None and isinstance(value, cls) and cls.KIND == kind_for_type(storage_type)
