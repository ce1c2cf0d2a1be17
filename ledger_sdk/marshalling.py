"""
Canonical byte serialization.

These are the bytes a request is signed over and that the node rebuilds to
verify the signature, so the layout must never change:

- unsigned 8/32-bit integers and signed 32-bit integers are big-endian
- big integers are a u32 length followed by minimal two's complement bytes
- strings are a u32 length followed by their UTF-8 bytes
"""
import struct
from dataclasses import dataclass, field

from .exceptions import DecodeError

U32_MAX = 2 ** 32 - 1


@dataclass
class MarshallingContext:
    """Append-only writer of canonical bytes."""
    buf: bytearray = field(default_factory=bytearray)

    def write_u8(self, v: int) -> None:
        self.buf.extend(int(v).to_bytes(1, "big", signed=False))

    def write_u32(self, v: int) -> None:
        if not 0 <= v <= U32_MAX:
            raise ValueError(f"Value does not fit 32 unsigned bits: {v}")
        self.buf.extend(int(v).to_bytes(4, "big", signed=False))

    def write_int32(self, v: int) -> None:
        self.buf.extend(struct.pack(">i", v))

    def write_bool(self, v: bool) -> None:
        self.write_u8(1 if v else 0)

    def write_big_integer(self, v: int) -> None:
        # One extra bit for the sign; ~v gives the magnitude bits of a negative
        magnitude = v if v >= 0 else ~v
        size = (magnitude.bit_length() + 8) // 8
        self.write_sized_bytes(v.to_bytes(size, "big", signed=True))

    def write_string(self, v: str) -> None:
        self.write_sized_bytes(v.encode("utf-8"))

    def write_sized_bytes(self, b: bytes) -> None:
        self.write_u32(len(b))
        self.buf.extend(b)

    def to_bytes(self) -> bytes:
        return bytes(self.buf)


class UnmarshallingContext:
    """Sequential reader of canonical bytes."""

    def __init__(self, data: bytes):
        self.data = bytes(data)
        self.offset = 0

    def _take(self, size: int) -> bytes:
        end = self.offset + size
        if end > len(self.data):
            raise DecodeError(
                f"Unexpected end of data: needed {size} bytes at offset {self.offset}"
            )
        chunk = self.data[self.offset:end]
        self.offset = end
        return chunk

    def read_u8(self) -> int:
        return self._take(1)[0]

    def read_u32(self) -> int:
        return int.from_bytes(self._take(4), "big", signed=False)

    def read_int32(self) -> int:
        return struct.unpack(">i", self._take(4))[0]

    def read_bool(self) -> bool:
        b = self.read_u8()
        if b not in (0, 1):
            raise DecodeError(f"Invalid boolean byte: {b}")
        return b == 1

    def read_big_integer(self) -> int:
        raw = self.read_sized_bytes()
        if not raw:
            raise DecodeError("Big integer encoding cannot be empty")
        return int.from_bytes(raw, "big", signed=True)

    def read_string(self) -> str:
        raw = self.read_sized_bytes()
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(f"Invalid UTF-8 string: {e}") from e

    def read_sized_bytes(self) -> bytes:
        return self._take(self.read_u32())

    @property
    def exhausted(self) -> bool:
        return self.offset == len(self.data)

    def expect_end(self) -> None:
        if not self.exhausted:
            raise DecodeError(f"{len(self.data) - self.offset} trailing bytes after decoding")
