"""Primitive SSZ encoding and decoding helpers."""

from __future__ import annotations

import math
from collections.abc import Iterator
from datetime import datetime, timedelta, timezone
from typing import Protocol, runtime_checkable

_BYTES_PER_LENGTH_OFFSET = 4
_MASK64 = (1 << 64) - 1
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_BYTES_LENGTH = "bytes array does not have the correct length"
_VECTOR_LENGTH = "vector does not have the correct length"
_LIST_TOO_BIG = "list length is higher than max value"
_BIG_INT_TOO_BIG = "bigint bit length is bigger than size"


class SSZError(ValueError):
    """Raised when data cannot be encoded or decoded as SSZ."""


@runtime_checkable
class Marshaler(Protocol):
    """An object that can serialize itself to SSZ."""

    def marshal_ssz_to(self, dst: bytearray) -> bytearray:
        """Append the encoding to ``dst`` and return it."""
        ...

    def marshal_ssz(self) -> bytes:
        """Return the SSZ encoding."""
        ...

    def size_ssz(self) -> int:
        """Return the size of the SSZ encoding in bytes."""
        ...


@runtime_checkable
class Unmarshaler(Protocol):
    """An object that can load itself from an SSZ encoding."""

    def unmarshal_ssz(self, buf: bytes) -> None:
        """Populate the object from ``buf``."""
        ...


def bytes_length_error(name: str, found: int, expected: int) -> SSZError:
    """Error for a byte array of the wrong length."""
    return SSZError(f"{name} ({_BYTES_LENGTH}): expected {expected} and {found} found")


def vector_length_error(name: str, found: int, expected: int) -> SSZError:
    """Error for a vector of the wrong length."""
    return SSZError(f"{name} ({_VECTOR_LENGTH}): expected {expected} and {found} found")


def list_too_big_error(name: str, found: int, maximum: int) -> SSZError:
    """Error for a list longer than its maximum."""
    return SSZError(f"{name} ({_LIST_TOO_BIG}): max expected {maximum} and {found} found")


def big_int_too_big_error(name: str, found: int, maximum: int) -> SSZError:
    """Error for an integer that does not fit its byte size."""
    return SSZError(f"{name} ({_BIG_INT_TOO_BIG}): max expected {maximum} and {found} found")


def marshal_ssz(obj: Marshaler) -> bytes:
    """Serialize a marshaler into a fresh byte string."""
    return bytes(obj.marshal_ssz_to(bytearray()))


def _read_uint(src: bytes, size: int) -> int:
    if len(src) < size:
        raise SSZError(f"need {size} bytes, got {len(src)}")
    return int.from_bytes(src[:size], "little")


def unmarshal_uint64(src: bytes) -> int:
    """Decode a little endian uint64."""
    return _read_uint(src, 8)


def unmarshal_uint32(src: bytes) -> int:
    """Decode a little endian uint32."""
    return _read_uint(src, 4)


def unmarshal_uint16(src: bytes) -> int:
    """Decode a little endian uint16."""
    return _read_uint(src, 2)


def unmarshal_uint8(src: bytes) -> int:
    """Decode a uint8."""
    return _read_uint(src, 1)


def unmarshal_bool(src: bytes) -> bool:
    """Decode a boolean: true only for the byte value 1."""
    return _read_uint(src, 1) == 1


def unmarshal_time(src: bytes) -> datetime:
    """Decode a Unix timestamp in seconds into a UTC datetime."""
    seconds = unmarshal_uint64(src)
    if seconds >= 1 << 63:
        seconds -= 1 << 64
    return _EPOCH + timedelta(seconds=seconds)


def unmarshal_big_int(src: bytes) -> int:
    """Decode an unsigned little endian integer of any width."""
    return int.from_bytes(src, "little")


def marshal_uint64(value: int) -> bytes:
    """Encode a uint64 in little endian order."""
    return value.to_bytes(8, "little")


def marshal_uint32(value: int) -> bytes:
    """Encode a uint32 in little endian order."""
    return value.to_bytes(4, "little")


def marshal_uint16(value: int) -> bytes:
    """Encode a uint16 in little endian order."""
    return value.to_bytes(2, "little")


def marshal_uint8(value: int) -> bytes:
    """Encode a uint8."""
    return value.to_bytes(1, "little")


def marshal_bool(value: bool) -> bytes:
    """Encode a boolean as one byte."""
    return marshal_uint8(int(bool(value)))


def marshal_time(value: datetime) -> bytes:
    """Encode a datetime as Unix seconds in a uint64."""
    return marshal_uint64(math.floor(value.timestamp()) & _MASK64)


def marshal_big_int(value: int, size: int) -> bytes:
    """Encode the magnitude of ``value`` little endian in ``size`` bytes."""
    magnitude = abs(value)
    required = (magnitude.bit_length() + 7) // 8
    if required > size:
        raise big_int_too_big_error("BigInt", required, size)
    return magnitude.to_bytes(size, "little")


def write_offset(offset: int) -> bytes:
    """Encode a 4-byte offset."""
    return marshal_uint32(offset)


def read_offset(buf: bytes) -> int:
    """Decode a 4-byte offset."""
    return unmarshal_uint32(buf)


def validate_bitlist(buf: bytes, bit_limit: int) -> None:
    """Check that ``buf`` is a well formed bitlist of at most ``bit_limit`` bits."""
    byte_len = len(buf)
    if byte_len == 0:
        raise SSZError("bitlist empty, it does not have length bit")
    max_bytes = (bit_limit >> 3) + 1
    if byte_len > max_bytes:
        raise SSZError(f"unexpected number of bytes, got {byte_len} but found {max_bytes}")
    last = buf[-1]
    if last == 0:
        raise SSZError("trailing byte is zero")
    num_of_bits = 8 * (byte_len - 1) + last.bit_length() - 1
    if num_of_bits > bit_limit:
        raise SSZError("too many bits")


def validate_big_int(value: int, buf_length: int) -> None:
    """Check that ``value`` fits in ``buf_length`` bytes."""
    required = (abs(value).bit_length() + 7) // 8
    if buf_length < required:
        raise big_int_too_big_error("BigIntType.BigInt", required, 64)


def divide_int(a: int, b: int) -> tuple[int, bool]:
    """Return the quotient and whether the division is exact."""
    return a // b, a % b == 0


def divide_exact(a: int, b: int, maximum: int) -> int:
    """Divide exactly, failing on a remainder or a result above ``maximum``."""
    num, exact = divide_int(a, b)
    if not exact:
        raise SSZError(f"{a} is not a multiple of {b}")
    if num > maximum:
        raise SSZError(f"{num} items exceed the maximum of {maximum}")
    return num


def decode_dynamic_length(buf: bytes, max_size: int) -> int:
    """Read the element count of a list of variable-size items."""
    if not buf:
        return 0
    if len(buf) < _BYTES_PER_LENGTH_OFFSET:
        raise SSZError("not enough data")
    length, exact = divide_int(read_offset(buf), _BYTES_PER_LENGTH_OFFSET)
    if not exact:
        raise SSZError("first offset is not a multiple of the offset size")
    if length > max_size:
        raise SSZError("too big for the list")
    return length


def iter_dynamic(src: bytes, length: int) -> Iterator[bytes]:
    """Yield the ``length`` variable-size items encoded in ``src``."""
    if length == 0:
        return
    size = len(src)
    start = read_offset(src)
    pos = _BYTES_PER_LENGTH_OFFSET
    for remaining in range(length, 0, -1):
        if remaining == 1:
            end = size
        else:
            if size < pos + _BYTES_PER_LENGTH_OFFSET:
                raise SSZError("not enough data to read offset")
            end = read_offset(src[pos:pos + _BYTES_PER_LENGTH_OFFSET])
            pos += _BYTES_PER_LENGTH_OFFSET
        if start > end:
            raise SSZError("offset is higher than the following offset")
        if end > size:
            raise SSZError("offset points beyond the end of the data")
        yield src[start:end]
        start = end