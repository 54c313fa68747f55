"""Merkleization of SSZ values into 32-byte hash tree roots."""

from __future__ import annotations

import hashlib
import threading
from collections.abc import Callable, Sequence
from typing import Protocol, runtime_checkable

from sszmerkle.encoding import SSZError, marshal_uint8, marshal_uint16, marshal_uint32, marshal_uint64

HashFn = Callable[[bytes], bytes]

_MASK64 = (1 << 64) - 1
_ZERO_BYTES = bytes(32)
_TRUE_BYTES = b"\x01" + bytes(31)


def _build_zero_hashes() -> list[bytes]:
    hashes = [_ZERO_BYTES]
    for _ in range(64):
        hashes.append(hashlib.sha256(hashes[-1] * 2).digest())
    return hashes


_ZERO_HASHES = _build_zero_hashes()


def zero_hash(level: int) -> bytes:
    """Root of a full tree of depth ``level`` whose leaves are all zero."""
    if not 0 <= level < len(_ZERO_HASHES):
        raise ValueError(f"zero hash level must be between 0 and {len(_ZERO_HASHES) - 1}")
    return _ZERO_HASHES[level]


def native_hash_wrapper(hash_factory: Callable[[], "hashlib._Hash"] | Callable[..., object]) -> HashFn:
    """Build a layer hash function from a hashlib-style constructor.

    The returned function hashes each consecutive 64-byte pair in its input and
    returns the concatenated 32-byte digests.
    """

    def hash_layer(data: bytes) -> bytes:
        if len(data) % 64:
            raise ValueError("layer length must be a multiple of 64 bytes")
        view = memoryview(data)
        return b"".join(
            hash_factory(view[start:start + 64]).digest() for start in range(0, len(data), 64)
        )

    return hash_layer


def calculate_limit(max_capacity: int, num_items: int, size: int) -> int:
    """Number of 32-byte chunks reserved for a list of the given capacity."""
    limit = (max_capacity * size + 31) // 32
    if limit:
        return limit
    return num_items or 1


def next_power_of_two(v: int) -> int:
    """Round up to a power of two with 64-bit wrap-around (0 maps to 0)."""
    v = (v - 1) & _MASK64
    for shift in (1, 2, 4, 8, 16):
        v |= v >> shift
    return (v + 1) & _MASK64


def get_depth(d: int) -> int:
    """Depth of the smallest tree with at least ``d`` leaves."""
    if d <= 1:
        return 0
    return next_power_of_two(d).bit_length() - 1


def parse_bitlist(buf: bytes) -> tuple[bytes, int]:
    """Strip the length bit from a bitlist, returning its content and bit count."""
    if not buf or buf[-1] == 0:
        raise SSZError("bitlist has no length bit")
    msb = buf[-1].bit_length() - 1
    size = 8 * (len(buf) - 1) + msb
    content = bytearray(buf)
    content[-1] &= ~(1 << msb) & 0xFF
    return bytes(content).rstrip(b"\x00"), size


@runtime_checkable
class HashWalker(Protocol):
    """Sink that collects chunks and merkleizes them."""

    def hash(self) -> bytes: ...
    def append_uint8(self, value: int) -> None: ...
    def append_uint64(self, value: int) -> None: ...
    def append_bytes32(self, b: bytes) -> None: ...
    def put_uint64(self, value: int) -> None: ...
    def put_uint32(self, value: int) -> None: ...
    def put_uint16(self, value: int) -> None: ...
    def put_uint8(self, value: int) -> None: ...
    def fill_up_to_32(self) -> None: ...
    def append(self, data: bytes) -> None: ...
    def put_bitlist(self, bb: bytes, max_size: int) -> None: ...
    def put_bool(self, value: bool) -> None: ...
    def put_bytes(self, b: bytes) -> None: ...
    def index(self) -> int: ...
    def merkleize(self, index: int) -> None: ...
    def merkleize_with_mixin(self, index: int, num: int, limit: int) -> None: ...


@runtime_checkable
class HashRoot(Protocol):
    """An object with an SSZ hash tree root."""

    def hash_tree_root(self) -> bytes: ...
    def hash_tree_root_with(self, hh: HashWalker) -> None: ...


class Hasher:
    """Accumulates SSZ chunks and folds them into hash tree roots."""

    def __init__(self, hash_fn: HashFn | None = None) -> None:
        self._hash_fn = hash_fn or native_hash_wrapper(hashlib.sha256)
        self._buf = bytearray()

    def reset(self) -> None:
        """Discard all collected data."""
        self._buf.clear()

    def append_bytes32(self, b: bytes) -> None:
        """Append bytes, right-padded with zeros to a multiple of 32."""
        self._buf += b
        rest = len(b) % 32
        if rest:
            self._buf += _ZERO_BYTES[: 32 - rest]

    def put_uint64(self, value: int) -> None:
        self.append_bytes32(marshal_uint64(value))

    def put_uint32(self, value: int) -> None:
        self.append_bytes32(marshal_uint32(value))

    def put_uint16(self, value: int) -> None:
        self.append_bytes32(marshal_uint16(value))

    def put_uint8(self, value: int) -> None:
        self.append_bytes32(marshal_uint8(value))

    def fill_up_to_32(self) -> None:
        """Pad the buffer with zeros to a multiple of 32 bytes."""
        rest = len(self._buf) % 32
        if rest:
            self._buf += _ZERO_BYTES[: 32 - rest]

    def append_uint8(self, value: int) -> None:
        self._buf += marshal_uint8(value)

    def append_uint64(self, value: int) -> None:
        self._buf += marshal_uint64(value)

    def append(self, data: bytes) -> None:
        self._buf += data

    def put_root_vector(self, roots: Sequence[bytes], max_capacity: int | None = None) -> None:
        """Merkleize a vector, or a list when ``max_capacity`` is given, of roots."""
        if any(len(root) != 32 for root in roots):
            raise SSZError("bad root")
        start = self.index()
        for root in roots:
            self._buf += root
        if max_capacity is None:
            self.merkleize(start)
        else:
            limit = calculate_limit(max_capacity, len(roots), 32)
            self.merkleize_with_mixin(start, len(roots), limit)

    def put_uint64_array(self, values: Sequence[int], max_capacity: int | None = None) -> None:
        """Merkleize a vector, or a list when ``max_capacity`` is given, of uint64."""
        start = self.index()
        for value in values:
            self.append_uint64(value)
        self.fill_up_to_32()
        if max_capacity is None:
            self.merkleize(start)
        else:
            limit = calculate_limit(max_capacity, len(values), 8)
            self.merkleize_with_mixin(start, len(values), limit)

    def put_bitlist(self, bb: bytes, max_size: int) -> None:
        """Merkleize a bitlist and mix in its bit length."""
        content, size = parse_bitlist(bb)
        start = self.index()
        self.append_bytes32(content)
        self.merkleize_with_mixin(start, size, (max_size + 255) // 256)

    def put_bool(self, value: bool) -> None:
        self._buf += _TRUE_BYTES if value else _ZERO_BYTES

    def put_bytes(self, b: bytes) -> None:
        """Append short byte strings directly; merkleize longer ones."""
        if len(b) <= 32:
            self.append_bytes32(b)
            return
        start = self.index()
        self.append_bytes32(b)
        self.merkleize(start)

    def index(self) -> int:
        """Current position in the buffer."""
        return len(self._buf)

    def merkleize(self, index: int) -> None:
        """Replace everything from ``index`` on with its merkle root."""
        self._buf[index:] = self._merkleize_chunks(bytes(self._buf[index:]), 0)

    def merkleize_with_mixin(self, index: int, num: int, limit: int) -> None:
        """Merkleize from ``index`` on within ``limit`` chunks and mix in ``num``."""
        self.fill_up_to_32()
        root = self._merkleize_chunks(bytes(self._buf[index:]), limit)
        length_chunk = marshal_uint64(num) + bytes(24)
        self._buf[index:] = self._hash_fn(root + length_chunk)[:32]

    def hash(self) -> bytes:
        """The last 32 bytes of the buffer."""
        return bytes(self._buf[-32:])

    def hash_root(self) -> bytes:
        """The final root; the buffer must hold exactly one chunk."""
        if len(self._buf) != 32:
            raise SSZError("expected 32 byte size")
        return bytes(self._buf)

    def _merkleize_chunks(self, data: bytes, limit: int) -> bytes:
        count = len(data) // 32
        data = data[: count * 32]
        if limit == 0:
            limit = count
        elif count > limit:
            raise SSZError(f"count '{count}' higher than limit '{limit}'")

        if limit == 0:
            return _ZERO_BYTES
        if limit == 1:
            return data[:32] if count == 1 else _ZERO_BYTES

        depth = get_depth(limit)
        if not data:
            return _ZERO_HASHES[depth]

        layer = data
        for level in range(depth):
            if (len(layer) // 32) % 2:
                layer += _ZERO_HASHES[level]
            layer = self._hash_fn(layer)
        return layer


class HasherPool:
    """A thread-safe pool of reusable hashers."""

    def __init__(self) -> None:
        self._free: list[Hasher] = []
        self._lock = threading.Lock()

    def get(self) -> Hasher:
        """Take a hasher from the pool, creating one when it is empty."""
        with self._lock:
            if self._free:
                return self._free.pop()
        return Hasher()

    def put(self, hasher: Hasher) -> None:
        """Reset a hasher and return it to the pool."""
        hasher.reset()
        with self._lock:
            self._free.append(hasher)


DEFAULT_HASHER_POOL = HasherPool()


def hash_with_default_hasher(obj: HashRoot) -> bytes:
    """Compute the hash tree root of ``obj`` with a pooled hasher."""
    hasher = DEFAULT_HASHER_POOL.get()
    try:
        obj.hash_tree_root_with(hasher)
        return hasher.hash_root()
    finally:
        DEFAULT_HASHER_POOL.put(hasher)