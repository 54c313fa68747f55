import hashlib

import pytest

from sszmerkle.encoding import SSZError
from sszmerkle.hasher import (
    Hasher,
    HasherPool,
    calculate_limit,
    get_depth,
    hash_with_default_hasher,
    native_hash_wrapper,
    next_power_of_two,
    parse_bitlist,
    zero_hash,
)

ZERO_HASH_1 = "f5a5fd42d16a20302798ef6ed309979b43003d2320d9f0e8ea9831a92759fb4b"


@pytest.mark.parametrize(
    "num, res",
    [(0, 0), (1, 0), (2, 1), (3, 2), (4, 2), (5, 3), (6, 3), (7, 3), (8, 3), (9, 4), (16, 4), (1024, 10)],
)
def test_depth(num, res):
    assert get_depth(num) == res


@pytest.mark.parametrize(
    "num, res",
    [(0, 0), (1, 1), (2, 2), (3, 4), (4, 4), (5, 8), (6, 8), (7, 8), (8, 8), (9, 16), (10, 16), (11, 16), (13, 16)],
)
def test_next_power_of_two(num, res):
    assert next_power_of_two(num) == res


def test_hash_wrapper_hashes_pairs():
    a = b"\x01" + bytes(31)
    b = b"\x02" + bytes(31)
    layer = native_hash_wrapper(hashlib.sha256)
    out = layer(a + b + b + a)
    assert out == hashlib.sha256(a + b).digest() + hashlib.sha256(b + a).digest()
    with pytest.raises(ValueError):
        layer(a)


def test_zero_hashes():
    assert zero_hash(0) == bytes(32)
    assert zero_hash(1).hex() == ZERO_HASH_1
    with pytest.raises(ValueError):
        zero_hash(65)


def test_calculate_limit():
    assert calculate_limit(4, 0, 8) == 1
    assert calculate_limit(1024, 3, 32) == 1024
    assert calculate_limit(0, 0, 32) == 1
    assert calculate_limit(0, 5, 32) == 5


def test_parse_bitlist():
    assert parse_bitlist(b"\x0f") == (b"\x07", 3)
    assert parse_bitlist(b"\x01") == (b"", 0)
    assert parse_bitlist(bytes([0xFF, 0x01])) == (b"\xff", 8)
    assert parse_bitlist(bytes([0x05, 0x00, 0x01])) == (b"\x05", 16)
    with pytest.raises(SSZError):
        parse_bitlist(b"\x00")


def test_metadata_root():
    hh = Hasher()
    start = hh.index()
    hh.put_uint8(1)
    hh.put_bytes(hashlib.sha256(b"").digest())
    hh.put_uint16(0)
    hh.merkleize(start)
    assert hh.hash_root().hex() == "2a23ef2b7a7221eaac2ffb3842a506a981c009ca6c2fcbf20adbc595e56f1a93"


def test_small_code_trie_root():
    code = b"\x60\x01"
    hh = Hasher()
    root_index = hh.index()

    meta = hh.index()
    hh.put_uint8(1)
    hh.put_bytes(hashlib.sha256(code).digest())
    hh.put_uint16(len(code))
    hh.merkleize(meta)

    chunks = hh.index()
    chunk = hh.index()
    hh.put_uint8(0)
    hh.put_bytes(code.ljust(32, b"\x00"))
    hh.merkleize(chunk)
    hh.merkleize_with_mixin(chunks, 1, 4)

    hh.merkleize(root_index)
    assert hh.hash_root().hex() == "f1824b0084956084591ff4c91c11bcc94a40be82da280e5171932b967dd146e9"


def test_two_chunk_merkleize():
    a = b"\x01" + bytes(31)
    b = b"\x02" + bytes(31)
    hh = Hasher()
    hh.append(a)
    hh.append(b)
    hh.merkleize(0)
    assert hh.hash() == hashlib.sha256(a + b).digest()


def test_put_uint64_array_vector():
    hh = Hasher()
    hh.put_uint64_array([1, 2, 3, 4])
    expected = b"".join(v.to_bytes(8, "little") for v in (1, 2, 3, 4))
    assert hh.hash_root() == expected


def test_empty_list_roots_equal_zero_hash():
    hh = Hasher()
    hh.put_uint64_array([], 4)
    assert hh.hash_root().hex() == ZERO_HASH_1
    hh.reset()
    hh.put_bitlist(b"\x01", 256)
    assert hh.hash_root().hex() == ZERO_HASH_1


def test_list_over_limit_raises():
    hh = Hasher()
    with pytest.raises(SSZError):
        hh.put_uint64_array(list(range(10)), 4)


def test_put_root_vector():
    root = bytes(range(32))
    hh = Hasher()
    hh.put_root_vector([root])
    assert hh.hash_root() == root
    with pytest.raises(SSZError, match="bad root"):
        hh.put_root_vector([b"short"])


def test_put_bool_and_padding():
    hh = Hasher()
    hh.put_bool(True)
    assert hh.hash() == b"\x01" + bytes(31)
    hh.append_uint8(7)
    hh.fill_up_to_32()
    assert hh.index() == 64
    assert hh.hash() == b"\x07" + bytes(31)


def test_put_bytes_long_is_merkleized():
    data = bytes(range(40))
    hh = Hasher()
    hh.put_bytes(data)
    padded = data + bytes(24)
    assert hh.hash_root() == hashlib.sha256(padded).digest()


def test_hash_root_requires_single_chunk():
    hh = Hasher()
    with pytest.raises(SSZError):
        hh.hash_root()


class _Counter:
    def __init__(self, value):
        self.value = value

    def hash_tree_root_with(self, hh):
        hh.put_uint64(self.value)


def test_hash_with_default_hasher():
    assert hash_with_default_hasher(_Counter(5)) == b"\x05" + bytes(31)


def test_pool_reuses_reset_hashers():
    pool = HasherPool()
    hh = pool.get()
    hh.put_uint64(1)
    pool.put(hh)
    again = pool.get()
    assert again is hh
    assert again.index() == 0