from dataclasses import dataclass
from typing import Optional

import pytest

from sszmerkle.fuzz import Fuzzer, deep_equal, ssz_field


@dataclass
class Metadata:
    version: int = ssz_field(kind="uint8", default=0)
    code_hash: bytes = ssz_field(size=32, default=b"")
    code_length: int = ssz_field(kind="uint16", default=0)


@dataclass
class Chunk:
    fio: int = ssz_field(kind="uint8", default=0)
    code: bytes = ssz_field(size=32, default=b"")


@dataclass
class CodeTrieSmall:
    metadata: Optional[Metadata] = None
    chunks: list[Chunk] = ssz_field(max_size=4, default=[])


@dataclass
class Collections:
    historical: list[bytes] = ssz_field(size="?,32", max_size=16, default=[])
    fixed: list[bytes] = ssz_field(size=(3, 8), default=[])
    balances: list[int] = ssz_field(max_size=1099511627776, default=[])
    bits: bytes = ssz_field(kind="bitlist", default=b"")
    flag: bool = False


@dataclass
class Root:
    root: bytes = ssz_field(size=32, default=b"")


@dataclass
class Untagged:
    values: list[int] = ssz_field(default=[])


@dataclass
class VariableWithoutMax:
    values: bytes = ssz_field(size="?", default=b"")


def test_fuzz_without_failures_uses_declared_sizes():
    obj = CodeTrieSmall()
    failed = Fuzzer(seed=1).fuzz(obj)
    assert failed is False
    assert len(obj.metadata.code_hash) == 32
    assert len(obj.chunks) == 4
    assert all(len(chunk.code) == 32 for chunk in obj.chunks)


@pytest.mark.parametrize("seed", range(10))
def test_uint_kinds_bound_values(seed):
    obj = Metadata()
    Fuzzer(seed=seed).fuzz(obj)
    assert 0 <= obj.version < 256
    assert 0 <= obj.code_length < 65536


def test_collection_shapes():
    obj = Collections()
    assert Fuzzer(seed=3).fuzz(obj) is False
    assert len(obj.historical) == 16
    assert all(len(item) == 32 for item in obj.historical)
    assert [len(item) for item in obj.fixed] == [8, 8, 8]
    assert len(obj.balances) == 1000
    assert 1 <= len(obj.bits) < 10
    assert all(0 <= value < 1 << 64 for value in obj.balances)


def test_same_seed_gives_same_object():
    first, second = CodeTrieSmall(), CodeTrieSmall()
    Fuzzer(seed=42).fuzz(first)
    Fuzzer(seed=42).fuzz(second)
    assert deep_equal(first, second) is True


def test_full_failure_ratio_breaks_list_limit():
    obj = CodeTrieSmall()
    failed = Fuzzer(seed=5, failure_ratio=1.0).fuzz(obj)
    assert failed is True
    assert obj.metadata is None
    assert 4 < len(obj.chunks) < 14


@pytest.mark.parametrize("seed", range(10))
def test_full_failure_ratio_breaks_fixed_size(seed):
    obj = Root()
    assert Fuzzer(seed=seed, failure_ratio=1.0).fuzz(obj) is True
    assert len(obj.root) != 32
    assert len(obj.root) >= 1


def test_fuzz_requires_dataclass_instance():
    with pytest.raises(TypeError):
        Fuzzer(seed=1).fuzz({"a": 1})
    with pytest.raises(TypeError):
        Fuzzer(seed=1).fuzz(Root)


def test_untagged_sequence_is_rejected():
    with pytest.raises(ValueError):
        Fuzzer(seed=1).fuzz(Untagged())


def test_variable_size_without_maximum_is_rejected():
    with pytest.raises(ValueError):
        Fuzzer(seed=1).fuzz(VariableWithoutMax())


def test_deep_equal_detects_changed_byte():
    first, second = CodeTrieSmall(), CodeTrieSmall()
    Fuzzer(seed=9).fuzz(first)
    Fuzzer(seed=9).fuzz(second)
    code = bytearray(second.chunks[0].code)
    code[0] ^= 0xFF
    second.chunks[0].code = bytes(code)
    assert deep_equal(first, second) is False


def test_deep_equal_treats_missing_sequence_as_empty():
    assert deep_equal(CodeTrieSmall(chunks=None), CodeTrieSmall(chunks=[])) is True
    assert deep_equal(None, b"") is True
    assert deep_equal(None, None) is True


def test_deep_equal_missing_struct_differs_from_empty_struct():
    assert deep_equal(CodeTrieSmall(metadata=None), CodeTrieSmall(metadata=Metadata())) is False


def test_deep_equal_type_and_length_mismatch():
    assert deep_equal(Chunk(), Root()) is False
    assert deep_equal([1, 2], [1]) is False
    assert deep_equal(b"ab", bytearray(b"ab")) is False
    assert deep_equal([True, 7], [True, 7]) is True


def test_deep_equal_rejects_unsupported_types():
    with pytest.raises(TypeError):
        deep_equal("a", "a")