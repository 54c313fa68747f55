# sszmerkle

Building blocks for SimpleSerialize (SSZ): little-endian encoding and
decoding of basic values, bitlist and offset handling, Merkle hashing
of chunked data into hash tree roots, and verification of single and
multi-leaf Merkle proofs. It has no runtime dependencies beyond the
standard library.

## Installation

```
pip install sszmerkle
```

To run the test suite, install the `test` extra and run pytest:

```
pip install "sszmerkle[test]"
pytest
```

## Encoding: `sszmerkle.encoding`

Basic values are encoded to `bytes` and decoded back to Python values:

```python
from sszmerkle.encoding import (
    marshal_uint64, unmarshal_uint64,
    marshal_bool, unmarshal_bool,
    marshal_big_int, unmarshal_big_int,
)

assert unmarshal_uint64(marshal_uint64(1234)) == 1234
assert unmarshal_bool(marshal_bool(True)) is True
assert unmarshal_big_int(marshal_big_int(2**100, 32)) == 2**100
```

There are encoders and decoders for `uint8`, `uint16`, `uint32` and
`uint64`, booleans, `datetime` values (stored as Unix seconds in a
`uint64`) and unsigned integers of any width (`marshal_big_int(value, size)`
raises if the value does not fit in `size` bytes). `write_offset` and
`read_offset` handle the 4-byte offsets of variable-size fields.

Every failure is raised as `SSZError`, a subclass of `ValueError`.
`bytes_length_error`, `vector_length_error`, `list_too_big_error` and
`big_int_too_big_error` build the usual messages for such errors.

Validation and variable-size lists:

```python
from sszmerkle.encoding import (
    validate_bitlist, decode_dynamic_length, iter_dynamic, write_offset, divide_exact,
)

validate_bitlist(b"\x01", 8)          # raises SSZError when malformed or too long

buf = write_offset(8) + write_offset(10) + b"ab" + b"c"
count = decode_dynamic_length(buf, 10)  # 2
assert list(iter_dynamic(buf, count)) == [b"ab", b"c"]

assert divide_exact(66, 33, 4) == 2     # raises on a remainder or above the maximum
```

`validate_big_int(value, buf_length)` checks that an integer fits in a
buffer, and `divide_int(a, b)` returns the quotient with a flag telling
whether the division was exact.

The `Marshaler` and `Unmarshaler` protocols describe objects with
`marshal_ssz_to`, `marshal_ssz`, `size_ssz` and `unmarshal_ssz`;
`marshal_ssz(obj)` serialises any marshaler into a fresh byte string.

## Hashing: `sszmerkle.hasher`

`Hasher` collects 32-byte chunks and merkleizes them:

```python
import hashlib
from sszmerkle.hasher import Hasher, native_hash_wrapper

hh = Hasher(native_hash_wrapper(hashlib.sha256))   # SHA-256 is also the default
start = hh.index()
hh.put_uint64(1)
hh.put_bool(True)
hh.merkleize(start)
root = hh.hash_root()        # 32 bytes; raises SSZError unless exactly one chunk is left
```

Besides the `put_*` methods for integers, booleans and bytes, it offers
`put_bitlist`, `put_root_vector` and `put_uint64_array` (lists when a
maximum capacity is given, vectors otherwise), `merkleize_with_mixin` to
mix a length into a list root, and `hash()` for the last chunk written.
A hash function is any callable that takes a byte string made of 64-byte
pairs and returns their 32-byte digests concatenated;
`native_hash_wrapper` builds one from a hashlib-style constructor.

Helpers: `zero_hash(level)`, `calculate_limit`, `next_power_of_two`,
`get_depth` and `parse_bitlist`.

`HasherPool` is a thread-safe pool of reusable hashers, and
`hash_with_default_hasher(obj)` computes the root of any object that
implements the `HashRoot` protocol (`hash_tree_root_with(hasher)`),
using a shared pool.

## Proofs: `sszmerkle.proof`

Merkle branches are checked against a root by generalized index:

```python
from sszmerkle.proof import Proof, verify_proof, verify_multiproof, get_required_indices

ok = verify_proof(root, Proof(index=4, leaf=leaf, hashes=[sibling, uncle]))

needed = get_required_indices([10, 49])   # indices of the hashes a multiproof must carry
ok = verify_multiproof(root, hashes, leaves, [10, 49])
```

Both return `True` or `False`; a proof of the wrong shape raises
`SSZError`. `get_pos_at_level`, `get_path_length`, `get_sibling`,
`get_parent` and `sha256_digest` are available as well.

## Random test data: `sszmerkle.fuzz`

Dataclasses whose fields are declared with `ssz_field` can be filled
with random values:

```python
from dataclasses import dataclass
from sszmerkle.fuzz import Fuzzer, ssz_field, deep_equal

@dataclass
class Chunk:
    fio: int = ssz_field(kind="uint8", default=0)
    code: bytes = ssz_field(size=32, default=b"")

chunk = Chunk()
made_invalid = Fuzzer(seed=1, failure_ratio=0.1).fuzz(chunk)
```

`ssz_field` takes fixed sizes per dimension (`"33,32"`, with `"?"` or
`None` for a variable dimension), maximum sizes, and a kind (`"uint8"`
to `"uint64"`, or `"bitlist"`). With a non-zero failure ratio the fuzzer
may once per call pick a size outside the declared bounds, or leave a
nested dataclass field as `None`; `fuzz` returns `True` when it chose an
out-of-bounds size. `deep_equal` compares such objects field by field,
treating `None` and an empty sequence as equal.

## 256-bit integers: `sszmerkle.uint256`

```python
from sszmerkle.uint256 import uint256_from_text, uint256_to_text

raw = uint256_from_text("1000")   # 32 little-endian bytes
assert uint256_to_text(raw) == "1000"
```

Values wider than 256 bits raise `ValueError`.

## What this package does not do

It does not build Merkle trees of objects or generate proofs; it only
verifies proofs you already have. It also has no schema compiler and no
ready-made SSZ container types: an object's encoding and hashing methods
are written by hand on top of the helpers above.