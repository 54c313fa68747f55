"""Verification of single and multi merkle proofs over generalized indices."""

from __future__ import annotations

import hashlib
from collections.abc import Sequence
from dataclasses import dataclass, field

from sszmerkle.encoding import SSZError


@dataclass
class Proof:
    """A merkle branch for one leaf at a generalized index."""

    index: int
    leaf: bytes
    hashes: list[bytes] = field(default_factory=list)


def sha256_digest(data: bytes) -> bytes:
    """SHA-256 digest of ``data``."""
    return hashlib.sha256(data).digest()


def get_pos_at_level(index: int, level: int) -> bool:
    """Whether the node on the path of ``index`` at ``level`` is a right child."""
    return (index & (1 << level)) > 0


def get_path_length(index: int) -> int:
    """Length of the path from a generalized index up to the root."""
    if index < 1:
        raise ValueError(f"generalized index must be positive, got {index}")
    return index.bit_length() - 1


def get_sibling(index: int) -> int:
    """Generalized index of a node's sibling."""
    return index ^ 1


def get_parent(index: int) -> int:
    """Generalized index of a node's parent."""
    return index >> 1


def get_required_indices(leaf_indices: Sequence[int]) -> list[int]:
    """Indices of the sibling hashes needed to prove the leaves, in decreasing order."""
    required: set[int] = set()
    computed: set[int] = set()
    leaves = set(leaf_indices)
    for leaf in leaf_indices:
        cur = leaf
        while cur > 1:
            required.add(get_sibling(cur))
            cur = get_parent(cur)
            computed.add(cur)
    return sorted(required - computed - leaves, reverse=True)


def verify_proof(root: bytes, proof: Proof) -> bool:
    """Check a single merkle branch against ``root``."""
    if len(proof.hashes) != get_path_length(proof.index):
        raise SSZError("invalid proof length")
    node = bytes(proof.leaf)
    for level, sibling in enumerate(proof.hashes):
        if get_pos_at_level(proof.index, level):
            node = sha256_digest(bytes(sibling) + node)
        else:
            node = sha256_digest(node + bytes(sibling))
    return bytes(root) == node


def verify_multiproof(
    root: bytes,
    proof: Sequence[bytes],
    leaves: Sequence[bytes],
    indices: Sequence[int],
) -> bool:
    """Check a proof for several leaves against ``root``."""
    if len(leaves) != len(indices):
        raise SSZError("number of leaves and indices mismatch")
    required = get_required_indices(indices)
    if len(required) != len(proof):
        raise SSZError(
            f"number of proof hashes {len(proof)} and required indices {len(required)} mismatch"
        )

    db: dict[int, bytes] = {index: bytes(leaf) for index, leaf in zip(indices, leaves)}
    db.update((index, bytes(h)) for index, h in zip(required, proof))
    keys = sorted([*indices, *required], reverse=True)

    pos = 0
    while pos < len(keys):
        key = keys[pos]
        if key == 1:
            break
        parent = get_parent(key)
        if parent not in db:
            left_index, right_index = key & ~1, key | 1
            left = db.get(left_index)
            right = db.get(right_index)
            if left is None or right is None:
                raise SSZError(
                    f"proof is missing required nodes, either {left_index} or {right_index}"
                )
            db[parent] = sha256_digest(left + right)
            keys.append(parent)
        pos += 1

    if 1 not in db:
        raise SSZError("root was not computed during proof verification")
    return db[1] == bytes(root)