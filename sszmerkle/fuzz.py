"""Random filling of SSZ dataclasses, with optional deliberate size errors."""

from __future__ import annotations

import copy
import dataclasses
import random
import time
import types
import typing
from dataclasses import dataclass
from typing import Any

_SPEC_KEY = "ssz"
_LETTERS = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
_UINT_BITS = {"uint8": 8, "uint16": 16, "uint32": 32, "uint64": 64}
_LONG_LIST_CAP = 5000
_LONG_LIST_LENGTH = 1000
_MAX_STRING = 64
_BUILTIN_HINTS = {
    "int": int,
    "bool": bool,
    "str": str,
    "bytes": bytes,
    "bytearray": bytearray,
}


@dataclass(frozen=True)
class _FieldSpec:
    size: tuple[int | None, ...] = ()
    max_size: tuple[int, ...] = ()
    kind: str | None = None


def _dimensions(value: Any) -> tuple[int | None, ...]:
    if value is None:
        return ()
    if isinstance(value, int):
        return (value,)
    if isinstance(value, str):
        value = value.split(",")
    parts = []
    for part in value:
        if part is None or part == "?":
            parts.append(None)
        else:
            parts.append(int(part))
    return tuple(parts)


def ssz_field(size=None, max_size=None, kind=None, default=dataclasses.MISSING):
    """Declare a dataclass field with SSZ sizing information.

    ``size`` gives fixed lengths per dimension ("33,32", (None, 32) or an int,
    where None or "?" means variable), ``max_size`` the maximum lengths and
    ``kind`` either a uint width such as "uint8" or "bitlist".
    """
    max_dims = _dimensions(max_size)
    if any(dim is None for dim in max_dims):
        raise ValueError("maximum sizes must be numbers")
    spec = _FieldSpec(size=_dimensions(size), max_size=max_dims, kind=kind)
    metadata = {_SPEC_KEY: spec}
    if default is dataclasses.MISSING:
        return dataclasses.field(metadata=metadata)
    if isinstance(default, (list, dict, set, bytearray)):
        return dataclasses.field(metadata=metadata, default_factory=lambda: copy.copy(default))
    return dataclasses.field(metadata=metadata, default=default)


def _split_top_level(text: str, separator: str) -> list[str]:
    parts: list[str] = []
    current: list[str] = []
    depth = 0
    for char in text:
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
        if char == separator and depth == 0:
            parts.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    parts.append("".join(current).strip())
    return parts


def _resolve_annotation(text: str, owner: type) -> Any:
    """Resolve a textual annotation made of builtins, lists, optionals and classes."""
    text = text.strip().strip("'\"")
    options = [part for part in _split_top_level(text, "|") if part != "None"]
    if len(options) != 1:
        raise TypeError(f"cannot resolve annotation {text!r}")
    text = options[0]
    if text.endswith("]") and "[" in text:
        head, _, inner = text[:-1].partition("[")
        head = head.strip().rsplit(".", 1)[-1]
        if head in ("list", "List"):
            return list[_resolve_annotation(inner, owner)]
        if head == "Optional":
            return _resolve_annotation(inner, owner)
        raise TypeError(f"cannot resolve annotation {text!r}")
    if text in _BUILTIN_HINTS:
        return _BUILTIN_HINTS[text]
    if text == owner.__name__:
        return owner
    namespace = getattr(owner.__init__, "__globals__", {})
    found = namespace.get(text)
    if isinstance(found, type):
        return found
    raise TypeError(f"cannot resolve annotation {text!r}")


def _resolve_hint(hint: Any, owner: type) -> Any:
    if isinstance(hint, str):
        return _resolve_annotation(hint, owner)
    if isinstance(hint, typing.ForwardRef):
        return _resolve_annotation(hint.__forward_arg__, owner)
    return hint


def _strip_optional(hint: Any) -> Any:
    if typing.get_origin(hint) in (typing.Union, types.UnionType):
        args = [arg for arg in typing.get_args(hint) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return hint


def _is_dataclass_type(hint: Any) -> bool:
    return isinstance(hint, type) and dataclasses.is_dataclass(hint)


class Fuzzer:
    """Fills dataclass instances with random values."""

    def __init__(self, seed: int | None = None, failure_ratio: float = 0.0) -> None:
        self._rng = random.Random(time.time_ns() if seed is None else seed)
        self.failure_ratio = failure_ratio

    def fuzz(self, obj: Any) -> bool:
        """Fill every field of ``obj``; return True if a size was made invalid."""
        if not dataclasses.is_dataclass(obj) or isinstance(obj, type):
            raise TypeError("fuzz needs a dataclass instance")
        run = _FuzzRun(self._rng, self.failure_ratio)
        run.fill(obj)
        return run.failed


class _FuzzRun:
    def __init__(self, rng: random.Random, failure_ratio: float) -> None:
        self._rng = rng
        self._failure_ratio = failure_ratio
        self.failed = False

    def _should_fail(self) -> bool:
        return self._rng.random() < self._failure_ratio

    def _between(self, low: int, high: int) -> int:
        return low + self._rng.randrange(high - low)

    def _count(self, limit: int, is_max: bool) -> int:
        if limit > _LONG_LIST_CAP:
            return _LONG_LIST_LENGTH
        if not self.failed and self._should_fail():
            self.failed = True
            if is_max:
                return self._between(limit + 1, limit + 10)
            num = self._between(limit - 10, limit + 10)
            if num == limit:
                return num + 1
            return 1 if num < 0 else num
        return limit

    def _element_count(self, spec: _FieldSpec) -> tuple[_FieldSpec, int]:
        element_kind = spec.kind if spec.kind in _UINT_BITS else None
        if spec.size:
            first, rest = spec.size[0], spec.size[1:]
            if first is None:
                if not spec.max_size:
                    raise ValueError("a variable size needs a maximum")
                count = self._count(spec.max_size[0], True)
                return _FieldSpec(size=rest, max_size=spec.max_size[1:], kind=element_kind), count
            return _FieldSpec(size=rest, kind=element_kind), self._count(first, False)
        if spec.max_size:
            return (
                _FieldSpec(max_size=spec.max_size[1:], kind=element_kind),
                self._count(spec.max_size[0], True),
            )
        if spec.kind == "bitlist":
            return _FieldSpec(), self._between(1, 10)
        raise ValueError("sequence field needs a size, a maximum or the bitlist kind")

    def _add_nil(self) -> bool:
        return not self.failed and self._should_fail()

    def _value(self, hint: Any, spec: _FieldSpec, owner: type) -> Any:
        hint = _strip_optional(_resolve_hint(hint, owner))
        if hint is bool:
            return self._rng.getrandbits(1) == 1
        if hint is int:
            bits = _UINT_BITS.get(spec.kind or "", 64)
            return self._rng.getrandbits(64) & ((1 << bits) - 1)
        if hint is str:
            length = self._rng.randrange(_MAX_STRING)
            return "".join(self._rng.choice(_LETTERS) for _ in range(length))
        if hint in (bytes, bytearray):
            _, count = self._element_count(spec)
            return hint(self._rng.randrange(256) for _ in range(count))
        if typing.get_origin(hint) is list:
            args = typing.get_args(hint)
            if len(args) != 1:
                raise TypeError(f"cannot fuzz list without an element type: {hint!r}")
            sub, count = self._element_count(spec)
            return [self._value(args[0], sub, owner) for _ in range(count)]
        if _is_dataclass_type(hint):
            obj = hint.__new__(hint)
            self.fill(obj)
            return obj
        raise TypeError(f"cannot fuzz values of type {hint!r}")

    def fill(self, obj: Any) -> None:
        owner = type(obj)
        for item in dataclasses.fields(obj):
            hint = _resolve_hint(item.type, owner)
            spec = item.metadata.get(_SPEC_KEY, _FieldSpec())
            if _is_dataclass_type(_strip_optional(hint)) and self._add_nil():
                object.__setattr__(obj, item.name, None)
                continue
            object.__setattr__(obj, item.name, self._value(hint, spec, owner))


_SEQUENCES = (list, tuple, bytes, bytearray)


def _is_empty_sequence(value: Any) -> bool:
    return isinstance(value, _SEQUENCES) and len(value) == 0


def deep_equal(x: Any, y: Any) -> bool:
    """Structural equality for SSZ values; a missing sequence equals an empty one."""
    if x is None or y is None:
        other = y if x is None else x
        return other is None or _is_empty_sequence(other)
    if type(x) is not type(y):
        return False
    if dataclasses.is_dataclass(x):
        return all(
            deep_equal(getattr(x, item.name), getattr(y, item.name))
            for item in dataclasses.fields(x)
        )
    if isinstance(x, (bytes, bytearray)):
        return x == y
    if isinstance(x, (list, tuple)):
        if len(x) != len(y):
            return False
        return all(deep_equal(a, b) for a, b in zip(x, y))
    if isinstance(x, (bool, int)):
        return x == y
    raise TypeError(f"comparison for type {type(x).__name__} not supported")