"""
Values: key -> variable store handed to the optimizer.

Keys are opaque hashables; `symbol(chr, index)` packs the usual
letter-plus-index convention into a stable int key.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Hashable, Iterator, Mapping, Optional, Type

import numpy as np

from quadric_slam.backend import manifold
from quadric_slam.config import QuadricConfig


# -----------------------------------------------------------------------------
# Stable packing of (chr, index) to an int key
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class SymbolSpec:
    """
    Bit packing for (chr, index) -> int key.

    8 bits of character above INDEX_BITS bits of index.
    """

    INDEX_BITS: int = 56

    @property
    def INDEX_MASK(self) -> int:
        return (1 << self.INDEX_BITS) - 1


_SYMBOL_SPEC = SymbolSpec()


def symbol(c: str, index: int) -> int:
    if len(c) != 1 or ord(c) > 0xFF:
        raise ValueError(f"Symbol character must be a single byte, got {c!r}")
    index = int(index)
    if index < 0 or index > _SYMBOL_SPEC.INDEX_MASK:
        raise ValueError(f"Symbol index out of range: {index}")
    return (ord(c) << _SYMBOL_SPEC.INDEX_BITS) | index


def symbol_chr(key: int) -> str:
    return chr(int(key) >> _SYMBOL_SPEC.INDEX_BITS)


def symbol_index(key: int) -> int:
    return int(key) & _SYMBOL_SPEC.INDEX_MASK


def _key_str(key: Hashable) -> str:
    if isinstance(key, int) and key >> _SYMBOL_SPEC.INDEX_BITS:
        return f"{symbol_chr(key)}{symbol_index(key)}"
    return repr(key)


class Values:
    """Last-write-wins variable store with manifold-aware retraction."""

    def __init__(self, items: Optional[Mapping[Hashable, Any]] = None):
        self._values: Dict[Hashable, Any] = dict(items) if items else {}

    # -------------------------------------------------------------------------
    # Store
    # -------------------------------------------------------------------------

    def insert(self, key: Hashable, value: Any) -> None:
        if key in self._values:
            raise KeyError(f"Key {_key_str(key)} already exists")
        self._values[key] = value

    def update(self, key: Hashable, value: Any) -> None:
        if key not in self._values:
            raise KeyError(f"Key {_key_str(key)} does not exist")
        self._values[key] = value

    def put(self, key: Hashable, value: Any) -> None:
        self._values[key] = value

    def get(self, key: Hashable) -> Any:
        try:
            return self._values[key]
        except KeyError:
            raise KeyError(f"Key {_key_str(key)} does not exist") from None

    def at(self, key: Hashable, expected_type: Type) -> Any:
        """get() with a type check."""
        value = self.get(key)
        if not isinstance(value, expected_type):
            raise TypeError(
                f"Value at {_key_str(key)} is {type(value).__name__}, "
                f"expected {expected_type.__name__}"
            )
        return value

    def exists(self, key: Hashable) -> bool:
        return key in self._values

    def erase(self, key: Hashable) -> None:
        if key not in self._values:
            raise KeyError(f"Key {_key_str(key)} does not exist")
        del self._values[key]

    def keys(self):
        return list(self._values.keys())

    def items(self):
        return list(self._values.items())

    def __contains__(self, key: Hashable) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(list(self._values))

    # -------------------------------------------------------------------------
    # Manifold
    # -------------------------------------------------------------------------

    def dim(self) -> int:
        """Total tangent dimension of all stored values."""
        return sum(manifold.dimension(v) for v in self._values.values())

    def retract(
        self,
        deltas: Mapping[Hashable, np.ndarray],
        config: Optional[QuadricConfig] = None,
    ) -> "Values":
        """
        New Values with each value retracted by its delta.

        Keys without a delta are copied unchanged; deltas for unknown keys
        raise KeyError. config sets the radii policy for quadric steps.
        """
        unknown = [k for k in deltas if k not in self._values]
        if unknown:
            raise KeyError(f"Deltas for unknown keys: {[_key_str(k) for k in unknown]}")
        out = Values()
        for key, value in self._values.items():
            if key in deltas:
                value = manifold.retract(value, deltas[key], config)
            out._values[key] = value
        return out

    def local_coordinates(self, other: "Values") -> Dict[Hashable, np.ndarray]:
        """Per-key tangent vectors from self to other; both must hold the same keys."""
        if set(self._values) != set(other._values):
            raise KeyError("local_coordinates requires identical key sets")
        return {
            key: manifold.local_coordinates(value, other._values[key])
            for key, value in self._values.items()
        }

    def __str__(self) -> str:
        lines = [f"Values with {len(self)} values:"]
        for key, value in self._values.items():
            lines.append(f"  {_key_str(key)}: {value}")
        return "\n".join(lines)
