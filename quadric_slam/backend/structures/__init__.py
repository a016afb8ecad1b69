"""Backend data structures."""

from quadric_slam.backend.structures.values import (
    Values,
    symbol,
    symbol_chr,
    symbol_index,
)

__all__ = [
    "Values",
    "symbol",
    "symbol_chr",
    "symbol_index",
]
