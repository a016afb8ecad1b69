"""
Backend package for quadric_slam.

Optimizer-facing contracts:
- manifold: retract / local_coordinates / dimension dispatch per value type
- structures/: Values variable store
"""

from quadric_slam.backend import manifold
from quadric_slam.backend.structures import Values, symbol

__all__ = [
    "manifold",
    "Values",
    "symbol",
]
