"""
Manifold contract consumed by the optimizer.

Value types register their chart here instead of inheriting from a common
base class:

    dimension(x)              -> int
    retract(x, v, config)     -> x'         (x ⊕ v)
    local_coordinates(x, y)   -> v          (y ⊖ x)

config (a QuadricConfig) selects the radii policy for ConstrainedQuadric and
is ignored by the other types.

Registered: ConstrainedQuadric (9), Pose3 (6), np.ndarray (Euclidean).
Unregistered types raise TypeError.
"""

from __future__ import annotations

from functools import singledispatch
from typing import Any, Optional

import numpy as np

from quadric_slam.common.geometry.pose3 import Pose3
from quadric_slam.config import QuadricConfig
from quadric_slam.geometry.constrained_quadric import ConstrainedQuadric


def _unregistered(x: Any) -> TypeError:
    return TypeError(f"No manifold registered for type {type(x).__name__}")


@singledispatch
def dimension(x: Any) -> int:
    raise _unregistered(x)


@singledispatch
def retract(x: Any, v: np.ndarray, config: Optional[QuadricConfig] = None) -> Any:
    raise _unregistered(x)


@singledispatch
def local_coordinates(x: Any, y: Any) -> np.ndarray:
    raise _unregistered(x)


# =============================================================================
# Lie-group / constrained types
# =============================================================================


@dimension.register(Pose3)
@dimension.register(ConstrainedQuadric)
def _dimension_fixed(x) -> int:
    return type(x).dimension


@retract.register(Pose3)
def _retract_pose(x: Pose3, v, config=None) -> Pose3:
    return x.retract(v)


@retract.register(ConstrainedQuadric)
def _retract_quadric(x: ConstrainedQuadric, v, config=None) -> ConstrainedQuadric:
    return x.retract(v, config)


@local_coordinates.register(Pose3)
@local_coordinates.register(ConstrainedQuadric)
def _local_method(x, y):
    if not isinstance(y, type(x)):
        raise TypeError(
            f"local_coordinates between {type(x).__name__} and {type(y).__name__}"
        )
    return x.local_coordinates(y)


# =============================================================================
# Euclidean vectors
# =============================================================================


@dimension.register(np.ndarray)
def _dimension_vector(x: np.ndarray) -> int:
    return int(x.size)


@retract.register(np.ndarray)
def _retract_vector(x: np.ndarray, v, config=None) -> np.ndarray:
    v = np.asarray(v, dtype=float).reshape(x.shape)
    return x + v


@local_coordinates.register(np.ndarray)
def _local_vector(x: np.ndarray, y) -> np.ndarray:
    return (np.asarray(y, dtype=float) - x).reshape(-1)


def check_manifold_laws(x: Any, v: np.ndarray, tol: float = 1e-6) -> bool:
    """
    Check both chart round trips at x for tangent v:
        local_coordinates(x, retract(x, v)) == v
        retract(x, local_coordinates(x, retract(x, v))) == retract(x, v)
    """
    v = np.asarray(v, dtype=float).reshape(-1)
    if len(v) != dimension(x):
        raise ValueError(f"Expected {dimension(x)}D tangent, got {len(v)}")
    y = retract(x, v)
    v_back = local_coordinates(x, y)
    if not np.allclose(v_back, v, rtol=0.0, atol=tol):
        return False
    y_back = retract(x, v_back)
    return bool(np.allclose(local_coordinates(y, y_back), 0.0, rtol=0.0, atol=tol))
