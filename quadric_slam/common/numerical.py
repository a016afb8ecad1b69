"""
Finite-difference Jacobians through the manifold chart.

Reference implementation for validating closed-form derivatives; never used
inside the estimator itself.
"""

from __future__ import annotations

from typing import Any, Callable

import numpy as np

from quadric_slam.backend import manifold


def numerical_derivative(
    f: Callable[[Any], np.ndarray],
    x: Any,
    delta: float = 1e-5,
) -> np.ndarray:
    """
    Central-difference Jacobian of f at x.

    Args:
        f: maps a manifold value to an array (flattened row-major)
        x: manifold value registered with quadric_slam.backend.manifold
        delta: tangent step

    Returns:
        (m, n) Jacobian, m = f(x).size, n = dimension(x)
    """
    n = manifold.dimension(x)
    m = np.asarray(f(x), dtype=float).size
    H = np.zeros((m, n), dtype=float)
    for k in range(n):
        d = np.zeros(n, dtype=float)
        d[k] = delta
        f_plus = np.asarray(f(manifold.retract(x, d)), dtype=float).ravel()
        f_minus = np.asarray(f(manifold.retract(x, -d)), dtype=float).ravel()
        H[:, k] = (f_plus - f_minus) / (2.0 * delta)
    return H
