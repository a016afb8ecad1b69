"""
Numeric primitives for the quadric constraint.

All functions in this module are TOTAL FUNCTIONS for finite input.
They return result dataclasses carrying the magnitude of any projection,
which is exactly 0 when the input already satisfied the domain.

Design invariants:
- Stabilization (symmetrize, eigenvalue floor) is always applied
- Eigen decompositions are returned in a deterministic order and sign
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

# =============================================================================
# Result Types
# =============================================================================


@dataclass
class SymmetrizeResult:
    """Result of Symmetrize operation."""
    M_sym: np.ndarray  # Symmetric matrix
    sym_delta: float  # ||M_sym - M||_F


@dataclass
class EigenFloorResult:
    """Result of EigenFloorProjection operation."""
    eigvals: np.ndarray  # Ascending, floored eigenvalues
    eigvecs: np.ndarray  # Columns match eigvals; right-handed frame when 3x3
    eigvals_raw: np.ndarray  # Ascending eigenvalues before the floor
    n_floored: int  # Number of eigenvalues replaced by the floor
    projection_delta: float  # ||M_proj - M_sym||_F
    sym_delta: float  # ||M_sym - M||_F from symmetrize step


# =============================================================================
# Primitive Functions (always execute)
# =============================================================================


def symmetrize(M: np.ndarray) -> SymmetrizeResult:
    """
    Symmetrize a matrix (always computed).

    Args:
        M: Input matrix (d, d)

    Returns:
        SymmetrizeResult with symmetric matrix and delta magnitude
    """
    M = np.asarray(M, dtype=np.float64)
    M_sym = 0.5 * (M + M.T)
    sym_delta = float(np.linalg.norm(M_sym - M, ord="fro"))
    return SymmetrizeResult(M_sym=M_sym, sym_delta=sym_delta)


def canonicalize_eigenvectors(eigvecs: np.ndarray) -> np.ndarray:
    """
    Fix the sign ambiguity of each eigenvector column.

    Each column is flipped so its largest-magnitude component is positive
    (first such index on ties). For square 3x3 frames the last column is
    then flipped if needed so det = +1.
    """
    V = np.array(eigvecs, dtype=np.float64)
    for j in range(V.shape[1]):
        i = int(np.argmax(np.abs(V[:, j])))
        if V[i, j] < 0.0:
            V[:, j] = -V[:, j]
    if V.shape == (3, 3) and np.linalg.det(V) < 0.0:
        V[:, 2] = -V[:, 2]
    return V


def eigen_floor_projection(M: np.ndarray, floor: float) -> EigenFloorResult:
    """
    Project a symmetric matrix onto {eigenvalues >= floor} (always computed).

    Always executes:
    1. Symmetrize
    2. Eigendecomposition (ascending eigenvalues)
    3. Clamp eigenvalues to >= floor
    4. Canonicalize eigenvector signs

    Args:
        M: Input matrix (d, d)
        floor: Minimum eigenvalue, must be positive

    Returns:
        EigenFloorResult with sorted eigen pairs and projection metrics
    """
    if not floor > 0.0:
        raise ValueError(f"Eigenvalue floor must be positive, got {floor}")
    sym = symmetrize(M)

    # eigh returns ascending eigenvalues
    eigvals_raw, eigvecs = np.linalg.eigh(sym.M_sym)
    eigvals = np.maximum(eigvals_raw, floor)
    n_floored = int(np.sum(eigvals_raw < floor))

    eigvecs = canonicalize_eigenvectors(eigvecs)
    # Reconstruction is invariant to the column signs
    M_proj = eigvecs @ np.diag(eigvals) @ eigvecs.T
    projection_delta = float(np.linalg.norm(M_proj - sym.M_sym, ord="fro"))

    return EigenFloorResult(
        eigvals=eigvals,
        eigvecs=eigvecs,
        eigvals_raw=eigvals_raw,
        n_floored=n_floored,
        projection_delta=projection_delta,
        sym_delta=sym.sym_delta,
    )
