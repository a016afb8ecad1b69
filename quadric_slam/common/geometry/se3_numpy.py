"""
SE(3) geometry using Lie algebra (tangent space) representation.

Group elements are 4x4 homogeneous transforms T = [[R, t], [0, 1]].
Tangent vectors are twists xi = (vx, vy, vz, wx, wy, wz):
- (vx, vy, vz): translational part in R^3
- (wx, wy, wz): rotation vector (axis-angle) in so(3)

Numerical Policy:
    Epsilon thresholds are chosen based on IEEE 754 double precision:
    - ROTATION_EPSILON = 1e-10: below this angle first-order series are exact to O(θ²)
    - SINGULARITY_EPSILON = 1e-6: threshold for π-singularity handling

    These are NUMERICAL STABILITY choices, not model parameters.
    They affect only the computational path, not the mathematical result.

References:
- Barfoot (2017): State Estimation for Robotics
- Sola et al. (2018): A micro Lie theory for state estimation
"""

from __future__ import annotations

import math

import numpy as np


# =============================================================================
# Numerical Constants (stability, not policy)
# =============================================================================

# For small-angle approximations: use when θ < ε to avoid division by ~0
ROTATION_EPSILON: float = 1e-10

# For π-singularity handling in the logarithm
SINGULARITY_EPSILON: float = 1e-6

# Orthogonality tolerance accepted by rotmat_to_rotvec
ORTHOGONALITY_TOLERANCE: float = 1e-5


# =============================================================================
# Rotation vector <-> Rotation matrix conversions (so(3) <-> SO(3))
# =============================================================================


def skew(v: np.ndarray) -> np.ndarray:
    """Skew-symmetric matrix from 3-vector (hat operator)."""
    v = np.asarray(v, dtype=float).reshape(-1)
    if len(v) != 3:
        raise ValueError(f"Expected 3D vector, got shape {v.shape}")
    return np.array([
        [0.0, -v[2], v[1]],
        [v[2], 0.0, -v[0]],
        [-v[1], v[0], 0.0]
    ], dtype=float)


def unskew(S: np.ndarray) -> np.ndarray:
    """Extract 3-vector from skew-symmetric matrix (vee operator)."""
    return np.array([S[2, 1], S[0, 2], S[1, 0]], dtype=float)


def rotvec_to_rotmat(rotvec: np.ndarray) -> np.ndarray:
    """
    Convert rotation vector (axis-angle) to rotation matrix.
    Uses Rodrigues' formula: R = I + sin(θ)[ω]_× + (1-cos(θ))[ω]_×²

    This is the exponential map exp: so(3) -> SO(3).
    """
    rotvec = np.asarray(rotvec, dtype=float).reshape(-1)
    if len(rotvec) != 3:
        raise ValueError(f"Expected 3D rotation vector, got shape {rotvec.shape}")
    theta = np.linalg.norm(rotvec)

    if theta < ROTATION_EPSILON:
        # Small angle: R ≈ I + [rotvec]_× (first-order Taylor)
        return np.eye(3, dtype=float) + skew(rotvec)

    K = skew(rotvec / theta)
    return np.eye(3, dtype=float) + math.sin(theta) * K + (1.0 - math.cos(theta)) * (K @ K)


def rotmat_to_rotvec(R: np.ndarray) -> np.ndarray:
    """
    Convert rotation matrix to rotation vector (axis-angle).
    This is the logarithmic map log: SO(3) -> so(3).

    Handles three cases:
    1. θ ≈ 0: Extract from skew-symmetric part
    2. θ ≈ π: Axis from the symmetric part (R + I) / 2 = a aᵀ
    3. Otherwise: Standard formula
    """
    R = np.asarray(R, dtype=float)
    if R.shape != (3, 3):
        raise ValueError(f"Expected 3x3 matrix, got shape {R.shape}")

    if not np.allclose(R @ R.T, np.eye(3), atol=ORTHOGONALITY_TOLERANCE):
        raise ValueError("Input matrix is not orthogonal (R @ R.T != I)")

    S = (R - R.T) / 2.0
    s = unskew(S)
    sin_theta = np.linalg.norm(s)
    cos_theta = np.clip((np.trace(R) - 1.0) / 2.0, -1.0, 1.0)
    theta = math.atan2(sin_theta, cos_theta)

    if theta < ROTATION_EPSILON:
        # log(R) ≈ (R - R.T) / 2 for small angles
        return s

    if abs(theta - math.pi) < SINGULARITY_EPSILON:
        # Largest column of (R + I) / 2 is parallel to the axis
        B = (R + np.eye(3)) / 2.0
        col = int(np.argmax(np.diag(B)))
        axis = B[:, col] / math.sqrt(max(B[col, col], ROTATION_EPSILON))
        axis = axis / np.linalg.norm(axis)
        if float(axis @ s) < 0.0:
            axis = -axis
        return axis * theta

    return s * (theta / sin_theta)


def so3_left_jacobian(rotvec: np.ndarray) -> np.ndarray:
    """V(ω) = I + (1-cos θ)/θ K + (θ - sin θ)/θ K², with K the unit-axis hat matrix."""
    rotvec = np.asarray(rotvec, dtype=float).reshape(-1)
    theta = np.linalg.norm(rotvec)
    if theta < ROTATION_EPSILON:
        return np.eye(3, dtype=float) + 0.5 * skew(rotvec)
    K = skew(rotvec / theta)
    return (
        np.eye(3, dtype=float)
        + ((1.0 - math.cos(theta)) / theta) * K
        + ((theta - math.sin(theta)) / theta) * (K @ K)
    )


def so3_left_jacobian_inverse(rotvec: np.ndarray) -> np.ndarray:
    """V(ω)^-1 = I - (θ/2) K + (1 - (θ/2) cot(θ/2)) K²."""
    rotvec = np.asarray(rotvec, dtype=float).reshape(-1)
    theta = np.linalg.norm(rotvec)
    if theta < ROTATION_EPSILON:
        return np.eye(3, dtype=float) - 0.5 * skew(rotvec)
    K = skew(rotvec / theta)
    half = theta / 2.0
    return (
        np.eye(3, dtype=float)
        - half * K
        + (1.0 - half / math.tan(half)) * (K @ K)
    )


# =============================================================================
# SE(3) group operations (homogeneous 4x4)
# =============================================================================


def _as_transform(T: np.ndarray) -> np.ndarray:
    T = np.asarray(T, dtype=float)
    if T.shape != (4, 4):
        raise ValueError(f"Expected 4x4 transform, got shape {T.shape}")
    return T


def se3_from_rt(R: np.ndarray, t: np.ndarray) -> np.ndarray:
    """Assemble homogeneous transform from rotation (3,3) and translation (3,)."""
    T = np.eye(4, dtype=float)
    T[:3, :3] = np.asarray(R, dtype=float)
    T[:3, 3] = np.asarray(t, dtype=float).reshape(3)
    return T


def se3_compose(T1: np.ndarray, T2: np.ndarray) -> np.ndarray:
    """Compose two SE(3) transforms: T_result = T1 ∘ T2."""
    T1 = _as_transform(T1)
    T2 = _as_transform(T2)
    R1, t1 = T1[:3, :3], T1[:3, 3]
    R2, t2 = T2[:3, :3], T2[:3, 3]
    return se3_from_rt(R1 @ R2, R1 @ t2 + t1)


def se3_inverse(T: np.ndarray) -> np.ndarray:
    """Compute inverse of SE(3) transform: T_inv such that T ∘ T_inv = I."""
    T = _as_transform(T)
    R_inv = T[:3, :3].T  # For rotation matrices, inverse = transpose
    return se3_from_rt(R_inv, -R_inv @ T[:3, 3])


def se3_relative(T_from: np.ndarray, T_to: np.ndarray) -> np.ndarray:
    """Compute relative transform: T_rel = T_from^{-1} ∘ T_to."""
    return se3_compose(se3_inverse(T_from), T_to)


def se3_apply(T: np.ndarray, p: np.ndarray) -> np.ndarray:
    """
    Apply SE(3) transform to point(s): p_transformed = T * p.

    Args:
        T: 4x4 homogeneous transform
        p: 3D point (3,) or batch of points (N, 3)

    Returns:
        3D transformed point(s), same shape as input
    """
    T = _as_transform(T)
    p = np.asarray(p, dtype=float)
    R, t = T[:3, :3], T[:3, 3]

    if p.ndim == 1:
        if len(p) != 3:
            raise ValueError(f"Expected 3D point, got shape {p.shape}")
        return R @ p + t
    elif p.ndim == 2:
        if p.shape[1] != 3:
            raise ValueError(f"Expected (N, 3) points, got shape {p.shape}")
        return p @ R.T + t
    else:
        raise ValueError(f"Expected 1D or 2D array, got shape {p.shape}")


def se3_exp(xi: np.ndarray) -> np.ndarray:
    """
    Exponential map: se(3) -> SE(3).

    Args:
        xi: 6D twist vector (vx, vy, vz, ωx, ωy, ωz)

    Returns:
        4x4 homogeneous transform
    """
    xi = np.asarray(xi, dtype=float).reshape(-1)
    if len(xi) != 6:
        raise ValueError(f"Expected 6D twist, got shape {xi.shape}")

    v = xi[:3]
    omega = xi[3:6]
    R = rotvec_to_rotmat(omega)
    t = so3_left_jacobian(omega) @ v
    return se3_from_rt(R, t)


def se3_log(T: np.ndarray) -> np.ndarray:
    """
    Logarithmic map: SE(3) -> se(3).

    Args:
        T: 4x4 homogeneous transform

    Returns:
        6D twist vector (vx, vy, vz, ωx, ωy, ωz)
    """
    T = _as_transform(T)
    omega = rotmat_to_rotvec(T[:3, :3])
    v = so3_left_jacobian_inverse(omega) @ T[:3, 3]
    return np.concatenate([v, omega])


def se3_generators() -> np.ndarray:
    """
    Basis of se(3) as 4x4 matrices, ordered like the twist (v, ω).

    G[k] = d/dxi_k exp(xi) at xi = 0.
    """
    G = np.zeros((6, 4, 4), dtype=float)
    for k in range(3):
        G[k, k, 3] = 1.0
        G[3 + k, :3, :3] = skew(np.eye(3)[k])
    return G
