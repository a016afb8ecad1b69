"""
Pose3: rigid-body transform value type on top of se3_numpy.

Manifold chart (dimension 6) is a right perturbation:
    retract(xi)            = self * Exp(xi)
    local_coordinates(p)   = Log(self^-1 * p)
with xi = (vx, vy, vz, ωx, ωy, ωz).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

import numpy as np
from scipy.spatial.transform import Rotation

from quadric_slam.common.constants import POSE_DIM
from quadric_slam.common.geometry.se3_numpy import (
    rotvec_to_rotmat,
    rotmat_to_rotvec,
    se3_apply,
    se3_compose,
    se3_exp,
    se3_from_rt,
    se3_inverse,
    se3_log,
)

# Accepted deviation of R @ R.T from identity
ROTATION_ORTHONORMAL_TOL: float = 1e-6


@dataclass(frozen=True, eq=False)
class Pose3:
    """Rigid transform from local frame to world frame (R, t)."""
    rotation: np.ndarray = field(default_factory=lambda: np.eye(3))
    translation: np.ndarray = field(default_factory=lambda: np.zeros(3))

    dimension = POSE_DIM

    def __post_init__(self):
        R = np.array(self.rotation, dtype=float)
        t = np.array(self.translation, dtype=float).reshape(-1)
        if R.shape != (3, 3):
            raise ValueError(f"Expected 3x3 rotation, got shape {R.shape}")
        if t.shape != (3,):
            raise ValueError(f"Expected 3D translation, got shape {t.shape}")
        if not (np.all(np.isfinite(R)) and np.all(np.isfinite(t))):
            raise ValueError("Pose3 entries must be finite")
        if not np.allclose(R @ R.T, np.eye(3), atol=ROTATION_ORTHONORMAL_TOL):
            raise ValueError("Pose3 rotation is not orthonormal")
        if np.linalg.det(R) <= 0.0:
            raise ValueError("Pose3 rotation must have det +1")
        R.setflags(write=False)
        t.setflags(write=False)
        object.__setattr__(self, "rotation", R)
        object.__setattr__(self, "translation", t)

    # -------------------------------------------------------------------------
    # Named constructors
    # -------------------------------------------------------------------------

    @classmethod
    def identity(cls) -> "Pose3":
        return cls()

    @classmethod
    def from_matrix(cls, T: np.ndarray) -> "Pose3":
        T = np.asarray(T, dtype=float)
        if T.shape != (4, 4):
            raise ValueError(f"Expected 4x4 transform, got shape {T.shape}")
        return cls(T[:3, :3], T[:3, 3])

    @classmethod
    def from_rotvec(cls, rotvec, translation=(0.0, 0.0, 0.0)) -> "Pose3":
        return cls(rotvec_to_rotmat(rotvec), translation)

    @classmethod
    def from_quaternion(cls, quat_xyzw, translation=(0.0, 0.0, 0.0)) -> "Pose3":
        """Quaternion in scalar-last (x, y, z, w) order."""
        q = np.asarray(quat_xyzw, dtype=float).reshape(-1)
        if len(q) != 4:
            raise ValueError(f"Expected 4-element quaternion, got {len(q)}")
        if np.linalg.norm(q) < 1e-10:
            raise ValueError("Quaternion norm is too small (near zero)")
        return cls(Rotation.from_quat(q).as_matrix(), translation)

    @classmethod
    def random(
        cls,
        rng: Optional[np.random.Generator] = None,
        translation_sigma: float = 1.0,
    ) -> "Pose3":
        """Uniform random rotation, Gaussian translation."""
        rng = np.random.default_rng() if rng is None else rng
        R = Rotation.random(None, rng).as_matrix()
        return cls(R, rng.normal(scale=translation_sigma, size=3))

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    def matrix(self) -> np.ndarray:
        """Homogeneous 4x4 matrix Z = [[R, t], [0, 1]]."""
        return se3_from_rt(self.rotation, self.translation)

    def quaternion(self) -> np.ndarray:
        """Rotation as (x, y, z, w)."""
        return Rotation.from_matrix(self.rotation).as_quat()

    def rotvec(self) -> np.ndarray:
        return rotmat_to_rotvec(self.rotation)

    # -------------------------------------------------------------------------
    # Group operations
    # -------------------------------------------------------------------------

    def inverse(self) -> "Pose3":
        return Pose3.from_matrix(se3_inverse(self.matrix()))

    def compose(self, other: "Pose3") -> "Pose3":
        return Pose3.from_matrix(se3_compose(self.matrix(), other.matrix()))

    def __mul__(self, other: "Pose3") -> "Pose3":
        if not isinstance(other, Pose3):
            return NotImplemented
        return self.compose(other)

    def between(self, other: "Pose3") -> "Pose3":
        """self^-1 * other"""
        return self.inverse().compose(other)

    def transform_from(self, point: np.ndarray) -> np.ndarray:
        """Local -> world."""
        return se3_apply(self.matrix(), point)

    def transform_to(self, point: np.ndarray) -> np.ndarray:
        """World -> local."""
        p = np.asarray(point, dtype=float)
        return (p - self.translation) @ self.rotation

    # -------------------------------------------------------------------------
    # Manifold
    # -------------------------------------------------------------------------

    @classmethod
    def Expmap(cls, xi: np.ndarray) -> "Pose3":
        return cls.from_matrix(se3_exp(xi))

    @staticmethod
    def Logmap(pose: "Pose3") -> np.ndarray:
        return se3_log(pose.matrix())

    def retract(self, xi: np.ndarray) -> "Pose3":
        xi = np.asarray(xi, dtype=float).reshape(-1)
        if len(xi) != POSE_DIM:
            raise ValueError(f"Expected 6D twist, got shape {xi.shape}")
        if not np.all(np.isfinite(xi)):
            raise ValueError(f"Pose tangent must be finite, got {xi}")
        return self.compose(Pose3.Expmap(xi))

    def local_coordinates(self, other: "Pose3") -> np.ndarray:
        return Pose3.Logmap(self.between(other))

    # -------------------------------------------------------------------------
    # Testable
    # -------------------------------------------------------------------------

    def equals(self, other: "Pose3", tol: float = 1e-9) -> bool:
        return bool(
            np.allclose(self.rotation, other.rotation, rtol=0.0, atol=tol)
            and np.allclose(self.translation, other.translation, rtol=0.0, atol=tol)
        )

    def __str__(self) -> str:
        t = np.array2string(self.translation, precision=6, separator=", ")
        r = np.array2string(self.rotvec(), precision=6, separator=", ")
        return f"Pose3(t={t}, rotvec={r})"


PointOrPose = Union[np.ndarray, Pose3]
