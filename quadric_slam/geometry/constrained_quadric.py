"""
Constrained dual quadric: an ellipsoid landmark parameterized by (pose, radii).

The dual quadric matrix

    Q = Z · diag(r1², r2², r3², -1) · Zᵀ,    Z = [[R, t], [0, 1]]

is a conversion boundary only; the stored state is always (pose, radii),
so the scale freedom of the 4x4 form never enters the optimizer.

Manifold chart (dimension 9), v = (xi[0:6], dr[0:3]):
    retract(v)              = (pose * Exp(xi), radii + dr)
    local_coordinates(q)    = (Log(pose^-1 * q.pose), q.radii - radii)

See Nicholson et al. 2019, "QuadricSLAM: Dual Quadrics From Object
Detections as Landmarks in Object-Oriented SLAM".
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np

from quadric_slam.common import constants
from quadric_slam.common.geometry.aligned_box import AlignedBox3
from quadric_slam.common.geometry.pose3 import Pose3, PointOrPose
from quadric_slam.common.geometry.se3_numpy import se3_generators
from quadric_slam.common.op_report import OpReport
from quadric_slam.common.primitives import eigen_floor_projection, symmetrize
from quadric_slam.config import DEFAULT_CONFIG, QuadricConfig

logger = logging.getLogger(__name__)

_SE3_GENERATORS = se3_generators()
_POSE = slice(constants.QUADRIC_SLICE_POSE_START, constants.QUADRIC_SLICE_POSE_END)
_RADII = slice(constants.QUADRIC_SLICE_RADII_START, constants.QUADRIC_SLICE_RADII_END)


@dataclass(frozen=True, eq=False)
class ConstrainedQuadric:
    """
    Ellipsoid (r, t, s): pose of the axis frame in world, radii along its x, y, z.

    Radii must be finite and strictly positive; anything else raises ValueError.
    """
    pose: Pose3 = field(default_factory=Pose3)
    radii: np.ndarray = field(default_factory=lambda: np.ones(3))

    dimension = constants.QUADRIC_DIM

    def __post_init__(self):
        if not isinstance(self.pose, Pose3):
            raise TypeError(f"pose must be a Pose3, got {type(self.pose).__name__}")
        r = np.array(self.radii, dtype=float).reshape(-1)
        if r.shape != (constants.RADII_DIM,):
            raise ValueError(f"Expected 3 radii, got shape {r.shape}")
        if not np.all(np.isfinite(r)):
            raise ValueError(f"Quadric radii must be finite, got {r}")
        if np.any(r <= 0.0):
            raise ValueError(f"Quadric radii must be strictly positive, got {r}")
        r.setflags(write=False)
        object.__setattr__(self, "radii", r)

    # -------------------------------------------------------------------------
    # Named constructors
    # -------------------------------------------------------------------------

    @classmethod
    def from_rotation_translation(cls, R, t, radii) -> "ConstrainedQuadric":
        return cls(Pose3(R, t), radii)

    @classmethod
    def constrain(
        cls,
        dual_quadric: np.ndarray,
        config: Optional[QuadricConfig] = None,
    ) -> "ConstrainedQuadric":
        """
        Constrain a generic dual quadric to the nearest ellipsoid in structure.

        This is a projection, not an inverse: hyperboloids, cones and other
        non-ellipsoidal inputs come back with floored radii. Use
        `constrain_with_report` to detect that case.
        """
        quadric, _ = cls.constrain_with_report(dual_quadric, config)
        return quadric

    @classmethod
    def constrain_with_report(
        cls,
        dual_quadric: np.ndarray,
        config: Optional[QuadricConfig] = None,
    ) -> Tuple["ConstrainedQuadric", OpReport]:
        """
        Constrain a 4x4 dual quadric and report the projection.

        Steps (always executed):
        1. Symmetrize; scale by the largest |entry|; normalize so Q[3,3] = -1,
           guarding |Q[3,3]| < eps (relative to the largest entry)
        2. Centroid t = -Q[0:3, 3] (dual form of the point-quadric center -A⁻¹b)
        3. Eigen-decompose the centered block R diag(r²) Rᵀ = Q[0:3,0:3] + t tᵀ,
           floor eigenvalues at radius_floor², ascending order, canonical signs
        4. pose = (R, t), radii = sqrt(eigenvalues)

        Args:
            dual_quadric: 4x4 matrix, any sign and scale
            config: numerical policy (defaults to DEFAULT_CONFIG)

        Returns:
            (ConstrainedQuadric, OpReport)

        Raises:
            ValueError: wrong shape or non-finite entries
        """
        config = DEFAULT_CONFIG if config is None else config
        dQ = np.asarray(dual_quadric, dtype=float)
        if dQ.shape != (4, 4):
            raise ValueError(f"Expected 4x4 dual quadric, got shape {dQ.shape}")
        if not np.all(np.isfinite(dQ)):
            raise ValueError("Dual quadric entries must be finite")

        # Bring entries into [-1, 1]; Q is homogeneous so the result is unchanged,
        # and the guarded normalizer then bounds every entry of Q by 1/eps.
        magnitude = float(np.max(np.abs(dQ)))
        if magnitude > 0.0:
            dQ = dQ / magnitude

        triggers = []
        sym = symmetrize(dQ)
        if sym.sym_delta > 0.0:
            triggers.append("Symmetrize")

        scale = float(sym.M_sym[3, 3])
        homogeneous_guard = abs(scale) < config.homogeneous_epsilon
        if homogeneous_guard:
            scale = math.copysign(config.homogeneous_epsilon, scale)
            triggers.append("HomogeneousGuard")
        Q = sym.M_sym / (-scale)

        translation = -Q[:3, 3]
        centered = Q[:3, :3] + np.outer(translation, translation)

        proj = eigen_floor_projection(centered, config.eigenvalue_floor)
        if proj.n_floored:
            triggers.append("EigenvalueFloor")
            logger.debug(
                "Constrained non-ellipsoidal dual quadric: floored %d eigenvalue(s), raw=%s",
                proj.n_floored,
                proj.eigvals_raw,
            )

        quadric = cls(Pose3(proj.eigvecs, translation), np.sqrt(proj.eigvals))

        report = OpReport(
            name="ConstrainEllipsoid",
            exact=not triggers,
            approximation_triggers=triggers,
            closed_form=True,
            domain_projection=bool(proj.n_floored) or homogeneous_guard,
            metrics={
                "n_floored": proj.n_floored,
                "eigvals_raw": proj.eigvals_raw.tolist(),
                "projection_delta": proj.projection_delta,
                "sym_delta": sym.sym_delta,
                "homogeneous_scale": float(sym.M_sym[3, 3]),
                "input_magnitude": magnitude,
            },
            notes="Eigen pairs sorted ascending; eigenvector signs canonicalized.",
        )
        report.validate()
        return quadric, report

    @classmethod
    def random(
        cls,
        rng: Optional[np.random.Generator] = None,
        radii_range: Tuple[float, float] = (0.1, 2.0),
        translation_sigma: float = 1.0,
    ) -> "ConstrainedQuadric":
        rng = np.random.default_rng() if rng is None else rng
        pose = Pose3.random(rng, translation_sigma=translation_sigma)
        return cls(pose, rng.uniform(radii_range[0], radii_range[1], size=3))

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    def centroid(self) -> np.ndarray:
        return self.pose.translation

    # -------------------------------------------------------------------------
    # Matrix forms
    # -------------------------------------------------------------------------

    def _shape_matrix(self) -> np.ndarray:
        return np.diag(np.append(self.radii ** 2, -1.0))

    def matrix(self) -> np.ndarray:
        """Dual quadric Q = Z C Zᵀ with C = diag(r1², r2², r3², -1)."""
        Z = self.pose.matrix()
        return Z @ self._shape_matrix() @ Z.T

    def matrix_with_jacobian(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Dual quadric and its derivative w.r.t. the 9D tangent.

        Returns:
            Q: (4, 4)
            H: (16, 9), H[:, k] = d vec(Q) / d v_k with vec = row-major ravel

        For the pose twist, d/dxi_k (Z Exp(xi)) = Z G_k at xi = 0, hence
        dQ = Z (G_k C + C G_kᵀ) Zᵀ. For radii, dQ = Z (2 r_i e_i e_iᵀ) Zᵀ.
        """
        Z = self.pose.matrix()
        C = self._shape_matrix()
        Q = Z @ C @ Z.T

        H = np.zeros((16, constants.QUADRIC_DIM), dtype=float)
        for k, G in enumerate(_SE3_GENERATORS):
            H[:, k] = (Z @ (G @ C + C @ G.T) @ Z.T).ravel()
        for i in range(constants.RADII_DIM):
            dC = np.zeros((4, 4), dtype=float)
            dC[i, i] = 2.0 * self.radii[i]
            H[:, constants.QUADRIC_SLICE_RADII_START + i] = (Z @ dC @ Z.T).ravel()
        return Q, H

    def normalized_matrix(self) -> np.ndarray:
        """Dual quadric scaled so Q[3,3] = 1."""
        Q = self.matrix()
        return Q / Q[3, 3]

    # -------------------------------------------------------------------------
    # Geometric queries
    # -------------------------------------------------------------------------

    def bounds(self) -> AlignedBox3:
        """
        Tight world-frame axis-aligned box.

        Half extent along world axis j is sqrt(sum_i (R[j, i] r_i)²).
        """
        half = np.sqrt(np.sum((self.pose.rotation * self.radii[None, :]) ** 2, axis=1))
        c = self.centroid()
        return AlignedBox3.from_min_max(c - half, c + half)

    def is_behind(self, camera_pose: Pose3) -> bool:
        """True if the centroid has negative depth (z) in the camera frame."""
        pc = camera_pose.transform_to(self.centroid())
        return bool(pc[2] < 0.0)

    def contains(
        self,
        point_or_pose: PointOrPose,
        config: Optional[QuadricConfig] = None,
    ) -> bool:
        """
        True if the point (or the pose's position) lies inside the ellipsoid.
        Points on the surface are considered contained.
        """
        config = DEFAULT_CONFIG if config is None else config
        if isinstance(point_or_pose, Pose3):
            point = point_or_pose.translation
        else:
            point = np.asarray(point_or_pose, dtype=float).reshape(-1)
            if point.shape != (3,):
                raise ValueError(f"Expected 3D point, got shape {point.shape}")
        x = self.pose.transform_to(point)
        level = float(np.sum((x / self.radii) ** 2))
        return level <= 1.0 + config.contains_tolerance

    # -------------------------------------------------------------------------
    # Manifold
    # -------------------------------------------------------------------------

    @classmethod
    def Retract(cls, v: np.ndarray) -> "ConstrainedQuadric":
        """Retract at origin: v = (pose twist from identity, radii)."""
        v = _as_tangent(v)
        return cls(Pose3.Expmap(v[_POSE]), v[_RADII])

    @staticmethod
    def LocalCoordinates(quadric: "ConstrainedQuadric") -> np.ndarray:
        """Local at origin, inverse of Retract."""
        return np.concatenate([Pose3.Logmap(quadric.pose), quadric.radii])

    def retract(
        self,
        v: np.ndarray,
        config: Optional[QuadricConfig] = None,
    ) -> "ConstrainedQuadric":
        """
        Move by v in tangent space and return the quadric on the manifold.

        Radii are updated additively. A step that drives a radius to zero or
        below is rejected (ValueError) or clamped to radius_floor, per
        config.retract_radii_policy.
        """
        config = DEFAULT_CONFIG if config is None else config
        v = _as_tangent(v)
        pose = self.pose.retract(v[_POSE])
        radii = self.radii + v[_RADII]

        if np.any(radii <= 0.0):
            if config.retract_radii_policy == constants.RETRACT_POLICY_CLAMP:
                logger.warning(
                    "Retraction produced non-positive radii %s; clamping to %g",
                    radii,
                    config.radius_floor,
                )
                radii = np.maximum(radii, config.radius_floor)
            else:
                raise ValueError(
                    f"Retraction produced non-positive radii {radii} "
                    f"(radii={self.radii}, delta={v[_RADII]})"
                )
        return ConstrainedQuadric(pose, radii)

    def local_coordinates(self, other: "ConstrainedQuadric") -> np.ndarray:
        """Tangent vector v such that self.retract(v) == other."""
        return np.concatenate([
            self.pose.local_coordinates(other.pose),
            other.radii - self.radii,
        ])

    # -------------------------------------------------------------------------
    # Variable store
    # -------------------------------------------------------------------------

    def add_to_values(self, values, key) -> None:
        values.put(key, self)

    @classmethod
    def get_from_values(cls, values, key) -> "ConstrainedQuadric":
        return values.at(key, cls)

    # -------------------------------------------------------------------------
    # Testable
    # -------------------------------------------------------------------------

    def equals(
        self,
        other: "ConstrainedQuadric",
        tol: float = constants.QUADRIC_EQUALS_TOL,
    ) -> bool:
        """
        Component-wise comparison of pose and radii.

        Not representation invariant: the same ellipsoid with permuted axes
        or flipped axis signs compares unequal.
        """
        return self.pose.equals(other.pose, tol) and bool(
            np.allclose(self.radii, other.radii, rtol=0.0, atol=tol)
        )

    def print(self, label: str = "") -> str:
        """Write a human-readable dump to stdout and return it."""
        text = f"{label}{self}"
        print(text)
        return text

    def __str__(self) -> str:
        r = np.array2string(self.radii, precision=6, separator=", ")
        return f"ConstrainedQuadric(pose={self.pose}, radii={r})"


def _as_tangent(v: np.ndarray) -> np.ndarray:
    v = np.asarray(v, dtype=float).reshape(-1)
    if len(v) != constants.QUADRIC_DIM:
        raise ValueError(f"Expected 9D tangent vector, got shape {v.shape}")
    if not np.all(np.isfinite(v)):
        raise ValueError(f"Tangent vector must be finite, got {v}")
    return v
