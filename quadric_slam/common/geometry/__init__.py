"""
Geometry package for quadric_slam.

Modules:
- se3_numpy: NumPy SE(3)/SO(3) exp/log and group operations
- pose3: Pose3 rigid transform value type
- aligned_box: AlignedBox3 axis-aligned bounds

Usage:
    from quadric_slam.common.geometry import Pose3, se3_exp, se3_log
"""

from __future__ import annotations

from quadric_slam.common.geometry.se3_numpy import (
    # Constants
    ROTATION_EPSILON,
    SINGULARITY_EPSILON,
    # SO(3) operations
    skew,
    unskew,
    rotvec_to_rotmat,
    rotmat_to_rotvec,
    so3_left_jacobian,
    so3_left_jacobian_inverse,
    # SE(3) operations
    se3_from_rt,
    se3_compose,
    se3_inverse,
    se3_relative,
    se3_apply,
    se3_exp,
    se3_log,
    se3_generators,
)
from quadric_slam.common.geometry.pose3 import Pose3
from quadric_slam.common.geometry.aligned_box import AlignedBox3

__all__ = [
    # Constants
    "ROTATION_EPSILON",
    "SINGULARITY_EPSILON",
    # SO(3) operations
    "skew",
    "unskew",
    "rotvec_to_rotmat",
    "rotmat_to_rotvec",
    "so3_left_jacobian",
    "so3_left_jacobian_inverse",
    # SE(3) operations
    "se3_from_rt",
    "se3_compose",
    "se3_inverse",
    "se3_relative",
    "se3_apply",
    "se3_exp",
    "se3_log",
    "se3_generators",
    # Value types
    "Pose3",
    "AlignedBox3",
]
