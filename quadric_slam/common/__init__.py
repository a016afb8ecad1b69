"""
Common package for quadric_slam.

Shared geometry, numeric primitives and audit reports used by the quadric
landmark and the backend.

Subpackages:
- geometry/: SE(3) operations, Pose3, AlignedBox3
"""

from quadric_slam.common.op_report import OpReport
from quadric_slam.common import constants

__all__ = [
    "OpReport",
    "constants",
]
