"""
Constrained dual quadric landmarks for factor-graph SLAM.

Usage:
    from quadric_slam import ConstrainedQuadric, Pose3, Values, symbol

    q = ConstrainedQuadric(Pose3.from_rotvec([0, 0, 0.3], [1, 2, 3]), [1.0, 0.5, 0.25])
    values = Values()
    q.add_to_values(values, symbol("q", 0))
"""

from quadric_slam.common.geometry import AlignedBox3, Pose3
from quadric_slam.config import QuadricConfig, load_quadric_config
from quadric_slam.geometry import ConstrainedQuadric
from quadric_slam.backend.structures import Values, symbol

__all__ = [
    "AlignedBox3",
    "Pose3",
    "QuadricConfig",
    "load_quadric_config",
    "ConstrainedQuadric",
    "Values",
    "symbol",
]
