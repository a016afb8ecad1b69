"""
Landmark geometry for quadric_slam.

- constrained_quadric: ConstrainedQuadric ellipsoid landmark (9 DOF manifold)
"""

from quadric_slam.geometry.constrained_quadric import ConstrainedQuadric

__all__ = ["ConstrainedQuadric"]
