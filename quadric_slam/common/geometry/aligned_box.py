"""
Axis-aligned 3D box (xmin, xmax, ymin, ymax, zmin, zmax).
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class AlignedBox3:
    """World-frame axis-aligned box; degenerate (zero-width) axes are allowed."""
    xmin: float
    xmax: float
    ymin: float
    ymax: float
    zmin: float
    zmax: float

    def __post_init__(self):
        v = self.vector()
        if not np.all(np.isfinite(v)):
            raise ValueError(f"AlignedBox3 bounds must be finite, got {v}")
        for axis, (lo, hi) in zip("xyz", v.reshape(3, 2)):
            if lo > hi:
                raise ValueError(f"AlignedBox3 {axis}min > {axis}max ({lo} > {hi})")

    @classmethod
    def from_vector(cls, v) -> "AlignedBox3":
        v = np.asarray(v, dtype=float).reshape(-1)
        if len(v) != 6:
            raise ValueError(f"Expected 6 bounds, got {len(v)}")
        return cls(*(float(x) for x in v))

    @classmethod
    def from_min_max(cls, min_point, max_point) -> "AlignedBox3":
        lo = np.asarray(min_point, dtype=float).reshape(3)
        hi = np.asarray(max_point, dtype=float).reshape(3)
        return cls.from_vector(np.column_stack([lo, hi]).reshape(-1))

    def vector(self) -> np.ndarray:
        return np.array(
            [self.xmin, self.xmax, self.ymin, self.ymax, self.zmin, self.zmax],
            dtype=float,
        )

    def min_point(self) -> np.ndarray:
        return np.array([self.xmin, self.ymin, self.zmin], dtype=float)

    def max_point(self) -> np.ndarray:
        return np.array([self.xmax, self.ymax, self.zmax], dtype=float)

    def center(self) -> np.ndarray:
        return 0.5 * (self.min_point() + self.max_point())

    def width(self) -> float:
        return self.xmax - self.xmin

    def height(self) -> float:
        return self.ymax - self.ymin

    def depth(self) -> float:
        return self.zmax - self.zmin

    def volume(self) -> float:
        return self.width() * self.height() * self.depth()

    def contains(self, point) -> bool:
        """Boundary inclusive."""
        p = np.asarray(point, dtype=float).reshape(3)
        return bool(np.all(p >= self.min_point()) and np.all(p <= self.max_point()))

    def intersects(self, other: "AlignedBox3") -> bool:
        return bool(
            np.all(self.min_point() <= other.max_point())
            and np.all(other.min_point() <= self.max_point())
        )

    def iou(self, other: "AlignedBox3") -> float:
        """Volumetric intersection over union; 0.0 if the boxes do not overlap."""
        lo = np.maximum(self.min_point(), other.min_point())
        hi = np.minimum(self.max_point(), other.max_point())
        extent = np.clip(hi - lo, 0.0, None)
        inter = float(np.prod(extent))
        union = self.volume() + other.volume() - inter
        if union <= 0.0:
            return 0.0
        return inter / union

    def equals(self, other: "AlignedBox3", tol: float = 1e-9) -> bool:
        return bool(np.allclose(self.vector(), other.vector(), rtol=0.0, atol=tol))

    def __str__(self) -> str:
        return (
            f"AlignedBox3(x=[{self.xmin:.6g}, {self.xmax:.6g}], "
            f"y=[{self.ymin:.6g}, {self.ymax:.6g}], "
            f"z=[{self.zmin:.6g}, {self.zmax:.6g}])"
        )
