import numpy as np
import pytest

from quadric_slam.common.geometry import Pose3
from quadric_slam.geometry import ConstrainedQuadric


# =============================================================================
# Test Utility Fixtures
# =============================================================================

@pytest.fixture
def rng():
    """Seeded generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def identity_pose():
    """Identity SE(3) pose."""
    return Pose3()


@pytest.fixture
def random_pose():
    """A fixed, generic SE(3) pose (non-trivial rotation and translation)."""
    return Pose3.from_rotvec([0.3, -0.2, 0.5], [1.0, -2.0, 0.5])


@pytest.fixture
def sample_quadric(random_pose):
    """Ellipsoid with distinct ascending radii at a generic pose."""
    return ConstrainedQuadric(random_pose, np.array([0.5, 1.0, 2.0]))


@pytest.fixture
def small_tangent(rng):
    """9D tangent with every entry below 0.1 in magnitude."""
    return rng.uniform(-0.09, 0.09, size=9)


@pytest.fixture
def yaml_config_path(tmp_path):
    """Write a quadric config YAML and return its path."""
    def _write(text: str) -> str:
        path = tmp_path / "quadric.yaml"
        path.write_text(text)
        return str(path)
    return _write
