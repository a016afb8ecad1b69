"""
Quadric landmark constants.

Numerical floors and tolerances are stability choices for double precision;
they bound the computational path, not the model.
"""

# =============================================================================
# Manifold dimensions
# =============================================================================

POSE_DIM = 6  # se(3) twist (vx, vy, vz, wx, wy, wz)
RADII_DIM = 3  # additive radii update
QUADRIC_DIM = POSE_DIM + RADII_DIM  # 9 intrinsic DOF

# Tangent slices (0-based)
QUADRIC_SLICE_POSE_START = 0
QUADRIC_SLICE_POSE_END = 6
QUADRIC_SLICE_RADII_START = 6
QUADRIC_SLICE_RADII_END = 9

# =============================================================================
# Ellipsoid constraint
# =============================================================================

# Minimum radius produced by the constraining projection (eigenvalue floor is
# its square). Radii equal to this value mark a projected (non-ellipsoidal) input.
QUADRIC_RADIUS_FLOOR = 1e-6

# Smallest |Q[3,3]| used as the homogeneous normalizer.
QUADRIC_HOMOGENEOUS_EPS = 1e-12

# =============================================================================
# Queries
# =============================================================================

# Slack on the unit level set so surface points survive frame round-off.
QUADRIC_CONTAINS_TOL = 1e-9

# Default tolerance for equals()
QUADRIC_EQUALS_TOL = 1e-9

# =============================================================================
# Retraction radii policy
# =============================================================================

RETRACT_POLICY_REJECT = "reject"
RETRACT_POLICY_CLAMP = "clamp"
RETRACT_POLICIES = (RETRACT_POLICY_REJECT, RETRACT_POLICY_CLAMP)
