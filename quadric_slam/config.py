"""
Configuration classes for quadric landmark parameters.

Defaults come from `quadric_slam.common.constants`; YAML files overlay them.
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping

from quadric_slam.common import constants


@dataclass
class QuadricConfig:
    """Numerical policy for constraining, querying and retracting quadrics."""
    radius_floor: float = constants.QUADRIC_RADIUS_FLOOR
    homogeneous_epsilon: float = constants.QUADRIC_HOMOGENEOUS_EPS
    contains_tolerance: float = constants.QUADRIC_CONTAINS_TOL
    retract_radii_policy: str = constants.RETRACT_POLICY_REJECT

    def validate(self) -> None:
        """Raises ValueError if any field is out of domain."""
        if not self.radius_floor > 0.0:
            raise ValueError(f"radius_floor must be positive, got {self.radius_floor}")
        if not self.homogeneous_epsilon > 0.0:
            raise ValueError(
                f"homogeneous_epsilon must be positive, got {self.homogeneous_epsilon}"
            )
        if self.contains_tolerance < 0.0:
            raise ValueError(
                f"contains_tolerance must be non-negative, got {self.contains_tolerance}"
            )
        if self.retract_radii_policy not in constants.RETRACT_POLICIES:
            raise ValueError(
                f"retract_radii_policy must be one of {constants.RETRACT_POLICIES}, "
                f"got {self.retract_radii_policy!r}"
            )

    @property
    def eigenvalue_floor(self) -> float:
        """Floor applied to squared radii during the constraining projection."""
        return self.radius_floor * self.radius_floor

    @classmethod
    def from_dict(cls, params: Mapping[str, Any]) -> "QuadricConfig":
        """Create configuration from a flat parameter mapping; unknown keys are rejected."""
        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(params) - set(known))
        if unknown:
            raise ValueError(f"Unknown quadric config keys: {unknown}")

        kwargs: Dict[str, Any] = {}
        for name, value in params.items():
            if name == "retract_radii_policy":
                kwargs[name] = str(value)
            else:
                kwargs[name] = float(value)

        config = cls(**kwargs)
        config.validate()
        return config


DEFAULT_CONFIG = QuadricConfig()


def _load_yaml_file(path: str) -> Dict[str, Any]:
    """Load a YAML config file, handling the ros__parameters wrapper."""
    import yaml
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # ROS2 YAML files wrap parameters in /**:/ros__parameters:
    wrapper = data.get("/**")
    if isinstance(wrapper, dict) and "ros__parameters" in wrapper:
        data = wrapper["ros__parameters"] or {}
    return data


def load_quadric_config(path: str) -> QuadricConfig:
    """
    Load a QuadricConfig from YAML.

    Parameters may sit at the top level or under a `quadric:` section;
    missing keys keep their defaults.
    """
    data = _load_yaml_file(path)
    if isinstance(data, dict) and "quadric" in data:
        data = data["quadric"] or {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping of quadric parameters in {path}")
    return QuadricConfig.from_dict(data)
