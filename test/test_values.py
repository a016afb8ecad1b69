"""
Tests for the Values variable store and the manifold contract.
"""

import logging

import numpy as np
import pytest

from quadric_slam.backend import manifold
from quadric_slam.backend.structures import Values, symbol, symbol_chr, symbol_index
from quadric_slam.common import constants
from quadric_slam.common.geometry import Pose3
from quadric_slam.common.numerical import numerical_derivative
from quadric_slam.config import QuadricConfig
from quadric_slam.geometry import ConstrainedQuadric


class TestSymbol:

    def test_pack_unpack(self):
        key = symbol("q", 42)
        assert symbol_chr(key) == "q"
        assert symbol_index(key) == 42

    def test_distinct_keys(self):
        assert symbol("q", 1) != symbol("x", 1)
        assert symbol("q", 1) != symbol("q", 2)

    @pytest.mark.parametrize("c,index", [("qq", 0), ("q", -1), ("q", 1 << 56)])
    def test_rejects_out_of_range(self, c, index):
        with pytest.raises(ValueError):
            symbol(c, index)


class TestValues:

    def test_put_is_last_write_wins(self, sample_quadric):
        values = Values()
        key = symbol("q", 0)
        values.put(key, ConstrainedQuadric())
        values.put(key, sample_quadric)
        assert len(values) == 1
        assert values.get(key) is sample_quadric

    def test_insert_update_erase(self, sample_quadric):
        values = Values()
        values.insert("a", sample_quadric)
        with pytest.raises(KeyError):
            values.insert("a", sample_quadric)
        with pytest.raises(KeyError):
            values.update("b", sample_quadric)
        values.update("a", ConstrainedQuadric())
        assert values.get("a").equals(ConstrainedQuadric())
        values.erase("a")
        assert not values.exists("a")
        with pytest.raises(KeyError):
            values.erase("a")

    def test_get_missing_raises(self):
        with pytest.raises(KeyError):
            Values().get(symbol("q", 7))

    def test_at_checks_type(self, sample_quadric):
        values = Values({"q": sample_quadric})
        assert values.at("q", ConstrainedQuadric) is sample_quadric
        with pytest.raises(TypeError):
            values.at("q", Pose3)

    def test_iteration_and_keys(self):
        values = Values({"a": np.zeros(2), "b": Pose3()})
        assert sorted(values) == ["a", "b"]
        assert "a" in values
        assert sorted(values.keys()) == ["a", "b"]

    def test_dim(self, sample_quadric):
        values = Values({"q": sample_quadric, "x": Pose3(), "l": np.zeros(2)})
        assert values.dim() == 9 + 6 + 2

    def test_retract_applies_per_key(self, sample_quadric):
        values = Values({"q": sample_quadric, "x": Pose3(), "l": np.zeros(2)})
        dq = np.array([0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.1, 0.1, 0.1])
        out = values.retract({"q": dq, "l": np.array([1.0, 2.0])})
        assert np.allclose(out.get("q").radii, sample_quadric.radii + 0.1)
        assert np.allclose(out.get("l"), [1.0, 2.0])
        assert out.get("x") is values.get("x")
        # original untouched
        assert values.get("q") is sample_quadric

    def test_retract_non_positive_radius_rejected_by_default(self):
        values = Values({"q": ConstrainedQuadric()})
        dq = np.zeros(9)
        dq[6] = -2.0
        with pytest.raises(ValueError):
            values.retract({"q": dq})

    def test_retract_clamps_radii_under_config(self, caplog):
        values = Values({"q": ConstrainedQuadric(), "x": Pose3()})
        dq = np.zeros(9)
        dq[6] = -2.0
        config = QuadricConfig(retract_radii_policy=constants.RETRACT_POLICY_CLAMP)
        with caplog.at_level(logging.WARNING, logger="quadric_slam.geometry.constrained_quadric"):
            out = values.retract({"q": dq, "x": np.zeros(6)}, config)
        assert np.allclose(out.get("q").radii, [config.radius_floor, 1.0, 1.0])
        assert out.get("x").equals(Pose3())
        assert "clamping" in caplog.text

    def test_retract_unknown_key_raises(self):
        with pytest.raises(KeyError):
            Values().retract({"q": np.zeros(9)})

    def test_local_coordinates(self, sample_quadric, small_tangent):
        values = Values({"q": sample_quadric})
        moved = values.retract({"q": small_tangent})
        deltas = values.local_coordinates(moved)
        assert np.allclose(deltas["q"], small_tangent, atol=1e-6)

    def test_local_coordinates_requires_same_keys(self, sample_quadric):
        with pytest.raises(KeyError):
            Values({"q": sample_quadric}).local_coordinates(Values())

    def test_str_uses_symbol_names(self, sample_quadric):
        values = Values({symbol("q", 3): sample_quadric})
        assert "q3:" in str(values)


class TestManifoldContract:

    def test_dimensions(self, sample_quadric):
        assert manifold.dimension(sample_quadric) == 9
        assert manifold.dimension(Pose3()) == 6
        assert manifold.dimension(np.zeros(4)) == 4

    def test_unregistered_type(self):
        with pytest.raises(TypeError):
            manifold.dimension("not a manifold")
        with pytest.raises(TypeError):
            manifold.retract(3.0, np.zeros(1))

    def test_mixed_types_rejected(self, sample_quadric):
        with pytest.raises(TypeError):
            manifold.local_coordinates(sample_quadric, Pose3())

    def test_laws_hold(self, sample_quadric, small_tangent, random_pose):
        assert manifold.check_manifold_laws(sample_quadric, small_tangent)
        assert manifold.check_manifold_laws(random_pose, small_tangent[:6])
        assert manifold.check_manifold_laws(np.ones(3), small_tangent[:3])

    def test_laws_reject_wrong_dimension(self, sample_quadric):
        with pytest.raises(ValueError):
            manifold.check_manifold_laws(sample_quadric, np.zeros(6))

    def test_retract_dispatch_matches_method(self, sample_quadric, small_tangent):
        assert manifold.retract(sample_quadric, small_tangent).equals(
            sample_quadric.retract(small_tangent), 0.0
        )

    def test_retract_dispatch_forwards_config(self):
        dq = np.zeros(9)
        dq[7] = -5.0
        config = QuadricConfig(retract_radii_policy=constants.RETRACT_POLICY_CLAMP)
        q = manifold.retract(ConstrainedQuadric(), dq, config)
        assert np.allclose(q.radii, [1.0, config.radius_floor, 1.0])
        # config is ignored by non-quadric types
        assert manifold.retract(Pose3(), np.zeros(6), config).equals(Pose3())
        assert np.allclose(manifold.retract(np.ones(2), np.ones(2), config), 2.0)

    def test_numerical_derivative_on_vectors(self):
        x = np.array([1.0, -2.0, 3.0])
        H = numerical_derivative(lambda y: y ** 2, x)
        assert np.allclose(H, np.diag(2.0 * x), atol=1e-8)
