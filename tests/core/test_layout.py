"""Tests for wheel packing and connector derivation."""

import logging
import math

import pytest

from fortunewheels.core.layout import LayoutConfig, LayoutGenerator, Wheel


def _dist(a: Wheel, b: Wheel) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


@pytest.fixture
def layout_800x600():
    return LayoutGenerator(seed=7).generate(800, 600, 25)


class TestPlacement:
    def test_reference_canvas_terminates_within_bound(self, layout_800x600):
        assert len(layout_800x600.wheels) <= 25
        assert layout_800x600.attempts <= 5000
        assert layout_800x600.target_count == 25

    def test_radii_within_width_fractions(self, layout_800x600):
        for w in layout_800x600.wheels:
            assert 32.0 <= w.base_radius <= 96.0

    def test_wheels_inside_canvas(self, layout_800x600):
        for w in layout_800x600.wheels:
            assert w.base_radius <= w.x <= 800 - w.base_radius
            assert w.base_radius <= w.y <= 600 - w.base_radius

    def test_overlap_bound_respected(self, layout_800x600):
        wheels = layout_800x600.wheels
        for i, wi in enumerate(wheels):
            for wj in wheels[i + 1:]:
                bound = wi.base_radius + wj.base_radius - min(wi.base_radius, wj.base_radius) * 0.4
                assert _dist(wi, wj) >= bound

    def test_every_later_wheel_has_an_earlier_neighbor(self, layout_800x600):
        wheels = layout_800x600.wheels
        for k in range(1, len(wheels)):
            wk = wheels[k]
            assert any(
                _dist(wk, wj) < 1.5 * (wk.base_radius + wj.base_radius)
                for wj in wheels[:k]
            ), f"wheel {k} has no earlier neighbor"

    def test_ids_follow_placement_order(self, layout_800x600):
        assert [w.id for w in layout_800x600.wheels] == list(range(len(layout_800x600.wheels)))

    def test_consecutive_color_groups_differ(self, layout_800x600):
        wheels = layout_800x600.wheels
        for prev, cur in zip(wheels, wheels[1:]):
            assert prev.color_group_id != cur.color_group_id
        assert all(0 <= w.color_group_id < 6 for w in wheels)

    def test_single_color_group_allowed_to_repeat(self):
        gen = LayoutGenerator(LayoutConfig(num_color_groups=1), seed=1)
        result = gen.generate(800, 600, 10)
        assert {w.color_group_id for w in result.wheels} <= {0}

    def test_new_wheels_start_visible_state(self, layout_800x600):
        for w in layout_800x600.wheels:
            assert not w.dispersed
            assert w.fade_alpha == 0.0
            assert w.current_radius == w.base_radius

    def test_same_seed_same_layout(self):
        a = LayoutGenerator(seed=11).generate(640, 480, 15)
        b = LayoutGenerator(seed=11).generate(640, 480, 15)
        assert [(w.x, w.y, w.base_radius) for w in a.wheels] == [(w.x, w.y, w.base_radius) for w in b.wheels]

    def test_generation_counter(self):
        gen = LayoutGenerator(seed=2)
        assert gen.generate(400, 300).generation == 1
        assert gen.generate(400, 300).generation == 2


class TestExhaustion:
    def test_exhaustion_is_reported_not_raised(self, caplog):
        gen = LayoutGenerator(LayoutConfig(max_attempts=10), seed=3)
        with caplog.at_level(logging.WARNING):
            result = gen.generate(800, 600, 1000)
        assert result.exhausted
        assert result.attempts == 10
        assert len(result.wheels) < 1000
        assert "Could not place all wheels" in caplog.text

    def test_canvas_too_small_for_any_wheel(self):
        gen = LayoutGenerator(LayoutConfig(min_radius=20, max_radius=30, max_attempts=50), seed=4)
        result = gen.generate(10, 10, 5)
        assert result.wheels == []
        assert result.connectors == []
        assert result.exhausted
        assert result.rejections["margin"] == 50

    def test_zero_target(self):
        result = LayoutGenerator(seed=5).generate(800, 600, 0)
        assert result.wheels == []
        assert not result.exhausted

    def test_invalid_canvas_raises(self):
        with pytest.raises(ValueError):
            LayoutGenerator().generate(0, 600)
        with pytest.raises(ValueError):
            LayoutGenerator().generate(800, -1)


class TestConnectors:
    def test_connector_iff_within_reach(self, layout_800x600):
        wheels = layout_800x600.wheels
        expected = {
            (i, j)
            for i in range(len(wheels))
            for j in range(i + 1, len(wheels))
            if _dist(wheels[i], wheels[j]) < 1.3 * (wheels[i].base_radius + wheels[j].base_radius)
        }
        actual = {(c.a, c.b) for c in layout_800x600.connectors}
        assert actual == expected

    def test_no_duplicate_or_self_pairs(self, layout_800x600):
        pairs = [(c.a, c.b) for c in layout_800x600.connectors]
        assert len(pairs) == len(set(pairs))
        assert all(a < b for a, b in pairs)

    def test_endpoints_on_facing_circumferences(self, layout_800x600):
        wheels = layout_800x600.wheels
        for c in layout_800x600.connectors:
            wa, wb = wheels[c.a], wheels[c.b]
            assert math.hypot(c.start[0] - wa.x, c.start[1] - wa.y) == pytest.approx(wa.base_radius)
            assert math.hypot(c.end[0] - wb.x, c.end[1] - wb.y) == pytest.approx(wb.base_radius)

    def test_geometry_frozen(self, layout_800x600):
        if not layout_800x600.connectors:
            pytest.skip("layout produced no connectors")
        conn = layout_800x600.connectors[0]
        layout_800x600.wheels[conn.a].current_radius *= 1.2
        with pytest.raises(AttributeError):
            conn.start = (0.0, 0.0)

    def test_two_touching_wheels_connect(self):
        gen = LayoutGenerator()
        wheels = [
            Wheel(id=0, x=100, y=100, base_radius=50, color_group_id=0),
            Wheel(id=1, x=220, y=100, base_radius=50, color_group_id=1),
            Wheel(id=2, x=600, y=100, base_radius=50, color_group_id=2),
        ]
        connectors = gen.build_connectors(wheels)
        assert [(c.a, c.b) for c in connectors] == [(0, 1)]
        assert connectors[0].midpoint == pytest.approx((160.0, 100.0))
        assert connectors[0].length == pytest.approx(20.0)


class TestWheel:
    def test_radius_must_be_positive(self):
        with pytest.raises(ValueError):
            Wheel(id=0, x=0, y=0, base_radius=0, color_group_id=0)

    def test_contains_uses_current_radius(self):
        w = Wheel(id=0, x=0, y=0, base_radius=10, color_group_id=0)
        assert w.contains(9, 0)
        assert not w.contains(11, 0)
        w.current_radius = 12
        assert w.contains(11, 0)

    def test_config_validation(self):
        with pytest.raises(ValueError):
            LayoutConfig(max_attempts=0)
        with pytest.raises(ValueError):
            LayoutConfig(overlap_allowance=1.5)
        with pytest.raises(ValueError):
            LayoutConfig(min_radius=50, max_radius=10).radius_bounds(800)
