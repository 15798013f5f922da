"""Tests for the scene aggregate and its configuration."""

import json

import numpy as np
import pytest

from fortunewheels.core.layout import LayoutConfig
from fortunewheels.core.particles import ParticleState
from fortunewheels.scene import Scene, SceneConfig, load_config
from fortunewheels.visualizers.styles import PALETTES, RenderConfig


@pytest.fixture
def scene():
    return Scene(800, 600, seed=3)


class TestTick:
    def test_full_spectrum_scales_wheels(self, scene):
        scene.tick(np.full(128, 255, dtype=np.uint8))
        for w in scene.wheels:
            assert w.current_radius == pytest.approx(w.base_radius * 1.2)
        assert scene.frame == 1

    def test_tick_without_audio_keeps_size(self, scene):
        scene.tick()
        assert all(w.current_radius == w.base_radius for w in scene.wheels)

    def test_wheels_fade_in_at_start(self, scene):
        for _ in range(51):
            scene.tick()
        assert all(w.fade_alpha == pytest.approx(1.0) for w in scene.wheels)


class TestTriggerRestore:
    def test_trigger_spawns_for_whole_group(self, scene):
        target = scene.wheels[0]
        entry = scene.trigger(target.center)
        assert target.id in entry.wheel_ids
        group = {w.id for w in scene.wheels if w.color_group_id == target.color_group_id}
        assert set(entry.wheel_ids) == group
        assert len(scene.particles) == 64 * len(group)
        assert scene.history == (entry,)

    def test_flying_particles_gone_after_128_ticks(self, scene):
        scene.trigger(scene.wheels[0].center)
        for _ in range(128):
            scene.tick()
        assert scene.particles == ()
        assert scene.wheels[0].dispersed

    def test_restore_then_fade_back(self, scene):
        wheel = scene.wheels[0]
        scene.trigger(wheel.center)
        scene.tick()
        scene.restore()
        assert not wheel.dispersed
        assert all(p.state == ParticleState.RETURNING for p in scene.particles)
        for _ in range(51):
            scene.tick()
        assert wheel.fade_alpha == pytest.approx(1.0)

    def test_restore_with_empty_history(self, scene):
        assert scene.restore() is None
        assert scene.history == ()

    def test_wheel_lookup(self, scene):
        assert scene.wheel(0) is scene.wheels[0]


class TestResize:
    def test_hard_reset(self, scene):
        scene.trigger(scene.wheels[0].center)
        result = scene.resize(400, 300)
        assert (scene.width, scene.height) == (400, 300)
        assert scene.particles == ()
        assert scene.history == ()
        assert list(scene.wheels) == result.wheels
        assert scene.last_layout is result

    def test_accessors_are_read_only_views(self, scene):
        assert isinstance(scene.wheels, tuple)
        assert isinstance(scene.connectors, tuple)

    @pytest.mark.parametrize("size", [(0, 600), (800, -1), (800.5, 600)])
    def test_invalid_sizes(self, scene, size):
        with pytest.raises(ValueError):
            scene.resize(*size)
        with pytest.raises(ValueError):
            Scene(*size)


class TestSceneConfig:
    def test_defaults(self):
        config = SceneConfig.from_dict({})
        assert config.layout.target_count == 25
        assert config.interaction.restore_match == "proximity"

    def test_ranges_become_tuples(self):
        config = SceneConfig.from_dict({"particles": {"wind_x_range": [-0.3, -0.1]}})
        assert config.particles.wind_x_range == (-0.3, -0.1)

    def test_unknown_section(self):
        with pytest.raises(ValueError, match="sections"):
            SceneConfig.from_dict({"physics": {}})

    def test_unknown_key(self):
        with pytest.raises(ValueError, match="LayoutConfig"):
            SceneConfig.from_dict({"layout": {"wheel_count": 3}})

    def test_invalid_value(self):
        with pytest.raises(ValueError):
            SceneConfig.from_dict({"interaction": {"restore_match": "nearest"}})

    def test_load_config(self, tmp_path):
        path = tmp_path / "wheels.json"
        path.write_text(json.dumps({"layout": {"target_count": 5}, "audio": {"fps": 30}}))
        config = load_config(path)
        assert config.layout.target_count == 5
        assert config.audio.fps == 30

    def test_load_config_rejects_non_object(self, tmp_path):
        path = tmp_path / "wheels.json"
        path.write_text("[1, 2]")
        with pytest.raises(ValueError):
            load_config(path)

    def test_config_drives_scene(self):
        config = SceneConfig(layout=LayoutConfig(target_count=3))
        scene = Scene(800, 600, config, seed=1)
        assert len(scene.wheels) <= 3

    def test_more_color_groups_than_palettes(self):
        with pytest.raises(ValueError, match="palettes"):
            SceneConfig.from_dict({"layout": {"num_color_groups": 7}})
        with pytest.raises(ValueError):
            SceneConfig(layout=LayoutConfig(num_color_groups=2), render=RenderConfig(palettes=[list(PALETTES[0])]))

    def test_scene_rechecks_mutated_config(self):
        config = SceneConfig()
        config.layout = LayoutConfig(num_color_groups=9)
        with pytest.raises(ValueError):
            Scene(800, 600, config)
