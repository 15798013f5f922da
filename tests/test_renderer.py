"""Tests for the pygame wheel renderer (headless)."""

import numpy as np
import pygame
import pytest

from fortunewheels.core.layout import LayoutConfig
from fortunewheels.scene import Scene, SceneConfig
from fortunewheels.visualizers.styles import BACKGROUND, RenderConfig, hex_to_rgb, palette_rgb
from fortunewheels.visualizers.wheels import WheelRenderer


@pytest.fixture
def renderer():
    return WheelRenderer()


class TestRenderFrame:
    def test_output_shape(self, renderer):
        scene = Scene(320, 240, seed=0)
        surface = renderer.render_frame(scene)
        frame = renderer.surface_to_array(surface)
        assert frame.shape == (240, 320, 3)
        assert frame.dtype == np.uint8
        assert frame.flags["C_CONTIGUOUS"]

    def test_empty_scene_is_background(self, renderer):
        scene = Scene(160, 120, SceneConfig(layout=LayoutConfig(target_count=0)))
        frame = renderer.surface_to_array(renderer.render_frame(scene))
        assert (frame == np.array(hex_to_rgb(BACKGROUND), dtype=np.uint8)).all()

    def test_wheels_are_drawn(self, renderer):
        scene = Scene(320, 240, seed=0)
        frame = renderer.surface_to_array(renderer.render_frame(scene))
        assert not (frame == np.array(hex_to_rgb(BACKGROUND), dtype=np.uint8)).all()

    def test_dispersal_changes_frame(self, renderer):
        scene = Scene(320, 240, seed=0)
        for _ in range(60):
            scene.tick()
        before = renderer.surface_to_array(renderer.render_frame(scene))
        scene.trigger(scene.wheels[0].center)
        scene.tick()
        after = renderer.surface_to_array(renderer.render_frame(scene))
        assert not np.array_equal(before, after)

    def test_reuses_target_surface(self, renderer):
        scene = Scene(200, 150, seed=0)
        target = pygame.Surface((200, 150))
        assert renderer.render_frame(scene, target) is target


class TestStyles:
    def test_hex_to_rgb(self):
        assert hex_to_rgb("#2A363B") == (42, 54, 59)
        with pytest.raises(ValueError):
            hex_to_rgb("#FFF")

    def test_palette_wraps_around(self):
        assert palette_rgb(6) == palette_rgb(0)
        assert len(palette_rgb(1)) == 5

    def test_render_config_validation(self):
        with pytest.raises(ValueError):
            RenderConfig(palettes=[["#000000"]])
        with pytest.raises(ValueError):
            RenderConfig(palettes=[])
        with pytest.raises(ValueError):
            RenderConfig(background="blue")
        with pytest.raises(ValueError):
            RenderConfig(stem_segments=0)
