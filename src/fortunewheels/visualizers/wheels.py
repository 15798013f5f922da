"""
Wheel composition renderer.

Draws a Scene onto a pygame Surface, back to front:
- Connectors: line, chain links, central blob with radiating dots.
- Wheels: base disc, outer dots and spokes (hidden while dispersed and
  faded in afterwards), inner circles, dot ring and a curved stem.
- Particles: spokes as rotated strokes and dots as discs on an alpha layer.
"""

import math

import numpy as np
import pygame

from fortunewheels.core.layout import Connector, Wheel
from fortunewheels.core.particles import Particle, ParticleKind
from fortunewheels.scene import Scene
from fortunewheels.visualizers.styles import (
    BASE,
    CENTER,
    INNER_CIRCLE,
    LINK_COLOR,
    OUTER_DOTS,
    SPOKES,
    RenderConfig,
    hex_to_rgb,
    palette_rgb,
)


def _mix(a: tuple[int, int, int], b: tuple[int, int, int], t: float) -> tuple[int, int, int]:
    t = min(max(t, 0.0), 1.0)
    return (
        int(a[0] + (b[0] - a[0]) * t),
        int(a[1] + (b[1] - a[1]) * t),
        int(a[2] + (b[2] - a[2]) * t),
    )


def _ring(cx: float, cy: float, radius: float, count: int) -> list[tuple[float, float]]:
    return [
        (cx + math.cos(2 * math.pi * i / count) * radius, cy + math.sin(2 * math.pi * i / count) * radius)
        for i in range(count)
    ]


class WheelRenderer:
    """Renders scenes; holds no artwork state of its own."""

    def __init__(self, config: RenderConfig | None = None):
        self.config = config or RenderConfig()
        self.background = hex_to_rgb(self.config.background)
        self._overlay: pygame.Surface | None = None

    def _colors(self, group_id: int) -> list[tuple[int, int, int]]:
        return palette_rgb(group_id, self.config.palettes)

    def _draw_connector(self, surface: pygame.Surface, conn: Connector):
        cfg = self.config
        color = self._colors(conn.color_group_id)[BASE]
        pygame.draw.line(surface, color, conn.start, conn.end, cfg.connector_width)

        num_links = int(conn.length // (cfg.link_size * 1.5))
        if num_links > 0:
            link_r = max(1, int(cfg.link_size / 2))
            for i in range(num_links + 1):
                t = i / num_links
                pos = (
                    int(conn.start[0] + (conn.end[0] - conn.start[0]) * t),
                    int(conn.start[1] + (conn.end[1] - conn.start[1]) * t),
                )
                pygame.draw.circle(surface, LINK_COLOR, pos, link_r)
                pygame.draw.circle(surface, color, pos, link_r, 1)
                pygame.draw.circle(surface, (0, 0, 0), pos, max(1, int(link_r * 0.4)))

        mid = (int(conn.midpoint[0]), int(conn.midpoint[1]))
        blob_r = int(cfg.blob_size / 2)
        pygame.draw.circle(surface, (255, 255, 255), mid, blob_r)
        pygame.draw.circle(surface, color, mid, blob_r, 3)
        pygame.draw.circle(surface, color, mid, max(1, blob_r // 2))
        for dx, dy in _ring(mid[0], mid[1], cfg.blob_size * 0.75, cfg.blob_dots):
            pygame.draw.circle(surface, LINK_COLOR, (int(dx), int(dy)), 2)

    def _stem_points(self, wheel: Wheel) -> list[tuple[float, float]]:
        """Quadratic curve from near the center outwards."""
        r, a = wheel.current_radius, wheel.stem_angle
        p0 = (math.cos(a) * r * 0.075, math.sin(a) * r * 0.075)
        p2 = (math.cos(a) * r * 0.5, math.sin(a) * r * 0.5)
        c = (math.cos(a + 0.5) * r * 0.4, math.sin(a + 0.5) * r * 0.4)
        points = []
        n = self.config.stem_segments
        for i in range(n + 1):
            t = i / n
            u = 1 - t
            x = u * u * p0[0] + 2 * u * t * c[0] + t * t * p2[0]
            y = u * u * p0[1] + 2 * u * t * c[1] + t * t * p2[1]
            points.append((wheel.x + x, wheel.y + y))
        return points

    def _draw_wheel(self, surface: pygame.Surface, wheel: Wheel, particle_cfg):
        colors = self._colors(wheel.color_group_id)
        cx, cy, r = wheel.x, wheel.y, wheel.current_radius
        center = (int(cx), int(cy))

        pygame.draw.circle(surface, colors[BASE], center, max(1, int(r)))

        if not wheel.dispersed:
            # Fade ornaments in over the base disc
            dot_color = _mix(colors[BASE], colors[OUTER_DOTS], wheel.fade_alpha)
            dot_size = max(1, int(r * particle_cfg.dot_size_ratio / 2))
            for dx, dy in _ring(cx, cy, r * particle_cfg.dot_radius_ratio, particle_cfg.dot_count):
                pygame.draw.circle(surface, dot_color, (int(dx), int(dy)), dot_size)

            spoke_color = _mix(colors[BASE], colors[SPOKES], wheel.fade_alpha)
            width = max(1, int(r * particle_cfg.spoke_size_ratio))
            inner = _ring(cx, cy, r * 0.55, particle_cfg.spoke_count)
            outer = _ring(cx, cy, r * particle_cfg.spoke_radius_ratio, particle_cfg.spoke_count)
            for p1, p2 in zip(inner, outer):
                pygame.draw.line(surface, spoke_color, p1, p2, width)

        pygame.draw.circle(surface, colors[INNER_CIRCLE], center, max(1, int(r * 0.3)))
        inner_dot = max(1, int(r * 0.03))
        for dx, dy in _ring(cx, cy, r * 0.4, self.config.inner_dot_count):
            pygame.draw.circle(surface, colors[SPOKES], (int(dx), int(dy)), inner_dot)
        pygame.draw.circle(surface, colors[CENTER], center, max(1, int(r * 0.15)))
        pygame.draw.circle(surface, colors[BASE], center, max(1, int(r * 0.075)))

        stem = self._stem_points(wheel)
        pygame.draw.lines(surface, colors[OUTER_DOTS], False, stem, max(1, int(r * 0.04)))
        end = stem[-1]
        pygame.draw.circle(surface, colors[OUTER_DOTS], (int(end[0]), int(end[1])), max(1, int(r * 0.04)))

    def _particle_color(self, p: Particle) -> tuple[int, int, int, int]:
        colors = self._colors(p.color_group_id)
        rgb = colors[SPOKES] if p.kind == ParticleKind.SPOKE else colors[OUTER_DOTS]
        alpha = int(min(max(p.alpha, 0.0), 255.0))
        return (*rgb, alpha)

    def _draw_particle(self, overlay: pygame.Surface, p: Particle):
        color = self._particle_color(p)
        if color[3] <= 0:
            return
        if p.kind == ParticleKind.SPOKE:
            end = (p.x + math.cos(p.rotation) * p.size, p.y + math.sin(p.rotation) * p.size)
            pygame.draw.line(overlay, color, (p.x, p.y), end, max(1, int(p.size * 0.3)))
        else:
            pygame.draw.circle(overlay, color, (int(p.x), int(p.y)), max(1, int(p.size / 2)))

    def _get_overlay(self, size: tuple[int, int]) -> pygame.Surface:
        if self._overlay is None or self._overlay.get_size() != size:
            self._overlay = pygame.Surface(size, pygame.SRCALPHA)
        self._overlay.fill((0, 0, 0, 0))
        return self._overlay

    def render_frame(self, scene: Scene, surface: pygame.Surface | None = None) -> pygame.Surface:
        """
        Draw the scene.

        Args:
            scene: Scene to draw.
            surface: Target surface; a new one matching the scene size if None.

        Returns:
            The surface drawn on.
        """
        if surface is None:
            surface = pygame.Surface((scene.width, scene.height))
        surface.fill(self.background)

        for conn in scene.connectors:
            self._draw_connector(surface, conn)
        for wheel in scene.wheels:
            self._draw_wheel(surface, wheel, scene.cfg.particles)

        particles = scene.particles
        if particles:
            overlay = self._get_overlay(surface.get_size())
            for p in particles:
                self._draw_particle(overlay, p)
            surface.blit(overlay, (0, 0))

        return surface

    def surface_to_array(self, surface: pygame.Surface) -> np.ndarray:
        """Convert pygame surface to a (H, W, 3) uint8 array."""
        # pygame is (width, height), numpy wants (height, width)
        arr = pygame.surfarray.array3d(surface)
        return np.ascontiguousarray(np.transpose(arr, (1, 0, 2)))
