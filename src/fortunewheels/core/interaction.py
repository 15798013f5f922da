"""
Dispersal and restore commands with their undo history.
"""

import logging
import math
from dataclasses import dataclass
from typing import Iterator

from fortunewheels.core.layout import LayoutGenerator, LayoutResult, Wheel
from fortunewheels.core.particles import Particle, ParticleSystem

logger = logging.getLogger(__name__)

RESTORE_MATCH_MODES = ("proximity", "owner")


@dataclass(frozen=True)
class HistoryEntry:
    """Wheels dispersed together by one trigger."""
    wheel_ids: tuple[int, ...]

    def __len__(self) -> int:
        return len(self.wheel_ids)


class HistoryStack:
    """LIFO record of dispersal groups."""

    def __init__(self):
        self._entries: list[HistoryEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(self._entries)

    def push(self, entry: HistoryEntry):
        self._entries.append(entry)

    def pop(self) -> HistoryEntry | None:
        if not self._entries:
            return None
        return self._entries.pop()

    def peek(self) -> HistoryEntry | None:
        return self._entries[-1] if self._entries else None

    def clear(self):
        self._entries.clear()


@dataclass
class InteractionConfig:
    fade_step: float = 5.0 / 255.0
    match_tolerance: float = 10.0
    restore_match: str = "proximity"  # "proximity", "owner"

    def __post_init__(self):
        if self.restore_match not in RESTORE_MATCH_MODES:
            raise ValueError(
                f"restore_match must be one of {RESTORE_MATCH_MODES}, got {self.restore_match!r}"
            )
        if self.fade_step <= 0:
            raise ValueError("fade_step must be positive")


class InteractionController:
    """
    Applies trigger/restore commands to the wheels.

    Holds the particle system and history it mutates; the wheels
    themselves are passed in by the owning scene.
    """

    def __init__(
        self,
        particles: ParticleSystem,
        history: HistoryStack,
        layout: LayoutGenerator,
        config: InteractionConfig | None = None,
    ):
        self.cfg = config or InteractionConfig()
        self.particles = particles
        self.history = history
        self.layout = layout

    def hit_test(self, wheels: list[Wheel], point: tuple[float, float]) -> Wheel | None:
        """Topmost non-dispersed wheel under the point."""
        px, py = point
        for wheel in reversed(wheels):
            if wheel.contains(px, py) and not wheel.dispersed:
                return wheel
        return None

    def trigger(self, wheels: list[Wheel], point: tuple[float, float]) -> HistoryEntry | None:
        """Disperse the wheel under the point and its color group."""
        hit = self.hit_test(wheels, point)
        if hit is None:
            return None

        group = [w for w in wheels if w.color_group_id == hit.color_group_id and not w.dispersed]
        if not group:
            return None

        entry = HistoryEntry(wheel_ids=tuple(w.id for w in group))
        self.history.push(entry)
        for wheel in group:
            wheel.dispersed = True
            wheel.fade_alpha = 0.0
            self.particles.spawn_for_wheel(wheel)

        logger.debug("Dispersed group %d: wheels %s", hit.color_group_id, entry.wheel_ids)
        return entry

    def _home_point(self, wheel: Wheel, p: Particle) -> tuple[float, float]:
        r = wheel.current_radius * self.particles.cfg.radius_ratio(p.kind)
        return (wheel.x + math.cos(p.angle) * r, wheel.y + math.sin(p.angle) * r)

    def _belongs_to(self, wheel: Wheel, p: Particle) -> bool:
        if self.cfg.restore_match == "owner":
            return p.wheel_id == wheel.id
        hx, hy = self._home_point(wheel, p)
        return math.hypot(p.target[0] - hx, p.target[1] - hy) < self.cfg.match_tolerance

    def restore(self, wheels: list[Wheel]) -> HistoryEntry | None:
        """Undo the most recent dispersal."""
        entry = self.history.pop()
        if entry is None:
            return None

        by_id = {w.id: w for w in wheels}
        returning = 0
        for wheel_id in entry.wheel_ids:
            wheel = by_id.get(wheel_id)
            if wheel is None:
                continue
            wheel.dispersed = False
            wheel.fade_alpha = 0.0
            returning += self.particles.begin_return(lambda p, w=wheel: self._belongs_to(w, p))

        logger.debug("Restored wheels %s, %d particles returning", entry.wheel_ids, returning)
        return entry

    def on_fade_tick(self, wheel: Wheel):
        if wheel.dispersed:
            wheel.fade_alpha = 0.0
        else:
            wheel.fade_alpha = min(wheel.fade_alpha + self.cfg.fade_step, 1.0)

    def on_resize(self, width: int, height: int) -> LayoutResult:
        """Hard reset: drop particles and history, then lay out again."""
        self.particles.clear()
        self.history.clear()
        return self.layout.generate(width, height)
