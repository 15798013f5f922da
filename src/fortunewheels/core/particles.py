"""
Dispersal particles.

Every spoke and outer dot of a dispersed wheel becomes a particle:
- Flying: drifts away on its own velocity plus a constant wind, spins,
  fades and shrinks until it disappears.
- Returning: eases back onto the exact point it left, fading out as it
  arrives and settling back to its un-scaled ornament size.

Returning is entered only on request and is never left.
"""

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Iterator

import numpy as np

from fortunewheels.core.layout import Wheel


class ParticleKind(str, Enum):
    SPOKE = "spoke"
    DOT = "dot"


class ParticleState(str, Enum):
    FLYING = "flying"
    RETURNING = "returning"


@dataclass
class Particle:
    """A detached spoke or dot."""
    wheel_id: int
    kind: ParticleKind
    angle: float
    x: float
    y: float
    vx: float
    vy: float
    wind_x: float
    wind_y: float
    rotation: float
    rotation_speed: float
    alpha: float  # 0 to 255
    size: float
    base_size: float
    target: tuple[float, float]
    color_group_id: int = 0
    state: ParticleState = ParticleState.FLYING

    @property
    def distance_to_target(self) -> float:
        return math.hypot(self.x - self.target[0], self.y - self.target[1])


@dataclass
class ParticleConfig:
    """Ornament geometry and per-frame particle dynamics."""
    spoke_count: int = 24
    dot_count: int = 40

    # Ornament placement as a fraction of wheel radius
    spoke_radius_ratio: float = 0.8
    dot_radius_ratio: float = 0.9
    spoke_size_ratio: float = 0.03
    spoke_length_factor: float = 5.0
    dot_size_ratio: float = 0.08

    # Launch
    launch_angle_range: tuple[float, float] = (math.pi * 1.25, math.pi * 1.5)
    launch_speed_range: tuple[float, float] = (1.0, 3.0)
    wind_x_range: tuple[float, float] = (-0.2, -0.05)
    wind_y_range: tuple[float, float] = (0.05, 0.2)
    rotation_speed_range: tuple[float, float] = (-0.05, 0.05)

    # Flying
    fade_per_frame: float = 2.0
    shrink_factor: float = 0.99

    # Returning
    return_speed: float = 0.05
    return_fade: float = 0.1
    return_resize: float = 0.1
    spin_down: float = 0.05
    alpha_snap: float = 0.5
    return_epsilon: float = 1.0

    def __post_init__(self):
        if self.spoke_count < 0 or self.dot_count < 0:
            raise ValueError("Particle counts must be >= 0")
        if not 0.0 < self.shrink_factor < 1.0:
            raise ValueError("shrink_factor must be in (0, 1)")
        for name in ("return_speed", "return_fade", "return_resize", "spin_down"):
            value = getattr(self, name)
            if not 0.0 < value <= 1.0:
                raise ValueError(f"{name} must be in (0, 1], got {value}")

    def radius_ratio(self, kind: ParticleKind) -> float:
        return self.spoke_radius_ratio if kind == ParticleKind.SPOKE else self.dot_radius_ratio


def _lerp(current: float, target: float, factor: float) -> float:
    return current + (target - current) * factor


def advance_flying(p: Particle, cfg: ParticleConfig) -> Particle:
    return replace(
        p,
        x=p.x + p.vx,
        y=p.y + p.vy,
        vx=p.vx + p.wind_x,
        vy=p.vy + p.wind_y,
        rotation=p.rotation + p.rotation_speed,
        alpha=p.alpha - cfg.fade_per_frame,
        size=p.size * cfg.shrink_factor,
    )


def advance_returning(p: Particle, cfg: ParticleConfig) -> Particle:
    alpha = _lerp(p.alpha, 0.0, cfg.return_fade)
    if alpha < cfg.alpha_snap:
        alpha = 0.0
    return replace(
        p,
        x=_lerp(p.x, p.target[0], cfg.return_speed),
        y=_lerp(p.y, p.target[1], cfg.return_speed),
        alpha=alpha,
        size=_lerp(p.size, p.base_size, cfg.return_resize),
        rotation_speed=_lerp(p.rotation_speed, 0.0, cfg.spin_down),
    )


def advance(p: Particle, cfg: ParticleConfig) -> Particle:
    """One frame of the particle state machine."""
    if p.state == ParticleState.RETURNING:
        return advance_returning(p, cfg)
    return advance_flying(p, cfg)


def is_finished(p: Particle, cfg: ParticleConfig) -> bool:
    if p.alpha > 0:
        return False
    if p.state == ParticleState.FLYING:
        return True
    return p.distance_to_target < cfg.return_epsilon


class ParticleSystem:
    """Owns every live particle; advanced once per frame."""

    def __init__(self, config: ParticleConfig | None = None, seed: int | None = None):
        self.cfg = config or ParticleConfig()
        self.rng = np.random.default_rng(seed)
        self.particles: list[Particle] = []

    def __len__(self) -> int:
        return len(self.particles)

    def __iter__(self) -> Iterator[Particle]:
        return iter(self.particles)

    def _launch(self) -> dict:
        cfg = self.cfg
        heading = self.rng.uniform(*cfg.launch_angle_range)
        speed = self.rng.uniform(*cfg.launch_speed_range)
        return {
            "vx": float(math.cos(heading) * speed),
            "vy": float(math.sin(heading) * speed),
            "wind_x": float(self.rng.uniform(*cfg.wind_x_range)),
            "wind_y": float(self.rng.uniform(*cfg.wind_y_range)),
            "rotation_speed": float(self.rng.uniform(*cfg.rotation_speed_range)),
        }

    def _spawn_ring(self, wheel: Wheel, kind: ParticleKind, count: int) -> list[Particle]:
        cfg = self.cfg
        r = wheel.current_radius
        ring_radius = r * cfg.radius_ratio(kind)
        if kind == ParticleKind.SPOKE:
            base_size = r * cfg.spoke_size_ratio
            size = base_size * cfg.spoke_length_factor
        else:
            base_size = size = r * cfg.dot_size_ratio

        spawned = []
        for j in range(count):
            angle = 2 * math.pi * j / count
            tx = wheel.x + math.cos(angle) * ring_radius
            ty = wheel.y + math.sin(angle) * ring_radius
            spawned.append(Particle(
                wheel_id=wheel.id,
                kind=kind,
                angle=angle,
                x=tx,
                y=ty,
                rotation=angle if kind == ParticleKind.SPOKE else 0.0,
                alpha=255.0,
                size=size,
                base_size=base_size,
                target=(tx, ty),
                color_group_id=wheel.color_group_id,
                **self._launch(),
            ))
        return spawned

    def spawn_for_wheel(self, wheel: Wheel) -> list[Particle]:
        """Create the Flying spokes and dots of one wheel."""
        spawned = self._spawn_ring(wheel, ParticleKind.SPOKE, self.cfg.spoke_count)
        spawned += self._spawn_ring(wheel, ParticleKind.DOT, self.cfg.dot_count)
        self.particles.extend(spawned)
        return spawned

    def begin_return(self, predicate: Callable[[Particle], bool]) -> int:
        """Switch matching Flying particles to Returning. Returns how many."""
        switched = 0
        for i, p in enumerate(self.particles):
            if p.state == ParticleState.FLYING and predicate(p):
                self.particles[i] = replace(p, state=ParticleState.RETURNING)
                switched += 1
        return switched

    def update(self):
        """Advance every particle once and drop the finished ones."""
        cfg = self.cfg
        advanced = [advance(p, cfg) for p in self.particles]
        self.particles = [p for p in advanced if not is_finished(p, cfg)]

    def clear(self):
        self.particles = []
