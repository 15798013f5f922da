"""
Constrained-random circle packing for the wheel composition.

Wheels are placed one candidate at a time:
- Radius: uniform between a min/max fraction of the canvas width.
- Overlap: a controlled amount of overlap is allowed (a fraction of the
  smaller radius), anything deeper is rejected.
- Proximity: every wheel after the first must sit near an existing one, so
  the arrangement stays connected.

Connectors are derived afterwards from the final wheel set and frozen.
"""

import logging
import math
from dataclasses import dataclass, field

import numpy as np

logger = logging.getLogger(__name__)


@dataclass
class Wheel:
    """A single circular motif."""
    id: int
    x: float
    y: float
    base_radius: float
    color_group_id: int
    stem_angle: float = 0.0
    current_radius: float = 0.0
    audio_scale: float = 1.0
    dispersed: bool = False
    fade_alpha: float = 0.0

    def __post_init__(self):
        if self.base_radius <= 0:
            raise ValueError(f"Wheel radius must be positive, got {self.base_radius}")
        if self.current_radius <= 0:
            self.current_radius = self.base_radius

    @property
    def center(self) -> tuple[float, float]:
        return (self.x, self.y)

    def contains(self, px: float, py: float) -> bool:
        """True if the point lies inside the wheel at its current size."""
        return math.hypot(px - self.x, py - self.y) < self.current_radius


@dataclass(frozen=True)
class Connector:
    """Decorative link between two wheels, geometry frozen at layout time."""
    a: int
    b: int
    start: tuple[float, float]
    end: tuple[float, float]
    color_group_id: int

    @property
    def midpoint(self) -> tuple[float, float]:
        return ((self.start[0] + self.end[0]) / 2, (self.start[1] + self.end[1]) / 2)

    @property
    def length(self) -> float:
        return math.hypot(self.end[0] - self.start[0], self.end[1] - self.start[1])


@dataclass
class LayoutConfig:
    """Packing parameters."""
    target_count: int = 25
    max_attempts: int = 5000

    # Radius bounds as a fraction of canvas width; absolute values win if set
    min_radius_ratio: float = 0.04
    max_radius_ratio: float = 0.12
    min_radius: float | None = None
    max_radius: float | None = None

    overlap_allowance: float = 0.4  # fraction of the smaller radius
    proximity_factor: float = 1.5
    connect_factor: float = 1.3

    num_color_groups: int = 6

    def __post_init__(self):
        if self.target_count < 0:
            raise ValueError("target_count must be >= 0")
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.num_color_groups < 1:
            raise ValueError("num_color_groups must be >= 1")
        if not 0.0 <= self.overlap_allowance < 1.0:
            raise ValueError("overlap_allowance must be in [0, 1)")

    def radius_bounds(self, width: float) -> tuple[float, float]:
        """Returns (min_radius, max_radius) in pixels for a canvas width."""
        lo = self.min_radius if self.min_radius is not None else width * self.min_radius_ratio
        hi = self.max_radius if self.max_radius is not None else width * self.max_radius_ratio
        if lo <= 0 or hi < lo:
            raise ValueError(f"Invalid radius bounds ({lo}, {hi})")
        return lo, hi


@dataclass
class LayoutResult:
    """Output of one layout generation."""
    wheels: list[Wheel]
    connectors: list[Connector]
    width: int
    height: int
    target_count: int
    attempts: int = 0
    exhausted: bool = False
    generation: int = 0
    rejections: dict[str, int] = field(default_factory=dict)


class LayoutGenerator:
    """
    Produces wheels and connectors for a canvas.

    Randomness comes from a local generator so two generators with the
    same seed produce the same layouts.
    """

    def __init__(self, config: LayoutConfig | None = None, seed: int | None = None):
        self.cfg = config or LayoutConfig()
        self.rng = np.random.default_rng(seed)
        self.generation = 0

    def _pick_color_group(self, previous: int | None) -> int:
        n = self.cfg.num_color_groups
        group = int(self.rng.integers(n))
        if previous is not None and group == previous and n > 1:
            others = [g for g in range(n) if g != previous]
            group = others[int(self.rng.integers(len(others)))]
        return group

    def _check_candidate(self, x: float, y: float, r: float, wheels: list[Wheel]) -> str | None:
        """Returns the name of the violated rule, or None if the candidate fits."""
        cfg = self.cfg
        has_neighbor = not wheels
        for other in wheels:
            d = math.hypot(x - other.x, y - other.y)
            combined = r + other.base_radius
            if d < combined - min(r, other.base_radius) * cfg.overlap_allowance:
                return "overlap"
            if d < combined * cfg.proximity_factor:
                has_neighbor = True
        if not has_neighbor:
            return "proximity"
        return None

    def place_wheels(
        self, width: float, height: float, target_count: int
    ) -> tuple[list[Wheel], int, dict[str, int]]:
        """Run the bounded placement loop. Returns (wheels, attempts, rejections)."""
        cfg = self.cfg
        r_min, r_max = cfg.radius_bounds(width)
        wheels: list[Wheel] = []
        attempts = 0
        rejections = {"margin": 0, "overlap": 0, "proximity": 0}

        while len(wheels) < target_count and attempts < cfg.max_attempts:
            attempts += 1
            r = float(self.rng.uniform(r_min, r_max))
            if 2 * r > width or 2 * r > height:
                rejections["margin"] += 1
                continue
            x = float(self.rng.uniform(r, width - r))
            y = float(self.rng.uniform(r, height - r))

            rule = self._check_candidate(x, y, r, wheels)
            if rule is not None:
                rejections[rule] += 1
                continue

            previous = wheels[-1].color_group_id if wheels else None
            wheels.append(Wheel(
                id=len(wheels),
                x=x,
                y=y,
                base_radius=r,
                color_group_id=self._pick_color_group(previous),
                stem_angle=float(self.rng.uniform(0, 2 * math.pi)),
            ))

        return wheels, attempts, rejections

    def build_connectors(self, wheels: list[Wheel]) -> list[Connector]:
        """Link every unordered pair closer than connect_factor * (r1 + r2)."""
        n = len(wheels)
        if n < 2:
            return []

        centers = np.array([(w.x, w.y) for w in wheels], dtype=np.float64)
        radii = np.array([w.base_radius for w in wheels], dtype=np.float64)
        diff = centers[:, None, :] - centers[None, :, :]
        dist = np.sqrt((diff ** 2).sum(axis=-1))
        reach = (radii[:, None] + radii[None, :]) * self.cfg.connect_factor

        connectors = []
        rows, cols = np.nonzero(np.triu(dist < reach, k=1))
        for i, j in zip(rows.tolist(), cols.tolist()):
            w1, w2 = wheels[i], wheels[j]
            angle = math.atan2(w2.y - w1.y, w2.x - w1.x)
            start = (w1.x + math.cos(angle) * w1.base_radius,
                     w1.y + math.sin(angle) * w1.base_radius)
            end = (w2.x + math.cos(angle + math.pi) * w2.base_radius,
                   w2.y + math.sin(angle + math.pi) * w2.base_radius)
            connectors.append(Connector(
                a=w1.id,
                b=w2.id,
                start=start,
                end=end,
                color_group_id=int(self.rng.integers(self.cfg.num_color_groups)),
            ))
        return connectors

    def generate(self, width: int, height: int, target_count: int | None = None) -> LayoutResult:
        """
        Generate a full layout for the canvas.

        Args:
            width: Canvas width in pixels.
            height: Canvas height in pixels.
            target_count: Wheels to place (defaults to config).

        Returns:
            LayoutResult. When the attempt bound runs out before the target
            is reached, `exhausted` is set and fewer wheels are returned.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Canvas must be positive, got {width}x{height}")
        if target_count is None:
            target_count = self.cfg.target_count
        if target_count < 0:
            raise ValueError("target_count must be >= 0")

        wheels, attempts, rejections = self.place_wheels(width, height, target_count)
        connectors = self.build_connectors(wheels)
        exhausted = len(wheels) < target_count

        self.generation += 1
        if exhausted:
            logger.warning(
                "Could not place all wheels within limits: %d/%d after %d attempts",
                len(wheels), target_count, attempts,
            )
        else:
            logger.debug("Placed %d wheels, %d connectors in %d attempts",
                         len(wheels), len(connectors), attempts)

        return LayoutResult(
            wheels=wheels,
            connectors=connectors,
            width=width,
            height=height,
            target_count=target_count,
            attempts=attempts,
            exhausted=exhausted,
            generation=self.generation,
            rejections=rejections,
        )
