"""
The scene aggregate.

Owns all mutable artwork state (wheels, connectors, particles, history)
and exposes the only ways to change it: tick, trigger, restore, resize.
"""

import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Sequence, Union

from fortunewheels.core.interaction import (
    HistoryEntry,
    HistoryStack,
    InteractionConfig,
    InteractionController,
)
from fortunewheels.core.layout import Connector, LayoutConfig, LayoutGenerator, LayoutResult, Wheel
from fortunewheels.core.particles import Particle, ParticleConfig, ParticleSystem
from fortunewheels.core.scaler import AudioReactiveScaler
from fortunewheels.core.spectrum import AudioConfig
from fortunewheels.visualizers.styles import RenderConfig

logger = logging.getLogger(__name__)


def _build_section(cls, values: dict[str, Any]):
    known = {f.name for f in fields(cls)}
    unknown = set(values) - known
    if unknown:
        raise ValueError(f"Unknown {cls.__name__} keys: {sorted(unknown)}")
    # JSON has no tuples
    coerced = {k: tuple(v) if isinstance(v, list) and k.endswith("_range") else v
               for k, v in values.items()}
    return cls(**coerced)


@dataclass
class SceneConfig:
    """Complete configuration, one section per component."""
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    particles: ParticleConfig = field(default_factory=ParticleConfig)
    interaction: InteractionConfig = field(default_factory=InteractionConfig)
    audio: AudioConfig = field(default_factory=AudioConfig)
    render: RenderConfig = field(default_factory=RenderConfig)

    SECTIONS = {
        "layout": LayoutConfig,
        "particles": ParticleConfig,
        "interaction": InteractionConfig,
        "audio": AudioConfig,
        "render": RenderConfig,
    }

    def __post_init__(self):
        self.validate()

    def validate(self):
        """Cross-section checks; sections validate themselves."""
        if self.layout.num_color_groups > len(self.render.palettes):
            raise ValueError(
                f"num_color_groups ({self.layout.num_color_groups}) exceeds "
                f"the {len(self.render.palettes)} configured palettes"
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SceneConfig":
        unknown = set(data) - set(cls.SECTIONS)
        if unknown:
            raise ValueError(f"Unknown config sections: {sorted(unknown)}")
        sections = {
            name: _build_section(section_cls, data.get(name) or {})
            for name, section_cls in cls.SECTIONS.items()
        }
        return cls(**sections)


def load_config(path: Union[str, Path]) -> SceneConfig:
    """Read a JSON config file."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Config root must be an object: {path}")
    return SceneConfig.from_dict(data)


class Scene:
    """
    One live composition.

    Input commands (trigger, restore, resize) run between ticks and take
    effect completely before the next tick.
    """

    def __init__(
        self,
        width: int,
        height: int,
        config: SceneConfig | None = None,
        seed: int | None = None,
    ):
        self.cfg = config or SceneConfig()
        self.cfg.validate()
        self.layout = LayoutGenerator(self.cfg.layout, seed=seed)
        self._particles = ParticleSystem(
            self.cfg.particles, seed=None if seed is None else seed + 1
        )
        self._history = HistoryStack()
        self.scaler = AudioReactiveScaler()
        self.controller = InteractionController(
            self._particles, self._history, self.layout, self.cfg.interaction
        )
        self.frame = 0

        _check_size(width, height)
        self._apply_layout(self.layout.generate(width, height))

    def _apply_layout(self, result: LayoutResult):
        self.width = result.width
        self.height = result.height
        self._wheels: list[Wheel] = result.wheels
        self._connectors: list[Connector] = result.connectors
        self.last_layout = result

    @property
    def wheels(self) -> tuple[Wheel, ...]:
        return tuple(self._wheels)

    @property
    def connectors(self) -> tuple[Connector, ...]:
        return tuple(self._connectors)

    @property
    def particles(self) -> tuple[Particle, ...]:
        return tuple(self._particles)

    @property
    def history(self) -> tuple[HistoryEntry, ...]:
        return tuple(self._history)

    def wheel(self, wheel_id: int) -> Wheel:
        return self._wheels[wheel_id]

    def tick(self, spectrum: Sequence[float] | None = None):
        """Advance everything by one frame."""
        self.scaler.apply(self._wheels, spectrum)
        self._particles.update()
        for wheel in self._wheels:
            self.controller.on_fade_tick(wheel)
        self.frame += 1

    def trigger(self, point: tuple[float, float]) -> HistoryEntry | None:
        return self.controller.trigger(self._wheels, point)

    def restore(self) -> HistoryEntry | None:
        return self.controller.restore(self._wheels)

    def resize(self, width: int, height: int) -> LayoutResult:
        _check_size(width, height)
        result = self.controller.on_resize(width, height)
        self._apply_layout(result)
        logger.debug("Resized to %dx%d: %d wheels", width, height, len(result.wheels))
        return result


def _check_size(width: int, height: int):
    if int(width) != width or int(height) != height or width <= 0 or height <= 0:
        raise ValueError(f"Canvas size must be positive integers, got {width}x{height}")
