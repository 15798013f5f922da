"""Layout, audio scaling, particles and interaction for the wheel artwork."""

from fortunewheels.core.interaction import (
    HistoryEntry,
    HistoryStack,
    InteractionConfig,
    InteractionController,
)
from fortunewheels.core.layout import Connector, LayoutConfig, LayoutGenerator, LayoutResult, Wheel
from fortunewheels.core.particles import (
    Particle,
    ParticleConfig,
    ParticleKind,
    ParticleState,
    ParticleSystem,
)
from fortunewheels.core.scaler import AudioReactiveScaler
