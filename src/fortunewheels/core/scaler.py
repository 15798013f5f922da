"""
Amplitude-to-size mapping for the wheels.

Each wheel listens to one spectrum bin, chosen by spreading the wheels in
placement order evenly across the available bins.
"""

from typing import Sequence

from fortunewheels.core.layout import Wheel


class AudioReactiveScaler:
    """Linear map from a 0-255 amplitude sample to a size multiplier."""

    def __init__(self, min_scale: float = 0.8, max_scale: float = 1.2, max_sample: float = 255.0):
        if min_scale <= 0 or max_scale < min_scale:
            raise ValueError(f"Invalid scale range ({min_scale}, {max_scale})")
        self.min_scale = min_scale
        self.max_scale = max_scale
        self.max_sample = max_sample
        self.last_multiplier = 1.0

    def scale(self, sample: float) -> float:
        s = min(max(float(sample), 0.0), self.max_sample)
        multiplier = self.min_scale + (s / self.max_sample) * (self.max_scale - self.min_scale)
        self.last_multiplier = multiplier
        return multiplier

    @staticmethod
    def bin_index(index: int, n_wheels: int, n_bins: int) -> int:
        """Spectrum bin for the wheel at `index` in placement order."""
        return min(n_bins - 1, (index * n_bins) // n_wheels)

    def apply(self, wheels: list[Wheel], spectrum: Sequence[float] | None):
        """Update audio_scale and current_radius of every wheel."""
        if spectrum is None or len(spectrum) == 0 or not wheels:
            return
        n_bins = len(spectrum)
        n_wheels = len(wheels)
        for i, wheel in enumerate(wheels):
            multiplier = self.scale(spectrum[self.bin_index(i, n_wheels, n_bins)])
            wheel.audio_scale = multiplier
            wheel.current_radius = wheel.base_radius * multiplier
