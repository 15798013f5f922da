"""Pytest configuration and shared fixtures."""

import os

# Headless pygame; must be set before pygame initializes anything
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import numpy as np
import pytest

from fortunewheels.core.layout import Wheel

# Default sample rate for test audio
TEST_SR = 22050


@pytest.fixture
def sample_rate() -> int:
    """Default sample rate for tests."""
    return TEST_SR


@pytest.fixture
def pure_sine(sample_rate: int) -> tuple[np.ndarray, int]:
    """
    Generate a pure 440Hz sine wave (A4 note).

    Returns:
        Tuple of (audio_signal, sample_rate).
    """
    duration = 2.0
    t = np.linspace(0, duration, int(sample_rate * duration), endpoint=False)
    y = 0.5 * np.sin(2 * np.pi * 440.0 * t)
    return y.astype(np.float32), sample_rate


@pytest.fixture
def temp_audio_file(tmp_path, pure_sine):
    """Create a temporary audio file for testing file I/O."""
    import soundfile as sf

    y, sr = pure_sine
    audio_path = tmp_path / "test_audio.wav"
    sf.write(audio_path, y, sr)
    return audio_path


@pytest.fixture
def row_of_wheels() -> list[Wheel]:
    """
    Four hand-placed wheels.

    Wheels 0 and 2 share color group 0; wheel 3 overlaps wheel 0 and is
    drawn on top of it.
    """
    return [
        Wheel(id=0, x=100.0, y=100.0, base_radius=50.0, color_group_id=0),
        Wheel(id=1, x=400.0, y=100.0, base_radius=50.0, color_group_id=1),
        Wheel(id=2, x=700.0, y=100.0, base_radius=50.0, color_group_id=0),
        Wheel(id=3, x=130.0, y=100.0, base_radius=50.0, color_group_id=2),
    ]
