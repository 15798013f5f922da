"""
Amplitude spectrum extraction.

Produces one fixed-length row of 0-255 magnitudes per video frame, the same
shape of data a browser analyser node returns on each animation frame:
- Magnitudes from a short Blackman-windowed FFT.
- Exponential smoothing over time.
- Decibel scaling mapped linearly onto a byte range.
"""

import hashlib
import json
import shutil
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Union

import librosa
import numpy as np
from scipy import signal as scipy_signal


@dataclass
class AudioConfig:
    """Spectrum analysis parameters."""
    num_bins: int = 128
    smoothing: float = 0.8
    fps: int = 60
    sample_rate: int = 22050
    min_db: float = -100.0
    max_db: float = -30.0

    def __post_init__(self):
        if self.num_bins < 1:
            raise ValueError("num_bins must be >= 1")
        if not 0.0 <= self.smoothing < 1.0:
            raise ValueError("smoothing must be in [0, 1)")
        if self.fps < 1:
            raise ValueError("fps must be >= 1")
        if self.max_db <= self.min_db:
            raise ValueError("max_db must be greater than min_db")


@dataclass
class SpectrumFrames:
    """Per-frame byte spectra for a whole track."""
    frames: np.ndarray  # (n_frames, num_bins) uint8
    fps: int
    duration: float

    @property
    def n_frames(self) -> int:
        return self.frames.shape[0]

    @property
    def num_bins(self) -> int:
        return self.frames.shape[1]

    def silence(self) -> np.ndarray:
        return np.zeros(self.num_bins, dtype=np.uint8)

    def at_frame(self, index: int) -> np.ndarray:
        if self.n_frames == 0:
            return self.silence()
        return self.frames[min(max(index, 0), self.n_frames - 1)]

    def at_time(self, seconds: float) -> np.ndarray:
        return self.at_frame(int(seconds * self.fps))

    @classmethod
    def silent(cls, num_bins: int = 128, fps: int = 60) -> "SpectrumFrames":
        return cls(frames=np.zeros((0, num_bins), dtype=np.uint8), fps=fps, duration=0.0)


class SpectrumAnalyzer:
    """
    Turns audio into frame-aligned byte spectra.

    Results for files are cached on disk keyed by file content and
    analysis settings.
    """

    CACHE_VERSION = "1.0"

    def __init__(self, config: AudioConfig | None = None):
        self.cfg = config or AudioConfig()

    @property
    def n_fft(self) -> int:
        return 2 * self.cfg.num_bins

    def compute_hop_length(self, sr: int) -> int:
        return max(1, int(sr / self.cfg.fps))

    def magnitudes(self, y: np.ndarray, sr: int) -> np.ndarray:
        """Linear magnitudes, shape (num_bins, n_frames)."""
        stft = librosa.stft(
            y,
            n_fft=self.n_fft,
            hop_length=self.compute_hop_length(sr),
            window="blackman",
            center=True,
        )
        return (np.abs(stft) / self.n_fft)[: self.cfg.num_bins]

    def smooth(self, mags: np.ndarray) -> np.ndarray:
        """s[t] = k * s[t-1] + (1 - k) * m[t] along the time axis."""
        k = self.cfg.smoothing
        if k == 0.0 or mags.shape[1] == 0:
            return mags
        return scipy_signal.lfilter([1.0 - k], [1.0, -k], mags, axis=1)

    def to_bytes(self, mags: np.ndarray) -> np.ndarray:
        cfg = self.cfg
        db = 20.0 * np.log10(np.maximum(mags, 1e-12))
        scaled = (db - cfg.min_db) * (255.0 / (cfg.max_db - cfg.min_db))
        return np.clip(scaled, 0, 255).astype(np.uint8)

    def analyze_signal(self, y: np.ndarray, sr: int) -> SpectrumFrames:
        """
        Analyze an in-memory mono signal.

        Args:
            y: Audio samples.
            sr: Sample rate of `y`.

        Returns:
            SpectrumFrames with one row per video frame.
        """
        y = np.asarray(y, dtype=np.float32)
        duration = len(y) / float(sr) if sr else 0.0
        if len(y) == 0:
            return SpectrumFrames.silent(self.cfg.num_bins, self.cfg.fps)

        mags = self.smooth(self.magnitudes(y, sr))
        frames = np.ascontiguousarray(self.to_bytes(mags).T)
        return SpectrumFrames(frames=frames, fps=self.cfg.fps, duration=duration)

    def _get_cache_dir(self) -> Path:
        cache_dir = Path.home() / ".cache" / "fortunewheels" / "spectra"
        cache_dir.mkdir(parents=True, exist_ok=True)
        return cache_dir

    def _calculate_file_hash(self, file_path: Path) -> str:
        sha256_hash = hashlib.sha256()
        with open(file_path, "rb") as f:
            for byte_block in iter(lambda: f.read(4096), b""):
                sha256_hash.update(byte_block)
        return sha256_hash.hexdigest()

    def _get_config_hash(self) -> str:
        config = {"version": self.CACHE_VERSION, **asdict(self.cfg)}
        return hashlib.md5(json.dumps(config, sort_keys=True).encode("utf-8")).hexdigest()

    def _get_cache_path(self, audio_path: Path) -> Path:
        filename = f"spectrum_{self._calculate_file_hash(audio_path)}_{self._get_config_hash()}.npz"
        return self._get_cache_dir() / filename

    def clear_cache(self):
        cache_dir = self._get_cache_dir()
        if cache_dir.exists():
            shutil.rmtree(cache_dir)
            cache_dir.mkdir(parents=True, exist_ok=True)

    def analyze_file(self, audio_path: Union[str, Path], use_cache: bool = True) -> SpectrumFrames:
        """Load an audio file and analyze it, using the cache when possible."""
        audio_path = Path(audio_path)

        if use_cache:
            try:
                cache_path = self._get_cache_path(audio_path)
                if cache_path.exists():
                    with np.load(cache_path) as data:
                        print(f"Loaded spectrum from cache: {cache_path}")
                        return SpectrumFrames(
                            frames=data["frames"],
                            fps=int(data["fps"]),
                            duration=float(data["duration"]),
                        )
            except Exception as e:
                print(f"Failed to load cache: {e}. Re-analyzing.")

        y, sr = librosa.load(audio_path, sr=self.cfg.sample_rate, mono=True)
        result = self.analyze_signal(y, sr)

        if use_cache:
            try:
                np.savez(
                    self._get_cache_path(audio_path),
                    frames=result.frames,
                    fps=result.fps,
                    duration=result.duration,
                )
            except Exception as e:
                print(f"Failed to save cache: {e}")

        return result
