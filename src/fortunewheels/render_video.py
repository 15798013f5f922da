"""
Offline MP4 export.

Analyzes a track, runs the scene headless one tick per video frame and
pipes the rendered frames to ffmpeg.
"""

import sys
from pathlib import Path
from typing import Callable, Iterator

import numpy as np

from fortunewheels.core.spectrum import SpectrumAnalyzer, SpectrumFrames
from fortunewheels.io.encoder import encode_video
from fortunewheels.scene import Scene, SceneConfig
from fortunewheels.visualizers.wheels import WheelRenderer


def _progress_bar(current: int, total: int, width: int = 35):
    """Print a progress bar to stdout."""
    pct = current / max(total, 1) * 100
    filled = int(width * current / max(total, 1))
    bar = "#" * filled + "-" * (width - filled)
    if sys.stdout.isatty():
        sys.stdout.write(f"\r[{bar}] {pct:5.1f}%  frame {current}/{total}")
        sys.stdout.flush()
        if current >= total:
            sys.stdout.write("\n")
    elif current % max(1, total // 20) == 0 or current >= total:
        print(f"{pct:5.1f}%  frame {current}/{total}", flush=True)


def render_frames(
    scene: Scene,
    renderer: WheelRenderer,
    spectra: SpectrumFrames,
    n_frames: int,
) -> Iterator[np.ndarray]:
    """Tick the scene once per frame and yield RGB arrays."""
    surface = None
    for i in range(n_frames):
        scene.tick(spectra.at_frame(i))
        surface = renderer.render_frame(scene, surface)
        yield renderer.surface_to_array(surface)


def render_video(
    audio_path: Path,
    output_path: Path,
    width: int = 1280,
    height: int = 720,
    config: SceneConfig | None = None,
    seed: int | None = None,
    max_duration: float | None = None,
    quality: str = "medium",
    use_cache: bool = True,
    progress_callback: Callable[[int, int], None] | None = _progress_bar,
) -> Path:
    """
    Render the composition reacting to a track.

    Args:
        audio_path: Input audio file.
        output_path: Output MP4 path.
        width: Video width in pixels.
        height: Video height in pixels.
        config: Scene configuration (defaults if None).
        seed: Layout seed.
        max_duration: Limit output to this many seconds.
        quality: Encoder quality preset.
        use_cache: Reuse cached spectrum analysis.
        progress_callback: Optional callback(current, total).

    Returns:
        Path to the written video.
    """
    config = config or SceneConfig()
    fps = config.audio.fps

    analyzer = SpectrumAnalyzer(config.audio)
    spectra = analyzer.analyze_file(audio_path, use_cache=use_cache)

    duration = spectra.duration
    if max_duration is not None:
        duration = min(duration, max_duration)
    n_frames = min(spectra.n_frames, int(duration * fps))

    scene = Scene(width, height, config, seed=seed)
    if scene.last_layout.exhausted:
        print(f"Placed {len(scene.wheels)}/{scene.last_layout.target_count} wheels", flush=True)

    renderer = WheelRenderer(config.render)
    return encode_video(
        render_frames(scene, renderer, spectra, n_frames),
        output_path=output_path,
        width=width,
        height=height,
        fps=fps,
        audio_path=audio_path,
        quality=quality,
        duration=duration,
        total_frames=n_frames,
        progress_callback=progress_callback,
    )
