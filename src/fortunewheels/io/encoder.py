"""
FFmpeg video encoder.

Raw RGB frames are piped to ffmpeg over stdin and, when a track is given,
muxed with it.
"""

import subprocess
import tempfile
from pathlib import Path
from typing import Callable, Iterable

import numpy as np

# Quality presets: (preset, crf, pix_fmt)
QUALITY_PRESETS = {
    "high": ("slow", "18", "yuv444p"),
    "medium": ("medium", "23", "yuv420p"),
    "fast": ("ultrafast", "28", "yuv420p"),
}


def build_command(
    output_path: Path,
    width: int,
    height: int,
    fps: int,
    audio_path: Path | None = None,
    quality: str = "medium",
    duration: float | None = None,
) -> list[str]:
    """Assemble the ffmpeg argument list."""
    if quality not in QUALITY_PRESETS:
        raise ValueError(f"Unknown quality {quality!r}, expected one of {sorted(QUALITY_PRESETS)}")
    preset, crf, pix_fmt = QUALITY_PRESETS[quality]

    cmd = [
        "ffmpeg", "-y",
        "-nostats", "-loglevel", "error",
        "-f", "rawvideo",
        "-pix_fmt", "rgb24",
        "-s", f"{width}x{height}",
        "-r", str(fps),
        "-i", "pipe:0",
    ]
    if audio_path is not None:
        cmd += ["-i", str(audio_path)]
    cmd += [
        "-c:v", "libx264",
        "-preset", preset,
        "-crf", crf,
        "-pix_fmt", pix_fmt,
    ]
    if audio_path is not None:
        cmd += ["-c:a", "aac", "-b:a", "192k", "-shortest"]
    if duration is not None:
        cmd += ["-t", str(duration)]
    cmd.append(str(output_path))
    return cmd


def encode_video(
    frames: Iterable[np.ndarray],
    output_path: Path,
    width: int,
    height: int,
    fps: int = 60,
    audio_path: Path | None = None,
    quality: str = "medium",
    duration: float | None = None,
    total_frames: int | None = None,
    progress_callback: Callable[[int, int], None] | None = None,
) -> Path:
    """
    Encode frames to MP4.

    Args:
        frames: Yields (height, width, 3) uint8 arrays.
        output_path: Output MP4 path.
        width: Frame width.
        height: Frame height.
        fps: Frames per second.
        audio_path: Optional track to mux in.
        quality: "high", "medium", or "fast".
        duration: Optional duration limit in seconds.
        total_frames: Frame count for progress reporting.
        progress_callback: Optional callback(current_frame, total_frames).

    Returns:
        Path to the output file.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    cmd = build_command(output_path, width, height, fps, audio_path, quality, duration)

    # Not a pipe: nothing reads stderr until ffmpeg exits
    with tempfile.TemporaryFile() as stderr_file:
        proc = subprocess.Popen(
            cmd,
            stdin=subprocess.PIPE,
            stdout=subprocess.DEVNULL,
            stderr=stderr_file,
        )

        frame_count = 0
        try:
            for frame in frames:
                if frame.shape != (height, width, 3):
                    raise ValueError(f"Frame shape {frame.shape} does not match {(height, width, 3)}")
                proc.stdin.write(np.ascontiguousarray(frame, dtype=np.uint8).tobytes())
                frame_count += 1
                if progress_callback and total_frames:
                    progress_callback(frame_count, total_frames)
        except BrokenPipeError:
            pass
        except BaseException:
            proc.kill()
            _close_stdin(proc)
            proc.wait()
            output_path.unlink(missing_ok=True)
            raise

        _close_stdin(proc)
        proc.wait()

        if proc.returncode != 0:
            stderr_file.seek(0)
            stderr = stderr_file.read().decode("utf-8", errors="replace")
            error_lines = [
                line for line in stderr.split("\n")
                if "error" in line.lower() or "invalid" in line.lower()
            ]
            error_msg = "\n".join(error_lines[-5:]) if error_lines else stderr[-500:]
            raise RuntimeError(f"ffmpeg exited with code {proc.returncode}: {error_msg}")

    return output_path


def _close_stdin(proc: subprocess.Popen):
    # Flushing into an ffmpeg that already exited raises BrokenPipeError
    try:
        proc.stdin.close()
    except BrokenPipeError:
        pass
