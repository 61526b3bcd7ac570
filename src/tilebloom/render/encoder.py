"""
FFmpeg video encoder.

Raw RGB frames are piped to ffmpeg on stdin and muxed with the source
audio. ffmpeg diagnostics go to an anonymous temporary file so a chatty
encoder can never stall the frame pipe.
"""

import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Callable, Iterable, Optional

import numpy as np

from tilebloom.errors import EncodeError

# Quality presets: (preset, crf, pix_fmt)
QUALITY_PRESETS = {
    "high": ("slow", "18", "yuv444p"),
    "medium": ("medium", "23", "yuv420p"),
    "fast": ("ultrafast", "28", "yuv420p"),
}


def ffmpeg_command(
    audio_path: Path,
    output_path: Path,
    width: int,
    height: int,
    fps: int,
    quality: str = "high",
    duration: Optional[float] = None,
) -> list[str]:
    """Build the ffmpeg argument list for a raw-RGB stdin encode."""
    preset, crf, pix_fmt = QUALITY_PRESETS.get(quality, QUALITY_PRESETS["high"])
    cmd = [
        "ffmpeg", "-y",
        "-nostats", "-loglevel", "error",
        "-f", "rawvideo",
        "-pix_fmt", "rgb24",
        "-s", f"{width}x{height}",
        "-r", str(fps),
        "-i", "pipe:0",
        "-i", str(audio_path),
        "-c:v", "libx264",
        "-preset", preset,
        "-crf", crf,
        "-pix_fmt", pix_fmt,
        "-c:a", "aac",
        "-b:a", "192k",
        "-shortest",
    ]
    if duration is not None:
        cmd += ["-t", f"{duration:.3f}"]
    cmd.append(str(output_path))
    return cmd


def encode_video(
    frames: Iterable[np.ndarray],
    audio_path: Path,
    output_path: Path,
    width: int,
    height: int,
    fps: int = 60,
    quality: str = "high",
    duration: Optional[float] = None,
    total_frames: Optional[int] = None,
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> Path:
    """
    Encode frames to MP4 with audio.

    Args:
        frames: Yields (H, W, 3) uint8 arrays.
        audio_path: Audio to mux in.
        output_path: Output MP4 path.
        width: Frame width.
        height: Frame height.
        fps: Frames per second.
        quality: "high", "medium", or "fast".
        duration: Optional length limit in seconds.
        total_frames: Frame count for progress reporting.
        progress_callback: Optional callback(current_frame, total_frames).

    Returns:
        Path to the output file.

    Raises:
        EncodeError: If ffmpeg is missing or exits with an error.
    """
    if shutil.which("ffmpeg") is None:
        raise EncodeError("ffmpeg not found on PATH")

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    cmd = ffmpeg_command(audio_path, output_path, width, height, fps, quality, duration)
    with tempfile.TemporaryFile() as err_log:
        proc = subprocess.Popen(
            cmd,
            stdin=subprocess.PIPE,
            stdout=subprocess.DEVNULL,
            stderr=err_log,
        )

        count = 0
        try:
            for frame in frames:
                proc.stdin.write(np.ascontiguousarray(frame).tobytes())
                count += 1
                if progress_callback and total_frames:
                    progress_callback(count, total_frames)
        except BrokenPipeError:
            # ffmpeg exited early; its return code carries the reason
            pass
        finally:
            if proc.stdin:
                proc.stdin.close()

        proc.wait()
        err_log.seek(0)
        stderr = err_log.read().decode("utf-8", errors="replace")

    if proc.returncode != 0:
        error_lines = [
            line for line in stderr.split("\n")
            if "error" in line.lower() or "invalid" in line.lower()
        ]
        error_msg = "\n".join(error_lines[-5:]) if error_lines else stderr[-500:]
        raise EncodeError(f"ffmpeg exited with code {proc.returncode}: {error_msg}")

    return output_path
