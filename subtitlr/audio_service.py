"""Audio extraction with ffmpeg."""

import logging
import os
import subprocess

from subtitlr.errors import ConversionError

logger = logging.getLogger(__name__)

AUDIO_BITRATE = "64k"


def extract_audio(
    container_path: str,
    ffmpeg_binary: str = "ffmpeg",
    timeout: float = 600.0,
) -> str:
    """
    Convert a video container into a compressed MP3 audio track.

    The video stream is dropped and the audio is encoded at a constant
    64 kbit/s, keeping the source channel layout.

    Args:
        container_path: Path to the downloaded video container
        ffmpeg_binary: ffmpeg executable name or path
        timeout: Seconds before the conversion is aborted

    Returns:
        Path to the MP3 file, next to the container
    """
    output_path = os.path.join(os.path.dirname(container_path), "audio.mp3")

    command = [
        ffmpeg_binary,
        "-y",  # Overwrite output
        "-i", container_path,
        "-f", "mp3",
        "-ab", AUDIO_BITRATE,
        "-vn",  # No video
        output_path,
    ]

    logger.info(f"Converting {container_path} to audio...")
    try:
        subprocess.run(command, capture_output=True, check=True, timeout=timeout)
    except FileNotFoundError as e:
        raise ConversionError(f"{ffmpeg_binary} not found on PATH") from e
    except subprocess.TimeoutExpired as e:
        raise ConversionError(f"{ffmpeg_binary} timed out after {timeout:.0f}s") from e
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or b"").decode("utf-8", errors="replace").strip()
        last_line = stderr.splitlines()[-1] if stderr else "no output"
        raise ConversionError(
            f"{ffmpeg_binary} exited with status {e.returncode}: {last_line}"
        ) from e

    logger.info(f"Audio written to: {output_path}")
    return output_path
