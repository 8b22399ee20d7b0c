"""YouTube audio stream retrieval using yt-dlp."""

import logging
import os
import re
from typing import Optional

from yt_dlp import YoutubeDL
from yt_dlp.utils import DownloadError

from subtitlr.errors import RetrievalError

logger = logging.getLogger(__name__)

VIDEO_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{11}$")


def extract_video_id(value: str) -> Optional[str]:
    """Extract video ID from a YouTube URL or a bare ID."""
    value = value.strip()
    if VIDEO_ID_PATTERN.match(value):
        return value

    patterns = [
        r"(?:youtube\.com/watch\?(?:.*&)?v=|youtu\.be/|youtube\.com/embed/|youtube\.com/v/)([^&\?/]+)",
        r"youtube\.com/shorts/([^&\?/]+)",
    ]
    for pattern in patterns:
        match = re.search(pattern, value)
        if match and VIDEO_ID_PATTERN.match(match.group(1)):
            return match.group(1)
    return None


def select_audio_format(formats: list[dict]) -> Optional[dict]:
    """Return the first format that carries an audio track."""
    for fmt in formats:
        if fmt.get("audio_channels") or fmt.get("acodec") not in (None, "none"):
            return fmt
    return None


def download_video(video_id: str, output_dir: str) -> str:
    """
    Download the first audio-bearing stream of a YouTube video.

    Args:
        video_id: YouTube video ID or URL
        output_dir: Directory for the downloaded container (created if absent)

    Returns:
        Path to the downloaded container file

    Raises:
        RetrievalError: bad identifier, no audio stream, or download failure
    """
    parsed_id = extract_video_id(video_id)
    if not parsed_id:
        raise RetrievalError(f"Invalid YouTube video ID: {video_id!r}")

    url = f"https://www.youtube.com/watch?v={parsed_id}"
    os.makedirs(output_dir, exist_ok=True)

    base_opts = {
        "quiet": True,
        "no_warnings": True,
        "noprogress": True,
    }

    logger.info(f"Fetching stream list for {url}")
    try:
        with YoutubeDL(base_opts) as ydl:
            info = ydl.extract_info(url, download=False)
    except DownloadError as e:
        raise RetrievalError(f"Could not retrieve video {parsed_id}: {e}") from e

    fmt = select_audio_format(info.get("formats") or [])
    if fmt is None:
        raise RetrievalError(f"Video {parsed_id} has no audio stream")

    ext = fmt.get("ext") or "mp4"
    output_path = os.path.join(output_dir, f"source.{ext}")
    ydl_opts = {
        **base_opts,
        "format": fmt["format_id"],
        "outtmpl": os.path.join(output_dir, "source.%(ext)s"),
    }

    logger.info(f"Downloading format {fmt['format_id']} ({ext}) of {parsed_id}")
    try:
        with YoutubeDL(ydl_opts) as ydl:
            ydl.download([url])
    except DownloadError as e:
        raise RetrievalError(f"Download of video {parsed_id} failed: {e}") from e

    if not os.path.exists(output_path) or os.path.getsize(output_path) == 0:
        raise RetrievalError(f"Download of video {parsed_id} produced no data")

    logger.info(f"Downloaded video to: {output_path}")
    return output_path
