"""
Subtitle generation pipeline.

YouTube video -> audio track -> Whisper transcription -> SRT file, or a
local MP3 file straight to transcription.
"""

import logging
import os
import tempfile
from typing import Optional

from subtitlr.audio_service import extract_audio
from subtitlr.config import Settings, get_settings
from subtitlr.errors import ValidationError
from subtitlr.transcription_service import WhisperClient, transcribe_to_file
from subtitlr.youtube_service import download_video

logger = logging.getLogger(__name__)

SUPPORTED_AUDIO_EXTENSIONS = (".mp3",)


def validate_source(video_id: Optional[str], audio_file: Optional[str]) -> None:
    """Exactly one of video ID and local file must be given."""
    if bool(video_id) == bool(audio_file):
        raise ValidationError("Either a video ID or an audio file must be provided, but not both")


def validate_audio_file(audio_file: str) -> str:
    if not os.path.isfile(audio_file):
        raise ValidationError(f"File not found: {audio_file}")
    if not audio_file.lower().endswith(SUPPORTED_AUDIO_EXTENSIONS):
        raise ValidationError(
            f"Unsupported file type: {audio_file} (expected {', '.join(SUPPORTED_AUDIO_EXTENSIONS)})"
        )
    return audio_file


def generate_subtitles(
    language: str,
    output: str,
    api_key: Optional[str] = None,
    video_id: Optional[str] = None,
    audio_file: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> str:
    """
    Generate an SRT subtitle file from a YouTube video or a local MP3.

    Args:
        language: Spoken language (ISO 639-1)
        output: Output subtitle path
        api_key: OpenAI API key (defaults to the configured one)
        video_id: YouTube video ID or URL
        audio_file: Local MP3 file

    Returns:
        The output path
    """
    settings = settings or get_settings()

    validate_source(video_id, audio_file)
    if audio_file:
        validate_audio_file(audio_file)

    api_key = api_key or settings.openai_api_key
    if not api_key:
        raise ValidationError("OpenAI API key is missing; run 'subtitlr configure' or pass --api-key")

    client = WhisperClient(
        api_key,
        model=settings.transcription_model,
        timeout=settings.transcription_timeout,
    )

    if audio_file:
        return transcribe_to_file(client, audio_file, language, output)

    try:
        temp_dir = tempfile.TemporaryDirectory(prefix="subtitlr-", dir=settings.work_dir or None)
    except OSError as e:
        raise ValidationError(f"Could not create a working directory: {e}") from e

    # Removed on every exit path, including errors and Ctrl-C
    with temp_dir as work_dir:
        logger.info(f"Working directory: {work_dir}")
        container_path = download_video(video_id, work_dir)
        audio_path = extract_audio(
            container_path,
            ffmpeg_binary=settings.ffmpeg_binary,
            timeout=settings.ffmpeg_timeout,
        )
        return transcribe_to_file(client, audio_path, language, output)
