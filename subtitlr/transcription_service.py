"""Speech-to-subtitle transcription using the OpenAI Whisper API."""

import logging
import os
from typing import Optional

import httpx
from openai import APIConnectionError, APIStatusError, OpenAI

from subtitlr.errors import TranscriptionError

logger = logging.getLogger(__name__)

RESPONSE_FORMAT = "srt"


class WhisperClient:
    """Uploads audio files and returns subtitles in SRT format."""

    def __init__(
        self,
        api_key: str,
        model: str = "whisper-1",
        timeout: float = 300.0,
        http_client: Optional[httpx.Client] = None,
        base_url: Optional[str] = None,
    ):
        if not api_key:
            raise TranscriptionError("OpenAI API key is missing")

        self.model = model
        self.client = OpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
            http_client=http_client,
        )

    def transcribe(self, audio_path: str, language: str) -> bytes:
        """
        Transcribe an audio file.

        Args:
            audio_path: Path to the audio file
            language: Spoken language (ISO 639-1)

        Returns:
            Raw SRT response body
        """
        logger.info(f"Transcribing audio using OpenAI Whisper API: {audio_path}")

        try:
            with open(audio_path, "rb") as audio_file:
                response = self.client.audio.transcriptions.with_raw_response.create(
                    model=self.model,
                    file=(os.path.basename(audio_path), audio_file),
                    response_format=RESPONSE_FORMAT,
                    language=language,
                )
        except APIStatusError as e:
            raise TranscriptionError(
                f"Request failed with status: {e.status_code}", status_code=e.status_code
            ) from e
        except APIConnectionError as e:
            raise TranscriptionError(f"Could not reach the transcription API: {e}") from e
        except OSError as e:
            raise TranscriptionError(f"Could not read audio file {audio_path}: {e}") from e

        return response.http_response.content


def transcribe_to_file(client: WhisperClient, audio_path: str, language: str, output: str) -> str:
    """Transcribe `audio_path` and write the subtitles verbatim to `output`."""
    content = client.transcribe(audio_path, language)

    try:
        output_dir = os.path.dirname(output)
        if output_dir:
            os.makedirs(output_dir, exist_ok=True)
        with open(output, "wb") as f:
            f.write(content)
    except OSError as e:
        raise TranscriptionError(f"Could not write {output}: {e}") from e

    logger.info(f"Subtitles saved to: {output}")
    return output
