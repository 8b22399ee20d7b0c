import os
from functools import lru_cache

from dotenv import set_key
from pydantic_settings import BaseSettings

DEEPL_FREE_API_URL = "https://api-free.deepl.com/v2"
DEEPL_PRO_API_URL = "https://api.deepl.com/v2"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # OpenAI Configuration (for Whisper API)
    openai_api_key: str = ""
    transcription_model: str = "whisper-1"
    transcription_timeout: float = 300.0

    # DeepL Configuration (document translation)
    deepl_api_key: str = ""
    deepl_api_url: str = ""
    translation_timeout: float = 60.0
    poll_interval: float = 2.0
    poll_max_wait: float = 900.0

    # Audio extraction
    ffmpeg_binary: str = "ffmpeg"
    ffmpeg_timeout: float = 600.0

    # Parent directory for per-run temporary files (empty: system default)
    work_dir: str = ""

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    def resolve_deepl_api_url(self, api_key: str) -> str:
        """Pick the DeepL endpoint; free-tier keys end with ':fx'."""
        if self.deepl_api_url:
            return self.deepl_api_url.rstrip("/")
        if api_key.endswith(":fx"):
            return DEEPL_FREE_API_URL
        return DEEPL_PRO_API_URL


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def write_api_key(api_key: str, env_file: str = ".env") -> bool:
    """
    Create the dotfile holding the OpenAI API key.

    Returns False without touching anything if the file already exists.
    """
    if os.path.exists(env_file):
        return False

    # set_key only edits existing files
    with open(env_file, "w", encoding="utf-8"):
        pass
    set_key(env_file, "OPENAI_API_KEY", api_key, quote_mode="never")
    return True


def mask_secret(value: str) -> str:
    """Show only the last four characters of a credential."""
    if not value:
        return "<not set>"
    if len(value) <= 4:
        return "*" * len(value)
    return "*" * (len(value) - 4) + value[-4:]
