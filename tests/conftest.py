import pytest

from subtitlr.config import Settings

SRT_HELLO = b"1\n00:00:00,000 --> 00:00:01,000\nHello\n"
SRT_BONJOUR = b"1\n00:00:00,000 --> 00:00:02,000\nBonjour\n"


@pytest.fixture
def settings(tmp_path):
    work_dir = tmp_path / "work"
    work_dir.mkdir()
    return Settings(
        _env_file=None,
        openai_api_key="sk-test",
        deepl_api_key="deepl-test:fx",
        deepl_api_url="",
        poll_interval=0,
        poll_max_wait=5,
        work_dir=str(work_dir),
    )


@pytest.fixture
def srt_file(tmp_path):
    path = tmp_path / "input.srt"
    path.write_bytes(SRT_BONJOUR)
    return path
