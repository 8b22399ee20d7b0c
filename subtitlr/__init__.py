"""
subtitlr

Subtitle generation for YouTube videos:
- youtube_service: audio stream download using yt-dlp
- audio_service: MP3 extraction using ffmpeg
- transcription_service: SRT transcription using the OpenAI Whisper API
- deepl_client: subtitle translation using the DeepL document API
"""
