"""Exceptions raised by the subtitle pipeline, one per stage."""

from typing import Optional


class SubtitlrError(Exception):
    """Base class; `stage` names the pipeline step that failed."""

    stage = "pipeline"


class RetrievalError(SubtitlrError):
    stage = "download"


class ConversionError(SubtitlrError):
    stage = "conversion"


class ValidationError(SubtitlrError):
    stage = "validation"


class TranscriptionError(SubtitlrError):
    stage = "transcription"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TranslationError(SubtitlrError):
    stage = "translation"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
