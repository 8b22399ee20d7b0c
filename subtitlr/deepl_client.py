"""DeepL document translation client for subtitle files."""

import logging
import os
import threading
import time
from enum import Enum
from typing import Optional

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as ModelValidationError

from subtitlr.errors import TranslationError

logger = logging.getLogger(__name__)

USER_AGENT = "Subtitlr"


class DocumentState(str, Enum):
    QUEUED = "queued"
    TRANSLATING = "translating"
    DONE = "done"
    ERROR = "error"


class DocumentHandle(BaseModel):
    """Identifies one translation job; both fields are needed for every call."""

    document_id: str = ""
    document_key: str = ""

    @property
    def is_valid(self) -> bool:
        return bool(self.document_id and self.document_key)


class DocumentStatus(BaseModel):
    document_id: str = ""
    status: DocumentState
    seconds_remaining: int = 0
    error_message: Optional[str] = None


class DeepLClient:
    """Client for the DeepL document translation API."""

    def __init__(
        self,
        api_key: str,
        api_url: str,
        timeout: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        if not api_key:
            raise TranslationError("DeepL API key is missing")

        self.api_url = api_url.rstrip("/")
        self.headers = {
            "Authorization": f"DeepL-Auth-Key {api_key}",
            "User-Agent": USER_AGENT,
        }
        self.client = httpx.Client(
            base_url=self.api_url,
            headers=self.headers,
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _post(self, url: str, **kwargs) -> httpx.Response:
        try:
            response = self.client.post(url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            raise TranslationError(
                f"DeepL request {url} failed with status: {status_code}",
                status_code=status_code,
            ) from e
        except httpx.HTTPError as e:
            raise TranslationError(f"DeepL request {url} failed: {e}") from e
        return response

    def upload(self, input_path: str, target_lang: str) -> DocumentHandle:
        """Upload a subtitle file and start its translation."""
        logger.info(f"Uploading {input_path} to DeepL (target: {target_lang})")

        try:
            with open(input_path, "rb") as f:
                content = f.read()
        except OSError as e:
            raise TranslationError(f"Could not read {input_path}: {e}") from e

        # Subtitles are submitted as a plain text document
        filename = os.path.basename(input_path) + ".txt"
        response = self._post(
            "/document",
            files={"file": (filename, content)},
            data={"target_lang": target_lang.upper()},
        )

        try:
            handle = DocumentHandle.model_validate(response.json())
        except (ValueError, ModelValidationError):
            handle = DocumentHandle()

        if not handle.is_valid:
            raise TranslationError("DeepL did not return a document handle")

        logger.info(f"Document ID: {handle.document_id}")
        return handle

    def get_status(self, handle: DocumentHandle) -> DocumentStatus:
        """Check the status of a translation job."""
        if not handle.is_valid:
            raise TranslationError("Cannot poll a translation without a document handle")

        response = self._post(
            f"/document/{handle.document_id}",
            params={"document_key": handle.document_key},
        )
        try:
            status = DocumentStatus.model_validate(response.json())
        except (ValueError, ModelValidationError) as e:
            raise TranslationError(f"Unexpected status response from DeepL: {e}") from e

        logger.info(f"Status: {status.status.value}, seconds remaining: {status.seconds_remaining}")
        return status

    def download(self, handle: DocumentHandle) -> bytes:
        """Download the translated document."""
        if not handle.is_valid:
            raise TranslationError("Cannot download a translation without a document handle")

        logger.info(f"Downloading translated document {handle.document_id}")
        response = self._post(
            f"/document/{handle.document_id}/result",
            params={"document_key": handle.document_key},
        )
        return response.content

    def wait_until_done(
        self,
        handle: DocumentHandle,
        poll_interval: float = 2.0,
        max_wait: float = 900.0,
        cancel_event: Optional[threading.Event] = None,
    ) -> DocumentStatus:
        """
        Poll the job until DeepL reports it done.

        Raises TranslationError when the job fails, the wait budget is
        exhausted, or `cancel_event` is set.
        """
        cancel_event = cancel_event or threading.Event()
        deadline = time.monotonic() + max_wait

        while True:
            if cancel_event.is_set():
                raise TranslationError("Translation cancelled")

            status = self.get_status(handle)
            if status.status == DocumentState.DONE:
                return status
            if status.status == DocumentState.ERROR:
                detail = status.error_message or "no details"
                raise TranslationError(f"DeepL failed to translate the document: {detail}")

            if time.monotonic() + poll_interval > deadline:
                raise TranslationError(
                    f"Translation not finished after {max_wait:.0f}s (last status: {status.status.value})"
                )
            if cancel_event.wait(poll_interval):
                raise TranslationError("Translation cancelled")


def translate_document(
    client: DeepLClient,
    input_path: str,
    target_lang: str,
    output: str,
    poll_interval: float = 2.0,
    max_wait: float = 900.0,
    cancel_event: Optional[threading.Event] = None,
) -> str:
    """
    Translate a subtitle file end to end: upload, wait, download.

    Args:
        client: Configured DeepL client
        input_path: Subtitle file to translate
        target_lang: Target language code
        output: Path for the translated file

    Returns:
        The output path
    """
    handle = client.upload(input_path, target_lang)
    client.wait_until_done(handle, poll_interval, max_wait, cancel_event)
    content = client.download(handle)

    try:
        output_dir = os.path.dirname(output)
        if output_dir:
            os.makedirs(output_dir, exist_ok=True)
        with open(output, "wb") as f:
            f.write(content)
    except OSError as e:
        raise TranslationError(f"Could not write {output}: {e}") from e

    logger.info(f"Translated subtitles saved to: {output}")
    return output
