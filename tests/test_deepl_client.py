import threading

import httpx
import pytest

from subtitlr.deepl_client import DeepLClient, DocumentHandle, DocumentState, DocumentStatus, translate_document
from subtitlr.errors import TranslationError

from conftest import SRT_HELLO

API_URL = "https://api-free.deepl.test/v2"
HANDLE = {"document_id": "DOC123", "document_key": "KEY456"}


class FakeDeepL:
    """Serves the document endpoints from scripted responses."""

    def __init__(self, statuses, upload_response=None, result=SRT_HELLO):
        self.statuses = list(statuses)
        self.upload_response = upload_response or httpx.Response(200, json=HANDLE)
        self.result = result
        self.requests = []

    def __call__(self, request):
        request.read()
        self.requests.append(request)
        path = request.url.path
        if path == "/v2/document":
            return self.upload_response
        if path == "/v2/document/DOC123":
            status = self.statuses.pop(0)
            return httpx.Response(200, json={"document_id": "DOC123", **status})
        if path == "/v2/document/DOC123/result":
            return httpx.Response(200, content=self.result)
        return httpx.Response(404)

    def paths(self):
        return [request.url.path for request in self.requests]


def make_client(fake):
    return DeepLClient("deepl-test:fx", API_URL, transport=httpx.MockTransport(fake))


def test_round_trip_writes_downloaded_bytes(srt_file, tmp_path):
    fake = FakeDeepL([{"status": "done", "seconds_remaining": 0}])
    output = tmp_path / "translated.srt"

    with make_client(fake) as client:
        translate_document(client, str(srt_file), "en", str(output), poll_interval=0)

    assert output.read_bytes() == SRT_HELLO
    upload = fake.requests[0]
    assert upload.headers["authorization"] == "DeepL-Auth-Key deepl-test:fx"
    assert upload.headers["user-agent"] == "Subtitlr"
    assert b'name="target_lang"' in upload.content and b"EN" in upload.content
    assert b'filename="input.srt.txt"' in upload.content


def test_polls_until_done_then_downloads_once(srt_file, tmp_path):
    fake = FakeDeepL(
        [
            {"status": "queued"},
            {"status": "translating", "seconds_remaining": 10},
            {"status": "done", "seconds_remaining": 0},
        ]
    )
    output = tmp_path / "translated.srt"

    with make_client(fake) as client:
        translate_document(client, str(srt_file), "de", str(output), poll_interval=0)

    assert fake.paths() == [
        "/v2/document",
        "/v2/document/DOC123",
        "/v2/document/DOC123",
        "/v2/document/DOC123",
        "/v2/document/DOC123/result",
    ]
    for request in fake.requests[1:]:
        assert request.method == "POST"
        assert request.url.params["document_key"] == "KEY456"
        assert request.headers["authorization"] == "DeepL-Auth-Key deepl-test:fx"


@pytest.mark.parametrize(
    "upload_response",
    [
        httpx.Response(200, json={"document_id": "", "document_key": ""}),
        httpx.Response(200, content=b"not json"),
        httpx.Response(200, json={}),
        httpx.Response(200, json=["unexpected"]),
    ],
)
def test_empty_handle_is_an_error(srt_file, tmp_path, upload_response):
    fake = FakeDeepL([], upload_response=upload_response)

    with make_client(fake) as client:
        with pytest.raises(TranslationError, match="document handle"):
            translate_document(client, str(srt_file), "en", str(tmp_path / "out.srt"), poll_interval=0)

    assert fake.paths() == ["/v2/document"]


def test_upload_http_error(srt_file):
    fake = FakeDeepL([], upload_response=httpx.Response(403, json={"message": "Forbidden"}))

    with make_client(fake) as client:
        with pytest.raises(TranslationError) as excinfo:
            client.upload(str(srt_file), "en")

    assert excinfo.value.status_code == 403


def test_upload_missing_file(tmp_path):
    fake = FakeDeepL([])

    with make_client(fake) as client:
        with pytest.raises(TranslationError, match="Could not read"):
            client.upload(str(tmp_path / "missing.srt"), "en")

    assert fake.requests == []


def test_poll_refuses_invalid_handle():
    fake = FakeDeepL([])

    with make_client(fake) as client:
        with pytest.raises(TranslationError):
            client.get_status(DocumentHandle())
        with pytest.raises(TranslationError):
            client.download(DocumentHandle(document_id="DOC123"))

    assert fake.requests == []


def test_error_status_stops_polling(srt_file, tmp_path):
    fake = FakeDeepL([{"status": "queued"}, {"status": "error", "error_message": "Unsupported file"}])
    output = tmp_path / "translated.srt"

    with make_client(fake) as client:
        with pytest.raises(TranslationError, match="Unsupported file"):
            translate_document(client, str(srt_file), "en", str(output), poll_interval=0)

    assert "/v2/document/DOC123/result" not in fake.paths()
    assert not output.exists()


def test_unknown_status_is_an_error():
    fake = FakeDeepL([{"status": "exploded"}])
    handle = DocumentHandle(**HANDLE)

    with make_client(fake) as client:
        with pytest.raises(TranslationError, match="Unexpected status"):
            client.get_status(handle)


def test_wait_budget_exhausted():
    fake = FakeDeepL([{"status": "translating", "seconds_remaining": 100}] * 3)
    handle = DocumentHandle(**HANDLE)

    with make_client(fake) as client:
        with pytest.raises(TranslationError, match="not finished"):
            client.wait_until_done(handle, poll_interval=1, max_wait=0)

    assert fake.paths() == ["/v2/document/DOC123"]


def test_cancelled_before_polling():
    fake = FakeDeepL([{"status": "queued"}])
    cancel = threading.Event()
    cancel.set()

    with make_client(fake) as client:
        with pytest.raises(TranslationError, match="cancelled"):
            client.wait_until_done(DocumentHandle(**HANDLE), poll_interval=0, cancel_event=cancel)

    assert fake.requests == []


def test_status_model_defaults():
    status = DocumentStatus.model_validate({"document_id": "DOC123", "status": "queued"})

    assert status.status is DocumentState.QUEUED
    assert status.seconds_remaining == 0
    assert DocumentHandle(**HANDLE).is_valid
    assert not DocumentHandle(document_id="DOC123").is_valid


def test_unwritable_output_is_an_error(srt_file, tmp_path):
    fake = FakeDeepL([{"status": "done"}])

    with make_client(fake) as client:
        with pytest.raises(TranslationError, match="Could not write"):
            translate_document(client, str(srt_file), "en", str(tmp_path), poll_interval=0)


def test_cancelled_while_waiting():
    fake = FakeDeepL([{"status": "queued"}] * 5)
    cancel = threading.Event()
    timer = threading.Timer(0.1, cancel.set)
    timer.start()

    try:
        with make_client(fake) as client:
            with pytest.raises(TranslationError, match="cancelled"):
                client.wait_until_done(DocumentHandle(**HANDLE), poll_interval=30, max_wait=60, cancel_event=cancel)
    finally:
        timer.cancel()

    assert fake.paths() == ["/v2/document/DOC123"]


def unreachable(request):
    raise httpx.ConnectError("connection refused", request=request)


def test_status_transport_error():
    with DeepLClient("deepl-test:fx", API_URL, transport=httpx.MockTransport(unreachable)) as client:
        with pytest.raises(TranslationError, match="connection refused") as excinfo:
            client.get_status(DocumentHandle(**HANDLE))

    assert excinfo.value.status_code is None


def test_download_transport_error():
    with DeepLClient("deepl-test:fx", API_URL, transport=httpx.MockTransport(unreachable)) as client:
        with pytest.raises(TranslationError, match="connection refused"):
            client.download(DocumentHandle(**HANDLE))
