"""Tests for the OpenAI-compatible service adapters."""

import asyncio
import json

import httpx
import pytest

from nolook.config import settings
from nolook.services.analysis_service import ANALYSIS_INSTRUCTION, OpenAIAnalysisService
from nolook.services.transcription_service import OpenAITranscriptionService
from nolook.utils.exceptions import AnalysisError, ConfigurationError, TranscriptionError

BASE_URL = "https://api.example.test/v1"


@pytest.fixture(name="audio_file")
def audio_file_fixture(tmp_path):
    path = tmp_path / "n456.m4a"
    path.write_bytes(b"fake-audio-bytes")
    return path


def _transcriber(handler) -> OpenAITranscriptionService:
    return OpenAITranscriptionService(
        api_key="sk-test", base_url=BASE_URL, transport=httpx.MockTransport(handler)
    )


def _analyzer(handler) -> OpenAIAnalysisService:
    return OpenAIAnalysisService(
        api_key="sk-test", base_url=BASE_URL, transport=httpx.MockTransport(handler)
    )


def _completion(content: str) -> httpx.Response:
    return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})


def test_transcribe_posts_audio_for_plain_text(audio_file):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = request.content
        return httpx.Response(200, text="  I have a headache.\n")

    transcript = asyncio.run(_transcriber(handler).transcribe(audio_file))

    assert transcript == "I have a headache."
    assert seen["url"] == f"{BASE_URL}/audio/transcriptions"
    assert seen["auth"] == "Bearer sk-test"
    body = seen["body"]
    assert b'name="response_format"' in body and b"text" in body
    assert b"whisper-1" in body
    assert b'filename="n456.m4a"' in body
    assert b"fake-audio-bytes" in body


def test_transcribe_surfaces_service_error_message(audio_file):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            429,
            json={"error": {"message": "quota exceeded", "type": "insufficient_quota"}},
        )

    with pytest.raises(TranscriptionError, match="quota exceeded"):
        asyncio.run(_transcriber(handler).transcribe(audio_file))


def test_transcribe_rejects_empty_transcript(audio_file):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="   \n")

    with pytest.raises(TranscriptionError, match="empty"):
        asyncio.run(_transcriber(handler).transcribe(audio_file))


def test_transcribe_wraps_transport_errors(audio_file):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TranscriptionError, match="connection refused"):
        asyncio.run(_transcriber(handler).transcribe(audio_file))


def test_transcribe_without_key_raises_configuration_error(audio_file, monkeypatch):
    monkeypatch.setattr(settings, "openai_api_key", None)
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, text="unused")

    service = OpenAITranscriptionService(
        base_url=BASE_URL, transport=httpx.MockTransport(handler)
    )
    with pytest.raises(ConfigurationError):
        asyncio.run(service.transcribe(audio_file))
    assert calls == []


def test_key_is_read_from_settings_at_call_time(audio_file, monkeypatch):
    """Services built before the key is available pick it up later."""
    monkeypatch.setattr(settings, "openai_api_key", None)
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers["Authorization"]
        return httpx.Response(200, text="hello")

    service = OpenAITranscriptionService(
        base_url=BASE_URL, transport=httpx.MockTransport(handler)
    )
    monkeypatch.setattr(settings, "openai_api_key", "sk-late")
    assert asyncio.run(service.transcribe(audio_file)) == "hello"
    assert seen["auth"] == "Bearer sk-late"


def test_analyze_requests_json_object():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["payload"] = json.loads(request.content)
        return _completion('{"category": "other", "summary": "Call mom."}')

    content = asyncio.run(_analyzer(handler).analyze("um call mom"))

    assert json.loads(content)["summary"] == "Call mom."
    assert seen["url"] == f"{BASE_URL}/chat/completions"
    payload = seen["payload"]
    assert payload["model"] == "gpt-4o-mini"
    assert payload["response_format"] == {"type": "json_object"}
    assert payload["max_tokens"] == 2000
    assert payload["messages"] == [
        {"role": "system", "content": ANALYSIS_INSTRUCTION},
        {"role": "user", "content": "um call mom"},
    ]


def test_analyze_surfaces_service_error_message():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": {"message": "model overloaded"}})

    with pytest.raises(AnalysisError, match="model overloaded"):
        asyncio.run(_analyzer(handler).analyze("text"))


@pytest.mark.parametrize(
    "body",
    [{"choices": []}, {"choices": [{"message": {"content": ""}}]}, {"id": "x"}],
)
def test_analyze_rejects_replies_without_content(body):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=body)

    with pytest.raises(AnalysisError):
        asyncio.run(_analyzer(handler).analyze("text"))


def test_analyze_rejects_non_json_response():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>gateway</html>")

    with pytest.raises(AnalysisError, match="non-JSON"):
        asyncio.run(_analyzer(handler).analyze("text"))


def test_analyze_without_key_raises_configuration_error(monkeypatch):
    monkeypatch.setattr(settings, "openai_api_key", "")
    service = OpenAIAnalysisService(
        base_url=BASE_URL,
        transport=httpx.MockTransport(lambda request: _completion("{}")),
    )
    with pytest.raises(ConfigurationError):
        asyncio.run(service.analyze("text"))
