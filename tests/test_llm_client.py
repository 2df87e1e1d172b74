import asyncio
import json

import httpx
import pytest

from stepplan.core.config import settings
from stepplan.llm.client import MOCK_RESPONSE, generate_text


def _run(handler, *args, **kwargs):
    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await generate_text(*args, client=client, **kwargs)
    return asyncio.run(go())


@pytest.fixture
def gemini(monkeypatch):
    monkeypatch.setattr(settings, "LLM_PROVIDER", "gemini")
    monkeypatch.setattr(settings, "GEMINI_API_KEY", "test-key")


def test_gemini_request_and_text(gemini):
    seen = {}

    def handler(request: httpx.Request):
        seen["url"] = str(request.url)
        seen["key"] = request.headers.get("x-goog-api-key")
        seen["body"] = json.loads(request.content)
        parts = [{"text": '{"isMultiStep"'}, {"text": ": false}"}]
        return httpx.Response(200, json={"candidates": [{"content": {"parts": parts}}]})

    res = _run(handler, "plan this", [{"role": "assistant", "content": "hi"}], {"model": "gemini-2.0-flash", "temperature": 0.1})
    assert res.error is None
    assert res.text == '{"isMultiStep": false}'
    assert seen["url"].endswith("/models/gemini-2.0-flash:generateContent")
    assert seen["key"] == "test-key"
    assert seen["body"]["contents"][0]["role"] == "model"
    assert seen["body"]["contents"][-1] == {"role": "user", "parts": [{"text": "plan this"}]}
    assert seen["body"]["generationConfig"]["temperature"] == 0.1


def test_groq_request_and_text(monkeypatch):
    monkeypatch.setattr(settings, "LLM_PROVIDER", "groq")
    monkeypatch.setattr(settings, "GROQ_API_KEY", "gk")
    seen = {}

    def handler(request: httpx.Request):
        seen["auth"] = request.headers.get("authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"message": {"content": "hello"}}]})

    res = _run(handler, "hi", None, {"model": "llama-3.3-70b-versatile"})
    assert res.text == "hello"
    assert seen["auth"] == "Bearer gk"
    assert seen["body"]["model"] == "llama-3.3-70b-versatile"
    assert seen["body"]["messages"] == [{"role": "user", "content": "hi"}]


def test_http_error_becomes_error_result(gemini):
    res = _run(lambda request: httpx.Response(503, text="overloaded"), "x")
    assert res.text is None
    assert "HTTP 503" in res.error
    assert not res.usable


def test_transport_error_becomes_error_result(gemini):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    res = _run(handler, "x")
    assert "connection refused" in res.error


def test_unexpected_shape_becomes_error_result(gemini):
    res = _run(lambda request: httpx.Response(200, json={"candidates": []}), "x")
    assert "Unexpected Gemini response" in res.error


def test_missing_key_never_calls_provider(monkeypatch):
    monkeypatch.setattr(settings, "LLM_PROVIDER", "gemini")
    monkeypatch.setattr(settings, "GEMINI_API_KEY", "")

    def handler(request):
        raise AssertionError("no HTTP call expected")

    res = _run(handler, "x")
    assert "GEMINI_API_KEY" in res.error


def test_unsupported_provider(monkeypatch):
    monkeypatch.setattr(settings, "LLM_PROVIDER", "nope")
    res = asyncio.run(generate_text("x"))
    assert "Unsupported LLM_PROVIDER" in res.error


def test_mock_provider(monkeypatch):
    monkeypatch.setattr(settings, "LLM_PROVIDER", "mock")
    res = asyncio.run(generate_text("x"))
    assert res.text == MOCK_RESPONSE
    assert res.usable
