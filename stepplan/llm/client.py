"""
Text-generation call wrapper and it does:
- Sends a prompt (plus optional history) to the configured provider
- Picks the model from the call options
- Reports failures as GenerationResult.error instead of raising

Main purpose:
The single outbound model call the planner depends on.
"""


from typing import Any, Awaitable, Dict, List, Optional, Protocol

import httpx

from stepplan.core.config import settings
from stepplan.core.logging import get_logger, snippet
from stepplan.llm.schemas import GenerationResult

log = get_logger("llm.client")

MOCK_RESPONSE = '{"isMultiStep": false}'


class LLMError(RuntimeError):
    pass


class TextGenerator(Protocol):
    def __call__(
        self,
        prompt: str,
        history: Optional[List[Dict[str, str]]] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Awaitable[GenerationResult]: ...


def _timeout() -> httpx.Timeout:
    return httpx.Timeout(settings.LLM_TIMEOUT_SECONDS, connect=10.0)


async def _post_json(
    url: str,
    payload: dict,
    headers: Dict[str, str],
    client: Optional[httpx.AsyncClient] = None,
) -> dict:
    if client is None:
        async with httpx.AsyncClient(timeout=_timeout()) as c:
            r = await c.post(url, headers=headers, json=payload)
    else:
        r = await client.post(url, headers=headers, json=payload)

    if r.status_code >= 400:
        raise LLMError(f"HTTP {r.status_code}: {snippet(r.text, 200)}")
    return r.json()


async def _gemini_generate(
    prompt: str,
    history: List[Dict[str, str]],
    model: str,
    temperature: float,
    client: Optional[httpx.AsyncClient],
) -> str:
    if not settings.GEMINI_API_KEY:
        raise LLMError("Missing GEMINI_API_KEY. Put it in your .env")

    contents = [
        {
            "role": "model" if m.get("role") in ("assistant", "model") else "user",
            "parts": [{"text": m.get("content", "")}],
        }
        for m in history
    ]
    contents.append({"role": "user", "parts": [{"text": prompt}]})

    url = f"{settings.GEMINI_BASE_URL.rstrip('/')}/models/{model}:generateContent"
    headers = {"x-goog-api-key": settings.GEMINI_API_KEY}
    payload = {"contents": contents, "generationConfig": {"temperature": temperature}}

    data = await _post_json(url, payload, headers, client)
    try:
        parts = data["candidates"][0]["content"]["parts"]
        return "".join(p.get("text", "") for p in parts)
    except (KeyError, IndexError, TypeError):
        raise LLMError(f"Unexpected Gemini response: {snippet(str(data), 200)}")


async def _groq_generate(
    prompt: str,
    history: List[Dict[str, str]],
    model: str,
    temperature: float,
    client: Optional[httpx.AsyncClient],
) -> str:
    if not settings.GROQ_API_KEY:
        raise LLMError("Missing GROQ_API_KEY. Put it in your .env")

    messages = [
        {"role": "assistant" if m.get("role") in ("assistant", "model") else "user", "content": m.get("content", "")}
        for m in history
    ]
    messages.append({"role": "user", "content": prompt})

    url = f"{settings.GROQ_BASE_URL.rstrip('/')}/chat/completions"
    headers = {"Authorization": f"Bearer {settings.GROQ_API_KEY}"}
    payload = {"model": model, "messages": messages, "temperature": temperature}

    data = await _post_json(url, payload, headers, client)
    try:
        return data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        raise LLMError(f"Unexpected Groq response: {snippet(str(data), 200)}")


async def generate_text(
    prompt: str,
    history: Optional[List[Dict[str, str]]] = None,
    options: Optional[Dict[str, Any]] = None,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> GenerationResult:
    """
    One generation call, no retries.
    Provider errors, HTTP errors and transport errors come back as
    GenerationResult(error=...).
    """
    options = options or {}
    history = history or []
    provider = (settings.LLM_PROVIDER or "").lower().strip()
    model = options.get("model") or settings.LLM_MODEL
    temperature = float(options.get("temperature", 0.7))

    if provider == "mock":
        return GenerationResult(text=MOCK_RESPONSE)

    try:
        if provider == "gemini":
            text = await _gemini_generate(prompt, history, model, temperature, client)
        elif provider == "groq":
            text = await _groq_generate(prompt, history, model, temperature, client)
        else:
            raise LLMError(f"Unsupported LLM_PROVIDER={settings.LLM_PROVIDER}. Use gemini, groq or mock.")
    except (LLMError, httpx.HTTPError, ValueError) as e:
        log.warning(f"{provider} call failed: {e}")
        return GenerationResult(error=str(e))

    return GenerationResult(text=text)
