import logging

import httpx

from career_advisor.core.config import settings

logger = logging.getLogger(__name__)

SUPPORTED_LLM_PROVIDERS = {"gemini", "groq", "openai"}


class ProviderError(RuntimeError):
    pass


def _normalize_provider() -> str:
    provider = (settings.llm_provider or "gemini").strip().lower()
    if provider not in SUPPORTED_LLM_PROVIDERS:
        return "gemini"
    return provider


def _provider_config() -> tuple[str, str | None, str, str]:
    provider = _normalize_provider()
    if provider == "openai":
        return (
            provider,
            settings.openai_api_key,
            settings.openai_model,
            settings.openai_api_base.rstrip("/"),
        )
    if provider == "groq":
        return (
            provider,
            settings.groq_api_key,
            settings.groq_model,
            settings.groq_api_base.rstrip("/"),
        )
    return (
        "gemini",
        settings.gemini_api_key,
        settings.gemini_model,
        settings.gemini_api_base.rstrip("/"),
    )


def ai_is_configured() -> bool:
    _, api_key, model, _ = _provider_config()
    return bool(settings.ai_enabled and api_key and model)


def get_active_ai_provider() -> str:
    return _provider_config()[0]


def get_active_ai_model() -> str:
    return _provider_config()[2]


def _gemini_request(api_base: str, api_key: str, model: str, prompt: str) -> tuple[str, dict, dict]:
    url = f"{api_base}/models/{model}:generateContent"
    headers = {"Content-Type": "application/json", "x-goog-api-key": api_key}
    body = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
    return url, headers, body


def _chat_request(api_base: str, api_key: str, model: str, prompt: str) -> tuple[str, dict, dict]:
    url = f"{api_base}/chat/completions"
    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }
    body = {"model": model, "messages": [{"role": "user", "content": prompt}]}
    return url, headers, body


def _extract_text(provider: str, data: dict) -> str:
    if provider == "gemini":
        candidates = data.get("candidates") or []
        if not candidates:
            feedback = data.get("promptFeedback") or {}
            reason = feedback.get("blockReason") or "no candidates returned"
            raise ProviderError(f"Gemini returned no text: {reason}")
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts)
    return data["choices"][0]["message"]["content"]


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text[:500]
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return response.text[:500]


def generate_text(prompt: str) -> str:
    """Send one prompt to the configured provider and return its raw text.

    A single attempt is made; HTTP errors, timeouts and malformed payloads
    are all raised as ``ProviderError``.
    """
    provider, api_key, model, api_base = _provider_config()
    if not settings.ai_enabled:
        raise ProviderError("AI is disabled")
    if not api_key:
        raise ProviderError(f"{provider} API key is not configured")
    if not model:
        raise ProviderError(f"No model configured for provider '{provider}'")

    build = _gemini_request if provider == "gemini" else _chat_request
    url, headers, body = build(api_base, api_key, model, prompt)

    try:
        with httpx.Client(timeout=settings.ai_timeout_seconds) as client:
            response = client.post(url, headers=headers, json=body)
            response.raise_for_status()
            data = response.json()
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        raise ProviderError(
            f"{provider} API error ({status}): {_error_message(exc.response)}"
        ) from exc
    except httpx.TimeoutException as exc:
        raise ProviderError(f"{provider} request timed out") from exc
    except (httpx.HTTPError, ValueError) as exc:
        raise ProviderError(f"{provider} request failed: {exc}") from exc

    try:
        return _extract_text(provider, data)
    except (KeyError, IndexError, TypeError, AttributeError) as exc:
        raise ProviderError(f"Unexpected {provider} response format") from exc
