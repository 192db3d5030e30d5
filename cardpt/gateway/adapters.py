"""
Provider transport adapters.

An adapter sends the canonical prompt to one provider and returns the raw
text the model produced. It does not interpret that text. Each invocation
opens its own ``httpx.AsyncClient``; nothing is cached between calls and
nothing is retried.
"""

from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

import httpx


logger = logging.getLogger(__name__)

QWEN_URL = "https://dashscope.aliyuncs.com/compatible-mode/v1/chat/completions"
DEEPSEEK_URL = "https://api.deepseek.com/chat/completions"
DOUBAO_URL = "https://ark.cn-beijing.volces.com/api/v3/responses"
GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"


class ProviderError(Exception):
    """Base class for transport-level failures."""


class ProviderHTTPError(ProviderError):
    """The provider answered with a non-2xx status."""

    def __init__(self, status_code: int, reason: str = "", details: str = "",
                 retry_after: Optional[float] = None):
        self.status_code = status_code
        self.reason = reason
        self.details = details
        self.retry_after = retry_after
        detail_text = f": {details}" if details else ""
        super().__init__(f"HTTP error: {status_code} {reason or 'Unknown'}{detail_text}")


class ProviderTransportError(ProviderError):
    """Network failure, or a response without usable text."""


def _error_details(body: Any) -> str:
    if not isinstance(body, dict):
        return ""
    error = body.get("error")
    if isinstance(error, dict) and error.get("message") is not None:
        return str(error["message"])
    if isinstance(body.get("message"), str):
        return body["message"]
    return ""


def _retry_after(response: httpx.Response) -> Optional[float]:
    value = response.headers.get("retry-after")
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


class ProviderAdapter(ABC):
    """
    Transport for one provider.

    Subclasses describe the request (``build_request``) and where the text
    lives in the response (``extract_text``); ``invoke`` does the I/O.
    """

    provider: str = ""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None,
                 timeout: Optional[float] = None):
        self._transport = transport
        self._timeout = timeout

    @abstractmethod
    def build_request(
        self, model_name: str, prompt: str, api_key: str,
    ) -> Tuple[str, Dict[str, str], Dict[str, Any], Dict[str, str]]:
        """Return (url, headers, json body, query params)."""

    @abstractmethod
    def extract_text(self, body: Any) -> Optional[str]:
        """Pull the model's text out of a decoded response body."""

    async def invoke(self, model_name: str, prompt: str, api_key: str) -> str:
        """
        Send ``prompt`` to the provider.

        Returns:
            Raw model text, verbatim

        Raises:
            ProviderHTTPError: Non-2xx response
            ProviderTransportError: Network failure or no text in the response
        """
        url, headers, payload, params = self.build_request(model_name, prompt, api_key)

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout,
                                         follow_redirects=True) as client:
                response = await client.post(url, headers=headers, json=payload, params=params)
        except httpx.HTTPError as e:
            raise ProviderTransportError(f"Network error: {e}") from e

        logger.debug(f"{self.provider} responded with HTTP {response.status_code}")

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.is_error:
            raise ProviderHTTPError(
                response.status_code,
                reason=response.reason_phrase,
                details=_error_details(body),
                retry_after=_retry_after(response),
            )

        if body is None:
            raise ProviderTransportError("Failed to parse response body as JSON")

        text = self.extract_text(body)
        if text is None:
            raise ProviderTransportError("Response does not contain text content")
        return text


class ChatCompletionsAdapter(ProviderAdapter):
    """OpenAI-compatible chat completions (Qwen, DeepSeek)."""

    url: str = ""

    def build_request(self, model_name, prompt, api_key):
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": model_name,
            "messages": [{"role": "user", "content": prompt}],
        }
        return self.url, headers, payload, {}

    def extract_text(self, body):
        return _chat_completion_text(body)


def _chat_completion_text(body: Any) -> Optional[str]:
    if not isinstance(body, dict):
        return None
    choices = body.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    message = choices[0].get("message") if isinstance(choices[0], dict) else None
    if isinstance(message, dict) and isinstance(message.get("content"), str):
        return message["content"]
    return None


class QwenAdapter(ChatCompletionsAdapter):
    provider = "qwen"
    url = QWEN_URL


class DeepSeekAdapter(ChatCompletionsAdapter):
    provider = "deepseek"
    url = DEEPSEEK_URL


class DoubaoAdapter(ProviderAdapter):
    """Volcengine Ark Responses API."""

    provider = "doubao"

    def build_request(self, model_name, prompt, api_key):
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        return DOUBAO_URL, headers, {"model": model_name, "input": prompt}, {}

    def extract_text(self, body):
        if not isinstance(body, dict):
            return None
        for container in (body, body.get("data")):
            if not isinstance(container, dict):
                continue
            output = container.get("output")
            if isinstance(output, list):
                text = _last_assistant_text(output)
                if text is not None:
                    return text
            elif isinstance(output, str):
                return output
        return _chat_completion_text(body)


def _last_assistant_text(output: list) -> Optional[str]:
    for item in reversed(output):
        if not isinstance(item, dict):
            continue
        if item.get("type") != "message" or item.get("role") != "assistant":
            continue
        content = item.get("content")
        if not isinstance(content, list):
            continue
        for part in content:
            if (isinstance(part, dict) and part.get("type") == "output_text"
                    and isinstance(part.get("text"), str)):
                return part["text"]
    return None


class GeminiAdapter(ProviderAdapter):
    """Google Generative Language generateContent."""

    provider = "gemini"

    def build_request(self, model_name, prompt, api_key):
        url = GEMINI_URL.format(model=f"gemini-{model_name}")
        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        return url, {"Content-Type": "application/json"}, payload, {"key": api_key}

    def extract_text(self, body):
        if not isinstance(body, dict):
            return None
        candidates = body.get("candidates")
        if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
            return None
        content = candidates[0].get("content")
        if not isinstance(content, dict):
            return None
        parts = content.get("parts")
        if not isinstance(parts, list) or not parts or not isinstance(parts[0], dict):
            return None
        text = parts[0].get("text")
        return text if isinstance(text, str) else None


AdapterFactory = Callable[[], ProviderAdapter]


class AdapterRegistry:
    """Provider -> adapter lookup. A fresh adapter is built per request."""

    def __init__(self, factories: Dict[str, AdapterFactory]):
        self._factories = dict(factories)

    def get(self, provider: str) -> Optional[ProviderAdapter]:
        factory = self._factories.get(provider)
        return factory() if factory is not None else None

    def __contains__(self, provider: object) -> bool:
        return provider in self._factories

    @property
    def providers(self) -> Iterable[str]:
        return tuple(self._factories)


def create_adapter_registry(
    transport: Optional[httpx.AsyncBaseTransport] = None,
    timeout: Optional[float] = None,
) -> AdapterRegistry:
    """Registry with the four built-in providers."""
    adapters = (QwenAdapter, DeepSeekAdapter, DoubaoAdapter, GeminiAdapter)
    return AdapterRegistry({
        cls.provider: (lambda cls=cls: cls(transport=transport, timeout=timeout))
        for cls in adapters
    })
