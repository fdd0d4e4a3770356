"""OpenAI-compatible chat backend."""

import httpx

from content_audit.errors import ChatBackendError
from content_audit.providers.base import ChatBackend, ModelRef


class OpenAIChatBackend(ChatBackend):
    """Calls /v1/chat/completions on an OpenAI-compatible API."""

    provider_id = "openai"

    def __init__(self, base_url: str, api_key: str, model: str,
                 temperature: float = 0.2, timeout: float = 60.0):
        self._base_url = base_url
        self._api_key = api_key
        self._model = model
        self._temperature = temperature
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout, connect=10.0))
        return self._client

    def _build_headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }

    def has_available_provider(self) -> bool:
        return bool(self._base_url and self._api_key)

    def default_model(self) -> ModelRef | None:
        if not self._model:
            return None
        return ModelRef(provider_id=self.provider_id, model_id=self._model)

    async def chat(self, prompt: str, model_id: str) -> str:
        upstream_url = f"{self._base_url.rstrip('/')}/v1/chat/completions"
        body = {
            "model": model_id,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self._temperature,
        }

        client = await self._get_client()
        try:
            response = await client.post(upstream_url, json=body, headers=self._build_headers())
        except httpx.ConnectError:
            raise ChatBackendError("Cannot reach upstream provider")
        except httpx.TimeoutException:
            raise ChatBackendError("Upstream provider timed out")
        except httpx.HTTPError as e:
            raise ChatBackendError(f"Upstream error: {e}")

        if response.status_code != 200:
            raise ChatBackendError(
                f"Upstream returned {response.status_code}: {response.text[:200]}"
            )

        try:
            choices = response.json().get("choices", [])
            if not choices:
                return ""
            content = choices[0].get("message", {}).get("content", "") or ""
        except (ValueError, AttributeError, TypeError, KeyError, IndexError):
            raise ChatBackendError("Upstream returned a malformed response")
        if not isinstance(content, str):
            raise ChatBackendError("Upstream returned a malformed response")
        return content

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
