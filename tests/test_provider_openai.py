"""Tests for content_audit/providers/openai.py — OpenAI-compatible chat backend."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from content_audit.errors import ChatBackendError
from content_audit.providers.openai import OpenAIChatBackend


@pytest.fixture
def backend():
    return OpenAIChatBackend(
        base_url="https://api.openai.com/", api_key="sk-test", model="gpt-4o-mini",
    )


def _mock_client(response=None, side_effect=None):
    mock_client = AsyncMock()
    mock_client.is_closed = False
    if side_effect is not None:
        mock_client.post.side_effect = side_effect
    else:
        mock_client.post.return_value = response
    return mock_client


def _response(status_code=200, body=None, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = body or {}
    response.text = text
    return response


class TestAvailability:

    def test_available_with_url_and_key(self, backend):
        assert backend.has_available_provider() is True

    def test_unavailable_without_key(self):
        backend = OpenAIChatBackend(base_url="https://api.openai.com", api_key="", model="m")
        assert backend.has_available_provider() is False

    def test_default_model(self, backend):
        model = backend.default_model()
        assert model.provider_id == "openai"
        assert model.model_id == "gpt-4o-mini"

    def test_no_default_model(self):
        backend = OpenAIChatBackend(base_url="https://x", api_key="k", model="")
        assert backend.default_model() is None


class TestChat:

    async def test_success(self, backend):
        mock_client = _mock_client(_response(body={"choices": [{"message": {"content": "{}"}}]}))
        backend._client = mock_client

        assert await backend.chat("prompt text", "gpt-4o-mini") == "{}"

        call = mock_client.post.call_args
        assert call.args[0] == "https://api.openai.com/v1/chat/completions"
        assert call.kwargs["headers"]["Authorization"] == "Bearer sk-test"
        body = call.kwargs["json"]
        assert body["model"] == "gpt-4o-mini"
        assert body["messages"] == [{"role": "user", "content": "prompt text"}]
        assert body["temperature"] == 0.2

    async def test_no_choices_returns_empty(self, backend):
        backend._client = _mock_client(_response(body={"choices": []}))
        assert await backend.chat("p", "m") == ""

    async def test_non_json_body_raises(self, backend):
        backend._client = httpx.AsyncClient(transport=httpx.MockTransport(
            lambda request: httpx.Response(200, text="<html>gateway</html>"),
        ))
        with pytest.raises(ChatBackendError, match="malformed"):
            await backend.chat("p", "m")
        await backend.close()

    @pytest.mark.parametrize("body", [
        {"choices": ["not-a-dict"]},
        {"choices": [{"message": {"content": ["list"]}}]},
        ["not", "an", "object"],
    ])
    async def test_unexpected_envelope_raises(self, backend, body):
        backend._client = _mock_client(_response(body=body))
        with pytest.raises(ChatBackendError, match="malformed"):
            await backend.chat("p", "m")

    async def test_non_200_raises(self, backend):
        backend._client = _mock_client(_response(status_code=500, text="server exploded"))
        with pytest.raises(ChatBackendError, match="500"):
            await backend.chat("p", "m")

    async def test_connect_error_raises(self, backend):
        backend._client = _mock_client(side_effect=httpx.ConnectError("Connection refused"))
        with pytest.raises(ChatBackendError, match="Cannot reach"):
            await backend.chat("p", "m")

    async def test_timeout_raises(self, backend):
        backend._client = _mock_client(side_effect=httpx.ReadTimeout("Timed out"))
        with pytest.raises(ChatBackendError, match="timed out"):
            await backend.chat("p", "m")


class TestClose:

    async def test_close(self, backend):
        mock_client = _mock_client()
        backend._client = mock_client

        await backend.close()
        mock_client.aclose.assert_called_once()
        assert backend._client is None

    async def test_close_when_no_client(self, backend):
        """Closing without a client should not raise."""
        await backend.close()
