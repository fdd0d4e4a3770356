"""Tests for content_audit/providers/registry.py — chat backend singleton registry."""

import pytest

import content_audit.providers.registry as registry_mod
from content_audit.providers.bedrock import BedrockChatBackend
from content_audit.providers.openai import OpenAIChatBackend


@pytest.fixture(autouse=True)
def reset_registry(monkeypatch):
    """Clear the backend registry between tests."""
    monkeypatch.setattr(registry_mod, "_backends", {})
    yield
    monkeypatch.setattr(registry_mod, "_backends", {})


class TestGetChatBackend:

    def test_creates_openai_backend(self, override_settings):
        override_settings(UPSTREAM_API_KEY="sk-test", CHAT_MODEL="gpt-4o")
        backend = registry_mod.get_chat_backend("openai")
        assert isinstance(backend, OpenAIChatBackend)
        assert backend.default_model().model_id == "gpt-4o"

    def test_creates_bedrock_backend(self, override_settings):
        override_settings(BEDROCK_MODEL_ID="anthropic.claude-3-haiku")
        backend = registry_mod.get_chat_backend("bedrock")
        assert isinstance(backend, BedrockChatBackend)
        assert backend.has_available_provider() is True

    def test_singleton_behavior(self):
        b1 = registry_mod.get_chat_backend("openai")
        b2 = registry_mod.get_chat_backend("openai")
        assert b1 is b2

    def test_unknown_provider_raises(self):
        with pytest.raises(ValueError, match="Unknown chat provider"):
            registry_mod.get_chat_backend("fake-provider")


class TestCloseAllBackends:

    async def test_close_all(self):
        registry_mod.get_chat_backend("openai")
        await registry_mod.close_all_backends()
        assert registry_mod._backends == {}
