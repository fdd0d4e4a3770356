"""Chat backend registry — singleton map of backend name → instance."""

from content_audit.config.settings import Settings, get_settings
from content_audit.providers.base import ChatBackend
from content_audit.providers.openai import OpenAIChatBackend

_backends: dict[str, ChatBackend] = {}


def get_chat_backend(name: str, settings: Settings | None = None) -> ChatBackend:
    """Get or create a chat backend instance by name."""
    if name in _backends:
        return _backends[name]

    settings = settings or get_settings()
    if name == "openai":
        _backends[name] = OpenAIChatBackend(
            base_url=settings.upstream_base_url,
            api_key=settings.upstream_api_key,
            model=settings.chat_model,
            temperature=settings.chat_temperature,
            timeout=settings.chat_timeout_seconds,
        )
    elif name == "bedrock":
        # Lazy import to avoid pulling in boto3 for OpenAI-only setups
        from content_audit.providers.bedrock import BedrockChatBackend
        _backends[name] = BedrockChatBackend(
            model_id=settings.bedrock_model_id,
            region=settings.aws_region,
            temperature=settings.chat_temperature,
        )
    else:
        raise ValueError(f"Unknown chat provider: {name}")

    return _backends[name]


async def close_all_backends() -> None:
    """Gracefully shut down all backend connections."""
    for backend in _backends.values():
        await backend.close()
    _backends.clear()
