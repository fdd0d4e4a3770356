"""Abstract base for chat backends."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class ModelRef:
    provider_id: str
    model_id: str


class ChatBackend(ABC):
    """Base class for chat backend implementations."""

    @abstractmethod
    def has_available_provider(self) -> bool:
        """True when the backend is configured well enough to accept calls."""
        ...

    @abstractmethod
    def default_model(self) -> ModelRef | None:
        """The model used for analysis, or None if none is configured."""
        ...

    @abstractmethod
    async def chat(self, prompt: str, model_id: str) -> str:
        """Send a single user message and return the raw text of the reply.

        Raises:
            ChatBackendError: transport failure or non-success response.
        """
        ...

    async def close(self) -> None:
        """Cleanup resources. Override if the backend holds connections."""
        pass
