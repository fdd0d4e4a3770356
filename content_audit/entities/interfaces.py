"""Collaborator interfaces for the entity layer.

The audit core never owns content: entities are loaded from a host-provided
EntityStore and turned into markup by a host-provided ContentRenderer.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class Entity:
    entity_type: str
    id: str
    bundle: str
    langcode: str = "en"
    revision_id: str | None = None
    published: bool | None = None  # None = entity type has no publication flag


@dataclass(frozen=True)
class EntityCandidate:
    entity_type: str
    entity_id: str
    bundle: str


class EntityStore(ABC):
    """Abstract base for entity lookups."""

    @abstractmethod
    async def query(self, entity_type: str, bundle: str, filters: dict) -> list[str]:
        """Return ids of entities of the given type and bundle.

        Recognised filters:
            published: only entities whose publication flag is set. Entity
                types without a publication flag ignore it.
        """
        ...

    @abstractmethod
    async def load(self, entity_type: str, entity_id: str) -> Entity | None:
        """Load a single entity. Returns None if it does not exist."""
        ...


class ContentRenderer(ABC):
    """Renders an entity in its canonical display form."""

    @abstractmethod
    async def render_default_view(self, entity: Entity, langcode: str) -> str:
        """Return the markup of the entity's default view in `langcode`."""
        ...
