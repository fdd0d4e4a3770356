"""Entity-level score cache.

Wraps a ScoreStore with the fingerprint computation: every read and write
recomputes the entity's content hash and the current config hash, so a
change to either side turns cached rows into misses.
"""

from collections.abc import Mapping

from content_audit.entities.interfaces import ContentRenderer, Entity
from content_audit.scoring.fingerprint import content_hash, content_text
from content_audit.scoring.models import ScoreStatistics
from content_audit.scoring.store import ScoreStore
from content_audit.vectors.registry import VectorRegistry


class ScoreCache:

    def __init__(self, store: ScoreStore, renderer: ContentRenderer, registry: VectorRegistry):
        self._store = store
        self._renderer = renderer
        self._registry = registry

    @property
    def store(self) -> ScoreStore:
        return self._store

    async def content_hash(self, entity: Entity) -> str:
        return content_hash(await content_text(entity, self._renderer))

    async def get_scores(self, entity: Entity, content_hash: str | None = None) -> dict[str, int]:
        """Valid cached scores, or {} when content or config changed.

        Callers that already rendered the entity may pass its content hash
        to skip a second render.
        """
        return await self._store.fetch_scores(
            entity.entity_type,
            str(entity.id),
            entity.langcode,
            content_hash or await self.content_hash(entity),
            self._registry.config_hash(),
        )

    async def save_scores(self, entity: Entity, scores: Mapping[str, object],
                          content_hash: str | None = None) -> int:
        """Replace the entity's rows for its language. Empty scores only clears."""
        return await self._store.replace_scores(
            entity,
            scores,
            content_hash or await self.content_hash(entity),
            self._registry.config_hash(),
        )

    async def delete_scores(self, entity: Entity) -> int:
        """Drop every row for the entity, all languages."""
        return await self._store.delete_entity(entity.entity_type, str(entity.id))

    async def delete_vector_scores(self, vector_id: str) -> int:
        return await self._store.delete_vector(vector_id)

    async def invalidate_config_cache(self) -> int:
        return await self._registry.invalidate()

    async def get_statistics(self) -> ScoreStatistics:
        return await self._store.statistics()

    async def get_average_scores(self) -> dict[str, float]:
        return await self._store.average_scores()
