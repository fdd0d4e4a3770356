"""Candidate selection for batch analysis.

Walks the configured (entity type, bundle) pairs and returns the entities
that still need scoring. Which entities count as "already analyzed" is an
explicit policy:

- valid_cache: the entity has any score that is valid right now (content
  and config hashes both match). Accurate, but renders every entity.
- recent: the entity has rows under the current config hash analyzed within
  the trailing window. Cheap, a single store query per type, but ignores
  content edits made since.
"""

import time
from collections.abc import Callable, Iterable
from enum import Enum

from content_audit.entities.interfaces import EntityCandidate, EntityStore
from content_audit.logging.audit import entity_fields, get_audit_logger
from content_audit.scoring.cache import ScoreCache
from content_audit.vectors.registry import VectorRegistry

SECONDS_PER_DAY = 24 * 60 * 60


class ExclusionPolicy(str, Enum):
    VALID_CACHE = "valid_cache"
    RECENT = "recent"


def parse_bundles(bundles: Iterable[str | tuple[str, str]]) -> list[tuple[str, str]]:
    """Accept "type:bundle" strings or (type, bundle) pairs."""
    pairs = []
    for item in bundles:
        if isinstance(item, str):
            entity_type, sep, bundle = item.partition(":")
            if not sep or not entity_type or not bundle:
                raise ValueError(f"Expected 'entity_type:bundle', got '{item}'")
            pairs.append((entity_type, bundle))
        else:
            entity_type, bundle = item
            pairs.append((entity_type, bundle))
    return pairs


class CandidateSelector:

    def __init__(
        self,
        entity_store: EntityStore,
        cache: ScoreCache,
        registry: VectorRegistry,
        *,
        exclusion_policy: ExclusionPolicy = ExclusionPolicy.VALID_CACHE,
        recent_window_days: int = 7,
        published_only: bool = True,
        clock: Callable[[], float] = time.time,
    ):
        self._entities = entity_store
        self._cache = cache
        self._registry = registry
        self._policy = ExclusionPolicy(exclusion_policy)
        self._window = recent_window_days * SECONDS_PER_DAY
        self._published_only = published_only
        self._clock = clock

    async def select(
        self,
        bundles: Iterable[str | tuple[str, str]],
        force_refresh: bool = False,
        limit: int = 0,
    ) -> list[EntityCandidate]:
        """Entities to analyze. limit > 0 caps the total across all bundles."""
        candidates: list[EntityCandidate] = []
        filters = {"published": True} if self._published_only else {}

        for entity_type, bundle in parse_bundles(bundles):
            if limit > 0 and len(candidates) >= limit:
                break

            ids = await self._entities.query(entity_type, bundle, filters)
            if not force_refresh:
                analyzed = await self._analyzed_ids(entity_type, ids)
                ids = [i for i in ids if str(i) not in analyzed]

            if limit > 0:
                ids = ids[:limit - len(candidates)]

            candidates.extend(
                EntityCandidate(entity_type=entity_type, entity_id=str(i), bundle=bundle)
                for i in ids
            )

        get_audit_logger().info(
            "Batch candidates selected",
            extra={"audit_data": {
                "count": len(candidates),
                "force_refresh": force_refresh,
                "policy": self._policy.value,
                "limit": limit,
            }},
        )
        return candidates

    async def _analyzed_ids(self, entity_type: str, ids: list) -> set[str]:
        if self._policy is ExclusionPolicy.RECENT:
            since = int(self._clock()) - self._window
            return await self._cache.store.analyzed_entity_ids(
                entity_type, self._registry.config_hash(), since,
            )

        analyzed = set()
        for entity_id in ids:
            try:
                entity = await self._entities.load(entity_type, str(entity_id))
                if entity is not None and await self._cache.get_scores(entity):
                    analyzed.add(str(entity_id))
            except Exception as e:
                # Stays a candidate; the batch step records the failure
                get_audit_logger().warning(
                    "Cache check failed during selection",
                    extra={"audit_data": entity_fields(entity_type, entity_id, error=str(e))},
                )
        return analyzed
