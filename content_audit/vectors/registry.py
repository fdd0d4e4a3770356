"""Vector registry: the single writer of the security vector configuration.

Vectors live in the "vectors" namespace of the config store as a mapping
of id -> {label, description, weight}. Every write is followed by an
invalidation sweep of the score store, so scores computed under the old
configuration stop being served without a recomputation pass.
"""

from content_audit.logging.audit import get_audit_logger
from content_audit.scoring.fingerprint import config_hash
from content_audit.scoring.store import ScoreStore
from content_audit.vectors.config_store import ConfigStore
from content_audit.vectors.models import (
    DEFAULT_VECTORS,
    SecurityVector,
    sort_by_weight,
    validate_vector_id,
)

NAMESPACE = "vectors"


class VectorRegistry:

    def __init__(self, config_store: ConfigStore, score_store: ScoreStore):
        self._config = config_store
        self._scores = score_store

    def _raw(self) -> dict[str, dict]:
        vectors = self._config.get(NAMESPACE)
        if vectors is None:
            # Never configured: fall back to the install-time defaults
            return {k: dict(v) for k, v in DEFAULT_VECTORS.items()}
        return vectors

    def list_all(self) -> list[SecurityVector]:
        """All vectors in store order. Use ordered() for display order."""
        return [SecurityVector.from_config(k, v) for k, v in self._raw().items()]

    def ordered(self) -> list[SecurityVector]:
        return sort_by_weight(self.list_all())

    def get(self, vector_id: str) -> SecurityVector | None:
        data = self._raw().get(vector_id)
        if data is None:
            return None
        return SecurityVector.from_config(vector_id, data)

    def config_hash(self) -> str:
        return config_hash(self._raw())

    def install_defaults(self) -> bool:
        """Persist the default vectors if nothing has been configured yet."""
        if self._config.get(NAMESPACE) is not None:
            return False
        self._config.set(NAMESPACE, {k: dict(v) for k, v in DEFAULT_VECTORS.items()})
        self._config.save()
        return True

    async def save(self, vector_id: str, data: dict) -> SecurityVector:
        """Insert or update a vector.

        A new vector saved without a weight goes last: max(weight) + 1.
        """
        validate_vector_id(vector_id)
        vectors = self._raw()
        existing = vectors.get(vector_id, {})

        weight = data.get("weight")
        if weight is None:
            if existing:
                weight = existing.get("weight", 0)
            else:
                weight = max((int(v.get("weight", 0)) for v in vectors.values()), default=-1) + 1

        vector = SecurityVector(
            id=vector_id,
            label=data.get("label") or existing.get("label") or vector_id,
            description=data.get("description", existing.get("description", "")),
            weight=int(weight),
        )
        vectors[vector_id] = vector.to_config()
        self._config.set(NAMESPACE, vectors)
        self._config.save()

        get_audit_logger().info(
            "Security vector saved",
            extra={"audit_data": {"vector_id": vector_id, "weight": vector.weight}},
        )
        await self.invalidate()
        return vector

    async def replace_all(self, vectors: list[SecurityVector]) -> None:
        """Bulk replace and reorder, as done by a settings save."""
        for vector in vectors:
            validate_vector_id(vector.id)
        self._config.set(NAMESPACE, {v.id: v.to_config() for v in vectors})
        self._config.save()

        get_audit_logger().info(
            "Security vectors replaced",
            extra={"audit_data": {"vector_ids": [v.id for v in vectors]}},
        )
        await self.invalidate()

    async def delete(self, vector_id: str) -> bool:
        """Remove a vector and every score stored for it. Absent id is a no-op."""
        vectors = self._raw()
        if vector_id not in vectors:
            return False

        del vectors[vector_id]
        self._config.set(NAMESPACE, vectors)
        self._config.save()

        # A crash past this point leaves rows under the old config hash;
        # the next sweep removes them.
        deleted = await self._scores.delete_vector(vector_id)
        get_audit_logger().info(
            "Security vector deleted",
            extra={"audit_data": {"vector_id": vector_id, "scores_deleted": deleted}},
        )
        await self.invalidate()
        return True

    async def invalidate(self) -> int:
        """Delete scores computed under any other vector configuration."""
        current = self.config_hash()
        deleted = await self._scores.delete_stale_config(current)
        get_audit_logger().info(
            "Config cache invalidated",
            extra={"audit_data": {"config_hash": current, "scores_deleted": deleted}},
        )
        return deleted
