"""Per entity type/bundle audit settings.

Two config blobs:
- "bundle_status": {entity_type: {bundle: bool}}; a bundle is audited only
  when it has an entry here.
- "bundle_settings": {"<type>.<bundle>": {"vectors": {vector_id: bool}}};
  with no saved selection every configured vector is enabled.
"""

from content_audit.vectors.config_store import ConfigStore
from content_audit.vectors.models import SecurityVector
from content_audit.vectors.registry import VectorRegistry

STATUS_NAMESPACE = "bundle_status"
SETTINGS_NAMESPACE = "bundle_settings"


def _settings_key(entity_type: str, bundle: str) -> str:
    return f"{entity_type}.{bundle}"


class BundleSettings:

    def __init__(self, config_store: ConfigStore, registry: VectorRegistry):
        self._config = config_store
        self._registry = registry

    def is_enabled(self, entity_type: str, bundle: str) -> bool:
        status = self._config.get(STATUS_NAMESPACE, {})
        return bundle in status.get(entity_type, {})

    def vector_selection(self, entity_type: str, bundle: str) -> dict[str, bool] | None:
        settings = self._config.get(SETTINGS_NAMESPACE, {})
        return settings.get(_settings_key(entity_type, bundle), {}).get("vectors")

    def enabled_vectors(self, entity_type: str, bundle: str) -> list[SecurityVector]:
        """Vectors enabled for the bundle, ordered by weight. Empty when not audited."""
        if not self.is_enabled(entity_type, bundle):
            return []

        selection = self.vector_selection(entity_type, bundle)
        vectors = self._registry.ordered()
        if selection is None:
            return vectors
        return [v for v in vectors if selection.get(v.id)]

    def save(self, entity_type: str, bundle: str, enabled: bool | None = None,
             vectors: dict[str, bool] | None = None) -> None:
        if enabled is not None:
            status = self._config.get(STATUS_NAMESPACE, {})
            bundles = status.setdefault(entity_type, {})
            if enabled:
                bundles[bundle] = True
            else:
                bundles.pop(bundle, None)
            self._config.set(STATUS_NAMESPACE, status)

        if vectors is not None:
            settings = self._config.get(SETTINGS_NAMESPACE, {})
            settings[_settings_key(entity_type, bundle)] = {
                "vectors": {k: bool(v) for k, v in vectors.items()},
            }
            self._config.set(SETTINGS_NAMESPACE, settings)

        if enabled is not None or vectors is not None:
            self._config.save()

    def available_bundles(self) -> list[str]:
        """Return "type:bundle" strings for every bundle with auditing enabled."""
        status = self._config.get(STATUS_NAMESPACE, {})
        return [
            f"{entity_type}:{bundle}"
            for entity_type, bundles in status.items()
            for bundle in bundles
        ]
