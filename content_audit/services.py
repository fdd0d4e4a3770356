"""Service wiring.

Builds the audit components from settings plus the host's entity store and
content renderer. Every component gets its collaborators through its
constructor; this module is the only place that reads settings to do so.
"""

from dataclasses import dataclass

from content_audit.analyzer.service import SecurityAnalyzer
from content_audit.batch.orchestrator import BatchOrchestrator
from content_audit.batch.selection import CandidateSelector, ExclusionPolicy
from content_audit.config.settings import Settings, get_settings
from content_audit.entities.interfaces import ContentRenderer, EntityStore
from content_audit.providers.base import ChatBackend
from content_audit.providers.registry import get_chat_backend
from content_audit.scoring.cache import ScoreCache
from content_audit.scoring.store import ScoreStore, SQLiteScoreStore
from content_audit.vectors.bundle_settings import BundleSettings
from content_audit.vectors.config_store import ConfigStore, JSONConfigStore
from content_audit.vectors.registry import VectorRegistry


@dataclass
class AuditServices:
    entity_store: EntityStore
    config_store: ConfigStore
    score_store: ScoreStore
    registry: VectorRegistry
    bundle_settings: BundleSettings
    cache: ScoreCache
    analyzer: SecurityAnalyzer
    selector: CandidateSelector
    orchestrator: BatchOrchestrator
    chat_backend: ChatBackend


def build_services(
    entity_store: EntityStore,
    renderer: ContentRenderer,
    *,
    settings: Settings | None = None,
    config_store: ConfigStore | None = None,
    score_store: ScoreStore | None = None,
    chat_backend: ChatBackend | None = None,
) -> AuditServices:
    settings = settings or get_settings()
    config_store = config_store or JSONConfigStore(settings.config_path)
    score_store = score_store or SQLiteScoreStore(settings.score_db_path)
    chat_backend = chat_backend or get_chat_backend(settings.chat_provider, settings)

    registry = VectorRegistry(config_store, score_store)
    registry.install_defaults()
    bundle_settings = BundleSettings(config_store, registry)
    cache = ScoreCache(score_store, renderer, registry)
    analyzer = SecurityAnalyzer(
        bundle_settings, cache, renderer, chat_backend,
        chat_timeout=settings.chat_timeout_seconds,
    )
    selector = CandidateSelector(
        entity_store, cache, registry,
        exclusion_policy=ExclusionPolicy(settings.candidate_exclusion),
        recent_window_days=settings.recent_window_days,
        published_only=settings.published_only,
    )
    orchestrator = BatchOrchestrator(
        entity_store, analyzer, cache, chunk_size=settings.batch_chunk_size,
    )
    return AuditServices(
        entity_store=entity_store,
        config_store=config_store,
        score_store=score_store,
        registry=registry,
        bundle_settings=bundle_settings,
        cache=cache,
        analyzer=analyzer,
        selector=selector,
        orchestrator=orchestrator,
        chat_backend=chat_backend,
    )


_services: AuditServices | None = None


def set_services(services: AuditServices | None) -> None:
    """Install the services the HTTP layer serves. Called by the host at startup."""
    global _services
    _services = services


def get_services() -> AuditServices:
    if _services is None:
        raise RuntimeError("Audit services are not configured; call set_services() first")
    return _services
