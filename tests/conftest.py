"""Shared fixtures for the content security audit test suite."""

import json

import pytest

from content_audit.analyzer.service import SecurityAnalyzer
from content_audit.batch.orchestrator import BatchOrchestrator
from content_audit.batch.selection import CandidateSelector
from content_audit.config.settings import get_settings
from content_audit.entities.interfaces import ContentRenderer, Entity, EntityStore
from content_audit.providers.base import ChatBackend, ModelRef
from content_audit.scoring.cache import ScoreCache
from content_audit.scoring.store import SQLiteScoreStore
from content_audit.vectors.bundle_settings import BundleSettings
from content_audit.vectors.config_store import JSONConfigStore
from content_audit.vectors.registry import VectorRegistry


class FakeEntityStore(EntityStore):
    """In-memory entity store keyed by (entity_type, id)."""

    def __init__(self, entities: list[Entity] | None = None):
        self.entities: dict[tuple[str, str], Entity] = {}
        self.failing_loads: set[str] = set()
        for entity in entities or []:
            self.add(entity)

    def add(self, entity: Entity) -> None:
        self.entities[(entity.entity_type, str(entity.id))] = entity

    async def query(self, entity_type, bundle, filters):
        ids = []
        for (etype, eid), entity in self.entities.items():
            if etype != entity_type or entity.bundle != bundle:
                continue
            if filters.get("published") and entity.published is False:
                continue
            ids.append(eid)
        return ids

    async def load(self, entity_type, entity_id):
        if str(entity_id) in self.failing_loads:
            raise RuntimeError("storage unavailable")
        return self.entities.get((entity_type, str(entity_id)))


class FakeRenderer(ContentRenderer):
    """Renders whatever markup was registered for an entity id."""

    def __init__(self):
        self.markup: dict[str, str] = {}
        self.calls: list[tuple[str, str]] = []

    async def render_default_view(self, entity, langcode):
        self.calls.append((str(entity.id), langcode))
        return self.markup.get(str(entity.id), "")


class FakeChatBackend(ChatBackend):
    """Returns canned replies and records every prompt."""

    def __init__(self, reply: str = "{}", available: bool = True, model: str | None = "test-model"):
        self.reply = reply
        self.available = available
        self.model = model
        self.prompts: list[str] = []
        self.error: Exception | None = None

    def has_available_provider(self) -> bool:
        return self.available

    def default_model(self):
        if self.model is None:
            return None
        return ModelRef(provider_id="fake", model_id=self.model)

    async def chat(self, prompt, model_id):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def entity_store() -> FakeEntityStore:
    return FakeEntityStore()


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def chat_backend() -> FakeChatBackend:
    return FakeChatBackend(reply=json.dumps({"pii_disclosure": 85, "credentials_disclosure": 2}))


@pytest.fixture
def config_store(tmp_path) -> JSONConfigStore:
    return JSONConfigStore(str(tmp_path / "config.json"))


@pytest.fixture
def score_store(tmp_path) -> SQLiteScoreStore:
    return SQLiteScoreStore(str(tmp_path / "scores.sqlite3"))


@pytest.fixture
def registry(config_store, score_store) -> VectorRegistry:
    reg = VectorRegistry(config_store, score_store)
    reg.install_defaults()
    return reg


@pytest.fixture
def bundle_settings(config_store, registry) -> BundleSettings:
    settings = BundleSettings(config_store, registry)
    settings.save("node", "article", enabled=True)
    return settings


@pytest.fixture
def cache(score_store, renderer, registry) -> ScoreCache:
    return ScoreCache(score_store, renderer, registry)


@pytest.fixture
def analyzer(bundle_settings, cache, renderer, chat_backend) -> SecurityAnalyzer:
    return SecurityAnalyzer(bundle_settings, cache, renderer, chat_backend, chat_timeout=5)


@pytest.fixture
def selector(entity_store, cache, registry) -> CandidateSelector:
    return CandidateSelector(entity_store, cache, registry)


@pytest.fixture
def orchestrator(entity_store, analyzer, cache) -> BatchOrchestrator:
    return BatchOrchestrator(entity_store, analyzer, cache, chunk_size=5)


@pytest.fixture
def article() -> Entity:
    return Entity(entity_type="node", id="1", bundle="article", langcode="en", revision_id="11",
                  published=True)


@pytest.fixture
def override_settings(monkeypatch):
    """Factory fixture: set env vars and clear settings cache.

    Usage:
        override_settings(ADMIN_API_KEYS="key1,key2", BATCH_CHUNK_SIZE="10")
    """
    def _override(**kwargs):
        for key, value in kwargs.items():
            monkeypatch.setenv(key.upper(), str(value))
        # Clear lru_cache so Settings re-reads env
        get_settings.cache_clear()

    yield _override

    # Always clear cache on teardown so other tests get fresh settings
    get_settings.cache_clear()


def make_articles(store: FakeEntityStore, renderer: FakeRenderer, count: int,
                  bundle: str = "article") -> list[Entity]:
    """Add `count` published nodes with distinct text."""
    entities = []
    for i in range(1, count + 1):
        entity = Entity(entity_type="node", id=str(i), bundle=bundle, published=True)
        store.add(entity)
        renderer.markup[str(i)] = f"<p>Article number {i}</p>"
        entities.append(entity)
    return entities
