"""Security analyzer — scores entity content per security vector.

Pipeline per entity:
    Bundle enabled? -> Vectors enabled? -> Cache lookup -> Provider check
    -> Prompt -> Chat call -> JSON decode -> Clamp -> Write-through

analyze() is the data entry point used by the batch layer. summary() and
full_report() build the human-facing indicators on top of it.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum

from content_audit.analyzer.json_decoder import extract_json_object
from content_audit.analyzer.prompt import build_prompt
from content_audit.entities.interfaces import ContentRenderer, Entity
from content_audit.errors import ChatBackendError
from content_audit.logging.audit import Timer, entity_fields, get_audit_logger
from content_audit.providers.base import ChatBackend
from content_audit.scoring.cache import ScoreCache
from content_audit.scoring.fingerprint import content_hash, content_text
from content_audit.scoring.models import clamp_score
from content_audit.vectors.bundle_settings import BundleSettings
from content_audit.vectors.models import SecurityVector


class AnalysisStatus(str, Enum):
    NOT_ENABLED = "not_enabled"
    NO_VECTORS = "no_vectors"
    NO_CONTENT = "no_content"
    NO_PROVIDER = "no_provider"
    NO_RESULT = "no_result"
    FAILED = "failed"
    CACHED = "cached"
    ANALYZED = "analyzed"


STATUS_MESSAGES: dict[AnalysisStatus, str] = {
    AnalysisStatus.NOT_ENABLED: "Content security audit is not enabled for this content type.",
    AnalysisStatus.NO_VECTORS: "No security vectors are currently enabled.",
    AnalysisStatus.NO_CONTENT: "This content has no text available for security analysis.",
    AnalysisStatus.NO_PROVIDER: "No chat AI provider is configured for security analysis.",
    AnalysisStatus.NO_RESULT: "The content could not be analyzed for security risks.",
    AnalysisStatus.FAILED: "The content could not be analyzed for security risks.",
    AnalysisStatus.CACHED: "Security risk scores loaded from cache.",
    AnalysisStatus.ANALYZED: "Security risk scores computed.",
}


@dataclass
class AnalysisResult:
    status: AnalysisStatus
    scores: dict[str, int] = field(default_factory=dict)
    vectors: list[SecurityVector] = field(default_factory=list)  # enabled, by weight

    @property
    def has_scores(self) -> bool:
        return bool(self.scores)


@dataclass
class Indicator:
    vector_id: str
    label: str
    value: int  # 0-100


@dataclass
class SummaryResult:
    status: AnalysisStatus
    message: str
    indicator: Indicator | None = None


@dataclass
class FullReport:
    status: AnalysisStatus
    message: str
    indicators: list[Indicator] = field(default_factory=list)


def parse_scores(decoded: dict, vectors: list[SecurityVector]) -> dict[str, int]:
    """Keep only enabled vector ids whose values read as numbers, clamped to 0-100.

    Missing ids are omitted rather than defaulted.
    """
    scores: dict[str, int] = {}
    for vector in vectors:
        if vector.id not in decoded:
            continue
        value = decoded[vector.id]
        if value is None or isinstance(value, (bool, dict, list)):
            continue
        try:
            scores[vector.id] = clamp_score(value)
        except (TypeError, ValueError, OverflowError):
            continue
    return scores


def build_indicators(result: AnalysisResult) -> list[Indicator]:
    """One indicator per enabled vector that has a score, in weight order."""
    return [
        Indicator(vector_id=v.id, label=v.label, value=result.scores[v.id])
        for v in result.vectors
        if v.id in result.scores
    ]


def top_indicator(indicators: list[Indicator]) -> Indicator | None:
    """Highest score; ties go to the first vector in weight order."""
    top = None
    for indicator in indicators:
        if top is None or indicator.value > top.value:
            top = indicator
    return top


class SecurityAnalyzer:

    def __init__(
        self,
        bundle_settings: BundleSettings,
        cache: ScoreCache,
        renderer: ContentRenderer,
        chat_backend: ChatBackend,
        *,
        chat_timeout: float = 60.0,
    ):
        self._bundles = bundle_settings
        self._cache = cache
        self._renderer = renderer
        self._chat = chat_backend
        self._chat_timeout = chat_timeout

    async def analyze(self, entity: Entity) -> AnalysisResult:
        """Return scores for the entity, from cache or from one chat call.

        Raises:
            ChatBackendError: the chat call failed or timed out.
        """
        logger = get_audit_logger()
        audit_data = entity_fields(entity.entity_type, entity.id)

        if not self._bundles.is_enabled(entity.entity_type, entity.bundle):
            return AnalysisResult(status=AnalysisStatus.NOT_ENABLED)

        vectors = self._bundles.enabled_vectors(entity.entity_type, entity.bundle)
        if not vectors:
            return AnalysisResult(status=AnalysisStatus.NO_VECTORS)

        text = await content_text(entity, self._renderer)
        text_hash = content_hash(text)

        cached = await self._cache.get_scores(entity, content_hash=text_hash)
        if cached:
            logger.debug("Score cache hit", extra={"audit_data": audit_data})
            return AnalysisResult(status=AnalysisStatus.CACHED, scores=cached, vectors=vectors)

        if not text:
            return AnalysisResult(status=AnalysisStatus.NO_CONTENT, vectors=vectors)

        model = self._chat.default_model() if self._chat.has_available_provider() else None
        if model is None:
            logger.info("No chat provider available", extra={"audit_data": audit_data})
            return AnalysisResult(status=AnalysisStatus.NO_PROVIDER, vectors=vectors)

        prompt = build_prompt(text, vectors)
        with Timer() as timer:
            try:
                raw = await asyncio.wait_for(
                    self._chat.chat(prompt, model.model_id), timeout=self._chat_timeout,
                )
            except asyncio.TimeoutError:
                raise ChatBackendError(
                    f"Chat backend timed out after {self._chat_timeout:g}s"
                ) from None

        decoded = extract_json_object(raw)
        if decoded is None:
            logger.warning(
                "Model response is not a JSON object",
                extra={"audit_data": {**audit_data, "latency_ms": timer.elapsed_ms}},
            )
            return AnalysisResult(status=AnalysisStatus.NO_RESULT, vectors=vectors)

        scores = parse_scores(decoded, vectors)
        if not scores:
            return AnalysisResult(status=AnalysisStatus.NO_RESULT, vectors=vectors)

        await self._cache.save_scores(entity, scores, content_hash=text_hash)
        logger.info(
            "Entity analyzed",
            extra={"audit_data": {
                **audit_data,
                "provider": model.provider_id,
                "model": model.model_id,
                "latency_ms": timer.elapsed_ms,
                "scores": scores,
            }},
        )
        return AnalysisResult(status=AnalysisStatus.ANALYZED, scores=scores, vectors=vectors)

    async def _analyze_for_display(self, entity: Entity) -> AnalysisResult:
        try:
            return await self.analyze(entity)
        except ChatBackendError as e:
            get_audit_logger().warning(
                "Security analysis failed",
                extra={"audit_data": entity_fields(entity.entity_type, entity.id, error=str(e))},
            )
            return AnalysisResult(status=AnalysisStatus.FAILED)

    async def summary(self, entity: Entity) -> SummaryResult:
        """Single highest-risk indicator for the entity."""
        result = await self._analyze_for_display(entity)
        indicator = top_indicator(build_indicators(result))
        if indicator is None:
            status = result.status if not result.has_scores else AnalysisStatus.NO_RESULT
            return SummaryResult(status=status, message=STATUS_MESSAGES[status])
        return SummaryResult(
            status=result.status, message=STATUS_MESSAGES[result.status], indicator=indicator,
        )

    async def full_report(self, entity: Entity) -> FullReport:
        """One indicator per enabled vector, ordered by weight."""
        result = await self._analyze_for_display(entity)
        indicators = build_indicators(result)
        if not indicators:
            status = result.status if not result.has_scores else AnalysisStatus.NO_RESULT
            return FullReport(status=status, message=STATUS_MESSAGES[status])
        return FullReport(
            status=result.status, message=STATUS_MESSAGES[result.status], indicators=indicators,
        )
