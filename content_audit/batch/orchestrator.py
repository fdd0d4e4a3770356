"""Chunked batch execution of the security analyzer.

A job is split into fixed-size chunks. Each chunk is one step: the host
drives run() and may stop between steps. Failures for a single entity are
recorded and never stop the chunk or the job.
"""

from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass, field

from content_audit.analyzer.service import SecurityAnalyzer
from content_audit.entities.interfaces import EntityCandidate, EntityStore
from content_audit.logging.audit import (
    batch_scope,
    entity_fields,
    generate_batch_id,
    get_audit_logger,
)
from content_audit.scoring.cache import ScoreCache

DEFAULT_CHUNK_SIZE = 5


@dataclass
class BatchContext:
    total: int
    progress: int = 0  # entities attempted
    processed: int = 0  # entities analyzed without error
    errors: list[str] = field(default_factory=list)
    finished: float = 0.0
    message: str = ""

    def update_progress(self) -> None:
        self.finished = min(1.0, self.progress / self.total) if self.total > 0 else 1.0
        self.message = f"Processed {self.progress} of {self.total} entities..."


@dataclass
class BatchOutcome:
    success: bool
    processed: int
    errors: list[str]
    message: str


@dataclass
class BatchJob:
    batch_id: str
    chunks: list[list[EntityCandidate]]
    force_refresh: bool
    context: BatchContext
    cancelled: bool = False

    def cancel(self) -> None:
        """Stop before the next chunk. The running chunk completes."""
        self.cancelled = True


def chunk(candidates: list[EntityCandidate], size: int) -> list[list[EntityCandidate]]:
    if size < 1:
        raise ValueError("chunk size must be at least 1")
    return [candidates[i:i + size] for i in range(0, len(candidates), size)]


class BatchOrchestrator:

    def __init__(
        self,
        entity_store: EntityStore,
        analyzer: SecurityAnalyzer,
        cache: ScoreCache,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        on_finished: Callable[[BatchOutcome], None] | None = None,
    ):
        self._entities = entity_store
        self._analyzer = analyzer
        self._cache = cache
        self._chunk_size = chunk_size
        self._on_finished = on_finished

    def create_job(self, candidates: list[EntityCandidate], force_refresh: bool = False) -> BatchJob:
        return BatchJob(
            batch_id=generate_batch_id(),
            chunks=chunk(candidates, self._chunk_size),
            force_refresh=force_refresh,
            context=BatchContext(total=len(candidates)),
        )

    async def _process_entity(self, candidate: EntityCandidate, force_refresh: bool) -> None:
        entity = await self._entities.load(candidate.entity_type, candidate.entity_id)
        if entity is None:
            raise LookupError("entity could not be loaded")
        if force_refresh:
            await self._cache.delete_scores(entity)
        await self._analyzer.analyze(entity)

    async def process_chunk(self, job: BatchJob, entities: list[EntityCandidate]) -> BatchContext:
        """Run one step. Always returns the updated context."""
        context = job.context
        logger = get_audit_logger()
        with batch_scope(job.batch_id):
            try:
                for candidate in entities:
                    try:
                        await self._process_entity(candidate, job.force_refresh)
                        context.processed += 1
                    except Exception as e:
                        error = f"Error processing {candidate.entity_type} {candidate.entity_id}: {e}"
                        context.errors.append(error)
                        logger.warning(
                            "Entity analysis failed",
                            extra={"audit_data": entity_fields(
                                candidate.entity_type, candidate.entity_id, error=str(e),
                            )},
                        )
                    finally:
                        context.progress += 1
            except Exception as e:
                context.errors.append(f"Batch processing error: {e}")
                logger.exception("Batch step failed")
            finally:
                context.update_progress()
                logger.info(
                    "Batch chunk processed",
                    extra={"audit_data": {
                        "progress": context.progress,
                        "processed": context.processed,
                        "total": context.total,
                        "errors": len(context.errors),
                        "finished": context.finished,
                    }},
                )
        return context

    async def run(self, job: BatchJob) -> AsyncIterator[BatchContext]:
        """Process chunks in order, yielding the context after each one."""
        for entities in job.chunks:
            if job.cancelled:
                break
            yield await self.process_chunk(job, entities)
        if not job.chunks:
            job.context.update_progress()

    def finish(self, job: BatchJob, success: bool | None = None) -> BatchOutcome:
        """Summarize the job. success reflects the batch mechanism, not entities."""
        if success is None:
            success = not job.cancelled
        processed = job.context.processed
        if success:
            noun = "entity" if processed == 1 else "entities"
            message = f"Successfully analyzed {processed} {noun} for security risks."
        else:
            message = "Security audit batch processing failed."

        outcome = BatchOutcome(
            success=success,
            processed=processed,
            errors=list(job.context.errors),
            message=message,
        )
        with batch_scope(job.batch_id):
            get_audit_logger().info(
                "Batch finished",
                extra={"audit_data": {
                    "success": success,
                    "processed": processed,
                    "total": job.context.total,
                    "errors": len(outcome.errors),
                }},
            )

        if self._on_finished is not None:
            self._on_finished(outcome)
        return outcome

    async def run_to_completion(self, job: BatchJob) -> BatchOutcome:
        """Drive every chunk and return the outcome."""
        async for _ in self.run(job):
            pass
        return self.finish(job)
